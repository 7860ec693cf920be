from flask import Blueprint, jsonify, request
from ..app import get_db_connection, release_db_connection, logger, limiter, plate_inventory, preferences_cache
import psycopg2
import psycopg2.extras

from prengine.errors import InvalidInput
from prengine.percentages import generate_table, get_training_percentages
from prengine.records import fetch_lift_attempts, fetch_preferences, preferred_formula, best_one_rep_maxes
from .calculator import table_to_dict

records_bp = Blueprint('records', __name__, url_prefix='/v1')


def _load_user_lifts(user_id):
    """Returns (best 1RM per exercise, formula used). Preferences are served from the cache when fresh."""
    conn = None
    try:
        conn = get_db_connection()
        with conn.cursor(cursor_factory=psycopg2.extras.RealDictCursor) as cur:
            preferences = preferences_cache.get(user_id)
            if preferences is None:
                preferences = fetch_preferences(cur, user_id)
                preferences_cache.set(user_id, preferences)
            formula = preferred_formula(preferences)
            attempts = fetch_lift_attempts(cur, user_id)
        return best_one_rep_maxes(attempts, formula), formula
    finally:
        if conn:
            release_db_connection(conn)


@records_bp.route('/users/<uuid:user_id>/one-rep-maxes', methods=['GET'])
@limiter.limit("60 per hour")
def get_one_rep_maxes(user_id):
    user_id_str = str(user_id)
    try:
        best, formula = _load_user_lifts(user_id_str)
    except psycopg2.Error as e:
        logger.error(f"Database error loading lifts for user {user_id_str}: {e}", exc_info=True)
        return jsonify(error="Could not load workout records."), 500

    logger.info(f"Loaded best 1RM for {len(best)} exercises for user {user_id_str} ({formula}).")
    return jsonify({
        "user_id": user_id_str,
        "formula": formula,
        "exercises": [
            {"exercise": name, **details} for name, details in sorted(best.items())
        ],
    })


@records_bp.route('/users/<uuid:user_id>/percentage-tables', methods=['GET'])
@limiter.limit("60 per hour")
def get_percentage_tables(user_id):
    user_id_str = str(user_id)
    training_type = request.args.get('training_type')
    percentages = get_training_percentages(training_type) if training_type else None

    try:
        best, formula = _load_user_lifts(user_id_str)
    except psycopg2.Error as e:
        logger.error(f"Database error loading lifts for user {user_id_str}: {e}", exc_info=True)
        return jsonify(error="Could not load workout records."), 500

    tables = []
    for exercise, details in sorted(best.items()):
        try:
            table = generate_table(exercise, details['one_rep_max'], percentages, inventory=plate_inventory)
        except InvalidInput as e:
            logger.warning(f"Skipping percentage table for '{exercise}' (user {user_id_str}): {e}")
            continue
        payload = table_to_dict(table)
        payload['is_estimated'] = details['is_estimated']
        tables.append(payload)

    return jsonify({"user_id": user_id_str, "formula": formula, "tables": tables})
