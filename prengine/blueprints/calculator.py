from flask import Blueprint, request, jsonify
from ..app import logger, limiter, plate_inventory

from prengine.constants import UNIT_LBS, SUPPORTED_UNITS, DEFAULT_1RM_FORMULA
from prengine.conversions import convert_to_lbs, convert_lbs_to_kg, get_both_units, round_half_up
from prengine.plates import STRATEGY_SEARCH, solve, generate_weight_conversions, format_plate_configuration
from prengine.percentages import (
    generate_table,
    calculate_custom_percentage,
    get_recommended_reps,
    get_training_percentages,
    format_percentage,
)
from prengine.predictions import estimate

calculator_bp = Blueprint('calculator', __name__, url_prefix='/v1')


# --- Serialization ---

def plates_to_list(plate_counts):
    """Float-keyed plate counts as a JSON-friendly list, heaviest plate first."""
    return [{'plate_weight_lbs': plate, 'quantity': count} for plate, count in plate_counts.items()]


def solution_to_dict(solution):
    return {
        'total_weight_lbs': solution.total_weight_lbs,
        'total_weight_kg': round_half_up(solution.total_weight_kg, 1),
        'plates_per_side': plates_to_list(solution.plate_counts_per_side),
        'plates_label': solution.formatted(),
        'difference_from_target_lbs': solution.difference_from_target_lbs,
        'is_exact': solution.is_exact,
    }


def row_to_dict(row):
    return {
        'percentage': row.percentage,
        'percentage_label': format_percentage(row.percentage),
        'target_weight_lbs': row.target_weight_lbs,
        'target_weight_kg': round_half_up(row.target_weight_kg, 1),
        'recommended_reps': get_recommended_reps(row.percentage),
        'plate_solution': solution_to_dict(row.plate_solution),
    }


def table_to_dict(table):
    return {
        'exercise': table.exercise_label,
        'one_rm': table.one_rm,
        'rows': [row_to_dict(row) for row in table.rows],
    }


def _parse_number(data, key):
    """Reads a numeric field; returns (value, error_response)."""
    value = data.get(key)
    if isinstance(value, bool):
        return None, (jsonify(error=f"'{key}' must be numeric."), 400)
    try:
        return float(value), None
    except (TypeError, ValueError):
        return None, (jsonify(error=f"'{key}' must be numeric."), 400)


# --- Endpoints ---

@calculator_bp.route('/predict/1rm', methods=['POST'])
@limiter.limit("120 per minute")
def predict_one_rep_max():
    data = request.get_json(silent=True)
    if not data or 'weight' not in data or 'reps' not in data:
        return jsonify(error="Missing 'weight' or 'reps' in request body"), 400

    weight, error = _parse_number(data, 'weight')
    if error:
        return error
    reps, error = _parse_number(data, 'reps')
    if error:
        return error
    unit = data.get('unit', UNIT_LBS)
    formula = data.get('formula', DEFAULT_1RM_FORMULA)

    # InvalidInput propagates to the app-level 400 handler
    one_rm = estimate(convert_to_lbs(weight, unit), reps, formula)

    logger.info(f"1RM ({formula}) for {weight} {unit} x {reps}: {one_rm.value:.2f} lbs")
    return jsonify({
        "weight_input": weight,
        "reps_input": reps,
        "unit_input": unit,
        "formula": formula,
        "one_rep_max_lbs": one_rm.value,
        "one_rep_max_kg": convert_lbs_to_kg(one_rm.value),
        "is_estimated": one_rm.is_estimated,
    })


@calculator_bp.route('/percentages/table', methods=['POST'])
@limiter.limit("120 per minute")
def percentage_table():
    data = request.get_json(silent=True)
    if not data or 'one_rm' not in data:
        return jsonify(error="Missing 'one_rm' in request body"), 400

    one_rm, error = _parse_number(data, 'one_rm')
    if error:
        return error

    percentages = data.get('percentages')
    if percentages is None and data.get('training_type'):
        percentages = get_training_percentages(data['training_type'])
    if percentages is not None:
        if not isinstance(percentages, list) or not all(
                isinstance(p, (int, float)) and not isinstance(p, bool) for p in percentages):
            return jsonify(error="'percentages' must be a list of numbers."), 400

    strategy = data.get('strategy', STRATEGY_SEARCH)
    table = generate_table(data.get('exercise', ''), one_rm, percentages, inventory=plate_inventory, strategy=strategy)
    return jsonify(table_to_dict(table))


@calculator_bp.route('/percentages/custom', methods=['POST'])
@limiter.limit("120 per minute")
def custom_percentage():
    data = request.get_json(silent=True)
    if not data or 'one_rm' not in data or 'percentage' not in data:
        return jsonify(error="Missing 'one_rm' or 'percentage' in request body"), 400

    one_rm, error = _parse_number(data, 'one_rm')
    if error:
        return error
    percentage, error = _parse_number(data, 'percentage')
    if error:
        return error

    row = calculate_custom_percentage(one_rm, percentage, inventory=plate_inventory,
                                      strategy=data.get('strategy', STRATEGY_SEARCH))
    return jsonify(row_to_dict(row))


@calculator_bp.route('/plates/solve', methods=['POST'])
@limiter.limit("120 per minute")
def solve_plates():
    data = request.get_json(silent=True)
    if not data or 'target_weight' not in data:
        return jsonify(error="Missing 'target_weight' in request body"), 400

    target, error = _parse_number(data, 'target_weight')
    if error:
        return error
    unit = data.get('unit', UNIT_LBS)
    if unit not in SUPPORTED_UNITS:
        return jsonify(error=f"'unit' must be one of: {', '.join(SUPPORTED_UNITS)}"), 400
    if target <= 0:
        return jsonify(error="'target_weight' must be positive."), 400

    target_lbs = convert_to_lbs(target, unit)
    solution = solve(target_lbs, inventory=plate_inventory, strategy=data.get('strategy', STRATEGY_SEARCH))

    payload = solution_to_dict(solution)
    payload['target_weight_lbs'] = target_lbs
    return jsonify(payload)


@calculator_bp.route('/plates/conversions', methods=['GET'])
@limiter.limit("120 per minute")
def plate_conversions():
    conversions = generate_weight_conversions(plate_inventory)
    return jsonify({
        'bar_weight_lbs': plate_inventory.bar_weight_lbs,
        'conversions': [
            {
                'weight_per_side_lbs': entry['weight_per_side_lbs'],
                'total_weight_lbs': entry['total_weight_lbs'],
                'total_weight_kg': entry['total_weight_kg'],
                'plates_per_side': plates_to_list(entry['plates']),
                'plates_label': format_plate_configuration(entry['plates']),
            }
            for entry in conversions
        ],
    })


@calculator_bp.route('/conversions', methods=['POST'])
@limiter.limit("120 per minute")
def convert_weight():
    data = request.get_json(silent=True)
    if not data or 'weight' not in data:
        return jsonify(error="Missing 'weight' in request body"), 400

    weight, error = _parse_number(data, 'weight')
    if error:
        return error
    weight_lbs = convert_to_lbs(weight, data.get('unit', UNIT_LBS))
    return jsonify({
        'weight_lbs': weight_lbs,
        'weight_kg': convert_lbs_to_kg(weight_lbs),
        'display': get_both_units(weight_lbs),
    })
