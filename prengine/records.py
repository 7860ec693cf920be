"""
Read-only access to stored lifts and preferences.

Storage belongs to the hosted database; this module only reads the
`workout_records`, `exercises` and `user_preferences` tables and turns the rows
into plain lift dicts for the calculators.
"""

import logging
from typing import Any, Dict, List

import psycopg2 # For type hinting cursor

from prengine.constants import DEFAULT_1RM_FORMULA
from prengine.errors import InvalidInput
from prengine.predictions import ONE_RM_FORMULAS, estimate

logger = logging.getLogger(__name__)

LiftAttempt = Dict[str, Any] # Keys: 'exercise', 'weight_lbs', 'repetitions', 'recorded_at'


def fetch_lift_attempts(db_cursor: 'psycopg2.extensions.cursor', user_id: str) -> List[LiftAttempt]:
    """
    Fetches every lift the user has logged, oldest first.
    Expects a RealDictCursor. Database errors propagate to the caller.
    """
    db_cursor.execute(
        """
        SELECT e.name AS exercise, wr.weight_lbs, wr.repetitions, wr.created_at
        FROM workout_records wr
        JOIN exercises e ON wr.exercise_id = e.id
        WHERE wr.user_id = %s
        ORDER BY wr.created_at ASC;
        """,
        (user_id,)
    )
    rows = db_cursor.fetchall()
    return [
        {
            'exercise': row['exercise'],
            'weight_lbs': float(row['weight_lbs']),
            'repetitions': int(row['repetitions']),
            'recorded_at': row.get('created_at'),
        }
        for row in rows
    ]


def fetch_preferences(db_cursor: 'psycopg2.extensions.cursor', user_id: str) -> Dict[str, Any]:
    """Returns the user's stored preferences, or an empty dict if none were saved."""
    db_cursor.execute(
        """
        SELECT preferred_units, preferred_1rm_formula
        FROM user_preferences
        WHERE user_id = %s;
        """,
        (user_id,)
    )
    row = db_cursor.fetchone()
    return dict(row) if row else {}


def preferred_formula(preferences: Dict[str, Any]) -> str:
    formula = preferences.get('preferred_1rm_formula') or DEFAULT_1RM_FORMULA
    if formula not in ONE_RM_FORMULAS:
        logger.warning(f"Stored 1RM formula '{formula}' is not supported. Using {DEFAULT_1RM_FORMULA}.")
        return DEFAULT_1RM_FORMULA
    return formula


def best_one_rep_maxes(attempts: List[LiftAttempt], formula: str = DEFAULT_1RM_FORMULA) -> Dict[str, Dict[str, Any]]:
    """
    Reduces lift attempts to the highest 1RM per exercise.

    Returns a dict keyed by exercise name with 'one_rep_max', 'is_estimated',
    'weight_lbs' and 'repetitions' of the best attempt. On ties the earlier
    attempt wins. Attempts with invalid weight or reps are skipped.
    """
    best: Dict[str, Dict[str, Any]] = {}
    for attempt in attempts:
        try:
            one_rm = estimate(attempt['weight_lbs'], attempt['repetitions'], formula)
        except InvalidInput as e:
            logger.warning(f"Skipping stored lift for '{attempt.get('exercise')}': {e}")
            continue

        current = best.get(attempt['exercise'])
        if current is None or one_rm.value > current['one_rep_max']:
            best[attempt['exercise']] = {
                'one_rep_max': one_rm.value,
                'is_estimated': one_rm.is_estimated,
                'weight_lbs': attempt['weight_lbs'],
                'repetitions': attempt['repetitions'],
            }
    return best
