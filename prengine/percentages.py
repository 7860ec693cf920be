"""
Percentage-of-1RM tables.

Each row carries the target weight in pounds (rounded half-up to one decimal),
the same weight in kilograms, and the plates needed to load it.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Sequence, Tuple

from prengine.constants import (
    COMMON_PERCENTAGES,
    MAX_REASONABLE_ONE_RM_LBS,
    MAX_TABLE_PERCENTAGE,
    RECOMMENDED_REPS_BRACKETS,
    RECOMMENDED_REPS_FALLBACK,
    TRAINING_PERCENTAGES,
)
from prengine.conversions import convert_lbs_to_kg, round_half_up
from prengine.errors import InvalidInput
from prengine.plates import PlateInventory, PlateSolution, STRATEGY_SEARCH, solve


@dataclass(frozen=True)
class PercentageRow:
    percentage: float
    target_weight_lbs: float
    target_weight_kg: float
    plate_solution: PlateSolution


@dataclass(frozen=True)
class PercentageTable:
    exercise_label: str
    one_rm: float
    rows: Tuple[PercentageRow, ...]


def _validate_one_rm(one_rm: float) -> None:
    if isinstance(one_rm, bool) or not isinstance(one_rm, (int, float)) \
            or not math.isfinite(one_rm) or not one_rm > 0:
        raise InvalidInput('1RM must be greater than 0.')


def _validate_percentage(percentage: float) -> None:
    if isinstance(percentage, bool) or not isinstance(percentage, (int, float)) \
            or not math.isfinite(percentage) or not 0 < percentage <= MAX_TABLE_PERCENTAGE:
        raise InvalidInput('percentage must be between 0 and 150')


def calculate_percentage(one_rm: float, percentage: float) -> float:
    """`percentage` of `one_rm` in pounds, rounded half-up to one decimal."""
    _validate_one_rm(one_rm)
    _validate_percentage(percentage)
    return round_half_up(one_rm * percentage / 100, 1)


def _build_row(
    one_rm: float,
    percentage: float,
    inventory: PlateInventory | None,
    strategy: str
) -> PercentageRow:
    target_weight_lbs = calculate_percentage(one_rm, percentage)
    return PercentageRow(
        percentage=percentage,
        target_weight_lbs=target_weight_lbs,
        target_weight_kg=convert_lbs_to_kg(target_weight_lbs),
        plate_solution=solve(target_weight_lbs, inventory=inventory, strategy=strategy),
    )


def generate_table(
    exercise_label: str,
    one_rm: float,
    percentages: Sequence[float] | None = None,
    inventory: PlateInventory | None = None,
    strategy: str = STRATEGY_SEARCH
) -> PercentageTable:
    """
    Builds one row per requested percentage, in the order requested.

    Args:
        exercise_label: Display name of the exercise, passed through untouched.
        one_rm: The 1RM in pounds, must be > 0.
        percentages: Percentages in (0, 150]. Defaults to COMMON_PERCENTAGES.
        inventory: Bar and plates used for the plate breakdown of each row.
        strategy: Plate solver strategy, see prengine.plates.solve.

    Raises:
        InvalidInput: if the 1RM is not positive or any percentage is out of range.
    """
    _validate_one_rm(one_rm)
    if percentages is None:
        percentages = COMMON_PERCENTAGES
    for percentage in percentages:
        _validate_percentage(percentage)

    rows = tuple(_build_row(one_rm, p, inventory, strategy) for p in percentages)
    return PercentageTable(exercise_label=exercise_label, one_rm=one_rm, rows=rows)


def calculate_custom_percentage(
    one_rm: float,
    percentage: float,
    inventory: PlateInventory | None = None,
    strategy: str = STRATEGY_SEARCH
) -> PercentageRow:
    """Single row for an ad hoc percentage, with the same validation and rounding as the table."""
    return _build_row(one_rm, percentage, inventory, strategy)


def get_recommended_reps(percentage: float) -> str:
    """Suggested rep range for working at `percentage` of 1RM. Display guidance only."""
    for threshold, reps in RECOMMENDED_REPS_BRACKETS:
        if percentage >= threshold:
            return reps
    return RECOMMENDED_REPS_FALLBACK


def get_training_percentages(training_type: str) -> list:
    return list(TRAINING_PERCENTAGES.get(training_type, COMMON_PERCENTAGES))


def format_percentage(percentage: float) -> str:
    return f'{percentage:g}%'


def format_weight_with_unit(weight: float, unit: str) -> str:
    return f'{weight:.1f} {unit}'


def validate_one_rm(one_rm: float) -> bool:
    """True if `one_rm` is usable for tables (positive and under a sane ceiling)."""
    if isinstance(one_rm, bool) or not isinstance(one_rm, (int, float)):
        return False
    return 0 < one_rm <= MAX_REASONABLE_ONE_RM_LBS
