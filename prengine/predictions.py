# One-rep-max (1RM) estimation.
# Epley:    1RM = w * 0.0333 * r + w   (equivalently w * (1 + r / 30))
# Brzycki:  1RM = w * 36 / (37 - r)
# Lombardi: 1RM = w * r ** 0.10
# For r == 1 the lifted weight already is the 1RM and no formula is applied.

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Callable, Dict

from prengine.constants import DEFAULT_1RM_FORMULA, MAX_SINGLE_PERCENTAGE
from prengine.errors import InvalidInput


@dataclass(frozen=True)
class OneRepMax:
    value: float
    is_estimated: bool


def epley_1rm(weight: float, reps: int) -> float:
    return (weight * 0.0333 * reps) + weight


def brzycki_1rm(weight: float, reps: int) -> float:
    if reps >= 37:
        # Denominator reaches zero at 37 reps
        raise InvalidInput('Brzycki formula requires fewer than 37 repetitions')
    return weight * 36.0 / (37.0 - reps)


def lombardi_1rm(weight: float, reps: int) -> float:
    return weight * reps ** 0.10


ONE_RM_FORMULAS: Dict[str, Callable[[float, int], float]] = {
    'epley': epley_1rm,
    'brzycki': brzycki_1rm,
    'lombardi': lombardi_1rm,
}


def _validate_lift(weight, repetitions) -> tuple[float, int]:
    if isinstance(repetitions, bool) or not isinstance(repetitions, (int, float)):
        raise InvalidInput('Repetitions must be a whole number')
    if isinstance(repetitions, float):
        if not repetitions.is_integer():
            raise InvalidInput('Repetitions must be a whole number')
        repetitions = int(repetitions)
    if repetitions <= 0:
        raise InvalidInput('Repetitions must be greater than 0')

    if isinstance(weight, bool) or not isinstance(weight, (int, float)) or not math.isfinite(weight):
        raise InvalidInput('Weight must be a finite number')
    if weight <= 0:
        raise InvalidInput('Weight must be greater than 0')
    return float(weight), repetitions


def estimate(weight_lbs: float, repetitions: int, formula: str = DEFAULT_1RM_FORMULA) -> OneRepMax:
    """
    Estimates the 1RM for a lift of `weight_lbs` performed for `repetitions`.

    Args:
        weight_lbs: Weight lifted, must be > 0.
        repetitions: Whole number of reps, must be > 0.
        formula: Name of a formula in ONE_RM_FORMULAS. Epley is the default.

    Returns:
        OneRepMax whose `is_estimated` is True whenever a formula was applied
        (repetitions > 1). No rounding is applied.

    Raises:
        InvalidInput: for non-positive weight or reps, non-integer reps, or an
                      unknown formula name.
    """
    weight, reps = _validate_lift(weight_lbs, repetitions)

    if not isinstance(formula, str):
        raise InvalidInput(f"1RM formula must be a name, got {type(formula).__name__}")
    formula_fn = ONE_RM_FORMULAS.get(formula)
    if formula_fn is None:
        raise InvalidInput(f"Unknown 1RM formula '{formula}'. Expected one of: {', '.join(ONE_RM_FORMULAS)}")

    if reps == 1:
        return OneRepMax(value=weight, is_estimated=False)

    return OneRepMax(value=formula_fn(weight, reps), is_estimated=True)


def calculate_one_rm(weight: float, repetitions: int) -> float:
    """Epley 1RM as a bare number."""
    return estimate(weight, repetitions).value


def calculate_percentage_rm(one_rm: float, percentage: float) -> float:
    """
    Weight at `percentage` of `one_rm`, unrounded.
    Only accepts 0 < percentage <= 100; the table generator in
    prengine.percentages accepts overload percentages up to 150.
    """
    if isinstance(one_rm, bool) or not isinstance(one_rm, (int, float)) \
            or not math.isfinite(one_rm) or not one_rm > 0:
        raise InvalidInput('1RM must be greater than 0')
    if isinstance(percentage, bool) or not isinstance(percentage, (int, float)) \
            or not 0 < percentage <= MAX_SINGLE_PERCENTAGE:
        raise InvalidInput('Percentage must be between 0 and 100')
    return (one_rm * percentage) / 100


def is_calculated_rm(repetitions: int) -> bool:
    """True when the 1RM came from a formula rather than a single."""
    return repetitions > 1
