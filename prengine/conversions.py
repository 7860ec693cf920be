"""Weight unit helpers. All weights are stored and computed in pounds."""

from __future__ import annotations

import math
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

from prengine.constants import KG_TO_LBS_FACTOR, UNIT_LBS, UNIT_KG, SUPPORTED_UNITS
from prengine.errors import InvalidInput


def round_half_up(value: float, places: int = 1) -> float:
    """
    Rounds to `places` decimals with halves going up (116.25 -> 116.3).
    The builtin round() uses banker's rounding, which gives 116.2 here.
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
        raise InvalidInput('Value to round must be a finite number')
    quantum = Decimal(1).scaleb(-places)
    try:
        return float(Decimal(repr(value)).quantize(quantum, rounding=ROUND_HALF_UP))
    except InvalidOperation:
        # quantize() fails once the result needs more digits than the context precision
        raise InvalidInput(f'Value {value!r} is too large to round to {places} decimals')


def _require_weight(weight) -> float:
    if isinstance(weight, bool) or not isinstance(weight, (int, float)) or not math.isfinite(weight):
        raise InvalidInput('Weight must be a finite number')
    if weight < 0:
        raise InvalidInput('Weight cannot be negative')
    return float(weight)


def convert_kg_to_lbs(kg: float) -> float:
    return _require_weight(kg) * KG_TO_LBS_FACTOR


def convert_lbs_to_kg(lbs: float) -> float:
    return _require_weight(lbs) / KG_TO_LBS_FACTOR


def convert_to_lbs(weight: float, unit: str) -> float:
    """Converts a weight in `unit` to pounds for storage."""
    weight = _require_weight(weight)
    if unit == UNIT_LBS:
        return weight
    if unit == UNIT_KG:
        return convert_kg_to_lbs(weight)
    raise InvalidInput(f'Invalid unit. Must be one of {", ".join(SUPPORTED_UNITS)}')


def format_weight(weight_lbs: float, display_unit: str, decimals: int = 1) -> str:
    """Formats a weight stored in pounds, e.g. "100.0 lbs" or "45.4 kg"."""
    weight_lbs = _require_weight(weight_lbs)
    if display_unit == UNIT_LBS:
        display_weight = weight_lbs
    elif display_unit == UNIT_KG:
        display_weight = convert_lbs_to_kg(weight_lbs)
    else:
        raise InvalidInput(f'Invalid display unit. Must be one of {", ".join(SUPPORTED_UNITS)}')
    return f'{display_weight:.{decimals}f} {display_unit}'


def get_both_units(weight_lbs: float, decimals: int = 1) -> dict[str, str]:
    return {
        UNIT_LBS: format_weight(weight_lbs, UNIT_LBS, decimals),
        UNIT_KG: format_weight(weight_lbs, UNIT_KG, decimals),
    }
