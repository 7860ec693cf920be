"""Barbell plate loading: which plates go on each side to hit a target weight."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Tuple

from prengine.constants import (
    AVAILABLE_PLATES_LBS,
    CONVERSION_TABLE_MAX_PER_SIDE_LBS,
    CONVERSION_TABLE_STEP_LBS,
    EXACT_LOAD_TOLERANCE_LBS,
    MAX_PLATES_PER_SIDE,
    OLYMPIC_BAR_WEIGHT_LBS,
)
from prengine.conversions import convert_lbs_to_kg, round_half_up
from prengine.errors import InvalidInput

logger = logging.getLogger(__name__)

STRATEGY_SEARCH = 'search'
STRATEGY_GREEDY = 'greedy'
STRATEGIES = (STRATEGY_SEARCH, STRATEGY_GREEDY)

NO_PLATES_LABEL = 'Sin discos'

# Plate sums are rounded to this many decimals to keep float noise out of set keys
_SUM_PRECISION = 3

PlateCounts = Dict[float, int]


@dataclass(frozen=True)
class PlateInventory:
    """Bar weight plus plate denominations, each assumed to be available in any quantity."""
    bar_weight_lbs: float = OLYMPIC_BAR_WEIGHT_LBS
    plates_lbs: Tuple[float, ...] = AVAILABLE_PLATES_LBS
    max_plates_per_side: int = MAX_PLATES_PER_SIDE

    def __post_init__(self):
        bar = self.bar_weight_lbs
        if isinstance(bar, bool) or not isinstance(bar, (int, float)) or not math.isfinite(bar) or bar < 0:
            raise InvalidInput('Bar weight must be a non-negative number')

        plates = []
        for plate in self.plates_lbs:
            if isinstance(plate, bool) or not isinstance(plate, (int, float)) or not math.isfinite(plate) or plate <= 0:
                raise InvalidInput(f'Invalid plate denomination: {plate!r}')
            plates.append(float(plate))
        if not plates:
            raise InvalidInput('At least one plate denomination is required')

        if not isinstance(self.max_plates_per_side, int) or self.max_plates_per_side < 1:
            raise InvalidInput('max_plates_per_side must be a positive integer')

        object.__setattr__(self, 'bar_weight_lbs', float(bar))
        object.__setattr__(self, 'plates_lbs', tuple(sorted(set(plates), reverse=True)))


DEFAULT_PLATE_INVENTORY = PlateInventory()


@dataclass(frozen=True)
class PlateSolution:
    total_weight_lbs: float
    # Ordered by descending denomination, zero counts omitted
    plate_counts_per_side: Mapping[float, int] = field(default_factory=dict)
    difference_from_target_lbs: float = 0.0

    def __post_init__(self):
        # Read-only view over a private copy
        object.__setattr__(self, 'plate_counts_per_side', MappingProxyType(dict(self.plate_counts_per_side)))

    @property
    def per_side_lbs(self) -> float:
        return round(sum(plate * count for plate, count in self.plate_counts_per_side.items()), _SUM_PRECISION)

    @property
    def plates_per_side(self) -> int:
        return sum(self.plate_counts_per_side.values())

    @property
    def is_exact(self) -> bool:
        return abs(self.difference_from_target_lbs) < EXACT_LOAD_TOLERANCE_LBS

    @property
    def total_weight_kg(self) -> float:
        return convert_lbs_to_kg(self.total_weight_lbs)

    def formatted(self) -> str:
        return format_plate_configuration(self.plate_counts_per_side)


def _ordered_counts(counts: Mapping[float, int]) -> PlateCounts:
    return {plate: counts[plate] for plate in sorted(counts, reverse=True) if counts[plate] > 0}


def _greedy_side(weight_per_side: float, plates: Iterable[float]) -> PlateCounts:
    """Heaviest plates first, as many of each as fit without exceeding the side weight."""
    counts: PlateCounts = {}
    remaining = weight_per_side
    for plate in sorted(plates, reverse=True):
        quantity = math.floor(round(remaining / plate, 9))
        if quantity > 0:
            counts[plate] = quantity
            remaining = round(remaining - plate * quantity, _SUM_PRECISION)
    return counts


def generate_side_combinations(
    plates: Iterable[float],
    max_weight_one_side: float,
    max_plates: int = MAX_PLATES_PER_SIDE
) -> Dict[float, PlateCounts]:
    """
    Maps every reachable one-side plate sum (up to max_weight_one_side) to the
    combination reaching it with the fewest plates.

    Sums are expanded one plate at a time, so the first combination that reaches
    a sum is also one of the smallest. Heavier plates are tried first, which makes
    the chosen combination deterministic.
    """
    unique_plates = sorted({p for p in plates if p > 0}, reverse=True)
    combinations: Dict[float, PlateCounts] = {0.0: {}}
    frontier = [0.0]

    for _i in range(max_plates):
        next_frontier = []
        for current_sum in sorted(frontier, reverse=True):
            base = combinations[current_sum]
            for plate in unique_plates:
                new_sum = round(current_sum + plate, _SUM_PRECISION)
                if new_sum > max_weight_one_side or new_sum in combinations:
                    continue
                counts = dict(base)
                counts[plate] = counts.get(plate, 0) + 1
                combinations[new_sum] = counts
                next_frontier.append(new_sum)
        if not next_frontier:
            break
        frontier = next_frontier

    return combinations


def _search_side(target_weight_lbs: float, inventory: PlateInventory) -> PlateCounts:
    weight_per_side = (target_weight_lbs - inventory.bar_weight_lbs) / 2
    # Anything heavier than one extra top plate past the target is never the closest
    max_weight_one_side = weight_per_side + inventory.plates_lbs[0]
    combinations = generate_side_combinations(
        inventory.plates_lbs, max_weight_one_side, inventory.max_plates_per_side
    )

    best_key = None
    best_counts: PlateCounts = {}
    for side_sum, counts in combinations.items():
        total = inventory.bar_weight_lbs + 2 * side_sum
        # Closest first, then fewest plates, then the lighter load
        key = (round(abs(total - target_weight_lbs), _SUM_PRECISION), sum(counts.values()), total)
        if best_key is None or key < best_key:
            best_key = key
            best_counts = counts
    return best_counts


def _require_target(target_weight_lbs) -> float:
    if isinstance(target_weight_lbs, bool) or not isinstance(target_weight_lbs, (int, float)) \
            or not math.isfinite(target_weight_lbs):
        raise InvalidInput('Target weight must be a finite number')
    return float(target_weight_lbs)


def solve(
    target_weight_lbs: float,
    bar_weight_lbs: float | None = None,
    available_plates_lbs: Iterable[float] | None = None,
    inventory: PlateInventory | None = None,
    strategy: str = STRATEGY_SEARCH
) -> PlateSolution:
    """
    Finds the plate combination per side whose loaded total is closest to
    `target_weight_lbs`.

    Args:
        target_weight_lbs: Desired total weight including the bar.
        bar_weight_lbs: Overrides the inventory's bar weight.
        available_plates_lbs: Overrides the inventory's plate denominations.
        inventory: Equipment to load from. Defaults to a 45 lbs bar with
                   45/35/25/15/10/5/2.5 lbs plates.
        strategy: 'search' (closest achievable total, ties broken by fewer plates
                  then the lighter total) or 'greedy' (heaviest plates first,
                  never exceeding the target per side).

    Returns:
        PlateSolution with total = bar + 2 * per-side plates and a signed
        difference (total - target, positive means overshoot).
    """
    target = _require_target(target_weight_lbs)
    if strategy not in STRATEGIES:
        raise InvalidInput(f"Unknown plate strategy '{strategy}'. Expected one of: {', '.join(STRATEGIES)}")

    inventory = inventory or DEFAULT_PLATE_INVENTORY
    if bar_weight_lbs is not None or available_plates_lbs is not None:
        inventory = PlateInventory(
            bar_weight_lbs=inventory.bar_weight_lbs if bar_weight_lbs is None else bar_weight_lbs,
            plates_lbs=inventory.plates_lbs if available_plates_lbs is None else tuple(available_plates_lbs),
            max_plates_per_side=inventory.max_plates_per_side,
        )

    bar = inventory.bar_weight_lbs
    if target <= bar:
        logger.debug(f"Target {target} lbs is at or below the {bar} lbs bar; loading the bar only.")
        return PlateSolution(
            total_weight_lbs=bar,
            plate_counts_per_side={},
            difference_from_target_lbs=round(bar - target, 2),
        )

    if strategy == STRATEGY_GREEDY:
        counts = _greedy_side((target - bar) / 2, inventory.plates_lbs)
    else:
        counts = _search_side(target, inventory)

    counts = _ordered_counts(counts)
    total = calculate_total_weight_from_plates(counts, bar)
    return PlateSolution(
        total_weight_lbs=total,
        plate_counts_per_side=counts,
        difference_from_target_lbs=round(total - target, 2),
    )


def _format_plate_weight(plate: float) -> str:
    return f'{plate:g}'


def format_plate_configuration(plate_counts: Mapping[float, int]) -> str:
    """Renders per-side plates as e.g. "1×45 + 1×10", or "Sin discos" when there are none."""
    ordered = _ordered_counts(plate_counts)
    if not ordered:
        return NO_PLATES_LABEL
    return ' + '.join(f'{count}×{_format_plate_weight(plate)}' for plate, count in ordered.items())


def calculate_total_weight_from_plates(
    plate_counts: Mapping[float, int],
    bar_weight_lbs: float = OLYMPIC_BAR_WEIGHT_LBS
) -> float:
    weight_per_side = sum(plate * count for plate, count in plate_counts.items())
    return round(bar_weight_lbs + 2 * weight_per_side, _SUM_PRECISION)


def validate_plate_configuration(
    plate_counts: Mapping[float, int],
    inventory: PlateInventory | None = None
) -> bool:
    """True if every plate exists in the inventory and every count is a positive integer."""
    inventory = inventory or DEFAULT_PLATE_INVENTORY
    for plate, count in plate_counts.items():
        if plate not in inventory.plates_lbs:
            return False
        if isinstance(count, bool) or not isinstance(count, int) or count <= 0:
            return False
    return True


def generate_weight_conversions(
    inventory: PlateInventory | None = None,
    max_per_side_lbs: float = CONVERSION_TABLE_MAX_PER_SIDE_LBS,
    step_lbs: float = CONVERSION_TABLE_STEP_LBS
) -> List[dict]:
    """
    Builds the loading chart: one row per `step_lbs` of weight per side from
    0 up to `max_per_side_lbs`, with the greedy plates for that side.
    """
    inventory = inventory or DEFAULT_PLATE_INVENTORY
    if step_lbs <= 0:
        raise InvalidInput('Step must be greater than 0')

    conversions = []
    steps = int(math.floor(round(max_per_side_lbs / step_lbs, 9)))
    for i in range(steps + 1):
        weight_per_side = round(i * step_lbs, _SUM_PRECISION)
        total_weight_lbs = round(inventory.bar_weight_lbs + weight_per_side * 2, _SUM_PRECISION)
        conversions.append({
            'weight_per_side_lbs': weight_per_side,
            'total_weight_lbs': total_weight_lbs,
            'total_weight_kg': round_half_up(convert_lbs_to_kg(total_weight_lbs), 1),
            'plates': _ordered_counts(_greedy_side(weight_per_side, inventory.plates_lbs)),
        })
    return conversions
