import pytest

from prengine.errors import InvalidInput
from prengine.plates import (
    PlateInventory,
    PlateSolution,
    DEFAULT_PLATE_INVENTORY,
    NO_PLATES_LABEL,
    solve,
    format_plate_configuration,
    calculate_total_weight_from_plates,
    validate_plate_configuration,
    generate_weight_conversions,
    generate_side_combinations,
)

# --- Inventory ---

def test_default_inventory():
    assert DEFAULT_PLATE_INVENTORY.bar_weight_lbs == 45.0
    assert DEFAULT_PLATE_INVENTORY.plates_lbs == (45.0, 35.0, 25.0, 15.0, 10.0, 5.0, 2.5)

def test_inventory_sorts_and_deduplicates_plates():
    inventory = PlateInventory(bar_weight_lbs=35, plates_lbs=(5, 25, 10, 25))
    assert inventory.plates_lbs == (25.0, 10.0, 5.0)
    assert inventory.bar_weight_lbs == 35.0

@pytest.mark.parametrize("kwargs", [
    {'plates_lbs': ()},
    {'plates_lbs': (45, -5)},
    {'plates_lbs': (45, 0)},
    {'bar_weight_lbs': -1},
    {'max_plates_per_side': 0},
])
def test_invalid_inventory_raises(kwargs):
    with pytest.raises(InvalidInput):
        PlateInventory(**kwargs)

# --- solve ---

def test_solve_255_loads_exactly():
    solution = solve(255)
    assert abs(solution.total_weight_lbs - 255) < 0.1
    assert solution.plate_counts_per_side
    assert solution.plate_counts_per_side == {45.0: 2, 15.0: 1}
    assert solution.difference_from_target_lbs == 0
    assert solution.is_exact

@pytest.mark.parametrize("target", [45, 30, 10, 0.5])
def test_target_at_or_below_bar_uses_bar_only(target):
    solution = solve(target)
    assert solution.plate_counts_per_side == {}
    assert solution.total_weight_lbs == 45
    assert solution.difference_from_target_lbs == pytest.approx(45 - target)
    assert solution.difference_from_target_lbs >= 0

def test_just_above_bar_rounds_down_to_bar():
    solution = solve(46)
    assert solution.total_weight_lbs == 45
    assert solution.plate_counts_per_side == {}
    assert solution.difference_from_target_lbs == pytest.approx(-1.0)

def test_search_may_overshoot_when_closer():
    # 49.5 per side: 47.5 undershoots by 4 lbs total, 50 overshoots by 1
    solution = solve(144)
    assert solution.total_weight_lbs == 145
    assert solution.plate_counts_per_side == {45.0: 1, 5.0: 1}
    assert solution.difference_from_target_lbs == pytest.approx(1.0)

def test_greedy_never_exceeds_target_per_side():
    solution = solve(144, strategy='greedy')
    assert solution.total_weight_lbs == 140
    assert solution.plate_counts_per_side == {45.0: 1, 2.5: 1}
    assert solution.difference_from_target_lbs == pytest.approx(-4.0)

def test_equal_distance_prefers_lower_total():
    # 140 and 145 are both 2.5 lbs away and use two plates per side
    solution = solve(142.5)
    assert solution.total_weight_lbs == 140

def test_equal_distance_prefers_fewer_plates():
    # 95 (3x10 per side) and 105 (25 + 10 per side) are both 5 lbs from 100
    solution = solve(100, bar_weight_lbs=35, available_plates_lbs=[25, 10])
    assert solution.total_weight_lbs == 105
    assert solution.plate_counts_per_side == {25.0: 1, 10.0: 1}

def test_fewest_plates_for_exact_load():
    solution = solve(95)
    assert solution.plate_counts_per_side == {25.0: 1}

def test_counts_are_ordered_by_descending_plate():
    solution = solve(330)
    assert list(solution.plate_counts_per_side) == sorted(solution.plate_counts_per_side, reverse=True)

@pytest.mark.parametrize("target", [x * 7.3 for x in range(1, 90)])
def test_solution_invariants_hold_for_any_positive_target(target):
    solution = solve(target)
    per_side = sum(plate * count for plate, count in solution.plate_counts_per_side.items())
    assert solution.total_weight_lbs == pytest.approx(45 + 2 * per_side)
    assert solution.difference_from_target_lbs == pytest.approx(solution.total_weight_lbs - target, abs=0.01)
    assert all(count > 0 for count in solution.plate_counts_per_side.values())

@pytest.mark.parametrize("target", [95, 135, 185, 225, 255, 275, 315, 405])
def test_search_and_greedy_agree_on_loadable_weights(target):
    searched = solve(target)
    greedy = solve(target, strategy='greedy')
    assert searched.total_weight_lbs == greedy.total_weight_lbs == target

def test_search_is_never_further_than_greedy():
    for tenth in range(450, 5000, 13):
        target = tenth / 10
        searched = solve(target)
        greedy = solve(target, strategy='greedy')
        assert abs(searched.difference_from_target_lbs) <= abs(greedy.difference_from_target_lbs) + 1e-9

def test_solve_is_deterministic():
    assert solve(227.5) == solve(227.5)

def test_custom_inventory_object():
    inventory = PlateInventory(bar_weight_lbs=33, plates_lbs=(25, 10, 5))
    solution = solve(93, inventory=inventory)
    assert solution.total_weight_lbs == 93
    assert solution.plate_counts_per_side == {25.0: 1, 5.0: 1}

def test_unknown_strategy_raises():
    with pytest.raises(InvalidInput):
        solve(135, strategy='random')

def test_non_numeric_target_raises():
    with pytest.raises(InvalidInput):
        solve("135")

def test_solution_helpers():
    solution = solve(185)
    assert solution.per_side_lbs == 70
    assert solution.plates_per_side == 2
    assert solution.formatted() == "1×45 + 1×25"
    assert solution.total_weight_kg == pytest.approx(185 / 2.20462)

def test_is_exact_threshold():
    assert PlateSolution(total_weight_lbs=135, difference_from_target_lbs=0.05).is_exact
    assert not PlateSolution(total_weight_lbs=135, difference_from_target_lbs=-0.1).is_exact

def test_solution_plate_counts_are_read_only():
    counts = {45.0: 2, 15.0: 1}
    solution = PlateSolution(total_weight_lbs=255, plate_counts_per_side=counts)
    with pytest.raises(TypeError):
        solution.plate_counts_per_side[45.0] = 3
    counts[45.0] = 3
    assert solution.plate_counts_per_side == {45.0: 2, 15.0: 1}
    with pytest.raises(TypeError):
        solve(255).plate_counts_per_side[5.0] = 1

# --- Side combinations ---

def test_side_combinations_use_fewest_plates():
    combinations = generate_side_combinations([45, 35, 25, 15, 10, 5, 2.5], 60)
    assert combinations[0.0] == {}
    assert combinations[50.0] == {45: 1, 5: 1}
    assert combinations[60.0] == {45: 1, 15: 1}
    assert max(combinations) <= 60

def test_side_combinations_respect_plate_limit():
    combinations = generate_side_combinations([10], 1000, max_plates=3)
    assert sorted(combinations) == [0.0, 10.0, 20.0, 30.0]

# --- Formatting ---

def test_format_plate_configuration():
    assert format_plate_configuration({45.0: 1, 10.0: 1}) == "1×45 + 1×10"

def test_format_orders_and_skips_zero_counts():
    assert format_plate_configuration({10.0: 1, 5.0: 0, 45.0: 2}) == "2×45 + 1×10"

def test_format_fractional_plate():
    assert format_plate_configuration({2.5: 2}) == "2×2.5"

def test_format_empty():
    assert format_plate_configuration({}) == NO_PLATES_LABEL == "Sin discos"

# --- Totals and validation ---

def test_total_weight_from_plates():
    assert calculate_total_weight_from_plates({45.0: 2, 15.0: 1}) == 255
    assert calculate_total_weight_from_plates({}) == 45
    assert calculate_total_weight_from_plates({25.0: 1}, bar_weight_lbs=35) == 85

def test_validate_plate_configuration():
    assert validate_plate_configuration({45.0: 1, 2.5: 2})
    assert not validate_plate_configuration({20.0: 1})
    assert not validate_plate_configuration({45.0: 0})
    assert not validate_plate_configuration({45.0: 1.5})
    assert validate_plate_configuration({20.0: 1}, PlateInventory(plates_lbs=(20, 10)))

# --- Conversion chart ---

def test_weight_conversions_cover_zero_to_145_per_side():
    conversions = generate_weight_conversions()
    assert len(conversions) == 30
    assert conversions[0]['weight_per_side_lbs'] == 0
    assert conversions[0]['total_weight_lbs'] == 45
    assert conversions[0]['plates'] == {}
    assert conversions[-1]['weight_per_side_lbs'] == 145
    assert conversions[-1]['total_weight_lbs'] == 335

def test_weight_conversion_rows():
    conversions = {c['weight_per_side_lbs']: c for c in generate_weight_conversions()}
    assert conversions[0]['total_weight_kg'] == 20.4
    assert conversions[105]['plates'] == {45.0: 2, 15.0: 1}
    assert conversions[145]['plates'] == {45.0: 3, 10.0: 1}
    assert conversions[50]['total_weight_kg'] == pytest.approx(65.8)

def test_weight_conversions_reject_bad_step():
    with pytest.raises(InvalidInput):
        generate_weight_conversions(step_lbs=0)
