# backend/tests/test_split_logic.py
import random
from decimal import Decimal

import pytest

from splitbill.domain.split_logic import (
    SplitLogicError,
    amount_to_cents,
    distribute_equally,
    distribute_proportionally,
)


def test_equal_split_no_remainder():
    shares = distribute_equally(1.00, 4)
    assert shares == [25, 25, 25, 25]
    assert sum(shares) == 100


def test_remainder_goes_to_first_r_slots():
    # 101 cents across 4 => base 25, remainder 1
    assert distribute_equally(1.01, 4) == [26, 25, 25, 25]
    # 103 cents across 4 => base 25, remainder 3
    assert distribute_equally(1.03, 4) == [26, 26, 26, 25]


def test_hundred_split_three_ways():
    assert distribute_equally(100, 3) == [3334, 3333, 3333]


def test_zero_amount_is_all_zeros():
    assert distribute_equally(0, 3) == [0, 0, 0]


def test_non_positive_count_is_empty():
    assert distribute_equally(10, 0) == []
    assert distribute_equally(10, -2) == []


def test_negative_amount_still_sums_exactly():
    # -101 // 4 == -26, remainder 3 goes to the first three slots
    shares = distribute_equally(-1.01, 4)
    assert shares == [-25, -25, -25, -26]
    assert sum(shares) == -101


def test_float_noise_is_rounded_to_cents_first():
    assert distribute_equally(0.1 + 0.2, 3) == [10, 10, 10]


@pytest.mark.parametrize("amount", [1.005, -0.125, 0.125, 2.675, 12.345, Decimal("1.005"), 100])
def test_amount_to_cents_rounds_the_float_product(amount):
    assert amount_to_cents(amount) == round(float(amount) * 100)


def test_sub_cent_amount_rounds_like_round_builtin():
    # 1.005 * 100 == 100.49999999999999
    assert amount_to_cents(1.005) == 100
    assert amount_to_cents(-0.125) == -12
    assert sum(distribute_equally(1.005, 1)) == 100
    assert sum(distribute_proportionally(1.005, [1, 3])) == 100


def test_equal_split_conserves_cents_and_stays_within_one_cent():
    rng = random.Random(1234)
    for _ in range(300):
        amount = round(rng.uniform(-500, 500), rng.choice([0, 1, 2, 3]))
        count = rng.randint(1, 9)
        shares = distribute_equally(amount, count)
        assert len(shares) == count
        assert sum(shares) == round(amount * 100)
        assert max(shares) - min(shares) <= 1


def test_proportional_split_near_equal_weights_favours_biggest_weight():
    # 3000 cents over 3334/3333/3333 => floors 1000/999/999, two cents left
    assert distribute_proportionally(30, [3334, 3333, 3333]) == [1001, 1000, 999]


def test_proportional_remainder_goes_to_heaviest_slot_first():
    # floors 33 and 66, one cent left for the weight-2 slot
    assert distribute_proportionally(1.00, [1, 2]) == [33, 67]


def test_proportional_ties_broken_by_index():
    assert distribute_proportionally(0.01, [1, 1, 1]) == [1, 0, 0]
    assert distribute_proportionally(0.02, [5, 9, 9]) == [0, 1, 1]


def test_zero_weights_fall_back_to_equal_split():
    assert distribute_proportionally(1.00, [0, 0, 0]) == distribute_equally(1.00, 3)
    assert distribute_proportionally(1.00, [0, 0, 0]) == [34, 33, 33]


def test_negative_weights_count_as_zero():
    assert distribute_proportionally(10, [-5, 1, 1]) == [0, 500, 500]
    assert distribute_proportionally(10, [-5, -1]) == [500, 500]


def test_proportional_edge_inputs():
    assert distribute_proportionally(10, []) == []
    assert distribute_proportionally(0, [1, 2]) == [0, 0]


def test_proportional_accepts_float_and_decimal_weights():
    assert distribute_proportionally(1, [0.5, 0.25, 0.25]) == [50, 25, 25]
    assert distribute_proportionally(1, [Decimal("0.5"), Decimal("0.5")]) == [50, 50]


def test_proportional_negative_amount():
    assert distribute_proportionally(-10, [5000, 5000]) == [-500, -500]


def test_proportional_split_conserves_cents():
    rng = random.Random(99)
    for _ in range(300):
        amount = round(rng.uniform(-300, 300), 2)
        weights = [rng.choice([0, rng.randint(1, 10_000)]) for _ in range(rng.randint(1, 7))]
        shares = distribute_proportionally(amount, weights)
        assert len(shares) == len(weights)
        assert sum(shares) == round(amount * 100)


def test_same_inputs_same_shares():
    weights = [1200, 3400, 0, 3400]
    assert distribute_proportionally(77.77, weights) == distribute_proportionally(77.77, weights)


def test_non_numeric_amount_raises():
    with pytest.raises(SplitLogicError):
        distribute_equally(float("nan"), 2)
    with pytest.raises(SplitLogicError):
        distribute_proportionally("abc", [1, 2])  # type: ignore[arg-type]


def test_non_numeric_weight_raises():
    with pytest.raises(SplitLogicError):
        distribute_proportionally(10, ["a", 1])  # type: ignore[list-item]
