# tests/test_utils.py
"""
Decimal utility tests - half-up rounding, means, sample standard deviation.
"""

from decimal import Decimal

import pytest

from results_engine.scoring.utils import (
    mean,
    percent,
    round2,
    round_int,
    sample_std_dev,
    to_decimal,
)


def decimals(values):
    return [Decimal(str(v)) for v in values]


class TestRounding:

    @pytest.mark.parametrize("value,expected", [
        ("3.845", "3.85"),   # banker's rounding would give 3.84
        ("3.875", "3.88"),
        ("2.005", "2.01"),
        ("-0.305", "-0.31"),
        ("4", "4.00"),
    ])
    def test_round2_is_half_up(self, value, expected):
        assert round2(Decimal(value)) == Decimal(expected)
        assert str(round2(Decimal(value))) == expected

    def test_round2_float_uses_shortest_repr(self):
        # float 2.675 is 2.67499999... in binary; str() keeps the intended value
        assert round2(2.675) == Decimal("2.68")

    @pytest.mark.parametrize("value,expected", [
        ("2.5", 3), ("3.49", 3), ("-7.5", -8), ("0", 0),
    ])
    def test_round_int(self, value, expected):
        assert round_int(Decimal(value)) == expected

    def test_to_decimal_passthrough(self):
        d = Decimal("1.23")
        assert to_decimal(d) is d
        assert to_decimal(0.1) == Decimal("0.1")


class TestMean:

    def test_mean_is_unrounded(self):
        assert mean(decimals(["3.88", "4.10", "3.60", "3.80"])) == Decimal("3.845")

    def test_mean_of_empty_raises(self):
        with pytest.raises(ValueError):
            mean([])


class TestSampleStdDev:

    def test_fewer_than_two_values_is_zero(self):
        assert sample_std_dev([]) == Decimal("0")
        assert sample_std_dev([Decimal("4")]) == Decimal("0")

    def test_identical_values_is_zero(self):
        assert sample_std_dev(decimals([3, 3, 3])) == Decimal("0")

    def test_uses_n_minus_one(self):
        # values 2, 4, 4, 4, 5, 5, 7, 9: squared deviations sum to 32, 32/7
        result = sample_std_dev(decimals([2, 4, 4, 4, 5, 5, 7, 9]))
        assert round2(result) == Decimal("2.14")


class TestPercent:

    def test_percent_half_up(self):
        assert percent(1, 2) == 50
        assert percent(2, 3) == 67
        assert percent(1, 8) == 13  # 12.5 rounds up

    def test_percent_of_zero_whole(self):
        assert percent(0, 0) == 0

