"""Unit tests for exercise cost, value helpers and input coercion."""

import pytest

from equitycalc.sdk import (
    compute_current_value,
    compute_exercise_cost,
    compute_return_percentage,
    compute_vesting_percentage,
)
from equitycalc.sdk.coerce import to_optional_price, to_price, to_shares


class TestExerciseCost:
    """compute_exercise_cost with numbers and form strings."""

    def test_numbers(self):
        assert compute_exercise_cost(100, 2.5) == pytest.approx(250.0)

    def test_numeric_strings(self):
        assert compute_exercise_cost("200", "1.5") == pytest.approx(300.0)

    def test_formatted_strings(self):
        assert compute_exercise_cost("1,000", "$1.50") == pytest.approx(1500.0)

    @pytest.mark.parametrize("shares,strike", [
        (0, 10), (100, 0), (None, 10), (100, None), ("", "1.5"), ("abc", 2),
    ])
    def test_missing_or_invalid_is_zero(self, shares, strike):
        assert compute_exercise_cost(shares, strike) == 0

    def test_scales_linearly_with_shares(self):
        assert compute_exercise_cost(500, 0.37) == pytest.approx(5 * compute_exercise_cost(100, 0.37))

    def test_never_negative_for_valid_input(self):
        assert compute_exercise_cost(1, 0.0001) >= 0


class TestValueHelpers:
    """Current value and percentage helpers."""

    def test_current_value(self):
        assert compute_current_value("200", "15") == pytest.approx(3000.0)
        assert compute_current_value("abc", 15) == 0

    def test_vesting_percentage(self):
        assert compute_vesting_percentage(50, 100) == pytest.approx(50.0)

    def test_vesting_percentage_capped(self):
        assert compute_vesting_percentage(150, 100) == 100.0
        assert compute_vesting_percentage(100, 0) == 100.0
        assert compute_vesting_percentage(-5, 100) == 0.0

    def test_return_percentage(self):
        assert compute_return_percentage(10, 5) == pytest.approx(100.0)
        assert compute_return_percentage(15, 5) == pytest.approx(200.0)
        assert compute_return_percentage(3, 5) == pytest.approx(-40.0)

    def test_return_percentage_zero_basis_uses_one(self):
        assert compute_return_percentage(10, 0) == pytest.approx(900.0)

    def test_return_percentage_invalid_current(self):
        assert compute_return_percentage(None, 5) == 0
        assert compute_return_percentage("invalid", 5) == 0

    def test_unusable_input_returns_float_zero(self):
        for result in (
            compute_exercise_cost(None, 10),
            compute_current_value("abc", 15),
            compute_return_percentage(None, 5),
            compute_return_percentage(0, 5),
        ):
            assert result == 0.0
            assert isinstance(result, float)


class TestCoerce:
    """Lenient numeric coercion."""

    @pytest.mark.parametrize("value,expected", [
        (200, 200), (200.9, 200), ("200", 200), ("1,200", 1200), ("200.9", 200),
        (None, 0), ("", 0), ("abc", 0), (True, 0), (float("nan"), 0),
    ])
    def test_to_shares(self, value, expected):
        assert to_shares(value) == expected

    @pytest.mark.parametrize("value,expected", [
        (1.5, 1.5), (2, 2.0), ("1.5", 1.5), ("$1,250", 1250.0), (" 3 ", 3.0),
        (None, 0.0), ("", 0.0), ("n/a", 0.0), (float("inf"), 0.0),
    ])
    def test_to_price(self, value, expected):
        assert to_price(value) == expected

    def test_to_optional_price(self):
        assert to_optional_price(None) is None
        assert to_optional_price("  ") is None
        assert to_optional_price("abc") is None
        assert to_optional_price("0") == 0.0
        assert to_optional_price("12.5") == 12.5
