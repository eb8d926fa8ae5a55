# tests/test_value_exemption.py
"""Tests for value-based exemptions (zero, powers of two, listed values)."""

import pytest

from magic_numbers.options import ConfigParser, MagicNumbersOptions, to_single
from magic_numbers.syntax import FloatPrecision, floating_literal, integer_literal
from magic_numbers.value_exemption import (
    ValueExemptionMatcher,
    is_power_of_two,
    sorted_contains,
)


def matcher(**kwargs):
    opts = MagicNumbersOptions(**kwargs)
    return ValueExemptionMatcher(opts, ConfigParser(opts).parse())


class TestZero:

    def test_integer_zero_always_ignored(self):
        m = matcher(ignored_integer_values="")
        assert m.is_ignored_value(integer_literal(0))

    @pytest.mark.parametrize("precision", list(FloatPrecision))
    def test_float_zero_always_ignored(self, precision):
        m = matcher(ignored_floating_point_values="")
        assert m.is_ignored_value(floating_literal(0.0, precision=precision))
        assert m.is_ignored_value(floating_literal(-0.0, precision=precision))


class TestPowersOfTwo:

    def test_off_by_default(self):
        assert not matcher().is_ignored_value(integer_literal(8))

    @pytest.mark.parametrize("value", [1, 8, 1024, 2 ** 62])
    def test_powers_ignored_when_enabled(self, value):
        m = matcher(ignore_powers_of_2_integer_values=True, ignored_integer_values="")
        assert m.is_ignored_value(integer_literal(value))

    @pytest.mark.parametrize("value", [6, 12, 1023])
    def test_non_powers_still_reported(self, value):
        m = matcher(ignore_powers_of_2_integer_values=True, ignored_integer_values="")
        assert not m.is_ignored_value(integer_literal(value))

    def test_predicate(self):
        assert is_power_of_two(2)
        assert not is_power_of_two(0)
        assert not is_power_of_two(-8)


class TestListedValues:

    def test_integers(self):
        m = matcher(ignored_integer_values="3;42")
        assert m.is_ignored_value(integer_literal(42))
        assert not m.is_ignored_value(integer_literal(5))

    def test_floats_listed_as_integers_do_not_match(self):
        m = matcher(ignored_integer_values="3", ignored_floating_point_values="")
        assert not m.is_ignored_value(floating_literal(3.0))

    def test_double(self):
        m = matcher(ignored_floating_point_values="0.1")
        assert m.is_ignored_value(floating_literal(0.1))

    def test_single_compared_in_single_precision(self):
        m = matcher(ignored_floating_point_values="0.1")
        lit = floating_literal(to_single(0.1), "0.1f", precision=FloatPrecision.SINGLE)
        assert m.is_ignored_value(lit)

    def test_double_not_matched_by_single_rounding(self):
        m = matcher(ignored_floating_point_values="0.1")
        assert not m.is_ignored_value(floating_literal(to_single(0.1)))

    def test_extended_precision_never_matches(self):
        m = matcher(ignored_floating_point_values="0.1")
        lit = floating_literal(0.1, "0.1L", precision=FloatPrecision.EXTENDED)
        assert not m.is_ignored_value(lit)

    def test_default_floats(self):
        m = matcher()
        assert m.is_ignored_value(floating_literal(100.0))
        assert not m.is_ignored_value(floating_literal(3.14))


class TestSortedContains:

    def test_found_and_missing(self):
        table = (1, 5, 9)
        assert sorted_contains(table, 5)
        assert not sorted_contains(table, 6)
        assert not sorted_contains(table, 10)
        assert not sorted_contains((), 1)
