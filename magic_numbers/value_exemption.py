"""
magic_numbers/value_exemption.py
════════════════════════════════

Decides whether a literal's *value* is benign on its own.

    0 / 0.0            always
    2, 4, 8, ...       when IgnorePowersOf2IntegerValues is set
    listed values      IgnoredIntegerValues / IgnoredFloatingPointValues

Float literals are compared in their own precision: a ``float`` literal is
looked up among the single-precision roundings of the configured values,
a ``double`` literal among the double-precision ones.  Any other precision
never matches.

License: MIT
"""

from __future__ import annotations

from bisect import bisect_left
from typing import Sequence, Union

from magic_numbers.options import ExemptionTables, MagicNumbersOptions, to_single
from magic_numbers.syntax import FloatPrecision, LiteralNode


def sorted_contains(table: Sequence[Union[int, float]], value: Union[int, float]) -> bool:
    """Binary search in an ascending sequence."""
    i = bisect_left(table, value)
    return i < len(table) and table[i] == value


def is_power_of_two(value: int) -> bool:
    return value > 0 and value & (value - 1) == 0


class ValueExemptionMatcher:
    """``is_ignored_value(literal)`` over prebuilt tables."""

    def __init__(self, options: MagicNumbersOptions, tables: ExemptionTables) -> None:
        self._powers_of_two = options.ignore_powers_of_2_integer_values
        self._tables = tables

    def is_ignored_value(self, literal: LiteralNode) -> bool:
        if literal.is_integer:
            return self._is_ignored_integer(int(literal.value))
        return self._is_ignored_float(float(literal.value), literal.precision)

    def _is_ignored_integer(self, value: int) -> bool:
        if value == 0:
            return True
        if self._powers_of_two and is_power_of_two(value):
            return True
        return sorted_contains(self._tables.integers, value)

    def _is_ignored_float(self, value: float, precision: FloatPrecision) -> bool:
        if value == 0.0:
            return True
        if precision is FloatPrecision.SINGLE:
            return sorted_contains(self._tables.singles, to_single(value))
        if precision is FloatPrecision.DOUBLE:
            return sorted_contains(self._tables.doubles, value)
        return False


__all__ = ["ValueExemptionMatcher", "sorted_contains", "is_power_of_two"]
