"""
magic_numbers/options.py
════════════════════════

Check options and the exemption tables derived from them.

The raw option values are clang-tidy style strings::

    IgnoredIntegerValues:        "1;2;3;4"
    IgnoredFloatingPointValues:  "1.0;100.0"
    IgnoredFunctionArgs:         "strtol;3;d;open;3;o;chmod;2;o"

``ConfigParser`` turns them into sorted, immutable ``ExemptionTables`` once,
when the check is constructed.  Configuration is untrusted: every malformed
entry is reported through a ``ConfigurationReporter`` and skipped, so the
check always runs with whatever part of the configuration was valid.

IgnoredFunctionArgs
───────────────────
A flat list of ``function_name;arg_pos;bases`` triples.  ``arg_pos`` is
1-based.  ``bases`` is one or more of::

    d  decimal      o  octal      x  hexadecimal      b  binary      a  any

To allow several arguments of one function, repeat the function with a
different position.

License: MIT
"""

from __future__ import annotations

import math
import re
import struct
from dataclasses import dataclass, field, fields
from enum import IntFlag
from fractions import Fraction
from typing import Any, Dict, List, Mapping, Optional, Tuple

from magic_numbers.errors import (
    ConfigErrorKind,
    ConfigSink,
    ConfigurationReporter,
)


# ═══════════════════════════════════════════════════════════════════════════
#  CONSTANTS
# ═══════════════════════════════════════════════════════════════════════════

DEFAULT_IGNORED_INTEGER_VALUES = "1;2;3;4;"
DEFAULT_IGNORED_FLOATING_POINT_VALUES = "1.0;100.0;"
DEFAULT_IGNORED_FUNCTION_ARGS = "strtol;3;d;strtoll;3;d"

# Functions whose third argument is a numeric base; injected by the legacy
# IgnoreStrtolBases option.
STRTOL_FUNCTIONS: Tuple[str, ...] = ("strtol", "strtoll")
STRTOL_BASE_POSITION = 3

INT64_MIN = -(2 ** 63)
INT64_MAX = 2 ** 63 - 1

_LIST_SEPARATORS = re.compile(r"[;,]")
_DECIMAL_INTEGER = re.compile(r"-?[0-9]+")
_ARG_POSITION = re.compile(r"[0-9]+")
_HEX_FLOAT = re.compile(r"[+-]?0[xX]")
_HEX_FLOAT_PARTS = re.compile(
    r"([+-]?)0[xX]([0-9a-fA-F]*)(?:\.([0-9a-fA-F]*))?(?:[pP]([+-]?[0-9]+))?"
)

# 2**128: where the binary32 exponent range ends.
_SINGLE_OVERFLOW = Fraction(2) ** 128

_TRUE_STRINGS = frozenset({"true", "1", "yes", "on"})
_FALSE_STRINGS = frozenset({"false", "0", "no", "off"})


# ═══════════════════════════════════════════════════════════════════════════
#  PART 1 — VALUE HELPERS
# ═══════════════════════════════════════════════════════════════════════════

class Base(IntFlag):
    """Numeric bases an integer literal may be spelled in."""
    DEC = 1
    OCT = 2
    HEX = 4
    BIN = 8
    ANY = DEC | OCT | HEX | BIN


_BASE_CHARS: Dict[str, Base] = {
    "d": Base.DEC,
    "o": Base.OCT,
    "x": Base.HEX,
    "b": Base.BIN,
    "a": Base.ANY,
}


def parse_string_list(raw: str) -> List[str]:
    """Split a ``;``/``,`` separated option, trimming and dropping empty items."""
    return [item.strip() for item in _LIST_SEPARATORS.split(raw) if item.strip()]


def to_single(value: float) -> float:
    """Round a double to the nearest IEEE-754 single (ties-to-even)."""
    try:
        return struct.unpack("<f", struct.pack("<f", value))[0]
    except OverflowError:
        return math.copysign(math.inf, value)


def parse_float(text: str) -> float:
    """
    Parse a decimal or hexadecimal floating spelling.

    Raises ValueError for anything else, including NaN and Python-only
    spellings such as digit-group underscores.
    """
    if "_" in text:
        raise ValueError(f"invalid floating point value {text!r}")
    if _HEX_FLOAT.match(text):
        value = float.fromhex(text)
    else:
        value = float(text)
    if math.isnan(value):
        raise ValueError("NaN cannot be an ignored value")
    return value


def _single_bits(value: float) -> int:
    return struct.unpack("<I", struct.pack("<f", value))[0]


def _single_from_bits(bits: int) -> float:
    return struct.unpack("<f", struct.pack("<I", bits))[0]


_FLT_MAX = _single_from_bits(0x7F7FFFFF)


def _adjacent_single(value: float, upward: bool) -> float:
    """The binary32 value next to ``value`` in the given direction."""
    if value == 0:
        tiny = _single_from_bits(1)
        return tiny if upward else -tiny
    bits = _single_bits(value)
    away_from_zero = upward == (value > 0)
    return _single_from_bits(bits + 1 if away_from_zero else bits - 1)


def _single_as_fraction(value: float) -> Fraction:
    # Infinity stands in for 2**128 when rounding with an unbounded exponent.
    if math.isinf(value):
        return _SINGLE_OVERFLOW if value > 0 else -_SINGLE_OVERFLOW
    return Fraction(value)


def exact_value(text: str) -> Fraction:
    """The exact rational value of a finite decimal or hexadecimal spelling."""
    if _HEX_FLOAT.match(text):
        match = _HEX_FLOAT_PARTS.fullmatch(text)
        if match is None:
            raise ValueError(f"invalid floating point value {text!r}")
        sign, whole, frac, exponent = match.groups()
        frac = frac or ""
        mantissa = int(whole + frac or "0", 16)
        exact = mantissa * Fraction(2) ** (int(exponent or "0", 10) - 4 * len(frac))
        return -exact if sign == "-" else exact
    return Fraction(text)


def round_to_single(exact: Fraction) -> float:
    """
    Round an exact value to the nearest IEEE-754 single (ties-to-even).

    Going through a double first can land on the wrong single when the
    double lies exactly halfway between two singles; the result is at most
    one step off, so the neighbour on the far side is compared too.
    """
    if abs(exact) >= _SINGLE_OVERFLOW:
        return math.inf if exact > 0 else -math.inf
    candidate = to_single(float(exact))
    if math.isinf(candidate):
        candidate = math.copysign(_FLT_MAX, candidate)
    if Fraction(candidate) == exact:
        return candidate
    neighbour = _adjacent_single(candidate, upward=exact > Fraction(candidate))
    candidate_error = abs(exact - Fraction(candidate))
    neighbour_error = abs(exact - _single_as_fraction(neighbour))
    if neighbour_error < candidate_error:
        return neighbour
    if neighbour_error == candidate_error and _single_bits(neighbour) & 1 == 0:
        return neighbour
    return candidate


def parse_single(text: str) -> float:
    """
    Parse a floating spelling straight to single precision.

    >>> parse_single("1.00000005960464477539062500000001") == 1 + 2 ** -23
    True
    >>> to_single(parse_float("1.00000005960464477539062500000001"))
    1.0
    """
    value = parse_float(text)
    if math.isinf(value):
        return value
    return round_to_single(exact_value(text))


def parse_bool(text: str) -> Optional[bool]:
    lowered = text.strip().lower()
    if lowered in _TRUE_STRINGS:
        return True
    if lowered in _FALSE_STRINGS:
        return False
    return None


# ═══════════════════════════════════════════════════════════════════════════
#  PART 2 — OPTIONS
# ═══════════════════════════════════════════════════════════════════════════

# dataclass field name → clang-tidy option name
OPTION_NAMES: Dict[str, str] = {
    "ignore_all_floating_point_values": "IgnoreAllFloatingPointValues",
    "ignore_bit_fields_widths": "IgnoreBitFieldsWidths",
    "ignore_powers_of_2_integer_values": "IgnorePowersOf2IntegerValues",
    "ignore_strtol_bases": "IgnoreStrtolBases",
    "ignored_integer_values": "IgnoredIntegerValues",
    "ignored_floating_point_values": "IgnoredFloatingPointValues",
    "ignored_function_args": "IgnoredFunctionArgs",
}


@dataclass(frozen=True)
class MagicNumbersOptions:
    """
    User-facing options of the check.

    ``ignore_strtol_bases`` is a legacy switch; prefer listing
    ``strtol;3;d`` in ``ignored_function_args``.
    """
    ignore_all_floating_point_values: bool = False
    ignore_bit_fields_widths: bool = True
    ignore_powers_of_2_integer_values: bool = False
    ignore_strtol_bases: bool = False
    ignored_integer_values: str = DEFAULT_IGNORED_INTEGER_VALUES
    ignored_floating_point_values: str = DEFAULT_IGNORED_FLOATING_POINT_VALUES
    ignored_function_args: str = DEFAULT_IGNORED_FUNCTION_ARGS

    @classmethod
    def from_mapping(
        cls,
        options: Mapping[str, Any],
        reporter: Optional[ConfigurationReporter] = None,
    ) -> "MagicNumbersOptions":
        """
        Build options from a ``{OptionName: value}`` mapping.

        Unknown keys are ignored.  Boolean options accept real booleans or
        the strings true/false/1/0/yes/no/on/off; anything else is
        reported and the default is kept.
        """
        reporter = reporter or ConfigurationReporter()
        values: Dict[str, Any] = {}
        for f in fields(cls):
            name = OPTION_NAMES[f.name]
            if name not in options:
                continue
            raw = options[name]
            if f.type in ("bool", bool):
                if isinstance(raw, bool):
                    values[f.name] = raw
                    continue
                parsed = parse_bool(str(raw))
                if parsed is None:
                    reporter.report(
                        name, ConfigErrorKind.INVALID_BOOLEAN,
                        f"invalid boolean value '{raw}' for option {name}",
                    )
                    continue
                values[f.name] = parsed
            else:
                values[f.name] = str(raw)
        return cls(**values)

    def to_mapping(self) -> Dict[str, str]:
        """Inverse of ``from_mapping`` with clang-tidy spellings."""
        result: Dict[str, str] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, bool):
                value = "true" if value else "false"
            result[OPTION_NAMES[f.name]] = value
        return result


# ═══════════════════════════════════════════════════════════════════════════
#  PART 3 — EXEMPTION TABLES
# ═══════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True, order=True)
class IgnoredFunctionArg:
    """
    One ``(function, position)`` whose integer literals may use ``bases``.

    Ordering is by name, then position; ``bases`` does not take part so
    that a lower-bound search on ``(name, position)`` finds the first of
    the records for that key.
    """
    function_name: str
    position: int
    bases: Base = field(default=Base.ANY, compare=False)

    @property
    def key(self) -> Tuple[str, int]:
        return (self.function_name, self.position)


@dataclass(frozen=True)
class ExemptionTables:
    """Sorted lookup tables, built once and shared read-only."""
    integers: Tuple[int, ...] = ()
    singles: Tuple[float, ...] = ()
    doubles: Tuple[float, ...] = ()
    function_args: Tuple[IgnoredFunctionArg, ...] = ()


class ConfigParser:
    """
    Builds ``ExemptionTables`` from ``MagicNumbersOptions``.

    Usage
    -----
    >>> parser = ConfigParser(MagicNumbersOptions(ignored_integer_values="7;5;x"))
    >>> parser.parse().integers
    (5, 7)
    >>> [str(d) for d in parser.reporter.diagnostics]
    ["IgnoredIntegerValues: invalid integer value 'x' in IgnoredIntegerValues option"]
    """

    def __init__(
        self,
        options: MagicNumbersOptions,
        sink: Optional[ConfigSink] = None,
        reporter: Optional[ConfigurationReporter] = None,
    ) -> None:
        self.options = options
        self.reporter = reporter or ConfigurationReporter(sink)

    def parse(self) -> ExemptionTables:
        singles: Tuple[float, ...] = ()
        doubles: Tuple[float, ...] = ()
        if not self.options.ignore_all_floating_point_values:
            singles, doubles = self.parse_floating_point_values()
        return ExemptionTables(
            integers=self.parse_integer_values(),
            singles=singles,
            doubles=doubles,
            function_args=self.parse_function_args(),
        )

    def parse_integer_values(self) -> Tuple[int, ...]:
        option = OPTION_NAMES["ignored_integer_values"]
        values: List[int] = []
        for item in parse_string_list(self.options.ignored_integer_values):
            if not _DECIMAL_INTEGER.fullmatch(item):
                self.reporter.report(
                    option, ConfigErrorKind.INVALID_INTEGER,
                    f"invalid integer value '{item}' in {option} option",
                )
                continue
            value = int(item, 10)
            if not INT64_MIN <= value <= INT64_MAX:
                self.reporter.report(
                    option, ConfigErrorKind.INVALID_INTEGER,
                    f"integer value '{item}' in {option} option does not fit "
                    f"in 64 bits",
                )
                continue
            values.append(value)
        return tuple(sorted(values))

    def parse_floating_point_values(self) -> Tuple[Tuple[float, ...], Tuple[float, ...]]:
        option = OPTION_NAMES["ignored_floating_point_values"]
        singles: List[float] = []
        doubles: List[float] = []
        for item in parse_string_list(self.options.ignored_floating_point_values):
            try:
                value = parse_float(item)
            except ValueError:
                self.reporter.report(
                    option, ConfigErrorKind.INVALID_FLOAT,
                    f"invalid floating point value '{item}' in {option} option",
                )
                continue
            singles.append(parse_single(item))
            doubles.append(value)
        return tuple(sorted(singles)), tuple(sorted(doubles))

    def parse_function_args(self) -> Tuple[IgnoredFunctionArg, ...]:
        option = OPTION_NAMES["ignored_function_args"]
        raw = self.options.ignored_function_args
        items = parse_string_list(raw)
        entries: List[IgnoredFunctionArg] = []

        if len(items) % 3 != 0:
            # A missing value shifts every following triple; there is no
            # safe point to resynchronise, so nothing is parsed.
            self.reporter.report(
                option, ConfigErrorKind.INVALID_LIST_LENGTH,
                f"invalid {option} option list '{raw}' (length is not a "
                f"multiple of 3)",
            )
            items = []

        for i in range(0, len(items), 3):
            name, position_text, bases_text = items[i:i + 3]
            item_no = i // 3
            if not _ARG_POSITION.fullmatch(position_text):
                self.reporter.report(
                    option, ConfigErrorKind.INVALID_ARG_POS,
                    f"invalid arg_pos '{position_text}' in item #{item_no} "
                    f"of {option} option",
                )
                continue

            bases = Base(0)
            bad_chars = False
            for char in bases_text:
                base = _BASE_CHARS.get(char)
                if base is None:
                    # Keep going so every distinct bad char gets reported.
                    self.reporter.report(
                        option, ConfigErrorKind.INVALID_BASE_CHAR,
                        f"invalid char '{char}' in allowed bases "
                        f"'{bases_text}' of item #{item_no} of {option} option",
                    )
                    bad_chars = True
                    continue
                bases |= base
            if bad_chars:
                continue

            entries.append(IgnoredFunctionArg(
                function_name=name,
                position=int(position_text, 10),
                bases=bases,
            ))

        if self.options.ignore_strtol_bases:
            # Appended without dedup; lookup unions the bases of equal keys.
            for name in STRTOL_FUNCTIONS:
                entries.append(IgnoredFunctionArg(
                    function_name=name,
                    position=STRTOL_BASE_POSITION,
                    bases=Base.DEC,
                ))

        return tuple(sorted(entries))


def build_exemption_tables(
    options: MagicNumbersOptions,
    sink: Optional[ConfigSink] = None,
) -> ExemptionTables:
    """One-shot helper around ``ConfigParser``."""
    return ConfigParser(options, sink=sink).parse()


__all__ = [
    "Base",
    "DEFAULT_IGNORED_INTEGER_VALUES",
    "DEFAULT_IGNORED_FLOATING_POINT_VALUES",
    "DEFAULT_IGNORED_FUNCTION_ARGS",
    "OPTION_NAMES",
    "MagicNumbersOptions",
    "IgnoredFunctionArg",
    "ExemptionTables",
    "ConfigParser",
    "build_exemption_tables",
    "parse_string_list",
    "parse_float",
    "parse_single",
    "round_to_single",
    "exact_value",
    "parse_bool",
    "to_single",
]
