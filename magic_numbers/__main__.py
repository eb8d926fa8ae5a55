#!/usr/bin/env python3
"""
magic_numbers/__main__.py
=========================

Cppcheck addon entry point.

Usage
-----
    cppcheck --dump src/foo.c
    magic-numbers src/foo.c.dump
    python -m magic_numbers --output gcc --ignore-powers-of-2-integer-values src/*.dump

Options mirror the clang-tidy check options::

    --ignored-integer-values         IgnoredIntegerValues
    --ignored-floating-point-values  IgnoredFloatingPointValues
    --ignored-function-args          IgnoredFunctionArgs
    --ignore-all-floating-point-values, --no-ignore-bit-fields-widths,
    --ignore-powers-of-2-integer-values, --ignore-strtol-bases

Exit status: 0 when nothing was reported, 1 when diagnostics were emitted,
2 when a dump could not be processed.
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Optional, Sequence

from magic_numbers import __version__
from magic_numbers.checkers import run_addon
from magic_numbers.options import (
    DEFAULT_IGNORED_FLOATING_POINT_VALUES,
    DEFAULT_IGNORED_FUNCTION_ARGS,
    DEFAULT_IGNORED_INTEGER_VALUES,
    MagicNumbersOptions,
)

_log = logging.getLogger("magic_numbers")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="magic-numbers",
        description="Report magic numbers in cppcheck dump files.",
    )
    parser.add_argument("dump_files", nargs="+", metavar="DUMP_FILE",
                        help="cppcheck --dump output")
    parser.add_argument("--output", choices=["json", "gcc", "summary"],
                        default="json", help="diagnostic format (default: json)")
    parser.add_argument("--language", choices=["c", "c++"], default=None,
                        help="source language (default: from file suffix)")
    parser.add_argument("--suppress", action="append", default=[],
                        metavar="ID", help="suppress an error id (repeatable)")

    rule = parser.add_argument_group("rule options")
    rule.add_argument("--ignored-integer-values",
                      default=DEFAULT_IGNORED_INTEGER_VALUES, metavar="LIST")
    rule.add_argument("--ignored-floating-point-values",
                      default=DEFAULT_IGNORED_FLOATING_POINT_VALUES, metavar="LIST")
    rule.add_argument("--ignored-function-args",
                      default=DEFAULT_IGNORED_FUNCTION_ARGS, metavar="LIST")
    rule.add_argument("--ignore-all-floating-point-values", action="store_true")
    rule.add_argument("--no-ignore-bit-fields-widths", dest="ignore_bit_fields_widths",
                      action="store_false")
    rule.add_argument("--ignore-powers-of-2-integer-values", action="store_true")
    rule.add_argument("--ignore-strtol-bases", action="store_true")

    parser.add_argument("-v", "--verbose", action="store_true",
                        help="debug logging on stderr")
    parser.add_argument("--version", action="version",
                        version=f"%(prog)s {__version__}")
    return parser


def options_from_args(args: argparse.Namespace) -> MagicNumbersOptions:
    return MagicNumbersOptions(
        ignore_all_floating_point_values=args.ignore_all_floating_point_values,
        ignore_bit_fields_widths=args.ignore_bit_fields_widths,
        ignore_powers_of_2_integer_values=args.ignore_powers_of_2_integer_values,
        ignore_strtol_bases=args.ignore_strtol_bases,
        ignored_integer_values=args.ignored_integer_values,
        ignored_floating_point_values=args.ignored_floating_point_values,
        ignored_function_args=args.ignored_function_args,
    )


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose)

    options = options_from_args(args)
    cplusplus: Optional[bool] = None
    if args.language is not None:
        cplusplus = args.language == "c++"

    _log.debug("checking %d dump file(s)", len(args.dump_files))
    return run_addon(
        args.dump_files,
        options=options,
        cplusplus=cplusplus,
        output=args.output,
        suppress=args.suppress,
    )


if __name__ == "__main__":
    sys.exit(main())
