# tests/test_cli.py
"""Tests for the magic-numbers command line."""

from unittest.mock import patch

import pytest

from magic_numbers.__main__ import build_parser, main, options_from_args
from magic_numbers.options import MagicNumbersOptions


class TestArguments:

    def test_defaults_match_option_defaults(self):
        args = build_parser().parse_args(["main.c.dump"])
        assert options_from_args(args) == MagicNumbersOptions()
        assert args.output == "json"
        assert args.language is None

    def test_rule_flags(self):
        args = build_parser().parse_args([
            "x.dump",
            "--ignored-integer-values", "7;8",
            "--ignored-function-args", "open;3;o",
            "--ignore-all-floating-point-values",
            "--no-ignore-bit-fields-widths",
            "--ignore-powers-of-2-integer-values",
            "--ignore-strtol-bases",
        ])
        opts = options_from_args(args)
        assert opts.ignored_integer_values == "7;8"
        assert opts.ignored_function_args == "open;3;o"
        assert opts.ignore_all_floating_point_values
        assert not opts.ignore_bit_fields_widths
        assert opts.ignore_powers_of_2_integer_values
        assert opts.ignore_strtol_bases

    def test_dump_file_required(self):
        with pytest.raises(SystemExit) as exc:
            build_parser().parse_args([])
        assert exc.value.code == 2


class TestMain:

    def test_forwards_to_run_addon(self):
        with patch("magic_numbers.__main__.run_addon", return_value=1) as run:
            code = main(["a.c.dump", "b.c.dump", "--output", "gcc",
                         "--suppress", "magicNumber", "--language", "c++"])
        assert code == 1
        args, kwargs = run.call_args
        assert args[0] == ["a.c.dump", "b.c.dump"]
        assert kwargs["output"] == "gcc"
        assert kwargs["suppress"] == ["magicNumber"]
        assert kwargs["cplusplus"] is True
        assert kwargs["options"] == MagicNumbersOptions()

    def test_language_c(self):
        with patch("magic_numbers.__main__.run_addon", return_value=0) as run:
            assert main(["a.dump", "--language", "c"]) == 0
        assert run.call_args.kwargs["cplusplus"] is False

    def test_language_inferred_by_default(self):
        with patch("magic_numbers.__main__.run_addon", return_value=0) as run:
            main(["a.c.dump"])
        assert run.call_args.kwargs["cplusplus"] is None
