# tests/test_check.py
"""Tests for the MagicNumbersCheck facade a host drives."""

from unittest.mock import MagicMock

from magic_numbers.check import CHECK_NAME, MagicNumbersCheck
from magic_numbers.errors import ConfigErrorKind
from magic_numbers.options import MagicNumbersOptions
from magic_numbers.syntax import (
    LiteralKind,
    NodeKind,
    SourceLocation,
    SyntaxNode,
    floating_literal,
    integer_literal,
)
from magic_numbers.verdict import MAGIC_NUMBER_MESSAGE, Verdict


class TestReporting:

    def test_reports_magic_number(self, graph, c_check):
        loc = SourceLocation("main.c", 4, 9)
        lit = graph.add_node(integer_literal(42, location=loc))
        report = MagicMock()
        result = c_check.check(lit, graph, report)
        report.assert_called_once_with(loc, MAGIC_NUMBER_MESSAGE, ("42",))
        assert result.verdict is Verdict.MAGIC_NUMBER

    def test_silent_when_suppressed(self, graph, c_check):
        lit = graph.add_node(integer_literal(3))
        report = MagicMock()
        assert c_check.check(lit, graph, report).suppressed
        report.assert_not_called()

    def test_const_int_foo(self, graph, c_check, cpp_check):
        lit = integer_literal(123)
        graph.add_edge(lit, SyntaxNode(NodeKind.DECLARATION, label="foo", is_const=True))
        c_report, cpp_report = MagicMock(), MagicMock()
        c_check.check(lit, graph, c_report)
        cpp_check.check(lit, graph, cpp_report)
        assert c_report.call_count == 1
        assert c_report.call_args.args[2] == ()
        cpp_report.assert_not_called()

    def test_idempotent(self, graph, c_check):
        lit = integer_literal(99)
        graph.add_edge(lit, SyntaxNode(NodeKind.OTHER, label="+"))
        assert c_check.classify(lit, graph) == c_check.classify(lit, graph)


class TestConstruction:

    def test_defaults(self):
        check = MagicNumbersCheck()
        assert check.options == MagicNumbersOptions()
        assert check.cplusplus is False
        assert check.tables.integers == (1, 2, 3, 4)
        assert check.configuration_diagnostics == []
        assert CHECK_NAME == "caos-magic-numbers"

    def test_registered_kinds(self):
        assert MagicNumbersCheck().registered_kinds() == {
            LiteralKind.INTEGER, LiteralKind.FLOATING,
        }
        only_ints = MagicNumbersCheck(MagicNumbersOptions(ignore_all_floating_point_values=True))
        assert only_ints.registered_kinds() == {LiteralKind.INTEGER}

    def test_malformed_configuration_keeps_valid_remainder(self, graph):
        sink = MagicMock()
        check = MagicNumbersCheck(
            MagicNumbersOptions(ignored_integer_values="5;five;6",
                                ignored_floating_point_values="x;2.5"),
            sink=sink,
        )
        assert sink.call_count == 2
        assert len(check.configuration_diagnostics) == 2
        for value, ignored in ((5, True), (6, True), (7, False)):
            lit = graph.add_node(integer_literal(value))
            assert check.classify(lit, graph).suppressed is ignored
        flt = graph.add_node(floating_literal(2.5))
        assert check.classify(flt, graph).suppressed

    def test_from_mapping_collects_every_diagnostic(self):
        sink = MagicMock()
        check = MagicNumbersCheck.from_mapping(
            {"IgnoreStrtolBases": "sometimes", "IgnoredFunctionArgs": "open;3"},
            cplusplus=True,
            sink=sink,
        )
        kinds = [d.kind for d in check.configuration_diagnostics]
        assert kinds == [ConfigErrorKind.INVALID_BOOLEAN, ConfigErrorKind.INVALID_LIST_LENGTH]
        assert sink.call_count == 2
        assert check.cplusplus is True

    def test_store_options(self):
        check = MagicNumbersCheck.from_mapping({"IgnoredIntegerValues": "8;9"})
        stored = check.store_options()
        assert stored["IgnoredIntegerValues"] == "8;9"
        assert stored["IgnoredFunctionArgs"] == "strtol;3;d;strtoll;3;d"
        assert MagicNumbersCheck.from_mapping(stored).options == check.options
