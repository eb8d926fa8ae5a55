# tests/test_funcarg_exemption.py
"""
Tests for ignored function arguments: base detection from spelling,
exact (function, position) lookup and the upward search for the call.
"""

import pytest

from magic_numbers.funcarg_exemption import (
    FunctionArgExemptionMatcher,
    argument_position,
    base_from_spelling,
)
from magic_numbers.options import Base, ConfigParser, MagicNumbersOptions
from magic_numbers.syntax import NodeKind, SyntaxNode, floating_literal, integer_literal


def matcher(entries):
    opts = MagicNumbersOptions(ignored_function_args=entries)
    return FunctionArgExemptionMatcher(ConfigParser(opts).parse())


def call(name, *arguments):
    return SyntaxNode(NodeKind.CALL, label=name or "<expr>", callee_name=name,
                      arguments=tuple(arguments))


def other(label=""):
    return SyntaxNode(NodeKind.OTHER, label=label)


def open_call(graph, spelling, value):
    """open("kek", O_RDWR | O_CREAT, <literal>)"""
    lit = integer_literal(value, spelling)
    node = call("open", other('"kek"'), other("|"), lit)
    graph.add_edge(lit, node)
    return lit


class TestBaseFromSpelling:

    @pytest.mark.parametrize("spelling, base", [
        ("438", Base.DEC),
        ("0666", Base.OCT),
        ("0x1B", Base.HEX),
        ("0X1b", Base.HEX),
        ("0b101", Base.BIN),
        ("0B101", Base.BIN),
        ("0", Base.DEC),
        ("7", Base.DEC),
        ("0u", Base.DEC),
        ("", Base.DEC),
    ])
    def test_base(self, spelling, base):
        assert base_from_spelling(spelling) == base


class TestLookup:

    def test_exact_key_only(self):
        m = matcher("open;3;o")
        assert m.lookup("open", 3).bases == Base.OCT
        assert m.lookup("open", 2) is None
        assert m.lookup("ope", 3) is None
        assert m.lookup("openat", 3) is None

    def test_repeated_key_unions_bases(self):
        opts = MagicNumbersOptions(ignored_function_args="strtol;3;x", ignore_strtol_bases=True)
        m = FunctionArgExemptionMatcher(ConfigParser(opts).parse())
        assert m.lookup("strtol", 3).bases == Base.HEX | Base.DEC
        assert m.lookup("strtoll", 3).bases == Base.DEC

    def test_argument_position(self):
        a, b = other("a"), other("b")
        c = call("f", a, b)
        assert argument_position(c, a) == 1
        assert argument_position(c, b) == 2
        assert argument_position(c, other("x")) == 0


class TestOpenMode:

    def test_octal_mode_exempted(self, graph):
        lit = open_call(graph, "0666", 0o666)
        assert matcher("open;3;o").is_ignored_function_arg(lit, graph)

    def test_same_value_in_decimal_not_exempted(self, graph):
        lit = open_call(graph, "438", 438)
        assert not matcher("open;3;o").is_ignored_function_arg(lit, graph)

    def test_any_base(self, graph):
        lit = open_call(graph, "438", 438)
        assert matcher("open;3;a").is_ignored_function_arg(lit, graph)

    def test_repeated_entry_adds_bases(self, graph):
        m = matcher("open;3;o;open;3;x")
        assert m.lookup("open", 3).bases == Base.OCT | Base.HEX
        assert m.is_ignored_function_arg(open_call(graph, "0666", 0o666), graph)
        assert m.is_ignored_function_arg(open_call(graph, "0x1B6", 0x1B6), graph)
        assert not m.is_ignored_function_arg(open_call(graph, "438", 438), graph)

    def test_wrong_position(self, graph):
        lit = open_call(graph, "0666", 0o666)
        assert not matcher("open;2;o").is_ignored_function_arg(lit, graph)

    def test_wrong_function(self, graph):
        lit = open_call(graph, "0666", 0o666)
        assert not matcher("chmod;3;o").is_ignored_function_arg(lit, graph)

    def test_empty_table(self, graph):
        lit = open_call(graph, "0666", 0o666)
        assert not matcher("").is_ignored_function_arg(lit, graph)


class TestWalk:

    def test_through_intermediate_expression(self, graph):
        # open(path, flags, 0600 | 066)
        lit = integer_literal(0o66, "066")
        expr = other("|")
        graph.add_edge(lit, expr)
        graph.add_edge(expr, call("open", other(), other(), expr))
        assert matcher("open;3;o").is_ignored_function_arg(lit, graph)

    def test_first_call_decides(self, graph):
        # open(path, flags, mode(0666)): the literal is arg 1 of mode()
        lit = integer_literal(0o666, "0666")
        inner = call("mode", lit)
        graph.add_edge(lit, inner)
        graph.add_edge(inner, call("open", other(), other(), inner))
        assert not matcher("open;3;o").is_ignored_function_arg(lit, graph)

    def test_unnamed_callee_ends_path(self, graph):
        lit = integer_literal(0o666, "0666")
        indirect = call(None, lit)
        graph.add_edge(lit, indirect)
        graph.add_edge(indirect, call("open", other(), other(), indirect))
        assert not matcher("open;3;o;open;1;o").is_ignored_function_arg(lit, graph)

    def test_child_not_an_argument(self, graph):
        lit = integer_literal(0o666, "0666")
        graph.add_edge(lit, call("open", other(), other(), other()))
        assert not matcher("open;3;o").is_ignored_function_arg(lit, graph)

    def test_any_parent_may_exempt(self, graph):
        lit = integer_literal(0o666, "0666")
        graph.add_edge(lit, call("chmod", other(), lit))
        graph.add_edge(lit, call("open", other(), other(), lit))
        assert matcher("open;3;o").is_ignored_function_arg(lit, graph)

    def test_floats_never_exempted(self, graph):
        lit = floating_literal(3.0)
        graph.add_edge(lit, call("pow", other(), lit))
        assert not matcher("pow;2;a").is_ignored_function_arg(lit, graph)

    def test_no_parents(self, graph):
        lit = graph.add_node(integer_literal(0o666, "0666"))
        assert not matcher("open;3;o").is_ignored_function_arg(lit, graph)
