"""
magic_numbers/funcarg_exemption.py
══════════════════════════════════

Exempts integer literals passed to selected function arguments.

Some arguments are numbers by nature: the ``base`` of ``strtol`` or the
``mode`` of ``open``.  With ``IgnoredFunctionArgs = "open;3;o"``::

    open("kek", O_RDWR | O_CREAT, 0666);   // exempted: octal in arg 3
    open("kek", O_RDWR | O_CREAT, 438);    // reported: same bits, decimal

Only the literal's *spelling* decides its base; its value is irrelevant.

The walk goes up from the literal through every parent edge until it meets
a call.  Only calls whose callee is a plain name qualify; a call through a
member, a pointer or any other expression ends that path.

License: MIT
"""

from __future__ import annotations

import logging
from bisect import bisect_left, bisect_right
from typing import List, Optional, Tuple

from magic_numbers.options import Base, ExemptionTables, IgnoredFunctionArg
from magic_numbers.syntax import (
    AncestorGraph,
    LiteralNode,
    NodeKind,
    SyntaxNode,
    Walk,
    walk_ancestors,
)

_log = logging.getLogger(__name__)


def base_from_spelling(spelling: str) -> Base:
    """
    Numeric base of an integer literal, judged from its source text.

    ``0x``/``0X`` is hexadecimal, ``0b``/``0B`` binary, ``0`` followed by
    a digit octal.  Everything else is decimal, including ``"0"`` itself
    and one-character or empty spellings.
    """
    if len(spelling) >= 2 and spelling[0] == "0":
        marker = spelling[1]
        if marker in "xX":
            return Base.HEX
        if marker in "bB":
            return Base.BIN
        if marker.isdigit():
            return Base.OCT
    return Base.DEC


def argument_position(call: SyntaxNode, child: SyntaxNode) -> int:
    """1-based position of ``child`` among ``call.arguments``; 0 if absent."""
    position = 0
    for index, argument in enumerate(call.arguments, start=1):
        if argument is child:
            position = index
    return position


class FunctionArgExemptionMatcher:
    """``is_ignored_function_arg(literal, graph)`` over the sorted table."""

    def __init__(self, tables: ExemptionTables) -> None:
        self._table: Tuple[IgnoredFunctionArg, ...] = tables.function_args
        self._keys: List[Tuple[str, int]] = [entry.key for entry in self._table]

    def lookup(self, function_name: str, position: int) -> Optional[IgnoredFunctionArg]:
        """
        Exact ``(function_name, position)`` match, or None.

        The table may repeat a key; the returned record allows the union of
        the bases of every record for it.
        """
        key = (function_name, position)
        lo = bisect_left(self._keys, key)
        hi = bisect_right(self._keys, key, lo)
        if lo == hi:
            return None
        if hi - lo == 1:
            return self._table[lo]
        bases = Base(0)
        for entry in self._table[lo:hi]:
            bases |= entry.bases
        return IgnoredFunctionArg(function_name, position, bases)

    def is_ignored_function_arg(self, literal: LiteralNode, graph: AncestorGraph) -> bool:
        if not literal.is_integer or not self._table:
            return False

        base = base_from_spelling(literal.spelling)

        def visit(node: SyntaxNode, child: SyntaxNode) -> Walk:
            if node.kind is not NodeKind.CALL:
                return Walk.ASCEND
            if node.callee_name is None:
                return Walk.PRUNE

            position = argument_position(node, child)
            if position == 0:
                _log.debug(
                    "call %r reached from %r which is not one of its "
                    "arguments", node, child,
                )
                return Walk.PRUNE

            entry = self.lookup(node.callee_name, position)
            if entry is None:
                return Walk.PRUNE
            return Walk.MATCH if base & entry.bases else Walk.PRUNE

        return walk_ancestors(graph, literal, visit)


__all__ = [
    "FunctionArgExemptionMatcher",
    "base_from_spelling",
    "argument_position",
]
