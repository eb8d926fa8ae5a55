"""
magic_numbers/usage.py
══════════════════════

Classifies the declarative context a literal appears in.

    const int A = 123;          TRUE_CONST in C++, RUNTIME_CONST in C
    constexpr int B = 7;        TRUE_CONST
    enum { C = 5 };             TRUE_CONST
    const int D[] = {1, 9};     RUNTIME_CONST in C, inside an initializer list
    int e = 321;                NONE

The walk starts at each parent of the literal and climbs until it meets a
declaration or an enumerator.  An ordinary (non-const, explicit) declaration
ends that path: a literal initialising a plain variable is not defining a
constant, whatever encloses the declaration.  Initializer lists on the way
are remembered but do not stop the climb.

Besides the walk, a few immediate contexts count as TRUE_CONST outright:
compiler-generated template argument substitutions (directly or through an
explicit cast) and the payload of a string user-defined literal.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

from magic_numbers.syntax import (
    AncestorGraph,
    LiteralNode,
    LiteralOperatorKind,
    NodeKind,
    SyntaxNode,
    Walk,
    walk_ancestors,
)

_log = logging.getLogger(__name__)


class ConstCategory(Enum):
    NONE = "none"
    RUNTIME_CONST = "runtime-const"
    TRUE_CONST = "true-const"


@dataclass
class UsageInfo:
    category: ConstCategory = ConstCategory.NONE
    is_used_in_initializer_list: bool = False


class UsageClassifier:
    """
    Parameters
    ----------
    cplusplus : True when the translation unit is C++, where a const
                qualified variable is usable as a compile-time constant.
    """

    def __init__(self, cplusplus: bool = False) -> None:
        self.cplusplus = cplusplus

    # ── declaration search ───────────────────────────────────────────────

    def declaration_category(self, decl: SyntaxNode) -> ConstCategory:
        if decl.is_constexpr:
            return ConstCategory.TRUE_CONST
        if decl.is_const:
            return ConstCategory.TRUE_CONST if self.cplusplus else ConstCategory.RUNTIME_CONST
        if decl.is_implicit:
            return ConstCategory.TRUE_CONST
        return ConstCategory.NONE

    def is_used_to_initialize_a_constant(
        self,
        start: SyntaxNode,
        graph: AncestorGraph,
        info: UsageInfo,
    ) -> bool:
        """
        Climb from ``start`` (inclusive) looking for a constant definition.

        Sets ``info.category`` on success and ``info.is_used_in_initializer_list``
        whenever an initializer list is crossed.
        """

        def visit(node: SyntaxNode, _child: SyntaxNode) -> Walk:
            if node.kind is NodeKind.INIT_LIST:
                info.is_used_in_initializer_list = True
                return Walk.ASCEND
            if node.kind is NodeKind.DECLARATION:
                category = self.declaration_category(node)
                if category is ConstCategory.NONE:
                    return Walk.PRUNE
                info.category = category
                return Walk.MATCH
            if node.kind is NodeKind.ENUM_CONSTANT:
                info.category = ConstCategory.TRUE_CONST
                return Walk.MATCH
            return Walk.ASCEND

        # ``walk_ancestors`` starts above its origin; visit ``start`` first.
        step = visit(start, start)
        if step is Walk.MATCH:
            return True
        if step is Walk.PRUNE:
            return False
        return walk_ancestors(graph, start, visit)

    # ── immediate contexts ───────────────────────────────────────────────

    @staticmethod
    def is_true_const_context(parent: SyntaxNode, graph: AncestorGraph) -> bool:
        # An expanded enumeration value behind a cast.
        if parent.kind is NodeKind.CAST and any(
            grandparent.kind is NodeKind.TEMPLATE_PARAM_SUBST
            for grandparent in graph.parents(parent)
        ):
            return True
        # Reported where the template is defined, not where it is instantiated.
        if parent.kind is NodeKind.TEMPLATE_PARAM_SUBST:
            return True
        # std::string s = "Hello World"s;
        if (parent.kind is NodeKind.USER_DEFINED_LITERAL
                and parent.literal_operator is LiteralOperatorKind.STRING):
            return True
        return False

    # ── public API ───────────────────────────────────────────────────────

    def get_usage_info(self, literal: LiteralNode, graph: AncestorGraph) -> UsageInfo:
        info = UsageInfo()
        for parent in graph.parents(literal):
            if self.is_used_to_initialize_a_constant(parent, graph, info):
                break
            if self.is_true_const_context(parent, graph):
                info.category = ConstCategory.TRUE_CONST
                break
        _log.debug("usage of %r: %s", literal, info)
        return info

    @staticmethod
    def is_synthetic(literal: LiteralNode) -> bool:
        """The literal comes from a buffer with no name (builtin text)."""
        return literal.buffer_name == ""

    @staticmethod
    def is_bit_field_width(literal: LiteralNode, graph: AncestorGraph) -> bool:
        return walk_ancestors(
            graph, literal,
            lambda node, _child: (
                Walk.MATCH
                if node.kind is NodeKind.DECLARATION and node.is_bit_field
                else Walk.ASCEND
            ),
        )


__all__ = ["ConstCategory", "UsageInfo", "UsageClassifier"]
