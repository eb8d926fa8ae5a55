#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
magic_numbers/cppcheck_graph.py
═══════════════════════════════

Builds the engine's ancestor graph from a Cppcheck dump configuration.

Cppcheck represents expressions as tokens linked by ``astParent`` /
``astOperand1`` / ``astOperand2``.  This module lifts the tokens that
matter for magic-number classification into ``SyntaxNode`` objects:

    ┌────────────────────────────┬───────────────────────────────────┐
    │ Cppcheck token             │ SyntaxNode kind                   │
    ├────────────────────────────┼───────────────────────────────────┤
    │ number (isNumber)          │ INTEGER_LITERAL/FLOATING_LITERAL  │
    │ '(' call, direct callee    │ CALL (callee_name, arguments)     │
    │ '(' with isCast            │ CAST                              │
    │ '{'                        │ INIT_LIST                         │
    │ '=' initialising a decl    │ DECLARATION (const from Variable) │
    │ '=' inside an enum scope   │ ENUM_CONSTANT                     │
    │ anything else              │ OTHER                             │
    └────────────────────────────┴───────────────────────────────────┘

Comma tokens are transparent: in ``f(a, b, c)`` each argument's parent is
the ``(`` of the call, so argument positions can be read straight off
``CALL.arguments``.  Cppcheck keeps no AST above a bit-field width or an
enumerator value; such roots get a synthetic DECLARATION (bit-field) or
ENUM_CONSTANT parent derived from the surrounding tokens and scope.

Usage Example
─────────────
    import cppcheckdata
    from magic_numbers.cppcheck_graph import build_syntax_graph

    data = cppcheckdata.parsedump("main.c.dump")
    for cfg in data.iterconfigurations():
        graph = build_syntax_graph(cfg)
        for literal in graph.literals():
            ...

License: MIT
"""

from __future__ import annotations

import logging
import re
from pathlib import PurePath
from typing import Any, Dict, FrozenSet, List, Optional, Tuple

from magic_numbers.options import exact_value, round_to_single
from magic_numbers.syntax import (
    FloatPrecision,
    LiteralKind,
    LiteralNode,
    NodeKind,
    Number,
    SourceLocation,
    SyntaxGraph,
    SyntaxNode,
)

_log = logging.getLogger(__name__)

# cppcheckdata is imported by the entry point only; tokens are duck-typed.
Token = Any


# ═══════════════════════════════════════════════════════════════════════════
#  CONSTANTS
# ═══════════════════════════════════════════════════════════════════════════

# Keywords cppcheck parses like a callee in front of '('.
NON_CALL_KEYWORDS: FrozenSet[str] = frozenset({
    "if", "while", "for", "switch", "return", "catch",
    "sizeof", "alignof", "_Alignof", "typeof", "decltype", "noexcept",
    "static_assert", "_Static_assert",
})

RECORD_SCOPE_TYPES: FrozenSet[str] = frozenset({"Struct", "Union", "Class"})

DECL_SPECIFIERS: FrozenSet[str] = frozenset({
    "static", "extern", "inline", "thread_local", "_Thread_local",
    "register", "volatile", "const", "constexpr", "constinit", "consteval",
})

C_SOURCE_SUFFIXES: FrozenSet[str] = frozenset({".c", ".h", ".i"})

_INTEGER_RE = re.compile(
    r"(?P<body>0[xX][0-9a-fA-F]+|0[bB][01]+|0[0-7]*|[1-9][0-9]*)"
    r"(?P<suffix>[uUlLzZ]*)"
)
_FLOAT_SUFFIX_RE = re.compile(r"(?P<body>.*?)(?P<suffix>[fFlL]?)")


# ═══════════════════════════════════════════════════════════════════════════
#  PART 1 — SAFE TOKEN ACCESSORS
# ═══════════════════════════════════════════════════════════════════════════

def tok_str(tok: Token) -> str:
    if tok is None:
        return ""
    return getattr(tok, "str", "") or ""


def tok_op1(tok: Token) -> Optional[Token]:
    return getattr(tok, "astOperand1", None) if tok is not None else None


def tok_op2(tok: Token) -> Optional[Token]:
    return getattr(tok, "astOperand2", None) if tok is not None else None


def tok_parent(tok: Token) -> Optional[Token]:
    return getattr(tok, "astParent", None) if tok is not None else None


def tok_previous(tok: Token) -> Optional[Token]:
    return getattr(tok, "previous", None) if tok is not None else None


def tok_scope_type(tok: Token) -> str:
    scope = getattr(tok, "scope", None) if tok is not None else None
    return getattr(scope, "type", "") or ""


def is_identifier(tok: Token) -> bool:
    return tok is not None and bool(getattr(tok, "isName", False))


def is_number(tok: Token) -> bool:
    return tok is not None and bool(getattr(tok, "isNumber", False))


def is_cast(tok: Token) -> bool:
    return tok is not None and bool(getattr(tok, "isCast", False))


def is_function_call(tok: Token) -> bool:
    """
    A '(' with a callee operand that is neither a cast nor a keyword.

    In Cppcheck's AST, ``f(a, b)`` is ``(`` with astOperand1 ``f`` and
    astOperand2 the comma tree of the arguments.
    """
    if tok_str(tok) != "(" or is_cast(tok):
        return False
    callee = tok_op1(tok)
    if callee is None:
        return False
    return tok_str(callee) not in NON_CALL_KEYWORDS


def get_call_arguments(call_tok: Token) -> List[Token]:
    """Argument expression roots of a call, left to right."""
    args: List[Token] = []

    def flatten(tok: Token) -> None:
        if tok is None:
            return
        if tok_str(tok) == ",":
            flatten(tok_op1(tok))
            flatten(tok_op2(tok))
        else:
            args.append(tok)

    flatten(tok_op2(call_tok))
    return args


def ast_parent_skipping_commas(tok: Token) -> Optional[Token]:
    parent = tok_parent(tok)
    while parent is not None and tok_str(parent) == ",":
        parent = tok_parent(parent)
    return parent


def leftmost_token(tok: Token) -> Token:
    """First token of an expression subtree (follows astOperand1)."""
    while tok_op1(tok) is not None and tok_str(tok) not in ("(", "["):
        tok = tok_op1(tok)
    return tok


# ═══════════════════════════════════════════════════════════════════════════
#  PART 2 — NUMERIC SPELLINGS
# ═══════════════════════════════════════════════════════════════════════════

def decode_number(text: str) -> Optional[Tuple[LiteralKind, Number, Optional[FloatPrecision]]]:
    """
    Decode a C/C++ numeric literal spelling.

    Returns ``(kind, value, precision)`` or None when the text is not a
    number this module understands.  Digit separators (``1'000``) are
    accepted.  A float literal with an ``f`` suffix is rounded to single
    precision; an ``l`` suffix yields EXTENDED.
    """
    cleaned = text.replace("'", "")
    match = _INTEGER_RE.fullmatch(cleaned)
    if match:
        body = match.group("body")
        if body[:2] in ("0x", "0X"):
            value = int(body[2:], 16)
        elif body[:2] in ("0b", "0B"):
            value = int(body[2:], 2)
        elif len(body) > 1 and body[0] == "0":
            value = int(body[1:], 8)
        else:
            value = int(body, 10)
        return LiteralKind.INTEGER, value, None

    match = _FLOAT_SUFFIX_RE.fullmatch(cleaned)
    body, suffix = match.group("body"), match.group("suffix")
    is_hex = body[:2] in ("0x", "0X")
    if "_" in body or (is_hex and "p" not in body.lower()):
        # hex floats need an exponent; '_' is Python-only syntax
        return None
    try:
        value = float.fromhex(body) if is_hex else float(body)
    except ValueError:
        return None
    if suffix in ("f", "F"):
        # rounded from the spelling, not from the double
        single = round_to_single(exact_value(body))
        return LiteralKind.FLOATING, single, FloatPrecision.SINGLE
    if suffix in ("l", "L"):
        return LiteralKind.FLOATING, value, FloatPrecision.EXTENDED
    return LiteralKind.FLOATING, value, FloatPrecision.DOUBLE


def literal_from_token(tok: Token) -> Optional[LiteralNode]:
    decoded = decode_number(tok_str(tok))
    if decoded is None:
        _log.debug("skipping undecodable number token %r", tok_str(tok))
        return None
    kind, value, precision = decoded
    file = getattr(tok, "file", None)
    return LiteralNode(
        value=value,
        literal_kind=kind,
        precision=precision,
        spelling=tok_str(tok),
        location=SourceLocation(
            file=file or "",
            line=getattr(tok, "linenr", 0) or 0,
            column=getattr(tok, "column", 0) or 0,
        ),
        buffer_name=file,
        in_macro_expansion=bool(
            getattr(tok, "isExpandedMacro", False)
            or getattr(tok, "macroName", None)
        ),
        origin=tok,
    )


def is_cplusplus_source(path: str) -> bool:
    """Language from a source or dump file name (``main.c.dump`` → C)."""
    p = PurePath(path)
    if p.suffix == ".dump":
        p = PurePath(p.stem)
    return p.suffix not in C_SOURCE_SUFFIXES


# ═══════════════════════════════════════════════════════════════════════════
#  PART 3 — GRAPH BUILDER
# ═══════════════════════════════════════════════════════════════════════════

def _declared_variable(assign_tok: Token) -> Optional[Any]:
    """The Variable an '=' initialises at its declaration, if any."""
    target = tok_op1(assign_tok)
    while tok_str(target) == "[":
        target = tok_op1(target)
    var = getattr(target, "variable", None) if target is not None else None
    if var is not None and getattr(var, "nameToken", None) is target:
        return var
    return None


def _is_constexpr(var: Any) -> bool:
    tok = tok_previous(getattr(var, "typeStartToken", None))
    while tok is not None and tok_str(tok) in DECL_SPECIFIERS:
        if tok_str(tok) == "constexpr":
            return True
        tok = tok_previous(tok)
    return False


class CppcheckGraphBuilder:
    """
    Lifts the number tokens of one configuration, and every AST ancestor
    they have, into a ``SyntaxGraph``.
    """

    def __init__(self, cfg: Any) -> None:
        self.cfg = cfg
        self.graph = SyntaxGraph()
        self._nodes: Dict[int, SyntaxNode] = {}

    def build(self) -> SyntaxGraph:
        for tok in getattr(self.cfg, "tokenlist", None) or []:
            if is_number(tok):
                self.add_literal(tok)
        return self.graph

    def add_literal(self, tok: Token) -> Optional[SyntaxNode]:
        node = self.node_for(tok)
        if node.kind not in (NodeKind.INTEGER_LITERAL, NodeKind.FLOATING_LITERAL):
            return None
        if node in self.graph:
            return node
        self.graph.add_node(node)

        current_tok, current = tok, node
        while True:
            parent_tok = ast_parent_skipping_commas(current_tok)
            if parent_tok is None:
                context = self._context_parent(current_tok, current)
                if context is not None:
                    self.graph.add_edge(current, context)
                return node
            parent = self.node_for(parent_tok)
            # Everything above an already linked node is in place.
            linked = parent in self.graph
            self.graph.add_edge(current, parent)
            if linked:
                return node
            current_tok, current = parent_tok, parent

    def node_for(self, tok: Token) -> SyntaxNode:
        key = id(tok)
        node = self._nodes.get(key)
        if node is None:
            node = self._make_node(tok)
            self._nodes[key] = node
        return node

    # ── token → node ─────────────────────────────────────────────────────

    def _make_node(self, tok: Token) -> SyntaxNode:
        text = tok_str(tok)
        if is_number(tok):
            literal = literal_from_token(tok)
            if literal is not None:
                return literal
        if is_function_call(tok):
            callee = tok_op1(tok)
            return SyntaxNode(
                NodeKind.CALL,
                label=tok_str(callee),
                callee_name=tok_str(callee) if is_identifier(callee) else None,
                arguments=tuple(self.node_for(arg) for arg in get_call_arguments(tok)),
                origin=tok,
            )
        if is_cast(tok):
            return SyntaxNode(NodeKind.CAST, label=text, origin=tok)
        if text == "{":
            return SyntaxNode(NodeKind.INIT_LIST, label=text, origin=tok)
        if text == "=":
            if tok_scope_type(tok_op1(tok)) == "Enum":
                return SyntaxNode(
                    NodeKind.ENUM_CONSTANT, label=tok_str(tok_op1(tok)), origin=tok,
                )
            var = _declared_variable(tok)
            if var is not None:
                return SyntaxNode(
                    NodeKind.DECLARATION,
                    label=tok_str(getattr(var, "nameToken", None)),
                    is_const=bool(getattr(var, "isConst", False)),
                    is_constexpr=_is_constexpr(var),
                    origin=tok,
                )
        return SyntaxNode(NodeKind.OTHER, label=text, origin=tok)

    def _context_parent(self, root_tok: Token, root: SyntaxNode) -> Optional[SyntaxNode]:
        """Declaration context Cppcheck leaves out of the AST."""
        scope_type = tok_scope_type(root_tok)
        if scope_type == "Enum" and root.kind is not NodeKind.ENUM_CONSTANT:
            return SyntaxNode(NodeKind.ENUM_CONSTANT, label="<enumerator>")

        if scope_type in RECORD_SCOPE_TYPES:
            colon = tok_previous(leftmost_token(root_tok))
            member = tok_previous(colon)
            if tok_str(colon) == ":" and is_identifier(member):
                return SyntaxNode(
                    NodeKind.DECLARATION,
                    label=tok_str(member),
                    is_bit_field=True,
                    origin=member,
                )
        return None


def build_syntax_graph(cfg: Any) -> SyntaxGraph:
    """Ancestor graph for every number token of a cppcheck configuration."""
    return CppcheckGraphBuilder(cfg).build()


__all__ = [
    "CppcheckGraphBuilder",
    "build_syntax_graph",
    "decode_number",
    "literal_from_token",
    "is_cplusplus_source",
    "is_function_call",
    "get_call_arguments",
]
