# tests/conftest.py
"""
Shared fixtures and mock objects for the magic-numbers test suite.

``MockToken`` and friends stand in for the classes of Cppcheck's
``cppcheckdata`` module.  Only the attributes the graph builder reads are
modelled; everything defaults to "absent" (None / False / empty string),
which a MagicMock would not give us.
"""

from __future__ import annotations

from typing import Any, List, Optional, Sequence

import pytest

from magic_numbers.check import MagicNumbersCheck
from magic_numbers.options import MagicNumbersOptions
from magic_numbers.syntax import SyntaxGraph


# ═══════════════════════════════════════════════════════════════════════════
#  MOCK CPPCHECKDATA OBJECTS
# ═══════════════════════════════════════════════════════════════════════════

class MockScope:
    def __init__(self, type: str = "Global") -> None:
        self.type = type


class MockVariable:
    def __init__(
        self,
        nameToken: Any = None,
        isConst: bool = False,
        typeStartToken: Any = None,
    ) -> None:
        self.nameToken = nameToken
        self.isConst = isConst
        self.typeStartToken = typeStartToken


class MockToken:
    """Minimal stand-in for ``cppcheckdata.Token``."""

    def __init__(self, str: str = "", **attrs: Any) -> None:
        self.str = str
        self.astParent: Optional[MockToken] = None
        self.astOperand1: Optional[MockToken] = None
        self.astOperand2: Optional[MockToken] = None
        self.previous: Optional[MockToken] = None
        self.next: Optional[MockToken] = None
        self.isName = bool(str) and (str[0].isalpha() or str[0] == "_")
        self.isNumber = bool(str) and (str[0].isdigit() or str[0] == ".")
        self.isCast = False
        self.isExpandedMacro = False
        self.macroName: Optional[str] = None
        self.file = "test.c"
        self.linenr = 1
        self.column = 1
        self.variable: Optional[MockVariable] = None
        self.scope = MockScope()
        for key, value in attrs.items():
            setattr(self, key, value)

    def __repr__(self) -> str:
        return f"MockToken({self.str!r})"


class MockConfiguration:
    def __init__(self, tokenlist: Sequence[MockToken], suppressions: Sequence[Any] = ()) -> None:
        self.tokenlist = list(tokenlist)
        self.suppressions = list(suppressions)


class MockDump:
    def __init__(self, configurations: Sequence[MockConfiguration]) -> None:
        self.configurations = list(configurations)


def make_token_chain(*strings: str, **attrs: Any) -> List[MockToken]:
    """Tokens linked through ``previous``/``next``, sharing ``attrs``."""
    tokens = [MockToken(s, **attrs) for s in strings]
    for prev, cur in zip(tokens, tokens[1:]):
        prev.next = cur
        cur.previous = prev
    return tokens


def ast(parent: MockToken, op1: Optional[MockToken] = None,
        op2: Optional[MockToken] = None) -> MockToken:
    """Attach operands to ``parent`` and return it."""
    parent.astOperand1 = op1
    parent.astOperand2 = op2
    for child in (op1, op2):
        if child is not None:
            child.astParent = parent
    return parent


def find(tokens: Sequence[MockToken], text: str, nth: int = 0) -> MockToken:
    matches = [t for t in tokens if t.str == text]
    return matches[nth]


# ═══════════════════════════════════════════════════════════════════════════
#  CANNED TRANSLATION UNITS
# ═══════════════════════════════════════════════════════════════════════════

def call_tokens(callee: str, args: Sequence[str], **attrs: Any) -> List[MockToken]:
    """
    ``callee(arg1, arg2, ...);`` with Cppcheck's left-nested comma tree.

    Every argument is a single token.
    """
    spelled: List[str] = [callee, "("]
    for i, arg in enumerate(args):
        if i:
            spelled.append(",")
        spelled.append(arg)
    spelled += [")", ";"]
    tokens = make_token_chain(*spelled, **attrs)

    paren = tokens[1]
    arg_toks = [tokens[2 + 2 * i] for i in range(len(args))]
    commas = [tokens[3 + 2 * i] for i in range(len(args) - 1)]
    tree: Optional[MockToken] = arg_toks[0] if arg_toks else None
    for comma, arg in zip(commas, arg_toks[1:]):
        tree = ast(comma, tree, arg)
    ast(paren, tokens[0], tree)
    return tokens


def declaration_tokens(
    name: str,
    value: str,
    specifiers: Sequence[str] = (),
    type_name: str = "int",
    **attrs: Any,
) -> List[MockToken]:
    """``specifiers type_name name = value ;`` with its Variable."""
    tokens = make_token_chain(*specifiers, type_name, name, "=", value, ";", **attrs)
    type_tok = find(tokens, type_name)
    name_tok = find(tokens, name)
    name_tok.variable = MockVariable(
        nameToken=name_tok,
        isConst="const" in specifiers,
        typeStartToken=type_tok,
    )
    ast(find(tokens, "="), name_tok, find(tokens, value))
    return tokens


def enum_tokens(name: str, value: str) -> List[MockToken]:
    """``enum { name = value };``"""
    tokens = make_token_chain("enum", "{", name, "=", value, "}", ";")
    enum_scope = MockScope("Enum")
    for tok in tokens[2:5]:
        tok.scope = enum_scope
    ast(tokens[3], tokens[2], tokens[4])
    return tokens


def bit_field_tokens(member: str, width: str) -> List[MockToken]:
    """``struct S { unsigned member : width ; };`` (no AST above the width)."""
    tokens = make_token_chain("struct", "S", "{", "unsigned", member, ":", width, ";", "}", ";")
    struct_scope = MockScope("Struct")
    for tok in tokens[3:8]:
        tok.scope = struct_scope
    return tokens


# ═══════════════════════════════════════════════════════════════════════════
#  FIXTURES
# ═══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def graph() -> SyntaxGraph:
    return SyntaxGraph()


@pytest.fixture
def c_check() -> MagicNumbersCheck:
    return MagicNumbersCheck(MagicNumbersOptions(), cplusplus=False)


@pytest.fixture
def cpp_check() -> MagicNumbersCheck:
    return MagicNumbersCheck(MagicNumbersOptions(), cplusplus=True)


@pytest.fixture
def diagnostics_sink():
    """A list plus a sink appending to it."""
    collected: List[Any] = []
    return collected, collected.append
