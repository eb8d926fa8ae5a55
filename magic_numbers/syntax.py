"""
magic_numbers/syntax.py
═══════════════════════

Syntax model consumed by the magic-number engine.

The engine never parses source text. A host (the Cppcheck addon in
``cppcheck_graph``, or a test) hands it literal nodes plus an object that
answers one question: *which nodes are the parents of this node?*

    ┌──────────────┐  parents(node)   ┌──────────────────────────┐
    │ AncestorGraph│ ◄─────────────── │ UsageClassifier          │
    │  (host side) │                  │ FunctionArgExemption...  │
    └──────────────┘                  └──────────────────────────┘

A node may have more than one parent (a literal shared by several template
instantiations, for instance), so every upward walk in this package is a
walk over a DAG.  ``walk_ancestors`` is the single traversal used by all of
them: an explicit-stack depth-first search that short-circuits on the first
matching path and otherwise explores every parent edge exactly once.

License: MIT
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import (
    Any,
    Callable,
    Dict,
    Iterator,
    List,
    Optional,
    Protocol,
    Sequence,
    Set,
    Tuple,
    Union,
)

from magic_numbers.errors import GraphError


# ═══════════════════════════════════════════════════════════════════════════
#  PART 1 — NODE KINDS
# ═══════════════════════════════════════════════════════════════════════════

class NodeKind(Enum):
    """Syntactic categories the engine distinguishes."""
    INTEGER_LITERAL = auto()
    FLOATING_LITERAL = auto()
    INIT_LIST = auto()
    DECLARATION = auto()            # variable or field declarator
    ENUM_CONSTANT = auto()
    CALL = auto()
    CAST = auto()                   # explicit type conversion
    TEMPLATE_PARAM_SUBST = auto()   # substituted non-type template parameter
    USER_DEFINED_LITERAL = auto()
    OTHER = auto()


class LiteralKind(Enum):
    INTEGER = "integer"
    FLOATING = "floating"


class FloatPrecision(Enum):
    """Floating semantics of a literal; only SINGLE and DOUBLE have tables."""
    SINGLE = "single"
    DOUBLE = "double"
    EXTENDED = "extended"


class LiteralOperatorKind(Enum):
    """Which literal operator a user-defined literal resolves to."""
    NUMERIC = auto()
    STRING = auto()
    CHARACTER = auto()
    TEMPLATE = auto()


# ═══════════════════════════════════════════════════════════════════════════
#  PART 2 — NODES
# ═══════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class SourceLocation:
    """A specific point in source code."""
    file: str = ""
    line: int = 0
    column: int = 0

    def __str__(self) -> str:
        if self.column:
            return f"{self.file}:{self.line}:{self.column}"
        return f"{self.file}:{self.line}"


@dataclass(eq=False)
class SyntaxNode:
    """
    A node of the host's syntax tree, reduced to what classification needs.

    Nodes compare and hash by identity: two declarations with the same
    attributes are still two different places in the program.

    Attributes
    ----------
    kind          : NodeKind tag
    label         : free-form text for debugging (token string, decl name)
    is_const      : DECLARATION — the declared type is const-qualified
    is_constexpr  : DECLARATION — declared as a compile-time constant
    is_implicit   : DECLARATION — generated by the compiler
    is_bit_field  : DECLARATION — a bit-field member
    callee_name   : CALL — callee when it is a direct named reference
    arguments     : CALL — argument expression roots in call order
    literal_operator : USER_DEFINED_LITERAL — resolved operator kind
    origin        : host object this node was built from
    """
    kind: NodeKind = NodeKind.OTHER
    label: str = ""
    is_const: bool = False
    is_constexpr: bool = False
    is_implicit: bool = False
    is_bit_field: bool = False
    callee_name: Optional[str] = None
    arguments: Tuple["SyntaxNode", ...] = ()
    literal_operator: Optional[LiteralOperatorKind] = None
    origin: Any = field(default=None, repr=False)

    def __repr__(self) -> str:
        if self.label:
            return f"<{self.kind.name} {self.label!r}>"
        return f"<{self.kind.name}>"


Number = Union[int, float]


@dataclass(eq=False, repr=False)
class LiteralNode(SyntaxNode):
    """
    A numeric literal occurrence.

    ``buffer_name`` is the name of the source buffer the literal was read
    from: ``None`` when the host could not resolve the location at all, an
    empty string for compiler-synthesised text.
    """
    value: Number = 0
    literal_kind: LiteralKind = LiteralKind.INTEGER
    precision: Optional[FloatPrecision] = None
    spelling: str = ""
    location: SourceLocation = field(default_factory=SourceLocation)
    buffer_name: Optional[str] = None
    in_macro_expansion: bool = False

    def __post_init__(self) -> None:
        if self.literal_kind is LiteralKind.INTEGER:
            self.kind = NodeKind.INTEGER_LITERAL
        else:
            self.kind = NodeKind.FLOATING_LITERAL
            if self.precision is None:
                self.precision = FloatPrecision.DOUBLE
        if not self.label:
            self.label = self.spelling

    @property
    def is_integer(self) -> bool:
        return self.literal_kind is LiteralKind.INTEGER


def integer_literal(
    value: int,
    spelling: Optional[str] = None,
    **kwargs: Any,
) -> LiteralNode:
    """Shorthand for an integer ``LiteralNode``; spelling defaults to ``str(value)``."""
    return LiteralNode(
        value=value,
        literal_kind=LiteralKind.INTEGER,
        spelling=str(value) if spelling is None else spelling,
        **kwargs,
    )


def floating_literal(
    value: float,
    spelling: Optional[str] = None,
    precision: FloatPrecision = FloatPrecision.DOUBLE,
    **kwargs: Any,
) -> LiteralNode:
    """Shorthand for a floating ``LiteralNode``."""
    return LiteralNode(
        value=value,
        literal_kind=LiteralKind.FLOATING,
        precision=precision,
        spelling=repr(value) if spelling is None else spelling,
        **kwargs,
    )


# ═══════════════════════════════════════════════════════════════════════════
#  PART 3 — ANCESTOR GRAPH
# ═══════════════════════════════════════════════════════════════════════════

class AncestorGraph(Protocol):
    """The graph query service: ``parents(node)`` in a stable order."""

    def parents(self, node: SyntaxNode) -> Sequence[SyntaxNode]:
        ...


class SyntaxGraph:
    """
    Concrete, in-memory ancestor DAG.

    Hosts add nodes and child→parent edges; the engine only reads it.
    Edges are kept in insertion order so walks are deterministic.

    Usage
    -----
    >>> g = SyntaxGraph()
    >>> lit = integer_literal(123)
    >>> decl = SyntaxNode(NodeKind.DECLARATION, "foo", is_const=True)
    >>> g.add_edge(lit, decl)
    >>> g.parents(lit)
    (<DECLARATION 'foo'>,)
    """

    def __init__(self) -> None:
        self._parents: Dict[int, List[SyntaxNode]] = {}
        self._nodes: Dict[int, SyntaxNode] = {}

    def add_node(self, node: SyntaxNode) -> SyntaxNode:
        key = id(node)
        if key not in self._nodes:
            self._nodes[key] = node
            self._parents[key] = []
        return node

    def add_edge(self, child: SyntaxNode, parent: SyntaxNode) -> None:
        """
        Record that ``parent`` contains ``child``.

        Raises GraphError when the edge would make ``child`` its own
        ancestor.  Repeated edges are ignored.
        """
        if child is parent or self.is_ancestor(child, parent):
            raise GraphError(
                f"edge {child!r} -> {parent!r} would create a cycle"
            )
        self.add_node(child)
        self.add_node(parent)
        edges = self._parents[id(child)]
        if not any(p is parent for p in edges):
            edges.append(parent)

    def parents(self, node: SyntaxNode) -> Sequence[SyntaxNode]:
        return tuple(self._parents.get(id(node), ()))

    def is_ancestor(self, candidate: SyntaxNode, node: SyntaxNode) -> bool:
        """True if ``candidate`` is reachable from ``node`` via parent edges."""
        return walk_ancestors(
            self, node,
            lambda current, _child: Walk.MATCH if current is candidate else Walk.ASCEND,
        )

    def __contains__(self, node: object) -> bool:
        return id(node) in self._nodes

    def __len__(self) -> int:
        return len(self._nodes)

    def __iter__(self) -> Iterator[SyntaxNode]:
        return iter(self._nodes.values())

    def literals(self) -> Iterator[LiteralNode]:
        """Yield literal nodes in insertion order."""
        for node in self._nodes.values():
            if isinstance(node, LiteralNode):
                yield node


# ═══════════════════════════════════════════════════════════════════════════
#  PART 4 — DAG WALK
# ═══════════════════════════════════════════════════════════════════════════

class Walk(Enum):
    """Decision a visitor returns for one (node, child) step."""
    MATCH = auto()    # this path justifies the predicate; stop everything
    PRUNE = auto()    # this path fails here; do not look above this node
    ASCEND = auto()   # undecided; continue with this node's parents


Visitor = Callable[[SyntaxNode, SyntaxNode], Walk]


def walk_ancestors(
    graph: AncestorGraph,
    origin: SyntaxNode,
    visit: Visitor,
) -> bool:
    """
    Logical OR of ``visit`` over every upward path starting at ``origin``.

    ``visit(node, child)`` is called for each ancestor ``node`` together
    with the node the walk arrived from.  Parents are explored in the order
    the graph returns them.  A ``(node, child)`` step is visited at most
    once per walk, so diamonds in the DAG cost nothing extra and the walk
    terminates even on a malformed cyclic graph.
    """
    stack: List[Tuple[SyntaxNode, SyntaxNode]] = [
        (parent, origin) for parent in reversed(list(graph.parents(origin)))
    ]
    seen: Set[Tuple[int, int]] = set()
    while stack:
        node, child = stack.pop()
        key = (id(node), id(child))
        if key in seen:
            continue
        seen.add(key)

        step = visit(node, child)
        if step is Walk.MATCH:
            return True
        if step is Walk.PRUNE:
            continue
        for parent in reversed(list(graph.parents(node))):
            stack.append((parent, node))
    return False


def iter_ancestors(graph: AncestorGraph, origin: SyntaxNode) -> Iterator[SyntaxNode]:
    """Yield every distinct ancestor of ``origin`` once, depth-first."""
    stack: List[SyntaxNode] = list(reversed(list(graph.parents(origin))))
    seen: Set[int] = set()
    while stack:
        node = stack.pop()
        if id(node) in seen:
            continue
        seen.add(id(node))
        yield node
        stack.extend(reversed(list(graph.parents(node))))


__all__ = [
    "NodeKind",
    "LiteralKind",
    "FloatPrecision",
    "LiteralOperatorKind",
    "SourceLocation",
    "SyntaxNode",
    "LiteralNode",
    "integer_literal",
    "floating_literal",
    "AncestorGraph",
    "SyntaxGraph",
    "Walk",
    "walk_ancestors",
    "iter_ancestors",
]
