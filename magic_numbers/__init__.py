"""
magic_numbers — Magic-Number Lint Engine for Cppcheck Addons
============================================================

Decides, for every integer and floating-point literal in a translation
unit, whether it is a "magic number" that should be replaced by a named
constant.  The engine works on a small ancestor graph (``SyntaxGraph``)
so that it can be driven by any front end; the bundled front end lifts a
``cppcheckdata`` configuration into that graph.

Quick start
-----------
>>> from magic_numbers import MagicNumbersCheck, SyntaxGraph, integer_literal
>>> graph = SyntaxGraph()
>>> lit = graph.add_node(integer_literal(42))
>>> MagicNumbersCheck().classify(lit, graph).render()
'42 is a magic number; consider replacing it with a named constant'

Package layout
--------------
::

    magic_numbers/
    ├── __init__.py            ← this file
    ├── __main__.py            command line addon
    ├── errors.py              configuration diagnostics, exceptions
    ├── syntax.py              nodes, ancestor graph, walks
    ├── options.py             options, list parsing, exemption tables
    ├── value_exemption.py     zero / powers of two / ignored values
    ├── funcarg_exemption.py   ignored (function, position, base) arguments
    ├── usage.py               const / constexpr / enum contexts
    ├── verdict.py             decision order and messages
    ├── check.py               MagicNumbersCheck facade
    ├── cppcheck_graph.py      cppcheckdata → SyntaxGraph
    └── checkers.py            checker lifecycle, suppressions, run_addon
"""

from __future__ import annotations

import logging

from magic_numbers.check import CHECK_NAME, MagicNumbersCheck, ReportSink
from magic_numbers.errors import (
    ConfigErrorKind,
    ConfigurationDiagnostic,
    ConfigurationReporter,
    DumpError,
    GraphError,
    MagicNumbersError,
)
from magic_numbers.options import (
    Base,
    ConfigParser,
    ExemptionTables,
    IgnoredFunctionArg,
    MagicNumbersOptions,
    build_exemption_tables,
    parse_string_list,
)
from magic_numbers.syntax import (
    FloatPrecision,
    LiteralKind,
    LiteralNode,
    LiteralOperatorKind,
    NodeKind,
    SourceLocation,
    SyntaxGraph,
    SyntaxNode,
    Walk,
    floating_literal,
    integer_literal,
    walk_ancestors,
)
from magic_numbers.usage import ConstCategory, UsageClassifier, UsageInfo
from magic_numbers.verdict import SuppressionReason, Verdict, VerdictResult

__version__ = "0.1.0"
__license__ = "MIT"

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "__version__",
    # check
    "CHECK_NAME",
    "MagicNumbersCheck",
    "ReportSink",
    # errors
    "ConfigErrorKind",
    "ConfigurationDiagnostic",
    "ConfigurationReporter",
    "DumpError",
    "GraphError",
    "MagicNumbersError",
    # options
    "Base",
    "ConfigParser",
    "ExemptionTables",
    "IgnoredFunctionArg",
    "MagicNumbersOptions",
    "build_exemption_tables",
    "parse_string_list",
    # syntax
    "FloatPrecision",
    "LiteralKind",
    "LiteralNode",
    "LiteralOperatorKind",
    "NodeKind",
    "SourceLocation",
    "SyntaxGraph",
    "SyntaxNode",
    "Walk",
    "floating_literal",
    "integer_literal",
    "walk_ancestors",
    # usage / verdict
    "ConstCategory",
    "UsageClassifier",
    "UsageInfo",
    "SuppressionReason",
    "Verdict",
    "VerdictResult",
]
