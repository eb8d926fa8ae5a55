"""
magic_numbers/checkers.py
═════════════════════════

Cppcheck-addon glue around ``MagicNumbersCheck``.

Architecture
────────────

  ┌──────────────────────────────────────────────────────────┐
  │                      CheckerRunner                       │
  │   ┌──────────────────────────────────────────────────┐   │
  │   │               MagicNumbersChecker                │   │
  │   │   build_syntax_graph(cfg) → MagicNumbersCheck    │   │
  │   └────────────────────────┬─────────────────────────┘   │
  │                            │                             │
  │   ┌────────────────────────▼─────────────────────────┐   │
  │   │                SuppressionManager                │   │
  │   │   // cppcheck-suppress │ file-level │ global     │   │
  │   └────────────────────────┬─────────────────────────┘   │
  │                            │                             │
  │   ┌────────────────────────▼─────────────────────────┐   │
  │   │         Diagnostic formatter (JSON / GCC)        │   │
  │   └──────────────────────────────────────────────────┘   │
  └──────────────────────────────────────────────────────────┘

Each Checker follows a four-phase lifecycle:

  1. **configure()**        — read options, build exemption tables
  2. **collect_evidence()** — lift the configuration into an ancestor graph
  3. **diagnose()**         — classify every registered literal
  4. **report()**           — emit Diagnostics (filtered by suppressions)

License: MIT
"""

from __future__ import annotations

import json
import logging
import sys
import time
from abc import ABC, abstractmethod
from collections import defaultdict
from dataclasses import dataclass, field
from enum import Enum
from fnmatch import fnmatch
from typing import (
    Any,
    ClassVar,
    Dict,
    FrozenSet,
    Iterable,
    List,
    Optional,
    Sequence,
    Set,
    Tuple,
    Type,
)

from magic_numbers.check import CHECK_NAME, MagicNumbersCheck
from magic_numbers.cppcheck_graph import build_syntax_graph
from magic_numbers.errors import ConfigurationReporter, DumpError
from magic_numbers.options import MagicNumbersOptions
from magic_numbers.syntax import LiteralNode, SourceLocation, SyntaxGraph
from magic_numbers.verdict import Verdict

_log = logging.getLogger(__name__)

ADDON_NAME = "magic-numbers"


# ═════════════════════════════════════════════════════════════════════════
#  PART 1 — DIAGNOSTIC MODEL
# ═════════════════════════════════════════════════════════════════════════

class DiagnosticSeverity(Enum):
    """cppcheck-compatible severity levels."""
    ERROR = "error"
    WARNING = "warning"
    STYLE = "style"
    PERFORMANCE = "performance"
    PORTABILITY = "portability"
    INFORMATION = "information"


@dataclass(frozen=True)
class Diagnostic:
    """
    A single diagnostic finding, serialisable to cppcheck's addon protocol.

    Attributes
    ----------
    error_id     : "magicNumber", "nonConstantConst", ...
    message      : Human-readable description
    severity     : DiagnosticSeverity
    location     : Primary source location
    checker_name : Name of the checker that produced this
    addon        : Addon name for cppcheck protocol
    extra        : The literal's spelling, for tooling
    """
    error_id: str
    message: str
    severity: DiagnosticSeverity
    location: SourceLocation
    checker_name: str = ""
    addon: str = ADDON_NAME
    extra: str = ""

    def to_cppcheck_json(self) -> Dict[str, Any]:
        """Serialize to cppcheck's JSON addon output format."""
        return {
            "file": self.location.file,
            "linenr": self.location.line,
            "column": self.location.column,
            "severity": self.severity.value,
            "message": self.message,
            "addon": self.addon,
            "errorId": self.error_id,
            "extra": self.extra,
        }

    def to_json_str(self) -> str:
        """Single-line JSON string for cppcheck addon stdout."""
        return json.dumps(self.to_cppcheck_json())

    def to_gcc_format(self) -> str:
        """GCC-style diagnostic string: file:line:col: severity: message."""
        sev = self.severity.value
        return f"{self.location}: {sev}: {self.message} [{self.addon}-{self.error_id}]"


# ═════════════════════════════════════════════════════════════════════════
#  PART 2 — SUPPRESSION MANAGER
# ═════════════════════════════════════════════════════════════════════════

class SuppressionManager:
    """
    Manages diagnostic suppressions from multiple sources.

    Sources:
      1. Inline comments:  ``// cppcheck-suppress magicNumber``
         (cppcheck parses these into ``cfg.suppressions``)
      2. File-level suppressions (passed programmatically)
      3. Global suppressions (command line)

    Usage
    -----
    >>> sm = SuppressionManager()
    >>> sm.add_global_suppression("nonConstantConst")
    >>> sm.add_file_suppression("magicNumber", "tests/*")
    """

    def __init__(self) -> None:
        # (file, line) → error_ids suppressed at that location
        self._inline: Dict[Tuple[str, int], Set[str]] = defaultdict(set)
        # file pattern → error_ids
        self._file_level: Dict[str, Set[str]] = defaultdict(set)
        self._global: Set[str] = set()

    def load_inline_suppressions(self, cfg: Any) -> None:
        for supp in getattr(cfg, "suppressions", None) or []:
            error_id = getattr(supp, "errorId", None)
            file = getattr(supp, "fileName", "") or ""
            line = getattr(supp, "lineNumber", 0) or 0
            if not error_id:
                continue
            if file and line:
                self._inline[(file, int(line))].add(error_id)
            elif file:
                self._file_level[file].add(error_id)
            else:
                self._global.add(error_id)

    def add_file_suppression(self, error_id: str, file_pattern: str) -> None:
        """Suppress ``error_id`` in files matching ``file_pattern``."""
        self._file_level[file_pattern].add(error_id)

    def add_global_suppression(self, error_id: str) -> None:
        self._global.add(error_id)

    def is_suppressed(self, diag: Diagnostic) -> bool:
        eid = diag.error_id
        if eid in self._global or "*" in self._global:
            return True

        loc = diag.location
        # Exact line, or the line above for a preceding-line comment.
        for line_offset in (0, 1):
            ids = self._inline.get((loc.file, loc.line - line_offset), set())
            if eid in ids or "*" in ids:
                return True

        for pattern, ids in self._file_level.items():
            if eid not in ids and "*" not in ids:
                continue
            if pattern == loc.file or loc.file.endswith(pattern) or fnmatch(loc.file, pattern):
                return True
        return False

    def filter_diagnostics(self, diagnostics: Iterable[Diagnostic]) -> List[Diagnostic]:
        """Return only non-suppressed diagnostics."""
        return [d for d in diagnostics if not self.is_suppressed(d)]


# ═════════════════════════════════════════════════════════════════════════
#  PART 3 — CHECKER BASE CLASS
# ═════════════════════════════════════════════════════════════════════════

@dataclass
class CheckerContext:
    """
    Shared context passed to every checker during execution.

    Attributes
    ----------
    cfg          : cppcheckdata.Configuration
    suppressions : SuppressionManager
    analyses     : pre-computed analysis results (keyed by name)
    options      : user-provided options dict
    stats        : mutable dict for timing / counting statistics
    """
    cfg: Any
    suppressions: SuppressionManager = field(default_factory=SuppressionManager)
    analyses: Dict[str, Any] = field(default_factory=dict)
    options: Dict[str, Any] = field(default_factory=dict)
    stats: Dict[str, Any] = field(default_factory=dict)

    def get_analysis(self, name: str) -> Any:
        return self.analyses.get(name)

    def set_analysis(self, name: str, result: Any) -> None:
        self.analyses[name] = result

    def get_option(self, key: str, default: Any = None) -> Any:
        return self.options.get(key, default)


class Checker(ABC):
    """
    Abstract base class for checkers.

    Subclass Contract
    ─────────────────
      - Override ``name``, ``description``, ``error_ids``
      - Implement ``collect_evidence()`` and ``diagnose()``
      - Optionally override ``configure()`` for custom setup
    """

    name: ClassVar[str] = "base-checker"
    description: ClassVar[str] = ""
    error_ids: ClassVar[FrozenSet[str]] = frozenset()
    default_severity: ClassVar[DiagnosticSeverity] = DiagnosticSeverity.STYLE

    def __init__(self) -> None:
        self._diagnostics: List[Diagnostic] = []

    @property
    def diagnostics(self) -> List[Diagnostic]:
        return list(self._diagnostics)

    def configure(self, ctx: CheckerContext) -> None:
        pass

    @abstractmethod
    def collect_evidence(self, ctx: CheckerContext) -> None:
        ...

    @abstractmethod
    def diagnose(self, ctx: CheckerContext) -> None:
        ...

    def report(self, ctx: CheckerContext) -> List[Diagnostic]:
        """Final diagnostics, filtered by suppressions."""
        return ctx.suppressions.filter_diagnostics(self._diagnostics)

    def _emit(
        self,
        error_id: str,
        message: str,
        location: SourceLocation,
        severity: Optional[DiagnosticSeverity] = None,
        extra: str = "",
    ) -> None:
        self._diagnostics.append(Diagnostic(
            error_id=error_id,
            message=message,
            severity=severity or self.default_severity,
            location=location,
            checker_name=self.name,
            extra=extra,
        ))

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} '{self.name}'>"


# ═════════════════════════════════════════════════════════════════════════
#  PART 4 — MAGIC NUMBERS CHECKER
# ═════════════════════════════════════════════════════════════════════════

class MagicNumbersChecker(Checker):
    """
    Reports numeric literals that are not named constants.

    Context options
    ───────────────
      ``options``    MagicNumbersOptions (defaults when absent)
      ``cplusplus``  bool; C when absent
      ``reporter``   ConfigurationReporter shared across runs, so an
                     invalid option is reported once
    """

    name: ClassVar[str] = CHECK_NAME
    description: ClassVar[str] = "Magic numbers (literals outside constant definitions)"
    error_ids: ClassVar[FrozenSet[str]] = frozenset({
        Verdict.MAGIC_NUMBER.value,
        Verdict.NON_CONSTANT_CONST.value,
    })

    def __init__(self) -> None:
        super().__init__()
        self._check: Optional[MagicNumbersCheck] = None
        self._graph: Optional[SyntaxGraph] = None
        self._literals: List[LiteralNode] = []

    def configure(self, ctx: CheckerContext) -> None:
        options = ctx.get_option("options") or MagicNumbersOptions()
        cplusplus = bool(ctx.get_option("cplusplus", False))
        check = ctx.get_analysis("magic_numbers_check")
        if (check is None or check.options != options
                or check.cplusplus != cplusplus):
            check = MagicNumbersCheck(
                options, cplusplus=cplusplus,
                reporter=ctx.get_option("reporter"),
            )
            ctx.set_analysis("magic_numbers_check", check)
        self._check = check

    def collect_evidence(self, ctx: CheckerContext) -> None:
        self._graph = build_syntax_graph(ctx.cfg)
        ctx.set_analysis("syntax_graph", self._graph)
        kinds = self._check.registered_kinds()
        self._literals = [
            lit for lit in self._graph.literals() if lit.literal_kind in kinds
        ]
        ctx.stats["literals"] = ctx.stats.get("literals", 0) + len(self._literals)

    def diagnose(self, ctx: CheckerContext) -> None:
        for literal in self._literals:
            result = self._check.classify(literal, self._graph)
            if result.suppressed:
                _log.debug("%s at %s suppressed: %s",
                           literal.spelling, literal.location, result.reason.value)
                continue
            self._emit(
                error_id=result.verdict.value,
                message=result.render(),
                location=literal.location,
                extra=literal.spelling,
            )


# ═════════════════════════════════════════════════════════════════════════
#  PART 5 — CHECKER RUNNER
# ═════════════════════════════════════════════════════════════════════════

@dataclass
class CheckerRunResults:
    """Diagnostics and statistics of one or more checker runs."""
    diagnostics: List[Diagnostic] = field(default_factory=list)
    stats: Dict[str, Any] = field(default_factory=dict)
    checker_names: List[str] = field(default_factory=list)

    @property
    def total_count(self) -> int:
        return len(self.diagnostics)

    def by_error_id(self, error_id: str) -> List[Diagnostic]:
        return [d for d in self.diagnostics if d.error_id == error_id]

    def by_file(self, file: str) -> List[Diagnostic]:
        return [d for d in self.diagnostics if d.location.file == file]

    def to_json_lines(self) -> str:
        return "\n".join(d.to_json_str() for d in self.diagnostics)

    def to_gcc_format(self) -> str:
        return "\n".join(d.to_gcc_format() for d in self.diagnostics)

    def summary(self) -> str:
        counts = defaultdict(int)
        for d in self.diagnostics:
            counts[d.error_id] += 1
        lines = [f"Checker run complete: {self.total_count} diagnostics"]
        for error_id in sorted(counts):
            lines.append(f"  {error_id}: {counts[error_id]}")
        elapsed = self.stats.get("elapsed_ms")
        if elapsed is not None:
            lines.append(f"  elapsed: {elapsed:.1f}ms")
        return "\n".join(lines)


class CheckerRunner:
    """
    Runs checkers against cppcheck configurations.

    Usage
    -----
    >>> runner = CheckerRunner(options={"cplusplus": False})
    >>> results = runner.run_all_configurations(data)
    >>> print(results.summary())
    """

    def __init__(
        self,
        checkers: Sequence[Type[Checker]] = (MagicNumbersChecker,),
        suppressions: Optional[SuppressionManager] = None,
        options: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.checkers = list(checkers)
        self.suppressions = suppressions or SuppressionManager()
        self.options = options or {}
        self._analyses: Dict[str, Any] = {}

    def run(self, cfg: Any) -> CheckerRunResults:
        results = CheckerRunResults()
        self.suppressions.load_inline_suppressions(cfg)
        ctx = CheckerContext(
            cfg=cfg,
            suppressions=self.suppressions,
            analyses=self._analyses,
            options=self.options,
        )

        t0 = time.monotonic()
        for cls in self.checkers:
            checker = cls()
            results.checker_names.append(cls.name)
            try:
                checker.configure(ctx)
                checker.collect_evidence(ctx)
                checker.diagnose(ctx)
                diags = checker.report(ctx)
            except Exception as exc:
                # One broken configuration must not hide the others.
                _log.exception("checker %s failed", cls.name)
                diags = [Diagnostic(
                    error_id="checkerInternalError",
                    message=f"Checker '{cls.name}' failed: {exc}",
                    severity=DiagnosticSeverity.INFORMATION,
                    location=SourceLocation(),
                    checker_name=cls.name,
                )]
            results.diagnostics.extend(diags)
        results.stats["elapsed_ms"] = (time.monotonic() - t0) * 1000.0
        results.stats.update(ctx.stats)
        return results

    def run_all_configurations(self, data: Any) -> CheckerRunResults:
        """Run across all configurations of a CppcheckData dump."""
        combined = CheckerRunResults()
        for cfg in getattr(data, "configurations", None) or []:
            partial = self.run(cfg)
            combined.diagnostics.extend(partial.diagnostics)
            for key, val in partial.stats.items():
                combined.stats[key] = combined.stats.get(key, 0) + val
            for name in partial.checker_names:
                if name not in combined.checker_names:
                    combined.checker_names.append(name)
        return combined


# ═════════════════════════════════════════════════════════════════════════
#  PART 6 — CONVENIENCE ENTRY POINT FOR CPPCHECK ADDONS
# ═════════════════════════════════════════════════════════════════════════

def load_dump(dump_file: str) -> Any:
    """Parse a ``cppcheck --dump`` file with the bundled cppcheckdata module."""
    import cppcheckdata  # bundled with Cppcheck, not on PyPI

    try:
        return cppcheckdata.parsedump(dump_file)
    except Exception as exc:
        raise DumpError(dump_file, exc) from exc


def write_results(results: CheckerRunResults, output: str = "json") -> None:
    if output == "json":
        for diag in results.diagnostics:
            sys.stdout.write(diag.to_json_str() + "\n")
    elif output == "gcc":
        for diag in results.diagnostics:
            sys.stderr.write(diag.to_gcc_format() + "\n")
    else:
        sys.stdout.write(results.summary() + "\n")


def run_addon(
    dump_files: Sequence[str],
    options: Optional[MagicNumbersOptions] = None,
    cplusplus: Optional[bool] = None,
    output: str = "json",
    suppress: Optional[Sequence[str]] = None,
) -> int:
    """
    Run the magic-numbers checker over dump files.

    ``cplusplus=None`` picks the language from each dump's source suffix.

    Returns
    -------
    Exit code: 0 = nothing reported, 1 = diagnostics emitted,
    2 = a dump could not be processed.
    """
    from magic_numbers.cppcheck_graph import is_cplusplus_source

    sm = SuppressionManager()
    for eid in suppress or ():
        sm.add_global_suppression(eid)
    reporter = ConfigurationReporter()

    exit_code = 0
    for dump_file in dump_files:
        try:
            data = load_dump(dump_file)
        except ImportError:
            sys.stderr.write("ERROR: cppcheckdata module not found\n")
            return 2
        except DumpError as exc:
            sys.stderr.write(f"ERROR: {exc}\n")
            exit_code = 2
            continue

        lang_cpp = is_cplusplus_source(dump_file) if cplusplus is None else cplusplus
        runner = CheckerRunner(
            suppressions=sm,
            options={
                "options": options or MagicNumbersOptions(),
                "cplusplus": lang_cpp,
                "reporter": reporter,
            },
        )
        results = runner.run_all_configurations(data)
        write_results(results, output)
        if results.total_count and exit_code == 0:
            exit_code = 1
    return exit_code


__all__ = [
    "ADDON_NAME",
    "Diagnostic",
    "DiagnosticSeverity",
    "SuppressionManager",
    "Checker",
    "CheckerContext",
    "MagicNumbersChecker",
    "CheckerRunner",
    "CheckerRunResults",
    "load_dump",
    "write_results",
    "run_addon",
]
