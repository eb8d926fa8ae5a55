"""
magic_numbers/check.py
══════════════════════

``MagicNumbersCheck`` — the object a host creates once and then feeds
literal occurrences to.

    check = MagicNumbersCheck(MagicNumbersOptions(), cplusplus=False)
    for literal in graph.literals():
        if literal.literal_kind in check.registered_kinds():
            check.check(literal, graph, report)

Construction parses the options into exemption tables; after that the
check holds no mutable state, so one instance can serve any number of
translation units.
"""

from __future__ import annotations

import logging
from typing import Callable, Dict, FrozenSet, List, Optional, Tuple

from magic_numbers.errors import ConfigSink, ConfigurationDiagnostic, ConfigurationReporter
from magic_numbers.funcarg_exemption import FunctionArgExemptionMatcher
from magic_numbers.options import ConfigParser, ExemptionTables, MagicNumbersOptions
from magic_numbers.syntax import AncestorGraph, LiteralKind, LiteralNode, SourceLocation
from magic_numbers.usage import UsageClassifier
from magic_numbers.value_exemption import ValueExemptionMatcher
from magic_numbers.verdict import VerdictPolicy, VerdictResult

_log = logging.getLogger(__name__)

CHECK_NAME = "caos-magic-numbers"

# report(location, message template, substitutions)
ReportSink = Callable[[SourceLocation, str, Tuple[str, ...]], None]


class MagicNumbersCheck:
    """
    Parameters
    ----------
    options   : rule options; defaults apply when omitted
    cplusplus : language of the analysed code (C++ const is compile-time)
    sink      : receives configuration diagnostics; logs them by default
    reporter  : an existing reporter to continue (takes precedence over sink)
    """

    def __init__(
        self,
        options: Optional[MagicNumbersOptions] = None,
        cplusplus: bool = False,
        sink: Optional[ConfigSink] = None,
        reporter: Optional[ConfigurationReporter] = None,
    ) -> None:
        self.options = options or MagicNumbersOptions()
        self.cplusplus = cplusplus
        self._reporter = reporter or ConfigurationReporter(sink)
        self.tables: ExemptionTables = ConfigParser(
            self.options, reporter=self._reporter,
        ).parse()
        self.policy = VerdictPolicy(
            self.options,
            values=ValueExemptionMatcher(self.options, self.tables),
            function_args=FunctionArgExemptionMatcher(self.tables),
            usage=UsageClassifier(cplusplus=cplusplus),
        )
        _log.debug(
            "%s configured: %d integer, %d float, %d function-arg exemptions",
            CHECK_NAME, len(self.tables.integers), len(self.tables.doubles),
            len(self.tables.function_args),
        )

    @classmethod
    def from_mapping(
        cls,
        options: Dict[str, str],
        cplusplus: bool = False,
        sink: Optional[ConfigSink] = None,
    ) -> "MagicNumbersCheck":
        """Build from clang-tidy style ``{OptionName: value}`` settings."""
        reporter = ConfigurationReporter(sink)
        parsed = MagicNumbersOptions.from_mapping(options, reporter)
        return cls(parsed, cplusplus=cplusplus, reporter=reporter)

    @property
    def configuration_diagnostics(self) -> List[ConfigurationDiagnostic]:
        return list(self._reporter.diagnostics)

    def store_options(self) -> Dict[str, str]:
        return self.options.to_mapping()

    def registered_kinds(self) -> FrozenSet[LiteralKind]:
        """Literal kinds the host should hand to ``check``."""
        return self.policy.registered_kinds

    def classify(self, literal: LiteralNode, graph: AncestorGraph) -> VerdictResult:
        return self.policy.decide(literal, graph)

    def check(
        self,
        literal: LiteralNode,
        graph: AncestorGraph,
        report: ReportSink,
    ) -> VerdictResult:
        """Classify ``literal`` and forward any diagnostic to ``report``."""
        result = self.classify(literal, graph)
        if not result.suppressed:
            report(literal.location, result.message, result.substitutions)
        return result


__all__ = ["CHECK_NAME", "MagicNumbersCheck", "ReportSink"]
