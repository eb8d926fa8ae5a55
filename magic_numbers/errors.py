# magic_numbers/errors.py
"""
Error types for the magic-number check.

Two families of problems exist:

┌──────────────────────────────────────────────────────────────────────┐
│  ConfigurationDiagnostic (data, never raised)                        │
│    malformed option entries; the entry is skipped and the engine     │
│    keeps the valid remainder of the table                            │
├──────────────────────────────────────────────────────────────────────┤
│  MagicNumbersError (exceptions, host side only)                      │
│  ├── GraphError       - an ancestor edge would close a cycle         │
│  └── DumpError        - a dump file could not be loaded              │
└──────────────────────────────────────────────────────────────────────┘

Classifying a literal never raises: a walk that finds nothing simply
yields "no exemption".
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum, unique
from typing import Callable, List, Optional, Set

# Configuration warnings are logged under the options module.
_config_log = logging.getLogger("magic_numbers.options")


# ═══════════════════════════════════════════════════════════════════════════
# CONFIGURATION DIAGNOSTICS
# ═══════════════════════════════════════════════════════════════════════════

@unique
class ConfigErrorKind(Enum):
    """What was wrong with an option value."""
    INVALID_INTEGER = "invalid-integer"
    INVALID_FLOAT = "invalid-float"
    INVALID_BOOLEAN = "invalid-boolean"
    INVALID_ARG_POS = "invalid-arg-pos"
    INVALID_BASE_CHAR = "invalid-base-char"
    INVALID_LIST_LENGTH = "invalid-list-length"


@dataclass(frozen=True)
class ConfigurationDiagnostic:
    """One complaint about the check's configuration."""
    option: str
    message: str
    kind: ConfigErrorKind

    def __str__(self) -> str:
        return f"{self.option}: {self.message}"


ConfigSink = Callable[[ConfigurationDiagnostic], None]


def log_configuration_diagnostic(diag: ConfigurationDiagnostic) -> None:
    """Default sink: a warning on the ``magic_numbers.options`` logger."""
    _config_log.warning("invalid configuration: %s", diag)


class ConfigurationReporter:
    """
    Collects configuration diagnostics and forwards each distinct one once.

    Identical messages (same option, same text) are forwarded a single
    time, so an invalid base character repeated inside one item is
    reported once.
    """

    def __init__(self, sink: Optional[ConfigSink] = None) -> None:
        self._sink = sink or log_configuration_diagnostic
        self._seen: Set[ConfigurationDiagnostic] = set()
        self.diagnostics: List[ConfigurationDiagnostic] = []

    def report(self, option: str, kind: ConfigErrorKind, message: str) -> None:
        diag = ConfigurationDiagnostic(option=option, message=message, kind=kind)
        if diag in self._seen:
            return
        self._seen.add(diag)
        self.diagnostics.append(diag)
        self._sink(diag)

    def __len__(self) -> int:
        return len(self.diagnostics)


# ═══════════════════════════════════════════════════════════════════════════
# EXCEPTIONS
# ═══════════════════════════════════════════════════════════════════════════

class MagicNumbersError(Exception):
    """Base exception for this package."""


class GraphError(MagicNumbersError):
    """The host tried to build an ancestor graph that is not a DAG."""


class DumpError(MagicNumbersError):
    """A cppcheck dump file could not be loaded."""

    def __init__(self, path: str, cause: Optional[BaseException] = None) -> None:
        detail = f": {cause}" if cause is not None else ""
        super().__init__(f"failed to load dump '{path}'{detail}")
        self.path = path
        self.cause = cause


__all__ = [
    "ConfigErrorKind",
    "ConfigurationDiagnostic",
    "ConfigSink",
    "ConfigurationReporter",
    "log_configuration_diagnostic",
    "MagicNumbersError",
    "GraphError",
    "DumpError",
]
