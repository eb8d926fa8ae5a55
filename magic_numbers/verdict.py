"""
magic_numbers/verdict.py
════════════════════════

Final decision for one literal occurrence.

Decision order (first match wins)
─────────────────────────────────
  0. kind not registered (floats with IgnoreAllFloatingPointValues)  → suppressed
  1. literal comes from a macro expansion                            → suppressed
  2. ignored value                                                   → suppressed
  3. TRUE_CONST, or RUNTIME_CONST inside an initializer list         → suppressed
  4. integers only: synthetic location, bit-field width,
     ignored function argument                                       → suppressed
  5. RUNTIME_CONST                                   → non-constant-const warning
  6. otherwise                                       → magic-number warning

License: MIT
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import FrozenSet, Optional, Tuple

from magic_numbers.funcarg_exemption import FunctionArgExemptionMatcher
from magic_numbers.options import MagicNumbersOptions
from magic_numbers.syntax import AncestorGraph, LiteralKind, LiteralNode
from magic_numbers.usage import ConstCategory, UsageClassifier
from magic_numbers.value_exemption import ValueExemptionMatcher


MAGIC_NUMBER_MESSAGE = (
    "{0} is a magic number; consider replacing it with a named constant"
)
NON_CONSTANT_CONST_MESSAGES = {
    LiteralKind.INTEGER: (
        "'const' in C is not a compile-time constant; consider using an "
        "enum for integer constants"
    ),
    LiteralKind.FLOATING: (
        "'const' in C is not a compile-time constant; consider using a "
        "#define for floating-point constants"
    ),
}


class Verdict(Enum):
    SUPPRESSED = "suppressed"
    MAGIC_NUMBER = "magicNumber"
    NON_CONSTANT_CONST = "nonConstantConst"


class SuppressionReason(Enum):
    UNREGISTERED_KIND = "unregistered-kind"
    MACRO = "macro"
    IGNORED_VALUE = "ignored-value"
    CONSTANT = "constant"
    SYNTHETIC = "synthetic"
    BIT_FIELD_WIDTH = "bit-field-width"
    FUNCTION_ARG = "function-arg"


@dataclass(frozen=True)
class VerdictResult:
    """
    Outcome for one literal.

    ``message`` is a template whose ``{0}``, ``{1}``... placeholders are
    filled from ``substitutions``; both are empty for suppressed literals.
    """
    verdict: Verdict
    reason: Optional[SuppressionReason] = None
    category: ConstCategory = ConstCategory.NONE
    message: str = ""
    substitutions: Tuple[str, ...] = ()

    @property
    def suppressed(self) -> bool:
        return self.verdict is Verdict.SUPPRESSED

    def render(self) -> str:
        return self.message.format(*self.substitutions)


def _suppressed(
    reason: SuppressionReason,
    category: ConstCategory = ConstCategory.NONE,
) -> VerdictResult:
    return VerdictResult(Verdict.SUPPRESSED, reason=reason, category=category)


class VerdictPolicy:
    """Runs the exemption matchers in order and picks the diagnostic."""

    def __init__(
        self,
        options: MagicNumbersOptions,
        values: ValueExemptionMatcher,
        function_args: FunctionArgExemptionMatcher,
        usage: UsageClassifier,
    ) -> None:
        self.options = options
        self.values = values
        self.function_args = function_args
        self.usage = usage

    @property
    def registered_kinds(self) -> FrozenSet[LiteralKind]:
        if self.options.ignore_all_floating_point_values:
            return frozenset({LiteralKind.INTEGER})
        return frozenset({LiteralKind.INTEGER, LiteralKind.FLOATING})

    def decide(self, literal: LiteralNode, graph: AncestorGraph) -> VerdictResult:
        if literal.literal_kind not in self.registered_kinds:
            return _suppressed(SuppressionReason.UNREGISTERED_KIND)

        if literal.in_macro_expansion:
            return _suppressed(SuppressionReason.MACRO)

        if self.values.is_ignored_value(literal):
            return _suppressed(SuppressionReason.IGNORED_VALUE)

        info = self.usage.get_usage_info(literal, graph)
        if (info.category is ConstCategory.TRUE_CONST
                or (info.category is ConstCategory.RUNTIME_CONST
                    and info.is_used_in_initializer_list)):
            return _suppressed(SuppressionReason.CONSTANT, info.category)

        if literal.is_integer:
            if self.usage.is_synthetic(literal):
                return _suppressed(SuppressionReason.SYNTHETIC, info.category)
            if (self.options.ignore_bit_fields_widths
                    and self.usage.is_bit_field_width(literal, graph)):
                return _suppressed(SuppressionReason.BIT_FIELD_WIDTH, info.category)
            if self.function_args.is_ignored_function_arg(literal, graph):
                return _suppressed(SuppressionReason.FUNCTION_ARG, info.category)

        if info.category is ConstCategory.RUNTIME_CONST:
            return VerdictResult(
                Verdict.NON_CONSTANT_CONST,
                category=info.category,
                message=NON_CONSTANT_CONST_MESSAGES[literal.literal_kind],
            )

        return VerdictResult(
            Verdict.MAGIC_NUMBER,
            category=info.category,
            message=MAGIC_NUMBER_MESSAGE,
            substitutions=(literal.spelling,),
        )


__all__ = [
    "Verdict",
    "SuppressionReason",
    "VerdictResult",
    "VerdictPolicy",
    "MAGIC_NUMBER_MESSAGE",
    "NON_CONSTANT_CONST_MESSAGES",
]
