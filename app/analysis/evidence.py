"""Evidence-gated field validation.

A rule receives the value the model reported and the evidence snippet it
claims to have read, and returns the value when the evidence supports it or
None otherwise. Rules look at the evidence, never at the value: a plausible
value without matching text on the page is treated as fabricated.
"""

import re
from collections.abc import Callable, Mapping

from app.analysis.fields import FieldName

ValidationRule = Callable[[str, str], str | None]

_NON_DIGITS_RE = re.compile(r"\D")
_NON_ALNUM_RE = re.compile(r"[^A-Za-z0-9]")
_YEAR_RE = re.compile(r"(?<!\d)(?:19|20)\d{2}(?!\d)")
_DIGIT_RE = re.compile(r"\d")


def exact_digit_count(count: int) -> ValidationRule:
    def rule(value: str, evidence: str) -> str | None:
        return value if len(_NON_DIGITS_RE.sub("", evidence)) == count else None

    return rule


def alnum_length_between(minimum: int, maximum: int) -> ValidationRule:
    def rule(value: str, evidence: str) -> str | None:
        length = len(_NON_ALNUM_RE.sub("", evidence))
        return value if minimum <= length <= maximum else None

    return rule


def matches(pattern: re.Pattern[str]) -> ValidationRule:
    def rule(value: str, evidence: str) -> str | None:
        return value if pattern.search(evidence) else None

    return rule


def contains(fragment: str) -> ValidationRule:
    def rule(value: str, evidence: str) -> str | None:
        return value if fragment in evidence else None

    return rule


def min_length(length: int) -> ValidationRule:
    def rule(value: str, evidence: str) -> str | None:
        return value if len(evidence.strip()) >= length else None

    return rule


DEFAULT_RULES: Mapping[FieldName, ValidationRule] = {
    FieldName.CPF: exact_digit_count(11),
    FieldName.CHASSI: alnum_length_between(11, 20),
    FieldName.ANO: matches(_YEAR_RE),
    FieldName.EMAIL: contains("@"),
    FieldName.TELEFONE: matches(_DIGIT_RE),
    FieldName.PLACA: matches(_DIGIT_RE),
}

FALLBACK_RULE: ValidationRule = min_length(3)


class EvidenceRuleRegistry:
    """Maps each field to its validation rule; unmapped fields use the fallback."""

    def __init__(
        self,
        rules: Mapping[FieldName, ValidationRule] | None = None,
        fallback: ValidationRule = FALLBACK_RULE,
    ) -> None:
        self._rules: dict[FieldName, ValidationRule] = dict(
            DEFAULT_RULES if rules is None else rules
        )
        self._fallback = fallback

    def register(self, name: FieldName, rule: ValidationRule) -> None:
        self._rules[name] = rule

    def rule_for(self, name: FieldName) -> ValidationRule:
        return self._rules.get(name, self._fallback)

    def validate(self, name: FieldName, value: str | None, evidence: str | None) -> str | None:
        """Return the value if its evidence passes the field's rule, else None."""
        if value is None or not evidence or not evidence.strip():
            return None
        return self.rule_for(name)(value, evidence)
