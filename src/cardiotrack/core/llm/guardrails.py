"""Guardrail enforcement for narrative insight text.

Insights are observations, never diagnoses or prescriptions. Sentences that
read like either are redacted before the text reaches the user.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)

REDACTION_NOTE = "[Removed: contains medical advice beyond general observations]"

PROHIBITED_PATTERNS: dict[str, tuple[str, ...]] = {
    "diagnosis": (
        "you have been diagnosed",
        "you have hypertension",
        "you are suffering from",
        "you have a condition",
    ),
    "prescription": (
        "stop taking your medication",
        "increase your dose",
        "decrease your dose",
        "i prescribe",
    ),
    "prediction": (
        "you will develop",
        "you will have a stroke",
        "you will have a heart attack",
    ),
}


@dataclass
class GuardrailCheck:
    """Result of checking insight text for prohibited phrasing."""

    passed: bool
    matched: list[str] = field(default_factory=list)

    @property
    def flags(self) -> list[str]:
        return [f"prohibited_pattern_detected: {phrase}" for phrase in self.matched]


def check_guardrails(content: str) -> GuardrailCheck:
    lowered = content.lower()
    matched = [
        phrase
        for phrases in PROHIBITED_PATTERNS.values()
        for phrase in phrases
        if phrase in lowered
    ]
    if matched:
        logger.warning("Guardrail matches in insight text: %s", matched)
    return GuardrailCheck(passed=not matched, matched=matched)


def sanitize_content(content: str, check: GuardrailCheck) -> str:
    """Replace every sentence containing a matched phrase with a redaction note."""
    if check.passed:
        return content
    sanitized = content
    for phrase in check.matched:
        pattern = re.compile(
            r"[^.!?\n]*" + re.escape(phrase) + r"[^.!?\n]*[.!?]?",
            re.IGNORECASE,
        )
        sanitized = pattern.sub(REDACTION_NOTE, sanitized)
    return sanitized
