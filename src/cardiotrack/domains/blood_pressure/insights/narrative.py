"""Narrative trend insight: a short LLM-written summary of recent readings.

Advisory only: the result is prose for display and never feeds back into
the record list or the analytics.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import tzinfo

from cardiotrack.core.llm.client import LLMClient
from cardiotrack.core.storage.models import Observation
from cardiotrack.domains.blood_pressure.domain_logic.formatting import format_date

logger = logging.getLogger(__name__)

INSIGHT_RECORD_LIMIT = 20

NO_DATA_MESSAGE = "No data available to analyze."
EMPTY_RESPONSE_MESSAGE = "Could not generate analysis."
FAILURE_MESSAGE = "Unable to analyze trends at this moment. Please check your internet connection."

INSIGHT_SYSTEM_MESSAGE = (
    "You are a professional medical assistant. Be concise, friendly, and cautious. "
    "Do not provide medical diagnosis, only observations."
)

INSIGHT_INSTRUCTIONS = """\
You are a supportive cardiovascular health assistant.
Analyze the following blood pressure and heart rate readings.
Identify any trends (rising, falling, stable).
Check if the values are generally within normal, elevated, or hypertensive ranges (based on standard guidelines).
Provide a concise, encouraging summary (max 3 sentences) and 1 specific actionable health tip.

Data:
{data}"""


@dataclass(frozen=True)
class InsightOutcome:
    """Text to display, and whether it is a failure fallback."""

    text: str
    failed: bool = False
    record_count: int = 0


def summarize_records(
    records: Sequence[Observation],
    limit: int = INSIGHT_RECORD_LIMIT,
    tz: tzinfo | None = None,
) -> str:
    """One line per reading for the ``limit`` most recent readings."""
    return "\n".join(
        f"Date: {format_date(r.timestamp, tz)}, BP: {r.systolic}/{r.diastolic}, Pulse: {r.pulse}"
        for r in records[:limit]
    )


class NarrativeInsightClient:
    """Sends a bounded window of recent readings to the LLM and returns prose.

    Usage::

        insights = NarrativeInsightClient(LLMClient(provider, "anthropic"))
        outcome = await insights.analyze(store.list())
    """

    def __init__(
        self,
        llm_client: LLMClient,
        *,
        limit: int = INSIGHT_RECORD_LIMIT,
        tz: tzinfo | None = None,
    ) -> None:
        self._llm = llm_client
        self._limit = limit
        self._tz = tz

    @property
    def provider_name(self) -> str:
        return self._llm.provider_name

    async def analyze(self, records: Sequence[Observation]) -> InsightOutcome:
        """Never raises; failures come back as the fixed fallback text."""
        if not records:
            return InsightOutcome(text=NO_DATA_MESSAGE)

        window = list(records[: self._limit])
        prompt = INSIGHT_INSTRUCTIONS.format(data=summarize_records(window, self._limit, self._tz))

        start = time.monotonic()
        try:
            response = await self._llm.invoke(
                system_message=INSIGHT_SYSTEM_MESSAGE,
                user_message=prompt,
            )
        except Exception as exc:
            logger.error(
                "Insight request failed after %.0fms: %s",
                (time.monotonic() - start) * 1000,
                type(exc).__name__,
            )
            return InsightOutcome(text=FAILURE_MESSAGE, failed=True, record_count=len(window))

        text = response.content.strip()
        return InsightOutcome(text=text or EMPTY_RESPONSE_MESSAGE, record_count=len(window))
