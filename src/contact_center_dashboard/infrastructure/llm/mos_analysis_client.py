"""LLM-backed analysis client producing forensic narratives for MOS series."""

from __future__ import annotations

import json
from collections.abc import Sequence
from typing import Protocol

from pydantic import ValidationError

from contact_center_dashboard.application.dto.analysis_models import (
    ForensicAnalysisResponse,
    MosSamplePayload,
)
from contact_center_dashboard.application.ports.analysis_client_port import MosSample
from contact_center_dashboard.application.ports.remote_errors import TransportError

ANALYSIS_RESPONSE_SCHEMA_NAME = "forensic_mos_analysis"

_SYSTEM_PROMPT = (
    "You are a voice-quality analyst for a contact center. You receive a time "
    "series of mean opinion score (MOS, 1.0 to 5.0) per reporting interval with "
    "the number of conversations in each interval. Identify degradations, their "
    "timing and likely scope (isolated intervals versus sustained trends), weigh "
    "them by conversation volume, and suggest what operations should check next. "
    "Return ONLY a JSON object with a single string field `analysis`."
)


class ChatCompletionPort(Protocol):
    """Chat-style completion returning the assistant text for two prompts."""

    async def complete(self, *, system_prompt: str, user_prompt: str) -> str:
        """Return completion text for the supplied prompts."""


class LlmMosAnalysisClient:
    """Analysis client port implementation delegating to a chat LLM."""

    def __init__(self, *, llm_client: ChatCompletionPort) -> None:
        self._llm_client = llm_client

    async def analyze(self, series: Sequence[MosSample]) -> str:
        raw_response = await self._llm_client.complete(
            system_prompt=_SYSTEM_PROMPT,
            user_prompt=render_user_prompt(series),
        )
        return _decode_analysis(raw_response)


def render_user_prompt(series: Sequence[MosSample]) -> str:
    """Render the series as a JSON array inside the user prompt."""

    samples = [
        MosSamplePayload(
            timestamp=sample.timestamp,
            mos=sample.mos,
            conversations_count=sample.conversations_count,
        ).model_dump(mode="json")
        for sample in series
    ]
    return (
        "MOS series (chronological):\n"
        f"{json.dumps(samples, ensure_ascii=False, indent=2)}"
    )


def _decode_analysis(raw_response: str) -> str:
    try:
        decoded = ForensicAnalysisResponse.model_validate_json(raw_response)
    except ValidationError as error:
        raise TransportError(
            f"analysis response failed validation: {error.error_count()} errors"
        ) from error
    text = decoded.analysis.strip()
    if not text:
        raise TransportError("analysis response contained only whitespace")
    return text
