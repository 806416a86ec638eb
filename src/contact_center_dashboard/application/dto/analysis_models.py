"""Pydantic models for the forensic MOS analysis LLM exchange."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class StrictModel(BaseModel):
    """Base model with strict unknown-field rejection."""

    model_config = ConfigDict(extra="forbid")


class MosSamplePayload(StrictModel):
    """One series point as serialized into the analysis prompt."""

    timestamp: datetime
    mos: float
    conversations_count: int = Field(ge=0)


class ForensicAnalysisResponse(StrictModel):
    """Structured LLM response carrying the narrative analysis."""

    analysis: str = Field(min_length=1)
