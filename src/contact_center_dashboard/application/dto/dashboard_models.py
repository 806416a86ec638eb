"""Pydantic models for the dashboard HTTP API."""

from __future__ import annotations

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field

from contact_center_dashboard.application.services.forensic_analysis_service import (
    AnalysisStatus,
)
from contact_center_dashboard.domain.rag import Severity


class StrictModel(BaseModel):
    """Base model with strict unknown-field rejection."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)


class ConnectRequest(StrictModel):
    """Connect payload; the configured default queue is used when no name is given."""

    queue_name: str | None = Field(default=None, min_length=1)
    day: date | None = Field(default=None, alias="date")


class SelectDateRequest(StrictModel):
    day: date = Field(alias="date")


class SessionResponse(StrictModel):
    queue_name: str
    queue_id: str
    day: date = Field(alias="date")


class DashboardStatusResponse(StrictModel):
    """Connection state, freshness and the current error, if any."""

    connected: bool
    polling: bool
    session: SessionResponse | None
    last_updated_at: datetime | None
    error: str | None
    error_at: datetime | None


class KpiTileResponse(StrictModel):
    key: str
    label: str
    value: float
    severity: Severity


class MetricsSummaryResponse(StrictModel):
    """Summary KPIs with their RAG tiles."""

    average_mos: float
    average_service_level: float
    total_offered: int = Field(ge=0)
    total_answered: int = Field(ge=0)
    total_abandoned: int = Field(ge=0)
    agent_count: int = Field(ge=0)
    average_handle_time: float
    tiles: list[KpiTileResponse]


class IntervalItem(StrictModel):
    timestamp: datetime
    offered: int
    answered: int
    abandoned: int
    service_level_percent: float | None
    mos: float | None
    mos_severity: Severity
    average_handle_time_seconds: float | None
    conversation_count: int


class IntervalHistoryResponse(StrictModel):
    items: list[IntervalItem]


class AgentItem(StrictModel):
    agent_id: str
    name: str
    answered: int
    average_handle_time_seconds: float | None
    mos: float | None


class AgentListResponse(StrictModel):
    items: list[AgentItem]


class InteractionItem(StrictModel):
    conversation_id: str
    started_at: datetime
    ended_at: datetime | None
    participants: list[str]
    recording_id: str | None
    direction: str | None


class InteractionListResponse(StrictModel):
    items: list[InteractionItem]


class AnalysisPanelResponse(StrictModel):
    """Forensic analysis panel state."""

    status: AnalysisStatus
    text: str | None
    error: str | None
    sample_count: int = Field(ge=0)
    requested_at: datetime | None
    completed_at: datetime | None
