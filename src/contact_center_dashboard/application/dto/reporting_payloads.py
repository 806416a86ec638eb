"""Pydantic models for reporting API response payloads."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from contact_center_dashboard.domain.queue_metrics import (
    AgentRecord,
    InteractionRecord,
    IntervalRecord,
)


class ReportingPayload(BaseModel):
    """Base model tolerating extra upstream fields and accepting camelCase aliases."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class QueueEntity(ReportingPayload):
    id: str = Field(min_length=1)
    name: str


class QueueSearchResponse(ReportingPayload):
    entities: list[QueueEntity] = Field(default_factory=list)


class IntervalPayload(ReportingPayload):
    timestamp: datetime
    offered: int = Field(default=0, ge=0)
    answered: int = Field(default=0, ge=0)
    abandoned: int = Field(default=0, ge=0)
    service_level_percent: float | None = Field(
        default=None,
        ge=0.0,
        le=100.0,
        alias="serviceLevelPercent",
    )
    mos: float | None = Field(default=None, ge=1.0, le=5.0)
    average_handle_time_seconds: float | None = Field(
        default=None,
        ge=0.0,
        alias="averageHandleTimeSeconds",
    )
    conversation_count: int = Field(default=0, ge=0, alias="conversationCount")

    def to_record(self) -> IntervalRecord:
        return IntervalRecord(
            timestamp=self.timestamp,
            offered=self.offered,
            answered=self.answered,
            abandoned=self.abandoned,
            service_level_percent=self.service_level_percent,
            mos=self.mos,
            average_handle_time_seconds=self.average_handle_time_seconds,
            conversation_count=self.conversation_count,
        )


class AgentPayload(ReportingPayload):
    id: str = Field(min_length=1)
    name: str = ""
    answered: int = Field(default=0, ge=0)
    average_handle_time_seconds: float | None = Field(
        default=None,
        ge=0.0,
        alias="averageHandleTimeSeconds",
    )
    mos: float | None = Field(default=None, ge=1.0, le=5.0)

    def to_record(self) -> AgentRecord:
        return AgentRecord(
            agent_id=self.id,
            name=self.name,
            answered=self.answered,
            average_handle_time_seconds=self.average_handle_time_seconds,
            mos=self.mos,
        )


class IntervalMetricsResponse(ReportingPayload):
    intervals: list[IntervalPayload] = Field(default_factory=list)
    agents: list[AgentPayload] = Field(default_factory=list)


class InteractionPayload(ReportingPayload):
    id: str = Field(min_length=1)
    start_time: datetime = Field(alias="startTime")
    end_time: datetime | None = Field(default=None, alias="endTime")
    participants: list[str] = Field(default_factory=list)
    recording_id: str | None = Field(default=None, alias="recordingId")
    direction: str | None = None

    def to_record(self) -> InteractionRecord:
        return InteractionRecord(
            conversation_id=self.id,
            started_at=self.start_time,
            ended_at=self.end_time,
            participants=tuple(self.participants),
            recording_id=self.recording_id,
            direction=self.direction,
        )


class InteractionListResponse(ReportingPayload):
    entities: list[InteractionPayload] = Field(default_factory=list)
