"""Immutable records received from the contact-center reporting API."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

QueueId = str


@dataclass(frozen=True)
class IntervalRecord:
    """One reporting interval (e.g. a 30-minute bucket) for a queue."""

    timestamp: datetime
    offered: int = 0
    answered: int = 0
    abandoned: int = 0
    service_level_percent: float | None = None
    mos: float | None = None
    average_handle_time_seconds: float | None = None
    conversation_count: int = 0


@dataclass(frozen=True)
class AgentRecord:
    """One agent's performance snapshot for the active queue and date."""

    agent_id: str
    name: str
    answered: int = 0
    average_handle_time_seconds: float | None = None
    mos: float | None = None


@dataclass(frozen=True)
class InteractionRecord:
    """Metadata for one recent call, listed but never aggregated."""

    conversation_id: str
    started_at: datetime
    ended_at: datetime | None = None
    participants: tuple[str, ...] = ()
    recording_id: str | None = None
    direction: str | None = None
