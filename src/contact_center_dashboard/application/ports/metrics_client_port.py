"""Port for queue lookup and interval metrics retrieval."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Protocol

from contact_center_dashboard.domain.queue_metrics import AgentRecord, IntervalRecord, QueueId


@dataclass(frozen=True)
class QueueMetricsSnapshot:
    """Interval history and agent records returned by one metrics fetch."""

    history: tuple[IntervalRecord, ...]
    agents: tuple[AgentRecord, ...]


class MetricsClientPort(Protocol):
    """Async contract for the reporting API's queue and metrics endpoints."""

    async def resolve_queue(self, name: str) -> QueueId:
        """Return the queue id for a human-readable queue name."""

    async def fetch_metrics(self, *, queue_id: QueueId, day: date) -> QueueMetricsSnapshot:
        """Return time-ordered interval history and agent records for one day."""
