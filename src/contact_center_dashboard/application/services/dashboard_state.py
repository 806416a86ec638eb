"""Single-writer dashboard state shared by the poller and its readers."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime

from contact_center_dashboard.domain.metrics_summary import MetricsSummary, summarize
from contact_center_dashboard.domain.queue_metrics import (
    AgentRecord,
    InteractionRecord,
    IntervalRecord,
    QueueId,
)


@dataclass(frozen=True, eq=False)
class DashboardSession:
    """Active queue and date selection; identity marks which responses are current."""

    queue_name: str
    queue_id: QueueId
    day: date


@dataclass(frozen=True)
class DashboardSnapshot:
    """Result sets from one successful poll cycle, replaced as a unit."""

    session: DashboardSession
    history: tuple[IntervalRecord, ...]
    agents: tuple[AgentRecord, ...]
    interactions: tuple[InteractionRecord, ...]
    fetched_at: datetime


@dataclass(frozen=True)
class DashboardError:
    """Current human-readable error shown alongside the last good snapshot."""

    message: str
    occurred_at: datetime


class DashboardState:
    """Holds the latest snapshot and error; the summary is derived on every read."""

    def __init__(self) -> None:
        self._snapshot: DashboardSnapshot | None = None
        self._error: DashboardError | None = None

    @property
    def snapshot(self) -> DashboardSnapshot | None:
        return self._snapshot

    @property
    def error(self) -> DashboardError | None:
        return self._error

    @property
    def history(self) -> tuple[IntervalRecord, ...]:
        return self._snapshot.history if self._snapshot is not None else ()

    @property
    def agents(self) -> tuple[AgentRecord, ...]:
        return self._snapshot.agents if self._snapshot is not None else ()

    @property
    def interactions(self) -> tuple[InteractionRecord, ...]:
        return self._snapshot.interactions if self._snapshot is not None else ()

    @property
    def summary(self) -> MetricsSummary:
        """Return KPIs computed from history and agents of the same snapshot."""

        snapshot = self._snapshot
        if snapshot is None:
            return summarize((), 0)
        return summarize(snapshot.history, len(snapshot.agents))

    def apply_snapshot(self, snapshot: DashboardSnapshot) -> None:
        """Replace all result sets at once and clear the current error."""

        self._snapshot = snapshot
        self._error = None

    def record_error(self, *, message: str, occurred_at: datetime) -> None:
        """Surface an error while keeping the last successful snapshot."""

        self._error = DashboardError(message=message, occurred_at=occurred_at)

    def clear(self) -> None:
        self._snapshot = None
        self._error = None
