"""Port for recent call/interaction listings."""

from __future__ import annotations

from typing import Protocol

from contact_center_dashboard.domain.queue_metrics import InteractionRecord, QueueId


class InteractionsClientPort(Protocol):
    """Async contract for listing a queue's recent interactions."""

    async def fetch_recent(self, *, queue_id: QueueId) -> list[InteractionRecord]:
        """Return recent interactions for the queue, newest first."""
