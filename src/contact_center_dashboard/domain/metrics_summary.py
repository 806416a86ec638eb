"""Pure KPI aggregation over a queue's interval history."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from contact_center_dashboard.domain.queue_metrics import IntervalRecord


@dataclass(frozen=True)
class MetricsSummary:
    """Derived KPI values recomputed from the current history; never persisted."""

    average_mos: float
    average_service_level: float
    total_offered: int
    total_answered: int
    total_abandoned: int
    agent_count: int
    average_handle_time: float


def summarize(history: Sequence[IntervalRecord], agent_count: int) -> MetricsSummary:
    """Return summary KPIs for the interval history and agent count.

    Service level is averaged over every record in the history, with absent
    values counted as zero. MOS and handle time are averaged only over the
    records that carry a value.
    """

    total_offered = sum(record.offered for record in history)
    total_answered = sum(record.answered for record in history)
    total_abandoned = sum(record.abandoned for record in history)

    average_service_level = 0.0
    average_mos = 0.0
    if total_offered > 0:
        average_service_level = sum(
            record.service_level_percent or 0.0 for record in history
        ) / len(history)
        mos_values = [record.mos for record in history if record.mos is not None]
        average_mos = sum(mos_values) / (len(mos_values) or 1)

    average_handle_time = 0.0
    if total_answered > 0:
        handle_times = [
            record.average_handle_time_seconds
            for record in history
            if record.average_handle_time_seconds is not None
        ]
        average_handle_time = sum(handle_times) / (len(handle_times) or 1)

    return MetricsSummary(
        average_mos=average_mos,
        average_service_level=average_service_level,
        total_offered=total_offered,
        total_answered=total_answered,
        total_abandoned=total_abandoned,
        agent_count=agent_count,
        average_handle_time=average_handle_time,
    )
