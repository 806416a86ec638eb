"""KPI tiles derived from a metrics summary."""

from __future__ import annotations

from dataclasses import dataclass

from contact_center_dashboard.domain.metrics_summary import MetricsSummary
from contact_center_dashboard.domain.rag import (
    DEFAULT_THRESHOLDS,
    KpiKind,
    RagThresholds,
    Severity,
    abandonment_percent,
    classify,
)


@dataclass(frozen=True)
class KpiTile:
    """One headline number with its severity."""

    key: str
    label: str
    value: float
    severity: Severity


def build_kpi_tiles(
    summary: MetricsSummary,
    *,
    thresholds: RagThresholds = DEFAULT_THRESHOLDS,
) -> list[KpiTile]:
    """Return headline tiles in display order."""

    # A zero average means no interval reported MOS for offered traffic.
    mos_value = summary.average_mos if summary.average_mos > 0 else None
    return [
        KpiTile(
            key="mos",
            label="Average MOS",
            value=summary.average_mos,
            severity=classify(KpiKind.MOS, mos_value, thresholds=thresholds),
        ),
        KpiTile(
            key="service_level",
            label="Service level %",
            value=summary.average_service_level,
            severity=classify(
                KpiKind.SERVICE_LEVEL,
                summary.average_service_level if summary.total_offered > 0 else None,
                thresholds=thresholds,
            ),
        ),
        KpiTile(
            key="abandonment_rate",
            label="Abandonment %",
            value=abandonment_percent(summary.total_abandoned, summary.total_offered),
            severity=classify(
                KpiKind.ABANDONMENT_RATE,
                summary.total_abandoned,
                summary.total_offered,
                thresholds=thresholds,
            ),
        ),
        KpiTile(
            key="offered",
            label="Offered",
            value=summary.total_offered,
            severity=Severity.NORMAL,
        ),
        KpiTile(
            key="answered",
            label="Answered",
            value=summary.total_answered,
            severity=Severity.NORMAL,
        ),
        KpiTile(
            key="average_handle_time",
            label="AHT (s)",
            value=summary.average_handle_time,
            severity=Severity.NORMAL,
        ),
        KpiTile(
            key="agents",
            label="Agents",
            value=summary.agent_count,
            severity=Severity.NORMAL,
        ),
    ]
