"""Offline analysis client producing rule-based MOS narratives."""

from __future__ import annotations

from collections.abc import Sequence

from contact_center_dashboard.application.ports.analysis_client_port import MosSample
from contact_center_dashboard.domain.rag import (
    DEFAULT_THRESHOLDS,
    KpiKind,
    RagThresholds,
    Severity,
    classify,
)


class DeterministicMosAnalysisClient:
    """Analysis client used when no LLM provider is configured."""

    def __init__(self, *, thresholds: RagThresholds = DEFAULT_THRESHOLDS) -> None:
        self._thresholds = thresholds

    async def analyze(self, series: Sequence[MosSample]) -> str:
        if not series:
            return "No MOS samples were reported for the selected period."

        total_conversations = sum(sample.conversations_count for sample in series)
        if total_conversations > 0:
            weighted_mos = (
                sum(sample.mos * sample.conversations_count for sample in series)
                / total_conversations
            )
        else:
            weighted_mos = sum(sample.mos for sample in series) / len(series)

        worst = min(series, key=lambda sample: sample.mos)
        best = max(series, key=lambda sample: sample.mos)
        degraded = [
            sample
            for sample in series
            if classify(KpiKind.MOS, sample.mos, thresholds=self._thresholds)
            is Severity.CRITICAL
        ]

        lines = [
            (
                f"{len(series)} intervals analyzed covering {total_conversations} "
                f"conversations; volume-weighted MOS {weighted_mos:.2f}."
            ),
            (
                f"Lowest MOS {worst.mos:.2f} at {worst.timestamp.isoformat()} "
                f"({worst.conversations_count} conversations); highest {best.mos:.2f} "
                f"at {best.timestamp.isoformat()}."
            ),
        ]
        if not degraded:
            lines.append(
                f"No interval fell below the critical threshold of "
                f"{self._thresholds.mos_critical:.1f}."
            )
            return "\n".join(lines)

        affected = sum(sample.conversations_count for sample in degraded)
        lines.append(
            f"{len(degraded)} intervals fell below {self._thresholds.mos_critical:.1f}, "
            f"affecting {affected} conversations."
        )
        if _has_consecutive_run(series, degraded):
            lines.append(
                "Degradation is sustained across consecutive intervals; check carrier "
                "trunks and edge capacity for that window."
            )
        else:
            lines.append(
                "Degradation is isolated to individual intervals; review the affected "
                "calls for endpoint or network jitter."
            )
        return "\n".join(lines)


def _has_consecutive_run(series: Sequence[MosSample], degraded: Sequence[MosSample]) -> bool:
    degraded_ids = {id(sample) for sample in degraded}
    previous_degraded = False
    for sample in series:
        is_degraded = id(sample) in degraded_ids
        if is_degraded and previous_degraded:
            return True
        previous_degraded = is_degraded
    return False
