"""User-triggered narrative analysis of MOS trends."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import StrEnum

from contact_center_dashboard.application.ports.analysis_client_port import (
    AnalysisClientPort,
    MosSample,
)
from contact_center_dashboard.application.ports.remote_errors import describe_remote_error
from contact_center_dashboard.domain.queue_metrics import IntervalRecord

NowCallable = Callable[[], datetime]
logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


class AnalysisInProgressError(RuntimeError):
    """Raised when an analysis is requested while another is still pending."""


class EmptyAnalysisSeriesError(ValueError):
    """Raised when there are no MOS samples to analyze."""


class AnalysisStatus(StrEnum):
    IDLE = "idle"
    PENDING = "pending"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass(frozen=True)
class AnalysisPanel:
    """Latest analysis outcome, independent of polled metrics state."""

    status: AnalysisStatus = AnalysisStatus.IDLE
    text: str | None = None
    error: str | None = None
    sample_count: int = 0
    requested_at: datetime | None = None
    completed_at: datetime | None = None


def build_mos_series(history: Sequence[IntervalRecord]) -> list[MosSample]:
    """Return MOS samples for intervals that reported a MOS value."""

    return [
        MosSample(
            timestamp=record.timestamp,
            mos=record.mos,
            conversations_count=record.conversation_count,
        )
        for record in history
        if record.mos is not None
    ]


class ForensicAnalysisService:
    """Run one analysis at a time and keep its outcome for the analysis panel."""

    def __init__(
        self,
        *,
        analysis_client: AnalysisClientPort,
        now: NowCallable = _utc_now,
    ) -> None:
        self._analysis_client = analysis_client
        self._now = now
        self._panel = AnalysisPanel()

    @property
    def panel(self) -> AnalysisPanel:
        return self._panel

    @property
    def is_pending(self) -> bool:
        return self._panel.status is AnalysisStatus.PENDING

    async def analyze_history(self, history: Sequence[IntervalRecord]) -> str:
        """Analyze the MOS series derived from an interval history."""

        return await self.request_analysis(build_mos_series(history))

    async def request_analysis(self, series: Sequence[MosSample]) -> str:
        """Delegate to the analysis client and record the outcome.

        Client failures are recorded on the panel and re-raised to the caller.
        """

        if self.is_pending:
            raise AnalysisInProgressError("an analysis request is already pending")
        if not series:
            raise EmptyAnalysisSeriesError("no MOS samples available for analysis")

        requested_at = self._now()
        self._panel = AnalysisPanel(
            status=AnalysisStatus.PENDING,
            sample_count=len(series),
            requested_at=requested_at,
        )
        logger.info("analysis_requested samples=%s", len(series))
        try:
            text = await self._analysis_client.analyze(series)
        except asyncio.CancelledError:
            self._panel = AnalysisPanel()
            raise
        except Exception as error:
            self._panel = AnalysisPanel(
                status=AnalysisStatus.FAILED,
                error=describe_remote_error(error),
                sample_count=len(series),
                requested_at=requested_at,
                completed_at=self._now(),
            )
            logger.warning("analysis_failed samples=%s error=%s", len(series), error)
            raise

        self._panel = AnalysisPanel(
            status=AnalysisStatus.SUCCEEDED,
            text=text,
            sample_count=len(series),
            requested_at=requested_at,
            completed_at=self._now(),
        )
        logger.info("analysis_completed samples=%s chars=%s", len(series), len(text))
        return text
