"""Port for narrative analysis of voice-quality trends."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime
from typing import Protocol


@dataclass(frozen=True)
class MosSample:
    """One point of the MOS time series sent for analysis."""

    timestamp: datetime
    mos: float
    conversations_count: int


class AnalysisClientPort(Protocol):
    """Async contract for free-text MOS trend analysis."""

    async def analyze(self, series: Sequence[MosSample]) -> str:
        """Return narrative analysis text for the series."""
