"""Red/amber/green severity classification for dashboard KPIs."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Final


class KpiKind(StrEnum):
    """KPI families that carry a RAG severity."""

    MOS = "mos"
    SERVICE_LEVEL = "service_level"
    ABANDONMENT_RATE = "abandonment_rate"

    @classmethod
    def _missing_(cls, value: object) -> KpiKind | None:
        # camelCase spellings such as "serviceLevel" used by dashboard clients.
        if not isinstance(value, str):
            return None
        snake = "".join(f"_{char.lower()}" if char.isupper() else char for char in value)
        for member in cls:
            if member.value == snake:
                return member
        return None


class Severity(StrEnum):
    """Three-level severity plus an indicator for absent values."""

    NORMAL = "normal"
    WARNING = "warning"
    CRITICAL = "critical"
    UNKNOWN = "unknown"


class InvalidThresholdsError(ValueError):
    """Raised when warning and critical thresholds are out of order."""


@dataclass(frozen=True)
class RagThresholds:
    """Boundaries used by `classify`; MOS and service level are lower bounds."""

    mos_critical: float = 4.3
    mos_warning: float = 4.7
    service_level_critical: float = 80.0
    service_level_warning: float = 90.0
    abandonment_warning_percent: float = 5.0
    abandonment_critical_percent: float = 10.0

    def __post_init__(self) -> None:
        if self.mos_warning < self.mos_critical:
            raise InvalidThresholdsError("mos_warning must be >= mos_critical")
        if self.service_level_warning < self.service_level_critical:
            raise InvalidThresholdsError(
                "service_level_warning must be >= service_level_critical"
            )
        if self.abandonment_critical_percent < self.abandonment_warning_percent:
            raise InvalidThresholdsError(
                "abandonment_critical_percent must be >= abandonment_warning_percent"
            )


DEFAULT_THRESHOLDS: Final = RagThresholds()


def abandonment_percent(abandoned: float, offered_total: float | None) -> float:
    """Return abandoned calls as a percentage of offered, or 0 when nothing was offered."""

    if offered_total is None or offered_total <= 0:
        return 0.0
    return abandoned * 100 / offered_total


def classify(
    kind: KpiKind | str,
    value: float | None,
    offered_total: float | None = None,
    *,
    thresholds: RagThresholds = DEFAULT_THRESHOLDS,
) -> Severity:
    """Return the severity of one KPI value.

    For `abandonment_rate` the value is the abandoned count and the percentage
    is derived from `offered_total`.
    """

    resolved_kind = KpiKind(kind)
    if value is None:
        return Severity.UNKNOWN

    if resolved_kind is KpiKind.MOS:
        return _lower_bound_severity(
            value,
            critical_below=thresholds.mos_critical,
            warning_below=thresholds.mos_warning,
        )
    if resolved_kind is KpiKind.SERVICE_LEVEL:
        return _lower_bound_severity(
            value,
            critical_below=thresholds.service_level_critical,
            warning_below=thresholds.service_level_warning,
        )

    percent = abandonment_percent(value, offered_total)
    if percent > thresholds.abandonment_critical_percent:
        return Severity.CRITICAL
    if percent > thresholds.abandonment_warning_percent:
        return Severity.WARNING
    return Severity.NORMAL


def _lower_bound_severity(
    value: float,
    *,
    critical_below: float,
    warning_below: float,
) -> Severity:
    if value < critical_below:
        return Severity.CRITICAL
    if value < warning_below:
        return Severity.WARNING
    return Severity.NORMAL
