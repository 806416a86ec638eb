from __future__ import annotations

import pytest

from contact_center_dashboard.domain.kpi_board import build_kpi_tiles
from contact_center_dashboard.domain.metrics_summary import MetricsSummary
from contact_center_dashboard.domain.rag import (
    InvalidThresholdsError,
    KpiKind,
    RagThresholds,
    Severity,
    classify,
)


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (4.2, Severity.CRITICAL),
        (4.3, Severity.WARNING),
        (4.5, Severity.WARNING),
        (4.7, Severity.NORMAL),
        (4.8, Severity.NORMAL),
        (None, Severity.UNKNOWN),
    ],
)
def test_mos_classification(value: float | None, expected: Severity) -> None:
    assert classify("mos", value) is expected


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (79.9, Severity.CRITICAL),
        (80.0, Severity.WARNING),
        (89.9, Severity.WARNING),
        (90.0, Severity.NORMAL),
    ],
)
def test_service_level_classification(value: float, expected: Severity) -> None:
    assert classify(KpiKind.SERVICE_LEVEL, value) is expected


@pytest.mark.parametrize(
    ("abandoned", "offered", "expected"),
    [
        (12, 100, Severity.CRITICAL),
        (10, 100, Severity.WARNING),
        (6, 100, Severity.WARNING),
        (5, 100, Severity.NORMAL),
        (3, 100, Severity.NORMAL),
        (5, 0, Severity.NORMAL),
    ],
)
def test_abandonment_rate_classification(
    abandoned: int,
    offered: int,
    expected: Severity,
) -> None:
    assert classify("abandonment_rate", abandoned, offered) is expected


def test_abandonment_rate_without_offered_total_is_normal() -> None:
    assert classify(KpiKind.ABANDONMENT_RATE, 40) is Severity.NORMAL


@pytest.mark.parametrize(
    ("kind", "value", "offered", "expected"),
    [
        ("abandonmentRate", 12, 100, Severity.CRITICAL),
        ("abandonmentRate", 6, 100, Severity.WARNING),
        ("serviceLevel", 85.0, None, Severity.WARNING),
    ],
)
def test_camel_case_kind_names_are_accepted(
    kind: str,
    value: float,
    offered: int | None,
    expected: Severity,
) -> None:
    assert classify(kind, value, offered) is expected


def test_unknown_kind_is_rejected() -> None:
    with pytest.raises(ValueError):
        classify("latency", 1.0)
    with pytest.raises(ValueError):
        classify("ServiceLevel", 85.0)


def test_custom_mos_thresholds_shift_boundaries() -> None:
    thresholds = RagThresholds(mos_critical=3.5, mos_warning=4.0)

    assert classify(KpiKind.MOS, 3.6, thresholds=thresholds) is Severity.WARNING
    assert classify(KpiKind.MOS, 4.2, thresholds=thresholds) is Severity.NORMAL


def test_thresholds_reject_inverted_boundaries() -> None:
    with pytest.raises(InvalidThresholdsError):
        RagThresholds(mos_critical=4.8, mos_warning=4.5)


def test_kpi_tiles_classify_summary_values() -> None:
    summary = MetricsSummary(
        average_mos=4.25,
        average_service_level=85.0,
        total_offered=200,
        total_answered=176,
        total_abandoned=24,
        agent_count=9,
        average_handle_time=312.0,
    )

    tiles = {tile.key: tile for tile in build_kpi_tiles(summary)}

    assert tiles["mos"].severity is Severity.CRITICAL
    assert tiles["service_level"].severity is Severity.WARNING
    assert tiles["abandonment_rate"].value == pytest.approx(12.0)
    assert tiles["abandonment_rate"].severity is Severity.CRITICAL
    assert tiles["agents"].value == 9


def test_kpi_tiles_mark_missing_mos_and_traffic_as_unknown() -> None:
    summary = MetricsSummary(
        average_mos=0.0,
        average_service_level=0.0,
        total_offered=0,
        total_answered=0,
        total_abandoned=0,
        agent_count=0,
        average_handle_time=0.0,
    )

    tiles = {tile.key: tile for tile in build_kpi_tiles(summary)}

    assert tiles["mos"].severity is Severity.UNKNOWN
    assert tiles["service_level"].severity is Severity.UNKNOWN
    assert tiles["abandonment_rate"].severity is Severity.NORMAL
