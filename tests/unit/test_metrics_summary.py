from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from contact_center_dashboard.domain.metrics_summary import MetricsSummary, summarize
from contact_center_dashboard.domain.queue_metrics import IntervalRecord

_START = datetime(2026, 3, 2, 8, 0, tzinfo=UTC)


def _interval(index: int, **overrides: object) -> IntervalRecord:
    values: dict[str, object] = {"timestamp": _START + timedelta(minutes=30 * index)}
    values.update(overrides)
    return IntervalRecord(**values)  # type: ignore[arg-type]


def test_empty_history_returns_all_zeros() -> None:
    summary = summarize([], 0)

    assert summary == MetricsSummary(
        average_mos=0.0,
        average_service_level=0.0,
        total_offered=0,
        total_answered=0,
        total_abandoned=0,
        agent_count=0,
        average_handle_time=0.0,
    )


def test_totals_are_exact_sums_of_record_fields() -> None:
    history = [
        _interval(0, offered=12, answered=10, abandoned=2),
        _interval(1, offered=7, answered=7, abandoned=0),
        _interval(2, offered=0, answered=0, abandoned=0),
        _interval(3, offered=31, answered=25, abandoned=6),
    ]

    summary = summarize(history, 4)

    assert summary.total_offered == 50
    assert summary.total_answered == 42
    assert summary.total_abandoned == 8
    assert summary.agent_count == 4


def test_average_mos_divides_only_by_records_with_mos() -> None:
    history = [
        _interval(0, offered=1, mos=4.5),
        _interval(1, offered=1, mos=None),
    ]

    summary = summarize(history, 0)

    assert summary.average_mos == 4.5


def test_average_mos_is_zero_when_nothing_was_offered() -> None:
    history = [_interval(0, offered=0, mos=4.9)]

    assert summarize(history, 1).average_mos == 0.0


def test_average_mos_is_zero_when_no_record_has_mos() -> None:
    history = [_interval(0, offered=3), _interval(1, offered=2)]

    assert summarize(history, 1).average_mos == 0.0


def test_service_level_divides_by_full_record_count() -> None:
    history = [
        _interval(0, offered=10, service_level_percent=90.0),
        _interval(1, offered=10, service_level_percent=None),
        _interval(2, offered=10, service_level_percent=60.0),
    ]

    summary = summarize(history, 0)

    assert summary.average_service_level == pytest.approx(50.0)


def test_service_level_is_zero_when_nothing_was_offered() -> None:
    history = [_interval(0, offered=0, service_level_percent=95.0)]

    assert summarize(history, 0).average_service_level == 0.0


def test_average_handle_time_gated_on_answered_and_ignores_absent_values() -> None:
    history = [
        _interval(0, offered=5, answered=5, average_handle_time_seconds=200.0),
        _interval(1, offered=5, answered=4, average_handle_time_seconds=None),
        _interval(2, offered=5, answered=5, average_handle_time_seconds=400.0),
    ]

    unanswered = [_interval(0, offered=3, average_handle_time_seconds=120.0)]

    assert summarize(history, 0).average_handle_time == pytest.approx(300.0)
    assert summarize(unanswered, 0).average_handle_time == 0.0


def test_summarize_is_deterministic_for_identical_inputs() -> None:
    history = [
        _interval(0, offered=9, answered=8, abandoned=1, mos=4.41, service_level_percent=83.3),
        _interval(1, offered=4, answered=4, mos=4.77, average_handle_time_seconds=245.5),
    ]

    first = summarize(history, 3)
    second = summarize(history, 3)

    assert first == second
    assert repr(first) == repr(second)
