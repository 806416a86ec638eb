from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import UTC, date, datetime

import pytest

from contact_center_dashboard.application.ports.remote_errors import (
    AuthError,
    NotFoundError,
    RateLimitError,
    TransportError,
    describe_remote_error,
)
from contact_center_dashboard.infrastructure.http_transport import HttpRequest, HttpResponse
from contact_center_dashboard.infrastructure.platform.reporting_client import (
    ContactCenterHttpClient,
)


@dataclass
class _QueuedTransport:
    responses: list[HttpResponse]
    error: Exception | None = None

    def __post_init__(self) -> None:
        self.calls: list[dict[str, object]] = []

    async def send(self, request: HttpRequest, *, timeout_seconds: float) -> HttpResponse:
        self.calls.append(
            {
                "method": request.method,
                "url": request.url,
                "headers": dict(request.headers),
                "body": request.body,
                "timeout_seconds": timeout_seconds,
            }
        )
        if self.error is not None:
            raise self.error
        return self.responses.pop(0)


def _json_response(payload: object, *, status_code: int = 200) -> HttpResponse:
    return HttpResponse(status_code=status_code, body_bytes=json.dumps(payload).encode("utf-8"))


def _client(transport: _QueuedTransport) -> ContactCenterHttpClient:
    return ContactCenterHttpClient(
        base_url="https://reporting.example.com/",
        access_token="api-token",
        transport=transport,
        timeout_seconds=7.5,
        recent_interactions_limit=10,
    )


@pytest.mark.asyncio
async def test_resolve_queue_prefers_exact_case_insensitive_match() -> None:
    transport = _QueuedTransport(
        responses=[
            _json_response(
                {
                    "entities": [
                        {"id": "q-support-tier2", "name": "Support Tier 2"},
                        {"id": "q-support", "name": "support"},
                    ]
                }
            )
        ]
    )

    queue_id = await _client(transport).resolve_queue("Support")

    assert queue_id == "q-support"
    call = transport.calls[0]
    assert call["method"] == "GET"
    assert call["url"] == "https://reporting.example.com/api/v2/routing/queues?name=Support"
    headers = call["headers"]
    assert isinstance(headers, dict)
    assert headers["Authorization"] == "Bearer api-token"
    assert call["timeout_seconds"] == 7.5


@pytest.mark.asyncio
async def test_resolve_queue_rejects_partial_name_hits() -> None:
    transport = _QueuedTransport(
        responses=[
            _json_response({"entities": [{"id": "q-escal", "name": "Support Escalations"}]})
        ]
    )

    with pytest.raises(NotFoundError, match="'Support'"):
        await _client(transport).resolve_queue("Support")


@pytest.mark.asyncio
async def test_resolve_queue_without_entities_raises_not_found() -> None:
    transport = _QueuedTransport(responses=[_json_response({"entities": []})])

    with pytest.raises(NotFoundError):
        await _client(transport).resolve_queue("Nowhere")


@pytest.mark.asyncio
async def test_fetch_metrics_decodes_and_sorts_intervals() -> None:
    transport = _QueuedTransport(
        responses=[
            _json_response(
                {
                    "intervals": [
                        {
                            "timestamp": "2026-03-02T09:30:00Z",
                            "offered": 8,
                            "answered": 7,
                            "abandoned": 1,
                            "serviceLevelPercent": 87.5,
                            "mos": 4.61,
                            "averageHandleTimeSeconds": 281.0,
                            "conversationCount": 8,
                        },
                        {
                            "timestamp": "2026-03-02T09:00:00Z",
                            "offered": 5,
                            "answered": 5,
                            "abandoned": 0,
                            "serviceLevelPercent": None,
                            "mos": None,
                            "conversationCount": 5,
                        },
                    ],
                    "agents": [
                        {"id": "a-1", "name": "Ana", "answered": 7, "mos": 4.7},
                        {"id": "a-2", "name": "Bo"},
                    ],
                    "unusedUpstreamField": True,
                }
            )
        ]
    )

    snapshot = await _client(transport).fetch_metrics(queue_id="q/1", day=date(2026, 3, 2))

    assert transport.calls[0]["url"] == (
        "https://reporting.example.com/api/v2/reporting/queues/q%2F1/intervals"
        "?date=2026-03-02&granularity=PT30M"
    )
    assert [record.timestamp for record in snapshot.history] == [
        datetime(2026, 3, 2, 9, 0, tzinfo=UTC),
        datetime(2026, 3, 2, 9, 30, tzinfo=UTC),
    ]
    first, second = snapshot.history
    assert first.mos is None
    assert first.service_level_percent is None
    assert second.service_level_percent == 87.5
    assert second.average_handle_time_seconds == 281.0
    assert second.conversation_count == 8
    assert [agent.agent_id for agent in snapshot.agents] == ["a-1", "a-2"]
    assert snapshot.agents[1].mos is None


@pytest.mark.asyncio
async def test_fetch_recent_maps_interactions() -> None:
    transport = _QueuedTransport(
        responses=[
            _json_response(
                {
                    "entities": [
                        {
                            "id": "conv-9",
                            "startTime": "2026-03-02T10:01:00Z",
                            "endTime": "2026-03-02T10:07:30Z",
                            "participants": ["Ana", "+15550100"],
                            "recordingId": "rec-9",
                            "direction": "inbound",
                        }
                    ]
                }
            )
        ]
    )

    interactions = await _client(transport).fetch_recent(queue_id="q-1")

    assert transport.calls[0]["url"] == (
        "https://reporting.example.com/api/v2/reporting/queues/q-1/interactions?pageSize=10"
    )
    assert len(interactions) == 1
    item = interactions[0]
    assert item.conversation_id == "conv-9"
    assert item.participants == ("Ana", "+15550100")
    assert item.recording_id == "rec-9"
    assert item.ended_at == datetime(2026, 3, 2, 10, 7, 30, tzinfo=UTC)


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("status_code", "error_type"),
    [
        (401, AuthError),
        (403, AuthError),
        (404, NotFoundError),
        (429, RateLimitError),
        (500, TransportError),
        (503, TransportError),
    ],
)
async def test_http_status_maps_to_error_taxonomy(
    status_code: int,
    error_type: type[Exception],
) -> None:
    transport = _QueuedTransport(
        responses=[HttpResponse(status_code=status_code, body_bytes=b'{"message":"nope"}')]
    )

    with pytest.raises(error_type, match=f"status {status_code}"):
        await _client(transport).fetch_metrics(queue_id="q-1", day=date(2026, 3, 2))


@pytest.mark.asyncio
async def test_transport_exception_is_normalized() -> None:
    transport = _QueuedTransport(responses=[], error=OSError("connection reset"))

    with pytest.raises(TransportError, match="fetch_recent transport failure"):
        await _client(transport).fetch_recent(queue_id="q-1")


@pytest.mark.asyncio
async def test_invalid_json_raises_transport_error() -> None:
    transport = _QueuedTransport(responses=[HttpResponse(status_code=200, body_bytes=b"<html>")])

    with pytest.raises(TransportError, match="invalid JSON"):
        await _client(transport).resolve_queue("Support")


@pytest.mark.asyncio
async def test_out_of_range_mos_is_rejected_as_unexpected_payload() -> None:
    transport = _QueuedTransport(
        responses=[
            _json_response(
                {"intervals": [{"timestamp": "2026-03-02T09:00:00Z", "mos": 7.5}], "agents": []}
            )
        ]
    )

    with pytest.raises(TransportError, match="unexpected payload"):
        await _client(transport).fetch_metrics(queue_id="q-1", day=date(2026, 3, 2))


def test_blank_access_token_is_rejected() -> None:
    with pytest.raises(ValueError):
        ContactCenterHttpClient(base_url="https://reporting.example.com", access_token=" ")


@pytest.mark.asyncio
async def test_rate_limit_reports_retry_after_to_dashboard() -> None:
    transport = _QueuedTransport(
        responses=[
            HttpResponse(
                status_code=429,
                body_bytes=b'{"message":"too many requests"}',
                headers={"Retry-After": "30"},
            )
        ]
    )

    with pytest.raises(RateLimitError) as excinfo:
        await _client(transport).fetch_metrics(queue_id="q-1", day=date(2026, 3, 2))

    assert excinfo.value.retry_after_seconds == 30.0
    assert describe_remote_error(excinfo.value).startswith("Rate limited, try again in 30s:")
