from __future__ import annotations

from datetime import UTC, datetime

import pytest

from contact_center_dashboard.application.ports.remote_errors import (
    NotFoundError,
    RateLimitError,
    TransportError,
)
from contact_center_dashboard.infrastructure.http_transport import (
    HttpResponse,
    decode_error_payload,
    decode_json_object,
    parse_retry_after,
    raise_for_status,
)


def test_header_lookup_is_case_insensitive() -> None:
    response = HttpResponse(status_code=200, body_bytes=b"", headers={"Retry-After": "5"})

    assert response.header("retry-after") == "5"
    assert response.header("x-missing") is None


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("120", 120.0),
        (" 7 ", 7.0),
        ("Mon, 02 Mar 2026 09:00:45 GMT", 45.0),
        ("Mon, 02 Mar 2026 08:59:00 GMT", 0.0),
        ("soon", None),
        ("", None),
        (None, None),
    ],
)
def test_parse_retry_after(value: str | None, expected: float | None) -> None:
    now = datetime(2026, 3, 2, 9, 0, tzinfo=UTC)

    assert parse_retry_after(value, now=now) == expected


def test_raise_for_status_uses_fallback_for_unclassified_statuses() -> None:
    class CustomTransportError(TransportError):
        pass

    response = HttpResponse(status_code=502, body_bytes=b"bad gateway")

    with pytest.raises(CustomTransportError, match="lookup failed with status 502: bad gateway"):
        raise_for_status(response, operation="lookup", fallback=CustomTransportError)


def test_raise_for_status_maps_not_found_and_rate_limit() -> None:
    with pytest.raises(NotFoundError):
        raise_for_status(HttpResponse(status_code=404, body_bytes=b""), operation="lookup")
    with pytest.raises(RateLimitError) as excinfo:
        raise_for_status(HttpResponse(status_code=429, body_bytes=b""), operation="lookup")
    assert excinfo.value.retry_after_seconds is None


def test_raise_for_status_accepts_success() -> None:
    raise_for_status(HttpResponse(status_code=204, body_bytes=b""), operation="lookup")


def test_decode_json_object_rejects_arrays() -> None:
    response = HttpResponse(status_code=200, body_bytes=b"[1, 2]")

    with pytest.raises(TransportError, match="lookup returned non-object JSON payload"):
        decode_json_object(response, operation="lookup")


def test_decode_error_payload_truncates_and_handles_binary() -> None:
    assert decode_error_payload(b"") == "empty response body"
    assert decode_error_payload(b"\xff\xfe") == "<binary>"
    assert len(decode_error_payload(b"x" * 500)) == 200
