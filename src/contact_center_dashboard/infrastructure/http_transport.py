"""Async HTTP transport and response normalization shared by the remote API adapters."""

from __future__ import annotations

import asyncio
import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime
from email.utils import parsedate_to_datetime
from typing import Protocol, cast
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

from contact_center_dashboard.application.ports.remote_errors import (
    AuthError,
    NotFoundError,
    RateLimitError,
    RemoteServiceError,
    TransportError,
)


@dataclass(frozen=True)
class HttpRequest:
    method: str
    url: str
    headers: Mapping[str, str] = field(default_factory=dict)
    body: bytes | None = None


@dataclass(frozen=True)
class HttpResponse:
    """Status, body and headers of a completed HTTP exchange, including error statuses."""

    status_code: int
    body_bytes: bytes
    headers: Mapping[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    def header(self, name: str) -> str | None:
        wanted = name.lower()
        for key, value in self.headers.items():
            if key.lower() == wanted:
                return value
        return None


class HttpTransportPort(Protocol):
    """Transport protocol used by the HTTP adapters."""

    async def send(self, request: HttpRequest, *, timeout_seconds: float) -> HttpResponse:
        """Execute one HTTP request; non-2xx statuses are returned, not raised."""


class UrllibHttpTransport:
    """urllib transport running blocking requests in a worker thread."""

    async def send(self, request: HttpRequest, *, timeout_seconds: float) -> HttpResponse:
        return await asyncio.to_thread(self._send_sync, request, timeout_seconds)

    def _send_sync(self, request: HttpRequest, timeout_seconds: float) -> HttpResponse:
        urllib_request = Request(
            url=request.url,
            data=request.body,
            headers=dict(request.headers),
            method=request.method,
        )
        try:
            with urlopen(urllib_request, timeout=timeout_seconds) as response:
                return HttpResponse(
                    status_code=int(response.status),
                    body_bytes=response.read(),
                    headers=dict(response.headers.items()),
                )
        except HTTPError as error:
            return HttpResponse(
                status_code=int(error.code),
                body_bytes=error.read(),
                headers=dict(error.headers.items()) if error.headers is not None else {},
            )
        except (URLError, TimeoutError) as error:
            raise TransportError(f"{request.method} {request.url} unreachable: {error}") from error


async def send_request(
    transport: HttpTransportPort,
    request: HttpRequest,
    *,
    operation: str,
    timeout_seconds: float,
    fallback: type[TransportError] = TransportError,
) -> HttpResponse:
    """Send one request and raise the matching remote error for non-2xx statuses."""

    try:
        response = await transport.send(request, timeout_seconds=timeout_seconds)
    except RemoteServiceError:
        raise
    except Exception as error:  # noqa: BLE001
        raise fallback(f"{operation} transport failure") from error
    raise_for_status(response, operation=operation, fallback=fallback)
    return response


def raise_for_status(
    response: HttpResponse,
    *,
    operation: str,
    fallback: type[TransportError] = TransportError,
) -> None:
    if response.ok:
        return

    status_code = response.status_code
    message = (
        f"{operation} failed with status {status_code}: "
        f"{decode_error_payload(response.body_bytes)}"
    )
    if status_code in (401, 403):
        raise AuthError(message)
    if status_code == 404:
        raise NotFoundError(message)
    if status_code == 429:
        raise RateLimitError(
            message,
            retry_after_seconds=parse_retry_after(response.header("Retry-After")),
        )
    raise fallback(message)


def decode_json_object(
    response: HttpResponse,
    *,
    operation: str,
    fallback: type[TransportError] = TransportError,
) -> dict[str, object]:
    try:
        decoded = json.loads(response.body_bytes.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as error:
        raise fallback(f"{operation} returned invalid JSON payload") from error
    if not isinstance(decoded, dict):
        raise fallback(f"{operation} returned non-object JSON payload")
    return cast("dict[str, object]", decoded)


def parse_retry_after(value: str | None, *, now: datetime | None = None) -> float | None:
    """Return the delay in seconds announced by a ``Retry-After`` header.

    Both delta-seconds and HTTP-date forms are accepted; unparseable values yield ``None``.
    """

    if value is None or not value.strip():
        return None
    text = value.strip()
    if text.isdigit():
        return float(text)
    try:
        retry_at = parsedate_to_datetime(text)
    except (TypeError, ValueError):
        return None
    if retry_at.tzinfo is None:
        retry_at = retry_at.replace(tzinfo=UTC)
    reference = now or datetime.now(tz=UTC)
    return max((retry_at - reference).total_seconds(), 0.0)


def decode_error_payload(payload: bytes) -> str:
    """Return a short printable excerpt of an error response body."""

    if not payload:
        return "empty response body"
    try:
        decoded = payload.decode("utf-8")
    except UnicodeDecodeError:
        return "<binary>"
    return decoded[:200]
