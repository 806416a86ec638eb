"""Contact-center reporting API adapter for queue lookup, metrics and interactions."""

from __future__ import annotations

from datetime import date
from typing import TypeVar
from urllib.parse import quote, urlencode

from pydantic import BaseModel, ValidationError

from contact_center_dashboard.application.dto.reporting_payloads import (
    IntervalMetricsResponse,
    InteractionListResponse,
    QueueSearchResponse,
)
from contact_center_dashboard.application.ports.metrics_client_port import (
    QueueMetricsSnapshot,
)
from contact_center_dashboard.application.ports.remote_errors import (
    NotFoundError,
    TransportError,
)
from contact_center_dashboard.domain.queue_metrics import InteractionRecord, QueueId
from contact_center_dashboard.infrastructure.http_transport import (
    HttpRequest,
    HttpTransportPort,
    UrllibHttpTransport,
    decode_json_object,
    send_request,
)

PayloadT = TypeVar("PayloadT", bound=BaseModel)


class ContactCenterHttpClient:
    """REST adapter implementing the metrics and interactions client ports."""

    def __init__(
        self,
        *,
        base_url: str,
        access_token: str,
        transport: HttpTransportPort | None = None,
        timeout_seconds: float = 20.0,
        granularity: str = "PT30M",
        recent_interactions_limit: int = 25,
    ) -> None:
        token_value = access_token.strip()
        if not token_value:
            raise ValueError("access_token must be a non-empty string")
        if recent_interactions_limit <= 0:
            raise ValueError("recent_interactions_limit must be positive")

        self._base_url = base_url.rstrip("/")
        self._access_token = token_value
        self._transport = transport or UrllibHttpTransport()
        self._timeout_seconds = timeout_seconds
        self._granularity = granularity
        self._recent_interactions_limit = recent_interactions_limit

    async def resolve_queue(self, name: str) -> QueueId:
        """Return the id of the queue whose name matches case-insensitively.

        The directory search may return partial hits; only an exact name resolves.
        """

        query = urlencode({"name": name})
        response = await self._request_model(
            operation="resolve_queue",
            path=f"/api/v2/routing/queues?{query}",
            model=QueueSearchResponse,
        )
        wanted = name.casefold()
        for entity in response.entities:
            if entity.name.casefold() == wanted:
                return entity.id
        raise NotFoundError(f"no queue named {name!r}")

    async def fetch_metrics(self, *, queue_id: QueueId, day: date) -> QueueMetricsSnapshot:
        """Return interval history sorted by timestamp plus agent records."""

        query = urlencode({"date": day.isoformat(), "granularity": self._granularity})
        response = await self._request_model(
            operation="fetch_metrics",
            path=f"/api/v2/reporting/queues/{quote(queue_id, safe='')}/intervals?{query}",
            model=IntervalMetricsResponse,
        )
        history = sorted(
            (interval.to_record() for interval in response.intervals),
            key=lambda record: record.timestamp,
        )
        return QueueMetricsSnapshot(
            history=tuple(history),
            agents=tuple(agent.to_record() for agent in response.agents),
        )

    async def fetch_recent(self, *, queue_id: QueueId) -> list[InteractionRecord]:
        """Return recent interactions for the queue in upstream order."""

        query = urlencode({"pageSize": str(self._recent_interactions_limit)})
        response = await self._request_model(
            operation="fetch_recent",
            path=f"/api/v2/reporting/queues/{quote(queue_id, safe='')}/interactions?{query}",
            model=InteractionListResponse,
        )
        return [entity.to_record() for entity in response.entities]

    async def _request_model(
        self,
        *,
        operation: str,
        path: str,
        model: type[PayloadT],
    ) -> PayloadT:
        request = HttpRequest(
            method="GET",
            url=f"{self._base_url}{path}",
            headers={
                "Authorization": f"Bearer {self._access_token}",
                "Accept": "application/json",
            },
        )
        response = await send_request(
            self._transport,
            request,
            operation=operation,
            timeout_seconds=self._timeout_seconds,
        )
        decoded = decode_json_object(response, operation=operation)
        try:
            return model.model_validate(decoded)
        except ValidationError as error:
            raise TransportError(
                f"{operation} returned unexpected payload: {error.error_count()} errors"
            ) from error
