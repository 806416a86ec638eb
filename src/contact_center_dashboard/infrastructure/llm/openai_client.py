"""OpenAI chat-completions adapter implementing the chat completion port."""

from __future__ import annotations

import copy
import json
from collections.abc import Mapping
from typing import Any

from contact_center_dashboard.application.ports.remote_errors import TransportError
from contact_center_dashboard.infrastructure.http_transport import (
    HttpRequest,
    HttpTransportPort,
    UrllibHttpTransport,
    decode_json_object,
    send_request,
)


class OpenAiAdapterError(TransportError):
    """Raised for malformed OpenAI responses and unclassified HTTP failures."""


class OpenAiChatCompletionsClient:
    """OpenAI `/v1/chat/completions` adapter with strict JSON-schema responses."""

    def __init__(
        self,
        *,
        api_key: str,
        model: str,
        response_schema_name: str,
        response_schema: dict[str, object],
        temperature: float | None = None,
        transport: HttpTransportPort | None = None,
        timeout_seconds: float = 30.0,
        base_url: str = "https://api.openai.com",
    ) -> None:
        api_key_value = api_key.strip()
        model_value = model.strip()
        if not api_key_value:
            raise ValueError("api_key must be a non-empty string")
        if not model_value:
            raise ValueError("model must be a non-empty string")
        if temperature is not None and not (0.0 <= temperature <= 2.0):
            raise ValueError("temperature must be between 0.0 and 2.0")
        if not response_schema_name.strip():
            raise ValueError("response_schema_name must be a non-empty string")

        self._api_key = api_key_value
        self._model = model_value
        self._temperature = temperature
        self._response_schema_name = response_schema_name
        self._response_schema = _normalize_openai_strict_schema(response_schema)
        self._transport = transport or UrllibHttpTransport()
        self._timeout_seconds = timeout_seconds
        self._base_url = base_url.rstrip("/")

    @property
    def model_name(self) -> str:
        return self._model

    async def complete(self, *, system_prompt: str, user_prompt: str) -> str:
        """Return assistant text from OpenAI chat completion response."""

        payload: dict[str, object] = {
            "model": self._model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            "response_format": {
                "type": "json_schema",
                "json_schema": {
                    "name": self._response_schema_name,
                    "schema": self._response_schema,
                    "strict": True,
                },
            },
        }
        if self._temperature is not None and self._supports_custom_temperature():
            payload["temperature"] = self._temperature

        response = await self._post_json(
            operation="chat_completions",
            path="/v1/chat/completions",
            payload=payload,
        )
        return _extract_assistant_content(response=response)

    def _supports_custom_temperature(self) -> bool:
        """Return whether this model accepts explicit non-default temperature values."""

        return not self._model.lower().startswith("gpt-5")

    async def _post_json(
        self,
        *,
        operation: str,
        path: str,
        payload: dict[str, object],
    ) -> dict[str, object]:
        request = HttpRequest(
            method="POST",
            url=f"{self._base_url}{path}",
            headers={
                "Authorization": f"Bearer {self._api_key}",
                "Content-Type": "application/json",
            },
            body=json.dumps(payload, ensure_ascii=False).encode("utf-8"),
        )
        response = await send_request(
            self._transport,
            request,
            operation=operation,
            timeout_seconds=self._timeout_seconds,
            fallback=OpenAiAdapterError,
        )
        return decode_json_object(response, operation=operation, fallback=OpenAiAdapterError)


def _extract_assistant_content(*, response: Mapping[str, Any]) -> str:
    choices = response.get("choices")
    if not isinstance(choices, list) or not choices:
        raise OpenAiAdapterError("chat_completions response missing choices")

    first_choice = choices[0]
    if not isinstance(first_choice, Mapping):
        raise OpenAiAdapterError("chat_completions response has invalid choices payload")

    message = first_choice.get("message")
    if not isinstance(message, Mapping):
        raise OpenAiAdapterError("chat_completions response missing message payload")

    content = message.get("content")
    if isinstance(content, str):
        return content

    if isinstance(content, list):
        text_parts = [
            part["text"]
            for part in content
            if isinstance(part, Mapping)
            and part.get("type") == "text"
            and isinstance(part.get("text"), str)
        ]
        if text_parts:
            return "".join(text_parts)

    raise OpenAiAdapterError("chat_completions response missing assistant content")


def _normalize_openai_strict_schema(schema: dict[str, object]) -> dict[str, object]:
    """Return a copy where every object node lists all properties as required."""

    normalized = copy.deepcopy(schema)
    _normalize_schema_node(normalized)
    return normalized


def _normalize_schema_node(node: object) -> None:
    if isinstance(node, dict):
        properties = node.get("properties")
        if node.get("type") == "object" and isinstance(properties, dict):
            node["required"] = [str(name) for name in properties]
            node.setdefault("additionalProperties", False)
        for value in node.values():
            _normalize_schema_node(value)
    elif isinstance(node, list):
        for value in node:
            _normalize_schema_node(value)
