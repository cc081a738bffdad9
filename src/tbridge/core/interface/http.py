"""AnthropicHTTPClient — JSON and SSE transport for ``POST /v1/messages``."""

from __future__ import annotations

import json
import logging
from collections.abc import AsyncGenerator, Mapping
from typing import Any

import httpx
from pydantic import ValidationError

from tbridge.core.interface.config import ModelConfig
from tbridge.core.interface.errors import (
    APIConnectionError,
    APIStatusError,
    ProviderAPIError,
    ResponseDecodingError,
    TransportError,
)
from tbridge.core.wire.events import (
    ErrorEvent,
    MessageStopEvent,
    ServerSentEventDecoder,
    StreamingEvent,
)
from tbridge.core.wire.models import ErrorResponse, MessagesRequest, MessagesResponse

logger = logging.getLogger(__name__)

MESSAGES_PATH = "/v1/messages"


class AnthropicHTTPClient:
    """Sends finalized requests to the Messages API.

    The underlying ``httpx.AsyncClient`` is created on first use and closed
    by :meth:`aclose` or on leaving the ``async with`` block.

    Usage::

        async with AnthropicHTTPClient(config) as http:
            response = await http.send(request)
    """

    def __init__(
        self,
        config: ModelConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._config = config
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> AnthropicHTTPClient:
        self._http()
        return self

    async def __aexit__(self, *_: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    def _http(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self._config.base_url.rstrip("/"),
                timeout=httpx.Timeout(self._config.timeout),
                headers={
                    "x-api-key": self._config.api_key.get_secret_value(),
                    "anthropic-version": self._config.api_version,
                    "content-type": "application/json",
                },
                transport=self._transport,
            )
        return self._client

    async def send(
        self,
        request: MessagesRequest,
        extra_headers: Mapping[str, str] | None = None,
    ) -> MessagesResponse:
        """POST *request* and decode the complete response.

        Raises:
            ProviderAPIError: the provider returned an error envelope.
            APIStatusError: HTTP error without a recognisable body.
            APIConnectionError: the provider could not be reached.
            ResponseDecodingError: the body is not a messages response.
        """
        try:
            response = await self._http().post(
                MESSAGES_PATH,
                json=request.to_payload(),
                headers=dict(extra_headers or {}),
            )
        except httpx.ConnectError as exc:
            raise APIConnectionError(str(exc)) from exc
        except httpx.HTTPError as exc:
            raise TransportError(str(exc)) from exc

        if response.status_code >= 400:
            raise _status_error(response.status_code, response.text)

        try:
            return MessagesResponse.model_validate_json(response.content)
        except ValidationError as exc:
            raise ResponseDecodingError(str(exc)) from exc

    async def stream(
        self,
        request: MessagesRequest,
        extra_headers: Mapping[str, str] | None = None,
    ) -> AsyncGenerator[StreamingEvent, None]:
        """POST *request* and yield decoded stream events.

        Iteration ends after ``message_stop`` or ``error``. Closing the
        generator early releases the connection.
        """
        decoder = ServerSentEventDecoder()
        try:
            async with self._http().stream(
                "POST",
                MESSAGES_PATH,
                json=request.to_payload(),
                headers=dict(extra_headers or {}),
            ) as response:
                if response.status_code >= 400:
                    # Streamed bodies are not buffered; read the error JSON first.
                    await response.aread()
                    raise _status_error(response.status_code, response.text)

                async for line in response.aiter_lines():
                    event = decoder.feed(line)
                    if event is None:
                        continue
                    yield event
                    if isinstance(event, (MessageStopEvent, ErrorEvent)):
                        return

                trailing = decoder.flush()
                if trailing is not None:
                    yield trailing
        except httpx.ConnectError as exc:
            raise APIConnectionError(str(exc)) from exc
        except httpx.HTTPError as exc:
            raise TransportError(str(exc)) from exc


def _status_error(status_code: int, body: str) -> TransportError:
    """Map an HTTP error body to the matching exception."""
    try:
        payload: Any = json.loads(body) if body else None
        envelope = ErrorResponse.model_validate(payload)
    except (json.JSONDecodeError, ValidationError):
        logger.debug("HTTP %d with unrecognised body", status_code)
        return APIStatusError(status_code, body)
    return ProviderAPIError(status_code, envelope.error.type, envelope.error.message)
