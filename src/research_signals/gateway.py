"""Chat gateway contract and the shared httpx POST helper."""

from __future__ import annotations

import json
from typing import Callable, Protocol, Sequence

import httpx
import structlog
from pydantic import ValidationError

from research_signals.errors import TransportError, UpstreamError
from research_signals.models.chat import ChatMessage, ChatResponse
from research_signals.models.query import QueryPlan

logger = structlog.get_logger()


class ChatGateway(Protocol):
    async def send(
        self,
        messages: Sequence[ChatMessage],
        *,
        model: str | None = None,
        temperature: float | None = None,
    ) -> ChatResponse: ...


async def post_json(
    provider: str,
    url: str,
    *,
    body: dict,
    headers: dict | None = None,
    params: dict | None = None,
    timeout: float,
) -> dict:
    """POST ``body`` and return the decoded JSON response.

    Raises TransportError on network failure and UpstreamError on a non-2xx
    status or a body that is not a JSON object. No retries.
    """
    try:
        async with httpx.AsyncClient() as http:
            response = await http.post(
                url,
                headers={"Content-Type": "application/json", **(headers or {})},
                params=params,
                json=body,
                timeout=timeout,
            )
            response.raise_for_status()
    except httpx.HTTPStatusError as e:
        logger.warning("upstream_error", provider=provider, status=e.response.status_code)
        raise UpstreamError(provider, e.response.status_code, e.response.text) from e
    except httpx.RequestError as e:
        logger.warning("transport_error", provider=provider, error=str(e))
        raise TransportError(f"{provider} API request failed: {e}") from e

    try:
        data = response.json()
    except ValueError as e:
        raise UpstreamError(provider, response.status_code, response.text) from e

    if not isinstance(data, dict):
        raise UpstreamError(provider, response.status_code, response.text)
    return data


async def send_plan(gateway: ChatGateway, plan: QueryPlan) -> ChatResponse:
    """Send a built query with its model and temperature hints."""
    return await gateway.send(
        plan.messages(),
        model=plan.model_hint,
        temperature=plan.temperature_hint,
    )


def parse_envelope(provider: str, raw: dict, parse: Callable[[dict], ChatResponse]) -> ChatResponse:
    """Run a backend's envelope parser; a malformed envelope is an UpstreamError."""
    try:
        return parse(raw)
    except (AttributeError, TypeError, IndexError, KeyError, ValidationError) as e:
        logger.warning("upstream_malformed_envelope", provider=provider, error=str(e))
        raise UpstreamError(provider, 200, json.dumps(raw, default=str)) from e
