"""Perplexity chat-completions API wrapper."""

from __future__ import annotations

from typing import Sequence

import structlog

from research_signals.config import Settings
from research_signals.errors import ConfigurationError
from research_signals.extractor import MARKET_SENTIMENT_SCHEMA, extract
from research_signals.gateway import parse_envelope, post_json, send_plan
from research_signals.models.chat import ChatMessage, ChatResponse, TokenUsage
from research_signals.models.research import ResearchResult
from research_signals.models.sentiment import MarketSentiment
from research_signals.query_builder import QueryBuilder

logger = structlog.get_logger()

PROVIDER = "Perplexity"
PERPLEXITY_API_URL = "https://api.perplexity.ai/chat/completions"
DEFAULT_TEMPERATURE = 0.2


class PerplexityClient:
    def __init__(self, settings: Settings, api_key: str, builder: QueryBuilder | None = None) -> None:
        self.settings = settings
        self.api_key = api_key
        self.builder = builder or QueryBuilder()

    async def send(
        self,
        messages: Sequence[ChatMessage],
        *,
        model: str | None = None,
        temperature: float | None = None,
    ) -> ChatResponse:
        """POST one chat-completion request and normalize the envelope."""
        model = model or self.settings.PERPLEXITY_MODEL
        raw = await post_json(
            PROVIDER,
            PERPLEXITY_API_URL,
            headers={"Authorization": f"Bearer {self.api_key}"},
            body={
                "model": model,
                "messages": [m.model_dump() for m in messages],
                "temperature": DEFAULT_TEMPERATURE if temperature is None else temperature,
            },
            timeout=self.settings.HTTP_TIMEOUT_SECONDS,
        )
        response = parse_envelope(PROVIDER, raw, lambda data: self._parse_response(data, model))
        logger.info(
            "perplexity_call",
            model=response.model,
            chars=len(response.answer_text),
            tokens=response.usage.total_tokens,
            citations=len(response.citations),
        )
        return response

    async def search(self, query: str, model: str | None = None) -> ResearchResult:
        """Single-turn question, answer returned verbatim with citations."""
        response = await self.send([ChatMessage(role="user", content=query)], model=model)
        return ResearchResult(
            query=query,
            answer=response.answer_text,
            citations=response.citations,
            model=response.model,
            tokens_used=response.usage.total_tokens,
        )

    async def search_news(self, topic: str, timeframe: str = "last 24 hours") -> ResearchResult:
        plan = self.builder.build_news_query(topic, timeframe)
        return await self.search(plan.user_text, model=plan.model_hint)

    async def research_crypto(self, symbol: str) -> ResearchResult:
        plan = self.builder.build_research_query(symbol)
        return await self.search(plan.user_text, model=plan.model_hint)

    async def get_market_sentiment(self, symbol: str) -> MarketSentiment:
        """Structured sentiment for ``symbol``; degrades to neutral on unparseable output."""
        plan = self.builder.build_sentiment_query(symbol)
        response = await send_plan(self, plan)
        return extract(
            response.answer_text,
            MARKET_SENTIMENT_SCHEMA,
            subject=symbol,
            citations=response.citations,
        )

    @staticmethod
    def _parse_response(raw: dict, requested_model: str) -> ChatResponse:
        choices = raw.get("choices") or [{}]
        message = choices[0].get("message") or {}
        usage = raw.get("usage") or {}
        return ChatResponse(
            answer_text=message.get("content") or "",
            citations=raw.get("citations") or [],
            usage=TokenUsage(
                prompt_tokens=usage.get("prompt_tokens") or 0,
                completion_tokens=usage.get("completion_tokens") or 0,
                total_tokens=usage.get("total_tokens") or 0,
            ),
            model=raw.get("model") or requested_model,
        )


def create_perplexity_client(settings: Settings, api_key: str | None = None) -> PerplexityClient:
    """Build a client, failing fast when no API key is configured."""
    key = api_key or settings.PERPLEXITY_API_KEY
    if not key:
        raise ConfigurationError(
            "PERPLEXITY_API_KEY is required. Set it in the environment or a .env file."
        )
    return PerplexityClient(settings, api_key=key)
