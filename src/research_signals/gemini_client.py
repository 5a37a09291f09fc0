"""Gemini generateContent API wrapper."""

from __future__ import annotations

from typing import Sequence

import structlog

from research_signals.config import Settings
from research_signals.errors import ConfigurationError
from research_signals.extractor import SENTIMENT_ANALYSIS_SCHEMA, extract
from research_signals.gateway import parse_envelope, post_json, send_plan
from research_signals.models.chat import ChatMessage, ChatResponse, TokenUsage
from research_signals.models.research import ResearchResult
from research_signals.models.sentiment import MarketData, SentimentAnalysis
from research_signals.query_builder import QueryBuilder

logger = structlog.get_logger()

PROVIDER = "Gemini"
GEMINI_API_BASE = "https://generativelanguage.googleapis.com/v1beta"
DEFAULT_TEMPERATURE = 0.3


class GeminiClient:
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
        """Fold chat messages into one generateContent request."""
        model = model or self.settings.GEMINI_MODEL
        raw = await post_json(
            PROVIDER,
            f"{GEMINI_API_BASE}/models/{model}:generateContent",
            params={"key": self.api_key},
            body=self._build_body(messages, temperature),
            timeout=self.settings.HTTP_TIMEOUT_SECONDS,
        )
        response = parse_envelope(PROVIDER, raw, lambda data: self._parse_response(data, model))
        logger.info(
            "gemini_call",
            model=response.model,
            chars=len(response.answer_text),
            tokens=response.usage.total_tokens,
        )
        return response

    async def chat(self, prompt: str, model: str | None = None) -> ResearchResult:
        response = await self.send([ChatMessage(role="user", content=prompt)], model=model)
        return ResearchResult(
            query=prompt,
            answer=response.answer_text,
            citations=response.citations,
            model=response.model,
            tokens_used=response.usage.total_tokens,
        )

    async def analyze_sentiment(self, symbol: str, market_data: MarketData | None = None) -> SentimentAnalysis:
        """Structured sentiment with recommendation and risk level."""
        plan = self.builder.build_analysis_query(symbol, market_data)
        response = await send_plan(self, plan)
        return extract(
            response.answer_text,
            SENTIMENT_ANALYSIS_SCHEMA,
            subject=symbol,
            citations=response.citations,
        )

    async def analyze_research(self, symbol: str, research: str) -> SentimentAnalysis:
        """Turn pasted Perplexity research into a trading signal."""
        return await self.analyze_sentiment(symbol, MarketData(news=research))

    @staticmethod
    def _build_body(messages: Sequence[ChatMessage], temperature: float | None) -> dict:
        system = [m.content for m in messages if m.role == "system"]
        contents = [
            {
                "role": "model" if m.role == "assistant" else "user",
                "parts": [{"text": m.content}],
            }
            for m in messages
            if m.role != "system"
        ]
        body = {
            "contents": contents,
            "generationConfig": {
                "temperature": DEFAULT_TEMPERATURE if temperature is None else temperature,
                "topP": 0.95,
                "topK": 40,
            },
        }
        if system:
            body["systemInstruction"] = {"parts": [{"text": "\n\n".join(system)}]}
        return body

    @staticmethod
    def _parse_response(raw: dict, requested_model: str) -> ChatResponse:
        candidates = raw.get("candidates") or [{}]
        content = candidates[0].get("content") or {}
        parts = content.get("parts") or [{}]
        usage = raw.get("usageMetadata") or {}
        return ChatResponse(
            answer_text=parts[0].get("text") or "",
            citations=[],
            usage=TokenUsage(
                prompt_tokens=usage.get("promptTokenCount") or 0,
                completion_tokens=usage.get("candidatesTokenCount") or 0,
                total_tokens=usage.get("totalTokenCount") or 0,
            ),
            model=raw.get("modelVersion") or requested_model,
        )


def create_gemini_client(settings: Settings, api_key: str | None = None) -> GeminiClient:
    """Build a client, failing fast when no API key is configured."""
    key = api_key or settings.GEMINI_API_KEY
    if not key:
        raise ConfigurationError(
            "GEMINI_API_KEY is required. Set it in the environment or a .env file."
        )
    return GeminiClient(settings, api_key=key)
