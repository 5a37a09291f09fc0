"""Extract structured sentiment records from free-form model answers.

Models are asked for JSON but often wrap it in prose or a fenced code block,
or ignore the instruction entirely. ``extract`` never raises: whatever the
text looks like, it returns a fully populated record. When no JSON object can
be recovered the record is built from defaults and the free-text field carries
a prefix of the raw answer instead.
"""

from __future__ import annotations

import json
import math
from dataclasses import dataclass
from typing import Any, Callable, Iterable

import structlog
from pydantic import BaseModel

from research_signals.models.sentiment import MarketSentiment, SentimentAnalysis

logger = structlog.get_logger()

FieldValidator = Callable[[Any], Any]


def text_field(default: str = "") -> FieldValidator:
    """Accept a non-blank string, otherwise ``default``."""

    def validate(value: Any) -> str:
        if isinstance(value, str) and value.strip():
            return value
        return default

    return validate


def number_field(default: float) -> FieldValidator:
    """Accept any finite int/float (bool excluded), otherwise ``default``."""

    def validate(value: Any) -> float:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return default
        try:
            number = float(value)
        except OverflowError:
            return default
        if not math.isfinite(number):
            return default
        return number

    return validate


def text_list_field() -> FieldValidator:
    """Accept a list, keeping only its string items, otherwise ``[]``."""

    def validate(value: Any) -> list[str]:
        if not isinstance(value, list):
            return []
        return [item for item in value if isinstance(item, str)]

    return validate


@dataclass(frozen=True)
class RecordSchema:
    name: str
    model: type[BaseModel]
    fields: dict[str, FieldValidator]
    fallback_field: str
    fallback_chars: int


MARKET_SENTIMENT_SCHEMA = RecordSchema(
    name="market_sentiment",
    model=MarketSentiment,
    fields={
        "sentiment": text_field("neutral"),
        "confidence": number_field(0.5),
        "summary": text_field(""),
        "key_factors": text_list_field(),
    },
    fallback_field="summary",
    fallback_chars=200,
)

SENTIMENT_ANALYSIS_SCHEMA = RecordSchema(
    name="sentiment_analysis",
    model=SentimentAnalysis,
    fields={
        "sentiment": text_field("neutral"),
        "confidence": number_field(0.5),
        "reasoning": text_field(""),
        "recommendation": text_field("hold"),
        "risk_level": text_field("medium"),
        "key_points": text_list_field(),
    },
    fallback_field="reasoning",
    fallback_chars=300,
)


def find_json_span(text: str) -> str | None:
    """Return the text from the first '{' to the last '}', if any."""
    start = text.find("{")
    end = text.rfind("}")
    if start < 0 or end <= start:
        return None
    return text[start : end + 1]


def parse_json_object(text: str) -> dict | None:
    """Parse the JSON object embedded in ``text``; None when there is none."""
    span = find_json_span(text)
    if span is None:
        return None

    try:
        data = json.loads(span)
    except (ValueError, RecursionError):
        # Several objects in one answer: keep the first complete one.
        try:
            data, _ = json.JSONDecoder().raw_decode(span)
        except (ValueError, RecursionError):
            return None

    if not isinstance(data, dict):
        return None
    return data


def extract(
    raw_text: str,
    schema: RecordSchema,
    *,
    subject: str,
    citations: Iterable[str] = (),
) -> BaseModel:
    """Map the model's answer onto ``schema``, falling back to defaults."""
    raw_text = raw_text or ""
    data = parse_json_object(raw_text)

    if data is None:
        logger.warning(
            "extraction_degraded",
            schema=schema.name,
            subject=subject,
            raw_text=raw_text[:200],
        )
        values = {name: validate(None) for name, validate in schema.fields.items()}
        values[schema.fallback_field] = raw_text[: schema.fallback_chars]
    else:
        values = {name: validate(data.get(name)) for name, validate in schema.fields.items()}

    return schema.model(symbol=subject, citations=list(citations), **values)
