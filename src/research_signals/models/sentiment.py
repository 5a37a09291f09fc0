"""MarketSentiment, SentimentAnalysis, MarketData Pydantic models."""

from pydantic import BaseModel


class MarketSentiment(BaseModel):
    """Perplexity sentiment signal."""

    symbol: str = ""
    sentiment: str = "neutral"  # bullish, bearish, neutral
    confidence: float = 0.5
    summary: str = ""
    key_factors: list[str] = []
    citations: list[str] = []

    model_config = {"frozen": True}


class SentimentAnalysis(BaseModel):
    """Gemini sentiment signal with a trade recommendation."""

    symbol: str = ""
    sentiment: str = "neutral"  # bullish, bearish, neutral
    confidence: float = 0.5
    reasoning: str = ""
    recommendation: str = "hold"  # buy, sell, hold
    risk_level: str = "medium"  # low, medium, high
    key_points: list[str] = []
    citations: list[str] = []

    model_config = {"frozen": True}


class MarketData(BaseModel):
    news: str | None = None
    price_action: str | None = None
    indicators: str | None = None
