"""Build prompts for news lookup, symbol research and sentiment analysis."""

from __future__ import annotations

from research_signals.errors import InvalidQueryError
from research_signals.models.query import QueryPlan
from research_signals.models.sentiment import MarketData

NEWS_MODEL = "sonar"
RESEARCH_MODEL = "sonar-pro"
SENTIMENT_MODEL = "sonar-pro"
ANALYSIS_MODEL = "gemini-3-flash-preview"

MARKET_SENTIMENT_SYSTEM_PROMPT = """You are a market analyst. Analyze the given cryptocurrency and respond ONLY with valid JSON in this exact format:
{
  "sentiment": "bullish" | "bearish" | "neutral",
  "confidence": 0.0-1.0,
  "summary": "one sentence summary",
  "key_factors": ["factor1", "factor2", "factor3"]
}"""

SENTIMENT_ANALYSIS_SYSTEM_PROMPT = """You are a professional crypto market analyst. Analyze the provided market data and respond ONLY with valid JSON in this exact format:
{
  "sentiment": "bullish" | "bearish" | "neutral",
  "confidence": 0.0-1.0,
  "reasoning": "2-3 sentence explanation",
  "recommendation": "buy" | "sell" | "hold",
  "risk_level": "low" | "medium" | "high",
  "key_points": ["point1", "point2", "point3"]
}

Be objective and data-driven. Consider both short-term and medium-term outlook."""

NO_MARKET_DATA = (
    "No specific market data provided. "
    "Analyze based on your general knowledge of current market conditions."
)


def _require(value: str, name: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise InvalidQueryError(f"{name} must be a non-empty string")
    return value.strip()


class QueryBuilder:
    def build_news_query(self, topic: str, timeframe: str = "last 24 hours") -> QueryPlan:
        """Time-boxed news lookup on the fast model."""
        topic = _require(topic, "topic")
        timeframe = _require(timeframe, "timeframe")
        parts = [
            f"What are the latest news and developments about {topic} in the {timeframe}?",
            "Focus on market-moving events, price action, and significant announcements.",
            "Be concise and factual.",
        ]
        return QueryPlan(
            user_text="\n".join(parts),
            model_hint=NEWS_MODEL,
            temperature_hint=0.2,
        )

    def build_research_query(self, symbol: str) -> QueryPlan:
        """Broader symbol research on the higher-quality model."""
        symbol = _require(symbol, "symbol")
        parts = [
            f"Provide a brief current market analysis for {symbol} cryptocurrency:",
            "1. Current price trend and recent movement",
            "2. Key news or events affecting price",
            "3. Market sentiment (bullish/bearish/neutral)",
            "4. Any upcoming events or catalysts",
            "Be concise and data-driven.",
        ]
        return QueryPlan(
            user_text="\n".join(parts),
            model_hint=RESEARCH_MODEL,
            temperature_hint=0.2,
        )

    def build_sentiment_query(self, symbol: str) -> QueryPlan:
        """JSON-only sentiment request (MarketSentiment shape)."""
        symbol = _require(symbol, "symbol")
        return QueryPlan(
            system_text=MARKET_SENTIMENT_SYSTEM_PROMPT,
            user_text=(
                f"Analyze the current market sentiment for {symbol}. "
                "Consider recent news, price action, and market conditions."
            ),
            model_hint=SENTIMENT_MODEL,
            temperature_hint=0.1,
        )

    def build_analysis_query(self, symbol: str, market_data: MarketData | None = None) -> QueryPlan:
        """JSON-only sentiment request (SentimentAnalysis shape) over supplied market data."""
        symbol = _require(symbol, "symbol")
        market_data = market_data or MarketData()

        sections = []
        if market_data.news:
            sections.append(f"Recent News:\n{market_data.news}")
        if market_data.price_action:
            sections.append(f"Price Action:\n{market_data.price_action}")
        if market_data.indicators:
            sections.append(f"Technical Indicators:\n{market_data.indicators}")
        context = "\n\n".join(sections) or NO_MARKET_DATA

        return QueryPlan(
            system_text=SENTIMENT_ANALYSIS_SYSTEM_PROMPT,
            user_text=(
                f"Analyze the current market sentiment for {symbol}:\n\n"
                f"{context}\n\n"
                "Provide your analysis as JSON."
            ),
            model_hint=ANALYSIS_MODEL,
            temperature_hint=0.2,
        )
