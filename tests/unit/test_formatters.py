"""Unit tests for TerminalFormatter — plain-text result rendering."""

from __future__ import annotations

import pytest

from research_signals.formatters import TerminalFormatter
from research_signals.models.research import ResearchResult
from research_signals.models.sentiment import MarketSentiment, SentimentAnalysis


@pytest.fixture
def formatter():
    return TerminalFormatter()


class TestFormatResearch:
    def test_with_sources_and_tokens(self, formatter):
        result = ResearchResult(answer="BTC rallied.", citations=["https://a.example"], tokens_used=42)
        text = formatter.format_research("Answer:", result, show_tokens=True)
        assert "Answer:\nBTC rallied." in text
        assert "Sources:\n  1. https://a.example" in text
        assert text.endswith("Tokens used: 42")

    def test_without_sources(self, formatter):
        text = formatter.format_research("News: BTC", ResearchResult(answer="Quiet day."))
        assert "Sources" not in text
        assert "Tokens used" not in text


class TestFormatSentiment:
    def test_market_sentiment(self, formatter):
        result = MarketSentiment(symbol="BTC", sentiment="bearish", confidence=0.456, summary="Outflows.")
        text = formatter.format_market_sentiment(result)
        assert "BTC Sentiment:" in text
        assert "Sentiment: BEARISH" in text
        assert "Confidence: 46%" in text
        assert "Key Factors" not in text

    def test_sentiment_analysis(self, formatter):
        result = SentimentAnalysis(symbol="ETH", key_points=["One", "Two"])
        text = formatter.format_sentiment_analysis("Research Analysis", result)
        assert "ETH Research Analysis:" in text
        assert "Recommendation: HOLD" in text
        assert "Risk Level: MEDIUM" in text
        assert "Key Points:\n  1. One\n  2. Two" in text


class TestFormatPersistence:
    def test_saved_line(self, formatter):
        assert formatter.format_saved("out.json", 3) == "\n✓ Saved to out.json (3 signals total)"

    def test_json_block(self, formatter):
        text = formatter.format_json({"symbol": "BTC"})
        assert text == '\nJSON Output:\n{\n  "symbol": "BTC"\n}'
