"""Unit tests for QueryBuilder — prompt construction per query type."""

from __future__ import annotations

import pytest

from research_signals.errors import InvalidQueryError
from research_signals.models.sentiment import MarketData
from research_signals.query_builder import NO_MARKET_DATA, QueryBuilder


@pytest.fixture
def builder():
    return QueryBuilder()


class TestNewsQuery:
    def test_contains_topic_and_timeframe(self, builder):
        plan = builder.build_news_query("Ethereum DeFi", "last 7 days")
        assert "about Ethereum DeFi in the last 7 days?" in plan.user_text
        assert plan.system_text is None
        assert plan.model_hint == "sonar"

    def test_default_timeframe(self, builder):
        plan = builder.build_news_query("Bitcoin")
        assert "last 24 hours" in plan.user_text


class TestResearchQuery:
    def test_lists_research_points(self, builder):
        plan = builder.build_research_query("SOL")
        assert "SOL cryptocurrency" in plan.user_text
        assert "Market sentiment (bullish/bearish/neutral)" in plan.user_text
        assert plan.model_hint == "sonar-pro"


class TestSentimentQuery:
    def test_json_only_system_text(self, builder):
        plan = builder.build_sentiment_query("BTC")
        assert "respond ONLY with valid JSON" in plan.system_text
        assert '"key_factors"' in plan.system_text
        assert "BTC" in plan.user_text
        assert plan.temperature_hint == 0.1

    def test_messages_put_system_first(self, builder):
        messages = builder.build_sentiment_query("BTC").messages()
        assert [m.role for m in messages] == ["system", "user"]


class TestAnalysisQuery:
    def test_includes_only_given_sections(self, builder):
        plan = builder.build_analysis_query("ETH", MarketData(price_action="Broke 4k"))
        assert "Price Action:\nBroke 4k" in plan.user_text
        assert "Recent News" not in plan.user_text
        assert "Technical Indicators" not in plan.user_text
        assert NO_MARKET_DATA not in plan.user_text

    def test_no_data_fallback(self, builder):
        plan = builder.build_analysis_query("ETH")
        assert NO_MARKET_DATA in plan.user_text
        assert plan.user_text.endswith("Provide your analysis as JSON.")
        assert '"recommendation"' in plan.system_text
        assert plan.model_hint == "gemini-3-flash-preview"
        assert plan.temperature_hint == 0.2


class TestValidation:
    @pytest.mark.parametrize("subject", ["", "   "])
    def test_empty_subject_rejected(self, builder, subject):
        with pytest.raises(InvalidQueryError):
            builder.build_sentiment_query(subject)
        with pytest.raises(InvalidQueryError):
            builder.build_research_query(subject)
        with pytest.raises(InvalidQueryError):
            builder.build_news_query(subject)
        with pytest.raises(InvalidQueryError):
            builder.build_analysis_query(subject)

    def test_invalid_query_is_value_error(self, builder):
        with pytest.raises(ValueError):
            builder.build_news_query("")

    def test_subject_is_trimmed(self, builder):
        plan = builder.build_sentiment_query("  BTC  ")
        assert "for BTC." in plan.user_text
