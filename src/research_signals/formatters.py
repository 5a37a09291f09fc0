"""Plain-text rendering of results for the terminal."""

from __future__ import annotations

import json

from research_signals.models.research import ResearchResult
from research_signals.models.sentiment import MarketSentiment, SentimentAnalysis


class TerminalFormatter:
    def format_research(self, title: str, result: ResearchResult, show_tokens: bool = False) -> str:
        lines = [f"\n{title}", result.answer]
        lines.extend(self._numbered("Sources", result.citations))
        if show_tokens:
            lines.append(f"\nTokens used: {result.tokens_used}")
        return "\n".join(lines)

    def format_market_sentiment(self, result: MarketSentiment) -> str:
        lines = [
            f"\n{result.symbol} Sentiment:",
            f"  Sentiment: {result.sentiment.upper()}",
            f"  Confidence: {self._percent(result.confidence)}",
            f"  Summary: {result.summary}",
        ]
        lines.extend(self._numbered("Key Factors", result.key_factors))
        return "\n".join(lines)

    def format_sentiment_analysis(self, title: str, result: SentimentAnalysis) -> str:
        lines = [
            f"\n{result.symbol} {title}:",
            f"  Sentiment: {result.sentiment.upper()}",
            f"  Confidence: {self._percent(result.confidence)}",
            f"  Recommendation: {result.recommendation.upper()}",
            f"  Risk Level: {result.risk_level.upper()}",
            f"  Reasoning: {result.reasoning}",
        ]
        lines.extend(self._numbered("Key Points", result.key_points))
        return "\n".join(lines)

    def format_json(self, signal: dict) -> str:
        return "\nJSON Output:\n" + json.dumps(signal, indent=2, ensure_ascii=False)

    def format_saved(self, path: str, total: int) -> str:
        return f"\n✓ Saved to {path} ({total} signals total)"

    @staticmethod
    def _numbered(heading: str, items: list[str]) -> list[str]:
        if not items:
            return []
        return [f"\n{heading}:"] + [f"  {i}. {item}" for i, item in enumerate(items, start=1)]

    @staticmethod
    def _percent(value: float) -> str:
        return f"{value * 100:.0f}%"
