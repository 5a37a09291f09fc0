"""Entry points: `perplexity` and `gemini` command-line tools."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from typing import Awaitable, Callable

import structlog
from pydantic import ValidationError

from research_signals.config import Settings
from research_signals.errors import ConfigurationError, ResearchSignalsError
from research_signals.formatters import TerminalFormatter
from research_signals.gemini_client import create_gemini_client
from research_signals.models.sentiment import MarketData
from research_signals.perplexity_client import create_perplexity_client
from research_signals.signal_store import SignalStore

VERSION = "1.0.0"

Handler = Callable[[argparse.Namespace, Settings], Awaitable[int]]

formatter = TerminalFormatter()


def configure_logging(level: str) -> None:
    """Render structlog events to stderr so stdout carries only results."""
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(colors=False),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, level.upper(), logging.WARNING)
        ),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
    )


def load_settings() -> Settings:
    try:
        return Settings()
    except ValidationError as e:
        raise ConfigurationError(f"Invalid settings: {e}") from e


def _save_or_print(output: str | None, record) -> None:
    store = SignalStore()
    if output:
        total = store.append(output, record)
        print(formatter.format_saved(output, total))
    else:
        print(formatter.format_json(store.to_signal(record)))


# --- perplexity ---


async def _perplexity_search(args: argparse.Namespace, settings: Settings) -> int:
    client = create_perplexity_client(settings)
    model = args.model or settings.PERPLEXITY_MODEL
    print(f"Searching with {model}...")
    result = await client.search(args.query, model=model)
    print(formatter.format_research("Answer:", result, show_tokens=True))
    return 0


async def _perplexity_news(args: argparse.Namespace, settings: Settings) -> int:
    client = create_perplexity_client(settings)
    print(f"Fetching news for {args.topic}...")
    result = await client.search_news(args.topic, args.timeframe)
    print(formatter.format_research(f"News: {args.topic}", result))
    return 0


async def _perplexity_crypto(args: argparse.Namespace, settings: Settings) -> int:
    client = create_perplexity_client(settings)
    symbol = args.symbol.upper()
    print(f"Researching {symbol}...")
    result = await client.research_crypto(symbol)
    print(formatter.format_research(f"{symbol} Analysis:", result))
    return 0


async def _perplexity_sentiment(args: argparse.Namespace, settings: Settings) -> int:
    client = create_perplexity_client(settings)
    symbol = args.symbol.upper()
    print(f"Analyzing sentiment for {symbol}...")
    result = await client.get_market_sentiment(symbol)
    print(formatter.format_market_sentiment(result))
    _save_or_print(args.output, result)
    return 0


def build_perplexity_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="perplexity", description="Perplexity AI research tool for trading"
    )
    parser.add_argument("--version", action="version", version=VERSION)
    sub = parser.add_subparsers(dest="command")

    search = sub.add_parser("search", help="Search for information")
    search.add_argument("query")
    search.add_argument("-m", "--model", help="Model to use (defaults to PERPLEXITY_MODEL)")

    news = sub.add_parser("news", help="Get latest news on a topic")
    news.add_argument("topic")
    news.add_argument("-t", "--timeframe", default="last 24 hours", help="Timeframe for news")

    crypto = sub.add_parser("crypto", help="Research a cryptocurrency (e.g., BTC, ETH)")
    crypto.add_argument("symbol")

    sentiment = sub.add_parser("sentiment", help="Get market sentiment for a cryptocurrency (returns JSON)")
    sentiment.add_argument("symbol")
    sentiment.add_argument("-o", "--output", help="Save JSON to file (appends to existing signals)")

    return parser


PERPLEXITY_COMMANDS: dict[str, Handler] = {
    "search": _perplexity_search,
    "news": _perplexity_news,
    "crypto": _perplexity_crypto,
    "sentiment": _perplexity_sentiment,
}


# --- gemini ---


async def _gemini_chat(args: argparse.Namespace, settings: Settings) -> int:
    client = create_gemini_client(settings)
    model = args.model or settings.GEMINI_MODEL
    print(f"Chatting with {model}...")
    result = await client.chat(args.prompt, model=model)
    print(f"\nResponse:\n{result.answer}")
    return 0


async def _gemini_analyze(args: argparse.Namespace, settings: Settings) -> int:
    client = create_gemini_client(settings)
    symbol = args.symbol.upper()
    print(f"Analyzing sentiment for {symbol}...")
    result = await client.analyze_sentiment(
        symbol,
        MarketData(news=args.news, price_action=args.price, indicators=args.indicators),
    )
    print(formatter.format_sentiment_analysis("Sentiment Analysis", result))
    _save_or_print(args.output, result)
    return 0


async def _gemini_research(args: argparse.Namespace, settings: Settings) -> int:
    client = create_gemini_client(settings)
    symbol = args.symbol.upper()
    print(f"Analyzing research for {symbol}...")
    result = await client.analyze_research(symbol, args.research)
    print(formatter.format_sentiment_analysis("Research Analysis", result))
    _save_or_print(args.output, result)
    return 0


def build_gemini_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gemini", description="Gemini AI sentiment analysis tool for trading"
    )
    parser.add_argument("--version", action="version", version=VERSION)
    sub = parser.add_subparsers(dest="command")

    chat = sub.add_parser("chat", help="Chat with Gemini")
    chat.add_argument("prompt")
    chat.add_argument("-m", "--model", help="Model to use (defaults to GEMINI_MODEL)")

    analyze = sub.add_parser("analyze", help="Analyze market sentiment for a cryptocurrency")
    analyze.add_argument("symbol")
    analyze.add_argument("-n", "--news", help="Recent news to analyze")
    analyze.add_argument("-p", "--price", help="Price action description")
    analyze.add_argument("-i", "--indicators", help="Technical indicators")
    analyze.add_argument("-o", "--output", help="Save JSON to file (appends to existing)")

    research = sub.add_parser("research", help="Analyze Perplexity research output for trading signals")
    research.add_argument("symbol")
    research.add_argument("research")
    research.add_argument("-o", "--output", help="Save JSON to file (appends to existing)")

    return parser


GEMINI_COMMANDS: dict[str, Handler] = {
    "chat": _gemini_chat,
    "analyze": _gemini_analyze,
    "research": _gemini_research,
}


# --- entry points ---


def _run(parser: argparse.ArgumentParser, commands: dict[str, Handler], argv: list[str] | None) -> int:
    args = parser.parse_args(argv)
    if args.command is None:
        parser.print_help()
        return 0

    try:
        settings = load_settings()
        configure_logging(settings.LOG_LEVEL)
        return asyncio.run(commands[args.command](args, settings))
    except ResearchSignalsError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def perplexity_main(argv: list[str] | None = None) -> int:
    return _run(build_perplexity_parser(), PERPLEXITY_COMMANDS, argv)


def gemini_main(argv: list[str] | None = None) -> int:
    return _run(build_gemini_parser(), GEMINI_COMMANDS, argv)
