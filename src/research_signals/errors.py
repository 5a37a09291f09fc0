"""Exception hierarchy surfaced to the CLI."""

from __future__ import annotations


class ResearchSignalsError(Exception):
    """Base class for every fatal error raised by the tools."""


class ConfigurationError(ResearchSignalsError):
    """A required credential or setting is missing."""


class TransportError(ResearchSignalsError):
    """The upstream API could not be reached."""


class UpstreamError(ResearchSignalsError):
    """The upstream API answered with a non-success status or an unreadable body."""

    def __init__(self, provider: str, status_code: int, body: str) -> None:
        self.provider = provider
        self.status_code = status_code
        self.body = body
        super().__init__(f"{provider} API error: {status_code} - {body[:500]}")


class PersistenceError(ResearchSignalsError):
    """The signal file could not be read or written."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        super().__init__(f"Could not persist signal to {path}: {reason}")


class InvalidQueryError(ResearchSignalsError, ValueError):
    """A query builder received an empty subject or topic."""
