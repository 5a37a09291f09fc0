"""Append-only JSON-array file of timestamped signals.

The file holds a pretty-printed JSON array. A missing file starts a new
array; a file holding a single object (the legacy format) becomes the first
element. A file that cannot be parsed is discarded and replaced: its content
is NOT preserved. The read-modify-write is not locked, so two invocations
writing the same file at once race and the later write wins.
"""

from __future__ import annotations

import json
import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable

import structlog
from pydantic import BaseModel

from research_signals.errors import PersistenceError

logger = structlog.get_logger()


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def format_timestamp(ts: datetime) -> str:
    """ISO-8601 UTC with milliseconds and a trailing Z."""
    return ts.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class SignalStore:
    def __init__(self, clock: Callable[[], datetime] = _utc_now) -> None:
        self.clock = clock

    def to_signal(self, record: BaseModel | dict) -> dict:
        """Record fields plus a timestamp captured now."""
        data = record.model_dump(mode="json") if isinstance(record, BaseModel) else dict(record)
        data["timestamp"] = format_timestamp(self.clock())
        return data

    def load(self, path: str | Path) -> list:
        """Current signals; [] for a missing or unparseable file."""
        path = Path(path)
        if not path.exists():
            return []

        try:
            content = path.read_bytes()
        except OSError as e:
            raise PersistenceError(str(path), str(e)) from e

        try:
            signals = json.loads(content.decode("utf-8"))
        except (ValueError, RecursionError) as e:
            logger.warning("signal_file_corrupt", path=str(path), error=str(e))
            return []

        if not isinstance(signals, list):
            signals = [signals]
        return signals

    def append(self, path: str | Path, record: BaseModel | dict) -> int:
        """Append ``record`` with a timestamp; returns the new signal count."""
        path = Path(path)
        signals = self.load(path)
        signals.append(self.to_signal(record))
        self._write(path, signals)
        logger.info("signal_saved", path=str(path), total=len(signals))
        return len(signals)

    @staticmethod
    def _write(path: Path, signals: list) -> None:
        """Replace the file in one step so a failed write leaves the old content intact."""
        payload = json.dumps(signals, indent=2, ensure_ascii=False)
        tmp_name = None
        try:
            mode = path.stat().st_mode & 0o777 if path.exists() else 0o644
            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                dir=path.parent,
                prefix=f".{path.name}.",
                suffix=".tmp",
                delete=False,
            ) as tmp:
                tmp_name = tmp.name
                tmp.write(payload)
            os.chmod(tmp_name, mode)
            os.replace(tmp_name, path)
        except OSError as e:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise PersistenceError(str(path), str(e)) from e
