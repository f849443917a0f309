"""
Audit record sinks.

Every prompt sent to the model and every raw response received is written
as a human-readable record so a run can be inspected afterwards. Sinks are
fire-and-forget: ``record`` never raises, and returns the record location
(or ``None`` when nothing was persisted).
"""

from __future__ import annotations

import subprocess
import threading
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Protocol, Sequence, runtime_checkable

from daybrief.logging.logger import LoggerProtocol, LogLevel, StdOutLogger


@runtime_checkable
class RecordSink(Protocol):
    def record(
        self,
        category: str,
        payload: str,
        candidate_id: str | None = None,
        generation: int | None = None,
    ) -> str | None: ...


def render_exchange(
    category: str,
    prompt: str,
    response: str,
    candidate_id: str | None = None,
    generation: int | None = None,
) -> str:
    """Format a prompt/response pair the way exchange records are stored."""
    lines = [
        f"{category.upper()} LOG",
        "=" * (len(category) + 4),
        f"Timestamp: {datetime.now(timezone.utc).isoformat()}",
    ]
    if candidate_id:
        lines.append(f"Candidate ID: {candidate_id}")
    if generation is not None:
        lines.append(f"Generation: {generation}")
    lines += [
        "",
        "PROMPT SENT TO AI:",
        "=" * 18,
        prompt,
        "",
        "AI RESPONSE:",
        "=" * 12,
        response,
        "",
        "END OF LOG",
        "=" * 10,
    ]
    return "\n".join(lines)


def record_name(category: str, candidate_id: str | None, generation: int | None, stamp_ms: int) -> str:
    candidate_info = f"-{candidate_id}" if candidate_id else ""
    gen_info = f"-gen{generation}" if generation is not None else ""
    return f"{category}{candidate_info}{gen_info}-{stamp_ms}.txt"


class FileRecordSink:
    """Write one text file per record under ``directory``.

    When ``open_command`` is given (e.g. ``["xdg-open"]``) each written file
    is handed to that command without waiting for it.
    """

    def __init__(
        self,
        directory: str | Path,
        *,
        open_command: Sequence[str] | None = None,
        logger: LoggerProtocol | None = None,
    ) -> None:
        self.directory = Path(directory)
        self.open_command = list(open_command) if open_command else None
        self.logger: LoggerProtocol = logger or StdOutLogger()
        self._lock = threading.Lock()
        self._last_stamp = 0
        self._viewers: list[subprocess.Popen] = []

    def _next_stamp(self) -> int:
        # Millisecond stamps collide when records are written back to back.
        with self._lock:
            stamp = max(int(time.time() * 1000), self._last_stamp + 1)
            self._last_stamp = stamp
            return stamp

    def record(
        self,
        category: str,
        payload: str,
        candidate_id: str | None = None,
        generation: int | None = None,
    ) -> str | None:
        path = self.directory / record_name(category, candidate_id, generation, self._next_stamp())
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            path.write_text(payload, encoding="utf-8")
        except OSError as exc:
            self.logger.log(f"⚠️  Could not write {category} record to {path}: {exc}", LogLevel.WARNING)
            return None

        self.logger.log(f"📝 {category} logged to {path}", LogLevel.DEBUG)
        if self.open_command:
            self._open(path)
        return str(path)

    def _open(self, path: Path) -> None:
        with self._lock:
            # poll() reaps viewers that have exited
            self._viewers = [p for p in self._viewers if p.poll() is None]
            try:
                viewer = subprocess.Popen(
                    [*self.open_command, str(path)],  # type: ignore[misc]
                    stdout=subprocess.DEVNULL,
                    stderr=subprocess.DEVNULL,
                    start_new_session=True,
                )
            except OSError as exc:
                self.logger.log(f"⚠️  Could not open {path}: {exc}", LogLevel.WARNING)
                return
            self._viewers.append(viewer)


@dataclass
class StoredRecord:
    category: str
    payload: str
    candidate_id: str | None
    generation: int | None


class MemoryRecordSink:
    """Keep records in memory; handy for tests and dry runs."""

    def __init__(self) -> None:
        self.records: list[StoredRecord] = []

    def record(
        self,
        category: str,
        payload: str,
        candidate_id: str | None = None,
        generation: int | None = None,
    ) -> str | None:
        self.records.append(StoredRecord(category, payload, candidate_id, generation))
        return f"memory://{len(self.records) - 1}"

    def by_category(self, category: str) -> list[StoredRecord]:
        return [r for r in self.records if r.category == category]


class NullRecordSink:
    def record(
        self,
        category: str,
        payload: str,
        candidate_id: str | None = None,
        generation: int | None = None,
    ) -> str | None:
        return None


def safe_record(
    sink: RecordSink,
    logger: LoggerProtocol,
    category: str,
    payload: str,
    candidate_id: str | None = None,
    generation: int | None = None,
) -> str | None:
    """Call ``sink.record`` and absorb anything a third-party sink raises."""
    try:
        return sink.record(category, payload, candidate_id=candidate_id, generation=generation)
    except Exception as exc:
        logger.log(f"⚠️  Record sink failed for {category}: {exc}", LogLevel.WARNING)
        return None
