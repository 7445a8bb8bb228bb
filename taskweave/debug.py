"""Levelled, buffered debug logging for task execution."""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from enum import IntEnum
from os import PathLike


class LogLevel(IntEnum):
    """Severity of a log entry; higher values are more severe."""

    TRACE = 0
    DEBUG = 1
    INFO = 2
    WARN = 3
    ERROR = 4

    def __str__(self) -> str:
        return self.name.ljust(5)


@dataclass(frozen=True)
class LogEntry:
    """One recorded log message."""

    timestamp: float
    level: LogLevel
    component: str
    message: str
    worker_id: int | None = None
    task_id: int | None = None

    def __str__(self) -> str:
        elapsed = max(0.0, time.monotonic() - self.timestamp)
        seconds = int(elapsed)
        millis = int((elapsed - seconds) * 1000)
        text = f"[{seconds:>5}.{millis:03}] [{str(self.level)}]"
        if self.worker_id is not None:
            text += f" [W{self.worker_id}]"
        if self.task_id is not None:
            text += f" [T{self.task_id}]"
        return f"{text} [{self.component}] {self.message}"


class DebugLogger:
    """Thread-safe logger that prints entries and keeps them in memory.

    Logging is disabled by default and the default threshold is INFO.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._enabled = False
        self._level = LogLevel.INFO
        self._logs: list[LogEntry] = []
        self._start_time = time.monotonic()

    def enable(self) -> None:
        """Turn logging on."""
        with self._lock:
            self._enabled = True

    def disable(self) -> None:
        """Turn logging off."""
        with self._lock:
            self._enabled = False

    def set_log_level(self, level: LogLevel) -> None:
        """Set the minimum level that gets recorded."""
        with self._lock:
            self._level = LogLevel(level)

    def is_enabled(self) -> bool:
        """Return True if logging is on."""
        with self._lock:
            return self._enabled

    def log(
        self,
        level: LogLevel,
        component: str,
        message: str,
        worker_id: int | None = None,
        task_id: int | None = None,
    ) -> None:
        """Record and print a message if logging is on and the level passes."""
        with self._lock:
            if not self._enabled or level < self._level:
                return
            entry = LogEntry(
                timestamp=self._start_time,
                level=LogLevel(level),
                component=component,
                message=message,
                worker_id=worker_id,
                task_id=task_id,
            )
            self._logs.append(entry)
        print(entry)

    def trace(self, component: str, message: str) -> None:
        self.log(LogLevel.TRACE, component, message)

    def debug(self, component: str, message: str) -> None:
        self.log(LogLevel.DEBUG, component, message)

    def info(self, component: str, message: str) -> None:
        self.log(LogLevel.INFO, component, message)

    def warn(self, component: str, message: str) -> None:
        self.log(LogLevel.WARN, component, message)

    def error(self, component: str, message: str) -> None:
        self.log(LogLevel.ERROR, component, message)

    def get_logs(self) -> list[LogEntry]:
        """Return a copy of all recorded entries."""
        with self._lock:
            return list(self._logs)

    def clear(self) -> None:
        """Discard all recorded entries."""
        with self._lock:
            self._logs.clear()

    def export_logs(self) -> str:
        """Return all entries as text, one line each."""
        return "".join(f"{entry}\n" for entry in self.get_logs())

    def save_to_file(self, filename: str | PathLike[str]) -> None:
        """Write the exported log text to ``filename``; raises OSError on failure."""
        with open(filename, "w", encoding="utf-8") as handle:
            handle.write(self.export_logs())