# depthcloud/utils/error_tracker.py
"""Centralised error tracking for conversion pipelines and the host node."""

from __future__ import annotations

import traceback
from collections import deque
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Final, Iterator

from depthcloud.utils.logger import get_logger

MAX_MESSAGES_PER_KEY: Final[int] = 32


@dataclass(slots=True)
class ErrorTracker:
    """Collect per-frame failures and contextual information during execution.

    Only the most recent ``max_messages`` messages are kept per key; ``count``
    still reports every recorded occurrence.
    """

    context: str = "ErrorTracker"
    max_messages: int = MAX_MESSAGES_PER_KEY
    errors: dict[str, deque[str]] = field(default_factory=dict)
    counts: dict[str, int] = field(default_factory=dict)

    def record(self, key: str, message: str, *, log: bool = True) -> None:
        if log:
            get_logger(self.context).error(f"{key}: {message}")
        if key not in self.errors:
            self.errors[key] = deque(maxlen=self.max_messages)
        self.errors[key].append(message)
        self.counts[key] = self.counts.get(key, 0) + 1

    def count(self, key: str | None = None) -> int:
        if key is not None:
            return self.counts.get(key, 0)
        return sum(self.counts.values())

    def clear(self) -> None:
        self.errors.clear()
        self.counts.clear()

    def summary(self) -> dict[str, list[str]]:
        logger = get_logger(self.context)
        if not self.errors:
            logger.info("No errors recorded")
            return {}
        for key in self.errors:
            logger.warning(f"Encountered {self.counts[key]} issues for {key}")
        return {key: list(messages) for key, messages in self.errors.items()}

    @contextmanager
    def scope(self, key: str) -> Iterator[None]:
        """Record an exception raised inside the block, then re-raise it."""
        try:
            yield
        except Exception as exc:
            self.record(key, f"{type(exc).__name__}: {exc}")
            get_logger(self.context).debug(f"Traceback:\n{traceback.format_exc()}")
            raise


__all__ = ["ErrorTracker", "MAX_MESSAGES_PER_KEY"]
