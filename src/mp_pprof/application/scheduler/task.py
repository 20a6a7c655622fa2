"""Application scheduler – ScheduledTask dataclass."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

__all__ = ["ScheduledTask"]


@dataclass
class ScheduledTask:
    """A one-shot callback due ``delay_seconds`` after it was scheduled."""

    name: str
    callback: Callable[[], None]
    delay_seconds: float
    due_at: float
    fired: bool = False

    def __post_init__(self) -> None:
        if self.delay_seconds < 0:
            raise ValueError("ScheduledTask delay_seconds must be >= 0")
