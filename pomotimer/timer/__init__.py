"""Timer package."""

from .engine import (
    TimerEngine,
    TimerSnapshot,
    Mode,
    TimerError,
    InvalidTransition,
    ValidationFailed,
    AlertSignaler,
    TimerObserver,
    TICK_INTERVAL_MS,
)

__all__ = [
    "TimerEngine",
    "TimerSnapshot",
    "Mode",
    "TimerError",
    "InvalidTransition",
    "ValidationFailed",
    "AlertSignaler",
    "TimerObserver",
    "TICK_INTERVAL_MS",
]
