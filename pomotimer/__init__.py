"""PomoTimer — a Pomodoro work/break interval timer."""

__version__ = "0.1.0"
