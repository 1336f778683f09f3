"""Timer state machine for PomoTimer.

States
------
Idle(mode)      Countdown frozen, waiting for the user.
Running(mode)   Countdown ticking once per second.

Transitions
-----------
Idle(m) → Running(m)        (start)
Running(m) → Idle(m)        (pause / reset)
Running(m) → Idle(next)     (countdown reaches 0 → complete_session)
Idle(m) → Idle(m')          (switch_mode)

Cadence
-------
After the Nth completed work session (1-indexed) the next break is a
LONG_BREAK exactly when ``N % sessions_before_long_break == 0``,
otherwise a SHORT_BREAK.  Any completed break returns to WORK.
"""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Protocol

from PyQt6.QtCore import QObject, QTimer, pyqtSignal

from ..settings import (
    Settings,
    SettingsStore,
    SettingsViolation,
    validate_settings,
)


logger = logging.getLogger(__name__)


# ── enums / values ────────────────────────────────────────────────────────


class Mode(Enum):
    WORK = "work"
    SHORT_BREAK = "shortBreak"
    LONG_BREAK = "longBreak"


@dataclass(frozen=True)
class TimerSnapshot:
    """Immutable view of the engine pushed to observers."""

    mode: Mode
    time_remaining: int
    is_running: bool
    completed_work_sessions: int


TICK_INTERVAL_MS = 1000


# ── errors ────────────────────────────────────────────────────────────────


class TimerError(Exception):
    """Base class for timer errors."""


class InvalidTransition(TimerError):
    """An operation was requested in a state that forbids it."""


class ValidationFailed(TimerError):
    """Candidate settings broke one or more bounds."""

    def __init__(self, violations: list[SettingsViolation]) -> None:
        self.violations = list(violations)
        super().__init__("; ".join(v.message for v in self.violations))


# ── collaborator contracts ────────────────────────────────────────────────


class AlertSignaler(Protocol):
    def on_session_complete(self, completed_mode: Mode) -> None: ...


class TimerObserver(Protocol):
    def on_state_change(self, state: TimerSnapshot) -> None: ...

    def on_session_complete(self, completed_mode: Mode) -> None: ...


# ── engine ────────────────────────────────────────────────────────────────


class TimerEngine(QObject):
    """Qt-based Pomodoro timer: one countdown, three modes.

    Signals
    -------
    state_changed(state: TimerSnapshot)
        Emitted after every mutation (start, pause, reset, tick,
        switch_mode, complete_session, apply_settings).
    session_completed(completed_mode: Mode)
        Emitted once per completed session, before the
        ``state_changed`` that announces the next mode.
    settings_save_failed(message: str)
        Emitted when new settings were applied but could not be
        written to the store.
    """

    state_changed = pyqtSignal(object)
    session_completed = pyqtSignal(object)
    settings_save_failed = pyqtSignal(str)

    def __init__(
        self,
        parent: QObject | None = None,
        *,
        settings: Settings | None = None,
        store: SettingsStore | None = None,
        signaler: AlertSignaler | None = None,
    ) -> None:
        super().__init__(parent)

        # ── configuration ─────────────────────────────────────────────
        if settings is None and store is not None:
            settings = store.load()
        if settings is not None:
            violations = validate_settings(settings)
            if violations:
                logger.warning(
                    "Using default settings; rejected: %s",
                    "; ".join(v.message for v in violations),
                )
                settings = None
        self._settings: Settings = dataclasses.replace(settings or Settings())
        self._store = store
        self._signaler = signaler

        # ── countdown state ───────────────────────────────────────────
        self._mode: Mode = Mode.WORK
        self._remaining: int = self._settings.work_duration
        self._running: bool = False
        self._completed_work_sessions: int = 0

        # ── Qt timer ──────────────────────────────────────────────────
        self._qt_timer = QTimer(self)
        self._qt_timer.setInterval(TICK_INTERVAL_MS)
        self._qt_timer.timeout.connect(self.tick)

    # ══════════════════════════════════════════════════════════════════
    #  PUBLIC PROPERTIES
    # ══════════════════════════════════════════════════════════════════

    @property
    def mode(self) -> Mode:
        return self._mode

    @property
    def time_remaining(self) -> int:
        """Seconds left on the clock."""
        return self._remaining

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def completed_work_sessions(self) -> int:
        return self._completed_work_sessions

    @property
    def settings(self) -> Settings:
        """A copy of the active settings."""
        return dataclasses.replace(self._settings)

    def duration_for(self, mode: Mode) -> int:
        return self._settings.duration_for(mode)

    def snapshot(self) -> TimerSnapshot:
        return TimerSnapshot(
            mode=self._mode,
            time_remaining=self._remaining,
            is_running=self._running,
            completed_work_sessions=self._completed_work_sessions,
        )

    def progress_fraction(self) -> float:
        """0.0 → 1.0 progress through the current mode's countdown."""
        total = self.duration_for(self._mode)
        if total <= 0:
            return 1.0
        elapsed = total - self._remaining
        return max(0.0, min(1.0, elapsed / total))

    def subscribe(self, observer: TimerObserver) -> None:
        """Connect *observer* to ``state_changed`` and ``session_completed``."""
        self.state_changed.connect(observer.on_state_change)
        self.session_completed.connect(observer.on_session_complete)

    # ══════════════════════════════════════════════════════════════════
    #  CONTROLS
    # ══════════════════════════════════════════════════════════════════

    def switch_mode(self, target: Mode) -> None:
        """Select *target* and refill the countdown.  Only valid when idle.

        Raises ``InvalidTransition`` while running; the current
        countdown is left alone.
        """
        if self._running:
            raise InvalidTransition(
                f"cannot switch to {target.value} while {self._mode.value} is running"
            )
        self._enter_mode(target)
        self._emit_state()

    def start(self) -> None:
        """Begin ticking.  No-op when already running."""
        if self._running:
            return
        self._running = True
        self._qt_timer.start()
        logger.debug("Started %s with %ds left", self._mode.value, self._remaining)
        self._emit_state()

    def pause(self) -> None:
        """Stop ticking, keeping the remaining time.  No-op when idle."""
        if not self._running:
            return
        self._stop_ticking()
        logger.debug("Paused %s with %ds left", self._mode.value, self._remaining)
        self._emit_state()

    def reset(self) -> None:
        """Stop and refill the countdown for the current mode.

        The completed-session count is kept.
        """
        self._stop_ticking()
        self._remaining = self.duration_for(self._mode)
        self._emit_state()

    def tick(self) -> None:
        """Advance the countdown by one second.

        Ticks that arrive while not running are ignored, so a tick
        queued before a pause or completion can never count twice.
        """
        if not self._running:
            return
        self._remaining -= 1
        if self._remaining <= 0:
            self._remaining = 0
            self._emit_state()
            self.complete_session()
            return
        self._emit_state()

    def complete_session(self) -> None:
        """Finish the current mode and move to the next one (idle)."""
        self._stop_ticking()
        completed = self._mode

        # ── alert (fire-and-forget) ───────────────────────────────────
        if self._signaler is not None:
            try:
                self._signaler.on_session_complete(completed)
            except Exception:
                logger.exception("Alert signaler failed for %s", completed.value)

        # ── advance cycle ─────────────────────────────────────────────
        if completed == Mode.WORK:
            self._completed_work_sessions += 1
            cadence = self._settings.sessions_before_long_break
            if self._completed_work_sessions % cadence == 0:
                next_mode = Mode.LONG_BREAK
            else:
                next_mode = Mode.SHORT_BREAK
        else:
            next_mode = Mode.WORK
        self._enter_mode(next_mode)

        logger.info(
            "Completed %s (%d work sessions); next: %s",
            completed.value, self._completed_work_sessions, next_mode.value,
        )
        self.session_completed.emit(completed)
        self._emit_state()

    def apply_settings(self, new_settings: Settings) -> None:
        """Validate, adopt and persist *new_settings*.

        Raises ``ValidationFailed`` (settings unchanged) when any bound
        is violated.  When idle the countdown is refilled from the new
        durations; a running countdown is left as it is.  A failing
        store is reported through ``settings_save_failed`` without
        rolling back.
        """
        violations = validate_settings(new_settings)
        if violations:
            raise ValidationFailed(violations)

        self._settings = dataclasses.replace(new_settings)
        if self._running:
            self._emit_state()
        else:
            self.reset()

        if self._store is None:
            return
        try:
            self._store.save(self._settings)
        except OSError as exc:
            logger.error("Could not save settings: %s", exc)
            self.settings_save_failed.emit(str(exc))

    # ══════════════════════════════════════════════════════════════════
    #  INTERNAL
    # ══════════════════════════════════════════════════════════════════

    def _enter_mode(self, mode: Mode) -> None:
        self._mode = mode
        self._remaining = self.duration_for(mode)

    def _stop_ticking(self) -> None:
        self._qt_timer.stop()
        self._running = False

    def _emit_state(self) -> None:
        self.state_changed.emit(self.snapshot())
