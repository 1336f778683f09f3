"""Shared test helpers for PomoTimer."""

from pomotimer.timer.engine import TimerEngine, Mode


class SignalCollector:
    """Utility to capture pyqtSignal emissions into a list."""

    def __init__(self):
        self.items: list = []

    def slot(self, *args):
        self.items.append(args if len(args) > 1 else args[0] if args else None)

    def __call__(self, *args):
        self.slot(*args)

    def __len__(self):
        return len(self.items)

    def __getitem__(self, idx):
        return self.items[idx]

    @property
    def last(self):
        return self.items[-1] if self.items else None

    def clear(self):
        self.items.clear()


class RecordingSignaler:
    """AlertSignaler that remembers what it was told."""

    def __init__(self, fail: bool = False):
        self.calls: list[Mode] = []
        self.fail = fail

    def on_session_complete(self, completed_mode: Mode) -> None:
        self.calls.append(completed_mode)
        if self.fail:
            raise RuntimeError("speaker on fire")


class FailingStore:
    """SettingsStore whose disk is always full."""

    def __init__(self):
        self.attempts = 0

    def load(self):
        return None

    def save(self, settings):
        self.attempts += 1
        raise OSError("No space left on device")


class FakeSoundManager:
    def __init__(self):
        self.played: list[str] = []
        self.volume = 70
        self.enabled = True

    def play(self, name: str) -> None:
        if self.enabled:
            self.played.append(name)

    def set_volume(self, level: int) -> None:
        self.volume = level

    def set_enabled(self, enabled: bool) -> None:
        self.enabled = enabled


def complete_session(engine: TimerEngine) -> None:
    """Fast-complete the current session by jumping to the last tick."""
    if not engine.is_running:
        engine.start()
    engine._remaining = 1
    engine.tick()
