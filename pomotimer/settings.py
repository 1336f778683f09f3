"""Timer settings, bounds validation, and JSON persistence.

Settings are stored at:
    ~/Library/Application Support/PomoTimer/settings.json

Set ``POMOTIMER_HOME`` to keep the file (and the sound cache) somewhere
else.

Usage::

    store = JsonSettingsStore()
    settings = store.load() or Settings()
    settings.work_duration = 30 * 60
    store.save(settings)
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, asdict, fields
from pathlib import Path
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from .timer.engine import Mode


logger = logging.getLogger(__name__)


APP_SUPPORT_DIR = Path(
    os.environ.get("POMOTIMER_HOME")
    or Path.home() / "Library" / "Application Support" / "PomoTimer"
)
SETTINGS_PATH = APP_SUPPORT_DIR / "settings.json"

SETTINGS_VERSION = 1


@dataclass
class Settings:
    """All user-configurable preferences."""

    # ── timer ─────────────────────────────────────────────────────────
    work_duration: int = 25 * 60           # seconds
    short_break_duration: int = 5 * 60
    long_break_duration: int = 15 * 60
    sessions_before_long_break: int = 4

    # ── alerts ────────────────────────────────────────────────────────
    sound_enabled: bool = True
    sound_volume: int = 70                 # 0-100
    notifications_enabled: bool = True

    def duration_for(self, mode: Mode) -> int:
        """Seconds configured for *mode*."""
        from .timer.engine import Mode

        if mode == Mode.WORK:
            return self.work_duration
        if mode == Mode.SHORT_BREAK:
            return self.short_break_duration
        return self.long_break_duration


# ═══════════════════════════════════════════════════════════════════════
#  VALIDATION
# ═══════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class SettingsViolation:
    """One violated bound: which field, the allowed range, and why."""

    field: str
    minimum: int
    maximum: int
    unit: str
    message: str


# (field, label, min, max, unit, seconds per unit)
_BOUNDS: tuple[tuple[str, str, int, int, str, int], ...] = (
    ("work_duration", "Work duration", 1, 60, "minutes", 60),
    ("short_break_duration", "Short break", 1, 30, "minutes", 60),
    ("long_break_duration", "Long break", 1, 60, "minutes", 60),
    ("sessions_before_long_break", "Sessions before long break", 1, 10, "", 1),
    ("sound_volume", "Volume", 0, 100, "percent", 1),
)

_SWITCHES: tuple[tuple[str, str], ...] = (
    ("sound_enabled", "Completion chime"),
    ("notifications_enabled", "Desktop notifications"),
)


def validate_settings(candidate: Settings) -> list[SettingsViolation]:
    """Return every bound *candidate* violates (empty when valid).

    Durations are stored in seconds but bounded in whole minutes:
    work 1-60, short break 1-30, long break 1-60.  Sessions before a
    long break must be 1-10.  The alert switches must be real bools.
    """
    violations: list[SettingsViolation] = []
    for name, label, lo, hi, unit, scale in _BOUNDS:
        value = getattr(candidate, name, None)
        in_range = (
            isinstance(value, int)
            and not isinstance(value, bool)
            and lo * scale <= value <= hi * scale
        )
        if in_range:
            continue
        suffix = f" {unit}" if unit else ""
        violations.append(SettingsViolation(
            field=name,
            minimum=lo,
            maximum=hi,
            unit=unit,
            message=f"{label} must be between {lo} and {hi}{suffix}",
        ))
    for name, label in _SWITCHES:
        if isinstance(getattr(candidate, name, None), bool):
            continue
        violations.append(SettingsViolation(
            field=name,
            minimum=0,
            maximum=1,
            unit="",
            message=f"{label} must be on or off",
        ))
    return violations


# ═══════════════════════════════════════════════════════════════════════
#  PERSISTENCE
# ═══════════════════════════════════════════════════════════════════════


class SettingsStore(Protocol):
    """Where settings live between launches."""

    def load(self) -> Settings | None:
        """Saved settings, or None when nothing usable is stored."""
        ...

    def save(self, settings: Settings) -> None:
        """Persist *settings*.  Raises ``OSError`` on failure."""
        ...


class JsonSettingsStore:
    """Settings as a small JSON document on disk."""

    def __init__(self, path: Path | None = None) -> None:
        self._path = path or SETTINGS_PATH

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> Settings | None:
        if not self._path.exists():
            return None
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.warning("Ignoring unreadable settings file %s: %s", self._path, exc)
            return None
        if not isinstance(data, dict):
            logger.warning("Ignoring settings file %s: not a JSON object", self._path)
            return None

        # Only use keys that exist in the dataclass; missing ones keep defaults
        valid_keys = {f.name for f in fields(Settings)}
        filtered = {k: v for k, v in data.items() if k in valid_keys}
        settings = Settings(**filtered)

        violations = validate_settings(settings)
        if violations:
            logger.warning(
                "Ignoring settings file %s: %s",
                self._path, "; ".join(v.message for v in violations),
            )
            return None
        return settings

    def save(self, settings: Settings) -> None:
        payload = {"version": SETTINGS_VERSION, **asdict(settings)}
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(
            json.dumps(payload, indent=2) + "\n",
            encoding="utf-8",
        )
        logger.debug("Saved settings to %s", self._path)


class MemorySettingsStore:
    """Keeps settings in memory only.  Used when no disk store is wanted."""

    def __init__(self, settings: Settings | None = None) -> None:
        self.saved: Settings | None = settings

    def load(self) -> Settings | None:
        return self.saved

    def save(self, settings: Settings) -> None:
        self.saved = settings
