"""Sound synthesis and playback using numpy + QSoundEffect.

The completion chime is generated programmatically as a WAV file: two
overlapping sine tones, each stepping up in pitch after 100 ms and
fading out exponentially over half a second.  The file is cached to
disk so later launches skip synthesis.

Sound names
-----------
- ``session_complete`` — two-tone chime (800→1000 Hz, then 1000→1200 Hz)
"""

from __future__ import annotations

import io
import logging
import wave
from pathlib import Path
from typing import Callable

import numpy as np

from PyQt6.QtCore import QObject, QUrl
from PyQt6.QtMultimedia import QSoundEffect

from ..settings import APP_SUPPORT_DIR


logger = logging.getLogger(__name__)


# ── paths ────────────────────────────────────────────────────────────────

SOUNDS_DIR = APP_SUPPORT_DIR / "sounds"

SOUND_NAMES = ("session_complete",)

SAMPLE_RATE = 44100

# ── chime shape ──────────────────────────────────────────────────────────

TONE_SECONDS = 0.5
STEP_SECONDS = 0.1           # pitch step inside each tone
SECOND_TONE_DELAY = 0.2
START_GAIN = 0.3
END_GAIN = 0.01


# ═══════════════════════════════════════════════════════════════════════════
#  WAV SYNTHESIS HELPERS
# ═══════════════════════════════════════════════════════════════════════════


def _stepped_tone(
    first_freq: float,
    second_freq: float,
    duration_s: float = TONE_SECONDS,
    step_s: float = STEP_SECONDS,
) -> np.ndarray:
    """Sine at *first_freq* that jumps to *second_freq* after *step_s*.

    Phase is accumulated sample by sample so the jump does not click.
    """
    n = int(SAMPLE_RATE * duration_s)
    freqs = np.full(n, first_freq, dtype=np.float64)
    freqs[int(SAMPLE_RATE * step_s):] = second_freq
    phase = 2 * np.pi * np.cumsum(freqs) / SAMPLE_RATE
    return np.sin(phase)


def _exp_fade(length: int, start: float = START_GAIN, end: float = END_GAIN) -> np.ndarray:
    """Exponential gain ramp from *start* to *end* over *length* samples."""
    if length <= 0:
        return np.zeros(0, dtype=np.float64)
    return np.geomspace(start, end, length)


def _to_wav_bytes(samples: np.ndarray) -> bytes:
    """Convert a float64 numpy array (-1..1) to 16-bit PCM WAV bytes."""
    samples = np.clip(samples, -1.0, 1.0)
    int_samples = (samples * 32767).astype(np.int16)

    buf = io.BytesIO()
    with wave.open(buf, "wb") as wf:
        wf.setnchannels(1)
        wf.setsampwidth(2)
        wf.setframerate(SAMPLE_RATE)
        wf.writeframes(int_samples.tobytes())
    return buf.getvalue()


# ═══════════════════════════════════════════════════════════════════════════
#  SOUND GENERATORS
# ═══════════════════════════════════════════════════════════════════════════


def _generate_chime() -> bytes:
    """Session complete — 800→1000 Hz, then 1000→1200 Hz 200 ms later."""
    first = _stepped_tone(800.0, 1000.0)
    second = _stepped_tone(1000.0, 1200.0)
    first = first * _exp_fade(len(first))
    second = second * _exp_fade(len(second))

    offset = int(SAMPLE_RATE * SECOND_TONE_DELAY)
    tail = int(SAMPLE_RATE * 0.05)
    mix = np.zeros(offset + len(second) + tail, dtype=np.float64)
    mix[:len(first)] += first
    mix[offset:offset + len(second)] += second
    return _to_wav_bytes(mix)


_GENERATORS: dict[str, Callable[[], bytes]] = {
    "session_complete": _generate_chime,
}


# ═══════════════════════════════════════════════════════════════════════════
#  SOUND MANAGER
# ═══════════════════════════════════════════════════════════════════════════


class SoundManager(QObject):
    """Manages sound synthesis, caching, and playback.

    Usage::

        mgr = SoundManager(parent=self)
        mgr.set_volume(70)
        mgr.play("session_complete")
    """

    def __init__(
        self,
        parent: QObject | None = None,
        *,
        sounds_dir: Path | None = None,
    ) -> None:
        super().__init__(parent)
        self._enabled = True
        self._volume = 0.7  # 0.0–1.0
        self._sounds_dir = sounds_dir or SOUNDS_DIR
        self._effects: dict[str, QSoundEffect] = {}

        self._ensure_wav_files()
        self._load_effects()

    # ── public API ────────────────────────────────────────────────────

    def set_volume(self, level: int) -> None:
        """Set volume (0-100).  Updates all loaded effects."""
        self._volume = max(0, min(level, 100)) / 100.0
        for effect in self._effects.values():
            effect.setVolume(self._volume)

    def set_enabled(self, enabled: bool) -> None:
        self._enabled = enabled

    def play(self, name: str) -> None:
        """Play a sound by name.  No-op if disabled or name unknown."""
        if not self._enabled:
            return
        effect = self._effects.get(name)
        if effect is not None:
            effect.play()

    @property
    def volume(self) -> int:
        """Current volume as 0-100 integer."""
        return round(self._volume * 100)

    @property
    def enabled(self) -> bool:
        return self._enabled

    # ── internal ──────────────────────────────────────────────────────

    def _ensure_wav_files(self) -> None:
        """Generate any missing WAV files to the cache directory."""
        try:
            self._sounds_dir.mkdir(parents=True, exist_ok=True)
            for name, gen_fn in _GENERATORS.items():
                path = self._sounds_dir / f"{name}.wav"
                if not path.exists():
                    path.write_bytes(gen_fn())
        except OSError as exc:
            logger.warning("Sound cache unavailable at %s: %s", self._sounds_dir, exc)

    def _load_effects(self) -> None:
        """Create QSoundEffect instances from cached WAV files."""
        for name in SOUND_NAMES:
            path = self._sounds_dir / f"{name}.wav"
            if path.exists():
                effect = QSoundEffect(self)
                effect.setSource(QUrl.fromLocalFile(str(path)))
                effect.setVolume(self._volume)
                self._effects[name] = effect
