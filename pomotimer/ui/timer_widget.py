"""Main timer display widget.

Layout (top → bottom):
    - Mode buttons (Work / Short Break / Long Break)
    - ProgressRing (large, centred)
    - Start / Pause / Reset
    - Session counter and last-completion message
"""

from __future__ import annotations

from PyQt6.QtCore import Qt
from PyQt6.QtWidgets import (
    QWidget, QVBoxLayout, QHBoxLayout,
    QLabel, QPushButton, QFrame, QSizePolicy, QButtonGroup,
)

from ..alerts import COMPLETION_MESSAGES
from ..timer.engine import TimerEngine, TimerSnapshot, Mode
from .progress_ring import ProgressRing


MODE_LABELS: dict[Mode, str] = {
    Mode.WORK:        "Work",
    Mode.SHORT_BREAK: "Short Break",
    Mode.LONG_BREAK:  "Long Break",
}

RING_LABELS: dict[Mode, str] = {
    Mode.WORK:        "FOCUS",
    Mode.SHORT_BREAK: "SHORT BREAK",
    Mode.LONG_BREAK:  "LONG BREAK",
}


def format_time(seconds: int) -> str:
    minutes, secs = divmod(max(0, seconds), 60)
    return f"{minutes:02d}:{secs:02d}"


class TimerWidget(QWidget):
    """The timer card.  Renders engine snapshots; never mutates them."""

    def __init__(self, engine: TimerEngine, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self._engine = engine
        self._build_ui()
        self._connect_signals()
        engine.subscribe(self)
        self.on_state_change(engine.snapshot())

    # ── build ─────────────────────────────────────────────────────────────

    def _build_ui(self) -> None:
        root = QVBoxLayout(self)
        root.setContentsMargins(0, 0, 0, 0)

        card = QFrame(self)
        card.setObjectName("card")
        root.addWidget(card)

        layout = QVBoxLayout(card)
        layout.setContentsMargins(32, 24, 32, 28)
        layout.setSpacing(12)
        layout.setAlignment(Qt.AlignmentFlag.AlignCenter)

        # ── mode selector ────────────────────────────────────────────
        mode_row = QHBoxLayout()
        mode_row.setSpacing(8)
        mode_row.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self._mode_group = QButtonGroup(self)
        self._mode_group.setExclusive(True)
        self._mode_buttons: dict[Mode, QPushButton] = {}
        for mode in Mode:
            btn = QPushButton(MODE_LABELS[mode], card)
            btn.setObjectName("modeButton")
            btn.setCheckable(True)
            self._mode_group.addButton(btn)
            self._mode_buttons[mode] = btn
            mode_row.addWidget(btn)
        layout.addLayout(mode_row)

        # ── progress ring ────────────────────────────────────────────
        ring_row = QHBoxLayout()
        ring_row.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self._ring = ProgressRing(card)
        self._ring.setSizePolicy(QSizePolicy.Policy.Fixed, QSizePolicy.Policy.Fixed)
        self._ring.setFixedSize(320, 320)
        ring_row.addWidget(self._ring)
        layout.addLayout(ring_row)

        # ── controls ─────────────────────────────────────────────────
        btn_row = QHBoxLayout()
        btn_row.setSpacing(12)
        btn_row.setAlignment(Qt.AlignmentFlag.AlignCenter)

        self._start_btn = QPushButton("Start", card)
        self._start_btn.setObjectName("primaryButton")
        self._pause_btn = QPushButton("Pause", card)
        self._reset_btn = QPushButton("Reset", card)

        btn_row.addWidget(self._start_btn)
        btn_row.addWidget(self._pause_btn)
        btn_row.addWidget(self._reset_btn)
        layout.addLayout(btn_row)

        # ── session info ─────────────────────────────────────────────
        self._session_label = QLabel(card)
        self._session_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        layout.addWidget(self._session_label)

        self._message_label = QLabel("", card)
        self._message_label.setObjectName("mutedLabel")
        self._message_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        layout.addWidget(self._message_label)

    # ── signals ───────────────────────────────────────────────────────────

    def _connect_signals(self) -> None:
        self._start_btn.clicked.connect(self._engine.start)
        self._pause_btn.clicked.connect(self._engine.pause)
        self._reset_btn.clicked.connect(self._engine.reset)
        for mode, btn in self._mode_buttons.items():
            btn.clicked.connect(lambda _checked=False, m=mode: self._on_mode_clicked(m))

    def _on_mode_clicked(self, mode: Mode) -> None:
        if self._engine.is_running:
            # Keep the highlight on the mode that is actually running
            self._mode_buttons[self._engine.mode].setChecked(True)
            return
        self._engine.switch_mode(mode)

    # ── observer contract ────────────────────────────────────────────────

    def on_state_change(self, state: TimerSnapshot) -> None:
        self._mode_buttons[state.mode].setChecked(True)
        for btn in self._mode_buttons.values():
            btn.setEnabled(not state.is_running)

        self._start_btn.setEnabled(not state.is_running)
        self._pause_btn.setEnabled(state.is_running)

        self._ring.apply_mode(state.mode)
        self._ring.set_state_label(RING_LABELS[state.mode])
        self._ring.set_time_text(format_time(state.time_remaining))
        self._ring.set_percent(self._engine.progress_fraction())

        cadence = self._engine.settings.sessions_before_long_break
        self._session_label.setText(
            f"Sessions: {state.completed_work_sessions} / {cadence}"
        )

    def on_session_complete(self, completed_mode: Mode) -> None:
        self._message_label.setText(COMPLETION_MESSAGES[completed_mode])

    # ── accessors ────────────────────────────────────────────────────────

    @property
    def ring(self) -> ProgressRing:
        return self._ring
