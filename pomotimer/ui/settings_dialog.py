"""Settings dialog for PomoTimer.

Lets users edit timer durations (in minutes), the long-break cadence,
and alert preferences.  Nothing is applied until Save is pressed; the
engine validates the candidate and either adopts it or returns the
violated bounds, which are shown to the user.
"""

from __future__ import annotations

import dataclasses
from typing import Callable

from PyQt6.QtCore import Qt, QTimer, pyqtSignal
from PyQt6.QtWidgets import (
    QDialog, QVBoxLayout, QHBoxLayout, QFormLayout,
    QLabel, QSpinBox, QSlider, QCheckBox, QPushButton,
    QFrame, QWidget, QMessageBox,
)

from ..settings import Settings, SettingsViolation
from ..timer.engine import TimerEngine, ValidationFailed


SAVED_FLASH_MS = 2000


class SettingsDialog(QDialog):
    """Dialog for timer and alert preferences."""

    settings_applied = pyqtSignal(object)

    def __init__(
        self,
        engine: TimerEngine,
        parent: QWidget | None = None,
        *,
        error_callback: Callable[[list[SettingsViolation]], None] | None = None,
    ) -> None:
        super().__init__(parent)
        self.setWindowTitle("Settings")
        self.setMinimumWidth(380)

        self._engine = engine
        self._report_errors = error_callback or self._show_violations

        self._build_ui()
        self._populate(engine.settings)

    # ══════════════════════════════════════════════════════════════════
    #  BUILD UI
    # ══════════════════════════════════════════════════════════════════

    def _build_ui(self) -> None:
        root = QVBoxLayout(self)
        root.setContentsMargins(24, 20, 24, 20)
        root.setSpacing(16)

        # ── Timer section ────────────────────────────────────────────
        root.addWidget(self._section_label("Timer"))
        timer_form = QFormLayout()
        timer_form.setHorizontalSpacing(20)
        timer_form.setVerticalSpacing(10)

        # Spin ranges are wider than the accepted bounds; the engine
        # owns validation.
        self._work_spin = self._minutes_spin()
        timer_form.addRow("Work duration:", self._work_spin)

        self._short_spin = self._minutes_spin()
        timer_form.addRow("Short break:", self._short_spin)

        self._long_spin = self._minutes_spin()
        timer_form.addRow("Long break:", self._long_spin)

        self._sessions_spin = QSpinBox()
        self._sessions_spin.setRange(0, 99)
        timer_form.addRow("Sessions before long break:", self._sessions_spin)

        root.addLayout(timer_form)
        root.addWidget(self._separator())

        # ── Sound & Notifications section ────────────────────────────
        root.addWidget(self._section_label("Sound & Notifications"))
        snd_form = QFormLayout()
        snd_form.setHorizontalSpacing(20)
        snd_form.setVerticalSpacing(10)

        self._sound_cb = QCheckBox("Completion chime")
        snd_form.addRow("", self._sound_cb)

        vol_row = QHBoxLayout()
        vol_row.setSpacing(10)
        self._vol_slider = QSlider(Qt.Orientation.Horizontal)
        self._vol_slider.setRange(0, 100)
        self._vol_label = QLabel("70%")
        self._vol_label.setMinimumWidth(36)
        self._vol_slider.valueChanged.connect(
            lambda value: self._vol_label.setText(f"{value}%")
        )
        vol_row.addWidget(self._vol_slider)
        vol_row.addWidget(self._vol_label)
        vol_wrapper = QWidget()
        vol_wrapper.setLayout(vol_row)
        snd_form.addRow("Volume:", vol_wrapper)

        self._notif_cb = QCheckBox("Desktop notifications")
        snd_form.addRow("", self._notif_cb)

        root.addLayout(snd_form)

        # ── buttons ──────────────────────────────────────────────────
        root.addStretch()
        btn_row = QHBoxLayout()
        btn_row.addStretch()
        close_btn = QPushButton("Close")
        close_btn.clicked.connect(self.accept)
        self._save_btn = QPushButton("Save Settings")
        self._save_btn.setObjectName("primaryButton")
        self._save_btn.clicked.connect(self.save)
        btn_row.addWidget(close_btn)
        btn_row.addWidget(self._save_btn)
        root.addLayout(btn_row)

    # ── helpers ──────────────────────────────────────────────────────

    @staticmethod
    def _minutes_spin() -> QSpinBox:
        spin = QSpinBox()
        spin.setRange(0, 999)
        spin.setSuffix(" min")
        return spin

    @staticmethod
    def _section_label(text: str) -> QLabel:
        lbl = QLabel(text)
        lbl.setStyleSheet("font-size: 15px; font-weight: 700; margin-top: 4px;")
        return lbl

    @staticmethod
    def _separator() -> QFrame:
        line = QFrame()
        line.setFrameShape(QFrame.Shape.HLine)
        line.setFixedHeight(1)
        line.setStyleSheet("background-color: rgba(255,255,255,0.08);")
        return line

    def _show_violations(self, violations: list[SettingsViolation]) -> None:
        QMessageBox.warning(
            self,
            "Invalid settings",
            "\n".join(v.message for v in violations),
        )

    # ══════════════════════════════════════════════════════════════════
    #  POPULATE / COLLECT
    # ══════════════════════════════════════════════════════════════════

    def _populate(self, s: Settings) -> None:
        self._work_spin.setValue(s.work_duration // 60)
        self._short_spin.setValue(s.short_break_duration // 60)
        self._long_spin.setValue(s.long_break_duration // 60)
        self._sessions_spin.setValue(s.sessions_before_long_break)
        self._sound_cb.setChecked(s.sound_enabled)
        self._vol_slider.setValue(s.sound_volume)
        self._vol_label.setText(f"{s.sound_volume}%")
        self._notif_cb.setChecked(s.notifications_enabled)

    def candidate(self) -> Settings:
        """Settings as currently entered in the form."""
        return dataclasses.replace(
            self._engine.settings,
            work_duration=self._work_spin.value() * 60,
            short_break_duration=self._short_spin.value() * 60,
            long_break_duration=self._long_spin.value() * 60,
            sessions_before_long_break=self._sessions_spin.value(),
            sound_enabled=self._sound_cb.isChecked(),
            sound_volume=self._vol_slider.value(),
            notifications_enabled=self._notif_cb.isChecked(),
        )

    # ══════════════════════════════════════════════════════════════════
    #  SAVE
    # ══════════════════════════════════════════════════════════════════

    def save(self) -> bool:
        """Apply the form to the engine.  Returns False on violations."""
        candidate = self.candidate()
        try:
            self._engine.apply_settings(candidate)
        except ValidationFailed as exc:
            self._report_errors(exc.violations)
            return False

        self.settings_applied.emit(self._engine.settings)
        self._flash_saved()
        return True

    def _flash_saved(self) -> None:
        self._save_btn.setText("Saved!")
        self._save_btn.setObjectName("savedButton")
        self._refresh_style(self._save_btn)
        QTimer.singleShot(SAVED_FLASH_MS, self._restore_save_button)

    def _restore_save_button(self) -> None:
        self._save_btn.setText("Save Settings")
        self._save_btn.setObjectName("primaryButton")
        self._refresh_style(self._save_btn)

    @staticmethod
    def _refresh_style(widget: QWidget) -> None:
        widget.style().unpolish(widget)
        widget.style().polish(widget)
