"""Main application window for PomoTimer."""

from __future__ import annotations

import logging

from PyQt6.QtCore import Qt
from PyQt6.QtGui import QAction, QIcon, QImage, QPainter, QColor, QPixmap, QKeySequence, QPen
from PyQt6.QtWidgets import (
    QMainWindow, QWidget, QVBoxLayout, QHBoxLayout, QLabel,
    QStatusBar, QPushButton, QSystemTrayIcon, QMenu, QApplication,
)

from .alerts import DesktopAlertSignaler
from .audio.sounds import SoundManager
from .settings import Settings, SettingsStore, JsonSettingsStore
from .timer.engine import TimerEngine, TimerSnapshot, Mode
from .ui.styles import MODE_COLORS, build_stylesheet
from .ui.timer_widget import TimerWidget, MODE_LABELS, format_time


logger = logging.getLogger(__name__)


# ── tray‑icon image generation ────────────────────────────────────────────


def _make_tray_icon(mode: Mode, running: bool) -> QIcon:
    """32×32 tray icon: filled circle while running, outline when idle.

    Coloured by mode so a glance at the menu bar tells work from break.
    """
    size = 64  # draw at 2× for Retina
    img = QImage(size, size, QImage.Format.Format_ARGB32_Premultiplied)
    img.fill(Qt.GlobalColor.transparent)
    p = QPainter(img)
    p.setRenderHint(QPainter.RenderHint.Antialiasing)
    colour = QColor(MODE_COLORS[mode][0])

    cx, cy, r = size // 2, size // 2, size // 2 - 4
    if running:
        p.setPen(Qt.PenStyle.NoPen)
        p.setBrush(colour)
    else:
        p.setPen(QPen(colour, 4))
        p.setBrush(Qt.BrushStyle.NoBrush)
    p.drawEllipse(cx - r, cy - r, r * 2, r * 2)
    p.end()

    img.setDevicePixelRatio(2.0)
    return QIcon(QPixmap.fromImage(img))


class PomodoroApp(QMainWindow):
    """Main application window.  Composes store, engine, alerts and UI."""

    def __init__(
        self,
        *,
        store: SettingsStore | None = None,
        sound_manager: SoundManager | None = None,
    ) -> None:
        super().__init__()
        self.setWindowTitle("Pomodoro Timer")
        self.setMinimumSize(440, 600)

        # ── settings ──────────────────────────────────────────────────
        self._store: SettingsStore = store or JsonSettingsStore()
        settings = self._store.load() or Settings()

        # ── sound + alerts ────────────────────────────────────────────
        self._sound_manager = sound_manager or SoundManager(parent=self)
        self._tray_icon = QSystemTrayIcon(self)
        self._signaler = DesktopAlertSignaler(
            self._sound_manager,
            self._send_notification,
        )

        # ── engine ────────────────────────────────────────────────────
        self._timer_engine = TimerEngine(
            self,
            settings=settings,
            store=self._store,
            signaler=self._signaler,
        )
        self._apply_alert_prefs(self._timer_engine.settings)

        # ── central widget ────────────────────────────────────────────
        self.setStyleSheet(build_stylesheet())
        central = QWidget()
        self.setCentralWidget(central)
        root_layout = QVBoxLayout(central)
        root_layout.setContentsMargins(16, 12, 16, 12)
        root_layout.setSpacing(8)

        top_bar = QHBoxLayout()
        title = QLabel("Pomodoro Timer")
        title.setStyleSheet("font-size: 18px; font-weight: 700;")
        top_bar.addWidget(title)
        top_bar.addStretch()
        self._gear_btn = QPushButton("Settings")
        self._gear_btn.clicked.connect(self._open_settings)
        top_bar.addWidget(self._gear_btn)
        root_layout.addLayout(top_bar)

        self._timer_widget = TimerWidget(self._timer_engine, central)
        root_layout.addWidget(self._timer_widget)

        self._status_bar = QStatusBar(self)
        self.setStatusBar(self._status_bar)
        self._status_bar.showMessage("Ready to focus!")

        # ── system tray icon ──────────────────────────────────────────
        self._tray_icon.setIcon(_make_tray_icon(Mode.WORK, False))
        self._tray_icon.setToolTip("Pomodoro Timer")
        self._build_tray_menu()
        if QSystemTrayIcon.isSystemTrayAvailable():
            self._tray_icon.show()

        self._build_menu_bar()

        # ── wire signals ──────────────────────────────────────────────
        self._timer_engine.state_changed.connect(self._on_state_changed)
        self._timer_engine.settings_save_failed.connect(self._on_save_failed)

    # ══════════════════════════════════════════════════════════════════
    #  ACCESSORS
    # ══════════════════════════════════════════════════════════════════

    @property
    def engine(self) -> TimerEngine:
        return self._timer_engine

    @property
    def timer_widget(self) -> TimerWidget:
        return self._timer_widget

    # ══════════════════════════════════════════════════════════════════
    #  TRAY + MENUS
    # ══════════════════════════════════════════════════════════════════

    def _build_tray_menu(self) -> None:
        menu = QMenu(self)

        self._tray_start_action = menu.addAction("Start")
        self._tray_start_action.triggered.connect(self._toggle_start)

        reset_action = menu.addAction("Reset")
        reset_action.triggered.connect(self._timer_engine.reset)

        menu.addSeparator()
        show_action = menu.addAction("Show Pomodoro Timer")
        show_action.triggered.connect(self._show_window)
        menu.addSeparator()
        quit_action = menu.addAction("Quit")
        quit_action.triggered.connect(self._quit_app)

        self._tray_icon.setContextMenu(menu)

    def _build_menu_bar(self) -> None:
        menu_bar = self.menuBar()

        prefs_action = QAction("Preferences…", self)
        prefs_action.setMenuRole(QAction.MenuRole.PreferencesRole)
        prefs_action.setShortcut(QKeySequence("Ctrl+,"))
        prefs_action.triggered.connect(self._open_settings)

        quit_action = QAction("Quit Pomodoro Timer", self)
        quit_action.setMenuRole(QAction.MenuRole.QuitRole)
        quit_action.setShortcut(QKeySequence("Ctrl+Q"))
        quit_action.triggered.connect(self._quit_app)

        app_menu = menu_bar.addMenu("Pomodoro Timer")
        app_menu.addAction(prefs_action)
        app_menu.addAction(quit_action)

    def _toggle_start(self) -> None:
        if self._timer_engine.is_running:
            self._timer_engine.pause()
        else:
            self._timer_engine.start()

    def _show_window(self) -> None:
        self.show()
        self.raise_()
        self.activateWindow()

    def _quit_app(self) -> None:
        self._timer_engine.pause()
        self._tray_icon.hide()
        QApplication.instance().quit()

    # ══════════════════════════════════════════════════════════════════
    #  ALERTS
    # ══════════════════════════════════════════════════════════════════

    def _send_notification(self, title: str, body: str) -> None:
        """Show a desktop notification via the tray icon."""
        if not self._tray_icon.isVisible():
            logger.info("%s: %s", title, body)
            return
        self._tray_icon.showMessage(title, body)

    def _apply_alert_prefs(self, settings: Settings) -> None:
        self._sound_manager.set_volume(settings.sound_volume)
        self._sound_manager.set_enabled(settings.sound_enabled)
        self._signaler.notifications_enabled = settings.notifications_enabled

    # ══════════════════════════════════════════════════════════════════
    #  ENGINE SIGNALS
    # ══════════════════════════════════════════════════════════════════

    def _on_state_changed(self, state: TimerSnapshot) -> None:
        self._tray_icon.setIcon(_make_tray_icon(state.mode, state.is_running))
        self._tray_start_action.setText("Pause" if state.is_running else "Start")
        self._tray_icon.setToolTip(
            f"Pomodoro Timer — {MODE_LABELS[state.mode]} "
            f"{format_time(state.time_remaining)}"
        )

    def _on_save_failed(self, message: str) -> None:
        self._status_bar.showMessage(f"Settings applied but not saved: {message}")

    def _open_settings(self) -> None:
        from .ui.settings_dialog import SettingsDialog

        dlg = SettingsDialog(self._timer_engine, self)
        dlg.settings_applied.connect(self._apply_alert_prefs)
        dlg.exec()

    # ══════════════════════════════════════════════════════════════════
    #  WINDOW EVENTS
    # ══════════════════════════════════════════════════════════════════

    def keyPressEvent(self, event) -> None:  # type: ignore[override]
        """Space toggles start/pause."""
        if event.key() == Qt.Key.Key_Space and not event.modifiers():
            self._toggle_start()
            event.accept()
            return
        super().keyPressEvent(event)
