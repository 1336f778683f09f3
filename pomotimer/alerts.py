"""Session-complete alerts: chime + desktop notification."""

from __future__ import annotations

import logging
from typing import Callable

from .audio.sounds import SoundManager
from .timer.engine import Mode


logger = logging.getLogger(__name__)

NOTIFICATION_TITLE = "Pomodoro Timer"

COMPLETION_MESSAGES: dict[Mode, str] = {
    Mode.WORK:        "Break time! Take a well-deserved rest.",
    Mode.SHORT_BREAK: "Break over! Time to get back to work.",
    Mode.LONG_BREAK:  "Break over! Time to get back to work.",
}


class DesktopAlertSignaler:
    """Plays the completion chime and raises a notification.

    *notify* receives ``(title, body)``; the app passes the tray icon's
    ``showMessage``.
    """

    def __init__(
        self,
        sound_manager: SoundManager | None = None,
        notify: Callable[[str, str], None] | None = None,
        *,
        notifications_enabled: bool = True,
    ) -> None:
        self._sound_manager = sound_manager
        self._notify = notify
        self.notifications_enabled = notifications_enabled

    def on_session_complete(self, completed_mode: Mode) -> None:
        if self._sound_manager is not None:
            self._sound_manager.play("session_complete")

        if not self.notifications_enabled or self._notify is None:
            return
        body = COMPLETION_MESSAGES[completed_mode]
        logger.debug("Notifying: %s", body)
        self._notify(NOTIFICATION_TITLE, body)
