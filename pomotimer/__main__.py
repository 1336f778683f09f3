"""Allow running PomoTimer as a module: python -m pomotimer."""

import logging
import os
import sys

from PyQt6.QtWidgets import QApplication

from .app import PomodoroApp


def main() -> None:
    logging.basicConfig(
        level=os.environ.get("POMOTIMER_LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = QApplication(sys.argv)
    app.setApplicationName("PomoTimer")
    app.setOrganizationName("PomoTimer")

    window = PomodoroApp()
    window.show()

    sys.exit(app.exec())


if __name__ == "__main__":
    main()
