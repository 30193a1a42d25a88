"""Application entry point and setup for the Shanshan coding game."""

import logging
import sys

from PySide6.QtWidgets import QApplication

from shanshan.config import GameSettings
from shanshan.core.levels import LevelCatalog
from shanshan.core.progression import ProgressionController
from shanshan.ui.feedback import QtFeedbackChannel
from shanshan.ui.main_window import MainWindow
from shanshan.ui.narration import Narrator
from shanshan.ui.sounds import SoundBank


def configure_logging(level: str = "INFO") -> None:
    """Configure application-wide logging with a standard format."""
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def run() -> None:
    """Load the levels, wire the game core to the Qt front end and start the event loop."""
    settings = GameSettings.from_env()
    configure_logging(settings.log_level)
    app = QApplication(sys.argv)
    app.setApplicationName("Shanshan")
    app.setApplicationDisplayName("闪闪编程")

    catalog = LevelCatalog.builtin(settings.levels_dir)
    narrator = Narrator(enabled=settings.narration)
    sounds = SoundBank(enabled=settings.sound)
    feedback = QtFeedbackChannel(narrator, sounds, level_count=len(catalog))
    controller = ProgressionController(catalog, feedback=feedback, unlock_all=settings.unlock_all)

    window = MainWindow(
        controller=controller,
        feedback=feedback,
        narrator=narrator,
        sounds=sounds,
        settings=settings,
    )
    window.resize(1100, 760)
    window.show()

    sys.exit(app.exec())


if __name__ == "__main__":
    run()
