"""
Application Entry Point.

This module contains the main() function and cleanup logic for the application.
Separated from MainWindow to allow for easier testing.
"""

import sys

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

# Imports after load_dotenv() to allow modules to access environment variables
from PySide6.QtCore import Qt  # noqa: E402
from PySide6.QtWidgets import QApplication  # noqa: E402

from trashmap.app.config import AppConfig  # noqa: E402
from trashmap.app.constants import (  # noqa: E402
    WINDOW_SETTINGS_APP,
    WINDOW_SETTINGS_KEY,
)
from trashmap.core.logging_config import (  # noqa: E402
    get_logger,
    setup_logging,
    shutdown_logging,
)

logger = get_logger(__name__)


def main() -> None:
    """Application entry point."""
    config = AppConfig.from_env()
    setup_logging(
        debug_mode=config.debug,
        log_dir=config.log_dir,
        max_bytes=config.log_max_bytes,
        backup_count=config.log_backups,
    )

    try:
        logger.info("Starting Application...")

        QApplication.setAttribute(Qt.ApplicationAttribute.AA_ShareOpenGLContexts)
        QApplication.setHighDpiScaleFactorRoundingPolicy(
            Qt.HighDpiScaleFactorRoundingPolicy.PassThrough
        )

        app = QApplication(sys.argv)
        app.setOrganizationName(WINDOW_SETTINGS_KEY)
        app.setApplicationName(WINDOW_SETTINGS_APP)

        if "--reset-settings" in sys.argv:
            print("Resetting Application Settings...")
            from PySide6.QtCore import QSettings

            settings = QSettings(WINDOW_SETTINGS_KEY, WINDOW_SETTINGS_APP)
            settings.clear()
            settings.sync()

        # Defer MainWindow import so QtWebEngine loads after the attributes are set
        from trashmap.app.main_window import MainWindow

        window = MainWindow(config)
        window.show()

        logger.info("Entering Event Loop...")
        exit_code = app.exec()
        cleanup_app()
        sys.exit(exit_code)
    except Exception:
        logger.exception("CRITICAL: Unhandled exception in main application loop")
        sys.exit(1)


def cleanup_app() -> None:
    """Performs global cleanup operations before exit."""
    logger.info("Shutting down logging.")
    shutdown_logging()
