"""Application entrypoint.

Run in development:
    python -m geolocate.app
"""

from __future__ import annotations

import sys

from loguru import logger
from PySide6.QtWidgets import QApplication

from geolocate.core.config import Configuration
from geolocate.gui.main_window import MainWindow
from geolocate.gui.widgets.error_dialog import exception_detail, show_error
from geolocate.util.errors import ConfigurationError
from geolocate.util.logging import init_logging


def load_configuration() -> Configuration | None:
    """Read the configuration; on failure show the error and return None."""
    try:
        return Configuration.load()
    except ConfigurationError as e:
        logger.error("Configuration could not be loaded: {}", e)
        show_error("Error", "Error while starting Geolocate", exception_detail(e))
        return None


def save_configuration(config: Configuration) -> None:
    try:
        config.save()
    except ConfigurationError as e:
        logger.error("Configuration could not be saved: {}", e)
        show_error("Error", "Error while shutting down Geolocate", exception_detail(e))


def main() -> int:
    init_logging()
    logger.info("Geolocate starting")

    app = QApplication(sys.argv)
    app.setApplicationName("Geolocate")

    config = load_configuration()
    if config is None:
        return 1
    win = MainWindow(config=config)
    win.show()
    win.warn_missing_tools()

    code = app.exec()
    save_configuration(config)
    logger.info("Geolocate exited with code {}", code)
    return code


if __name__ == "__main__":
    raise SystemExit(main())
