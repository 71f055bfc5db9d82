"""
Application Initialization
==========================
Builds the view-model and the main window and starts the Qt event loop.

Why is this file needed?
------------------------
It is the composition root. It:
1. Sets up logging and the application identity (QSettings location).
2. Loads AppConfig once settings are reachable.
3. Instantiates the MindMapViewModel and hands it to the MainWindow.
"""
import logging
import os
import sys

from PySide6.QtCore import QCoreApplication, QSettings
from PySide6.QtWidgets import QApplication

from thoughtmap.config import APP_ID, ORG_ID, VISIBLE_APP_NAME, AppConfig
from thoughtmap.logging_config import setup_logging
from thoughtmap.model.state import MindMapViewModel
from thoughtmap.view.main_window import MainWindow

LOG_LEVEL_ENV_VAR = "THOUGHTMAP_LOG_LEVEL"


def create_app() -> QApplication:
    """Create and configure the QApplication instance."""
    QCoreApplication.setOrganizationName(ORG_ID)
    QCoreApplication.setApplicationName(APP_ID)
    QSettings.setDefaultFormat(QSettings.Format.IniFormat)

    app = QApplication.instance() or QApplication(sys.argv)
    app.setApplicationDisplayName(VISIBLE_APP_NAME)
    return app


def main() -> int:
    # THOUGHTMAP_LOG_LEVEL=DEBUG shows every sync cycle
    setup_logging(level=os.environ.get(LOG_LEVEL_ENV_VAR, logging.INFO))

    app = create_app()
    config = AppConfig.load()

    view_model = MindMapViewModel()

    window = MainWindow(view_model, config)
    window.show()

    return app.exec()


if __name__ == "__main__":
    sys.exit(main())
