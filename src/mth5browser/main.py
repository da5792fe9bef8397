"""
Application Initialization
==========================
This module constructs the Model-View architecture and starts the Qt Event Loop.

Why is this file needed?
------------------------
It acts as the "Dependency Injection" root. It:
1. Instantiates the session model (BrowserState).
2. Instantiates the Main Window (View).
3. Passes the Model into the View so they can communicate.
4. Optionally opens the file given on the command line.
"""
import logging
import os
import sys
from typing import Optional

from PySide6.QtCore import QCoreApplication, QSettings
from PySide6.QtWidgets import QApplication

from mth5browser.config import APP_NAME, ORG_ID
from mth5browser.logging_config import setup_logging
from mth5browser.model.state import BrowserState
from mth5browser.view.main_window import MainWindow


def create_app() -> QApplication:
    """Create and configure the QApplication instance."""
    os.environ.setdefault("QT_ENABLE_HIGHDPI_SCALING", "1")

    # QSettings uses these to locate the settings file
    QCoreApplication.setOrganizationName(ORG_ID)
    QCoreApplication.setApplicationName(ORG_ID)
    QSettings.setDefaultFormat(QSettings.Format.IniFormat)

    app = QApplication.instance() or QApplication(sys.argv)
    app.setApplicationDisplayName(APP_NAME)
    return app


def main(filepath: Optional[str] = None, log_level: int = logging.INFO, log_file: Optional[str] = None) -> None:
    # 1. Setup Logging (Console + Optional File)
    setup_logging(level=log_level, log_file=log_file)

    # 2. Create the Qt Application
    app = create_app()

    # 3. Initialize the Data Model
    state = BrowserState()

    # 4. Initialize the Main Window, passing the model
    window = MainWindow(state)
    window.show()

    if filepath:
        window.open_file(filepath)

    # 5. Start Event Loop
    sys.exit(app.exec())


if __name__ == "__main__":
    main()
