"""
Main Application Window
=======================
The primary GUI container that holds the Menu Bar, the HDF5 tree and the
inspector panel.

Why is this file needed?
------------------------
1. Layout: It organizes the high-level visual structure of the application.
2. Routing: It connects global actions (like File -> Open) to the model and
   to the background export worker.
"""
import logging
import os
from typing import Optional

from PySide6.QtCore import Qt, QSettings
from PySide6.QtGui import QAction
from PySide6.QtWidgets import (
    QFileDialog, QMainWindow, QMessageBox, QProgressBar, QSplitter
)

from mth5browser.config import APP_NAME, EXPORT_FILE_FILTER, HDF5_FILE_FILTER
from mth5browser.controller.workers import ExportWorker
from mth5browser.model.io import ExportOptions, ExportResult, IOManager
from mth5browser.model.nodes import TreeItemData
from mth5browser.model.state import BrowserState
from mth5browser.view.widgets.h5_tree import H5TreeWidget
from mth5browser.view.widgets.inspector import InspectorPanel

logger = logging.getLogger(__name__)

SETTINGS_LAST_DIR = "paths/last_dir"


class MainWindow(QMainWindow):
    def __init__(self, state: BrowserState) -> None:
        super().__init__()
        self.state: BrowserState = state
        self.export_worker: Optional[ExportWorker] = None
        self.export_busy = False
        self.settings = QSettings()

        self.update_window_title()
        self.resize(1200, 800)

        # --- SPLITTER (CONTENT AREA) ---
        splitter = QSplitter(Qt.Horizontal)
        self.setCentralWidget(splitter)

        # --- LEFT SIDE: HDF5 Tree ---
        self.tree_widget = H5TreeWidget()
        splitter.addWidget(self.tree_widget)

        # --- RIGHT SIDE: Info + Quick-look ---
        self.inspector = InspectorPanel()
        splitter.addWidget(self.inspector)

        splitter.setSizes([450, 750])

        # --- STATUS BAR ---
        self.progress = QProgressBar()
        self.progress.setRange(0, 0)  # Busy indicator
        self.progress.setMaximumWidth(150)
        self.progress.setVisible(False)
        self.statusBar().addPermanentWidget(self.progress)

        # --- SIGNAL CONNECTIONS ---
        self.tree_widget.item_selected.connect(self.on_item_selected)

        # --- ACTIONS & MENUS ---
        self._create_actions()
        self._create_menus()

    def _create_actions(self) -> None:
        self.act_open = QAction("Open...", self)
        self.act_open.setShortcut("Ctrl+O")
        self.act_open.triggered.connect(self.on_file_open)

        self.act_export = QAction("Export (full read)...", self)
        self.act_export.setShortcut("Ctrl+E")
        self.act_export.triggered.connect(self.on_file_export)
        self.act_export.setEnabled(False)  # Disabled until a file is open

        self.act_close = QAction("Close", self)
        self.act_close.setShortcut("Ctrl+W")
        self.act_close.triggered.connect(self.on_file_close)
        self.act_close.setEnabled(False)

        self.act_exit = QAction("Exit", self)
        self.act_exit.triggered.connect(self.close)

    def _create_menus(self) -> None:
        menu_bar = self.menuBar()

        file_menu = menu_bar.addMenu("&File")
        file_menu.addAction(self.act_open)
        file_menu.addAction(self.act_close)
        file_menu.addSeparator()
        file_menu.addAction(self.act_export)
        file_menu.addSeparator()
        file_menu.addAction(self.act_exit)

    # --- HELPER METHODS ---
    def update_window_title(self) -> None:
        filename = os.path.basename(self.state.filepath) if self.state.filepath else "No file"
        self.setWindowTitle(f"{APP_NAME} - [{filename}]")

    def _last_dir(self) -> str:
        return str(self.settings.value(SETTINGS_LAST_DIR, "", type=str) or "")

    def _remember_dir(self, filepath: str) -> None:
        self.settings.setValue(SETTINGS_LAST_DIR, os.path.dirname(os.path.abspath(filepath)))

    def _refresh_actions(self) -> None:
        is_open = self.state.is_open
        busy = self.export_busy
        self.act_open.setEnabled(not busy)
        self.act_export.setEnabled(is_open and not busy)
        self.act_close.setEnabled(is_open and not busy)

    # --- FILE SLOTS ---

    def open_file(self, filepath: str) -> bool:
        """Digest `filepath` and show it. Returns False if loading failed."""
        try:
            tree = IOManager.load_tree(filepath)
        except Exception as e:
            logger.exception(f"Failed to open {filepath}")
            QMessageBox.critical(self, "Error", f"Could not open file:\n{e}")
            return False

        self.state.set_tree(tree)
        self._remember_dir(filepath)

        self.inspector.clear()
        self.tree_widget.populate(tree)

        self.update_window_title()
        self._refresh_actions()
        self.statusBar().showMessage(f"Loaded {filepath}", 5000)
        return True

    def on_file_open(self) -> None:
        fname, _ = QFileDialog.getOpenFileName(
            self, "Select MTH5/HDF5 file", self._last_dir(), HDF5_FILE_FILTER
        )
        if fname:
            self.open_file(fname)

    def on_file_close(self) -> None:
        self.state.reset()
        self.tree_widget.clear_tree()
        self.inspector.clear()
        self.update_window_title()
        self._refresh_actions()

    def on_file_export(self) -> None:
        if not self.state.is_open:
            return

        root_path = "/"
        selected = self.tree_widget.selected_data()
        if selected is not None and selected.kind in ("group", "dataset"):
            root_path = selected.path

        default_name = os.path.splitext(os.path.basename(self.state.filepath))[0] + "_export.pkl"
        save_path, _ = QFileDialog.getSaveFileName(
            self, "Save export", os.path.join(self._last_dir(), default_name), EXPORT_FILE_FILTER
        )
        if not save_path:
            return
        if not save_path.endswith(".pkl"):
            save_path += ".pkl"

        self.export_worker = ExportWorker(
            self.state.filepath, root_path=root_path, options=ExportOptions(), save_path=save_path
        )
        self.export_worker.progress_updated.connect(self.statusBar().showMessage)
        self.export_worker.finished.connect(self.on_export_finished)
        self.export_worker.error_occurred.connect(self.on_export_error)

        self.export_busy = True
        self.progress.setVisible(True)
        self.export_worker.start()
        self._refresh_actions()

    def on_export_finished(self, result: ExportResult) -> None:
        self.state.accept_export(result)
        self.export_busy = False
        self.progress.setVisible(False)
        self._refresh_actions()
        logger.info(f"Export of '{result.root_path}' finished at {result.exported_at}")

    def on_export_error(self, message: str) -> None:
        self.export_busy = False
        self.progress.setVisible(False)
        self._refresh_actions()
        QMessageBox.critical(self, "Export failed", f"Could not export file:\n{message}")

    # --- SELECTION ---

    def on_item_selected(self, item: TreeItemData) -> None:
        self.inspector.show_item(self.state.filepath, item)

    def closeEvent(self, event, /) -> None:
        """Wait for a running export before closing."""
        if self.export_worker is not None and self.export_worker.isRunning():
            reply = QMessageBox.question(
                self,
                "Export running",
                "An export is still running. Wait for it to finish and exit?",
                QMessageBox.Yes | QMessageBox.Cancel
            )
            if reply != QMessageBox.Yes:
                event.ignore()
                return
            self.export_worker.wait()

        event.accept()
