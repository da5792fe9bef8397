"""
Background Workers (Threading)
==============================
This module contains QThread subclasses for handling long-running tasks.

Why is this file needed?
------------------------
1. Responsiveness: A full-read export pulls every dataset into memory. Run on
   the main thread, it would freeze the GUI for the whole read.
2. Signals: They provide a safe way to update the GUI (status bar, dialogs)
   from the background thread using Qt Signals.

Classes:
    ExportWorker: Runs the full-read export and optionally saves it.
"""
import logging
from typing import Optional

from PySide6.QtCore import QThread, Signal

from mth5browser.model.io import ExportOptions, IOManager, summarize

logger = logging.getLogger(__name__)


class ExportWorker(QThread):
    # Signals to update the UI from the background
    progress_updated = Signal(str)
    finished = Signal(object)     # ExportResult
    error_occurred = Signal(str)

    def __init__(
        self,
        filepath: str,
        root_path: str = "/",
        options: Optional[ExportOptions] = None,
        save_path: Optional[str] = None,
    ) -> None:
        super().__init__()
        self.filepath = filepath
        self.root_path = root_path
        self.options = options or ExportOptions()
        self.save_path = save_path

    def run(self) -> None:
        try:
            logger.info("Starting export in background thread...")
            self.progress_updated.emit(f"Reading '{self.root_path}'...")

            result = IOManager.export_file(self.filepath, self.root_path, self.options)

            if self.save_path:
                self.progress_updated.emit(f"Saving to {self.save_path}...")
                IOManager.save_export(result, self.save_path)

            stats = summarize(result.tree)
            self.progress_updated.emit(
                f"Exported {stats['read']}/{stats['datasets']} datasets ({stats['nbytes']} bytes)."
            )
            self.finished.emit(result)

        except Exception as e:
            logger.error(f"Error in ExportWorker: {e}")
            self.error_occurred.emit(str(e))
