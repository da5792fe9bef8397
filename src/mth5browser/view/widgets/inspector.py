"""Info panel and quick-look plot for the selected tree item."""
from __future__ import annotations

import logging
from typing import Optional

import numpy as np
import pyqtgraph as pg
from pyqtgraph.exporters import ImageExporter, SVGExporter
from PySide6.QtCore import Qt
from PySide6.QtGui import QFont
from PySide6.QtWidgets import (
    QFileDialog, QHBoxLayout, QMessageBox, QPlainTextEdit, QPushButton, QSplitter, QVBoxLayout, QWidget
)

from mth5browser.model.inspect import describe_item, read_for_plot
from mth5browser.model.nodes import DATASET, TreeItemData

logger = logging.getLogger(__name__)


class InspectorPanel(QWidget):
    def __init__(self, parent: QWidget | None = None) -> None:
        super().__init__(parent)

        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)

        splitter = QSplitter(Qt.Vertical)
        layout.addWidget(splitter)

        # --- Info text ---
        self.text_area = QPlainTextEdit()
        self.text_area.setReadOnly(True)
        self.text_area.setLineWrapMode(QPlainTextEdit.NoWrap)
        font = QFont("Monospace")
        font.setStyleHint(QFont.TypeWriter)
        self.text_area.setFont(font)
        splitter.addWidget(self.text_area)

        # --- Quick-look plot ---
        plot_container = QWidget()
        plot_layout = QVBoxLayout(plot_container)
        plot_layout.setContentsMargins(0, 0, 0, 0)

        self.plot_widget = pg.PlotWidget()
        self.plot_widget.setBackground('w')
        self.plot_widget.showGrid(x=True, y=True, alpha=0.3)
        self.plot_widget.getAxis('bottom').setPen('k')
        self.plot_widget.getAxis('left').setPen('k')
        self.plot_widget.getAxis('bottom').setTextPen('k')
        self.plot_widget.getAxis('left').setTextPen('k')
        plot_layout.addWidget(self.plot_widget)

        btn_row = QHBoxLayout()
        btn_row.addStretch()
        self.btn_save_plot = QPushButton("Save plot...")
        self.btn_save_plot.clicked.connect(self._export_image)
        btn_row.addWidget(self.btn_save_plot)
        plot_layout.addLayout(btn_row)

        self.plot_container = plot_container
        splitter.addWidget(plot_container)
        splitter.setSizes([250, 450])

        self._set_plot_visible(False)

    # --- PUBLIC API ---

    def set_lines(self, lines: list[str]) -> None:
        self.text_area.setPlainText("\n".join(lines) if lines else "")

    def clear(self) -> None:
        self.set_lines([])
        self.plot_widget.clear()
        self._set_plot_visible(False)

    def show_item(self, file: Optional[str], item: Optional[TreeItemData]) -> None:
        """Fill the info text and, for datasets, the quick-look plot."""
        try:
            lines = describe_item(file, item)
        except Exception as e:
            logger.exception(f"Failed to describe selection: {e}")
            lines = [f"Could not read selection: {e}"]
        self.set_lines(lines)

        if item is not None and file and item.kind == DATASET:
            self._plot_dataset(file, item.path)
        else:
            self._set_plot_visible(False)

    # --- PLOTTING ---

    def _plot_dataset(self, file: str, path: str) -> None:
        self.plot_widget.clear()
        try:
            y = read_for_plot(file, path)
            if y.size == 0 or y.dtype.kind not in "biuf":
                raise TypeError(f"'{path}' has no numeric values to plot")

            self.plot_widget.plot(np.asarray(y, dtype=float), pen=pg.mkPen(color='#1f77b4', width=1))
            self.plot_widget.setTitle(path, color='black')
            self.plot_widget.autoRange()
            self._set_plot_visible(True)

        except Exception as e:
            logger.debug(f"No quick-look plot for {path}: {e}")
            self.plot_widget.clear()
            self._set_plot_visible(False)

    def _set_plot_visible(self, visible: bool) -> None:
        self.plot_container.setVisible(visible)

    def _export_image(self) -> None:
        """Export the current plot as an image file."""
        file_path, _ = QFileDialog.getSaveFileName(
            self,
            "Save plot as image",
            "quicklook.png",
            "PNG image (*.png);;JPEG image (*.jpg);;SVG vector image (*.svg)"
        )

        if not file_path:
            return

        try:
            if file_path.lower().endswith(".svg"):
                exporter = SVGExporter(self.plot_widget.plotItem)
            else:
                exporter = ImageExporter(self.plot_widget.plotItem)
                exporter.parameters()['width'] = 1920
            exporter.export(file_path)
            logger.info(f"Plot exported to {file_path}")

        except Exception as e:
            logger.exception("Failed to export plot")
            QMessageBox.critical(self, "Export error", f"Could not export the plot:\n{str(e)}")
