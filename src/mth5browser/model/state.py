"""
Browser State (Data Model)
==========================
This module defines the central data structure for the running application.

Why is this file needed?
------------------------
1. State Management: It holds the open file, its digested tree and the most
   recent export in one place.
2. Decoupling: Views read from this object; the window writes to it.

Classes:
    BrowserState: The main container class.
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Optional

from mth5browser.model.io import ExportResult
from mth5browser.model.nodes import H5Node

logger = logging.getLogger(__name__)


@dataclass
class BrowserState:
    """
    Holds the state of the browsing session.
    Pass this instance to the window and its panels.
    """
    filepath: Optional[str] = None
    tree: Optional[H5Node] = None
    last_export: Optional[ExportResult] = None

    @property
    def is_open(self) -> bool:
        return self.filepath is not None and self.tree is not None

    def set_tree(self, tree: H5Node) -> None:
        self.tree = tree
        self.filepath = tree.file
        self.last_export = None

    def accept_export(self, result: ExportResult) -> bool:
        """Keep `result` only if it was taken from the file that is open now."""
        if not self.is_open or os.path.abspath(result.file) != os.path.abspath(self.filepath):
            logger.info(f"Discarding export of '{result.file}': no longer the open file.")
            return False
        self.last_export = result
        return True

    def reset(self) -> None:
        """Forget the open file."""
        self.filepath = None
        self.tree = None
        self.last_export = None
        logger.info("Browser state has been reset.")
