"""
Configuration & Path Management
===============================
This module serves as the central registry for file paths and global constants.

Why is this file needed?
------------------------
1. Abstraction: Icon lookup and read limits live in one place instead of
   being scattered across the view and model layers.
2. Deployment: It handles the logic required by PyInstaller (sys._MEIPASS) to
   find assets (icons) when the app is frozen into an .exe.

Exports:
    ASSETS_PATH (str): Absolute path to the assets directory.
    ICONS_PATH (str): Absolute path to the tree icons.
"""
import logging
import os
import sys
from pathlib import Path

logger = logging.getLogger(__name__)


def get_resource_path(relative_path: str) -> str:
    """
    Get absolute path to resource, works for dev and for PyInstaller.
    """
    if hasattr(sys, '_MEIPASS'):
        # PyInstaller temp folder
        base_path: str = getattr(sys, '_MEIPASS')
        return os.path.join(base_path, relative_path)

    # Development mode: config.py is in src/mth5browser/
    current_file_path: Path = Path(__file__)
    project_root: Path = current_file_path.parent.parent.parent
    return os.path.join(str(project_root), relative_path)


# Global Constants
ASSETS_PATH: str = get_resource_path("assets")
ICONS_PATH: str = os.path.join(ASSETS_PATH, "icons")

APP_NAME = "MTH5 Browser"
ORG_ID = "mth5browser"

HDF5_FILE_FILTER = "HDF5/MTH5 files (*.h5 *.hdf5 *.mth5);;All files (*)"
EXPORT_FILE_FILTER = "Pickled export (*.pkl)"

# Quick-look plotting limits
MAX_PLOT_POINTS: int = 200_000
PLOT_BLOCK_SIZE: int = 50

# Attribute preview length in the info panel
ATTR_PREVIEW_CHARS: int = 500

# First match wins
ICON_CANDIDATES: dict[str, tuple[str, ...]] = {
    "group": ("group.png", "folder.png"),
    "dataset": ("dataset.png", "database.png", "waveform.png"),
    "attribute": ("attribute.png", "tag.png", "info.png"),
}


def get_icon(kind: str, search_dirs: tuple[str, ...] = (ICONS_PATH, ASSETS_PATH)) -> str:
    """
    Resolve the icon file for a tree item kind.

    Returns an empty string if no candidate exists, in which case the view
    falls back to a Qt standard icon.
    """
    for candidate in ICON_CANDIDATES.get(kind.lower(), ()):
        for directory in search_dirs:
            path = os.path.join(directory, candidate)
            if os.path.isfile(path):
                return path
    return ""


if not os.path.exists(ASSETS_PATH):
    logger.warning(f"Assets path not found at {ASSETS_PATH}")
