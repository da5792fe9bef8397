"""Qt widgets used by the main window."""
