"""Dual-pane local/remote file manager."""

__version__ = "0.4.0"
