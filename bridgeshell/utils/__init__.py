"""Utility functions for bridgeshell."""

from bridgeshell.utils.helpers import ensure_dir, get_data_path, get_logs_path

__all__ = ["ensure_dir", "get_data_path", "get_logs_path"]
