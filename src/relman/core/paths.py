"""
Relman directory structure management.

This module provides centralized path management for runtime directories
following the XDG Base Directory specification.
"""

import os
from pathlib import Path


class RelmanPaths:
    """Manage Relman directory structure following XDG Base Directory specification."""

    @staticmethod
    def get_base_dir() -> Path:
        """Get base Relman directory."""
        base = os.getenv("RELMAN_DATA_DIR")
        if base:
            return Path(base)
        return Path.home() / ".relman"

    @staticmethod
    def get_logs_dir() -> Path:
        """Get logs directory for release logs."""
        return RelmanPaths.get_base_dir() / "logs"

    @staticmethod
    def get_releases_dir() -> Path:
        """Get directory holding persisted release configurations."""
        return RelmanPaths.get_base_dir() / "releases"

    @staticmethod
    def ensure_directories() -> None:
        """
        Ensure all required directories exist with proper permissions.

        Creates directories atomically with 0700 permissions.
        """
        directories = [
            RelmanPaths.get_logs_dir(),
            RelmanPaths.get_releases_dir(),
        ]

        for directory in directories:
            directory.mkdir(parents=True, exist_ok=True, mode=0o700)
