"""Relman release management package."""

from importlib import metadata

__all__ = ["cli", "core"]

try:
    __version__ = metadata.version("relman")
except metadata.PackageNotFoundError:  # pragma: no cover
    __version__ = "0.0.0"
