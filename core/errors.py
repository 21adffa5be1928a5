"""Shared exceptions for image decoding, segmentation and viewport mapping."""
from __future__ import annotations


class InvalidImage(ValueError):
    """Raised when a raster is empty, has a non-positive dimension or cannot be decoded."""

    def __init__(self, message: str, width: int | None = None, height: int | None = None):
        super().__init__(message)
        self.width = width
        self.height = height


class InvalidTransform(ValueError):
    """Raised when a viewport transform is requested for a zero-area container or image."""
