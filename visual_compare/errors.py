"""Exceptions raised by the imaging pipeline."""

from __future__ import annotations


class VisualCompareError(Exception):
    """Base class for comparison errors."""


class MissingImageError(VisualCompareError):
    """An input image was never written (capture produced nothing)."""

    def __init__(self, path):
        self.path = path
        super().__init__(f"Missing image: {path}")


class ImageDecodeError(VisualCompareError):
    """An input image exists but cannot be decoded."""

    def __init__(self, path, reason: str = ""):
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot decode image {path}: {reason}" if reason else f"Cannot decode image {path}")
