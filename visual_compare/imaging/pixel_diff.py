"""Pixel diff engine: thresholded per-channel comparison of two canonical images."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import reduce
from pathlib import Path
from typing import Optional

from PIL import Image, ImageChops

from visual_compare.models.comparison import SizeMismatch

logger = logging.getLogger(__name__)

DIFF_THRESHOLD = 0.1
DEFAULT_DIFF_COLOR = (255, 0, 0)


@dataclass
class DiffResult:
    image: Image.Image
    mismatched_pixels: int
    total_pixels: int

    def save(self, path: str | Path) -> Path:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        self.image.save(path, format="PNG")
        return path


class PixelDiffEngine:
    """Counts mismatched pixels and paints them onto a transparent diff image.

    Two pixels match when every RGBA channel differs by at most
    ``threshold`` on a 0-1 scale. When ``alt_color`` is given, mismatches
    where the reference pixel is brighter than the candidate are painted
    with it instead of ``diff_color``.
    """

    def __init__(
        self,
        threshold: float = DIFF_THRESHOLD,
        diff_color: tuple[int, int, int] = DEFAULT_DIFF_COLOR,
        alt_color: Optional[tuple[int, int, int]] = None,
    ):
        if not 0.0 <= threshold <= 1.0:
            raise ValueError(f"threshold must be within [0, 1], got {threshold}")
        self.threshold = threshold
        self.diff_color = tuple(diff_color)
        self.alt_color = tuple(alt_color) if alt_color else None
        self._cutoff = threshold * 255

    def mismatch_mask(self, reference: Image.Image, candidate: Image.Image) -> Image.Image:
        """Return an "L" mask that is 255 wherever the pixels do not match."""
        delta = ImageChops.difference(reference, candidate)
        cutoff = self._cutoff
        channel_masks = [band.point(lambda v: 255 if v > cutoff else 0) for band in delta.split()]
        return reduce(ImageChops.lighter, channel_masks)

    def diff(self, reference: Image.Image, candidate: Image.Image) -> DiffResult | SizeMismatch:
        if reference.size != candidate.size:
            logger.warning("Size mismatch: reference %dx%d, candidate %dx%d",
                           reference.width, reference.height, candidate.width, candidate.height)
            return SizeMismatch(reference_size=reference.size, candidate_size=candidate.size)

        reference = reference.convert("RGBA")
        candidate = candidate.convert("RGBA")
        width, height = reference.size

        mask = self.mismatch_mask(reference, candidate)
        mismatched = mask.histogram()[255]

        diff_image = Image.new("RGBA", reference.size, (0, 0, 0, 0))
        box = (0, 0, width, height)
        diff_image.paste((*self.diff_color, 255), box, mask)
        if self.alt_color and mismatched:
            brighter = ImageChops.subtract(reference.convert("L"), candidate.convert("L"))
            alt_mask = ImageChops.multiply(mask, brighter.point(lambda v: 255 if v > 0 else 0))
            diff_image.paste((*self.alt_color, 255), box, alt_mask)

        logger.debug("Pixel diff: %d of %d pixels mismatched", mismatched, width * height)
        return DiffResult(image=diff_image, mismatched_pixels=mismatched, total_pixels=width * height)
