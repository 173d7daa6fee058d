"""Page comparator: normalize, diff and score one pair of screenshots."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from visual_compare.errors import VisualCompareError
from visual_compare.models.comparison import CaptureError, Scored, SizeMismatch

from .normalizer import ImageNormalizer
from .pixel_diff import DiffResult, PixelDiffEngine
from .scorer import score

logger = logging.getLogger(__name__)


@dataclass
class PageComparison:
    outcome: Scored | SizeMismatch | CaptureError
    diff_path: Optional[Path] = None


class PageComparator:
    """Runs the imaging pipeline for one page; never raises for bad inputs."""

    def __init__(self, normalizer: ImageNormalizer, diff_engine: PixelDiffEngine):
        self.normalizer = normalizer
        self.diff_engine = diff_engine

    def compare(self, reference_path: Path, candidate_path: Path, diff_path: Path) -> PageComparison:
        try:
            reference = self.normalizer.normalize(reference_path)
            candidate = self.normalizer.normalize(candidate_path)
        except VisualCompareError as e:
            logger.warning("Cannot compare %s and %s: %s", reference_path, candidate_path, e)
            return PageComparison(outcome=CaptureError(reason=str(e)))

        result = self.diff_engine.diff(reference.image, candidate.image)
        if isinstance(result, SizeMismatch):
            return PageComparison(outcome=result)

        written = self._save_diff(result, diff_path)
        return PageComparison(
            outcome=score(result.total_pixels, result.mismatched_pixels),
            diff_path=written,
        )

    def _save_diff(self, result: DiffResult, diff_path: Path) -> Path | None:
        try:
            return result.save(diff_path)
        except OSError as e:
            logger.warning("Could not write diff image %s: %s", diff_path, e)
            return None
