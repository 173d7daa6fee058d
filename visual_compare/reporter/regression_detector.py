"""Regression detection: compares two runs of a device to find newly failing pages."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from visual_compare.imaging.scorer import ERROR, FAIL, PASS, format_outcome
from visual_compare.models.comparison import ComparisonResult, RunResult

logger = logging.getLogger(__name__)


@dataclass
class Regression:
    page_path: str
    previous_result: str
    current_result: str
    previous_similarity: str
    current_similarity: str


def detect_regressions(previous: RunResult, current: RunResult) -> list[Regression]:
    """Find pages that passed in ``previous`` and now fail or error.

    Pages are matched by path; runs for different devices are never compared.
    """
    if previous.device != current.device:
        logger.debug("Skipping regression check across devices %s/%s",
                     previous.device, current.device)
        return []

    prev_by_path: dict[str, ComparisonResult] = {r.page_path: r for r in previous.results}

    regressions = []
    for result in current.results:
        prev = prev_by_path.get(result.page_path)
        if prev and prev.status == PASS and result.status in (FAIL, ERROR):
            regressions.append(Regression(
                page_path=result.page_path,
                previous_result=prev.status,
                current_result=result.status,
                previous_similarity=format_outcome(prev.outcome),
                current_similarity=format_outcome(result.outcome),
            ))

    if regressions:
        logger.warning("Detected %d regressions", len(regressions))
    return regressions
