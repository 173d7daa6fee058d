"""Similarity score calculation and pass/fail classification."""

from __future__ import annotations

from visual_compare.models.comparison import CaptureError, Scored, SizeMismatch

PASS_THRESHOLD = 95.0

PASS = "pass"
FAIL = "fail"
ERROR = "error"


def similarity(total_pixels: int, mismatched_pixels: int) -> float:
    """Percentage of matching pixels, in [0, 100]."""
    if total_pixels <= 0:
        raise ValueError("total_pixels must be positive")
    if not 0 <= mismatched_pixels <= total_pixels:
        raise ValueError(f"mismatched_pixels out of range: {mismatched_pixels}/{total_pixels}")
    # Multiply before dividing so exact ratios such as 95% stay exact.
    return (total_pixels - mismatched_pixels) * 100 / total_pixels


def score(total_pixels: int, mismatched_pixels: int) -> Scored:
    return Scored(
        score=similarity(total_pixels, mismatched_pixels),
        mismatched_pixels=mismatched_pixels,
        total_pixels=total_pixels,
    )


def classify(outcome: Scored | SizeMismatch | CaptureError) -> str:
    if isinstance(outcome, Scored):
        return PASS if outcome.score >= PASS_THRESHOLD else FAIL
    if isinstance(outcome, (SizeMismatch, CaptureError)):
        return ERROR
    raise TypeError(f"Unknown outcome type: {type(outcome).__name__}")


def format_outcome(outcome: Scored | SizeMismatch | CaptureError) -> str:
    """Human-readable similarity cell: '97.53%', 'Size mismatch' or 'Error'."""
    if isinstance(outcome, Scored):
        return f"{outcome.score:.2f}%"
    if isinstance(outcome, SizeMismatch):
        return "Size mismatch"
    return "Error"
