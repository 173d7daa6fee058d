"""Comparison data structures: page targets, captured images, outcomes and runs."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Annotated, Literal, Optional, Union

from PIL import Image
from pydantic import BaseModel, ConfigDict, Field

from visual_compare.url_utils import join_url


class PageTarget(BaseModel):
    """One logical page, compared across two environments by relative path."""
    model_config = ConfigDict(frozen=True)

    path: str
    reference_url: str
    candidate_url: str

    @classmethod
    def from_bases(cls, path: str, reference_base: str, candidate_base: str) -> "PageTarget":
        return cls(
            path=path,
            reference_url=join_url(reference_base, path),
            candidate_url=join_url(candidate_base, path),
        )


@dataclass
class CapturedImage:
    """A decoded screenshot held in memory until persisted."""
    image: Image.Image
    source_path: Path

    @property
    def width(self) -> int:
        return self.image.width

    @property
    def height(self) -> int:
        return self.image.height

    @property
    def size(self) -> tuple[int, int]:
        return self.image.size


# --- Outcome variants ---

class Scored(BaseModel):
    kind: Literal["scored"] = "scored"
    score: float = Field(ge=0.0, le=100.0)
    mismatched_pixels: int = 0
    total_pixels: int = 0


class SizeMismatch(BaseModel):
    kind: Literal["size_mismatch"] = "size_mismatch"
    reference_size: tuple[int, int]
    candidate_size: tuple[int, int]


class CaptureError(BaseModel):
    kind: Literal["error"] = "error"
    reason: str = ""


Outcome = Annotated[Union[Scored, SizeMismatch, CaptureError], Field(discriminator="kind")]


class ComparisonResult(BaseModel):
    page_path: str
    reference_url: str = ""
    candidate_url: str = ""
    outcome: Outcome
    status: str  # pass, fail, error
    reference_image: Optional[str] = None  # relative to the report directory
    candidate_image: Optional[str] = None
    diff_image: Optional[str] = None
    duration_seconds: float = 0.0

    @property
    def score(self) -> float | None:
        if isinstance(self.outcome, Scored):
            return self.outcome.score
        return None


class RunResult(BaseModel):
    run_id: str
    device: str
    started_at: str
    completed_at: str = ""
    reference_name: str = "prod"
    candidate_name: str = "staging"
    reference_base_url: str = ""
    candidate_base_url: str = ""
    timed_out: bool = False
    total: int = 0
    passed: int = 0
    failed: int = 0
    errors: int = 0
    duration_seconds: float = 0.0
    results: list[ComparisonResult] = Field(default_factory=list)
