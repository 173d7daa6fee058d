"""Pytest configuration and shared fixtures."""

import asyncio
from pathlib import Path
from typing import Optional

import pytest
from PIL import Image

from visual_compare.imaging.scorer import classify
from visual_compare.models.comparison import (
    CaptureError,
    ComparisonResult,
    RunResult,
    Scored,
    SizeMismatch,
)
from visual_compare.models.config import EnvironmentConfig, FrameworkConfig, ViewportConfig
from visual_compare.reporter.aggregator import apply_summary


# ============================================================================
# Image helpers
# ============================================================================


def _write_image(path: Path, size=(1280, 800), color=(200, 100, 50, 255), mode="RGBA") -> Path:
    """Write a solid-colour PNG and return its path."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    fill = color if mode == "RGBA" else color[:3]
    Image.new(mode, size, fill).save(path, format="PNG")
    return path


def _noisy_image(size=(1280, 800)) -> Image.Image:
    """A deterministic, non-uniform RGBA image."""
    r = Image.linear_gradient("L").resize(size)
    g = Image.radial_gradient("L").resize(size)
    b = r.transpose(Image.Transpose.FLIP_LEFT_RIGHT)
    a = Image.new("L", size, 255)
    return Image.merge("RGBA", (r, g, b, a))


@pytest.fixture
def write_image():
    """Factory writing solid-colour PNGs: ``write_image(path, size, color, mode)``."""
    return _write_image


@pytest.fixture
def noisy_image():
    """Factory for deterministic textured RGBA images: ``noisy_image(size)``."""
    return _noisy_image


# ============================================================================
# Configuration Fixtures
# ============================================================================


@pytest.fixture
def device() -> ViewportConfig:
    return ViewportConfig(width=1280, height=800, name="Desktop")


@pytest.fixture
def framework_config(tmp_path: Path, device: ViewportConfig) -> FrameworkConfig:
    """A config writing every artifact under tmp_path."""
    return FrameworkConfig(
        environments={
            "prod": EnvironmentConfig(base_url="https://prod.example.com", urls=["/", "/about"]),
            "staging": EnvironmentConfig(base_url="https://staging.example.com", urls=["/", "/about"]),
        },
        devices=[device],
        settle_timeout_seconds=1.0,
        capture_timeout_seconds=5.0,
        navigation_timeout_seconds=2.0,
        run_timeout_seconds=30.0,
        output_dir=str(tmp_path / "out"),
    )


# ============================================================================
# Result Fixtures
# ============================================================================


def _make_result(
    page_path: str = "/",
    score: Optional[float] = 100.0,
    outcome=None,
    diff_image: Optional[str] = None,
) -> ComparisonResult:
    """Build a ComparisonResult; ``score=None`` produces an errored page."""
    if outcome is None:
        outcome = Scored(score=score, total_pixels=1_024_000) if score is not None else CaptureError(reason="boom")
    return ComparisonResult(
        page_path=page_path,
        reference_url=f"https://prod.example.com{page_path}",
        candidate_url=f"https://staging.example.com{page_path}",
        outcome=outcome,
        status=classify(outcome),
        diff_image=diff_image,
    )


def _make_run(results=None, device="Desktop", run_id="run_abc123") -> RunResult:
    run = RunResult(
        run_id=run_id,
        device=device,
        started_at="2026-01-01T00:00:00Z",
        completed_at="2026-01-01T00:01:00Z",
        reference_base_url="https://prod.example.com",
        candidate_base_url="https://staging.example.com",
        results=results if results is not None else [_make_result()],
    )
    return apply_summary(run)


@pytest.fixture
def make_result():
    """Factory for ComparisonResults; ``score=None`` produces an errored page."""
    return _make_result


@pytest.fixture
def make_run():
    """Factory for RunResults with counters filled in."""
    return _make_run


@pytest.fixture
def size_mismatch() -> SizeMismatch:
    return SizeMismatch(reference_size=(1280, 800), candidate_size=(1280, 700))


# ============================================================================
# Browser fakes
# ============================================================================


class FakeDriver:
    """In-memory stand-in for PlaywrightDriver.

    ``pages`` maps URL -> colour of the screenshot that URL renders;
    ``hang`` / ``fail_navigation`` / ``fail_capture`` hold URLs that misbehave.
    """

    def __init__(self, pages=None, hang=(), fail_navigation=(), fail_capture=(), hang_capture_once=()):
        self.pages = pages or {}
        self.hang = set(hang)
        self.fail_navigation = set(fail_navigation)
        self.fail_capture = set(fail_capture)
        self.hang_capture_once = set(hang_capture_once)
        self.current_url = None
        self.navigated: list[str] = []
        self.captured: list[str] = []
        self.navigation_tasks: list[asyncio.Task] = []

    async def navigate(self, url: str, timeout: float) -> None:
        self.current_url = url
        self.navigated.append(url)
        self.navigation_tasks.append(asyncio.current_task())
        if url in self.hang:
            await asyncio.sleep(3600)
        if url in self.fail_navigation:
            raise RuntimeError(f"net::ERR_CONNECTION_REFUSED at {url}")

    async def capture(self, path: str) -> None:
        self.captured.append(path)
        if self.current_url in self.hang_capture_once:
            self.hang_capture_once.discard(self.current_url)
            await asyncio.sleep(3600)
        if self.current_url in self.fail_capture:
            raise RuntimeError("Target page, context or browser has been closed")
        color = self.pages.get(self.current_url, (240, 240, 240, 255))
        Image.new("RGBA", (1280, 1600), color).save(path, format="PNG")


@pytest.fixture
def make_driver():
    """Factory for FakeDrivers with misbehaving URLs: ``make_driver(hang=[...])``."""
    return FakeDriver
