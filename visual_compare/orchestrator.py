"""Run orchestrator: captures, compares and reports every page for each device."""

from __future__ import annotations

import asyncio
import logging
import time
import uuid
from pathlib import Path

from playwright.async_api import async_playwright

from visual_compare.capture.browser import (
    BrowserDriver,
    PlaywrightDriver,
    create_device_context,
    launch_browser,
)
from visual_compare.capture.fallback import CaptureFallbackController
from visual_compare.imaging.comparator import PageComparator
from visual_compare.imaging.normalizer import ImageNormalizer
from visual_compare.imaging.pixel_diff import PixelDiffEngine
from visual_compare.imaging.scorer import classify
from visual_compare.models.comparison import (
    CaptureError,
    ComparisonResult,
    PageTarget,
    RunResult,
)
from visual_compare.models.config import FrameworkConfig, ViewportConfig
from visual_compare.reporter.aggregator import apply_summary
from visual_compare.reporter.reporter import Reporter
from visual_compare.url_utils import DIFF_DIR, artifact_path

logger = logging.getLogger(__name__)


def _timestamp() -> str:
    return time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime())


class Orchestrator:
    """Coordinates capture, comparison and reporting.

    Collaborators are built once here and shared by every page and device.
    """

    def __init__(
        self,
        config: FrameworkConfig,
        comparator: PageComparator | None = None,
        capture_controller: CaptureFallbackController | None = None,
        reporter: Reporter | None = None,
    ):
        self.config = config
        self.output_dir = Path(config.output_dir)
        self.comparator = comparator or PageComparator(
            ImageNormalizer(),
            PixelDiffEngine(diff_color=config.diff_color, alt_color=config.diff_alt_color),
        )
        self.capture_controller = capture_controller or CaptureFallbackController(
            settle_timeout=config.settle_timeout_seconds,
            capture_timeout=config.capture_timeout_seconds,
            navigation_timeout=config.navigation_timeout_seconds,
        )
        self.reporter = reporter or Reporter(config)

    def targets(self) -> list[PageTarget]:
        """Ordered page targets for this run."""
        return [
            PageTarget.from_bases(path, self.config.reference_env.base_url,
                                  self.config.candidate_env.base_url)
            for path in self.config.page_paths
        ]

    def run(self, device_names: list[str] | None = None) -> dict[str, dict]:
        """Compare every page on each selected device. Returns device -> run info."""
        if device_names:
            devices = [self.config.get_device(name) for name in device_names]
        else:
            devices = list(self.config.devices)
        return asyncio.run(self._run_devices(devices))

    async def _run_devices(self, devices: list[ViewportConfig]) -> dict[str, dict]:
        outcomes: dict[str, dict] = {}
        async with async_playwright() as p:
            logger.debug("Launching Chromium (headless=%s)...", self.config.headless)
            browser = await launch_browser(p, headless=self.config.headless)
            try:
                for device in devices:
                    context = await create_device_context(browser, device, self.config.user_agent)
                    try:
                        page = await context.new_page()
                        driver = PlaywrightDriver(page, wait_until=self.config.wait_until)
                        run_result = await self.compare_device(driver, device)
                    finally:
                        await context.close()
                    outcomes[device.name] = {
                        "run_result": run_result,
                        "reports": self.report(run_result),
                    }
            finally:
                await browser.close()
        return outcomes

    def report(self, run_result: RunResult) -> dict[str, str]:
        previous_run = self.reporter.load_previous_run(run_result.device)
        return self.reporter.generate_reports(run_result, previous_run=previous_run)

    async def compare_device(self, driver: BrowserDriver, device: ViewportConfig) -> RunResult:
        """Compare all pages on one device, keeping partial results on timeout."""
        start = time.time()
        targets = self.targets()
        run_result = RunResult(
            run_id=f"run_{uuid.uuid4().hex[:8]}",
            device=device.name,
            started_at=_timestamp(),
            reference_name=self.config.reference,
            candidate_name=self.config.candidate,
            reference_base_url=self.config.reference_env.base_url,
            candidate_base_url=self.config.candidate_env.base_url,
        )
        logger.info("=== Comparing %d pages on %s (%dx%d) ===",
                    len(targets), device.name, device.width, device.height)

        results: list[ComparisonResult] = []
        try:
            await asyncio.wait_for(
                self._compare_pages(driver, device, targets, results),
                timeout=self.config.run_timeout_seconds,
            )
        except asyncio.TimeoutError:
            logger.error("Run for %s timed out after %.0fs with %d of %d pages compared",
                         device.name, self.config.run_timeout_seconds, len(results), len(targets))
            run_result.timed_out = True
            for target in targets[len(results):]:
                results.append(self._error_result(target, "Run timed out before this page was compared"))

        run_result.results = results
        run_result.completed_at = _timestamp()
        run_result.duration_seconds = round(time.time() - start, 2)
        apply_summary(run_result)
        logger.info("=== %s: %d passed, %d failed, %d errors in %.1fs ===",
                    device.name, run_result.passed, run_result.failed,
                    run_result.errors, run_result.duration_seconds)
        return run_result

    async def _compare_pages(
        self,
        driver: BrowserDriver,
        device: ViewportConfig,
        targets: list[PageTarget],
        results: list[ComparisonResult],
    ) -> None:
        for i, target in enumerate(targets, 1):
            logger.info("[%d/%d] %s", i, len(targets), target.path or "/")
            try:
                result = await self.compare_page(driver, device, target)
            except Exception as e:
                logger.error("Comparison of %s failed: %s", target.path, e)
                result = self._error_result(target, str(e))
            results.append(result)

    async def compare_page(
        self, driver: BrowserDriver, device: ViewportConfig, target: PageTarget
    ) -> ComparisonResult:
        """Capture both environments for one page and compare them."""
        start = time.time()
        reference_rel = artifact_path(device.name, self.config.reference, target.path)
        candidate_rel = artifact_path(device.name, self.config.candidate, target.path)
        diff_rel = artifact_path(device.name, DIFF_DIR, target.path)
        (self.output_dir / diff_rel).unlink(missing_ok=True)

        await self.capture_controller.capture(driver, target.candidate_url, self.output_dir / candidate_rel)
        await self.capture_controller.capture(driver, target.reference_url, self.output_dir / reference_rel)

        comparison = self.comparator.compare(
            self.output_dir / reference_rel,
            self.output_dir / candidate_rel,
            self.output_dir / diff_rel,
        )
        status = classify(comparison.outcome)
        logger.info("%s: %s", target.path or "/", status.upper())

        return ComparisonResult(
            page_path=target.path,
            reference_url=target.reference_url,
            candidate_url=target.candidate_url,
            outcome=comparison.outcome,
            status=status,
            reference_image=self._existing(reference_rel),
            candidate_image=self._existing(candidate_rel),
            diff_image=diff_rel.as_posix() if comparison.diff_path else None,
            duration_seconds=round(time.time() - start, 2),
        )

    def _existing(self, rel_path: Path) -> str | None:
        return rel_path.as_posix() if (self.output_dir / rel_path).exists() else None

    def _error_result(self, target: PageTarget, reason: str) -> ComparisonResult:
        outcome = CaptureError(reason=reason)
        return ComparisonResult(
            page_path=target.path,
            reference_url=target.reference_url,
            candidate_url=target.candidate_url,
            outcome=outcome,
            status=classify(outcome),
        )
