"""Capture fallback controller: screenshot a page even when it never settles."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from .browser import BrowserDriver

logger = logging.getLogger(__name__)


class CaptureFallbackController:
    """Races page navigation against a settle timer, then takes a full-page screenshot.

    Navigation failures are absorbed: a screenshot is attempted whatever
    state the page is in, so the destination normally ends up holding a
    file. ``capture`` never raises for page or browser errors; the caller
    checks the returned flag (or the file) to discover a missing capture.
    """

    def __init__(
        self,
        settle_timeout: float = 30.0,
        capture_timeout: float = 90.0,
        navigation_timeout: float = 60.0,
    ):
        if settle_timeout >= capture_timeout:
            raise ValueError("settle_timeout must be shorter than capture_timeout")
        self.settle_timeout = settle_timeout
        self.capture_timeout = capture_timeout
        self.navigation_timeout = navigation_timeout

    async def capture(self, driver: BrowserDriver, url: str, dest: str | Path) -> bool:
        """Load ``url`` and write a full-page screenshot to ``dest``.

        Returns True when ``dest`` exists afterwards.
        """
        dest = Path(dest)
        try:
            dest.parent.mkdir(parents=True, exist_ok=True)
            # A file left over from an earlier run must not pass for this capture.
            dest.unlink(missing_ok=True)
        except OSError as e:
            logger.warning("Cannot prepare screenshot path %s for %s: %s", dest, url, e)
            return False
        logger.info("Navigating to: %s", url)

        try:
            await asyncio.wait_for(
                self._load_and_capture(driver, url, dest), timeout=self.capture_timeout
            )
        except asyncio.TimeoutError:
            logger.warning("Capture of %s exceeded %.0fs, taking a last screenshot",
                           url, self.capture_timeout)
            await self._last_chance_capture(driver, url, dest)
        except Exception as e:
            logger.warning("Failed to capture screenshot for %s: %s", url, e)

        if dest.exists():
            return True
        logger.error("No screenshot written for %s", url)
        return False

    async def _load_and_capture(self, driver: BrowserDriver, url: str, dest: Path) -> None:
        navigation = asyncio.ensure_future(driver.navigate(url, self.navigation_timeout))
        navigation.add_done_callback(_consume_outcome)
        timer = asyncio.ensure_future(asyncio.sleep(self.settle_timeout))
        try:
            done, _ = await asyncio.wait({navigation, timer}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            timer.cancel()

        if navigation in done:
            error = None if navigation.cancelled() else navigation.exception()
            if error is not None:
                logger.warning("Navigation to %s failed: %s (capturing anyway)", url, error)
            else:
                logger.debug("Navigation to %s settled", url)
        else:
            # Navigation keeps running in the background; the next goto supersedes it.
            logger.warning("%s did not settle within %.0fs (capturing anyway)",
                           url, self.settle_timeout)

        await driver.capture(str(dest))
        logger.info("Screenshot captured: %s", dest)

    async def _last_chance_capture(self, driver: BrowserDriver, url: str, dest: Path) -> None:
        try:
            await asyncio.wait_for(driver.capture(str(dest)), timeout=self.settle_timeout)
        except asyncio.TimeoutError:
            logger.warning("Last screenshot of %s timed out", url)
        except Exception as e:
            logger.warning("Last screenshot of %s failed: %s", url, e)


def _consume_outcome(task: asyncio.Future) -> None:
    """Retrieve an abandoned navigation's exception so it is never reported as unhandled."""
    if task.cancelled():
        return
    error = task.exception()
    if error is not None:
        logger.debug("Abandoned navigation finished with: %s", error)
