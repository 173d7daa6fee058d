"""Browser session utilities: Playwright launch, per-device context, page driver."""

from __future__ import annotations

from typing import Optional, Protocol

from playwright.async_api import Browser, BrowserContext, Page, Playwright

from visual_compare.models.config import ViewportConfig

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/122.0.0.0 Safari/537.36"
)

# Some staging hosts sit behind bot protection that keys on this flag.
_INIT_SCRIPT = """
Object.defineProperty(navigator, 'webdriver', { get: () => false });
"""


class BrowserDriver(Protocol):
    """What the capture controller needs from a browser page."""

    async def navigate(self, url: str, timeout: float) -> None: ...

    async def capture(self, path: str) -> None: ...


class PlaywrightDriver:
    """Drives a single Playwright page: navigation and full-page screenshots."""

    def __init__(self, page: Page, wait_until: str = "networkidle"):
        self.page = page
        self.wait_until = wait_until

    async def navigate(self, url: str, timeout: float) -> None:
        await self.page.goto(url, wait_until=self.wait_until, timeout=timeout * 1000)

    async def capture(self, path: str) -> None:
        await self.page.screenshot(path=path, full_page=True)


async def launch_browser(playwright: Playwright, headless: bool = True) -> Browser:
    """Launch Chromium with automation flags hidden."""
    return await playwright.chromium.launch(
        headless=headless,
        args=[
            "--disable-blink-features=AutomationControlled",
        ],
    )


async def create_device_context(
    browser: Browser,
    device: ViewportConfig,
    user_agent: Optional[str] = None,
) -> BrowserContext:
    """Create the browser context for one device; all its pages share it."""
    context = await browser.new_context(
        viewport={"width": device.width, "height": device.height},
        user_agent=user_agent or DEFAULT_USER_AGENT,
        locale="en-US",
        extra_http_headers={"Accept-Language": "en-US,en;q=0.9"},
    )
    await context.add_init_script(_INIT_SCRIPT)
    return context
