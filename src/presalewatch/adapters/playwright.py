"""Chromium renderer built on Playwright's async API."""

from __future__ import annotations

import re
from datetime import UTC, datetime
from logging import getLogger
from typing import TYPE_CHECKING

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import async_playwright

from presalewatch.domain.errors import RenderError

if TYPE_CHECKING:
    from types import TracebackType

    from playwright.async_api import Browser, BrowserContext, Page, Playwright

    from presalewatch.config.browser import BrowserConfig

log = getLogger(__name__)

USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)
_UNSAFE_FILENAME = re.compile(r"[^A-Za-z0-9]+")


class PlaywrightRenderer:
    """Render pages and capture regions with one browser per run.

    Selectors accept everything ``page.locator`` does (CSS, ``text=``,
    ``xpath=`` and ``>>`` chains). Every navigation and wait is bounded by
    ``config.timeout_ms``.
    """

    def __init__(self, config: BrowserConfig) -> None:
        self.config = config
        self._playwright: Playwright | None = None
        self._browser: Browser | None = None
        self._context: BrowserContext | None = None

    async def __aenter__(self) -> PlaywrightRenderer:
        await self.start()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def start(self) -> BrowserContext:
        """Launch the browser on first use and return its shared context."""

        if self._context is not None:
            return self._context
        width, height = self.config.viewport
        try:
            self._playwright = await async_playwright().start()
            self._browser = await self._playwright.chromium.launch(headless=self.config.headless)
            self._context = await self._browser.new_context(
                user_agent=USER_AGENT,
                viewport={"width": width, "height": height},
            )
        except PlaywrightError as exc:
            await self.aclose()
            raise RenderError(f"cannot start browser: {exc.message}") from exc
        log.info("Playwright browser started (headless=%s)", self.config.headless)
        return self._context

    async def aclose(self) -> None:
        if self._context is not None:
            await self._context.close()
            self._context = None
        if self._browser is not None:
            await self._browser.close()
            self._browser = None
        if self._playwright is not None:
            await self._playwright.stop()
            self._playwright = None
        log.debug("Playwright browser closed")

    async def render(self, url: str, region: str | None = None) -> bytes:
        page = await self._open(url)
        try:
            if region is None:
                image = await page.screenshot(full_page=True, type="png")
            else:
                locator = page.locator(region).first
                await locator.wait_for(state="visible", timeout=self.config.timeout_ms)
                image = await locator.screenshot(type="png", timeout=self.config.timeout_ms)
        except PlaywrightError as exc:
            target = f"region {region!r}" if region else "full page"
            raise RenderError(f"{url}: could not capture {target}: {exc.message}") from exc
        finally:
            await page.close()
        log.info("Captured %s of %s (%d bytes)", region or "full page", url, len(image))
        self._save(url, region, image)
        return image

    async def extract_text(self, url: str, selector: str) -> str:
        page = await self._open(url)
        try:
            locator = page.locator(selector).first
            await locator.wait_for(state="attached", timeout=self.config.timeout_ms)
            text = await locator.text_content(timeout=self.config.timeout_ms)
        except PlaywrightError as exc:
            raise RenderError(f"{url}: no text for {selector!r}: {exc.message}") from exc
        finally:
            await page.close()
        return (text or "").strip()

    async def _open(self, url: str) -> Page:
        context = await self.start()
        page = await context.new_page()
        try:
            await page.goto(url, wait_until="networkidle", timeout=self.config.timeout_ms)
        except PlaywrightError as exc:
            await page.close()
            raise RenderError(f"{url}: navigation failed: {exc.message}") from exc
        return page

    def _save(self, url: str, region: str | None, image: bytes) -> None:
        directory = self.config.screenshots_dir
        if directory is None:
            return
        directory.mkdir(parents=True, exist_ok=True)
        stamp = datetime.now(UTC).strftime("%Y%m%dT%H%M%S")
        name = _UNSAFE_FILENAME.sub("_", f"{url}_{region or 'page'}").strip("_")[:120]
        path = directory / f"{stamp}_{name}.png"
        path.write_bytes(image)
        log.debug("Saved capture to %s", path)
