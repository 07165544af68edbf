from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import pytest
from playwright.async_api import Error as PlaywrightError

from presalewatch.adapters import playwright as playwright_adapter
from presalewatch.adapters.playwright import PlaywrightRenderer
from presalewatch.config.browser import BrowserConfig
from presalewatch.domain.errors import RenderError

if TYPE_CHECKING:
    from pathlib import Path


@dataclass
class FakeLocator:
    page: FakePage
    selector: str

    @property
    def first(self) -> FakeLocator:
        return self

    async def wait_for(self, *, state: str, timeout: int) -> None:
        if self.selector not in self.page.elements:
            raise PlaywrightError(f"Timeout {timeout}ms exceeded waiting for {self.selector}")

    async def screenshot(self, *, type: str, timeout: int) -> bytes:  # noqa: A002
        return f"png:{self.selector}".encode()

    async def text_content(self, *, timeout: int) -> str | None:
        return self.page.elements[self.selector]


@dataclass
class FakePage:
    elements: dict[str, str]
    unreachable: bool = False
    closed: bool = False

    async def goto(self, url: str, *, wait_until: str, timeout: int) -> None:
        if self.unreachable:
            raise PlaywrightError("net::ERR_NAME_NOT_RESOLVED")

    def locator(self, selector: str) -> FakeLocator:
        return FakeLocator(self, selector)

    async def screenshot(self, *, full_page: bool, type: str) -> bytes:  # noqa: A002
        return b"png:full"

    async def close(self) -> None:
        self.closed = True


@dataclass
class FakeContext:
    elements: dict[str, str] = field(default_factory=dict[str, str])
    unreachable: bool = False
    pages: list[FakePage] = field(default_factory=list[FakePage])

    async def new_page(self) -> FakePage:
        page = FakePage(self.elements, unreachable=self.unreachable)
        self.pages.append(page)
        return page


def _renderer(context: FakeContext, **config: object) -> PlaywrightRenderer:
    renderer = PlaywrightRenderer(BrowserConfig(**config))  # type: ignore[arg-type]
    renderer._context = context  # noqa: SLF001  # type: ignore[reportPrivateUsage,assignment]
    return renderer


def test_render_region_and_full_page() -> None:
    context = FakeContext({"#price": "$0.01"})
    renderer = _renderer(context)

    assert asyncio.run(renderer.render("https://a.example", "#price")) == b"png:#price"
    assert asyncio.run(renderer.render("https://a.example")) == b"png:full"
    assert all(page.closed for page in context.pages)


def test_missing_region_raises_render_error() -> None:
    context = FakeContext()

    with pytest.raises(RenderError, match="region '#gone'"):
        asyncio.run(_renderer(context).render("https://a.example", "#gone"))
    assert context.pages[0].closed


def test_navigation_failure_raises_render_error() -> None:
    context = FakeContext(unreachable=True)

    with pytest.raises(RenderError, match="navigation failed"):
        asyncio.run(_renderer(context).extract_text("https://a.example", ".stage"))


def test_extract_text_strips_content() -> None:
    renderer = _renderer(FakeContext({".stage": "  Stage 4  "}))

    assert asyncio.run(renderer.extract_text("https://a.example", ".stage")) == "Stage 4"


def test_captures_are_saved_when_configured(tmp_path: Path) -> None:
    renderer = _renderer(FakeContext({"#price": "x"}), screenshots_dir=tmp_path)

    asyncio.run(renderer.render("https://a.example/presale", "#price"))

    saved = list(tmp_path.glob("*.png"))
    assert len(saved) == 1
    assert saved[0].name.endswith("https_a_example_presale_price.png")
    assert saved[0].read_bytes() == b"png:#price"


def test_start_reuses_the_open_context() -> None:
    context = FakeContext()

    assert asyncio.run(_renderer(context).start()) is context


class _MissingBrowser:
    async def start(self) -> object:
        raise PlaywrightError("Executable doesn't exist at /ms-playwright/chromium")


def test_browser_launch_failure_raises_render_error(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(playwright_adapter, "async_playwright", _MissingBrowser)
    renderer = PlaywrightRenderer(BrowserConfig())

    with pytest.raises(RenderError, match="cannot start browser"):
        asyncio.run(renderer.render("https://a.example"))
