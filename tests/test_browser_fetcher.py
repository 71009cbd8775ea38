"""Browser fetcher tests — lazy shared browser, per-fetch context, failures.

Playwright is mocked at ``playwright.async_api.async_playwright`` so no
browser is launched.

Test classes: TestBrowserLifecycle, TestFetchFailures
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from playwright.async_api import Error as PlaywrightError

from jobkeywords.errors import ActionableError, ErrorType
from jobkeywords.fetch import BrowserConfig, BrowserFetcher

if TYPE_CHECKING:
    from collections.abc import Iterator

URL = "https://simplify.jobs/p/0b1c2d3e/Backend-Engineer"


class _FakePlaywright:
    """Bundle of mocks standing in for the Playwright object graph."""

    def __init__(self, status: int = 200, html: str = "<html><h1>Job</h1></html>") -> None:
        self.response = MagicMock()
        self.response.status = status

        self.page = MagicMock()
        self.page.goto = AsyncMock(return_value=self.response)
        self.page.content = AsyncMock(return_value=html)

        self.context = MagicMock()
        self.context.new_page = AsyncMock(return_value=self.page)
        self.context.close = AsyncMock()

        self.browser = MagicMock()
        self.browser.new_context = AsyncMock(return_value=self.context)
        self.browser.close = AsyncMock()

        self.playwright = MagicMock()
        self.playwright.chromium.launch = AsyncMock(return_value=self.browser)
        self.playwright.stop = AsyncMock()

        self.manager = MagicMock()
        self.manager.start = AsyncMock(return_value=self.playwright)


@pytest.fixture
def fake_playwright() -> Iterator[_FakePlaywright]:
    fake = _FakePlaywright()
    with patch("playwright.async_api.async_playwright", return_value=fake.manager):
        yield fake


class TestBrowserLifecycle:
    """REQUIREMENT: One browser serves every fetch; each fetch gets a fresh page.

    WHO: The pipeline fetching many postings concurrently
    WHAT: The browser launches lazily, exactly once, even under concurrent
          first fetches; each fetch opens and closes its own context;
          launch settings come from BrowserConfig; close() stops
          everything and is safe to call twice
    WHY: Launching Chromium per page would dominate run time
    """

    @pytest.mark.asyncio
    async def test_fetch_returns_rendered_html(self, fake_playwright: _FakePlaywright) -> None:
        fetcher = BrowserFetcher(BrowserConfig(navigation_timeout_ms=5_000))

        html = await fetcher.fetch(URL)

        assert html == "<html><h1>Job</h1></html>"
        fake_playwright.page.goto.assert_awaited_once_with(URL, wait_until="networkidle")
        fake_playwright.page.set_default_navigation_timeout.assert_called_once_with(5_000)
        fake_playwright.context.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_browser_launches_once_for_concurrent_fetches(
        self, fake_playwright: _FakePlaywright
    ) -> None:
        fetcher = BrowserFetcher()

        await asyncio.gather(*(fetcher.fetch(f"{URL}?n={i}") for i in range(5)))

        fake_playwright.playwright.chromium.launch.assert_awaited_once()
        assert fake_playwright.browser.new_context.await_count == 5
        assert fake_playwright.context.close.await_count == 5

    @pytest.mark.asyncio
    async def test_launch_uses_config(self, fake_playwright: _FakePlaywright) -> None:
        fetcher = BrowserFetcher(BrowserConfig(headless=False, channel="msedge"))

        await fetcher.fetch(URL)

        fake_playwright.playwright.chromium.launch.assert_awaited_once_with(headless=False, channel="msedge")

    @pytest.mark.asyncio
    async def test_close_is_idempotent(self, fake_playwright: _FakePlaywright) -> None:
        async with BrowserFetcher() as fetcher:
            await fetcher.fetch(URL)
        await fetcher.close()

        fake_playwright.browser.close.assert_awaited_once()
        fake_playwright.playwright.stop.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_close_without_fetch_does_nothing(self, fake_playwright: _FakePlaywright) -> None:
        await BrowserFetcher().close()
        fake_playwright.manager.start.assert_not_awaited()


class TestFetchFailures:
    """REQUIREMENT: Navigation problems surface as FETCH errors naming the URL.

    WHO: The pipeline, which fails only the affected source
    WHAT: HTTP status >= 400 and Playwright navigation errors raise FETCH;
          the page context is closed either way; a browser that cannot
          launch raises CONNECTION with an install hint
    WHY: The operator needs to know which posting is dead, and why
    """

    @pytest.mark.asyncio
    async def test_http_error_status_is_fetch_error(self, fake_playwright: _FakePlaywright) -> None:
        fake_playwright.response.status = 404

        with pytest.raises(ActionableError) as exc_info:
            await BrowserFetcher().fetch(URL)

        assert exc_info.value.error_type == ErrorType.FETCH
        assert URL in exc_info.value.error
        assert "HTTP 404" in exc_info.value.error
        fake_playwright.context.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_navigation_error_is_fetch_error(self, fake_playwright: _FakePlaywright) -> None:
        fake_playwright.page.goto.side_effect = PlaywrightError("net::ERR_NAME_NOT_RESOLVED")

        with pytest.raises(ActionableError) as exc_info:
            await BrowserFetcher().fetch(URL)

        assert exc_info.value.error_type == ErrorType.FETCH
        assert "ERR_NAME_NOT_RESOLVED" in exc_info.value.error
        fake_playwright.context.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_launch_failure_is_connection_error(self, fake_playwright: _FakePlaywright) -> None:
        fake_playwright.playwright.chromium.launch.side_effect = PlaywrightError("Executable doesn't exist")

        with pytest.raises(ActionableError) as exc_info:
            await BrowserFetcher().fetch(URL)

        assert exc_info.value.error_type == ErrorType.CONNECTION
        assert exc_info.value.suggestion is not None
        assert "playwright install chromium" in exc_info.value.suggestion
        fake_playwright.playwright.stop.assert_awaited_once()
