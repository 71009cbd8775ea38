"""Playwright fetcher — renders posting pages in headless Chromium.

The browser is launched lazily on the first fetch (exactly once, guarded
by a lock) and shared by every concurrent fetch; each fetch gets its own
page, which is closed as soon as the HTML has been read.  The browser is
torn down explicitly by :meth:`BrowserFetcher.close`.

``page.content()`` returns the serialised DOM after scripts have run,
which is what the extractors parse.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import TYPE_CHECKING

from jobkeywords.errors import ActionableError
from jobkeywords.logging import logger

if TYPE_CHECKING:
    from playwright.async_api import Browser, Playwright


@dataclass
class BrowserConfig:
    """Browser launch settings from ``[browser]``."""

    headless: bool = True
    channel: str | None = None
    navigation_timeout_ms: int = 30_000
    user_agent: str | None = None
    viewport_width: int = 1440
    viewport_height: int = 900


class BrowserFetcher:
    """Fetches rendered HTML through a single shared Playwright browser.

    Usage::

        async with BrowserFetcher(BrowserConfig()) as fetcher:
            html = await fetcher.fetch("https://example.org/job/1")
    """

    def __init__(self, config: BrowserConfig | None = None) -> None:
        self.config = config or BrowserConfig()
        self._playwright: Playwright | None = None
        self._browser: Browser | None = None
        self._lock = asyncio.Lock()

    async def __aenter__(self) -> BrowserFetcher:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        await self.close()

    async def _ensure_browser(self) -> Browser:
        async with self._lock:
            if self._browser is not None:
                return self._browser

            from playwright.async_api import Error as PlaywrightError
            from playwright.async_api import async_playwright

            logger.info(
                "Launching Chromium (headless=%s, channel=%s)",
                self.config.headless,
                self.config.channel or "bundled",
            )
            self._playwright = await async_playwright().start()
            try:
                self._browser = await self._playwright.chromium.launch(
                    headless=self.config.headless,
                    channel=self.config.channel or None,
                )
            except PlaywrightError as exc:
                await self._playwright.stop()
                self._playwright = None
                raise ActionableError.connection(
                    service="Chromium",
                    url=self.config.channel or "bundled",
                    raw_error=str(exc),
                    suggestion="Install the browser with: playwright install chromium",
                ) from None
            return self._browser

    async def fetch(self, url: str) -> str:
        """Navigate a fresh page to *url* and return the rendered HTML.

        Raises :class:`ActionableError` (FETCH) on navigation failure.
        """
        from playwright.async_api import Error as PlaywrightError

        browser = await self._ensure_browser()
        context = await browser.new_context(
            viewport={"width": self.config.viewport_width, "height": self.config.viewport_height},
            user_agent=self.config.user_agent,
        )
        try:
            page = await context.new_page()
            page.set_default_navigation_timeout(self.config.navigation_timeout_ms)
            response = await page.goto(url, wait_until="networkidle")
            if response is not None and response.status >= 400:
                raise ActionableError.fetch(url, f"HTTP {response.status}")
            html = await page.content()
        except PlaywrightError as exc:
            raise ActionableError.fetch(url, str(exc)) from None
        finally:
            await context.close()

        logger.debug("Fetched %s (%d chars)", url, len(html))
        return html

    async def close(self) -> None:
        """Close the browser and stop Playwright.  Safe to call twice."""
        async with self._lock:
            if self._browser is not None:
                await self._browser.close()
                self._browser = None
            if self._playwright is not None:
                await self._playwright.stop()
                self._playwright = None
