"""Page fetchers that retrieve story HTML with session cookies."""

from __future__ import annotations

import asyncio
import logging
from typing import Optional, Protocol, Sequence
from urllib.parse import urlparse

import requests
from playwright.async_api import (
    Browser,
    Error as PlaywrightError,
    Playwright,
    TimeoutError as PlaywrightTimeoutError,
    async_playwright,
)

from .config import CrawlConfig
from .errors import FetchError
from .models import Cookie, FetchedPage

logger = logging.getLogger("story_mdx.fetcher")


class PageFetcher(Protocol):
    async def fetch(self, url: str, cookies: Sequence[Cookie] = ()) -> FetchedPage:
        ...


class HttpPageFetcher:
    """Fetch pages with ``requests``, one cookie jar per request."""

    def __init__(self, config: CrawlConfig) -> None:
        self.timeout = config.request_timeout
        self.user_agent = config.user_agent

    def _build_session(self, url: str, cookies: Sequence[Cookie]) -> requests.Session:
        session = requests.Session()
        session.headers["User-Agent"] = self.user_agent
        host = urlparse(url).hostname or ""
        for cookie in cookies:
            session.cookies.set(cookie.key, cookie.value, domain=host, path="/")
        return session

    def _fetch_sync(self, url: str, cookies: Sequence[Cookie]) -> FetchedPage:
        session = self._build_session(url, cookies)
        try:
            resp = session.get(url, timeout=self.timeout)
            resp.raise_for_status()
        except requests.RequestException as exc:
            raise FetchError(f"Could not get DOM: {exc}") from exc
        finally:
            session.close()
        if not resp.text.strip():
            raise FetchError("Could not get DOM: empty response")
        logger.debug("Fetched %s (%d bytes)", resp.url, len(resp.content))
        return FetchedPage(url=url, final_url=resp.url, html=resp.text)

    async def fetch(self, url: str, cookies: Sequence[Cookie] = ()) -> FetchedPage:
        return await asyncio.to_thread(self._fetch_sync, url, cookies)


class BrowserPageFetcher:
    """Render pages with headless Chromium via Playwright."""

    def __init__(self, config: CrawlConfig) -> None:
        self.config = config
        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None

    async def __aenter__(self) -> "BrowserPageFetcher":
        self._playwright = await async_playwright().start()
        self._browser = await self._playwright.chromium.launch(headless=True)
        return self

    async def __aexit__(self, *exc_info) -> None:
        if self._browser is not None:
            await self._browser.close()
        if self._playwright is not None:
            await self._playwright.stop()
        self._browser = None
        self._playwright = None

    async def fetch(self, url: str, cookies: Sequence[Cookie] = ()) -> FetchedPage:
        if self._browser is None:
            raise RuntimeError("BrowserPageFetcher must be used as an async context manager")
        try:
            context = await self._browser.new_context(user_agent=self.config.user_agent)
        except PlaywrightError as exc:
            raise FetchError(f"Could not open browser context: {exc}") from exc
        try:
            if cookies:
                await context.add_cookies(
                    [{"name": cookie.key, "value": cookie.value, "url": url} for cookie in cookies]
                )
            page = await context.new_page()
            page.set_default_navigation_timeout(self.config.request_timeout * 1000)
            logger.debug("Loading %s", url)
            await page.goto(url, wait_until="networkidle")
            if self.config.wait_after_load:
                await page.wait_for_timeout(int(self.config.wait_after_load * 1000))
            html = await page.content()
            final_url = page.url
        except PlaywrightTimeoutError as exc:
            raise FetchError(f"Timeout while loading page: {exc}") from exc
        except PlaywrightError as exc:
            raise FetchError(f"Could not get DOM: {exc}") from exc
        finally:
            await context.close()
        if not html.strip():
            raise FetchError("Could not get DOM: empty document")
        return FetchedPage(url=url, final_url=final_url, html=html)
