"""Crawl entry point: payload validation and streamed log lines."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, AsyncIterator, List, Mapping, Optional, Set, Tuple

from .config import CrawlConfig
from .crawler import format_log_line, run_crawler
from .errors import InvalidRequestError
from .fetcher import PageFetcher
from .models import Cookie, CrawlRequest

logger = logging.getLogger("story_mdx.api")

_background_crawls: Set[asyncio.Task] = set()
_DONE = object()


def parse_cookie_lines(raw: str) -> List[Cookie]:
    """Parse ``key=value`` lines, one cookie per non-blank line."""
    cookies: List[Cookie] = []
    for line in raw.splitlines():
        line = line.strip()
        if not line:
            continue
        key, sep, value = line.partition("=")
        if not sep or not key.strip():
            raise InvalidRequestError(f"Malformed cookie line: {line!r}")
        cookies.append(Cookie(key.strip(), value.strip()))
    return cookies


def _parse_cookies(raw: Any) -> Tuple[Cookie, ...]:
    if not raw:
        return ()
    if isinstance(raw, str):
        return tuple(parse_cookie_lines(raw))
    cookies: List[Cookie] = []
    for item in raw:
        if isinstance(item, Cookie):
            cookies.append(item)
        elif isinstance(item, Mapping) and "key" in item:
            cookies.append(Cookie(str(item["key"]), str(item.get("value", ""))))
        else:
            raise InvalidRequestError(f"Malformed cookie entry: {item!r}")
    return tuple(cookies)


def _parse_max_depth(raw: Any, default: int) -> int:
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except (TypeError, ValueError) as exc:
        raise InvalidRequestError(f"max-depth must be an integer, got {raw!r}") from exc


def request_from_payload(payload: Mapping[str, Any], config: CrawlConfig) -> CrawlRequest:
    """Validate a form-style payload and fill in configured defaults."""
    url = (payload.get("url") or "").strip()
    if not url:
        raise InvalidRequestError("Must provide URL")
    author = (payload.get("author") or "").strip() or config.author
    max_depth = payload.get("max-depth", payload.get("max_depth"))
    return CrawlRequest(
        url=url,
        author=author,
        max_depth=_parse_max_depth(max_depth, config.max_depth),
        cookies=_parse_cookies(payload.get("cookies")),
    )


async def stream_crawl(
    request: CrawlRequest,
    config: CrawlConfig,
    fetcher: Optional[PageFetcher] = None,
) -> AsyncIterator[str]:
    """Yield formatted log lines while the crawl runs.

    The crawl runs as its own task; a consumer that stops iterating does
    not cancel it.
    """
    queue: asyncio.Queue = asyncio.Queue()
    logger.debug("Starting crawl of %s (author=%s, max_depth=%d)", request.url, request.author, request.max_depth)
    task = asyncio.create_task(run_crawler(request, config, queue.put_nowait, fetcher))
    _background_crawls.add(task)
    task.add_done_callback(_background_crawls.discard)
    task.add_done_callback(lambda _: queue.put_nowait(_DONE))

    while True:
        line = await queue.get()
        if line is _DONE:
            break
        yield line

    try:
        report = task.result()
    except Exception as exc:  # pylint: disable=broad-except
        logger.error("Crawl of %s aborted", request.url, exc_info=exc)
        yield format_log_line(f"Failure for {request.url}. Reason: {exc}")
        return
    yield format_log_line(
        f"Finished {request.url}: {report.written} written, "
        f"{report.skipped} skipped, {report.failed} failed"
    )
