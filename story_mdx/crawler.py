"""High-level orchestration for crawling a story tree and writing Markdown."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

from .config import LOG_PREFIX, CrawlConfig
from .content import discover_branches, extract_meta, header_html, is_by_author, parse_html
from .errors import CrawlError, WriteError
from .fetcher import BrowserPageFetcher, HttpPageFetcher, PageFetcher
from .markdown import compose_page_markdown, compose_story_index
from .models import (
    CrawlReport,
    CrawlRequest,
    CrawlRunState,
    FetchedPage,
    StepOutcome,
    StepResult,
)
from .utils import epoch_millis

logger = logging.getLogger("story_mdx")

LogSink = Callable[[str], None]


def format_log_line(message: str) -> str:
    return f"{epoch_millis()} {LOG_PREFIX} {message}"


class CrawlLog:
    """Send crawl progress to the ``story_mdx`` logger and an optional sink."""

    def __init__(self, sink: Optional[LogSink] = None) -> None:
        self.sink = sink

    def __call__(self, message: str, *args, level: int = logging.INFO, exc_info: bool = False) -> None:
        text = message % args if args else message
        logger.log(level, text, exc_info=exc_info)
        if self.sink is not None:
            self.sink(format_log_line(text))


@dataclass
class CrawlContext:
    """Everything a crawl step needs besides its own request."""

    config: CrawlConfig
    fetcher: PageFetcher
    log: CrawlLog
    state: CrawlRunState
    limiter: Optional[asyncio.Semaphore] = None

    @property
    def run_dir(self) -> Path:
        if self.state.run_id is None:
            raise WriteError("Run directory requested before the story root was found")
        return self.config.output_root / self.state.run_id


async def write_text(path: Path, text: str) -> Path:
    try:
        await asyncio.to_thread(path.write_text, text, encoding="utf-8")
    except OSError as exc:
        raise WriteError(f"Could not write {path}: {exc}") from exc
    return path


async def ensure_run_dir(run_dir: Path) -> Path:
    try:
        await asyncio.to_thread(run_dir.mkdir, parents=True, exist_ok=True)
    except OSError as exc:
        raise WriteError(f"Could not create {run_dir}: {exc}") from exc
    return run_dir


async def write_story_index(run_dir: Path, title: Optional[str], description: Optional[str]) -> Path:
    """Write the front-matter-only ``index.md`` describing the whole story."""
    return await write_text(run_dir / "index.md", compose_story_index(title, description))


async def _fetch(request: CrawlRequest, ctx: CrawlContext) -> FetchedPage:
    if ctx.limiter is None:
        return await ctx.fetcher.fetch(request.url, request.cookies)
    async with ctx.limiter:
        return await ctx.fetcher.fetch(request.url, request.cookies)


async def _inspect(request: CrawlRequest, ctx: CrawlContext) -> StepResult:
    url = request.url
    page = await _fetch(request, ctx)
    soup = parse_html(page.html)

    if not is_by_author(header_html(soup), request.author):
        ctx.log("Skipping %s because it is not by %s", url, request.author)
        return StepResult(url=url, outcome=StepOutcome.SKIPPED)

    depth = ctx.state.advance()
    ctx.log("Yes! written by %s", request.author)
    meta = extract_meta(soup)

    if depth == 1 and ctx.state.claim_root(meta):
        await ensure_run_dir(ctx.run_dir)
        await write_story_index(ctx.run_dir, ctx.state.story_title, meta.description)

    output_path = await write_text(ctx.run_dir / f"{meta.file_name}.md", compose_page_markdown(meta))
    ctx.log("Saved to %s", output_path)

    branches = discover_branches(soup, page.final_url)
    if not branches:
        ctx.log("No more branches")
        return StepResult(url, StepOutcome.NO_BRANCHES, depth, output_path)

    if depth > request.max_depth:
        ctx.log("Max depth reached")
        return StepResult(url, StepOutcome.DEPTH_EXCEEDED, depth, output_path)

    logger.debug("Following %d branch(es) from %s", len(branches), url)
    await asyncio.gather(*(inspect(request.with_url(branch), ctx) for branch in branches))
    return StepResult(url, StepOutcome.RECURSED, depth, output_path)


async def inspect(request: CrawlRequest, ctx: CrawlContext) -> StepResult:
    """Visit one page, save it if authored, and recurse into its branches.

    Every failure is confined to this step: it is logged against the url
    and recorded as ``StepOutcome.FAILED`` so siblings keep running.
    """
    url = request.url
    ctx.log("Inspecting %s", url)
    try:
        result = await _inspect(request, ctx)
    except CrawlError as exc:
        ctx.log("Failure for %s. Reason: %s", url, exc, level=logging.WARNING)
        result = StepResult(url=url, outcome=StepOutcome.FAILED, reason=str(exc))
    except Exception as exc:  # pylint: disable=broad-except
        ctx.log("Failure for %s. Reason: %s", url, exc, level=logging.ERROR, exc_info=True)
        result = StepResult(url=url, outcome=StepOutcome.FAILED, reason=str(exc))
    return ctx.state.record(result)


async def crawl(
    request: CrawlRequest,
    config: CrawlConfig,
    fetcher: PageFetcher,
    log: Optional[CrawlLog] = None,
) -> CrawlReport:
    """Run one top-level crawl with fresh state and return its report."""
    state = CrawlRunState()
    limiter = asyncio.Semaphore(config.max_concurrency) if config.max_concurrency else None
    ctx = CrawlContext(
        config=config,
        fetcher=fetcher,
        log=log or CrawlLog(),
        state=state,
        limiter=limiter,
    )
    await inspect(request, ctx)
    output_dir = config.output_root / state.run_id if state.run_id else None
    return CrawlReport(run_id=state.run_id, output_dir=output_dir, results=state.results)


async def run_crawler(
    request: CrawlRequest,
    config: CrawlConfig,
    sink: Optional[LogSink] = None,
    fetcher: Optional[PageFetcher] = None,
) -> CrawlReport:
    """Crawl with the fetcher selected by ``config`` unless one is given."""
    log = CrawlLog(sink)
    if fetcher is not None:
        return await crawl(request, config, fetcher, log)
    if config.render:
        async with BrowserPageFetcher(config) as browser:
            return await crawl(request, config, browser, log)
    return await crawl(request, config, HttpPageFetcher(config), log)
