"""Data models used throughout the crawler pipeline."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import List, Optional, Tuple


@dataclass(frozen=True)
class Cookie:
    """A session cookie sent with every page fetch."""

    key: str
    value: str


@dataclass(frozen=True)
class CrawlRequest:
    """Immutable input to a crawl; children differ from parents only by url."""

    url: str
    author: str
    max_depth: int
    cookies: Tuple[Cookie, ...] = ()

    def with_url(self, url: str) -> "CrawlRequest":
        return replace(self, url=url)


@dataclass
class PageMeta:
    """Metadata and raw content pulled out of a single story page."""

    title: str
    slug: str
    chapter: Optional[str]
    file_name: str
    description: Optional[str]
    pub_date: Optional[str]
    updated_date: Optional[str]
    tag: Optional[str]
    content: str


@dataclass
class FetchedPage:
    """Raw HTML returned by a page fetcher."""

    url: str
    final_url: str
    html: str


class StepOutcome(str, enum.Enum):
    """Terminal outcome of one crawl step."""

    FAILED = "failed"
    SKIPPED = "skipped"
    NO_BRANCHES = "no_branches"
    DEPTH_EXCEEDED = "depth_exceeded"
    RECURSED = "recursed"


@dataclass
class StepResult:
    """Record of how a single page visit ended."""

    url: str
    outcome: StepOutcome
    depth: Optional[int] = None
    output_path: Optional[Path] = None
    reason: Optional[str] = None


@dataclass
class CrawlRunState:
    """Mutable state shared by every step of one top-level crawl.

    ``depth`` counts authored pages confirmed so far across the whole tree,
    not the call depth of a single branch. The story identity is latched by
    the first page to reach depth 1 and is read-only afterwards.
    """

    depth: int = 0
    run_id: Optional[str] = None
    story_title: Optional[str] = None
    story_slug: Optional[str] = None
    results: List[StepResult] = field(default_factory=list)

    def advance(self) -> int:
        # No await between read and write, so this is atomic on the event loop.
        self.depth += 1
        return self.depth

    def claim_root(self, meta: PageMeta) -> bool:
        """Latch the run identity from ``meta``; False if already claimed."""
        if self.run_id is not None:
            return False
        self.run_id = meta.slug
        self.story_title = meta.title
        self.story_slug = meta.slug
        return True

    def record(self, result: StepResult) -> StepResult:
        self.results.append(result)
        return result


@dataclass
class CrawlReport:
    """Summary of a finished run."""

    run_id: Optional[str]
    output_dir: Optional[Path]
    results: List[StepResult]

    def count(self, *outcomes: StepOutcome) -> int:
        return sum(1 for result in self.results if result.outcome in outcomes)

    @property
    def written(self) -> int:
        return sum(1 for result in self.results if result.output_path is not None)

    @property
    def skipped(self) -> int:
        return self.count(StepOutcome.SKIPPED)

    @property
    def failed(self) -> int:
        return self.count(StepOutcome.FAILED)
