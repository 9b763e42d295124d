from pathlib import Path
from typing import Dict, List, Optional, Sequence

import pytest

from story_mdx.config import CrawlConfig
from story_mdx.errors import FetchError
from story_mdx.models import Cookie, FetchedPage

BASE = "https://stories.example.com"


def story_page(
    title: Optional[str] = "The Cave",
    author: str = "Jane Doe",
    chapter: Optional[int] = 1,
    links: Sequence[str] = (),
    body: str = "<p>It was dark.</p>",
    meta: Optional[Dict[str, str]] = None,
) -> str:
    heading = f"<h1> {title} </h1>" if title is not None else ""
    chapter_line = f"<span>Chapter {chapter}</span>" if chapter is not None else ""
    anchors = "".join(f'<a href="{href}">option</a>' for href in links)
    meta_tags = "".join(
        f'<meta property="{name}" content="{value}">' for name, value in (meta or {}).items()
    )
    return f"""
    <html>
      <head>{meta_tags}</head>
      <body>
        <div class="chapter-header">{heading}{chapter_line}<p>By {author}</p></div>
        <div class="chapter-content">{body}</div>
        <div class="question-content">{anchors}</div>
      </body>
    </html>
    """


class FakeFetcher:
    """Serves canned HTML keyed by url and records every fetch."""

    def __init__(self, pages: Dict[str, str], failures: Sequence[str] = ()) -> None:
        self.pages = pages
        self.failures = set(failures)
        self.fetched: List[str] = []
        self.cookies_seen: List[Sequence[Cookie]] = []

    async def fetch(self, url: str, cookies: Sequence[Cookie] = ()) -> FetchedPage:
        self.fetched.append(url)
        self.cookies_seen.append(cookies)
        if url in self.failures or url not in self.pages:
            raise FetchError(f"Could not get DOM for {url}")
        return FetchedPage(url=url, final_url=url, html=self.pages[url])


@pytest.fixture
def config(tmp_path: Path) -> CrawlConfig:
    return CrawlConfig(output_root=tmp_path / "out", author="Jane Doe", max_depth=2)
