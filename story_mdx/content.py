"""HTML extraction: authorship, metadata and branch links."""

from __future__ import annotations

import re
from typing import List, Optional
from urllib.parse import urljoin

from bs4 import BeautifulSoup

from .errors import StructureError
from .models import PageMeta
from .utils import epoch_millis, kebab_case

HEADER_SELECTOR = ".chapter-header"
CONTENT_SELECTOR = ".chapter-content"
BRANCH_SELECTOR = ".question-content a"

CHAPTER_PATTERN = re.compile(r"chapter (\d+)", re.IGNORECASE)

META_PROPERTIES = {
    "description": "og:description",
    "pub_date": "article:published_time",
    "updated_date": "article:modified_time",
    "tag": "article:tag",
}


def parse_html(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, "html.parser")


def header_html(soup: BeautifulSoup) -> str:
    """Inner markup of the header region, or an empty string."""
    header = soup.select_one(HEADER_SELECTOR)
    return header.decode_contents() if header else ""


def is_by_author(html: str, author: str) -> bool:
    """Case-insensitive literal match of ``author`` inside ``html``."""
    return author.casefold() in html.casefold()


def _meta_property(soup: BeautifulSoup, name: str) -> Optional[str]:
    tag = soup.find("meta", attrs={"property": name})
    if tag and tag.get("content"):
        return tag["content"]
    return None


def extract_meta(soup: BeautifulSoup) -> PageMeta:
    """Pull title, naming and meta-tag fields out of a story page."""
    header = soup.select_one(HEADER_SELECTOR)
    body = soup.select_one(CONTENT_SELECTOR)
    if header is None or body is None:
        raise StructureError("Could not find story header or body")

    heading = header.find("h1")
    title = heading.get_text().strip() if heading else ""
    if not title:
        title = f"Untitled {epoch_millis()}"
    slug = kebab_case(title)

    match = CHAPTER_PATTERN.search(header.decode_contents())
    chapter = match.group(1) if match else None
    file_name = f"ch-{chapter}-{slug}" if chapter else slug

    fields = {key: _meta_property(soup, name) for key, name in META_PROPERTIES.items()}
    return PageMeta(
        title=title,
        slug=slug,
        chapter=chapter,
        file_name=file_name,
        content=body.decode_contents(),
        **fields,
    )


def discover_branches(soup: BeautifulSoup, base_url: str) -> List[str]:
    """Return continuation links in document order, duplicates included."""
    branches: List[str] = []
    for anchor in soup.select(BRANCH_SELECTOR):
        href = anchor.get("href")
        if not href:
            continue
        url = urljoin(base_url, href)
        if "chapter" in url and "/new" not in url:
            branches.append(url)
    return branches
