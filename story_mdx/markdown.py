"""Markdown rendering and front matter helpers."""

from __future__ import annotations

from typing import Optional, Sequence, Tuple

from markdownify import markdownify

from .models import PageMeta

FrontMatterField = Tuple[str, Optional[str]]


def _front_matter_line(key: str, value: str) -> str:
    # Double quotes would terminate the YAML scalar early.
    escaped = value.replace('"', "'")
    return f'{key}: "{escaped}"\n'


def build_front_matter(fields: Sequence[FrontMatterField]) -> str:
    """Render a ``---`` delimited block, skipping empty values."""
    lines = "".join(_front_matter_line(key, value) for key, value in fields if value)
    return f"---\n{lines}---\n\n"


def render_markdown(html: str) -> str:
    """Convert an HTML fragment to Markdown."""
    return markdownify(html, heading_style="ATX").strip()


def compose_page_markdown(meta: PageMeta) -> str:
    """Generate final Markdown for a story page including front matter."""
    front_matter = build_front_matter(
        [
            ("title", meta.title),
            ("pubDate", meta.pub_date),
            ("updatedDate", meta.updated_date),
            ("tags", meta.tag),
        ]
    )
    return front_matter + render_markdown(meta.content)


def compose_story_index(title: Optional[str], description: Optional[str]) -> str:
    return build_front_matter([("title", title), ("description", description)])
