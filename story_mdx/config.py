"""Configuration objects and constants for the crawler."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

logger = logging.getLogger("story_mdx.config")

DEFAULT_OUTPUT_ROOT = Path("output")
DEFAULT_AUTHOR = "Anonymous"
DEFAULT_MAX_DEPTH = 10
DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0 Safari/537.36 story-mdx"
)
LOG_PREFIX = "[story-mdx]"


@dataclass
class CrawlConfig:
    """Top-level settings that control crawling and export behaviour."""

    output_root: Path = field(default_factory=lambda: DEFAULT_OUTPUT_ROOT)
    author: str = DEFAULT_AUTHOR
    max_depth: int = DEFAULT_MAX_DEPTH
    request_timeout: float = 30.0
    user_agent: str = DEFAULT_USER_AGENT
    render: bool = False
    wait_after_load: float = 1.0
    max_concurrency: Optional[int] = None

    @classmethod
    def from_env(cls, **overrides) -> "CrawlConfig":
        """Build a config honouring STORY_MDX_* environment overrides."""
        values = {}
        output = os.getenv("STORY_MDX_OUTPUT")
        if output:
            values["output_root"] = Path(output).expanduser()
        author = os.getenv("STORY_MDX_AUTHOR")
        if author:
            values["author"] = author
        max_depth = os.getenv("STORY_MDX_MAX_DEPTH")
        if max_depth:
            try:
                values["max_depth"] = int(max_depth)
            except ValueError:
                logger.warning(
                    "STORY_MDX_MAX_DEPTH is set to %r which is not an integer; using %d",
                    max_depth,
                    DEFAULT_MAX_DEPTH,
                )
        values.update({key: value for key, value in overrides.items() if value is not None})
        return cls(**values)
