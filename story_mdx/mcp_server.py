"""MCP server exposing the story crawl as a tool."""

from __future__ import annotations

import logging
from typing import List, Optional

from mcp.server.fastmcp import FastMCP

from .api import request_from_payload, stream_crawl
from .config import CrawlConfig

logger = logging.getLogger("story_mdx.mcp")
logger.setLevel(logging.ERROR)

mcp = FastMCP(name="story-mdx")


@mcp.tool()
async def crawl_story(
    url: str,
    author: Optional[str] = None,
    max_depth: Optional[int] = None,
    cookies: Optional[List[str]] = None,
) -> str:
    """Crawl a branching story by one author and return the crawl log.

    ``cookies`` are ``KEY=VALUE`` strings sent with every page request.
    Markdown files are written under the configured output directory.
    """
    config = CrawlConfig.from_env()
    request = request_from_payload(
        {
            "url": url,
            "author": author,
            "max_depth": max_depth,
            "cookies": "\n".join(cookies or []),
        },
        config,
    )
    lines = [line async for line in stream_crawl(request, config)]
    return "\n".join(lines) + "\n"


def main() -> None:
    """Entry point for running the MCP server."""
    logging.basicConfig(level=logging.ERROR)
    mcp.run()


if __name__ == "__main__":
    main()
