"""Command-line entry point for the story crawler."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import List, Optional, Sequence

from .api import parse_cookie_lines, request_from_payload, stream_crawl
from .config import CrawlConfig
from .errors import InvalidRequestError

logger = logging.getLogger("story_mdx.cli")


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Crawl a branching story by one author and save each chapter as Markdown.",
    )
    parser.add_argument("url", help="URL of the story's first chapter")
    parser.add_argument(
        "--author",
        default=None,
        help="Author name that must appear in each chapter header",
    )
    parser.add_argument(
        "--max-depth",
        type=int,
        default=None,
        help="Stop following branches once this many authored chapters were found",
    )
    parser.add_argument(
        "--cookie",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Session cookie to send with every request (repeatable)",
    )
    parser.add_argument(
        "--cookies-file",
        type=Path,
        default=None,
        help="File with one KEY=VALUE cookie per line",
    )
    parser.add_argument(
        "--output",
        default=None,
        type=Path,
        help="Directory where story folders should be written",
    )
    parser.add_argument(
        "--render",
        action="store_true",
        help="Render pages with headless Chromium instead of plain HTTP",
    )
    parser.add_argument(
        "--wait",
        type=float,
        default=1.0,
        help="Seconds to wait after network idle before reading HTML (with --render)",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=30.0,
        help="Request/navigation timeout in seconds",
    )
    parser.add_argument(
        "--max-concurrency",
        type=int,
        default=None,
        help="Cap the number of simultaneous page fetches",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )
    return parser.parse_args(argv)


def _collect_cookie_lines(args: argparse.Namespace) -> str:
    lines: List[str] = list(args.cookie)
    if args.cookies_file:
        lines.extend(args.cookies_file.read_text(encoding="utf-8").splitlines())
    return "\n".join(lines)


def build_config(args: argparse.Namespace) -> CrawlConfig:
    return CrawlConfig.from_env(
        output_root=Path(args.output).resolve() if args.output else None,
        request_timeout=args.timeout,
        render=args.render,
        wait_after_load=args.wait,
        max_concurrency=args.max_concurrency,
    )


async def _consume(stream) -> None:
    async for line in stream:
        sys.stdout.write(line + "\n")
        sys.stdout.flush()


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        force=True,
    )

    config = build_config(args)
    try:
        request = request_from_payload(
            {
                "url": args.url,
                "author": args.author,
                "max-depth": args.max_depth,
                "cookies": parse_cookie_lines(_collect_cookie_lines(args)),
            },
            config,
        )
    except (InvalidRequestError, OSError) as exc:
        logger.error("Invalid request: %s", exc)
        return 2

    asyncio.run(_consume(stream_crawl(request, config)))
    return 0


if __name__ == "__main__":
    sys.exit(main())
