"""Exceptions raised while crawling and exporting story pages."""

from __future__ import annotations


class CrawlError(Exception):
    """Base class for failures confined to a single crawl step."""


class FetchError(CrawlError):
    """The page could not be retrieved or parsed."""


class StructureError(CrawlError):
    """The page lacks the header or content region."""


class WriteError(CrawlError):
    """A markdown file or run directory could not be written."""


class InvalidRequestError(ValueError):
    """The crawl payload was rejected before any crawl started."""
