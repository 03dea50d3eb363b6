"""
Data models for the ImageScout crawler.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Set


@dataclass(slots=True)
class PageLinks:
    """Absolute page links and image addresses referenced by one document."""

    links: Set[str] = field(default_factory=set)
    images: Set[str] = field(default_factory=set)


@dataclass(slots=True)
class CrawlStats:
    """Counters reported in the summary line at the end of a crawl."""

    pages_scraped: int = 0
    page_failures: int = 0
    images_downloaded: int = 0
    image_failures: int = 0
    images_skipped: int = 0
