# File: tests/conftest.py
import asyncio
from pathlib import Path
from typing import Dict, Iterable, Optional

import pytest

from image_scout.config import CrawlParameters, CrawlSettings
from image_scout.crawler.fetcher import DownloadError, FetchError


class StubSite:
    """In-memory web site standing in for the HTTP fetcher.

    *pages* maps absolute URLs to HTML, *images* maps absolute URLs to bytes.
    URLs listed in *hang* never answer. Every call is recorded.
    """

    def __init__(
        self,
        pages: Dict[str, str],
        images: Optional[Dict[str, bytes]] = None,
        hang: Iterable[str] = (),
        delay: float = 0.0,
    ) -> None:
        self.pages = pages
        self.images = images or {}
        self.hang = set(hang)
        self.delay = delay
        self.fetched: list[str] = []
        self.downloaded: list[str] = []

    async def fetch_document(self, url: str) -> bytes:
        self.fetched.append(url)
        if url in self.hang:
            await asyncio.Event().wait()
        await asyncio.sleep(self.delay)
        if url not in self.pages:
            raise FetchError(url, "HTTP 404")
        return self.pages[url].encode("utf-8")

    async def download_to(self, url: str, path: Path) -> None:
        self.downloaded.append(url)
        if url in self.hang:
            await asyncio.Event().wait()
        await asyncio.sleep(self.delay)
        if url not in self.images:
            raise DownloadError(url, "HTTP 404")
        Path(path).write_bytes(self.images[url])


def html(*, links: Iterable[str] = (), images: Iterable[str] = ()) -> str:
    """Build a small HTML page with the given anchors and images."""
    body = "".join(f'<a href="{href}">link</a>' for href in links)
    body += "".join(f'<img src="{src}" alt="">' for src in images)
    return f"<html><head><title>t</title></head><body>{body}</body></html>"


@pytest.fixture()
def make_site():
    return StubSite


@pytest.fixture()
def page():
    return html


@pytest.fixture()
def output_dir(tmp_path) -> Path:
    out = tmp_path / "images"
    out.mkdir()
    return out


@pytest.fixture()
def make_params(output_dir):
    """Factory for CrawlParameters writing into the temporary output directory."""

    def _make(seed: str = "http://a.com", **kwargs) -> CrawlParameters:
        return CrawlParameters(seed_url=seed, output_dir=output_dir, **kwargs)

    return _make


@pytest.fixture()
def fast_settings() -> CrawlSettings:
    """Settings with a short overall timeout so hanging crawls fail fast."""
    return CrawlSettings(crawl_timeout=5.0, request_timeout=2.0, user_agent="TestAgent/1.0")
