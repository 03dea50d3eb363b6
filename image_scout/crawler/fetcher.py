# image_scout/crawler/fetcher.py
"""
Fetcher module: HTTP access for pages and images.

Failures are raised as :class:`FetchError` / :class:`DownloadError`; there is
no retry and no rate limiting, every request is a single attempt bounded by
the configured timeout.
"""
from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Optional

from aiohttp import ClientError, ClientSession, ClientTimeout
from image_scout.config import CrawlSettings

__all__ = ("ScraperError", "FetchError", "DownloadError", "Fetcher")

_HTML_TYPES = ("text/html", "application/xhtml+xml")


class ScraperError(Exception):
    """A page or image could not be retrieved."""

    def __init__(self, url: str, cause: object) -> None:
        super().__init__(f"{url}: {cause}")
        self.url = url
        self.cause = cause


class FetchError(ScraperError):
    """Page body could not be fetched."""


class DownloadError(ScraperError):
    """Image could not be downloaded or written to disk."""


class Fetcher:
    """Owns the aiohttp session used by one crawl."""

    def __init__(self, settings: CrawlSettings, session: Optional[ClientSession] = None) -> None:
        self.settings = settings
        self.session = session
        self._owns_session = session is None

    async def __aenter__(self) -> Fetcher:
        if self.session is None:
            self.session = ClientSession(
                timeout=ClientTimeout(total=self.settings.request_timeout),
                headers={"User-Agent": self.settings.user_agent},
                raise_for_status=False,
            )
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if self._owns_session and self.session and not self.session.closed:
            await self.session.close()

    def _require_session(self) -> ClientSession:
        if self.session is None:
            raise RuntimeError("Session not initialized")
        return self.session

    async def fetch_document(self, url: str) -> bytes:
        """Return the raw body of an HTML page."""
        session = self._require_session()
        try:
            async with session.get(url) as resp:
                if resp.status != 200:
                    raise FetchError(url, f"HTTP {resp.status}")
                mime = resp.headers.get("Content-Type", "").split(";", 1)[0].strip().lower()
                if mime and mime not in _HTML_TYPES:
                    raise FetchError(url, f"not an HTML document ({mime})")
                return await resp.read()
        except (ClientError, asyncio.TimeoutError) as exc:
            raise FetchError(url, str(exc) or type(exc).__name__) from exc

    async def download_to(self, url: str, path: Path) -> None:
        """Download *url* and write its bytes to *path*."""
        session = self._require_session()
        try:
            async with session.get(url) as resp:
                if resp.status != 200:
                    raise DownloadError(url, f"HTTP {resp.status}")
                data = await resp.read()
        except (ClientError, asyncio.TimeoutError) as exc:
            raise DownloadError(url, str(exc) or type(exc).__name__) from exc

        try:
            await asyncio.to_thread(Path(path).write_bytes, data)
        except OSError as exc:
            Path(path).unlink(missing_ok=True)
            raise DownloadError(url, exc) from exc
