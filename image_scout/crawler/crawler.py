"""
Image scrapers: turn one seed page into a bounded, deduplicated traversal of
pages and a set of image downloads.

Two interchangeable strategies share the traversal policy:

* :class:`ParallelImageScraper` runs every page and image as its own asyncio
  task and waits for the set of in-flight tasks to drain;
* :class:`SequentialImageScraper` walks pages one at a time, breadth first.

Both expose ``crawl(params)`` (coroutine) and ``run(params)`` (blocking).
Neither lets an error from a single page or image escape: the only outcomes
are "finished" (True) and "timed out" (False).
"""
from __future__ import annotations

import asyncio
import time
from collections import deque
from contextlib import AsyncExitStack
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Deque, Optional, Set, Tuple, Union

from image_scout.config import CrawlParameters, CrawlSettings
from image_scout.crawler.fetcher import DownloadError, FetchError, Fetcher
from image_scout.crawler.image_store import ImageStore
from image_scout.crawler.link_extractor import extract_links_and_images
from image_scout.crawler.models import CrawlStats, PageLinks
from image_scout.crawler.state import TaskTracker, VisitedSet
from image_scout.logger import get_logger
from image_scout.utils import is_outbound_link, parse_address

__all__ = ("ImageScraper", "ParallelImageScraper", "SequentialImageScraper")

logger = get_logger("crawler")

Extractor = Callable[[Union[bytes, str], str], PageLinks]


@dataclass(eq=False)
class _CrawlContext:
    """Everything one crawl invocation shares between its tasks."""

    params: CrawlParameters
    fetcher: Any
    store: ImageStore
    pages: VisitedSet = field(default_factory=VisitedSet)
    images: Optional[VisitedSet] = None
    stats: CrawlStats = field(default_factory=CrawlStats)
    tracker: TaskTracker = field(default_factory=TaskTracker)
    tasks: Set[asyncio.Task] = field(default_factory=set)
    closed: bool = False

    def image_target(self, image: str) -> Optional[Tuple[str, Path]]:
        """Claim *image* for download; return its address and destination, or None to skip it."""
        try:
            address = parse_address(image)
        except ValueError:
            logger.debug("Skipping malformed image address: %s", image)
            return None
        if self.images is not None and not self.images.check_and_insert(address):
            return None
        path = self.store.reserve(address, self.params.output_dir)
        if path is None:
            self.stats.images_skipped += 1
            logger.debug("No usable file name for %s", address)
            return None
        return address, path

    def should_follow(self, link: str) -> Optional[str]:
        """Claim *link* as a child page and return its canonical address.

        None if the link is malformed, already seen or filtered out.
        """
        try:
            address = parse_address(link)
        except ValueError:
            return None
        if not self.pages.check_and_insert(address):
            return None
        if not self.params.follow_outbound and is_outbound_link(self.params.seed, address):
            return None
        return address


class ImageScraper:
    """Common driver for the scraping strategies.

    *fetcher* and *extractor* may be replaced (tests do); when no fetcher is
    given a :class:`Fetcher` with its own HTTP session is opened per crawl.
    """

    dedupe_images = True

    def __init__(
        self,
        settings: Optional[CrawlSettings] = None,
        fetcher: Any = None,
        extractor: Extractor = extract_links_and_images,
    ) -> None:
        self.settings = settings or CrawlSettings()
        self._fetcher = fetcher
        self._extract = extractor

    def run(self, params: CrawlParameters) -> bool:
        """Blocking entry point; returns False if the crawl timed out."""
        return asyncio.run(self.crawl(params))

    async def crawl(self, params: CrawlParameters) -> bool:
        logger.info("Crawl started: %s -> %s (depth %d, outbound %s)",
                    params.seed, params.output_dir, params.max_depth,
                    "on" if params.follow_outbound else "off")
        start = time.monotonic()
        async with AsyncExitStack() as stack:
            fetcher = self._fetcher
            if fetcher is None:
                fetcher = await stack.enter_async_context(Fetcher(self.settings))
            ctx = _CrawlContext(
                params=params,
                fetcher=fetcher,
                store=ImageStore(self.settings.max_name_attempts),
                images=VisitedSet() if self.dedupe_images else None,
            )
            completed = await self._traverse(ctx)

        stats = ctx.stats
        logger.info(
            "Crawl %s: %d page(s) scraped, %d failed; %d image(s) downloaded, %d failed, "
            "%d skipped; %.2f s",
            "finished" if completed else "interrupted",
            stats.pages_scraped, stats.page_failures,
            stats.images_downloaded, stats.image_failures, stats.images_skipped,
            time.monotonic() - start,
        )
        return completed

    async def _traverse(self, ctx: _CrawlContext) -> bool:
        raise NotImplementedError

    async def _fetch_page(self, ctx: _CrawlContext, url: str, depth: int) -> Optional[PageLinks]:
        logger.info("Scraping page: %s (depth %d)", url, depth)
        try:
            body = await ctx.fetcher.fetch_document(url)
        except FetchError as exc:
            ctx.stats.page_failures += 1
            logger.warning("Failed to scrape page: %s; error: %s", url, exc.cause)
            return None
        found = self._extract(body, url)
        ctx.stats.pages_scraped += 1
        logger.debug("%s: %d link(s), %d image(s)", url, len(found.links), len(found.images))
        return found

    async def _download(self, ctx: _CrawlContext, url: str, path: Path) -> None:
        logger.info("Downloading image: %s -> %s", url, path.name)
        try:
            await ctx.fetcher.download_to(url, path)
        except DownloadError as exc:
            ctx.stats.image_failures += 1
            logger.warning("Failed to download image: %s; error: %s", url, exc.cause)
        else:
            ctx.stats.images_downloaded += 1
        finally:
            ctx.store.release(path)


class ParallelImageScraper(ImageScraper):
    """Every page and every image is its own task; completion is tracked by count.

    If the count has not drained within ``crawl_timeout``, nothing new is
    submitted and every outstanding task is cancelled and awaited before
    :meth:`crawl` returns False.
    """

    async def _traverse(self, ctx: _CrawlContext) -> bool:
        seed = parse_address(ctx.params.seed)
        ctx.pages.check_and_insert(seed)
        self._submit(ctx, self._scrape_page, seed, 0)

        timeout = self.settings.crawl_timeout
        if await ctx.tracker.wait(timeout):
            return True

        logger.warning("Crawl interrupted: %d task(s) still pending after %.1f s",
                       ctx.tracker.pending, timeout)
        ctx.closed = True
        leftovers = list(ctx.tasks)
        for task in leftovers:
            task.cancel()
        await asyncio.gather(*leftovers, return_exceptions=True)
        return False

    def _submit(self, ctx: _CrawlContext, func: Callable[..., Any], *args: Any) -> None:
        if ctx.closed:
            return
        # counted before the task exists so the total can't touch zero early
        ctx.tracker.queue_task()
        task = asyncio.create_task(func(ctx, *args))
        ctx.tasks.add(task)
        task.add_done_callback(ctx.tasks.discard)

    async def _scrape_page(self, ctx: _CrawlContext, url: str, depth: int) -> None:
        try:
            found = await self._fetch_page(ctx, url, depth)
            if found is None:
                return
            for image in sorted(found.images):
                target = ctx.image_target(image)
                if target is not None:
                    self._submit(ctx, self._download_image, *target)
            if depth >= ctx.params.max_depth:
                return
            for link in sorted(found.links):
                address = ctx.should_follow(link)
                if address is not None:
                    self._submit(ctx, self._scrape_page, address, depth + 1)
        except Exception:
            ctx.stats.page_failures += 1
            logger.exception("Unexpected error while scraping %s", url)
        finally:
            ctx.tracker.task_complete()

    async def _download_image(self, ctx: _CrawlContext, url: str, path: Path) -> None:
        try:
            await self._download(ctx, url, path)
        except Exception:
            ctx.stats.image_failures += 1
            logger.exception("Unexpected error while downloading %s", url)
        finally:
            ctx.tracker.task_complete()


class SequentialImageScraper(ImageScraper):
    """One page at a time, breadth first; images are downloaded inline.

    Images are not deduplicated across pages: an image referenced by two
    pages is downloaded twice under two file names.
    """

    dedupe_images = False

    async def _traverse(self, ctx: _CrawlContext) -> bool:
        timeout = self.settings.crawl_timeout
        try:
            await asyncio.wait_for(self._walk(ctx), timeout=timeout)
        except asyncio.TimeoutError:
            logger.warning("Crawl interrupted: not finished after %.1f s", timeout)
            return False
        return True

    async def _walk(self, ctx: _CrawlContext) -> None:
        seed = parse_address(ctx.params.seed)
        ctx.pages.check_and_insert(seed)
        queue: Deque[Tuple[str, int]] = deque([(seed, 0)])
        while queue:
            url, depth = queue.popleft()
            try:
                found = await self._fetch_page(ctx, url, depth)
                if found is None:
                    continue
                for image in sorted(found.images):
                    target = ctx.image_target(image)
                    if target is not None:
                        await self._download(ctx, *target)
                if depth >= ctx.params.max_depth:
                    continue
                for link in sorted(found.links):
                    address = ctx.should_follow(link)
                    if address is not None:
                        queue.append((address, depth + 1))
            except Exception:
                ctx.stats.page_failures += 1
                logger.exception("Unexpected error while scraping %s", url)
