# File: image_scout/engine.py
"""image_scout.engine: выбор стратегии обхода и запуск краулинга."""

from __future__ import annotations

from typing import Dict, Optional, Type

from image_scout.config import CrawlParameters, CrawlSettings
from image_scout.crawler.crawler import (
    ImageScraper,
    ParallelImageScraper,
    SequentialImageScraper,
)
from image_scout.logger import logger

__all__ = ["SCRAPERS", "build_scraper", "start_crawl"]

SCRAPERS: Dict[str, Type[ImageScraper]] = {
    "parallel": ParallelImageScraper,
    "sequential": SequentialImageScraper,
}


def build_scraper(mode: str, settings: Optional[CrawlSettings] = None) -> ImageScraper:
    """Возвращает стратегию обхода по имени ("parallel" или "sequential")."""
    try:
        scraper_cls = SCRAPERS[mode]
    except KeyError:
        raise ValueError(f"Неизвестный режим обхода: {mode!r}") from None
    return scraper_cls(settings)


def start_crawl(
    params: CrawlParameters,
    settings: Optional[CrawlSettings] = None,
    mode: Optional[str] = None,
) -> bool:
    """Запускает обход и блокирует до завершения или таймаута.

    Возвращает True, если все задачи завершились, и False при таймауте.
    """
    settings = settings or CrawlSettings()
    scraper = build_scraper(mode or settings.mode, settings)
    logger.info("Starting %s crawl…", mode or settings.mode)
    return scraper.run(params)
