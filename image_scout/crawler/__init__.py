"""Crawl scheduler and its collaborators: fetcher, extractor, image store."""
from image_scout.crawler.crawler import (
    ImageScraper,
    ParallelImageScraper,
    SequentialImageScraper,
)

__all__ = ["ImageScraper", "ParallelImageScraper", "SequentialImageScraper"]
