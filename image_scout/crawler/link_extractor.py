"""
Link and image extraction for ImageScout.
"""
from __future__ import annotations

from typing import Optional, Union
from urllib.parse import urldefrag, urljoin

from bs4 import BeautifulSoup
from bs4.element import Tag
from image_scout.crawler.models import PageLinks

__all__ = ("extract_links_and_images",)

_SKIPPED_PREFIXES = ("mailto:", "javascript:", "data:", "tel:")


def _absolute(base_url: str, value: object) -> Optional[str]:
    if not isinstance(value, str):
        return None
    raw = value.strip()
    if not raw or raw.lower().startswith(_SKIPPED_PREFIXES):
        return None
    try:
        absolute = urljoin(base_url, raw)
    except ValueError:
        # unterminated IPv6 literal and similar; the scraper drops bad links anyway
        return raw
    return urldefrag(absolute).url


def extract_links_and_images(document: Union[bytes, str], base_url: str) -> PageLinks:
    """
    Collect ``<a href>`` targets and ``<img src>`` sources of *document*.

    Every reference is resolved against *base_url* and stripped of its
    fragment. No filtering by host happens here; that is the scraper's job.
    """
    soup = BeautifulSoup(document, "html.parser")
    base_tag = soup.find("base", href=True)
    if isinstance(base_tag, Tag):
        base_url = _absolute(base_url, base_tag.get("href")) or base_url
    found = PageLinks()
    for tag in soup.find_all("a", href=True):
        if not isinstance(tag, Tag):
            continue
        link = _absolute(base_url, tag.get("href"))
        if link:
            found.links.add(link)
    for tag in soup.find_all("img", src=True):
        if not isinstance(tag, Tag):
            continue
        image = _absolute(base_url, tag.get("src"))
        if image:
            found.images.add(image)
    return found
