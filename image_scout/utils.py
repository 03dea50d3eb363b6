"""image_scout.utils: Address parsing and the outbound-link rule used by the scrapers."""

from __future__ import annotations

from typing import Sequence
from urllib.parse import urlsplit, urlunsplit

from image_scout.logger import logger

__all__: Sequence[str] = (
    "parse_address",
    "extract_host",
    "is_outbound_link",
)

_DEFAULT_PORTS = {"http": 80, "https": 443}


def parse_address(raw: str) -> str:
    """Validate *raw* as an absolute http(s) address and return its canonical form.

    The canonical form has a lower-case scheme and host, no default port and
    at least ``/`` as path, so ``HTTP://A.com:80`` and ``http://a.com/`` are
    the same address. This is also the form pydantic gives the seed URL.

    Raises :class:`ValueError` for anything that cannot be fetched: relative
    references, other schemes (``mailto:``, ``ftp:`` …), a missing host or a
    malformed netloc such as an unterminated IPv6 literal.
    """
    parsed = urlsplit(raw.strip())
    scheme = parsed.scheme.lower()
    if scheme not in _DEFAULT_PORTS:
        raise ValueError(f"unsupported scheme in {raw!r}")
    # .hostname/.port parse the netloc lazily and raise ValueError themselves
    host = parsed.hostname
    if not host:
        raise ValueError(f"no host in {raw!r}")
    port = parsed.port

    netloc = f"[{host}]" if ":" in host else host
    if port is not None and port != _DEFAULT_PORTS[scheme]:
        netloc = f"{netloc}:{port}"
    userinfo, at, _ = parsed.netloc.rpartition("@")
    if at:
        netloc = f"{userinfo}@{netloc}"
    return urlunsplit((scheme, netloc, parsed.path or "/", parsed.query, parsed.fragment))


def extract_host(url: str) -> str:
    """Возвращает хост из URL без порта; пустая строка, если хоста нет."""
    return urlsplit(url).hostname or ""


def is_outbound_link(seed: str, link: str) -> bool:
    """True if *link* lives on another host than *seed*.

    Only the host is compared: the same host reached over another scheme or
    port is not outbound.
    """
    outbound = extract_host(seed) != extract_host(link)
    logger.debug("Outbound check: %s -> %s", link, outbound)
    return outbound
