"""
Local file naming for downloaded images.

Images keep the last segment of their URL path as the file name. When that
name is taken, ``name(1)``, ``name(2)`` … are tried until ``max_attempts``
candidates have been rejected.
"""
from __future__ import annotations

import threading
from pathlib import Path
from typing import Callable, Optional, Set, Union
from urllib.parse import unquote, urlsplit

__all__ = ("DEFAULT_MAX_ATTEMPTS", "image_name", "resolve_local_path", "ImageStore")

DEFAULT_MAX_ATTEMPTS = 100
_FALLBACK_NAME = "image"


def image_name(url: str) -> str:
    """Return the file name an image would be saved under (query and fragment ignored)."""
    path = unquote(urlsplit(url).path)
    name = path.rsplit("/", 1)[-1].strip()
    if name in ("", ".", ".."):
        return _FALLBACK_NAME
    return name


def resolve_local_path(
    url: str,
    directory: Union[str, Path],
    *,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    taken: Optional[Callable[[Path], bool]] = None,
) -> Optional[Path]:
    """
    Find a free path for *url* inside *directory*.

    A candidate is free when nothing exists on disk under that name and
    *taken* (if given) does not claim it. Returns None when every one of the
    *max_attempts* candidates is in use, or when the file system rejects the
    name outright (too long, invalid characters).
    """
    base = Path(directory).resolve()
    name = image_name(url)
    for i in range(max_attempts):
        candidate = base / (name if i == 0 else f"{name}({i})")
        try:
            candidate.lstat()
        except FileNotFoundError:
            if taken is None or not taken(candidate):
                return candidate
        except OSError:
            return None
    return None


class ImageStore:
    """Per-crawl path allocator.

    Downloads run concurrently, so a name picked for one image does not exist
    on disk until that download finishes. Reserved paths are remembered here
    so two images with the same file name never get the same destination.
    """

    def __init__(self, max_attempts: int = DEFAULT_MAX_ATTEMPTS) -> None:
        self.max_attempts = max_attempts
        self._reserved: Set[Path] = set()
        self._lock = threading.Lock()

    def reserve(self, url: str, directory: Union[str, Path]) -> Optional[Path]:
        with self._lock:
            path = resolve_local_path(
                url, directory, max_attempts=self.max_attempts, taken=self._reserved.__contains__
            )
            if path is not None:
                self._reserved.add(path)
            return path

    def release(self, path: Path) -> None:
        """Forget a reservation (the download finished or failed)."""
        with self._lock:
            self._reserved.discard(path)

    def __len__(self) -> int:
        with self._lock:
            return len(self._reserved)
