"""Disk-backed HTTP response cache with expiry encoded in file names.

Each cache key maps to a directory::

    <root>/http/<quoted host>/<METHOD>/<url path>/<quoted query>/<expiry-ms>.txt

Freshness is decided only from the number in the file name, so copying the
tree around does not change what is considered expired. Expired files are
removed lazily while reading; nothing here takes locks, so a single writer
process is assumed and concurrent readers may race on the same deletions.
"""

from __future__ import annotations

import logging
import posixpath
import re
import time
from collections.abc import Callable, Iterator
from pathlib import Path
from urllib.parse import parse_qsl, quote, urlencode, urlsplit

from awesometrack.config import AppConfig

LOGGER = logging.getLogger(__name__)

SECOND_MS = 1000
DAY_MS = SECOND_MS * 60 * 60 * 24
DEFAULT_TTL_MS = 3 * DAY_MS
ENTRY_SUFFIX = ".txt"
_ENTRY_NAME = re.compile(r"^(\d+)\.txt$")
TEMP_SUFFIX = ".tmp"
_TEMP_NAME = re.compile(r"^(\d+)\.txt\.tmp$")
# Characters encodeURIComponent leaves untouched besides the unreserved set.
_COMPONENT_SAFE = "!~*'()"


class CacheMiss(LookupError):
    """Raised when no fresh entry exists for a cache key."""


def epoch_ms() -> int:
    return int(time.time() * 1000)


def cache_key_parts(url: str, method: str = "GET") -> tuple[str, str, str, str]:
    """Return the (host, method, pathname, query) components of a cache key.

    Query parameters keep their order, so ``?a=1&b=2`` and ``?b=2&a=1`` are
    different keys.
    """

    parts = urlsplit(url)
    host = parts.netloc.rsplit("@", 1)[-1]
    pathname = posixpath.normpath("/" + parts.path.lstrip("/"))
    query = urlencode(parse_qsl(parts.query, keep_blank_values=True))
    return (
        quote(host, safe=_COMPONENT_SAFE),
        method.upper(),
        pathname.lstrip("/"),
        quote(query, safe=_COMPONENT_SAFE),
    )


def parse_entry_expiry(name: str) -> int | None:
    """Return the expiry encoded in an entry file name, or None for other files."""
    match = _ENTRY_NAME.match(name)
    return int(match.group(1)) if match else None


class CacheStore:
    """Filesystem cache of response bodies keyed by request URL and method."""

    def __init__(
        self,
        root: Path,
        *,
        default_ttl_ms: int = DEFAULT_TTL_MS,
        clock: Callable[[], int] = epoch_ms,
    ) -> None:
        self.root = Path(root)
        self.default_ttl_ms = default_ttl_ms
        self._clock = clock

    @classmethod
    def from_config(cls, config: AppConfig, *, clock: Callable[[], int] = epoch_ms) -> "CacheStore":
        """Build a store rooted at the configured cache directory for the current mode."""

        ttl_days = config.cache.dev_ttl_days if config.runtime.is_dev else config.cache.ttl_days
        return cls(
            config.cache_root,
            default_ttl_ms=int(ttl_days * DAY_MS),
            clock=clock,
        )

    @property
    def http_root(self) -> Path:
        return self.root / "http"

    def key_path(self, url: str, method: str = "GET") -> Path:
        """Return the directory holding entries for `url` requested with `method`."""
        host, verb, pathname, query = cache_key_parts(url, method)
        path = self.http_root / host / verb
        if pathname:
            path = path / pathname
        if query:
            path = path / query
        return path

    def read(self, url: str, method: str = "GET") -> str:
        """Return the freshest cached body, pruning expired siblings on the way.

        Raises `CacheMiss` when the key directory is missing or empty of fresh
        entries.
        """

        folder = self.key_path(url, method)
        if not folder.is_dir():
            raise CacheMiss(f"No cache entry for {method} {url}")

        now = self._clock()
        freshest: tuple[int, Path] | None = None
        for expiry, entry in list(self._entries(folder)):
            if now < expiry:
                if freshest is None or expiry > freshest[0]:
                    freshest = (expiry, entry)
                continue
            LOGGER.debug("Removing expired cache entry %s", entry)
            entry.unlink(missing_ok=True)

        if freshest is None:
            raise CacheMiss(f"Cache entry for {method} {url} is expired")
        return freshest[1].read_text(encoding="utf-8")

    def write(self, url: str, method: str, body: str, ttl_ms: int | None = None) -> Path:
        """Store `body` for the key until ``now + ttl_ms`` and return the entry path.

        Earlier entries for the same key are left in place; `read` prunes them
        once they expire.
        """

        ttl = self.default_ttl_ms if ttl_ms is None else ttl_ms
        expiry = self._clock() + ttl
        folder = self.key_path(url, method)
        folder.mkdir(parents=True, exist_ok=True)

        dest = folder / f"{expiry}{ENTRY_SUFFIX}"
        tmp_path = dest.with_suffix(dest.suffix + TEMP_SUFFIX)
        tmp_path.write_text(body, encoding="utf-8")
        tmp_path.replace(dest)
        return dest

    def prune(self) -> int:
        """Remove every expired entry under the cache root; return how many went.

        Temp files left by an interrupted `write` are removed too once the
        expiry in their name has passed.
        """

        if not self.http_root.is_dir():
            return 0

        now = self._clock()
        removed = 0
        for entry in list(self.http_root.rglob(f"*{ENTRY_SUFFIX}")):
            expiry = parse_entry_expiry(entry.name)
            if expiry is None or not entry.is_file() or now < expiry:
                continue
            entry.unlink(missing_ok=True)
            removed += 1

        for leftover in list(self.http_root.rglob(f"*{ENTRY_SUFFIX}{TEMP_SUFFIX}")):
            match = _TEMP_NAME.match(leftover.name)
            if match is None or not leftover.is_file() or now < int(match.group(1)):
                continue
            LOGGER.debug("Removing abandoned cache temp file %s", leftover)
            leftover.unlink(missing_ok=True)

        LOGGER.info("Pruned %s expired cache entries under %s", removed, self.http_root)
        return removed

    @staticmethod
    def _entries(folder: Path) -> Iterator[tuple[int, Path]]:
        for child in folder.iterdir():
            expiry = parse_entry_expiry(child.name)
            if expiry is not None and child.is_file():
                yield expiry, child


__all__ = [
    "CacheMiss",
    "CacheStore",
    "DAY_MS",
    "DEFAULT_TTL_MS",
    "cache_key_parts",
    "epoch_ms",
    "parse_entry_expiry",
]
