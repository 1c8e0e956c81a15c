"""HTTP fetch helpers with a response cache in front of the network."""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Mapping
from typing import Any

import requests

from awesometrack.config import AppConfig
from awesometrack.io.cache import CacheMiss, CacheStore

LOGGER = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 30.0
CHUNK_SIZE = 8192
BADGE_URL_PATTERN = "https://img.shields.io/github/stars/{owner}/{repo}"
BADGE_SUFFIX = "</text></a></g></svg>"

BROWSER_HEADERS: Mapping[str, str] = {
    "Accept": (
        "text/html,application/xhtml+xml,application/xml;"
        "q=0.9,image/avif,image/webp,image/svg+xml,*/*;q=0.8"
    ),
    "Accept-Language": "en-US,en;q=0.9",
    "Connection": "keep-alive",
}


class FetchError(RuntimeError):
    """Base class for network failures surfaced to callers."""

    def __init__(self, url: str, message: str) -> None:
        super().__init__(message)
        self.url = url


class FetchTimeout(FetchError):
    """Raised when a request does not finish within the timeout."""

    def __init__(self, url: str, timeout_seconds: float) -> None:
        super().__init__(url, f"fetch {url} timed out after {timeout_seconds:g}s")
        self.timeout_seconds = timeout_seconds


class FetchFailed(FetchError):
    """Raised when the server answers outside the 2xx range."""

    def __init__(self, url: str, status: int) -> None:
        super().__init__(url, f"fetch {url} failed with status {status}")
        self.status = status


class Fetcher:
    """Fetch URLs as text, optionally through a `CacheStore`.

    Cache keys use the request method and URL only; request bodies are not part
    of the key, so cached POSTs are only safe for idempotent lookups.
    """

    def __init__(
        self,
        cache: CacheStore | None = None,
        *,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        headers: Mapping[str, str] | None = None,
        badge_url_pattern: str = BADGE_URL_PATTERN,
    ) -> None:
        self.cache = cache
        self.timeout_seconds = timeout_seconds
        self.headers = dict(BROWSER_HEADERS)
        if headers:
            self.headers.update(headers)
        self.badge_url_pattern = badge_url_pattern

    @classmethod
    def from_config(cls, config: AppConfig, cache: CacheStore | None = None) -> "Fetcher":
        return cls(
            cache if cache is not None else CacheStore.from_config(config),
            timeout_seconds=config.fetch.timeout_seconds,
            headers={"User-Agent": config.fetch.user_agent},
            badge_url_pattern=config.fetch.badge_url_pattern,
        )

    def fetch(
        self,
        url: str,
        *,
        method: str = "GET",
        headers: Mapping[str, str] | None = None,
        data: Any = None,
    ) -> str:
        """Request `url` and return the body text.

        The timeout is a deadline for the whole exchange, body included: a
        server that trickles bytes cannot hold the caller past it. Raises
        `FetchTimeout` when the deadline passes and `FetchFailed` for any status
        outside 200-299. Neither is retried here.
        """

        merged_headers = dict(self.headers)
        if headers:
            merged_headers.update(headers)

        deadline = time.monotonic() + self.timeout_seconds
        outcome: dict[str, Any] = {}
        finished = threading.Event()

        def download() -> None:
            try:
                outcome["body"] = self._download(url, method, merged_headers, data, deadline)
            except Exception as exc:
                outcome["error"] = exc
            finally:
                finished.set()

        # The worker may stay blocked in a socket read; it is abandoned at the deadline.
        threading.Thread(target=download, name=f"fetch {url}", daemon=True).start()
        if not finished.wait(self.timeout_seconds):
            LOGGER.debug("abandoning %s %s after %ss", method, url, self.timeout_seconds)
            raise FetchTimeout(url, self.timeout_seconds)
        if "error" in outcome:
            raise outcome["error"]
        return outcome["body"]

    def _download(
        self,
        url: str,
        method: str,
        headers: Mapping[str, str],
        data: Any,
        deadline: float,
    ) -> str:
        try:
            response = requests.request(
                method,
                url,
                headers=headers,
                data=data,
                stream=True,
                timeout=self.timeout_seconds,
            )
        except requests.Timeout as exc:
            raise FetchTimeout(url, self.timeout_seconds) from exc

        with response:
            if not 200 <= response.status_code < 300:
                raise FetchFailed(url, response.status_code)
            chunks: list[bytes] = []
            for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                if time.monotonic() >= deadline:
                    raise FetchTimeout(url, self.timeout_seconds)
                if chunk:
                    chunks.append(chunk)

        encoding = response.encoding or response.apparent_encoding or "utf-8"
        return b"".join(chunks).decode(encoding, errors="replace")

    def fetch_with_cache(
        self,
        url: str,
        *,
        method: str = "GET",
        headers: Mapping[str, str] | None = None,
        data: Any = None,
        ttl_ms: int | None = None,
    ) -> str:
        """Return a fresh cached body for `url`, fetching and storing it on a miss."""

        if self.cache is None:
            return self.fetch(url, method=method, headers=headers, data=data)

        try:
            body = self.cache.read(url, method)
        except CacheMiss:
            LOGGER.debug("not found cache file for %s", url)
        else:
            LOGGER.debug("use cache file for %s", url)
            return body

        body = self.fetch(url, method=method, headers=headers, data=data)
        self.cache.write(url, method, body, ttl_ms)
        return body

    def fetch_badge_count(self, owner: str, repo: str) -> str:
        """Return the star count shown on the repository's badge, or "" if unreadable."""

        url = self.badge_url_pattern.format(owner=owner, repo=repo)
        markup = self.fetch_with_cache(url)
        count = parse_badge_count(markup)
        if not count:
            LOGGER.debug("got github star failed for %s/%s", owner, repo)
        return count


def parse_badge_count(markup: str) -> str:
    """Extract the text node that closes a shields.io badge; "" when absent."""

    if not markup.endswith(BADGE_SUFFIX):
        return ""
    text = markup[: -len(BADGE_SUFFIX)]
    return text[text.rfind(">") + 1 :]


__all__ = [
    "BADGE_SUFFIX",
    "BROWSER_HEADERS",
    "FetchError",
    "FetchFailed",
    "FetchTimeout",
    "Fetcher",
    "parse_badge_count",
]
