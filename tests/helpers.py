from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path
from typing import Any

import requests

from awesometrack.config import AppConfig, load_config

START_MS = 1_700_000_000_000

BADGE_MARKUP = (
    '<svg xmlns="http://www.w3.org/2000/svg" width="88" height="20"><g>'
    '<a target="_blank" xlink:href="https://github.com/vinta/awesome-python">'
    '<text x="285" y="140">stars</text></a>'
    '<a target="_blank" xlink:href="https://github.com/vinta/awesome-python/stargazers">'
    '<text x="685" y="140">198k</text></a></g></svg>'
)


class FakeClock:
    """Epoch-millisecond clock that only moves when told to."""

    def __init__(self, now: int = START_MS) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


class DummyResponse:
    """Stand-in for a streamed `requests.Response`."""

    def __init__(self, text: str, status_code: int = 200, encoding: str | None = "utf-8") -> None:
        self.text = text
        self.content = text.encode("utf-8")
        self.status_code = status_code
        self.encoding = encoding
        self.apparent_encoding = "utf-8"
        self.closed = False

    def __enter__(self) -> "DummyResponse":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def iter_content(self, chunk_size: int = 1) -> Iterator[bytes]:
        for start in range(0, len(self.content), chunk_size):
            yield self.content[start : start + chunk_size]

    def close(self) -> None:
        self.closed = True

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"HTTP {self.status_code}")


def make_config(root: Path, **overrides: Any) -> AppConfig:
    """Load the default config with its workspace rooted at `root`."""

    merged: dict[str, Any] = {"runtime.work_root": str(root)}
    merged.update(overrides)
    return load_config(overrides=merged)


def sample_items() -> list[dict[str, object]]:
    """Items spanning the 2022/2023 ISO year boundary."""

    return [
        {
            "title": "httpx",
            "url": "https://github.com/encode/httpx",
            "markdown": "- [httpx](https://github.com/encode/httpx)",
            "updated_at": "2023-01-01T10:00:00Z",
        },
        {
            "title": "requests",
            "url": "https://github.com/psf/requests",
            "markdown": "- [requests](https://github.com/psf/requests)",
            "updated_at": "2022-12-26T08:30:00Z",
        },
        {
            "title": "typer",
            "url": "https://github.com/tiangolo/typer",
            "markdown": "- [typer](https://github.com/tiangolo/typer)",
            "updated_at": "2023-01-02T00:00:00Z",
        },
        {
            "title": "pydantic",
            "url": "https://github.com/pydantic/pydantic",
            "markdown": "- [pydantic](https://github.com/pydantic/pydantic)",
            "updated_at": "2023-01-04T12:00:00+02:00",
        },
    ]
