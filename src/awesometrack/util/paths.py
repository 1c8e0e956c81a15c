"""Path utilities centralising output layout decisions.

Every mode-dependent location takes ``dev`` explicitly; callers pass
``config.runtime.is_dev`` rather than reading the environment here.
"""

from __future__ import annotations

import posixpath
from pathlib import Path, PurePosixPath
from typing import NamedTuple
from urllib.parse import urlsplit

CONTENT_DIR = "content"
INDEX_MARKDOWN_PATH = "README.md"


class ParsedItemsFilePath(NamedTuple):
    source_identifier: str
    original_filepath: str


class ParsedFilename(NamedTuple):
    name: str
    ext: str
    type: str


def data_root_from_config(storage_root: str | Path) -> Path:
    """Return the resolved data root."""
    return Path(storage_root).expanduser().resolve()


def current_path(*, dev: bool) -> str:
    return "dev-current" if dev else "current"


def dist_path(*, dev: bool) -> str:
    return "dist" if dev else "prod-dist"


def public_path(*, dev: bool) -> str:
    return "public" if dev else "prod-public"


def db_path(*, dev: bool) -> str:
    return "db" if dev else "prod-db"


def static_path() -> str:
    return "static"


def dist_repo_content_path(*, dev: bool) -> str:
    return posixpath.join(dist_path(dev=dev), CONTENT_DIR)


def data_raw_path(*, dev: bool) -> str:
    return posixpath.join(current_path(dev=dev), "1-raw")


def sqlite_path(*, dev: bool) -> str:
    return posixpath.join(db_path(dev=dev), "sqlite.db")


def data_items_path(*, dev: bool) -> str:
    return posixpath.join(db_path(dev=dev), "items")


def db_meta_file_path(*, dev: bool) -> str:
    return posixpath.join(db_path(dev=dev), "meta.json")


def markdown_dist_path(cache_root: Path, *, dev: bool) -> Path:
    return cache_root / ("dev-trackawesomelist" if dev else "trackawesomelist")


def items_file_path(identifier: str, file: str, *, dev: bool) -> str:
    """Return where the parsed items of `file` in source `identifier` are stored."""
    return posixpath.join(data_items_path(dev=dev), identifier, file + ".json")


def parse_items_filepath(filepath: str, *, dev: bool) -> ParsedItemsFilePath:
    """Invert `items_file_path` back to the source identifier and original file."""

    relative = PurePosixPath(filepath).relative_to(data_items_path(dev=dev))
    parts = relative.parts
    if len(parts) < 3:
        raise ValueError(f"{filepath} is not an items file path.")
    source_identifier = f"{parts[0]}/{parts[1]}"
    repo_relative = posixpath.join(*parts[2:])
    return ParsedItemsFilePath(source_identifier, repo_relative.removesuffix(".json"))


def remove_extname(filename: str) -> str:
    extname = posixpath.splitext(filename)[1]
    return filename[: -len(extname)] if extname else filename


def parse_filename(filename: str) -> ParsedFilename:
    """Split names like ``list_awesome-go.md`` into type, name and extension."""

    ext = posixpath.splitext(filename)[1]
    stem = posixpath.basename(remove_extname(filename))
    file_type, _, name = stem.partition("_")
    return ParsedFilename(name=name, ext=ext, type=file_type)


def repo_html_url(url: str, default_branch: str, file: str) -> str:
    return f"{url}/blob/{default_branch}/{file}"


def pathname_to_file_path(pathname: str) -> str:
    """Map a site pathname to its markdown file under the content directory."""

    if pathname.endswith("/"):
        return posixpath.join("/", CONTENT_DIR, pathname[1:], INDEX_MARKDOWN_PATH)
    return posixpath.join("/", CONTENT_DIR, pathname[1:])


def pathname_to_week_file_path(pathname: str) -> str:
    return posixpath.join("/", CONTENT_DIR, pathname[1:], "week", INDEX_MARKDOWN_PATH)


def pathname_to_overview_file_path(pathname: str) -> str:
    return posixpath.join("/", CONTENT_DIR, pathname[1:], "readme", INDEX_MARKDOWN_PATH)


def url_to_file_path(url: str) -> str:
    return pathname_to_file_path(urlsplit(url).path or "/")


def pathname_to_feed_url(domain: str, pathname: str, *, is_day: bool) -> str:
    return domain + posixpath.join(pathname, "" if is_day else "week", "feed.xml")


__all__ = [
    "CONTENT_DIR",
    "INDEX_MARKDOWN_PATH",
    "ParsedFilename",
    "ParsedItemsFilePath",
    "current_path",
    "data_items_path",
    "data_raw_path",
    "data_root_from_config",
    "db_meta_file_path",
    "db_path",
    "dist_path",
    "dist_repo_content_path",
    "items_file_path",
    "markdown_dist_path",
    "parse_filename",
    "parse_items_filepath",
    "pathname_to_feed_url",
    "pathname_to_file_path",
    "pathname_to_overview_file_path",
    "pathname_to_week_file_path",
    "public_path",
    "remove_extname",
    "repo_html_url",
    "sqlite_path",
    "static_path",
    "url_to_file_path",
]
