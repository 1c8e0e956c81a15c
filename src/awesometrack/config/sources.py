"""Normalization of per-source entries from the ``sources`` config section."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

from awesometrack.util.formatting import title_case
from awesometrack.util.paths import INDEX_MARKDOWN_PATH, remove_extname

DEFAULT_CATEGORY = "Miscellaneous"
DEFAULT_FILE_TYPE = "list"


class FileOptions(BaseModel):
    """Parsing hints for a tracked markdown file."""

    model_config = ConfigDict(extra="allow")

    type: str = DEFAULT_FILE_TYPE


class FileConfig(BaseModel):
    """A markdown file tracked inside a source repository."""

    model_config = ConfigDict(extra="allow")

    filepath: str
    pathname: str
    name: str
    index: bool = False
    options: FileOptions = Field(default_factory=FileOptions)


class SourceConfig(BaseModel):
    """Resolved source definition keyed by ``owner/repo``."""

    model_config = ConfigDict(extra="allow")

    identifier: str
    url: str
    category: str = DEFAULT_CATEGORY
    files: Dict[str, FileConfig]
    default_branch: Optional[str] = None

    @property
    def index_file(self) -> FileConfig:
        return index_file_config(self.files)


def format_source(key: str, value: Mapping[str, Any] | None) -> SourceConfig:
    """Resolve a raw ``sources`` entry into a `SourceConfig`.

    Sources without a ``files`` section track their ``README.md``. When only one
    file is listed it becomes the index; otherwise one file must be flagged
    ``index: true``.
    """

    owner, _, repo = key.partition("/")
    if not owner or not repo:
        raise ValueError(f"Source key {key!r} must look like 'owner/repo'.")
    if value is not None and not isinstance(value, Mapping):
        raise ValueError(f"Source {key} must be a mapping or empty, got {type(value)!r}.")

    raw = dict(value or {})
    default_name = title_case(repo)
    raw_files = _expand_files(raw.get("files"))

    files: dict[str, FileConfig] = {}
    if raw_files:
        for file_key, file_value in raw_files.items():
            file_data = _format_file_value(file_value)
            if len(raw_files) == 1:
                file_data["index"] = True
            is_index = bool(file_data.get("index"))
            if not file_data.get("name"):
                file_data["name"] = default_name if is_index else f"{default_name} ({file_key})"
            suffix = "" if is_index else remove_extname(file_key) + "/"
            files[file_key] = FileConfig(
                **{**file_data, "filepath": file_key, "pathname": f"/{key}/{suffix}"}
            )
        if not any(item.index for item in files.values()):
            raise ValueError(f"Source {key} has no index file.")
    else:
        files[INDEX_MARKDOWN_PATH] = FileConfig(
            filepath=INDEX_MARKDOWN_PATH,
            pathname=f"/{key}/",
            name=default_name,
            index=True,
        )

    return SourceConfig(
        identifier=key,
        url=raw.get("url") or f"https://github.com/{key}",
        category=raw.get("category") or DEFAULT_CATEGORY,
        files=files,
        default_branch=raw.get("default_branch"),
    )


def _expand_files(files: Any) -> dict[str, Any]:
    if not files:
        return {}
    if isinstance(files, str):
        return {files: None}
    if isinstance(files, Mapping):
        return dict(files)
    if isinstance(files, (list, tuple)):
        return {str(item): None for item in files}
    raise ValueError(f"Unsupported files section: {files!r}")


def _format_file_value(value: Any) -> dict[str, Any]:
    if not value or isinstance(value, str):
        return {"options": {"type": DEFAULT_FILE_TYPE}}
    if not isinstance(value, Mapping):
        raise ValueError(f"Unsupported file entry: {value!r}")
    data = dict(value)
    data["options"] = {"type": DEFAULT_FILE_TYPE, **(data.get("options") or {})}
    return data


def index_file_config(files: Mapping[str, FileConfig]) -> FileConfig:
    """Return the index file, falling back to the first listed file."""

    for file_config in files.values():
        if file_config.index:
            return file_config
    return next(iter(files.values()))


def all_source_categories(sources: Mapping[str, SourceConfig]) -> list[str]:
    """Return categories in first-seen order."""

    categories: list[str] = []
    for source in sources.values():
        if source.category not in categories:
            categories.append(source.category)
    return categories


__all__ = [
    "DEFAULT_CATEGORY",
    "DEFAULT_FILE_TYPE",
    "FileConfig",
    "FileOptions",
    "SourceConfig",
    "all_source_categories",
    "format_source",
    "index_file_config",
]
