"""Pydantic models describing awesometrack configuration."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from awesometrack.config.sources import SourceConfig, format_source
from awesometrack.util.paths import data_root_from_config


class RuntimeConfig(BaseModel):
    """Execution mode and workspace root."""

    model_config = ConfigDict(extra="allow")

    mode: Literal["dev", "prod"] = "dev"
    work_root: Path = Path(".")
    log_file: Path | None = None

    @property
    def is_dev(self) -> bool:
        return self.mode == "dev"


class CacheConfig(BaseModel):
    """HTTP response cache location and default lifetimes."""

    model_config = ConfigDict(extra="allow")

    dir: Path = Path("cache")
    ttl_days: float = Field(default=3, gt=0)
    dev_ttl_days: float = Field(default=30, gt=0)


class FetchConfig(BaseModel):
    """Network access policy."""

    model_config = ConfigDict(extra="allow")

    timeout_seconds: float = Field(default=30, gt=0)
    concurrency_limit: int = Field(default=1000, ge=1)
    user_agent: str = "awesometrack/0.1 (+https://github.com/trackawesomelist)"
    badge_url_pattern: str = "https://img.shields.io/github/stars/{owner}/{repo}"


class SiteConfig(BaseModel):
    """Published site coordinates."""

    model_config = ConfigDict(extra="allow")

    dev_domain: str = "http://localhost:8000"
    prod_domain: str = "https://www.trackawesomelist.com"
    dist_repo: str = "git@github.com:trackawesomelist/trackawesomelist.git"


class AppConfig(BaseModel):
    """Root configuration object."""

    model_config = ConfigDict(extra="allow")

    runtime: RuntimeConfig = Field(default_factory=RuntimeConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    fetch: FetchConfig = Field(default_factory=FetchConfig)
    site: SiteConfig = Field(default_factory=SiteConfig)
    file_min_updated_hours: float = Field(default=12, ge=0)
    sources: Dict[str, SourceConfig] = Field(default_factory=dict)

    @field_validator("sources", mode="before")
    @classmethod
    def _format_sources(cls, value: Any) -> Any:
        """Resolve raw ``owner/repo: {...}`` entries into full source definitions."""

        if value is None:
            return {}
        if not isinstance(value, dict):
            return value
        return {
            key: item if isinstance(item, SourceConfig) else format_source(key, item)
            for key, item in value.items()
        }

    @property
    def work_root(self) -> Path:
        return data_root_from_config(self.runtime.work_root)

    @property
    def cache_root(self) -> Path:
        return self.work_root / self.cache.dir

    @property
    def domain(self) -> str:
        return self.site.dev_domain if self.runtime.is_dev else self.site.prod_domain


__all__ = [
    "AppConfig",
    "CacheConfig",
    "FetchConfig",
    "RuntimeConfig",
    "SiteConfig",
]
