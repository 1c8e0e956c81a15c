"""Configuration models and loaders for awesometrack."""

from .loader import ConfigError, DEFAULT_CONFIG_PATH, dump_example_config, load_config
from .models import (
    AppConfig,
    CacheConfig,
    FetchConfig,
    RuntimeConfig,
    SiteConfig,
)
from .sources import (
    FileConfig,
    FileOptions,
    SourceConfig,
    all_source_categories,
    format_source,
    index_file_config,
)

__all__ = [
    "AppConfig",
    "CacheConfig",
    "ConfigError",
    "DEFAULT_CONFIG_PATH",
    "FetchConfig",
    "FileConfig",
    "FileOptions",
    "RuntimeConfig",
    "SiteConfig",
    "SourceConfig",
    "all_source_categories",
    "dump_example_config",
    "format_source",
    "index_file_config",
    "load_config",
]
