"""Command-line entry points for awesometrack."""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

import typer

from awesometrack.config import AppConfig, all_source_categories, load_config
from awesometrack.io.cache import CacheStore
from awesometrack.io.fetcher import FetchError, Fetcher
from awesometrack.services.calendar import InvalidDate, day_number, parse_day_number, week_of_year
from awesometrack.services.timeline import group_by_day, group_by_week, parse_timestamp
from awesometrack.util.concurrency import BatchFailed, run_limited
from awesometrack.util.formatting import format_human_time
from awesometrack.util.logging import configure_logging
from awesometrack.util.manifest import read_db_meta, read_json_file, write_manifest
from awesometrack.util.paths import db_meta_file_path

app = typer.Typer(add_completion=False, help="Track awesome-list changes by day and week")


def _setup() -> tuple[AppConfig, logging.Logger]:
    cfg = load_config()
    logger = configure_logging(log_path=cfg.runtime.log_file)
    return cfg, logger


def _parse_when(value: str) -> datetime:
    try:
        return parse_timestamp(value)
    except ValueError as exc:
        raise typer.BadParameter(f"{value!r} is not an ISO date or timestamp") from exc


@app.command()
def day(when: str = typer.Argument(..., help="Date or timestamp, e.g. 2024-01-15")) -> None:
    """Show the day number and labels for a date."""

    info = parse_day_number(day_number(_parse_when(when)))
    typer.echo(f"{info.number}\t{info.id}\t{info.name}\t{info.path}")


@app.command()
def week(when: str = typer.Argument(..., help="Date or timestamp, e.g. 2024-01-15")) -> None:
    """Show the ISO week number and date range for a date."""

    info = week_of_year(_parse_when(when))
    typer.echo(f"{info.number}\t{info.id}\t{info.name}\t{info.date.isoformat()}")


@app.command()
def fetch(
    url: str = typer.Argument(..., help="URL to fetch"),
    method: str = typer.Option("GET", help="HTTP method"),
    no_cache: bool = typer.Option(False, "--no-cache", help="Bypass the response cache"),
) -> None:
    """Fetch a URL through the response cache and print the body."""

    cfg, logger = _setup()
    fetcher = Fetcher.from_config(cfg)
    try:
        body = fetcher.fetch(url, method=method) if no_cache else fetcher.fetch_with_cache(url, method=method)
    except FetchError as exc:
        logger.error("%s", exc)
        raise typer.Exit(code=1)
    typer.echo(body)


@app.command()
def stars(repository: str = typer.Argument(..., help="owner/repo")) -> None:
    """Print the star count shown on a repository's badge."""

    owner, _, repo = repository.partition("/")
    if not owner or not repo:
        raise typer.BadParameter("expected owner/repo")
    cfg, _ = _setup()
    typer.echo(Fetcher.from_config(cfg).fetch_badge_count(owner, repo))


@app.command("fetch-many")
def fetch_many(
    urls_file: Path = typer.Argument(..., help="File with one URL per line"),
    limit: Optional[int] = typer.Option(None, help="Jobs per batch (default from config)"),
) -> None:
    """Warm the cache for many URLs, a bounded batch at a time."""

    cfg, logger = _setup()
    urls = [line.strip() for line in urls_file.read_text(encoding="utf-8").splitlines() if line.strip()]
    fetcher = Fetcher.from_config(cfg)
    jobs = [lambda url=url: fetcher.fetch_with_cache(url) for url in urls]

    try:
        bodies = run_limited(jobs, limit or cfg.fetch.concurrency_limit)
    except BatchFailed as exc:
        logger.error("Fetching stopped: %s", exc)
        raise typer.Exit(code=1)

    for url, body in zip(urls, bodies):
        typer.echo(f"{len(body)}\t{url}")
    write_manifest({"step": "fetch_many", "urls": len(urls)}, root=cfg.work_root)


@app.command()
def timeline(
    items_file: Path = typer.Argument(..., help="JSON list or object of items with updated_at"),
    by: str = typer.Option("week", help="Group by 'day' or 'week'"),
) -> None:
    """Group items chronologically and print one heading per day or week."""

    if by not in {"day", "week"}:
        raise typer.BadParameter("--by must be 'day' or 'week'")
    cfg, logger = _setup()
    items = read_json_file(items_file)

    try:
        groups = group_by_day(items) if by == "day" else group_by_week(items)
    except InvalidDate as exc:
        logger.error("Corrupt item date: %s", exc)
        raise typer.Exit(code=1)

    for members in groups.values():
        info = members[0][f"updated_{by}_info"]
        typer.echo(f"## {info.name} ({len(members)})")
        for item in members:
            stamp = format_human_time(parse_timestamp(item["updated_at"]))
            typer.echo(f"- {stamp} {item.get('title') or item.get('url') or ''}".rstrip())
    logger.info("Grouped %s items into %s %s groups", sum(map(len, groups.values())), len(groups), by)
    write_manifest({"step": "timeline", "by": by, "groups": len(groups)}, root=cfg.work_root)


@app.command()
def sources() -> None:
    """List configured sources by category."""

    cfg, _ = _setup()
    meta = read_db_meta(cfg.work_root / db_meta_file_path(dev=cfg.runtime.is_dev))
    for category in all_source_categories(cfg.sources):
        typer.echo(f"# {category}")
        for key, source in cfg.sources.items():
            if source.category != category:
                continue
            updated = meta["sources"].get(key, {}).get("updated_at", "-")
            typer.echo(f"{key}\t{source.index_file.name}\t{source.index_file.pathname}\t{updated}")


@app.command("cache-prune")
def cache_prune() -> None:
    """Delete expired cache entries."""

    cfg, _ = _setup()
    removed = CacheStore.from_config(cfg).prune()
    typer.echo(f"Removed {removed} expired entries")
    write_manifest({"step": "cache_prune", "removed": removed}, root=cfg.work_root)


def main() -> None:
    app()


__all__ = ["main", "app"]
