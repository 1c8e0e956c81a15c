from __future__ import annotations

import json
import logging
from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from awesometrack import cli
from awesometrack.io.cache import CacheStore
from tests.helpers import BADGE_MARKUP, DummyResponse, make_config, sample_items

runner = CliRunner()


@pytest.fixture(autouse=True)
def _reset_logging():
    yield
    logger = logging.getLogger("awesometrack")
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)


@pytest.fixture()
def config(monkeypatch, tmp_path):
    monkeypatch.delenv("AWESOMETRACK_PROD", raising=False)
    monkeypatch.delenv("AWESOMETRACK_DIST_REPO", raising=False)
    cfg = make_config(tmp_path)
    monkeypatch.setattr(cli, "load_config", lambda: cfg)
    return cfg


def _manifests(cfg) -> list[dict]:
    folder = cfg.work_root / "logs" / "run_manifests"
    return [json.loads(path.read_text(encoding="utf-8")) for path in sorted(folder.glob("run_*.json"))]


def test_week_command_crosses_year_boundary() -> None:
    result = runner.invoke(cli.app, ["week", "2023-01-01"])

    assert result.exit_code == 0, result.output
    assert result.output.strip() == "202252\t2022-52\tDec 26 - Jan 01, 2022\t2022-12-26"


def test_day_command() -> None:
    result = runner.invoke(cli.app, ["day", "2024-01-15T23:30:00-02:00"])

    assert result.exit_code == 0, result.output
    assert result.output.strip() == "20240116\t2024-01-16\tJan 16, 2024\t2024/01/16"


def test_day_command_rejects_garbage() -> None:
    result = runner.invoke(cli.app, ["day", "someday"])
    assert result.exit_code != 0


def test_fetch_uses_cache_on_second_run(config) -> None:
    url = "https://raw.githubusercontent.com/vinta/awesome-python/master/README.md"
    with patch("awesometrack.io.fetcher.requests.request", return_value=DummyResponse("# Awesome Python")) as mock_request:
        first = runner.invoke(cli.app, ["fetch", url])
        second = runner.invoke(cli.app, ["fetch", url])

    assert first.exit_code == 0, first.output
    assert second.exit_code == 0, second.output
    assert "# Awesome Python" in second.output
    mock_request.assert_called_once()
    assert CacheStore.from_config(config).read(url) == "# Awesome Python"


def test_fetch_failure_exits_non_zero(config) -> None:
    with patch("awesometrack.io.fetcher.requests.request", return_value=DummyResponse("", 404)):
        result = runner.invoke(cli.app, ["fetch", "https://example.com/missing", "--no-cache"])

    assert result.exit_code == 1


def test_stars_prints_badge_count(config) -> None:
    with patch("awesometrack.io.fetcher.requests.request", return_value=DummyResponse(BADGE_MARKUP)):
        result = runner.invoke(cli.app, ["stars", "vinta/awesome-python"])

    assert result.exit_code == 0, result.output
    assert "198k" in result.output


def test_fetch_many_warms_cache_in_batches(config, tmp_path) -> None:
    urls = [f"https://example.com/list/{index}.md" for index in range(5)]
    urls_file = tmp_path / "urls.txt"
    urls_file.write_text("\n".join(urls) + "\n\n", encoding="utf-8")

    def respond(method, url, **kwargs):
        return DummyResponse(url.rsplit("/", 1)[-1] * 2)

    with patch("awesometrack.io.fetcher.requests.request", side_effect=respond) as mock_request:
        result = runner.invoke(cli.app, ["fetch-many", str(urls_file), "--limit", "2"])

    assert result.exit_code == 0, result.output
    assert mock_request.call_count == 5
    store = CacheStore.from_config(config)
    assert [store.read(url) for url in urls] == [f"{i}.md{i}.md" for i in range(5)]
    assert _manifests(config)[-1] == {"step": "fetch_many", "urls": 5}


def test_fetch_many_stops_on_failure(config, tmp_path) -> None:
    urls_file = tmp_path / "urls.txt"
    urls_file.write_text("https://example.com/a\nhttps://example.com/b\nhttps://example.com/c\n", encoding="utf-8")

    def respond(method, url, **kwargs):
        return DummyResponse("", 500) if url.endswith("/a") else DummyResponse("ok")

    with patch("awesometrack.io.fetcher.requests.request", side_effect=respond) as mock_request:
        result = runner.invoke(cli.app, ["fetch-many", str(urls_file), "--limit", "2"])

    assert result.exit_code == 1
    called = {call.args[1] for call in mock_request.call_args_list}
    assert "https://example.com/c" not in called


def test_timeline_groups_by_week(config, tmp_path) -> None:
    items_file = tmp_path / "items.json"
    items_file.write_text(json.dumps(sample_items()), encoding="utf-8")

    result = runner.invoke(cli.app, ["timeline", str(items_file)])

    assert result.exit_code == 0, result.output
    lines = [line for line in result.output.splitlines() if line.startswith("#") or line.startswith("- ")]
    assert lines[0] == "## Jan 02 - Jan 08, 2023 (2)"
    assert lines[1].endswith("pydantic")
    assert "## Dec 26 - Jan 01, 2022 (2)" in lines
    assert _manifests(config)[-1] == {"step": "timeline", "by": "week", "groups": 2}


def test_timeline_groups_by_day(config, tmp_path) -> None:
    items_file = tmp_path / "items.json"
    items_file.write_text(json.dumps(sample_items()), encoding="utf-8")

    result = runner.invoke(cli.app, ["timeline", str(items_file), "--by", "day"])

    assert result.exit_code == 0, result.output
    assert "## Jan 04, 2023 (1)" in result.output
    assert "## Dec 26, 2022 (1)" in result.output


def test_sources_lists_categories(config) -> None:
    meta_path = config.work_root / "db" / "meta.json"
    meta_path.parent.mkdir(parents=True)
    meta_path.write_text(json.dumps({"sources": {"avelino/awesome-go": {"updated_at": "2024-05-01"}}}), encoding="utf-8")

    result = runner.invoke(cli.app, ["sources"])

    assert result.exit_code == 0, result.output
    assert "# Platforms" in result.output
    assert "# Miscellaneous" in result.output
    assert "avelino/awesome-go\tAwesome Go\t/avelino/awesome-go/\t2024-05-01" in result.output


def test_cache_prune(config) -> None:
    store = CacheStore.from_config(config)
    store.write("https://example.com/old", "GET", "old", ttl_ms=-1)
    store.write("https://example.com/new", "GET", "new", ttl_ms=60_000)

    result = runner.invoke(cli.app, ["cache-prune"])

    assert result.exit_code == 0, result.output
    assert "Removed 1 expired entries" in result.output
    assert store.read("https://example.com/new") == "new"
    assert _manifests(config)[-1] == {"step": "cache_prune", "removed": 1}
