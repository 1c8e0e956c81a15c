"""JSON file helpers: run manifests and the db meta document."""

from __future__ import annotations

import json
from datetime import UTC, datetime
from pathlib import Path
from typing import Any, Mapping


def write_json_file(dest: Path, data: Any) -> Path:
    """Write `data` as indented JSON with a trailing newline, creating parents."""

    dest.parent.mkdir(parents=True, exist_ok=True)
    dest.write_text(json.dumps(data, indent=2, default=str) + "\n", encoding="utf-8")
    return dest


def read_json_file(path: Path) -> Any:
    return json.loads(path.read_text(encoding="utf-8"))


def read_db_meta(path: Path) -> dict[str, Any]:
    """Return the db meta document, or an empty one with no sources yet."""

    if not path.exists():
        return {"sources": {}}
    payload = read_json_file(path)
    if not isinstance(payload, dict):
        raise ValueError(f"DB meta at {path} must be a JSON object.")
    payload.setdefault("sources", {})
    return payload


def write_manifest(payload: Mapping[str, Any], *, root: Path) -> Path:
    """Write a manifest JSON under root/logs/run_manifests with timestamped name."""

    manifests_dir = root / "logs" / "run_manifests"
    timestamp = datetime.now(UTC).strftime("%Y%m%dT%H%M%S%fZ")
    return write_json_file(manifests_dir / f"run_{timestamp}.json", dict(payload))


__all__ = ["read_db_meta", "read_json_file", "write_json_file", "write_manifest"]
