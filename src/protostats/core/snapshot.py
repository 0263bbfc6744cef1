"""Snapshot file IO.

Each run replaces the previous snapshot as a whole: the JSON is written to
a temporary sibling and renamed over the target, so readers never see a
partial file.
"""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path

from protostats.models.types import StatsSnapshot

# Readable by the templating step and static hosting
SNAPSHOT_MODE = 0o644


def write_snapshot(snapshot: StatsSnapshot, path: Path) -> Path:
    """Write snapshot JSON, replacing any existing file.

    Args:
        snapshot: Snapshot to persist.
        path: Target file path. Parent directories are created.

    Returns:
        The written path.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    payload = json.dumps(snapshot.to_json_dict(), indent=2, ensure_ascii=False)

    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(payload)
            f.write("\n")
        os.chmod(tmp_name, SNAPSHOT_MODE)
        os.replace(tmp_name, path)
    except Exception:
        if os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise

    return path


def load_snapshot(path: Path) -> StatsSnapshot:
    """Load a snapshot written by write_snapshot.

    Raises:
        FileNotFoundError: If the file does not exist.
        pydantic.ValidationError: If the content does not match the shape.
    """
    with open(path, encoding="utf-8") as f:
        return StatsSnapshot.model_validate(json.load(f))
