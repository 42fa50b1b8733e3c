"""JSON file persistence shared by the status and history stores.

Writes use write-to-temp, fsync, ``os.replace``: readers (the dashboard, the
next run) see either the previous file or the new one, never a torn write.
"""

from __future__ import annotations

import json
import os
import sys
from contextlib import suppress
from typing import TYPE_CHECKING, Any

from sitewatch.errors import StateError

if TYPE_CHECKING:
    from pathlib import Path


def read_json(path: Path, *, default: Any) -> Any:
    """Load a JSON document, returning ``default`` if the file does not exist.

    Raises StateError if the file exists but cannot be read or parsed.
    """
    if not path.is_file():
        return default
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise StateError(f"Cannot read {path}: {exc}") from exc


def write_json_atomic(path: Path, payload: Any) -> None:
    """Persist ``payload`` as pretty-printed JSON with atomic replace semantics."""
    path.parent.mkdir(parents=True, exist_ok=True)
    data = (json.dumps(payload, indent=2, ensure_ascii=False) + "\n").encode("utf-8")
    tmp_path = path.with_suffix(path.suffix + ".tmp")
    try:
        _write_bytes_fsync(tmp_path, data)
        os.replace(tmp_path, path)
        _fsync_directory(path.parent)
    finally:
        with suppress(OSError):
            tmp_path.unlink(missing_ok=True)


def _write_bytes_fsync(path: Path, data: bytes) -> None:
    with path.open("wb") as file_obj:
        file_obj.write(data)
        file_obj.flush()
        os.fsync(file_obj.fileno())


def _fsync_directory(path: Path) -> None:
    if sys.platform == "win32":
        return  # no fsync on directory handles
    directory_fd = os.open(path, os.O_RDONLY)
    try:
        os.fsync(directory_fd)
    finally:
        os.close(directory_fd)
