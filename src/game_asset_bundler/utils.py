"""Shared helpers used by the compilers and emitters."""

import hashlib
import json
from pathlib import Path
from typing import Any

CHUNK_SIZE = 1024 * 1024


def compute_file_hash(path: Path, algorithm: str = "md5") -> str:
    """Return the hex digest of a file's contents."""
    digest = hashlib.new(algorithm)
    with path.open("rb") as handle:
        for chunk in iter(lambda: handle.read(CHUNK_SIZE), b""):
            digest.update(chunk)
    return digest.hexdigest()


def write_text(path: Path, content: str, *, newline: str | None = "\n") -> None:
    """Write UTF-8 text without a byte-order marker, creating parent directories."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8", newline=newline)


def write_json(payload: Any, path: Path) -> None:
    """Write JSON payload to disk with canonical formatting."""
    write_text(path, json.dumps(payload, indent=2, sort_keys=True) + "\n")
