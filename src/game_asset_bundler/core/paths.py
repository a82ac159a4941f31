"""Asset path canonicalization and safety checks."""

import posixpath
from pathlib import Path


def normalize_asset_path(path: str | Path) -> str:
    """Return the canonical form of a project-relative asset path.

    Separators are converted to forward slashes, redundant segments are
    collapsed and a leading "./" is removed. Case is preserved.

    Example:
        "Assets\\\\Art\\\\UI\\\\icon.png" -> "Assets/Art/UI/icon.png"

    Args:
        path: Raw asset path

    Returns:
        Canonical asset path string
    """
    text = str(path).replace("\\", "/")
    if not text:
        return ""
    normalized = posixpath.normpath(text)
    if normalized == ".":
        return ""
    return normalized


def is_under(path: str, folder: str) -> bool:
    """Check whether a canonical path equals or lives under a canonical folder."""
    if not folder:
        return True
    return path == folder or path.startswith(folder.rstrip("/") + "/")


def validate_path_safety(path: Path, base_dir: Path) -> None:
    """Validate that a path stays within the base directory.

    This prevents path traversal attacks.

    Args:
        path: Path to validate
        base_dir: Base directory that path must be within

    Raises:
        ValueError: If path escapes the base directory
    """
    resolved_path = path.resolve()
    resolved_base = base_dir.resolve()

    if not resolved_path.is_relative_to(resolved_base):
        raise ValueError(f"Path {path} escapes base directory {base_dir}")
