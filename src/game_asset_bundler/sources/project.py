"""Project directory asset graph.

Enumerates asset files under a project directory and answers dependency
queries from a JSON dependency map of direct edges:

    {
      "Assets/Art/UI/panel.png": ["Assets/Art/Shared/atlas.png"],
      "Assets/Art/Shared/atlas.png": []
    }
"""

import json
import logging
import os
from collections.abc import Iterable, Mapping, Sequence
from pathlib import Path

from ..core.paths import normalize_asset_path, validate_path_safety
from ..errors import DependencyQueryError
from .base import AssetGraph

logger = logging.getLogger(__name__)

# Sidecar files the editor keeps beside every asset
SKIPPED_POSTFIXES = {".meta"}


def load_dependency_map(path: Path) -> dict[str, list[str]]:
    """Load a JSON dependency map and canonicalize its paths.

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the document is not an object of string lists
    """
    if not path.exists():
        raise FileNotFoundError(f"Dependency map not found: {path}")

    with path.open("r", encoding="utf-8") as f:
        raw = json.load(f)

    if not isinstance(raw, dict):
        raise ValueError(f"Dependency map must be a JSON object: {path}")

    edges: dict[str, list[str]] = {}
    for key, deps in raw.items():
        if not isinstance(deps, list) or not all(isinstance(d, str) for d in deps):
            raise ValueError(f"Dependencies of {key} must be a list of paths")
        edges[normalize_asset_path(key)] = [normalize_asset_path(d) for d in deps]
    return edges


class ProjectAssetGraph(AssetGraph):
    """Asset graph backed by a project directory and a dependency map.

    Example:
        >>> graph = ProjectAssetGraph(Path('/game'), load_dependency_map(Path('deps.json')))
        >>> graph.dependencies_of('Assets/Art/UI/panel.png')
        ['Assets/Art/UI/panel.png', 'Assets/Art/Shared/atlas.png']
    """

    def __init__(self, project_root: Path, edges: Mapping[str, Sequence[str]] | None = None):
        """Initialize the graph.

        Args:
            project_root: Directory asset paths are relative to
            edges: Direct dependency edges keyed by asset path

        Raises:
            ValueError: If project_root doesn't exist or isn't a directory
        """
        self.project_root = project_root.resolve()

        if not self.project_root.exists():
            raise ValueError(f"Path does not exist: {self.project_root}")

        if not self.project_root.is_dir():
            raise ValueError(f"Path is not a directory: {self.project_root}")

        self.edges: dict[str, list[str]] = {
            normalize_asset_path(k): [normalize_asset_path(d) for d in v]
            for k, v in (edges or {}).items()
        }

    def resolve(self, asset_path: str) -> Path:
        return self.project_root / normalize_asset_path(asset_path)

    def is_folder(self, asset_path: str) -> bool:
        return self.resolve(asset_path).is_dir()

    def list_assets(self, folders: Iterable[str]) -> list[str]:
        seen: set[str] = set()
        found: list[str] = []
        for folder in folders:
            for path in self._scan(normalize_asset_path(folder)):
                if path not in seen:
                    seen.add(path)
                    found.append(path)
        return found

    def _scan(self, folder: str) -> list[str]:
        target = self.project_root / folder
        if target.is_file():
            return [folder]
        if not target.is_dir():
            logger.warning("Collect path does not exist: %s", folder)
            return []

        found: list[str] = []
        for dirpath, dirnames, filenames in os.walk(target):
            # Sort in place so os.walk descends in a stable order
            dirnames.sort()
            for filename in sorted(filenames):
                # Skip hidden files and editor sidecars
                if filename.startswith("."):
                    continue
                if Path(filename).suffix.lower() in SKIPPED_POSTFIXES:
                    continue

                file_path = Path(dirpath) / filename
                try:
                    validate_path_safety(file_path, self.project_root)
                except ValueError as e:
                    logger.warning("Skipping %s: %s", file_path, e)
                    continue
                found.append(file_path.relative_to(self.project_root).as_posix())
        return found

    def direct_dependencies_of(self, asset_path: str) -> list[str]:
        path = normalize_asset_path(asset_path)
        if path in self.edges:
            return list(self.edges[path])
        if self.resolve(path).is_file():
            return []
        raise DependencyQueryError(path, "asset not found in project")

    def dependencies_of(self, asset_path: str) -> list[str]:
        """Transitive closure in depth-first discovery order, root first."""
        root = normalize_asset_path(asset_path)
        ordered: list[str] = []
        seen: set[str] = set()
        pending = [root]
        while pending:
            current = pending.pop()
            if current in seen:
                continue
            seen.add(current)
            ordered.append(current)
            # Reverse so the first declared dependency is visited first
            for dep in reversed(self.direct_dependencies_of(current)):
                if dep not in seen:
                    pending.append(dep)
        return ordered
