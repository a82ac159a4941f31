"""Shared fixtures for bundle builder tests."""

from collections.abc import Iterable, Mapping, Sequence
from pathlib import Path

import pytest

from game_asset_bundler.errors import DependencyQueryError
from game_asset_bundler.settings import CollectSettings
from game_asset_bundler.sources.base import AssetGraph


class MockAssetGraph(AssetGraph):
    """In-memory asset graph for testing.

    Direct edges are declared up front; assets are listed in the order
    given. Paths in ``failing`` raise on dependency queries.
    """

    def __init__(
        self,
        edges: Mapping[str, Sequence[str]],
        assets: Sequence[str] | None = None,
        failing: Iterable[str] = (),
    ):
        self.edges = {k: list(v) for k, v in edges.items()}
        self.assets = list(assets if assets is not None else edges)
        self.failing = set(failing)
        self.queries: list[str] = []

    def list_assets(self, folders: Iterable[str]) -> list[str]:
        folders = list(folders)
        return [
            a for a in self.assets
            if any(a == f or a.startswith(f.rstrip("/") + "/") for f in folders)
        ]

    def direct_dependencies_of(self, asset_path: str) -> list[str]:
        if asset_path in self.failing:
            raise DependencyQueryError(asset_path, "mock failure")
        return list(self.edges.get(asset_path, []))

    def dependencies_of(self, asset_path: str) -> list[str]:
        self.queries.append(asset_path)
        ordered: list[str] = []
        pending = [asset_path]
        while pending:
            current = pending.pop(0)
            if current in ordered:
                continue
            ordered.append(current)
            pending.extend(self.direct_dependencies_of(current))
        return ordered


def write_project(root: Path, files: Mapping[str, bytes | str]) -> Path:
    """Create project files under root and return root."""
    for relative, content in files.items():
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, str):
            content = content.encode("utf-8")
        path.write_bytes(content)
    return root


@pytest.fixture
def ui_settings() -> CollectSettings:
    """Two folder rules: UI art and shared art, plus a blacklist."""
    return CollectSettings.from_document(
        {
            "asset_root": "Assets",
            "blacklist": {"postfixes": [".cs"], "file_names": ["Thumbs.db"]},
            "collectors": [
                {"collect_folder_path": "Assets/Art/UI", "build_rule": "by_folder_path"},
                {"collect_folder_path": "Assets/Art/Shared", "build_rule": "by_folder_path"},
            ],
        }
    )


@pytest.fixture
def ui_graph() -> MockAssetGraph:
    """icon has no deps; panel depends on the shared atlas."""
    return MockAssetGraph(
        {
            "Assets/Art/UI/icon.png": [],
            "Assets/Art/UI/panel.png": ["Assets/Art/Shared/atlas.png"],
            "Assets/Art/Shared/atlas.png": [],
        }
    )


@pytest.fixture
def ui_project(tmp_path: Path) -> Path:
    """Project directory with UI and shared art plus a dependency map."""
    root = write_project(
        tmp_path / "game",
        {
            "Assets/Art/UI/icon.png": b"icon-bytes",
            "Assets/Art/UI/icon.png.meta": b"guid: 1",
            "Assets/Art/UI/panel.png": b"panel-bytes",
            "Assets/Art/Shared/atlas.png": b"atlas-bytes",
            "Assets/Scripts/Player.cs": b"class Player {}",
        },
    )
    (tmp_path / "deps.json").write_text(
        '{"Assets/Art/UI/panel.png": ["Assets/Art/Shared/atlas.png"]}',
        encoding="utf-8",
    )
    (tmp_path / "bundles.json").write_text(
        """{
  "asset_root": "Assets",
  "blacklist": {"postfixes": [".cs"]},
  "collectors": [
    {"collect_folder_path": "Assets/Art/UI", "build_rule": "by_folder_path"},
    {"collect_folder_path": "Assets/Art/Shared", "build_rule": "by_folder_path"}
  ]
}
""",
        encoding="utf-8",
    )
    return root
