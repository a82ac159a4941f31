"""Asset graph sources for the build pipeline.

This package contains the AssetGraph interface and the project
directory implementation used by the CLI.
"""

from .base import AssetGraph
from .project import ProjectAssetGraph, load_dependency_map

__all__ = ["AssetGraph", "ProjectAssetGraph", "load_dependency_map"]
