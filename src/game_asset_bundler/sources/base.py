"""Base abstraction for asset dependency graph sources.

The build pipeline never walks a project itself. It asks an AssetGraph
which assets exist under the collect folders and what each of them
depends on.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterable, Sequence


class AssetGraph(ABC):
    """Abstract base class for asset graph queries.

    Implementations must be side-effect free and deterministic for a
    fixed project state.
    """

    @abstractmethod
    def list_assets(self, folders: Iterable[str]) -> list[str]:
        """List candidate asset paths under the given folders or explicit paths.

        Args:
            folders: Project-relative folders or file paths to enumerate

        Returns:
            Project-relative asset paths in a deterministic order
        """
        pass

    @abstractmethod
    def dependencies_of(self, asset_path: str) -> Sequence[str]:
        """Return the transitive dependency set of an asset.

        Args:
            asset_path: Project-relative asset path

        Returns:
            Ordered paths with the asset itself first

        Raises:
            DependencyQueryError: If the dependencies cannot be resolved
        """
        pass

    def direct_dependencies_of(self, asset_path: str) -> Sequence[str]:
        """Return the direct dependencies of an asset, excluding itself.

        The default falls back to the transitive set.
        """
        return [path for path in self.dependencies_of(asset_path) if path != asset_path]

    def is_folder(self, asset_path: str) -> bool:
        """Whether a path denotes a folder rather than an asset."""
        return asset_path.endswith("/")

    def resolve(self, asset_path: str):
        """Return a filesystem location for the asset's bytes, if it has one."""
        return None
