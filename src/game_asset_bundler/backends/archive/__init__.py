"""Archive backend for the bundle build pipeline.

Packs each bundle into a tar archive. This is the default backend.
"""

from ...sources.base import AssetGraph
from .compiler import TarBundleCompiler

# Auto-register with the registry
from ...registry import CompilerRegistry


def _create_archive_compiler(graph: AssetGraph, **kwargs) -> TarBundleCompiler:
    """Factory function for creating tar bundle compilers.

    Args:
        graph: Asset graph used for asset bytes and dependencies
        **kwargs: Additional parameters (unused)

    Returns:
        TarBundleCompiler instance
    """
    return TarBundleCompiler(graph)


# Auto-register at module import
CompilerRegistry.register_factory("archive", _create_archive_compiler)

__all__ = ["TarBundleCompiler"]
