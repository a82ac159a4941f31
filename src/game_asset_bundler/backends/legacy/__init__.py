"""Legacy backend for the bundle build pipeline.

Packs each bundle into a zip archive, matching the older custom
build pipeline's output layout.
"""

from ...sources.base import AssetGraph
from .compiler import ZipBundleCompiler

# Auto-register with the registry
from ...registry import CompilerRegistry


def _create_legacy_compiler(graph: AssetGraph, **kwargs) -> ZipBundleCompiler:
    """Factory function for creating zip bundle compilers."""
    return ZipBundleCompiler(graph)


CompilerRegistry.register_factory("legacy", _create_legacy_compiler)

__all__ = ["ZipBundleCompiler"]
