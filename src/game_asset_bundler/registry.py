"""Compiler registry for factory-based backend creation.

This module provides a central registry for bundle compiler factories,
enabling backend-agnostic builds and automatic backend discovery.
"""

import importlib
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Callable

if TYPE_CHECKING:
    from .compilers.base import BundleCompiler

logger = logging.getLogger(__name__)


class CompilerRegistry:
    """Central registry for bundle compiler factories.

    Backends register themselves when imported, and the registry
    can automatically discover all available backends.

    This keeps the build pipeline unaware of which backend produced
    a compile result.
    """

    _factories: dict[str, Callable[..., "BundleCompiler"]] = {}

    @classmethod
    def register_factory(cls, name: str, factory: Callable[..., "BundleCompiler"]) -> None:
        """Register a factory function for creating compilers.

        Args:
            name: Name of the backend (e.g., 'archive', 'legacy')
            factory: Callable that creates a BundleCompiler instance

        Example:
            >>> def create_archive_compiler(graph: AssetGraph) -> TarBundleCompiler:
            ...     return TarBundleCompiler(graph)
            >>> CompilerRegistry.register_factory('archive', create_archive_compiler)
        """
        cls._factories[name] = factory

    @classmethod
    def create(cls, backend_name: str, **kwargs) -> "BundleCompiler":
        """Create a compiler from a registered backend.

        Args:
            backend_name: Name of the registered backend
            **kwargs: Arguments passed to the backend factory

        Returns:
            BundleCompiler instance

        Raises:
            ValueError: If backend_name is not registered
        """
        if backend_name not in cls._factories:
            available = ", ".join(sorted(cls._factories)) or "none"
            raise ValueError(
                f"Unknown compiler backend: '{backend_name}'. Available backends: {available}"
            )

        return cls._factories[backend_name](**kwargs)

    @classmethod
    def list_backends(cls) -> list[str]:
        """List all registered backend names, sorted."""
        return sorted(cls._factories)

    @classmethod
    def discover_backends(cls) -> None:
        """Auto-discover and import all backends.

        Iterates the backends/ directory and imports each backend
        package, which registers itself on import. Backends with
        missing dependencies are skipped.
        """
        backends_dir = Path(__file__).parent / "backends"

        if not backends_dir.exists():
            return

        for backend_path in sorted(backends_dir.iterdir()):
            if not backend_path.is_dir():
                continue

            if not (backend_path / "__init__.py").exists():
                continue

            try:
                importlib.import_module(
                    f".backends.{backend_path.name}",
                    package="game_asset_bundler",
                )
            except ImportError as e:
                # Backend dependencies not installed
                logger.debug("Skipping backend %s: %s", backend_path.name, e)
