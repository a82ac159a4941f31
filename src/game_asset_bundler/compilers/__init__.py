"""Bundle compiler abstractions.

This package contains the BundleCompiler interface and the shared
archive implementation. Concrete backends live in the backends/ directory.
"""

from .base import BundleCompiler, CompileResult

__all__ = ["BundleCompiler", "CompileResult"]
