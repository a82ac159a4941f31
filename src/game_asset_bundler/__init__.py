"""Game Asset Bundler.

This package resolves a project's interlinked assets into a minimal,
deduplicated set of bundles, validates the bundle dependency graph for
cycles, and emits a build manifest plus a content-hash ledger used for
incremental patch detection.
"""

# Core library interface
from .pipeline import BuildPipeline, BuildReport
from .registry import CompilerRegistry
from .compilers.base import BundleCompiler, CompileResult
from .sources.base import AssetGraph
from .sources.project import ProjectAssetGraph, load_dependency_map

# Build stages
from .closure import DependencyClosure, Diagnostic
from .cycles import find_cycle, validate_bundle_dependencies
from .emitter import ManifestEmitter
from .ledger import diff_ledgers, read_ledger, write_ledger
from .planner import BuildPlanAssembler
from .rules import Classification, CollectionRuleEvaluator

# Configuration and errors
from .settings import (
    BuildParameters,
    BuildTarget,
    CollectionRule,
    CollectRule,
    CollectSettings,
    Compression,
    NamingPolicy,
    load_settings,
)
from .errors import (
    BuildError,
    CompileFailure,
    ConfigurationError,
    CycleDetectedError,
    DependencyQueryError,
    DuplicateRegistrationError,
)

__version__ = "0.1.0"

# Auto-discover and register all compiler backends
CompilerRegistry.discover_backends()

__all__ = [
    # Primary library interface
    "BuildPipeline",
    "BuildReport",
    "CompilerRegistry",
    "BundleCompiler",
    "CompileResult",
    "AssetGraph",
    "ProjectAssetGraph",
    "load_dependency_map",
    # Build stages
    "Classification",
    "CollectionRuleEvaluator",
    "DependencyClosure",
    "Diagnostic",
    "BuildPlanAssembler",
    "find_cycle",
    "validate_bundle_dependencies",
    "ManifestEmitter",
    "write_ledger",
    "read_ledger",
    "diff_ledgers",
    # Configuration
    "BuildParameters",
    "BuildTarget",
    "CollectionRule",
    "CollectRule",
    "CollectSettings",
    "Compression",
    "NamingPolicy",
    "load_settings",
    # Errors
    "BuildError",
    "CompileFailure",
    "ConfigurationError",
    "CycleDetectedError",
    "DependencyQueryError",
    "DuplicateRegistrationError",
]
