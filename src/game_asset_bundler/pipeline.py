"""Bundle build pipeline.

This module provides the main interface for running one build pass:
enumerate candidate assets, classify and expand them into a deduplicated
build plan, hand the plan to a compiler backend, validate the resulting
bundle dependency graph, and emit the manifest and content ledger.
"""

import logging
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .closure import DependencyClosure, Diagnostic
from .compilers.base import BundleCompiler, CompileResult
from .core.records import AssetRecord, BundleBuildUnit
from .cycles import validate_bundle_dependencies
from .emitter import ManifestEmitter
from .errors import CompileFailure, ConfigurationError
from .manifest import write_asset_build_readme
from .planner import BuildPlanAssembler
from .rules import CollectionRuleEvaluator
from .settings import BuildParameters, BuildTarget, CollectSettings
from .sources.base import AssetGraph

logger = logging.getLogger(__name__)


@dataclass
class BuildReport:
    """Outcome of a successful build pass."""

    plan: list[BundleBuildUnit]
    result: CompileResult
    assets: list[AssetRecord]
    build_info_asset: str
    manifest_path: Path
    asset_readme_path: Path
    ledger_path: Path
    diagnostics: list[Diagnostic] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "bundles": [
                {
                    "name": unit.bundle_name,
                    "file": self.result.output_files.get(unit.bundle_name, unit.bundle_name),
                    "assets": list(unit.asset_paths),
                    "dependencies": self.result.bundle_dependencies.get(unit.bundle_name, []),
                }
                for unit in self.plan
            ],
            "reused_bundles": list(self.result.reused_bundles),
            "build_info_asset": self.build_info_asset,
            "manifest": str(self.manifest_path),
            "ledger": str(self.ledger_path),
            "diagnostics": [str(d) for d in self.diagnostics],
        }


class BuildPipeline:
    """Runs build passes for one project, settings and compiler.

    Every call to run() starts from an empty arena, so nothing from an
    earlier or aborted pass leaks into the next one.

    Example:
        >>> graph = ProjectAssetGraph(Path('/game'), load_dependency_map(Path('deps.json')))
        >>> pipeline = BuildPipeline(
        ...     graph,
        ...     load_settings(Path('bundles.json')),
        ...     BuildParameters(BuildTarget.ANDROID, Path('/out')),
        ...     CompilerRegistry.create('archive', graph=graph),
        ... )
        >>> report = pipeline.run()
    """

    def __init__(
        self,
        graph: AssetGraph,
        settings: CollectSettings,
        parameters: BuildParameters,
        compiler: BundleCompiler,
        project_root: Path | None = None,
        ledger_path: Path | None = None,
    ):
        """Initialize the pipeline.

        Args:
            graph: Asset graph answering enumeration and dependency queries
            settings: Collection settings
            parameters: Build parameters for this invocation
            compiler: Backend that turns the plan into bundle files
            project_root: Directory receiving the build-info asset. Defaults
                to the graph's project_root when it has one.
            ledger_path: Ledger location; defaults to inside the output directory
        """
        self.graph = graph
        self.settings = settings
        self.parameters = parameters
        self.compiler = compiler
        self.project_root = project_root or getattr(graph, "project_root", None)
        self.ledger_path = ledger_path

    def check(self) -> None:
        """Reject a misconfigured build before any work begins.

        Raises:
            ConfigurationError: If no platform, no output path or no rules
        """
        if self.parameters.target is BuildTarget.NONE:
            raise ConfigurationError("No build target platform selected")
        if not self.parameters.has_output_root:
            raise ConfigurationError("Output directory cannot be empty")
        if not self.settings.rules:
            raise ConfigurationError("No collection rules configured")
        if self.project_root is None:
            raise ConfigurationError("Project root is required to write the build info asset")

    def prepare_output(self) -> Path:
        """Create the platform output directory, wiping it first on force rebuild."""
        output_dir = self.parameters.output_dir
        if self.parameters.force_rebuild and output_dir.exists():
            shutil.rmtree(output_dir)
            logger.info("Deleted platform output directory: %s", output_dir)
        if not output_dir.exists():
            output_dir.mkdir(parents=True)
            logger.info("Created output directory: %s", output_dir)
        return output_dir

    def analyse(self) -> tuple[BuildPlanAssembler, DependencyClosure]:
        """Enumerate, classify and expand every candidate asset.

        Returns:
            The assembler holding this pass's arena and the closure with
            its recorded diagnostics
        """
        evaluator = CollectionRuleEvaluator(self.settings, is_folder=self.graph.is_folder)
        assembler = BuildPlanAssembler(self.parameters.target)
        closure = DependencyClosure(
            self.graph,
            evaluator,
            assembler,
            strict=self.parameters.strict_dependencies,
        )

        roots = self.graph.list_assets(self.settings.collect_folders())
        logger.info("Analysing %d candidate assets", len(roots))
        closure.expand_all(roots)
        return assembler, closure

    def run(self) -> BuildReport:
        """Run one complete build pass.

        Returns:
            BuildReport describing the emitted bundles and files

        Raises:
            ConfigurationError: If the build is misconfigured
            DependencyQueryError: On a failed query in strict mode
            CompileFailure: If the compiler reports failure
            CycleDetectedError: If the bundle dependency graph has a cycle
        """
        self.check()
        output_dir = self.prepare_output()

        assembler, closure = self.analyse()
        build_info_asset = assembler.write_build_info(
            Path(self.project_root), self.settings.info_folder
        )
        plan = assembler.finalize(build_info_asset)

        logger.info("Starting %s compile of %d bundles", self.compiler.name or "bundle", len(plan))
        result = self.compiler.compile(plan, self.parameters)
        if not result.success:
            raise CompileFailure(result.message or "Bundle compiler reported failure")

        validate_bundle_dependencies(result.bundle_dependencies)

        emitter = ManifestEmitter(self.settings, self.parameters, self.ledger_path)
        manifest_path, ledger_path = emitter.emit(plan, result)
        asset_readme_path = write_asset_build_readme(output_dir, plan, self.parameters)

        logger.info("Build complete: %d bundles", len(plan))
        return BuildReport(
            plan=plan,
            result=result,
            assets=assembler.arena.assets(),
            build_info_asset=build_info_asset,
            manifest_path=manifest_path,
            asset_readme_path=asset_readme_path,
            ledger_path=ledger_path,
            diagnostics=list(closure.diagnostics),
        )
