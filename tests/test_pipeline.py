"""End-to-end tests for the build pipeline."""

import json
from collections.abc import Sequence
from pathlib import Path

import pytest

from game_asset_bundler.compilers.base import BundleCompiler, CompileResult
from game_asset_bundler.core.records import BundleBuildUnit
from game_asset_bundler.errors import (
    CompileFailure,
    ConfigurationError,
    CycleDetectedError,
    DependencyQueryError,
)
from game_asset_bundler.ledger import LEDGER_FILE_NAME, read_ledger
from game_asset_bundler.manifest import ASSET_BUILD_README_FILE_NAME, README_FILE_NAME
from game_asset_bundler.pipeline import BuildPipeline
from game_asset_bundler.registry import CompilerRegistry
from game_asset_bundler.settings import BuildParameters, BuildTarget, CollectSettings, load_settings
from game_asset_bundler.sources.project import ProjectAssetGraph, load_dependency_map


class RecordingCompiler(BundleCompiler):
    """Compiler double that records its inputs and returns a canned result."""

    name = "recording"

    def __init__(self, dependencies: dict[str, list[str]] | None = None, success: bool = True):
        self.dependencies = dependencies
        self.success = success
        self.calls: list[tuple[list[BundleBuildUnit], BuildParameters]] = []

    def compile(self, units: Sequence[BundleBuildUnit], parameters: BuildParameters) -> CompileResult:
        self.calls.append((list(units), parameters))
        if not self.success:
            return CompileResult.failure("compiler exploded")
        parameters.output_dir.mkdir(parents=True, exist_ok=True)
        for unit in units:
            target = parameters.output_dir / unit.bundle_name
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(unit.bundle_name.encode("utf-8"))
        dependencies = self.dependencies or {unit.bundle_name: [] for unit in units}
        return CompileResult(
            success=True,
            bundle_dependencies=dependencies,
            output_files={unit.bundle_name: unit.bundle_name for unit in units},
        )


@pytest.fixture
def graph(ui_project, tmp_path: Path) -> ProjectAssetGraph:
    return ProjectAssetGraph(ui_project, load_dependency_map(tmp_path / "deps.json"))


@pytest.fixture
def settings(tmp_path: Path, ui_project) -> CollectSettings:
    return load_settings(tmp_path / "bundles.json")


def make_params(tmp_path: Path, **overrides) -> BuildParameters:
    return BuildParameters(target=BuildTarget.WINDOWS, output_root=tmp_path / "out", **overrides)


class TestEndToEnd:
    """Test full builds with the archive backend."""

    def test_build(self, graph, settings, ui_project, tmp_path: Path) -> None:
        """Test that a full build emits bundles, build info, readmes and ledger."""
        parameters = make_params(tmp_path)
        pipeline = BuildPipeline(graph, settings, parameters, CompilerRegistry.create("archive", graph=graph))

        report = pipeline.run()

        assert [unit.label for unit in report.plan] == [
            "assets/art/ui.pc",
            "assets/art/shared.pc",
            "assetbuildinfo_pc.pc",
        ]
        assert report.result.bundle_dependencies["assets/art/ui.pc"] == ["assets/art/shared.pc"]
        atlas = next(a for a in report.assets if a.path == "Assets/Art/Shared/atlas.png")
        assert atlas.ref_count == 1

        output_dir = tmp_path / "out" / "windows"
        assert report.manifest_path == output_dir / README_FILE_NAME
        assert report.asset_readme_path == output_dir / ASSET_BUILD_README_FILE_NAME
        ledger = read_ledger(report.ledger_path)
        assert set(ledger) == {"assets/art/ui.pc", "assets/art/shared.pc", "assetbuildinfo_pc.pc"}

        build_info = json.loads((ui_project / report.build_info_asset).read_text(encoding="utf-8"))
        assert {"asset_path": "assets/art/shared/atlas.png", "bundle_name": "assets/art/shared.pc", "bundle_variant": ""} in build_info["assets"]

    def test_scripts_are_never_bundled(self, graph, settings, tmp_path: Path) -> None:
        """Test that blacklisted scripts never reach the plan."""
        pipeline = BuildPipeline(
            graph, settings, make_params(tmp_path), CompilerRegistry.create("archive", graph=graph)
        )
        report = pipeline.run()
        assert all(not a.path.endswith(".cs") for a in report.assets)

    def test_rerun_is_stable_and_reuses_cache(self, graph, settings, tmp_path: Path) -> None:
        """Test that an unchanged rerun reuses bundles and keeps the ledger."""
        compiler = CompilerRegistry.create("archive", graph=graph)
        first = BuildPipeline(graph, settings, make_params(tmp_path), compiler).run()
        first_ledger = first.ledger_path.read_bytes()

        second = BuildPipeline(graph, settings, make_params(tmp_path), compiler).run()

        assert second.ledger_path.read_bytes() == first_ledger
        assert len(second.result.reused_bundles) == 3
        assert len(second.assets) == len(first.assets)

    def test_force_rebuild_wipes_platform_directory(self, graph, settings, tmp_path: Path) -> None:
        """Test that force rebuild deletes the platform directory first."""
        compiler = CompilerRegistry.create("archive", graph=graph)
        BuildPipeline(graph, settings, make_params(tmp_path), compiler).run()
        leftover = tmp_path / "out" / "windows" / "leftover.bin"
        leftover.write_bytes(b"x")

        report = BuildPipeline(graph, settings, make_params(tmp_path, force_rebuild=True), compiler).run()

        assert not leftover.exists()
        assert report.result.reused_bundles == []

    def test_custom_ledger_path(self, graph, settings, tmp_path: Path) -> None:
        """Test that the ledger can be written outside the output directory."""
        ledger_path = tmp_path / "ledgers" / "android.txt"
        pipeline = BuildPipeline(
            graph,
            settings,
            make_params(tmp_path),
            CompilerRegistry.create("legacy", graph=graph),
            ledger_path=ledger_path,
        )
        report = pipeline.run()
        assert report.ledger_path == ledger_path
        assert not (tmp_path / "out" / "windows" / LEDGER_FILE_NAME).exists()


class TestCompilerHandoff:
    """Test what the pipeline hands the compiler."""

    @pytest.mark.parametrize("force_rebuild", [False, True])
    def test_use_cache_follows_force_rebuild(self, graph, settings, tmp_path: Path, force_rebuild) -> None:
        """Test that the compiler sees cache reuse disabled only on force rebuild."""
        compiler = RecordingCompiler()
        BuildPipeline(graph, settings, make_params(tmp_path, force_rebuild=force_rebuild), compiler).run()

        _, parameters = compiler.calls[0]
        assert parameters.use_cache is not force_rebuild

    def test_unresolvable_dependency_is_diagnosed(self, ui_project, settings, tmp_path: Path) -> None:
        """Test that an unresolvable dependency becomes a diagnostic."""
        graph = ProjectAssetGraph(ui_project, {"Assets/Art/UI/panel.png": ["Assets/Art/Shared/missing.png"]})
        compiler = RecordingCompiler()

        report = BuildPipeline(graph, settings, make_params(tmp_path), compiler).run()

        assert [d.asset_path for d in report.diagnostics] == ["Assets/Art/UI/panel.png"]
        paths = {a.path for a in report.assets}
        assert "Assets/Art/UI/panel.png" not in paths
        assert "Assets/Art/UI/icon.png" in paths

    def test_strict_dependencies_abort(self, ui_project, settings, tmp_path: Path) -> None:
        """Test that strict dependencies abort before compiling."""
        graph = ProjectAssetGraph(ui_project, {"Assets/Art/UI/panel.png": ["Assets/Art/Shared/missing.png"]})
        compiler = RecordingCompiler()

        with pytest.raises(DependencyQueryError):
            BuildPipeline(graph, settings, make_params(tmp_path, strict_dependencies=True), compiler).run()

        assert compiler.calls == []


class TestFailures:
    """Test that failed passes leave no manifest or ledger behind."""

    def assert_nothing_emitted(self, tmp_path: Path) -> None:
        output_dir = tmp_path / "out" / "windows"
        assert not (output_dir / README_FILE_NAME).exists()
        assert not (output_dir / LEDGER_FILE_NAME).exists()

    def test_compile_failure(self, graph, settings, tmp_path: Path) -> None:
        """Test that a compiler failure raises and emits nothing."""
        pipeline = BuildPipeline(graph, settings, make_params(tmp_path), RecordingCompiler(success=False))

        with pytest.raises(CompileFailure, match="compiler exploded"):
            pipeline.run()

        self.assert_nothing_emitted(tmp_path)

    def test_cycle_aborts_before_emission(self, graph, settings, tmp_path: Path) -> None:
        """Test that a dependency cycle raises and emits nothing."""
        compiler = RecordingCompiler(
            dependencies={
                "assets/art/ui.pc": ["assets/art/shared.pc"],
                "assets/art/shared.pc": ["assets/art/ui.pc"],
            }
        )
        pipeline = BuildPipeline(graph, settings, make_params(tmp_path), compiler)

        with pytest.raises(CycleDetectedError) as exc_info:
            pipeline.run()

        assert set(exc_info.value.cycle) == {"assets/art/ui.pc", "assets/art/shared.pc"}
        self.assert_nothing_emitted(tmp_path)

    def test_no_target(self, graph, settings, tmp_path: Path) -> None:
        """Test that a build without a target is rejected."""
        parameters = BuildParameters(target=BuildTarget.NONE, output_root=tmp_path / "out")
        with pytest.raises(ConfigurationError, match="No build target"):
            BuildPipeline(graph, settings, parameters, RecordingCompiler()).run()

    def test_no_output(self, graph, settings) -> None:
        """Test that a build without an output root is rejected."""
        parameters = BuildParameters(target=BuildTarget.WINDOWS, output_root=None)
        with pytest.raises(ConfigurationError, match="Output directory"):
            BuildPipeline(graph, settings, parameters, RecordingCompiler()).run()

    def test_empty_path_output(self, graph, settings) -> None:
        """Test that Path("") is rejected as an output root before compiling."""
        parameters = BuildParameters(target=BuildTarget.WINDOWS, output_root=Path(""))
        compiler = RecordingCompiler()
        with pytest.raises(ConfigurationError, match="Output directory cannot be empty"):
            BuildPipeline(graph, settings, parameters, compiler).run()
        assert compiler.calls == []

    def test_no_rules(self, graph, tmp_path: Path) -> None:
        """Test that a build without rules is rejected before any work."""
        settings = CollectSettings.from_document({"collectors": []})
        compiler = RecordingCompiler()
        with pytest.raises(ConfigurationError, match="No collection rules"):
            BuildPipeline(graph, settings, make_params(tmp_path), compiler).run()
        assert compiler.calls == []
        assert not (tmp_path / "out").exists()
