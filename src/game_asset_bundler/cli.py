"""Command-line interface for the bundle builder.

This module provides the CLI entry point for running a bundle build
pass over a project directory.
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from .errors import BuildError, CycleDetectedError
from .pipeline import BuildPipeline, BuildReport
from .registry import CompilerRegistry
from .settings import BuildParameters, BuildTarget, Compression, load_settings
from .sources.project import ProjectAssetGraph, load_dependency_map


def run_build(
    project: Path,
    settings_path: Path,
    graph_path: Path | None,
    parameters: BuildParameters,
    backend: str = "archive",
) -> BuildReport:
    """Run one build pass for a project.

    Args:
        project: Project directory asset paths are relative to
        settings_path: Collection settings JSON file
        graph_path: Optional JSON dependency map
        parameters: Build parameters
        backend: Registered compiler backend name

    Returns:
        BuildReport of the successful pass

    Raises:
        BuildError: On any fatal build error
        ValueError: If the backend name is unknown
    """
    settings = load_settings(settings_path)
    edges = load_dependency_map(graph_path) if graph_path else {}

    print(f"Scanning project: {project.resolve()}", file=sys.stderr)
    graph = ProjectAssetGraph(project, edges)
    compiler = CompilerRegistry.create(backend, graph=graph)
    pipeline = BuildPipeline(graph, settings, parameters, compiler)
    return pipeline.run()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Resolve project assets into deduplicated bundles",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Incremental Android build
  bundle-build --project ./game --settings bundles.json --graph deps.json \\
      --target android --output ./build/bundles

  # Clean LZMA build with hashed file names using the legacy backend
  bundle-build --project ./game --settings bundles.json --target windows64 \\
      --output ./build/bundles --backend legacy --compression lzma \\
      --force-rebuild --append-hash
        """,
    )

    parser.add_argument("--project", help="Project root directory")
    parser.add_argument("--settings", help="Collection settings JSON file")
    parser.add_argument("--graph", help="JSON map of direct asset dependencies")
    parser.add_argument(
        "--target",
        choices=[t.value for t in BuildTarget],
        default=BuildTarget.NONE.value,
        help="Target platform",
    )
    parser.add_argument("--output", default="", help="Output root directory")
    parser.add_argument("--backend", default="archive", help="Compiler backend name")
    parser.add_argument(
        "--compression",
        choices=[c.value for c in Compression],
        default=Compression.UNCOMPRESSED.value,
        help="Bundle compression",
    )
    parser.add_argument("--force-rebuild", action="store_true", help="Disable incremental reuse")
    parser.add_argument("--append-hash", action="store_true", help="Append content hash to bundle file names")
    parser.add_argument("--disable-type-tree", action="store_true", help="Do not write type information")
    parser.add_argument(
        "--ignore-type-tree-changes",
        action="store_true",
        help="Ignore type information when checking for incremental changes",
    )
    parser.add_argument(
        "--strict-dependencies",
        action="store_true",
        help="Fail the build when a dependency query fails",
    )
    parser.add_argument("--hash-workers", type=int, default=4, help="Ledger hashing threads")
    parser.add_argument("--list-backends", action="store_true", help="List compiler backends and exit")
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose logging")
    return parser


def main(argv: list[str] | None = None) -> None:
    """Main entry point for the bundle build script."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="[BuildPatch] %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    if args.list_backends:
        for name in CompilerRegistry.list_backends():
            print(name)
        return

    if not args.project or not args.settings:
        parser.error("--project and --settings are required")

    project = Path(args.project)
    if not project.is_dir():
        print(f"Error: Project path is not a directory: {project}", file=sys.stderr)
        sys.exit(1)

    parameters = BuildParameters(
        target=BuildTarget(args.target),
        output_root=Path(args.output) if args.output.strip() else None,
        compression=Compression(args.compression),
        force_rebuild=args.force_rebuild,
        append_hash=args.append_hash,
        disable_write_type_tree=args.disable_type_tree,
        ignore_type_tree_changes=args.ignore_type_tree_changes,
        strict_dependencies=args.strict_dependencies,
        hash_workers=args.hash_workers,
    )

    try:
        report = run_build(
            project,
            Path(args.settings),
            Path(args.graph) if args.graph else None,
            parameters,
            backend=args.backend,
        )
    except CycleDetectedError as e:
        print(f"Error: {e}", file=sys.stderr)
        for bundle in e.stack:
            print(f"  {bundle}", file=sys.stderr)
        sys.exit(1)
    except (BuildError, ValueError, OSError) as e:
        print(f"Error: Build failed: {e}", file=sys.stderr)
        sys.exit(1)

    for diagnostic in report.diagnostics:
        print(f"Warning: {diagnostic}", file=sys.stderr)
    print(f"Built {len(report.plan)} bundles", file=sys.stderr)

    json.dump(report.to_dict(), sys.stdout, indent=2)
    print()


if __name__ == "__main__":
    main()
