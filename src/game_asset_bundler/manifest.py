"""Human-readable build manifests.

Two text files are regenerated on every build: the build readme (platform,
timestamp, collection rules, build parameters and the bundle listing) and
the asset build readme (every bundle with its member asset paths). Both are
for audit only; nothing in the build reads them back.
"""

import logging
from collections.abc import Sequence
from datetime import datetime
from pathlib import Path

from .compilers.base import CompileResult
from .core.records import BundleBuildUnit
from .settings import BuildParameters, CollectSettings
from .utils import write_text

logger = logging.getLogger(__name__)

README_FILE_NAME = "readme.txt"
ASSET_BUILD_README_FILE_NAME = "asset_build_readme.txt"


def _header(parameters: BuildParameters, built_at: datetime) -> list[str]:
    return [
        f"Build platform: {parameters.target.value}",
        f"Build time: {built_at.isoformat(sep=' ', timespec='seconds')}",
        "",
    ]


def render_asset_listing(plan: Sequence[BundleBuildUnit]) -> list[str]:
    """Render every bundle with its member asset paths."""
    lines = ["--Asset bundle build info--"]
    for unit in plan:
        lines.append(f"AssetBundleName:{unit.label} AssetBundleVariant:{unit.variant}")
        for asset_path in unit.asset_paths:
            lines.append(f"\tAssetPath: {asset_path}")
        lines.append("")
    return lines


def render_readme(
    plan: Sequence[BundleBuildUnit],
    result: CompileResult,
    settings: CollectSettings,
    parameters: BuildParameters,
    built_at: datetime,
) -> str:
    """Render the full build readme as text."""
    lines = _header(parameters, built_at)

    lines.append("--Collect settings--")
    lines.extend(rule.describe() for rule in settings.rules)
    lines.append("")

    lines.append("--Build parameters--")
    lines.extend(parameters.describe())
    lines.append("")

    lines.append("--Build list--")
    for unit in plan:
        output = result.output_files.get(unit.bundle_name, unit.bundle_name)
        dependencies = result.bundle_dependencies.get(unit.bundle_name, [])
        suffix = f" -> {', '.join(dependencies)}" if dependencies else ""
        lines.append(f"{output}{suffix}")
    lines.append("")

    lines.extend(render_asset_listing(plan))
    return "\n".join(lines) + "\n"


def write_readme(
    output_dir: Path,
    plan: Sequence[BundleBuildUnit],
    result: CompileResult,
    settings: CollectSettings,
    parameters: BuildParameters,
    built_at: datetime | None = None,
) -> Path:
    """Delete any previous build readme and write a fresh one.

    Returns:
        Path of the written readme
    """
    path = output_dir / README_FILE_NAME
    if path.exists():
        path.unlink()

    logger.info("Creating build readme: %s", path)
    content = render_readme(plan, result, settings, parameters, built_at or datetime.now())
    write_text(path, content)
    return path


def write_asset_build_readme(
    output_dir: Path,
    plan: Sequence[BundleBuildUnit],
    parameters: BuildParameters,
    built_at: datetime | None = None,
) -> Path:
    """Delete any previous asset build readme and write a fresh one."""
    path = output_dir / ASSET_BUILD_README_FILE_NAME
    if path.exists():
        path.unlink()

    logger.info("Creating asset build readme: %s", path)
    lines = _header(parameters, built_at or datetime.now())
    lines.extend(render_asset_listing(plan))
    write_text(path, "\n".join(lines) + "\n")
    return path
