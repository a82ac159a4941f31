"""Build plan assembly.

BuildPlanAssembler owns the pass-scoped arena. Closure expansion registers
assets through it, and finalize() turns the registered bundles into the
immutable list of BundleBuildUnit handed to the compiler, plus one
synthetic unit carrying the build-info record itself.
"""

import json
import logging
from pathlib import Path

from .core.paths import normalize_asset_path
from .core.records import AssetRecord, BuildArena, BundleBuildUnit, BundleRecord
from .core.types import BuildAssetInfo, BuildInfoDocument
from .core.validator import validate_build_info
from .settings import BuildTarget

logger = logging.getLogger(__name__)

BUILD_INFO_ASSET_PREFIX = "assetbuildinfo"


class BuildPlanAssembler:
    """Collects deduplicated assets into bundles and emits the build plan.

    Example:
        >>> assembler = BuildPlanAssembler(BuildTarget.ANDROID)
        >>> _ = assembler.register("Assets/UI/icon.png", "assets/ui")
        >>> [unit.label for unit in assembler.finalize()]
        ['assets/ui.android']
    """

    def __init__(self, target: BuildTarget, arena: BuildArena | None = None):
        self.target = target
        self.postfix = target.postfix
        self.arena = arena if arena is not None else BuildArena()
        self.metadata_label: str | None = None
        self._plan: list[BundleBuildUnit] | None = None

    def bundle_label(self, base_label: str) -> str:
        """Append the platform postfix to a bundle label."""
        return f"{base_label}.{self.postfix}"

    @property
    def build_info_asset_name(self) -> str:
        """Name of the build-info asset and its bundle, without postfix."""
        return f"{BUILD_INFO_ASSET_PREFIX}_{self.postfix}".lower()

    def register(
        self,
        asset_path: str,
        base_label: str,
        variant: str = "",
        *,
        collected: bool = True,
        media: bool = False,
    ) -> AssetRecord:
        """Look up or create the record for an asset and place it in its bundle.

        Repeat registration of the same path returns the existing record;
        only the collected flag can be raised by a later registration.
        """
        path = normalize_asset_path(asset_path)
        record = self.arena.get_asset(path)
        if record is None:
            record = self.arena.add_asset(
                AssetRecord(
                    path=path,
                    addressable_name=path,
                    is_collected=collected,
                    is_media=media,
                )
            )
            self.arena.assign(record, self.bundle_label(base_label), variant)
        elif collected:
            record.is_collected = True
        return record

    def bundles(self) -> list[BundleRecord]:
        return self.arena.bundles()

    def build_info(self) -> BuildInfoDocument:
        """Build the asset to bundle mapping record for the registered assets.

        Paths are stored lowercased so the runtime lookup matches the
        lowercased bundle names.
        """
        assets: list[BuildAssetInfo] = []
        for bundle in self.arena.bundles():
            if bundle.label == self.metadata_label:
                continue
            for asset_path in bundle.asset_paths:
                assets.append(
                    BuildAssetInfo(
                        asset_path=asset_path.lower(),
                        bundle_name=bundle.label,
                        bundle_variant=bundle.variant,
                    )
                )
        document = BuildInfoDocument(platform=self.target.value, postfix=self.postfix, assets=assets)
        validate_build_info(document)
        return document

    def write_build_info(self, project_root: Path, info_folder: str) -> str:
        """Serialize the build-info record into the project.

        Args:
            project_root: Directory asset paths are relative to
            info_folder: Project-relative folder for the record

        Returns:
            Project-relative path of the written record
        """
        relative_path = f"{normalize_asset_path(info_folder)}/{self.build_info_asset_name}.json"
        target = project_root / relative_path
        target.parent.mkdir(parents=True, exist_ok=True)
        with target.open("w", encoding="utf-8", newline="\n") as f:
            json.dump(self.build_info(), f, indent=2)
            f.write("\n")
        logger.info("Wrote build info asset %s", relative_path)
        return relative_path

    def finalize(self, build_info_asset: str | None = None) -> list[BundleBuildUnit]:
        """Freeze the registered bundles into the build plan.

        Args:
            build_info_asset: Project-relative path of the serialized build-info
                record. When given, a synthetic metadata bundle carrying it is
                appended to the plan.

        Returns:
            One BundleBuildUnit per bundle, in first-discovery order

        Raises:
            DuplicateRegistrationError: If the metadata asset or bundle collides
                with an already registered one
        """
        if self._plan is not None:
            return list(self._plan)

        if build_info_asset is not None:
            path = normalize_asset_path(build_info_asset)
            label = self.bundle_label(self.build_info_asset_name)
            record = self.arena.add_asset(AssetRecord(path=path, addressable_name=path))
            self.arena.add_bundle(BundleRecord(label=label))
            self.arena.assign(record, label)
            self.metadata_label = label

        plan: list[BundleBuildUnit] = []
        for bundle in self.arena.bundles():
            records = [
                record
                for record in (self.arena.get_asset(path) for path in bundle.asset_paths)
                if record is not None
            ]
            plan.append(
                BundleBuildUnit(
                    label=bundle.label,
                    variant=bundle.variant,
                    asset_paths=tuple(r.path for r in records),
                    addressable_names=tuple(r.addressable_name for r in records),
                    uncompressed=any(r.is_media for r in records),
                )
            )

        total_assets = sum(len(unit.asset_paths) for unit in plan)
        logger.info("Build plan has %d bundles holding %d assets", len(plan), total_assets)
        self._plan = plan
        return list(plan)
