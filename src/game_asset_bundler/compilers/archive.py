"""Shared implementation for archive-based bundle compilers.

Both shipped backends write one archive per bundle, a ``.manifest``
sidecar describing it, and an incremental build cache. They differ only
in archive format, which subclasses supply via ``_write_archive``.
"""

import hashlib
import json
import logging
from abc import abstractmethod
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from ..core.paths import normalize_asset_path
from ..core.records import BundleBuildUnit
from ..errors import BuildError, CompileFailure, DependencyQueryError
from ..settings import BuildParameters, Compression
from ..sources.base import AssetGraph
from ..utils import write_json, write_text
from .base import BundleCompiler, CompileResult

logger = logging.getLogger(__name__)

CACHE_FILE_NAME = "buildcache.json"
BUNDLE_MANIFEST_SUFFIX = ".manifest"
TYPE_TREE_ENTRY = "__typetree__.json"
HASH_LENGTH = 8


class ArchiveBundleCompiler(BundleCompiler):
    """Base class for compilers that pack each bundle into one archive."""

    def __init__(self, graph: AssetGraph):
        """Initialize the compiler.

        Args:
            graph: Asset graph used to read asset bytes and dependencies
        """
        self.graph = graph

    @abstractmethod
    def _write_archive(
        self,
        entries: list[tuple[str, bytes]],
        compression: Compression,
    ) -> bytes:
        """Serialize archive entries into bundle bytes.

        Output must be a pure function of the arguments so unchanged
        bundles hash identically across builds.
        """
        pass

    def compile(
        self,
        units: Sequence[BundleBuildUnit],
        parameters: BuildParameters,
    ) -> CompileResult:
        try:
            return self._compile(units, parameters)
        except (BuildError, OSError) as e:
            logger.error("%s compiler failed: %s", self.name, e)
            return CompileResult.failure(f"{self.name} compiler failed: {e}")

    def _compile(
        self,
        units: Sequence[BundleBuildUnit],
        parameters: BuildParameters,
    ) -> CompileResult:
        output_dir = parameters.output_dir
        output_dir.mkdir(parents=True, exist_ok=True)

        previous = self._load_cache(output_dir)
        cache = previous if parameters.use_cache else {}

        # Every member must exist before the dependency pass queries it
        unit_sources = {unit.bundle_name: self._sources(unit) for unit in units}

        owners = {path: unit.bundle_name for unit in units for path in unit.asset_paths}
        result = CompileResult(success=True)
        for unit in units:
            result.bundle_dependencies[unit.bundle_name] = self._bundle_dependencies(unit, owners)

        current: dict[str, dict[str, Any]] = {}
        for unit in units:
            name = unit.bundle_name
            sources = unit_sources[name]
            dependencies = result.bundle_dependencies[name]
            fingerprint = self._fingerprint(unit, sources, dependencies, parameters)

            type_tree = not parameters.disable_write_type_tree
            cached = cache.get(name)
            if (
                cached is not None
                and cached.get("fingerprint") == fingerprint
                and (parameters.ignore_type_tree_changes or cached.get("type_tree") == type_tree)
                and (output_dir / cached.get("file", "")).is_file()
            ):
                relative = cached["file"]
                # The reused output keeps whatever type tree it was built with
                type_tree = cached.get("type_tree", type_tree)
                result.reused_bundles.append(name)
                logger.debug("Reusing cached bundle %s", relative)
            else:
                relative = self._build_bundle(unit, sources, dependencies, parameters, output_dir)

            result.output_files[name] = relative
            current[name] = {"fingerprint": fingerprint, "file": relative, "type_tree": type_tree}

        self._remove_stale(previous, current, output_dir)
        write_json(current, output_dir / CACHE_FILE_NAME)
        logger.info(
            "%s compiler built %d bundles (%d reused from cache)",
            self.name,
            len(units),
            len(result.reused_bundles),
        )
        return result

    def _sources(self, unit: BundleBuildUnit) -> list[tuple[str, Path]]:
        sources: list[tuple[str, Path]] = []
        for asset_path, addressable in zip(unit.asset_paths, unit.addressable_names):
            location = self.graph.resolve(asset_path)
            if location is None or not Path(location).is_file():
                raise CompileFailure(f"Asset source not found: {asset_path}")
            sources.append((addressable, Path(location)))
        return sources

    def _bundle_dependencies(self, unit: BundleBuildUnit, owners: dict[str, str]) -> list[str]:
        """Bundles holding assets referenced by this bundle's members.

        References through assets that no bundle owns are followed, since
        such assets get packed implicitly alongside their referrer.
        """
        found: list[str] = []
        seen = set(unit.asset_paths)
        pending = list(unit.asset_paths)
        while pending:
            asset = pending.pop(0)
            try:
                direct = self.graph.direct_dependencies_of(asset)
            except DependencyQueryError:
                if asset in owners:
                    raise
                logger.debug("No dependency data for implicit asset %s", asset)
                continue
            for dep in direct:
                dep = normalize_asset_path(dep)
                if dep in seen:
                    continue
                seen.add(dep)
                owner = owners.get(dep)
                if owner is None:
                    pending.append(dep)
                elif owner != unit.bundle_name and owner not in found:
                    found.append(owner)
        return found

    def _fingerprint(
        self,
        unit: BundleBuildUnit,
        sources: list[tuple[str, Path]],
        dependencies: list[str],
        parameters: BuildParameters,
    ) -> str:
        digest = hashlib.sha256()
        settings: dict[str, Any] = {
            "compiler": self.name,
            "compression": parameters.compression.value,
            "append_hash": parameters.append_hash,
            "uncompressed": unit.uncompressed,
            "dependencies": dependencies,
        }
        digest.update(json.dumps(settings, sort_keys=True).encode("utf-8"))
        for addressable, location in sources:
            digest.update(addressable.encode("utf-8"))
            digest.update(b"\0")
            digest.update(location.read_bytes())
            digest.update(b"\0")
        return digest.hexdigest()

    def _build_bundle(
        self,
        unit: BundleBuildUnit,
        sources: list[tuple[str, Path]],
        dependencies: list[str],
        parameters: BuildParameters,
        output_dir: Path,
    ) -> str:
        entries = [(addressable, location.read_bytes()) for addressable, location in sources]
        if not parameters.disable_write_type_tree:
            type_tree = {addressable: location.suffix.lower() for addressable, location in sources}
            entries.append((TYPE_TREE_ENTRY, json.dumps(type_tree, sort_keys=True).encode("utf-8")))

        compression = Compression.UNCOMPRESSED if unit.uncompressed else parameters.compression
        payload = self._write_archive(entries, compression)
        content_hash = hashlib.md5(payload).hexdigest()

        relative = unit.bundle_name
        if parameters.append_hash:
            relative = f"{relative}_{content_hash[:HASH_LENGTH]}"

        target = output_dir / relative
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(payload)

        sidecar = {
            "bundle": unit.bundle_name,
            "compiler": self.name,
            "compression": compression.value,
            "hash": content_hash,
            "assets": list(unit.asset_paths),
            "dependencies": dependencies,
        }
        write_text(
            output_dir / f"{relative}{BUNDLE_MANIFEST_SUFFIX}",
            json.dumps(sidecar, indent=2) + "\n",
        )
        logger.debug("Built bundle %s (%d bytes)", relative, len(payload))
        return relative

    def _load_cache(self, output_dir: Path) -> dict[str, dict[str, Any]]:
        cache_path = output_dir / CACHE_FILE_NAME
        if not cache_path.is_file():
            return {}
        try:
            with cache_path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError:
            logger.warning("Ignoring unreadable build cache %s", cache_path)
            return {}
        return data if isinstance(data, dict) else {}

    def _remove_stale(
        self,
        previous: dict[str, dict[str, Any]],
        current: dict[str, dict[str, Any]],
        output_dir: Path,
    ) -> None:
        live = {entry["file"] for entry in current.values()}
        for entry in previous.values():
            relative = entry.get("file")
            if not relative or relative in live:
                continue
            for stale in (output_dir / relative, output_dir / f"{relative}{BUNDLE_MANIFEST_SUFFIX}"):
                if stale.is_file():
                    stale.unlink()
                    logger.debug("Removed stale output %s", stale)
