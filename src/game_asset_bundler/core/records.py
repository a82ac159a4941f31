"""Build-pass records and the arena that deduplicates them.

An arena lives for exactly one build pass. It owns one AssetRecord per
canonical asset path and one BundleRecord per (label, variant) key, and
remembers the order in which each was first discovered so that the
build plan, manifest and ledger come out in a stable order.
"""

from dataclasses import dataclass, field
from typing import NamedTuple

from ..errors import DuplicateRegistrationError


class BundleKey(NamedTuple):
    """Identity of a bundle within one build pass."""

    label: str
    variant: str = ""


@dataclass
class AssetRecord:
    """A unique asset discovered during closure expansion.

    Attributes:
        path: Canonical project-relative path
        addressable_name: Identifier used to request the asset at runtime
        bundle_label: Label of the owning bundle (back-reference only)
        variant: Variant of the owning bundle
        ref_count: Number of distinct roots that reached this asset as a dependency
        is_collected: True when a collection rule matched the asset directly
        is_media: True for media that must be stored uncompressed
    """

    path: str
    addressable_name: str
    bundle_label: str = ""
    variant: str = ""
    ref_count: int = 0
    is_collected: bool = False
    is_media: bool = False

    @property
    def bundle_key(self) -> BundleKey:
        return BundleKey(self.bundle_label, self.variant)


@dataclass
class BundleRecord:
    """A unique (label, variant) bundle and its member assets."""

    label: str
    variant: str = ""
    asset_paths: list[str] = field(default_factory=list)

    @property
    def key(self) -> BundleKey:
        return BundleKey(self.label, self.variant)

    def add_asset(self, asset_path: str) -> bool:
        """Add a member asset, keeping first-discovery order.

        Returns:
            False if the asset was already a member
        """
        if asset_path in self.asset_paths:
            return False
        self.asset_paths.append(asset_path)
        return True


@dataclass(frozen=True)
class BundleBuildUnit:
    """Immutable build-plan entry handed to the bundle compiler.

    ``uncompressed`` is set when a member asset is media that must not be
    compressed regardless of the build's compression choice.
    """

    label: str
    variant: str
    asset_paths: tuple[str, ...]
    addressable_names: tuple[str, ...]
    uncompressed: bool = False

    @property
    def bundle_name(self) -> str:
        """File name of the bundle as emitted by the compiler (before hash append)."""
        if self.variant:
            return f"{self.label}.{self.variant}"
        return self.label


class BuildArena:
    """Pass-scoped store of asset and bundle records.

    Lookups are plain dictionary reads; discovery order is recorded in
    separate sequences so output order never depends on map internals.
    """

    def __init__(self) -> None:
        self._assets: dict[str, AssetRecord] = {}
        self._asset_order: list[str] = []
        self._bundles: dict[BundleKey, BundleRecord] = {}
        self._bundle_order: list[BundleKey] = []
        self._reach_pairs: set[tuple[str, str]] = set()

    def __len__(self) -> int:
        return len(self._assets)

    def get_asset(self, path: str) -> AssetRecord | None:
        return self._assets.get(path)

    def add_asset(self, record: AssetRecord) -> AssetRecord:
        """Register a new asset record.

        Raises:
            DuplicateRegistrationError: If the path is already registered
        """
        if record.path in self._assets:
            raise DuplicateRegistrationError("asset", record.path)
        self._assets[record.path] = record
        self._asset_order.append(record.path)
        return record

    def get_bundle(self, label: str, variant: str = "") -> BundleRecord | None:
        return self._bundles.get(BundleKey(label, variant))

    def add_bundle(self, record: BundleRecord) -> BundleRecord:
        """Register a new bundle record.

        Raises:
            DuplicateRegistrationError: If the (label, variant) key is already
                registered. The existing record is left untouched.
        """
        key = record.key
        if key in self._bundles:
            raise DuplicateRegistrationError("bundle", key)
        self._bundles[key] = record
        self._bundle_order.append(key)
        return record

    def assign(self, asset: AssetRecord, label: str, variant: str = "") -> BundleRecord:
        """Place an asset into the bundle for (label, variant), creating it on first use."""
        bundle = self.get_bundle(label, variant)
        if bundle is None:
            bundle = self.add_bundle(BundleRecord(label=label, variant=variant))
        asset.bundle_label = label
        asset.variant = variant
        bundle.add_asset(asset.path)
        return bundle

    def record_reach(self, root: str, asset: AssetRecord) -> bool:
        """Count a root reaching an asset as a dependency, once per distinct root.

        Returns:
            True if this (root, asset) pair was new
        """
        pair = (root, asset.path)
        if pair in self._reach_pairs:
            return False
        self._reach_pairs.add(pair)
        asset.ref_count += 1
        return True

    def assets(self) -> list[AssetRecord]:
        """All asset records in discovery order."""
        return [self._assets[path] for path in self._asset_order]

    def bundles(self) -> list[BundleRecord]:
        """All bundle records in discovery order."""
        return [self._bundles[key] for key in self._bundle_order]

    def clear(self) -> None:
        """Discard all state from the current pass."""
        self._assets.clear()
        self._asset_order.clear()
        self._bundles.clear()
        self._bundle_order.clear()
        self._reach_pairs.clear()
