"""Build configuration: collection settings and build parameters.

Collection settings are read from a JSON document validated against
schemas/settings.schema.json. Build parameters describe one invocation
(target platform, output root, compression and rebuild flags).
"""

import json
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

from .core.paths import normalize_asset_path
from .core.types import CollectorEntry, SettingsDocument
from .core.validator import validate_settings_with_error_details
from .errors import ConfigurationError

DEFAULT_ASSET_ROOT = "Assets"
DEFAULT_MEDIA_POSTFIXES = (".mp4", ".mov", ".webm", ".avi", ".m4v", ".ogv")


class CollectRule(str, Enum):
    """Whether a matching rule collects assets or excludes them."""

    COLLECT = "collect"
    IGNORE = "ignore"


class NamingPolicy(str, Enum):
    """How a bundle label is derived for a matched asset."""

    BY_FOLDER_PATH = "by_folder_path"
    BY_FILE_PATH = "by_file_path"
    BY_CONST_NAME = "by_const_name"


class BuildTarget(str, Enum):
    """Supported build platforms."""

    NONE = "none"
    WINDOWS = "windows"
    WINDOWS64 = "windows64"
    ANDROID = "android"
    IOS = "ios"

    @property
    def postfix(self) -> str:
        """Bundle postfix shared by every bundle built for this platform.

        Raises:
            ConfigurationError: If no platform is selected
        """
        try:
            return _PLATFORM_POSTFIXES[self]
        except KeyError:
            raise ConfigurationError(f"Unsupported build target: {self.value}") from None


_PLATFORM_POSTFIXES = {
    BuildTarget.WINDOWS: "pc",
    BuildTarget.WINDOWS64: "pc",
    BuildTarget.ANDROID: "android",
    BuildTarget.IOS: "ios",
}


class Compression(str, Enum):
    """Bundle compression choice, passed through to the compiler."""

    UNCOMPRESSED = "uncompressed"
    LZMA = "lzma"
    LZ4 = "lz4"


@dataclass(frozen=True)
class CollectionRule:
    """One configured collection rule.

    Attributes:
        path: Canonical folder or explicit file path the rule covers
        collect_rule: Whether matches are collected or ignored
        naming: Bundle naming policy for matches
        const_name: Shared label for NamingPolicy.BY_CONST_NAME
    """

    path: str
    collect_rule: CollectRule = CollectRule.COLLECT
    naming: NamingPolicy = NamingPolicy.BY_FOLDER_PATH
    const_name: str = ""

    def describe(self) -> str:
        line = (
            f"Directory : {self.path} || CollectRule : {self.collect_rule.value}"
            f" || BuildRule : {self.naming.value}"
        )
        if self.naming is NamingPolicy.BY_CONST_NAME:
            line += f" || ConstName : {self.const_name}"
        return line

    @classmethod
    def from_entry(cls, entry: CollectorEntry) -> "CollectionRule":
        naming = NamingPolicy(entry["build_rule"])
        const_name = entry.get("const_name", "")
        if naming is NamingPolicy.BY_CONST_NAME and not const_name:
            raise ConfigurationError(
                f"Collector {entry['collect_folder_path']} uses by_const_name without const_name"
            )
        return cls(
            path=normalize_asset_path(entry["collect_folder_path"]),
            collect_rule=CollectRule(entry.get("collect_rule", "collect")),
            naming=naming,
            const_name=const_name,
        )


@dataclass(frozen=True)
class BlackList:
    """Postfix and file-name filters applied before any rule."""

    postfixes: frozenset[str] = frozenset()
    file_names: frozenset[str] = frozenset()

    def is_black_postfix(self, postfix: str) -> bool:
        return postfix.lower() in self.postfixes

    def is_black_file_name(self, file_name: str) -> bool:
        return file_name in self.file_names


@dataclass(frozen=True)
class CollectSettings:
    """Validated collection settings for a build."""

    rules: tuple[CollectionRule, ...]
    asset_root: str = DEFAULT_ASSET_ROOT
    blacklist: BlackList = field(default_factory=BlackList)
    build_info_folder: str = ""
    dependency_naming: NamingPolicy = NamingPolicy.BY_FILE_PATH
    media_postfixes: frozenset[str] = frozenset(DEFAULT_MEDIA_POSTFIXES)

    @property
    def info_folder(self) -> str:
        return self.build_info_folder or f"{self.asset_root}/BuildInfo"

    def collect_folders(self) -> list[str]:
        """Paths of all collecting rules, in configured order."""
        return [rule.path for rule in self.rules if rule.collect_rule is CollectRule.COLLECT]

    @classmethod
    def from_document(cls, document: SettingsDocument) -> "CollectSettings":
        """Build settings from a raw document after schema validation.

        Raises:
            ConfigurationError: If the document fails validation
        """
        is_valid, error_msg = validate_settings_with_error_details(document)
        if not is_valid:
            raise ConfigurationError(error_msg)

        blacklist = document.get("blacklist", {})
        asset_root = normalize_asset_path(document.get("asset_root", DEFAULT_ASSET_ROOT))
        return cls(
            rules=tuple(CollectionRule.from_entry(entry) for entry in document["collectors"]),
            asset_root=asset_root,
            blacklist=BlackList(
                postfixes=frozenset(p.lower() for p in blacklist.get("postfixes", [])),
                file_names=frozenset(blacklist.get("file_names", [])),
            ),
            build_info_folder=normalize_asset_path(document.get("build_info_folder", "")),
            dependency_naming=NamingPolicy(document.get("dependency_naming", "by_file_path")),
            media_postfixes=frozenset(
                p.lower() for p in document.get("media_postfixes", DEFAULT_MEDIA_POSTFIXES)
            ),
        )


def load_settings(path: Path) -> CollectSettings:
    """Load and validate a collection settings file.

    Args:
        path: Path to the JSON settings file

    Returns:
        Parsed CollectSettings

    Raises:
        ConfigurationError: If the file is missing, unreadable or invalid
    """
    if not path.exists():
        raise ConfigurationError(f"Settings file not found: {path}")
    try:
        with path.open("r", encoding="utf-8") as f:
            document: Any = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Settings file is not valid JSON: {path}: {e}") from e
    return CollectSettings.from_document(document)


@dataclass(frozen=True)
class BuildParameters:
    """Parameters of one build invocation.

    Compression and the rebuild/hash/type-tree flags are handed to the
    bundle compiler verbatim and recorded in the build manifest.
    """

    target: BuildTarget
    output_root: str | Path | None
    compression: Compression = Compression.UNCOMPRESSED
    force_rebuild: bool = False
    append_hash: bool = False
    disable_write_type_tree: bool = False
    ignore_type_tree_changes: bool = False
    strict_dependencies: bool = False
    hash_workers: int = 4

    @property
    def use_cache(self) -> bool:
        """Whether the compiler may reuse outputs from a previous build."""
        return not self.force_rebuild

    @property
    def postfix(self) -> str:
        return self.target.postfix

    @property
    def has_output_root(self) -> bool:
        """Whether an output root was given.

        None, a blank string and Path("") all mean "no output". Path("")
        collapses to ".", so an output in the working directory must be
        spelled as an explicit path.
        """
        if self.output_root is None:
            return False
        return str(self.output_root).strip() not in ("", ".")

    @property
    def output_dir(self) -> Path:
        """Platform output directory, <output_root>/<platform>."""
        if not self.has_output_root:
            raise ConfigurationError("Output directory cannot be empty")
        return Path(self.output_root) / self.target.value

    def describe(self) -> list[str]:
        return [
            f"CompressOption: {self.compression.value}",
            f"ForceRebuild: {self.force_rebuild}",
            f"AppendHash: {self.append_hash}",
            f"DisableWriteTypeTree: {self.disable_write_type_tree}",
            f"IgnoreTypeTreeChanges: {self.ignore_type_tree_changes}",
        ]
