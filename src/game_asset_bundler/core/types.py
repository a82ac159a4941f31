"""Type definitions for bundle build documents.

This module defines TypedDict classes that mirror the JSON schemas
shipped in the package's schemas/ directory.
"""

from typing import TypedDict


class CollectorEntry(TypedDict, total=False):
    """One collection rule as written in the settings file."""

    collect_folder_path: str  # Folder or explicit asset path, project-relative
    collect_rule: str  # "collect" or "ignore"
    build_rule: str  # "by_folder_path", "by_file_path" or "by_const_name"
    const_name: str  # Shared label for "by_const_name"


class BlackListEntry(TypedDict, total=False):
    """Postfixes and file names that never participate in a build."""

    postfixes: list[str]  # Extensions including the dot, e.g. ".cs"
    file_names: list[str]  # Exact file names, e.g. "Thumbs.db"


class SettingsDocument(TypedDict, total=False):
    """Complete collection settings document."""

    asset_root: str
    build_info_folder: str
    dependency_naming: str
    media_postfixes: list[str]
    blacklist: BlackListEntry
    collectors: list[CollectorEntry]


class BuildAssetInfo(TypedDict):
    """Asset to bundle mapping entry inside the build-info record."""

    asset_path: str  # Lowercased asset path
    bundle_name: str  # Bundle label with platform postfix
    bundle_variant: str  # Variant, empty when unused


class BuildInfoDocument(TypedDict):
    """Self-describing build-info record packed into the metadata bundle."""

    platform: str
    postfix: str
    assets: list[BuildAssetInfo]
