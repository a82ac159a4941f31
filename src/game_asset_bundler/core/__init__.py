"""Core records, types and validation shared by every build stage.

This package contains the pass-scoped record arena, path helpers,
TypedDict document shapes and schema validation.
"""

from .paths import is_under, normalize_asset_path, validate_path_safety
from .records import AssetRecord, BuildArena, BundleBuildUnit, BundleKey, BundleRecord
from .types import BuildAssetInfo, BuildInfoDocument, SettingsDocument
from .validator import (
    validate_build_info,
    validate_settings,
    validate_settings_with_error_details,
)

__all__ = [
    "AssetRecord",
    "BuildArena",
    "BuildAssetInfo",
    "BuildInfoDocument",
    "BundleBuildUnit",
    "BundleKey",
    "BundleRecord",
    "SettingsDocument",
    "is_under",
    "normalize_asset_path",
    "validate_build_info",
    "validate_path_safety",
    "validate_settings",
    "validate_settings_with_error_details",
]
