"""JSON Schema validation for settings and build-info documents.

This module loads the formal JSON Schemas shipped with the package and
validates documents before they are used or written.
"""

import json
from pathlib import Path
from typing import Any

import jsonschema
from jsonschema import ValidationError

from .types import BuildInfoDocument, SettingsDocument

# game_asset_bundler/core/validator.py -> game_asset_bundler/schemas/
SCHEMA_DIR = Path(__file__).parent.parent / "schemas"
SETTINGS_SCHEMA_PATH = SCHEMA_DIR / "settings.schema.json"
BUILD_INFO_SCHEMA_PATH = SCHEMA_DIR / "build_info.schema.json"


def load_schema(schema_path: Path) -> dict[str, Any]:
    """Load a JSON schema from disk.

    Args:
        schema_path: Path to the schema file

    Returns:
        Dictionary containing the JSON Schema.

    Raises:
        FileNotFoundError: If schema file doesn't exist
        json.JSONDecodeError: If schema is invalid JSON
    """
    if not schema_path.exists():
        raise FileNotFoundError(f"Schema file not found: {schema_path}")

    with schema_path.open("r", encoding="utf-8") as f:
        return json.load(f)  # type: ignore[no-any-return]


def validate_settings(settings: SettingsDocument) -> None:
    """Validate a collection settings document against its schema.

    Raises:
        ValidationError: If the document doesn't conform to the schema
    """
    jsonschema.validate(instance=settings, schema=load_schema(SETTINGS_SCHEMA_PATH))


def validate_build_info(build_info: BuildInfoDocument) -> None:
    """Validate a build-info record against its schema.

    Raises:
        ValidationError: If the record doesn't conform to the schema
    """
    jsonschema.validate(instance=build_info, schema=load_schema(BUILD_INFO_SCHEMA_PATH))


def describe_validation_error(error: ValidationError) -> str:
    """Build a user-friendly message from a jsonschema error."""
    error_path = " -> ".join(str(p) for p in error.path) if error.path else "root"
    error_msg = f"Validation error at {error_path}: {error.message}"

    if error.instance:
        error_msg += f"\nInvalid value: {error.instance}"

    return error_msg


def validate_settings_with_error_details(settings: SettingsDocument) -> tuple[bool, str | None]:
    """Validate a settings document and return detailed error information.

    Args:
        settings: The settings dictionary to validate

    Returns:
        Tuple of (is_valid, error_message). error_message is None if valid.
    """
    try:
        validate_settings(settings)
        return True, None
    except ValidationError as e:
        return False, describe_validation_error(e)
    except (FileNotFoundError, json.JSONDecodeError) as e:
        return False, f"Schema error: {e}"
