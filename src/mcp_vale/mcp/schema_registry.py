"""Utility to surface the published response schemas and examples."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Mapping

from jsonschema import Draft7Validator, ValidationError

PACKAGE_ROOT = Path(__file__).resolve().parents[1]
SCHEMA_DIR = PACKAGE_ROOT / "schemas"
EXAMPLE_DIR = SCHEMA_DIR / "examples"

SchemaValidationError = ValidationError
"""Alias for jsonschema.ValidationError.
Keeps callers unaware of the implementation.
"""

SCHEMA_FILES = {
    "vale_status_response_v0.1": "vale_status_response_schema_v0.1.json",
    "vale_not_installed_response_v0.1": (
        "vale_not_installed_response_schema_v0.1.json"
    ),
    "check_file_structured_v0.1": "check_file_structured_schema_v0.1.json",
    "error_response_v0.1": "error_response_schema_v0.1.json",
}

EXAMPLE_FILES = {
    "vale_status_response_example_min": "vale_status_response_example_min.json",
    "vale_not_installed_response_example_min": (
        "vale_not_installed_response_example_min.json"
    ),
    "check_file_structured_example_min": "check_file_structured_example_min.json",
    "error_response_example_min": "error_response_example_min.json",
}

_SCHEMAS: dict[str, Mapping[str, Any]] = {}
_EXAMPLES: dict[str, Mapping[str, Any]] = {}


def _load_json_file(path: Path) -> Mapping[str, Any]:
    with path.open("r", encoding="utf-8") as handle:
        return json.load(handle)


def get_schema(name: str) -> Mapping[str, Any]:
    """Return the JSON schema with the given registry name."""

    if name not in _SCHEMAS:
        _SCHEMAS[name] = _load_json_file(SCHEMA_DIR / SCHEMA_FILES[name])
    return _SCHEMAS[name]


def get_example(name: str) -> Mapping[str, Any]:
    """Return a representative example payload by name."""

    if name not in _EXAMPLES:
        _EXAMPLES[name] = _load_json_file(EXAMPLE_DIR / EXAMPLE_FILES[name])
    return _EXAMPLES[name]


def validate(name: str, instance: Any) -> None:
    """Validate an instance against a named schema."""

    Draft7Validator(get_schema(name)).validate(instance)
