"""JSON schema and validation for persisted artifact files."""

from __future__ import annotations

import re
from typing import Any

from jsonschema import Draft202012Validator

from egresspack.core.types import ENTRY_KINDS
from egresspack.store.exceptions import ArtifactValidationError

SUPPORTED_MAJOR_VERSION = 1
DEFAULT_ARTIFACT_VERSION = "1.0"

_VERSION_PATTERN = re.compile(r"^(?P<major>\d+)\.(?P<minor>\d+)$")

ARTIFACT_SCHEMA_V1: dict[str, Any] = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "title": "Egress Artifact",
    "type": "object",
    "required": ["version", "metadata", "artifact", "checksum"],
    "additionalProperties": False,
    "properties": {
        "version": {
            "type": "string",
            "pattern": r"^\d+\.\d+$",
            "description": "Major.minor artifact file format version",
        },
        "metadata": {
            "type": "object",
            "required": ["session_id"],
            "additionalProperties": True,
            "properties": {
                "session_id": {"type": "string"},
            },
        },
        "artifact": {
            "type": "object",
            "required": ["name", "entries"],
            "additionalProperties": False,
            "properties": {
                "name": {"type": "string", "minLength": 1},
                "entries": {
                    "type": "array",
                    "items": {
                        "type": "object",
                        "required": ["name", "value", "kind"],
                        "additionalProperties": False,
                        "properties": {
                            "name": {"type": "string", "minLength": 1},
                            "value": {"type": "string"},
                            "kind": {"type": "string", "enum": list(ENTRY_KINDS)},
                        },
                    },
                },
            },
        },
        "checksum": {
            "type": "string",
            "pattern": r"^sha256:[0-9a-f]{64}$",
        },
    },
}

_VALIDATOR = Draft202012Validator(ARTIFACT_SCHEMA_V1)


def parse_artifact_version(version: str) -> tuple[int, int]:
    """Parse major/minor artifact version."""
    match = _VERSION_PATTERN.fullmatch(version.strip())
    if match is None:
        raise ArtifactValidationError(f"Invalid artifact version: {version}")
    return int(match.group("major")), int(match.group("minor"))


def is_version_compatible(version: str) -> bool:
    """Return compatibility result for the current reader contract."""
    try:
        major, _ = parse_artifact_version(version)
    except ArtifactValidationError:
        return False
    return major == SUPPORTED_MAJOR_VERSION


def validate_artifact(envelope: dict[str, Any]) -> None:
    """Validate artifact file shape and supported version contract."""
    version = str(envelope.get("version", "")).strip()
    major, _minor = parse_artifact_version(version)

    if major != SUPPORTED_MAJOR_VERSION:
        raise ArtifactValidationError(
            "Unsupported artifact major version: "
            f"{version}. Supported major: {SUPPORTED_MAJOR_VERSION}.x"
        )

    errors = sorted(_VALIDATOR.iter_errors(envelope), key=lambda err: list(err.path))
    if errors:
        first = errors[0]
        location = ".".join(str(part) for part in first.path) or "$"
        raise ArtifactValidationError(f"Invalid artifact at {location}: {first.message}")
