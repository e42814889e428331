"""Artifact migration utilities for file format upgrade paths."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Literal

from egresspack.core.models import Artifact
from egresspack.store.exceptions import ArtifactMigrationError
from egresspack.store.io import (
    atomic_write_text,
    build_artifact_envelope,
    read_raw_json,
    render_envelope,
    verify_artifact_envelope,
)
from egresspack.store.legacy import LEGACY_SOURCE_VERSION, artifact_from_legacy, is_legacy_layout
from egresspack.store.paths import validate_artifact_name
from egresspack.store.schema import DEFAULT_ARTIFACT_VERSION, parse_artifact_version

MigrationStatus = Literal["migrated", "already_current"]

SUPPORTED_SOURCE_VERSIONS = (LEGACY_SOURCE_VERSION, DEFAULT_ARTIFACT_VERSION)


@dataclass(frozen=True, slots=True)
class ArtifactMigrationResult:
    source_version: str
    target_version: str
    artifact_name: str
    total_entries: int
    status: MigrationStatus

    def to_dict(self) -> dict[str, Any]:
        return {
            "source_version": self.source_version,
            "target_version": self.target_version,
            "artifact_name": self.artifact_name,
            "total_entries": self.total_entries,
            "migration_status": self.status,
        }


def migrate_artifact_envelope(
    source: Any,
    *,
    artifact_name: str,
    session_id: str,
) -> tuple[dict[str, Any], ArtifactMigrationResult]:
    """Migrate a raw artifact document into the current file format."""
    if is_legacy_layout(source):
        source_version = LEGACY_SOURCE_VERSION
        artifact = artifact_from_legacy(source, name=validate_artifact_name(artifact_name))
        metadata: dict[str, Any] = {}
    elif isinstance(source, dict) and "version" in source:
        source_version = str(source.get("version", "")).strip()
        major, _minor = parse_artifact_version(source_version)
        if major != 1:
            raise ArtifactMigrationError(
                "unsupported source artifact version "
                f"'{source_version}'. Supported versions: {', '.join(SUPPORTED_SOURCE_VERSIONS)}"
            )
        envelope = verify_artifact_envelope(source)
        artifact = Artifact.from_dict(envelope["artifact"])
        metadata = {
            key: value
            for key, value in envelope["metadata"].items()
            if key != "session_id"
        }
        session_id = str(envelope["metadata"]["session_id"]) or session_id
    else:
        raise ArtifactMigrationError("source document is neither a legacy nor a versioned artifact")

    status: MigrationStatus = (
        "already_current" if source_version == DEFAULT_ARTIFACT_VERSION else "migrated"
    )
    if status == "migrated":
        metadata["migration_source_version"] = source_version

    migrated = build_artifact_envelope(artifact, session_id=session_id, metadata=metadata)
    summary = ArtifactMigrationResult(
        source_version=source_version,
        target_version=DEFAULT_ARTIFACT_VERSION,
        artifact_name=artifact.name,
        total_entries=len(artifact),
        status=status,
    )
    return migrated, summary


def migrate_artifact_file(
    source_path: str | Path,
    out_path: str | Path,
    *,
    session_id: str = "",
    artifact_name: str | None = None,
) -> ArtifactMigrationResult:
    """Migrate an artifact file to the current format and persist output.

    Legacy files carry no artifact name; the source file stem is used unless
    `artifact_name` is given.
    """
    source = Path(source_path)
    raw = read_raw_json(source)
    migrated, summary = migrate_artifact_envelope(
        raw,
        artifact_name=artifact_name or source.stem,
        session_id=session_id,
    )
    atomic_write_text(Path(out_path), render_envelope(migrated))
    return summary
