"""Artifact store subsystem for Egress."""

from egresspack.store.exceptions import (
    ArtifactChecksumError,
    ArtifactMigrationError,
    ArtifactNotSealedError,
    ArtifactValidationError,
    StoreError,
    StoreIOError,
)
from egresspack.store.io import (
    build_artifact_envelope,
    compute_artifact_checksum,
    read_artifact_file,
    verify_artifact_envelope,
    write_artifact_file,
)
from egresspack.store.legacy import LEGACY_SOURCE_VERSION, artifact_from_legacy, is_legacy_layout
from egresspack.store.migration import (
    ArtifactMigrationResult,
    SUPPORTED_SOURCE_VERSIONS,
    migrate_artifact_envelope,
    migrate_artifact_file,
)
from egresspack.store.paths import (
    session_from_module,
    validate_artifact_name,
    validate_session_id,
)
from egresspack.store.schema import (
    ARTIFACT_SCHEMA_V1,
    DEFAULT_ARTIFACT_VERSION,
    is_version_compatible,
    parse_artifact_version,
    validate_artifact,
)
from egresspack.store.store import (
    DEFAULT_ARTIFACT_DIR,
    DEFAULT_CURRENT_DIR,
    NOT_FOUND,
    ArtifactStore,
    NotFoundType,
)

__all__ = [
    "ArtifactStore",
    "NOT_FOUND",
    "NotFoundType",
    "DEFAULT_ARTIFACT_DIR",
    "DEFAULT_CURRENT_DIR",
    "ARTIFACT_SCHEMA_V1",
    "DEFAULT_ARTIFACT_VERSION",
    "parse_artifact_version",
    "is_version_compatible",
    "validate_artifact",
    "StoreError",
    "StoreIOError",
    "ArtifactValidationError",
    "ArtifactChecksumError",
    "ArtifactMigrationError",
    "ArtifactNotSealedError",
    "build_artifact_envelope",
    "compute_artifact_checksum",
    "verify_artifact_envelope",
    "write_artifact_file",
    "read_artifact_file",
    "LEGACY_SOURCE_VERSION",
    "SUPPORTED_SOURCE_VERSIONS",
    "is_legacy_layout",
    "artifact_from_legacy",
    "ArtifactMigrationResult",
    "migrate_artifact_envelope",
    "migrate_artifact_file",
    "validate_artifact_name",
    "validate_session_id",
    "session_from_module",
]
