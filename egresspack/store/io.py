"""Artifact file read/write utilities."""

from __future__ import annotations

from hashlib import sha256
import json
import logging
import os
from pathlib import Path
import tempfile
from typing import Any

from egresspack.core.canonical import canonical_json
from egresspack.core.exceptions import DuplicateEntryError
from egresspack.core.models import Artifact
from egresspack.store.exceptions import (
    ArtifactChecksumError,
    ArtifactValidationError,
    StoreIOError,
)
from egresspack.store.legacy import artifact_from_legacy, is_legacy_layout
from egresspack.store.schema import DEFAULT_ARTIFACT_VERSION, validate_artifact

logger = logging.getLogger(__name__)


def compute_artifact_checksum(envelope_without_checksum: dict[str, Any]) -> str:
    payload = canonical_json(envelope_without_checksum)
    digest = sha256(payload.encode("utf-8")).hexdigest()
    return f"sha256:{digest}"


def build_artifact_envelope(
    artifact: Artifact,
    *,
    session_id: str,
    version: str = DEFAULT_ARTIFACT_VERSION,
    metadata: dict[str, Any] | None = None,
) -> dict[str, Any]:
    envelope: dict[str, Any] = {
        "version": version,
        "metadata": {
            **(metadata or {}),
            "session_id": session_id,
        },
        "artifact": artifact.to_dict(),
    }
    envelope["checksum"] = compute_artifact_checksum(envelope)
    validate_artifact(envelope)
    return envelope


def render_envelope(envelope: dict[str, Any]) -> str:
    # Entry order is significant, so only object keys are sorted.
    return json.dumps(envelope, indent=2, ensure_ascii=True, sort_keys=True) + "\n"


def atomic_write_text(target: Path, text: str) -> None:
    """Write `text` to `target` through a temporary sibling file and a rename."""
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        fd, temp_path = tempfile.mkstemp(
            suffix=".tmp",
            prefix=f".{target.stem}.",
            dir=target.parent,
        )
    except OSError as error:
        raise StoreIOError(f"cannot prepare artifact directory ({error})", target.parent) from error

    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(text)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(temp_path, target)
    except OSError as error:
        try:
            os.unlink(temp_path)
        except OSError:
            pass
        raise StoreIOError(f"cannot write artifact file ({error})", target) from error


def write_artifact_file(
    artifact: Artifact,
    path: str | Path,
    *,
    session_id: str,
    metadata: dict[str, Any] | None = None,
) -> dict[str, Any]:
    envelope = build_artifact_envelope(artifact, session_id=session_id, metadata=metadata)
    target = Path(path)
    atomic_write_text(target, render_envelope(envelope))
    logger.debug("wrote artifact %s (%d entries) to %s", artifact.name, len(artifact), target)
    return envelope


def read_raw_json(path: str | Path) -> Any:
    target = Path(path)
    try:
        raw_text = target.read_text(encoding="utf-8")
    except UnicodeDecodeError as error:
        raise ArtifactValidationError(f"Artifact is not valid UTF-8 text: {target}") from error
    except OSError as error:
        raise StoreIOError(f"cannot read artifact file ({error})", target) from error

    try:
        return json.loads(raw_text)
    except json.JSONDecodeError as error:
        raise ArtifactValidationError(f"Artifact is not valid JSON: {target} ({error})") from error


def verify_artifact_envelope(envelope: Any, *, path: str | Path = "<memory>") -> dict[str, Any]:
    """Validate schema and checksum of a current-format envelope."""
    if not isinstance(envelope, dict):
        raise ArtifactValidationError(f"Artifact must be a JSON object: {path}")

    validate_artifact(envelope)

    checksum_actual = envelope.get("checksum")
    checksum_expected = compute_artifact_checksum(
        {
            "version": envelope["version"],
            "metadata": envelope["metadata"],
            "artifact": envelope["artifact"],
        }
    )
    if checksum_actual != checksum_expected:
        raise ArtifactChecksumError(
            f"Artifact checksum mismatch in {path}: "
            f"expected {checksum_expected}, got {checksum_actual}"
        )
    return envelope


def read_artifact_file(path: str | Path) -> Artifact:
    """Load a sealed artifact, migrating the legacy layout in memory."""
    target = Path(path)
    raw = read_raw_json(target)

    if is_legacy_layout(raw):
        logger.debug("reading legacy artifact layout from %s", target)
        return artifact_from_legacy(raw, name=target.stem)

    envelope = verify_artifact_envelope(raw, path=target)
    try:
        artifact = Artifact.from_dict(envelope["artifact"])
    except DuplicateEntryError as error:
        raise ArtifactValidationError(f"Invalid artifact {target}: {error}") from error
    logger.debug("read artifact %s (%d entries) from %s", artifact.name, len(artifact), target)
    return artifact
