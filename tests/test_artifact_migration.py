import json
from pathlib import Path

import pytest

from egresspack.core import Artifact
from egresspack.store import (
    ArtifactMigrationError,
    ArtifactStore,
    ArtifactValidationError,
    NOT_FOUND,
    build_artifact_envelope,
    is_legacy_layout,
    migrate_artifact_envelope,
    migrate_artifact_file,
    read_artifact_file,
    validate_artifact,
)

LEGACY_BASIC_ARITHMETIC = {
    "1 + 1 (serde)": {"Json": 2},
    "1 + 1 (display)": {"Str": "2"},
    "payload": {"Json": {"b": [1, 2], "a": None}},
}


def _write_legacy(path: Path, payload: dict) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
    return path


def test_legacy_layout_detection() -> None:
    assert is_legacy_layout(LEGACY_BASIC_ARITHMETIC) is True
    assert is_legacy_layout({}) is True
    assert is_legacy_layout({"version": "1.0"}) is False
    assert is_legacy_layout({"entry": "raw string"}) is False
    assert is_legacy_layout(["not", "a", "mapping"]) is False


def test_legacy_file_is_read_transparently(tmp_path: Path) -> None:
    path = _write_legacy(tmp_path / "basic_arithmetic.json", LEGACY_BASIC_ARITHMETIC)

    artifact = read_artifact_file(path)

    assert artifact.name == "basic_arithmetic"
    assert artifact.sealed is True
    assert [(entry.name, entry.kind, entry.value) for entry in artifact.entries] == [
        ("1 + 1 (serde)", "serialize", "2"),
        ("1 + 1 (display)", "display", "2"),
        ("payload", "serialize", '{\n  "a": null,\n  "b": [\n    1,\n    2\n  ]\n}'),
    ]


def test_legacy_baseline_compares_against_fresh_capture(tmp_path: Path) -> None:
    store = ArtifactStore(tmp_path)
    _write_legacy(store.baseline_path("numbers", "basic_arithmetic"), LEGACY_BASIC_ARITHMETIC)

    baseline = store.load_baseline("numbers", "basic_arithmetic")

    assert baseline is not NOT_FOUND
    fresh = Artifact(name="basic_arithmetic")
    fresh.insert_serialize("1 + 1 (serde)", 1 + 1)
    assert fresh.get("1 + 1 (serde)").value == baseline.get("1 + 1 (serde)").value


def test_legacy_bytes_entries_cannot_be_migrated(tmp_path: Path) -> None:
    path = _write_legacy(tmp_path / "blob.json", {"raw": {"Bytes": [0, 1, 2]}})

    with pytest.raises(ArtifactMigrationError, match="Bytes"):
        read_artifact_file(path)


def test_migrate_legacy_file_writes_current_format(tmp_path: Path) -> None:
    source = _write_legacy(tmp_path / "legacy" / "basic_arithmetic.json", LEGACY_BASIC_ARITHMETIC)
    out = tmp_path / "migrated" / "basic_arithmetic.json"

    summary = migrate_artifact_file(source, out, session_id="tests/numbers")

    assert summary.source_version == "0.1"
    assert summary.target_version == "1.0"
    assert summary.status == "migrated"
    assert summary.total_entries == 3
    assert summary.artifact_name == "basic_arithmetic"

    payload = json.loads(out.read_text(encoding="utf-8"))
    assert payload["version"] == "1.0"
    assert payload["metadata"] == {
        "migration_source_version": "0.1",
        "session_id": "tests/numbers",
    }
    assert read_artifact_file(out).to_dict() == read_artifact_file(source).to_dict()


def test_migrate_current_file_is_already_current(tmp_path: Path) -> None:
    artifact = Artifact(name="numbers")
    artifact.insert_serialize("answer", 42)
    artifact.seal()
    envelope = build_artifact_envelope(artifact, session_id="tests/numbers")

    migrated, summary = migrate_artifact_envelope(
        envelope,
        artifact_name="ignored",
        session_id="",
    )

    assert summary.status == "already_current"
    assert summary.artifact_name == "numbers"
    assert migrated == envelope


def test_migrate_rejects_unknown_documents() -> None:
    with pytest.raises(ArtifactMigrationError, match="neither"):
        migrate_artifact_envelope([1, 2, 3], artifact_name="x", session_id="")

    with pytest.raises(ArtifactMigrationError, match="unsupported source artifact version"):
        migrate_artifact_envelope({"version": "2.0"}, artifact_name="x", session_id="")


def test_schema_rejects_unsupported_major_version() -> None:
    artifact = Artifact(name="numbers")
    artifact.seal()
    envelope = build_artifact_envelope(artifact, session_id="s")
    envelope["version"] = "2.0"

    with pytest.raises(ArtifactValidationError, match="Unsupported artifact major version"):
        validate_artifact(envelope)


def test_schema_rejects_unknown_entry_kind() -> None:
    artifact = Artifact(name="numbers")
    artifact.insert_serialize("answer", 42)
    artifact.seal()
    envelope = build_artifact_envelope(artifact, session_id="s")
    envelope["artifact"]["entries"][0]["kind"] = "yaml"

    with pytest.raises(ArtifactValidationError, match="artifact.entries.0.kind"):
        validate_artifact(envelope)
