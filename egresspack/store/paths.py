"""Name validation and path resolution for the artifact store layout."""

from __future__ import annotations

from pathlib import Path, PurePosixPath

from egresspack.exceptions import InvalidNameError

ARTIFACT_SUFFIX = ".json"


def validate_artifact_name(name: str) -> str:
    """Return `name` if it is usable as an artifact file stem."""
    if not isinstance(name, str):
        raise InvalidNameError("artifact name must be a string")
    if not name.strip():
        raise InvalidNameError("artifact name must be non-empty")
    if name != name.strip():
        raise InvalidNameError(f"artifact name must not have surrounding whitespace: {name!r}")
    if "/" in name or "\\" in name or "\x00" in name:
        raise InvalidNameError(f"artifact name must not include path separators: {name!r}")
    if name.startswith("."):
        raise InvalidNameError(f"artifact name must not start with a dot: {name!r}")
    return name


def validate_session_id(session_id: str) -> str:
    """Return `session_id` if every `/`-separated segment is a safe directory name."""
    if not isinstance(session_id, str) or not session_id.strip():
        raise InvalidNameError("session id must be a non-empty string")
    if "\\" in session_id or "\x00" in session_id:
        raise InvalidNameError(f"session id must use '/' separators only: {session_id!r}")

    segments = session_id.split("/")
    for segment in segments:
        if not segment or segment != segment.strip():
            raise InvalidNameError(f"session id has an empty or padded segment: {session_id!r}")
        if segment in {".", ".."}:
            raise InvalidNameError(f"session id must not contain relative segments: {session_id!r}")
    return session_id


def session_from_module(module_name: str) -> str:
    """Derive a session id from a dotted module path (`tests.numbers` -> `tests/numbers`)."""
    return validate_session_id(module_name.replace(".", "/"))


def artifact_path(directory: str | Path, session_id: str, name: str) -> Path:
    """Resolve `<directory>/<session_id>/<name>.json`."""
    validate_session_id(session_id)
    validate_artifact_name(name)
    return Path(directory).joinpath(*PurePosixPath(session_id).parts) / f"{name}{ARTIFACT_SUFFIX}"


def session_directory(directory: str | Path, session_id: str) -> Path:
    validate_session_id(session_id)
    return Path(directory).joinpath(*PurePosixPath(session_id).parts)
