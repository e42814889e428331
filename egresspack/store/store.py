"""Filesystem artifact store with separate current and baseline locations."""

from __future__ import annotations

from collections.abc import Iterable
import logging
from pathlib import Path
from typing import Final

from egresspack.core.models import Artifact
from egresspack.exceptions import EgressConfigError
from egresspack.store.exceptions import (
    ArtifactNotSealedError,
    ArtifactValidationError,
    StoreIOError,
)
from egresspack.store.io import atomic_write_text, read_artifact_file, write_artifact_file
from egresspack.store.paths import (
    ARTIFACT_SUFFIX,
    artifact_path,
    session_directory,
    validate_artifact_name,
)

logger = logging.getLogger(__name__)

DEFAULT_ARTIFACT_DIR = Path("egress/artifacts")
DEFAULT_CURRENT_DIR = Path("egress/current")


class NotFoundType:
    """Marker returned when no artifact file exists yet."""

    _instance: "NotFoundType | None" = None

    def __new__(cls) -> "NotFoundType":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "NOT_FOUND"

    def __bool__(self) -> bool:
        return False


NOT_FOUND: Final = NotFoundType()


class ArtifactStore:
    """Owns every read and write of artifact files under one root directory.

    Layout::

        <root>/<artifact_dir>/<session_id>/<name>.json   accepted baseline
        <root>/<current_dir>/<session_id>/<name>.json    latest run

    `save` only ever writes the current file. Baselines change through
    `accept` and `retire`.
    """

    def __init__(
        self,
        root: str | Path,
        *,
        artifact_dir: str | Path = DEFAULT_ARTIFACT_DIR,
        current_dir: str | Path = DEFAULT_CURRENT_DIR,
    ) -> None:
        self.root = Path(root)
        self.baseline_root = self.root / artifact_dir
        self.current_root = self.root / current_dir
        if self.baseline_root == self.current_root:
            raise EgressConfigError("baseline and current directories must differ")

    def __repr__(self) -> str:
        return f"ArtifactStore(root={str(self.root)!r})"

    def baseline_path(self, session_id: str, name: str) -> Path:
        return artifact_path(self.baseline_root, session_id, name)

    def current_path(self, session_id: str, name: str) -> Path:
        return artifact_path(self.current_root, session_id, name)

    def save(self, session_id: str, artifact: Artifact) -> Path:
        """Persist a sealed artifact as the session's current file."""
        if not artifact.sealed:
            raise ArtifactNotSealedError(
                f"artifact `{artifact.name}` must be sealed before it is saved"
            )
        target = self.current_path(session_id, artifact.name)
        write_artifact_file(artifact, target, session_id=session_id)
        return target

    def load_baseline(self, session_id: str, name: str) -> Artifact | NotFoundType:
        return self._load(self.baseline_path(session_id, name), name)

    def load_current(self, session_id: str, name: str) -> Artifact | NotFoundType:
        return self._load(self.current_path(session_id, name), name)

    def accept(self, session_id: str, name: str) -> Path:
        """Promote the current file to become the new baseline.

        The current file is re-validated first, then copied through a
        temporary file and an atomic rename so an interrupted promotion
        never leaves a half-written baseline.
        """
        source = self.current_path(session_id, name)
        if not source.exists():
            raise StoreIOError(f"no current artifact `{name}` to accept", source)

        self._load(source, name)
        try:
            text = source.read_text(encoding="utf-8")
        except OSError as error:
            raise StoreIOError(f"cannot read current artifact ({error})", source) from error

        target = self.baseline_path(session_id, name)
        atomic_write_text(target, text)
        logger.info("accepted artifact %s/%s as baseline %s", session_id, name, target)
        return target

    def retire(self, session_id: str, name: str) -> bool:
        """Delete the baseline (and any current file) of an artifact no longer produced."""
        removed = False
        for path in (self.baseline_path(session_id, name), self.current_path(session_id, name)):
            try:
                path.unlink()
            except FileNotFoundError:
                continue
            except OSError as error:
                raise StoreIOError(f"cannot remove artifact file ({error})", path) from error
            removed = True
        if removed:
            logger.info("retired artifact %s/%s", session_id, name)
        return removed

    def prune_current(self, session_id: str, keep: Iterable[str]) -> list[str]:
        """Delete the session's current files for artifacts not in `keep`.

        Leaves the current directory describing exactly the latest run.
        """
        kept = set(keep)
        removed: list[str] = []
        for name in self.list_current(session_id):
            if name in kept:
                continue
            path = self.current_path(session_id, name)
            try:
                path.unlink()
            except FileNotFoundError:
                continue
            except OSError as error:
                raise StoreIOError(f"cannot remove stale current file ({error})", path) from error
            removed.append(name)
        if removed:
            logger.debug("pruned stale current artifacts %s from %s", removed, session_id)
        return removed

    def list_baselines(self, session_id: str) -> list[str]:
        return _list_names(session_directory(self.baseline_root, session_id))

    def list_current(self, session_id: str) -> list[str]:
        return _list_names(session_directory(self.current_root, session_id))

    def list_sessions(self) -> list[str]:
        """Sorted ids of every session holding a baseline or current file."""
        sessions: set[str] = set()
        for base in (self.baseline_root, self.current_root):
            if not base.is_dir():
                continue
            for path in base.rglob(f"*{ARTIFACT_SUFFIX}"):
                if path.name.startswith("."):
                    continue
                sessions.add(path.parent.relative_to(base).as_posix())
        sessions.discard(".")
        return sorted(sessions)

    def _load(self, path: Path, name: str) -> Artifact | NotFoundType:
        validate_artifact_name(name)
        if not path.exists():
            return NOT_FOUND
        artifact = read_artifact_file(path)
        if artifact.name != name:
            raise ArtifactValidationError(
                f"artifact file {path} holds `{artifact.name}`, expected `{name}`"
            )
        return artifact


def _list_names(directory: Path) -> list[str]:
    if not directory.is_dir():
        return []
    try:
        paths = list(directory.iterdir())
    except OSError as error:
        raise StoreIOError(f"cannot list artifact directory ({error})", directory) from error
    return sorted(
        path.name[: -len(ARTIFACT_SUFFIX)]
        for path in paths
        if path.is_file() and path.name.endswith(ARTIFACT_SUFFIX) and not path.name.startswith(".")
    )
