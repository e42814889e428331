"""Artifact store exceptions."""

from __future__ import annotations

from pathlib import Path

from egresspack.exceptions import EgressError


class StoreError(EgressError):
    """Base class for artifact store errors."""


class StoreIOError(StoreError):
    """Reading or writing an artifact file failed."""

    def __init__(self, message: str, path: str | Path) -> None:
        super().__init__(f"{message}: {path}")
        self.path = Path(path)


class ArtifactValidationError(StoreError):
    """Artifact file failed schema or version validation."""


class ArtifactChecksumError(StoreError):
    """Artifact file checksum mismatch."""


class ArtifactMigrationError(StoreError):
    """Artifact migration failure or unsupported version transition."""


class ArtifactNotSealedError(StoreError):
    """Artifact was handed to the store while still open."""
