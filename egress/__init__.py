"""Stable public API surface for Egress.

This module is the supported import path for library users.
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

from egresspack.config import EgressConfig, load_config
from egresspack.core import Artifact, Entry, EntryKind, format_value
from egresspack.core.exceptions import DuplicateEntryError, FormatError, SealedArtifactError
from egresspack.diff import RegressionFailure, RegressionReport, RegressionResult
from egresspack.exceptions import (
    DuplicateArtifactError,
    EgressConfigError,
    EgressError,
    InvalidNameError,
    SessionClosedError,
)
from egresspack.session import ClosedSession, Session
from egresspack.store import (
    NOT_FOUND,
    ArtifactChecksumError,
    ArtifactNotSealedError,
    ArtifactStore,
    ArtifactValidationError,
    StoreError,
    StoreIOError,
    session_from_module,
)
from egresspack.workflow import AcceptResult, accept_artifacts, review_session

__version__ = "0.1.0"


def _resolve_config(root: str | Path, config: EgressConfig | None) -> EgressConfig:
    if config is not None:
        return config
    return EgressConfig.from_env(root)


def open_session(
    session_id: str,
    root: str | Path = ".",
    *,
    config: EgressConfig | None = None,
) -> Session:
    """Start a session rooted at `root`, honoring `EGRESS_UPDATE` / `EGRESS_FAIL_ON_NEW`.

    Pass `config` to bypass environment lookup entirely.
    """
    return Session(session_id, config=_resolve_config(root, config))


def review(
    session_id: str,
    root: str | Path = ".",
    *,
    config: EgressConfig | None = None,
) -> RegressionResult:
    """Compare a session's latest current files against its baselines."""
    return review_session(_resolve_config(root, config), session_id)


def accept(
    session_id: str,
    names: Sequence[str] | None = None,
    root: str | Path = ".",
    *,
    config: EgressConfig | None = None,
) -> AcceptResult:
    """Promote current files to baselines (all of the session's when `names` is empty)."""
    return accept_artifacts(_resolve_config(root, config), session_id, names)


__all__ = [
    "__version__",
    "open_session",
    "review",
    "accept",
    "Session",
    "ClosedSession",
    "EgressConfig",
    "load_config",
    "Artifact",
    "Entry",
    "EntryKind",
    "format_value",
    "ArtifactStore",
    "NOT_FOUND",
    "AcceptResult",
    "RegressionReport",
    "RegressionResult",
    "RegressionFailure",
    "session_from_module",
    "EgressError",
    "EgressConfigError",
    "InvalidNameError",
    "DuplicateArtifactError",
    "DuplicateEntryError",
    "SealedArtifactError",
    "SessionClosedError",
    "FormatError",
    "StoreError",
    "StoreIOError",
    "ArtifactValidationError",
    "ArtifactChecksumError",
    "ArtifactNotSealedError",
]
