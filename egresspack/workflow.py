"""Baseline review workflows operating on stored current files."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any, Literal

from egresspack.config import EgressConfig
from egresspack.core.models import Artifact
from egresspack.diff.assertion import RegressionResult
from egresspack.diff.engine import compare_artifacts
from egresspack.store.exceptions import StoreIOError
from egresspack.store.paths import validate_artifact_name, validate_session_id
from egresspack.store.store import NOT_FOUND

AcceptStatus = Literal["accepted", "nothing_to_accept"]


@dataclass(slots=True)
class AcceptResult:
    """Result model for promoting current artifacts to baselines."""

    session_id: str
    status: AcceptStatus
    accepted: list[str] = field(default_factory=list)
    baseline_paths: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status,
            "session_id": self.session_id,
            "accepted": list(self.accepted),
            "baseline_paths": list(self.baseline_paths),
        }


def review_session(config: EgressConfig, session_id: str) -> RegressionResult:
    """Compare the session's stored current files against its baselines.

    Same comparison as `Session.close()`, without re-running the test.
    """
    validate_session_id(session_id)
    store = config.build_store()

    artifacts: list[Artifact] = []
    for name in store.list_current(session_id):
        current = store.load_current(session_id, name)
        if current is not NOT_FOUND:
            artifacts.append(current)

    return RegressionResult(
        session_id=session_id,
        reports=compare_artifacts(store, session_id, artifacts),
        fail_on_new=config.fail_on_new,
    )


def accept_artifacts(
    config: EgressConfig,
    session_id: str,
    names: Sequence[str] | None = None,
) -> AcceptResult:
    """Promote current files to baselines; all of the session's when `names` is empty."""
    validate_session_id(session_id)
    store = config.build_store()

    selected = list(names) if names else store.list_current(session_id)
    for name in selected:
        validate_artifact_name(name)
        if not store.current_path(session_id, name).exists():
            raise StoreIOError(
                f"no current artifact `{name}` to accept",
                store.current_path(session_id, name),
            )

    result = AcceptResult(
        session_id=session_id,
        status="accepted" if selected else "nothing_to_accept",
    )
    for name in selected:
        result.baseline_paths.append(str(store.accept(session_id, name)))
        result.accepted.append(name)
    return result


def retire_artifact(config: EgressConfig, session_id: str, name: str) -> bool:
    return config.build_store().retire(session_id, name)


def list_sessions(config: EgressConfig) -> list[str]:
    return config.build_store().list_sessions()
