"""Session orchestration: artifact creation, persistence, and comparison."""

from __future__ import annotations

import logging
from types import TracebackType
from typing import Any, Literal

from egresspack.config import EgressConfig
from egresspack.core.models import Artifact
from egresspack.diff.assertion import RegressionResult
from egresspack.diff.engine import compare_artifacts
from egresspack.diff.models import RegressionReport
from egresspack.exceptions import DuplicateArtifactError, SessionClosedError
from egresspack.store.paths import validate_artifact_name, validate_session_id
from egresspack.store.store import ArtifactStore

logger = logging.getLogger(__name__)

SessionState = Literal["active", "closed"]


class ClosedSession:
    """Handle returned by `Session.close()`."""

    __slots__ = ("session_id", "result")

    def __init__(self, session_id: str, result: RegressionResult) -> None:
        self.session_id = session_id
        self.result = result

    def __repr__(self) -> str:
        return (
            f"ClosedSession(session_id={self.session_id!r}, "
            f"passed={self.passed}, artifacts={len(self.reports)})"
        )

    @property
    def reports(self) -> list[RegressionReport]:
        return self.result.reports

    @property
    def accepted(self) -> list[str]:
        return self.result.accepted

    @property
    def retired(self) -> list[str]:
        return self.result.retired

    @property
    def passed(self) -> bool:
        return self.result.passed

    def report_for(self, artifact_name: str) -> RegressionReport | None:
        return self.result.report_for(artifact_name)

    def assert_unregressed(self) -> None:
        self.result.assert_unregressed()

    def to_dict(self) -> dict[str, Any]:
        return self.result.to_dict()


class Session:
    """Owns artifact creation, sealing, persistence, and comparison for one test run.

    Usage::

        with Session("tests/numbers", config=EgressConfig(root=tmp_path)) as egress:
            artifact = egress.artifact("basic_arithmetic")
            artifact.insert_serialize("1 + 1 (serde)", 1 + 1)

    Leaving the block cleanly closes the session and asserts that nothing
    regressed. Call `close()` directly to inspect reports instead.
    """

    def __init__(
        self,
        session_id: str,
        *,
        config: EgressConfig | None = None,
        store: ArtifactStore | None = None,
    ) -> None:
        self.session_id = validate_session_id(session_id)
        self.config = config if config is not None else EgressConfig()
        self.store = store if store is not None else self.config.build_store()
        self._artifacts: dict[str, Artifact] = {}
        self._state: SessionState = "active"

    def __repr__(self) -> str:
        return (
            f"Session(session_id={self.session_id!r}, state={self._state!r}, "
            f"artifacts={list(self._artifacts)!r})"
        )

    @property
    def closed(self) -> bool:
        return self._state == "closed"

    @property
    def artifacts(self) -> tuple[Artifact, ...]:
        return tuple(self._artifacts.values())

    def artifact(self, name: str) -> Artifact:
        """Create a new open artifact named `name`."""
        self._ensure_active()
        validate_artifact_name(name)
        if name in self._artifacts:
            raise DuplicateArtifactError(f"only one artifact allowed with the name `{name}`")
        artifact = Artifact(name=name)
        self._artifacts[name] = artifact
        return artifact

    def close(self) -> ClosedSession:
        """Seal and save every artifact, compare against baselines, and return the result.

        Current files left by earlier runs for artifacts this run did not
        produce are deleted, so the current directory mirrors this run.

        In update mode every artifact is accepted as the new baseline and
        baselines of artifacts this run did not produce are retired. The
        reports still describe the state before acceptance.
        """
        self._ensure_active()
        self._state = "closed"

        artifacts = list(self._artifacts.values())
        for artifact in artifacts:
            artifact.seal()
            self.store.save(self.session_id, artifact)
        self.store.prune_current(self.session_id, self._artifacts)

        reports = compare_artifacts(self.store, self.session_id, artifacts)
        result = RegressionResult(
            session_id=self.session_id,
            reports=reports,
            fail_on_new=self.config.fail_on_new,
        )

        if self.config.update_baselines:
            for report in reports:
                if report.status == "missing":
                    self.store.retire(self.session_id, report.artifact_name)
                    result.retired.append(report.artifact_name)
                elif report.status != "unchanged":
                    self.store.accept(self.session_id, report.artifact_name)
                    result.accepted.append(report.artifact_name)

        summary = result.summary()
        logger.info(
            "closed egress session %s: new=%d unchanged=%d changed=%d missing=%d accepted=%d",
            self.session_id,
            summary["new"],
            summary["unchanged"],
            summary["changed"],
            summary["missing"],
            len(result.accepted),
        )
        return ClosedSession(self.session_id, result)

    def close_and_assert_unregressed(self) -> ClosedSession:
        closed = self.close()
        closed.assert_unregressed()
        return closed

    def __enter__(self) -> "Session":
        self._ensure_active()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        # A failing test body leaves the session open and writes nothing.
        if exc_type is not None or self.closed:
            return
        self.close_and_assert_unregressed()

    def _ensure_active(self) -> None:
        if self.closed:
            raise SessionClosedError(f"egress session `{self.session_id}` is already closed")
