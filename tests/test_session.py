from pathlib import Path

import pytest

from egresspack.config import EgressConfig
from egresspack.diff import RegressionFailure
from egresspack.exceptions import DuplicateArtifactError, InvalidNameError, SessionClosedError
from egresspack.session import ClosedSession, Session
from egresspack.store import NOT_FOUND, ArtifactStore


def _run_numbers(
    config: EgressConfig,
    *,
    answer: int = 2,
    extra_artifact: bool = False,
) -> ClosedSession:
    session = Session("tests/numbers", config=config)
    artifact = session.artifact("basic_arithmetic")
    artifact.insert_serialize("1 + 1 (serde)", answer)
    artifact.insert_debug("1 + 1 (debug)", answer)
    artifact.insert_display("1 + 1 (display)", answer)
    if extra_artifact:
        session.artifact("greeting").insert_display("hello", "world")
    return session.close()


def test_first_run_reports_new_and_writes_no_baseline(tmp_path: Path) -> None:
    config = EgressConfig(root=tmp_path)

    closed = _run_numbers(config)

    assert closed.passed is True
    assert closed.report_for("basic_arithmetic").status == "new"
    store = config.build_store()
    assert store.load_baseline("tests/numbers", "basic_arithmetic") is NOT_FOUND
    current = store.load_current("tests/numbers", "basic_arithmetic")
    assert [entry.value for entry in current.entries] == ["2", "2", "2"]


def test_accepted_baseline_then_identical_run_is_unchanged(tmp_path: Path) -> None:
    config = EgressConfig(root=tmp_path)
    _run_numbers(config)
    config.build_store().accept("tests/numbers", "basic_arithmetic")

    closed = _run_numbers(config)

    assert closed.passed is True
    assert closed.report_for("basic_arithmetic").status == "unchanged"
    closed.assert_unregressed()


def test_changed_output_fails_with_both_values(tmp_path: Path) -> None:
    config = EgressConfig(root=tmp_path)
    _run_numbers(config)
    config.build_store().accept("tests/numbers", "basic_arithmetic")

    closed = _run_numbers(config, answer=3)

    assert closed.passed is False
    report = closed.report_for("basic_arithmetic")
    assert report.status == "changed"
    assert {diff.entry_name for diff in report.divergent_entries()} == {
        "1 + 1 (serde)",
        "1 + 1 (debug)",
        "1 + 1 (display)",
    }
    with pytest.raises(RegressionFailure, match="basic_arithmetic"):
        closed.assert_unregressed()

    baseline = config.build_store().load_baseline("tests/numbers", "basic_arithmetic")
    assert baseline.get("1 + 1 (serde)").value == "2"


def test_missing_artifact_fails(tmp_path: Path) -> None:
    config = EgressConfig(root=tmp_path)
    _run_numbers(config, extra_artifact=True)
    store = config.build_store()
    store.accept("tests/numbers", "basic_arithmetic")
    store.accept("tests/numbers", "greeting")

    closed = _run_numbers(config)

    assert closed.passed is False
    assert closed.report_for("greeting").status == "missing"


def test_update_mode_accepts_and_retires(tmp_path: Path) -> None:
    config = EgressConfig(root=tmp_path)
    _run_numbers(config, extra_artifact=True)
    store = config.build_store()
    store.accept("tests/numbers", "basic_arithmetic")
    store.accept("tests/numbers", "greeting")

    closed = _run_numbers(EgressConfig(root=tmp_path, update_baselines=True), answer=3)

    assert closed.passed is True
    assert closed.accepted == ["basic_arithmetic"]
    assert closed.retired == ["greeting"]
    assert closed.report_for("basic_arithmetic").status == "changed"
    assert store.load_baseline("tests/numbers", "greeting") is NOT_FOUND
    baseline = store.load_baseline("tests/numbers", "basic_arithmetic")
    assert baseline.get("1 + 1 (serde)").value == "3"

    assert _run_numbers(config, answer=3).report_for("basic_arithmetic").status == "unchanged"


def test_fail_on_new_rejects_unaccepted_artifacts(tmp_path: Path) -> None:
    closed = _run_numbers(EgressConfig(root=tmp_path, fail_on_new=True))

    assert closed.passed is False
    with pytest.raises(RegressionFailure, match="explicit acceptance"):
        closed.assert_unregressed()


def test_duplicate_artifact_names_are_rejected(tmp_path: Path) -> None:
    session = Session("tests/numbers", config=EgressConfig(root=tmp_path))
    session.artifact("numbers")

    with pytest.raises(DuplicateArtifactError, match="numbers"):
        session.artifact("numbers")


def test_invalid_names_are_rejected(tmp_path: Path) -> None:
    with pytest.raises(InvalidNameError):
        Session("tests/../escape", config=EgressConfig(root=tmp_path))

    session = Session("tests/numbers", config=EgressConfig(root=tmp_path))
    with pytest.raises(InvalidNameError):
        session.artifact("a/b")


def test_closed_session_rejects_further_use(tmp_path: Path) -> None:
    session = Session("tests/numbers", config=EgressConfig(root=tmp_path))
    artifact = session.artifact("numbers")
    artifact.insert_serialize("answer", 42)
    session.close()

    assert session.closed is True
    assert artifact.sealed is True
    with pytest.raises(SessionClosedError):
        session.artifact("other")
    with pytest.raises(SessionClosedError):
        session.close()


def test_context_manager_closes_and_asserts(tmp_path: Path) -> None:
    config = EgressConfig(root=tmp_path)
    with Session("tests/numbers", config=config) as egress:
        egress.artifact("numbers").insert_serialize("answer", 42)

    assert egress.closed is True
    config.build_store().accept("tests/numbers", "numbers")

    with pytest.raises(RegressionFailure, match="answer"):
        with Session("tests/numbers", config=config) as egress:
            egress.artifact("numbers").insert_serialize("answer", 43)


def test_context_manager_skips_close_when_body_raises(tmp_path: Path) -> None:
    config = EgressConfig(root=tmp_path)

    with pytest.raises(RuntimeError):
        with Session("tests/numbers", config=config) as egress:
            egress.artifact("numbers").insert_serialize("answer", 42)
            raise RuntimeError("test body failed")

    assert egress.closed is False
    assert not (tmp_path / "egress").exists()


def test_session_accepts_explicit_store(tmp_path: Path) -> None:
    store = ArtifactStore(tmp_path, artifact_dir="snapshots/base", current_dir="snapshots/new")
    session = Session("numbers", store=store)
    session.artifact("numbers").insert_serialize("answer", 42)
    session.close()

    assert (tmp_path / "snapshots" / "new" / "numbers" / "numbers.json").exists()


def test_close_removes_current_files_of_dropped_artifacts(tmp_path: Path) -> None:
    config = EgressConfig(root=tmp_path)
    _run_numbers(config, extra_artifact=True)
    store = config.build_store()
    assert store.list_current("tests/numbers") == ["basic_arithmetic", "greeting"]

    _run_numbers(config)

    assert store.list_current("tests/numbers") == ["basic_arithmetic"]


def test_float_drift_beyond_twelve_digits_is_a_change(tmp_path: Path) -> None:
    config = EgressConfig(root=tmp_path)
    with Session("tests/floats", config=config) as egress:
        egress.artifact("ratio").insert_serialize("value", 1.0000000000001)
    config.build_store().accept("tests/floats", "ratio")

    session = Session("tests/floats", config=config)
    session.artifact("ratio").insert_serialize("value", 1.0)
    closed = session.close()

    assert closed.report_for("ratio").status == "changed"
    assert closed.passed is False
