import pytest

from egresspack.core import Artifact
from egresspack.diff import RegressionFailure, RegressionResult, diff_artifact, missing_artifact_report


def _artifact(name: str, value: object) -> Artifact:
    artifact = Artifact(name=name)
    artifact.insert_serialize("value", value)
    artifact.seal()
    return artifact


def test_result_passes_when_everything_matches() -> None:
    result = RegressionResult(
        session_id="numbers",
        reports=[diff_artifact(_artifact("a", 1), _artifact("a", 1))],
    )

    assert result.passed is True
    assert result.exit_code == 0
    result.assert_unregressed()
    payload = result.to_dict()
    assert payload["status"] == "pass"
    assert payload["failing"] == []


def test_new_artifacts_pass_unless_fail_on_new() -> None:
    reports = [diff_artifact(None, _artifact("a", 1))]

    assert RegressionResult(session_id="numbers", reports=reports).passed is True

    strict = RegressionResult(session_id="numbers", reports=reports, fail_on_new=True)
    assert strict.passed is False
    with pytest.raises(RegressionFailure, match="new artifacts require explicit acceptance"):
        strict.assert_unregressed()


def test_changed_and_missing_artifacts_fail() -> None:
    result = RegressionResult(
        session_id="tests/numbers",
        reports=[
            diff_artifact(_artifact("a", 1), _artifact("a", 2)),
            missing_artifact_report(_artifact("gone", 5)),
        ],
    )

    assert result.passed is False
    assert result.summary() == {"new": 0, "unchanged": 0, "changed": 1, "missing": 1}

    with pytest.raises(RegressionFailure) as excinfo:
        result.assert_unregressed()

    failure = excinfo.value
    assert isinstance(failure, AssertionError)
    assert [report.artifact_name for report in failure.reports] == ["a", "gone"]
    message = str(failure)
    assert message.startswith(
        "egress session `tests/numbers`: 2 artifact(s) diverged from their baselines"
    )
    assert "artifact `a`: CHANGED" in message
    assert "artifact `gone`: MISSING" in message
    assert "      1\n    new value:\n      2" in message


def test_accepted_and_retired_artifacts_do_not_fail() -> None:
    result = RegressionResult(
        session_id="numbers",
        reports=[
            diff_artifact(_artifact("a", 1), _artifact("a", 2)),
            missing_artifact_report(_artifact("gone", 5)),
        ],
        accepted=["a"],
        retired=["gone"],
    )

    assert result.passed is True
    result.assert_unregressed()


def test_report_lookup_by_name() -> None:
    result = RegressionResult(
        session_id="numbers",
        reports=[diff_artifact(None, _artifact("a", 1))],
    )

    assert result.report_for("a").status == "new"
    assert result.report_for("missing") is None
