"""Assertion helpers for regression checks over a closed session."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from egresspack.diff.exceptions import RegressionFailure
from egresspack.diff.formatting import render_report
from egresspack.diff.models import REPORT_STATUSES, RegressionReport


@dataclass(slots=True)
class RegressionResult:
    """Aggregate comparison outcome for every artifact of one session."""

    session_id: str
    reports: list[RegressionReport]
    fail_on_new: bool = False
    accepted: list[str] = field(default_factory=list)
    retired: list[str] = field(default_factory=list)

    def failing_reports(self) -> list[RegressionReport]:
        """Reports that fail assertion, skipping artifacts accepted or retired on close."""
        resolved = set(self.accepted) | set(self.retired)
        failing: list[RegressionReport] = []
        for report in self.reports:
            if report.artifact_name in resolved:
                continue
            if report.regressed or (self.fail_on_new and report.status == "new"):
                failing.append(report)
        return failing

    @property
    def passed(self) -> bool:
        return not self.failing_reports()

    @property
    def exit_code(self) -> int:
        return 0 if self.passed else 1

    def report_for(self, artifact_name: str) -> RegressionReport | None:
        for report in self.reports:
            if report.artifact_name == artifact_name:
                return report
        return None

    def summary(self) -> dict[str, int]:
        counts = {status: 0 for status in REPORT_STATUSES}
        for report in self.reports:
            counts[report.status] += 1
        return counts

    def assert_unregressed(self) -> None:
        """Raise `RegressionFailure` with the full report of every failing artifact."""
        failing = self.failing_reports()
        if not failing:
            return

        lines = [
            f"egress session `{self.session_id}`: "
            f"{len(failing)} artifact(s) diverged from their baselines",
            "",
        ]
        for report in failing:
            lines.append(render_report(report))
            if report.status == "new":
                lines.append("  (new artifacts require explicit acceptance)")
            lines.append("")
        raise RegressionFailure("\n".join(lines).rstrip(), failing)

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": "pass" if self.passed else "fail",
            "exit_code": self.exit_code,
            "session_id": self.session_id,
            "fail_on_new": self.fail_on_new,
            "summary": self.summary(),
            "accepted": list(self.accepted),
            "retired": list(self.retired),
            "failing": [report.artifact_name for report in self.failing_reports()],
            "reports": [report.to_dict() for report in self.reports],
        }
