"""Diff subsystem for Egress."""

from egresspack.diff.assertion import RegressionResult
from egresspack.diff.engine import compare_artifacts, diff_artifact, missing_artifact_report
from egresspack.diff.exceptions import RegressionFailure
from egresspack.diff.formatting import render_report, render_report_summary, render_reports
from egresspack.diff.models import (
    REPORT_STATUSES,
    EntryDiff,
    EntryDiffStatus,
    RegressionReport,
    ReportStatus,
    ValueChange,
)

__all__ = [
    "EntryDiffStatus",
    "ReportStatus",
    "REPORT_STATUSES",
    "ValueChange",
    "EntryDiff",
    "RegressionReport",
    "RegressionResult",
    "RegressionFailure",
    "diff_artifact",
    "missing_artifact_report",
    "compare_artifacts",
    "render_report",
    "render_reports",
    "render_report_summary",
]
