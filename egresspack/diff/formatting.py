"""Human-readable rendering for regression reports."""

from __future__ import annotations

from collections.abc import Sequence
import json

from egresspack.diff.models import EntryDiff, RegressionReport

_STATUS_LABELS = {
    "added": "ADDED",
    "removed": "REMOVED",
    "changed": "CHANGED",
    "unchanged": "UNCHANGED",
}


def render_report_summary(report: RegressionReport) -> str:
    summary = report.summary()
    return (
        f"artifact={report.artifact_name} status={report.status} "
        f"changed={summary['changed']} added={summary['added']} "
        f"removed={summary['removed']} unchanged={summary['unchanged']}"
    )


def render_report(
    report: RegressionReport,
    *,
    include_unchanged: bool = False,
    max_changes: int = 8,
) -> str:
    """Render one report with exact old and new values of every divergent entry."""
    lines = [f"artifact `{report.artifact_name}`: {report.status.upper()}"]
    for entry_diff in report.entry_diffs:
        if entry_diff.status == "unchanged" and not include_unchanged:
            continue
        lines.extend(_render_entry(entry_diff, max_changes=max_changes))
    return "\n".join(lines)


def render_reports(
    reports: Sequence[RegressionReport],
    *,
    include_unchanged: bool = False,
    max_changes: int = 8,
) -> str:
    if not reports:
        return "no artifacts compared"
    return "\n\n".join(
        render_report(report, include_unchanged=include_unchanged, max_changes=max_changes)
        for report in reports
    )


def _render_entry(entry_diff: EntryDiff, *, max_changes: int) -> list[str]:
    label = _STATUS_LABELS[entry_diff.status]
    header = f"  [{label}] entry `{entry_diff.entry_name}` ({entry_diff.kind})"
    if entry_diff.old_kind is not None and entry_diff.old_kind != entry_diff.kind:
        header += f" (was {entry_diff.old_kind})"
    lines = [header]

    if entry_diff.status in {"changed", "removed"} and entry_diff.old_value is not None:
        lines.append("    baseline value:")
        lines.extend(_indent(entry_diff.old_value))
    if entry_diff.status in {"changed", "added"} and entry_diff.new_value is not None:
        lines.append("    new value:")
        lines.extend(_indent(entry_diff.new_value))

    if entry_diff.changes:
        lines.append("    changes:")
        for change in entry_diff.changes[:max_changes]:
            lines.append(
                f"      {change.path}: {_compact(change.old)} -> {_compact(change.new)}"
            )
        if entry_diff.truncated_changes or len(entry_diff.changes) > max_changes:
            lines.append("      ... additional changes omitted")
    return lines


def _indent(value: str) -> list[str]:
    if value == "":
        return ["      <empty>"]
    return [f"      {line}" for line in value.split("\n")]


def _compact(value: object) -> str:
    if isinstance(value, str) and value == "<MISSING>":
        return value
    return json.dumps(value, ensure_ascii=True, sort_keys=True)
