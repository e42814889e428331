"""Entry-level artifact diff engine and baseline comparison."""

from __future__ import annotations

from collections.abc import Sequence
import json
from typing import Any

from egresspack.core.models import Artifact, Entry
from egresspack.diff.models import EntryDiff, RegressionReport, ValueChange
from egresspack.store.store import NOT_FOUND, ArtifactStore

_MISSING = object()


def diff_artifact(
    baseline: Artifact | None,
    current: Artifact,
    *,
    max_changes_per_entry: int = 32,
) -> RegressionReport:
    """Diff a freshly captured artifact against its baseline.

    Entry values are compared as exact strings. Diffs are reported in
    baseline order, then current-only entries in insertion order.
    """
    if baseline is None:
        return RegressionReport(
            artifact_name=current.name,
            status="new",
            entry_diffs=[_added(entry) for entry in current.entries],
        )

    entry_diffs: list[EntryDiff] = []
    for old in baseline.entries:
        new = current.get(old.name)
        if new is None:
            entry_diffs.append(_removed(old))
        else:
            entry_diffs.append(_compare_entries(old, new, max_changes=max_changes_per_entry))

    for new in current.entries:
        if new.name not in baseline:
            entry_diffs.append(_added(new))

    unchanged = all(entry.status == "unchanged" for entry in entry_diffs)
    return RegressionReport(
        artifact_name=current.name,
        status="unchanged" if unchanged else "changed",
        entry_diffs=entry_diffs,
    )


def missing_artifact_report(baseline: Artifact) -> RegressionReport:
    """Report for a baseline whose artifact was not produced in this run."""
    return RegressionReport(
        artifact_name=baseline.name,
        status="missing",
        entry_diffs=[_removed(entry) for entry in baseline.entries],
    )


def compare_artifacts(
    store: ArtifactStore,
    session_id: str,
    artifacts: Sequence[Artifact],
    *,
    max_changes_per_entry: int = 32,
) -> list[RegressionReport]:
    """Compare sealed artifacts against the session's stored baselines.

    Reports follow `artifacts` order; baselines with no matching artifact
    follow as `missing`, sorted by name. Nothing is written.
    """
    reports: list[RegressionReport] = []
    seen: set[str] = set()

    for artifact in artifacts:
        seen.add(artifact.name)
        baseline = store.load_baseline(session_id, artifact.name)
        reports.append(
            diff_artifact(
                None if baseline is NOT_FOUND else baseline,
                artifact,
                max_changes_per_entry=max_changes_per_entry,
            )
        )

    for name in store.list_baselines(session_id):
        if name in seen:
            continue
        baseline = store.load_baseline(session_id, name)
        if baseline is NOT_FOUND:
            continue
        reports.append(missing_artifact_report(baseline))

    return reports


def _added(entry: Entry) -> EntryDiff:
    return EntryDiff(
        entry_name=entry.name,
        status="added",
        kind=entry.kind,
        new_value=entry.value,
    )


def _removed(entry: Entry) -> EntryDiff:
    return EntryDiff(
        entry_name=entry.name,
        status="removed",
        kind=entry.kind,
        old_value=entry.value,
        old_kind=entry.kind,
    )


def _compare_entries(old: Entry, new: Entry, *, max_changes: int) -> EntryDiff:
    if old.value == new.value:
        return EntryDiff(
            entry_name=new.name,
            status="unchanged",
            kind=new.kind,
            old_value=old.value,
            new_value=new.value,
            old_kind=old.kind,
        )

    changes: list[ValueChange] = []
    truncated = False
    if old.kind == "serialize" and new.kind == "serialize":
        old_data = _parse_json(old.value)
        new_data = _parse_json(new.value)
        if old_data is not _MISSING and new_data is not _MISSING:
            truncated = _collect_value_changes(
                old_data,
                new_data,
                path="",
                out=changes,
                max_changes=max(1, max_changes),
            )

    return EntryDiff(
        entry_name=new.name,
        status="changed",
        kind=new.kind,
        old_value=old.value,
        new_value=new.value,
        old_kind=old.kind,
        changes=changes,
        truncated_changes=truncated,
    )


def _parse_json(text: str) -> Any:
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        return _MISSING


def _collect_value_changes(
    old: Any,
    new: Any,
    *,
    path: str,
    out: list[ValueChange],
    max_changes: int,
) -> bool:
    if len(out) >= max_changes:
        return True

    if old is _MISSING or new is _MISSING:
        out.append(
            ValueChange(
                path=path or "/",
                old="<MISSING>" if old is _MISSING else old,
                new="<MISSING>" if new is _MISSING else new,
            )
        )
        return len(out) >= max_changes

    if type(old) is not type(new):
        out.append(ValueChange(path=path or "/", old=old, new=new))
        return len(out) >= max_changes

    if isinstance(old, dict):
        truncated = False
        keys = sorted(set(old.keys()) | set(new.keys()), key=str)
        for key in keys:
            truncated |= _collect_value_changes(
                old.get(key, _MISSING),
                new.get(key, _MISSING),
                path=f"{path}/{_escape_json_pointer(str(key))}",
                out=out,
                max_changes=max_changes,
            )
            if len(out) >= max_changes:
                return True
        return truncated

    if isinstance(old, list):
        truncated = False
        for idx in range(max(len(old), len(new))):
            truncated |= _collect_value_changes(
                old[idx] if idx < len(old) else _MISSING,
                new[idx] if idx < len(new) else _MISSING,
                path=f"{path}/{idx}",
                out=out,
                max_changes=max_changes,
            )
            if len(out) >= max_changes:
                return True
        return truncated

    if old != new:
        out.append(ValueChange(path=path or "/", old=old, new=new))
        return len(out) >= max_changes

    return False


def _escape_json_pointer(token: str) -> str:
    return token.replace("~", "~0").replace("/", "~1")
