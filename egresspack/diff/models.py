"""Data models for artifact regression reports."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal

EntryDiffStatus = Literal["added", "removed", "changed", "unchanged"]
ReportStatus = Literal["new", "unchanged", "changed", "missing"]

REPORT_STATUSES: tuple[str, ...] = ("new", "unchanged", "changed", "missing")


@dataclass(slots=True)
class ValueChange:
    """A single structural delta at a JSON pointer path inside a serialized entry."""

    path: str
    old: Any
    new: Any

    def to_dict(self) -> dict[str, Any]:
        return {
            "path": self.path,
            "old": self.old,
            "new": self.new,
        }


@dataclass(slots=True)
class EntryDiff:
    """Comparison outcome for one entry name."""

    entry_name: str
    status: EntryDiffStatus
    kind: str
    old_value: str | None = None
    new_value: str | None = None
    old_kind: str | None = None
    changes: list[ValueChange] = field(default_factory=list)
    truncated_changes: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "entry_name": self.entry_name,
            "status": self.status,
            "kind": self.kind,
            "old_kind": self.old_kind,
            "old_value": self.old_value,
            "new_value": self.new_value,
            "changes": [change.to_dict() for change in self.changes],
            "truncated_changes": self.truncated_changes,
        }


@dataclass(slots=True)
class RegressionReport:
    """Comparison outcome for one artifact against its baseline."""

    artifact_name: str
    status: ReportStatus
    entry_diffs: list[EntryDiff] = field(default_factory=list)

    @property
    def regressed(self) -> bool:
        return self.status in {"changed", "missing"}

    def summary(self) -> dict[str, int]:
        counts = {
            "added": 0,
            "removed": 0,
            "changed": 0,
            "unchanged": 0,
        }
        for entry_diff in self.entry_diffs:
            counts[entry_diff.status] += 1
        return counts

    def divergent_entries(self) -> list[EntryDiff]:
        return [entry for entry in self.entry_diffs if entry.status != "unchanged"]

    def to_dict(self) -> dict[str, Any]:
        return {
            "artifact_name": self.artifact_name,
            "status": self.status,
            "summary": self.summary(),
            "entry_diffs": [entry.to_dict() for entry in self.entry_diffs],
        }
