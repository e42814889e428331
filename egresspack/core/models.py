"""Core data models for Egress artifacts and entries."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from egresspack.core.exceptions import DuplicateEntryError, FormatError, SealedArtifactError
from egresspack.core.formatting import format_value
from egresspack.core.types import ENTRY_KINDS, ArtifactState, EntryKind
from egresspack.exceptions import InvalidNameError


@dataclass(frozen=True, slots=True)
class Entry:
    """A single named, formatted value inside an artifact."""

    name: str
    value: str
    kind: EntryKind

    def __post_init__(self) -> None:
        if self.kind not in ENTRY_KINDS:
            raise FormatError(f"Unsupported entry kind: {self.kind}")

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "value": self.value,
            "kind": self.kind,
        }

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "Entry":
        return cls(
            name=str(raw["name"]),
            value=str(raw["value"]),
            kind=raw["kind"],
        )


@dataclass(slots=True)
class Artifact:
    """Ordered mapping of entry name to formatted entry, scoped to one test.

    Artifacts start `open` and are sealed by their owning session at close
    time. Sealed artifacts reject every mutation.
    """

    name: str
    _entries: dict[str, Entry] = field(default_factory=dict, init=False, repr=False)
    _state: ArtifactState = field(default="open", init=False, repr=False)

    @property
    def entries(self) -> tuple[Entry, ...]:
        return tuple(self._entries.values())

    @property
    def entry_names(self) -> tuple[str, ...]:
        return tuple(self._entries.keys())

    @property
    def sealed(self) -> bool:
        return self._state == "sealed"

    def get(self, name: str) -> Entry | None:
        return self._entries.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def insert(self, name: str, value: Any, kind: EntryKind = "serialize") -> Entry:
        """Format `value` and append it under `name`.

        The value is rendered before any state changes, so a `FormatError`
        leaves the artifact untouched.
        """
        self._ensure_open()
        if not isinstance(name, str) or not name.strip():
            raise InvalidNameError("entry name must be a non-empty string")
        if name in self._entries:
            raise DuplicateEntryError(
                f"Duplicate entries under the same name (`{name}`) are not allowed "
                f"in artifact `{self.name}`"
            )
        entry = Entry(name=name, value=format_value(value, kind), kind=kind)
        self._entries[name] = entry
        return entry

    def insert_serialize(self, name: str, value: Any) -> Entry:
        return self.insert(name, value, "serialize")

    def insert_debug(self, name: str, value: Any) -> Entry:
        return self.insert(name, value, "debug")

    def insert_display(self, name: str, value: Any) -> Entry:
        return self.insert(name, value, "display")

    def insert_json(self, name: str, json_value: Any) -> Entry:
        """Insert already-decoded JSON data (dicts, lists, scalars)."""
        return self.insert(name, json_value, "serialize")

    def seal(self) -> None:
        self._state = "sealed"

    def _ensure_open(self) -> None:
        if self.sealed:
            raise SealedArtifactError(f"artifact `{self.name}` is sealed and cannot be modified")

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "entries": [entry.to_dict() for entry in self._entries.values()],
        }

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "Artifact":
        """Rebuild a sealed artifact from persisted data."""
        artifact = cls(name=str(raw["name"]))
        for entry_raw in raw.get("entries", []):
            entry = Entry.from_dict(entry_raw)
            if entry.name in artifact._entries:
                raise DuplicateEntryError(
                    f"persisted artifact `{artifact.name}` repeats entry `{entry.name}`"
                )
            artifact._entries[entry.name] = entry
        artifact.seal()
        return artifact
