"""Reader for the pre-versioned artifact layout.

Legacy files are a bare JSON object mapping entry name to a single-key
tagged value, for example ``{"1 + 1 (serde)": {"Json": 2}}``.
"""

from __future__ import annotations

from typing import Any

from egresspack.core.canonical import pretty_json
from egresspack.core.models import Artifact, Entry
from egresspack.store.exceptions import ArtifactMigrationError

LEGACY_SOURCE_VERSION = "0.1"

_LEGACY_TAGS = frozenset({"Str", "Json", "Bytes", "Artifact"})


def is_legacy_layout(raw: Any) -> bool:
    """Return True for a version-less mapping of tagged legacy entries."""
    if not isinstance(raw, dict) or "version" in raw:
        return False
    return all(
        isinstance(value, dict) and len(value) == 1 and next(iter(value)) in _LEGACY_TAGS
        for value in raw.values()
    )


def artifact_from_legacy(raw: dict[str, Any], *, name: str) -> Artifact:
    """Convert a legacy mapping into a sealed artifact named `name`."""
    entries: list[Entry] = []
    for entry_name, tagged in raw.items():
        tag, payload = next(iter(tagged.items()))
        if tag == "Str":
            if not isinstance(payload, str):
                raise ArtifactMigrationError(f"legacy entry `{entry_name}` Str payload must be a string")
            entries.append(Entry(name=str(entry_name), value=payload, kind="display"))
        elif tag == "Json":
            try:
                rendered = pretty_json(payload)
            except ValueError as error:
                raise ArtifactMigrationError(
                    f"legacy entry `{entry_name}` holds non-canonical JSON: {error}"
                ) from error
            entries.append(Entry(name=str(entry_name), value=rendered, kind="serialize"))
        else:
            raise ArtifactMigrationError(
                f"legacy entry `{entry_name}` uses unsupported tag `{tag}`; "
                "only Str and Json entries can be migrated"
            )

    return Artifact.from_dict(
        {
            "name": name,
            "entries": [entry.to_dict() for entry in entries],
        }
    )
