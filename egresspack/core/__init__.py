"""Core models and deterministic primitives for Egress."""

from egresspack.core.canonical import canonical_json, canonicalize, pretty_json
from egresspack.core.exceptions import DuplicateEntryError, FormatError, SealedArtifactError
from egresspack.core.formatting import (
    DebugFormatter,
    DisplayFormatter,
    EntryFormatter,
    SerializeFormatter,
    format_value,
    get_formatter,
    to_json_compatible,
)
from egresspack.core.models import Artifact, Entry
from egresspack.core.types import ENTRY_KINDS, EntryKind

__all__ = [
    "Artifact",
    "Entry",
    "ENTRY_KINDS",
    "EntryKind",
    "EntryFormatter",
    "SerializeFormatter",
    "DebugFormatter",
    "DisplayFormatter",
    "format_value",
    "get_formatter",
    "to_json_compatible",
    "canonicalize",
    "canonical_json",
    "pretty_json",
    "DuplicateEntryError",
    "SealedArtifactError",
    "FormatError",
]
