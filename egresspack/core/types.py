"""Type definitions for Egress core models."""

from typing import Literal

EntryKind = Literal["serialize", "debug", "display"]

ENTRY_KINDS: tuple[str, ...] = (
    "serialize",
    "debug",
    "display",
)

ArtifactState = Literal["open", "sealed"]
