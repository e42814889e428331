"""Core model exceptions."""

from egresspack.exceptions import EgressError


class DuplicateEntryError(EgressError):
    """Entry name already exists in the artifact."""


class SealedArtifactError(EgressError):
    """Artifact was mutated after it was sealed."""


class FormatError(EgressError, ValueError):
    """Value cannot be rendered under the requested entry kind."""
