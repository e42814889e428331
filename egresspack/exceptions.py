"""Top-level Egress exceptions."""


class EgressError(Exception):
    """Base class for all Egress errors."""


class EgressConfigError(EgressError, ValueError):
    """Invalid Egress configuration."""


class InvalidNameError(EgressError, ValueError):
    """Session, artifact, or entry name cannot be used."""


class DuplicateArtifactError(EgressError):
    """Artifact name was already used in this session."""


class SessionClosedError(EgressError):
    """Session was used after `close()`."""
