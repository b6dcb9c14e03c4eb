"""Errors raised by the generation pipeline."""


class ConfigurationError(RuntimeError):
    """Raised when a target, schema source or output location is unusable."""


class OverlayConflictError(ConfigurationError):
    """Raised when an overlay redeclares a field with a different shape."""


class ValidationError(RuntimeError):
    """Raised when a schema fails to parse or breaks a schema assumption."""


class UnknownTypeError(LookupError):
    """Raised when the type registry is queried for an unregistered name."""


class EmitError(RuntimeError):
    """Raised when an artifact cannot be written."""
