"""Exceptions raised by the katori estimation core."""


class KatoriError(Exception):
    """Base class for all katori errors."""
    pass


class ConfigurationError(KatoriError):
    """Raised when a required setting (e.g. an API key) is missing."""
    pass


class ReferenceDataError(KatoriError):
    """Raised when a reference table cannot be read or fails validation."""

    def __init__(self, path, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Invalid reference data in {path}: {reason}")


class OracleError(KatoriError):
    """Raised when the ingredient extraction model cannot be reached."""
    pass


class EstimationError(KatoriError):
    """Raised when an estimate cannot be produced at all."""
    pass
