"""
Exception types raised by the processing pipeline.

Decoding, classification and segmentation degrade gracefully and never raise
these; only configuration problems and output failures are fatal.
"""


class RaidlogError(Exception):
    """Base class for pipeline errors."""


class ConfigurationError(RaidlogError, ValueError):
    """Invalid settings, hints or registry entries."""


class OutputError(RaidlogError):
    """Persisting the results of an encounter failed."""

    def __init__(self, message: str, encounter_key=None):
        super().__init__(message)
        self.encounter_key = encounter_key
