"""
Exception taxonomy for the corner detection pipeline.

Both errors are raised before any computation starts; nothing downstream
of a failed validation ever produces partial output.
"""


class TileCornersError(Exception):
    """Base class for all pipeline errors."""


class ConfigError(TileCornersError, ValueError):
    """Raised for invalid configuration: even or non-positive kernel sizes,
    non-positive tile counts, non-positive radius and similar."""


class InsufficientSizeError(TileCornersError, ValueError):
    """Raised when the image is smaller than a required kernel or window."""
