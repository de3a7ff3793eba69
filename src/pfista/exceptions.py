"""Exceptions raised for malformed inputs and invalid solver configuration."""


class ShapeError(ValueError):
    """
    Array dimensions are inconsistent with the structured operator.

    Raised when a row count that must be a perfect square is not, when the
    diagonal weighting H disagrees in size with the measurements, or when
    weights / spectra do not match the reconstruction size N.
    """


class ConfigError(ValueError):
    """Solver parameters are outside their admissible range."""
