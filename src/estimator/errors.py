"""
Renovision - Estimate errors
"""


class InvalidInput(ValueError):
    """Raised when the items or region code cannot be estimated."""


class InternalError(RuntimeError):
    """Raised when an estimate fails for a reason the caller cannot fix."""
