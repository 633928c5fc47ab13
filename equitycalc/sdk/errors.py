"""Exceptions raised by the calculation layer."""


class InvalidInputError(ValueError):
    """Raised when a field required for the requested calculation is missing or malformed."""
    pass


class OutOfRangeError(ValueError):
    """Raised when vested shares fall outside [0, total_shares].

    Indicates an inconsistent record upstream (e.g., a manual override larger
    than the grant itself).
    """
    pass
