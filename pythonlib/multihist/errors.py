class InvalidArgument(ValueError):
    """Bad argument count, unconvertible value or incompatible operand."""


class OutOfRange(IndexError):
    """Bin index outside the valid span of its axis."""


class AxesMismatch(InvalidArgument):
    """Histograms with different axes were combined."""
