"""
Error taxonomy for PyFastPix.

All errors derive from ValueError so callers that only care about "bad input"
can keep catching ValueError. Each class carries a short machine readable
``code`` for hosts that forward errors across a process or language boundary.
"""


class PixelizeError(ValueError):
    """Base class for every input error raised by the rasterizers."""

    code = "pixelize_error"


class InvalidShapeError(PixelizeError):
    """Array lengths or shapes do not match what the operation expects."""

    code = "invalid_shape"


class InvalidDimensionError(PixelizeError):
    """Output grid dimensions are not positive or the bounds are degenerate."""

    code = "invalid_dimension"


class InvalidIndexError(PixelizeError):
    """A selection index does not point into the cell arrays."""

    code = "invalid_index"


__all__ = [
    "PixelizeError",
    "InvalidShapeError",
    "InvalidDimensionError",
    "InvalidIndexError",
]
