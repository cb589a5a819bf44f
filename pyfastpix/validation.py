"""
Input coercion and validation for the rasterizers.

Everything here runs in Python scope before a single field is borrowed from the
pool, so that invalid calls fail without touching any output buffer. Arrays are
coerced to contiguous float64 (or int32 for indices), the way the kernels expect
them.
"""

import math

import numpy as np

from . import constants as cte
from .errors import InvalidDimensionError, InvalidIndexError, InvalidShapeError


def check_grid_dims(rows, cols):
    """
    Validate output grid dimensions.

    Args:
        rows: Number of pixels along x (axis 0 of the output)
        cols: Number of pixels along y (axis 1 of the output)

    Returns:
        tuple: (rows, cols) as Python ints

    Raises:
        InvalidDimensionError: if either is not an integer or is <= 0
    """
    out = []
    for name, n in (("rows", rows), ("cols", cols)):
        if isinstance(n, bool) or not isinstance(n, (int, np.integer)):
            raise InvalidDimensionError(f"{name} must be an integer, got {n!r}")
        if n <= 0:
            raise InvalidDimensionError(f"Cannot scale to zero size ({name}={n})")
        out.append(int(n))
    return tuple(out)


def check_bounds(bounds):
    """
    Validate (x_min, x_max, y_min, y_max) bounds.

    Raises:
        InvalidShapeError: if bounds does not hold exactly four numbers
        InvalidDimensionError: if a bound is not finite or the rectangle is degenerate
    """
    try:
        values = tuple(float(b) for b in bounds)
    except (TypeError, ValueError) as e:
        raise InvalidShapeError(f"bounds must be four numbers: {e}")
    if len(values) != 4:
        raise InvalidShapeError(
            f"bounds must be (x_min, x_max, y_min, y_max), got {len(values)} values"
        )
    if not all(math.isfinite(v) for v in values):
        raise InvalidDimensionError(f"bounds must be finite, got {values}")
    x_min, x_max, y_min, y_max = values
    if x_max <= x_min:
        raise InvalidDimensionError(f"Degenerate bounds: x_max ({x_max}) <= x_min ({x_min})")
    if y_max <= y_min:
        raise InvalidDimensionError(f"Degenerate bounds: y_max ({y_max}) <= y_min ({y_min})")
    return values


def as_float_array(name, data, ndim=1, width=None):
    """
    Coerce data to a contiguous float64 array.

    Args:
        name: Name used in error messages
        data: Array-like input
        ndim: Required number of dimensions (1 or 2)
        width: Required size of the last axis when ndim == 2

    Raises:
        InvalidShapeError: if the data cannot be converted or has the wrong shape
    """
    try:
        arr = np.asarray(data, dtype=cte.FLOAT_TYPE_NP)
    except (TypeError, ValueError) as e:
        raise InvalidShapeError(f"{name} is of incorrect type (wanted float): {e}")
    if ndim == 2 and arr.ndim == 1 and arr.size == 0:
        arr = arr.reshape(0, width)
    if arr.ndim != ndim:
        raise InvalidShapeError(f"{name} must be {ndim}D, got shape {arr.shape}")
    if width is not None and arr.shape[-1] != width:
        raise InvalidShapeError(f"{name} must have shape (N, {width}), got {arr.shape}")
    return np.ascontiguousarray(arr)


def check_same_length(**arrays):
    """Raise InvalidShapeError unless every array has the same first dimension."""
    lengths = {name: arr.shape[0] for name, arr in arrays.items()}
    if len(set(lengths.values())) > 1:
        desc = ", ".join(f"{k}={v}" for k, v in lengths.items())
        raise InvalidShapeError(f"Per-cell arrays must have the same length ({desc})")
    return next(iter(lengths.values()))


def check_pair(name, pair):
    """Coerce a 2-element sequence (e.g. periods) to a tuple of floats."""
    arr = as_float_array(name, pair)
    if arr.shape != (2,):
        raise InvalidShapeError(f"{name} must hold two values, got shape {arr.shape}")
    return float(arr[0]), float(arr[1])


def check_plane_center(center):
    """Coerce the plane center to a 3-vector."""
    arr = np.asarray(center, dtype=cte.FLOAT_TYPE_NP).ravel()
    if arr.size != 3:
        raise InvalidShapeError("Center must have three points")
    return arr


def check_inverse_transform(matrix):
    """Coerce the inverse transform to a 3x3 matrix."""
    arr = np.asarray(matrix, dtype=cte.FLOAT_TYPE_NP)
    if arr.size != 9:
        raise InvalidShapeError(f"inverse_transform must be three by three, got {arr.size} elements")
    return arr.reshape(3, 3)


def check_selection(indices, n_cells):
    """
    Validate a selection index array against a cell population of size n_cells.

    Empty selections are accepted whatever their dtype (``np.asarray([])`` is
    float64).

    Raises:
        InvalidShapeError: if indices is not 1D
        InvalidIndexError: if an index is not integral, negative or >= n_cells
    """
    arr = np.asarray(indices)
    if arr.ndim != 1:
        raise InvalidShapeError(f"selection_indices must be 1D, got shape {arr.shape}")
    if arr.size == 0:
        return np.zeros(0, dtype=cte.INT_TYPE_NP)
    if arr.dtype.kind not in "iu":
        raise InvalidIndexError(f"selection_indices must be integers, got dtype {arr.dtype}")
    lo, hi = int(arr.min()), int(arr.max())
    if lo < 0 or hi >= n_cells:
        raise InvalidIndexError(
            f"selection index out of range [0, {n_cells}): min={lo}, max={hi}"
        )
    return np.ascontiguousarray(arr, dtype=cte.INT_TYPE_NP)


__all__ = [
    "check_grid_dims",
    "check_bounds",
    "as_float_array",
    "check_same_length",
    "check_pair",
    "check_plane_center",
    "check_inverse_transform",
    "check_selection",
]
