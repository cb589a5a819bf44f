"""
Output grid geometry in Python scope.

Axis 0 of every output grid spans x and has ``rows`` pixels, axis 1 spans y
and has ``cols`` pixels.
"""

import numpy as np

from .. import constants as cte
from ..validation import check_bounds, check_grid_dims


def pixel_extents(rows, cols, bounds):
    """Return (px_dx, px_dy), the size of one pixel along x and y."""
    rows, cols = check_grid_dims(rows, cols)
    x_min, x_max, y_min, y_max = check_bounds(bounds)
    return (x_max - x_min) / rows, (y_max - y_min) / cols


def pixel_area(rows, cols, bounds):
    """Area covered by a single pixel."""
    px_dx, px_dy = pixel_extents(rows, cols, bounds)
    return px_dx * px_dy


def grid_edges(rows, cols, bounds):
    """
    Pixel edge coordinates.

    Returns:
        tuple: (x_edges, y_edges) of lengths rows + 1 and cols + 1
    """
    rows, cols = check_grid_dims(rows, cols)
    x_min, x_max, y_min, y_max = check_bounds(bounds)
    px_dx = (x_max - x_min) / rows
    px_dy = (y_max - y_min) / cols
    x_edges = x_min + px_dx * np.arange(rows + 1, dtype=cte.FLOAT_TYPE_NP)
    y_edges = y_min + px_dy * np.arange(cols + 1, dtype=cte.FLOAT_TYPE_NP)
    return x_edges, y_edges


def grid_centers(rows, cols, bounds):
    """Pixel center coordinates, (x_centers, y_centers)."""
    x_edges, y_edges = grid_edges(rows, cols, bounds)
    return 0.5 * (x_edges[1:] + x_edges[:-1]), 0.5 * (y_edges[1:] + y_edges[:-1])


__all__ = ["pixel_extents", "pixel_area", "grid_edges", "grid_centers"]
