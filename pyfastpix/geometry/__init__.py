"""
Geometry helpers for PyFastPix.

Taichi funcs used inside the rasterization kernels (1D overlap, pixel ranges,
periodic images, plane-to-world transform and containment test) and their
Python-scope counterparts describing the output grid.
"""

from .overlap import (
    misses_span,
    overlap_1d,
    periodic_image,
    pixel_lower,
    pixel_upper,
)
from .transforms import box_contains, plane_to_world, to_mat3, to_vec3
from .grid import grid_centers, grid_edges, pixel_area, pixel_extents

__all__ = [
    "overlap_1d",
    "misses_span",
    "pixel_lower",
    "pixel_upper",
    "periodic_image",
    "plane_to_world",
    "box_contains",
    "to_mat3",
    "to_vec3",
    "pixel_extents",
    "pixel_area",
    "grid_edges",
    "grid_centers",
]
