"""
Global constants for PyFastPix.

Numerical types and geometric tolerances shared by every rasterization kernel.
Kernels read these through ``from .. import constants as cte`` so that a single
edit here changes the precision of the whole package.
"""

import numpy as np
import taichi as ti

# Floating point precision of grids, coordinates and accumulators
FLOAT_TYPE_TI = ti.f64
FLOAT_TYPE_NP = np.float64

# Index type for selection arrays and hit counters
INT_TYPE_TI = ti.i32
INT_TYPE_NP = np.int32

# Small value types used inside kernels
VEC2_TI = ti.types.vector(2, FLOAT_TYPE_TI)
VEC3_TI = ti.types.vector(3, FLOAT_TYPE_TI)
MAT3_TI = ti.types.matrix(3, 3, FLOAT_TYPE_TI)

# A plane point is inside a cell when |c - w| * CONTAINMENT_MARGIN <= h on all axes.
# Points up to h / CONTAINMENT_MARGIN away from the center still count as inside.
CONTAINMENT_MARGIN = 0.95

# Cells further than BOUNDING_RADIUS_FACTOR * |h| from a pixel cannot cover it
BOUNDING_RADIUS_FACTOR = 2.0

# Overwrite skips pixels covered by less than this fraction of their extent,
# edges of aligned meshes land a few ulps inside the neighbouring pixel
MIN_OVERWRITE_OVERLAP = 1e-9

# Pixel write policies
WRITE_ACCUMULATE = 0
WRITE_OVERWRITE = 1

WRITE_POLICIES = {
    "accumulate": WRITE_ACCUMULATE,
    "overwrite": WRITE_OVERWRITE,
}
