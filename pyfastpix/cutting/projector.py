"""
Cutting-plane projection for PyFastPix.

Samples 3D box cells on a 2D plane: every pixel center of the output grid is
mapped back to world coordinates through the plane's inverse transform and
tested for containment in each candidate cell. A pixel takes the mean value of
the cells containing it and NaN when no cell does.

A point is inside a cell when |center - point| * cte.CONTAINMENT_MARGIN is at
most the half-width on all three axes.
"""

import numpy as np
import taichi as ti

from .. import constants as cte
from .. import pool
from ..errors import InvalidShapeError
from ..geometry.overlap import misses_span, pixel_lower, pixel_upper
from ..geometry.transforms import box_contains, plane_to_world, to_mat3, to_vec3
from ..validation import (
    as_float_array,
    check_bounds,
    check_grid_dims,
    check_inverse_transform,
    check_plane_center,
    check_same_length,
    check_selection,
)


@ti.kernel
def cutting_plane_kernel(
    centers: ti.types.ndarray(dtype=cte.FLOAT_TYPE_TI, ndim=2),
    halves: ti.types.ndarray(dtype=cte.FLOAT_TYPE_TI, ndim=2),
    plane_xy: ti.types.ndarray(dtype=cte.FLOAT_TYPE_TI, ndim=2),
    vals: ti.types.ndarray(dtype=cte.FLOAT_TYPE_TI, ndim=1),
    selection: ti.types.ndarray(dtype=cte.INT_TYPE_TI, ndim=1),
    sums: ti.template(),
    counts: ti.template(),
    k: ti.i32,
    rows: ti.i32,
    cols: ti.i32,
    px_min: cte.FLOAT_TYPE_TI,
    px_max: cte.FLOAT_TYPE_TI,
    py_min: cte.FLOAT_TYPE_TI,
    py_max: cte.FLOAT_TYPE_TI,
    px_dx: cte.FLOAT_TYPE_TI,
    px_dy: cte.FLOAT_TYPE_TI,
    origin: cte.VEC3_TI,
    inv_mat: cte.MAT3_TI,
    margin: cte.FLOAT_TYPE_TI,
    radius_factor: cte.FLOAT_TYPE_TI,
):
    """
    Accumulate the selected cells into value-sum and hit-count grids.

    Args:
        centers: Cell centers, float64 NumPy array of shape (M, 3)
        halves: Cell half-widths, float64 NumPy array of shape (M, 3)
        plane_xy: Cell centers in plane coordinates, float64 NumPy array (L, 2)
            with L > max(selection)
        vals: Cell values, float64 NumPy array of shape (M,)
        selection: Indices of the cells to process, int32 NumPy array of shape (k,)
        sums: Zero-initialized value-sum field of shape (rows, cols)
        counts: Zero-initialized hit-count field of shape (rows, cols)
        k: Number of selected cells
        rows, cols: Grid dimensions along plane x and plane y
        px_min, px_max, py_min, py_max: Plane bounds
        px_dx, px_dy: Pixel extents along plane x and plane y
        origin: World position of the plane center
        inv_mat: Plane-to-world inverse transform
        margin: Containment margin (cte.CONTAINMENT_MARGIN)
        radius_factor: Bounding radius factor (cte.BOUNDING_RADIUS_FACTOR)
    """
    for q in range(k):
        p = selection[q]
        c = cte.VEC3_TI(centers[p, 0], centers[p, 1], centers[p, 2])
        h = cte.VEC3_TI(halves[p, 0], halves[p, 1], halves[p, 2])
        pxc = plane_xy[p, 0]
        pyc = plane_xy[p, 1]
        value = vals[p]

        # no point of the cell is further than md from its center in the plane
        md: cte.FLOAT_TYPE_TI = radius_factor * ti.sqrt(h.dot(h))

        if misses_span(pxc, md, px_min, px_max) == 0 and misses_span(pyc, md, py_min, py_max) == 0:
            i_lo = pixel_lower(pxc - md, px_min, px_dx)
            i_hi = pixel_upper(pxc + md, px_min, px_dx, rows)
            j_lo = pixel_lower(pyc - md, py_min, px_dy)
            j_hi = pixel_upper(pyc + md, py_min, px_dy, cols)
            for j in range(j_lo, j_hi):
                cy: cte.FLOAT_TYPE_TI = px_dy * (ti.cast(j, cte.FLOAT_TYPE_TI) + 0.5) + py_min
                for i in range(i_lo, i_hi):
                    cx: cte.FLOAT_TYPE_TI = px_dx * (ti.cast(i, cte.FLOAT_TYPE_TI) + 0.5) + px_min
                    w = plane_to_world(inv_mat, origin, cx, cy)
                    if box_contains(c, h, w, margin) != 0:
                        sums[i, j] += value
                        counts[i, j] += 1


def project_cells(
    centers,
    plane_xy,
    halves,
    values,
    selection,
    rows: int,
    cols: int,
    bounds,
    plane_center,
    inverse_transform,
):
    """
    Run the cutting-plane kernel on already validated arrays.

    Args:
        centers, halves: float64 arrays of shape (M, 3)
        plane_xy: float64 array of shape (L, 2), L > max(selection)
        values: float64 array of shape (M,)
        selection: int32 array of shape (K,), every entry in [0, M)
        rows, cols: Validated grid dimensions
        bounds: Validated (px_min, px_max, py_min, py_max)
        plane_center: float64 array of shape (3,)
        inverse_transform: float64 array of shape (3, 3)

    Returns:
        numpy.ndarray: Mean value grid of shape (rows, cols), NaN where no cell hit
    """
    k = selection.shape[0]
    if k == 0:
        return np.full((rows, cols), np.nan, dtype=cte.FLOAT_TYPE_NP)

    px_min, px_max, py_min, py_max = bounds
    px_dx = (px_max - px_min) / rows
    px_dy = (py_max - py_min) / cols

    # cell arrays go in as ndarrays, only the grids are pooled fields
    f_sums = pool.get_temp_field(cte.FLOAT_TYPE_TI, (rows, cols))
    f_counts = pool.get_temp_field(cte.INT_TYPE_TI, (rows, cols))
    try:
        f_sums.field.fill(0.0)
        f_counts.field.fill(0)

        cutting_plane_kernel(
            centers,
            halves,
            plane_xy,
            values,
            selection,
            f_sums.field,
            f_counts.field,
            k,
            rows,
            cols,
            px_min,
            px_max,
            py_min,
            py_max,
            px_dx,
            px_dy,
            to_vec3(plane_center),
            to_mat3(inverse_transform),
            cte.CONTAINMENT_MARGIN,
            cte.BOUNDING_RADIUS_FACTOR,
        )
        sums = f_sums.field.to_numpy()
        counts = f_counts.field.to_numpy()
    finally:
        f_sums.release()
        f_counts.release()

    # unsampled pixels stay NaN
    result = np.full((rows, cols), np.nan, dtype=cte.FLOAT_TYPE_NP)
    np.divide(sums, counts, out=result, where=counts > 0)
    return result


def project_cutting_plane(
    centers_xyz,
    plane_xy,
    half_xyz,
    values,
    selection_indices,
    rows: int,
    cols: int,
    plane_bounds,
    plane_center,
    inverse_transform,
):
    """
    Sample 3D box cells on a cutting plane.

    Args:
        centers_xyz: Cell centers, array of shape (M, 3)
        plane_xy: Cell centers projected on the plane, array of shape (L, 2).
            Only rows of selected cells are read, so L may differ from M as
            long as L > max(selection_indices)
        half_xyz: Cell half-widths, array of shape (M, 3)
        values: Cell values, array of shape (M,)
        selection_indices: Integer indices (K,) of the cells to process, in order
        rows: Number of pixels along plane x (axis 0 of the output)
        cols: Number of pixels along plane y (axis 1 of the output)
        plane_bounds: (px_min, px_max, py_min, py_max) in plane coordinates
        plane_center: World position of the plane origin (3 values)
        inverse_transform: 3x3 matrix mapping plane coordinates to world offsets

    Returns:
        numpy.ndarray: float64 grid of shape (rows, cols) holding the mean value
        of the cells containing each pixel center, NaN where none does.

    Raises:
        InvalidDimensionError: rows or cols not positive, or degenerate bounds
        InvalidShapeError: mismatching per-cell arrays, plane_xy too short
            for the selection, plane_center not of three elements,
            inverse_transform not of nine elements
        InvalidIndexError: a selection index outside [0, M) or not an integer
    """
    rows, cols = check_grid_dims(rows, cols)
    bounds = check_bounds(plane_bounds)

    centers = as_float_array("centers_xyz", centers_xyz, ndim=2, width=3)
    pxy = as_float_array("plane_xy", plane_xy, ndim=2, width=2)
    halves = as_float_array("half_xyz", half_xyz, ndim=2, width=3)
    vals = as_float_array("values", values)
    m = check_same_length(centers_xyz=centers, half_xyz=halves, values=vals)

    center = check_plane_center(plane_center)
    inv = check_inverse_transform(inverse_transform)
    selection = check_selection(selection_indices, m)
    # plane coordinates are only read for selected cells
    if selection.size and pxy.shape[0] <= int(selection.max()):
        raise InvalidShapeError(
            f"plane_xy has {pxy.shape[0]} rows, selection reaches index {int(selection.max())}"
        )

    return project_cells(centers, pxy, halves, vals, selection, rows, cols, bounds, center, inv)


__all__ = ["project_cutting_plane", "project_cells", "cutting_plane_kernel"]
