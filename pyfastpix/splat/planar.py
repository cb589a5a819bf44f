"""
Planar splat rasterization for PyFastPix.

Projects 2D axis-aligned rectangular cells (center +- half-width) onto a
regular pixel grid. Two pixel write policies are available:

- accumulate (antialiased): every pixel receives value * ox * oy where ox and oy
  are the fractions of the pixel extent covered by the cell along x and y.
  A pixel fully covered by a cell receives the full value, so the sum of the
  grid is value * cell_area / pixel_area.
- overwrite (aliased): every pixel the cell overlaps along both axes is set to
  its value. Overlaps below cte.MIN_OVERWRITE_OVERLAP of a pixel extent are
  rounding artifacts of shared edges and do not count.
  Cells are processed sequentially in input order, periodic images in the order
  (x, y), (x, y'), (x', y), (x', y'); the last write wins.

With periodicity enabled, a cell crossing a domain edge is also splatted at one
periodic image per axis, shifted by +-period.
"""

import numpy as np
import taichi as ti

from .. import constants as cte
from .. import pool
from ..geometry.overlap import (
    misses_span,
    overlap_1d,
    periodic_image,
    pixel_lower,
    pixel_upper,
)
from ..validation import (
    as_float_array,
    check_bounds,
    check_grid_dims,
    check_pair,
    check_same_length,
)


@ti.func
def _splat_image(
    grid: ti.template(),
    xc: cte.FLOAT_TYPE_TI,
    yc: cte.FLOAT_TYPE_TI,
    hx: cte.FLOAT_TYPE_TI,
    hy: cte.FLOAT_TYPE_TI,
    value: cte.FLOAT_TYPE_TI,
    rows: ti.i32,
    cols: ti.i32,
    x_min: cte.FLOAT_TYPE_TI,
    x_max: cte.FLOAT_TYPE_TI,
    y_min: cte.FLOAT_TYPE_TI,
    y_max: cte.FLOAT_TYPE_TI,
    px_dx: cte.FLOAT_TYPE_TI,
    px_dy: cte.FLOAT_TYPE_TI,
    policy: ti.template(),
):
    """Write one rectangle (a cell or one of its periodic images) into grid."""
    if misses_span(xc, hx, x_min, x_max) == 0 and misses_span(yc, hy, y_min, y_max) == 0:
        i_lo = pixel_lower(xc - hx, x_min, px_dx)
        i_hi = pixel_upper(xc + hx, x_min, px_dx, rows)
        j_lo = pixel_lower(yc - hy, y_min, px_dy)
        j_hi = pixel_upper(yc + hy, y_min, px_dy, cols)
        for j in range(j_lo, j_hi):
            y_left: cte.FLOAT_TYPE_TI = px_dy * j + y_min
            y_right: cte.FLOAT_TYPE_TI = px_dy * (j + 1) + y_min
            oy = overlap_1d(y_left, y_right, yc - hy, yc + hy, px_dy)
            for i in range(i_lo, i_hi):
                x_left: cte.FLOAT_TYPE_TI = px_dx * i + x_min
                x_right: cte.FLOAT_TYPE_TI = px_dx * (i + 1) + x_min
                ox = overlap_1d(x_left, x_right, xc - hx, xc + hx, px_dx)
                if ti.static(policy == cte.WRITE_ACCUMULATE):
                    if ox >= 0.0 and oy >= 0.0:
                        grid[i, j] += value * ox * oy
                else:
                    # a rounding sliver of a neighbouring pixel is not a hit
                    if ox > cte.MIN_OVERWRITE_OVERLAP and oy > cte.MIN_OVERWRITE_OVERLAP:
                        grid[i, j] = value


@ti.func
def _splat_cell(
    grid: ti.template(),
    xc: cte.FLOAT_TYPE_TI,
    yc: cte.FLOAT_TYPE_TI,
    hx: cte.FLOAT_TYPE_TI,
    hy: cte.FLOAT_TYPE_TI,
    value: cte.FLOAT_TYPE_TI,
    rows: ti.i32,
    cols: ti.i32,
    x_min: cte.FLOAT_TYPE_TI,
    x_max: cte.FLOAT_TYPE_TI,
    y_min: cte.FLOAT_TYPE_TI,
    y_max: cte.FLOAT_TYPE_TI,
    px_dx: cte.FLOAT_TYPE_TI,
    px_dy: cte.FLOAT_TYPE_TI,
    period_x: cte.FLOAT_TYPE_TI,
    period_y: cte.FLOAT_TYPE_TI,
    check_period: ti.i32,
    policy: ti.template(),
):
    """Splat a cell at its own position and at up to three periodic images."""
    x_img = periodic_image(xc, hx, x_min, x_max, period_x, check_period)
    y_img = periodic_image(yc, hy, y_min, y_max, period_y, check_period)

    # candidate offsets per axis: slot 0 is the cell itself, slot 1 its image
    use_x = cte.VEC2_TI(1.0, x_img[0])
    use_y = cte.VEC2_TI(1.0, y_img[0])
    shift_x = cte.VEC2_TI(0.0, x_img[1])
    shift_y = cte.VEC2_TI(0.0, y_img[1])

    for a in ti.static(range(2)):
        for b in ti.static(range(2)):
            if use_x[a] > 0.0 and use_y[b] > 0.0:
                _splat_image(
                    grid,
                    xc + shift_x[a],
                    yc + shift_y[b],
                    hx,
                    hy,
                    value,
                    rows,
                    cols,
                    x_min,
                    x_max,
                    y_min,
                    y_max,
                    px_dx,
                    px_dy,
                    policy,
                )


@ti.kernel
def splat_accumulate_kernel(
    xs: ti.types.ndarray(dtype=cte.FLOAT_TYPE_TI, ndim=1),
    ys: ti.types.ndarray(dtype=cte.FLOAT_TYPE_TI, ndim=1),
    hxs: ti.types.ndarray(dtype=cte.FLOAT_TYPE_TI, ndim=1),
    hys: ti.types.ndarray(dtype=cte.FLOAT_TYPE_TI, ndim=1),
    vals: ti.types.ndarray(dtype=cte.FLOAT_TYPE_TI, ndim=1),
    grid: ti.template(),
    n: ti.i32,
    rows: ti.i32,
    cols: ti.i32,
    x_min: cte.FLOAT_TYPE_TI,
    x_max: cte.FLOAT_TYPE_TI,
    y_min: cte.FLOAT_TYPE_TI,
    y_max: cte.FLOAT_TYPE_TI,
    px_dx: cte.FLOAT_TYPE_TI,
    px_dy: cte.FLOAT_TYPE_TI,
    period_x: cte.FLOAT_TYPE_TI,
    period_y: cte.FLOAT_TYPE_TI,
    check_period: ti.i32,
):
    """
    Area-weighted splat of n cells into grid.

    Cells are processed in parallel; contributions to a shared pixel are
    combined with atomic adds.

    Args:
        xs, ys: Cell centers, float64 NumPy arrays of n elements
        hxs, hys: Cell half-widths, float64 NumPy arrays of n elements
        vals: Cell values, float64 NumPy array of n elements
        grid: Zero-initialized output field of shape (rows, cols)
        n: Number of cells
        rows, cols: Grid dimensions along x and y
        x_min, x_max, y_min, y_max: Grid bounds
        px_dx, px_dy: Pixel extents along x and y
        period_x, period_y: Domain periods used for periodic images
        check_period: 1 to enable periodic images, 0 otherwise
    """
    for p in range(n):
        _splat_cell(
            grid,
            xs[p],
            ys[p],
            hxs[p],
            hys[p],
            vals[p],
            rows,
            cols,
            x_min,
            x_max,
            y_min,
            y_max,
            px_dx,
            px_dy,
            period_x,
            period_y,
            check_period,
            cte.WRITE_ACCUMULATE,
        )


@ti.kernel
def splat_overwrite_kernel(
    xs: ti.types.ndarray(dtype=cte.FLOAT_TYPE_TI, ndim=1),
    ys: ti.types.ndarray(dtype=cte.FLOAT_TYPE_TI, ndim=1),
    hxs: ti.types.ndarray(dtype=cte.FLOAT_TYPE_TI, ndim=1),
    hys: ti.types.ndarray(dtype=cte.FLOAT_TYPE_TI, ndim=1),
    vals: ti.types.ndarray(dtype=cte.FLOAT_TYPE_TI, ndim=1),
    grid: ti.template(),
    n: ti.i32,
    rows: ti.i32,
    cols: ti.i32,
    x_min: cte.FLOAT_TYPE_TI,
    x_max: cte.FLOAT_TYPE_TI,
    y_min: cte.FLOAT_TYPE_TI,
    y_max: cte.FLOAT_TYPE_TI,
    px_dx: cte.FLOAT_TYPE_TI,
    px_dy: cte.FLOAT_TYPE_TI,
    period_x: cte.FLOAT_TYPE_TI,
    period_y: cte.FLOAT_TYPE_TI,
    check_period: ti.i32,
):
    """
    Aliased splat of n cells into grid, last write wins.

    Same arguments as splat_accumulate_kernel. The cell loop is serialized so
    the final value of a pixel covered by several cells is the value of the
    last one in input order.
    """
    ti.loop_config(serialize=True)
    for p in range(n):
        _splat_cell(
            grid,
            xs[p],
            ys[p],
            hxs[p],
            hys[p],
            vals[p],
            rows,
            cols,
            x_min,
            x_max,
            y_min,
            y_max,
            px_dx,
            px_dy,
            period_x,
            period_y,
            check_period,
            cte.WRITE_OVERWRITE,
        )


SPLAT_KERNELS = {
    cte.WRITE_ACCUMULATE: splat_accumulate_kernel,
    cte.WRITE_OVERWRITE: splat_overwrite_kernel,
}


def splat_cells(
    x,
    y,
    hx,
    hy,
    values,
    rows: int,
    cols: int,
    bounds,
    policy: int = cte.WRITE_ACCUMULATE,
    period=(0.0, 0.0),
    check_period: bool = False,
):
    """
    Run a splat kernel on already validated float64 arrays.

    Args:
        x, y, hx, hy, values: 1D contiguous float64 arrays of equal length
        rows, cols: Validated grid dimensions
        bounds: Validated (x_min, x_max, y_min, y_max)
        policy: cte.WRITE_ACCUMULATE, cte.WRITE_OVERWRITE or a name from
            cte.WRITE_POLICIES ("accumulate", "overwrite")
        period: (period_x, period_y)
        check_period: Enable periodic images

    Returns:
        numpy.ndarray: Grid of shape (rows, cols)
    """
    policy = cte.WRITE_POLICIES.get(policy, policy)
    if policy not in SPLAT_KERNELS:
        raise ValueError(f"Unknown write policy {policy!r}")

    n = x.shape[0]
    if n == 0:
        return np.zeros((rows, cols), dtype=cte.FLOAT_TYPE_NP)

    x_min, x_max, y_min, y_max = bounds
    px_dx = (x_max - x_min) / rows
    px_dy = (y_max - y_min) / cols

    # per-cell arrays go in as ndarrays, only the grid is a pooled field
    grid = pool.get_temp_field(cte.FLOAT_TYPE_TI, (rows, cols))
    try:
        grid.field.fill(0.0)

        SPLAT_KERNELS[policy](
            x,
            y,
            hx,
            hy,
            values,
            grid.field,
            n,
            rows,
            cols,
            x_min,
            x_max,
            y_min,
            y_max,
            px_dx,
            px_dy,
            float(period[0]),
            float(period[1]),
            1 if check_period else 0,
        )
        result = grid.field.to_numpy()
    finally:
        grid.release()

    return result


def rasterize_planar(
    centers_x,
    centers_y,
    half_x,
    half_y,
    values,
    rows: int,
    cols: int,
    bounds,
    antialias: bool = True,
    period=(0.0, 0.0),
    check_period: bool = False,
):
    """
    Rasterize 2D rectangular cells onto a regular pixel grid.

    Args:
        centers_x, centers_y: Cell centers, N elements each
        half_x, half_y: Cell half-widths, N elements each
        values: Cell values, N elements
        rows: Number of pixels along x (axis 0 of the output)
        cols: Number of pixels along y (axis 1 of the output)
        bounds: (x_min, x_max, y_min, y_max) of the output grid
        antialias: If True, accumulate area-weighted contributions; if False,
            overwrite covered pixels with the cell value (last cell wins)
        period: (period_x, period_y) domain periods
        check_period: If True, cells crossing a domain edge are also drawn at
            their periodic image on that axis

    Returns:
        numpy.ndarray: float64 grid of shape (rows, cols). All zeros when N == 0.

    Raises:
        InvalidDimensionError: rows or cols not positive, or degenerate bounds
        InvalidShapeError: arrays not 1D or of different lengths

    Example:
        grid = rasterize_planar([0.0], [0.0], [1.0], [1.0], [4.0],
                                2, 2, (-1.0, 1.0, -1.0, 1.0))
        # every pixel is fully covered: grid == 4.0
    """
    # dimensions first, nothing is allocated for an unusable grid
    rows, cols = check_grid_dims(rows, cols)
    bounds = check_bounds(bounds)
    period = check_pair("period", period)

    x = as_float_array("centers_x", centers_x)
    y = as_float_array("centers_y", centers_y)
    hx = as_float_array("half_x", half_x)
    hy = as_float_array("half_y", half_y)
    v = as_float_array("values", values)
    check_same_length(centers_x=x, centers_y=y, half_x=hx, half_y=hy, values=v)

    policy = cte.WRITE_ACCUMULATE if antialias else cte.WRITE_OVERWRITE
    return splat_cells(
        x, y, hx, hy, v, rows, cols, bounds,
        policy=policy, period=period, check_period=check_period,
    )


__all__ = [
    "rasterize_planar",
    "splat_cells",
    "splat_accumulate_kernel",
    "splat_overwrite_kernel",
    "SPLAT_KERNELS",
]
