"""
Axis-aligned overlap helpers shared by the rasterizers.

All functions are Taichi funcs operating on one axis at a time. A cell spans
[c - h, c + h], a pixel k of a grid starting at lo with extent px spans
[lo + k * px, lo + (k + 1) * px].
"""

import taichi as ti

from .. import constants as cte


@ti.func
def overlap_1d(
    pix_left: cte.FLOAT_TYPE_TI,
    pix_right: cte.FLOAT_TYPE_TI,
    cell_left: cte.FLOAT_TYPE_TI,
    cell_right: cte.FLOAT_TYPE_TI,
    px: cte.FLOAT_TYPE_TI,
) -> cte.FLOAT_TYPE_TI:
    """
    Fraction of a pixel span covered by a cell span.

    Negative when the spans do not intersect, which happens at the edges of a
    pixel range computed from rounded coordinates.
    """
    return (ti.min(pix_right, cell_right) - ti.max(pix_left, cell_left)) / px


@ti.func
def misses_span(
    c: cte.FLOAT_TYPE_TI,
    h: cte.FLOAT_TYPE_TI,
    lo: cte.FLOAT_TYPE_TI,
    hi: cte.FLOAT_TYPE_TI,
) -> ti.i32:
    """1 if [c - h, c + h] lies entirely outside [lo, hi], else 0."""
    res = 0
    if c + h < lo or c - h > hi:
        res = 1
    return res


@ti.func
def pixel_lower(
    edge: cte.FLOAT_TYPE_TI, lo: cte.FLOAT_TYPE_TI, px: cte.FLOAT_TYPE_TI
) -> ti.i32:
    """First pixel index touched by a span starting at edge, clamped to 0."""
    return ti.floor(ti.max((edge - lo) / px, 0.0), dtype=ti.i32)


@ti.func
def pixel_upper(
    edge: cte.FLOAT_TYPE_TI, lo: cte.FLOAT_TYPE_TI, px: cte.FLOAT_TYPE_TI, n: ti.i32
) -> ti.i32:
    """One past the last pixel index touched by a span ending at edge, clamped to n."""
    upper: cte.FLOAT_TYPE_TI = ti.min((edge - lo) / px, ti.cast(n, cte.FLOAT_TYPE_TI))
    return ti.ceil(upper, dtype=ti.i32)


@ti.func
def periodic_image(
    c: cte.FLOAT_TYPE_TI,
    h: cte.FLOAT_TYPE_TI,
    lo: cte.FLOAT_TYPE_TI,
    hi: cte.FLOAT_TYPE_TI,
    period: cte.FLOAT_TYPE_TI,
    check_period: ti.i32,
) -> cte.VEC2_TI:
    """
    Periodic image of a cell along one axis.

    Returns (use, shift): use is 1.0 when the cell crosses the low edge (shift
    +period) or, failing that, the high edge (shift -period) and periodicity is
    enabled; otherwise (0.0, 0.0). At most one image per axis.
    """
    img = cte.VEC2_TI(0.0, 0.0)
    if check_period != 0:
        if c - h < lo:
            img = cte.VEC2_TI(1.0, period)
        elif c + h > hi:
            img = cte.VEC2_TI(1.0, -period)
    return img


__all__ = [
    "overlap_1d",
    "misses_span",
    "pixel_lower",
    "pixel_upper",
    "periodic_image",
]
