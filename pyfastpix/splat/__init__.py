"""
Planar splat rasterization for PyFastPix.

Antialiased (area-weighted) and aliased (last-write-wins) rasterization of 2D
rectangular cells onto a fixed-resolution pixel grid, with optional periodic
wraparound.

Usage:
    import taichi as ti
    import pyfastpix as pp

    ti.init(ti.cpu)
    grid = pp.splat.rasterize_planar(x, y, dx, dy, density,
                                     512, 512, (0.0, 1.0, 0.0, 1.0),
                                     period=(1.0, 1.0), check_period=True)
"""

from .planar import (
    SPLAT_KERNELS,
    rasterize_planar,
    splat_accumulate_kernel,
    splat_cells,
    splat_overwrite_kernel,
)

__all__ = [
    "rasterize_planar",
    "splat_cells",
    "splat_accumulate_kernel",
    "splat_overwrite_kernel",
    "SPLAT_KERNELS",
]
