"""
PyFastPix: GPU pixelization of adaptive-mesh data.

Rasterizes irregularly sized, scattered cells onto fixed-resolution pixel grids
with Taichi kernels. Two independent, stateless operations form the core:

- splat.rasterize_planar: antialiased area-weighted (or aliased) splat of 2D
  rectangular cells, with optional periodic wraparound
- cutting.project_cutting_plane: sampling of 3D box cells on a cutting plane
  through an inverse transform and a containment test

Taichi must be initialized by the caller before the first call:

    import taichi as ti
    import pyfastpix as pp

    ti.init(ti.gpu)
    grid = pp.rasterize_planar(x, y, dx, dy, values, 256, 256, (0, 1, 0, 1))
"""

__version__ = "0.0.1"

from . import constants
from . import errors
from . import pool
from . import validation
from . import geometry
from . import splat
from . import cutting

from .errors import (
    InvalidDimensionError,
    InvalidIndexError,
    InvalidShapeError,
    PixelizeError,
)
from .splat import rasterize_planar
from .cutting import CuttingPlane, project_cutting_plane

__all__ = [
    "constants",
    "errors",
    "pool",
    "validation",
    "geometry",
    "splat",
    "cutting",
    "rasterize_planar",
    "project_cutting_plane",
    "CuttingPlane",
    "PixelizeError",
    "InvalidShapeError",
    "InvalidDimensionError",
    "InvalidIndexError",
]
