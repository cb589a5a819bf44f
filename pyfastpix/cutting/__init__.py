"""
Cutting-plane projection for PyFastPix.

Samples 3D box cells on an arbitrary plane. project_cutting_plane is the raw
kernel entry point working on caller-prepared plane coordinates and transforms;
CuttingPlane builds those from a center and a normal.

Usage:
    import taichi as ti
    import pyfastpix as pp

    ti.init(ti.cpu)
    plane = pp.cutting.CuttingPlane(center=(0.5, 0.5, 0.5), normal=(0, 0, 1))
    image = plane.pixelize(centers, half_widths, density, 512, 512, width=1.0)
"""

from .projector import cutting_plane_kernel, project_cells, project_cutting_plane
from .plane import (
    CuttingPlane,
    plane_basis,
    plane_transform,
    project_to_plane,
    select_intersecting,
)

__all__ = [
    "project_cutting_plane",
    "project_cells",
    "cutting_plane_kernel",
    "CuttingPlane",
    "plane_basis",
    "plane_transform",
    "project_to_plane",
    "select_intersecting",
]
