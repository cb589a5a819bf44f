"""
Plane-to-world transform and box containment test.

A cutting plane is described by its origin (a world point) and a 3x3 inverse
transform whose first two columns are the in-plane unit vectors. A plane point
(u, v) maps to world as ``M @ (u, v, 0) + origin``.
"""

import numpy as np
import taichi as ti

from .. import constants as cte


@ti.func
def plane_to_world(
    inv_mat: cte.MAT3_TI,
    origin: cte.VEC3_TI,
    u: cte.FLOAT_TYPE_TI,
    v: cte.FLOAT_TYPE_TI,
) -> cte.VEC3_TI:
    """Back-transform the plane point (u, v) to world coordinates."""
    return inv_mat @ cte.VEC3_TI(u, v, 0.0) + origin


@ti.func
def box_contains(
    center: cte.VEC3_TI,
    half: cte.VEC3_TI,
    point: cte.VEC3_TI,
    margin: cte.FLOAT_TYPE_TI,
) -> ti.i32:
    """1 if |center - point| * margin <= half on every axis, else 0."""
    inside = 1
    for k in ti.static(range(3)):
        if ti.abs(center[k] - point[k]) * margin > half[k]:
            inside = 0
    return inside


def to_mat3(matrix):
    """Wrap a (3, 3) NumPy array as a kernel-ready matrix value."""
    m = np.asarray(matrix, dtype=cte.FLOAT_TYPE_NP).reshape(3, 3)
    return ti.Matrix(m.tolist(), dt=cte.FLOAT_TYPE_TI)


def to_vec3(vector):
    """Wrap a 3-element sequence as a kernel-ready vector value."""
    v = np.asarray(vector, dtype=cte.FLOAT_TYPE_NP).ravel()
    return ti.Vector(v.tolist(), dt=cte.FLOAT_TYPE_TI)


__all__ = ["plane_to_world", "box_contains", "to_mat3", "to_vec3"]
