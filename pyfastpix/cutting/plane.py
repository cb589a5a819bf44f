"""
Cutting plane frame construction.

Builds the orthonormal frame of a plane from its normal (and optionally a north
vector), the rotation into plane coordinates and its inverse, projects cell
centers onto the plane and selects the cells whose boxes reach it. The
CuttingPlane class bundles all of it in front of project_cutting_plane.
"""

import numpy as np

from .. import constants as cte
from ..errors import InvalidShapeError
from ..validation import (
    as_float_array,
    check_grid_dims,
    check_plane_center,
    check_same_length,
)
from .projector import project_cutting_plane


def _as_vec3(name, vec):
    arr = np.asarray(vec, dtype=cte.FLOAT_TYPE_NP).ravel()
    if arr.size != 3:
        raise InvalidShapeError(f"{name} must have three components, got {arr.size}")
    return arr


def plane_basis(normal, north_vector=None):
    """
    Orthonormal frame (x_vec, y_vec, normal) of a plane.

    Without a north vector the world axis two steps after the dominant axis of
    the normal is used, which gives the usual frames for axis-aligned planes:
    normal z -> (x, y), normal x -> (y, z), normal y -> (z, x).

    Args:
        normal: Plane normal (3 values, any length > 0)
        north_vector: Direction that should point "up" (plane y) in the image

    Returns:
        tuple: (x_vec, y_vec, n), unit vectors with x_vec x y_vec == n

    Raises:
        InvalidShapeError: zero normal, or north vector parallel to the normal
    """
    n = _as_vec3("normal", normal)
    length = np.linalg.norm(n)
    if length == 0.0:
        raise InvalidShapeError("normal must be a non-zero vector")
    n = n / length

    if north_vector is None:
        north = np.zeros(3, dtype=cte.FLOAT_TYPE_NP)
        north[(int(np.argmax(np.abs(n))) + 2) % 3] = 1.0
    else:
        north = _as_vec3("north_vector", north_vector)

    y_vec = north - np.dot(north, n) * n
    y_len = np.linalg.norm(y_vec)
    if y_len <= 1e-12 * max(np.linalg.norm(north), 1.0):
        raise InvalidShapeError("north_vector must not be parallel to the normal")
    y_vec = y_vec / y_len
    x_vec = np.cross(y_vec, n)
    return x_vec, y_vec, n


def plane_transform(normal, north_vector=None):
    """
    Rotation into plane coordinates and its inverse.

    Returns:
        tuple: (rotation, inverse_transform), both (3, 3). The rows of rotation
        are (x_vec, y_vec, n); inverse_transform maps (u, v, w) plane
        coordinates back to a world offset.
    """
    rotation = np.vstack(plane_basis(normal, north_vector))
    return rotation, np.linalg.inv(rotation)


def project_to_plane(centers_xyz, plane_center, rotation):
    """Plane coordinates (M, 2) of world points (M, 3) relative to plane_center."""
    centers = as_float_array("centers_xyz", centers_xyz, ndim=2, width=3)
    center = check_plane_center(plane_center)
    rot = np.asarray(rotation, dtype=cte.FLOAT_TYPE_NP).reshape(3, 3)
    return np.ascontiguousarray((centers - center) @ rot[:2].T)


def select_intersecting(centers_xyz, half_xyz, plane_center, normal):
    """
    Indices of the boxes intersecting the plane.

    A box reaches the plane when the distance from its center to the plane is at
    most the projection of its half-widths on the normal.
    """
    centers = as_float_array("centers_xyz", centers_xyz, ndim=2, width=3)
    halves = as_float_array("half_xyz", half_xyz, ndim=2, width=3)
    check_same_length(centers_xyz=centers, half_xyz=halves)
    center = check_plane_center(plane_center)
    n = _as_vec3("normal", normal)
    n = n / np.linalg.norm(n)

    distance = (centers - center) @ n
    reach = np.abs(halves) @ np.abs(n)
    return np.flatnonzero(np.abs(distance) <= reach)


class CuttingPlane:
    """
    Plane slicing through 3D cell data.

    Example:
        plane = CuttingPlane(center=(0.5, 0.5, 0.5), normal=(1, 1, 0))
        image = plane.pixelize(centers, half_widths, density, 256, 256, width=1.0)
    """

    def __init__(self, center, normal, north_vector=None):
        self.center = check_plane_center(center)
        self.x_vec, self.y_vec, self.normal = plane_basis(normal, north_vector)
        self.rotation = np.vstack((self.x_vec, self.y_vec, self.normal))
        self.inverse_transform = np.linalg.inv(self.rotation)

    def to_plane(self, centers_xyz):
        """Plane coordinates (M, 2) of world points (M, 3)."""
        return project_to_plane(centers_xyz, self.center, self.rotation)

    def to_world(self, u, v):
        """World coordinates of plane points, shape (..., 3)."""
        u = np.asarray(u, dtype=cte.FLOAT_TYPE_NP)
        v = np.asarray(v, dtype=cte.FLOAT_TYPE_NP)
        uvw = np.stack((u, v, np.zeros_like(u)), axis=-1)
        return uvw @ self.inverse_transform.T + self.center

    def select(self, centers_xyz, half_xyz):
        """Indices of the cells intersecting the plane."""
        return select_intersecting(centers_xyz, half_xyz, self.center, self.normal)

    @staticmethod
    def bounds(width, height=None):
        """Plane bounds of a width x height window centered on the plane origin."""
        if height is None:
            height = width
        return (-0.5 * width, 0.5 * width, -0.5 * height, 0.5 * height)

    def pixelize(self, centers_xyz, half_xyz, values, rows, cols, width, height=None):
        """
        Sample the cells on a rows x cols window of the plane.

        Args:
            centers_xyz: Cell centers (M, 3)
            half_xyz: Cell half-widths (M, 3)
            values: Cell values (M,)
            rows, cols: Output grid dimensions (plane x, plane y)
            width: Window size along plane x
            height: Window size along plane y (defaults to width)

        Returns:
            numpy.ndarray: (rows, cols) grid, NaN where no cell is cut
        """
        rows, cols = check_grid_dims(rows, cols)
        centers = as_float_array("centers_xyz", centers_xyz, ndim=2, width=3)
        halves = as_float_array("half_xyz", half_xyz, ndim=2, width=3)
        vals = as_float_array("values", values)
        check_same_length(centers_xyz=centers, half_xyz=halves, values=vals)

        return project_cutting_plane(
            centers,
            self.to_plane(centers),
            halves,
            vals,
            self.select(centers, halves),
            rows,
            cols,
            self.bounds(width, height),
            self.center,
            self.inverse_transform,
        )

    def __repr__(self):
        return (
            f"CuttingPlane(center={self.center.tolist()}, "
            f"normal={self.normal.tolist()})"
        )


__all__ = [
    "plane_basis",
    "plane_transform",
    "project_to_plane",
    "select_intersecting",
    "CuttingPlane",
]
