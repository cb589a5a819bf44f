"""
Pytest configuration and fixtures for PyFastPix test suite.

This file contains shared fixtures, test configuration, and utilities
used across the test suite.
"""
import os
import sys
import pytest
import numpy as np


_TAICHI_READY = False


def pytest_configure(config):
    """Configure pytest with custom settings."""
    # Add the package root to Python path for testing
    package_root = os.path.dirname(os.path.dirname(__file__))
    if package_root not in sys.path:
        sys.path.insert(0, package_root)

    for marker in ("unit", "integration", "gpu", "slow", "importtest"):
        config.addinivalue_line("markers", f"{marker}: {marker} tests")


def pytest_collection_modifyitems(config, items):
    """Modify test collection to add markers and ordering."""
    for item in items:
        # Mark GPU tests
        if "gpu" in item.keywords:
            item.add_marker("slow")

        # Mark import tests for easy selection
        if "import" in item.name.lower() or "test_imports.py" in str(item.fspath):
            item.add_marker("importtest")


@pytest.fixture
def skip_if_no_taichi():
    """
    Initialize Taichi on the CPU once per session, skip if that fails.

    Re-initializing for every test would invalidate the fields held by the pool.
    """
    global _TAICHI_READY
    try:
        import taichi as ti
        import pyfastpix as pp

        if not _TAICHI_READY:
            ti.init(arch=ti.cpu, offline_cache=False)
            pp.pool.taipool.clear()
            _TAICHI_READY = True
        return True
    except Exception:
        pytest.skip("Taichi not available or initialization failed")


class CellFactory:
    """Helper class building synthetic cell sets."""

    @staticmethod
    def uniform_2d(nx=8, ny=8, bounds=(0.0, 1.0, 0.0, 1.0), seed=42):
        """Regular 2D mesh of nx * ny cells with random values."""
        x_min, x_max, y_min, y_max = bounds
        hx = 0.5 * (x_max - x_min) / nx
        hy = 0.5 * (y_max - y_min) / ny
        xc = x_min + hx * (2 * np.arange(nx) + 1)
        yc = y_min + hy * (2 * np.arange(ny) + 1)
        X, Y = np.meshgrid(xc, yc, indexing="ij")
        rng = np.random.default_rng(seed)
        values = rng.random(nx * ny) * 10.0
        return (
            X.ravel(),
            Y.ravel(),
            np.full(nx * ny, hx),
            np.full(nx * ny, hy),
            values,
        )

    @staticmethod
    def random_2d(n=50, bounds=(0.0, 1.0, 0.0, 1.0), max_half=0.1, seed=7):
        """Scattered overlapping rectangles of random size."""
        rng = np.random.default_rng(seed)
        x_min, x_max, y_min, y_max = bounds
        x = rng.uniform(x_min, x_max, n)
        y = rng.uniform(y_min, y_max, n)
        hx = rng.uniform(0.01, max_half, n)
        hy = rng.uniform(0.01, max_half, n)
        values = rng.uniform(-5.0, 5.0, n)
        return x, y, hx, hy, values

    @staticmethod
    def uniform_3d(n=8, seed=3):
        """Regular n^3 mesh of cubes filling the unit cube."""
        h = 0.5 / n
        c = h * (2 * np.arange(n) + 1)
        X, Y, Z = np.meshgrid(c, c, c, indexing="ij")
        centers = np.column_stack((X.ravel(), Y.ravel(), Z.ravel()))
        halves = np.full_like(centers, h)
        rng = np.random.default_rng(seed)
        values = rng.random(n**3) + 1.0
        return centers, halves, values


@pytest.fixture
def cell_factory():
    """Provide access to synthetic cell builders."""
    return CellFactory()
