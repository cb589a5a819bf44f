"""
Unit tests for planar splat rasterization.

reference_splat is a brute-force NumPy version summing clipped overlap
fractions over every pixel for every cell.
"""
import numpy as np
import pytest

import pyfastpix.constants as cte
from pyfastpix import pool
from pyfastpix.errors import InvalidDimensionError, InvalidShapeError
from pyfastpix.geometry import pixel_area
from pyfastpix.splat import rasterize_planar, splat_cells

DOMAIN = (-1.0, 1.0, -1.0, 1.0)


def reference_splat(x, y, hx, hy, values, rows, cols, bounds):
    """Antialiased splat without periodicity, in NumPy."""
    x_min, x_max, y_min, y_max = bounds
    px_dx = (x_max - x_min) / rows
    px_dy = (y_max - y_min) / cols
    xl = x_min + px_dx * np.arange(rows)
    yl = y_min + px_dy * np.arange(cols)
    grid = np.zeros((rows, cols))
    for p in range(len(values)):
        if x[p] + hx[p] < x_min or x[p] - hx[p] > x_max:
            continue
        if y[p] + hy[p] < y_min or y[p] - hy[p] > y_max:
            continue
        ox = (np.minimum(xl + px_dx, x[p] + hx[p]) - np.maximum(xl, x[p] - hx[p])) / px_dx
        oy = (np.minimum(yl + px_dy, y[p] + hy[p]) - np.maximum(yl, y[p] - hy[p])) / px_dy
        grid += values[p] * np.outer(np.clip(ox, 0.0, None), np.clip(oy, 0.0, None))
    return grid


class TestSingleCell:
    """Single cell scenarios."""

    @pytest.mark.unit
    @pytest.mark.gpu
    def test_empty_input_gives_zero_grid(self, skip_if_no_taichi):
        grid = rasterize_planar([], [], [], [], [], 3, 5, DOMAIN)
        assert grid.shape == (3, 5)
        assert grid.dtype == np.float64
        assert np.all(grid == 0.0)

    @pytest.mark.unit
    @pytest.mark.gpu
    def test_cell_covering_domain_antialiased(self, skip_if_no_taichi):
        """Each pixel is fully covered, so it receives the full value."""
        grid = rasterize_planar([0.0], [0.0], [1.0], [1.0], [4.0], 2, 2, DOMAIN)
        np.testing.assert_array_equal(grid, np.full((2, 2), 4.0))

    @pytest.mark.unit
    @pytest.mark.gpu
    def test_cell_covering_domain_aliased(self, skip_if_no_taichi):
        grid = rasterize_planar(
            [0.0], [0.0], [1.0], [1.0], [4.0], 2, 2, DOMAIN, antialias=False
        )
        np.testing.assert_array_equal(grid, np.full((2, 2), 4.0))

    @pytest.mark.unit
    @pytest.mark.gpu
    def test_mass_conservation(self, skip_if_no_taichi):
        """The grid sums to value * cell_area / pixel_area."""
        value, hx, hy = 2.5, 0.45, 0.3
        grid = rasterize_planar([0.3], [-0.2], [hx], [hy], [value], 16, 16, DOMAIN)
        expected = value * (2 * hx) * (2 * hy) / pixel_area(16, 16, DOMAIN)
        assert grid.sum() == pytest.approx(expected, rel=1e-12)

    @pytest.mark.unit
    @pytest.mark.gpu
    def test_partial_overlap_weights(self, skip_if_no_taichi):
        """Pixels partially covered along x receive a fraction of the value."""
        grid = rasterize_planar([0.1], [0.0], [0.5], [0.5], [10.0], 4, 4, DOMAIN)
        # x span [-0.4, 0.6] over pixels of 0.5 starting at -1
        np.testing.assert_allclose(grid[1, 1:3], 8.0)
        np.testing.assert_allclose(grid[2, 1:3], 10.0)
        np.testing.assert_allclose(grid[3, 1:3], 2.0)
        assert np.all(grid[0] == 0.0)
        assert np.all(grid[:, 0] == 0.0)
        assert np.all(grid[:, 3] == 0.0)

    @pytest.mark.unit
    @pytest.mark.gpu
    def test_partial_overlap_aliased(self, skip_if_no_taichi):
        """Without antialiasing every touched pixel takes the full value."""
        grid = rasterize_planar(
            [0.1], [0.0], [0.5], [0.5], [10.0], 4, 4, DOMAIN, antialias=False
        )
        expected = np.zeros((4, 4))
        expected[1:4, 1:3] = 10.0
        np.testing.assert_array_equal(grid, expected)

    @pytest.mark.unit
    @pytest.mark.gpu
    def test_aliased_interior_pixels(self, skip_if_no_taichi):
        grid = rasterize_planar(
            [0.0], [0.0], [0.5], [0.5], [7.0], 4, 4, DOMAIN, antialias=False
        )
        expected = np.zeros((4, 4))
        expected[1:3, 1:3] = 7.0
        np.testing.assert_array_equal(grid, expected)

    @pytest.mark.unit
    @pytest.mark.gpu
    def test_axis_orientation(self, skip_if_no_taichi):
        """Axis 0 spans x with rows pixels, axis 1 spans y with cols pixels."""
        grid = rasterize_planar(
            [0.75], [-0.75], [0.25], [0.25], [1.0], 4, 2, (0.0, 1.0, -1.0, 1.0)
        )
        assert grid.shape == (4, 2)
        # x in [0.5, 1.0] -> rows 2, 3 ; y in [-1, -0.5] -> half of col 0
        np.testing.assert_allclose(grid[2:, 0], 0.5)
        assert np.all(grid[:2] == 0.0)
        assert np.all(grid[:, 1] == 0.0)

    @pytest.mark.unit
    @pytest.mark.gpu
    def test_cell_outside_bounds(self, skip_if_no_taichi):
        grid = rasterize_planar([5.0], [0.0], [0.5], [0.5], [1.0], 4, 4, DOMAIN)
        assert np.all(grid == 0.0)


class TestManyCells:
    """Multiple cells and write policies."""

    @pytest.mark.unit
    @pytest.mark.gpu
    def test_matches_reference(self, skip_if_no_taichi, cell_factory):
        cells = cell_factory.random_2d(n=60, bounds=DOMAIN, max_half=0.3)
        grid = rasterize_planar(*cells, 20, 12, DOMAIN)
        expected = reference_splat(*cells, 20, 12, DOMAIN)
        np.testing.assert_allclose(grid, expected, rtol=1e-10, atol=1e-10)

    @pytest.mark.unit
    @pytest.mark.gpu
    def test_uniform_mesh_reproduces_values(self, skip_if_no_taichi, cell_factory):
        """A mesh aligned with the pixels is copied pixel for pixel."""
        x, y, hx, hy, values = cell_factory.uniform_2d(8, 8, bounds=(0.0, 1.0, 0.0, 1.0))
        grid = rasterize_planar(x, y, hx, hy, values, 8, 8, (0.0, 1.0, 0.0, 1.0))
        np.testing.assert_allclose(grid, values.reshape(8, 8), rtol=1e-12, atol=1e-12)

    @pytest.mark.unit
    @pytest.mark.gpu
    @pytest.mark.parametrize("nx, ny", [(10, 10), (10, 6), (3, 7)])
    def test_uniform_mesh_aliased(self, skip_if_no_taichi, cell_factory, nx, ny):
        """Cell edges that round past a pixel edge do not spill into the neighbour."""
        bounds = (0.0, 1.0, 0.0, 1.0)
        x, y, hx, hy, values = cell_factory.uniform_2d(nx, ny, bounds=bounds)
        grid = rasterize_planar(x, y, hx, hy, values, nx, ny, bounds, antialias=False)
        np.testing.assert_array_equal(grid, values.reshape(nx, ny))

        # reversed order must give the same grid since no two cells share a pixel
        grid = rasterize_planar(
            x[::-1], y[::-1], hx[::-1], hy[::-1], values[::-1], nx, ny, bounds, antialias=False
        )
        np.testing.assert_array_equal(grid, values.reshape(nx, ny))

    @pytest.mark.unit
    @pytest.mark.gpu
    def test_accumulation_is_order_independent(self, skip_if_no_taichi, cell_factory):
        cells = cell_factory.random_2d(n=40, bounds=DOMAIN)
        order = np.random.default_rng(0).permutation(40)
        g1 = rasterize_planar(*cells, 16, 16, DOMAIN)
        g2 = rasterize_planar(*(c[order] for c in cells), 16, 16, DOMAIN)
        np.testing.assert_allclose(g1, g2, rtol=1e-12, atol=1e-12)

    @pytest.mark.unit
    @pytest.mark.gpu
    def test_overlapping_cells_accumulate(self, skip_if_no_taichi):
        grid = rasterize_planar(
            [0.0, 0.5], [0.0, 0.0], [0.5, 0.5], [0.5, 0.5], [1.0, 2.0], 4, 4, DOMAIN
        )
        assert grid[1, 1] == pytest.approx(1.0)
        assert grid[2, 1] == pytest.approx(3.0)
        assert grid[3, 1] == pytest.approx(2.0)

    @pytest.mark.unit
    @pytest.mark.gpu
    def test_overwrite_last_cell_wins(self, skip_if_no_taichi):
        """Aliased mode keeps the value of the last cell in input order."""
        x, y, h = [0.0, 0.5], [0.0, 0.0], [0.5, 0.5]
        grid = rasterize_planar(x, y, h, h, [1.0, 2.0], 4, 4, DOMAIN, antialias=False)
        assert grid[2, 1] == 2.0
        assert grid[1, 1] == 1.0
        assert grid[3, 1] == 2.0

        grid = rasterize_planar(x[::-1], y, h, h, [2.0, 1.0], 4, 4, DOMAIN, antialias=False)
        assert grid[2, 1] == 1.0
        assert grid[1, 1] == 1.0
        assert grid[3, 1] == 2.0

    @pytest.mark.unit
    @pytest.mark.gpu
    def test_pool_fields_are_released(self, skip_if_no_taichi, cell_factory):
        cells = cell_factory.random_2d(n=10, bounds=DOMAIN)
        before = pool.taipool.stats()["in_use"]
        rasterize_planar(*cells, 8, 8, DOMAIN)
        rasterize_planar(*cells, 8, 8, DOMAIN, antialias=False)
        assert pool.taipool.stats()["in_use"] == before

    @pytest.mark.unit
    @pytest.mark.gpu
    def test_varying_cell_count_reuses_grid(self, skip_if_no_taichi, cell_factory):
        """Only the output grid is pooled, whatever the number of cells."""
        x, y, hx, hy, values = cell_factory.random_2d(n=30, bounds=DOMAIN)
        rasterize_planar(x[:1], y[:1], hx[:1], hy[:1], values[:1], 8, 8, DOMAIN)
        allocated = pool.taipool.stats()["allocated"]
        for n in range(2, 31):
            rasterize_planar(
                x[:n], y[:n], hx[:n], hy[:n], values[:n], 8, 8, DOMAIN, antialias=n % 2 == 0
            )
        assert pool.taipool.stats()["allocated"] == allocated


class TestPeriodicity:
    """Periodic images of cells crossing the domain edges."""

    BOUNDS = (0.0, 1.0, 0.0, 1.0)

    @pytest.mark.unit
    @pytest.mark.gpu
    def test_straddling_x_min_without_period(self, skip_if_no_taichi):
        grid = rasterize_planar([0.0], [0.5], [0.125], [0.125], [1.0], 8, 4, self.BOUNDS)
        np.testing.assert_allclose(grid[0, 1:3], 0.5)
        assert np.all(grid[7] == 0.0)
        assert grid.sum() == pytest.approx(1.0)

    @pytest.mark.unit
    @pytest.mark.gpu
    def test_straddling_x_min_with_period(self, skip_if_no_taichi):
        grid = rasterize_planar(
            [0.0], [0.5], [0.125], [0.125], [1.0], 8, 4, self.BOUNDS,
            period=(1.0, 1.0), check_period=True,
        )
        np.testing.assert_allclose(grid[0, 1:3], 0.5)
        np.testing.assert_allclose(grid[7, 1:3], 0.5)
        assert grid.sum() == pytest.approx(2.0)

    @pytest.mark.unit
    @pytest.mark.gpu
    def test_straddling_x_max_with_period(self, skip_if_no_taichi):
        grid = rasterize_planar(
            [1.0], [0.5], [0.125], [0.125], [1.0], 8, 4, self.BOUNDS,
            period=(1.0, 1.0), check_period=True,
        )
        np.testing.assert_allclose(grid[0, 1:3], 0.5)
        np.testing.assert_allclose(grid[7, 1:3], 0.5)

    @pytest.mark.unit
    @pytest.mark.gpu
    def test_period_ignored_when_disabled(self, skip_if_no_taichi):
        grid = rasterize_planar(
            [0.0], [0.5], [0.125], [0.125], [1.0], 8, 4, self.BOUNDS,
            period=(1.0, 1.0), check_period=False,
        )
        assert np.all(grid[7] == 0.0)

    @pytest.mark.unit
    @pytest.mark.gpu
    def test_corner_cell_has_four_images(self, skip_if_no_taichi):
        grid = rasterize_planar(
            [0.0], [0.0], [0.125], [0.125], [3.0], 8, 8, self.BOUNDS,
            period=(1.0, 1.0), check_period=True,
        )
        for i, j in ((0, 0), (0, 7), (7, 0), (7, 7)):
            assert grid[i, j] == pytest.approx(3.0)
        assert grid.sum() == pytest.approx(12.0)

    @pytest.mark.unit
    @pytest.mark.gpu
    def test_corner_cell_aliased(self, skip_if_no_taichi):
        grid = rasterize_planar(
            [0.0], [0.0], [0.125], [0.125], [3.0], 8, 8, self.BOUNDS,
            antialias=False, period=(1.0, 1.0), check_period=True,
        )
        expected = np.zeros((8, 8))
        expected[[0, 0, 7, 7], [0, 7, 0, 7]] = 3.0
        np.testing.assert_array_equal(grid, expected)


class TestErrors:
    """Invalid inputs."""

    @pytest.mark.unit
    @pytest.mark.parametrize("rows, cols", [(0, 4), (4, 0), (-2, 4)])
    def test_zero_dimension(self, rows, cols):
        # rejected before the arrays are even looked at
        with pytest.raises(InvalidDimensionError):
            rasterize_planar([0.0, 1.0], [0.0], [1.0], [1.0], [1.0], rows, cols, DOMAIN)

    @pytest.mark.unit
    def test_degenerate_bounds(self):
        with pytest.raises(InvalidDimensionError):
            rasterize_planar([0.0], [0.0], [1.0], [1.0], [1.0], 4, 4, (0.0, 0.0, 0.0, 1.0))

    @pytest.mark.unit
    def test_length_mismatch(self):
        with pytest.raises(InvalidShapeError):
            rasterize_planar([0.0, 1.0], [0.0], [1.0], [1.0], [1.0], 4, 4, DOMAIN)

    @pytest.mark.unit
    def test_not_1d(self):
        with pytest.raises(InvalidShapeError):
            rasterize_planar(np.zeros((2, 2)), [0.0] * 4, [1.0] * 4, [1.0] * 4, [1.0] * 4,
                             4, 4, DOMAIN)

    @pytest.mark.unit
    def test_bad_period(self):
        with pytest.raises(InvalidShapeError):
            rasterize_planar([0.0], [0.0], [1.0], [1.0], [1.0], 4, 4, DOMAIN,
                             period=(1.0,), check_period=True)


class TestWritePolicies:
    """Policy selection on the low-level entry point."""

    @pytest.mark.unit
    @pytest.mark.gpu
    def test_policy_by_name(self, skip_if_no_taichi):
        cells = [np.array([v]) for v in (0.1, 0.0, 0.5, 0.5, 10.0)]
        by_name = splat_cells(*cells, 4, 4, DOMAIN, policy="overwrite")
        by_id = splat_cells(*cells, 4, 4, DOMAIN, policy=cte.WRITE_OVERWRITE)
        np.testing.assert_array_equal(by_name, by_id)
        assert by_name[3, 1] == 10.0

    @pytest.mark.unit
    def test_unknown_policy(self):
        empty = np.zeros(0)
        with pytest.raises(ValueError, match="Unknown write policy"):
            splat_cells(empty, empty, empty, empty, empty, 4, 4, DOMAIN, policy="max")
