"""
Pixelization CLI Commands for PyFastPix

Command line interface reading cell arrays from .npz archives and writing the
resulting grids as .npy files.
"""

import sys

import click
import numpy as np
import taichi as ti

import pyfastpix as pp

_ARCHS = {"cpu": ti.cpu, "gpu": ti.gpu}


def _init_taichi(arch):
    ti.init(arch=_ARCHS[arch], offline_cache=False)
    # fields from a previous runtime are gone
    pp.pool.taipool.clear()


def _load_arrays(path, names):
    """Load the named arrays from an .npz archive."""
    with np.load(path) as archive:
        missing = [n for n in names if n not in archive.files]
        if missing:
            raise ValueError(
                f"'{path}' is missing array(s) {', '.join(missing)} "
                f"(found: {', '.join(archive.files) or 'none'})"
            )
        return [archive[n] for n in names]


def _report(grid, output, verbose):
    np.save(output, grid)
    if verbose:
        finite = np.isfinite(grid)
        click.echo(f"Grid shape: {grid.shape}")
        if finite.any():
            click.echo(
                f"Value range: [{grid[finite].min():.6g}, {grid[finite].max():.6g}]"
            )
        click.echo(f"Unsampled pixels: {int((~finite).sum())}")
    click.echo(f"Saved grid -> '{output}'")


@click.command()
@click.argument("input_npz", type=click.Path(exists=True))
@click.argument("output_npy", type=click.Path())
@click.option("--rows", "-r", required=True, type=int, help="Pixels along x")
@click.option("--cols", "-c", required=True, type=int, help="Pixels along y")
@click.option(
    "--bounds",
    "-b",
    required=True,
    nargs=4,
    type=float,
    help="Grid bounds: XMIN XMAX YMIN YMAX",
)
@click.option(
    "--antialias/--no-antialias",
    default=True,
    show_default=True,
    help="Area-weighted accumulation or last-write-wins overwrite",
)
@click.option(
    "--period",
    nargs=2,
    type=float,
    default=(0.0, 0.0),
    show_default=True,
    help="Domain periods along x and y",
)
@click.option("--check-period", is_flag=True, help="Draw periodic images of edge cells")
@click.option(
    "--arch",
    type=click.Choice(list(_ARCHS)),
    default="cpu",
    show_default=True,
    help="Taichi backend",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
def pixelize(
    input_npz, output_npy, rows, cols, bounds, antialias, period, check_period, arch, verbose
):
    """
    Rasterize 2D rectangular cells onto a regular grid.

    INPUT_NPZ must contain the arrays x, y, dx, dy (half-widths) and values.
    The grid is saved to OUTPUT_NPY with shape (ROWS, COLS).

    Examples:

        # 512 x 512 antialiased image of the unit square
        pfp-pixelize cells.npz image.npy -r 512 -c 512 -b 0 1 0 1

        # Periodic domain, aliased
        pfp-pixelize cells.npz image.npy -r 256 -c 256 -b 0 1 0 1 \\
            --no-antialias --period 1 1 --check-period
    """
    try:
        if verbose:
            click.echo(f"Loading cells from '{input_npz}'...")
        x, y, dx, dy, values = _load_arrays(input_npz, ("x", "y", "dx", "dy", "values"))

        _init_taichi(arch)
        if verbose:
            mode = "antialiased" if antialias else "aliased"
            click.echo(f"Pixelizing {x.size} cells on a {rows}x{cols} grid ({mode})...")

        grid = pp.rasterize_planar(
            x, y, dx, dy, values, rows, cols, bounds,
            antialias=antialias, period=period, check_period=check_period,
        )
        _report(grid, output_npy, verbose)

    except pp.PixelizeError as e:
        click.echo(f"Error: invalid input ({e.code}) - {e}", err=True)
        sys.exit(1)

    except Exception as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


@click.command()
@click.argument("input_npz", type=click.Path(exists=True))
@click.argument("output_npy", type=click.Path())
@click.option("--rows", "-r", required=True, type=int, help="Pixels along plane x")
@click.option("--cols", "-c", required=True, type=int, help="Pixels along plane y")
@click.option("--center", required=True, nargs=3, type=float, help="Plane center X Y Z")
@click.option("--normal", required=True, nargs=3, type=float, help="Plane normal NX NY NZ")
@click.option("--north", nargs=3, type=float, default=None, help="North vector X Y Z")
@click.option("--width", "-w", required=True, type=float, help="Window size along plane x")
@click.option("--height", type=float, default=None, help="Window size along plane y")
@click.option(
    "--arch",
    type=click.Choice(list(_ARCHS)),
    default="cpu",
    show_default=True,
    help="Taichi backend",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
def slice_cells(
    input_npz, output_npy, rows, cols, center, normal, north, width, height, arch, verbose
):
    """
    Sample 3D box cells on a cutting plane.

    INPUT_NPZ must contain the arrays centers (M, 3), half_widths (M, 3) and
    values (M,). Pixels not cut by any cell are NaN in OUTPUT_NPY.

    Examples:

        # Slice z = 0.5 of the unit cube
        pfp-slice cells.npz slice.npy -r 256 -c 256 \\
            --center 0.5 0.5 0.5 --normal 0 0 1 -w 1
    """
    try:
        if verbose:
            click.echo(f"Loading cells from '{input_npz}'...")
        centers, halves, values = _load_arrays(
            input_npz, ("centers", "half_widths", "values")
        )

        plane = pp.CuttingPlane(center, normal, north_vector=north or None)
        _init_taichi(arch)
        if verbose:
            click.echo(f"Slicing {values.size} cells with {plane}...")

        grid = plane.pixelize(centers, halves, values, rows, cols, width, height)
        _report(grid, output_npy, verbose)

    except pp.PixelizeError as e:
        click.echo(f"Error: invalid input ({e.code}) - {e}", err=True)
        sys.exit(1)

    except Exception as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


if __name__ == "__main__":
    pixelize()
