"""
Command Line Interface for PyFastPix

Command line utilities to pixelize cell data stored in .npz archives without
writing Python scripts.

Available Commands:
- pixelize: Planar splat of 2D cells to a .npy grid
- slice: Cutting-plane projection of 3D cells to a .npy grid
"""

_CLI_SUBMODULES = {
    "pixelize": (".pixelize_commands", "pixelize"),
    "slice_cells": (".pixelize_commands", "slice_cells"),
}

__all__ = list(_CLI_SUBMODULES.keys())


def __getattr__(name):
    info = _CLI_SUBMODULES.get(name)
    if info is None:
        raise AttributeError(name)
    pkg, attr = info
    import importlib
    mod = importlib.import_module(pkg, __package__)
    obj = getattr(mod, attr)
    globals()[name] = obj
    return obj
