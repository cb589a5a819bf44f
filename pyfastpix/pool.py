"""
Taichi field pool for PyFastPix.

Allocating Taichi fields is expensive and fields cannot be freed one by one, so
temporary buffers (cell arrays, accumulation grids, hit counters) are borrowed
from a pool keyed by dtype and shape and handed back once a call is done.

Usage:
    import pyfastpix as pp

    grid = pp.pool.taipool.get_tpfield(dtype=ti.f64, shape=(rows, cols))
    try:
        some_kernel(grid.field)
        result = grid.field.to_numpy()
    finally:
        grid.release()

    # or as a context manager
    with pp.pool.get_temp_field(ti.f64, (n,)) as tmp:
        tmp.field.from_numpy(values)

After ``ti.reset()`` or a second ``ti.init()`` every pooled field is invalid;
call ``taipool.clear()`` to drop them.
"""

import taichi as ti


def _normalise_shape(shape):
    if isinstance(shape, int):
        return (shape,)
    return tuple(int(s) for s in shape)


class TPField:
    """
    Pooled Taichi field handle.

    Attributes:
        field: the underlying Taichi field
        dtype: Taichi dtype of the field
        shape: shape tuple of the field
        in_use: True while borrowed from the pool
    """

    def __init__(self, pool, dtype, shape):
        self._pool = pool
        self.dtype = dtype
        self.shape = shape
        self.field = ti.field(dtype=dtype, shape=shape)
        self.in_use = True

    def release(self):
        """Give the field back to the pool. Safe to call twice."""
        if self.in_use:
            self.in_use = False
            self._pool._give_back(self)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.release()
        return False

    def __repr__(self):
        state = "in use" if self.in_use else "free"
        return f"TPField(dtype={self.dtype}, shape={self.shape}, {state})"


class TaiPool:
    """Pool of TPField objects keyed by (dtype, shape)."""

    def __init__(self):
        self._free = {}
        self._all = []

    def get_tpfield(self, dtype, shape):
        """
        Borrow a field of the given dtype and shape.

        Reuses a released field when one matches, otherwise allocates a new one.
        The content of a reused field is whatever the previous user left there.

        Args:
            dtype: Taichi dtype (ti.f64, ti.i32, ...)
            shape: int or tuple of ints

        Returns:
            TPField: handle whose ``.field`` attribute is the Taichi field
        """
        shape = _normalise_shape(shape)
        key = (dtype, shape)
        free = self._free.get(key)
        if free:
            tpf = free.pop()
            tpf.in_use = True
            return tpf
        tpf = TPField(self, dtype, shape)
        self._all.append(tpf)
        return tpf

    def _give_back(self, tpf):
        self._free.setdefault((tpf.dtype, tpf.shape), []).append(tpf)

    def stats(self):
        """Return a dict with allocation counters."""
        n_free = sum(len(v) for v in self._free.values())
        return {
            "allocated": len(self._all),
            "in_use": len(self._all) - n_free,
            "free": n_free,
            "keys": len(self._free),
        }

    def clear(self):
        """Forget every pooled field (required after ti.reset())."""
        self._free.clear()
        self._all.clear()

    def __repr__(self):
        s = self.stats()
        return f"TaiPool(allocated={s['allocated']}, in_use={s['in_use']}, free={s['free']})"


taipool = TaiPool()


def get_temp_field(dtype, shape):
    """Shortcut for ``taipool.get_tpfield(dtype, shape)``."""
    return taipool.get_tpfield(dtype=dtype, shape=shape)


__all__ = ["TPField", "TaiPool", "taipool", "get_temp_field"]
