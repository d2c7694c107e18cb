"""
points.py
---------

Uniform access to the coordinates of point-like values.

A shape may carry raw points (``(x, y)`` tuples, lists, NumPy arrays) or
richer wrappers that keep extra data next to the coordinates (any dataclass
with an ``xy`` field, e.g. ``TaggedPoint``). Geometry code reads and replaces
coordinates through ``get_xy`` / ``with_xy`` and never needs to know which
kind it holds.
"""

from __future__ import annotations

__all__ = ["get_xy", "with_xy", "map_xy", "TaggedPoint"]

import dataclasses
from dataclasses import dataclass
from typing import Any, Callable, TypeVar

import numpy as np
from numpy.typing import NDArray

P = TypeVar("P")


def get_xy(p: Any) -> NDArray[np.float64]:
    """Return the coordinates of ``p`` as a float64 array of shape (2,)."""
    if dataclasses.is_dataclass(p) and not isinstance(p, type):
        return get_xy(p.xy)
    xy = np.asarray(p, dtype=np.float64)
    if xy.shape != (2,):
        raise TypeError(f"Not a 2D point: {p!r}")
    return xy


def with_xy(p: P, xy: Any) -> P:
    """Return a value of the same kind as ``p`` with its coordinates replaced."""
    x, y = (float(v) for v in xy)
    if dataclasses.is_dataclass(p) and not isinstance(p, type):
        return dataclasses.replace(p, xy=with_xy(p.xy, (x, y)))
    if isinstance(p, np.ndarray):
        return np.array([x, y], dtype=p.dtype if p.dtype.kind == "f" else np.float64)
    if isinstance(p, list):
        return [x, y]
    return (x, y)


def map_xy(fn: Callable[[NDArray[np.float64]], Any], p: P) -> P:
    return with_xy(p, fn(get_xy(p)))


@dataclass(frozen=True)
class TaggedPoint:
    """Point with an arbitrary label that survives transforms."""
    xy: tuple[float, float]
    tag: Any = None
