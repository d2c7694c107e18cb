"""
arc.py
------

Circular arc primitive.

An ``Arc`` is drawn with the surface's native circular-arc primitive. It is
not closed under general affine maps (shear or anisotropic scaling turns it
into an elliptical arc), so ``Arc.transform`` samples the arc into
``detail`` points, maps each point, and returns an open ``Path``, or ``None``
when fewer than two samples exist.
"""

from __future__ import annotations

__all__ = ["Arc", "arc", "arc_points", "lerp_many", "DEFAULT_DETAIL"]

import math
from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

import numpy as np

from .base import PathSink, Shape
from .matrix import Transform
from .path import Path, path
from .points import get_xy, with_xy

P = TypeVar("P")

DEFAULT_DETAIL = 100


@dataclass(frozen=True)
class Arc(Shape, Generic[P]):
    """
    Arc of the circle of ``radius`` around ``center``.

    Attributes:
        center: Center of the arc's circle (raw point or point-like wrapper).
        radius: Circle radius, >= 0.
        start: Start angle in radians.
        end: End angle in radians.
        detail: Number of points used when the arc is sampled.
    """

    center: P
    radius: float
    start: float
    end: float
    detail: int = DEFAULT_DETAIL

    def __post_init__(self) -> None:
        if self.radius < 0:
            raise ValueError(f"Arc radius must be >= 0, got {self.radius}")
        if self.detail < 0:
            raise ValueError(f"Arc detail must be >= 0, got {self.detail}")

    def draw(self, surface: PathSink) -> None:
        x, y = get_xy(self.center)
        surface.arc(x, y, self.radius, self.start, self.end)

    def transform(self, m: Transform) -> Optional[Path[P]]:
        sampled = path(arc_points(self))
        if sampled is None:
            return None
        return sampled.transform(m)

    def points(self) -> list[P]:
        return arc_points(self)


def arc(center: P, radius: float, start: float, end: float) -> Arc[P]:
    """Arc with the default sampling detail."""
    return Arc(center, radius, start, end, DEFAULT_DETAIL)


def lerp_many(n: int, start: float, end: float) -> list[float]:
    """``n`` evenly spaced values from ``start`` to ``end``, both included."""
    if n <= 0:
        return []
    if n == 1:
        return [float(start)]
    return np.linspace(start, end, n).tolist()


def arc_points(a: Arc[P]) -> list[P]:
    """Sample ``a.detail`` points along the arc, in angle order."""
    c = get_xy(a.center)
    return [
        with_xy(a.center, (c[0] + a.radius * math.cos(theta),
                           c[1] + a.radius * math.sin(theta)))
        for theta in lerp_many(a.detail, a.start, a.end)
    ]
