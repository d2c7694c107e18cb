"""
affine.py
---------

Applied transformations for shapes and surfaces.

    rotated(theta, shape)      -> shape.transform(rotation(theta))
    translated(v, shape)       -> shape.transform(translation(v))
    scaled(v, shape)           -> shape.transform(scalar(v))
    sheared_x(k, shape), sheared_y(k, shape), sheared(v, shape)
    reflected_origin(shape), reflected_x(shape), reflected_y(shape)

``with_affine`` temporarily replaces a surface's transformation matrix.
"""

from __future__ import annotations

__all__ = [
    "transformed", "default_transform", "with_affine",
    "rotated", "translated", "scaled",
    "sheared_x", "sheared_y", "sheared",
    "reflected_origin", "reflected_x", "reflected_y",
]

from contextlib import contextmanager
from typing import Any, Iterable, Iterator, Protocol

from . import matrix as mx
from .matrix import PointXY, Transform
from .points import get_xy, with_xy


class MatrixHolder(Protocol):
    def get_matrix(self) -> Transform: ...

    def set_matrix(self, m: Transform) -> None: ...


def transformed(m: Transform, shape: Any) -> Any:
    return shape.transform(m)


def default_transform(m: Transform, points: Iterable[Any]) -> list[Any]:
    """Map every point-like value in ``points`` through ``m``, keeping its kind."""
    return [with_xy(p, mx.apply_matrix(m, get_xy(p))) for p in points]


@contextmanager
def with_affine(surface: MatrixHolder, m: Transform) -> Iterator[None]:
    """
    Draw with ``m`` as the surface matrix, then restore the previous one.

    Example:
        >>> with with_affine(surface, rotation(0.5)):
        ...     shape.draw(surface)
    """
    previous = surface.get_matrix()
    surface.set_matrix(m)
    try:
        yield
    finally:
        surface.set_matrix(previous)


# =============================================================================
# Applied transformations
# =============================================================================
def rotated(theta: float, shape: Any) -> Any:
    return shape.transform(mx.rotation(theta))


def translated(v: PointXY, shape: Any) -> Any:
    return shape.transform(mx.translation(v))


def scaled(v: PointXY, shape: Any) -> Any:
    return shape.transform(mx.scalar(v))


def sheared_x(k: float, shape: Any) -> Any:
    return shape.transform(mx.shear_x(k))


def sheared_y(k: float, shape: Any) -> Any:
    return shape.transform(mx.shear_y(k))


def sheared(v: PointXY, shape: Any) -> Any:
    return shape.transform(mx.shear(v))


def reflected_origin(shape: Any) -> Any:
    return shape.transform(mx.reflect_origin())


def reflected_x(shape: Any) -> Any:
    return shape.transform(mx.reflect_x())


def reflected_y(shape: Any) -> Any:
    return shape.transform(mx.reflect_y())
