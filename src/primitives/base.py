"""
base.py
-------

Defines the abstract interface shared by all drawable, transformable shapes.

A shape can:
  - ``draw(surface)``: append its geometry to the surface's current path
    (stroking or filling is left to the caller);
  - ``transform(m)``: map itself through a ``Transform``. Most shapes come
    back as the same type; shapes that are not closed under general affine
    maps (``Arc``) come back as a different type.

``PointShape`` supplies the generic ``transform`` for any dataclass whose
only transformable state is its reference points.
"""

from __future__ import annotations

__all__ = ["Shape", "PointShape", "PathSink"]

import dataclasses
from abc import ABC, abstractmethod
from typing import Any, ClassVar, Protocol

from .matrix import Transform, apply_matrix
from .points import get_xy, with_xy


class PathSink(Protocol):
    """Path-building subset of a drawing surface used by shapes."""

    def move_to(self, x: float, y: float) -> None: ...

    def line_to(self, x: float, y: float) -> None: ...

    def arc(self, xc: float, yc: float, radius: float,
            angle1: float, angle2: float) -> None: ...

    def close_path(self) -> None: ...

    def new_sub_path(self) -> None: ...


class Shape(ABC):
    """Base class for drawable geometry (arc, path, polygon, dot, ...)."""

    __slots__ = ()

    @abstractmethod
    def draw(self, surface: PathSink) -> None:
        """Append this shape's geometry to the surface's current path."""
        raise NotImplementedError

    @abstractmethod
    def transform(self, m: Transform) -> Any:
        """Return the image of this shape under ``m``."""
        raise NotImplementedError


class PointShape(Shape):
    """
    Shape whose transformable state is a fixed set of point fields.

    Subclasses are dataclasses listing the names of their single-point fields
    in ``point_fields`` and of their point-sequence fields in
    ``point_seq_fields``. ``transform`` replaces each point by its image and
    returns an instance of the same class; every other field is copied as is.
    """

    __slots__ = ()

    point_fields: ClassVar[tuple[str, ...]] = ()
    point_seq_fields: ClassVar[tuple[str, ...]] = ()

    def transform(self, m: Transform) -> PointShape:
        def image(p):
            return with_xy(p, apply_matrix(m, get_xy(p)))

        changes: dict[str, Any] = {}
        for name in self.point_fields:
            changes[name] = image(getattr(self, name))
        for name in self.point_seq_fields:
            changes[name] = tuple(image(p) for p in getattr(self, name))
        return dataclasses.replace(self, **changes)
