"""
path.py
-------

Point-sequence shapes: open polylines (``Path``), closed polylines
(``Polygon``) and single-point discs (``Dot``). All three are closed under
affine maps, so ``transform`` returns the same type.
"""

from __future__ import annotations

__all__ = ["Path", "Polygon", "Dot", "path", "polygon"]

import math
from dataclasses import dataclass
from typing import Any, Generic, Iterable, Optional, TypeVar

from .base import PathSink, PointShape
from .points import get_xy

P = TypeVar("P")


@dataclass(frozen=True)
class Path(PointShape, Generic[P]):
    """Open polyline through at least two points."""

    points: tuple[P, ...]

    point_seq_fields = ("points",)

    def __post_init__(self) -> None:
        object.__setattr__(self, "points", tuple(self.points))
        if len(self.points) < 2:
            raise ValueError(f"Path needs at least 2 points, got {len(self.points)}")

    def __len__(self) -> int:
        return len(self.points)

    def __iter__(self):
        return iter(self.points)

    def draw(self, surface: PathSink) -> None:
        first, *rest = self.points
        surface.move_to(*get_xy(first))
        for p in rest:
            surface.line_to(*get_xy(p))


@dataclass(frozen=True)
class Polygon(Path[P]):
    """Closed polyline through at least three points."""

    def __post_init__(self) -> None:
        object.__setattr__(self, "points", tuple(self.points))
        if len(self.points) < 3:
            raise ValueError(f"Polygon needs at least 3 points, got {len(self.points)}")

    def draw(self, surface: PathSink) -> None:
        super().draw(surface)
        surface.close_path()


@dataclass(frozen=True)
class Dot(PointShape, Generic[P]):
    """Disc of ``radius`` user-space units around ``center``."""

    center: P
    radius: float = 0.5

    point_fields = ("center",)

    def __post_init__(self) -> None:
        if self.radius < 0:
            raise ValueError(f"Dot radius must be >= 0, got {self.radius}")

    def draw(self, surface: PathSink) -> None:
        x, y = get_xy(self.center)
        surface.new_sub_path()
        surface.arc(x, y, self.radius, 0.0, 2 * math.pi)
        surface.close_path()


def path(points: Iterable[Any]) -> Optional[Path]:
    """Build a ``Path``; ``None`` when fewer than two points are given."""
    pts = tuple(points)
    if len(pts) < 2:
        return None
    return Path(pts)


def polygon(points: Iterable[Any]) -> Optional[Polygon]:
    pts = tuple(points)
    if len(pts) < 3:
        return None
    return Polygon(pts)
