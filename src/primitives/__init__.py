from .matrix import (
    Transform, IDENTITY, identity, compose, apply_matrix,
    rotation, translation, scalar, shear_x, shear_y, shear,
    reflect_origin, reflect_x, reflect_y,
)
from .points import get_xy, with_xy, TaggedPoint
from .base import Shape, PointShape
from .path import Path, Polygon, Dot, polygon
from .arc import Arc, arc_points, lerp_many
from .affine import (
    transformed, default_transform, with_affine,
    rotated, translated, scaled, sheared_x, sheared_y, sheared,
    reflected_origin, reflected_x, reflected_y,
)

__all__ = [
    "matrix",
    "points",
    "base",
    "path",
    "arc",
    "affine",
]
