"""
matrix.py
---------

3x3 homogeneous affine matrices over 2D coordinates.

Every named transform (rotation, translation, scaling, shear, reflection) is
expressed as a matrix, so any combination of them is a single matrix product
and every shape needs only one "apply" path.

    [[a, b, tx],
     [c, d, ty],
     [0, 0, 1 ]]

Composition reads right to left: ``compose(a, b)(p) == a(b(p))``.
"""

from __future__ import annotations

__all__ = [
    "Transform", "IDENTITY", "identity", "compose", "apply_matrix",
    "rotation", "translation", "scalar",
    "shear_x", "shear_y", "shear",
    "reflect_origin", "reflect_x", "reflect_y",
    "PointXY",
]

import math
from typing import Iterable, Sequence, TypeAlias, Union

import numpy as np
from numpy.typing import ArrayLike, NDArray
from matplotlib.transforms import Affine2D

numeric: TypeAlias = Union[int, float]
PointXY: TypeAlias = Union[tuple[numeric, numeric], Sequence[float], NDArray[np.float64]]

_AFFINE_ROW = np.array([0.0, 0.0, 1.0])


class Transform:
    """Immutable affine transform backed by a read-only 3x3 float64 array."""

    __slots__ = ("_m",)

    def __init__(self, matrix: ArrayLike) -> None:
        m = np.array(matrix, dtype=np.float64)
        if m.shape != (3, 3):
            raise ValueError(f"Transform matrix must be 3x3, got shape {m.shape}")
        if not np.array_equal(m[2], _AFFINE_ROW):
            raise ValueError(f"Transform bottom row must be [0, 0, 1], got {m[2].tolist()}")
        m.flags.writeable = False
        self._m = m

    # -------------------------------------------------------------------------
    # Construction
    # -------------------------------------------------------------------------
    @classmethod
    def from_rows(cls, a: float, b: float, tx: float,
                  c: float, d: float, ty: float) -> Transform:
        return cls([[a, b, tx], [c, d, ty], [0.0, 0.0, 1.0]])

    @classmethod
    def from_affine2d(cls, affine: Affine2D) -> Transform:
        """Build a Transform from a Matplotlib ``Affine2D``."""
        return cls(affine.get_matrix())

    # -------------------------------------------------------------------------
    # Accessors
    # -------------------------------------------------------------------------
    @property
    def matrix(self) -> NDArray[np.float64]:
        """Read-only 3x3 view of the matrix."""
        return self._m

    @property
    def linear(self) -> NDArray[np.float64]:
        return self._m[:2, :2]

    @property
    def offset(self) -> NDArray[np.float64]:
        return self._m[:2, 2]

    def linear_scale(self) -> float:
        """Isotropic length scale of the linear part, sqrt(|det|)."""
        return math.sqrt(abs(float(np.linalg.det(self.linear))))

    def is_identity(self, atol: float = 1e-12) -> bool:
        return bool(np.allclose(self._m, np.eye(3), rtol=0.0, atol=atol))

    # -------------------------------------------------------------------------
    # Algebra
    # -------------------------------------------------------------------------
    def __matmul__(self, other: Transform) -> Transform:
        if not isinstance(other, Transform):
            return NotImplemented
        return Transform(self._m @ other._m)

    def then(self, other: Transform) -> Transform:
        """Apply ``self`` first, then ``other``."""
        return other @ self

    def inverted(self) -> Transform:
        det = float(np.linalg.det(self.linear))
        if det == 0.0:
            raise ValueError("Singular transform cannot be inverted")
        inv = np.linalg.inv(self._m)
        inv[2] = _AFFINE_ROW
        return Transform(inv)

    # -------------------------------------------------------------------------
    # Application
    # -------------------------------------------------------------------------
    def apply(self, point: PointXY) -> NDArray[np.float64]:
        return apply_matrix(self, point)

    def apply_many(self, points: ArrayLike) -> NDArray[np.float64]:
        """Apply the transform to an (N, 2) array of points."""
        pts = np.asarray(points, dtype=np.float64).reshape(-1, 2)
        homogeneous = np.c_[pts, np.ones(len(pts))]
        return (self._m @ homogeneous.T).T[:, :2]

    def to_affine2d(self) -> Affine2D:
        return Affine2D(np.array(self._m))

    # -------------------------------------------------------------------------
    # Comparison & representation
    # -------------------------------------------------------------------------
    def isclose(self, other: Transform, rtol: float = 1e-9, atol: float = 1e-12) -> bool:
        return bool(np.allclose(self._m, other._m, rtol=rtol, atol=atol))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Transform):
            return NotImplemented
        return bool(np.array_equal(self._m, other._m))

    def __hash__(self) -> int:
        return hash((self._m + 0.0).tobytes())  # -0.0 == 0.0

    def __repr__(self) -> str:
        (a, b, tx), (c, d, ty) = self._m[:2].tolist()
        return f"Transform([[{a:g}, {b:g}, {tx:g}], [{c:g}, {d:g}, {ty:g}], [0, 0, 1]])"


IDENTITY = Transform(np.eye(3))


def identity() -> Transform:
    return IDENTITY


def compose(*transforms: Transform) -> Transform:
    """Matrix product of ``transforms``; the rightmost one is applied first."""
    result = IDENTITY
    for t in transforms:
        result = result @ t
    return result


def apply_matrix(m: Transform, point: PointXY) -> NDArray[np.float64]:
    """Map a raw 2D point through ``m`` using homogeneous coordinates."""
    x, y = (float(v) for v in point)
    return (m.matrix @ np.array([x, y, 1.0]))[:2]


# =============================================================================
# Named transforms
# =============================================================================
def _xy(v: Union[PointXY, Iterable[float]]) -> tuple[float, float]:
    x, y = (float(c) for c in v)
    return x, y


def rotation(theta: float) -> Transform:
    """Counter-clockwise rotation by ``theta`` radians about the origin."""
    c, s = math.cos(theta), math.sin(theta)
    return Transform.from_rows(c, -s, 0.0,
                               s,  c, 0.0)


def translation(v: PointXY) -> Transform:
    tx, ty = _xy(v)
    return Transform.from_rows(1.0, 0.0, tx,
                               0.0, 1.0, ty)


def scalar(v: PointXY) -> Transform:
    """Independent X/Y scale factors."""
    sx, sy = _xy(v)
    return Transform.from_rows(sx,  0.0, 0.0,
                               0.0, sy,  0.0)


def shear_x(k: float) -> Transform:
    return Transform.from_rows(1.0, float(k), 0.0,
                               0.0, 1.0,      0.0)


def shear_y(k: float) -> Transform:
    return Transform.from_rows(1.0,      0.0, 0.0,
                               float(k), 1.0, 0.0)


def shear(v: PointXY) -> Transform:
    kx, ky = _xy(v)
    return Transform.from_rows(1.0, kx,  0.0,
                               ky,  1.0, 0.0)


def reflect_origin() -> Transform:
    return scalar((-1.0, -1.0))


def reflect_x() -> Transform:
    """Reflection across the X axis (y -> -y)."""
    return scalar((1.0, -1.0))


def reflect_y() -> Transform:
    """Reflection across the Y axis (x -> -x)."""
    return scalar((-1.0, 1.0))
