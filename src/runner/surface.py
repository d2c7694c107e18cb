"""
surface.py
----------

Raster drawing surface on top of Matplotlib's Agg canvas.

The surface follows the cairo drawing model used by the shapes:
  - a current transformation matrix (CTM) maps user space to device pixels;
  - ``move_to`` / ``line_to`` / ``arc`` / ``rectangle`` build a current path,
    transformed by the CTM at the time each element is added;
  - ``stroke`` / ``fill`` / ``paint`` turn it into pixels with the current
    source color.

Device space has its origin at the top-left pixel corner with y pointing
down. Each path is added to a bare ``Figure`` (no Axes, no pyplot state) as a
``PathPatch`` whose transform flips device space into Matplotlib display
space. The figure is created at one inch per pixel, so the Agg buffer has
exactly the requested pixel size.

PNG encoding goes through ``matplotlib.image.imsave``; files are written
atomically (temp file in the target directory + ``os.replace``).
"""

from __future__ import annotations

__all__ = ["RasterSurface", "write_png_bytes", "Color"]

import io
import os
import math
import logging
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator, Optional, Union

import numpy as np
from numpy.typing import NDArray
import matplotlib.image as mpimg
from matplotlib import colors as mcolors
from matplotlib.backends.backend_agg import FigureCanvasAgg
from matplotlib.figure import Figure
from matplotlib.patches import PathPatch
from matplotlib.path import Path as mplPath
from matplotlib.transforms import Affine2D

from primitives.matrix import IDENTITY, Transform, rotation, scalar, translation
from .errors import PersistenceError, ResourceError

PathLike = Union[str, os.PathLike]
Color = Union[str, tuple[float, float, float], tuple[float, float, float, float]]
ImageRGBA = NDArray[np.uint8]  # (H, W, 4) RGBA order

_DPI = 1.0                 # one inch per pixel: figure size == pixel size
_POINTS_PER_INCH = 72.0
_MAX_SIDE = 2 ** 16        # Agg limit per direction

logger = logging.getLogger(__name__)


class RasterSurface:
    """
    Pixel surface of ``width`` x ``height`` device pixels.

    Args:
        width: Width in device pixels.
        height: Height in device pixels.
        background: Optional color painted over the whole surface at creation.
            None leaves the surface fully transparent.
    """

    def __init__(self, width: int, height: int, background: Optional[Color] = None) -> None:
        if not (0 < width < _MAX_SIDE and 0 < height < _MAX_SIDE):
            raise ResourceError(f"Cannot create a {width}x{height} surface")
        self.width = int(width)
        self.height = int(height)
        try:
            self.fig = Figure(figsize=(self.width / _DPI, self.height / _DPI),
                              dpi=_DPI, frameon=False)
            self.canvas = FigureCanvasAgg(self.fig)
        except (ValueError, MemoryError) as e:
            raise ResourceError(f"Cannot create a {width}x{height} surface: {e}") from e
        self._device = Affine2D().scale(1.0, -1.0).translate(0.0, self.height)
        self._closed = False

        self._ctm: Transform = IDENTITY
        self._source: tuple[float, float, float, float] = (0.0, 0.0, 0.0, 1.0)
        self._line_width = 2.0
        self._stack: list[tuple[Transform, tuple, float]] = []
        self.new_path()

        if background is not None:
            self.set_source(background)
            self.paint()
            self.set_source_rgb(0.0, 0.0, 0.0)
        logger.debug(f"Created {self.width}x{self.height} surface (background={background!r})")

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------
    def close(self) -> None:
        if not self._closed:
            self.fig.clear()
            self._closed = True

    @property
    def closed(self) -> bool:
        return self._closed

    def __enter__(self) -> RasterSurface:
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()

    # -------------------------------------------------------------------------
    # Transformation matrix
    # -------------------------------------------------------------------------
    def get_matrix(self) -> Transform:
        return self._ctm

    def set_matrix(self, m: Transform) -> None:
        self._ctm = m

    def identity_matrix(self) -> None:
        self._ctm = IDENTITY

    def transform(self, m: Transform) -> None:
        """Apply ``m`` to user space before the existing CTM."""
        self._ctm = self._ctm @ m

    def scale(self, sx: float, sy: float) -> None:
        self.transform(scalar((sx, sy)))

    def translate(self, tx: float, ty: float) -> None:
        self.transform(translation((tx, ty)))

    def rotate(self, theta: float) -> None:
        self.transform(rotation(theta))

    def user_to_device(self, x: float, y: float) -> tuple[float, float]:
        dx, dy = self._ctm.apply((x, y))
        return float(dx), float(dy)

    def device_to_user(self, x: float, y: float) -> tuple[float, float]:
        ux, uy = self._ctm.inverted().apply((x, y))
        return float(ux), float(uy)

    # -------------------------------------------------------------------------
    # Graphics state
    # -------------------------------------------------------------------------
    def save(self) -> None:
        self._stack.append((self._ctm, self._source, self._line_width))

    def restore(self) -> None:
        if not self._stack:
            raise RuntimeError("restore() without matching save()")
        self._ctm, self._source, self._line_width = self._stack.pop()

    @contextmanager
    def saved(self) -> Iterator[RasterSurface]:
        self.save()
        try:
            yield self
        finally:
            self.restore()

    def set_source(self, color: Color) -> None:
        """Set the paint color from any Matplotlib color."""
        self._source = mcolors.to_rgba(color)

    def set_source_rgb(self, r: float, g: float, b: float) -> None:
        self._source = mcolors.to_rgba((r, g, b))

    def set_source_rgba(self, r: float, g: float, b: float, a: float) -> None:
        self._source = mcolors.to_rgba((r, g, b, a))

    def set_line_width(self, width: float) -> None:
        """Line width in user-space units, resolved through the CTM at stroke time."""
        if width < 0:
            raise ValueError(f"Line width must be >= 0, got {width}")
        self._line_width = float(width)

    def get_line_width(self) -> float:
        return self._line_width

    # -------------------------------------------------------------------------
    # Path construction
    # -------------------------------------------------------------------------
    def new_path(self) -> None:
        self._verts: list[tuple[float, float]] = []
        self._codes: list[int] = []
        self._current: Optional[tuple[float, float]] = None
        self._subpath_start: Optional[tuple[float, float]] = None

    def new_sub_path(self) -> None:
        """Start a new sub-path without connecting it to the current point."""
        self._current = None

    def current_point(self) -> Optional[tuple[float, float]]:
        """Current point in user space, or None."""
        if self._current is None:
            return None
        return self.device_to_user(*self._current)

    def _append(self, code: int, device_xy: tuple[float, float]) -> None:
        self._verts.append(device_xy)
        self._codes.append(code)

    def move_to(self, x: float, y: float) -> None:
        d = self.user_to_device(x, y)
        self._append(mplPath.MOVETO, d)
        self._current = self._subpath_start = d

    def line_to(self, x: float, y: float) -> None:
        if self._current is None:
            self.move_to(x, y)
            return
        d = self.user_to_device(x, y)
        self._append(mplPath.LINETO, d)
        self._current = d

    def close_path(self) -> None:
        if self._current is None:
            return
        self._append(mplPath.CLOSEPOLY, self._subpath_start)
        self._current = self._subpath_start

    def rectangle(self, x: float, y: float, w: float, h: float) -> None:
        self.move_to(x, y)
        self.line_to(x + w, y)
        self.line_to(x + w, y + h)
        self.line_to(x, y + h)
        self.close_path()

    def arc(self, xc: float, yc: float, radius: float,
            angle1: float, angle2: float) -> None:
        """
        Circular arc of ``radius`` around (xc, yc) from ``angle1`` to
        ``angle2`` (radians, increasing angle direction).

        A line joins the current point, if any, to the arc start. When
        ``angle2`` is below ``angle1`` it is moved up by whole turns to the
        first value not below ``angle1``. Sweeps are capped at one turn.
        """
        if not (math.isfinite(angle1) and math.isfinite(angle2)):
            raise ValueError(f"Arc angles must be finite, got {angle1}, {angle2}")
        tau = 2 * math.pi
        if angle2 < angle1:
            sweep = (angle2 - angle1) % tau
        else:
            sweep = min(angle2 - angle1, tau)
        if radius == 0:
            self.line_to(xc, yc)
            return
        start = angle1 % tau
        unit = mplPath.arc(math.degrees(start), math.degrees(start + sweep))
        user = unit.vertices * radius + np.array([xc, yc])
        device = self._ctm.apply_many(user)

        first = (float(device[0, 0]), float(device[0, 1]))
        self._append(mplPath.LINETO if self._current is not None else mplPath.MOVETO, first)
        if self._current is None:
            self._subpath_start = first
        for (dx, dy), code in zip(device[1:], unit.codes[1:]):
            self._append(int(code), (float(dx), float(dy)))
        self._current = (float(device[-1, 0]), float(device[-1, 1]))

    # -------------------------------------------------------------------------
    # Painting
    # -------------------------------------------------------------------------
    def _add_patch(self, verts, codes, **style) -> None:
        patch = PathPatch(mplPath(np.asarray(verts, dtype=float), codes),
                          transform=self._device, snap=False, **style)
        self.fig.add_artist(patch)

    def stroke(self) -> None:
        if self._codes:
            width_px = self._line_width * self._ctm.linear_scale()
            self._add_patch(self._verts, self._codes,
                            facecolor="none", edgecolor=self._source,
                            linewidth=width_px * _POINTS_PER_INCH / _DPI,
                            capstyle="butt", joinstyle="miter")
        self.new_path()

    def fill(self) -> None:
        if self._codes:
            self._add_patch(self._verts, self._codes,
                            facecolor=self._source, edgecolor="none", linewidth=0)
        self.new_path()

    def paint(self) -> None:
        """Cover the whole surface with the source color."""
        w, h = float(self.width), float(self.height)
        self._add_patch([(0, 0), (w, 0), (w, h), (0, h), (0, 0)],
                        [mplPath.MOVETO, mplPath.LINETO, mplPath.LINETO,
                         mplPath.LINETO, mplPath.CLOSEPOLY],
                        facecolor=self._source, edgecolor="none", linewidth=0)

    # -------------------------------------------------------------------------
    # Output
    # -------------------------------------------------------------------------
    def buffer(self) -> ImageRGBA:
        """Render pending drawing and return a live (H, W, 4) view of the Agg buffer."""
        if self._closed:
            raise ResourceError("Surface is closed")
        try:
            self.canvas.draw()
        except (ValueError, MemoryError) as e:
            raise ResourceError(f"Cannot rasterize {self.width}x{self.height} surface: {e}") from e
        return np.asarray(self.canvas.buffer_rgba())

    def pixels(self) -> ImageRGBA:
        """Copy of the rendered RGBA pixels."""
        return self.buffer().copy()

    def encode_png(self, metadata: Optional[dict[str, str]] = None) -> bytes:
        buf = io.BytesIO()
        mpimg.imsave(buf, self.buffer(), format="png", metadata=metadata)
        return buf.getvalue()

    def write_to_png(self, path: PathLike, metadata: Optional[dict[str, str]] = None) -> Path:
        return write_png_bytes(path, self.encode_png(metadata))

    def __repr__(self) -> str:
        return f"<RasterSurface {self.width}x{self.height} closed={self._closed}>"


def write_png_bytes(path: PathLike, data: bytes) -> Path:
    """Write ``data`` to ``path`` atomically; no partial file is ever left behind."""
    path = Path(path)
    tmp_name = None
    try:
        with tempfile.NamedTemporaryFile(dir=path.parent, prefix=f".{path.name}.",
                                         suffix=".tmp", delete=False) as tmp:
            tmp_name = tmp.name
            tmp.write(data)
            tmp.flush()
            os.fsync(tmp.fileno())
        os.replace(tmp_name, path)
    except OSError as e:
        if tmp_name is not None and os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise PersistenceError(f"Cannot write {path}: {e}") from e
    return path
