"""
test_surface.py
---------------

Tests for the Agg-backed RasterSurface: pixel size, device orientation,
graphics state, painting, PNG encoding and atomic writes.
"""

import math
import threading

import matplotlib.image as mpimg
import numpy as np
import pytest

from primitives.matrix import IDENTITY, scalar
from primitives.arc import Arc
from primitives.path import Dot
from runner.errors import PersistenceError, ResourceError
from runner.surface import RasterSurface, write_png_bytes


# ---------------------------------------------------------------------------
# 1. Construction & lifecycle
# ---------------------------------------------------------------------------
@pytest.mark.parametrize("size", [(1, 1), (40, 30), (123, 77)])
def test_buffer_has_exact_pixel_size(size):
    with RasterSurface(*size) as s:
        assert s.buffer().shape == (size[1], size[0], 4)


def test_new_surface_is_transparent(surface):
    assert (surface.pixels()[..., 3] == 0).all()


def test_background_is_painted():
    with RasterSurface(10, 10, background="white") as s:
        assert (s.pixels() == 255).all()


@pytest.mark.parametrize("size", [(0, 10), (10, 0), (-1, 5), (2**16, 1)])
def test_invalid_size_is_a_resource_error(size):
    with pytest.raises(ResourceError):
        RasterSurface(*size)


def test_closed_surface_cannot_be_read():
    s = RasterSurface(5, 5)
    s.close()
    s.close()
    assert s.closed
    with pytest.raises(ResourceError):
        s.buffer()


# ---------------------------------------------------------------------------
# 2. Transformation matrix & graphics state
# ---------------------------------------------------------------------------
def test_ctm_composes_in_user_space(surface):
    surface.scale(2, 2)
    surface.translate(1, 1)
    assert surface.user_to_device(0, 0) == pytest.approx((2.0, 2.0))
    assert surface.device_to_user(2, 2) == pytest.approx((0.0, 0.0))


def test_save_restore(surface):
    surface.set_line_width(5)
    surface.save()
    surface.scale(3, 3)
    surface.set_line_width(1)
    surface.set_source("red")
    surface.restore()
    assert surface.get_matrix() == IDENTITY
    assert surface.get_line_width() == 5


def test_saved_context_manager_restores_on_error(surface):
    with pytest.raises(RuntimeError):
        with surface.saved():
            surface.set_matrix(scalar((4, 4)))
            raise RuntimeError("boom")
    assert surface.get_matrix() == IDENTITY


def test_unbalanced_restore(surface):
    with pytest.raises(RuntimeError):
        surface.restore()


def test_current_point_is_in_user_space(surface):
    assert surface.current_point() is None
    surface.scale(2, 2)
    surface.move_to(3, 4)
    assert surface.current_point() == pytest.approx((3.0, 4.0))
    surface.new_sub_path()
    assert surface.current_point() is None
    surface.line_to(1, 1)
    assert surface.current_point() == pytest.approx((1.0, 1.0))


def test_negative_line_width_rejected(surface):
    with pytest.raises(ValueError):
        surface.set_line_width(-1)


# ---------------------------------------------------------------------------
# 3. Painting
# ---------------------------------------------------------------------------
def test_fill_rectangle_top_left_origin(surface):
    surface.set_source_rgb(1, 0, 0)
    surface.rectangle(0, 0, 10, 10)
    surface.fill()
    px = surface.pixels()
    assert px[5, 5].tolist() == [255, 0, 0, 255]
    assert px[20, 20, 3] == 0
    # y points down: the bottom rows stay empty
    assert px[25, 5, 3] == 0


def test_paint_ignores_ctm(surface):
    surface.scale(0.1, 0.1)
    surface.set_source("blue")
    surface.paint()
    px = surface.pixels()
    assert (px[..., 2] == 255).all() and (px[..., 3] == 255).all()


def test_scaled_dot_lands_on_scaled_pixel():
    with RasterSurface(100, 100) as s:
        s.scale(2, 2)
        Dot((25, 25), radius=1).draw(s)
        s.fill()
        px = s.pixels()
        assert px[50, 50, 3] == 255
        assert px[10, 10, 3] == 0


def test_arc_stroke_goes_through_increasing_angles(surface):
    surface.arc(20, 15, 5, 0, math.pi)
    surface.stroke()
    alpha = surface.pixels()[..., 3]
    # angle pi/2 is below the center in device space
    assert alpha[19:22, 19:22].max() > 0
    assert alpha[9:12, 19:22].max() == 0


def test_arc_end_below_start_wraps_forward(surface):
    surface.arc(20, 15, 5, math.pi, 0)
    surface.stroke()
    alpha = surface.pixels()[..., 3]
    # pi -> 2*pi passes through 3*pi/2, above the center in device space
    assert alpha[9:12, 19:22].max() > 0
    assert alpha[19:22, 19:22].max() == 0


def test_arc_with_huge_start_angle_returns_promptly(surface):
    result = []
    worker = threading.Thread(target=lambda: result.append(
        Arc((10.0, 10.0), 5.0, 1e10, 0.0).draw(surface)), daemon=True)
    worker.start()
    worker.join(timeout=5)
    assert not worker.is_alive()
    assert result == [None]
    # the arc ends at angle 0 (mod 2*pi)
    assert surface.current_point() == pytest.approx((15.0, 10.0), abs=1e-3)


@pytest.mark.parametrize("angles", [(math.inf, 0.0), (0.0, math.nan), (-math.inf, 1.0)])
def test_arc_rejects_non_finite_angles(surface, angles):
    with pytest.raises(ValueError):
        surface.arc(10, 10, 5, *angles)


def test_stroke_clears_path(surface):
    surface.move_to(0, 0)
    surface.line_to(10, 10)
    surface.stroke()
    assert surface.current_point() is None


# ---------------------------------------------------------------------------
# 4. PNG output
# ---------------------------------------------------------------------------
def _draw_sample(s):
    s.set_source("white")
    s.paint()
    s.set_source_rgb(0.2, 0.4, 0.6)
    s.arc(10, 10, 6, 0, 2 * math.pi)
    s.stroke()


def test_encode_png_is_deterministic():
    blobs = []
    for _ in range(2):
        with RasterSurface(30, 20) as s:
            _draw_sample(s)
            blobs.append(s.encode_png({"Title": "t"}))
    assert blobs[0] == blobs[1]
    assert blobs[0].startswith(b"\x89PNG")


def test_write_to_png_round_trip(tmp_path):
    target = tmp_path / "out.png"
    with RasterSurface(30, 20) as s:
        _draw_sample(s)
        s.write_to_png(target)
        expected = s.pixels()
    img = mpimg.imread(target)
    assert img.shape == (20, 30, 4)
    np.testing.assert_array_equal((img * 255).round().astype(np.uint8), expected)


def test_write_png_bytes_missing_directory(tmp_path):
    target = tmp_path / "missing" / "out.png"
    with pytest.raises(PersistenceError):
        write_png_bytes(target, b"data")
    assert not target.exists()


def test_write_png_bytes_leaves_no_temp_files(tmp_path):
    target = tmp_path / "out.png"
    write_png_bytes(target, b"one")
    write_png_bytes(target, b"two")
    assert target.read_bytes() == b"two"
    assert [p.name for p in tmp_path.iterdir()] == ["out.png"]
