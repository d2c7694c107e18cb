"""
test_context.py
---------------

Tests for seed resolution, sizing, output layout, the per-trial context,
run options and frame pacing.
"""

import time
from pathlib import Path

import numpy as np
import pytest

from runner.config import RenderOptions, default_options
from runner.context import OutputLayout, RenderContext, physical_size, resolve_seed
from runner.errors import ConfigError, RenderError, ResourceError
from runner.video import VideoState
from utils.rng import RNG


@pytest.fixture
def ctx(surface, tmp_path):
    return RenderContext(
        width=40, height=30, seed=7, scale=1.0, name="demo",
        surface=surface, video=VideoState(fps=30),
        layout=OutputLayout(tmp_path / "images", "demo"),
    )


# ---------------------------------------------------------------------------
# 1. Seeds & sizes
# ---------------------------------------------------------------------------
@pytest.mark.parametrize("seed", [0, 42, 2**64 - 1])
def test_explicit_seed_is_returned_verbatim(seed):
    assert resolve_seed(seed) == seed


def test_missing_seed_is_wall_clock_millis():
    before = time.time_ns() // 1_000_000
    seed = resolve_seed(None)
    after = time.time_ns() // 1_000_000
    assert before <= seed <= after


@pytest.mark.parametrize("w, h, scale, expected", [
    (100, 100, 1.0, (100, 100)),
    (50, 50, 2.0, (100, 100)),
    (10, 20, 1.5, (15, 30)),
])
def test_physical_size(w, h, scale, expected):
    assert physical_size(w, h, scale) == expected


def test_physical_size_without_pixels():
    with pytest.raises(ConfigError):
        physical_size(1, 1, 0.1)


# ---------------------------------------------------------------------------
# 2. Output layout
# ---------------------------------------------------------------------------
def test_layout_paths():
    layout = OutputLayout(Path("images"), "sketch")
    assert layout.directory == Path("images/sketch")
    assert layout.latest == Path("images/sketch/latest.png")
    assert layout.progress_dir == Path("images/sketch/progress")
    assert layout.artifact(42, 1) == Path("images/sketch/42-1.0.png")
    assert layout.artifact(42, 2.5, "-v2") == Path("images/sketch/42-2.5-v2.png")


def test_layout_ensure_is_idempotent(tmp_path):
    layout = OutputLayout(tmp_path / "images", "sketch")
    layout.ensure()
    layout.ensure()
    assert layout.progress_dir.is_dir()


def test_layout_ensure_failure(tmp_path):
    blocker = tmp_path / "images"
    blocker.write_text("not a directory")
    with pytest.raises(ResourceError):
        OutputLayout(blocker, "sketch").ensure()


# ---------------------------------------------------------------------------
# 3. RenderContext
# ---------------------------------------------------------------------------
def test_context_defaults(ctx):
    assert ctx.progress == 0.0
    assert ctx.before_save_hook is None
    assert not ctx.interactive
    assert ctx.physical_size == (40, 30)
    assert ctx.progress_dir == ctx.layout.progress_dir


@pytest.mark.parametrize("value", [0, 0.5, 1])
def test_progress_accepts_unit_interval(ctx, value):
    ctx.progress = value
    assert ctx.progress == value


@pytest.mark.parametrize("value", [-0.01, 1.01])
def test_progress_rejects_out_of_range(ctx, value):
    with pytest.raises(ValueError):
        ctx.progress = value


def test_hook_runs_once(ctx):
    calls = []
    ctx.set_before_save_hook(lambda: calls.append(1))
    ctx.run_before_save_hook()
    ctx.run_before_save_hook()
    assert calls == [1]


def test_hook_can_only_be_set_once(ctx):
    ctx.set_before_save_hook(lambda: None)
    with pytest.raises(RenderError):
        ctx.set_before_save_hook(lambda: None)


def test_hook_must_be_callable(ctx):
    with pytest.raises(TypeError):
        ctx.set_before_save_hook("not callable")


def test_missing_hook_is_a_no_op(ctx):
    ctx.run_before_save_hook()


# ---------------------------------------------------------------------------
# 4. RenderOptions
# ---------------------------------------------------------------------------
def test_option_defaults():
    o = RenderOptions()
    assert (o.seed, o.scale, o.width, o.height, o.times, o.name, o.metadata, o.fps) == \
        (None, 1.0, 100, 100, 1, "sketch", None, 30)
    assert o.output_root == Path("images")


def test_scale_is_coerced_to_float():
    o = RenderOptions(scale=2)
    assert o.scale == 2.0 and isinstance(o.scale, float)


@pytest.mark.parametrize("seed", [np.uint64(42), np.int32(42)])
def test_numpy_integer_seed_is_accepted(seed):
    o = RenderOptions(seed=seed)
    assert o.seed == 42 and type(o.seed) is int
    assert RNG(o.seed).random() == RNG(42).random()


def test_default_options_pin_a_time_seed():
    before = time.time_ns() // 1_000_000
    o = default_options()
    assert before <= o.seed <= time.time_ns() // 1_000_000


@pytest.mark.parametrize("changes", [
    {"seed": -1},
    {"seed": 2**64},
    {"seed": 1.5},
    {"scale": 0},
    {"scale": -1.0},
    {"scale": float("nan")},
    {"width": 0},
    {"height": -5},
    {"times": 0},
    {"fps": 0},
    {"width": 1.5},
    {"name": ""},
    {"name": "a/b"},
    {"name": ".."},
    {"metadata": "x/y"},
])
def test_invalid_options(changes):
    with pytest.raises(ConfigError):
        RenderOptions(**changes)


def test_config_error_is_a_value_error():
    with pytest.raises(ValueError):
        RenderOptions(width=0)


# ---------------------------------------------------------------------------
# 5. Frame pacing
# ---------------------------------------------------------------------------
def test_video_state_validation():
    with pytest.raises(ValueError):
        VideoState(fps=0)


def test_frame_due_after_interval():
    v = VideoState(fps=10)
    assert v.frame_interval == pytest.approx(0.1)
    v.mark_frame(100.0)
    assert not v.frame_due(100.05)
    assert v.frame_due(100.15)
    assert v.time_until_frame(100.04) == pytest.approx(0.06)
    assert v.time_until_frame(200.0) == 0.0


def test_wait_for_frame_sleeps_until_due():
    v = VideoState(fps=4)
    v.mark_frame(10.0)
    now = [10.1]
    slept = []

    def sleep(dt):
        slept.append(dt)
        now[0] += dt

    stamp = v.wait_for_frame(clock=lambda: now[0], sleep=sleep)
    assert slept == [pytest.approx(0.15)]
    assert stamp == pytest.approx(10.25)
    assert v.last_frame_time == stamp


def test_wait_for_frame_does_not_sleep_when_late():
    v = VideoState(fps=4)
    v.mark_frame(10.0)
    slept = []
    v.wait_for_frame(clock=lambda: 11.0, sleep=slept.append)
    assert slept == []
