"""
pipeline.py - Render drivers.

Static trial:
    resolve seed -> create dirs + surface -> scale to user space -> sketch
    -> before-save hook -> write <seed>-<scale><metadata>.png and latest.png
    -> release surface

``run_with`` repeats the static trial ``options.times`` times, strictly one
after another. ``run_interactive`` renders into a live window as well, then
hands the window to an ``IdleLoop`` that keeps it open until quit.

A sketch is any callable ``sketch(ctx, rng)``. The RNG it receives is the
only source of randomness of the trial; a pinned seed therefore reproduces
byte-identical PNGs.
"""

from __future__ import annotations

__all__ = [
    "Sketch", "WindowFactory", "TrialResult",
    "run_trial", "run_with", "run_interactive_trial", "run_interactive",
    "persist",
]

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Optional

from utils.rng import RNG
from .config import RenderOptions
from .context import OutputLayout, RenderContext, physical_size, resolve_seed
from .surface import RasterSurface, write_png_bytes
from .video import VideoState
from .window import IdleLoop, OpenCVWindow, Window

Sketch = Callable[[RenderContext, RNG], Any]
WindowFactory = Callable[[str, int, int], Window]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TrialResult:
    """Outcome of one trial."""
    seed: int
    size: tuple[int, int]
    artifact: Path
    latest: Path
    idle: Optional[IdleLoop] = None


# =============================================================================
# Trial steps
# =============================================================================
def _new_context(options: RenderOptions, seed: int, surface: RasterSurface,
                 layout: OutputLayout, window: Optional[Window] = None) -> RenderContext:
    return RenderContext(
        width=options.width,
        height=options.height,
        seed=seed,
        scale=options.scale,
        name=options.name,
        surface=surface,
        video=VideoState(fps=options.fps),
        layout=layout,
        window=window,
    )


def _render(ctx: RenderContext, sketch: Sketch, use_numpy: bool) -> None:
    rng = RNG(ctx.seed, use_numpy=use_numpy)
    ctx.surface.scale(ctx.scale, ctx.scale)
    sketch(ctx, rng)


def persist(ctx: RenderContext, metadata: Optional[str] = None) -> tuple[Path, Path]:
    """Encode the surface once and write both the seed-named file and latest.png."""
    logger.info("Generating art...")
    data = ctx.surface.encode_png({
        "Title": ctx.name,
        "Description": f"seed={ctx.seed} scale={ctx.scale!r}",
    })
    artifact = ctx.layout.artifact(ctx.seed, ctx.scale, metadata)
    latest = ctx.layout.latest
    for target in (artifact, latest):
        logger.info(f"Writing {target}")
        write_png_bytes(target, data)
    return artifact, latest


# =============================================================================
# Static mode
# =============================================================================
def run_trial(options: RenderOptions, sketch: Sketch, use_numpy: bool = False) -> TrialResult:
    """Run one static trial and return where its images were written."""
    seed = resolve_seed(options.seed)
    size = physical_size(options.width, options.height, options.scale)
    layout = OutputLayout(options.output_root, options.name)
    logger.info(f"Rendering {options.name!r}: seed={seed} size={size[0]}x{size[1]}")

    layout.ensure()
    with RasterSurface(*size) as surface:
        ctx = _new_context(options, seed, surface, layout)
        _render(ctx, sketch, use_numpy)
        ctx.run_before_save_hook()
        artifact, latest = persist(ctx, options.metadata)
    return TrialResult(seed=seed, size=size, artifact=artifact, latest=latest)


def run_with(options: RenderOptions, sketch: Sketch, use_numpy: bool = False) -> list[TrialResult]:
    """Run ``options.times`` static trials sequentially; the first failure aborts the run."""
    results: list[TrialResult] = []
    for i in range(options.times):
        logger.debug(f"Trial {i + 1}/{options.times}")
        try:
            results.append(run_trial(options, sketch, use_numpy=use_numpy))
        except Exception as e:
            logger.critical(f"Trial {i + 1}/{options.times} failed: {e}")
            raise
    return results


# =============================================================================
# Interactive mode
# =============================================================================
def run_interactive_trial(options: RenderOptions, sketch: Sketch,
                          window_factory: WindowFactory = OpenCVWindow.open,
                          wait: bool = True, use_numpy: bool = False) -> TrialResult:
    """
    Render once into a live window, persist, then hand the window to an
    ``IdleLoop``, which owns the window and the surface from then on.

    With ``wait`` the loop runs on the calling thread (the one that created
    the window) and returns once the window is closed. Otherwise it is
    started as a background thread and the caller joins it through
    ``result.idle``.
    """
    seed = resolve_seed(options.seed)
    size = physical_size(options.width, options.height, options.scale)
    layout = OutputLayout(options.output_root, options.name)
    logger.info(f"Rendering {options.name!r} interactively: seed={seed} size={size[0]}x{size[1]}")

    layout.ensure()
    window = window_factory(options.name, *size)
    surface: Optional[RasterSurface] = None
    try:
        surface = RasterSurface(*size)
        window.bind(surface)
        window.fill("white")
        ctx = _new_context(options, seed, surface, layout, window)
        _render(ctx, sketch, use_numpy)
        ctx.run_before_save_hook()
        window.update()
        artifact, latest = persist(ctx, options.metadata)
    except BaseException:
        window.close()
        if surface is not None:
            surface.close()
        raise

    idle = IdleLoop(window, release=(surface,))
    if wait:
        idle.run()
    else:
        idle.start()
    return TrialResult(seed=seed, size=size, artifact=artifact, latest=latest, idle=idle)


def run_interactive(options: RenderOptions, sketch: Sketch,
                    window_factory: WindowFactory = OpenCVWindow.open,
                    wait: bool = True, use_numpy: bool = False) -> list[TrialResult]:
    """
    Run ``options.times`` interactive trials.

    With ``wait`` each window is polled on the calling thread, the next trial
    starts only after the previous window was closed, and an error raised
    inside an idle loop is re-raised here.
    """
    results: list[TrialResult] = []
    for i in range(options.times):
        try:
            result = run_interactive_trial(options, sketch, window_factory,
                                           wait=wait, use_numpy=use_numpy)
            results.append(result)
            if wait and result.idle.error is not None:
                raise result.idle.error
        except Exception as e:
            logger.critical(f"Interactive trial {i + 1}/{options.times} failed: {e}")
            raise
    return results
