"""
context.py
----------

Per-trial render state and the policies that produce it.

- ``resolve_seed``: caller seed verbatim, else wall-clock milliseconds.
- ``physical_size``: user-space size times scale, rounded to device pixels.
- ``OutputLayout``: where a sketch's images live on disk.
- ``RenderContext``: everything a sketch can see during one trial. A new
  context is built for every trial and dropped when the trial ends.
"""

from __future__ import annotations

__all__ = ["resolve_seed", "physical_size", "OutputLayout", "RenderContext", "Hook"]

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Optional

from .errors import ConfigError, RenderError, ResourceError
from .surface import RasterSurface
from .video import VideoState
from .window import Window

Hook = Callable[[], object]

logger = logging.getLogger(__name__)


def resolve_seed(seed: Optional[int] = None) -> int:
    """Return ``seed`` unchanged, or ``floor(unix_time * 1000)`` when it is None."""
    if seed is not None:
        return seed
    return time.time_ns() // 1_000_000


def physical_size(width: int, height: int, scale: float) -> tuple[int, int]:
    """Device pixel size of a ``width`` x ``height`` user-space canvas."""
    w, h = round(width * scale), round(height * scale)
    if w <= 0 or h <= 0:
        raise ConfigError(f"{width}x{height} at scale {scale} has no pixels ({w}x{h})")
    return w, h


@dataclass(frozen=True)
class OutputLayout:
    """
    Artifact locations for one sketch name::

        <root>/
          <name>/
            <seed>-<scale><metadata>.png
            latest.png
            progress/
    """
    root: Path
    name: str

    @property
    def directory(self) -> Path:
        return Path(self.root) / self.name

    @property
    def progress_dir(self) -> Path:
        return self.directory / "progress"

    @property
    def latest(self) -> Path:
        return self.directory / "latest.png"

    def artifact(self, seed: int, scale: float, metadata: Optional[str] = None) -> Path:
        return self.directory / f"{seed}-{float(scale)!r}{metadata or ''}.png"

    def ensure(self) -> None:
        """Create the root, sketch and progress directories if missing."""
        for d in (Path(self.root), self.directory, self.progress_dir):
            try:
                d.mkdir(exist_ok=True)
            except OSError as e:
                raise ResourceError(f"Cannot create directory {d}: {e}") from e


@dataclass
class RenderContext:
    """
    State of one render trial, handed to the sketch with the trial's RNG.

    Attributes:
        width, height: Canvas size in user space.
        seed: Seed of this trial.
        scale: User space to device pixel factor.
        name: Sketch name.
        surface: Raster surface owned by this trial.
        video: Frame pacing state.
        layout: Output locations.
        window: Live display in interactive mode, else None.
    """
    width: int
    height: int
    seed: int
    scale: float
    name: str
    surface: RasterSurface
    video: VideoState
    layout: OutputLayout
    window: Optional[Window] = None
    _progress: float = field(default=0.0, init=False, repr=False)
    _before_save: Optional[Hook] = field(default=None, init=False, repr=False)
    _hook_ran: bool = field(default=False, init=False, repr=False)

    # -------------------------------------------------------------------------
    # Progress
    # -------------------------------------------------------------------------
    @property
    def progress(self) -> float:
        """Completion fraction in [0, 1] reported by the sketch."""
        return self._progress

    @progress.setter
    def progress(self, value: float) -> None:
        value = float(value)
        if not 0.0 <= value <= 1.0:
            raise ValueError(f"progress must be in [0, 1], got {value}")
        self._progress = value

    # -------------------------------------------------------------------------
    # Before-save hook
    # -------------------------------------------------------------------------
    @property
    def before_save_hook(self) -> Optional[Hook]:
        return self._before_save

    def set_before_save_hook(self, hook: Hook) -> None:
        """Register a callback run once, right before the surface is saved."""
        if not callable(hook):
            raise TypeError(f"hook must be callable, not {type(hook).__name__}")
        if self._before_save is not None:
            raise RenderError("before-save hook is already set for this trial")
        self._before_save = hook

    def run_before_save_hook(self) -> None:
        if self._before_save is None or self._hook_ran:
            return
        self._hook_ran = True
        logger.debug("Running before-save hook")
        self._before_save()

    # -------------------------------------------------------------------------
    # Convenience
    # -------------------------------------------------------------------------
    @property
    def physical_size(self) -> tuple[int, int]:
        return self.surface.width, self.surface.height

    @property
    def progress_dir(self) -> Path:
        return self.layout.progress_dir

    @property
    def interactive(self) -> bool:
        return self.window is not None
