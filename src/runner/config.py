"""
config.py - Configuration dataclass for render runs.

One immutable ``RenderOptions`` instance describes a whole run; every trial
of the run reads it. Validation happens at construction, so malformed values
are rejected before any trial starts.
"""

import os
import math
import time
from numbers import Integral
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from utils.rng import MAX_SEED
from .errors import ConfigError

DEFAULT_SCALE = 1.0
DEFAULT_WIDTH = 100
DEFAULT_HEIGHT = 100
DEFAULT_TIMES = 1
DEFAULT_NAME = "sketch"
DEFAULT_FPS = 30
DEFAULT_OUTPUT_ROOT = Path("images")


@dataclass(frozen=True)
class RenderOptions:
    """Immutable options shared by all trials of a run.

    Attributes:
        seed: Seed for the trial RNG; None resolves a fresh time-based seed
            for every trial.
        scale: Factor from user space to device pixels.
        width: Width in user space.
        height: Height in user space.
        times: How many trials to render sequentially.
        name: Sketch name; images land in ``<output_root>/<name>/``.
        metadata: Optional suffix appended to the artifact file name.
        fps: Frame rate exposed to video-style sketches.
        output_root: Root directory of all artifacts.
    """
    seed: Optional[int] = None
    scale: float = DEFAULT_SCALE
    width: int = DEFAULT_WIDTH
    height: int = DEFAULT_HEIGHT
    times: int = DEFAULT_TIMES
    name: str = DEFAULT_NAME
    metadata: Optional[str] = None
    fps: int = DEFAULT_FPS
    output_root: Union[str, os.PathLike] = DEFAULT_OUTPUT_ROOT

    def __post_init__(self):
        if self.seed is not None:
            if isinstance(self.seed, bool) or not isinstance(self.seed, Integral):
                raise ConfigError(f"seed must be an integer, got {self.seed!r}")
            if not 0 <= self.seed <= MAX_SEED:
                raise ConfigError(f"seed must be in [0, 2**64 - 1], got {self.seed}")
            object.__setattr__(self, "seed", int(self.seed))
        if (isinstance(self.scale, bool) or not isinstance(self.scale, (int, float))
                or not math.isfinite(self.scale) or self.scale <= 0):
            raise ConfigError(f"scale must be positive, got {self.scale}")
        for field_name in ("width", "height", "times", "fps"):
            value = getattr(self, field_name)
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                raise ConfigError(f"{field_name} must be a positive integer, got {value!r}")
        if not self.name or os.sep in self.name or "/" in self.name or self.name in (".", ".."):
            raise ConfigError(f"name must be a plain directory name, got {self.name!r}")
        if self.metadata is not None and ("/" in self.metadata or os.sep in self.metadata):
            raise ConfigError(f"metadata must not contain path separators, got {self.metadata!r}")
        object.__setattr__(self, "scale", float(self.scale))
        object.__setattr__(self, "output_root", Path(self.output_root))


def default_options() -> RenderOptions:
    """Default options with the seed pinned to the current time in milliseconds."""
    return RenderOptions(seed=time.time_ns() // 1_000_000)
