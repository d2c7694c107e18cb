"""
video.py - Frame pacing state for sketches that draw repeatedly.

The pipeline only exposes this state; it never waits on it. A sketch that
advances frames checks ``frame_due`` (or blocks in ``wait_for_frame``) and
calls ``mark_frame`` after presenting a frame, so consecutive frames are at
least ``1 / fps`` seconds apart.
"""

import time
from dataclasses import dataclass
from typing import Callable, Optional


@dataclass
class VideoState:
    fps: int
    last_frame_time: float = 0.0  # time.monotonic() of the last frame, 0 = never

    def __post_init__(self):
        if self.fps <= 0:
            raise ValueError(f"fps must be positive, got {self.fps}")

    @property
    def frame_interval(self) -> float:
        return 1.0 / self.fps

    def frame_due(self, now: Optional[float] = None) -> bool:
        now = time.monotonic() if now is None else now
        return now - self.last_frame_time >= self.frame_interval

    def time_until_frame(self, now: Optional[float] = None) -> float:
        now = time.monotonic() if now is None else now
        return max(0.0, self.last_frame_time + self.frame_interval - now)

    def mark_frame(self, now: Optional[float] = None) -> None:
        self.last_frame_time = time.monotonic() if now is None else now

    def wait_for_frame(self,
                       clock: Callable[[], float] = time.monotonic,
                       sleep: Callable[[float], None] = time.sleep) -> float:
        """Sleep until the next frame is due, mark it, and return its timestamp."""
        delay = self.time_until_frame(clock())
        if delay > 0:
            sleep(delay)
        now = clock()
        self.mark_frame(now)
        return now
