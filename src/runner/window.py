"""
window.py
---------

Live preview window and its idle event loop.

``OpenCVWindow`` shows a surface in an OpenCV HighGUI window. The window is
bound to the surface's Agg pixel buffer (a zero-copy view), so ``update()``
always presents what has been drawn so far. Closing the window or pressing
Esc / ``q`` produces a ``QUIT`` event.

``IdleLoop`` takes over the window once an interactive trial has been
persisted: it polls events until it sees ``QUIT``, then closes the window.
HighGUI windows must be polled on the thread that created them, so the
loop is normally driven with ``run()`` on that thread; ``start()`` moves it
to a background thread for window backends that allow it.
"""

from __future__ import annotations

__all__ = ["EventKind", "Event", "Window", "OpenCVWindow", "IdleLoop"]

import logging
import threading
import time
from dataclasses import dataclass
from enum import Enum, auto
from typing import TYPE_CHECKING, Callable, Iterable, Optional, Protocol

import cv2
import numpy as np
from numpy.typing import NDArray
from matplotlib import colors as mcolors

from .errors import ResourceError

if TYPE_CHECKING:
    from .surface import Color, RasterSurface

ESC_KEY = 27
QUIT_KEYS = (ESC_KEY, ord("q"))

logger = logging.getLogger(__name__)


class EventKind(Enum):
    QUIT = auto()
    KEY = auto()


@dataclass(frozen=True)
class Event:
    kind: EventKind
    key: Optional[int] = None


class Closeable(Protocol):
    def close(self) -> None: ...


class Window(Protocol):
    """Display service used by the interactive pipeline."""

    width: int
    height: int

    @property
    def pixels(self) -> NDArray[np.uint8]: ...

    def fill(self, color: Color) -> None: ...

    def bind(self, surface: RasterSurface) -> None: ...

    def update(self) -> None: ...

    def poll_events(self) -> list[Event]: ...

    def close(self) -> None: ...


class OpenCVWindow:
    """HighGUI window of ``width`` x ``height`` pixels."""

    def __init__(self, title: str, width: int, height: int) -> None:
        self.title = title
        self.width = int(width)
        self.height = int(height)
        self._own = np.zeros((self.height, self.width, 4), dtype=np.uint8)
        self._surface: Optional[RasterSurface] = None
        self._closed = False
        try:
            cv2.namedWindow(self.title, cv2.WINDOW_AUTOSIZE)
        except cv2.error as e:
            raise ResourceError(f"Cannot open window {title!r}: {e}") from e
        logger.debug(f"Opened window {title!r} ({self.width}x{self.height})")

    @classmethod
    def open(cls, title: str, width: int, height: int) -> OpenCVWindow:
        return cls(title, width, height)

    @property
    def pixels(self) -> NDArray[np.uint8]:
        """RGBA pixels currently backing the window."""
        if self._surface is not None:
            return self._surface.buffer()
        return self._own

    def fill(self, color: Color) -> None:
        rgba = (np.array(mcolors.to_rgba(color)) * 255).round().astype(np.uint8)
        if self._surface is not None:
            self._surface.save()
            self._surface.set_source(color)
            self._surface.paint()
            self._surface.restore()
        else:
            self._own[...] = rgba

    def bind(self, surface: RasterSurface) -> None:
        """Display ``surface``'s pixel buffer from now on."""
        if (surface.width, surface.height) != (self.width, self.height):
            raise ResourceError(
                f"Surface {surface.width}x{surface.height} does not match "
                f"window {self.width}x{self.height}"
            )
        self._surface = surface

    def update(self) -> None:
        bgr = cv2.cvtColor(np.ascontiguousarray(self.pixels), cv2.COLOR_RGBA2BGR)
        cv2.imshow(self.title, bgr)
        cv2.waitKey(1)

    def poll_events(self) -> list[Event]:
        events: list[Event] = []
        key = cv2.waitKey(1)
        if key != -1:
            key &= 0xFF
            events.append(Event(EventKind.KEY, key))
            if key in QUIT_KEYS:
                events.append(Event(EventKind.QUIT))
        if cv2.getWindowProperty(self.title, cv2.WND_PROP_VISIBLE) < 1:
            events.append(Event(EventKind.QUIT))
        return events

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            cv2.destroyWindow(self.title)
        except cv2.error:
            logger.debug(f"Window {self.title!r} was already destroyed")
        self._surface = None


class IdleLoop(threading.Thread):
    """
    Poll ``window`` for events until a QUIT event, then close it.

    The loop does no rendering. It owns the window exclusively once running
    (``run()`` on the current thread or ``start()`` in the background), and
    closes ``release`` (e.g. the surface the window displays) after it.
    """

    def __init__(self, window: Window, poll_interval: float = 0.01,
                 on_event: Optional[Callable[[Event], None]] = None,
                 release: Iterable[Closeable] = ()) -> None:
        super().__init__(name=f"idle-{getattr(window, 'title', 'window')}", daemon=True)
        self.window = window
        self.poll_interval = poll_interval
        self.on_event = on_event
        self.release = tuple(release)
        self.error: Optional[BaseException] = None

    def run(self) -> None:
        try:
            while not self._poll_once():
                time.sleep(self.poll_interval)
        except Exception as e:
            self.error = e
            logger.error(f"Idle loop stopped on error: {e}")
        finally:
            self.window.close()
            for resource in self.release:
                resource.close()
            logger.info("Window closed")

    def _poll_once(self) -> bool:
        quit_seen = False
        for event in self.window.poll_events():
            if self.on_event is not None:
                self.on_event(event)
            if event.kind is EventKind.QUIT:
                quit_seen = True
        return quit_seen
