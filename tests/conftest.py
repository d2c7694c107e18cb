"""
-------
conftest.py
-------
Shared pytest fixtures for geometry and pipeline tests.
"""

import threading

import pytest

from runner.surface import RasterSurface
from runner.window import Event, EventKind


# -----------------------------------------------------------------------------
# Surfaces & filesystem
# -----------------------------------------------------------------------------
@pytest.fixture
def surface():
    """A 40x30 transparent surface, closed after the test."""
    s = RasterSurface(40, 30)
    yield s
    s.close()


@pytest.fixture
def workdir(tmp_path, monkeypatch):
    """Run the test with ``tmp_path`` as the current directory."""
    monkeypatch.chdir(tmp_path)
    return tmp_path


# -----------------------------------------------------------------------------
# Fake window
# -----------------------------------------------------------------------------
class FakeWindow:
    """In-memory stand-in for OpenCVWindow; quits after ``quit_after`` polls."""

    instances = []

    def __init__(self, title, width, height, quit_after=2):
        self.title = title
        self.width = width
        self.height = height
        self.quit_after = quit_after
        self.polls = 0
        self.updates = 0
        self.closed = False
        self.surface = None
        self.fills = []
        self.shown = None
        self.poll_threads = set()
        FakeWindow.instances.append(self)

    @property
    def pixels(self):
        return self.surface.buffer()

    def fill(self, color):
        self.fills.append(color)
        self.surface.save()
        self.surface.set_source(color)
        self.surface.paint()
        self.surface.restore()

    def bind(self, surface):
        self.surface = surface

    def update(self):
        self.updates += 1
        self.shown = self.pixels.copy()

    def poll_events(self):
        self.polls += 1
        self.poll_threads.add(threading.get_ident())
        if self.polls >= self.quit_after:
            return [Event(EventKind.KEY, 27), Event(EventKind.QUIT)]
        return []

    def close(self):
        self.closed = True


@pytest.fixture
def fake_window_factory():
    """Factory with the OpenCVWindow.open signature that records created windows."""
    FakeWindow.instances = []

    def factory(title, width, height):
        return FakeWindow(title, width, height)

    factory.instances = FakeWindow.instances
    return factory

