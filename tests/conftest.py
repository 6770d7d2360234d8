import itertools
import os
import pathlib
import sys

import pytest

# Ensure project root is in sys.path
repo_root = pathlib.Path(__file__).parent.parent
sys.path.insert(0, str(repo_root))

# Run Qt headless unless a platform is chosen explicitly
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

try:
    from PySide6.QtWidgets import QApplication
except ImportError:
    QApplication = None

from trashmap.core.poi import PointOfInterest  # noqa: E402
from trashmap.core.protocols import CursorMode, MarkerStyle  # noqa: E402


@pytest.fixture(scope="session")
def qapp():
    """
    Ensure QApplication is instantiated only once.
    """
    if QApplication is None:
        yield None
        return

    app = QApplication.instance()
    if app is None:
        app = QApplication([])
    yield app


class FakeMapSurface:
    """
    Recording map surface for tests.

    Keeps markers, popups and camera state in plain dicts so tests can assert
    on exactly what a component drew. Destroying an unknown marker raises, so
    double-frees show up as failures.
    """

    def __init__(self):
        self._ids = itertools.count(1)
        self.markers = {}  # handle -> {"coord", "style", "title"}
        self.popups = {}  # handle -> {"marker", "content"}
        self.open_popups = set()
        self.cursor = CursorMode.DEFAULT
        self.center = None
        self.zoom = None
        self.bounds = None
        self.destroyed = []
        self._click_listeners = []
        self._marker_listeners = []
        self._popup_listeners = []
        self._popup_close_listeners = []

    # MapSurfaceAdapter

    def set_center(self, coord):
        self.center = coord

    def set_zoom(self, level):
        self.zoom = level

    def fit_bounds(self, bounds):
        self.bounds = bounds

    def set_cursor(self, mode):
        self.cursor = mode

    def create_marker(self, coord, style, title=""):
        handle = next(self._ids)
        self.markers[handle] = {"coord": coord, "style": style, "title": title}
        return handle

    def destroy_marker(self, marker):
        del self.markers[marker]
        for popup in [p for p, v in self.popups.items() if v["marker"] == marker]:
            del self.popups[popup]
            self.open_popups.discard(popup)
        self.destroyed.append(marker)

    def bind_popup(self, marker, content):
        assert marker in self.markers, "popup bound to a missing marker"
        handle = next(self._ids)
        self.popups[handle] = {"marker": marker, "content": content}
        return handle

    def open_popup(self, popup):
        assert popup in self.popups, "opening a released popup"
        self.open_popups.add(popup)

    def close_popup(self, popup):
        self.open_popups.discard(popup)

    def on_click(self, listener):
        self._click_listeners.append(listener)

    def on_marker_click(self, listener):
        self._marker_listeners.append(listener)

    def on_popup_action(self, listener):
        self._popup_listeners.append(listener)

    def on_popup_close(self, listener):
        self._popup_close_listeners.append(listener)

    # Simulated user input

    def click(self, lat, lng):
        for listener in list(self._click_listeners):
            listener(lat, lng)

    def click_marker(self, marker):
        for listener in list(self._marker_listeners):
            listener(marker)

    def trigger_popup_action(self, marker, action):
        for listener in list(self._popup_listeners):
            listener(marker, action)

    def user_close_popup(self, popup):
        self.open_popups.discard(popup)
        for listener in list(self._popup_close_listeners):
            listener(popup)

    # Helpers

    def markers_with_style(self, style):
        return [h for h, m in self.markers.items() if m["style"] is style]

    @property
    def point_markers(self):
        return self.markers_with_style(MarkerStyle.POINT)

    @property
    def transient_markers(self):
        return self.markers_with_style(MarkerStyle.TRANSIENT)


class ManualTask:
    def __init__(self, due, callback):
        self.due = due
        self.callback = callback
        self._active = True

    @property
    def is_active(self):
        return self._active

    def cancel(self):
        self._active = False


class ManualScheduler:
    """Scheduler driven by an explicit clock; nothing fires until advance()."""

    def __init__(self):
        self.now = 0
        self.tasks = []

    def call_later(self, delay_ms, callback):
        task = ManualTask(self.now + delay_ms, callback)
        self.tasks.append(task)
        return task

    def advance(self, ms):
        self.now += ms
        for task in sorted(self.tasks, key=lambda t: t.due):
            if task.is_active and task.due <= self.now:
                task._active = False
                task.callback()
        self.tasks = [t for t in self.tasks if t.is_active]

    @property
    def pending(self):
        return len([t for t in self.tasks if t.is_active])


@pytest.fixture
def map_surface():
    """A fresh recording map surface."""
    return FakeMapSurface()


@pytest.fixture
def scheduler():
    """A manual scheduler starting at t=0."""
    return ManualScheduler()


@pytest.fixture
def make_poi():
    """Factory for PointOfInterest with sensible defaults."""

    def _make(poi_id, lat=39.9, lng=116.4, **kwargs):
        return PointOfInterest(id=poi_id, latitude=lat, longitude=lng, **kwargs)

    return _make


@pytest.fixture
def image_file(tmp_path):
    """A small valid PNG on disk."""
    from PIL import Image

    path = tmp_path / "trashcan.png"
    Image.new("RGB", (8, 8), color=(30, 120, 60)).save(path, format="PNG")
    return path

