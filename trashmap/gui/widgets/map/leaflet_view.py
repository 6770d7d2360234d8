"""
Leaflet Map View Module.

QWebEngineView hosting a Leaflet map. Implements the MapSurfaceAdapter
protocol: Python allocates integer handles for markers and popups and drives
the page through ``runJavaScript``; the page reports clicks back through a
QWebChannel bridge.
"""

import itertools
import json
import logging
from typing import Any, List, Optional

from PySide6.QtCore import QObject, Signal, Slot
from PySide6.QtWebChannel import QWebChannel
from PySide6.QtWebEngineWidgets import QWebEngineView
from PySide6.QtWidgets import QVBoxLayout, QWidget

from trashmap.core.geo_bounds import GeoBounds
from trashmap.core.poi import LngLat
from trashmap.core.protocols import (
    CursorMode,
    MapClickListener,
    MarkerClickListener,
    MarkerStyle,
    PopupActionListener,
    PopupCloseListener,
)
from trashmap.gui.widgets.map.leaflet_page import render_page

logger = logging.getLogger(__name__)


class MapBridge(QObject):
    """Bridge for communication between the Leaflet page and Python."""

    ready = Signal()
    map_clicked = Signal(float, float)  # lat, lng
    marker_clicked = Signal(int)  # marker handle
    popup_action = Signal(int, str)  # marker handle, action
    popup_closed = Signal(int)  # popup handle

    @Slot()
    def mapReady(self) -> None:
        """Called from JavaScript once the channel is connected."""
        self.ready.emit()

    @Slot(float, float)
    def mapClicked(self, lat: float, lng: float) -> None:
        """Called from JavaScript when the map background is clicked."""
        self.map_clicked.emit(lat, lng)

    @Slot(int)
    def markerClicked(self, marker_id: int) -> None:
        """Called from JavaScript when a marker is clicked."""
        self.marker_clicked.emit(marker_id)

    @Slot(int, str)
    def popupAction(self, marker_id: int, action: str) -> None:
        """Called from JavaScript when an action link in a popup is clicked."""
        self.popup_action.emit(marker_id, action)

    @Slot(int)
    def popupClosed(self, popup_id: int) -> None:
        """Called from JavaScript when the user closes a popup on the map."""
        self.popup_closed.emit(popup_id)


class LeafletMapView(QWidget):
    """
    Interactive map widget backed by Leaflet.

    Commands issued before the page has loaded are queued and replayed in
    order once the bridge reports ready.
    """

    def __init__(self, parent: Optional[QWidget] = None) -> None:
        """
        Initializes the LeafletMapView and starts loading the page.

        Args:
            parent: Parent widget.
        """
        super().__init__(parent)
        self._ids = itertools.count(1)
        self._ready = False
        self._pending_js: List[str] = []
        self._click_listeners: List[MapClickListener] = []
        self._marker_listeners: List[MarkerClickListener] = []
        self._popup_listeners: List[PopupActionListener] = []
        self._popup_close_listeners: List[PopupCloseListener] = []

        self._bridge = MapBridge(self)
        self._bridge.ready.connect(self._on_ready)
        self._bridge.map_clicked.connect(self._dispatch_click)
        self._bridge.marker_clicked.connect(self._dispatch_marker_click)
        self._bridge.popup_action.connect(self._dispatch_popup_action)
        self._bridge.popup_closed.connect(self._dispatch_popup_closed)

        self._setup_ui()

    def _setup_ui(self) -> None:
        """Sets up the web view UI."""
        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)

        self._web_view = QWebEngineView()
        self._web_view.setMinimumSize(400, 300)

        self._channel = QWebChannel(self)
        self._channel.registerObject("bridge", self._bridge)
        self._web_view.page().setWebChannel(self._channel)

        layout.addWidget(self._web_view)
        self._web_view.setHtml(render_page())

    @property
    def is_ready(self) -> bool:
        return self._ready

    # ------------------------------------------------------------------
    # MapSurfaceAdapter
    # ------------------------------------------------------------------

    def set_center(self, coord: LngLat) -> None:
        lng, lat = coord
        self._call("map.panTo", [lat, lng])

    def set_zoom(self, level: int) -> None:
        self._call("map.setZoom", level)

    def fit_bounds(self, bounds: GeoBounds) -> None:
        self._run(
            f"map.fitBounds({json.dumps(bounds.to_leaflet())}, {{padding: [40, 40]}});"
        )

    def set_cursor(self, mode: CursorMode) -> None:
        self._call("setCursor", mode.value)

    def create_marker(self, coord: LngLat, style: MarkerStyle, title: str = "") -> int:
        marker_id = next(self._ids)
        lng, lat = coord
        self._call("createMarker", marker_id, lng, lat, style.value, title)
        return marker_id

    def destroy_marker(self, marker: int) -> None:
        self._call("destroyMarker", marker)

    def bind_popup(self, marker: int, content: str) -> int:
        popup_id = next(self._ids)
        self._call("bindPopup", popup_id, marker, content)
        return popup_id

    def open_popup(self, popup: int) -> None:
        self._call("openPopup", popup)

    def close_popup(self, popup: int) -> None:
        self._call("closePopup", popup)

    def on_click(self, listener: MapClickListener) -> None:
        self._click_listeners.append(listener)

    def on_marker_click(self, listener: MarkerClickListener) -> None:
        self._marker_listeners.append(listener)

    def on_popup_action(self, listener: PopupActionListener) -> None:
        self._popup_listeners.append(listener)

    def on_popup_close(self, listener: PopupCloseListener) -> None:
        self._popup_close_listeners.append(listener)

    # ------------------------------------------------------------------
    # JavaScript plumbing
    # ------------------------------------------------------------------

    def _call(self, function: str, *args: Any) -> None:
        arguments = ", ".join(json.dumps(arg) for arg in args)
        self._run(f"{function}({arguments});")

    def _run(self, script: str) -> None:
        if not self._ready:
            self._pending_js.append(script)
            return
        self._web_view.page().runJavaScript(script)

    def _on_ready(self) -> None:
        logger.info(f"Map page ready, replaying {len(self._pending_js)} commands")
        self._ready = True
        pending, self._pending_js = self._pending_js, []
        for script in pending:
            self._web_view.page().runJavaScript(script)

    def _dispatch_click(self, lat: float, lng: float) -> None:
        for listener in list(self._click_listeners):
            listener(lat, lng)

    def _dispatch_marker_click(self, marker_id: int) -> None:
        for listener in list(self._marker_listeners):
            listener(marker_id)

    def _dispatch_popup_action(self, marker_id: int, action: str) -> None:
        for listener in list(self._popup_listeners):
            listener(marker_id, action)

    def _dispatch_popup_closed(self, popup_id: int) -> None:
        for listener in list(self._popup_close_listeners):
            listener(popup_id)
