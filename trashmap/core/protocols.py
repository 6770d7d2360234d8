"""
Protocol Interfaces for Loose Coupling.

This module defines Protocol interfaces (PEP 544) for the collaborators the
marker engine consumes: the map surface and the timer scheduler.

Any class that implements the required methods satisfies the protocol without
explicit inheritance, so the Leaflet view, a headless test double and any
other map widget are interchangeable.
"""

from enum import Enum
from typing import Any, Callable, Protocol, runtime_checkable

from trashmap.core.geo_bounds import GeoBounds
from trashmap.core.poi import LngLat

MarkerHandle = Any
PopupHandle = Any

MapClickListener = Callable[[float, float], None]  # (lat, lng)
MarkerClickListener = Callable[[MarkerHandle], None]
PopupActionListener = Callable[[MarkerHandle, str], None]  # (marker, action)
PopupCloseListener = Callable[[PopupHandle], None]


class CursorMode(str, Enum):
    """Cursor affordances the map surface can show."""

    DEFAULT = "default"
    PICKING = "crosshair"


class MarkerStyle(str, Enum):
    """Visual styles for markers created on the surface."""

    POINT = "point"
    USER = "user"
    TRANSIENT = "transient"


class PopupAction(str, Enum):
    """Actions a popup can trigger."""

    SHOW_IMAGE = "show_image"
    NAVIGATE = "navigate"


@runtime_checkable
class MapSurfaceAdapter(Protocol):
    """
    Capability set of a map widget.

    Marker and popup handles are opaque to callers. A popup is bound to one
    marker and is released together with it by ``destroy_marker``.
    """

    def set_center(self, coord: LngLat) -> None:
        """Recenters the map on (lng, lat)."""
        ...

    def set_zoom(self, level: int) -> None:
        """Sets the zoom level."""
        ...

    def fit_bounds(self, bounds: GeoBounds) -> None:
        """Adjusts center and zoom so the bounds are fully visible."""
        ...

    def set_cursor(self, mode: CursorMode) -> None:
        """Switches the cursor affordance."""
        ...

    def create_marker(
        self, coord: LngLat, style: MarkerStyle, title: str = ""
    ) -> MarkerHandle:
        """Adds a marker at (lng, lat) and returns its handle."""
        ...

    def destroy_marker(self, marker: MarkerHandle) -> None:
        """Removes a marker and releases any popup bound to it."""
        ...

    def bind_popup(self, marker: MarkerHandle, content: str) -> PopupHandle:
        """Binds a closed popup with HTML content to a marker."""
        ...

    def open_popup(self, popup: PopupHandle) -> None:
        """Opens a bound popup at its marker position."""
        ...

    def close_popup(self, popup: PopupHandle) -> None:
        """Closes a popup. Closing a closed popup is a no-op."""
        ...

    def on_click(self, listener: MapClickListener) -> None:
        """Registers a listener for clicks on the map background."""
        ...

    def on_marker_click(self, listener: MarkerClickListener) -> None:
        """Registers a listener for clicks on markers."""
        ...

    def on_popup_action(self, listener: PopupActionListener) -> None:
        """Registers a listener for action links inside popups."""
        ...

    def on_popup_close(self, listener: PopupCloseListener) -> None:
        """
        Registers a listener for popups the user closed on the map.

        Closes requested through ``close_popup`` or ``destroy_marker`` are not
        reported.
        """
        ...


@runtime_checkable
class ScheduledTask(Protocol):
    """A callback scheduled to run once after a delay."""

    @property
    def is_active(self) -> bool:
        """True while the callback has neither fired nor been cancelled."""
        ...

    def cancel(self) -> None:
        """Prevents the callback from firing. No-op once fired."""
        ...


@runtime_checkable
class Scheduler(Protocol):
    """Schedules one-shot callbacks on the event loop."""

    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> ScheduledTask:
        """
        Runs ``callback`` once after ``delay_ms`` milliseconds.

        Args:
            delay_ms: Delay in milliseconds.
            callback: Zero-argument callable.

        Returns:
            ScheduledTask: Handle that can cancel the callback.
        """
        ...
