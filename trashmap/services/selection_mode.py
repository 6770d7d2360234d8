"""
Selection Mode Module.

Two-state controller that decides whether clicks on the map pick a coordinate
(for contributing a new trash can) or fall through to normal navigation.

Every pick drops a short-lived marker at the clicked spot. Its removal is
scheduled independently of the controller's state: ``disable()`` leaves
pending removals alone, and each one fires exactly once. Only ``shutdown()``
cancels them, for when the owning view goes away.
"""

import logging
from enum import Enum
from typing import Callable, List, Optional

from trashmap.app.constants import TRANSIENT_MARKER_MS
from trashmap.core.protocols import (
    CursorMode,
    MapSurfaceAdapter,
    MarkerHandle,
    MarkerStyle,
    ScheduledTask,
    Scheduler,
)

logger = logging.getLogger(__name__)

PickCallback = Callable[[float, float], None]  # (lat, lng)


class SelectionState(Enum):
    IDLE = "idle"
    ARMED = "armed"


class TransientMarker:
    """A picked-coordinate marker together with its pending removal."""

    def __init__(self, marker: MarkerHandle, lat: float, lng: float) -> None:
        self.marker = marker
        self.lat = lat
        self.lng = lng
        self.task: Optional[ScheduledTask] = None


class SelectionModeController:
    """
    Arms and disarms click-to-pick on a map surface.

    The controller subscribes to the surface's click events on construction.
    """

    def __init__(
        self,
        surface: MapSurfaceAdapter,
        scheduler: Scheduler,
        transient_ms: int = TRANSIENT_MARKER_MS,
    ) -> None:
        """
        Initializes the controller in the idle state.

        Args:
            surface: Map surface to listen on and draw transient markers on.
            scheduler: Runs the delayed transient-marker removal.
            transient_ms: Lifetime of a transient marker in milliseconds.
        """
        self._surface = surface
        self._scheduler = scheduler
        self._transient_ms = transient_ms
        self._state = SelectionState.IDLE
        self._on_pick: Optional[PickCallback] = None
        self._transients: List[TransientMarker] = []

        surface.on_click(self.handle_map_click)

    @property
    def state(self) -> SelectionState:
        return self._state

    @property
    def is_armed(self) -> bool:
        return self._state is SelectionState.ARMED

    @property
    def pending_transients(self) -> int:
        """Number of transient markers still on the map."""
        return len(self._transients)

    def enable(self, on_pick: PickCallback) -> None:
        """
        Arms coordinate picking.

        Enabling while already armed replaces the callback.

        Args:
            on_pick: Called with (lat, lng) for each pick.

        Raises:
            ValueError: If ``on_pick`` is None.
        """
        if on_pick is None:
            raise ValueError("on_pick callback is required to arm selection mode")

        self._on_pick = on_pick
        self._state = SelectionState.ARMED
        self._surface.set_cursor(CursorMode.PICKING)
        logger.debug("Selection mode armed")

    def disable(self) -> None:
        """
        Disarms coordinate picking and restores the default cursor.

        Transient markers already on the map still expire on their own timer.
        """
        if self._state is SelectionState.IDLE:
            return

        self._on_pick = None
        self._state = SelectionState.IDLE
        self._surface.set_cursor(CursorMode.DEFAULT)
        pending = len(self._transients)
        logger.debug(f"Selection mode disarmed ({pending} transient markers pending)")

    def handle_map_click(self, lat: float, lng: float) -> bool:
        """
        Handles a click on the map background.

        Args:
            lat: Clicked latitude.
            lng: Clicked longitude.

        Returns:
            bool: True if the click was consumed as a pick.
        """
        if self._state is not SelectionState.ARMED or self._on_pick is None:
            return False

        self._on_pick(lat, lng)
        self._drop_transient(lat, lng)
        return True

    def shutdown(self) -> None:
        """Cancels every pending removal and removes the markers immediately."""
        self.disable()
        for transient in list(self._transients):
            if transient.task is not None:
                transient.task.cancel()
            self._surface.destroy_marker(transient.marker)
        self._transients.clear()

    def _drop_transient(self, lat: float, lng: float) -> None:
        marker = self._surface.create_marker(
            (lng, lat), MarkerStyle.TRANSIENT, "Selected location"
        )
        transient = TransientMarker(marker, lat, lng)
        self._transients.append(transient)
        transient.task = self._scheduler.call_later(
            self._transient_ms, lambda: self._expire(transient)
        )

    def _expire(self, transient: TransientMarker) -> None:
        if transient not in self._transients:
            return
        self._transients.remove(transient)
        self._surface.destroy_marker(transient.marker)
        logger.debug(f"Transient marker at ({transient.lat}, {transient.lng}) expired")
