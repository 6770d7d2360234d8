"""
Geolocation Module.

Resolves the viewer's position through Qt Positioning. Any failure (no
positioning backend, permission denied, timeout) resolves to a fixed fallback
coordinate instead of raising.
"""

import logging
from typing import Any, Callable, List, Optional

from PySide6.QtCore import QObject, Signal
from PySide6.QtPositioning import QGeoPositionInfoSource

from trashmap.app.constants import (
    FALLBACK_LAT,
    FALLBACK_LNG,
    GEOLOCATION_TIMEOUT_MS,
    USER_LOCATION_ZOOM,
)
from trashmap.core.poi import UserLocation
from trashmap.core.protocols import MapSurfaceAdapter

logger = logging.getLogger(__name__)

FALLBACK_LOCATION = UserLocation(FALLBACK_LAT, FALLBACK_LNG, is_fallback=True)

LocationCallback = Callable[[UserLocation], None]
SourceFactory = Callable[[QObject], Optional[Any]]


class GeoLocationProvider(QObject):
    """
    Acquires the user's location once per request.

    Signals:
        location_resolved: Emitted exactly once per acquisition.
                           Args: (location: UserLocation)
    """

    location_resolved = Signal(object)

    def __init__(
        self,
        surface: MapSurfaceAdapter,
        source_factory: Optional[SourceFactory] = None,
        timeout_ms: int = GEOLOCATION_TIMEOUT_MS,
        parent: Optional[QObject] = None,
    ) -> None:
        """
        Initializes the provider.

        Args:
            surface: Map to recenter once a location is known.
            source_factory: Builds the position source. Defaults to the
                platform's default ``QGeoPositionInfoSource``; may return None.
            timeout_ms: How long to wait for a fix.
            parent: Parent QObject.
        """
        super().__init__(parent)
        self._surface = surface
        self._source_factory = (
            source_factory or QGeoPositionInfoSource.createDefaultSource
        )
        self._timeout_ms = timeout_ms
        self._source: Optional[Any] = None
        self._source_checked = False
        self._pending = False
        self._callbacks: List[LocationCallback] = []
        self.last_location: Optional[UserLocation] = None

    @property
    def is_pending(self) -> bool:
        return self._pending

    def acquire(self, callback: Optional[LocationCallback] = None) -> None:
        """
        Starts resolving the location.

        Completion is reported through ``location_resolved`` and the optional
        callback. Calling again while a request is pending only adds the
        callback to the same request.

        Args:
            callback: Called once with the resolved UserLocation.
        """
        if callback is not None:
            self._callbacks.append(callback)
        if self._pending:
            return

        source = self._get_source()
        if source is None:
            logger.warning("No positioning source available, using fallback location")
            self._complete(FALLBACK_LOCATION)
            return

        self._pending = True
        source.requestUpdate(self._timeout_ms)

    def _get_source(self) -> Optional[Any]:
        if self._source_checked:
            return self._source

        self._source_checked = True
        self._source = self._source_factory(self)
        if self._source is not None:
            self._source.positionUpdated.connect(self._on_position_updated)
            self._source.errorOccurred.connect(self._on_error)
        return self._source

    def _on_position_updated(self, info: Any) -> None:
        if not self._pending:
            return
        if not info.isValid():
            logger.warning("Received invalid position, using fallback location")
            self._complete(FALLBACK_LOCATION)
            return

        coordinate = info.coordinate()
        location = UserLocation(coordinate.latitude(), coordinate.longitude())
        logger.info(f"Resolved user location: ({location.lat}, {location.lng})")
        self._complete(location)

    def _on_error(self, error: Any) -> None:
        if not self._pending:
            return
        logger.warning(f"Geolocation failed ({error}), using fallback location")
        self._complete(FALLBACK_LOCATION)

    def _complete(self, location: UserLocation) -> None:
        self._pending = False
        self.last_location = location

        self._surface.set_center(location.lnglat)
        self._surface.set_zoom(USER_LOCATION_ZOOM)

        callbacks, self._callbacks = self._callbacks, []
        for callback in callbacks:
            callback(location)
        self.location_resolved.emit(location)
