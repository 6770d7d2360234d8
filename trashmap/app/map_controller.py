"""
MapController - Owns the marker engine for the MainWindow.

Wires geolocation, nearby search, the marker registry, selection mode and the
contribution draft together. Backend calls go to the ApiWorker through
signals, so the controller works the same whether the worker lives on its own
thread (the application) or on the caller's thread (tests).
"""

import dataclasses
from typing import Callable, List, Optional

from PySide6.QtCore import QObject, QUrl, Signal, Slot
from PySide6.QtGui import QDesktopServices

from trashmap.app.constants import (
    STATUS_LOCATION_FALLBACK,
    STATUS_SEARCH_FAILED,
    STATUS_UPLOAD_FAILED,
)
from trashmap.core.logging_config import get_logger
from trashmap.core.poi import EntityId, PointOfInterest, UserLocation
from trashmap.core.protocols import (
    MapSurfaceAdapter,
    MarkerHandle,
    MarkerStyle,
    Scheduler,
)
from trashmap.services.contribution import ContributionDraft
from trashmap.services.geolocation import FALLBACK_LOCATION, GeoLocationProvider
from trashmap.services.marker_registry import MarkerRegistry
from trashmap.services.selection_mode import SelectionModeController
from trashmap.services.worker import ApiWorker

logger = get_logger(__name__)

UrlOpener = Callable[[str], None]


def open_in_browser(url: str) -> None:
    """Hands a URL to the desktop's default handler."""
    if not QDesktopServices.openUrl(QUrl(url)):
        logger.warning(f"Could not open URL: {url}")


class MapController(QObject):
    """
    Manages the map's markers and the workflows around them.

    Signals:
        notice: Short user-facing status text. Args: (message)
        results_changed: A search result was applied. Args: (results)
        location_changed: The user's location was resolved. Args: (location)
        coordinate_picked: A coordinate was picked on the map. Args: (lat, lng)
        image_requested: A popup photo was clicked. Args: (url)
        image_loaded: Photo bytes arrived. Args: (url, data)
        image_failed: Photo download failed. Args: (url, message)
        contribution_succeeded: A new trash can was created. Args: (record)
        contribution_failed: Submission failed; the draft is kept. Args: (message)
    """

    notice = Signal(str)
    results_changed = Signal(list)
    location_changed = Signal(object)
    coordinate_picked = Signal(float, float)
    image_requested = Signal(str)
    image_loaded = Signal(str, object)
    image_failed = Signal(str, str)
    contribution_succeeded = Signal(object)
    contribution_failed = Signal(str)

    # Requests to the worker
    search_requested = Signal(int, object)
    submit_requested = Signal(object)
    image_load_requested = Signal(str)

    def __init__(
        self,
        surface: MapSurfaceAdapter,
        scheduler: Scheduler,
        worker: ApiWorker,
        geolocation: Optional[GeoLocationProvider] = None,
        url_opener: Optional[UrlOpener] = None,
        parent: Optional[QObject] = None,
    ) -> None:
        """
        Initialize the MapController.

        Args:
            surface: Map surface shared by the registry and selection mode.
            scheduler: Timer source for transient pick markers.
            worker: Backend worker; its slots are reached through signals.
            geolocation: Location provider. Defaults to one on ``surface``.
            url_opener: Opens navigation URLs. Defaults to the system browser.
            parent: Parent QObject.
        """
        super().__init__(parent)
        self._surface = surface
        self._worker = worker
        self._url_opener = url_opener or open_in_browser

        self.registry = MarkerRegistry(
            surface,
            on_show_image=self.request_image,
            on_navigate=self._url_opener,
        )
        self.selection = SelectionModeController(surface, scheduler)
        self.geolocation = geolocation or GeoLocationProvider(surface, parent=self)
        self.draft = ContributionDraft()

        self._location: Optional[UserLocation] = None
        self._user_marker: Optional[MarkerHandle] = None
        self._results: List[PointOfInterest] = []
        self._search_seq = 0
        self._last_applied_seq = 0

        self.search_requested.connect(worker.search_nearby)
        self.submit_requested.connect(worker.submit_contribution)
        self.image_load_requested.connect(worker.load_image)

        worker.search_finished.connect(self._on_search_finished)
        worker.search_failed.connect(self._on_search_failed)
        worker.contribution_finished.connect(self._on_contribution_finished)
        worker.contribution_failed.connect(self._on_contribution_failed)
        worker.image_loaded.connect(self.image_loaded)
        worker.image_failed.connect(self.image_failed)

    @property
    def location(self) -> Optional[UserLocation]:
        return self._location

    @property
    def results(self) -> List[PointOfInterest]:
        """The result set currently rendered on the map."""
        return list(self._results)

    # ------------------------------------------------------------------
    # Location and search
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Locates the user; a nearby search follows automatically."""
        logger.info("Acquiring user location")
        self.geolocation.acquire(self._on_location_resolved)

    def _on_location_resolved(self, location: UserLocation) -> None:
        self._location = location
        self._place_user_marker(location)
        self.location_changed.emit(location)
        if location.is_fallback:
            self.notice.emit(STATUS_LOCATION_FALLBACK)
        self.search()

    def _place_user_marker(self, location: UserLocation) -> None:
        if self._user_marker is not None:
            self._surface.destroy_marker(self._user_marker)
        self._user_marker = self._surface.create_marker(
            location.lnglat, MarkerStyle.USER, "You are here"
        )

    def search(self) -> int:
        """
        Requests a nearby search around the current location.

        Returns:
            int: Sequence number of the request.
        """
        location = self._location or FALLBACK_LOCATION
        self._search_seq += 1
        request_id = self._search_seq
        logger.debug(f"Search #{request_id} at ({location.lat}, {location.lng})")
        self.search_requested.emit(request_id, location)
        return request_id

    @Slot(int, list)
    def _on_search_finished(
        self, request_id: int, results: List[PointOfInterest]
    ) -> None:
        if request_id < self._last_applied_seq:
            logger.info(
                f"Search #{request_id} arrived after #{self._last_applied_seq}; "
                "applying in arrival order"
            )
        self._last_applied_seq = max(self._last_applied_seq, request_id)

        self._results = list(results)
        self.registry.sync(self._results)
        self.registry.fit_viewport(self._results, self._location)
        self.results_changed.emit(self.results)
        self.notice.emit(f"Found {len(self._results)} trash cans nearby.")

    @Slot(int, str)
    def _on_search_failed(self, request_id: int, message: str) -> None:
        logger.warning(f"Search #{request_id} failed: {message}")
        self.notice.emit(f"{STATUS_SEARCH_FAILED}{message}")

    def focus(self, entity_id: EntityId) -> None:
        """Opens a trash can's popup and zooms onto it."""
        self.registry.focus(entity_id)

    # ------------------------------------------------------------------
    # Popup actions
    # ------------------------------------------------------------------

    def request_image(self, url: str) -> None:
        """Announces a photo request and starts downloading it."""
        self.image_requested.emit(url)
        self.image_load_requested.emit(url)

    # ------------------------------------------------------------------
    # Contribution
    # ------------------------------------------------------------------

    def begin_pick(self) -> None:
        """Arms click-to-pick; each pick updates the draft's coordinates."""
        self.selection.enable(self._on_coordinate_picked)

    def end_pick(self) -> None:
        self.selection.disable()

    def _on_coordinate_picked(self, lat: float, lng: float) -> None:
        self.draft.set_location(lat, lng)
        self.coordinate_picked.emit(lat, lng)

    def submit(self, draft: Optional[ContributionDraft] = None) -> None:
        """
        Sends a contribution to the backend.

        Args:
            draft: Form state to submit. Replaces the held draft when given.
        """
        if draft is not None:
            self.draft = draft
        self.submit_requested.emit(dataclasses.replace(self.draft))

    @Slot(object)
    def _on_contribution_finished(self, record: dict) -> None:
        self.draft.reset()
        self.end_pick()
        self.contribution_succeeded.emit(record)
        self.notice.emit("Thanks! Your trash can was added.")
        self.search()

    @Slot(str)
    def _on_contribution_failed(self, message: str) -> None:
        self.contribution_failed.emit(message)
        self.notice.emit(f"{STATUS_UPLOAD_FAILED}{message}")

    # ------------------------------------------------------------------
    # Teardown
    # ------------------------------------------------------------------

    def shutdown(self) -> None:
        """Removes every marker this controller put on the map."""
        self.selection.shutdown()
        self.registry.clear()
        if self._user_marker is not None:
            self._surface.destroy_marker(self._user_marker)
            self._user_marker = None
