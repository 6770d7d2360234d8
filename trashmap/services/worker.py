"""
API Worker Module.
Runs blocking backend calls off the GUI thread to keep the map responsive.
"""

import logging
import traceback

from PySide6.QtCore import QObject, Signal, Slot

from trashmap.core.errors import (
    ApiError,
    ContributionFailed,
    InvalidDraftError,
    SearchFailed,
)
from trashmap.core.poi import UserLocation
from trashmap.services.api_client import TrashCanApiClient
from trashmap.services.contribution import ContributionDraft, ContributionService
from trashmap.services.nearby_search import NearbySearchCoordinator

logger = logging.getLogger(__name__)


class ApiWorker(QObject):
    """
    Worker object that executes backend requests in a separate thread.
    Owns the API client so the session is only used from one thread.
    """

    # Signals
    search_finished = Signal(int, list)  # request_id, List[PointOfInterest]
    search_failed = Signal(int, str)  # request_id, message
    contribution_finished = Signal(object)  # created record (dict)
    contribution_failed = Signal(str)
    image_loaded = Signal(str, object)  # url, bytes
    image_failed = Signal(str, str)  # url, message

    # Status signals for UI feedback
    operation_started = Signal(str)
    operation_finished = Signal(str)

    def __init__(
        self,
        client: TrashCanApiClient,
        radius_km: float,
        limit: int,
    ) -> None:
        """
        Initializes the worker.

        Args:
            client: Backend client, used only from the worker thread.
            radius_km: Default search radius.
            limit: Default search result limit.
        """
        super().__init__()
        self.client = client
        self.search = NearbySearchCoordinator(client, radius_km=radius_km, limit=limit)
        self.contributions = ContributionService(client)

    @Slot(int, object)
    def search_nearby(self, request_id: int, location: UserLocation) -> None:
        """
        Runs a nearby search and reports the outcome by signal.

        Args:
            request_id: Caller's sequence number for this request.
            location: Search origin.
        """
        self.operation_started.emit("Searching nearby trash cans...")
        try:
            results = self.search.search(location)
        except SearchFailed as e:
            self.search_failed.emit(request_id, e.message)
            self.operation_finished.emit("Search failed.")
            return
        except Exception:
            logger.error(f"Unexpected search error: {traceback.format_exc()}")
            self.search_failed.emit(request_id, "Unexpected error")
            self.operation_finished.emit("Search failed.")
            return

        self.search_finished.emit(request_id, results)
        self.operation_finished.emit(f"Found {len(results)} trash cans.")

    @Slot(object)
    def submit_contribution(self, draft: ContributionDraft) -> None:
        """
        Uploads a contribution draft.

        Args:
            draft: Snapshot of the form state.
        """
        self.operation_started.emit("Uploading...")
        try:
            created = self.contributions.submit(draft)
        except (InvalidDraftError, ContributionFailed) as e:
            self.contribution_failed.emit(str(e))
            self.operation_finished.emit("Upload failed.")
            return
        except Exception:
            logger.error(f"Unexpected upload error: {traceback.format_exc()}")
            self.contribution_failed.emit("Unexpected error")
            self.operation_finished.emit("Upload failed.")
            return

        self.contribution_finished.emit(created)
        self.operation_finished.emit("Upload complete.")

    @Slot(str)
    def load_image(self, url: str) -> None:
        """Downloads a full-size image for the viewer."""
        try:
            data = self.client.fetch_image(url)
        except ApiError as e:
            self.image_failed.emit(url, e.message)
            return
        self.image_loaded.emit(url, data)
