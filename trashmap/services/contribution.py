"""
Contribution Service Module.

Validates and submits new trash cans. A failed submission leaves the draft
untouched so the user can retry without re-entering anything.
"""

import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, Optional

from PIL import Image, UnidentifiedImageError

from trashmap.app.constants import MAX_IMAGE_BYTES
from trashmap.core.errors import ApiError, ContributionFailed, InvalidDraftError
from trashmap.services.api_client import TrashCanApiClient

logger = logging.getLogger(__name__)


@dataclass
class ContributionDraft:
    """
    Form state for a new trash can.

    Attributes:
        latitude: Picked or typed latitude.
        longitude: Picked or typed longitude.
        address: Optional address text.
        description: Optional description text.
        image_path: Path to the photo on disk.
    """

    latitude: Optional[float] = None
    longitude: Optional[float] = None
    address: str = ""
    description: str = ""
    image_path: Optional[str] = None

    @property
    def has_location(self) -> bool:
        return self.latitude is not None and self.longitude is not None

    def set_location(self, lat: float, lng: float) -> None:
        self.latitude = lat
        self.longitude = lng

    def reset(self) -> None:
        """Clears every field."""
        self.latitude = None
        self.longitude = None
        self.address = ""
        self.description = ""
        self.image_path = None

    def validate(self) -> None:
        """
        Checks that the draft can be submitted.

        Raises:
            InvalidDraftError: If a coordinate or the image is missing,
                a coordinate is out of range, or the image is unusable.
        """
        if not self.has_location:
            raise InvalidDraftError("Please pick or enter a location")
        if not -90.0 <= self.latitude <= 90.0:
            raise InvalidDraftError(f"Latitude out of range: {self.latitude}")
        if not -180.0 <= self.longitude <= 180.0:
            raise InvalidDraftError(f"Longitude out of range: {self.longitude}")
        if not self.image_path:
            raise InvalidDraftError("Please choose an image")
        validate_image(self.image_path)


def validate_image(path: str) -> None:
    """
    Checks that a file is a readable image within the upload size limit.

    Args:
        path: Path to the image file.

    Raises:
        InvalidDraftError: If the file is missing, too large, or not an image.
    """
    try:
        size = os.path.getsize(path)
    except OSError:
        raise InvalidDraftError(f"Image not found: {path}") from None

    if size > MAX_IMAGE_BYTES:
        raise InvalidDraftError(
            f"Image is larger than {MAX_IMAGE_BYTES // (1024 * 1024)} MB"
        )

    try:
        with Image.open(path) as img:
            img.verify()
    except (UnidentifiedImageError, OSError, SyntaxError) as e:
        logger.warning(f"Rejected image {path}: {e}")
        raise InvalidDraftError("Selected file is not a valid image") from e


class ContributionService:
    """Submits drafts to the backend."""

    def __init__(self, client: TrashCanApiClient) -> None:
        self._client = client

    def submit(self, draft: ContributionDraft) -> Dict[str, Any]:
        """
        Validates and uploads a draft.

        The draft is never modified; resetting it after success is up to the
        caller.

        Args:
            draft: The form state to submit.

        Returns:
            Dict[str, Any]: The created record as returned by the backend.

        Raises:
            InvalidDraftError: If validation fails (nothing is sent).
            ContributionFailed: If the backend rejects or cannot be reached.
        """
        draft.validate()

        try:
            response = self._client.create(
                latitude=draft.latitude,
                longitude=draft.longitude,
                address=draft.address.strip(),
                description=draft.description.strip(),
                image_path=draft.image_path,
            )
        except ApiError as e:
            raise ContributionFailed(e.message) from e

        if not response.ok:
            raise ContributionFailed(
                response.msg or "Upload failed", code=response.code
            )

        created = response.data or {}
        logger.info(f"Created trash can {created.get('id')}")
        return created
