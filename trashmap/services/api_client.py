"""
Trash Can API Client Module.

Thin wrapper over the backend REST API. Every endpoint answers with the
envelope ``{code, data, msg}`` where ``code == 2000`` means success.
"""

import logging
import os
from dataclasses import dataclass
from typing import Any, Optional
from urllib.parse import urljoin, urlsplit

import requests

from trashmap.app.constants import (
    API_SUCCESS_CODE,
    DEFAULT_API_TIMEOUT_S,
    NEARBY_ENDPOINT,
    TRASHCANS_ENDPOINT,
)
from trashmap.core.errors import ApiError

logger = logging.getLogger(__name__)


@dataclass
class ApiResponse:
    """
    Decoded response envelope.

    Attributes:
        code: Backend status code (2000 on success).
        data: Payload, shape depends on the endpoint.
        msg: Human-readable message, used as the failure reason.
    """

    code: int
    data: Any = None
    msg: str = ""

    @property
    def ok(self) -> bool:
        return self.code == API_SUCCESS_CODE


class TrashCanApiClient:
    """
    Client for the trash can endpoints.

    Transport failures, HTTP errors without an envelope and undecodable
    bodies raise ApiError. A decoded envelope is always returned as-is,
    including failure codes, so callers decide how to surface ``msg``.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = DEFAULT_API_TIMEOUT_S,
        session: Optional[requests.Session] = None,
    ) -> None:
        """
        Initialize the client.

        Args:
            base_url: API root, e.g. ``http://localhost:8080/api``.
            timeout: Request timeout in seconds.
            session: Optional preconfigured session (used by tests).
        """
        self.base_url = base_url.rstrip("/") + "/"
        self.timeout = timeout
        self._session = session or requests.Session()
        self._session.headers.setdefault("Accept", "application/json")
        logger.info(f"TrashCanApiClient initialized for {self.base_url}")

    def _url(self, path: str) -> str:
        return urljoin(self.base_url, path.lstrip("/"))

    def _unwrap(self, response: requests.Response) -> ApiResponse:
        """
        Decodes the envelope from an HTTP response.

        Raises:
            ApiError: If the body is not an envelope or its code is not
                numeric.
        """
        try:
            body = response.json()
        except ValueError:
            body = None

        if isinstance(body, dict) and "code" in body:
            msg = str(body.get("msg") or "")
            try:
                code = int(body["code"])
            except (TypeError, ValueError):
                logger.warning(f"Envelope with non-numeric code {body['code']!r}")
                raise ApiError(msg or "Malformed response from server") from None
            return ApiResponse(code=code, data=body.get("data"), msg=msg)

        if response.status_code >= 400:
            raise ApiError(f"HTTP {response.status_code}")
        raise ApiError("Malformed response from server")

    def _request(self, method: str, path: str, **kwargs: Any) -> ApiResponse:
        url = self._url(path)
        logger.debug(f"{method} {url}")
        try:
            response = self._session.request(
                method, url, timeout=self.timeout, **kwargs
            )
        except requests.exceptions.Timeout:
            logger.error(f"{method} {url} timed out after {self.timeout}s")
            raise ApiError("Request timed out") from None
        except requests.exceptions.RequestException as e:
            logger.error(f"{method} {url} failed: {e}")
            raise ApiError("Could not reach server") from e

        result = self._unwrap(response)
        if not result.ok:
            logger.warning(f"{method} {url} returned code {result.code}: {result.msg}")
        return result

    def get_nearby(
        self, lat: float, lng: float, radius_km: float, limit: int
    ) -> ApiResponse:
        """
        Queries trash cans within a radius, nearest first.

        Args:
            lat: Origin latitude.
            lng: Origin longitude.
            radius_km: Search radius in kilometres.
            limit: Maximum number of results.

        Returns:
            ApiResponse: ``data`` is a list of trash can records.
        """
        return self._request(
            "GET",
            NEARBY_ENDPOINT,
            params={"lat": lat, "lng": lng, "radius": radius_km, "limit": limit},
        )

    def create(
        self,
        latitude: float,
        longitude: float,
        address: str,
        description: str,
        image_path: str,
    ) -> ApiResponse:
        """
        Submits a new trash can as multipart form data.

        Args:
            latitude: Latitude of the new point.
            longitude: Longitude of the new point.
            address: Address text (may be empty).
            description: Description text (may be empty).
            image_path: Path of the photo to upload.

        Returns:
            ApiResponse: ``data`` is the created record.

        Raises:
            ApiError: On transport failure or if the image cannot be read.
        """
        form = {
            "latitude": str(latitude),
            "longitude": str(longitude),
            "address": address,
            "description": description,
        }
        try:
            with open(image_path, "rb") as image:
                files = {"image": (os.path.basename(image_path), image)}
                return self._request("POST", TRASHCANS_ENDPOINT, data=form, files=files)
        except OSError as e:
            logger.error(f"Failed to read image {image_path}: {e}")
            raise ApiError(f"Could not read image: {e}") from e

    def build_image_url(self, image_path: Optional[str]) -> Optional[str]:
        """
        Resolves an image path returned by the backend to an absolute URL.

        The backend serves uploads from its host root, so relative paths are
        joined with scheme and host only, not with the API prefix.

        Args:
            image_path: Absolute URL, host-relative path, or None.

        Returns:
            Optional[str]: Absolute URL, or None for empty input.
        """
        if not image_path:
            return None
        if urlsplit(image_path).scheme:
            return image_path
        parts = urlsplit(self.base_url)
        root = f"{parts.scheme}://{parts.netloc}/"
        return urljoin(root, image_path.replace("\\", "/").lstrip("/"))

    def fetch_image(self, url: str) -> bytes:
        """
        Downloads image bytes for the full-size viewer.

        Args:
            url: Absolute image URL.

        Returns:
            bytes: Raw image data.

        Raises:
            ApiError: On transport or HTTP failure.
        """
        try:
            response = self._session.get(url, timeout=self.timeout)
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            logger.error(f"Failed to fetch image {url}: {e}")
            raise ApiError("Could not load image") from e
        return response.content

    def close(self) -> None:
        """Closes the underlying session."""
        self._session.close()
