"""
Unit tests for NearbySearchCoordinator.
"""

from unittest.mock import MagicMock

import pytest
import requests

from trashmap.core.errors import ApiError, SearchFailed
from trashmap.core.poi import UserLocation
from trashmap.services.api_client import ApiResponse, TrashCanApiClient
from trashmap.services.nearby_search import NearbySearchCoordinator

ORIGIN = UserLocation(39.9, 116.4)


@pytest.fixture
def client():
    client = MagicMock()
    client.build_image_url.side_effect = lambda path: (
        f"http://host/{path}" if path else None
    )
    return client


def record(poi_id, distance, **extra):
    data = {"id": poi_id, "latitude": 39.9, "longitude": 116.4, "distance": distance}
    data.update(extra)
    return data


@pytest.mark.unit
class TestSearch:
    def test_returns_results_in_backend_order(self, client):
        client.get_nearby.return_value = ApiResponse(
            code=2000, data=[record(3, 0.9), record(1, 0.2), record(2, 0.5)]
        )
        coordinator = NearbySearchCoordinator(client, radius_km=5.0, limit=10)

        results = coordinator.search(ORIGIN)

        assert [p.id for p in results] == [3, 1, 2]
        client.get_nearby.assert_called_once_with(39.9, 116.4, 5.0, 10)

    def test_overrides_radius_and_limit(self, client):
        client.get_nearby.return_value = ApiResponse(code=2000, data=[])
        coordinator = NearbySearchCoordinator(client)

        coordinator.search(ORIGIN, radius_km=1.5, limit=3)

        client.get_nearby.assert_called_once_with(39.9, 116.4, 1.5, 3)

    def test_resolves_relative_image_urls(self, client):
        client.get_nearby.return_value = ApiResponse(
            code=2000,
            data=[record(1, 0.1, image_url="uploads/1.jpg"), record(2, 0.2)],
        )

        results = NearbySearchCoordinator(client).search(ORIGIN)

        assert results[0].image_url == "http://host/uploads/1.jpg"
        assert results[1].image_url is None

    def test_null_data_is_empty_result(self, client):
        client.get_nearby.return_value = ApiResponse(code=2000, data=None)

        assert NearbySearchCoordinator(client).search(ORIGIN) == []

    def test_failure_code_raises_with_backend_message(self, client):
        client.get_nearby.return_value = ApiResponse(code=5000, msg="db down")

        with pytest.raises(SearchFailed) as exc_info:
            NearbySearchCoordinator(client).search(ORIGIN)

        assert exc_info.value.message == "db down"
        assert exc_info.value.code == 5000

    def test_failure_code_without_message(self, client):
        client.get_nearby.return_value = ApiResponse(code=4001)

        with pytest.raises(SearchFailed, match="Search failed"):
            NearbySearchCoordinator(client).search(ORIGIN)

    def test_transport_error_raises_search_failed(self, client):
        client.get_nearby.side_effect = ApiError("Could not reach server")

        with pytest.raises(SearchFailed, match="Could not reach server"):
            NearbySearchCoordinator(client).search(ORIGIN)

    def test_malformed_record_raises(self, client):
        client.get_nearby.return_value = ApiResponse(
            code=2000, data=[record(1, 0.1), {"id": 2}]
        )

        with pytest.raises(SearchFailed, match="Malformed"):
            NearbySearchCoordinator(client).search(ORIGIN)


@pytest.mark.unit
@pytest.mark.parametrize("code", [None, "error", "5xx"])
def test_non_numeric_envelope_code_raises_search_failed(code):
    session = MagicMock(spec=requests.Session)
    session.headers = {}
    response = MagicMock(status_code=200)
    response.json.return_value = {"code": code, "data": [], "msg": "boom"}
    session.request.return_value = response
    client = TrashCanApiClient("http://api.test/api", session=session)

    with pytest.raises(SearchFailed) as exc_info:
        NearbySearchCoordinator(client).search(ORIGIN)

    assert exc_info.value.message == "boom"
