"""
Integration tests for MapController.

The controller runs against the recording map surface, a manual scheduler and
a real ApiWorker whose HTTP client is mocked. The worker stays on the test
thread, so every signal round trip completes synchronously.
"""

import logging
from unittest.mock import MagicMock

import pytest

from trashmap.app.constants import FALLBACK_LAT, FALLBACK_LNG, TRANSIENT_MARKER_MS
from trashmap.app.map_controller import MapController
from trashmap.core.errors import ApiError
from trashmap.core.geo_bounds import GeoBounds
from trashmap.core.poi import UserLocation
from trashmap.core.protocols import CursorMode, MarkerStyle, PopupAction
from trashmap.services.api_client import ApiResponse
from trashmap.services.contribution import ContributionDraft
from trashmap.services.geolocation import GeoLocationProvider
from trashmap.services.worker import ApiWorker

pytestmark = pytest.mark.integration


def nearby(*records):
    return ApiResponse(code=2000, data=list(records))


def record(poi_id, lat, lng, **extra):
    data = {"id": poi_id, "latitude": lat, "longitude": lng}
    data.update(extra)
    return data


@pytest.fixture
def client():
    client = MagicMock()
    client.build_image_url.side_effect = lambda path: path
    client.get_nearby.return_value = nearby(
        record(1, 39.91, 116.41, address="Gate", distance=0.2),
        record(2, 39.92, 116.42, image_url="http://h/2.jpg", distance=0.6),
    )
    return client


@pytest.fixture
def url_opener():
    return MagicMock()


@pytest.fixture
def controller(qapp, map_surface, scheduler, client, url_opener):
    worker = ApiWorker(client, radius_km=5.0, limit=10)
    geolocation = GeoLocationProvider(map_surface, source_factory=lambda p: None)
    return MapController(
        map_surface,
        scheduler,
        worker,
        geolocation=geolocation,
        url_opener=url_opener,
    )


def entity_popup_open(controller, map_surface, entity_id):
    return controller.registry.get(entity_id).popup in map_surface.open_popups


class TestStartup:
    def test_fallback_location_then_search(self, controller, map_surface, qtbot):
        notices = []
        controller.notice.connect(notices.append)

        with qtbot.waitSignal(controller.results_changed, timeout=1000) as blocker:
            controller.start()

        assert controller.location.is_fallback
        assert [p.id for p in blocker.args[0]] == [1, 2]
        assert controller.registry.entry_ids() == [1, 2]
        assert len(map_surface.markers_with_style(MarkerStyle.USER)) == 1
        assert map_surface.bounds == GeoBounds(
            south=FALLBACK_LAT, west=FALLBACK_LNG, north=39.92, east=116.42
        )
        assert any("Location unavailable" in n for n in notices)

    def test_search_uses_resolved_location(self, controller, client):
        controller._on_location_resolved(UserLocation(31.2, 121.5))

        client.get_nearby.assert_called_once_with(31.2, 121.5, 5.0, 10)

    def test_relocating_keeps_single_user_marker(self, controller, map_surface):
        controller._on_location_resolved(UserLocation(1.0, 2.0))
        controller._on_location_resolved(UserLocation(3.0, 4.0))

        user_markers = map_surface.markers_with_style(MarkerStyle.USER)
        assert len(user_markers) == 1
        assert map_surface.markers[user_markers[0]]["coord"] == (4.0, 3.0)


class TestSearch:
    def test_failure_keeps_previous_markers(self, controller, client):
        controller.start()
        before = {i: controller.registry.get(i).marker for i in (1, 2)}
        notices = []
        controller.notice.connect(notices.append)

        client.get_nearby.side_effect = ApiError("Could not reach server")
        controller.search()

        assert controller.registry.entry_ids() == [1, 2]
        assert {i: controller.registry.get(i).marker for i in (1, 2)} == before
        assert notices == ["Search failed: Could not reach server"]

    def test_backend_error_code_keeps_markers(self, controller, client):
        controller.start()

        client.get_nearby.return_value = ApiResponse(code=5000, msg="db down")
        controller.search()

        assert len(controller.registry) == 2

    def test_results_replace_previous_set(self, controller, client, map_surface):
        controller.start()

        client.get_nearby.return_value = nearby(record(9, 1.0, 2.0))
        controller.search()

        assert controller.registry.entry_ids() == [9]
        assert len(map_surface.point_markers) == 1

    def test_late_response_applied_in_arrival_order(
        self, controller, make_poi, caplog
    ):
        with caplog.at_level(logging.INFO):
            controller._on_search_finished(2, [make_poi(1)])
            controller._on_search_finished(1, [make_poi(2)])

        assert controller.registry.entry_ids() == [2]
        assert "arrived after" in caplog.text

    def test_focus_from_list(self, controller, map_surface):
        controller.start()

        controller.focus(2)
        controller.focus(404)

        assert entity_popup_open(controller, map_surface, 2)
        assert len(map_surface.open_popups) == 1


class TestPopupActions:
    def test_show_image_loads_photo(self, controller, client, map_surface, qtbot):
        client.fetch_image.return_value = b"jpeg"
        controller.start()
        requested = []
        controller.image_requested.connect(requested.append)

        with qtbot.waitSignal(controller.image_loaded, timeout=1000) as blocker:
            map_surface.trigger_popup_action(
                controller.registry.get(2).marker, PopupAction.SHOW_IMAGE.value
            )

        assert requested == ["http://h/2.jpg"]
        assert blocker.args == ["http://h/2.jpg", b"jpeg"]

    def test_navigate_opens_url(self, controller, map_surface, url_opener):
        controller.start()

        map_surface.trigger_popup_action(
            controller.registry.get(1).marker, PopupAction.NAVIGATE.value
        )

        url_opener.assert_called_once()
        assert "to=116.41%2C39.91" in url_opener.call_args[0][0]


class TestContribution:
    def test_pick_fills_draft(self, controller, map_surface, scheduler, qtbot):
        controller.begin_pick()
        assert map_surface.cursor is CursorMode.PICKING

        with qtbot.waitSignal(controller.coordinate_picked, timeout=1000) as blocker:
            map_surface.click(39.95, 116.3)

        assert blocker.args == [39.95, 116.3]
        assert (controller.draft.latitude, controller.draft.longitude) == (
            39.95,
            116.3,
        )
        assert len(map_surface.transient_markers) == 1

        controller.end_pick()
        scheduler.advance(TRANSIENT_MARKER_MS)
        assert map_surface.transient_markers == []

    def test_success_resets_draft_and_refreshes(
        self, controller, client, map_surface, image_file, qtbot
    ):
        client.create.return_value = ApiResponse(code=2000, data={"id": 77})
        controller.begin_pick()
        map_surface.click(39.95, 116.3)
        controller.draft.image_path = str(image_file)

        with qtbot.waitSignal(
            controller.contribution_succeeded, timeout=1000
        ) as blocker:
            controller.submit()

        assert blocker.args == [{"id": 77}]
        assert controller.draft.has_location is False
        assert controller.draft.image_path is None
        assert controller.selection.is_armed is False
        assert client.get_nearby.call_count == 1

    def test_failure_keeps_draft(self, controller, client, image_file, qtbot):
        client.create.return_value = ApiResponse(code=4003, msg="Duplicate location")
        controller.draft.set_location(1.0, 2.0)
        controller.draft.address = "Gate"
        controller.draft.image_path = str(image_file)

        with qtbot.waitSignal(controller.contribution_failed, timeout=1000) as blocker:
            controller.submit()

        assert blocker.args == ["Duplicate location"]
        assert controller.draft.latitude == 1.0
        assert controller.draft.address == "Gate"
        client.get_nearby.assert_not_called()

    def test_submit_with_form_draft(self, controller, client, image_file):
        client.create.return_value = ApiResponse(code=2000, data={"id": 1})
        form = ContributionDraft(
            latitude=5.0, longitude=6.0, image_path=str(image_file)
        )

        controller.submit(form)

        assert client.create.call_args[1]["latitude"] == 5.0
        assert controller.draft.has_location is False

    def test_invalid_draft_reports_without_upload(self, controller, client, qtbot):
        with qtbot.waitSignal(controller.contribution_failed, timeout=1000):
            controller.submit()

        client.create.assert_not_called()


def test_shutdown_removes_every_marker(controller, map_surface, scheduler):
    controller.start()
    controller.begin_pick()
    map_surface.click(1.0, 1.0)

    controller.shutdown()

    assert map_surface.markers == {}
    assert scheduler.pending == 0
