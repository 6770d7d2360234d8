"""
Unit tests for contribution drafts and submission.
"""

from unittest.mock import MagicMock, patch

import pytest

from trashmap.core.errors import ApiError, ContributionFailed, InvalidDraftError
from trashmap.services.api_client import ApiResponse
from trashmap.services.contribution import (
    ContributionDraft,
    ContributionService,
    validate_image,
)


@pytest.fixture
def draft(image_file):
    return ContributionDraft(
        latitude=39.9,
        longitude=116.4,
        address="  East gate ",
        description=" Next to the bench ",
        image_path=str(image_file),
    )


@pytest.mark.unit
class TestDraft:
    def test_empty_draft_has_no_location(self):
        assert ContributionDraft().has_location is False

    def test_set_location(self):
        draft = ContributionDraft()
        draft.set_location(1.5, 2.5)

        assert draft.has_location
        assert (draft.latitude, draft.longitude) == (1.5, 2.5)

    def test_reset_clears_everything(self, draft):
        draft.reset()

        assert draft == ContributionDraft()

    def test_valid_draft_passes(self, draft):
        draft.validate()

    def test_missing_location(self, draft):
        draft.longitude = None

        with pytest.raises(InvalidDraftError, match="location"):
            draft.validate()

    @pytest.mark.parametrize("lat, lng", [(91.0, 0.0), (-90.5, 0.0), (0.0, 181.0)])
    def test_out_of_range(self, draft, lat, lng):
        draft.set_location(lat, lng)

        with pytest.raises(InvalidDraftError, match="out of range"):
            draft.validate()

    def test_missing_image(self, draft):
        draft.image_path = None

        with pytest.raises(InvalidDraftError, match="image"):
            draft.validate()

    def test_validation_error_is_value_error(self):
        with pytest.raises(ValueError):
            ContributionDraft().validate()


@pytest.mark.unit
class TestValidateImage:
    def test_accepts_png(self, image_file):
        validate_image(str(image_file))

    def test_missing_file(self, tmp_path):
        with pytest.raises(InvalidDraftError, match="not found"):
            validate_image(str(tmp_path / "nope.jpg"))

    def test_not_an_image(self, tmp_path):
        path = tmp_path / "notes.jpg"
        path.write_text("definitely not a jpeg")

        with pytest.raises(InvalidDraftError, match="not a valid image"):
            validate_image(str(path))

    def test_too_large(self, image_file):
        with patch("trashmap.services.contribution.MAX_IMAGE_BYTES", 10):
            with pytest.raises(InvalidDraftError, match="larger than"):
                validate_image(str(image_file))


@pytest.mark.unit
class TestSubmit:
    def test_success_returns_record_and_strips_text(self, draft):
        client = MagicMock()
        client.create.return_value = ApiResponse(code=2000, data={"id": 12})

        created = ContributionService(client).submit(draft)

        assert created == {"id": 12}
        client.create.assert_called_once_with(
            latitude=39.9,
            longitude=116.4,
            address="East gate",
            description="Next to the bench",
            image_path=draft.image_path,
        )

    def test_draft_untouched_on_success(self, draft):
        client = MagicMock()
        client.create.return_value = ApiResponse(code=2000, data={"id": 12})
        before = ContributionDraft(**vars(draft))

        ContributionService(client).submit(draft)

        assert draft == before

    def test_invalid_draft_sends_nothing(self):
        client = MagicMock()

        with pytest.raises(InvalidDraftError):
            ContributionService(client).submit(ContributionDraft())

        client.create.assert_not_called()

    def test_backend_rejection_keeps_draft(self, draft):
        client = MagicMock()
        client.create.return_value = ApiResponse(code=4003, msg="Duplicate location")
        before = ContributionDraft(**vars(draft))

        with pytest.raises(ContributionFailed) as exc_info:
            ContributionService(client).submit(draft)

        assert exc_info.value.message == "Duplicate location"
        assert exc_info.value.code == 4003
        assert draft == before

    def test_transport_error(self, draft):
        client = MagicMock()
        client.create.side_effect = ApiError("Request timed out")

        with pytest.raises(ContributionFailed, match="timed out"):
            ContributionService(client).submit(draft)
