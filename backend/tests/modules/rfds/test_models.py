"""Tests for RFD models and status handling."""

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from modules.rfds.exceptions import InvalidRfdStatusError
from modules.rfds.models import (
    MAX_TAG_LENGTH,
    MAX_TAGS,
    CreateRfdRequest,
    RfdRecord,
    RfdStatus,
    StatusHistoryEntry,
    normalize_tags,
    stored_values,
)


def rfd_row(**overrides) -> dict:
    now = datetime.now(timezone.utc)
    row = {
        "id": "rfd-1",
        "number": 1,
        "title": "Use Postgres",
        "status": "draft",
        "author_id": "user-1",
        "tags": ["storage"],
        "created_at": now,
        "updated_at": now,
    }
    row.update(overrides)
    return row


class TestRfdStatus:
    def test_parse_canonical(self):
        assert RfdStatus.parse("open_for_review") is RfdStatus.OPEN_FOR_REVIEW

    @pytest.mark.parametrize("value", ["review", "approved", "archived", "Draft", "", "bogus"])
    def test_parse_rejects_non_canonical(self, value):
        with pytest.raises(InvalidRfdStatusError) as exc_info:
            RfdStatus.parse(value)
        assert exc_info.value.message == f"Invalid status: {value}"

    @pytest.mark.parametrize("stored,expected", [
        ("review", RfdStatus.OPEN_FOR_REVIEW),
        ("approved", RfdStatus.ACCEPTED),
        ("archived", RfdStatus.RETRACTED),
        ("enforced", RfdStatus.ENFORCED),
    ])
    def test_from_stored_maps_legacy(self, stored, expected):
        assert RfdStatus.from_stored(stored) is expected

    def test_from_stored_unknown(self):
        with pytest.raises(ValueError):
            RfdStatus.from_stored("bogus")

    def test_labels(self):
        assert RfdStatus.OPEN_FOR_REVIEW.label == "Open for Review"
        assert all(status.label for status in RfdStatus)

    def test_stored_values_include_legacy(self):
        assert stored_values(RfdStatus.OPEN_FOR_REVIEW) == ["open_for_review", "review"]
        assert stored_values(RfdStatus.DRAFT) == ["draft"]


class TestNormalizeTags:
    def test_trims_and_dedupes(self):
        assert normalize_tags([" api ", "api", "", "  ", "storage"]) == ["api", "storage"]

    def test_tag_too_long(self):
        with pytest.raises(ValueError):
            normalize_tags(["x" * (MAX_TAG_LENGTH + 1)])

    def test_too_many_tags(self):
        with pytest.raises(ValueError):
            normalize_tags([f"tag-{i}" for i in range(MAX_TAGS + 1)])

    def test_duplicates_do_not_count_toward_limit(self):
        tags = normalize_tags(["same"] * (MAX_TAGS + 5))
        assert tags == ["same"]


class TestRfdRecord:
    def test_legacy_status_normalized(self):
        rfd = RfdRecord(**rfd_row(status="approved"))
        assert rfd.status is RfdStatus.ACCEPTED

    def test_null_tags_become_empty(self):
        assert RfdRecord(**rfd_row(tags=None)).tags == []

    @pytest.mark.parametrize("tags", ["storage", [1, 2], {"a": "b"}])
    def test_malformed_tags_rejected(self, tags):
        with pytest.raises(ValidationError):
            RfdRecord(**rfd_row(tags=tags))

    def test_number_must_be_positive(self):
        with pytest.raises(ValidationError):
            RfdRecord(**rfd_row(number=0))


class TestStatusHistoryEntry:
    def test_initial_entry_has_no_from_status(self):
        entry = StatusHistoryEntry(
            id="h-1",
            rfd_id="rfd-1",
            to_status="review",
            changed_by="user-1",
            created_at=datetime.now(timezone.utc),
        )
        assert entry.from_status is None
        assert entry.to_status is RfdStatus.OPEN_FOR_REVIEW


class TestCreateRfdRequest:
    def test_strips_title_and_normalizes_tags(self):
        request = CreateRfdRequest(title="  Use Postgres ", template_id="t-1", tags=["a", " a "])
        assert request.title == "Use Postgres"
        assert request.tags == ["a"]

    def test_blank_title_rejected(self):
        with pytest.raises(ValidationError):
            CreateRfdRequest(title="   ", template_id="t-1")

    def test_template_required(self):
        with pytest.raises(ValidationError):
            CreateRfdRequest(title="Use Postgres", template_id="")
