"""Unit tests for request and record validation at the boundary.

Uses AAA pattern (Arrange-Act-Assert) for clarity.
"""

from datetime import datetime, timezone
from typing import Any

import pytest
from pydantic import ValidationError

from dataguard.context import Predicate, Record, parse_request
from dataguard.exceptions import RequestValidationError


def payload(**overrides: Any) -> dict[str, Any]:
    data: dict[str, Any] = {
        "category": "delivery",
        "requester_id": "agent-1",
        "requested_data": {"max_age": 30, "max_emails": 10},
    }
    data.update(overrides)
    return data


class TestParseRequest:
    """Tests for parse_request."""

    def test_valid_request_with_defaults(self) -> None:
        # Act
        request = parse_request(payload())

        # Assert
        assert request.category == "delivery"
        assert request.requester_type == "ai-agent"
        assert request.requested_data.include_bodies is False
        assert request.requested_data.include_personal_info is False
        assert request.timestamp is None

    def test_unknown_category_is_rejected(self) -> None:
        # Act
        with pytest.raises(RequestValidationError) as exc_info:
            parse_request(payload(category="travel"))

        # Assert
        assert exc_info.value.errors[0]["loc"] == ["category"]
        assert "Invalid negotiation request" in exc_info.value.message

    @pytest.mark.parametrize("field", ["max_age", "max_emails"])
    def test_negative_values_are_rejected(self, field: str) -> None:
        # Arrange
        requested = {"max_age": 30, "max_emails": 10, field: -1}

        # Act / Assert
        with pytest.raises(RequestValidationError) as exc_info:
            parse_request(payload(requested_data=requested))
        assert exc_info.value.errors[0]["loc"] == ["requested_data", field]

    def test_missing_requested_data(self) -> None:
        # Arrange
        data = payload()
        del data["requested_data"]

        # Act / Assert
        with pytest.raises(RequestValidationError):
            parse_request(data)

    def test_naive_request_timestamp_becomes_utc(self) -> None:
        # Act
        request = parse_request(payload(timestamp="2026-03-01T11:55:00"))

        # Assert
        assert request.timestamp == datetime(2026, 3, 1, 11, 55, tzinfo=timezone.utc)

    def test_to_predicate_uses_negotiated_age(self) -> None:
        # Arrange
        request = parse_request(payload())

        # Act
        predicate = request.to_predicate(max_age=7)

        # Assert
        assert predicate.category == "delivery"
        assert predicate.max_age == 7
        assert request.to_predicate().max_age == 30


class TestPredicate:
    """Tests for predicate validation."""

    def test_empty_keyword_override_is_rejected(self) -> None:
        with pytest.raises(ValidationError, match="cannot be an empty list"):
            Predicate(category="delivery", max_age=30, keywords=())

    def test_blank_keyword_is_rejected(self) -> None:
        with pytest.raises(ValidationError, match="whitespace-only"):
            Predicate(category="delivery", max_age=30, keywords=("parcel", "  "))

    def test_negative_min_count_is_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Predicate(category="delivery", max_age=30, min_count=-1)


class TestRecord:
    """Tests for record timestamps."""

    def test_naive_timestamp_becomes_utc(self) -> None:
        # Act
        record = Record(id="1", sender="a", subject="b", timestamp=datetime(2026, 3, 1, 9, 30))

        # Assert
        assert record.timestamp.tzinfo == timezone.utc
        assert record.body == ""
        assert record.category is None
