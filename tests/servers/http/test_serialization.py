"""Unit tests for value formatting and body serialization."""

import json
from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from uuid import UUID

import pytest
from pydantic import BaseModel, Field

from api_to_mcp.servers.http.serialization import format_value, serialize_body


class Color(Enum):
    RED = "red"


class Item(BaseModel):
    item_name: str = Field(alias="itemName")
    price: Decimal


class TestFormatValue:
    """Test canonical formatting of route and query values."""

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "value,expected",
        [
            (True, "true"),
            (False, "false"),
            (42, "42"),
            (1.5, "1.5"),
            ("text", "text"),
            (Color.RED, "red"),
            (date(2024, 3, 1), "2024-03-01"),
            (datetime(2024, 3, 1, 12, 30, tzinfo=timezone.utc), "2024-03-01T12:30:00+00:00"),
            (UUID("12345678-1234-5678-1234-567812345678"), "12345678-1234-5678-1234-567812345678"),
        ],
    )
    def test_format(self, value, expected):
        """Test each supported value kind."""
        # Act & Assert
        assert format_value(value) == expected


class TestSerializeBody:
    """Test JSON body serialization."""

    @pytest.mark.unit
    def test_none_means_no_body(self):
        """Test a missing body serializes to None."""
        # Act & Assert
        assert serialize_body(None) is None

    @pytest.mark.unit
    def test_model_uses_aliases(self):
        """Test pydantic models are dumped by alias."""
        # Act
        result = serialize_body(Item(itemName="Gizmo", price=Decimal("9.99")))

        # Assert
        assert json.loads(result) == {"itemName": "Gizmo", "price": "9.99"}

    @pytest.mark.unit
    def test_nested_values(self):
        """Test dictionaries holding models and special types are serialized."""
        # Arrange
        body = {
            "item": Item(itemName="Gizmo", price=Decimal("1")),
            "id": UUID("12345678-1234-5678-1234-567812345678"),
            "color": Color.RED,
            "tags": {"a"},
        }

        # Act
        result = json.loads(serialize_body(body))

        # Assert
        assert result == {
            "item": {"itemName": "Gizmo", "price": "1"},
            "id": "12345678-1234-5678-1234-567812345678",
            "color": "red",
            "tags": ["a"],
        }

    @pytest.mark.unit
    def test_unsupported_value(self):
        """Test unsupported objects raise TypeError."""
        # Act & Assert
        with pytest.raises(TypeError):
            serialize_body({"value": object()})
