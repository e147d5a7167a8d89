"""Unit tests for the profile payload builder."""

from datetime import datetime, timezone
from uuid import UUID

from src.services.profile_merge import (
    MINIMAL_PROFILE_FIELDS,
    build_profile_payload,
    resolve_allowed_fields,
)

USER_ID = UUID("550e8400-e29b-41d4-a716-446655440000")
NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)

EXISTING_ROW = {
    "id": str(USER_ID),
    "email": "donor@example.com",
    "role": "provider",
    "full_name": "Old Name",
    "phone": None,
    "created_at": "2024-01-01T00:00:00+00:00",
    "updated_at": "2024-01-01T00:00:00+00:00",
}


def build(existing, submitted, **kwargs):
    params = {
        "user_id": USER_ID,
        "email": "donor@example.com",
        "persisted_role": "individual",
        "now": NOW,
    }
    params.update(kwargs)
    return build_profile_payload(existing, submitted, **params)


class TestResolveAllowedFields:
    """Tests for resolve_allowed_fields."""

    def test_uses_existing_row_keys(self) -> None:
        """Test the stored row's keys become the allow-list."""
        assert resolve_allowed_fields(EXISTING_ROW) == frozenset(EXISTING_ROW)

    def test_falls_back_to_minimal_fields(self) -> None:
        """Test the minimal identity columns are used without a row."""
        assert resolve_allowed_fields(None) == frozenset(MINIMAL_PROFILE_FIELDS)

    def test_configured_fields_take_precedence(self) -> None:
        """Test an explicit allow-list replaces discovery."""
        allowed = resolve_allowed_fields(EXISTING_ROW, ["business_name"])

        assert "business_name" in allowed
        assert "full_name" not in allowed
        assert set(MINIMAL_PROFILE_FIELDS) <= allowed


class TestBuildPayloadForExistingRow:
    """Tests for payloads that update a stored row."""

    def test_keeps_only_known_columns(self) -> None:
        """Test submitted keys outside the row's columns are dropped."""
        result = build(EXISTING_ROW, {"full_name": "New Name", "business_name": "Bakery"})

        assert result.payload["full_name"] == "New Name"
        assert "business_name" not in result.payload
        assert result.dropped == ["business_name"]
        assert result.is_insert is False

    def test_payload_keys_stay_within_row_columns(self) -> None:
        """Test the written keys never leave the row's key set plus role and updated_at."""
        submitted = {"full_name": "A", "zip_code": "12345", "bio": "hi", "phone": "555"}
        result = build(EXISTING_ROW, submitted)

        assert set(result.payload) <= set(EXISTING_ROW) | {"role", "updated_at"}

    def test_role_is_always_authoritative(self) -> None:
        """Test a caller-submitted role never reaches the payload."""
        result = build(EXISTING_ROW, {"role": "admin"}, persisted_role="ngo")

        assert result.payload["role"] == "ngo"
        assert "role" not in result.dropped

    def test_falls_back_to_stored_role(self) -> None:
        """Test the stored role is kept when none was resolved."""
        result = build(EXISTING_ROW, {"full_name": "A"}, persisted_role=None)

        assert result.payload["role"] == "provider"

    def test_sets_updated_at(self) -> None:
        """Test updated_at is always the write time."""
        result = build(EXISTING_ROW, {"updated_at": "1999-01-01T00:00:00Z"})

        assert result.payload["updated_at"] == NOW.isoformat()

    def test_server_owned_columns_are_not_copied(self) -> None:
        """Test id and created_at cannot be overwritten by the caller."""
        result = build(EXISTING_ROW, {"id": "someone-else", "created_at": "1999-01-01"})

        assert "id" not in result.payload
        assert "created_at" not in result.payload
        assert result.dropped == ["created_at", "id"]

    def test_explicit_null_is_submitted(self) -> None:
        """Test a key sent with a null value is still written."""
        result = build(EXISTING_ROW, {"full_name": None})

        assert "full_name" in result.payload
        assert result.payload["full_name"] is None

    def test_volunteer_mirrored_when_column_exists(self) -> None:
        """Test the volunteer flag lands on the row when it has the column."""
        row = {**EXISTING_ROW, "is_volunteer": False}
        result = build(row, {}, volunteer=True)

        assert result.payload["is_volunteer"] is True

    def test_volunteer_not_written_without_column(self) -> None:
        """Test the volunteer flag is not invented as a new column."""
        result = build(EXISTING_ROW, {}, volunteer=True)

        assert "is_volunteer" not in result.payload


class TestBuildPayloadForNewRow:
    """Tests for payloads that create the row."""

    def test_uses_minimal_field_set(self) -> None:
        """Test only identity columns are written on first creation."""
        result = build(None, {"full_name": "Ada", "business_name": "Bakery"})

        assert set(result.payload) == set(MINIMAL_PROFILE_FIELDS)
        assert result.payload["id"] == str(USER_ID)
        assert result.payload["email"] == "donor@example.com"
        assert result.payload["role"] == "individual"
        assert result.payload["created_at"] == result.payload["updated_at"] == NOW.isoformat()
        assert result.dropped == ["business_name", "full_name"]
        assert result.is_insert is True

    def test_defaults_role_to_individual(self) -> None:
        """Test individual is used when no role was resolved."""
        result = build(None, {}, persisted_role=None)

        assert result.payload["role"] == "individual"

    def test_configured_fields_accepted_on_creation(self) -> None:
        """Test an explicit allow-list admits caller fields before any row exists."""
        result = build(
            None,
            {"full_name": "Ada", "business_name": "Bakery"},
            configured_fields=["full_name"],
        )

        assert result.payload["full_name"] == "Ada"
        assert result.dropped == ["business_name"]
