"""Unit tests for the role vocabulary."""

import pytest

from src.services.role_mapping import (
    MappedRole,
    PersistedRole,
    ShortRole,
    UnmappedRole,
    classify_role,
    is_provider_role,
    to_display_role,
    to_persisted_role,
)


class TestToPersistedRole:
    """Tests for to_persisted_role."""

    @pytest.mark.parametrize(
        ("short_role", "expected"),
        [
            ("prov", "provider"),
            ("recip", "individual"),
            ("vol", "individual"),
            ("org", "ngo"),
        ],
    )
    def test_maps_every_short_role(self, short_role: str, expected: str) -> None:
        """Test every short role has exactly one persisted value."""
        assert to_persisted_role(short_role) == expected

    def test_every_short_role_is_covered(self) -> None:
        """Test no short role is left without a non-empty persisted value."""
        for role in ShortRole:
            assert to_persisted_role(role.value)

    def test_unknown_role_passes_through(self) -> None:
        """Test unknown values are returned unchanged rather than rejected."""
        assert to_persisted_role("driver") == "driver"

    def test_persisted_value_passes_through(self) -> None:
        """Test a value already in persisted form stays as-is."""
        assert to_persisted_role("provider") == "provider"


class TestToDisplayRole:
    """Tests for to_display_role."""

    @pytest.mark.parametrize(
        ("persisted", "expected"),
        [
            ("provider", "prov"),
            ("individual", "recip"),
            ("ngo", "org"),
        ],
    )
    def test_maps_every_persisted_role(self, persisted: str, expected: str) -> None:
        """Test every persisted role displays as a short role."""
        assert to_display_role(persisted, False) == expected

    @pytest.mark.parametrize("persisted", [role.value for role in PersistedRole] + ["unknown"])
    def test_volunteer_always_displays_as_vol(self, persisted: str) -> None:
        """Test the volunteer flag overrides the persisted role."""
        assert to_display_role(persisted, True) == "vol"

    def test_individual_without_flag_is_recipient(self) -> None:
        """Test a non-volunteer individual can only read back as a recipient."""
        assert to_display_role("individual", False) == "recip"

    def test_unknown_role_passes_through(self) -> None:
        """Test unknown persisted values display unchanged."""
        assert to_display_role("driver", False) == "driver"


class TestClassifyRole:
    """Tests for classify_role."""

    def test_short_role_is_mapped(self) -> None:
        """Test a known short role classifies as mapped."""
        result = classify_role("org")

        assert result == MappedRole(short="org", persisted="ngo")
        assert result.is_mapped is True

    def test_persisted_role_is_mapped(self) -> None:
        """Test a stored persisted role classifies as mapped."""
        result = classify_role("provider")

        assert isinstance(result, MappedRole)
        assert result.persisted == "provider"
        assert result.short == "prov"

    def test_unknown_role_is_unmapped(self) -> None:
        """Test unknown values are tagged but keep their raw value."""
        result = classify_role("driver")

        assert result == UnmappedRole(raw="driver")
        assert result.is_mapped is False
        assert result.persisted == "driver"


class TestIsProviderRole:
    """Tests for is_provider_role."""

    @pytest.mark.parametrize("role", ["provider", "prov"])
    def test_accepts_both_provider_spellings(self, role: str) -> None:
        """Test persisted and legacy short provider values are accepted."""
        assert is_provider_role(role) is True

    @pytest.mark.parametrize("role", ["individual", "ngo", "recip", None, ""])
    def test_rejects_other_roles(self, role: str | None) -> None:
        """Test non-provider roles are rejected."""
        assert is_provider_role(role) is False
