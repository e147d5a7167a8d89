"""Profile Pydantic schemas for API request/response models."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class RoleSelectionRequest(BaseModel):
    """Role picked during onboarding.

    Unknown keys are kept and offered to the profile row as extra attributes.
    """

    model_config = ConfigDict(extra="allow")

    role: str | None = Field(default=None, description="Short role: prov, recip, vol or org")
    is_volunteer: bool = Field(default=False, description="Explicit volunteer opt-in")

    @property
    def extra_fields(self) -> dict[str, Any]:
        """Attributes sent alongside the role."""
        return dict(self.model_extra or {})


class ProfileCompletionRequest(BaseModel):
    """Free-form profile attributes from the completion form."""

    model_config = ConfigDict(extra="allow")

    role: str | None = Field(default=None, description="Optional short role")

    def to_fields(self) -> dict[str, Any]:
        """All submitted attributes, role included only when sent."""
        return self.model_dump(exclude_unset=True)


class ProfileResultResponse(BaseModel):
    """Outcome of a role selection or profile completion."""

    model_config = ConfigDict(from_attributes=True)

    success: bool = Field(description="Whether the profile row was written")
    role: str = Field(description="Short role to display")
    persisted_role: str = Field(description="Role value stored on the profile row")
    volunteer: bool = Field(description="Volunteer flag")
    warnings: list[str] = Field(default_factory=list, description="Non-fatal problems, e.g. volunteer flag not saved")


class ProfileDisplayResponse(BaseModel):
    """The caller's profile with its display role."""

    model_config = ConfigDict(from_attributes=True)

    role: str = Field(description="Short role to display")
    persisted_role: str = Field(description="Role value stored on the profile row")
    volunteer: bool = Field(description="Volunteer flag")
    completed: bool = Field(description="Client-declared completion flag")
    profile: dict[str, Any] = Field(description="Stored profile attributes")
