"""Listing Pydantic schemas for API request/response models."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ListingCreate(BaseModel):
    """Listing attributes from the create form.

    Required fields are checked by the service so a missing one yields a
    400 naming the field.
    """

    model_config = ConfigDict(extra="allow")

    title: str | None = Field(default=None, max_length=255, description="Listing title")
    description: str | None = Field(default=None, description="What is on offer")
    food_type: str | None = Field(default=None, description="Food category")
    quantity: Any = Field(default=None, description="Amount available")
    expiration_date: str | None = Field(default=None, description="Best-by date")
    location: str | None = Field(default=None, description="Pickup location")
    status: str | None = Field(default=None, description="Listing status, defaults to available")


class ListingCreateResponse(BaseModel):
    """Response after creating a listing."""

    success: bool = Field(default=True, description="Creation status")
    id: Any = Field(description="New listing identifier")
    message: str = Field(default="Listing created successfully", description="Status message")


class ListingListResponse(BaseModel):
    """Browse response."""

    items: list[dict[str, Any]] = Field(default_factory=list, description="Listing rows")
    count: int = Field(description="Number of listings returned")
