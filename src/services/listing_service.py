"""Food listing service for provider listing creation and browsing."""

import logging
from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any
from uuid import UUID

from supabase import Client

from src.api.middleware.error_handler import (
    AuthorizationError,
    CollaboratorError,
    ValidationError,
)
from src.core.config import get_settings
from src.core.supabase import get_supabase_client
from src.models.listing import Listing
from src.services.role_mapping import is_provider_role

logger = logging.getLogger(__name__)

REQUIRED_LISTING_FIELDS: tuple[str, ...] = (
    "title",
    "description",
    "food_type",
    "quantity",
    "expiration_date",
    "location",
)

DEFAULT_LISTING_STATUS = "available"


class ListingService:
    """Service for food listing operations."""

    def __init__(self, supabase_client: Client | None = None) -> None:
        """Initialize listing service.

        Args:
            supabase_client: Optional Supabase client for testing.
        """
        self._supabase_client = supabase_client
        self.settings = get_settings()

    @property
    def supabase(self) -> Client:
        """Get Supabase client."""
        if self._supabase_client is None:
            self._supabase_client = get_supabase_client()
        return self._supabase_client

    async def get_provider_role(self, user_id: UUID) -> str | None:
        """Look up the persisted role used to gate listing creation.

        Raises:
            CollaboratorError: If the profile store cannot be read.
        """
        try:
            result = (
                self.supabase.table(self.settings.profiles_table)
                .select("role")
                .eq("id", str(user_id))
                .limit(1)
                .execute()
            )
        except Exception as e:
            logger.error("Error fetching role for user %s: %s", user_id, e)
            raise CollaboratorError("Failed to verify user role") from e

        return result.data[0].get("role") if result.data else None

    async def create_listing(self, user_id: UUID, data: Mapping[str, Any]) -> Listing:
        """Create a listing on behalf of a provider.

        Args:
            user_id: The provider's auth user ID.
            data: Listing attributes from the client.

        Returns:
            Listing: The created listing row.

        Raises:
            AuthorizationError: If the user is not a provider.
            ValidationError: If a required field is missing.
            CollaboratorError: If the store rejects the insert.
        """
        role = await self.get_provider_role(user_id)
        if not is_provider_role(role):
            logger.warning("User %s with role %r tried to create a listing", user_id, role)
            raise AuthorizationError("Only food providers can create listings")

        for field_name in REQUIRED_LISTING_FIELDS:
            if not data.get(field_name):
                raise ValidationError(f"{field_name} is required")

        now = datetime.now(timezone.utc).isoformat()
        listing = {
            **data,
            "provider_id": str(user_id),
            "status": data.get("status") or DEFAULT_LISTING_STATUS,
            "created_at": now,
            "updated_at": now,
        }

        try:
            result = (
                self.supabase.table(self.settings.listings_table)
                .insert(listing)
                .execute()
            )
        except Exception as e:
            logger.error("Failed to create listing for user %s: %s", user_id, e)
            raise CollaboratorError(f"Failed to create listing: {e}") from e

        if not result.data:
            raise CollaboratorError("Failed to create listing")

        created = result.data[0]
        logger.info("Created listing %s for provider %s", created.get("id"), user_id)
        return created

    async def browse_listings(
        self,
        status: str | None = DEFAULT_LISTING_STATUS,
        limit: int = 50,
    ) -> list[Listing]:
        """List listings, newest first.

        Args:
            status: Only return listings in this status. None returns all.
            limit: Maximum number of listings.

        Returns:
            list[Listing]: Listing rows.
        """
        try:
            query = self.supabase.table(self.settings.listings_table).select("*")
            if status:
                query = query.eq("status", status)
            result = query.order("created_at", desc=True).limit(limit).execute()
        except Exception as e:
            logger.error("Failed to browse listings: %s", e)
            raise CollaboratorError("Failed to load listings") from e

        return result.data or []
