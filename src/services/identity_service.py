"""Identity metadata access through the Supabase auth admin API."""

import logging
from typing import Any
from uuid import UUID

from src.core.config import get_settings
from src.core.supabase import get_supabase_client

logger = logging.getLogger(__name__)


class IdentityUpdateError(Exception):
    """Writing identity metadata failed."""


class IdentityService:
    """Reads and writes the volunteer flag kept in auth user metadata."""

    def __init__(self) -> None:
        """Initialize identity service with Supabase client."""
        self.client = get_supabase_client()
        self.settings = get_settings()

    async def get_user_metadata(self, user_id: UUID) -> dict[str, Any]:
        """Fetch the identity's current user metadata.

        Args:
            user_id: The auth user ID.

        Returns:
            dict: Metadata, empty when the identity cannot be read.
        """
        try:
            response = self.client.auth.admin.get_user_by_id(str(user_id))
        except Exception as e:
            logger.warning("Could not read metadata for user %s: %s", user_id, e)
            return {}

        user = getattr(response, "user", None)
        if user is None:
            return {}
        return dict(user.user_metadata or {})

    async def get_volunteer_flag(self, user_id: UUID) -> bool:
        """Read the volunteer flag. Unreadable metadata counts as not a volunteer."""
        metadata = await self.get_user_metadata(user_id)
        return bool(metadata.get(self.settings.volunteer_metadata_key))

    async def set_volunteer_flag(self, user_id: UUID, value: bool = True) -> None:
        """Write the volunteer flag into user metadata.

        Args:
            user_id: The auth user ID.
            value: Flag value to store.

        Raises:
            IdentityUpdateError: If the auth service rejects the update.
        """
        try:
            self.client.auth.admin.update_user_by_id(
                str(user_id),
                {"user_metadata": {self.settings.volunteer_metadata_key: value}},
            )
        except Exception as e:
            raise IdentityUpdateError(str(e)) from e

        logger.info("Volunteer flag set to %s for user %s", value, user_id)
