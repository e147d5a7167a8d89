"""Profile business logic service.

Role selection and profile completion share one reconciliation pass:
resolve the persisted role, read the caller's row, build a payload limited
to writable columns, issue a single write, then bring the volunteer flag in
user metadata in line with the resolved role.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any
from uuid import UUID

from src.api.middleware.error_handler import (
    CollaboratorError,
    NotFoundError,
    ProfileWriteError,
    ValidationError,
)
from src.core.config import get_settings
from src.core.supabase import get_supabase_client
from src.models.profile import UserProfile
from src.schemas.auth import UserContext
from src.services.identity_service import IdentityService, IdentityUpdateError
from src.services.profile_merge import VOLUNTEER_COLUMN, build_profile_payload
from src.services.role_mapping import (
    DEFAULT_PERSISTED_ROLE,
    ShortRole,
    UnmappedRole,
    classify_role,
    to_display_role,
)

logger = logging.getLogger(__name__)

COMPLETION_COLUMN = "profile_completed"
VOLUNTEER_WARNING = "Volunteer status could not be saved and will be retried on your next update"


class ReconciliationState(str, Enum):
    """Steps of a single reconciliation pass."""

    START = "start"
    ROLE_RESOLVED = "role_resolved"
    ROW_FETCHED = "row_fetched"
    PAYLOAD_BUILT = "payload_built"
    WRITE_ISSUED = "write_issued"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass
class ReconciliationResult:
    """Outcome reported to role-selection and profile-completion callers."""

    success: bool
    role: str
    persisted_role: str
    volunteer: bool
    created: bool = False
    warnings: list[str] = field(default_factory=list)
    dropped_fields: list[str] = field(default_factory=list)
    state: ReconciliationState = ReconciliationState.SUCCEEDED


@dataclass
class ProfileView:
    """A stored profile framed for display."""

    profile: UserProfile
    role: str
    persisted_role: str
    volunteer: bool
    completed: bool


class ProfileService:
    """Service for reconciling user profile rows and role state."""

    def __init__(self) -> None:
        """Initialize profile service with Supabase client."""
        self.client = get_supabase_client()
        self.settings = get_settings()
        self.identity = IdentityService()

    @property
    def table(self) -> str:
        return self.settings.profiles_table

    async def get_profile(self, user_id: UUID) -> UserProfile | None:
        """Get a profile row by identity id.

        Args:
            user_id: The auth user ID, also the row's primary key.

        Returns:
            UserProfile | None: The profile row or None if not found.

        Raises:
            CollaboratorError: If the store cannot be read.
        """
        try:
            response = (
                self.client.table(self.table)
                .select("*")
                .eq("id", str(user_id))
                .limit(1)
                .execute()
            )
        except Exception as e:
            logger.error("Error fetching profile for user %s: %s", user_id, e)
            raise CollaboratorError("Failed to read user profile") from e

        return response.data[0] if response.data else None

    async def select_role(
        self,
        user: UserContext,
        role: str | None,
        volunteer_indicator: bool = False,
        extra: Mapping[str, Any] | None = None,
    ) -> ReconciliationResult:
        """Record the role a user picked during onboarding.

        Args:
            user: The authenticated user context.
            role: Short role chosen by the user.
            volunteer_indicator: Explicit volunteer opt-in.
            extra: Additional profile attributes sent with the role.

        Returns:
            ReconciliationResult: Resolved role state.

        Raises:
            ValidationError: If no role was given.
            CollaboratorError: If the profile row cannot be read.
            ProfileWriteError: If the profile row write is rejected.
        """
        if not role or not str(role).strip():
            raise ValidationError("Role is required")

        role = str(role).strip()
        wants_volunteer = bool(volunteer_indicator) or role == ShortRole.VOLUNTEER.value

        return await self._reconcile(
            user,
            role=role,
            submitted=dict(extra or {}),
            volunteer=wants_volunteer,
            metadata_volunteer=None,
        )

    async def complete_profile(
        self,
        user: UserContext,
        fields: Mapping[str, Any] | None,
    ) -> ReconciliationResult:
        """Save the profile form a user submits after picking a role.

        ``role`` inside ``fields`` is optional; without it the stored role is
        kept. The volunteer flag already on the identity is honoured. An
        empty mapping still creates the minimal row when none exists.

        Args:
            user: The authenticated user context.
            fields: Free-form profile attributes, optionally with ``role``.

        Returns:
            ReconciliationResult: Resolved role state.

        Raises:
            ValidationError: If no profile data was sent at all.
            CollaboratorError: If the profile row cannot be read.
            ProfileWriteError: If the profile row write is rejected.
        """
        if fields is None:
            raise ValidationError("Profile data is required")

        submitted = dict(fields)
        role = submitted.get("role") or None
        explicit_volunteer = bool(submitted.get(VOLUNTEER_COLUMN))

        already_volunteer = await self.identity.get_volunteer_flag(user.user_id)
        if not already_volunteer:
            already_volunteer = bool(user.user_metadata.get(self.settings.volunteer_metadata_key))

        requests_volunteer = explicit_volunteer or role == ShortRole.VOLUNTEER.value

        return await self._reconcile(
            user,
            role=role,
            submitted=submitted,
            volunteer=already_volunteer or requests_volunteer,
            metadata_volunteer=already_volunteer,
        )

    async def get_profile_for_display(self, user: UserContext) -> ProfileView:
        """Load the caller's profile with its display role.

        Raises:
            NotFoundError: If the user has no profile row yet.
            CollaboratorError: If the profile row cannot be read.
        """
        profile = await self.get_profile(user.user_id)
        if not profile:
            raise NotFoundError("Profile not found")

        volunteer = bool(profile.get(VOLUNTEER_COLUMN)) or await self.identity.get_volunteer_flag(
            user.user_id
        )
        persisted_role = profile.get("role") or DEFAULT_PERSISTED_ROLE

        return ProfileView(
            profile=profile,
            role=to_display_role(persisted_role, volunteer),
            persisted_role=persisted_role,
            volunteer=volunteer,
            completed=bool(profile.get(COMPLETION_COLUMN)),
        )

    async def _reconcile(
        self,
        user: UserContext,
        *,
        role: str | None,
        submitted: dict[str, Any],
        volunteer: bool,
        metadata_volunteer: bool | None,
    ) -> ReconciliationResult:
        """Run one reconciliation pass.

        ``metadata_volunteer`` is the flag already on the identity, or None when
        it has not been read yet. The flag is written whenever the resolved
        state is volunteer and the identity does not say so, which also repairs
        an earlier failed write.
        """
        state = ReconciliationState.START

        persisted_role: str | None = None
        if role:
            mapped = classify_role(role)
            if isinstance(mapped, UnmappedRole):
                logger.warning("Unmapped role %r for user %s, storing as-is", role, user.user_id)
            persisted_role = mapped.persisted
        state = self._advance(user.user_id, state, ReconciliationState.ROLE_RESOLVED)

        existing = await self.get_profile(user.user_id)
        # A mirrored column outlives a failed metadata write
        if existing and existing.get(VOLUNTEER_COLUMN):
            volunteer = True
        state = self._advance(user.user_id, state, ReconciliationState.ROW_FETCHED)

        merge = build_profile_payload(
            existing,
            submitted,
            user_id=user.user_id,
            email=user.email,
            persisted_role=persisted_role,
            now=datetime.now(timezone.utc),
            configured_fields=self.settings.profile_allowed_fields_list,
            volunteer=volunteer,
        )
        if merge.dropped:
            logger.debug(
                "Dropping fields not present on profile row for user %s: %s",
                user.user_id,
                ", ".join(merge.dropped),
            )
        resolved_role = merge.payload["role"]
        state = self._advance(user.user_id, state, ReconciliationState.PAYLOAD_BUILT)

        try:
            if merge.is_insert:
                logger.info("Creating profile for user %s with role %s", user.user_id, resolved_role)
                # Upsert on the primary key so a concurrent first write cannot duplicate the row
                (
                    self.client.table(self.table)
                    .upsert(merge.payload, on_conflict="id")
                    .execute()
                )
            else:
                logger.info("Updating profile for user %s with role %s", user.user_id, resolved_role)
                (
                    self.client.table(self.table)
                    .update(merge.payload)
                    .eq("id", str(user.user_id))
                    .execute()
                )
            state = self._advance(user.user_id, state, ReconciliationState.WRITE_ISSUED)
        except Exception as e:
            self._advance(user.user_id, state, ReconciliationState.FAILED)
            logger.error("Error writing profile for user %s: %s", user.user_id, e)
            raise ProfileWriteError(cause=str(e)) from e

        warnings: list[str] = []
        if volunteer and metadata_volunteer is None:
            metadata_volunteer = await self.identity.get_volunteer_flag(user.user_id)
        if volunteer and not metadata_volunteer:
            try:
                await self.identity.set_volunteer_flag(user.user_id, True)
            except IdentityUpdateError as e:
                logger.warning("Error updating volunteer flag for user %s: %s", user.user_id, e)
                warnings.append(VOLUNTEER_WARNING)

        state = self._advance(user.user_id, state, ReconciliationState.SUCCEEDED)
        display_role = to_display_role(resolved_role, volunteer)
        logger.info(
            "Profile reconciled for user %s: role=%s persisted=%s volunteer=%s",
            user.user_id,
            display_role,
            resolved_role,
            volunteer,
        )

        return ReconciliationResult(
            success=True,
            role=display_role,
            persisted_role=resolved_role,
            volunteer=volunteer,
            created=merge.is_insert,
            warnings=warnings,
            dropped_fields=merge.dropped,
            state=state,
        )

    @staticmethod
    def _advance(
        user_id: UUID,
        current: ReconciliationState,
        target: ReconciliationState,
    ) -> ReconciliationState:
        logger.debug("Profile reconciliation for %s: %s -> %s", user_id, current.value, target.value)
        return target
