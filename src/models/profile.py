"""Profile model type definitions for database operations."""

from typing import TypedDict


class UserProfile(TypedDict, total=False):
    """user_profiles table row representation.

    Only the identity columns are guaranteed; the remaining columns vary
    by deployment and are written only when present on the stored row.
    """

    id: str
    email: str | None
    role: str
    created_at: str
    updated_at: str
    full_name: str | None
    phone: str | None
    address: str | None
    profile_completed: bool
    is_volunteer: bool
