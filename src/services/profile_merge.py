"""Schema-tolerant payload builder for profile row writes.

The writable columns are taken from the caller's own stored row, so a
column that exists in the table but was never seen on the row is dropped
silently. Without a stored row only the minimal identity columns are
written. An explicit allow-list from settings replaces both.
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any
from uuid import UUID

from src.services.role_mapping import DEFAULT_PERSISTED_ROLE

MINIMAL_PROFILE_FIELDS: tuple[str, ...] = ("id", "email", "role", "created_at", "updated_at")

VOLUNTEER_COLUMN = "is_volunteer"

# Owned by the server; never copied from caller input.
SERVER_OWNED_FIELDS = frozenset({"id", "role", "created_at", "updated_at"})


@dataclass
class MergeResult:
    """Payload ready for the store, plus the caller keys that were discarded."""

    payload: dict[str, Any]
    dropped: list[str] = field(default_factory=list)
    is_insert: bool = False


def resolve_allowed_fields(
    existing_row: Mapping[str, Any] | None,
    configured_fields: Iterable[str] = (),
) -> frozenset[str]:
    """Work out which columns a write may touch.

    Args:
        existing_row: The caller's stored profile row, if any.
        configured_fields: Explicit allow-list from settings.

    Returns:
        frozenset[str]: Writable column names.
    """
    configured = frozenset(configured_fields)
    if configured:
        return configured | frozenset(MINIMAL_PROFILE_FIELDS)
    if existing_row:
        return frozenset(existing_row.keys())
    return frozenset(MINIMAL_PROFILE_FIELDS)


def build_profile_payload(
    existing_row: Mapping[str, Any] | None,
    submitted: Mapping[str, Any],
    *,
    user_id: UUID,
    email: str | None,
    persisted_role: str | None,
    now: datetime,
    configured_fields: Iterable[str] = (),
    volunteer: bool | None = None,
) -> MergeResult:
    """Merge caller input with the authoritative fields.

    Args:
        existing_row: The caller's stored profile row, or None before the first write.
        submitted: Caller-supplied attributes. ``role`` here is ignored.
        user_id: Identity id, also the row's primary key.
        email: Identity email, written on creation only.
        persisted_role: Authoritative persisted role.
        now: Write timestamp.
        configured_fields: Explicit allow-list from settings.
        volunteer: Volunteer flag to mirror onto the row when the column is writable.

    Returns:
        MergeResult: Payload, dropped keys and whether the write creates the row.
    """
    configured = tuple(configured_fields)
    allowed = resolve_allowed_fields(existing_row, configured)
    timestamp = now.isoformat()

    copied = [key for key in sorted(allowed) if key in submitted and key not in SERVER_OWNED_FIELDS]

    if existing_row:
        payload = {key: submitted[key] for key in copied}
        payload["role"] = persisted_role or existing_row.get("role") or DEFAULT_PERSISTED_ROLE
        payload["updated_at"] = timestamp
        is_insert = False
    else:
        # Without a stored row only an explicit allow-list admits caller fields
        if not configured:
            copied = []
        payload = {key: submitted[key] for key in copied}
        payload.update(
            {
                "id": str(user_id),
                "email": email,
                "role": persisted_role or DEFAULT_PERSISTED_ROLE,
                "created_at": timestamp,
                "updated_at": timestamp,
            }
        )
        is_insert = True

    if volunteer and VOLUNTEER_COLUMN in allowed:
        payload[VOLUNTEER_COLUMN] = True

    dropped = sorted(key for key in submitted if key != "role" and key not in copied)
    return MergeResult(payload=payload, dropped=dropped, is_insert=is_insert)
