"""Role vocabulary shared by the profile and listing services.

Clients speak the short vocabulary (``prov``, ``recip``, ``vol``, ``org``);
the profiles table only accepts ``provider``, ``individual`` and ``ngo``.
Recipients and volunteers both persist as ``individual`` and are told apart
by the volunteer flag.
"""

from dataclasses import dataclass
from enum import Enum


class ShortRole(str, Enum):
    """Client-facing role identifiers."""

    PROVIDER = "prov"
    RECIPIENT = "recip"
    VOLUNTEER = "vol"
    ORGANIZATION = "org"


class PersistedRole(str, Enum):
    """Role values accepted by the profiles table check constraint."""

    PROVIDER = "provider"
    INDIVIDUAL = "individual"
    NGO = "ngo"


DEFAULT_PERSISTED_ROLE = PersistedRole.INDIVIDUAL.value

SHORT_TO_PERSISTED: dict[str, str] = {
    ShortRole.PROVIDER.value: PersistedRole.PROVIDER.value,
    ShortRole.RECIPIENT.value: PersistedRole.INDIVIDUAL.value,
    ShortRole.VOLUNTEER.value: PersistedRole.INDIVIDUAL.value,
    ShortRole.ORGANIZATION.value: PersistedRole.NGO.value,
}

# individual -> recip: a non-volunteer individual always reads back as a recipient
PERSISTED_TO_SHORT: dict[str, str] = {
    PersistedRole.PROVIDER.value: ShortRole.PROVIDER.value,
    PersistedRole.INDIVIDUAL.value: ShortRole.RECIPIENT.value,
    PersistedRole.NGO.value: ShortRole.ORGANIZATION.value,
}

PROVIDER_ROLES = frozenset({PersistedRole.PROVIDER.value, ShortRole.PROVIDER.value})


@dataclass(frozen=True)
class MappedRole:
    """A short role with a known persisted value."""

    short: str
    persisted: str

    @property
    def is_mapped(self) -> bool:
        return True


@dataclass(frozen=True)
class UnmappedRole:
    """A role value outside the known vocabulary, passed through untouched."""

    raw: str

    @property
    def persisted(self) -> str:
        return self.raw

    @property
    def is_mapped(self) -> bool:
        return False


def classify_role(value: str) -> MappedRole | UnmappedRole:
    """Classify a caller-supplied role value.

    Persisted values are accepted as well, so a role read back from a row
    classifies as mapped.

    Args:
        value: Short or persisted role value.

    Returns:
        MappedRole | UnmappedRole: Tagged mapping result.
    """
    if value in SHORT_TO_PERSISTED:
        return MappedRole(short=value, persisted=SHORT_TO_PERSISTED[value])
    if value in PERSISTED_TO_SHORT:
        return MappedRole(short=PERSISTED_TO_SHORT[value], persisted=value)
    return UnmappedRole(raw=value)


def to_persisted_role(short_role: str) -> str:
    """Translate a short role into its persisted value.

    Unknown values pass through unchanged.
    """
    return SHORT_TO_PERSISTED.get(short_role, short_role)


def to_display_role(persisted_role: str, is_volunteer: bool) -> str:
    """Translate a persisted role into the short role shown to clients.

    Volunteers always display as ``vol`` whatever the persisted role.
    Unknown values pass through unchanged.
    """
    if is_volunteer:
        return ShortRole.VOLUNTEER.value
    return PERSISTED_TO_SHORT.get(persisted_role, persisted_role)


def is_provider_role(role: str | None) -> bool:
    """Check whether a stored role allows creating listings.

    Rows written before the role mapping existed may still hold ``prov``.
    """
    return role in PROVIDER_ROLES
