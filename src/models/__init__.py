"""Database model type definitions."""

from src.models.listing import Listing
from src.models.profile import UserProfile

__all__ = [
    "Listing",
    "UserProfile",
]
