"""Listing model type definitions for database operations."""

from typing import Any, TypedDict


class Listing(TypedDict, total=False):
    """listings table row representation."""

    id: Any
    provider_id: str
    title: str
    description: str
    food_type: str
    quantity: Any
    expiration_date: str
    location: str
    status: str
    created_at: str
    updated_at: str
