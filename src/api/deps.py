"""FastAPI dependency injection functions."""

from typing import Annotated

from fastapi import Depends, Header, HTTPException, status

from src.api.middleware.auth import AuthError, AuthErrorCode, decode_jwt
from src.schemas.auth import UserContext
from src.services.listing_service import ListingService
from src.services.profile_service import ProfileService


async def get_current_user(
    authorization: Annotated[str, Header(description="Bearer token")] = "",
) -> UserContext:
    """Extract and validate the current user from the Authorization header.

    Runs before any store access, so an unauthenticated request never
    touches the profile table.

    Args:
        authorization: The Authorization header value (Bearer token).

    Returns:
        UserContext: The authenticated user's context.

    Raises:
        HTTPException: 401 if token is missing, invalid, or expired.
    """
    if not authorization:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    parts = authorization.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authorization header format. Expected: Bearer <token>",
            headers={"WWW-Authenticate": "Bearer"},
        )

    token = parts[1]

    try:
        payload = decode_jwt(token)
        return payload.to_user_context()

    except AuthError as e:
        if e.code == AuthErrorCode.TOKEN_EXPIRED:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Token has expired",
                headers={"WWW-Authenticate": "Bearer"},
            ) from e

        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=e.message,
            headers={"WWW-Authenticate": "Bearer"},
        ) from e


def get_profile_service() -> ProfileService:
    """Provide a ProfileService per request."""
    return ProfileService()


def get_listing_service() -> ListingService:
    """Provide a ListingService per request."""
    return ListingService()


# Type aliases for cleaner dependency injection
CurrentUser = Annotated[UserContext, Depends(get_current_user)]
ProfileServiceDep = Annotated[ProfileService, Depends(get_profile_service)]
ListingServiceDep = Annotated[ListingService, Depends(get_listing_service)]
