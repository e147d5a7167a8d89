"""Profile API routes."""

from fastapi import APIRouter

from src.api.deps import CurrentUser, ProfileServiceDep
from src.schemas.profile import (
    ProfileCompletionRequest,
    ProfileDisplayResponse,
    ProfileResultResponse,
    RoleSelectionRequest,
)
from src.services.profile_service import ReconciliationResult

router = APIRouter(prefix="/profile", tags=["profile"])


def _to_response(result: ReconciliationResult) -> ProfileResultResponse:
    return ProfileResultResponse(
        success=result.success,
        role=result.role,
        persisted_role=result.persisted_role,
        volunteer=result.volunteer,
        warnings=result.warnings,
    )


@router.post(
    "/role",
    response_model=ProfileResultResponse,
    summary="Select role",
    description="Stores the role picked during onboarding and the volunteer flag.",
)
async def select_role(
    data: RoleSelectionRequest,
    user: CurrentUser,
    service: ProfileServiceDep,
) -> ProfileResultResponse:
    """Record the authenticated user's role.

    Args:
        data: Role, volunteer opt-in and extra profile attributes.
        user: The authenticated user context.
        service: Profile service.

    Returns:
        ProfileResultResponse: Display role, persisted role and volunteer flag.
    """
    result = await service.select_role(
        user,
        role=data.role,
        volunteer_indicator=data.is_volunteer,
        extra=data.extra_fields,
    )
    return _to_response(result)


@router.post(
    "/complete",
    response_model=ProfileResultResponse,
    summary="Complete profile",
    description="Stores profile attributes, keeping only columns the profile row already has.",
)
async def complete_profile(
    data: ProfileCompletionRequest,
    user: CurrentUser,
    service: ProfileServiceDep,
) -> ProfileResultResponse:
    """Save the authenticated user's profile form.

    Args:
        data: Free-form profile attributes.
        user: The authenticated user context.
        service: Profile service.

    Returns:
        ProfileResultResponse: Display role, persisted role and volunteer flag.
    """
    result = await service.complete_profile(user, data.to_fields())
    return _to_response(result)


@router.get(
    "/me",
    response_model=ProfileDisplayResponse,
    summary="Get current user's profile",
    description="Returns the stored profile with volunteer framing applied to the role.",
)
async def get_my_profile(user: CurrentUser, service: ProfileServiceDep) -> ProfileDisplayResponse:
    """Get the authenticated user's profile.

    Raises:
        NotFoundError: 404 if no profile row exists yet.
    """
    view = await service.get_profile_for_display(user)
    return ProfileDisplayResponse(
        role=view.role,
        persisted_role=view.persisted_role,
        volunteer=view.volunteer,
        completed=view.completed,
        profile=dict(view.profile),
    )
