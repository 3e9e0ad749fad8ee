from fastapi import APIRouter, Depends, HTTPException, status
from loguru import logger

from app.core.dependencies import get_profile_service, get_current_user
from app.services.profile import ProfileService
from app.db.schema import Profile
from app.models.auth import Token, TokenAccess, TokenRefresh
from app.models.profile import (
    ProfileSignin, ProfileRead, OwnPasswordUpdate, OwnEmailUpdate
)


router = APIRouter()


@router.post(
    "/token",
    response_model=Token,
    status_code=status.HTTP_200_OK,
    summary="Signin to get tokens",
    description="Returns an Access Token (short-lived) and Refresh Token (long-lived)."
)
def token(
    signin_data: ProfileSignin,
    service: ProfileService = Depends(get_profile_service)
):
    """
    1. Verifies password.
    2. Checks if the profile is active.
    3. Issues JWTs.
    """
    profile = service.authenticate(signin_data.email, signin_data.password)

    if not profile:
        # Same answer for unknown email and wrong password
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if not profile.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account is deactivated. Please contact your administrator."
        )

    tokens = service.generate_tokens(profile)

    logger.info(f"Profile logged in: {profile.id} ({profile.role.value})")

    return tokens


@router.post(
    "/refresh",
    response_model=TokenAccess,
    status_code=status.HTTP_200_OK,
    summary="Refresh Session",
    description="Exchanges a valid Refresh Token for a new Access Token."
)
def refresh_token(
    refresh_data: TokenRefresh,
    service: ProfileService = Depends(get_profile_service)
):
    return TokenAccess(access_token=service.refresh_session(refresh_data.refresh_token))


@router.get(
    "/me",
    response_model=ProfileRead,
    status_code=status.HTTP_200_OK,
    summary="Get current profile",
)
def get_me(
    current_user: Profile = Depends(get_current_user)
):
    return current_user


@router.put(
    "/me/password",
    response_model=ProfileRead,
    summary="Change own password",
)
def change_password(
    payload: OwnPasswordUpdate,
    current_user: Profile = Depends(get_current_user),
    service: ProfileService = Depends(get_profile_service)
):
    """The current password is required."""
    return service.change_own_password(current_user, payload)


@router.put(
    "/me/email",
    response_model=ProfileRead,
    summary="Change own email",
)
def change_email(
    payload: OwnEmailUpdate,
    current_user: Profile = Depends(get_current_user),
    service: ProfileService = Depends(get_profile_service)
):
    return service.change_own_email(current_user, payload)
