import secrets

from fastapi import Depends, HTTPException, status
from fastapi.security import (
    HTTPAuthorizationCredentials, HTTPBearer, OAuth2PasswordBearer
)
from jwt.exceptions import InvalidTokenError
from sqlmodel import Session
from pydantic import ValidationError

from app.core.config import settings
from app.db.core import get_session
from app.db.schema import Profile, ProfileRole
from app.services.profile import ProfileService
from app.services.account import AccountService
from app.services.mission import MissionService
from app.services.mission_request import MissionRequestService
from app.services.report import ReportService
from app.services.tracking import TrackingService

from app.services.references.client import ClientService
from app.services.references.site import SiteService
from app.services.references.vehicle import VehicleService
from app.services.references.material_type import MaterialTypeService

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="api/v1/auth/token")
service_key_scheme = HTTPBearer(auto_error=False)


def get_profile_service(session: Session = Depends(get_session)) -> ProfileService:
    """Creates a ProfileService instance using the active DB session."""
    return ProfileService(session)


def get_account_service(session: Session = Depends(get_session)) -> AccountService:
    return AccountService(session=session)


def get_client_service(session: Session = Depends(get_session)) -> ClientService:
    return ClientService(session=session)


def get_site_service(session: Session = Depends(get_session)) -> SiteService:
    return SiteService(session=session)


def get_vehicle_service(session: Session = Depends(get_session)) -> VehicleService:
    return VehicleService(session=session)


def get_material_type_service(session: Session = Depends(get_session)) -> MaterialTypeService:
    return MaterialTypeService(session=session)


def get_mission_service(session: Session = Depends(get_session)) -> MissionService:
    return MissionService(session=session)


def get_mission_request_service(session: Session = Depends(get_session)) -> MissionRequestService:
    return MissionRequestService(session=session)


def get_report_service(session: Session = Depends(get_session)) -> ReportService:
    return ReportService(session=session)


def get_tracking_service(session: Session = Depends(get_session)) -> TrackingService:
    return TrackingService(session=session)


def get_current_user(
    token: str = Depends(oauth2_scheme),
    service: ProfileService = Depends(get_profile_service)
) -> Profile:
    """
    Validates the JWT token and retrieves the profile.
    This is the gatekeeper for protected routes.
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    try:
        token_data = service.verify_access_token(token)

        if not token_data:
            raise credentials_exception

    except (InvalidTokenError, ValidationError):
        raise credentials_exception

    profile = service.get_profile_by_id(token_data.user_id)

    if profile is None:
        raise credentials_exception

    if not profile.is_active:
        raise HTTPException(status_code=400, detail="Inactive user")

    return profile


def get_current_admin(current_user: Profile = Depends(get_current_user)) -> Profile:
    if current_user.role != ProfileRole.SUPER_ADMIN:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Administrator access required"
        )
    return current_user


def require_service_key(
    credentials: HTTPAuthorizationCredentials = Depends(service_key_scheme)
) -> None:
    """Bearer must be the configured service key, not a user token."""
    if (
        credentials is None
        or not settings.service_role_key
        or not secrets.compare_digest(credentials.credentials, settings.service_role_key)
    ):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
            headers={"WWW-Authenticate": "Bearer"},
        )
