from typing import Optional
import uuid
from datetime import datetime, timedelta

import jwt
from loguru import logger
from sqlmodel import Session, select
from fastapi import HTTPException, status

from app.core.config import settings
from app.db.schema import Profile
from app.models.auth import Token, TokenData
from app.models.profile import OwnEmailUpdate, OwnPasswordUpdate
from .password import get_password_hash, verify_password


class ProfileService:
    """
    Sign-in, JWT issuing and self-service account changes for admins and drivers.
    """
    ALGORITHM = "HS256"

    def __init__(self, session: Session):
        self.session = session

    def _create_jwt(self, subject: str, expires_delta: timedelta, type: str) -> str:
        """Helper to sign JWTs with specific types."""
        to_encode = {
            "sub": str(subject),
            "exp": datetime.utcnow() + expires_delta,
            "type": type
        }
        return jwt.encode(to_encode, settings.secret_key, algorithm=self.ALGORITHM)

    def get_profile_by_id(self, profile_id: uuid.UUID) -> Optional[Profile]:
        return self.session.get(Profile, profile_id)

    def get_profile_by_email(self, email: str) -> Optional[Profile]:
        statement = select(Profile).where(Profile.email == email.lower())
        return self.session.exec(statement).first()

    def authenticate(self, email: str, password: str) -> Optional[Profile]:
        """Verify email and password hash."""
        profile = self.get_profile_by_email(email)
        if not profile:
            return None
        if not verify_password(password, profile.hashed_password):
            return None
        return profile

    def generate_access_token(self, profile: Profile) -> str:
        return self._create_jwt(
            subject=profile.id,
            expires_delta=timedelta(
                minutes=settings.access_token_expire_minutes),
            type="access"
        )

    def generate_refresh_token(self, profile: Profile) -> str:
        return self._create_jwt(
            subject=profile.id,
            expires_delta=timedelta(
                minutes=settings.refresh_token_expire_minutes),
            type="refresh"
        )

    def generate_tokens(self, profile: Profile) -> Token:
        return Token(
            access_token=self.generate_access_token(profile),
            refresh_token=self.generate_refresh_token(profile),
            token_type="bearer"
        )

    def _verify_token(self, token: str, expected_type: str) -> Optional[TokenData]:
        try:
            payload = jwt.decode(token, settings.secret_key,
                                 algorithms=[self.ALGORITHM])
            profile_id = payload.get("sub")
            token_type = payload.get("type")

            if not profile_id or token_type != expected_type:
                return None

            return TokenData(user_id=uuid.UUID(profile_id))
        except (jwt.PyJWTError, ValueError):
            return None

    def verify_access_token(self, token: str) -> Optional[TokenData]:
        return self._verify_token(token, "access")

    def verify_refresh_token(self, token: str) -> Optional[TokenData]:
        return self._verify_token(token, "refresh")

    def validate_profile(self, profile_id: uuid.UUID) -> Optional[Profile]:
        """Retrieves the profile and checks the is_active flag."""
        profile = self.get_profile_by_id(profile_id)
        if not profile or not profile.is_active:
            return None
        return profile

    def refresh_session(self, refresh_token: str) -> str:
        """
        Exchange a valid refresh token for a new access token.
        Strictly validates the profile state before issuing.
        """
        credentials_exception = HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

        token_data = self.verify_refresh_token(refresh_token)
        if not token_data:
            raise credentials_exception

        profile = self.validate_profile(token_data.user_id)
        if not profile:
            raise credentials_exception

        return self.generate_access_token(profile)

    def change_own_password(self, profile: Profile, data: OwnPasswordUpdate) -> Profile:
        if not verify_password(data.current_password, profile.hashed_password):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Current password is incorrect."
            )

        profile.hashed_password = get_password_hash(data.new_password)
        self.session.add(profile)
        self.session.commit()
        self.session.refresh(profile)

        logger.info(f"Password changed for profile {profile.id}")
        return profile

    def change_own_email(self, profile: Profile, data: OwnEmailUpdate) -> Profile:
        if not verify_password(data.password, profile.hashed_password):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Password is incorrect."
            )

        data.new_email = data.new_email.lower()

        if data.new_email == profile.email:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Please enter a different email address."
            )

        if self.get_profile_by_email(data.new_email):
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="This email address is already in use."
            )

        profile.email = data.new_email
        self.session.add(profile)
        self.session.commit()
        self.session.refresh(profile)

        logger.info(f"Email changed for profile {profile.id}")
        return profile
