import uuid
from typing import List

from fastapi import HTTPException, status
from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from app.core.config import settings
from app.db.schema import Mission, Profile, ProfileRole
from app.models.profile import DriverCreate, DriverUpdate
from .password import get_password_hash


MIN_PASSWORD_LENGTH = 8


class AccountService:
    """
    Privileged account operations: bootstrapping the administrator and
    managing driver accounts. Every method here assumes the caller has
    already been authorized (admin bearer or service key).
    """

    def __init__(self, session: Session):
        self.session = session

    def _get_driver(self, driver_id: uuid.UUID) -> Profile:
        driver = self.session.get(Profile, driver_id)

        if not driver or driver.role != ProfileRole.DRIVER:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Driver not found"
            )
        return driver

    def _commit_or_500(self, action: str):
        try:
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(f"{action} failed: {str(e)}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"{action} failed. Please try again."
            )

    def bootstrap_admin(self) -> Profile:
        """
        Idempotent by replacement: an existing profile with the configured
        admin email is removed, then a fresh admin is created.

        Raises:
            ValueError: If no initial admin password is configured.
        """
        if not settings.initial_admin_password:
            raise ValueError("Initial admin password not configured.")

        email = settings.initial_admin_email.lower()

        try:
            existing = self.session.exec(
                select(Profile).where(Profile.email == email)
            ).first()

            if existing:
                logger.info(f"Admin {email} already exists, deleting...")
                self.session.delete(existing)
                self.session.flush()

            admin = Profile(
                email=email,
                full_name=settings.initial_admin_name,
                role=ProfileRole.SUPER_ADMIN,
                is_active=True,
                hashed_password=get_password_hash(
                    settings.initial_admin_password)
            )
            self.session.add(admin)
            self.session.commit()
            self.session.refresh(admin)

        except Exception as e:
            self.session.rollback()
            logger.error(f"Admin bootstrap failed: {str(e)}")
            raise e

        logger.info(f"Admin created successfully: {admin.id}")
        return admin

    # ==========================================================================
    # DRIVERS
    # ==========================================================================

    def list_drivers(self, active_only: bool = False) -> List[Profile]:
        query = select(Profile).where(Profile.role == ProfileRole.DRIVER)
        if active_only:
            query = query.where(Profile.is_active == True)
        return self.session.exec(query.order_by(Profile.full_name)).all()

    def create_driver(self, data: DriverCreate) -> Profile:
        data.email = data.email.lower()

        existing = self.session.exec(
            select(Profile).where(Profile.email == data.email)
        ).first()

        if existing:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=f"An account with email '{data.email}' already exists."
            )

        driver = Profile(
            email=data.email,
            full_name=data.full_name,
            phone=data.phone,
            role=ProfileRole.DRIVER,
            is_active=True,
            hashed_password=get_password_hash(data.password)
        )
        self.session.add(driver)
        self.session.commit()
        self.session.refresh(driver)

        logger.info(f"Driver account created: {driver.id}")
        return driver

    def update_driver(self, driver_id: uuid.UUID, data: DriverUpdate) -> Profile:
        driver = self._get_driver(driver_id)

        for key, value in data.model_dump(exclude_unset=True).items():
            setattr(driver, key, value)

        self.session.add(driver)
        self.session.commit()
        self.session.refresh(driver)
        return driver

    def set_driver_active(self, driver_id: uuid.UUID, is_active: bool) -> Profile:
        """Deactivation is the alternative to deleting a driver who has missions."""
        driver = self._get_driver(driver_id)
        driver.is_active = is_active
        self.session.add(driver)
        self.session.commit()
        self.session.refresh(driver)

        logger.info(
            f"Driver {driver.id} {'activated' if is_active else 'deactivated'}")
        return driver

    def delete_driver(self, driver_id: uuid.UUID) -> dict:
        """
        Deletes a driver account permanently.

        Referential integrity is checked explicitly: a driver with at least one
        mission is never deleted (deactivate instead).

        Raises:
            HTTPException(404): Unknown driver.
            HTTPException(400): The driver has associated missions.
            HTTPException(500): The store rejected the deletion.
        """
        driver = self._get_driver(driver_id)

        has_missions = self.session.exec(
            select(Mission.id).where(Mission.driver_id == driver_id).limit(1)
        ).first()

        if has_missions:
            logger.warning(
                f"Refused to delete driver {driver_id}: missions attached")
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Cannot delete driver with associated missions"
            )

        self.session.delete(driver)
        self._commit_or_500("Driver deletion")

        logger.info(f"Driver deleted: {driver_id}")
        return {"success": True, "id": driver_id}

    def update_driver_password(self, driver_id: uuid.UUID, password: str) -> dict:
        """
        Raises:
            HTTPException(400): Password shorter than 8 characters.
            HTTPException(404): Target is not a driver.
            HTTPException(500): The store rejected the update.
        """
        if len(password) < MIN_PASSWORD_LENGTH:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
            )

        driver = self._get_driver(driver_id)
        driver.hashed_password = get_password_hash(password)
        self.session.add(driver)
        self._commit_or_500("Password update")

        logger.info(f"Password updated for driver {driver_id}")
        return {"success": True}
