import uuid
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Optional

from fastapi import HTTPException, BackgroundTasks, status
from loguru import logger
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import selectinload
from sqlmodel import Session, select, col

from app.core.audit import _perform_audit_log
from app.db.schema import (
    AuditAction, Client, CollectionSite, DepositSite, MaterialType, Mission,
    MissionRequest, MissionRequestStatus, MissionStatus, Profile, ProfileRole,
    Vehicle,
)
from app.models.mission import (
    MissionCreate, MissionDetailsRead, MissionFromRequest, MissionUpdate
)
from .mission_rules import (
    compute_net_weight_tons, ensure_weight_order, resolve_validated_at,
    transition_status,
)


# Reference column -> (table, label used in error messages)
REFERENCES = {
    "client_id": (Client, "Client"),
    "collection_site_id": (CollectionSite, "Collection site"),
    "deposit_site_id": (DepositSite, "Deposit site"),
    "vehicle_id": (Vehicle, "Vehicle"),
    "material_type_id": (MaterialType, "Material type"),
}

EDITABLE_FIELDS = (
    "client_id", "driver_id", "collection_site_id", "deposit_site_id",
    "vehicle_id", "material_type_id", "mission_date", "empty_weight_kg",
    "loaded_weight_kg", "driver_comment", "order_number",
)

# The only editable columns a PATCH may clear with null.
NULLABLE_FIELDS = ("driver_comment", "order_number")

DETAIL_LOADERS = (
    selectinload(Mission.client),
    selectinload(Mission.driver),
    selectinload(Mission.collection_site),
    selectinload(Mission.deposit_site),
    selectinload(Mission.vehicle),
    selectinload(Mission.material_type),
)


def to_details(mission: Mission) -> MissionDetailsRead:
    """Flattens a mission and the names of its references into one row."""
    return MissionDetailsRead(
        **mission.model_dump(),
        client_name=mission.client.name if mission.client else "",
        driver_name=mission.driver.full_name if mission.driver else "",
        collection_site_name=mission.collection_site.name if mission.collection_site else "",
        collection_site_address=mission.collection_site.address if mission.collection_site else "",
        deposit_site_name=mission.deposit_site.name if mission.deposit_site else "",
        deposit_site_address=mission.deposit_site.address if mission.deposit_site else "",
        vehicle_name=mission.vehicle.name if mission.vehicle else "",
        vehicle_license_plate=mission.vehicle.license_plate if mission.vehicle else "",
        material_type_name=mission.material_type.name if mission.material_type else "",
    )


class MissionService:
    """
    The mission record engine.

    Every write goes through the same checks: references exist (and are
    active when newly chosen), the collection site belongs to the client,
    loaded > empty, and the status follows the state machine. The net weight
    is recomputed from the two weighings each time.
    """

    def __init__(self, session: Session):
        self.session = session

    # ==========================================================================
    # HELPERS
    # ==========================================================================

    def _is_admin(self, user: Profile) -> bool:
        return user.role == ProfileRole.SUPER_ADMIN

    def _ensure_admin(self, user: Profile):
        if not self._is_admin(user):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Only an administrator can perform this action."
            )

    def _get_for_user(self, user: Profile, mission_id: uuid.UUID) -> Mission:
        mission = self.session.get(Mission, mission_id)

        if not mission:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Mission not found."
            )

        if not self._is_admin(user) and mission.driver_id != user.id:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="You can only access your own missions."
            )
        return mission

    def _invalid(self, detail: str) -> HTTPException:
        return HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=detail
        )

    def _check_references(self, values: Dict[str, Any], require_active: Iterable[str]):
        """
        Raises:
            HTTPException(422): Unknown or (for fields in require_active)
                inactive reference, a collection site of another client,
                or a driver_id that is not a driver.
        """
        require_active = set(require_active)

        for field, (table, label) in REFERENCES.items():
            record = self.session.get(table, values[field])
            if record is None:
                raise self._invalid(f"{label} not found.")
            if field in require_active and not record.is_active:
                raise self._invalid(f"{label} is inactive.")

        site = self.session.get(CollectionSite, values["collection_site_id"])
        if site.client_id != values["client_id"]:
            raise self._invalid(
                "The collection site does not belong to this client.")

        driver = self.session.get(Profile, values["driver_id"])
        if driver is None or driver.role != ProfileRole.DRIVER:
            raise self._invalid("The selected driver does not exist.")
        if "driver_id" in require_active and not driver.is_active:
            raise self._invalid("The selected driver is inactive.")

    def _resolve_driver_and_status(
        self,
        user: Profile,
        driver_id: Optional[uuid.UUID],
        requested_status: Optional[MissionStatus]
    ):
        """A driver always records for themselves and cannot self-validate."""
        if not self._is_admin(user):
            if requested_status == MissionStatus.VALIDATED:
                raise HTTPException(
                    status_code=status.HTTP_403_FORBIDDEN,
                    detail="Only an administrator can validate a mission."
                )
            return user.id, requested_status or MissionStatus.COMPLETED

        if driver_id is None:
            raise self._invalid("A driver must be selected.")
        return driver_id, requested_status or MissionStatus.VALIDATED

    def _build_mission(self, values: Dict[str, Any], target: MissionStatus) -> Mission:
        ensure_weight_order(values["empty_weight_kg"], values["loaded_weight_kg"])
        self._check_references(values, require_active=list(REFERENCES) + ["driver_id"])

        mission = Mission(
            **values,
            net_weight_tons=compute_net_weight_tons(
                values["empty_weight_kg"], values["loaded_weight_kg"]),
            status=target,
            validated_at=resolve_validated_at(target, None),
            version=1,
        )
        return mission

    def _audit(
        self,
        background_tasks: Optional[BackgroundTasks],
        user: Profile,
        entity_id: uuid.UUID,
        action: AuditAction,
        changes: Dict[str, Any],
        entity_type: str = "Mission"
    ):
        if background_tasks is None:
            return
        background_tasks.add_task(
            _perform_audit_log,
            user_id=user.id,
            entity_type=entity_type,
            entity_id=entity_id,
            action=action,
            changes=changes
        )

    # ==========================================================================
    # READ OPERATIONS
    # ==========================================================================

    def list_missions(
        self,
        user: Profile,
        mission_date: Optional[date] = None
    ) -> List[MissionDetailsRead]:
        """Admins see every mission, drivers only theirs. Newest first."""
        query = select(Mission).options(*DETAIL_LOADERS)

        if not self._is_admin(user):
            query = query.where(Mission.driver_id == user.id)

        if mission_date:
            query = query.where(Mission.mission_date == mission_date)

        query = query.order_by(
            col(Mission.mission_date).desc(), col(Mission.created_at).desc())

        return [to_details(m) for m in self.session.exec(query).all()]

    def get_mission(self, user: Profile, mission_id: uuid.UUID) -> MissionDetailsRead:
        return to_details(self._get_for_user(user, mission_id))

    def report_rows(
        self,
        client_id: Optional[uuid.UUID] = None,
        only_validated: bool = False
    ) -> List[MissionDetailsRead]:
        """Joined rows fed to the reporting functions."""
        query = select(Mission).options(*DETAIL_LOADERS)

        if client_id:
            query = query.where(Mission.client_id == client_id)
        if only_validated:
            query = query.where(Mission.status == MissionStatus.VALIDATED)

        query = query.order_by(
            col(Mission.mission_date).desc(), col(Mission.created_at).desc())

        return [to_details(m) for m in self.session.exec(query).all()]

    # ==========================================================================
    # WRITE OPERATIONS
    # ==========================================================================

    def create_mission(
        self,
        user: Profile,
        data: MissionCreate,
        background_tasks: Optional[BackgroundTasks] = None
    ) -> MissionDetailsRead:
        """
        Records a mission.

        Raises:
            HTTPException(422): Weight order, unknown/inactive reference,
                site of another client.
            HTTPException(403): A driver asking for 'validated'.
        """
        driver_id, target = self._resolve_driver_and_status(
            user, data.driver_id, data.status)

        values = data.model_dump(exclude={"driver_id", "status"})
        values["driver_id"] = driver_id

        mission = self._build_mission(values, target)

        self.session.add(mission)
        self.session.commit()
        self.session.refresh(mission)

        logger.info(
            f"Mission {mission.id} created by {user.id} ({mission.net_weight_tons} t, {mission.status.value})")

        self._audit(background_tasks, user, mission.id, AuditAction.CREATE,
                    data.model_dump(mode="json"))
        return to_details(mission)

    def create_from_request(
        self,
        user: Profile,
        request_id: uuid.UUID,
        data: MissionFromRequest,
        background_tasks: Optional[BackgroundTasks] = None
    ) -> MissionDetailsRead:
        """
        Converts a client request into a mission.

        The mission insert and the request's 'converted' stamp are committed
        together: either both are stored or neither is.

        Raises:
            HTTPException(404): Unknown request.
            HTTPException(409): Request already converted.
        """
        request = self.session.get(MissionRequest, request_id)

        if not request:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Mission request not found."
            )

        if request.status == MissionRequestStatus.CONVERTED:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="This request has already been converted into a mission."
            )

        driver_id, target = self._resolve_driver_and_status(
            user, data.driver_id, data.status)

        values = data.model_dump(exclude={"driver_id", "status"})
        values.update(
            driver_id=driver_id,
            client_id=request.client_id,
            collection_site_id=request.collection_site_id,
            mission_request_id=request.id,
            external_request_id=request.external_request_id,
            client_request_date=request.client_request_date,
        )

        mission = self._build_mission(values, target)

        request.status = MissionRequestStatus.CONVERTED
        request.converted_at = datetime.utcnow()
        request.mission_id = mission.id

        try:
            self.session.add(mission)
            self.session.add(request)
            self.session.commit()
        except IntegrityError:
            # missions.mission_request_id is unique: a concurrent conversion won
            self.session.rollback()
            logger.warning(f"Request {request_id} was converted concurrently")
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="This request has already been converted into a mission."
            )
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(f"Conversion of request {request_id} failed: {e}")
            raise

        self.session.refresh(mission)
        logger.info(
            f"Request {request_id} converted into mission {mission.id} by {user.id}")

        self._audit(background_tasks, user, mission.id, AuditAction.CREATE,
                    {"mission_request_id": request_id, **data.model_dump(mode="json")})
        self._audit(background_tasks, user, request_id, AuditAction.UPDATE,
                    {"status": MissionRequestStatus.CONVERTED, "mission_id": mission.id},
                    entity_type="MissionRequest")
        return to_details(mission)

    def update_mission(
        self,
        user: Profile,
        mission_id: uuid.UUID,
        data: MissionUpdate,
        background_tasks: Optional[BackgroundTasks] = None
    ) -> MissionDetailsRead:
        """
        Partial update. The merged record is checked like a new one, except
        that references left unchanged may have been deactivated since.

        Raises:
            HTTPException(409): expected_version differs from the stored version.
            HTTPException(422): Invalid merged record or status move.
            HTTPException(403): Not the caller's mission, or a driver validating.
        """
        mission = self._get_for_user(user, mission_id)

        if data.expected_version is not None and data.expected_version != mission.version:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="This mission was modified by someone else. Reload it and try again."
            )

        # null on a required column leaves it unchanged
        updates = {
            field: value
            for field, value in data.model_dump(
                exclude_unset=True, exclude={"expected_version"}).items()
            if value is not None or field in NULLABLE_FIELDS
        }

        if not self._is_admin(user):
            updates.pop("driver_id", None)
            if updates.get("status") == MissionStatus.VALIDATED:
                raise HTTPException(
                    status_code=status.HTTP_403_FORBIDDEN,
                    detail="Only an administrator can validate a mission."
                )

        old_state = mission.model_dump()
        merged = {field: updates.get(field, getattr(mission, field))
                  for field in EDITABLE_FIELDS}

        ensure_weight_order(merged["empty_weight_kg"], merged["loaded_weight_kg"])
        changed_refs = [f for f in list(REFERENCES) + ["driver_id"]
                        if f in updates and updates[f] != old_state[f]]
        self._check_references(merged, require_active=changed_refs)

        target = transition_status(
            mission.status, updates.get("status") or mission.status)

        for field, value in merged.items():
            setattr(mission, field, value)
        mission.net_weight_tons = compute_net_weight_tons(
            mission.empty_weight_kg, mission.loaded_weight_kg)
        mission.status = target
        mission.validated_at = resolve_validated_at(target, mission.validated_at)
        mission.version += 1

        self.session.add(mission)
        self.session.commit()
        self.session.refresh(mission)

        changes = {k: {"old": old_state.get(k), "new": v}
                   for k, v in updates.items() if old_state.get(k) != v}
        self._audit(background_tasks, user, mission.id, AuditAction.UPDATE,
                    changes)
        return to_details(mission)

    def validate_mission(
        self,
        user: Profile,
        mission_id: uuid.UUID,
        background_tasks: Optional[BackgroundTasks] = None
    ) -> MissionDetailsRead:
        self._ensure_admin(user)
        mission = self._get_for_user(user, mission_id)

        previous = mission.status
        mission.status = transition_status(mission.status, MissionStatus.VALIDATED)
        mission.validated_at = resolve_validated_at(
            mission.status, mission.validated_at)
        mission.version += 1

        self.session.add(mission)
        self.session.commit()
        self.session.refresh(mission)

        logger.info(f"Mission {mission_id} validated by {user.id}")
        self._audit(background_tasks, user, mission.id, AuditAction.UPDATE,
                    {"status": {"old": previous.value, "new": mission.status.value}})
        return to_details(mission)

    def unvalidate_mission(
        self,
        user: Profile,
        mission_id: uuid.UUID,
        background_tasks: Optional[BackgroundTasks] = None
    ) -> MissionDetailsRead:
        """The one backward move: validated -> completed, clearing the stamp."""
        self._ensure_admin(user)
        mission = self._get_for_user(user, mission_id)

        if mission.status != MissionStatus.VALIDATED:
            raise self._invalid("Only a validated mission can be unvalidated.")

        mission.status = MissionStatus.COMPLETED
        mission.validated_at = None
        mission.version += 1

        self.session.add(mission)
        self.session.commit()
        self.session.refresh(mission)

        logger.info(f"Mission {mission_id} unvalidated by {user.id}")
        self._audit(background_tasks, user, mission.id, AuditAction.UPDATE,
                    {"status": {"old": "validated", "new": "completed"}})
        return to_details(mission)

    def delete_mission(
        self,
        user: Profile,
        mission_id: uuid.UUID,
        confirm: bool = False,
        background_tasks: Optional[BackgroundTasks] = None
    ):
        """
        Removes a mission for good. Deleting an id that does not exist
        succeeds without doing anything.

        Raises:
            HTTPException(400): confirm flag missing.
            HTTPException(403): A driver deleting someone else's mission.
        """
        if not confirm:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Deletion must be confirmed with confirm=true."
            )

        mission = self.session.get(Mission, mission_id)

        if mission is None:
            return {"status": "deleted", "id": mission_id}

        if not self._is_admin(user) and mission.driver_id != user.id:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="You can only delete your own missions."
            )

        snapshot = {
            "mission_date": mission.mission_date,
            "client_id": mission.client_id,
            "net_weight_tons": mission.net_weight_tons,
        }

        self.session.delete(mission)
        self.session.commit()

        logger.info(f"Mission {mission_id} deleted by {user.id}")
        self._audit(background_tasks, user, mission_id,
                    AuditAction.DELETE, snapshot)
        return {"status": "deleted", "id": mission_id}
