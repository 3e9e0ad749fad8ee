import uuid
from datetime import datetime
from typing import List, Optional

from fastapi import HTTPException, BackgroundTasks, status
from loguru import logger
from sqlalchemy.orm import selectinload
from sqlmodel import Session, select, col, func

from app.core.audit import _perform_audit_log
from app.db.schema import (
    AuditAction, CollectionSite, MissionRequest, MissionRequestStatus,
    Profile, ProfileRole,
)
from app.models.mission import MissionDetailsRead, MissionFromRequest
from app.models.mission_request import (
    MissionRequestCreate, MissionRequestDetailsRead, MissionSeed
)
from .mission import MissionService
from .references.client import ClientService


def to_request_details(request: MissionRequest) -> MissionRequestDetailsRead:
    return MissionRequestDetailsRead(
        **request.model_dump(),
        client_name=request.client.name if request.client else "",
        client_email=request.client.email if request.client else "",
        collection_site_name=request.collection_site.name if request.collection_site else "",
        collection_site_address=request.collection_site.address if request.collection_site else "",
    )


class MissionRequestService:
    """
    Collection requests sent by clients from their tracking page, and their
    path to a mission: pending -> viewed -> converted.
    """

    def __init__(self, session: Session):
        self.session = session

    def _get(self, request_id: uuid.UUID) -> MissionRequest:
        request = self.session.get(MissionRequest, request_id)

        if not request:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Mission request not found."
            )
        return request

    # ==========================================================================
    # PUBLIC (TRACKING TOKEN)
    # ==========================================================================

    def create_request(
        self,
        token: str,
        data: MissionRequestCreate,
        background_tasks: Optional[BackgroundTasks] = None
    ) -> MissionRequestDetailsRead:
        """
        Raises:
            HTTPException(404): Unknown, revoked or inactive token. The
                message does not say which.
            HTTPException(422): Site of another client or inactive site.
        """
        client = ClientService(self.session).lookup_by_token(token)

        if client is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Not found."
            )

        site = self.session.get(CollectionSite, data.collection_site_id)
        if site is None or site.client_id != client.id or not site.is_active:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail="Please choose one of your active collection sites."
            )

        request = MissionRequest(
            client_id=client.id,
            collection_site_id=site.id,
            estimated_weight_tons=data.estimated_weight_tons,
            external_request_id=data.external_request_id,
            client_request_date=data.client_request_date,
            status=MissionRequestStatus.PENDING,
        )

        self.session.add(request)
        self.session.commit()
        self.session.refresh(request)

        logger.info(
            f"Mission request {request.id} submitted by client {client.id} ({request.estimated_weight_tons} t)")

        if background_tasks is not None:
            background_tasks.add_task(
                _perform_audit_log,
                user_id=None,
                entity_type="MissionRequest",
                entity_id=request.id,
                action=AuditAction.CREATE,
                changes=data.model_dump(mode="json")
            )
        return to_request_details(request)

    def list_client_requests(self, client_id: uuid.UUID) -> List[MissionRequestDetailsRead]:
        """A client's own requests, shown under the request form."""
        query = (
            select(MissionRequest)
            .options(selectinload(MissionRequest.client), selectinload(MissionRequest.collection_site))
            .where(MissionRequest.client_id == client_id)
            .order_by(col(MissionRequest.created_at).desc())
        )
        return [to_request_details(r) for r in self.session.exec(query).all()]

    # ==========================================================================
    # STAFF
    # ==========================================================================

    def list_requests(
        self,
        user: Profile,
        status_filter: Optional[MissionRequestStatus] = None
    ) -> List[MissionRequestDetailsRead]:
        """Admins and drivers both see every request, newest first."""
        query = select(MissionRequest).options(
            selectinload(MissionRequest.client),
            selectinload(MissionRequest.collection_site)
        )

        if status_filter:
            query = query.where(MissionRequest.status == status_filter)

        query = query.order_by(col(MissionRequest.created_at).desc())
        return [to_request_details(r) for r in self.session.exec(query).all()]

    def count_pending(self) -> int:
        return self.session.exec(
            select(func.count(MissionRequest.id))
            .where(MissionRequest.status == MissionRequestStatus.PENDING)
        ).one()

    def mark_viewed(self, user: Profile, request_id: uuid.UUID) -> MissionRequestDetailsRead:
        """
        Stamps the viewer's role column. Calling it again moves the stamp.
        A converted request stays converted.
        """
        request = self._get(request_id)
        now = datetime.utcnow()

        if user.role == ProfileRole.SUPER_ADMIN:
            request.viewed_by_admin_at = now
        else:
            request.viewed_by_driver_at = now

        if request.status != MissionRequestStatus.CONVERTED:
            request.status = MissionRequestStatus.VIEWED

        self.session.add(request)
        self.session.commit()
        self.session.refresh(request)
        return to_request_details(request)

    def get_mission_seed(self, user: Profile, request_id: uuid.UUID) -> MissionSeed:
        """Values pre-filled in the mission form when converting a request."""
        request = self._get(request_id)

        return MissionSeed(
            mission_request_id=request.id,
            client_id=request.client_id,
            collection_site_id=request.collection_site_id,
            estimated_weight_tons=request.estimated_weight_tons,
            external_request_id=request.external_request_id,
            client_request_date=request.client_request_date,
        )

    def convert_to_mission(
        self,
        user: Profile,
        request_id: uuid.UUID,
        data: MissionFromRequest,
        background_tasks: Optional[BackgroundTasks] = None
    ) -> MissionDetailsRead:
        return MissionService(self.session).create_from_request(
            user, request_id, data, background_tasks)

    def delete_request(
        self,
        user: Profile,
        request_id: uuid.UUID,
        confirm: bool = False,
        background_tasks: Optional[BackgroundTasks] = None
    ):
        """A mission converted from the request keeps its reference as plain data."""
        if not confirm:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Deletion must be confirmed with confirm=true."
            )

        request = self._get(request_id)
        snapshot = {
            "client_id": request.client_id,
            "status": request.status,
            "mission_id": request.mission_id,
        }

        self.session.delete(request)
        self.session.commit()

        logger.info(f"Mission request {request_id} deleted by {user.id}")

        if background_tasks is not None:
            background_tasks.add_task(
                _perform_audit_log,
                user_id=user.id,
                entity_type="MissionRequest",
                entity_id=request_id,
                action=AuditAction.DELETE,
                changes=snapshot
            )
        return {"status": "deleted", "id": request_id}
