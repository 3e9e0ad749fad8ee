import uuid
from datetime import datetime
from typing import List, Optional
from fastapi import HTTPException, status
from sqlmodel import Session, select, col, or_
from loguru import logger

from app.db.schema import (
    Profile, ProfileRole, Client, TrackingToken, Mission, MissionRequest
)
from app.models.client import ClientCreate, ClientUpdate, TrackingLinkRead
from app.utils.qr import tracking_url, generate_tracking_qr


def new_tracking_token() -> str:
    return str(uuid.uuid4())


class ClientService:
    """
    Clients and their tracking tokens.

    A client holds one current token (Client.tracking_token) and the history of
    every token issued (TrackingToken). Lookup accepts any non-revoked token
    from that history.
    """

    def __init__(self, session: Session):
        self.session = session

    def get_client(self, client_id: uuid.UUID) -> Client:
        client = self.session.get(Client, client_id)

        if not client:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Client not found."
            )
        return client

    def create_client(self, user: Profile, data: ClientCreate) -> Client:
        token = new_tracking_token()

        client = Client(**data.model_dump(), tracking_token=token)
        client.tokens.append(TrackingToken(token=token))

        self.session.add(client)
        self.session.commit()
        self.session.refresh(client)

        logger.info(f"Client {client.id} created by {user.id}")
        return client

    def list_clients(
        self,
        user: Profile,
        search_query: Optional[str] = None,
        include_inactive: bool = False
    ) -> List[Client]:
        """Search matches name, email or SIRET, case-insensitively."""
        query = select(Client)

        if user.role != ProfileRole.SUPER_ADMIN or not include_inactive:
            query = query.where(Client.is_active == True)

        if search_query:
            pattern = f"%{search_query}%"
            query = query.where(or_(
                col(Client.name).ilike(pattern),
                col(Client.email).ilike(pattern),
                col(Client.siret).ilike(pattern)
            ))

        return self.session.exec(query.order_by(Client.name)).all()

    def update_client(self, user: Profile, client_id: uuid.UUID, data: ClientUpdate) -> Client:
        client = self.get_client(client_id)

        for key, value in data.model_dump(exclude_unset=True).items():
            setattr(client, key, value)

        self.session.add(client)
        self.session.commit()
        self.session.refresh(client)
        return client

    def delete_client(self, user: Profile, client_id: uuid.UUID):
        client = self.get_client(client_id)

        in_use = self.session.exec(
            select(Mission.id).where(Mission.client_id == client_id).limit(1)
        ).first() or self.session.exec(
            select(MissionRequest.id).where(
                MissionRequest.client_id == client_id).limit(1)
        ).first()

        if in_use:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Cannot delete this client because missions or requests reference it. Deactivate it instead."
            )

        # Collection sites and token history go with the client (cascade)
        self.session.delete(client)
        self.session.commit()

        logger.info(f"Client {client_id} deleted by {user.id}")
        return {"status": "deleted", "id": client_id}

    # ==========================================================================
    # TRACKING TOKENS
    # ==========================================================================

    def lookup_by_token(self, token: str) -> Optional[Client]:
        """
        Resolves a tracking token to its client.
        Unknown, revoked and inactive all give None, callers answer a plain 404.
        """
        if not token:
            return None

        client = self.session.exec(
            select(Client)
            .join(TrackingToken, TrackingToken.client_id == Client.id)
            .where(TrackingToken.token == token)
            .where(TrackingToken.revoked_at == None)
            .where(Client.is_active == True)
        ).first()

        return client

    def rotate_tracking_token(
        self,
        user: Profile,
        client_id: uuid.UUID,
        revoke_previous: bool = False
    ) -> Client:
        """
        Issues a new current token. Previous tokens keep resolving unless
        revoke_previous is set, so links already shared stay usable.
        """
        client = self.get_client(client_id)

        if revoke_previous:
            now = datetime.utcnow()
            for issued in client.tokens:
                if issued.revoked_at is None:
                    issued.revoked_at = now
                    self.session.add(issued)

        token = new_tracking_token()
        client.tracking_token = token
        self.session.add(TrackingToken(client_id=client.id, token=token))
        self.session.add(client)
        self.session.commit()
        self.session.refresh(client)

        logger.info(
            f"Tracking token rotated for client {client_id} by {user.id} (revoke_previous={revoke_previous})")
        return client

    def get_tracking_link(self, client_id: uuid.UUID, with_qr: bool = False) -> TrackingLinkRead:
        client = self.get_client(client_id)

        return TrackingLinkRead(
            tracking_token=client.tracking_token,
            tracking_url=tracking_url(client.tracking_token),
            qr_code_url=generate_tracking_qr(
                client.tracking_token) if with_qr else None
        )
