from typing import List, Optional
from uuid import UUID
from fastapi import HTTPException, status
from sqlmodel import Session, select, col
from loguru import logger

from app.db.schema import (
    Profile, ProfileRole, Client, CollectionSite, DepositSite, Mission, MissionRequest
)
from app.models.site import (
    CollectionSiteCreate, CollectionSiteUpdate, DepositSiteCreate, DepositSiteUpdate
)


class SiteService:
    """
    Collection sites (owned by one client) and deposit sites (global).
    Both kinds are referenced by missions, so deletion checks usage first.
    """

    def __init__(self, session: Session):
        self.session = session

    def _ensure_client(self, client_id: UUID):
        if not self.session.get(Client, client_id):
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Client not found."
            )

    # ==========================================================================
    # COLLECTION SITES
    # ==========================================================================

    def get_collection_site(self, site_id: UUID) -> CollectionSite:
        site = self.session.get(CollectionSite, site_id)

        if not site:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Collection site not found."
            )
        return site

    def create_collection_site(self, user: Profile, data: CollectionSiteCreate) -> CollectionSite:
        self._ensure_client(data.client_id)

        site = CollectionSite(**data.model_dump())
        self.session.add(site)
        self.session.commit()
        self.session.refresh(site)

        logger.info(
            f"Collection site {site.id} created for client {site.client_id} by {user.id}")
        return site

    def list_collection_sites(
        self,
        user: Profile,
        client_id: Optional[UUID] = None,
        search_query: Optional[str] = None,
        include_inactive: bool = False
    ) -> List[CollectionSite]:
        query = select(CollectionSite)

        if user.role != ProfileRole.SUPER_ADMIN or not include_inactive:
            query = query.where(CollectionSite.is_active == True)

        if client_id:
            query = query.where(CollectionSite.client_id == client_id)

        if search_query:
            query = query.where(col(CollectionSite.name).ilike(f"%{search_query}%"))

        return self.session.exec(query.order_by(CollectionSite.name)).all()

    def list_client_sites(self, client_id: UUID) -> List[CollectionSite]:
        """Active sites of one client, offered on the tracking page request form."""
        return self.session.exec(
            select(CollectionSite)
            .where(CollectionSite.client_id == client_id)
            .where(CollectionSite.is_active == True)
            .order_by(CollectionSite.name)
        ).all()

    def update_collection_site(self, user: Profile, site_id: UUID, data: CollectionSiteUpdate) -> CollectionSite:
        site = self.get_collection_site(site_id)

        if data.client_id is not None and data.client_id != site.client_id:
            self._ensure_client(data.client_id)

        for key, value in data.model_dump(exclude_unset=True).items():
            setattr(site, key, value)

        self.session.add(site)
        self.session.commit()
        self.session.refresh(site)
        return site

    def delete_collection_site(self, user: Profile, site_id: UUID):
        site = self.get_collection_site(site_id)

        in_use = self.session.exec(
            select(Mission.id).where(Mission.collection_site_id == site_id).limit(1)
        ).first() or self.session.exec(
            select(MissionRequest.id).where(
                MissionRequest.collection_site_id == site_id).limit(1)
        ).first()

        if in_use:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Cannot delete this site because missions or requests use it. Deactivate it instead."
            )

        self.session.delete(site)
        self.session.commit()

        logger.info(f"Collection site {site_id} deleted by {user.id}")
        return {"status": "deleted", "id": site_id}

    # ==========================================================================
    # DEPOSIT SITES
    # ==========================================================================

    def get_deposit_site(self, site_id: UUID) -> DepositSite:
        site = self.session.get(DepositSite, site_id)

        if not site:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Deposit site not found."
            )
        return site

    def create_deposit_site(self, user: Profile, data: DepositSiteCreate) -> DepositSite:
        site = DepositSite(**data.model_dump())
        self.session.add(site)
        self.session.commit()
        self.session.refresh(site)

        logger.info(f"Deposit site {site.id} created by {user.id}")
        return site

    def list_deposit_sites(
        self,
        user: Profile,
        search_query: Optional[str] = None,
        include_inactive: bool = False
    ) -> List[DepositSite]:
        query = select(DepositSite)

        if user.role != ProfileRole.SUPER_ADMIN or not include_inactive:
            query = query.where(DepositSite.is_active == True)

        if search_query:
            query = query.where(col(DepositSite.name).ilike(f"%{search_query}%"))

        return self.session.exec(query.order_by(DepositSite.name)).all()

    def update_deposit_site(self, user: Profile, site_id: UUID, data: DepositSiteUpdate) -> DepositSite:
        site = self.get_deposit_site(site_id)

        for key, value in data.model_dump(exclude_unset=True).items():
            setattr(site, key, value)

        self.session.add(site)
        self.session.commit()
        self.session.refresh(site)
        return site

    def delete_deposit_site(self, user: Profile, site_id: UUID):
        site = self.get_deposit_site(site_id)

        in_use = self.session.exec(
            select(Mission.id).where(Mission.deposit_site_id == site_id).limit(1)
        ).first()

        if in_use:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Cannot delete this site because missions use it. Deactivate it instead."
            )

        self.session.delete(site)
        self.session.commit()

        logger.info(f"Deposit site {site_id} deleted by {user.id}")
        return {"status": "deleted", "id": site_id}
