from datetime import date
from typing import List, Optional

from fastapi import HTTPException, status
from sqlmodel import Session

from app.db.schema import Client, CollectionSite
from app.models.report import ReportFilter, TrackingRead
from . import exports, reporting
from .mission import MissionService
from .references.client import ClientService
from .references.site import SiteService


class TrackingService:
    """
    Read side of the public tracking page. Everything is scoped to the client
    the token resolves to, and only validated missions are shown.
    """

    def __init__(self, session: Session):
        self.session = session

    def resolve_client(self, token: str) -> Client:
        client = ClientService(self.session).lookup_by_token(token)

        if client is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Not found."
            )
        return client

    def _client_filter(self, client: Client, filters: ReportFilter) -> ReportFilter:
        # Clients cannot filter on driver, vehicle, status or weight
        return ReportFilter(
            period=filters.period,
            start_date=filters.start_date,
            end_date=filters.end_date,
            collection_site_id=filters.collection_site_id,
            deposit_site_id=filters.deposit_site_id,
            material_type_id=filters.material_type_id,
            client_id=client.id,
        )

    def _rows(self, client: Client):
        return MissionService(self.session).report_rows(
            client_id=client.id, only_validated=True)

    def get_report(
        self,
        token: str,
        filters: ReportFilter,
        display_limit: Optional[int] = None,
        today: Optional[date] = None
    ) -> TrackingRead:
        client = self.resolve_client(token)
        report = reporting.build_report(
            self._rows(client), self._client_filter(client, filters), display_limit, today)

        return TrackingRead(client_id=client.id, client_name=client.name, report=report)

    def list_sites(self, token: str) -> List[CollectionSite]:
        client = self.resolve_client(token)
        return SiteService(self.session).list_client_sites(client.id)

    def export_csv(self, token: str, filters: ReportFilter, today: Optional[date] = None) -> bytes:
        client = self.resolve_client(token)
        rows = reporting.export_rows(
            self._rows(client), self._client_filter(client, filters), today)
        return exports.missions_to_csv(rows, exports.CLIENT_COLUMNS)

    def export_pdf(self, token: str, filters: ReportFilter, today: Optional[date] = None) -> bytes:
        client = self.resolve_client(token)
        client_filters = self._client_filter(client, filters)
        rows = reporting.export_rows(self._rows(client), client_filters, today)

        header = exports.ReportHeader(
            party=client.name,
            period_label=reporting.describe_period(client_filters),
            report_date=today or date.today(),
        )
        return exports.missions_to_pdf(
            rows, reporting.compute_stats(rows), header, columns=exports.CLIENT_COLUMNS)
