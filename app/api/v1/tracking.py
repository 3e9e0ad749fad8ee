from datetime import date
from typing import List, Optional
from uuid import UUID
from fastapi import APIRouter, BackgroundTasks, Depends, Query, status

from app.core.dependencies import get_mission_request_service, get_tracking_service
from app.models.mission_request import MissionRequestCreate, MissionRequestDetailsRead
from app.models.report import PeriodFilter, ReportFilter, TrackingRead
from app.models.site import CollectionSiteRead
from app.services.exports import csv_filename
from app.services.mission_request import MissionRequestService
from app.services.tracking import TrackingService
from app.utils.responses import csv_attachment, pdf_attachment


router = APIRouter()


def tracking_filter(
    period: PeriodFilter = Query(PeriodFilter.ALL),
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    collection_site_id: Optional[UUID] = Query(None),
    deposit_site_id: Optional[UUID] = Query(None),
    material_type_id: Optional[UUID] = Query(None),
) -> ReportFilter:
    return ReportFilter(
        period=period,
        start_date=start_date,
        end_date=end_date,
        collection_site_id=collection_site_id,
        deposit_site_id=deposit_site_id,
        material_type_id=material_type_id,
    )


@router.get(
    "/{token}",
    response_model=TrackingRead,
    summary="Client tracking page",
    description="Validated missions of the client owning the token. No sign-in."
)
def tracking_report(
    token: str,
    limit: Optional[int] = Query(None, ge=1),
    filters: ReportFilter = Depends(tracking_filter),
    service: TrackingService = Depends(get_tracking_service)
):
    return service.get_report(token, filters, display_limit=limit)


@router.get(
    "/{token}/sites",
    response_model=List[CollectionSiteRead],
    summary="Sites the client can request a collection on",
)
def tracking_sites(
    token: str,
    service: TrackingService = Depends(get_tracking_service)
):
    return service.list_sites(token)


@router.get(
    "/{token}/requests",
    response_model=List[MissionRequestDetailsRead],
    summary="Requests already sent by the client",
)
def tracking_requests(
    token: str,
    service: TrackingService = Depends(get_tracking_service),
    requests: MissionRequestService = Depends(get_mission_request_service)
):
    client = service.resolve_client(token)
    return requests.list_client_requests(client.id)


@router.post(
    "/{token}/requests",
    response_model=MissionRequestDetailsRead,
    status_code=status.HTTP_201_CREATED,
    summary="Ask for a collection",
)
def create_request(
    token: str,
    payload: MissionRequestCreate,
    background_tasks: BackgroundTasks,
    service: MissionRequestService = Depends(get_mission_request_service)
):
    return service.create_request(token, payload, background_tasks)


@router.get(
    "/{token}/export.csv",
    summary="CSV export of the client's missions",
)
def tracking_export_csv(
    token: str,
    filters: ReportFilter = Depends(tracking_filter),
    service: TrackingService = Depends(get_tracking_service)
):
    return csv_attachment(service.export_csv(token, filters), csv_filename("missions"))


@router.get(
    "/{token}/export.pdf",
    summary="PDF report of the client's missions",
)
def tracking_export_pdf(
    token: str,
    filters: ReportFilter = Depends(tracking_filter),
    service: TrackingService = Depends(get_tracking_service)
):
    return pdf_attachment(
        service.export_pdf(token, filters),
        f"mission_report_{date.today().isoformat()}.pdf")
