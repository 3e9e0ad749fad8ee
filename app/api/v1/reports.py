from datetime import date
from typing import Optional
from uuid import UUID
from fastapi import APIRouter, Depends, Query

from app.core.dependencies import get_current_admin, get_report_service
from app.db.schema import MissionStatus, Profile
from app.models.report import MissionReport, MissionStats, PeriodFilter, ReportFilter
from app.services.exports import csv_filename
from app.services.report import ReportService
from app.utils.responses import csv_attachment, pdf_attachment


router = APIRouter()


def report_filter(
    period: PeriodFilter = Query(PeriodFilter.ALL),
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    client_id: Optional[UUID] = Query(None),
    driver_id: Optional[UUID] = Query(None),
    vehicle_id: Optional[UUID] = Query(None),
    collection_site_id: Optional[UUID] = Query(None),
    deposit_site_id: Optional[UUID] = Query(None),
    material_type_id: Optional[UUID] = Query(None),
    status: Optional[MissionStatus] = Query(None),
    min_weight: Optional[float] = Query(None, description="Minimum net weight (t)"),
    max_weight: Optional[float] = Query(None, description="Maximum net weight (t)"),
) -> ReportFilter:
    return ReportFilter(
        period=period,
        start_date=start_date,
        end_date=end_date,
        client_id=client_id,
        driver_id=driver_id,
        vehicle_id=vehicle_id,
        collection_site_id=collection_site_id,
        deposit_site_id=deposit_site_id,
        material_type_id=material_type_id,
        status=status,
        min_weight=min_weight,
        max_weight=max_weight,
    )


@router.get(
    "/missions",
    response_model=MissionReport,
    summary="Accounting view",
    description="Statistics over every filtered mission plus the first `limit` rows."
)
def mission_report(
    limit: Optional[int] = Query(None, ge=1, description="Display limit, grows by the page size"),
    filters: ReportFilter = Depends(report_filter),
    current_user: Profile = Depends(get_current_admin),
    service: ReportService = Depends(get_report_service)
):
    return service.mission_report(current_user, filters, display_limit=limit)


@router.get(
    "/statistics",
    response_model=MissionStats,
    summary="Statistics over validated missions",
)
def statistics(
    filters: ReportFilter = Depends(report_filter),
    current_user: Profile = Depends(get_current_admin),
    service: ReportService = Depends(get_report_service)
):
    return service.statistics(current_user, filters)


@router.get(
    "/missions/export.csv",
    summary="Accounting CSV export",
)
def export_csv(
    filters: ReportFilter = Depends(report_filter),
    current_user: Profile = Depends(get_current_admin),
    service: ReportService = Depends(get_report_service)
):
    return csv_attachment(
        service.export_csv(current_user, filters), csv_filename("accounting"))


@router.get(
    "/missions/export.pdf",
    summary="Accounting PDF report",
)
def export_pdf(
    filters: ReportFilter = Depends(report_filter),
    current_user: Profile = Depends(get_current_admin),
    service: ReportService = Depends(get_report_service)
):
    return pdf_attachment(
        service.export_pdf(current_user, filters),
        f"mission_report_{date.today().isoformat()}.pdf")
