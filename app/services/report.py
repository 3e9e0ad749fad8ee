from datetime import date
from typing import Optional

from sqlmodel import Session

from app.db.schema import MissionStatus, Profile
from app.models.report import MissionReport, MissionStats, ReportFilter
from . import exports, reporting
from .mission import MissionService


class ReportService:
    """Admin accounting view over every mission, with CSV and PDF exports."""

    def __init__(self, session: Session):
        self.session = session
        self.missions = MissionService(session)

    def mission_report(
        self,
        user: Profile,
        filters: ReportFilter,
        display_limit: Optional[int] = None,
        today: Optional[date] = None
    ) -> MissionReport:
        rows = self.missions.report_rows()
        return reporting.build_report(rows, filters, display_limit, today)

    def statistics(
        self,
        user: Profile,
        filters: ReportFilter,
        today: Optional[date] = None
    ) -> MissionStats:
        """Only validated missions count towards the statistics."""
        rows = self.missions.report_rows(only_validated=True)
        filtered = reporting.filter_missions(rows, filters, today)
        return reporting.compute_stats(filtered)

    def export_csv(
        self,
        user: Profile,
        filters: ReportFilter,
        today: Optional[date] = None
    ) -> bytes:
        rows = reporting.export_rows(self.missions.report_rows(), filters, today)
        return exports.missions_to_csv(rows, exports.ACCOUNTING_COLUMNS)

    def export_pdf(
        self,
        user: Profile,
        filters: ReportFilter,
        today: Optional[date] = None
    ) -> bytes:
        rows = reporting.export_rows(self.missions.report_rows(), filters, today)
        header = exports.ReportHeader(
            party="All clients",
            period_label=reporting.describe_period(filters),
            report_date=today or date.today(),
        )
        return exports.missions_to_pdf(rows, reporting.compute_stats(rows), header)
