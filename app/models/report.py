from uuid import UUID
from datetime import date
from enum import Enum
from typing import List, Optional
from sqlmodel import SQLModel, Field

from app.db.schema import MissionStatus
from app.models.mission import MissionDetailsRead


class PeriodFilter(str, Enum):
    ALL = "all"
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"


class ReportFilter(SQLModel):
    """
    Every criterion is optional; the active ones combine with AND.
    Dates are inclusive, end_date covers the whole day.
    """
    period: PeriodFilter = PeriodFilter.ALL
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    client_id: Optional[UUID] = None
    driver_id: Optional[UUID] = None
    vehicle_id: Optional[UUID] = None
    collection_site_id: Optional[UUID] = None
    deposit_site_id: Optional[UUID] = None
    material_type_id: Optional[UUID] = None
    status: Optional[MissionStatus] = None
    min_weight: Optional[float] = Field(
        default=None, description="Minimum net weight in tons")
    max_weight: Optional[float] = Field(
        default=None, description="Maximum net weight in tons")


class GroupStat(SQLModel):
    key: Optional[UUID] = None
    name: str
    count: int = 0
    total_weight: float = 0.0


class MissionStats(SQLModel):
    total_weight: float = Field(description="Sum of net weights in tons.")
    total_count: int
    by_material: List[GroupStat] = []
    by_client: List[GroupStat] = []
    by_driver: List[GroupStat] = []


class MissionReport(SQLModel):
    """
    Statistics over the whole filtered set plus the first `display_limit`
    rows for display.
    """
    stats: MissionStats
    missions: List[MissionDetailsRead]
    display_limit: int
    has_more: bool
    next_limit: int
    period_label: str


class TrackingRead(SQLModel):
    client_id: UUID
    client_name: str
    report: MissionReport
