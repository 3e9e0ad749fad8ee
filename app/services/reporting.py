"""
Aggregation & reporting over already-fetched missions.

Everything here is a pure function of (missions, filter, today). The
tracking page, the admin accounting view and the exports all go through
build_report() so they agree on which rows are counted.
"""
import calendar
from datetime import date, datetime, timedelta
from typing import Dict, Iterable, List, Optional, Sequence, Tuple
from uuid import UUID

from app.core.config import settings
from app.models.mission import MissionDetailsRead
from app.models.report import (
    GroupStat, MissionReport, MissionStats, PeriodFilter, ReportFilter
)


PERIOD_LABELS = {
    PeriodFilter.ALL: "All time",
    PeriodFilter.WEEK: "Last 7 days",
    PeriodFilter.MONTH: "Last month",
    PeriodFilter.YEAR: "Last year",
}


def _as_date(value) -> date:
    # Time of day is ignored on both sides of every comparison
    if isinstance(value, datetime):
        return value.date()
    return value


def _shift_months(day: date, months: int) -> date:
    """Moves a date by whole calendar months, clamping to the month's last day (Mar 31 - 1 month = Feb 28/29)."""
    month_index = day.year * 12 + (day.month - 1) + months
    year, month = divmod(month_index, 12)
    month += 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(day.day, last_day))


def resolve_period_start(period: PeriodFilter, today: Optional[date] = None) -> Optional[date]:
    """
    First day (inclusive) covered by a period filter, None for 'all'.

    Example: week on 2024-01-15 -> 2024-01-08.
    """
    today = _as_date(today or date.today())

    if period == PeriodFilter.WEEK:
        return today - timedelta(days=7)
    if period == PeriodFilter.MONTH:
        return _shift_months(today, -1)
    if period == PeriodFilter.YEAR:
        return _shift_months(today, -12)
    return None


def describe_period(filters: ReportFilter) -> str:
    """Label printed on report headers."""
    if filters.start_date or filters.end_date:
        start = filters.start_date.strftime("%d/%m/%Y") if filters.start_date else "..."
        end = filters.end_date.strftime("%d/%m/%Y") if filters.end_date else "..."
        return f"{start} - {end}"
    return PERIOD_LABELS[filters.period]


def matches(mission: MissionDetailsRead, filters: ReportFilter, period_start: Optional[date]) -> bool:
    mission_day = _as_date(mission.mission_date)

    if period_start and mission_day < period_start:
        return False
    if filters.start_date and mission_day < filters.start_date:
        return False
    if filters.end_date and mission_day > filters.end_date:
        return False

    exact = (
        ("client_id", filters.client_id),
        ("driver_id", filters.driver_id),
        ("vehicle_id", filters.vehicle_id),
        ("collection_site_id", filters.collection_site_id),
        ("deposit_site_id", filters.deposit_site_id),
        ("material_type_id", filters.material_type_id),
        ("status", filters.status),
    )
    for attribute, expected in exact:
        if expected is not None and getattr(mission, attribute) != expected:
            return False

    if filters.min_weight is not None and mission.net_weight_tons < filters.min_weight:
        return False
    if filters.max_weight is not None and mission.net_weight_tons > filters.max_weight:
        return False
    return True


def filter_missions(
    missions: Iterable[MissionDetailsRead],
    filters: ReportFilter,
    today: Optional[date] = None
) -> List[MissionDetailsRead]:
    period_start = resolve_period_start(filters.period, today)
    return [m for m in missions if matches(m, filters, period_start)]


def sort_by_mission_date(missions: Iterable[MissionDetailsRead]) -> List[MissionDetailsRead]:
    """Most recent first. Stable, so same-day missions keep their fetch order."""
    return sorted(missions, key=lambda m: _as_date(m.mission_date), reverse=True)


def _group(
    missions: Sequence[MissionDetailsRead],
    key_attr: str,
    name_attr: str
) -> List[GroupStat]:
    # dict keeps the order of first occurrence, groups are not sorted
    groups: Dict[Optional[UUID], GroupStat] = {}
    for mission in missions:
        key = getattr(mission, key_attr)
        if key not in groups:
            groups[key] = GroupStat(
                key=key, name=getattr(mission, name_attr) or "Unspecified")
        groups[key].count += 1
        groups[key].total_weight += mission.net_weight_tons
    return list(groups.values())


def compute_stats(missions: Sequence[MissionDetailsRead]) -> MissionStats:
    return MissionStats(
        total_weight=sum(m.net_weight_tons for m in missions),
        total_count=len(missions),
        by_material=_group(missions, "material_type_id", "material_type_name"),
        by_client=_group(missions, "client_id", "client_name"),
        by_driver=_group(missions, "driver_id", "driver_name"),
    )


def display_window(
    missions: Sequence[MissionDetailsRead],
    display_limit: int
) -> Tuple[List[MissionDetailsRead], bool]:
    """Rows to render and whether more are available."""
    return list(missions[:display_limit]), len(missions) > display_limit


def build_report(
    missions: Iterable[MissionDetailsRead],
    filters: ReportFilter,
    display_limit: Optional[int] = None,
    today: Optional[date] = None
) -> MissionReport:
    """
    Filters, computes statistics over the full filtered set, then cuts the
    display window. The display limit never changes the statistics.
    """
    page_size = settings.report_page_size
    display_limit = display_limit or page_size

    filtered = sort_by_mission_date(filter_missions(missions, filters, today))
    stats = compute_stats(filtered)
    rows, has_more = display_window(filtered, display_limit)

    return MissionReport(
        stats=stats,
        missions=rows,
        display_limit=display_limit,
        has_more=has_more,
        next_limit=display_limit + page_size,
        period_label=describe_period(filters),
    )


def export_rows(
    missions: Iterable[MissionDetailsRead],
    filters: ReportFilter,
    today: Optional[date] = None
) -> List[MissionDetailsRead]:
    """Every filtered mission, sorted, without any display limit."""
    return sort_by_mission_date(filter_missions(missions, filters, today))
