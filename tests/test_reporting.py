import uuid
from datetime import date, datetime

import pytest

from app.db.schema import MissionStatus
from app.models.mission import MissionDetailsRead
from app.models.report import PeriodFilter, ReportFilter
from app.services import reporting


CLIENT_A = uuid.uuid4()
CLIENT_B = uuid.uuid4()
WOOD = uuid.uuid4()
GREEN = uuid.uuid4()


def row(mission_date, net_tons, material=WOOD, material_name="Wood", client=CLIENT_A,
        status=MissionStatus.VALIDATED, **extra) -> MissionDetailsRead:
    empty = 1000.0
    values = dict(
        id=uuid.uuid4(),
        client_id=client,
        driver_id=uuid.uuid4(),
        collection_site_id=uuid.uuid4(),
        deposit_site_id=uuid.uuid4(),
        vehicle_id=uuid.uuid4(),
        material_type_id=material,
        mission_date=mission_date,
        empty_weight_kg=empty,
        loaded_weight_kg=empty + net_tons * 1000,
        net_weight_tons=net_tons,
        status=status,
        version=1,
        created_at=datetime(2024, 1, 1),
        updated_at=datetime(2024, 1, 1),
        material_type_name=material_name,
        client_name="Client A" if client == CLIENT_A else "Client B",
    )
    values.update(extra)
    return MissionDetailsRead(**values)


TODAY = date(2024, 1, 15)


def test_week_filter_keeps_recent_and_drops_old():
    missions = [row(date(2024, 1, 10), 10.0), row(date(2023, 12, 1), 5.0)]

    report = reporting.build_report(
        missions, ReportFilter(period=PeriodFilter.WEEK), today=TODAY)

    assert report.stats.total_count == 1
    assert report.stats.total_weight == pytest.approx(10.0)
    assert report.missions[0].mission_date == date(2024, 1, 10)


def test_period_boundary_is_inclusive():
    assert reporting.resolve_period_start(PeriodFilter.WEEK, TODAY) == date(2024, 1, 8)

    kept = reporting.filter_missions(
        [row(date(2024, 1, 8), 1.0), row(date(2024, 1, 7), 1.0)],
        ReportFilter(period=PeriodFilter.WEEK), TODAY)

    assert [m.mission_date for m in kept] == [date(2024, 1, 8)]


def test_month_and_year_use_calendar_months():
    assert reporting.resolve_period_start(PeriodFilter.MONTH, date(2024, 3, 31)) == date(2024, 2, 29)
    assert reporting.resolve_period_start(PeriodFilter.MONTH, date(2024, 1, 15)) == date(2023, 12, 15)
    assert reporting.resolve_period_start(PeriodFilter.YEAR, date(2024, 2, 29)) == date(2023, 2, 28)
    assert reporting.resolve_period_start(PeriodFilter.ALL, TODAY) is None


def test_date_range_is_inclusive_on_both_ends():
    missions = [row(date(2024, 1, d), 1.0) for d in (1, 5, 10, 11)]
    filters = ReportFilter(start_date=date(2024, 1, 5), end_date=date(2024, 1, 10))

    kept = reporting.filter_missions(missions, filters, TODAY)

    assert sorted(m.mission_date.day for m in kept) == [5, 10]


def test_filters_combine_with_and():
    missions = [
        row(date(2024, 1, 10), 2.0, material=WOOD, client=CLIENT_A),
        row(date(2024, 1, 10), 8.0, material=GREEN, material_name="Green", client=CLIENT_A),
        row(date(2024, 1, 10), 9.0, material=GREEN, material_name="Green", client=CLIENT_B),
    ]
    filters = ReportFilter(client_id=CLIENT_A, material_type_id=GREEN, min_weight=5)

    kept = reporting.filter_missions(missions, filters, TODAY)

    assert len(kept) == 1
    assert kept[0].net_weight_tons == 8.0


def test_material_breakdown_keeps_first_occurrence_order():
    missions = [
        row(date(2024, 1, 12), 3.0, material=GREEN, material_name="Green"),
        row(date(2024, 1, 11), 2.0, material=WOOD, material_name="Wood"),
        row(date(2024, 1, 10), 1.5, material=GREEN, material_name="Green"),
    ]

    stats = reporting.compute_stats(missions)

    assert [g.name for g in stats.by_material] == ["Green", "Wood"]
    assert stats.by_material[0].count == 2
    assert stats.by_material[0].total_weight == pytest.approx(4.5)
    assert stats.total_weight == pytest.approx(6.5)


def test_display_limit_never_changes_statistics():
    missions = [row(date(2024, 1, (i % 28) + 1), 1.0) for i in range(45)]

    first = reporting.build_report(missions, ReportFilter(), display_limit=30, today=TODAY)
    second = reporting.build_report(missions, ReportFilter(), display_limit=first.next_limit, today=TODAY)

    assert len(first.missions) == 30
    assert first.has_more is True
    assert first.next_limit == 60
    assert len(second.missions) == 45
    assert second.has_more is False
    assert first.stats == second.stats
    assert first.stats.total_count == 45


def test_rows_are_sorted_most_recent_first():
    missions = [row(date(2024, 1, 3), 1.0), row(date(2024, 1, 9), 1.0), row(date(2024, 1, 5), 1.0)]

    report = reporting.build_report(missions, ReportFilter(), today=TODAY)

    assert [m.mission_date.day for m in report.missions] == [9, 5, 3]


def test_export_rows_ignore_display_limit():
    missions = [row(date(2024, 1, 1), 1.0) for _ in range(40)]

    assert len(reporting.export_rows(missions, ReportFilter(), TODAY)) == 40


def test_period_label():
    assert reporting.describe_period(ReportFilter(period=PeriodFilter.WEEK)) == "Last 7 days"
    assert reporting.describe_period(
        ReportFilter(start_date=date(2024, 1, 1), end_date=date(2024, 1, 31))) == "01/01/2024 - 31/01/2024"
