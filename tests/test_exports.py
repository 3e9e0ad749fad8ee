import uuid
from datetime import date, datetime

from app.db.schema import MissionStatus
from app.models.mission import MissionDetailsRead
from app.services import exports, reporting


def mission(order_number, net_tons=33.752, status=MissionStatus.VALIDATED) -> MissionDetailsRead:
    return MissionDetailsRead(
        id=uuid.uuid4(),
        client_id=uuid.uuid4(),
        driver_id=uuid.uuid4(),
        collection_site_id=uuid.uuid4(),
        deposit_site_id=uuid.uuid4(),
        vehicle_id=uuid.uuid4(),
        material_type_id=uuid.uuid4(),
        mission_date=date(2024, 1, 15),
        empty_weight_kg=2000,
        loaded_weight_kg=2000 + net_tons * 1000,
        net_weight_tons=net_tons,
        order_number=order_number,
        external_request_id="REQ-7",
        driver_comment='Gate "B"',
        status=status,
        version=1,
        created_at=datetime(2024, 1, 15),
        updated_at=datetime(2024, 1, 15),
        client_name="Scierie",
        driver_name="Jean",
        collection_site_name="Cour Nord",
        collection_site_address="12 route de Nantes",
        deposit_site_name="Plateforme",
        deposit_site_address="ZI Est",
        vehicle_name="Benne",
        vehicle_license_plate="AB-123-CD",
        material_type_name="Green waste",
    )


def test_client_csv_layout():
    data = exports.missions_to_csv([mission("PO-1")], exports.CLIENT_COLUMNS)

    assert data.startswith(b"\xef\xbb\xbf")
    lines = data.decode("utf-8-sig").splitlines()
    assert len(lines) == 2
    assert lines[0].startswith('"Order number";"Request reference";"Mission date"')

    fields = lines[1].split(";")
    assert fields[0] == '"PO-1"'
    assert fields[1] == '"REQ-7"'
    assert fields[2] == '"15/01/2024"'
    assert fields[11] == '"33.75"'
    # embedded quotes are doubled
    assert fields[12] == '"Gate ""B"""'


def test_csv_has_one_row_per_filtered_mission():
    rows = [mission(f"PO-{i}") for i in range(35)]

    data = exports.missions_to_csv(rows, exports.ACCOUNTING_COLUMNS)

    assert len(data.decode("utf-8-sig").splitlines()) == 36


def test_accounting_csv_ends_with_status_label():
    data = exports.missions_to_csv(
        [mission("PO-1", status=MissionStatus.COMPLETED)], exports.ACCOUNTING_COLUMNS)

    last_line = data.decode("utf-8-sig").splitlines()[1]
    assert last_line.endswith('"Completed"')


def test_format_helpers():
    assert exports.format_kg(2000.0) == "2000"
    assert exports.format_kg(2000.5) == "2000.5"
    assert exports.format_kg(1_250_000.0) == "1250000"
    assert exports.format_date(None) == ""
    assert exports.csv_filename("missions", date(2024, 1, 15)) == "missions_2024-01-15.csv"


def test_pdf_is_rendered():
    rows = [mission("PO-1"), mission("PO-2", net_tons=1.5)]
    header = exports.ReportHeader(
        party="Scierie", period_label="All time", report_date=date(2024, 1, 15))

    pdf = exports.missions_to_pdf(rows, reporting.compute_stats(rows), header)

    assert pdf.startswith(b"%PDF")


def test_pdf_accepts_the_client_column_set():
    rows = [mission("PO-1")]
    header = exports.ReportHeader(
        party="Scierie", period_label="All time", report_date=date(2024, 1, 15))

    pdf = exports.missions_to_pdf(
        rows, reporting.compute_stats(rows), header, columns=exports.CLIENT_COLUMNS)

    assert pdf.startswith(b"%PDF")
