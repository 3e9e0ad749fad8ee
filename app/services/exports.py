"""
CSV and PDF renderings of a filtered mission list.

Both take the rows returned by reporting.export_rows(), so an export always
contains every filtered mission regardless of the display limit.
"""
import csv
import io
from dataclasses import dataclass
from datetime import date, datetime
from typing import Callable, List, Optional, Sequence, Tuple

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.platypus import (
    SimpleDocTemplate, Paragraph, Spacer, Table, TableStyle,
)

from app.core.config import settings
from app.db.schema import MissionStatus
from app.models.mission import MissionDetailsRead
from app.models.report import MissionStats


Column = Tuple[str, Callable[[MissionDetailsRead], object]]

STATUS_LABELS = {
    MissionStatus.DRAFT: "Draft",
    MissionStatus.COMPLETED: "Completed",
    MissionStatus.VALIDATED: "Validated",
}


def format_date(value: Optional[date]) -> str:
    return value.strftime("%d/%m/%Y") if value else ""


def format_tons(value: float) -> str:
    return f"{value:.2f}"


def format_kg(value: float) -> str:
    # 2000.0 -> "2000", 2000.5 -> "2000.5"
    return f"{value:.0f}" if value == int(value) else str(value)


NET_WEIGHT = "Net weight (t)"

# Order is part of the export contract.
CLIENT_COLUMNS: List[Column] = [
    ("Order number", lambda m: m.order_number or ""),
    ("Request reference", lambda m: m.external_request_id or ""),
    ("Mission date", lambda m: format_date(m.mission_date)),
    ("Requested date", lambda m: format_date(m.client_request_date)),
    ("Collection site", lambda m: m.collection_site_name),
    ("Collection address", lambda m: m.collection_site_address),
    ("Deposit site", lambda m: m.deposit_site_name),
    ("Deposit address", lambda m: m.deposit_site_address),
    ("Material", lambda m: m.material_type_name),
    ("Empty weight (kg)", lambda m: format_kg(m.empty_weight_kg)),
    ("Loaded weight (kg)", lambda m: format_kg(m.loaded_weight_kg)),
    (NET_WEIGHT, lambda m: format_tons(m.net_weight_tons)),
    ("Comment", lambda m: m.driver_comment or ""),
]

ACCOUNTING_COLUMNS: List[Column] = [
    ("Order number", lambda m: m.order_number or ""),
    ("Date", lambda m: format_date(m.mission_date)),
    ("Client", lambda m: m.client_name),
    ("Driver", lambda m: m.driver_name),
    ("Collection site", lambda m: m.collection_site_name),
    ("Deposit site", lambda m: m.deposit_site_name),
    ("Vehicle", lambda m: m.vehicle_license_plate),
    ("Material", lambda m: m.material_type_name),
    ("Empty weight (kg)", lambda m: format_kg(m.empty_weight_kg)),
    ("Loaded weight (kg)", lambda m: format_kg(m.loaded_weight_kg)),
    (NET_WEIGHT, lambda m: format_tons(m.net_weight_tons)),
    ("Comment", lambda m: m.driver_comment or ""),
    ("Status", lambda m: STATUS_LABELS.get(m.status, str(m.status))),
]

# Narrower set used for the accounting PDF table.
PDF_COLUMNS: List[Column] = [
    ("Order", lambda m: m.order_number or "-"),
    ("Date", lambda m: format_date(m.mission_date)),
    ("Client", lambda m: m.client_name or "-"),
    ("Driver", lambda m: m.driver_name or "-"),
    ("Collection site", lambda m: m.collection_site_name or "-"),
    ("Deposit site", lambda m: m.deposit_site_name or "-"),
    ("Vehicle", lambda m: m.vehicle_license_plate or "-"),
    ("Material", lambda m: m.material_type_name or "-"),
    (NET_WEIGHT, lambda m: format_tons(m.net_weight_tons)),
]


def missions_to_csv(rows: Sequence[MissionDetailsRead], columns: List[Column]) -> bytes:
    """
    UTF-8 with a leading BOM (so spreadsheet tools detect the encoding),
    semicolon separated, every field quoted.
    """
    buffer = io.StringIO()
    writer = csv.writer(
        buffer, delimiter=";", quoting=csv.QUOTE_ALL, lineterminator="\n")

    writer.writerow([header for header, _ in columns])
    for mission in rows:
        writer.writerow([getter(mission) for _, getter in columns])

    return buffer.getvalue().encode("utf-8-sig")


def csv_filename(prefix: str, today: Optional[date] = None) -> str:
    return f"{prefix}_{(today or date.today()).isoformat()}.csv"


@dataclass
class ReportHeader:
    party: str
    period_label: str
    report_date: date


def missions_to_pdf(
    rows: Sequence[MissionDetailsRead],
    stats: MissionStats,
    header: ReportHeader,
    columns: List[Column] = PDF_COLUMNS,
) -> bytes:
    """
    Printable mission report: identity block, summary, one line per mission
    and a TOTAL footer row whose total sits under the net weight column.
    """
    buffer = io.BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=landscape(A4),
        rightMargin=30,
        leftMargin=30,
        topMargin=30,
        bottomMargin=30,
        title="Mission report",
    )

    styles = getSampleStyleSheet()
    title_style = ParagraphStyle(
        "ReportTitle",
        parent=styles["Heading1"],
        textColor=colors.HexColor("#548235"),
        alignment=1,
    )
    small = ParagraphStyle("Small", parent=styles["Normal"], fontSize=9)

    story = []
    company = settings.company_name
    if settings.company_address:
        company = f"{company}<br/>{settings.company_address}"
    story.append(Paragraph(company, small))
    story.append(Spacer(1, 10))
    story.append(Paragraph("Mission report", title_style))
    story.append(Spacer(1, 10))

    summary = [
        ["Party:", header.party, "Report date:", format_date(header.report_date)],
        ["Period:", header.period_label, "Missions:", str(stats.total_count)],
        ["", "", "Total weight:", f"{format_tons(stats.total_weight)} T"],
    ]
    story.append(Table(
        summary,
        colWidths=[70, 300, 90, 200],
        style=TableStyle([
            ("FONTNAME", (0, 0), (0, -1), "Helvetica-Bold"),
            ("FONTNAME", (2, 0), (2, -1), "Helvetica-Bold"),
            ("FONTSIZE", (0, 0), (-1, -1), 9),
            ("BACKGROUND", (0, 0), (-1, -1), colors.HexColor("#f5f5f5")),
        ])
    ))
    story.append(Spacer(1, 15))

    titles = [title for title, _ in columns]
    total_at = titles.index(NET_WEIGHT)

    table_data = [titles]
    for mission in rows:
        table_data.append([str(getter(mission)) for _, getter in columns])

    total_row = [""] * len(columns)
    total_row[0] = "TOTAL"
    total_row[total_at] = f"{format_tons(stats.total_weight)} T"
    table_data.append(total_row)

    story.append(Table(
        table_data,
        repeatRows=1,
        style=TableStyle([
            ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor("#548235")),
            ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
            ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
            ("FONTSIZE", (0, 0), (-1, -1), 8),
            ("LINEBELOW", (0, 1), (-1, -2), 0.5, colors.HexColor("#dddddd")),
            ("BACKGROUND", (0, -1), (-1, -1), colors.HexColor("#f5f5f5")),
            ("FONTNAME", (0, -1), (-1, -1), "Helvetica-Bold"),
            ("LINEABOVE", (0, -1), (-1, -1), 1.5, colors.HexColor("#548235")),
            ("SPAN", (0, -1), (total_at - 1, -1)),
            ("ALIGN", (0, -1), (total_at - 1, -1), "RIGHT"),
        ])
    ))

    story.append(Spacer(1, 20))
    story.append(Paragraph(
        f"Generated on {datetime.now().strftime('%d/%m/%Y %H:%M')} - {settings.company_name}", small))

    doc.build(story)
    return buffer.getvalue()
