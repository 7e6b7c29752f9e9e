"""
Field Reports API — Spreadsheet and PDF rendering of reports

Both artifacts are built fully in memory per request.
"""
import io
from datetime import datetime
from typing import Iterable

from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill
from openpyxl.utils import get_column_letter
from reportlab.lib.pagesizes import letter
from reportlab.pdfgen import canvas

from app.models.report import Report

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
PDF_MEDIA_TYPE = "application/pdf"

# (header, width)
XLSX_COLUMNS = [
    ("Date", 15),
    ("User Name", 20),
    ("User Email", 25),
    ("School", 25),
    ("Address", 30),
    ("Students Reached", 15),
    ("Teachers Reached", 15),
    ("Milk Used (Units)", 15),
    ("Bread Used (Units)", 15),
    ("Images Count", 12),
    ("Videos Count", 12),
]


def format_date(value: datetime | None) -> str:
    return value.strftime("%Y-%m-%d") if value else ""


def _owner(report: Report) -> tuple[str, str]:
    if report.user is None:
        return "Unknown", "Unknown"
    return report.user.name, report.user.email


def build_reports_xlsx(reports: Iterable[Report]) -> bytes:
    wb = Workbook()
    ws = wb.active
    ws.title = "Reports"

    ws.append([header for header, _ in XLSX_COLUMNS])
    header_font = Font(bold=True)
    header_fill = PatternFill(start_color="E0E0E0", end_color="E0E0E0", fill_type="solid")
    for col, (_, width) in enumerate(XLSX_COLUMNS, 1):
        cell = ws.cell(row=1, column=col)
        cell.font = header_font
        cell.fill = header_fill
        ws.column_dimensions[get_column_letter(col)].width = width

    for report in reports:
        name, email = _owner(report)
        ws.append([
            format_date(report.date),
            name,
            email,
            report.school,
            report.address,
            report.students_reached,
            report.teachers_reached,
            report.milk_used,
            report.bread_used,
            len(report.images or []),
            len(report.videos or []),
        ])

    out = io.BytesIO()
    wb.save(out)
    return out.getvalue()


def _text(value) -> str:
    return "-" if value is None else str(value)


def build_report_pdf(report: Report) -> bytes:
    mem = io.BytesIO()
    c = canvas.Canvas(mem, pagesize=letter)
    width, height = letter
    margin = 72
    y = height - margin

    c.setFont("Helvetica-Bold", 20)
    c.drawCentredString(width / 2, y, "Report Details")
    y -= 40

    name, email = _owner(report)
    sections = [
        [
            f"School: {_text(report.school)}",
            f"Address: {_text(report.address)}",
            f"Date: {format_date(report.date)}",
            f"Reported by: {name} ({email})",
        ],
        [
            f"Students Reached: {_text(report.students_reached)}",
            f"Teachers Reached: {_text(report.teachers_reached)}",
            f"Milk Used: {_text(report.milk_used)} units",
            f"Bread Used: {_text(report.bread_used)} units",
        ],
    ]
    c.setFont("Helvetica", 12)
    for lines in sections:
        for line in lines:
            c.drawString(margin, y, line)
            y -= 18
        y -= 12

    c.showPage()
    c.save()
    return mem.getvalue()


def pdf_filename(report: Report) -> str:
    # Header values must stay ASCII
    school = "".join(
        ch for ch in (report.school or "") if ch.isascii() and (ch.isalnum() or ch in " -_")
    ).strip()
    return f"Report-{school or report.id}.pdf"
