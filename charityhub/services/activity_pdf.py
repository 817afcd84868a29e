from __future__ import annotations

from datetime import datetime, timezone
from io import BytesIO
from typing import Any
from xml.sax.saxutils import escape as xml_escape

from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import cm
from reportlab.platypus import BaseDocTemplate, Frame, PageTemplate, Paragraph, Spacer, Table, TableStyle

from charityhub.services.activity_log import ActivityLogFilters, ActivityReport

TITLE = "User Activity Log Report"
ACTIVITY_HEADERS = ["Date", "User", "Role", "Action", "Description", "IP Address"]
GRID_COLOR = colors.HexColor("#d0d7de")
HEAD_BACKGROUND = colors.HexColor("#f6f8fa")
MUTED = colors.HexColor("#57606a")


def _period_label(report: ActivityReport) -> str:
    return f"{report.start_date.strftime('%B %d, %Y')} - {report.end_date.strftime('%B %d, %Y')}"


def _header_footer(canvas, doc, meta: dict[str, str]):
    width, height = doc.pagesize
    canvas.saveState()
    canvas.setStrokeColor(GRID_COLOR)
    canvas.setLineWidth(1)
    canvas.line(1.5 * cm, height - 1.8 * cm, width - 1.5 * cm, height - 1.8 * cm)

    canvas.setFont("Helvetica-Bold", 11)
    canvas.drawString(1.5 * cm, height - 1.4 * cm, meta["title"])
    canvas.setFont("Helvetica", 8)
    canvas.setFillColor(MUTED)
    canvas.drawRightString(width - 1.5 * cm, height - 1.4 * cm, f"Generated {meta['generated']}")

    canvas.line(1.5 * cm, 1.4 * cm, width - 1.5 * cm, 1.4 * cm)
    canvas.drawRightString(width - 1.5 * cm, 0.9 * cm, f"Page {canvas.getPageNumber()}")
    canvas.restoreState()


def _grid(rows: list[list[Any]], col_widths: list[float]) -> Table:
    table = Table(rows, colWidths=col_widths, repeatRows=1)
    table.setStyle(
        TableStyle(
            [
                ("GRID", (0, 0), (-1, -1), 0.5, GRID_COLOR),
                ("BACKGROUND", (0, 0), (-1, 0), HEAD_BACKGROUND),
                ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
                ("FONTSIZE", (0, 0), (-1, -1), 8),
                ("VALIGN", (0, 0), (-1, -1), "TOP"),
                ("LEFTPADDING", (0, 0), (-1, -1), 4),
                ("RIGHTPADDING", (0, 0), (-1, -1), 4),
            ]
        )
    )
    return table


def _applied_filters(filters: ActivityLogFilters) -> list[str]:
    applied = []
    for label, value in (
        ("Action", filters.action_type),
        ("Target type", filters.target_type),
        ("User role", filters.user_role),
        ("Search", filters.search),
    ):
        if value:
            applied.append(f"{label}: {value}")
    return applied


def build_activity_log_pdf(
    report: ActivityReport,
    filters: ActivityLogFilters,
    *,
    generated_at: datetime | None = None,
) -> bytes:
    """Render the activity summary: period, totals, per-action counts and the entries."""

    generated = (generated_at or datetime.now(timezone.utc)).strftime("%Y-%m-%d %H:%M UTC")
    styles = getSampleStyleSheet()
    base = ParagraphStyle(name="Body", parent=styles["Normal"], fontSize=9, leading=12)
    cell = ParagraphStyle(name="Cell", parent=base, fontSize=8, leading=10)
    h1 = ParagraphStyle(
        name="H1", parent=base, fontName="Helvetica-Bold", fontSize=14, leading=18, alignment=TA_CENTER
    )
    h2 = ParagraphStyle(
        name="H2", parent=base, fontName="Helvetica-Bold", fontSize=11, leading=15, spaceBefore=10, spaceAfter=4
    )

    buff = BytesIO()
    pagesize = landscape(A4)
    margin = 1.5 * cm
    doc = BaseDocTemplate(
        buff,
        pagesize=pagesize,
        leftMargin=margin,
        rightMargin=margin,
        topMargin=2.4 * cm,
        bottomMargin=2 * cm,
        title="activity_log",
    )
    meta = {"title": TITLE, "generated": generated}
    frame = Frame(margin, 2 * cm, pagesize[0] - 2 * margin, pagesize[1] - 4.4 * cm, id="F", showBoundary=0)
    doc.addPageTemplates([PageTemplate(id="main", frames=[frame], onPage=lambda c, d: _header_footer(c, d, meta))])
    usable = pagesize[0] - 2 * margin

    sub = ParagraphStyle(name="Sub", parent=base, alignment=TA_CENTER, textColor=MUTED)
    story: list[Any] = [
        Paragraph(TITLE, h1),
        Spacer(1, 4),
        Paragraph(xml_escape(f"Period: {_period_label(report)}"), sub),
        Spacer(1, 8),
    ]
    applied = _applied_filters(filters)
    if applied:
        story.append(Paragraph(xml_escape("Filters: " + "; ".join(applied)), base))

    story.append(Paragraph("Summary", h2))
    summary_rows = [
        ["Total activities", "Unique users", "Logins", "Donations"],
        [str(report.total), str(report.unique_users), str(report.login_count), str(report.donation_count)],
    ]
    story.append(_grid(summary_rows, [usable / 4] * 4))

    story.append(Paragraph("Activities by action", h2))
    if report.by_action:
        action_rows = [["Action", "Count"]] + [[item.action_type, str(item.count)] for item in report.by_action]
        story.append(_grid(action_rows, [usable * 0.4, usable * 0.15]))
    else:
        story.append(Paragraph("No activity in this period.", base))

    story.append(Paragraph("Activities", h2))
    if report.truncated:
        story.append(Paragraph(f"Showing the {len(report.rows)} most recent of {report.total} entries.", base))
    if report.rows:
        widths = [usable * share for share in (0.12, 0.15, 0.1, 0.15, 0.36, 0.12)]
        body = [[Paragraph(xml_escape(value), cell) for value in row] for row in report.rows]
        story.append(_grid([ACTIVITY_HEADERS] + body, widths))

    doc.build(story)
    return buff.getvalue()
