# backend/asset_tracker/services/pdf_service.py
from io import BytesIO

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.platypus import (
    SimpleDocTemplate, Paragraph, Table, TableStyle, Spacer
)
from xml.sax.saxutils import escape

from asset_tracker.time_utils import utcnow


def _text(value) -> str:
    return escape(str(value)) if value not in (None, "") else "-"


def _person(summary: dict | None) -> str:
    if not summary:
        return "-"
    label = summary.get("name") or "-"
    if summary.get("employeeId"):
        label = f"{label} ({summary['employeeId']})"
    return label


def build_history_report(records: list[dict], *, title: str = "Asset History Report") -> bytes:
    """Render serialized history records (newest first) to a PDF document."""
    buffer = BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=A4,
        rightMargin=40,
        leftMargin=40,
        topMargin=40,
        bottomMargin=40,
        title=title,
    )

    styles = getSampleStyleSheet()
    story = []

    story.append(Paragraph(f"<b>{escape(title)}</b>", styles["Title"]))
    story.append(Paragraph(f"Generated on: {utcnow().strftime('%Y-%m-%d %H:%M')} UTC", styles["Normal"]))
    story.append(Paragraph(f"Records: {len(records)}", styles["Normal"]))
    story.append(Spacer(1, 20))

    if not records:
        story.append(Paragraph("No history records match the selected filters.", styles["Normal"]))

    for record in records:
        asset = record.get("asset") or {}
        performer = record.get("performer") or {}
        story.append(Paragraph(
            f"<b>{_text(record.get('action'))}</b> - {_text(record.get('actionDate'))}",
            styles["Heading3"],
        ))

        rows = [
            ["Asset", f"{_text(asset.get('assetTag'))} {_text(asset.get('make'))} {_text(asset.get('model'))}"],
            ["Employee", _person(record.get("employee"))],
            ["Condition", _text(record.get("condition"))],
            ["Reason", _text(record.get("reason"))],
            ["Notes", _text(record.get("notes"))],
            ["Performed by", _text(performer.get("name"))],
        ]
        table = Table(
            [[label, Paragraph(value, styles["Normal"])] for label, value in rows],
            colWidths=[110, 400],
        )
        table.setStyle(TableStyle([
            ("GRID", (0, 0), (-1, -1), 0.5, colors.grey),
            ("BACKGROUND", (0, 0), (0, -1), colors.whitesmoke),
            ("VALIGN", (0, 0), (-1, -1), "TOP"),
            ("LEFTPADDING", (0, 0), (-1, -1), 6),
            ("TOPPADDING", (0, 0), (-1, -1), 4),
            ("BOTTOMPADDING", (0, 0), (-1, -1), 4),
        ]))
        story.append(table)
        story.append(Spacer(1, 12))

    doc.build(story)
    return buffer.getvalue()
