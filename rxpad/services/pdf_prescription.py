import logging
import os
import re
import time
from datetime import datetime
from io import BytesIO
from pathlib import Path
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import A5
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib.units import cm
from reportlab.platypus import (
    SimpleDocTemplate,
    Paragraph,
    Table,
    TableStyle,
    Spacer,
    Image,
)

from rxpad.core.config import Settings, settings
from rxpad.schemas.prescription import PrescriptionForm
from rxpad.services.prescription_form import (
    format_date,
    patient_name,
    prescription_text,
    validate_form,
)

logger = logging.getLogger(__name__)

_UNSAFE_FILENAME_CHARS = re.compile(r"[^a-zA-Z0-9]")


def _safe_image(path: str | None, max_width_cm: float = 4, max_height_cm: float = 2):
    if not path or not path.strip():
        return None
    path = path.strip()
    if not os.path.isfile(path):
        return None
    try:
        img = Image(path)
        w, h = img.imageWidth, img.imageHeight
        if w <= 0 or h <= 0:
            return None
        scale = min((max_width_cm * cm) / w, (max_height_cm * cm) / h, 1.0)
        img.drawWidth = w * scale
        img.drawHeight = h * scale
        return img
    except Exception:
        logger.warning("Signature image %s could not be loaded", path, exc_info=True)
        return None


def _text(value: str) -> str:
    """Escape free text for a Paragraph and keep its line breaks."""
    return escape(value).replace("\n", "<br/>")


def _field_row(label: str, value: str, style) -> Table:
    t = Table(
        [[Paragraph(f"<b>{label}</b>", style), Paragraph(_text(value) or "&nbsp;", style)]],
        colWidths=[3.2 * cm, 8.8 * cm],
    )
    t.setStyle(
        TableStyle([
            ("LINEBELOW", (1, 0), (1, 0), 0.5, colors.HexColor("#9CA3AF")),
            ("VALIGN", (0, 0), (-1, -1), "BOTTOM"),
            ("LEFTPADDING", (0, 0), (-1, -1), 0),
        ])
    )
    return t


def generate_prescription_pdf(form: PrescriptionForm, practice: Settings = settings) -> BytesIO:
    """Render the prescription template to a PDF in memory."""
    buffer = BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=A5,
        leftMargin=1.2 * cm,
        rightMargin=1.2 * cm,
        topMargin=1.2 * cm,
        bottomMargin=1.2 * cm,
        title="Prescription",
    )
    styles = getSampleStyleSheet()
    title_style = ParagraphStyle(
        name="PracticeName",
        parent=styles["Heading1"],
        fontSize=15,
        fontName="Helvetica-Bold",
        spaceAfter=2,
    )
    normal_style = ParagraphStyle(
        name="Body",
        parent=styles["Normal"],
        fontSize=9.5,
        leading=12,
    )
    muted_style = ParagraphStyle(
        name="Muted",
        parent=styles["Normal"],
        textColor=colors.HexColor("#6B7280"),
        fontSize=7.5,
        leading=9,
    )
    rx_style = ParagraphStyle(
        name="Rx",
        parent=styles["Heading2"],
        fontSize=16,
        fontName="Helvetica-Bold",
        spaceBefore=8,
        spaceAfter=4,
    )

    # ---- HEADER ----
    contact = Table(
        [[
            Paragraph(
                f"Consulting rooms:<br/>{_text(practice.PRACTICE_ADDRESS)}<br/>{_text(practice.PRACTICE_POSTAL)}",
                muted_style,
            ),
            Paragraph(
                f"Tel: {_text(practice.PRACTICE_TEL)}<br/>Fax: {_text(practice.PRACTICE_FAX)}<br/>"
                f"Cell: {_text(practice.PRACTICE_CELL)}<br/>e-mail: {_text(practice.PRACTICE_EMAIL)}",
                muted_style,
            ),
        ]],
        colWidths=[6.0 * cm, 6.0 * cm],
    )
    story = [
        Paragraph(_text(practice.PRACTICE_NAME), title_style),
        Paragraph(_text(practice.PRACTICE_NUMBER), muted_style),
        Spacer(1, 0.2 * cm),
        contact,
        Table(
            [[" "]],
            colWidths=[12.0 * cm],
            rowHeights=[0.1 * cm],
            style=TableStyle([
                ("LINEBELOW", (0, 0), (-1, -1), 0.5, colors.HexColor("#E5E7EB")),
            ]),
        ),
        Spacer(1, 0.3 * cm),
    ]

    # ---- FORM FIELDS ----
    story.extend([
        _field_row("Date:", format_date(form.date), normal_style),
        _field_row("Age of Minor:", form.age, normal_style),
        _field_row("Name:", patient_name(form), normal_style),
        _field_row("Address:", "", normal_style),
    ])
    if form.icd10_codes:
        story.append(_field_row("ICD-10 Code(s):", ", ".join(c.code for c in form.icd10_codes), normal_style))

    # ---- PRESCRIPTION ----
    story.append(Paragraph("Rx:", rx_style))
    story.append(Paragraph(_text(prescription_text(form)), normal_style))
    if form.icd10_codes:
        story.append(Spacer(1, 0.3 * cm))
        story.append(Paragraph("<b>Diagnosis:</b>", normal_style))
        for code in form.icd10_codes:
            story.append(Paragraph(_text(f"{code.code} - {code.description}"), normal_style))
    if form.repeats > 0:
        story.append(Spacer(1, 0.4 * cm))
        story.append(Paragraph(f"<b>Repeat x {form.repeats}</b>", normal_style))

    # ---- SIGNATURE ----
    story.append(Spacer(1, 0.8 * cm))
    sig_img = _safe_image(practice.SIGNATURE_PATH, max_width_cm=5.0, max_height_cm=2.5)
    if sig_img:
        story.append(sig_img)
    story.append(
        Paragraph(
            "Signature",
            ParagraphStyle(
                name="Signature",
                parent=normal_style,
                fontSize=9,
                alignment=2,
                spaceBefore=6,
            ),
        )
    )

    # ---- FOOTER ----
    generated_at = datetime.now().strftime("%d/%m/%Y %H:%M")
    story.append(
        Paragraph(
            f"<i>Generated</i> · {generated_at}",
            ParagraphStyle(
                name="Footer",
                parent=normal_style,
                fontSize=7,
                alignment=2,
                textColor=colors.grey,
            ),
        )
    )

    doc.build(story)
    buffer.seek(0)
    return buffer


def prescription_filename(form: PrescriptionForm, timestamp_ms: int | None = None) -> str:
    name = patient_name(form) or "patient"
    sanitized = _UNSAFE_FILENAME_CHARS.sub("_", name)
    timestamp_ms = timestamp_ms if timestamp_ms is not None else int(time.time() * 1000)
    return f"prescription_{sanitized}_{timestamp_ms}.pdf"


def export_prescription(
    form: PrescriptionForm,
    export_dir: str | Path | None = None,
    practice: Settings = settings,
) -> Path:
    """Validate the form, render it and write the PDF; returns the written path."""
    validate_form(form)
    target_dir = Path(export_dir or practice.EXPORT_DIR)
    target_dir.mkdir(parents=True, exist_ok=True)
    path = target_dir / prescription_filename(form)
    pdf = generate_prescription_pdf(form, practice)
    path.write_bytes(pdf.getvalue())
    logger.info("Prescription saved to %s", path)
    return path
