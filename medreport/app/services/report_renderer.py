"""Turn a field snapshot into the structured report page and its HTML."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, Optional

from jinja2 import Environment, FileSystemLoader, select_autoescape

from ...utils.config import settings
from ...utils.logging import get_logger
from ..models.document import (
    LabeledValue,
    PatientBlock,
    ReportDocument,
    ReportFooter,
    ReportHeader,
    ReportSection,
    Watermark,
)
from ..models.report import FIELD_GROUPS, FieldGroup, ReportFields

logger = get_logger(__name__)

TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates"
_env = Environment(
    loader=FileSystemLoader(TEMPLATE_DIR),
    autoescape=select_autoescape(["html", "xml", "j2"]),
)

# Text shown in place of an unset value, per field group.
PLACEHOLDERS: Dict[FieldGroup, str] = {
    FieldGroup.IDENTITY: "",
    FieldGroup.NARRATIVE: "N/A",
    FieldGroup.LIST: "None",
}

SIGNATURE_NOTE = "(Signature — SAMPLE)"
PROVENANCE = "Generated by Instant Medical Report Generator (Demo)"


def display_value(fields: ReportFields, field: str) -> str:
    """Return the text drawn for ``field`` after the default-text policy."""

    value = getattr(fields, field)
    if isinstance(value, list):
        text = ", ".join(item for item in value if item.strip())
    else:
        text = value.strip()
    return text or PLACEHOLDERS[FIELD_GROUPS[field]]


def default_watermark() -> Optional[Watermark]:
    """Watermark configured through settings, or ``None`` when disabled."""

    if not settings.watermark_enabled:
        return None
    return Watermark(
        text=settings.watermark_text,
        rows=settings.watermark_rows,
        columns=settings.watermark_columns,
    )


def build_report_document(
    fields: ReportFields, watermark: Optional[Watermark] = None
) -> ReportDocument:
    """Map a field snapshot to the fixed page layout.

    The mapping is pure: equal snapshots always produce equal documents.
    """

    def text(field: str) -> str:
        return display_value(fields, field)

    sections = [
        ReportSection(number=1, title="Chief complaint", body=text("chief")),
        ReportSection(number=2, title="History of present illness", body=text("history")),
        ReportSection(
            number=3,
            title="Past medical history",
            body=text("pmh"),
            extras=[LabeledValue(label="Chronic illnesses", value=text("chronic_illnesses"))],
        ),
        ReportSection(
            number=4,
            title="Medications",
            body=text("meds"),
            extras=[LabeledValue(label="Allergies", value=text("allergies"))],
        ),
        ReportSection(number=5, title="Examination", body=text("exam")),
        ReportSection(number=6, title="Investigations", body=text("investigations")),
        ReportSection(number=7, title="Assessment / Impression", body=text("impression")),
        ReportSection(number=8, title="Plan / Treatment", body=text("plan")),
    ]

    return ReportDocument(
        header=ReportHeader(
            hospital=text("hospital"),
            address=text("address"),
            phone=text("phone"),
            report_date=text("report_date"),
            referring=text("referring"),
        ),
        patient=PatientBlock(
            name=text("patient_name"),
            patient_id=text("patient_id"),
            dob=text("dob"),
            sex=text("sex"),
        ),
        sections=sections,
        footer=ReportFooter(
            disclaimer=text("disclaimer"),
            examiner=text("referring"),
            signature_note=SIGNATURE_NOTE,
            provenance=PROVENANCE,
        ),
        watermark=watermark,
    )


def render_report_html(document: ReportDocument, standalone: bool = True) -> str:
    """Render the report Jinja2 template to an HTML string.

    ``standalone`` wraps the page in a full HTML document, which is what the
    rasterizers load; the editor page embeds the bare page instead.
    """

    template = _env.get_template("report.html.j2")
    html = template.render(document=document, standalone=standalone)
    logger.debug(
        "Rendered report page",
        extra={"extra_fields": {"sections": len(document.sections), "standalone": standalone}},
    )
    return html


def render_editor_page(**context) -> str:
    """Render the form + live preview page."""

    template = _env.get_template("editor.html.j2")
    return template.render(**context)
