"""Service modules for medreport app."""

from medreport.app.services.document_writer import ReportLabDocumentWriter
from medreport.app.services.export_pipeline import (
    ExportPipeline,
    build_export_filename,
    validate_required_fields,
)
from medreport.app.services.field_model import (
    apply_change,
    get_field,
    sample_fields,
    set_field,
    toggle_set_member,
)
from medreport.app.services.file_saver import LocalFileSaver
from medreport.app.services.rasterizer import build_rasterizer
from medreport.app.services.report_renderer import (
    build_report_document,
    render_report_html,
)
from medreport.app.services.report_session import ReportSession, ReportSessionStore

__all__ = [
    "ReportLabDocumentWriter",
    "ExportPipeline",
    "build_export_filename",
    "validate_required_fields",
    "apply_change",
    "get_field",
    "sample_fields",
    "set_field",
    "toggle_set_member",
    "LocalFileSaver",
    "build_rasterizer",
    "build_report_document",
    "render_report_html",
    "ReportSession",
    "ReportSessionStore",
]
