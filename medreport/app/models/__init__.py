"""Model modules for medreport."""

from medreport.app.models.report import (
    CHRONIC_ILLNESS_OPTIONS,
    FIELD_GROUPS,
    FIELD_NAMES,
    MULTI_VALUE_FIELDS,
    REQUIRED_FIELDS,
    SCHEMA_VERSION,
    FieldGroup,
    ReportFields,
    ReportSessionSnapshot,
    Sex,
)
from medreport.app.models.document import (
    LabeledValue,
    PageGeometry,
    PatientBlock,
    ReportDocument,
    ReportFooter,
    ReportHeader,
    ReportSection,
    Watermark,
)
from medreport.app.models.editors import (
    ChangeEvent,
    EditorKind,
    FieldChange,
    FieldEditor,
    MemberToggle,
)
from medreport.app.models.export import (
    CaptureOptions,
    ExportRequest,
    ExportResult,
    ExportState,
    ExportStatus,
    PageSizePolicy,
    RasterImage,
)

__all__ = [
    "CHRONIC_ILLNESS_OPTIONS",
    "FIELD_GROUPS",
    "FIELD_NAMES",
    "MULTI_VALUE_FIELDS",
    "REQUIRED_FIELDS",
    "SCHEMA_VERSION",
    "FieldGroup",
    "ReportFields",
    "ReportSessionSnapshot",
    "Sex",
    "LabeledValue",
    "PageGeometry",
    "PatientBlock",
    "ReportDocument",
    "ReportFooter",
    "ReportHeader",
    "ReportSection",
    "Watermark",
    "ChangeEvent",
    "EditorKind",
    "FieldChange",
    "FieldEditor",
    "MemberToggle",
    "CaptureOptions",
    "ExportRequest",
    "ExportResult",
    "ExportState",
    "ExportStatus",
    "PageSizePolicy",
    "RasterImage",
]
