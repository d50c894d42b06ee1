"""Structured representation of the rendered report page."""

from __future__ import annotations

from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from ...utils.config import PageConfig
from .report import SCHEMA_VERSION


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


class PageGeometry(_Frozen):
    """Fixed page size of the preview in CSS pixels."""

    width_px: int = PageConfig.PREVIEW_WIDTH_PX
    height_px: int = PageConfig.PREVIEW_HEIGHT_PX
    padding_px: int = PageConfig.PREVIEW_PADDING_PX


class Watermark(_Frozen):
    """Decorative overlay composited behind the page content."""

    text: str = "SAMPLE"
    rotation_deg: float = -12.0
    opacity: float = 0.1
    rows: int = Field(1, ge=1)
    columns: int = Field(1, ge=1)

    def tiles(self) -> List[Tuple[float, float]]:
        """Return tile centres as percentages of the page width and height."""

        return [
            ((column + 0.5) * 100 / self.columns, (row + 0.5) * 100 / self.rows)
            for row in range(self.rows)
            for column in range(self.columns)
        ]


class LabeledValue(_Frozen):
    label: str
    value: str


class ReportHeader(_Frozen):
    hospital: str
    address: str
    phone: str
    report_date: str
    referring: str


class PatientBlock(_Frozen):
    name: str
    patient_id: str
    dob: str
    sex: str


class ReportSection(_Frozen):
    number: int
    title: str
    body: str
    extras: List[LabeledValue] = Field(default_factory=list)

    @property
    def heading(self) -> str:
        return f"{self.number}. {self.title}"


class ReportFooter(_Frozen):
    disclaimer: str
    examiner: str
    signature_note: str
    provenance: str


class ReportDocument(_Frozen):
    """Everything the report template needs to draw one page."""

    schema_version: int = SCHEMA_VERSION
    geometry: PageGeometry = Field(default_factory=PageGeometry)
    header: ReportHeader
    patient: PatientBlock
    sections: List[ReportSection]
    footer: ReportFooter
    watermark: Optional[Watermark] = None
