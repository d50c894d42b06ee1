"""Models describing report capture, encoding and export outcomes."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from .report import ReportFields


class ExportState(str, Enum):
    """Busy flag of a session's export pipeline."""

    IDLE = "idle"
    EXPORTING = "exporting"


class ExportStatus(str, Enum):
    """Outcome of a single export invocation."""

    COMPLETED = "completed"
    INVALID = "invalid"
    BUSY = "busy"
    NO_TARGET = "no_target"
    FAILED = "failed"


class PageSizePolicy(str, Enum):
    """How the raster is placed into the PDF page."""

    FIXED_PAGE = "fixed_page"
    FIT_RASTER = "fit_raster"


@dataclass(frozen=True, slots=True)
class CaptureOptions:
    """Options handed to a rasterizer backend."""

    scale: float = 2.0
    use_cors: bool = True
    scroll_y: int = 0
    width: Optional[int] = None
    height: Optional[int] = None


@dataclass(frozen=True, slots=True)
class RasterImage:
    """PNG encoded pixel buffer with its dimensions in pixels."""

    png: bytes
    width: int
    height: int


class ExportRequest(BaseModel):
    """Snapshot of the fields taken at the moment an export starts."""

    fields: ReportFields
    filename: str


class ExportResult(BaseModel):
    """Metadata returned after an export attempt."""

    status: ExportStatus
    message: str
    filename: Optional[str] = None
    size_bytes: Optional[int] = None
    path: Optional[str] = None
    error: Optional[str] = Field(
        default=None,
        description="Name of the error condition that stopped the export.",
    )
    content: Optional[bytes] = Field(default=None, exclude=True, repr=False)

    @property
    def ok(self) -> bool:
        return self.status == ExportStatus.COMPLETED
