"""Validate, capture, encode and save a report as PDF."""

from __future__ import annotations

import asyncio
import functools
import re
from typing import Optional

from ...utils.config import settings
from ...utils.logging import get_compliance_logger, get_logger
from ..exceptions import CaptureOrEncodeFailure, MissingRenderTarget, MissingRequiredField
from ..models.export import (
    CaptureOptions,
    ExportRequest,
    ExportResult,
    ExportStatus,
)
from ..models.report import REQUIRED_FIELDS, ReportFields
from .document_writer import DocumentWriter
from .file_saver import FileSaver
from .rasterizer import Rasterizer
from .report_session import ReportSession

logger = get_logger(__name__)
compliance_logger = get_compliance_logger()

FILENAME_PREFIX = "medical_report_"
FALLBACK_FILENAME_TOKEN = "sample"

FAILURE_MESSAGE = "Could not export PDF. Check the server log for details."
BUSY_MESSAGE = "An export is already in progress."
NO_TARGET_MESSAGE = "The report preview is not ready yet."


def build_export_filename(patient_id: str) -> str:
    """Generate the download filename from the patient identifier."""

    token = re.sub(r"[^A-Za-z0-9._-]+", "_", patient_id.strip()).strip("._")
    return f"{FILENAME_PREFIX}{token or FALLBACK_FILENAME_TOKEN}.pdf"


def validate_required_fields(
    fields: ReportFields, require_patient_id: bool = True
) -> None:
    """Raise :class:`MissingRequiredField` when mandatory fields are empty."""

    required = REQUIRED_FIELDS if require_patient_id else ("patient_name",)
    missing = [name for name in required if not getattr(fields, name).strip()]
    if missing:
        raise MissingRequiredField(missing)


class ExportPipeline:
    """Idle/Exporting state machine around the capture and encode backends.

    The busy flag lives on the :class:`ReportSession`, so one pipeline can
    serve every session while never running two captures for the same one.
    """

    def __init__(
        self,
        rasterizer: Rasterizer,
        writer: DocumentWriter,
        saver: Optional[FileSaver] = None,
        *,
        capture_scale: Optional[float] = None,
        use_cors: Optional[bool] = None,
        timeout_seconds: Optional[float] = None,
        require_patient_id: Optional[bool] = None,
    ):
        self.rasterizer = rasterizer
        self.writer = writer
        self.saver = saver
        self.capture_scale = capture_scale if capture_scale is not None else settings.capture_scale
        self.use_cors = use_cors if use_cors is not None else settings.capture_use_cors
        self.timeout_seconds = (
            timeout_seconds if timeout_seconds is not None else settings.capture_timeout_seconds
        )
        self.require_patient_id = (
            require_patient_id
            if require_patient_id is not None
            else settings.require_patient_id
        )

    def validate(self, fields: ReportFields) -> None:
        validate_required_fields(fields, self.require_patient_id)

    def build_request(self, fields: ReportFields) -> ExportRequest:
        return ExportRequest(fields=fields, filename=build_export_filename(fields.patient_id))

    async def export(self, session: ReportSession, auto_trigger: bool = False) -> ExportResult:
        """Run one export for ``session``. Never raises for expected failures."""

        if session.is_exporting:
            logger.info("Export already running for session %s; ignoring", session.session_id)
            return ExportResult(status=ExportStatus.BUSY, message=BUSY_MESSAGE)

        try:
            self.validate(session.fields)
        except MissingRequiredField as exc:
            logger.warning("Export blocked: %s", exc)
            return ExportResult(
                status=ExportStatus.INVALID,
                message=f"Please fill in: {', '.join(_labels(exc.fields))}.",
                error=type(exc).__name__,
            )

        if not session.try_begin_export():
            return ExportResult(status=ExportStatus.BUSY, message=BUSY_MESSAGE)

        request = self.build_request(session.fields)
        work: Optional[asyncio.Future] = None
        try:
            try:
                html = session.render_target()
            except MissingRenderTarget as exc:
                logger.warning("Export skipped: %s", exc)
                return ExportResult(
                    status=ExportStatus.NO_TARGET,
                    message=NO_TARGET_MESSAGE,
                    error=type(exc).__name__,
                )
            work = asyncio.ensure_future(self._capture_and_encode(html, session))
            return await self._run(session, request, work, auto_trigger)
        finally:
            if work is None or work.done():
                session.finish_export()
            else:
                # Worker threads cannot be cancelled; stay busy until it ends.
                work.add_done_callback(functools.partial(_release_after_capture, session))

    async def _run(
        self,
        session: ReportSession,
        request: ExportRequest,
        work: asyncio.Future,
        auto_trigger: bool,
    ) -> ExportResult:
        try:
            pdf_bytes = await asyncio.wait_for(asyncio.shield(work), self.timeout_seconds)
            path = None
            if self.saver is not None:
                path = await asyncio.to_thread(self.saver.save, request.filename, pdf_bytes)
        except asyncio.TimeoutError:
            failure = CaptureOrEncodeFailure(
                f"Capture did not finish within {self.timeout_seconds:g}s"
            )
            return self._failed(session, request, failure, auto_trigger)
        except (CaptureOrEncodeFailure, OSError) as exc:
            return self._failed(session, request, exc, auto_trigger)

        compliance_logger.log_report_export(
            session_id=session.session_id,
            patient_id=request.fields.patient_id,
            filename=request.filename,
            success=True,
            size_bytes=len(pdf_bytes),
            auto_trigger=auto_trigger,
        )
        logger.info(
            "Exported report PDF",
            extra={"extra_fields": {"filename": request.filename, "size": len(pdf_bytes)}},
        )
        return ExportResult(
            status=ExportStatus.COMPLETED,
            message="PDF ready.",
            filename=request.filename,
            size_bytes=len(pdf_bytes),
            path=str(path) if path is not None else None,
            content=pdf_bytes,
        )

    async def _capture_and_encode(self, html: str, session: ReportSession) -> bytes:
        geometry = session.document.geometry
        options = CaptureOptions(
            scale=self.capture_scale,
            use_cors=self.use_cors,
            scroll_y=0,
            width=geometry.width_px,
        )
        try:
            raster = await self.rasterizer.capture(html, options)
        except Exception as exc:
            raise CaptureOrEncodeFailure(f"Capture failed: {exc}") from exc

        try:
            return await asyncio.to_thread(self.writer.encode, raster)
        except Exception as exc:
            raise CaptureOrEncodeFailure(f"Encoding failed: {exc}") from exc

    def _failed(
        self,
        session: ReportSession,
        request: ExportRequest,
        exc: Exception,
        auto_trigger: bool,
    ) -> ExportResult:
        logger.error("PDF export failed: %s", exc, exc_info=exc)
        compliance_logger.log_report_export(
            session_id=session.session_id,
            patient_id=request.fields.patient_id,
            filename=request.filename,
            success=False,
            auto_trigger=auto_trigger,
        )
        return ExportResult(
            status=ExportStatus.FAILED,
            message=FAILURE_MESSAGE,
            filename=request.filename,
            error=type(exc).__name__,
        )


def _release_after_capture(session: ReportSession, work: asyncio.Future) -> None:
    if not work.cancelled() and work.exception() is not None:
        logger.warning(
            "Abandoned capture for session %s ended with %s",
            session.session_id,
            work.exception(),
        )
    else:
        logger.info("Abandoned capture for session %s finished", session.session_id)
    session.finish_export()


def _labels(fields) -> list[str]:
    return [name.replace("_", " ") for name in fields]
