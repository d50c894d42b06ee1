"""REST router for report editing sessions and PDF export."""

from __future__ import annotations

import io
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from fastapi.responses import HTMLResponse, StreamingResponse

from medreport.utils.logging import RequestContext, get_compliance_logger, get_logger
from medreport.app.config.form_schema import FORM_EDITORS
from medreport.app.exceptions import SessionNotFound, UnknownField
from medreport.app.models.editors import ChangeEvent, FieldEditor
from medreport.app.models.export import ExportResult, ExportStatus
from medreport.app.models.report import ReportFields, ReportSessionSnapshot
from medreport.app.services.export_pipeline import ExportPipeline
from medreport.app.services.field_model import sample_fields
from medreport.app.services.report_renderer import render_report_html
from medreport.app.services.report_session import ReportSession, ReportSessionStore

router = APIRouter(prefix="/api/reports", tags=["reports"])
logger = get_logger(__name__)
compliance_logger = get_compliance_logger()

_EXPORT_STATUS_CODES = {
    ExportStatus.INVALID: status.HTTP_422_UNPROCESSABLE_ENTITY,
    ExportStatus.BUSY: status.HTTP_409_CONFLICT,
    ExportStatus.NO_TARGET: status.HTTP_409_CONFLICT,
    ExportStatus.FAILED: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def get_session_store(request: Request) -> ReportSessionStore:
    return request.app.state.session_store


def get_export_pipeline(request: Request) -> ExportPipeline:
    return request.app.state.export_pipeline


def get_session(
    session_id: str, store: ReportSessionStore = Depends(get_session_store)
) -> ReportSession:
    try:
        return store.get(session_id)
    except SessionNotFound as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc


@router.get("/schema", response_model=List[FieldEditor])
async def read_form_schema() -> List[FieldEditor]:
    """Return the ordered editor descriptors of the report form."""

    return FORM_EDITORS


@router.get("/defaults", response_model=ReportFields)
async def read_report_defaults() -> ReportFields:
    """Return the sample values a new session starts with."""

    return sample_fields()


@router.post(
    "/sessions",
    response_model=ReportSessionSnapshot,
    status_code=status.HTTP_201_CREATED,
)
async def create_session(
    store: ReportSessionStore = Depends(get_session_store),
) -> ReportSessionSnapshot:
    """Start an editing session pre-filled with sample values."""

    return store.create().snapshot()


@router.get("/sessions/{session_id}", response_model=ReportSessionSnapshot)
async def read_session(session: ReportSession = Depends(get_session)) -> ReportSessionSnapshot:
    _log_patient_read(session, "read_fields")
    return session.snapshot()


@router.delete("/sessions/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_session(
    session_id: str, store: ReportSessionStore = Depends(get_session_store)
) -> Response:
    try:
        store.discard(session_id)
    except SessionNotFound as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/sessions/{session_id}/changes", response_model=ReportSessionSnapshot)
async def apply_field_change(
    change: ChangeEvent, session: ReportSession = Depends(get_session)
) -> ReportSessionSnapshot:
    """Apply one editor change event; the preview re-renders immediately."""

    try:
        session.apply(change)
    except (UnknownField, TypeError) as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)
        ) from exc
    return session.snapshot()


@router.get("/sessions/{session_id}/preview", response_class=HTMLResponse)
async def read_preview(
    standalone: bool = True, session: ReportSession = Depends(get_session)
) -> HTMLResponse:
    """Return the current report page as HTML."""

    document = session.document or session.render()
    _log_patient_read(session, "read_preview")
    return HTMLResponse(content=render_report_html(document, standalone=standalone))


@router.post("/sessions/{session_id}/autofill", response_model=None)
async def autofill_session(
    download: bool = False,
    session: ReportSession = Depends(get_session),
    pipeline: ExportPipeline = Depends(get_export_pipeline),
):
    """Reset every field to the sample values, optionally exporting right away."""

    session.reset_to_sample()
    if not download:
        return session.snapshot()

    with RequestContext(session_id=session.session_id):
        result = await pipeline.export(session, auto_trigger=True)
    return _export_response(result)


@router.post("/sessions/{session_id}/export")
async def export_session_pdf(
    session: ReportSession = Depends(get_session),
    pipeline: ExportPipeline = Depends(get_export_pipeline),
) -> StreamingResponse:
    """Render the current report as a downloadable PDF."""

    with RequestContext(session_id=session.session_id):
        result = await pipeline.export(session)
    return _export_response(result)


def _log_patient_read(session: ReportSession, operation: str) -> None:
    compliance_logger.log_data_access(
        resource_type="report_session",
        resource_id=session.session_id,
        operation=operation,
        success=True,
        patient_id=session.fields.patient_id,
    )


def _export_response(result: ExportResult) -> StreamingResponse:
    if result.status != ExportStatus.COMPLETED:
        raise HTTPException(status_code=_EXPORT_STATUS_CODES[result.status], detail=result.message)

    headers = {
        "Content-Disposition": f'attachment; filename="{result.filename}"',
    }
    return StreamingResponse(
        io.BytesIO(result.content or b""), media_type="application/pdf", headers=headers
    )
