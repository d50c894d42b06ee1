"""
FastAPI main application for medreport.
Serves the report editor page and the report session API.
"""

from datetime import datetime, timezone
from typing import Optional

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse
from pydantic import BaseModel
import uvicorn

from medreport import __version__
from medreport.app.config.form_schema import FORM_EDITORS
from medreport.app.exceptions import ReportError, SessionNotFound
from medreport.app.models.export import PageSizePolicy
from medreport.app.routers.reports import router as reports_router
from medreport.app.services.document_writer import ReportLabDocumentWriter
from medreport.app.services.export_pipeline import ExportPipeline
from medreport.app.services.file_saver import LocalFileSaver
from medreport.app.services.rasterizer import build_rasterizer
from medreport.app.services.report_renderer import (
    default_watermark,
    render_editor_page,
    render_report_html,
)
from medreport.app.services.report_session import ReportSessionStore
from medreport.utils.config import settings
from medreport.utils.logging import get_logger

logger = get_logger(__name__)

SESSION_COOKIE = "medreport_session"


class HealthResponse(BaseModel):
    status: str
    timestamp: float
    active_sessions: int
    capture_backend: str
    page_size_policy: str
    version: str = __version__


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


def build_export_pipeline() -> ExportPipeline:
    """Wire the configured capture, encode and save backends."""

    saver = LocalFileSaver(settings.export_dir) if settings.export_dir else None
    return ExportPipeline(
        rasterizer=build_rasterizer(settings.capture_backend),
        writer=ReportLabDocumentWriter(PageSizePolicy(settings.page_size_policy)),
        saver=saver,
    )


def create_app(
    session_store: Optional[ReportSessionStore] = None,
    export_pipeline: Optional[ExportPipeline] = None,
) -> FastAPI:
    """Build the application; tests inject their own store and pipeline."""

    app = FastAPI(
        title="medreport API",
        description="Instant medical report form with live preview and PDF export",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    if session_store is None:
        session_store = ReportSessionStore(watermark=default_watermark())
    if export_pipeline is None:
        export_pipeline = build_export_pipeline()
    app.state.session_store = session_store
    app.state.export_pipeline = export_pipeline

    app.include_router(reports_router)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Configure appropriately for production
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/", response_class=HTMLResponse)
    async def serve_editor(request: Request):
        """Serve the editor page, reusing the browser's session when it is still live."""
        store = request.app.state.session_store
        session_id = request.cookies.get(SESSION_COOKIE)
        try:
            session = store.get(session_id) if session_id else store.create()
        except SessionNotFound:
            session = store.create()
        if session.document is None:
            session.render()

        response = HTMLResponse(
            content=render_editor_page(
                session_id=session.session_id,
                editors=FORM_EDITORS,
                fields=session.fields.model_dump(),
                preview_html=render_report_html(session.document, standalone=False),
            )
        )
        response.set_cookie(SESSION_COOKIE, session.session_id, httponly=True, samesite="lax")
        return response

    @app.get("/health", response_model=HealthResponse)
    async def health_check(request: Request):
        """Report liveness and the configured backends."""
        return HealthResponse(
            status="healthy",
            timestamp=datetime.now(timezone.utc).timestamp(),
            active_sessions=len(request.app.state.session_store),
            capture_backend=settings.capture_backend,
            page_size_policy=settings.page_size_policy,
        )

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request, exc):
        """Handle HTTP exceptions."""
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "detail": exc.detail,
                "status_code": exc.status_code,
                "timestamp": _timestamp(),
            },
        )

    @app.exception_handler(ReportError)
    async def report_exception_handler(request, exc):
        """Handle report errors that escaped a router."""
        logger.error(f"Unhandled report error: {exc}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "detail": "Internal server error",
                "status_code": 500,
                "timestamp": _timestamp(),
            },
        )

    @app.on_event("startup")
    async def startup_event():
        logger.info(
            "Starting medreport API server",
            extra={
                "extra_fields": {
                    "capture_backend": settings.capture_backend,
                    "page_size_policy": settings.page_size_policy,
                }
            },
        )

    @app.on_event("shutdown")
    async def shutdown_event():
        logger.info("Shutting down medreport API server")

    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run(
        "medreport.api.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.reload,
        log_level=settings.log_level.lower(),
    )
