"""Per-user editing state: one field model, its preview and the busy flag."""

from __future__ import annotations

import threading
import uuid
from datetime import date
from typing import Dict, Optional

from ...utils.logging import get_logger
from ..exceptions import MissingRenderTarget, SessionNotFound
from ..models.document import ReportDocument, Watermark
from ..models.editors import ChangeEvent
from ..models.export import ExportState
from ..models.report import ReportFields, ReportSessionSnapshot
from .field_model import apply_change, sample_fields
from .report_renderer import build_report_document, render_report_html

logger = get_logger(__name__)


class ReportSession:
    """State owned by one editing session.

    Field writes are serialized by a lock and every write re-renders the
    preview document synchronously. The export pipeline flips
    ``export_state`` through :meth:`try_begin_export` and
    :meth:`finish_export`.
    """

    def __init__(
        self,
        fields: Optional[ReportFields] = None,
        watermark: Optional[Watermark] = None,
        session_id: Optional[str] = None,
    ):
        self.session_id = session_id or uuid.uuid4().hex
        self.watermark = watermark
        self.export_state = ExportState.IDLE
        self.document: Optional[ReportDocument] = None
        self._fields = fields if fields is not None else sample_fields()
        self._lock = threading.Lock()

    @property
    def fields(self) -> ReportFields:
        return self._fields

    @property
    def is_exporting(self) -> bool:
        return self.export_state == ExportState.EXPORTING

    def render(self) -> ReportDocument:
        """Re-render the preview document from the current fields."""

        self.document = build_report_document(self._fields, self.watermark)
        return self.document

    def apply(self, change: ChangeEvent) -> ReportFields:
        """Apply an editor change event and refresh the preview."""

        with self._lock:
            self._fields = apply_change(self._fields, change)
            self.render()
            return self._fields

    def reset_to_sample(self, today: Optional[date] = None) -> ReportFields:
        """Replace every field with the sample values."""

        with self._lock:
            self._fields = sample_fields(today)
            self.render()
            return self._fields

    def render_target(self) -> str:
        """Standalone HTML of the last rendered document."""

        if self.document is None:
            raise MissingRenderTarget(
                f"Session {self.session_id} has not rendered a report yet"
            )
        return render_report_html(self.document, standalone=True)

    def try_begin_export(self) -> bool:
        """Enter the Exporting state; ``False`` if an export is in flight."""

        with self._lock:
            if self.export_state == ExportState.EXPORTING:
                return False
            self.export_state = ExportState.EXPORTING
            return True

    def finish_export(self) -> None:
        with self._lock:
            self.export_state = ExportState.IDLE

    def snapshot(self) -> ReportSessionSnapshot:
        return ReportSessionSnapshot(
            session_id=self.session_id,
            fields=self._fields,
            export_state=self.export_state.value,
        )


class ReportSessionStore:
    """In-memory registry of live sessions. Nothing outlives the process."""

    def __init__(self, watermark: Optional[Watermark] = None):
        self.watermark = watermark
        self._sessions: Dict[str, ReportSession] = {}
        self._lock = threading.Lock()

    def create(self, fields: Optional[ReportFields] = None) -> ReportSession:
        session = ReportSession(fields=fields, watermark=self.watermark)
        session.render()
        with self._lock:
            self._sessions[session.session_id] = session
        logger.info("Created report session %s", session.session_id)
        return session

    def get(self, session_id: str) -> ReportSession:
        with self._lock:
            try:
                return self._sessions[session_id]
            except KeyError:
                raise SessionNotFound(session_id) from None

    def discard(self, session_id: str) -> None:
        with self._lock:
            if self._sessions.pop(session_id, None) is None:
                raise SessionNotFound(session_id)
        logger.info("Discarded report session %s", session_id)

    def __len__(self) -> int:
        return len(self._sessions)
