"""
Tests for the validate-capture-encode-save export pipeline.
"""

import asyncio
import threading
import time

import pytest

from medreport.app.exceptions import MissingRequiredField
from medreport.app.models.editors import FieldChange
from medreport.app.models.export import ExportState, ExportStatus, RasterImage
from medreport.app.models.report import ReportFields
from medreport.app.services.export_pipeline import (
    ExportPipeline,
    build_export_filename,
    validate_required_fields,
)
from medreport.app.services.report_session import ReportSession

from conftest import FakeRasterizer, FakeSaver, FakeWriter, make_png


class ThreadedRasterizer:
    """Captures in a worker thread, like the WeasyPrint backend."""

    name = "threaded"

    def __init__(self, seconds: float):
        self.seconds = seconds
        self.in_flight = 0
        self.max_in_flight = 0
        self._lock = threading.Lock()

    def _capture_sync(self):
        with self._lock:
            self.in_flight += 1
            self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            time.sleep(self.seconds)
        finally:
            with self._lock:
                self.in_flight -= 1
        return RasterImage(png=make_png(), width=40, height=60)

    async def capture(self, html, options):
        return await asyncio.to_thread(self._capture_sync)


async def wait_until_idle(session: ReportSession, timeout: float = 5.0) -> None:
    await asyncio.wait_for(_poll_idle(session), timeout)


async def _poll_idle(session: ReportSession) -> None:
    while session.is_exporting:
        await asyncio.sleep(0.01)


def rendered_session(fields: ReportFields) -> ReportSession:
    session = ReportSession(fields=fields)
    session.render()
    return session


class TestValidation:
    def test_missing_name_and_id(self):
        with pytest.raises(MissingRequiredField) as excinfo:
            validate_required_fields(ReportFields())

        assert excinfo.value.fields == ("patient_name", "patient_id")

    def test_whitespace_counts_as_missing(self):
        with pytest.raises(MissingRequiredField):
            validate_required_fields(ReportFields(patient_name="Jane", patient_id="  "))

    def test_patient_id_optional_when_configured(self):
        validate_required_fields(ReportFields(patient_name="Jane"), require_patient_id=False)


class TestFilename:
    @pytest.mark.parametrize(
        "patient_id, expected",
        [
            ("ID-42", "medical_report_ID-42.pdf"),
            ("SAMP-000123", "medical_report_SAMP-000123.pdf"),
            ("", "medical_report_sample.pdf"),
            ("   ", "medical_report_sample.pdf"),
            ("../etc/passwd", "medical_report_etc_passwd.pdf"),
            ("A B/C", "medical_report_A_B_C.pdf"),
        ],
    )
    def test_build_export_filename(self, patient_id, expected):
        assert build_export_filename(patient_id) == expected


class TestExportPipeline:
    @pytest.mark.asyncio
    async def test_guard_blocks_export_without_invoking_capture(self, rasterizer, writer, saver):
        pipeline = ExportPipeline(rasterizer, writer, saver)
        session = rendered_session(ReportFields())

        result = await pipeline.export(session)

        assert result.status == ExportStatus.INVALID
        assert result.error == "MissingRequiredField"
        assert "patient name" in result.message
        assert session.export_state == ExportState.IDLE
        assert rasterizer.captures == []
        assert writer.rasters == []

    @pytest.mark.asyncio
    async def test_happy_path(self, calls, rasterizer, writer, saver, patient_fields):
        pipeline = ExportPipeline(rasterizer, writer, saver, capture_scale=2.0)
        session = rendered_session(patient_fields)

        result = await pipeline.export(session)

        assert result.status == ExportStatus.COMPLETED
        assert result.filename == "medical_report_ID-42.pdf"
        assert calls == ["capture", "encode", "save"]
        assert saver.saved == [("medical_report_ID-42.pdf", b"%PDF-1.4 fake report")]
        assert result.content == b"%PDF-1.4 fake report"
        assert result.size_bytes == len(result.content)
        assert session.export_state == ExportState.IDLE

    @pytest.mark.asyncio
    async def test_capture_receives_page_and_options(self, rasterizer, writer, patient_fields):
        pipeline = ExportPipeline(rasterizer, writer, capture_scale=3.0, use_cors=False)
        session = rendered_session(patient_fields)

        await pipeline.export(session)

        html, options = rasterizer.captures[0]
        assert 'id="report-page"' in html
        assert "Jane Doe" in html
        assert options.scale == 3.0
        assert options.use_cors is False
        assert options.scroll_y == 0
        assert options.width == 794

    @pytest.mark.asyncio
    async def test_fallback_filename_when_id_optional(self, rasterizer, writer, saver):
        pipeline = ExportPipeline(rasterizer, writer, saver, require_patient_id=False)
        session = rendered_session(ReportFields(patient_name="Jane Doe"))

        result = await pipeline.export(session)

        assert result.status == ExportStatus.COMPLETED
        assert result.filename == "medical_report_sample.pdf"
        assert saver.saved[0][0] == "medical_report_sample.pdf"

    @pytest.mark.asyncio
    async def test_second_trigger_while_exporting_is_ignored(self, writer, patient_fields):
        gate = asyncio.Event()
        rasterizer = FakeRasterizer(gate=gate)
        pipeline = ExportPipeline(rasterizer, writer)
        session = rendered_session(patient_fields)

        first = asyncio.create_task(pipeline.export(session))
        while not rasterizer.captures:
            await asyncio.sleep(0)
        assert session.export_state == ExportState.EXPORTING

        second = await pipeline.export(session)
        gate.set()
        first_result = await first

        assert second.status == ExportStatus.BUSY
        assert first_result.status == ExportStatus.COMPLETED
        assert len(rasterizer.captures) == 1
        assert session.export_state == ExportState.IDLE

    @pytest.mark.asyncio
    async def test_capture_failure_returns_to_idle(self, calls, writer, saver, patient_fields):
        rasterizer = FakeRasterizer(calls, error=RuntimeError("canvas tainted"))
        pipeline = ExportPipeline(rasterizer, writer, saver)
        session = rendered_session(patient_fields)

        result = await pipeline.export(session)

        assert result.status == ExportStatus.FAILED
        assert result.error == "CaptureOrEncodeFailure"
        assert result.content is None
        assert calls == ["capture"]
        assert saver.saved == []
        assert session.export_state == ExportState.IDLE

    @pytest.mark.asyncio
    async def test_encode_failure_is_reported(self, calls, rasterizer, saver, patient_fields):
        writer = FakeWriter(calls, error=ValueError("bad image"))
        pipeline = ExportPipeline(rasterizer, writer, saver)
        session = rendered_session(patient_fields)

        result = await pipeline.export(session)

        assert result.status == ExportStatus.FAILED
        assert calls == ["capture", "encode"]
        assert session.export_state == ExportState.IDLE

    @pytest.mark.asyncio
    async def test_capture_timeout_keeps_session_busy_until_capture_ends(
        self, writer, patient_fields
    ):
        rasterizer = FakeRasterizer(delay=0.3)
        pipeline = ExportPipeline(rasterizer, writer, timeout_seconds=0.05)
        session = rendered_session(patient_fields)

        result = await pipeline.export(session)

        assert result.status == ExportStatus.FAILED
        assert result.error == "CaptureOrEncodeFailure"
        assert writer.rasters == []
        assert session.export_state == ExportState.EXPORTING
        retry = await pipeline.export(session)
        assert retry.status == ExportStatus.BUSY

        await wait_until_idle(session)

        assert len(rasterizer.captures) == 1
        assert len(writer.rasters) == 1
        pipeline.timeout_seconds = 5.0
        assert (await pipeline.export(session)).status == ExportStatus.COMPLETED

    @pytest.mark.asyncio
    async def test_timed_out_worker_thread_blocks_next_capture(self, writer, patient_fields):
        rasterizer = ThreadedRasterizer(seconds=0.3)
        pipeline = ExportPipeline(rasterizer, writer, timeout_seconds=0.05)
        session = rendered_session(patient_fields)

        first = await pipeline.export(session)
        second = await pipeline.export(session)
        await wait_until_idle(session)
        third = await pipeline.export(session)
        await wait_until_idle(session)

        assert [first.status, second.status, third.status] == [
            ExportStatus.FAILED,
            ExportStatus.BUSY,
            ExportStatus.FAILED,
        ]
        assert rasterizer.max_in_flight == 1

    @pytest.mark.asyncio
    async def test_save_failure_is_reported(self, calls, rasterizer, writer, patient_fields):
        saver = FakeSaver(calls, error=PermissionError("read-only"))
        pipeline = ExportPipeline(rasterizer, writer, saver)
        session = rendered_session(patient_fields)

        result = await pipeline.export(session)

        assert result.status == ExportStatus.FAILED
        assert result.error == "PermissionError"
        assert session.export_state == ExportState.IDLE

    @pytest.mark.asyncio
    async def test_missing_render_target(self, rasterizer, writer, patient_fields):
        pipeline = ExportPipeline(rasterizer, writer)
        session = ReportSession(fields=patient_fields)

        result = await pipeline.export(session)

        assert result.status == ExportStatus.NO_TARGET
        assert result.error == "MissingRenderTarget"
        assert rasterizer.captures == []
        assert session.export_state == ExportState.IDLE

    @pytest.mark.asyncio
    async def test_export_uses_fields_at_trigger_time(self, writer, patient_fields):
        gate = asyncio.Event()
        rasterizer = FakeRasterizer(gate=gate)
        pipeline = ExportPipeline(rasterizer, writer)
        session = rendered_session(patient_fields)

        task = asyncio.create_task(pipeline.export(session))
        while not rasterizer.captures:
            await asyncio.sleep(0)
        session.apply(FieldChange(field="patient_id", value="ID-99"))
        gate.set()
        result = await task

        assert result.filename == "medical_report_ID-42.pdf"
        assert session.fields.patient_id == "ID-99"
