import asyncio
import io
import sys
from pathlib import Path

import pytest
from PIL import Image

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.append(str(ROOT))

from medreport.app.models.export import RasterImage
from medreport.app.models.report import ReportFields


def make_png(width: int = 40, height: int = 60) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", (width, height), "white").save(buffer, format="PNG")
    return buffer.getvalue()


class FakeRasterizer:
    """Records every capture; optionally blocks until released or fails."""

    name = "fake"

    def __init__(self, calls=None, error=None, gate: asyncio.Event | None = None, delay=0.0):
        self.calls = calls if calls is not None else []
        self.captures = []
        self.error = error
        self.gate = gate
        self.delay = delay

    async def capture(self, html, options):
        self.calls.append("capture")
        self.captures.append((html, options))
        if self.gate is not None:
            await self.gate.wait()
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return RasterImage(png=make_png(), width=40, height=60)


class FakeWriter:
    def __init__(self, calls=None, error=None):
        self.calls = calls if calls is not None else []
        self.rasters = []
        self.error = error

    def encode(self, raster):
        self.calls.append("encode")
        self.rasters.append(raster)
        if self.error is not None:
            raise self.error
        return b"%PDF-1.4 fake report"


class FakeSaver:
    def __init__(self, calls=None, error=None):
        self.calls = calls if calls is not None else []
        self.saved = []
        self.error = error

    def save(self, filename, payload):
        self.calls.append("save")
        if self.error is not None:
            raise self.error
        self.saved.append((filename, payload))
        return Path("/exports") / filename


@pytest.fixture
def calls():
    return []


@pytest.fixture
def rasterizer(calls):
    return FakeRasterizer(calls)


@pytest.fixture
def writer(calls):
    return FakeWriter(calls)


@pytest.fixture
def saver(calls):
    return FakeSaver(calls)


@pytest.fixture
def patient_fields():
    return ReportFields(
        hospital="Greenfield General Hospital",
        patient_name="Jane Doe",
        patient_id="ID-42",
        report_date="2025-01-15",
        chief="Fever for 3 days.",
    )
