"""Embed a captured report raster into a single-page PDF."""

from __future__ import annotations

import io
from typing import Protocol, Tuple

from reportlab.lib.pagesizes import A4
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

from ...utils.logging import get_logger, monitor_latency
from ..models.export import PageSizePolicy, RasterImage

logger = get_logger(__name__)


class DocumentWriter(Protocol):
    """Protocol describing an encode backend."""

    def encode(self, raster: RasterImage) -> bytes:
        ...


def page_layout(
    raster: RasterImage, policy: PageSizePolicy
) -> Tuple[Tuple[float, float], Tuple[float, float]]:
    """Return ``(page_size, image_size)`` in points for ``raster``.

    ``FIXED_PAGE`` scales the image to the A4 width and keeps its aspect
    ratio; anything taller than the page is cut at the bottom edge.
    ``FIT_RASTER`` makes the page exactly as large as the raster.
    """

    if raster.width <= 0 or raster.height <= 0:
        raise ValueError(f"Cannot encode an empty raster ({raster.width}x{raster.height})")

    if policy == PageSizePolicy.FIT_RASTER:
        size = (float(raster.width), float(raster.height))
        return size, size

    page_width, page_height = A4
    image_height = raster.height * page_width / raster.width
    return (page_width, page_height), (page_width, image_height)


class ReportLabDocumentWriter:
    """ReportLab backed :class:`DocumentWriter`."""

    def __init__(self, policy: PageSizePolicy = PageSizePolicy.FIXED_PAGE):
        self.policy = policy

    @monitor_latency("report_encode", backend="reportlab")
    def encode(self, raster: RasterImage) -> bytes:
        (page_width, page_height), (image_width, image_height) = page_layout(
            raster, self.policy
        )

        buffer = io.BytesIO()
        pdf = canvas.Canvas(buffer, pagesize=(page_width, page_height))
        pdf.setTitle("Medical report")
        # PDF origin is bottom-left; anchor the image to the top edge.
        pdf.drawImage(
            ImageReader(io.BytesIO(raster.png)),
            0,
            page_height - image_height,
            width=image_width,
            height=image_height,
        )
        pdf.showPage()
        pdf.save()

        buffer.seek(0)
        return buffer.read()
