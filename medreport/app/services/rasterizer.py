"""Report page to PNG rasterisation backends.

Two interchangeable backends implement :class:`Rasterizer`:

* ``weasyprint`` lays the standalone report HTML out with WeasyPrint and
  rasterises the resulting pages with pypdfium2, stacked into one image so
  a report longer than one sheet keeps every section. No browser is needed.
* ``playwright`` loads the HTML into headless Chromium and screenshots the
  ``#report-page`` element, which matches what the user sees in the preview.

Both return a :class:`RasterImage` whose pixel size is the CSS size of the
page multiplied by ``CaptureOptions.scale``.
"""

from __future__ import annotations

import asyncio
import io
from typing import List, Protocol

from PIL import Image

from ...utils.config import PageConfig
from ...utils.logging import get_logger, monitor_latency
from ..models.export import CaptureOptions, RasterImage

logger = get_logger(__name__)

PAGE_SELECTOR = "#report-page"


class RasterizerError(RuntimeError):
    """Raised when a backend cannot produce an image."""


class Rasterizer(Protocol):
    """Protocol describing a capture backend."""

    name: str

    async def capture(self, html: str, options: CaptureOptions) -> RasterImage:
        ...


def _to_raster(image: Image.Image) -> RasterImage:
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return RasterImage(png=buffer.getvalue(), width=image.width, height=image.height)


def _crop_to_region(image: Image.Image, options: CaptureOptions) -> Image.Image:
    """Crop to the explicit region size, if one was requested."""

    if options.width is None and options.height is None:
        return image
    width = round(options.width * options.scale) if options.width else image.width
    height = round(options.height * options.scale) if options.height else image.height
    return image.crop((0, 0, min(width, image.width), min(height, image.height)))


def _stack_pages(pages: List[Image.Image]) -> Image.Image:
    """Join page bitmaps top to bottom into one continuous image."""

    if len(pages) == 1:
        return pages[0]
    sheet = Image.new("RGB", (max(p.width for p in pages), sum(p.height for p in pages)), "white")
    top = 0
    for page in pages:
        sheet.paste(page, (0, top))
        top += page.height
    return sheet


class WeasyPrintRasterizer:
    """Rasterise through WeasyPrint's layout engine and pypdfium2."""

    name = "weasyprint"

    async def capture(self, html: str, options: CaptureOptions) -> RasterImage:
        return await asyncio.to_thread(self._capture_sync, html, options)

    def _layout_pdf(self, html: str) -> bytes:
        from weasyprint import HTML

        return HTML(string=html).write_pdf()

    @monitor_latency("report_capture", backend="weasyprint")
    def _capture_sync(self, html: str, options: CaptureOptions) -> RasterImage:
        import pypdfium2 as pdfium

        # Paged layout has no scroll position; scroll_y and use_cors only
        # matter for the browser backend.
        pdf_bytes = self._layout_pdf(html)
        document = pdfium.PdfDocument(pdf_bytes)
        try:
            if len(document) == 0:
                raise RasterizerError("WeasyPrint produced a document without pages")
            # WeasyPrint maps 1 CSS px to 0.75 pt; undo that before oversampling.
            scale = options.scale * PageConfig.CSS_PX_PER_PT
            pages = [
                document[index].render(scale=scale).to_pil().convert("RGB")
                for index in range(len(document))
            ]
        finally:
            document.close()

        if len(pages) > 1:
            logger.debug("Report laid out over %d pages; stacking them", len(pages))
        return _to_raster(_crop_to_region(_stack_pages(pages), options))


class PlaywrightRasterizer:
    """Screenshot the report element in headless Chromium."""

    name = "playwright"

    def __init__(self, selector: str = PAGE_SELECTOR):
        self.selector = selector

    @monitor_latency("report_capture", backend="playwright")
    async def capture(self, html: str, options: CaptureOptions) -> RasterImage:
        from playwright.async_api import async_playwright

        launch_args = ["--disable-web-security"] if options.use_cors else []
        viewport = {
            "width": options.width or PageConfig.PREVIEW_WIDTH_PX,
            "height": options.height or PageConfig.PREVIEW_HEIGHT_PX,
        }

        async with async_playwright() as playwright:
            browser = await playwright.chromium.launch(headless=True, args=launch_args)
            try:
                page = await browser.new_page(
                    viewport=viewport, device_scale_factor=options.scale
                )
                await page.set_content(html, wait_until="networkidle")
                # Element boxes are measured from the current scroll origin.
                await page.evaluate("(y) => window.scrollTo(0, y)", options.scroll_y)
                png = await page.locator(self.selector).screenshot(type="png")
            finally:
                await browser.close()

        with Image.open(io.BytesIO(png)) as image:
            return _to_raster(_crop_to_region(image.convert("RGB"), options))


def build_rasterizer(backend: str) -> Rasterizer:
    """Return the capture backend configured by name."""

    backends = {
        WeasyPrintRasterizer.name: WeasyPrintRasterizer,
        PlaywrightRasterizer.name: PlaywrightRasterizer,
    }
    try:
        factory = backends[backend.lower()]
    except KeyError as exc:
        raise ValueError(
            f"Unknown capture backend '{backend}'. Choose one of: {', '.join(backends)}"
        ) from exc
    logger.info("Using capture backend %s", factory.name)
    return factory()
