import pypdfium2 as pdfium
import pytest
from PIL import Image

from medreport.app.models.export import CaptureOptions, PageSizePolicy, RasterImage
from medreport.app.services.document_writer import ReportLabDocumentWriter, page_layout
from medreport.app.services.file_saver import LocalFileSaver
from medreport.app.services.rasterizer import (
    PlaywrightRasterizer,
    WeasyPrintRasterizer,
    _crop_to_region,
    build_rasterizer,
)

from conftest import make_png


def build_raster(width: int, height: int) -> RasterImage:
    return RasterImage(png=make_png(width, height), width=width, height=height)


def page_size(pdf_bytes: bytes):
    document = pdfium.PdfDocument(pdf_bytes)
    try:
        assert len(document) == 1
        return document[0].get_size()
    finally:
        document.close()


def test_fixed_page_layout_scales_to_a4_width():
    (page_w, page_h), (image_w, image_h) = page_layout(
        build_raster(1588, 2246), PageSizePolicy.FIXED_PAGE
    )

    assert page_w == pytest.approx(595.28, abs=0.01)
    assert page_h == pytest.approx(841.89, abs=0.01)
    assert image_w == page_w
    assert image_h == pytest.approx(2246 * page_w / 1588)


def test_fit_raster_layout_matches_pixels():
    page, image = page_layout(build_raster(300, 200), PageSizePolicy.FIT_RASTER)

    assert page == (300.0, 200.0)
    assert image == page


def test_empty_raster_is_rejected():
    with pytest.raises(ValueError):
        page_layout(RasterImage(png=b"", width=0, height=10), PageSizePolicy.FIXED_PAGE)


@pytest.mark.parametrize(
    "policy, expected",
    [
        (PageSizePolicy.FIXED_PAGE, (595.28, 841.89)),
        (PageSizePolicy.FIT_RASTER, (300.0, 450.0)),
    ],
)
def test_encode_produces_single_page_pdf(policy, expected):
    pdf_bytes = ReportLabDocumentWriter(policy).encode(build_raster(300, 450))

    assert pdf_bytes.startswith(b"%PDF")
    width, height = page_size(pdf_bytes)
    assert width == pytest.approx(expected[0], abs=0.01)
    assert height == pytest.approx(expected[1], abs=0.01)


def test_crop_to_region_uses_scaled_size():
    image = Image.new("RGB", (200, 300))

    cropped = _crop_to_region(image, CaptureOptions(scale=2.0, width=50, height=100))

    assert cropped.size == (100, 200)
    assert _crop_to_region(image, CaptureOptions()).size == (200, 300)


def test_build_rasterizer_by_name():
    assert isinstance(build_rasterizer("weasyprint"), WeasyPrintRasterizer)
    assert isinstance(build_rasterizer("Playwright"), PlaywrightRasterizer)
    with pytest.raises(ValueError):
        build_rasterizer("html2canvas")


def test_local_file_saver_writes_atomically(tmp_path):
    saver = LocalFileSaver(tmp_path / "exports")

    path = saver.save("medical_report_ID-42.pdf", b"%PDF-1.4")

    assert path.read_bytes() == b"%PDF-1.4"
    assert [p.name for p in path.parent.iterdir()] == ["medical_report_ID-42.pdf"]


def test_local_file_saver_refuses_paths(tmp_path):
    with pytest.raises(ValueError):
        LocalFileSaver(tmp_path).save("../escape.pdf", b"")
