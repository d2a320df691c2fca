import io
import zipfile
from collections.abc import Callable

import pytest
from reportlab.lib.pagesizes import letter
from reportlab.pdfgen import canvas


def make_pdf(*lines: str) -> bytes:
    """Generate a single-page PDF with one text line per argument."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    y = 720
    for line in lines:
        c.drawString(72, y, line)
        y -= 18
    c.save()
    return buf.getvalue()


def make_zip(entries: dict[str, bytes]) -> bytes:
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w") as archive:
        for name, data in entries.items():
            archive.writestr(name, data)
    return buf.getvalue()


@pytest.fixture()
def sample_pdf_bytes() -> bytes:
    """Generate a minimal single-page PDF with known text content."""
    return make_pdf("Hello PDF World")


@pytest.fixture()
def multi_page_pdf_bytes() -> bytes:
    """Generate a two-page PDF with known text on each page."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    c.drawString(72, 720, "Page one content")
    c.showPage()
    c.drawString(72, 720, "Page two content")
    c.save()
    return buf.getvalue()


@pytest.fixture()
def empty_pdf_bytes() -> bytes:
    """Generate a valid PDF with no text content (blank page)."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    c.showPage()
    c.save()
    return buf.getvalue()


@pytest.fixture()
def google_invoice_pdf_bytes() -> bytes:
    return make_pdf(
        "Google Ads",
        "Invoice number: 5123456789",
        "Invoice date 5 March 2024",
        "Account ID: 123-456-7890",
        "Brand Search 120 Clicks 600.00",
        "Subtotal in INR 1,000.00",
        "Integrated GST (18%) 180.00",
        "Total in INR 1,180.00",
    )


@pytest.fixture()
def pdf_factory() -> Callable[..., bytes]:
    return make_pdf


@pytest.fixture()
def zip_factory() -> Callable[[dict[str, bytes]], bytes]:
    return make_zip
