import io
import zipfile
from collections.abc import Callable

import pytest
from PIL import Image
from reportlab.lib.pagesizes import letter
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

from app.analysis.models import RenderedPage


@pytest.fixture()
def sample_pdf_bytes() -> bytes:
    """Generate a minimal single-page PDF with known text content."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    c.drawString(72, 720, "Hello PDF World")
    c.save()
    return buf.getvalue()


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
def policy_pdf_bytes() -> bytes:
    """A digital policy whose text layer is long enough to skip OCR."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    lines = [
        "APOLICE DE SEGURO AUTOMOVEL",
        "Segurado: Maria Silva  CPF: 111.222.333-44",
        "Veiculo: Fiat Uno 2019  Placa: ABC1234",
        "Chassi: 9BWZZZ377VT004251",
    ]
    for offset, line in enumerate(lines):
        c.drawString(72, 720 - offset * 18, line)
    c.save()
    return buf.getvalue()


@pytest.fixture()
def scanned_pdf_bytes() -> bytes:
    """An image-only page covered with noise, so its rendering is large."""
    noise = Image.effect_noise((400, 400), 90).convert("RGB")
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    c.drawImage(ImageReader(noise), 72, 300, width=400, height=400)
    c.save()
    return buf.getvalue()


@pytest.fixture()
def make_page() -> Callable[..., RenderedPage]:
    """Build a RenderedPage from a generated PNG image."""

    def _make(
        page_number: int = 1,
        size: tuple[int, int] = (64, 64),
        noisy: bool = False,
    ) -> RenderedPage:
        if noisy:
            image = Image.effect_noise(size, 90).convert("RGB")
        else:
            image = Image.new("RGB", size, color=(200, 200, 200))
        buf = io.BytesIO()
        image.save(buf, format="PNG")
        return RenderedPage(
            page_number=page_number,
            image_bytes=buf.getvalue(),
            width_px=size[0],
            height_px=size[1],
        )

    return _make


@pytest.fixture()
def make_zip() -> Callable[[dict[str, bytes]], bytes]:
    """Pack a mapping of entry name -> content into ZIP bytes."""

    def _make(entries: dict[str, bytes]) -> bytes:
        buf = io.BytesIO()
        with zipfile.ZipFile(buf, "w") as archive:
            for name, content in entries.items():
                archive.writestr(name, content)
        return buf.getvalue()

    return _make
