"""Rasterizes PDF pages to PNG images with PyMuPDF.

Pages are rendered one at a time, in page order. A rendered page smaller than
the byte floor is a blank page or a scanning artifact and is dropped before it
can reach a paid recognition service.
"""

import pymupdf

from app.analysis.models import RenderedPage
from app.logging.logger import Log
from app.pdf.exceptions import RenderError

MIN_PAGE_BYTES = 30_000


class PageRenderer:
    """Renders every page of a PDF at a DPI multiplier (1.0 = 72 DPI)."""

    def __init__(self, min_page_bytes: int = MIN_PAGE_BYTES) -> None:
        self._min_page_bytes = min_page_bytes

    def render(self, pdf_bytes: bytes, scale: float) -> list[RenderedPage]:
        """Render all pages and keep those above the byte floor.

        Raises:
            RenderError: if the PDF cannot be opened or no page survives the floor.
        """
        try:
            doc = pymupdf.open(stream=pdf_bytes, filetype="pdf")  # type: ignore[no-untyped-call]
        except Exception as exc:
            raise RenderError(f"Cannot open PDF for rendering: {exc}") from exc

        pages: list[RenderedPage] = []
        with doc:
            Log.debug(f"Rendering {doc.page_count} pages", scale=scale)
            matrix = pymupdf.Matrix(scale, scale)
            for index, pdf_page in enumerate(doc, start=1):
                try:
                    pixmap = pdf_page.get_pixmap(matrix=matrix)
                    image_bytes = pixmap.tobytes("png")
                except Exception as exc:
                    Log.warning(f"Page {index} failed to render: {exc}")
                    continue

                if len(image_bytes) < self._min_page_bytes:
                    Log.info(
                        f"Page {index} dropped: {len(image_bytes)} bytes "
                        f"(min {self._min_page_bytes})"
                    )
                    continue

                pages.append(
                    RenderedPage(
                        page_number=index,
                        image_bytes=image_bytes,
                        width_px=pixmap.width,
                        height_px=pixmap.height,
                    )
                )

        if not pages:
            raise RenderError("No valid pages were rendered from PDF")
        Log.info(f"Rendered {len(pages)} usable pages", scale=scale)
        return pages
