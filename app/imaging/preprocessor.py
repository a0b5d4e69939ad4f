"""Page image enhancement for OCR and for vision-model consumption.

Every stage is wrapped with ``fail_open``: when Pillow cannot process a page
the original rendered page continues down the pipeline unchanged.
"""

import functools
import io
from collections.abc import Callable
from dataclasses import replace

from PIL import Image, ImageFilter, ImageOps

from app.analysis.models import RenderedPage
from app.logging.logger import Log

VISION_JPEG_THRESHOLD_BYTES = 300_000

PageStage = Callable[["ImagePreprocessor", RenderedPage], RenderedPage]


def fail_open(stage: PageStage) -> PageStage:
    """Return the input page unchanged if the wrapped stage raises."""

    @functools.wraps(stage)
    def wrapper(self: "ImagePreprocessor", page: RenderedPage) -> RenderedPage:
        try:
            return stage(self, page)
        except Exception as exc:
            Log.warning(
                f"Preprocessing stage '{stage.__name__}' failed, forwarding original: {exc}",
                page=page.page_number,
            )
            return page

    return wrapper


class ImagePreprocessor:
    """Two independently tunable enhancement modes over rendered pages."""

    def __init__(
        self,
        jpeg_threshold_bytes: int = VISION_JPEG_THRESHOLD_BYTES,
        jpeg_quality: int = 95,
        median_size: int = 3,
    ) -> None:
        self._jpeg_threshold_bytes = jpeg_threshold_bytes
        self._jpeg_quality = jpeg_quality
        self._median_size = median_size

    @fail_open
    def for_ocr(self, page: RenderedPage) -> RenderedPage:
        """Auto-contrast, denoise, sharpen, lossless PNG."""
        with Image.open(io.BytesIO(page.image_bytes)) as source:
            image = ImageOps.autocontrast(source.convert("L"))
        image = image.filter(ImageFilter.MedianFilter(size=self._median_size))
        image = image.filter(ImageFilter.SHARPEN)
        processed = _encode(image, "PNG", optimize=True, compress_level=9)
        Log.debug(
            f"OCR preprocessing: {page.size_bytes} -> {len(processed)} bytes",
            page=page.page_number,
        )
        return replace(
            page,
            image_bytes=processed,
            width_px=image.width,
            height_px=image.height,
            mime_type="image/png",
        )

    @fail_open
    def for_vision(self, page: RenderedPage) -> RenderedPage:
        """Auto-contrast; JPEG above the size threshold, compressed PNG otherwise."""
        with Image.open(io.BytesIO(page.image_bytes)) as source:
            image = ImageOps.autocontrast(source.convert("RGB"))

        if page.size_bytes > self._jpeg_threshold_bytes:
            processed = _encode(image, "JPEG", quality=self._jpeg_quality, optimize=True)
            mime_type = "image/jpeg"
        else:
            processed = _encode(image, "PNG", optimize=True, compress_level=9)
            mime_type = "image/png"

        Log.debug(
            f"Vision optimization ({mime_type}): {page.size_bytes} -> {len(processed)} bytes",
            page=page.page_number,
        )
        return replace(
            page,
            image_bytes=processed,
            width_px=image.width,
            height_px=image.height,
            mime_type=mime_type,
        )


def _encode(image: Image.Image, fmt: str, **options: object) -> bytes:
    buf = io.BytesIO()
    image.save(buf, format=fmt, **options)
    return buf.getvalue()
