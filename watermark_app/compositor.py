"""Composite the text overlay onto an uploaded raster image."""

import logging
from io import BytesIO

import cairosvg
from PIL import Image

from watermark_app.errors import ProcessingError, UnprocessableImageError
from watermark_app.overlay import render_overlay

logger = logging.getLogger(__name__)

PNG = "image/png"
JPEG = "image/jpeg"
JPEG_QUALITY = 95


def decode_image(image_bytes: bytes) -> Image.Image:
    """Decode raw bytes with Pillow, failing with UnprocessableImageError"""
    try:
        img = Image.open(BytesIO(image_bytes))
        img.load()
    except (OSError, ValueError, SyntaxError, Image.DecompressionBombError) as e:
        raise UnprocessableImageError(f"Unprocessable image: {e}") from e
    return img


def rasterize_overlay(width: int, height: int, text: str) -> Image.Image:
    """Render the overlay markup to an RGBA layer of exactly width x height"""
    svg = render_overlay(width, height, text)
    png_bytes = cairosvg.svg2png(
        bytestring=svg.encode("utf-8"),
        output_width=width,
        output_height=height,
    )
    layer = Image.open(BytesIO(png_bytes)).convert("RGBA")
    if layer.size != (width, height):
        layer = layer.resize((width, height))
    return layer


def _has_alpha(img: Image.Image) -> bool:
    return "A" in img.getbands() or "transparency" in img.info


def _to_8bit(img: Image.Image) -> Image.Image:
    """Scale 16-bit greyscale (decoded as I;16 or I) down to 8-bit L"""
    if img.mode == "I" or img.mode.startswith("I;16"):
        return img.convert("I").point(lambda v: v * (1 / 256)).convert("L")
    return img


def apply_watermark(image_bytes: bytes, mime_type: str, text: str) -> bytes:
    """Return ``image_bytes`` with the diagonal text watermark applied.

    The output format mirrors ``mime_type``: PNG stays PNG, JPEG is
    re-encoded as JPEG at quality 95.
    """
    if mime_type not in (PNG, JPEG):
        raise ProcessingError(f"Unsupported output type: {mime_type}")

    img = decode_image(image_bytes)
    width, height = img.size

    try:
        keep_alpha = mime_type == PNG and _has_alpha(img)
        base = _to_8bit(img).convert("RGBA")
        overlay = rasterize_overlay(width, height, text)
        result = Image.alpha_composite(base, overlay)

        buffer = BytesIO()
        if mime_type == PNG:
            result = result if keep_alpha else result.convert("RGB")
            result.save(buffer, format="PNG")
        else:
            result.convert("RGB").save(buffer, format="JPEG", quality=JPEG_QUALITY)
    except Exception as e:
        logger.exception("Failed to watermark %dx%d %s image", width, height, mime_type)
        raise ProcessingError(f"Image processing failed: {e}") from e

    return buffer.getvalue()
