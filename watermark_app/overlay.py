"""Diagonal tiled text overlay, shared by the server render and the client preview.

The overlay is an SVG document sized to exactly ``width x height``. Rows of
the watermark text are laid out on a square twice the image diagonal wide,
then rotated about the image center so the baseline runs from the bottom-left
corner to the top-right corner and the rotated tiles cover the whole canvas.
"""

import math
from dataclasses import dataclass
from typing import List, Tuple
from xml.sax.saxutils import escape

MIN_FONT_SIZE = 16
FONT_SIZE_DIVISOR = 30
LINE_SPACING_FACTOR = 3

_ESCAPES = {'"': "&quot;", "'": "&apos;"}


@dataclass(frozen=True)
class WatermarkGeometry:
    font_size: int
    line_spacing: int
    rotation_angle: float  # degrees
    tile_origin_offset: Tuple[float, float]
    cover_diagonal: float


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def compute_geometry(width: int, height: int) -> WatermarkGeometry:
    """Compute font size, spacing, rotation and tiling origin for an image.

    Width and height must be positive, already-decoded image dimensions.
    """
    diagonal = math.sqrt(width * width + height * height)
    font_size = max(MIN_FONT_SIZE, _round_half_up(diagonal / FONT_SIZE_DIVISOR))
    cover = diagonal * 2

    return WatermarkGeometry(
        font_size=font_size,
        line_spacing=font_size * LINE_SPACING_FACTOR,
        rotation_angle=-math.atan2(height, width) * (180 / math.pi),
        tile_origin_offset=(-cover / 2 + width / 2, -cover / 2 + height / 2),
        cover_diagonal=cover,
    )


def escape_text(text: str) -> str:
    """Escape the five XML metacharacters"""
    return escape(text, _ESCAPES)


def _num(value) -> str:
    # Integral values print without a fractional part
    if isinstance(value, float):
        return str(int(value)) if value.is_integer() else repr(value)
    return str(value)


def render_overlay(width: int, height: int, text: str) -> str:
    """Render the watermark overlay markup for a ``width x height`` image"""
    geometry = compute_geometry(width, height)
    offset_x, offset_y = geometry.tile_origin_offset
    cover = geometry.cover_diagonal
    content = escape_text(text)

    lines: List[str] = []
    y = 0
    while y < cover:
        lines.append(
            f'<text x="{_num(cover / 2)}" y="{_num(y)}" text-anchor="middle" '
            f'font-family="sans-serif" font-size="{geometry.font_size}" fill="white" '
            f'fill-opacity="0.5" letter-spacing="2">{content}</text>'
        )
        y += geometry.line_spacing

    transform = (
        f"translate({_num(width / 2)}, {_num(height / 2)}) "
        f"rotate({_num(geometry.rotation_angle)}) "
        f"translate({_num(offset_x - width / 2)}, {_num(offset_y - height / 2)})"
    )
    body = "\n    ".join(lines)

    return (
        f'<svg xmlns="http://www.w3.org/2000/svg" width="{width}" height="{height}">\n'
        f'  <g transform="{transform}">\n'
        f"    {body}\n"
        f"  </g>\n"
        f"</svg>"
    )
