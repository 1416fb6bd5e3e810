"""Best-effort preview rendering for detected images.

Thumbnails are UI feedback only: every failure is reported as ``None`` so that
detection never aborts because a preview could not be drawn.
"""
from __future__ import annotations

import base64
import io
from typing import Optional, Tuple

from PIL import Image

DEFAULT_MAX_EDGE = 160


def image_size(data: Optional[bytes]) -> Optional[Tuple[int, int]]:
    """Return the natural ``(width, height)`` of encoded image *data*, or ``None``."""
    if not data:
        return None
    try:
        with Image.open(io.BytesIO(data)) as img:
            return img.size
    except Exception:  # best-effort
        return None


def thumbnail_dimensions(width: int, height: int, max_edge: int = DEFAULT_MAX_EDGE) -> Tuple[int, int]:
    """Scale ``width`` x ``height`` so the longest edge fits *max_edge*; never upscale."""
    ratio = min(1.0, max_edge / max(width, height, 1))
    return max(1, round(width * ratio)), max(1, round(height * ratio))


def render_thumbnail(data: Optional[bytes], max_edge: int = DEFAULT_MAX_EDGE) -> Optional[str]:
    """Render *data* into a PNG ``data:`` URL no larger than *max_edge* pixels."""
    if not data:
        return None
    try:
        with Image.open(io.BytesIO(data)) as img:
            img.load()
            size = thumbnail_dimensions(img.width, img.height, max_edge)
            preview = img.convert("RGBA").resize(size, resample=Image.Resampling.LANCZOS)
        buffer = io.BytesIO()
        preview.save(buffer, format="PNG")
    except Exception:  # best-effort
        return None
    return "data:image/png;base64," + base64.b64encode(buffer.getvalue()).decode("ascii")
