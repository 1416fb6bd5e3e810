"""tab_harvest.detector: поиск главного изображения страницы и миниатюры."""

from .page_detector import PageContext, detect_image
from .thumbnail import image_size, render_thumbnail

__all__ = ["PageContext", "detect_image", "image_size", "render_thumbnail"]
