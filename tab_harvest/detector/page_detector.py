"""Detection of the representative image of a single page.

:func:`detect_image` is shipped to the page by a
:class:`~tab_harvest.executor.ScriptExecutor` and runs against whatever the
page has already loaded. It is a pure function: it never performs network
I/O, never touches orchestrator state and always returns a JSON-serializable
mapping shaped like :class:`~tab_harvest.models.DetectionResult`.

Ranking
-------
1. The ``<img>`` with the largest area (natural size when the image bytes are
   loaded, displayed size otherwise). Ties go to the first in document order.
2. When no ``<img>`` has a positive area (none present, or only unsized and
   unloaded ones): the body ``background-image``, then the Open Graph
   ``og:image`` meta tag.
"""
from __future__ import annotations

import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple
from urllib.parse import urljoin

from bs4 import BeautifulSoup
from bs4.element import Tag

from tab_harvest.detector.thumbnail import DEFAULT_MAX_EDGE, image_size, render_thumbnail

__all__: Sequence[str] = ("PageContext", "detect_image", "filename_from_url", "extract_css_url")

NO_IMAGE_REASON = "No image elements or background found"

_CSS_URL_RE = re.compile(r"""url\(\s*(["']?)(.*?)\1\s*\)""", re.IGNORECASE)
_CSS_RULE_RE = re.compile(r"([^{}]+)\{([^{}]*)\}")
_CSS_COMMENT_RE = re.compile(r"/\*.*?\*/", re.DOTALL)
_PX_RE = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*(?:px)?\s*$", re.IGNORECASE)
_UNSAFE_NAME_RE = re.compile(r"[^A-Za-z0-9_.\-]")


@dataclass(slots=True)
class PageContext:
    """Everything the page has loaded: its URL, markup and fetched image bytes."""

    url: str
    html: str
    images: Mapping[str, bytes] = field(default_factory=dict)


# --------------------------------------------------------------------------- #
# Helpers                                                                     #
# --------------------------------------------------------------------------- #


def filename_from_url(src: str) -> str:
    """Last path segment of *src* with query string and fragment stripped."""
    path = src.split("#", 1)[0].split("?", 1)[0]
    return path.rsplit("/", 1)[-1]


def _extension(src: str) -> str:
    name = filename_from_url(src)
    if "." not in name:
        return "jpg"
    return name.rsplit(".", 1)[-1] or "jpg"


def extract_css_url(value: str) -> Optional[str]:
    """Pull the address out of a CSS ``url(...)`` function, quoted or not."""
    match = _CSS_URL_RE.search(value or "")
    if match and match.group(2).strip():
        return match.group(2).strip()
    return None


def _pixels(value: Any) -> Optional[float]:
    if value is None:
        return None
    match = _PX_RE.match(str(value))
    return float(match.group(1)) if match else None


def _declarations(style: str) -> Dict[str, str]:
    decls: Dict[str, str] = {}
    for chunk in style.split(";"):
        prop, sep, value = chunk.partition(":")
        if sep:
            decls[prop.strip().lower()] = value.strip()
    return decls


def _displayed_size(img: Tag) -> Tuple[float, float]:
    decls = _declarations(str(img.get("style") or ""))
    width = _pixels(decls.get("width")) or _pixels(img.get("width")) or 0.0
    height = _pixels(decls.get("height")) or _pixels(img.get("height")) or 0.0
    return width, height


def _background_from_declarations(decls: Dict[str, str]) -> Tuple[bool, Optional[str]]:
    """Return ``(declared, url)`` for background declarations of one rule."""
    for prop in ("background-image", "background"):
        if prop in decls:
            return True, extract_css_url(decls[prop])
    return False, None


def _body_background(soup: BeautifulSoup) -> Optional[str]:
    """Approximate the computed ``background-image`` of ``<body>``.

    Later stylesheet rules override earlier ones; the inline ``style``
    attribute overrides every stylesheet.
    """
    result: Optional[str] = None
    for style_tag in soup.find_all("style"):
        css = _CSS_COMMENT_RE.sub("", style_tag.get_text())
        for selectors, body in _CSS_RULE_RE.findall(css):
            if "body" not in {s.strip().lower() for s in selectors.split(",")}:
                continue
            declared, url = _background_from_declarations(_declarations(body))
            if declared:
                result = url
    body = soup.body
    if body is not None and body.get("style"):
        declared, url = _background_from_declarations(_declarations(str(body["style"])))
        if declared:
            result = url
    return result


def _og_image(soup: BeautifulSoup) -> Optional[str]:
    def _is_og(tag: Tag) -> bool:
        return tag.name == "meta" and "og:image" in (tag.get("property"), tag.get("name"))

    meta = soup.find(_is_og)
    content = meta.get("content") if isinstance(meta, Tag) else None
    return str(content).strip() if content and str(content).strip() else None


def _fallback(src: str, base_url: str, title: str) -> Dict[str, Any]:
    absolute = urljoin(base_url, src)
    return {
        "available": True,
        "src": absolute,
        "filename": filename_from_url(absolute),
        "thumb": None,
        "title": title,
    }


# --------------------------------------------------------------------------- #
# Public function                                                             #
# --------------------------------------------------------------------------- #


def detect_image(context: PageContext, thumbnail_size: int = DEFAULT_MAX_EDGE) -> Dict[str, Any]:
    """Find the main image on the page described by *context*."""
    title = ""
    try:
        soup = BeautifulSoup(context.html, "html.parser")
        if soup.title is not None:
            title = soup.title.get_text(strip=True)

        best: Optional[Tag] = None
        best_src = ""
        best_area = 0.0
        for img in soup.find_all("img"):
            raw = str(img.get("src") or "").strip()
            if not raw:
                continue
            src = urljoin(context.url, raw)
            natural = image_size(context.images.get(src))
            shown_w, shown_h = _displayed_size(img)
            width = natural[0] if natural else shown_w
            height = natural[1] if natural else shown_h
            area = width * height
            if area > best_area:
                best, best_src, best_area = img, src, area

        if best is None:
            background = _body_background(soup)
            if background:
                return _fallback(background, context.url, title)
            og = _og_image(soup)
            if og:
                return _fallback(og, context.url, title)
            return {"available": False, "reason": NO_IMAGE_REASON, "title": title}

        alt = str(best.get("alt") or "").strip()
        if alt:
            filename = f"{_UNSAFE_NAME_RE.sub('_', alt)}.{_extension(best_src)}"
        else:
            filename = filename_from_url(best_src)

        return {
            "available": True,
            "src": best_src,
            "filename": filename,
            "thumb": render_thumbnail(context.images.get(best_src), thumbnail_size),
            "title": title,
        }
    except Exception as exc:  # noqa: BLE001 - reported to the caller as a result
        return {"available": False, "reason": f"exception: {exc}", "title": title}
