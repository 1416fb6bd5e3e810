"""tab_harvest.report: отчёты о сканировании (JSON и HTML) для CLI."""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Sequence

from tab_harvest.models import DetectionResult, PageCandidate

from .html_report import render_html
from .json_report import render_json


def scan_rows(
    pages: Sequence[PageCandidate], results: Mapping[int, DetectionResult]
) -> List[Dict[str, Any]]:
    """Строки отчёта в порядке отображения (порядок вкладок)."""
    rows: List[Dict[str, Any]] = []
    for position, page in enumerate(pages, start=1):
        result = results[page.page_id]
        rows.append(
            {
                "position": position,
                "page_id": page.page_id,
                "url": page.url,
                "title": page.title or result.title or "(no title)",
                "available": result.available,
                "src": result.src,
                "filename": result.filename,
                "thumbnail": result.thumbnail,
                "reason": None if result.available else (result.reason or "No image found"),
            }
        )
    return rows


__all__ = ["render_json", "render_html", "scan_rows"]
