# File: tab_harvest/report/html_report.py
"""tab_harvest.report.html_report: Генерация HTML-отчёта с помощью Jinja2."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Union

from jinja2 import Environment, FileSystemLoader, select_autoescape

#: Каталог со встроенными шаблонами пакета.
DEFAULT_TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates"

PLACEHOLDER_THUMB = (
    'data:image/svg+xml;utf8,<svg xmlns="http://www.w3.org/2000/svg" width="60" height="40">'
    '<rect width="60" height="40" fill="%23f0f0f0"/></svg>'
)


def render_html(
    rows: List[Dict[str, Any]],
    template_dir: Union[Path, str, None],
    output_path: Union[Path, str],
) -> Path:
    """Рендерит HTML-отчёт из шаблона ``report.html.j2`` и сохраняет его.

    Args:
        rows: строки отчёта (см. :func:`tab_harvest.report.scan_rows`).
        template_dir: директория с Jinja2-шаблонами; None – встроенные шаблоны.
        output_path: путь к итоговому HTML-файлу.

    Returns:
        Path до сохранённого HTML-файла.
    """
    template_dir = Path(template_dir) if template_dir else DEFAULT_TEMPLATE_DIR
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    env = Environment(
        loader=FileSystemLoader(str(template_dir)),
        autoescape=select_autoescape(["html", "xml", "j2"]),
    )
    template = env.get_template("report.html.j2")

    context: dict[str, Any] = {
        "rows": rows,
        "placeholder": PLACEHOLDER_THUMB,
        "found": sum(1 for r in rows if r["available"]),
    }

    html_content = template.render(**context)
    output_path.write_text(html_content, encoding="utf-8")

    return output_path
