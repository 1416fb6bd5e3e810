# tab_harvest/report/json_report.py

"""
Генерация JSON-отчёта о сканировании вкладок.
"""
import json
from pathlib import Path
from typing import Any, Dict, List


def render_json(rows: List[Dict[str, Any]], output_path: Path | str, *, pretty: bool = True) -> Path:
    """
    Сохраняет строки отчёта в формате JSON по указанному пути.

    Миниатюры (data URL) в JSON не попадают, чтобы файл оставался читаемым.

    :param rows: строки из :func:`tab_harvest.report.scan_rows`
    :param output_path: путь к JSON-файлу
    :return: Path сохранённого файла
    """
    output = Path(output_path)
    output.parent.mkdir(parents=True, exist_ok=True)

    data = [{k: v for k, v in row.items() if k != "thumbnail"} for row in rows]

    with output.open("w", encoding="utf-8") as f:
        json.dump(data, f, ensure_ascii=False, indent=2 if pretty else None)

    return output
