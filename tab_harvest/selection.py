"""tab_harvest.selection: явный выбор страниц вместо флажков в интерфейсе.

Спецификация выбора:

* ``all`` – все страницы, где найдено изображение;
* ``1,3-5`` – номера строк (с 1) и диапазоны, в том числе обратные (``5-3``).

Недоступные страницы пропускаются внутри диапазонов, но явное указание
такой страницы – ошибка.
"""
from __future__ import annotations

from typing import List, Mapping, Sequence

from tab_harvest.models import DetectionResult, PageCandidate, SelectionEntry

__all__: Sequence[str] = ("parse_positions", "select")


def parse_positions(spec: str, count: int) -> List[int]:
    """Переводит спецификацию в отсортированные 0-based индексы без повторов."""
    picked: set[int] = set()
    for part in (p.strip() for p in spec.split(",")):
        if not part:
            continue
        start_s, dash, end_s = part.partition("-")
        try:
            start = int(start_s)
            end = int(end_s) if dash else start
        except ValueError as exc:
            raise ValueError(f"Неверный элемент выбора: {part!r}") from exc
        low, high = min(start, end), max(start, end)
        if low < 1 or high > count:
            raise ValueError(f"Номер вне диапазона 1..{count}: {part!r}")
        picked.update(range(low - 1, high))
    return sorted(picked)


def select(
    pages: Sequence[PageCandidate],
    results: Mapping[int, DetectionResult],
    spec: str = "all",
) -> List[SelectionEntry]:
    """Строит упорядоченный список SelectionEntry по спецификации *spec*."""
    def _available(page: PageCandidate) -> bool:
        result = results.get(page.page_id)
        return result is not None and result.available

    if spec.strip().lower() == "all":
        return [SelectionEntry(p, results[p.page_id]) for p in pages if _available(p)]

    entries: List[SelectionEntry] = []
    for part in (p.strip() for p in spec.split(",")):
        if part and "-" not in part:
            idx = int(part) if part.isdigit() else 0
            if 1 <= idx <= len(pages) and not _available(pages[idx - 1]):
                raise ValueError(f"Страница {idx} недоступна для выбора")
    for idx in parse_positions(spec, len(pages)):
        page = pages[idx]
        if _available(page):
            entries.append(SelectionEntry(page, results[page.page_id]))
    return entries
