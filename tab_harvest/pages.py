# File: tab_harvest/pages.py
"""tab_harvest.pages: перечисление открытых страниц и проверка закрытых адресов."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Iterable, List, Sequence, Union

from tab_harvest.config import (
    DEFAULT_RESTRICTED_MARKERS,
    DEFAULT_RESTRICTED_PREFIXES,
    read_structured,
)
from tab_harvest.logger import logger
from tab_harvest.models import PageCandidate

__all__: Sequence[str] = ("load_pages", "pages_from_urls", "is_restricted")


def is_restricted(
    url: str,
    prefixes: Sequence[str] = DEFAULT_RESTRICTED_PREFIXES,
    markers: Sequence[str] = DEFAULT_RESTRICTED_MARKERS,
) -> bool:
    """Страница закрыта для внедрения кода: служебная, расширение или магазин расширений."""
    if not url:
        return True
    return url.startswith(tuple(prefixes)) or any(m in url for m in markers)


def pages_from_urls(urls: Iterable[str]) -> List[PageCandidate]:
    """Создаёт PageCandidate из списка URL, id = позиция (с 1)."""
    return [PageCandidate(page_id=i, url=url.strip()) for i, url in enumerate(urls, start=1)]


def _page_from_item(item: Any, position: int) -> PageCandidate:
    if isinstance(item, str):
        return PageCandidate(page_id=position, url=item.strip())
    if isinstance(item, dict):
        if "url" not in item:
            raise ValueError(f"Запись #{position} без поля 'url'")
        page_id = item.get("id", position)
        if isinstance(page_id, bool) or not isinstance(page_id, int):
            raise ValueError(f"Запись #{position}: id должен быть целым числом")
        return PageCandidate(
            page_id=page_id,
            url=str(item["url"] or "").strip(),
            title=str(item.get("title") or ""),
        )
    raise TypeError(f"Запись #{position}: ожидалась строка или mapping, получено {type(item).__name__}")


def load_pages(path: Union[str, Path]) -> List[PageCandidate]:
    """
    Читает список вкладок из YAML/JSON.

    Формат: список строк-URL или mapping-ов ``{id, url, title}``;
    допускается также mapping с ключом ``pages``.
    """
    p = Path(path).expanduser()
    if not p.is_file():
        logger.error("Pages file not found: %s", p)
        raise FileNotFoundError(f"Pages file not found: {p}")

    data = read_structured(p)
    if isinstance(data, dict):
        data = data.get("pages")
    if not isinstance(data, list):
        raise TypeError("Список страниц должен быть списком или mapping с ключом 'pages'")

    pages = [_page_from_item(item, pos) for pos, item in enumerate(data, start=1)]
    seen: set[int] = set()
    for page in pages:
        if page.page_id in seen:
            raise ValueError(f"Повторяющийся id страницы: {page.page_id}")
        seen.add(page.page_id)
    logger.debug("Loaded %d pages from %s", len(pages), p)
    return pages
