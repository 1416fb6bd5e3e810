"""Иерархия исключений TabHarvest.

Ошибки уровня страницы и уровня отдельного файла (``PageAccessError``,
``FetchError``) перехватываются на своей границе и превращаются в результат
или счётчик ошибок. Наружу выходят только ошибки всей операции.
"""
from __future__ import annotations

from typing import Optional

__all__ = [
    "HarvestError",
    "PageAccessError",
    "FetchError",
    "NoSelectionError",
    "NothingToArchiveError",
    "SerializationError",
    "PublishError",
]


class HarvestError(Exception):
    """Базовое исключение проекта."""


class PageAccessError(HarvestError):
    """Страница недоступна для выполнения функции обнаружения."""

    def __init__(self, page_id: int, message: str) -> None:
        super().__init__(f"page {page_id}: {message}")
        self.page_id = page_id


class FetchError(HarvestError):
    """Не удалось получить байты изображения."""

    def __init__(self, url: str, message: str, status: Optional[int] = None) -> None:
        super().__init__(f"{url}: {message}")
        self.url = url
        self.status = status


class NoSelectionError(HarvestError):
    """Не выбрано ни одной страницы."""

    def __init__(self) -> None:
        super().__init__("No tabs selected.")


class NothingToArchiveError(HarvestError):
    """Ни одно изображение не удалось загрузить: пустой архив не создаётся."""

    def __init__(self, error_count: int) -> None:
        super().__init__(f"No images could be downloaded (0 images). Errors: {error_count}")
        self.error_count = error_count


class SerializationError(HarvestError):
    """Архив не удалось сериализовать."""


class PublishError(HarvestError):
    """Внешнее хранилище отказалось принять архив."""
