"""
Модуль для загрузки и валидации конфигурации TabHarvest.
Используется Pydantic для описания схемы и проверки данных.
"""
from __future__ import annotations

import errno
import json
import os
from pathlib import Path
from typing import Any, Union

import yaml
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
)

#: Префиксы адресов, куда нельзя внедрять код (служебные страницы браузера).
DEFAULT_RESTRICTED_PREFIXES: tuple[str, ...] = ("chrome:", "edge:", "about:", "chrome-extension:")
#: Подстроки адресов магазина расширений.
DEFAULT_RESTRICTED_MARKERS: tuple[str, ...] = ("chrome.google.com/webstore",)


class HarvesterConfig(BaseModel):
    """Конфигурация одного запуска сбора изображений."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    timeout: float = Field(10.0, gt=0, description="Таймаут на один запрос (секунд).")
    user_agent: str = Field("TabHarvest/1.0", min_length=1, description="Заголовок User-Agent.")
    retry_times: int = Field(2, ge=0, description="Число повторных попыток при 5xx/429.")
    load_page_images: bool = Field(
        True, description="Подгружать <img> страницы, чтобы знать натуральный размер."
    )
    max_page_images: int = Field(50, ge=0, description="Лимит подгружаемых <img> на страницу.")
    thumbnail_size: int = Field(160, gt=0, description="Макс. сторона миниатюры (px).")
    entry_spacing: float = Field(
        120.0,
        gt=2.0,
        description="Шаг синтетической метки времени между файлами архива (секунд).",
    )
    archive_prefix: str = Field("bulk_images", min_length=1, description="Префикс имени архива.")
    output_dir: Path = Field(Path("downloads"), description="Каталог для сохранения архива.")
    restricted_prefixes: tuple[str, ...] = Field(
        DEFAULT_RESTRICTED_PREFIXES, description="Префиксы URL закрытых страниц."
    )
    restricted_markers: tuple[str, ...] = Field(
        DEFAULT_RESTRICTED_MARKERS, description="Подстроки URL закрытых страниц."
    )

    @field_validator("archive_prefix")
    def _no_path_separators(cls, v: str) -> str:
        if "/" in v or "\\" in v:
            raise ValueError("archive_prefix must not contain path separators")
        return v


_DEFAULT_CFG = Path("configs/default.yaml")


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise ValueError(f"Неправильный YAML в {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Верхний уровень YAML должен быть mapping, получено {type(data).__name__}")
    return data


def _read_json(path: Path) -> dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8")) or {}
    except json.JSONDecodeError as exc:
        raise ValueError(f"Неправильный JSON в {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Верхний уровень JSON должен быть mapping, получено {type(data).__name__}")
    return data


def read_structured(path: Path) -> Any:
    """Читает YAML/JSON-файл без проверки типа верхнего уровня."""
    suffix = path.suffix.lower()
    text = path.read_text(encoding="utf-8")
    if suffix in (".yaml", ".yml"):
        try:
            return yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise ValueError(f"Неправильный YAML в {path}: {exc}") from exc
    if suffix == ".json":
        try:
            return json.loads(text)
        except json.JSONDecodeError as exc:
            raise ValueError(f"Неправильный JSON в {path}: {exc}") from exc
    raise ValueError(f"Неподдерживаемый формат файла: {suffix}")


def load_config(path: Union[str, Path, None]) -> HarvesterConfig:
    """
    Читает YAML или JSON и возвращает проверенный объект HarvesterConfig.
    Без пути берёт configs/default.yaml, а если его нет, значения по умолчанию.
    """
    if path is None:
        if not _DEFAULT_CFG.exists():
            return HarvesterConfig()
        path_obj = _DEFAULT_CFG
    else:
        path_obj = Path(path).expanduser().resolve()
        if not path_obj.is_file():
            raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(path_obj))

    suffix = path_obj.suffix.lower()
    if suffix in (".yaml", ".yml"):
        data = _read_yaml(path_obj)
    elif suffix == ".json":
        data = _read_json(path_obj)
    else:
        raise ValueError(f"Неподдерживаемый формат конфига: {suffix}")

    try:
        return HarvesterConfig(**data)
    except ValidationError:
        raise
