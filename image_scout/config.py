"""
Модуль для загрузки и валидации конфигурации ImageScout.
Используется Pydantic для описания схемы и проверки данных.

Параметры обхода (CrawlParameters) задаются один раз на запуск и не меняются;
настройки выполнения (CrawlSettings) читаются из YAML/JSON файла.
"""
from __future__ import annotations

import errno
import json
import os
from pathlib import Path
from typing import Any, Literal, Union

import yaml
from pydantic import (
    BaseModel,
    ConfigDict,
    DirectoryPath,
    Field,
    HttpUrl,
    field_validator,
)

__all__ = ["CrawlParameters", "CrawlSettings", "load_config"]


class CrawlParameters(BaseModel):
    """Параметры одного обхода: стартовый адрес, каталог, глубина, внешние ссылки."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    seed_url: HttpUrl = Field(..., description="Стартовая страница обхода.")
    output_dir: DirectoryPath = Field(..., description="Существующий каталог для изображений.")
    max_depth: int = Field(3, ge=0, description="Максимальная глубина перехода по ссылкам.")
    follow_outbound: bool = Field(False, description="Переходить ли на другие хосты.")

    @property
    def seed(self) -> str:
        return str(self.seed_url)


class CrawlSettings(BaseModel):
    """Настройки выполнения, общие для всех обходов."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    crawl_timeout: float = Field(60.0, gt=0, description="Ожидание завершения всего обхода (секунд).")
    request_timeout: float = Field(10.0, gt=0, description="Таймаут на один запрос (секунд).")
    user_agent: str = Field("ImageScoutBot/1.0", min_length=1, description="Заголовок User-Agent.")
    max_name_attempts: int = Field(100, ge=1, le=1000, description="Сколько имён файла пробовать.")
    mode: Literal["parallel", "sequential"] = Field("parallel", description="Стратегия обхода.")

    @field_validator("user_agent", mode="before")
    def _strip_user_agent(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip()
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


def load_config(path: Union[str, Path, None]) -> CrawlSettings:
    """
    Читает YAML или JSON и возвращает проверенный объект CrawlSettings.
    Без пути берёт configs/default.yaml, а при его отсутствии значения по умолчанию.
    Явно указанный, но отсутствующий файл приводит к FileNotFoundError.
    """
    if path is None:
        if not _DEFAULT_CFG.exists():
            return CrawlSettings()
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

    return CrawlSettings(**data)
