"""Настройки конвертера из переменных окружения.

Environment Variables:
    PNG2ICO_OPTIMIZED: Режим по умолчанию "оптимизировано для Windows" (default: true)
    PNG2ICO_MAX_WORKERS: Сколько исходников обрабатывать параллельно (default: 4)
    PNG2ICO_RESAMPLE: Фильтр масштабирования: lanczos | bicubic | bilinear (default: lanczos)
    PNG2ICO_COMPRESS_LEVEL: Уровень zlib для PNG-вариантов, 0-9 (default: 6)
    PNG2ICO_LOG_LEVEL: Уровень логирования (default: INFO)
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass

from PIL import Image

logger = logging.getLogger(__name__)

RESAMPLE_FILTERS = {
    "lanczos": Image.Resampling.LANCZOS,
    "bicubic": Image.Resampling.BICUBIC,
    "bilinear": Image.Resampling.BILINEAR,
}


@dataclass(frozen=True)
class ConverterConfig:
    optimized: bool = True
    max_workers: int = 4
    resample: str = "lanczos"
    compress_level: int = 6
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "ConverterConfig":
        resample = os.getenv("PNG2ICO_RESAMPLE", "lanczos").strip().lower()
        if resample not in RESAMPLE_FILTERS:
            logger.warning("Unknown PNG2ICO_RESAMPLE=%r, using lanczos", resample)
            resample = "lanczos"

        compress_level = cls._get_int_env("PNG2ICO_COMPRESS_LEVEL", 6)
        if not 0 <= compress_level <= 9:
            compress_level = 6

        log_level = os.getenv("PNG2ICO_LOG_LEVEL", "INFO").strip().upper()
        if not isinstance(logging.getLevelName(log_level), int):
            log_level = "INFO"

        return cls(
            optimized=cls._get_bool_env("PNG2ICO_OPTIMIZED", True),
            max_workers=max(1, cls._get_int_env("PNG2ICO_MAX_WORKERS", 4)),
            resample=resample,
            compress_level=compress_level,
            log_level=log_level,
        )

    @property
    def resample_filter(self) -> Image.Resampling:
        return RESAMPLE_FILTERS[self.resample]

    @staticmethod
    def _get_bool_env(key: str, default: bool) -> bool:
        value = os.getenv(key)
        if value is None:
            return default
        return value.strip().lower() in ("true", "1", "yes", "on")

    @staticmethod
    def _get_int_env(key: str, default: int) -> int:
        value = os.getenv(key)
        if value is None:
            return default
        try:
            return int(value)
        except ValueError:
            return default
