"""Исключения конвейера конвертации PNG -> ICO.

Recoverable ошибки (`DecodeFailed`, `CompositingUnavailable`, `EncodeFailed`)
относятся к одному исходному файлу и в пакетном режиме собираются в отчёт.
`EmptyVariantSet` — ошибка программиста, её никто не перехватывает.
"""
from __future__ import annotations

from typing import Optional, Sequence


class IconError(Exception):
    """Базовая ошибка пакета."""

    def __init__(self, message: str, source_name: Optional[str] = None) -> None:
        super().__init__(message)
        self.source_name = source_name


class DecodeFailed(IconError):
    """Файл не удалось прочитать как изображение."""


class CompositingUnavailable(IconError):
    """Не удалось создать поверхность для отрисовки."""


class EncodeFailed(IconError):
    """Кодек сжатого варианта (PNG) вернул ошибку."""


class EmptyVariantSet(IconError):
    """Попытка собрать ICO без единого изображения."""


class ConversionCancelled(IconError):
    """Пакетная конвертация отменена вызывающей стороной."""


class BatchConversionFailed(IconError):
    """Сводная ошибка пакета: перечисляет все исходники, которые не сконвертировались."""

    def __init__(self, failed_names: Sequence[str], report: object = None) -> None:
        names = ", ".join(failed_names)
        super().__init__(f"Failed to convert {len(failed_names)} file(s): {names}")
        self.failed_names = list(failed_names)
        self.report = report


RECOVERABLE_ERRORS = (DecodeFailed, CompositingUnavailable, EncodeFailed)
