"""Модели ICO: запрошенные размеры, закодированные варианты, результаты пакета."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple

from png2ico.models.errors import BatchConversionFailed, IconError

MAX_ICON_SIZE = 256


class Tier(Enum):
    BITMAP = "bitmap"
    COMPRESSED = "compressed"


class ConversionMode(Enum):
    OPTIMIZED = "optimized"
    SINGLE_LARGE = "single_large"


class BatchIntent(Enum):
    SINGLE_FILE = "single_file"
    COMBINED_ARCHIVE = "combined_archive"


@dataclass(frozen=True)
class SizeSpec:
    """Один вариант иконки: квадрат 1..256 px и способ кодирования."""
    width: int
    height: int
    tier: Tier

    def __post_init__(self) -> None:
        if self.width != self.height:
            raise ValueError(f"Icons must be square, got {self.width}x{self.height}")
        if not 1 <= self.width <= MAX_ICON_SIZE:
            raise ValueError(f"Icon size must be in [1, {MAX_ICON_SIZE}], got {self.width}")


@dataclass(frozen=True)
class SizePolicy:
    """Таблица размеров для каждого режима.

    Создаётся один раз и передаётся в конвертер явно, чтобы тесты могли
    подставить урезанный набор.
    """
    optimized: Tuple[SizeSpec, ...]
    single: Tuple[SizeSpec, ...]

    @classmethod
    def default(cls) -> "SizePolicy":
        return cls(
            optimized=(
                SizeSpec(16, 16, Tier.BITMAP),
                SizeSpec(32, 32, Tier.BITMAP),
                SizeSpec(48, 48, Tier.BITMAP),
                SizeSpec(64, 64, Tier.BITMAP),
                SizeSpec(128, 128, Tier.COMPRESSED),
                SizeSpec(256, 256, Tier.COMPRESSED),
            ),
            single=(SizeSpec(256, 256, Tier.COMPRESSED),),
        )

    def specs_for(self, mode: ConversionMode) -> Tuple[SizeSpec, ...]:
        if mode is ConversionMode.OPTIMIZED:
            return self.optimized
        return self.single


@dataclass(frozen=True)
class EncodedVariant:
    spec: SizeSpec
    payload: bytes


@dataclass(frozen=True)
class IconContainer:
    """Собранный ICO: варианты в порядке каталога и итоговые байты файла."""
    variants: Tuple[EncodedVariant, ...]
    data: bytes


@dataclass(frozen=True)
class ConversionResult:
    output_name: str
    data: bytes


@dataclass(frozen=True)
class SourceFailure:
    index: int
    name: str
    error: IconError


@dataclass
class BatchReport:
    """Итог пакетной конвертации.

    `results` содержит только успешные результаты в порядке входа,
    `failures` — ошибки по отдельным исходникам.
    """
    intent: BatchIntent
    source_count: int
    results: List[ConversionResult] = field(default_factory=list)
    failures: List[SourceFailure] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures

    @property
    def aggregate_error(self) -> Optional[BatchConversionFailed]:
        if self.intent is not BatchIntent.COMBINED_ARCHIVE or not self.failures:
            return None
        return BatchConversionFailed([f.name for f in self.failures], report=self)

    def error_for(self, name: str) -> Optional[IconError]:
        for failure in self.failures:
            if failure.name == name:
                return failure.error
        return None
