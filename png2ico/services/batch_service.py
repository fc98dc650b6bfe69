"""Конвертация одного и нескольких исходников в ICO.

Каждый исходник обрабатывается независимо: декодирование -> масштабирование
-> кодирование -> сборка. В пакетном режиме исходники идут параллельно
(пул потоков), а результаты раскладываются по индексу входа.
"""
from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence, Union

from png2ico.config import ConverterConfig
from png2ico.models.errors import RECOVERABLE_ERRORS, ConversionCancelled
from png2ico.models.icon_model import (
    BatchIntent,
    BatchReport,
    ConversionMode,
    ConversionResult,
    EncodedVariant,
    IconContainer,
    SizePolicy,
    SourceFailure,
)
from png2ico.models.image_model import SourceFile, SourceImage
from png2ico.services.ico_writer import build_container
from png2ico.services.image_service import decode_image
from png2ico.services.pixel_encoder import PixelEncoder, png_compress
from png2ico.services.resample_service import Compositor, PillowCompositor, resample

logger = logging.getLogger(__name__)

Source = Union[SourceImage, SourceFile]
Decoder = Callable[[bytes, str], SourceImage]


def output_name_for(source_name: str) -> str:
    """"logo.png" -> "logo.ico"."""
    return f"{Path(source_name).stem}.ico"


class IconConverter:
    """Оркестратор конвейера.

    Все зависимости (таблица размеров, отрисовка, кодек, декодер) передаются
    явно и не меняются после создания.
    """

    def __init__(
        self,
        policy: Optional[SizePolicy] = None,
        compositor: Optional[Compositor] = None,
        encoder: Optional[PixelEncoder] = None,
        decoder: Optional[Decoder] = None,
        max_workers: int = 4,
    ) -> None:
        self.policy = policy or SizePolicy.default()
        self.compositor = compositor or PillowCompositor()
        self.encoder = encoder or PixelEncoder()
        self.decoder = decoder or decode_image
        self.max_workers = max(1, max_workers)
        self._batch_cancel: Optional[threading.Event] = None

    def cancel(self) -> None:
        """Просит прервать текущий пакет; незавершённые контейнеры отбрасываются."""
        token = self._batch_cancel
        if token is not None:
            token.set()

    # ---- Single source ----
    def convert_image(
        self,
        source: Source,
        mode: ConversionMode,
        cancel: Optional[threading.Event] = None,
    ) -> IconContainer:
        image = self._materialize(source)
        variants: List[EncodedVariant] = []
        for spec in self.policy.specs_for(mode):
            if cancel is not None and cancel.is_set():
                raise ConversionCancelled(f"Conversion of {image.name} cancelled", source_name=image.name)
            pixels = resample(image, spec.width, spec.height, compositor=self.compositor)
            try:
                payload = self.encoder.encode(pixels, spec.tier)
            except RECOVERABLE_ERRORS as exc:
                if exc.source_name is None:
                    exc.source_name = image.name
                raise
            variants.append(EncodedVariant(spec=spec, payload=payload))
        container = build_container(variants)
        logger.info("Converted %s: %d image(s), %d bytes", image.name, len(variants), len(container.data))
        return container

    def convert_one(self, source: Source, mode: ConversionMode) -> bytes:
        """Путь "скачать один файл": ошибка поднимается сразу и относится только к нему."""
        return self.convert_image(source, mode).data

    def convert_result(
        self,
        source: Source,
        mode: ConversionMode,
        cancel: Optional[threading.Event] = None,
    ) -> ConversionResult:
        container = self.convert_image(source, mode, cancel)
        return ConversionResult(output_name=output_name_for(source.name), data=container.data)

    # ---- Batch ----
    def convert_batch(
        self,
        sources: Sequence[Source],
        mode: ConversionMode,
        intent: BatchIntent = BatchIntent.COMBINED_ARCHIVE,
    ) -> BatchReport:
        """Конвертирует все исходники; порядок результатов совпадает с порядком входа.

        Ошибки отдельных исходников попадают в `BatchReport.failures`, остальные
        исходники продолжают обрабатываться.

        Raises:
            ConversionCancelled: если во время пакета был вызван `cancel()`.
        """
        token = threading.Event()
        self._batch_cancel = token
        slots: List[Optional[ConversionResult]] = [None] * len(sources)
        errors: Dict[int, SourceFailure] = {}

        with ThreadPoolExecutor(max_workers=self.max_workers, thread_name_prefix="png2ico") as executor:
            futures: Dict[Future, int] = {
                executor.submit(self.convert_result, source, mode, token): idx
                for idx, source in enumerate(sources)
            }
            for future in as_completed(futures):
                idx = futures[future]
                if token.is_set():
                    for pending in futures:
                        pending.cancel()
                    break
                try:
                    slots[idx] = future.result()
                except RECOVERABLE_ERRORS as exc:
                    name = sources[idx].name
                    logger.warning("Failed to convert %s: %s", name, exc)
                    errors[idx] = SourceFailure(index=idx, name=name, error=exc)
                except ConversionCancelled:
                    break

        if self._batch_cancel is token:
            self._batch_cancel = None
        if token.is_set():
            raise ConversionCancelled("Batch conversion cancelled")

        report = BatchReport(intent=intent, source_count=len(sources))
        report.results = [result for result in slots if result is not None]
        report.failures = [errors[idx] for idx in sorted(errors)]
        logger.info(
            "Batch finished: %d converted, %d failed", len(report.results), len(report.failures)
        )
        return report

    # ---- Helpers ----
    def _materialize(self, source: Source) -> SourceImage:
        if isinstance(source, SourceImage):
            return source
        return self.decoder(source.data, source.name)


def build_converter(config: Optional[ConverterConfig] = None, policy: Optional[SizePolicy] = None) -> IconConverter:
    """Конвертер с компонентами по умолчанию, настроенными из `ConverterConfig`."""
    config = config or ConverterConfig.from_env()
    return IconConverter(
        policy=policy,
        compositor=PillowCompositor(config.resample_filter),
        encoder=PixelEncoder(lambda pixels: png_compress(pixels, config.compress_level)),
        max_workers=config.max_workers,
    )


def convert_one(source: Source, mode: ConversionMode, converter: Optional[IconConverter] = None) -> bytes:
    return (converter or build_converter()).convert_one(source, mode)


def convert_batch(
    sources: Sequence[Source],
    mode: ConversionMode,
    intent: BatchIntent = BatchIntent.COMBINED_ARCHIVE,
    converter: Optional[IconConverter] = None,
) -> BatchReport:
    return (converter or build_converter()).convert_batch(sources, mode, intent)
