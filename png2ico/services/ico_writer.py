"""Сборка бинарного контейнера ICO.

Layout (little-endian):
    ICONDIR        6 bytes   reserved=0, type=1, count
    ICONDIRENTRY  16 bytes   width, height, colors=0, reserved=0, planes=1, bpp=32, size, offset
    payloads                 в том же порядке, что и записи каталога
"""
from __future__ import annotations

import logging
import struct
from typing import Sequence

from png2ico.models.errors import EmptyVariantSet
from png2ico.models.icon_model import EncodedVariant, IconContainer, MAX_ICON_SIZE, SizeSpec

logger = logging.getLogger(__name__)

ICON_HEADER_SIZE = 6
DIRECTORY_ENTRY_SIZE = 16
ICON_TYPE = 1


def _dimension_byte(value: int) -> int:
    # 0 means 256
    return 0 if value == MAX_ICON_SIZE else value


def icon_header(count: int) -> bytes:
    return struct.pack("<HHH", 0, ICON_TYPE, count)


def directory_entry(spec: SizeSpec, size: int, offset: int) -> bytes:
    return struct.pack(
        "<BBBBHHII",
        _dimension_byte(spec.width),
        _dimension_byte(spec.height),
        0,   # colour count
        0,   # reserved
        1,   # planes
        32,  # bits per pixel
        size,
        offset,
    )


def payload_offsets(variants: Sequence[EncodedVariant]) -> list[int]:
    """Абсолютные смещения каждого payload в файле."""
    offset = ICON_HEADER_SIZE + DIRECTORY_ENTRY_SIZE * len(variants)
    offsets = []
    for variant in variants:
        offsets.append(offset)
        offset += len(variant.payload)
    return offsets


def assemble(variants: Sequence[EncodedVariant]) -> bytes:
    """Собирает ICO-файл из вариантов в заданном порядке.

    Raises:
        EmptyVariantSet: если вариантов нет; пустой ICO невалиден.
    """
    if not variants:
        raise EmptyVariantSet("An icon needs at least one image")

    offsets = payload_offsets(variants)
    parts = [icon_header(len(variants))]
    for variant, offset in zip(variants, offsets):
        parts.append(directory_entry(variant.spec, len(variant.payload), offset))
    parts.extend(variant.payload for variant in variants)
    data = b"".join(parts)

    logger.debug("Assembled ICO with %d image(s), %d bytes", len(variants), len(data))
    return data


def build_container(variants: Sequence[EncodedVariant]) -> IconContainer:
    return IconContainer(variants=tuple(variants), data=assemble(variants))
