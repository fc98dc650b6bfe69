"""Загрузка исходных изображений: из байтов или с диска.

Принципы:
- SRP: модуль отвечает только за декодирование и базовые свойства.
- OCP: новые источники (стрим, URL) можно добавить отдельными функциями.
"""
from __future__ import annotations

import io
import logging
from pathlib import Path

from PIL import Image, UnidentifiedImageError

from png2ico.models.errors import DecodeFailed
from png2ico.models.image_model import SourceFile, SourceImage

logger = logging.getLogger(__name__)

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"


def decode_image(data: bytes, name: str) -> SourceImage:
    """Декодирует байты изображения в `SourceImage` (RGBA).

    Изображение загружается полностью до возврата, частичного состояния нет.

    Raises:
        DecodeFailed: если Pillow не распознал или не смог дочитать данные.
    """
    try:
        with Image.open(io.BytesIO(data)) as opened:
            opened.load()
            pil_image = opened.convert("RGBA")
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError, SyntaxError) as exc:
        raise DecodeFailed(f"Cannot decode image: {name}", source_name=name) from exc

    width, height = pil_image.size
    logger.debug("Decoded %s (%dx%d)", name, width, height)
    return SourceImage(
        name=name,
        pil_image=pil_image,
        width=width,
        height=height,
        size_bytes=len(data),
    )


def read_source(file_path: str | Path) -> SourceFile:
    """Читает файл с диска без декодирования.

    Raises:
        FileNotFoundError: если путь не существует или не указывает на файл.
    """
    path = Path(file_path)
    if not path.exists() or not path.is_file():
        raise FileNotFoundError(f"File not found: {path}")
    return SourceFile(name=path.name, data=path.read_bytes())


def load_image(file_path: str | Path) -> SourceImage:
    """Загружает и декодирует изображение с диска."""
    source = read_source(file_path)
    return decode_image(source.data, source.name)


def is_png(file_path: str | Path) -> bool:
    """Проверка по расширению, как фильтр выбора файлов в окне."""
    return Path(file_path).suffix.lower() == ".png"


def looks_like_png(data: bytes) -> bool:
    return data.startswith(PNG_SIGNATURE)
