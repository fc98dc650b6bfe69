"""Кодирование пикселей в полезную нагрузку записи каталога ICO.

BITMAP: BITMAPINFOHEADER (40 байт) + строки снизу вверх в порядке BGRA.
COMPRESSED: PNG-поток, сформированный Pillow, без изменений.
"""
from __future__ import annotations

import io
import logging
import struct
from typing import Callable, Optional

import numpy as np

from png2ico.models.errors import EncodeFailed
from png2ico.models.icon_model import Tier
from png2ico.models.image_model import RGBAPixels

logger = logging.getLogger(__name__)

BITMAP_INFO_HEADER_SIZE = 40
# RGBA -> BGRA
_BGRA_ORDER = [2, 1, 0, 3]

Compressor = Callable[[RGBAPixels], bytes]


def bitmap_info_header(width: int, height: int) -> bytes:
    """BITMAPINFOHEADER для 32-битного варианта иконки.

    Высота удвоена по соглашению ICO (XOR + AND маски), хотя AND-маска не пишется.
    """
    return struct.pack(
        "<IiiHHIIiiII",
        BITMAP_INFO_HEADER_SIZE,  # biSize
        width,                    # biWidth
        height * 2,               # biHeight
        1,                        # biPlanes
        32,                       # biBitCount
        0,                        # biCompression (BI_RGB)
        0,                        # biSizeImage
        0, 0,                     # biXPelsPerMeter, biYPelsPerMeter
        0, 0,                     # biClrUsed, biClrImportant
    )


def encode_bitmap(pixels: RGBAPixels) -> bytes:
    """Заголовок + пиксели, перевёрнутые по вертикали и переставленные в BGRA."""
    arr = np.frombuffer(pixels.data, dtype=np.uint8).reshape(pixels.height, pixels.width, 4)
    body = arr[::-1, :, _BGRA_ORDER]
    return bitmap_info_header(pixels.width, pixels.height) + np.ascontiguousarray(body).tobytes()


def png_compress(pixels: RGBAPixels, compress_level: int = 6) -> bytes:
    """Сжатие без потерь в PNG с сохранением альфа-канала."""
    buf = io.BytesIO()
    pixels.to_image().save(buf, format="PNG", compress_level=compress_level)
    return buf.getvalue()


class PixelEncoder:
    def __init__(self, compress: Optional[Compressor] = None) -> None:
        self.compress = compress or png_compress

    def encode(self, pixels: RGBAPixels, tier: Tier) -> bytes:
        """Возвращает байты одного варианта иконки.

        Raises:
            EncodeFailed: если внешний кодек упал или вернул пустой поток.
        """
        if tier is Tier.BITMAP:
            payload = encode_bitmap(pixels)
        else:
            payload = self._compress(pixels)
        logger.debug("Encoded %dx%d as %s: %d bytes", pixels.width, pixels.height, tier.value, len(payload))
        return payload

    def _compress(self, pixels: RGBAPixels) -> bytes:
        try:
            payload = self.compress(pixels)
        except Exception as exc:
            raise EncodeFailed(f"Compression failed for {pixels.width}x{pixels.height}") from exc
        if not payload:
            raise EncodeFailed(f"Codec returned no data for {pixels.width}x{pixels.height}")
        return bytes(payload)
