"""Масштабирование исходника на квадратный холст иконки.

Пропорции сохраняются, изображение центрируется, поля остаются прозрачными.
Отрисовка вынесена в `Compositor`, чтобы в тестах можно было подставить
детерминированную реализацию.
"""
from __future__ import annotations

import logging
from typing import Optional, Protocol

from PIL import Image

from png2ico.models.errors import CompositingUnavailable
from png2ico.models.image_model import Placement, RGBAPixels, SourceImage

logger = logging.getLogger(__name__)

TRANSPARENT = (0, 0, 0, 0)


def compute_placement(src_w: int, src_h: int, target_w: int, target_h: int) -> Placement:
    """Считает масштаб и смещение исходника внутри целевого холста.

    Размер после масштабирования округляется до ближайшего целого (не меньше 1),
    смещение — `(target - drawn) // 2`, то есть лишний пиксель уходит вправо/вниз.
    """
    if target_w <= 0 or target_h <= 0:
        raise CompositingUnavailable(f"Cannot create a {target_w}x{target_h} surface")
    if src_w <= 0 or src_h <= 0:
        raise CompositingUnavailable(f"Cannot draw an empty {src_w}x{src_h} image")

    scale = min(target_w / src_w, target_h / src_h)
    drawn_w = min(target_w, max(1, int(round(src_w * scale))))
    drawn_h = min(target_h, max(1, int(round(src_h * scale))))
    return Placement(
        scale=scale,
        x=(target_w - drawn_w) // 2,
        y=(target_h - drawn_h) // 2,
        width=drawn_w,
        height=drawn_h,
    )


class Compositor(Protocol):
    def draw(self, image: Image.Image, target_w: int, target_h: int) -> RGBAPixels:
        """Рисует `image` по центру прозрачного холста заданного размера."""
        ...


class PillowCompositor:
    """Отрисовка средствами Pillow с качественным фильтром (по умолчанию LANCZOS)."""

    def __init__(self, resample_filter: Image.Resampling = Image.Resampling.LANCZOS) -> None:
        self.resample_filter = resample_filter

    def draw(self, image: Image.Image, target_w: int, target_h: int) -> RGBAPixels:
        placement = compute_placement(image.width, image.height, target_w, target_h)
        src = image if image.mode == "RGBA" else image.convert("RGBA")

        if (placement.width, placement.height) != src.size:
            src = src.resize((placement.width, placement.height), self.resample_filter)

        canvas = Image.new("RGBA", (target_w, target_h), TRANSPARENT)
        # paste, not alpha_composite: the canvas is empty, pixels are copied as is
        canvas.paste(src, (placement.x, placement.y))
        return RGBAPixels.from_image(canvas)


def resample(
    image: SourceImage,
    target_w: int,
    target_h: int,
    compositor: Optional[Compositor] = None,
) -> RGBAPixels:
    """Возвращает пиксели `image`, вписанного в холст `target_w` x `target_h`.

    Raises:
        CompositingUnavailable: если холст нельзя создать (нулевой размер и т.п.).
    """
    compositor = compositor or PillowCompositor()
    if target_w <= 0 or target_h <= 0:
        raise CompositingUnavailable(
            f"Cannot create a {target_w}x{target_h} surface", source_name=image.name
        )
    try:
        pixels = compositor.draw(image.pil_image, target_w, target_h)
    except CompositingUnavailable as exc:
        if exc.source_name is None:
            exc.source_name = image.name
        raise
    logger.debug("Resampled %s to %dx%d", image.name, target_w, target_h)
    return pixels
