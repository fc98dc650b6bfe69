"""Модели данных для исходных изображений и пиксельных буферов.

Принципы:
- SRP: только структура данных, без логики обработки.
- Чистый код: неизменяемость (`frozen=True`) для предсказуемости.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from PIL import Image


@dataclass(frozen=True)
class SourceFile:
    """Ещё не декодированный исходник: имя файла и его байты."""
    name: str
    data: bytes


@dataclass(frozen=True)
class SourceImage:
    """Неизменяемая модель декодированного изображения.

    Fields:
        name: Имя исходного файла (например, "logo.png").
        pil_image: Изображение PIL в режиме RGBA.
        width: Ширина, px.
        height: Высота, px.
        size_bytes: Размер исходных данных, если известен.
    """
    name: str
    pil_image: Image.Image
    width: int
    height: int
    size_bytes: Optional[int] = None


@dataclass(frozen=True)
class RGBAPixels:
    """Сырые пиксели RGBA (straight alpha), построчно сверху вниз."""
    width: int
    height: int
    data: bytes

    def __post_init__(self) -> None:
        expected = self.width * self.height * 4
        if len(self.data) != expected:
            raise ValueError(
                f"RGBA buffer of {self.width}x{self.height} must be {expected} bytes, got {len(self.data)}"
            )

    @classmethod
    def from_image(cls, image: Image.Image) -> "RGBAPixels":
        if image.mode != "RGBA":
            image = image.convert("RGBA")
        width, height = image.size
        return cls(width=width, height=height, data=image.tobytes())

    def to_image(self) -> Image.Image:
        return Image.frombytes("RGBA", (self.width, self.height), self.data)


@dataclass(frozen=True)
class Placement:
    """Где масштабированный исходник ложится на целевой холст.

    Fields:
        scale: Единый коэффициент масштаба.
        x, y: Смещение левого верхнего угла, px.
        width, height: Размер отрисованного изображения, px.
    """
    scale: float
    x: int
    y: int
    width: int
    height: int
