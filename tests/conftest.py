from __future__ import annotations

import io
import struct
from typing import Callable, List, Tuple

import pytest
from PIL import Image

from png2ico.models.image_model import SourceImage

DirectoryEntry = Tuple[int, int, int, int, int, int, int, int]


def make_source(name: str, width: int, height: int, color=(255, 0, 0, 255)) -> SourceImage:
    image = Image.new("RGBA", (width, height), color)
    return SourceImage(name=name, pil_image=image, width=width, height=height)


def png_bytes(width: int, height: int, color=(255, 0, 0, 255), mode: str = "RGBA") -> bytes:
    buf = io.BytesIO()
    Image.new("RGBA", (width, height), color).convert(mode).save(buf, format="PNG")
    return buf.getvalue()


def read_directory(data: bytes) -> Tuple[Tuple[int, int, int], List[DirectoryEntry]]:
    header = struct.unpack_from("<HHH", data, 0)
    entries = [struct.unpack_from("<BBBBHHII", data, 6 + 16 * i) for i in range(header[2])]
    return header, entries


@pytest.fixture
def source_factory() -> Callable[..., SourceImage]:
    return make_source


@pytest.fixture
def png_factory() -> Callable[..., bytes]:
    return png_bytes


@pytest.fixture
def directory_reader() -> Callable[[bytes], Tuple[Tuple[int, int, int], List[DirectoryEntry]]]:
    return read_directory
