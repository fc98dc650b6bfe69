"""Упаковка готовых ICO в zip-архив для скачивания одним файлом."""
from __future__ import annotations

import io
import logging
import re
import zipfile
from datetime import datetime
from pathlib import Path
from typing import Iterable, List, Optional

from png2ico.models.icon_model import BatchReport, ConversionResult

logger = logging.getLogger(__name__)

_SEPARATORS = re.compile(r"[^0-9A-Za-z]+")


def _normalize(text: str) -> str:
    return _SEPARATORS.sub("-", text).strip("-")


def archive_name(count: int, now: Optional[datetime] = None) -> str:
    """`icons_{count}_{date}_{time}.zip` по локальным часам и формату локали."""
    now = now or datetime.now()
    return f"icons_{count}_{_normalize(now.strftime('%x'))}_{_normalize(now.strftime('%X'))}.zip"


def unique_entry_names(results: Iterable[ConversionResult]) -> List[str]:
    """Имена файлов внутри архива; совпадающие получают суффикс -2, -3, ..."""
    seen: dict[str, int] = {}
    names: List[str] = []
    for result in results:
        name = result.output_name
        count = seen.get(name, 0) + 1
        seen[name] = count
        if count > 1:
            stem, dot, ext = name.rpartition(".")
            name = f"{stem}-{count}.{ext}" if dot else f"{name}-{count}"
        names.append(name)
    return names


def build_archive(report: BatchReport, allow_partial: bool = False) -> bytes:
    """Zip со всеми успешными результатами в порядке входа.

    Raises:
        BatchConversionFailed: если часть исходников упала и `allow_partial` не задан.
    """
    error = report.aggregate_error
    if error is not None and not allow_partial:
        raise error

    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w", compression=zipfile.ZIP_DEFLATED) as zf:
        for name, result in zip(unique_entry_names(report.results), report.results):
            zf.writestr(name, result.data)
    logger.info("Archived %d icon(s)", len(report.results))
    return buf.getvalue()


def write_archive(
    report: BatchReport,
    directory: str | Path,
    allow_partial: bool = False,
    now: Optional[datetime] = None,
) -> Path:
    """Пишет архив в `directory` под стандартным именем и возвращает путь."""
    data = build_archive(report, allow_partial=allow_partial)
    path = Path(directory) / archive_name(report.source_count, now=now)
    path.write_bytes(data)
    logger.info("Wrote %s (%d bytes)", path, len(data))
    return path
