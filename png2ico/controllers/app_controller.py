"""Контроллер приложения: оркестрация UI и сервисов конвертации.

SOLID:
- SRP: класс связывает UI с сервисами, сам ничего не кодирует.
- DIP: конвертер передаётся извне и может быть заменён.
Clean Code:
- Обработчики компактны; пакетная конвертация идёт в фоновом потоке,
  результат возвращается в UI через `window.after`.
"""
from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from pathlib import Path
from tkinter import TclError, filedialog, messagebox
from typing import List, Optional

import customtkinter as ctk

from png2ico.models.errors import ConversionCancelled, DecodeFailed, IconError
from png2ico.models.icon_model import BatchIntent, BatchReport, ConversionMode
from png2ico.models.image_model import SourceImage
from png2ico.services.archive_service import write_archive
from png2ico.services.batch_service import IconConverter, output_name_for
from png2ico.services.image_service import is_png, load_image
from png2ico.ui.bottom_bar import BottomBar
from png2ico.ui.image_viewer import ImageViewer
from png2ico.ui.sidebar import Sidebar

logger = logging.getLogger(__name__)


@dataclass
class AppController:
    """Связывает элементы UI с прикладной логикой.

    Ответственности:
    - Инициализация и бинд событий (UI -> контроллер).
    - Загрузка PNG через `image_service`.
    - Конвертация одного файла и пакета в ZIP через `IconConverter`.
    """
    viewer: ImageViewer
    sidebar: Sidebar
    bottom: BottomBar
    window: ctk.CTk
    converter: IconConverter

    _sources: List[SourceImage] = field(default_factory=list)
    _batch_thread: Optional[threading.Thread] = None

    def bind_events(self) -> None:
        """Регистрирует обработчики событий между UI-компонентами."""
        self.sidebar.on_add_files = self._handle_add_files
        self.sidebar.on_select = self._handle_select
        self.sidebar.on_download_one = self._handle_download_one
        self.sidebar.on_remove = self._handle_remove
        self.sidebar.on_mode_change = self._handle_mode_change

        self.bottom.on_download_zip = self._handle_download_zip
        self.bottom.on_cancel = self._handle_cancel

    # ---- Handlers ----
    def _handle_add_files(self) -> None:
        try:
            paths = filedialog.askopenfilenames(
                title="Выберите PNG-файлы",
                filetypes=(("PNG", "*.png"), ("All files", "*.*")),
            )
        except TclError:
            # Silent fail if dialog cannot open
            return
        if not paths:
            return

        png_paths = [p for p in paths if is_png(p)]
        if not png_paths:
            self.bottom.set_error("Выберите только PNG-файлы")
            return

        failed: List[str] = []
        for path in png_paths:
            try:
                self._sources.append(load_image(path))
            except (DecodeFailed, FileNotFoundError) as exc:
                logger.warning("Skipping %s: %s", path, exc)
                failed.append(Path(path).name)

        self._refresh_files()
        if failed:
            self.bottom.set_error(f"Не удалось открыть: {', '.join(failed)}")
        else:
            self.bottom.set_status(f"Добавлено файлов: {len(png_paths)}")
        if self._sources:
            self._handle_select(len(self._sources) - 1)

    def _handle_select(self, index: int) -> None:
        source = self._sources[index]
        self.viewer.set_image(source.pil_image, caption=f"{source.name} — {source.width} × {source.height} px")

    def _handle_remove(self, index: int) -> None:
        del self._sources[index]
        self._refresh_files()
        if self._sources:
            self._handle_select(min(index, len(self._sources) - 1))
        else:
            self.viewer.clear()

    def _handle_mode_change(self, optimized: bool) -> None:
        mode = "16–256 px" if optimized else "только 256 px"
        self.bottom.set_status(f"Режим: {mode}")

    def _handle_download_one(self, index: int) -> None:
        source = self._sources[index]
        try:
            data = self.converter.convert_one(source, self._mode())
        except IconError as exc:
            logger.error("Conversion of %s failed: %s", source.name, exc)
            self.bottom.set_error(f"Ошибка конвертации {source.name}: {exc}")
            return

        try:
            target = filedialog.asksaveasfilename(
                title="Сохранить ICO",
                defaultextension=".ico",
                initialfile=output_name_for(source.name),
                filetypes=(("Icon", "*.ico"),),
            )
        except TclError:
            return
        if not target:
            return
        Path(target).write_bytes(data)
        self.bottom.set_status(f"Сохранено: {target}")

    def _handle_download_zip(self) -> None:
        if not self._sources or self._batch_thread is not None:
            return
        try:
            directory = filedialog.askdirectory(title="Папка для ZIP-архива")
        except TclError:
            return
        if not directory:
            return

        sources = list(self._sources)
        mode = self._mode()
        self.bottom.set_busy(True)
        self.bottom.set_status(f"Конвертация {len(sources)} файл(ов)…")
        self._batch_thread = threading.Thread(
            target=self._run_batch, args=(sources, mode, directory), daemon=True
        )
        self._batch_thread.start()

    def _handle_cancel(self) -> None:
        self.converter.cancel()

    # ---- Background ----
    def _run_batch(self, sources: List[SourceImage], mode: ConversionMode, directory: str) -> None:
        try:
            report = self.converter.convert_batch(sources, mode, BatchIntent.COMBINED_ARCHIVE)
        except ConversionCancelled:
            self.window.after(0, self._finish_batch, None, directory, "Конвертация отменена")
            return
        except IconError as exc:
            logger.exception("Batch conversion failed")
            self.window.after(0, self._finish_batch, None, directory, str(exc))
            return
        self.window.after(0, self._finish_batch, report, directory, None)

    def _finish_batch(self, report: Optional[BatchReport], directory: str, error: Optional[str]) -> None:
        self._batch_thread = None
        self.bottom.set_busy(False)
        if report is None:
            self.bottom.set_error(error or "Ошибка конвертации")
            return

        aggregate = report.aggregate_error
        allow_partial = False
        if aggregate is not None:
            allow_partial = bool(report.results) and messagebox.askyesno(
                "Часть файлов не сконвертирована",
                f"{aggregate}\n\nСохранить архив с остальными файлами ({len(report.results)})?",
            )
            if not allow_partial:
                self.bottom.set_error(str(aggregate))
                return

        try:
            path = write_archive(report, directory, allow_partial=allow_partial)
        except OSError as exc:
            self.bottom.set_error(f"Не удалось записать архив: {exc}")
            return
        self.bottom.set_status(f"Сохранено: {path}")

    # ---- Helpers ----
    def _mode(self) -> ConversionMode:
        return ConversionMode.OPTIMIZED if self.sidebar.is_optimized() else ConversionMode.SINGLE_LARGE

    def _refresh_files(self) -> None:
        self.sidebar.set_files(self._sources)
        self.bottom.set_has_files(bool(self._sources))
