"""Боковая панель: добавление файлов, список выбранных PNG, режим размеров.

Принципы:
- SRP: управляет только UI списка, не содержит логики конвертации.
- ISP: события наружу через `on_*`, состояние внутрь через `set_*`.
"""
from __future__ import annotations

from typing import Callable, List, Optional

import customtkinter as ctk

from png2ico.models.image_model import SourceImage


class Sidebar(ctk.CTkFrame):
    """Список файлов с кнопками «скачать ICO» и «удалить» для каждой строки."""
    def __init__(self, master: ctk.CTk, optimized: bool = True, **kwargs) -> None:
        super().__init__(master, width=300, **kwargs)

        self.grid_columnconfigure(0, weight=1)
        self.grid_rowconfigure(4, weight=1)

        # Callbacks
        self.on_add_files: Optional[Callable[[], None]] = None
        self.on_select: Optional[Callable[[int], None]] = None
        self.on_download_one: Optional[Callable[[int], None]] = None
        self.on_remove: Optional[Callable[[int], None]] = None
        self.on_mode_change: Optional[Callable[[bool], None]] = None

        self._title = ctk.CTkLabel(self, text="Файлы", font=ctk.CTkFont(size=16, weight="bold"))
        self._title.grid(row=0, column=0, padx=8, pady=(8, 4), sticky="w")

        self._add_btn = ctk.CTkButton(self, text="Добавить PNG…", command=self._emit_add_files)
        self._add_btn.grid(row=1, column=0, padx=8, pady=(0, 8), sticky="ew")

        self._optimized = ctk.BooleanVar(value=optimized)
        self._mode_switch = ctk.CTkSwitch(
            self,
            text="Оптимизировано для Windows (16–256 px)",
            variable=self._optimized,
            command=self._emit_mode_change,
        )
        self._mode_switch.grid(row=2, column=0, padx=8, pady=(0, 8), sticky="w")

        self._count_val = ctk.StringVar(value="Нет файлов")
        self._count_label = ctk.CTkLabel(self, textvariable=self._count_val, anchor="w")
        self._count_label.grid(row=3, column=0, padx=8, pady=(0, 4), sticky="ew")

        self._list = ctk.CTkScrollableFrame(self)
        self._list.grid(row=4, column=0, padx=8, pady=(0, 8), sticky="nsew")
        self._list.grid_columnconfigure(0, weight=1)
        self._rows: List[ctk.CTkFrame] = []

    # ---- Public API ----
    def set_files(self, images: List[SourceImage]) -> None:
        """Перестраивает список строк по текущему набору исходников."""
        for row in self._rows:
            row.destroy()
        self._rows = []

        for idx, image in enumerate(images):
            row = ctk.CTkFrame(self._list)
            row.grid(row=idx, column=0, padx=2, pady=2, sticky="ew")
            row.grid_columnconfigure(0, weight=1)

            name_btn = ctk.CTkButton(
                row,
                text=f"{image.name}  ({image.width}×{image.height})",
                anchor="w",
                fg_color="transparent",
                command=lambda i=idx: self._emit(self.on_select, i),
            )
            name_btn.grid(row=0, column=0, padx=(2, 4), pady=2, sticky="ew")

            ico_btn = ctk.CTkButton(row, text="ICO", width=44, command=lambda i=idx: self._emit(self.on_download_one, i))
            ico_btn.grid(row=0, column=1, padx=2, pady=2)

            rm_btn = ctk.CTkButton(
                row, text="✕", width=32, fg_color="#8b2b2b", command=lambda i=idx: self._emit(self.on_remove, i)
            )
            rm_btn.grid(row=0, column=2, padx=(2, 2), pady=2)
            self._rows.append(row)

        self._count_val.set(f"Файлов: {len(images)}" if images else "Нет файлов")

    def is_optimized(self) -> bool:
        return bool(self._optimized.get())

    # ---- Events ----
    def _emit_add_files(self) -> None:
        if self.on_add_files:
            self.on_add_files()

    def _emit_mode_change(self) -> None:
        if self.on_mode_change:
            self.on_mode_change(self.is_optimized())

    @staticmethod
    def _emit(callback: Optional[Callable[[int], None]], index: int) -> None:
        if callback:
            callback(index)
