from __future__ import annotations

from typing import Callable, Optional

import customtkinter as ctk


class BottomBar(ctk.CTkFrame):
    def __init__(self, master: ctk.CTk, **kwargs) -> None:
        super().__init__(master, height=64, **kwargs)

        # callbacks
        self.on_download_zip: Optional[Callable[[], None]] = None
        self.on_cancel: Optional[Callable[[], None]] = None

        # layout
        self.grid_rowconfigure(0, weight=1)
        self.grid_columnconfigure(0, weight=1)  # status stretches

        self._status = ctk.StringVar(value="")
        self._status_label = ctk.CTkLabel(self, textvariable=self._status, anchor="w")
        self._status_label.grid(row=0, column=0, padx=(10, 6), pady=8, sticky="ew")
        self._default_text_color = self._status_label.cget("text_color")

        self._cancel_btn = ctk.CTkButton(self, text="Отмена", width=90, command=self._on_cancel_click)
        self._cancel_btn.grid(row=0, column=1, padx=6, pady=8)
        self._cancel_btn.configure(state="disabled")

        self._zip_btn = ctk.CTkButton(self, text="Скачать ZIP", width=140, command=self._on_zip_click)
        self._zip_btn.grid(row=0, column=2, padx=(6, 10), pady=8)
        self._zip_btn.configure(state="disabled")

    # public API (sync from controller)
    def set_status(self, text: str) -> None:
        self._status_label.configure(text_color=self._default_text_color)
        self._status.set(text)

    def set_error(self, text: str) -> None:
        self._status_label.configure(text_color="#e05555")
        self._status.set(text)

    def set_has_files(self, has_files: bool) -> None:
        self._zip_btn.configure(state="normal" if has_files else "disabled")

    def set_busy(self, busy: bool) -> None:
        self._zip_btn.configure(state="disabled" if busy else "normal", text="Конвертация…" if busy else "Скачать ZIP")
        self._cancel_btn.configure(state="normal" if busy else "disabled")

    # events
    def _on_zip_click(self) -> None:
        if self.on_download_zip:
            self.on_download_zip()

    def _on_cancel_click(self) -> None:
        if self.on_cancel:
            self.on_cancel()
