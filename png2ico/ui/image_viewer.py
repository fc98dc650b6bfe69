"""Превью выбранного исходника: изображение вписывается в канву целиком.

Принципы:
- SRP: отвечает только за отображение, конвертацию не выполняет.
"""
from __future__ import annotations

from typing import Optional

import customtkinter as ctk
import tkinter as tk
from PIL import Image, ImageTk


class ImageViewer(ctk.CTkFrame):
    """Канва с превью и подписью размеров."""
    def __init__(self, master: ctk.CTk | tk.Misc, **kwargs) -> None:
        super().__init__(master, **kwargs)
        self.grid_rowconfigure(0, weight=1)
        self.grid_columnconfigure(0, weight=1)

        self._canvas = tk.Canvas(self, highlightthickness=0, bg=self._get_canvas_bg())
        self._canvas.grid(row=0, column=0, sticky="nsew")

        self._caption = ctk.CTkLabel(self, text="Добавьте PNG-файлы, чтобы увидеть превью", anchor="center")
        self._caption.grid(row=1, column=0, padx=8, pady=(4, 8), sticky="ew")

        self._image: Optional[Image.Image] = None
        self._tk_image: Optional[ImageTk.PhotoImage] = None

        self._canvas.bind("<Configure>", self._on_canvas_resize)

    # ---- Public API ----
    def set_image(self, image: Image.Image, caption: str = "") -> None:
        """Показывает изображение (RGBA) и подпись под ним."""
        self._image = image if image.mode == "RGBA" else image.convert("RGBA")
        self._caption.configure(text=caption or f"{image.width} × {image.height} px")
        self._render_image()

    def clear(self) -> None:
        self._image = None
        self._tk_image = None
        self._canvas.delete("all")
        self._caption.configure(text="Добавьте PNG-файлы, чтобы увидеть превью")

    # ---- Internals ----
    def _on_canvas_resize(self, _event: tk.Event) -> None:
        if self._image is None:
            return
        self._render_image()

    def _render_image(self) -> None:
        self._canvas.delete("all")
        if self._image is None:
            return

        canvas_w = max(1, int(self._canvas.winfo_width()))
        canvas_h = max(1, int(self._canvas.winfo_height()))
        img_w, img_h = self._image.size
        # never upscale small icons beyond 4x
        scale = max(0.01, min(4.0, canvas_w / img_w, canvas_h / img_h))
        scaled_w = max(1, int(img_w * scale))
        scaled_h = max(1, int(img_h * scale))

        resized = self._image.resize((scaled_w, scaled_h), Image.Resampling.LANCZOS)
        self._tk_image = ImageTk.PhotoImage(resized)
        x = (canvas_w - scaled_w) // 2
        y = (canvas_h - scaled_h) // 2
        self._canvas.create_image(x, y, image=self._tk_image, anchor="nw")

    def _get_canvas_bg(self) -> str:
        # CTk does not expose canvas theme, so pick neutral
        return "#1f1f1f" if ctk.get_appearance_mode().lower() == "dark" else "#f2f2f2"
