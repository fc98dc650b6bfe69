import customtkinter as ctk

from png2ico.config import ConverterConfig
from png2ico.controllers.app_controller import AppController
from png2ico.services.batch_service import build_converter
from png2ico.ui.image_viewer import ImageViewer
from png2ico.ui.sidebar import Sidebar
from png2ico.ui.bottom_bar import BottomBar


class IconConverterApp(ctk.CTk):
    def __init__(self, config: ConverterConfig) -> None:
        super().__init__()
        ctk.set_appearance_mode("system")
        ctk.set_default_color_theme("blue")

        self.title("PNG → ICO")
        self.minsize(900, 600)

        # root layout: left preview, right file list
        self.grid_columnconfigure(0, weight=1)
        self.grid_rowconfigure(0, weight=1)
        self.grid_rowconfigure(1, weight=0)

        self._viewer = ImageViewer(self)
        self._viewer.grid(row=0, column=0, sticky="nsew", padx=(12, 6), pady=(12, 6))

        self._sidebar = Sidebar(self, optimized=config.optimized)
        self._sidebar.grid(row=0, column=1, sticky="ns", padx=(6, 12), pady=(12, 6))

        self._bottom = BottomBar(self)
        self._bottom.grid(row=1, column=0, columnspan=2, sticky="ew", padx=12, pady=(0, 12))

        self._controller = AppController(
            viewer=self._viewer,
            sidebar=self._sidebar,
            bottom=self._bottom,
            window=self,
            converter=build_converter(config),
        )
        self._controller.bind_events()
