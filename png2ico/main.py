"""Точка входа в приложение."""
import logging

from png2ico.config import ConverterConfig


def main() -> None:
    """Читает настройки, включает логирование и запускает главное окно."""
    config = ConverterConfig.from_env()
    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # GUI imports are deferred so the services stay usable without a display
    from png2ico.app import IconConverterApp

    app = IconConverterApp(config)
    app.mainloop()


if __name__ == "__main__":
    main()
