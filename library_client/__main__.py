import logging
import tkinter as tk

from .config import ClientSettings
from .controller import CatalogController, ThreadDispatcher
from .gateway import BookApiClient
from .view import build_window


def main() -> None:
    settings = ClientSettings()
    logging.basicConfig(level=settings.log_level.upper(), format="%(asctime)s %(levelname)s [%(name)s] %(message)s")

    root = tk.Tk()
    window = build_window(root, settings.window_title, settings.window_width, settings.window_height)
    with BookApiClient(settings.base_url, timeout=settings.timeout_seconds) as gateway:
        controller = CatalogController(window, gateway, ThreadDispatcher(window.schedule))
        window.bind_controller(controller)
        controller.start()
        root.mainloop()


if __name__ == "__main__":
    main()
