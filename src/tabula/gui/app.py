"""Tabula GUI application entry point.

Run with:
    python -m tabula
"""

from __future__ import annotations

import os

from nicegui import app, ui

from tabula import __version__
from tabula.core.user_config import UserConfig
from tabula.core.utils.logging import get_logger, setup_logging
from tabula.gui.config import APP_NAME, DEFAULT_PORT
from tabula.gui.load_controller import LoadController
from tabula.gui.table_view import TableView

logger = get_logger(__name__)


def _env_bool(name: str, default: bool) -> bool:
    """Parse env var as bool; if unset returns default."""
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _env_int(name: str, default: int) -> int:
    """Parse env var as int; if unset/invalid returns default."""
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


@ui.page("/")
def home() -> None:
    """One viewer per browser tab/window, each with its own engine."""
    ui.page_title(APP_NAME)

    user_config = UserConfig.load()

    controller: LoadController | None = None

    def on_load(path: str, fmt: str) -> None:
        if controller is not None:
            controller.load(path, fmt)

    def on_format_change(value: str) -> None:
        if controller is not None:
            controller.set_default_format(value)

    def on_cancel() -> None:
        if controller is not None:
            controller.cancel()

    with ui.column().classes("w-full p-4"):
        ui.label(f"{APP_NAME} {__version__}").classes("text-lg font-semibold")
        view = TableView(
            on_load=on_load,
            on_cancel=on_cancel,
            on_format_change=on_format_change,
            recent_files=user_config.get_recent_files(),
            default_format=user_config.data.default_format,
        )
        view.render()

    controller = LoadController(view, user_config)
    ui.context.client.on_disconnect(controller.shutdown)


def main(*, reload: bool | None = None, native_bool: bool | None = None) -> None:
    """Start the Tabula GUI application.

    Env vars (used only when arg is None):
      - TABULA_GUI_NATIVE: 1/0 (default 0, native mode needs pywebview)
      - TABULA_GUI_RELOAD: 1/0 (default 0)
      - HOST: bind host
      - PORT: bind port
      - TABULA_LOG_LEVEL: console log level (default INFO)
    """
    setup_logging(level=os.getenv("TABULA_LOG_LEVEL", "INFO"))

    native_bool = _env_bool("TABULA_GUI_NATIVE", False) if native_bool is None else native_bool
    reload = _env_bool("TABULA_GUI_RELOAD", False) if reload is None else reload
    port = _env_int("PORT", DEFAULT_PORT)

    # For web deployments bind 0.0.0.0; for native local use, 127.0.0.1 is fine.
    default_host = "127.0.0.1" if native_bool else "0.0.0.0"
    host = os.getenv("HOST", default_host)

    logger.info(
        "Starting Tabula GUI: port=%s reload=%s native=%s",
        port,
        reload,
        native_bool,
    )

    app.on_shutdown(lambda: logger.info("Tabula GUI shutting down"))

    ui.run(
        host=host,
        port=port,
        reload=reload,
        native=native_bool,
        title=APP_NAME,
    )
