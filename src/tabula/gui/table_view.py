"""Table view: source controls, progress and an AG Grid of the loaded rows.

The view owns NiceGUI elements only. It reports user intent through the
``on_load`` / ``on_cancel`` callbacks and is updated by LoadController.
"""

from __future__ import annotations

from typing import Callable, List, Optional

from nicegui import ui

from tabula.core.row_table import RowTable
from tabula.core.user_config import FORMAT_AUTO, FORMAT_OPTIONS
from tabula.core.utils.logging import get_logger
from tabula.gui.config import MAX_GRID_ROWS

logger = get_logger(__name__)

OnLoad = Callable[[str, str], None]
OnCancel = Callable[[], None]
OnFormatChange = Callable[[str], None]

_FORMAT_LABELS = {
    FORMAT_AUTO: "Auto (from extension)",
    "csv": "Comma-delimited",
    "tsv": "Tab-delimited",
}


class TableView:
    """Source selector plus result grid.

    Call ``render()`` inside a NiceGUI page context.
    """

    def __init__(
        self,
        *,
        on_load: OnLoad,
        on_cancel: OnCancel,
        on_format_change: Optional[OnFormatChange] = None,
        recent_files: Optional[List[str]] = None,
        default_format: str = FORMAT_AUTO,
    ) -> None:
        self._on_load = on_load
        self._on_cancel = on_cancel
        self._on_format_change = on_format_change
        self._recent_files: List[str] = list(recent_files or [])
        self._default_format = default_format

        self._path_input: Optional[ui.select] = None
        self._format_select: Optional[ui.select] = None
        self._header_checkbox: Optional[ui.checkbox] = None
        self._load_button: Optional[ui.button] = None
        self._cancel_button: Optional[ui.button] = None
        self._status_label: Optional[ui.label] = None
        self._progress_bar: Optional[ui.linear_progress] = None
        self._grid_container: Optional[ui.element] = None
        self._last_table: Optional[RowTable] = None

    def render(self) -> None:
        with ui.column().classes("w-full gap-2"):
            with ui.row().classes("w-full items-end gap-2"):
                self._path_input = ui.select(
                    options=self._recent_files,
                    label="File",
                    with_input=True,
                    new_value_mode="add-unique",
                    value=self._recent_files[0] if self._recent_files else None,
                ).props("dense").classes("flex-grow")
                self._format_select = ui.select(
                    options={k: _FORMAT_LABELS[k] for k in FORMAT_OPTIONS},
                    label="Format",
                    value=self._default_format,
                    on_change=lambda e: self._on_format_select(e.value),
                ).props("dense").classes("w-56")
                self._header_checkbox = ui.checkbox(
                    "First row is header",
                    value=True,
                    on_change=lambda _e: self._rerender_table(),
                )
                self._load_button = ui.button("Load", on_click=self._on_load_click)
                self._cancel_button = ui.button("Cancel", color="warning", on_click=self._on_cancel_click)
                self._cancel_button.enabled = False

            self._status_label = ui.label("No file loaded.").classes("text-sm")
            self._progress_bar = ui.linear_progress(value=0.0, show_value=False).classes("w-full")
            self._progress_bar.visible = False

            self._grid_container = ui.column().classes("w-full")

    # ------------------------------------------------------------------
    # User intent
    # ------------------------------------------------------------------
    def _on_load_click(self) -> None:
        path = self._path_input.value if self._path_input is not None else None
        if not path:
            ui.notify("Choose a file to load", type="warning")
            return
        fmt = self._format_select.value if self._format_select is not None else FORMAT_AUTO
        self._on_load(str(path).strip(), fmt or FORMAT_AUTO)

    def _on_format_select(self, value: Optional[str]) -> None:
        if value and self._on_format_change is not None:
            self._on_format_change(value)

    def _on_cancel_click(self) -> None:
        self._on_cancel()

    # ------------------------------------------------------------------
    # Updates from the controller
    # ------------------------------------------------------------------
    def set_busy(self, busy: bool) -> None:
        if self._load_button is not None:
            self._load_button.enabled = not busy
        if self._cancel_button is not None:
            self._cancel_button.enabled = busy
        if self._progress_bar is not None:
            self._progress_bar.visible = busy
            if busy:
                self._progress_bar.value = 0.0

    def set_status(self, text: str) -> None:
        if self._status_label is not None:
            self._status_label.text = text

    def set_progress(self, fraction: Optional[float]) -> None:
        if self._progress_bar is not None and fraction is not None:
            self._progress_bar.value = max(0.0, min(1.0, fraction))

    def set_recent_files(self, recent_files: List[str]) -> None:
        self._recent_files = list(recent_files)
        if self._path_input is not None:
            self._path_input.set_options(self._recent_files, value=self._path_input.value)

    def clear_table(self) -> None:
        self._last_table = None
        if self._grid_container is not None:
            self._grid_container.clear()

    def show_table(self, table: RowTable) -> None:
        self._last_table = table
        self._rerender_table()

    def _rerender_table(self) -> None:
        if self._grid_container is None:
            return
        self._grid_container.clear()
        table = self._last_table
        if table is None or len(table) == 0:
            return
        header = bool(self._header_checkbox.value) if self._header_checkbox is not None else False
        df = table.to_dataframe(header=header, max_rows=MAX_GRID_ROWS)
        with self._grid_container:
            ui.aggrid.from_pandas(df).classes("w-full h-[70vh]")
            if len(table) > MAX_GRID_ROWS:
                ui.label(f"Showing first {MAX_GRID_ROWS:,} of {len(table):,} rows.").classes("text-xs")
