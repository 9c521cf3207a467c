from __future__ import annotations

from types import SimpleNamespace
from unittest.mock import MagicMock

from tabula.core.row_table import RowTable
from tabula.gui.table_view import TableView


def _view(on_load=None, on_cancel=None) -> TableView:
    return TableView(on_load=on_load or MagicMock(), on_cancel=on_cancel or MagicMock())


def test_load_click_passes_trimmed_path_and_format() -> None:
    on_load = MagicMock()
    view = _view(on_load=on_load)
    view._path_input = SimpleNamespace(value="  /data/x.tsv ")
    view._format_select = SimpleNamespace(value="tsv")

    view._on_load_click()
    on_load.assert_called_once_with("/data/x.tsv", "tsv")


def test_load_click_without_path_warns(monkeypatch) -> None:
    notes: list[tuple] = []
    monkeypatch.setattr(
        "tabula.gui.table_view.ui",
        SimpleNamespace(notify=lambda msg, **kw: notes.append((msg, kw.get("type")))),
    )
    on_load = MagicMock()
    view = _view(on_load=on_load)
    view._path_input = SimpleNamespace(value=None)

    view._on_load_click()
    on_load.assert_not_called()
    assert notes == [("Choose a file to load", "warning")]


def test_cancel_click_forwards() -> None:
    on_cancel = MagicMock()
    view = _view(on_cancel=on_cancel)
    view._on_cancel_click()
    on_cancel.assert_called_once_with()


def test_set_busy_toggles_buttons_and_progress() -> None:
    view = _view()
    view._load_button = SimpleNamespace(enabled=True)
    view._cancel_button = SimpleNamespace(enabled=False)
    view._progress_bar = SimpleNamespace(visible=False, value=0.7)

    view.set_busy(True)
    assert view._load_button.enabled is False
    assert view._cancel_button.enabled is True
    assert view._progress_bar.visible is True
    assert view._progress_bar.value == 0.0

    view.set_progress(1.7)
    assert view._progress_bar.value == 1.0
    view.set_progress(None)
    assert view._progress_bar.value == 1.0

    view.set_busy(False)
    assert view._load_button.enabled is True
    assert view._progress_bar.visible is False


def test_status_and_recent_files() -> None:
    view = _view()
    view._status_label = SimpleNamespace(text="")
    view._path_input = MagicMock(value="/a.csv")

    view.set_status("Loading")
    assert view._status_label.text == "Loading"

    view.set_recent_files(["/b.csv", "/a.csv"])
    view._path_input.set_options.assert_called_once_with(["/b.csv", "/a.csv"], value="/a.csv")


def test_updates_before_render_are_ignored() -> None:
    view = _view()
    table = RowTable()
    table.append(["a"])
    view.set_busy(True)
    view.set_status("x")
    view.show_table(table)
    view.clear_table()
    view.set_recent_files(["/a.csv"])


def test_format_select_forwards_choice() -> None:
    on_format_change = MagicMock()
    view = TableView(on_load=MagicMock(), on_cancel=MagicMock(), on_format_change=on_format_change)

    view._on_format_select("tsv")
    view._on_format_select(None)
    on_format_change.assert_called_once_with("tsv")

    _view()._on_format_select("csv")
