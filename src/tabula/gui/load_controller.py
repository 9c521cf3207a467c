"""Controller that runs IngestionEngine loads for the TableView.

Flow:
    1. User clicks Load -> TableView calls ``load(path, format)``
    2. Controller builds (or reuses) an engine for the source and starts it
    3. Progress and completion are posted by the worker, drained by ``ui.timer``
    4. On completion: table shown, recents updated
    5. On Cancel: ``request_cancel()`` blocks until the worker exits, grid cleared
    6. A load that ends without completion and without cancel failed; the
       timer hook reports ``engine.last_error``
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from nicegui import ui

from tabula.core.dispatch import TimerDispatcher
from tabula.core.engine import IngestionEngine
from tabula.core.source import SourceDescriptor
from tabula.core.user_config import UserConfig
from tabula.core.utils.logging import get_logger
from tabula.core.utils.progress import ProgressMessage
from tabula.gui.config import POLL_INTERVAL_S
from tabula.gui.table_view import TableView

logger = get_logger(__name__)


class LoadController:
    """Owns the engine for the currently selected source.

    Attributes:
        _view: TableView to update.
        _user_config: Source of parse defaults and recent files.
        _dispatcher: Home-thread dispatcher shared by every engine this controller creates.
        _engine: Engine for the current source, None until the first load.
        _pending: True between an accepted start and its completion/cancel/failure.
    """

    def __init__(self, view: TableView, user_config: UserConfig) -> None:
        self._view = view
        self._user_config = user_config
        self._engine: Optional[IngestionEngine] = None
        self._pending: bool = False
        self._dispatcher = TimerDispatcher(
            lambda dt, cb: ui.timer(dt, cb),
            poll_interval_s=POLL_INTERVAL_S,
            on_tick=self._on_tick,
        )

    @property
    def engine(self) -> Optional[IngestionEngine]:
        return self._engine

    @property
    def is_loading(self) -> bool:
        return self._pending

    def load(self, path: str, format: Optional[str] = None) -> bool:
        """Start loading ``path``. Returns False if refused or the file could not be opened."""
        if self._pending:
            ui.notify("A load is already in progress", type="warning")
            return False

        source = self._user_config.source_for(Path(path), format)
        engine = self._engine_for(source)

        accepted = engine.start(lambda: self._on_completion(engine))
        if not accepted:
            ui.notify(f"Could not open {source.location}", type="negative")
            self._view.set_status(f"Could not open {source.location}")
            if self._user_config.prune_missing_files():
                self._save_config()
                self._view.set_recent_files(self._user_config.get_recent_files())
            return False

        self._pending = True
        self._view.clear_table()
        self._view.set_busy(True)
        self._view.set_status(f"Loading {source.location.name} ({source.format.label})...")
        return True

    def cancel(self) -> None:
        """Cancel the running load, blocking until its worker has stopped."""
        engine = self._engine
        if engine is None or not self._pending:
            return
        if not engine.request_cancel():
            # the load finished first; its completion or failure arrives via the timer
            return
        self._pending = False
        self._view.set_busy(False)
        self._view.clear_table()
        self._view.set_status(f"Load cancelled ({len(engine.table):,} rows read)")
        ui.notify("Load cancelled", type="warning")

    def set_default_format(self, value: str) -> None:
        """Remember the format choice ("auto", "csv" or "tsv") for later sessions."""
        if value == self._user_config.data.default_format:
            return
        self._user_config.set_default_format(value)
        self._save_config()

    def shutdown(self) -> None:
        if self._engine is not None:
            self._engine.request_cancel()
        self._pending = False
        self._dispatcher.stop()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    def _engine_for(self, source: SourceDescriptor) -> IngestionEngine:
        if self._engine is not None and self._engine.source == source:
            return self._engine
        self._engine = IngestionEngine(
            source,
            dispatcher=self._dispatcher,
            progress_cb=self._on_progress,
            progress_every=self._user_config.data.progress_every,
        )
        return self._engine

    def _save_config(self) -> None:
        try:
            self._user_config.save()
        except OSError as e:
            logger.error(f"Failed to save user config: {e}")

    def _on_progress(self, msg: ProgressMessage) -> None:
        if not self._pending:
            return
        self._view.set_progress(msg.fraction)
        self._view.set_status(_format_progress_message(msg))

    def _on_completion(self, engine: IngestionEngine) -> None:
        if engine is not self._engine or not self._pending:
            return
        self._pending = False
        table = engine.table
        self._view.set_busy(False)
        self._view.show_table(table)
        self._view.set_status(
            f"{engine.source.location.name}: {len(table):,} rows, {table.column_count} columns"
        )

        self._user_config.push_recent_file(engine.source.location, format=engine.format)
        self._save_config()
        self._view.set_recent_files(self._user_config.get_recent_files())

        try:
            ui.notify(f"Loaded {engine.source.location.name}", type="positive")
        except RuntimeError as e:
            if "parent element" in str(e) or "slot" in str(e).lower():
                # UI context is gone, skip notification
                logger.error(f"Skipping notification - UI context deleted: {e}")
            else:
                raise

    def _on_tick(self) -> None:
        """Detect loads that ended without completion (background failure)."""
        engine = self._engine
        if not self._pending or engine is None or engine.is_busy:
            return
        # the worker has left, so anything it posted is already queued
        self._dispatcher.drain(max_items=self._dispatcher.pending())
        if not self._pending:
            return
        self._pending = False
        err = engine.last_error
        logger.error(f"Load failed for {engine.source.location}: {err}")
        self._view.set_busy(False)
        self._view.clear_table()
        self._view.set_status(f"Failed to load {engine.source.location.name}: {err}")
        ui.notify(f"Failed to load: {err}", type="negative")


def _format_progress_message(msg: ProgressMessage) -> str:
    """Format ProgressMessage for user-facing UI."""
    if msg.phase == "read":
        prefix = "Reading"
    elif msg.phase == "done":
        prefix = "Done"
    else:
        prefix = msg.phase

    if msg.fraction is not None:
        return f"{prefix}: {msg.done:,} rows ({msg.fraction:.0%})"
    return f"{prefix}: {msg.done:,} rows"
