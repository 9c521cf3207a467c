from __future__ import annotations

APP_NAME = "Tabula"
DEFAULT_PORT = 8080

# Developer-level runtime configuration
POLL_INTERVAL_S: float = 0.05  # how often the UI drains loader callbacks
MAX_GRID_ROWS: int = 50_000  # rows handed to AG Grid; the engine table itself is never truncated
