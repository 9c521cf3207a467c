# src/tabula/core/user_config.py
"""
Per-user config persistence for tabula (platformdirs + JSON).

Persisted items (schema v1):
- default_format: str                 ("auto", "csv" or "tsv")
- encoding: str                       (text encoding handed to the tokenizer)
- trim_leading_whitespace: bool       (drop spaces after a delimiter)
- progress_every: int                 (rows between progress updates)
- recent_files: list[{path, format}]  (newest at end)
- last_path: str                      (most recently loaded file)

Behavior:
- If config file missing or unreadable -> defaults are used
- If schema_version mismatches:
  - default: reset to defaults
  - optional: keep loaded but update version
- Optional "create_if_missing" flag to write defaults on first run
"""

from __future__ import annotations

import codecs
import json
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from platformdirs import user_config_dir

from tabula.core.engine import DEFAULT_PROGRESS_EVERY
from tabula.core.source import DEFAULT_ENCODING, FileFormat, SourceDescriptor
from tabula.core.utils.logging import get_logger

logger = get_logger(__name__)

# Increment when you make a breaking change to the on-disk JSON schema.
SCHEMA_VERSION: int = 1

APP_NAME: str = "tabula"
CONFIG_FILENAME: str = "user_config.json"

FORMAT_AUTO: str = "auto"
FORMAT_OPTIONS: List[str] = [FORMAT_AUTO, FileFormat.CSV.value, FileFormat.TSV.value]

DEFAULT_FORMAT: str = FORMAT_AUTO
DEFAULT_TRIM_LEADING_WHITESPACE: bool = True
MAX_RECENTS: int = 15


def _normalize_file_path(path: str | Path) -> str:
    """Normalize file path string for storage and comparisons."""
    p = Path(path).expanduser()
    try:
        p = p.resolve(strict=False)
    except OSError:
        pass
    return str(p)


def _parse_bool(raw: Any, default: bool) -> bool:
    if isinstance(raw, bool):
        return raw
    if isinstance(raw, str):
        return raw.lower() in ("true", "1", "yes", "on")
    if isinstance(raw, (int, float)):
        return bool(raw)
    return default


@dataclass
class RecentFile:
    path: str
    format: str = FORMAT_AUTO


@dataclass
class UserConfigData:
    """
    JSON-serializable config payload.

    Keep fields JSON-friendly:
    - primitives, lists, dicts
    - nested dataclasses are handled by asdict()
    """
    schema_version: int = SCHEMA_VERSION

    default_format: str = DEFAULT_FORMAT
    encoding: str = DEFAULT_ENCODING
    trim_leading_whitespace: bool = DEFAULT_TRIM_LEADING_WHITESPACE
    progress_every: int = DEFAULT_PROGRESS_EVERY

    recent_files: List[RecentFile] = field(default_factory=list)
    last_path: str = ""

    def to_json_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_json_dict(cls, d: Dict[str, Any]) -> "UserConfigData":
        """
        Tolerant loader:
        - ignores unknown keys
        - replaces invalid values with defaults
        """
        schema_version = int(d.get("schema_version", -1))

        default_format = d.get("default_format", DEFAULT_FORMAT)
        if default_format not in FORMAT_OPTIONS:
            logger.warning(f"Invalid default_format '{default_format}', using default '{DEFAULT_FORMAT}'")
            default_format = DEFAULT_FORMAT

        encoding = d.get("encoding", DEFAULT_ENCODING)
        if not isinstance(encoding, str) or not _is_known_encoding(encoding):
            logger.warning(f"Invalid encoding '{encoding}', using default '{DEFAULT_ENCODING}'")
            encoding = DEFAULT_ENCODING

        trim = _parse_bool(d.get("trim_leading_whitespace"), DEFAULT_TRIM_LEADING_WHITESPACE)

        try:
            progress_every = int(d.get("progress_every", DEFAULT_PROGRESS_EVERY))
        except (TypeError, ValueError):
            progress_every = DEFAULT_PROGRESS_EVERY
        if progress_every < 1:
            progress_every = DEFAULT_PROGRESS_EVERY

        recent_raw = d.get("recent_files", [])
        recent_files: List[RecentFile] = []
        if isinstance(recent_raw, list):
            for item in recent_raw:
                if not isinstance(item, dict):
                    continue
                path = item.get("path")
                fmt = item.get("format", FORMAT_AUTO)
                if fmt not in FORMAT_OPTIONS:
                    fmt = FORMAT_AUTO
                if isinstance(path, str) and path.strip():
                    recent_files.append(RecentFile(path=path, format=fmt))

        last_path = d.get("last_path", "")
        if not isinstance(last_path, str):
            last_path = ""

        return cls(
            schema_version=schema_version,
            default_format=default_format,
            encoding=encoding,
            trim_leading_whitespace=trim,
            progress_every=progress_every,
            recent_files=recent_files,
            last_path=last_path,
        )


def _is_known_encoding(name: str) -> bool:
    try:
        codecs.lookup(name)
    except LookupError:
        return False
    return True


class UserConfig:
    """
    Manager for loading/saving UserConfigData to disk.
    """

    def __init__(self, *, path: Path, data: Optional[UserConfigData] = None):
        self.path = path
        self.data = data if data is not None else UserConfigData()

    # -----------------------------
    # Construction / persistence
    # -----------------------------
    @staticmethod
    def default_config_path(
        app_name: str = APP_NAME,
        filename: str = CONFIG_FILENAME,
        app_author: str | None = None,
    ) -> Path:
        """
        Determine OS-appropriate per-user config path.

        macOS:   ~/Library/Application Support/tabula/user_config.json
        Linux:   ~/.config/tabula/user_config.json
        Windows: %APPDATA%\\tabula\\user_config.json
        """
        d = Path(user_config_dir(app_name, app_author))
        d.mkdir(parents=True, exist_ok=True)
        return d / filename

    @classmethod
    def load(
        cls,
        *,
        config_path: Optional[Path] = None,
        app_name: str = APP_NAME,
        filename: str = CONFIG_FILENAME,
        app_author: str | None = None,
        schema_version: int = SCHEMA_VERSION,
        reset_on_version_mismatch: bool = True,
        create_if_missing: bool = False,
    ) -> "UserConfig":
        """
        Load config from disk.

        If file doesn't exist or is unreadable -> defaults.
        If schema mismatch:
          - reset_on_version_mismatch=True -> defaults
          - else -> keep loaded but overwrite schema_version

        If create_if_missing=True and file is missing -> immediately write defaults.
        """
        path = config_path or cls.default_config_path(app_name=app_name, filename=filename, app_author=app_author)
        default_data = UserConfigData(schema_version=schema_version)

        try:
            raw = path.read_text(encoding="utf-8")
            parsed = json.loads(raw)
            if not isinstance(parsed, dict):
                logger.warning(f"User config file at {path} does not contain a dict, using defaults")
                return cls(path=path, data=default_data)

            loaded = UserConfigData.from_json_dict(parsed)

            if int(loaded.schema_version) != int(schema_version):
                if reset_on_version_mismatch:
                    logger.warning(
                        f"User config schema version mismatch: loaded={loaded.schema_version}, "
                        f"expected={schema_version}, resetting to defaults"
                    )
                    return cls(path=path, data=default_data)
                loaded.schema_version = int(schema_version)

            cls._normalize_loaded_paths(loaded)
            return cls(path=path, data=loaded)

        except FileNotFoundError:
            logger.info(f"User config file not found at {path}, using defaults")
            cfg = cls(path=path, data=default_data)
            if create_if_missing:
                cfg.save()
            return cfg
        except (OSError, ValueError) as e:
            logger.error(f"Failed to load user config from {path}: {e}")
            return cls(path=path, data=default_data)

    @staticmethod
    def _normalize_loaded_paths(data: UserConfigData) -> None:
        # dedupe (newest wins), drop missing files, limit
        kept: List[RecentFile] = []
        seen: set[str] = set()
        for rf in reversed(data.recent_files):
            p = _normalize_file_path(rf.path)
            if p in seen:
                continue
            seen.add(p)
            if not Path(p).is_file():
                logger.warning("Removed from recent files: %s", p)
                continue
            kept.append(RecentFile(path=p, format=rf.format))
        kept.reverse()
        data.recent_files = kept[-MAX_RECENTS:]

        if data.last_path.strip():
            p = _normalize_file_path(data.last_path)
            data.last_path = p if Path(p).is_file() else ""

    def save(self) -> None:
        """Write config to disk."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = self.data.to_json_dict()
        logger.info(f"saving user_config to disk: {self.path}")
        self.path.write_text(json.dumps(payload, indent=2), encoding="utf-8")

    # -----------------------------
    # Public API: recents
    # -----------------------------
    def push_recent_file(self, path: str | Path, *, format: str | FileFormat = FORMAT_AUTO) -> None:
        """
        Add/update a file in the recents list (moved to the end) and set last_path.
        """
        p = _normalize_file_path(path)
        fmt = format.value if isinstance(format, FileFormat) else str(format)
        if fmt not in FORMAT_OPTIONS:
            raise ValueError(f"format '{fmt}' not in allowed options {FORMAT_OPTIONS}")

        self.data.recent_files = [rf for rf in self.data.recent_files if _normalize_file_path(rf.path) != p]
        self.data.recent_files.append(RecentFile(path=p, format=fmt))
        if len(self.data.recent_files) > MAX_RECENTS:
            self.data.recent_files = self.data.recent_files[-MAX_RECENTS:]
        self.data.last_path = p

    def get_recent_files(self) -> List[str]:
        """Recent file paths, newest first."""
        return [rf.path for rf in reversed(self.data.recent_files)]

    def prune_missing_files(self) -> int:
        """Remove recent/last paths that no longer exist on disk."""
        before = len(self.data.recent_files)
        self.data.recent_files = [rf for rf in self.data.recent_files if Path(rf.path).expanduser().is_file()]
        removed = before - len(self.data.recent_files)
        if self.data.last_path and not Path(self.data.last_path).expanduser().is_file():
            self.data.last_path = ""
            removed += 1
        return removed

    # -----------------------------
    # Public API: parse defaults
    # -----------------------------
    def set_default_format(self, value: str) -> None:
        if value not in FORMAT_OPTIONS:
            raise ValueError(f"default_format '{value}' not in allowed options {FORMAT_OPTIONS}")
        self.data.default_format = value

    def format_for(self, path: str | Path, override: str | FileFormat | None = None) -> FileFormat:
        """Resolve the format for ``path``: explicit override, then config default, then extension."""
        choice = override if override is not None else self.data.default_format
        if isinstance(choice, FileFormat):
            return choice
        if choice == FORMAT_AUTO:
            return FileFormat.from_path(path)
        return FileFormat.parse(choice)

    def source_for(self, path: str | Path, format: str | FileFormat | None = None) -> SourceDescriptor:
        """Build a SourceDescriptor for ``path`` from the configured parse defaults."""
        return SourceDescriptor(
            location=Path(path),
            format=self.format_for(path, format),
            encoding=self.data.encoding,
            trim_leading_whitespace=self.data.trim_leading_whitespace,
        )
