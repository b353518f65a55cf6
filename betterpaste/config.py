"""Runtime settings, loaded from ``betterpaste_config.json``.

The file is created with defaults on first run.  Set ``BETTERPASTE_CONFIG``
to use a different path.
"""

import json
import logging
import os
from pathlib import Path
from typing import Optional, Union

from pydantic import BaseModel, Field, ValidationError

logger = logging.getLogger(__name__)

CONFIG_ENV = "BETTERPASTE_CONFIG"
DEFAULT_CONFIG_PATH = "betterpaste_config.json"


class Settings(BaseModel):
    port: int = Field(default=3030, ge=1, le=65535)
    server_url: str = "http://127.0.0.1:3030/api/diff"
    scan_interval_ms: int = Field(default=1000, ge=50)
    synced_revert_ms: int = Field(default=2000, ge=0)
    suspicious_line_length: int = Field(
        default=60,
        ge=0,
        description="Single-line search regions longer than this are treated as flattened.",
    )
    request_timeout: float = Field(default=10.0, gt=0)
    suppress_in_flight: bool = Field(
        default=True,
        description="Skip blocks whose previous dispatch has not resolved yet.",
    )
    session_file: Optional[str] = Field(
        default=None,
        description="Persist the dedup session to this JSON file (in memory when unset).",
    )
    watch_url: Optional[str] = None
    watch_html_file: Optional[str] = None
    inbox_auto_dismiss: bool = False


def config_path() -> Path:
    return Path(os.environ.get(CONFIG_ENV, DEFAULT_CONFIG_PATH))


def save_settings(settings: Settings, path: Union[str, Path, None] = None) -> None:
    target = Path(path) if path is not None else config_path()
    try:
        target.write_text(settings.model_dump_json(indent=2), encoding="utf-8")
    except OSError as exc:
        logger.warning("Could not write config file %s: %s", target, exc)


def load_settings(path: Union[str, Path, None] = None) -> Settings:
    """Read settings from *path*, writing the defaults there if it does not exist.

    An unreadable or invalid file falls back to the defaults.
    """
    source = Path(path) if path is not None else config_path()
    if not source.exists():
        settings = Settings()
        save_settings(settings, source)
        return settings

    try:
        raw = json.loads(source.read_text(encoding="utf-8"))
        return Settings.model_validate(raw)
    except (OSError, ValueError, ValidationError) as exc:
        logger.warning("Invalid config file %s, using defaults: %s", source, exc)
        return Settings()
