"""Configuration loading for DayBook.

Settings live in ``~/.config/daybook/config.toml``. A missing or
unreadable file means defaults.
"""

import logging
import os
from pathlib import Path
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import toml
from pydantic import BaseModel, Field

from daybook.db.store import DEFAULT_NAMESPACE

logger = logging.getLogger(__name__)

CONFIG_DIR = Path.home() / ".config" / "daybook"
CONFIG_PATH = CONFIG_DIR / "config.toml"
DEFAULT_DB_PATH = CONFIG_DIR / "daybook.db"
LOCALTIME_PATH = Path("/etc/localtime")


def _is_zone_name(name: str) -> bool:
    try:
        ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        return False
    return True


def _local_timezone(localtime: Path = LOCALTIME_PATH) -> str:
    """IANA name of the local zone, e.g. ``Europe/Berlin``.

    Checks ``$TZ`` first, then the ``/etc/localtime`` link target.
    """
    env_tz = os.environ.get("TZ", "").lstrip(":")
    if env_tz and _is_zone_name(env_tz):
        return env_tz

    try:
        target = str(localtime.resolve())
    except OSError:
        target = ""
    if "zoneinfo/" in target:
        name = target.split("zoneinfo/", 1)[1]
        if _is_zone_name(name):
            return name
    return "UTC"


class Settings(BaseModel):
    """Resolved DayBook settings."""

    db_path: Path = Field(default=DEFAULT_DB_PATH, description="SQLite database file")
    namespace: str = Field(default=DEFAULT_NAMESPACE, min_length=1, description="Bucket key prefix")
    currency: str = Field(default="$", description="Currency symbol for display")
    timezone: str = Field(default_factory=_local_timezone, description="Display timezone")

    model_config = {"frozen": True}


def load_config(config_path: Optional[Path] = None) -> Settings:
    """Load settings from a TOML file.

    Args:
        config_path: Optional path, defaults to ~/.config/daybook/config.toml.

    Returns:
        Settings, with defaults for anything the file does not set.
    """
    path = config_path or CONFIG_PATH
    if not path.exists():
        return Settings()

    try:
        raw = toml.load(path)
    except (OSError, toml.TomlDecodeError) as e:
        logger.warning("Could not read %s, using defaults: %s", path, e)
        return Settings()

    storage = raw.get("storage", {})
    display = raw.get("display", {})

    values = {}
    if storage.get("path"):
        values["db_path"] = Path(storage["path"]).expanduser()
    if storage.get("namespace"):
        values["namespace"] = storage["namespace"]
    if display.get("currency"):
        values["currency"] = display["currency"]
    if display.get("timezone"):
        values["timezone"] = display["timezone"]
    return Settings(**values)


def create_template_config(config_path: Optional[Path] = None) -> Path:
    """Write a template configuration file.

    Returns:
        Path of the written file.
    """
    path = config_path or CONFIG_PATH
    path.parent.mkdir(parents=True, exist_ok=True)

    template = {
        "storage": {
            "path": str(DEFAULT_DB_PATH),
            "namespace": DEFAULT_NAMESPACE,
        },
        "display": {
            "currency": "$",
            "timezone": _local_timezone(),
        },
    }

    with open(path, "w") as f:
        toml.dump(template, f)

    return path
