from __future__ import annotations

import os
from datetime import date
from pathlib import Path

APP_DIR_NAME = "WeekLog"
HOME_ENV_VAR = "WEEKLOG_HOME"


def data_directory() -> Path:
    override = os.environ.get(HOME_ENV_VAR)
    if override:
        return Path(override)
    local_appdata = os.environ.get("LOCALAPPDATA")
    if local_appdata:
        return Path(local_appdata) / APP_DIR_NAME
    return Path.home() / ".local" / "share" / APP_DIR_NAME.lower()


def database_path(base: Path | None = None) -> Path:
    return (base or data_directory()) / "weeklog.sqlite3"


def log_path(base: Path | None = None) -> Path:
    return (base or data_directory()) / "logs" / "weeklog.log"


def exports_directory(base: Path | None = None) -> Path:
    return (base or data_directory()) / "exports"


def ensure_directories(base: Path | None = None) -> None:
    exports_directory(base).mkdir(parents=True, exist_ok=True)
    log_path(base).parent.mkdir(parents=True, exist_ok=True)


def export_filename(day: date) -> str:
    return f"activity-log-{day.isoformat()}.json"
