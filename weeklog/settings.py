from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from .database import FALSE_SETTING_VALUES, TRUE_SETTING_VALUES, JournalDatabase
from .models import COLOR_PALETTE

STRICT_COMPLETION_SETTING_KEY = "strict_completion"
DEFAULT_COLOR_SETTING_KEY = "default_color"
INCOMPLETE_COLOR_SETTING_KEY = "incomplete_color"
EXPORT_DIRECTORY_SETTING_KEY = "export_directory"

SETTING_KEYS = (
    STRICT_COMPLETION_SETTING_KEY,
    DEFAULT_COLOR_SETTING_KEY,
    INCOMPLETE_COLOR_SETTING_KEY,
    EXPORT_DIRECTORY_SETTING_KEY,
)


@dataclass(frozen=True)
class JournalSettings:
    strict_completion: bool = True
    default_color: str = "gray"
    incomplete_color: str = "white"
    export_directory: Path | None = None


def load_settings(db: JournalDatabase) -> JournalSettings:
    export_directory = (db.get_setting(EXPORT_DIRECTORY_SETTING_KEY, "") or "").strip()
    return JournalSettings(
        strict_completion=db.get_setting_bool(STRICT_COMPLETION_SETTING_KEY, True),
        default_color=_palette_color(db.get_setting(DEFAULT_COLOR_SETTING_KEY), "gray"),
        incomplete_color=_palette_color(db.get_setting(INCOMPLETE_COLOR_SETTING_KEY), "white"),
        export_directory=Path(export_directory) if export_directory else None,
    )


def save_setting(db: JournalDatabase, key: str, value: str) -> None:
    if key not in SETTING_KEYS:
        raise ValueError(f"Unknown setting: {key}")
    if key in {DEFAULT_COLOR_SETTING_KEY, INCOMPLETE_COLOR_SETTING_KEY} and value not in COLOR_PALETTE:
        raise ValueError(f"Color must be one of: {', '.join(COLOR_PALETTE)}")
    if key == STRICT_COMPLETION_SETTING_KEY and value.strip().lower() not in TRUE_SETTING_VALUES | FALSE_SETTING_VALUES:
        allowed = ", ".join(sorted(TRUE_SETTING_VALUES | FALSE_SETTING_VALUES))
        raise ValueError(f"{key} must be one of: {allowed}")
    db.set_setting(key, value.strip())


def _palette_color(value: str | None, default: str) -> str:
    if value and value.strip() in COLOR_PALETTE:
        return value.strip()
    return default
