"""JSON export and import of the whole journal."""

from __future__ import annotations

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any

from .errors import ImportFormatError, JournalError
from .models import ActivityEntry, ActivityKey, MoodKey
from .paths import export_filename
from .store import EntryStore, parse_activity_document, parse_mood_document

logger = logging.getLogger(__name__)


def export_document(store: EntryStore, exported_at: datetime) -> dict[str, Any]:
    return {
        "activities": store.activity_document(),
        "moods": store.mood_document(),
        "exportDate": exported_at.isoformat(),
    }


def write_export(store: EntryStore, target: Path, exported_at: datetime) -> Path:
    """Write an export file; ``target`` may be a directory or a file path."""
    target = Path(target)
    if target.is_dir() or not target.suffix:
        target.mkdir(parents=True, exist_ok=True)
        target = target / export_filename(exported_at.date())
    else:
        target.parent.mkdir(parents=True, exist_ok=True)
    payload = export_document(store, exported_at)
    target.write_text(json.dumps(payload, indent=2), encoding="utf-8")
    logger.info("Exported %d activities and %d moods to %s", len(store), len(payload["moods"]), target)
    return target


def parse_import(text: str) -> tuple[dict[ActivityKey, ActivityEntry], dict[MoodKey, int]]:
    try:
        data = json.loads(text)
    except ValueError as exc:
        raise ImportFormatError(f"Invalid file format: {exc}") from exc
    if not isinstance(data, dict):
        raise ImportFormatError("Invalid file format: expected a JSON object.")

    try:
        activities = parse_activity_document(data.get("activities") or {})
        moods = parse_mood_document(data.get("moods") or {})
    except (ValueError, TypeError, JournalError) as exc:
        raise ImportFormatError(f"Invalid file format: {exc}") from exc
    return activities, moods


def import_text(store: EntryStore, text: str) -> tuple[int, int]:
    activities, moods = parse_import(text)
    store.replace_all(activities, moods)
    logger.info("Imported %d activities and %d moods", len(activities), len(moods))
    return len(activities), len(moods)


def import_file(store: EntryStore, source: Path) -> tuple[int, int]:
    try:
        text = Path(source).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ImportFormatError(f"Could not read {source}: {exc}") from exc
    return import_text(store, text)
