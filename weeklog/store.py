from __future__ import annotations

import json
import logging
from dataclasses import replace
from typing import Any, Callable, Protocol

from .errors import JournalError
from .keys import decode_activity_key, decode_mood_key, encode_activity_key, encode_mood_key
from .models import COLOR_PALETTE, ActivityEntry, ActivityKey, EntryStatus, MoodKey, Replacement

logger = logging.getLogger(__name__)

ACTIVITY_DOCUMENT = "activityLog"
MOOD_DOCUMENT = "activityMoods"


class DocumentBackend(Protocol):
    def get_document(self, name: str) -> str | None: ...

    def set_document(self, name: str, body: str) -> None: ...

    def delete_document(self, name: str) -> None: ...


class EntryStore:
    """Owns the activity map and the mood map.

    Each map is persisted as one JSON document on every mutation. Until
    :meth:`load` has run, mutations stay in memory only so that empty
    defaults never overwrite state that has not been read yet.
    """

    def __init__(self, backend: DocumentBackend):
        self._backend = backend
        self._activities: dict[ActivityKey, ActivityEntry] = {}
        self._moods: dict[MoodKey, int] = {}
        self._loaded = False

    @property
    def is_loaded(self) -> bool:
        return self._loaded

    def load(self) -> None:
        self._activities = self._read_document(ACTIVITY_DOCUMENT, parse_activity_document)
        self._moods = self._read_document(MOOD_DOCUMENT, parse_mood_document)
        self._loaded = True
        logger.info("Loaded %d activities and %d moods", len(self._activities), len(self._moods))

    def __len__(self) -> int:
        return len(self._activities)

    def __contains__(self, key: object) -> bool:
        return key in self._activities

    def get(self, key: ActivityKey) -> ActivityEntry | None:
        return self._activities.get(key)

    def put(self, key: ActivityKey, entry: ActivityEntry) -> None:
        self._activities[key] = entry
        self._persist_activities()

    def delete(self, key: ActivityKey) -> bool:
        if self._activities.pop(key, None) is None:
            return False
        self._persist_activities()
        return True

    def items(self) -> list[tuple[ActivityKey, ActivityEntry]]:
        return sorted(self._activities.items())

    def entries_for_day(self, week: int, day: int) -> list[tuple[ActivityKey, ActivityEntry]]:
        return [(key, entry) for key, entry in self.items() if key.week == week and key.day == day]

    def entries_for_slot(self, week: int, slot: int) -> list[tuple[ActivityKey, ActivityEntry]]:
        return [(key, entry) for key, entry in self.items() if key.week == week and key.slot == slot]

    def apply_statuses(self, changes: dict[ActivityKey, EntryStatus | None]) -> None:
        for key, status in changes.items():
            entry = self._activities.get(key)
            if entry is None:
                continue
            self._activities[key] = replace(entry, status=status)
        if changes:
            self._persist_activities()

    def get_mood(self, key: MoodKey) -> int | None:
        return self._moods.get(key)

    def put_mood(self, key: MoodKey, rating: int) -> None:
        self._moods[key] = int(rating)
        self._persist_moods()

    def delete_mood(self, key: MoodKey) -> bool:
        if self._moods.pop(key, None) is None:
            return False
        self._persist_moods()
        return True

    def moods(self) -> list[tuple[MoodKey, int]]:
        return sorted(self._moods.items())

    def replace_all(
        self,
        activities: dict[ActivityKey, ActivityEntry],
        moods: dict[MoodKey, int],
    ) -> None:
        self._activities = dict(activities)
        self._moods = dict(moods)
        self._persist_activities()
        self._persist_moods()

    def clear(self) -> None:
        self._activities = {}
        self._moods = {}
        self._backend.delete_document(ACTIVITY_DOCUMENT)
        self._backend.delete_document(MOOD_DOCUMENT)
        logger.info("Cleared all activities and moods")

    def activity_document(self) -> dict[str, dict[str, Any]]:
        return dump_activity_document(self._activities)

    def mood_document(self) -> dict[str, str]:
        return dump_mood_document(self._moods)

    def _read_document(self, name: str, parse: Callable[[Any], dict]) -> dict:
        raw = self._backend.get_document(name)
        if raw is None:
            return {}
        try:
            return parse(json.loads(raw))
        except (ValueError, TypeError, JournalError) as exc:
            logger.warning("Discarding corrupt %s document: %s", name, exc)
            return {}

    def _persist_activities(self) -> None:
        self._write_document(ACTIVITY_DOCUMENT, self.activity_document())

    def _persist_moods(self) -> None:
        self._write_document(MOOD_DOCUMENT, self.mood_document())

    def _write_document(self, name: str, document: dict) -> None:
        if not self._loaded:
            logger.debug("Skipping write of %s before load", name)
            return
        self._backend.set_document(name, json.dumps(document))


def parse_activity_document(data: Any) -> dict[ActivityKey, ActivityEntry]:
    if not isinstance(data, dict):
        raise ValueError("Activity document must be an object.")
    return {decode_activity_key(str(raw_key)): entry_from_dict(value) for raw_key, value in data.items()}


def parse_mood_document(data: Any) -> dict[MoodKey, int]:
    if not isinstance(data, dict):
        raise ValueError("Mood document must be an object.")
    moods: dict[MoodKey, int] = {}
    for raw_key, value in data.items():
        rating = parse_rating(value)
        if rating is None:
            raise ValueError(f"Missing mood rating for {raw_key!r}")
        moods[decode_mood_key(str(raw_key))] = rating
    return moods


def dump_activity_document(activities: dict[ActivityKey, ActivityEntry]) -> dict[str, dict[str, Any]]:
    return {encode_activity_key(key): entry_to_dict(activities[key]) for key in sorted(activities)}


def dump_mood_document(moods: dict[MoodKey, int]) -> dict[str, str]:
    return {encode_mood_key(key): str(moods[key]) for key in sorted(moods)}


def entry_to_dict(entry: ActivityEntry) -> dict[str, Any]:
    data: dict[str, Any] = {
        "activity": entry.activity,
        "pleasure": entry.pleasure,
        "mastery": entry.mastery,
        "color": entry.color,
        "status": entry.status.value if entry.status is not None else None,
    }
    if entry.replacement is not None:
        data["replacement"] = {
            "activity": entry.replacement.activity,
            "pleasure": entry.replacement.pleasure,
            "mastery": entry.replacement.mastery,
            "color": entry.replacement.color,
        }
    return data


def entry_from_dict(data: Any) -> ActivityEntry:
    if not isinstance(data, dict):
        raise ValueError("Activity entry must be an object.")
    activity = data.get("activity")
    if not isinstance(activity, str):
        raise ValueError("Activity entry is missing its text.")
    raw_status = data.get("status")
    status = EntryStatus(raw_status) if raw_status else None
    raw_replacement = data.get("replacement")
    replacement = None
    if raw_replacement:
        if not isinstance(raw_replacement, dict) or not isinstance(raw_replacement.get("activity"), str):
            raise ValueError("Replacement must be an object with activity text.")
        replacement = Replacement(
            activity=raw_replacement["activity"],
            pleasure=parse_rating(raw_replacement.get("pleasure")),
            mastery=parse_rating(raw_replacement.get("mastery")),
            color=_parse_color(raw_replacement.get("color")),
        )
    return ActivityEntry(
        activity=activity,
        pleasure=parse_rating(data.get("pleasure")),
        mastery=parse_rating(data.get("mastery")),
        color=_parse_color(data.get("color")),
        status=status,
        replacement=replacement,
    )


def parse_rating(value: Any) -> int | None:
    """Ratings arrive as ints, numeric strings or empty strings."""
    if value is None:
        return None
    if isinstance(value, bool):
        raise ValueError("Rating must be a number.")
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if not value.is_integer():
            raise ValueError(f"Rating must be a whole number: {value}")
        return int(value)
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        return int(text)
    raise ValueError(f"Rating must be a number: {value!r}")


def _parse_color(value: Any) -> str:
    if isinstance(value, str) and value in COLOR_PALETTE:
        return value
    return "gray"
