"""String form of activity and mood keys.

Keys are ``"{week}-{day}-{slot label}"`` and ``"{week}-{day}"``. Slot labels
contain hyphens themselves ("12-1 am", "11 am-12 pm") and past weeks are
negative, so decoding anchors on the leading week and day fields and keeps
the remainder verbatim as the label.
"""

from __future__ import annotations

import re

from .errors import KeyDecodeError
from .models import ActivityKey, MoodKey
from .slots import is_slot_label, slot_index, slot_label

_ACTIVITY_KEY_RE = re.compile(r"^(-?\d+)-([0-6])-(.+)$")
_MOOD_KEY_RE = re.compile(r"^(-?\d+)-([0-6])$")


def activity_key(week: int, day: int, slot: int | str) -> ActivityKey:
    """Build a validated key; ``slot`` may be an hour index or a catalog label."""
    if isinstance(slot, str):
        slot = slot_index(slot)
    _check_day(day)
    slot_label(slot)
    return ActivityKey(week=int(week), day=int(day), slot=int(slot))


def mood_key(week: int, day: int) -> MoodKey:
    _check_day(day)
    return MoodKey(week=int(week), day=int(day))


def encode_activity_key(key: ActivityKey) -> str:
    return f"{key.week}-{key.day}-{slot_label(key.slot)}"


def encode_mood_key(key: MoodKey) -> str:
    return f"{key.week}-{key.day}"


def decode_activity_key(text: str) -> ActivityKey:
    match = _ACTIVITY_KEY_RE.match(text or "")
    if match is None:
        raise KeyDecodeError(f"Malformed activity key: {text!r}")
    label = match.group(3)
    if not is_slot_label(label):
        raise KeyDecodeError(f"Unknown slot label in key: {text!r}")
    return ActivityKey(week=int(match.group(1)), day=int(match.group(2)), slot=slot_index(label))


def decode_mood_key(text: str) -> MoodKey:
    match = _MOOD_KEY_RE.match(text or "")
    if match is None:
        raise KeyDecodeError(f"Malformed mood key: {text!r}")
    return MoodKey(week=int(match.group(1)), day=int(match.group(2)))


def _check_day(day: int) -> None:
    if not 0 <= int(day) <= 6:
        raise ValueError(f"Day index out of range: {day}")
