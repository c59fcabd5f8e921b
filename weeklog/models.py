from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

COLOR_PALETTE = ("white", "gray", "red", "orange", "yellow", "green", "blue", "purple")


class EntryStatus(str, Enum):
    PLANNED = "planned"
    NEEDS_REVIEW = "needs-review"
    COMPLETED = "completed"
    INCOMPLETE = "incomplete"


class SaveIntent(str, Enum):
    NEW_ENTRY = "new"
    EDIT_ENTRY = "edit"
    LOG_REPLACEMENT = "replacement"


class FormMode(str, Enum):
    NEW = "new"
    EDIT = "edit"
    REVIEW = "review"
    REPLACEMENT = "replacement"


@dataclass(frozen=True, order=True)
class ActivityKey:
    week: int
    day: int
    slot: int


@dataclass(frozen=True, order=True)
class MoodKey:
    week: int
    day: int


@dataclass(frozen=True)
class Replacement:
    activity: str
    pleasure: int | None = None
    mastery: int | None = None
    color: str = "gray"


@dataclass(frozen=True)
class ActivityEntry:
    activity: str
    pleasure: int | None = None
    mastery: int | None = None
    color: str = "gray"
    status: EntryStatus | None = None
    replacement: Replacement | None = None

    @property
    def display_text(self) -> str:
        if self.replacement is not None:
            return self.replacement.activity
        return self.activity


@dataclass(frozen=True)
class EntryDraft:
    """Field values submitted from an activity form."""

    activity: str
    pleasure: int | None = None
    mastery: int | None = None
    color: str = ""


@dataclass(frozen=True)
class EntryForm:
    key: ActivityKey
    mode: FormMode
    intent: SaveIntent | None
    draft: EntryDraft
    planned_activity: str = ""
