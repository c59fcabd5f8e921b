"""Journal operations driven by the views: saving, reconciling and moods.

The journal keeps the current view context (week offset and day). Loading
and every view change trigger a status re-evaluation pass; there is no
timer in between.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime
from typing import Callable

from .errors import EntryNotFoundError, InvalidTransitionError, ValidationError
from .keys import activity_key, mood_key
from .models import (
    COLOR_PALETTE,
    ActivityEntry,
    ActivityKey,
    EntryDraft,
    EntryForm,
    EntryStatus,
    FormMode,
    Replacement,
    SaveIntent,
)
from .settings import JournalSettings
from .slots import current_slot_index, slot_catalog, week_dates
from .status import initial_status, reevaluate
from .store import EntryStore

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]

MIN_RATING = 1
MAX_RATING = 10
EMPTY_DRAFT = EntryDraft(activity="")


class Journal:
    def __init__(
        self,
        store: EntryStore,
        settings: JournalSettings | None = None,
        clock: Clock | None = None,
    ):
        self.store = store
        self.settings = settings or JournalSettings()
        self._clock = clock or datetime.now
        self.week = 0
        self.day = self.now().weekday()

    def now(self) -> datetime:
        return self._clock()

    def load(self) -> list[ActivityKey]:
        self.store.load()
        return self.refresh()

    def refresh(self) -> list[ActivityKey]:
        return reevaluate(self.store, self.now())

    def show(self, week: int, day: int | None = None) -> list[ActivityKey]:
        """Switch the visible week/day and re-evaluate statuses."""
        if day is not None and not 0 <= day <= 6:
            raise ValueError(f"Day index out of range: {day}")
        self.week = int(week)
        if day is not None:
            self.day = int(day)
        return self.refresh()

    def week_dates(self, week: int | None = None):
        return week_dates(self.week if week is None else week, self.now().date())

    def day_rows(self, week: int | None = None, day: int | None = None) -> list[tuple[ActivityKey, ActivityEntry | None]]:
        week = self.week if week is None else week
        day = self.day if day is None else day
        rows = []
        for index in range(len(slot_catalog())):
            key = activity_key(week, day, index)
            rows.append((key, self.store.get(key)))
        return rows

    def open_entry(self, key: ActivityKey) -> EntryForm:
        existing = self.store.get(key)
        if existing is None:
            return EntryForm(key=key, mode=FormMode.NEW, intent=SaveIntent.NEW_ENTRY, draft=EMPTY_DRAFT)

        if existing.status is EntryStatus.NEEDS_REVIEW:
            return EntryForm(
                key=key,
                mode=FormMode.REVIEW,
                intent=None,
                draft=_draft_from(existing),
                planned_activity=existing.activity,
            )

        if existing.status is EntryStatus.INCOMPLETE:
            draft = _draft_from(existing.replacement) if existing.replacement else EMPTY_DRAFT
            return EntryForm(
                key=key,
                mode=FormMode.REPLACEMENT,
                intent=SaveIntent.LOG_REPLACEMENT,
                draft=draft,
                planned_activity=existing.activity,
            )

        return EntryForm(key=key, mode=FormMode.EDIT, intent=SaveIntent.EDIT_ENTRY, draft=_draft_from(existing))

    def quick_add(self) -> EntryForm:
        """Form for the current hour of the viewed day, shaped by whatever is stored there."""
        return self.open_entry(activity_key(self.week, self.day, current_slot_index(self.now())))

    def save_entry(self, key: ActivityKey, draft: EntryDraft, intent: SaveIntent) -> ActivityEntry:
        text = (draft.activity or "").strip()
        if not text:
            raise ValidationError("Activity text is required.")
        color = self._draft_color(draft.color)
        existing = self.store.get(key)

        logs_replacement = intent is SaveIntent.LOG_REPLACEMENT or (
            intent is SaveIntent.NEW_ENTRY
            and existing is not None
            and existing.status is EntryStatus.INCOMPLETE
        )
        if logs_replacement:
            if existing is None or existing.status is not EntryStatus.INCOMPLETE:
                raise InvalidTransitionError("Replacements can only be logged for incomplete plans.")
            entry = replace(
                existing,
                replacement=Replacement(activity=text, pleasure=draft.pleasure, mastery=draft.mastery, color=color),
            )
            logger.info("Logged replacement for %s", key)
        elif intent is SaveIntent.EDIT_ENTRY:
            if existing is None:
                raise EntryNotFoundError(f"No entry to edit at {key}")
            entry = replace(existing, activity=text, pleasure=draft.pleasure, mastery=draft.mastery, color=color)
            logger.info("Edited entry %s", key)
        else:
            entry = ActivityEntry(
                activity=text,
                pleasure=draft.pleasure,
                mastery=draft.mastery,
                color=color,
                status=initial_status(key, self.now()),
            )
            logger.info("Created entry %s with status %s", key, entry.status)

        self.store.put(key, entry)
        return entry

    def confirm_completed(
        self,
        key: ActivityKey,
        pleasure: int | None = None,
        mastery: int | None = None,
    ) -> ActivityEntry:
        existing = self._require_review(key)
        if self.settings.strict_completion and (pleasure is None or mastery is None):
            raise ValidationError("Please enter Pleasure and Mastery ratings (1-10).")
        for value in (pleasure, mastery):
            if value is not None:
                _check_rating(value)

        entry = replace(
            existing,
            pleasure=existing.pleasure if pleasure is None else pleasure,
            mastery=existing.mastery if mastery is None else mastery,
            status=EntryStatus.COMPLETED,
        )
        self.store.put(key, entry)
        logger.info("Plan %s confirmed as completed", key)
        return entry

    def mark_incomplete(self, key: ActivityKey) -> EntryForm:
        existing = self._require_review(key)
        entry = replace(existing, status=EntryStatus.INCOMPLETE, color=self.settings.incomplete_color)
        self.store.put(key, entry)
        logger.info("Plan %s marked incomplete", key)
        return EntryForm(
            key=key,
            mode=FormMode.REPLACEMENT,
            intent=SaveIntent.LOG_REPLACEMENT,
            draft=EMPTY_DRAFT,
            planned_activity=existing.activity,
        )

    def delete_entry(self, key: ActivityKey) -> bool:
        removed = self.store.delete(key)
        if removed:
            logger.info("Deleted entry %s", key)
        return removed

    def mood(self, week: int, day: int) -> int | None:
        return self.store.get_mood(mood_key(week, day))

    def save_mood(self, week: int, day: int, rating: int | None) -> int:
        if rating is None:
            raise ValidationError("Mood rating is required.")
        _check_rating(rating)
        self.store.put_mood(mood_key(week, day), rating)
        return rating

    def clear(self) -> None:
        self.store.clear()
        self.week = 0
        self.day = self.now().weekday()

    def _require_review(self, key: ActivityKey) -> ActivityEntry:
        existing = self.store.get(key)
        if existing is None:
            raise EntryNotFoundError(f"No entry at {key}")
        if existing.status is not EntryStatus.NEEDS_REVIEW:
            status = existing.status.value if existing.status else "none"
            raise InvalidTransitionError(f"Entry at {key} is {status}, not needs-review.")
        return existing

    def _draft_color(self, color: str) -> str:
        color = (color or "").strip()
        if not color:
            return self.settings.default_color
        if color not in COLOR_PALETTE:
            raise ValidationError(f"Color must be one of: {', '.join(COLOR_PALETTE)}")
        return color


def _draft_from(record: ActivityEntry | Replacement) -> EntryDraft:
    return EntryDraft(
        activity=record.activity,
        pleasure=record.pleasure,
        mastery=record.mastery,
        color=record.color,
    )


def _check_rating(value: int) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"Rating must be a whole number: {value!r}")
    if not MIN_RATING <= value <= MAX_RATING:
        raise ValidationError(f"Rating must be between {MIN_RATING} and {MAX_RATING}.")
