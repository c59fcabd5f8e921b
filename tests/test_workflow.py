from __future__ import annotations

import tempfile
import unittest
from dataclasses import replace
from datetime import datetime, timedelta
from pathlib import Path

from weeklog.database import JournalDatabase
from weeklog.errors import EntryNotFoundError, InvalidTransitionError, ValidationError
from weeklog.keys import activity_key
from weeklog.models import ActivityEntry, EntryDraft, EntryStatus, FormMode, SaveIntent
from weeklog.settings import JournalSettings
from weeklog.store import EntryStore
from weeklog.workflow import Journal


class _Clock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


class JournalTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.db = JournalDatabase(Path(self._tmp.name) / "weeklog.sqlite3")
        # Wednesday, 14:00
        self.clock = _Clock(datetime(2026, 10, 21, 14, 0))
        self.journal = self._journal()

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def _journal(self, settings: JournalSettings | None = None) -> Journal:
        journal = Journal(EntryStore(self.db), settings, clock=self.clock)
        journal.load()
        return journal

    def _overdue_plan(self, text: str = "Gym") -> tuple:
        key = activity_key(0, 2, "10-11 am")
        self.journal.store.put(key, ActivityEntry(text, color="green", status=EntryStatus.PLANNED))
        self.journal.refresh()
        return key

    def test_view_starts_on_today(self) -> None:
        self.assertEqual((self.journal.week, self.journal.day), (0, 2))

    def test_new_entry_status_is_assigned_at_creation(self) -> None:
        future = self.journal.save_entry(activity_key(0, 4, 9), EntryDraft("Dentist"), SaveIntent.NEW_ENTRY)
        past = self.journal.save_entry(activity_key(0, 1, 9), EntryDraft("Emails", 5, 6), SaveIntent.NEW_ENTRY)
        self.assertIs(future.status, EntryStatus.PLANNED)
        self.assertIsNone(past.status)
        self.assertEqual(past.color, "gray")
        self.assertEqual((past.pleasure, past.mastery), (5, 6))

    def test_blank_text_is_refused(self) -> None:
        key = activity_key(0, 1, 9)
        with self.assertRaises(ValidationError):
            self.journal.save_entry(key, EntryDraft("   "), SaveIntent.NEW_ENTRY)
        self.assertIsNone(self.journal.store.get(key))

    def test_unknown_color_is_refused(self) -> None:
        with self.assertRaises(ValidationError):
            self.journal.save_entry(activity_key(0, 1, 9), EntryDraft("Walk", color="teal"), SaveIntent.NEW_ENTRY)

    def test_edit_preserves_status_and_replacement(self) -> None:
        key = activity_key(0, 5, 9)
        self.journal.save_entry(key, EntryDraft("Hike"), SaveIntent.NEW_ENTRY)
        form = self.journal.open_entry(key)
        self.assertIs(form.mode, FormMode.EDIT)
        self.assertIs(form.intent, SaveIntent.EDIT_ENTRY)

        self.clock.now += timedelta(days=7)
        edited = self.journal.save_entry(key, EntryDraft("Long hike", color="blue"), form.intent)
        self.assertEqual(edited.activity, "Long hike")
        self.assertIs(edited.status, EntryStatus.PLANNED)

    def test_edit_of_missing_entry(self) -> None:
        with self.assertRaises(EntryNotFoundError):
            self.journal.save_entry(activity_key(0, 1, 9), EntryDraft("X"), SaveIntent.EDIT_ENTRY)

    def test_needs_review_opens_reconciliation(self) -> None:
        key = self._overdue_plan()
        form = self.journal.open_entry(key)
        self.assertIs(form.mode, FormMode.REVIEW)
        self.assertIsNone(form.intent)
        self.assertEqual(form.planned_activity, "Gym")

    def test_confirm_completed_requires_ratings_when_strict(self) -> None:
        key = self._overdue_plan()
        with self.assertRaises(ValidationError):
            self.journal.confirm_completed(key, pleasure=7)
        self.assertIs(self.journal.store.get(key).status, EntryStatus.NEEDS_REVIEW)

        entry = self.journal.confirm_completed(key, pleasure=7, mastery=4)
        self.assertIs(entry.status, EntryStatus.COMPLETED)
        self.assertEqual((entry.pleasure, entry.mastery), (7, 4))

        self.clock.now += timedelta(days=30)
        self.journal.refresh()
        self.assertIs(self.journal.store.get(key).status, EntryStatus.COMPLETED)

    def test_confirm_completed_without_ratings_when_lenient(self) -> None:
        self.journal = self._journal(JournalSettings(strict_completion=False))
        key = self._overdue_plan()
        entry = self.journal.confirm_completed(key)
        self.assertIs(entry.status, EntryStatus.COMPLETED)
        with self.assertRaises(InvalidTransitionError):
            self.journal.confirm_completed(key)

    def test_ratings_out_of_range_on_confirmation(self) -> None:
        key = self._overdue_plan()
        with self.assertRaises(ValidationError):
            self.journal.confirm_completed(key, pleasure=11, mastery=3)

    def test_no_then_save_logs_replacement(self) -> None:
        key = self._overdue_plan()
        form = self.journal.mark_incomplete(key)
        self.assertIs(form.intent, SaveIntent.LOG_REPLACEMENT)
        self.assertEqual(form.draft.activity, "")
        marked = self.journal.store.get(key)
        self.assertIs(marked.status, EntryStatus.INCOMPLETE)
        self.assertEqual(marked.color, "white")

        saved = self.journal.save_entry(key, EntryDraft("X", pleasure=3), SaveIntent.NEW_ENTRY)
        self.assertEqual(saved.activity, "Gym")
        self.assertIs(saved.status, EntryStatus.INCOMPLETE)
        self.assertEqual(saved.replacement.activity, "X")
        self.assertEqual(saved.replacement.pleasure, 3)
        self.assertEqual(saved.display_text, "X")

        again = self.journal.save_entry(key, EntryDraft("Y"), SaveIntent.LOG_REPLACEMENT)
        self.assertEqual(again.replacement.activity, "Y")
        self.assertEqual(self._journal().store.get(key).replacement.activity, "Y")

    def test_incomplete_entry_reopens_for_replacement(self) -> None:
        key = self._overdue_plan()
        self.journal.mark_incomplete(key)
        self.journal.save_entry(key, EntryDraft("Walk"), SaveIntent.LOG_REPLACEMENT)
        form = self.journal.open_entry(key)
        self.assertIs(form.mode, FormMode.REPLACEMENT)
        self.assertEqual(form.draft.activity, "Walk")
        self.assertEqual(form.planned_activity, "Gym")

    def test_editing_incomplete_plan_keeps_replacement(self) -> None:
        key = self._overdue_plan()
        self.journal.mark_incomplete(key)
        self.journal.save_entry(key, EntryDraft("Walk"), SaveIntent.LOG_REPLACEMENT)
        edited = self.journal.save_entry(key, EntryDraft("Gym class"), SaveIntent.EDIT_ENTRY)
        self.assertEqual(edited.activity, "Gym class")
        self.assertIs(edited.status, EntryStatus.INCOMPLETE)
        self.assertEqual(edited.replacement.activity, "Walk")

    def test_replacement_requires_incomplete_plan(self) -> None:
        key = activity_key(0, 1, 9)
        self.journal.save_entry(key, EntryDraft("Emails"), SaveIntent.NEW_ENTRY)
        with self.assertRaises(InvalidTransitionError):
            self.journal.save_entry(key, EntryDraft("Other"), SaveIntent.LOG_REPLACEMENT)

    def test_mark_incomplete_requires_review(self) -> None:
        key = activity_key(0, 4, 9)
        self.journal.save_entry(key, EntryDraft("Dentist"), SaveIntent.NEW_ENTRY)
        with self.assertRaises(InvalidTransitionError):
            self.journal.mark_incomplete(key)
        with self.assertRaises(EntryNotFoundError):
            self.journal.mark_incomplete(activity_key(0, 4, 10))

    def test_delete_removes_replacement_too(self) -> None:
        key = self._overdue_plan()
        self.journal.mark_incomplete(key)
        self.journal.save_entry(key, EntryDraft("Walk"), SaveIntent.LOG_REPLACEMENT)
        self.assertTrue(self.journal.delete_entry(key))
        self.assertIsNone(self._journal().store.get(key))
        self.assertIs(self.journal.open_entry(key).mode, FormMode.NEW)

    def test_view_change_reevaluates(self) -> None:
        key = activity_key(0, 2, 15)
        self.journal.save_entry(key, EntryDraft("Call mom"), SaveIntent.NEW_ENTRY)
        self.clock.now = datetime(2026, 10, 21, 17, 0)
        self.assertIs(self.journal.store.get(key).status, EntryStatus.PLANNED)
        changed = self.journal.show(-1, 3)
        self.assertEqual(changed, [key])
        self.assertIs(self.journal.store.get(key).status, EntryStatus.NEEDS_REVIEW)
        self.assertEqual((self.journal.week, self.journal.day), (-1, 3))

    def test_quick_add_uses_current_hour(self) -> None:
        form = self.journal.quick_add()
        self.assertEqual(form.key, activity_key(0, 2, 14))
        self.assertIs(form.intent, SaveIntent.NEW_ENTRY)

    def test_quick_add_on_unreviewed_plan_asks_for_review(self) -> None:
        key = activity_key(0, 0, 14)
        self.journal.store.put(key, ActivityEntry("Swim", status=EntryStatus.PLANNED))
        self.journal.show(0, 0)
        form = self.journal.quick_add()
        self.assertEqual(form.key, key)
        self.assertIs(form.mode, FormMode.REVIEW)
        self.assertIsNone(form.intent)
        self.assertIs(self.journal.store.get(key).status, EntryStatus.NEEDS_REVIEW)

    def test_quick_add_on_completed_entry_edits_it(self) -> None:
        key = activity_key(0, 0, 14)
        self.journal.store.put(key, ActivityEntry("Swim", 7, 8, "blue", EntryStatus.COMPLETED))
        self.journal.show(0, 0)
        form = self.journal.quick_add()
        self.assertIs(form.mode, FormMode.EDIT)
        self.assertIs(form.intent, SaveIntent.EDIT_ENTRY)
        self.assertEqual(form.draft, EntryDraft("Swim", 7, 8, "blue"))

        saved = self.journal.save_entry(key, replace(form.draft, activity="Long swim"), form.intent)
        self.assertEqual(saved, ActivityEntry("Long swim", 7, 8, "blue", EntryStatus.COMPLETED))

    def test_day_rows_cover_all_slots(self) -> None:
        self.journal.save_entry(activity_key(0, 2, 8), EntryDraft("Breakfast"), SaveIntent.NEW_ENTRY)
        rows = self.journal.day_rows()
        self.assertEqual(len(rows), 24)
        self.assertEqual(rows[8][1].activity, "Breakfast")
        self.assertIsNone(rows[9][1])

    def test_moods(self) -> None:
        self.assertEqual(self.journal.save_mood(0, 2, 8), 8)
        self.assertEqual(self._journal().mood(0, 2), 8)
        for bad in (None, 0, 11):
            with self.assertRaises(ValidationError):
                self.journal.save_mood(0, 2, bad)

    def test_clear(self) -> None:
        self.journal.save_entry(activity_key(0, 2, 8), EntryDraft("Breakfast"), SaveIntent.NEW_ENTRY)
        self.journal.save_mood(0, 2, 8)
        self.journal.show(1, 5)
        self.journal.clear()
        self.assertEqual((self.journal.week, self.journal.day), (0, 2))
        reloaded = self._journal()
        self.assertEqual(len(reloaded.store), 0)
        self.assertIsNone(reloaded.mood(0, 2))


if __name__ == "__main__":
    unittest.main()
