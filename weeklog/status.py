"""Time-derived entry statuses.

Statuses are a snapshot recomputed lazily from the key position and the
current wall-clock time. Nothing is scheduled: a plan whose hour has passed
only turns into ``needs-review`` the next time :func:`reevaluate` runs.
"""

from __future__ import annotations

import logging
from datetime import datetime

from .models import ActivityKey, EntryStatus

logger = logging.getLogger(__name__)


def next_status(
    week: int,
    day: int,
    slot: int,
    current: EntryStatus | None,
    now: datetime,
) -> EntryStatus | None:
    if current is EntryStatus.COMPLETED:
        return EntryStatus.COMPLETED
    if week > 0:
        return EntryStatus.PLANNED
    if week < 0:
        return current

    today = now.weekday()
    if day > today:
        return EntryStatus.PLANNED
    if day == today and slot >= now.hour:
        return EntryStatus.PLANNED
    if current is EntryStatus.PLANNED:
        return EntryStatus.NEEDS_REVIEW
    return current


def status_for_key(key: ActivityKey, current: EntryStatus | None, now: datetime) -> EntryStatus | None:
    return next_status(key.week, key.day, key.slot, current, now)


def initial_status(key: ActivityKey, now: datetime) -> EntryStatus | None:
    """Status assigned once when a brand-new entry is saved."""
    return status_for_key(key, None, now)


def compute_changes(entries, now: datetime) -> dict[ActivityKey, EntryStatus | None]:
    changes: dict[ActivityKey, EntryStatus | None] = {}
    for key, entry in entries:
        status = status_for_key(key, entry.status, now)
        if status is not entry.status:
            changes[key] = status
    return changes


def reevaluate(store, now: datetime) -> list[ActivityKey]:
    """Recompute every stored entry and write back only the ones that changed."""
    changes = compute_changes(store.items(), now)
    if changes:
        store.apply_statuses(changes)
        logger.info("Re-evaluated statuses: %d of %d entries changed", len(changes), len(store))
    return sorted(changes)
