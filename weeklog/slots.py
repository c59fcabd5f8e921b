from __future__ import annotations

from datetime import date, datetime, timedelta

DAY_ABBREVIATIONS = ("M", "T", "W", "Th", "F", "Sa", "Su")
DAY_NAMES = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")

SLOT_LABELS = (
    "12-1 am", "1-2 am", "2-3 am", "3-4 am", "4-5 am", "5-6 am",
    "6-7 am", "7-8 am", "8-9 am", "9-10 am", "10-11 am", "11 am-12 pm",
    "12-1 pm", "1-2 pm", "2-3 pm", "3-4 pm", "4-5 pm", "5-6 pm",
    "6-7 pm", "7-8 pm", "8-9 pm", "9-10 pm", "10-11 pm", "11 pm-12 am",
)

_SLOT_INDEX = {label: index for index, label in enumerate(SLOT_LABELS)}


def slot_catalog() -> tuple[str, ...]:
    return SLOT_LABELS


def slot_label(index: int) -> str:
    if not 0 <= index < len(SLOT_LABELS):
        raise ValueError(f"Slot index out of range: {index}")
    return SLOT_LABELS[index]


def slot_index(label: str) -> int:
    try:
        return _SLOT_INDEX[label]
    except KeyError:
        raise ValueError(f"Unknown slot label: {label!r}") from None


def is_slot_label(label: str) -> bool:
    return label in _SLOT_INDEX


def day_index(day: date) -> int:
    """Monday-indexed weekday, 0 = Monday .. 6 = Sunday."""
    return day.weekday()


def day_index_from_sunday_indexed(native_weekday: int) -> int:
    # Platforms that count Sunday as 0 (JavaScript, cron) need remapping.
    if not 0 <= native_weekday <= 6:
        raise ValueError(f"Weekday out of range: {native_weekday}")
    return 6 if native_weekday == 0 else native_weekday - 1


def current_slot_index(now: datetime) -> int:
    return min(max(0, now.hour), len(SLOT_LABELS) - 1)


def week_dates(week_offset: int, today: date | None = None) -> list[date]:
    today = today or date.today()
    monday = today - timedelta(days=day_index(today)) + timedelta(weeks=week_offset)
    return [monday + timedelta(days=offset) for offset in range(7)]


def week_offset_of(day: date, today: date | None = None) -> int:
    """Signed number of weeks between the week of ``today`` and the week of ``day``."""
    today = today or date.today()
    this_monday = week_dates(0, today)[0]
    target_monday = day - timedelta(days=day_index(day))
    return (target_monday - this_monday).days // 7


def format_short_date(value: date) -> str:
    return f"{value.month}/{value.day}"


def week_range_label(week_offset: int, today: date | None = None) -> str:
    dates = week_dates(week_offset, today)
    return f"{format_short_date(dates[0])} - {format_short_date(dates[6])}"
