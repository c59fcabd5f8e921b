"""Printable renderings of a journal week: Markdown and a PNG/PDF grid."""

from __future__ import annotations

import logging
from datetime import date
from pathlib import Path

from PIL import Image, ImageDraw, ImageFont

from .keys import activity_key, mood_key
from .models import ActivityEntry, EntryStatus
from .slots import DAY_ABBREVIATIONS, DAY_NAMES, format_short_date, slot_catalog, week_dates, week_range_label
from .store import EntryStore

logger = logging.getLogger(__name__)

COLOR_HEX = {
    "white": "#ffffff",
    "gray": "#808080",
    "yellow": "#ffff00",
    "orange": "#ffa500",
    "red": "#dc2626",
    "green": "#008000",
    "blue": "#3b82f6",
    "purple": "#800080",
}

STATUS_STYLE = {
    EntryStatus.PLANNED: ("#dbeafe", "#2563eb"),
    EntryStatus.NEEDS_REVIEW: ("#fee2e2", "#dc2626"),
    EntryStatus.COMPLETED: ("#dcfce7", "#16a34a"),
}

TIME_COLUMN_WIDTH = 92
DAY_COLUMN_WIDTH = 150
HEADER_HEIGHT = 44
TITLE_HEIGHT = 36
ROW_HEIGHT = 30
PADDING = 6


def entry_summary(entry: ActivityEntry) -> str:
    if entry.status is EntryStatus.INCOMPLETE:
        text = f"~~{entry.activity}~~"
        if entry.replacement is not None:
            text += f" -> {entry.replacement.activity}"
    else:
        text = entry.activity
    ratings = _ratings_label(entry)
    status = f" [{entry.status.value}]" if entry.status is not None else ""
    return f"{text}{status}{' ' + ratings if ratings else ''}"


def week_markdown(store: EntryStore, week: int, today: date | None = None) -> str:
    dates = week_dates(week, today)
    lines: list[str] = [f"# Activity Log - {week_range_label(week, today)}", ""]
    labels = slot_catalog()
    for day, day_date in enumerate(dates):
        mood = store.get_mood(mood_key(week, day))
        heading = f"## {DAY_NAMES[day]} {format_short_date(day_date)}"
        if mood is not None:
            heading += f" (Mood: {mood})"
        lines.extend([heading, ""])

        rows = store.entries_for_day(week, day)
        if not rows:
            lines.extend(["No entries.", ""])
            continue
        for key, entry in rows:
            lines.append(f"- **{labels[key.slot]}** {entry_summary(entry)}")
        lines.append("")
    return "\n".join(lines)


def render_week_image(store: EntryStore, week: int, today: date | None = None) -> Image.Image:
    labels = slot_catalog()
    width = TIME_COLUMN_WIDTH + DAY_COLUMN_WIDTH * 7
    height = TITLE_HEIGHT + HEADER_HEIGHT + ROW_HEIGHT * len(labels)
    image = Image.new("RGB", (width, height), "#ffffff")
    draw = ImageDraw.Draw(image)
    font = ImageFont.load_default()

    draw.text((PADDING, PADDING + 4), f"Activity Log  {week_range_label(week, today)}", fill="#1e3a8a", font=font)

    for day, day_date in enumerate(week_dates(week, today)):
        x = TIME_COLUMN_WIDTH + day * DAY_COLUMN_WIDTH
        y = TITLE_HEIGHT
        draw.rectangle([x, y, x + DAY_COLUMN_WIDTH, y + HEADER_HEIGHT], fill="#2563eb", outline="#1d4ed8")
        draw.text((x + PADDING, y + PADDING), f"{DAY_ABBREVIATIONS[day]} {format_short_date(day_date)}", fill="#ffffff", font=font)
        mood = store.get_mood(mood_key(week, day))
        if mood is not None:
            draw.text((x + PADDING, y + HEADER_HEIGHT // 2 + 2), f"Mood: {mood}", fill="#ffffff", font=font)

    for slot, label in enumerate(labels):
        y = TITLE_HEIGHT + HEADER_HEIGHT + slot * ROW_HEIGHT
        draw.line([0, y + ROW_HEIGHT, width, y + ROW_HEIGHT], fill="#e5e7eb")
        draw.text((PADDING, y + PADDING), label, fill="#4b5563", font=font)
        for day in range(7):
            entry = store.get(activity_key(week, day, slot))
            if entry is None:
                continue
            x = TIME_COLUMN_WIDTH + day * DAY_COLUMN_WIDTH
            _draw_cell(draw, font, entry, (x + 1, y + 1, x + DAY_COLUMN_WIDTH - 1, y + ROW_HEIGHT - 1))

    for day in range(8):
        x = TIME_COLUMN_WIDTH + day * DAY_COLUMN_WIDTH
        draw.line([x, TITLE_HEIGHT, x, height], fill="#d1d5db")
    return image


def save_week_snapshot(store: EntryStore, week: int, target: Path, today: date | None = None) -> Path:
    target = Path(target)
    target.parent.mkdir(parents=True, exist_ok=True)
    image = render_week_image(store, week, today)
    if target.suffix.lower() == ".pdf":
        image.save(target, format="PDF", resolution=100.0)
    else:
        image.save(target, format="PNG", optimize=True)
    logger.info("Saved week %d snapshot to %s", week, target)
    return target


def _draw_cell(draw: ImageDraw.ImageDraw, font, entry: ActivityEntry, box: tuple[int, int, int, int]) -> None:
    x0, y0, x1, y1 = box
    style = STATUS_STYLE.get(entry.status) if entry.status is not None else None
    if style is not None:
        fill, outline = style
        draw.rectangle(box, fill=fill)
        _dashed_rectangle(draw, box, outline)
    else:
        draw.rectangle(box, fill=_mix_hex("#ffffff", COLOR_HEX.get(entry.color, "#808080"), 0.2))

    max_width = x1 - x0 - PADDING * 2
    text_y = y0 + (y1 - y0) // 2 - 6
    if entry.status is EntryStatus.INCOMPLETE:
        original = _fit_text(draw, font, entry.activity, max_width)
        draw.text((x0 + PADDING, text_y), original, fill="#6b7280", font=font)
        strike_y = text_y + 6
        draw.line([x0 + PADDING, strike_y, x0 + PADDING + draw.textlength(original, font=font), strike_y], fill="#6b7280")
        if entry.replacement is not None:
            offset = int(draw.textlength(original, font=font)) + PADDING
            remaining = max_width - offset
            if remaining > 20:
                draw.text(
                    (x0 + PADDING + offset, text_y),
                    _fit_text(draw, font, entry.replacement.activity, remaining),
                    fill="#111827",
                    font=font,
                )
        return

    draw.text((x0 + PADDING, text_y), _fit_text(draw, font, entry.display_text, max_width), fill="#111827", font=font)


def _dashed_rectangle(draw: ImageDraw.ImageDraw, box: tuple[int, int, int, int], color: str, dash: int = 6) -> None:
    x0, y0, x1, y1 = box
    for x in range(x0, x1, dash * 2):
        end = min(x + dash, x1)
        draw.line([x, y0, end, y0], fill=color, width=2)
        draw.line([x, y1, end, y1], fill=color, width=2)
    for y in range(y0, y1, dash * 2):
        end = min(y + dash, y1)
        draw.line([x0, y, x0, end], fill=color, width=2)
        draw.line([x1, y, x1, end], fill=color, width=2)


def _fit_text(draw: ImageDraw.ImageDraw, font, text: str, max_width: float) -> str:
    if draw.textlength(text, font=font) <= max_width:
        return text
    trimmed = text
    while trimmed and draw.textlength(trimmed + "...", font=font) > max_width:
        trimmed = trimmed[:-1]
    return trimmed + "..." if trimmed else ""


def _ratings_label(entry: ActivityEntry) -> str:
    parts = []
    if entry.pleasure is not None:
        parts.append(f"P:{entry.pleasure}")
    if entry.mastery is not None:
        parts.append(f"M:{entry.mastery}")
    return " ".join(parts)


def _mix_hex(start_hex: str, end_hex: str, ratio: float) -> str:
    ratio = max(0.0, min(1.0, float(ratio)))
    s = _hex_to_rgb(start_hex)
    e = _hex_to_rgb(end_hex)
    mixed = (
        int(s[0] + (e[0] - s[0]) * ratio),
        int(s[1] + (e[1] - s[1]) * ratio),
        int(s[2] + (e[2] - s[2]) * ratio),
    )
    return f"#{mixed[0]:02x}{mixed[1]:02x}{mixed[2]:02x}"


def _hex_to_rgb(value: str) -> tuple[int, int, int]:
    h = value.strip().lstrip("#")
    if len(h) != 6:
        return (0, 0, 0)
    try:
        return (int(h[0:2], 16), int(h[2:4], 16), int(h[4:6], 16))
    except ValueError:
        return (0, 0, 0)
