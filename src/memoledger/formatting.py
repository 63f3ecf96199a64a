"""Display helpers shared by list views and charts."""

from __future__ import annotations

from datetime import date

from memoledger.models import parse_iso_date

THAI_MONTHS = [
    "มกราคม",
    "กุมภาพันธ์",
    "มีนาคม",
    "เมษายน",
    "พฤษภาคม",
    "มิถุนายน",
    "กรกฎาคม",
    "สิงหาคม",
    "กันยายน",
    "ตุลาคม",
    "พฤศจิกายน",
    "ธันวาคม",
]

# Buddhist era = Gregorian + 543
BE_OFFSET = 543

THEME_COLORS = ["#4A2C6D", "#D32F2F", "#F57C00", "#FBC02D", "#0288D1", "#388E3C"]

FILE_LABEL_LIMIT = 15


def format_thai_date(value: str) -> str:
    """Long Thai date, e.g. ``5 มกราคม 2567``."""
    parsed = parse_iso_date(value)
    if parsed is None:
        return "Invalid Date"
    return f"{parsed.day} {THAI_MONTHS[parsed.month - 1]} {parsed.year + BE_OFFSET}"


def short_day_label(day: date, locale: str = "th-TH") -> str:
    """Numeric calendar-day label: ``5/1/2567`` for th-TH, ISO otherwise."""
    if locale == "th-TH":
        return f"{day.day}/{day.month}/{day.year + BE_OFFSET}"
    return day.isoformat()


def file_label(name: str | None, limit: int = FILE_LABEL_LIMIT) -> str:
    if not name:
        return ""
    if len(name) <= limit:
        return name
    return name[:limit] + "..."


def _string_hash(value: str) -> int:
    """``h = c + ((h << 5) - h)`` over UTF-16 code units, wrapped to signed 32 bits."""
    h = 0
    units = value.encode("utf-16-le")
    for i in range(0, len(units), 2):
        code = units[i] | (units[i + 1] << 8)
        h = (code + ((h << 5) - h)) & 0xFFFFFFFF
    return h - (1 << 32) if h & 0x80000000 else h


def department_color(name: str) -> str:
    return THEME_COLORS[abs(_string_hash(name)) % len(THEME_COLORS)]
