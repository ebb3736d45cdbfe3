from __future__ import annotations

from dataclasses import dataclass

PALETTE: tuple[str, ...] = (
    "#3b82f6",  # blue
    "#10b981",  # emerald
    "#f59e0b",  # amber
    "#ef4444",  # red
    "#8b5cf6",  # violet
    "#ec4899",  # pink
    "#14b8a6",  # teal
    "#f97316",  # orange
    "#84cc16",  # lime
    "#06b6d4",  # cyan
)

TEXT_COLOR = "#ffffff"
BORDER_DARKEN_PERCENT = 20


@dataclass(frozen=True)
class CourseColors:
    background: str
    border: str
    text: str = TEXT_COLOR


def _to_int32(value: int) -> int:
    value &= 0xFFFFFFFF
    return value - 0x100000000 if value & 0x80000000 else value


def course_code_hash(course_code: str) -> int:
    # Only the shift wraps to signed 32 bits, as in the web client, so both
    # sides pick the same palette slot for a code.
    hash_value = 0
    for char in course_code:
        hash_value = ord(char) + (_to_int32(_to_int32(hash_value) << 5) - hash_value)
    return hash_value


def palette_index(course_code: str) -> int:
    return abs(course_code_hash(course_code)) % len(PALETTE)


def color_for(course_code: str) -> str:
    """Return the display color of a course.

    Distinct codes may share a palette slot; a given code always maps to the
    same color.
    """
    return PALETTE[palette_index(course_code)]


def darken_color(color: str, percent: int) -> str:
    value = int(color.lstrip("#"), 16)
    amount = round(2.55 * percent)
    channels = (
        (value >> 16) - amount,
        ((value >> 8) & 0xFF) - amount,
        (value & 0xFF) - amount,
    )
    return "#" + "".join(f"{min(255, max(0, channel)):02x}" for channel in channels)


def border_color_for(course_code: str) -> str:
    return darken_color(color_for(course_code), BORDER_DARKEN_PERCENT)


def colors_for(course_code: str) -> CourseColors:
    return CourseColors(background=color_for(course_code), border=border_color_for(course_code))
