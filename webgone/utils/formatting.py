"""
Helpers for printing outages to the console
"""
import calendar
from datetime import datetime, timezone
from typing import Sequence


def format_hms(seconds: int) -> str:
    """
    Format a number of seconds as HH:MM:SS.

    Examples:
        59 -> "00:00:59"
        3661 -> "01:01:01"
        90000 -> "25:00:00"
    """
    seconds = int(seconds)
    hours = seconds // 3600
    minutes = (seconds % 3600) // 60
    return f"{hours:02}:{minutes:02}:{seconds % 60:02}"


def format_timestamp(value: datetime | None) -> str:
    if value is None:
        return ""
    return value.astimezone(timezone.utc).strftime("%Y-%m-%d %H:%M:%S")


def month_name(month: int) -> str:
    return calendar.month_name[month] if 1 <= month <= 12 else "Unknown"


def render_table(headers: Sequence[str], rows: Sequence[Sequence[str]], align: str | None = None) -> str:
    """
    Render rows as a plain ASCII table.

    align holds one character per column, "l" or "r"; columns default to left.
    """
    align = align or "l" * len(headers)
    widths = [len(h) for h in headers]
    for row in rows:
        for i, cell in enumerate(row):
            widths[i] = max(widths[i], len(str(cell)))

    def _line(cells):
        parts = []
        for i, cell in enumerate(cells):
            cell = str(cell)
            parts.append(cell.rjust(widths[i]) if align[i] == "r" else cell.ljust(widths[i]))
        return "| " + " | ".join(parts) + " |"

    border = "+" + "+".join("-" * (w + 2) for w in widths) + "+"
    lines = [border, _line(headers), border]
    lines.extend(_line(row) for row in rows)
    lines.append(border)
    return "\n".join(lines)
