"""Plain-text sprint views for the terminal - no I/O dependencies."""

from collections import Counter

from .models import DailyEntry, Sprint
from .report import format_entry_line, group_entries, sort_entries

DEFAULT_TRUNCATE_LINES = 30


def sprint_label(sprint: Sprint) -> str:
    """Short display label combining code and name without repeating either."""
    if not sprint.name.strip():
        return sprint.code
    if not sprint.code.strip() or sprint.code.lower() == sprint.name.lower():
        return sprint.name
    return f"{sprint.code} - {sprint.name}"


def truncate_lines(lines: list[str], limit: int = DEFAULT_TRUNCATE_LINES) -> list[str]:
    if len(lines) <= limit:
        return lines
    omitted = len(lines) - limit
    return lines[:limit] + [f"... ({omitted} more lines not shown)"]


def sprint_summary_lines(sprint: Sprint, entries: list[DailyEntry]) -> list[str]:
    """Label, window, total and per-date counts (newest date first)."""
    lines = [
        f"Sprint: {sprint_label(sprint)}",
        f"Window: {sprint.window}",
        f"Total items: {len(entries)}",
        "",
        "Dates:",
    ]

    by_day = Counter(e.date for e in entries)
    if not by_day:
        lines.append("- No entries yet")
        return lines

    for day in sorted(by_day, reverse=True):
        lines.append(f"- {day}: {by_day[day]} items")

    return truncate_lines(lines)


def build_day_text(day: str, entries: list[DailyEntry], category_names: dict[str, str]) -> str:
    """One day's entries grouped under their category names."""
    grouped = group_entries(sort_entries(e for e in entries if e.date == day), category_names)
    if not grouped:
        return f"{day}\n\nNo entries for this date."

    out = [day, ""]
    for label, items in grouped[day].items():
        out.append(label)
        out.extend(format_entry_line(e) for e in items)
        out.append("")
    return "\n".join(out) + "\n"


def build_all_details_text(entries: list[DailyEntry], category_names: dict[str, str]) -> str:
    """Every entry of a sprint, grouped by date then category, indented."""
    if not entries:
        return "No entries in this sprint yet."

    out = []
    for day, by_category in group_entries(sort_entries(entries), category_names).items():
        out.append(day)
        for label, items in by_category.items():
            out.append(f"  {label}")
            out.extend(f"  {format_entry_line(e)}" for e in items)
        out.append("")
    return "\n".join(out) + "\n"
