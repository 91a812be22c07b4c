"""Pure report assembly logic - no I/O dependencies."""

import re
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable

from .models import DailyEntry, Sprint
from .text import slugify

EMPTY_REPORT_LINE = "No items found for the selected filters."


@dataclass
class ReportHeader:
    """Header fields read back from a rendered report."""

    title: str
    sprint_id: str
    sprint_code: str
    start_date: str
    end_date: str | None
    exported_at: str
    from_date: str | None
    to_date: str | None
    total_items: int


def filter_entries(
    entries: Iterable[DailyEntry],
    from_date: str | None = None,
    to_date: str | None = None,
    category_ids: Iterable[str] | None = None,
) -> list[DailyEntry]:
    """
    Keep entries inside the inclusive date range and category set.

    Either bound may be None. An empty or missing category set keeps every
    category. Pure function - no I/O.
    """
    wanted = set(category_ids or ())
    return [
        e
        for e in entries
        if (not from_date or e.date >= from_date)
        and (not to_date or e.date <= to_date)
        and (not wanted or e.category_id in wanted)
    ]


def sort_entries(entries: Iterable[DailyEntry]) -> list[DailyEntry]:
    """Sort by (date, category_id, created_at). Pure function - no I/O."""
    return sorted(entries, key=lambda e: (e.date, e.category_id, e.created_at))


def group_entries(
    entries: list[DailyEntry],
    category_names: dict[str, str],
) -> dict[str, dict[str, list[DailyEntry]]]:
    """
    Group sorted entries by date, then by category display name.

    Both levels come back in ascending order. Categories missing from
    category_names are shown by their raw id.
    """
    grouped: dict[str, dict[str, list[DailyEntry]]] = {}
    for entry in entries:
        label = category_names.get(entry.category_id, entry.category_id)
        grouped.setdefault(entry.date, {}).setdefault(label, []).append(entry)

    return {
        day: {label: by_label[label] for label in sorted(by_label)}
        for day, by_label in sorted(grouped.items())
    }


def format_entry_line(entry: DailyEntry) -> str:
    """Format a single entry as a markdown bullet."""
    if entry.details:
        return f"- {entry.title} - {entry.details}"
    return f"- {entry.title}"


def render_report(
    sprint: Sprint,
    entries: Iterable[DailyEntry],
    category_names: dict[str, str],
    exported_at: str,
    from_date: str | None = None,
    to_date: str | None = None,
    category_ids: Iterable[str] | None = None,
) -> tuple[str, int]:
    """
    Filter, sort, group and render a sprint report.

    Pure function - no I/O. Output depends only on the arguments, so identical
    inputs render byte-identical markdown.

    Returns:
        (markdown, number of included entries)
    """
    included = sort_entries(filter_entries(entries, from_date, to_date, category_ids))
    grouped = group_entries(included, category_names)

    lines = [
        f"# Sprint Report: {sprint.name}",
        "",
        f"- Sprint ID: `{sprint.id}`",
        f"- Sprint Code: `{sprint.code}`",
        f"- Sprint Window: {sprint.window}",
        f"- Exported At: {exported_at}",
    ]
    if from_date:
        lines.append(f"- Report From: {from_date}")
    if to_date:
        lines.append(f"- Report To: {to_date}")
    lines.append(f"- Included Items: {len(included)}")
    lines.append("")

    if not grouped:
        lines.append(EMPTY_REPORT_LINE)
        return "\n".join(lines) + "\n", 0

    for day, by_category in grouped.items():
        lines.append(f"## {day}")
        lines.append("")
        for label, items in by_category.items():
            lines.append(f"### {label}")
            lines.extend(format_entry_line(e) for e in items)
            lines.append("")

    return "\n".join(lines) + "\n", len(included)


def report_filename(sprint_name: str, when: datetime) -> str:
    """File name for a report: report-<slug>-<YYYYMMDDHHMMSS>.md (when is UTC)."""
    return f"report-{slugify(sprint_name)}-{when.strftime('%Y%m%d%H%M%S')}.md"


_HEADER_FIELD = re.compile(r"^- (?P<key>[A-Za-z ]+): (?P<value>.*)$")


def parse_report_header(markdown: str) -> ReportHeader:
    """
    Read the header block of a rendered report back into fields.

    Raises:
        ValueError: if the text does not start with a report header.
    """
    lines = markdown.splitlines()
    if not lines or not lines[0].startswith("# Sprint Report: "):
        raise ValueError("not a sprint report")

    fields: dict[str, str] = {}
    for line in lines[1:]:
        if line.startswith("## ") or line == EMPTY_REPORT_LINE:
            break
        match = _HEADER_FIELD.match(line)
        if match:
            fields[match["key"]] = match["value"].strip("`")

    start, _, end = fields.get("Sprint Window", "").partition(" to ")
    return ReportHeader(
        title=lines[0].removeprefix("# Sprint Report: "),
        sprint_id=fields.get("Sprint ID", ""),
        sprint_code=fields.get("Sprint Code", ""),
        start_date=start,
        end_date=None if end in ("", "open") else end,
        exported_at=fields.get("Exported At", ""),
        from_date=fields.get("Report From"),
        to_date=fields.get("Report To"),
        total_items=int(fields.get("Included Items", "0")),
    )
