"""Tests for terminal sprint views."""

from devlog.core.models import DailyEntry
from devlog.core.views import (
    build_all_details_text,
    build_day_text,
    sprint_label,
    sprint_summary_lines,
    truncate_lines,
)

NAMES = {"meeting": "Meeting", "tasks": "Tasks"}


def make_entry(id, date, category_id, title, details=None):
    return DailyEntry(
        id=id,
        sprint_id="s",
        date=date,
        category_id=category_id,
        title=title,
        details=details,
        created_at=f"{date}T00:00:00+00:00",
    )


class TestSprintLabel:
    def test_code_and_name(self, make_sprint):
        assert sprint_label(make_sprint("s", code="sprint-2", name="Launch")) == "sprint-2 - Launch"

    def test_name_equal_to_code(self, make_sprint):
        assert sprint_label(make_sprint("s", code="sprint-2", name="Sprint-2")) == "Sprint-2"

    def test_blank_name(self, make_sprint):
        assert sprint_label(make_sprint("s", code="sprint-2", name=" ")) == "sprint-2"


def test_truncate_lines():
    lines = [str(i) for i in range(35)]
    out = truncate_lines(lines)
    assert len(out) == 31
    assert out[-1] == "... (5 more lines not shown)"
    assert truncate_lines(lines[:3]) == lines[:3]


class TestSprintSummary:
    def test_counts_newest_date_first(self, make_sprint):
        sprint = make_sprint("s", code="sprint-1", name="Sprint 1")
        entries = [
            make_entry("1", "2024-01-02", "tasks", "a"),
            make_entry("2", "2024-01-03", "tasks", "b"),
            make_entry("3", "2024-01-02", "meeting", "c"),
        ]

        lines = sprint_summary_lines(sprint, entries)

        assert lines[0] == "Sprint: sprint-1 - Sprint 1"
        assert "Total items: 3" in lines
        assert lines[-2:] == ["- 2024-01-03: 1 items", "- 2024-01-02: 2 items"]

    def test_no_entries(self, make_sprint):
        lines = sprint_summary_lines(make_sprint("s", code="sprint-1"), [])
        assert lines[-1] == "- No entries yet"


class TestDayText:
    def test_groups_by_category(self):
        entries = [
            make_entry("1", "2024-01-02", "tasks", "Write docs", "api section"),
            make_entry("2", "2024-01-02", "meeting", "Standup"),
            make_entry("3", "2024-01-03", "tasks", "Elsewhere"),
        ]

        text = build_day_text("2024-01-02", entries, NAMES)

        assert text == "2024-01-02\n\nMeeting\n- Standup\n\nTasks\n- Write docs - api section\n\n"

    def test_empty_day(self):
        assert build_day_text("2024-01-09", [], NAMES) == "2024-01-09\n\nNo entries for this date."


class TestAllDetails:
    def test_indents_under_date(self):
        entries = [
            make_entry("1", "2024-01-03", "tasks", "Later"),
            make_entry("2", "2024-01-02", "meeting", "Earlier"),
        ]

        text = build_all_details_text(entries, NAMES)

        assert text == "2024-01-02\n  Meeting\n  - Earlier\n\n2024-01-03\n  Tasks\n  - Later\n\n"

    def test_empty(self):
        assert build_all_details_text([], NAMES) == "No entries in this sprint yet."
