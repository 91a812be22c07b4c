"""Tests for the SQLite entry store."""

from datetime import date

import pytest
from sqlalchemy import update

from devlog.adapters.sql_store import SqlStore
from devlog.adapters.tables import SprintRow
from devlog.errors import ConflictError, NotFoundError, ValidationError


class TestOpen:
    def test_seeds_default_categories(self, store):
        assert store.category_names() == {"pr-reviews": "PR-Reviews", "meeting": "Meeting", "tasks": "Tasks"}

    def test_creates_missing_directories(self, tmp_path):
        db_path = tmp_path / "nested" / "dir" / "daily-updates.sqlite"
        with SqlStore.open(db_path) as s:
            assert s.data_path == db_path
        assert db_path.exists()

    def test_reopen_keeps_data(self, tmp_path):
        db_path = tmp_path / "daily-updates.sqlite"
        with SqlStore.open(db_path) as s:
            s.create_category("Design")
        with SqlStore.open(db_path) as s:
            assert "Design" in [c.name for c in s.list_categories()]
            assert len(s.list_categories()) == 4


class TestCategories:
    def test_create(self, store):
        category = store.create_category("  Deploys ")
        assert category.name == "Deploys"
        assert category.id.startswith("cat-deploys-")

    def test_duplicate_name_ignores_case(self, store):
        with pytest.raises(ConflictError, match="category name already exists"):
            store.create_category("MEETING")

    def test_blank_name(self, store):
        with pytest.raises(ValidationError, match="category name is required"):
            store.create_category("   ")

    def test_rename(self, store):
        renamed = store.rename_category("meeting", "Meetings")
        assert renamed.name == "Meetings"
        assert store.category_names()["meeting"] == "Meetings"

    def test_rename_to_own_name_with_new_case(self, store):
        assert store.rename_category("meeting", "MEETING").name == "MEETING"

    def test_rename_conflict(self, store):
        with pytest.raises(ConflictError):
            store.rename_category("meeting", "tasks")

    def test_rename_missing(self, store):
        with pytest.raises(NotFoundError, match="category not found"):
            store.rename_category("nope", "Whatever")

    def test_delete_unused(self, store):
        assert store.delete_category("meeting") == 0
        assert "meeting" not in store.category_names()

    def test_delete_reassigns_to_oldest_other(self, store):
        sprint = store.create_sprint("2024-01-01")
        store.add_entry(sprint.id, "2024-01-02", "meeting", "Standup")
        store.add_entry(sprint.id, "2024-01-03", "meeting", "Planning")

        moved = store.delete_category("meeting")

        assert moved == 2
        assert "meeting" not in store.category_names()
        # Seeded defaults share a timestamp, so the id breaks the tie
        assert {e.category_id for e in store.list_entries(sprint.id)} == {"pr-reviews"}

    def test_delete_reassigns_to_explicit_replacement(self, store):
        sprint = store.create_sprint("2024-01-01")
        store.add_entry(sprint.id, "2024-01-02", "meeting", "Standup")
        store.add_entry(sprint.id, "2024-01-03", "meeting", "Retro")
        store.add_entry(sprint.id, "2024-01-03", "pr-reviews", "Review #7")

        moved = store.delete_category("meeting", replacement_id="tasks")

        entries = store.list_entries(sprint.id)
        assert moved == 2
        assert len(entries) == 3
        assert [e.category_id for e in entries].count("tasks") == 2
        assert "meeting" not in {e.category_id for e in entries}

    def test_delete_replacement_must_differ(self, store):
        sprint = store.create_sprint("2024-01-01")
        store.add_entry(sprint.id, "2024-01-02", "meeting", "Standup")
        with pytest.raises(ValidationError):
            store.delete_category("meeting", replacement_id="meeting")

    def test_delete_missing_replacement_changes_nothing(self, store):
        sprint = store.create_sprint("2024-01-01")
        store.add_entry(sprint.id, "2024-01-02", "meeting", "Standup")

        with pytest.raises(NotFoundError):
            store.delete_category("meeting", replacement_id="ghost")

        assert "meeting" in store.category_names()
        assert store.list_entries(sprint.id)[0].category_id == "meeting"

    def test_cannot_delete_last_category(self, store):
        store.delete_category("meeting")
        store.delete_category("tasks")
        with pytest.raises(ValidationError, match="at least one category is required"):
            store.delete_category("pr-reviews")


class TestSprints:
    def test_create_fourteen_days_by_default(self, store):
        sprint = store.create_sprint("2024-01-01")
        assert sprint.code == "sprint-1"
        assert sprint.name == "sprint-1"
        assert sprint.end_date == "2024-01-14"

    def test_create_seven_days_with_name(self, store):
        sprint = store.create_sprint("2024-02-26", 7, "  Leap week ")
        assert sprint.end_date == "2024-03-03"
        assert sprint.name == "Leap week"

    def test_codes_continue_from_highest(self, store):
        store.create_sprint("2024-01-01")
        store.create_sprint("2024-01-15")
        with store._transaction("test") as session:
            session.execute(update(SprintRow).where(SprintRow.code == "sprint-2").values(code="sprint-9"))

        assert store.create_sprint("2024-01-29").code == "sprint-10"

    @pytest.mark.parametrize("days", [0, 10, 30])
    def test_rejects_other_durations(self, store, days):
        with pytest.raises(ValidationError, match="duration_days must be 7 or 14"):
            store.create_sprint("2024-01-01", days)

    def test_rejects_bad_start_date(self, store):
        with pytest.raises(ValidationError, match="start_date must be in YYYY-MM-DD format"):
            store.create_sprint("01/02/2024")

    def test_get_missing(self, store):
        with pytest.raises(NotFoundError, match="the selected sprint does not exist"):
            store.get_sprint("sprint-nope")

    def test_rename_keeps_code(self, store):
        sprint = store.create_sprint("2024-01-01")
        renamed = store.rename_sprint(sprint.id, "Launch")
        assert renamed.name == "Launch"
        assert renamed.code == sprint.code

    def test_rename_blank(self, store):
        sprint = store.create_sprint("2024-01-01")
        with pytest.raises(ValidationError):
            store.rename_sprint(sprint.id, " ")

    def test_delete_cascades_entries(self, store):
        old = store.create_sprint("2024-01-01")
        store.create_sprint("2024-01-15")
        store.add_entry(old.id, "2024-01-02", "tasks", "Thing")

        store.delete_sprint(old.id, today=date(2024, 1, 20))

        assert old.id not in [s.id for s in store.list_sprints()]
        assert store.list_entries(old.id) == []

    def test_cannot_delete_active(self, store):
        store.create_sprint("2024-01-01")
        current = store.create_sprint("2024-01-15")
        with pytest.raises(ValidationError, match="cannot delete the active sprint"):
            store.delete_sprint(current.id, today=date(2024, 1, 20))

    def test_delete_missing(self, store):
        store.create_sprint("2024-01-01")
        with pytest.raises(NotFoundError):
            store.delete_sprint("sprint-ghost", today=date(2024, 1, 5))


class TestEntries:
    @pytest.fixture
    def sprint(self, store):
        return store.create_sprint("2024-01-01")

    def test_add_and_list_sorted(self, store, sprint):
        store.add_entry(sprint.id, "2024-01-03", "tasks", "Second day")
        store.add_entry(sprint.id, "2024-01-02", "tasks", "First day", "  with notes ")
        store.add_entry(sprint.id, "2024-01-02", "meeting", "Standup", "   ")

        listed = store.list_entries(sprint.id)

        assert [e.title for e in listed] == ["Standup", "First day", "Second day"]
        assert listed[0].details is None
        assert listed[1].details == "with notes"

    def test_entry_outside_window_is_allowed(self, store, sprint):
        entry = store.add_entry(sprint.id, "2025-06-01", "tasks", "Late")
        assert entry.date == "2025-06-01"

    def test_missing_title(self, store, sprint):
        with pytest.raises(ValidationError, match="title is required"):
            store.add_entry(sprint.id, "2024-01-02", "tasks", "  ")

    def test_bad_date(self, store, sprint):
        with pytest.raises(ValidationError, match="date must be in YYYY-MM-DD format"):
            store.add_entry(sprint.id, "2024-13-01", "tasks", "Thing")

    def test_unknown_sprint(self, store):
        with pytest.raises(NotFoundError, match="the selected sprint does not exist"):
            store.add_entry("sprint-ghost", "2024-01-02", "tasks", "Thing")

    def test_unknown_category(self, store, sprint):
        with pytest.raises(NotFoundError, match="the selected category does not exist"):
            store.add_entry(sprint.id, "2024-01-02", "ghost", "Thing")


class TestNormalizeOnOpen:
    def test_duplicate_codes_repaired(self, tmp_path):
        db_path = tmp_path / "daily-updates.sqlite"
        with SqlStore.open(db_path) as s:
            first = s.create_sprint("2024-01-01")
            second = s.create_sprint("2024-01-15")
            # Simulate damaged data: second sprint loses its code
            with s._transaction("test") as session:
                session.execute(update(SprintRow).where(SprintRow.id == second.id).values(code="junk"))

        with SqlStore.open(db_path) as s:
            codes = {sp.id: sp.code for sp in s.list_sprints()}
            assert codes == {first.id: "sprint-1", second.id: "sprint-2"}
            assert s.normalize_sprint_codes() == 0
