"""Entry store interface."""

from datetime import date
from pathlib import Path
from typing import Protocol

from devlog.core.models import Category, DailyEntry, Sprint


class EntryStore(Protocol):
    """Interface for persisting categories, sprints and daily entries."""

    data_path: Path

    def is_empty(self) -> bool:
        """True when there are no categories, sprints or entries."""
        ...

    def normalize_sprint_codes(self) -> int:
        """Repair duplicate or malformed sprint codes. Returns the number rewritten."""
        ...

    def list_categories(self) -> list[Category]:
        """All categories, oldest first."""
        ...

    def category_names(self) -> dict[str, str]:
        """Map of category id to display name."""
        ...

    def create_category(self, name: str) -> Category:
        ...

    def rename_category(self, category_id: str, name: str) -> Category:
        ...

    def delete_category(self, category_id: str, replacement_id: str | None = None) -> int:
        """Delete a category, reassigning its entries. Returns the reassigned count."""
        ...

    def list_sprints(self) -> list[Sprint]:
        """All sprints, oldest first."""
        ...

    def get_sprint(self, sprint_id: str) -> Sprint:
        ...

    def create_sprint(
        self, start_date: str, duration_days: int | None = None, name: str | None = None
    ) -> Sprint:
        ...

    def rename_sprint(self, sprint_id: str, name: str) -> Sprint:
        ...

    def delete_sprint(self, sprint_id: str, today: date | None = None) -> None:
        ...

    def list_entries(self, sprint_id: str) -> list[DailyEntry]:
        """Entries of a sprint ordered by date, category id and creation time."""
        ...

    def add_entry(
        self,
        sprint_id: str,
        entry_date: str,
        category_id: str,
        title: str,
        details: str | None = None,
    ) -> DailyEntry:
        ...

    def close(self) -> None:
        ...
