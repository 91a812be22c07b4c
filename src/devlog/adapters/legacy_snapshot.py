"""
One-shot import of the legacy JSON snapshot into the SQL store.

The snapshot is a single JSON object holding "categories", "sprints" and
"entries" arrays. It is decoded strictly into the core dataclasses, repaired
in memory (default categories, sprint codes, missing categories), then written
in one transaction. Individually malformed rows are skipped; anything else
aborts the whole import.
"""

import json
import logging
import time
from dataclasses import dataclass, field, replace
from pathlib import Path

from sqlalchemy import select
from sqlalchemy.dialects.sqlite import insert
from sqlalchemy.orm import Session

from devlog.core.models import Category, DailyEntry, Sprint, clean_optional, default_categories
from devlog.core.sprint_codes import assign_codes, format_sprint_code
from devlog.core.text import humanize_category_id, next_id, now_rfc3339
from devlog.errors import LegacyImportError

from .tables import CategoryRow, EntryRow, SprintRow

logger = logging.getLogger(__name__)

SNAPSHOT_VERSION = 1


def _records(data: dict, key: str) -> list[dict]:
    value = data.get(key)
    if value is None:
        return []
    if not isinstance(value, list) or not all(isinstance(item, dict) for item in value):
        raise LegacyImportError(f"'{key}' must be a list of objects")
    return value


def _text(record: dict, key: str, where: str, default: str = "") -> str:
    value = record.get(key, default)
    if not isinstance(value, str):
        raise LegacyImportError(f"{where}.{key} must be a string")
    return value


def _optional_text(record: dict, key: str, where: str) -> str | None:
    value = record.get(key)
    if value is not None and not isinstance(value, str):
        raise LegacyImportError(f"{where}.{key} must be a string or null")
    return value


@dataclass
class LegacySnapshot:
    """Decoded legacy snapshot."""

    categories: list[Category] = field(default_factory=list)
    sprints: list[Sprint] = field(default_factory=list)
    entries: list[DailyEntry] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: object, imported_at: str | None = None) -> "LegacySnapshot":
        """
        Decode a parsed snapshot.

        Missing strings default to "", missing end_date/details to None and
        missing created_at to the import time. Entries accept "category" as
        an alias for "category_id".

        Raises:
            LegacyImportError: on an unsupported version or a mistyped field.
        """
        if not isinstance(data, dict):
            raise LegacyImportError("legacy snapshot must be a JSON object")

        version = data.get("version", SNAPSHOT_VERSION)
        if version != SNAPSHOT_VERSION:
            raise LegacyImportError(f"unsupported legacy snapshot version: {version!r}")

        imported_at = imported_at or now_rfc3339()

        categories = []
        for i, record in enumerate(_records(data, "categories")):
            where = f"categories[{i}]"
            categories.append(
                Category(
                    id=_text(record, "id", where).strip(),
                    name=_text(record, "name", where).strip(),
                    created_at=_text(record, "created_at", where) or imported_at,
                )
            )

        sprints = []
        for i, record in enumerate(_records(data, "sprints")):
            where = f"sprints[{i}]"
            sprints.append(
                Sprint(
                    id=_text(record, "id", where).strip(),
                    code=_text(record, "code", where).strip(),
                    name=_text(record, "name", where).strip(),
                    start_date=_text(record, "start_date", where).strip(),
                    end_date=clean_optional(_optional_text(record, "end_date", where)),
                    created_at=_text(record, "created_at", where) or imported_at,
                )
            )

        entries = []
        for i, record in enumerate(_records(data, "entries")):
            where = f"entries[{i}]"
            category_key = "category_id" if "category_id" in record else "category"
            entries.append(
                DailyEntry(
                    id=_text(record, "id", where).strip(),
                    sprint_id=_text(record, "sprint_id", where).strip(),
                    date=_text(record, "date", where).strip(),
                    category_id=_text(record, category_key, where).strip(),
                    title=_text(record, "title", where).strip(),
                    details=clean_optional(_optional_text(record, "details", where)),
                    created_at=_text(record, "created_at", where) or imported_at,
                )
            )

        return cls(categories=categories, sprints=sprints, entries=entries)


def load_snapshot(path: Path) -> LegacySnapshot:
    """Read and decode the snapshot file. The file is never modified."""
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise LegacyImportError(f"unable to read legacy data file {path}: {e}") from e

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise LegacyImportError(f"invalid legacy data format in {path}: {e}") from e

    return LegacySnapshot.from_dict(data)


def prepare_snapshot(snapshot: LegacySnapshot) -> LegacySnapshot:
    """
    Repair a decoded snapshot in memory before anything is written.

    Seeds the default categories when there are none, normalizes sprint
    codes, and adds a category for every entry category id that has no
    usable category row.
    """
    now = now_rfc3339()
    categories = list(snapshot.categories) or default_categories(now)

    known = {c.id for c in categories if c.id and c.name}
    for entry in snapshot.entries:
        if not entry.category_id or entry.category_id in known:
            continue
        categories.append(
            Category(id=entry.category_id, name=humanize_category_id(entry.category_id), created_at=now)
        )
        known.add(entry.category_id)

    return replace(snapshot, categories=categories, sprints=assign_codes(snapshot.sprints))


@dataclass
class ImportStats:
    """Row counts written and skipped by an import."""

    categories: int = 0
    sprints: int = 0
    entries: int = 0
    skipped: int = 0


def import_snapshot(session: Session, snapshot: LegacySnapshot) -> ImportStats:
    """
    Write a prepared snapshot inside the caller's transaction.

    Categories go first, then sprints, then entries. Conflicting rows are
    ignored (an existing id wins). Entries are only written when both their
    sprint and their category made it into the store.
    """
    stats = ImportStats()

    for category in snapshot.categories:
        if not category.id or not category.name:
            stats.skipped += 1
            continue
        result = session.execute(
            insert(CategoryRow)
            .values(id=category.id, name=category.name, created_at=category.created_at)
            .on_conflict_do_nothing()
        )
        if result.rowcount:
            stats.categories += 1
        else:
            logger.warning(f"Legacy category {category.id!r} conflicts with an existing row, skipped")
            stats.skipped += 1

    category_ids = set(session.scalars(select(CategoryRow.id)))

    migrated_sprints: set[str] = set()
    for sprint in snapshot.sprints:
        if not sprint.id or not sprint.start_date:
            stats.skipped += 1
            continue
        code = sprint.code or format_sprint_code(time.time_ns() % 1_000_000_000)
        result = session.execute(
            insert(SprintRow)
            .values(
                id=sprint.id,
                code=code,
                name=sprint.name or code,
                start_date=sprint.start_date,
                end_date=sprint.end_date,
                created_at=sprint.created_at,
            )
            .on_conflict_do_nothing()
        )
        if result.rowcount:
            migrated_sprints.add(sprint.id)
            stats.sprints += 1
        else:
            logger.warning(f"Legacy sprint {sprint.id!r} conflicts with an existing row, skipped")
            stats.skipped += 1

    for entry in snapshot.entries:
        if not (entry.sprint_id and entry.category_id and entry.title and entry.date):
            stats.skipped += 1
            continue
        if entry.sprint_id not in migrated_sprints or entry.category_id not in category_ids:
            stats.skipped += 1
            continue
        result = session.execute(
            insert(EntryRow)
            .values(
                id=entry.id or next_id("entry-import"),
                sprint_id=entry.sprint_id,
                date=entry.date,
                category_id=entry.category_id,
                title=entry.title,
                details=entry.details,
                created_at=entry.created_at,
            )
            .on_conflict_do_nothing()
        )
        if result.rowcount:
            stats.entries += 1
        else:
            stats.skipped += 1

    if stats.skipped:
        logger.warning(f"Skipped {stats.skipped} malformed or conflicting legacy rows")
    return stats
