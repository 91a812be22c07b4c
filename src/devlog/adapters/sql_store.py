"""SQLite-backed entry store."""

import logging
import time
from contextlib import contextmanager
from datetime import date, timedelta
from pathlib import Path
from typing import Iterator

from sqlalchemy import create_engine, delete, event, func, select, update
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from devlog.core import sprint_codes
from devlog.core.active import pick_active_sprint
from devlog.core.models import (
    DEFAULT_SPRINT_DAYS,
    SPRINT_DURATIONS,
    Category,
    DailyEntry,
    Sprint,
    clean_optional,
    default_categories,
    parse_iso_date,
)
from devlog.core.text import next_id, now_rfc3339, slugify
from devlog.errors import ConflictError, NotFoundError, StorageError, ValidationError

from .legacy_snapshot import ImportStats, import_snapshot, load_snapshot, prepare_snapshot
from .tables import Base, CategoryRow, EntryRow, SprintRow

logger = logging.getLogger(__name__)


def _enable_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def _required(value: str | None, field: str) -> str:
    cleaned = (value or "").strip()
    if not cleaned:
        raise ValidationError(f"{field} is required")
    return cleaned


class SqlStore:
    """
    SQLite entry store.

    Implements EntryStore protocol. Each operation runs in its own
    transaction; the caller owns the store's lifetime and closes it.
    """

    def __init__(self, engine: Engine, data_path: Path):
        self._engine = engine
        self._sessions = sessionmaker(engine, expire_on_commit=False)
        self.data_path = data_path

    @classmethod
    def open(cls, db_path: Path | str, legacy_path: Path | str | None = None) -> "SqlStore":
        """
        Open (creating if needed) the database at db_path.

        Runs schema init, the one-shot legacy import, default category
        seeding and sprint code normalization, in that order.
        """
        db_path = Path(db_path).expanduser()
        try:
            db_path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageError(f"unable to create data directory {db_path.parent}: {e}") from e

        engine = create_engine(f"sqlite:///{db_path}")
        event.listen(engine, "connect", _enable_foreign_keys)

        store = cls(engine, db_path)
        try:
            store._bootstrap(Path(legacy_path) if legacy_path else None)
        except Exception:
            store.close()
            raise
        logger.info(f"Opened store at {db_path}")
        return store

    def close(self) -> None:
        self._engine.dispose()

    def __enter__(self) -> "SqlStore":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    @contextmanager
    def _transaction(self, action: str) -> Iterator[Session]:
        """One session in one transaction; library errors become StorageError."""
        try:
            with self._sessions.begin() as session:
                yield session
        except SQLAlchemyError as e:
            logger.error(f"Failed to {action}: {e}")
            raise StorageError(f"failed to {action}: {e}") from e

    # ============== Open sequence ==============

    def _bootstrap(self, legacy_path: Path | None) -> None:
        try:
            Base.metadata.create_all(self._engine)
        except SQLAlchemyError as e:
            raise StorageError(f"failed to initialize database schema: {e}") from e

        if legacy_path is not None and legacy_path.exists() and self.is_empty():
            self.import_legacy(legacy_path)

        self._seed_default_categories()
        self.normalize_sprint_codes()

    @staticmethod
    def _count(session: Session, table) -> int:
        return session.scalar(select(func.count()).select_from(table))

    def is_empty(self) -> bool:
        """True when there are no categories, sprints or entries."""
        with self._transaction("count rows") as session:
            return all(self._count(session, t) == 0 for t in (CategoryRow, SprintRow, EntryRow))

    def import_legacy(self, legacy_path: Path) -> ImportStats:
        """
        Import the legacy snapshot, all or nothing.

        Does nothing when the store already holds data.
        """
        snapshot = prepare_snapshot(load_snapshot(legacy_path))
        with self._transaction("migrate legacy data") as session:
            if any(self._count(session, t) for t in (CategoryRow, SprintRow, EntryRow)):
                logger.info("Store is not empty, skipping legacy import")
                return ImportStats()
            stats = import_snapshot(session, snapshot)

        logger.info(
            f"Imported legacy data from {legacy_path}: {stats.categories} categories, "
            f"{stats.sprints} sprints, {stats.entries} entries"
        )
        return stats

    def _seed_default_categories(self) -> None:
        with self._transaction("seed default categories") as session:
            if self._count(session, CategoryRow):
                return
            for category in default_categories(now_rfc3339()):
                session.add(CategoryRow(id=category.id, name=category.name, created_at=category.created_at))
        logger.info("Seeded default categories")

    def normalize_sprint_codes(self) -> int:
        """Rewrite duplicate or malformed sprint codes. Returns the number rewritten."""
        with self._transaction("normalize sprint codes") as session:
            rows = session.scalars(select(SprintRow).order_by(SprintRow.created_at)).all()
            changes = sprint_codes.normalize_sprint_codes([r.to_model() for r in rows])
            if not changes:
                return 0

            changed = [r for r in rows if r.id in changes]
            # Park on unique placeholders first so no rewrite collides mid-flight
            for row in changed:
                row.code = f"~renumber-{row.id}"
            session.flush()
            for row in changed:
                logger.info(f"Sprint {row.id}: code set to {changes[row.id]}")
                row.code = changes[row.id]

        return len(changes)

    # ============== Categories ==============

    def list_categories(self) -> list[Category]:
        with self._transaction("list categories") as session:
            rows = session.scalars(select(CategoryRow).order_by(CategoryRow.created_at, CategoryRow.id))
            return [r.to_model() for r in rows]

    def category_names(self) -> dict[str, str]:
        return {c.id: c.name for c in self.list_categories()}

    @staticmethod
    def _name_taken(session: Session, name: str, excluding_id: str | None = None) -> bool:
        query = select(CategoryRow.id).where(func.lower(CategoryRow.name) == func.lower(name))
        if excluding_id is not None:
            query = query.where(CategoryRow.id != excluding_id)
        return session.scalar(query.limit(1)) is not None

    def create_category(self, name: str) -> Category:
        name = _required(name, "category name")
        with self._transaction("create category") as session:
            if self._name_taken(session, name):
                raise ConflictError("category name already exists")
            row = CategoryRow(
                id=f"cat-{slugify(name)}-{time.time_ns() // 1_000_000}",
                name=name,
                created_at=now_rfc3339(),
            )
            session.add(row)
            logger.debug(f"Created category {row.id}")
            return row.to_model()

    def rename_category(self, category_id: str, name: str) -> Category:
        category_id = _required(category_id, "category id")
        name = _required(name, "category name")
        with self._transaction("update category") as session:
            row = session.get(CategoryRow, category_id)
            if row is None:
                raise NotFoundError("category not found")
            if self._name_taken(session, name, excluding_id=category_id):
                raise ConflictError("category name already exists")
            row.name = name
            return row.to_model()

    def delete_category(self, category_id: str, replacement_id: str | None = None) -> int:
        """
        Delete a category, moving its entries to a replacement first.

        The replacement is replacement_id when given, otherwise the oldest
        other category (ties broken by id). Returns the number of reassigned entries.
        """
        category_id = _required(category_id, "category id")
        with self._transaction("delete category") as session:
            if self._count(session, CategoryRow) <= 1:
                raise ValidationError("at least one category is required")

            row = session.get(CategoryRow, category_id)
            if row is None:
                raise NotFoundError("category not found")

            used = session.scalar(
                select(func.count()).select_from(EntryRow).where(EntryRow.category_id == category_id)
            )
            if used:
                replacement = (replacement_id or "").strip() or session.scalar(
                    select(CategoryRow.id)
                    .where(CategoryRow.id != category_id)
                    .order_by(CategoryRow.created_at, CategoryRow.id)
                    .limit(1)
                )
                if replacement == category_id:
                    raise ValidationError("replacement category must be different")
                if replacement is None or session.get(CategoryRow, replacement) is None:
                    raise NotFoundError("replacement category not found")

                session.execute(
                    update(EntryRow)
                    .where(EntryRow.category_id == category_id)
                    .values(category_id=replacement)
                )
                logger.info(f"Moved {used} entries from category {category_id} to {replacement}")

            session.delete(row)
        return used

    # ============== Sprints ==============

    def list_sprints(self) -> list[Sprint]:
        with self._transaction("list sprints") as session:
            rows = session.scalars(select(SprintRow).order_by(SprintRow.created_at))
            return [r.to_model() for r in rows]

    def get_sprint(self, sprint_id: str) -> Sprint:
        with self._transaction("read sprint") as session:
            row = session.get(SprintRow, sprint_id)
            if row is None:
                raise NotFoundError("the selected sprint does not exist")
            return row.to_model()

    def create_sprint(
        self,
        start_date: str,
        duration_days: int | None = None,
        name: str | None = None,
    ) -> Sprint:
        """Create a sprint of 7 or 14 days starting on start_date."""
        start = parse_iso_date(start_date, "start_date")
        days = DEFAULT_SPRINT_DAYS if duration_days is None else duration_days
        if days not in SPRINT_DURATIONS:
            raise ValidationError("duration_days must be 7 or 14")
        end = start + timedelta(days=days - 1)

        with self._transaction("create sprint") as session:
            existing = [r.to_model() for r in session.scalars(select(SprintRow))]
            code = sprint_codes.next_sprint_code(existing)
            row = SprintRow(
                id=next_id("sprint"),
                code=code,
                name=clean_optional(name) or code,
                start_date=start.isoformat(),
                end_date=end.isoformat(),
                created_at=now_rfc3339(),
            )
            session.add(row)
            try:
                session.flush()
            except IntegrityError as e:
                raise ConflictError(f"sprint code {code} already exists") from e
            logger.debug(f"Created sprint {row.id} ({code})")
            return row.to_model()

    def rename_sprint(self, sprint_id: str, name: str) -> Sprint:
        sprint_id = _required(sprint_id, "sprint id")
        name = _required(name, "sprint name")
        with self._transaction("update sprint name") as session:
            row = session.get(SprintRow, sprint_id)
            if row is None:
                raise NotFoundError("sprint not found")
            row.name = name
            return row.to_model()

    def delete_sprint(self, sprint_id: str, today: date | None = None) -> None:
        """Delete a sprint and its entries. The active sprint cannot be deleted."""
        sprint_id = _required(sprint_id, "sprint id")
        today = today or date.today()
        with self._transaction("delete sprint") as session:
            sprints = [r.to_model() for r in session.scalars(select(SprintRow))]
            if pick_active_sprint(sprints, today) == sprint_id:
                raise ValidationError("cannot delete the active sprint")

            result = session.execute(delete(SprintRow).where(SprintRow.id == sprint_id))
            if result.rowcount == 0:
                raise NotFoundError("sprint not found")
        logger.info(f"Deleted sprint {sprint_id}")

    # ============== Entries ==============

    def list_entries(self, sprint_id: str) -> list[DailyEntry]:
        with self._transaction("list entries") as session:
            rows = session.scalars(
                select(EntryRow)
                .where(EntryRow.sprint_id == sprint_id)
                .order_by(EntryRow.date, EntryRow.category_id, EntryRow.created_at)
            )
            return [r.to_model() for r in rows]

    def add_entry(
        self,
        sprint_id: str,
        entry_date: str,
        category_id: str,
        title: str,
        details: str | None = None,
    ) -> DailyEntry:
        title = _required(title, "title")
        entry_date = parse_iso_date(entry_date, "date").isoformat()
        category_id = _required(category_id, "category_id")
        sprint_id = _required(sprint_id, "sprint_id")

        with self._transaction("add entry") as session:
            if session.get(SprintRow, sprint_id) is None:
                raise NotFoundError("the selected sprint does not exist")
            if session.get(CategoryRow, category_id) is None:
                raise NotFoundError("the selected category does not exist")

            row = EntryRow(
                id=next_id("entry"),
                sprint_id=sprint_id,
                date=entry_date,
                category_id=category_id,
                title=title,
                details=clean_optional(details),
                created_at=now_rfc3339(),
            )
            session.add(row)
            return row.to_model()
