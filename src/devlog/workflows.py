"""Shared workflow layer between the CLI and any other front-end.

Each function takes an explicitly opened store; nothing here holds a
long-lived connection.
"""

import logging
from datetime import date, datetime, timezone
from pathlib import Path

from .adapters.sql_store import SqlStore
from .config import Config
from .core.active import active_sprint
from .core.models import ReportOutput, Sprint, parse_iso_date
from .core.report import render_report, report_filename
from .core.views import build_all_details_text, build_day_text, sprint_summary_lines
from .errors import StorageError
from .ports.store import EntryStore

logger = logging.getLogger(__name__)


def open_store(config: Config) -> SqlStore:
    """Open the store described by config, running the legacy import if due."""
    return SqlStore.open(config.db_path, legacy_path=config.legacy_path)


def current_sprint(store: EntryStore, today: date | None = None) -> Sprint | None:
    """The active sprint for today (recomputed on every call)."""
    return active_sprint(store.list_sprints(), today or date.today())


def _check_bound(value: str | None, field: str) -> str | None:
    if value is None or not value.strip():
        return None
    return parse_iso_date(value, field).isoformat()


def generate_report(
    store: EntryStore,
    reports_dir: Path,
    sprint_id: str,
    from_date: str | None = None,
    to_date: str | None = None,
    category_ids: list[str] | None = None,
    now: datetime | None = None,
) -> ReportOutput:
    """Render a sprint report, write it under reports_dir and return it."""
    from_date = _check_bound(from_date, "from_date")
    to_date = _check_bound(to_date, "to_date")
    sprint = store.get_sprint(sprint_id)
    now = now or datetime.now(timezone.utc)

    markdown, total = render_report(
        sprint,
        store.list_entries(sprint.id),
        store.category_names(),
        exported_at=now.isoformat(),
        from_date=from_date,
        to_date=to_date,
        category_ids=category_ids,
    )

    path = Path(reports_dir) / report_filename(sprint.name, now)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(markdown, encoding="utf-8")
    except OSError as e:
        raise StorageError(f"unable to write report file {path}: {e}") from e

    logger.info(f"Wrote report for {sprint.code} ({total} items) to {path}")
    return ReportOutput(markdown=markdown, file_path=str(path), total_items=total)


def sprint_summary(store: EntryStore, sprint_id: str) -> list[str]:
    sprint = store.get_sprint(sprint_id)
    return sprint_summary_lines(sprint, store.list_entries(sprint.id))


def day_text(store: EntryStore, sprint_id: str, day: str) -> str:
    sprint = store.get_sprint(sprint_id)
    day = parse_iso_date(day).isoformat()
    return build_day_text(day, store.list_entries(sprint.id), store.category_names())


def all_details_text(store: EntryStore, sprint_id: str) -> str:
    sprint = store.get_sprint(sprint_id)
    return build_all_details_text(store.list_entries(sprint.id), store.category_names())
