"""DevLog CLI - daily work log, sprints and reports."""

import json
import logging
import sys
from contextlib import contextmanager
from datetime import date
from pathlib import Path
from typing import Iterator

import click

from .adapters.sql_store import SqlStore
from .config import Config, load_config
from .core.models import SPRINT_DURATIONS
from .core.views import sprint_label
from .errors import DevlogError
from .workflows import (
    all_details_text,
    current_sprint,
    day_text,
    generate_report,
    open_store,
    sprint_summary,
)


@contextmanager
def _store(config: Config) -> Iterator[SqlStore]:
    """Open the store for one command; typed failures exit with status 1."""
    try:
        with open_store(config) as store:
            yield store
    except DevlogError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


def _resolve_sprint_id(store: SqlStore, sprint_id: str | None) -> str:
    if sprint_id:
        return sprint_id
    sprint = current_sprint(store)
    if sprint is None:
        raise click.ClickException("No sprints found yet. Create one with 'devlog sprints add'.")
    return sprint.id


@click.group()
@click.version_option()
@click.option(
    "--data-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Data directory (defaults to DEVLOG_DATA_DIR or the platform data dir)",
)
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.pass_context
def main(ctx, data_dir: Path | None, debug: bool):
    """DevLog - daily work log CLI."""
    config = load_config(data_dir)
    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        level=logging.DEBUG if debug else config.log_level,
    )
    ctx.obj = config


@main.command()
@click.pass_obj
def path(config: Config):
    """Print the database path."""
    click.echo(str(config.db_path))


# ============== Categories ==============


@main.group()
def categories():
    """Manage entry categories."""
    pass


@categories.command("list")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_obj
def categories_list(config: Config, as_json: bool):
    """List categories."""
    with _store(config) as store:
        items = store.list_categories()

    if as_json:
        click.echo(json.dumps([c.to_dict() for c in items], indent=2))
        return

    for category in items:
        click.echo(f"{category.id:32} {category.name}")


@categories.command("add")
@click.argument("name")
@click.pass_obj
def categories_add(config: Config, name: str):
    """Create a category."""
    with _store(config) as store:
        category = store.create_category(name)
    click.echo(f"✓ Created category {category.name} ({category.id})")


@categories.command("rename")
@click.argument("category_id")
@click.argument("name")
@click.pass_obj
def categories_rename(config: Config, category_id: str, name: str):
    """Rename a category."""
    with _store(config) as store:
        category = store.rename_category(category_id, name)
    click.echo(f"✓ Renamed {category.id} to {category.name}")


@categories.command("delete")
@click.argument("category_id")
@click.option("--replacement", default=None, help="Category that receives the deleted category's entries")
@click.pass_obj
def categories_delete(config: Config, category_id: str, replacement: str | None):
    """Delete a category, reassigning its entries."""
    with _store(config) as store:
        moved = store.delete_category(category_id, replacement)
    click.echo(f"✓ Deleted {category_id} ({moved} entries reassigned)")


# ============== Sprints ==============


@main.group()
def sprints():
    """Manage sprints."""
    pass


@sprints.command("list")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_obj
def sprints_list(config: Config, as_json: bool):
    """List sprints, newest first. The active sprint is starred."""
    with _store(config) as store:
        items = store.list_sprints()
        active = current_sprint(store)

    if as_json:
        click.echo(json.dumps([s.to_dict() for s in items], indent=2))
        return

    if not items:
        click.echo("No sprints found yet.")
        return

    for sprint in sorted(items, key=lambda s: (s.start_date, s.created_at), reverse=True):
        marker = "*" if active and sprint.id == active.id else " "
        click.echo(f"{marker} {sprint_label(sprint):30} {sprint.window:28} {sprint.id}")


@sprints.command("add")
@click.argument("start_date")
@click.option("--days", type=click.Choice([str(d) for d in SPRINT_DURATIONS]), default=None,
              help="Sprint length in days")
@click.option("--name", default=None, help="Display name (defaults to the sprint code)")
@click.pass_obj
def sprints_add(config: Config, start_date: str, days: str | None, name: str | None):
    """Create a sprint starting on START_DATE (YYYY-MM-DD)."""
    duration = int(days) if days else config.default_sprint_days
    with _store(config) as store:
        sprint = store.create_sprint(start_date, duration, name)
    click.echo(f"✓ Created {sprint_label(sprint)} ({sprint.window})")


@sprints.command("rename")
@click.argument("sprint_id")
@click.argument("name")
@click.pass_obj
def sprints_rename(config: Config, sprint_id: str, name: str):
    """Rename a sprint. The sprint code does not change."""
    with _store(config) as store:
        sprint = store.rename_sprint(sprint_id, name)
    click.echo(f"✓ Renamed to {sprint_label(sprint)}")


@sprints.command("delete")
@click.argument("sprint_id")
@click.confirmation_option(prompt="Delete this sprint and all of its entries?")
@click.pass_obj
def sprints_delete(config: Config, sprint_id: str):
    """Delete a sprint and its entries."""
    with _store(config) as store:
        store.delete_sprint(sprint_id)
    click.echo(f"✓ Deleted sprint {sprint_id}")


@sprints.command("active")
@click.pass_obj
def sprints_active(config: Config):
    """Show the active sprint."""
    with _store(config) as store:
        sprint = current_sprint(store)

    if sprint is None:
        click.echo("No sprints found yet.")
        return
    click.echo(f"{sprint_label(sprint)} ({sprint.window}) {sprint.id}")


# ============== Entries ==============


@main.group()
def entries():
    """Log and list daily entries."""
    pass


@entries.command("list")
@click.option("--sprint", "sprint_id", default=None, help="Sprint id (defaults to the active sprint)")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_obj
def entries_list(config: Config, sprint_id: str | None, as_json: bool):
    """List a sprint's entries."""
    with _store(config) as store:
        items = store.list_entries(_resolve_sprint_id(store, sprint_id))
        names = store.category_names()

    if as_json:
        click.echo(json.dumps([e.to_dict() for e in items], indent=2))
        return

    if not items:
        click.echo("No entries in this sprint yet.")
        return

    for entry in items:
        details = f" - {entry.details}" if entry.details else ""
        click.echo(f"{entry.date}  [{names.get(entry.category_id, entry.category_id)}] {entry.title}{details}")


@entries.command("add")
@click.argument("title")
@click.option("--category", "-c", "category_id", required=True, help="Category id")
@click.option("--sprint", "sprint_id", default=None, help="Sprint id (defaults to the active sprint)")
@click.option("--date", "-d", "entry_date", default=None,
              help="Entry date (YYYY-MM-DD), defaults to today")
@click.option("--details", default=None, help="Optional details")
@click.pass_obj
def entries_add(
    config: Config,
    title: str,
    category_id: str,
    sprint_id: str | None,
    entry_date: str | None,
    details: str | None,
):
    """Log an entry."""
    with _store(config) as store:
        entry = store.add_entry(
            _resolve_sprint_id(store, sprint_id),
            entry_date or date.today().isoformat(),
            category_id,
            title,
            details,
        )
    click.echo(f"✓ Logged {entry.title} on {entry.date}")


# ============== Reports and views ==============


@main.command()
@click.argument("sprint_id", required=False)
@click.option("--from", "from_date", default=None, help="First date to include (YYYY-MM-DD)")
@click.option("--to", "to_date", default=None, help="Last date to include (YYYY-MM-DD)")
@click.option("--category", "-c", "category_ids", multiple=True, help="Category id to include (repeatable)")
@click.option("--print", "print_markdown", is_flag=True, help="Print the markdown as well")
@click.pass_obj
def report(
    config: Config,
    sprint_id: str | None,
    from_date: str | None,
    to_date: str | None,
    category_ids: tuple[str, ...],
    print_markdown: bool,
):
    """Generate a markdown report for a sprint."""
    with _store(config) as store:
        output = generate_report(
            store,
            config.reports_dir,
            _resolve_sprint_id(store, sprint_id),
            from_date=from_date,
            to_date=to_date,
            category_ids=list(category_ids),
        )

    if print_markdown:
        click.echo(output.markdown)
    click.echo(f"Included items: {output.total_items}")
    click.echo(f"File: {output.file_path}")


@main.command()
@click.argument("sprint_id", required=False)
@click.pass_obj
def summary(config: Config, sprint_id: str | None):
    """Per-date item counts for a sprint."""
    with _store(config) as store:
        lines = sprint_summary(store, _resolve_sprint_id(store, sprint_id))
    click.echo("\n".join(lines))


@main.command()
@click.argument("day")
@click.option("--sprint", "sprint_id", default=None, help="Sprint id (defaults to the active sprint)")
@click.pass_obj
def day(config: Config, day: str, sprint_id: str | None):
    """Show one day's entries grouped by category."""
    with _store(config) as store:
        text = day_text(store, _resolve_sprint_id(store, sprint_id), day)
    click.echo(text.rstrip())


@main.command()
@click.argument("sprint_id", required=False)
@click.pass_obj
def details(config: Config, sprint_id: str | None):
    """Show every entry of a sprint grouped by date and category."""
    with _store(config) as store:
        text = all_details_text(store, _resolve_sprint_id(store, sprint_id))
    click.echo(text.rstrip())


if __name__ == "__main__":
    main()
