"""Entity model - categories, sprints and daily entries."""

from dataclasses import asdict, dataclass
from datetime import date, datetime

from devlog.errors import ValidationError

DATE_FORMAT_HINT = "YYYY-MM-DD"

SPRINT_DURATIONS = (7, 14)
DEFAULT_SPRINT_DAYS = 14

# (id, name) pairs seeded into an empty store
DEFAULT_CATEGORIES = (
    ("pr-reviews", "PR-Reviews"),
    ("meeting", "Meeting"),
    ("tasks", "Tasks"),
)


@dataclass
class Category:
    """A tag applied to entries. Names are unique ignoring case."""

    id: str
    name: str
    created_at: str

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class Sprint:
    """A dated work window holding daily entries."""

    id: str
    code: str
    name: str
    start_date: str
    end_date: str | None
    created_at: str

    @property
    def window(self) -> str:
        return f"{self.start_date} to {self.end_date or 'open'}"

    def contains(self, day: str) -> bool:
        """Check if an ISO date falls inside this sprint's window."""
        if self.start_date > day:
            return False
        return self.end_date is None or self.end_date >= day

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class DailyEntry:
    """A single logged item on a date, tagged with a category."""

    id: str
    sprint_id: str
    date: str
    category_id: str
    title: str
    details: str | None
    created_at: str

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class ReportOutput:
    """Result of a report generation."""

    markdown: str
    file_path: str
    total_items: int


def default_categories(created_at: str) -> list[Category]:
    return [Category(id=cid, name=name, created_at=created_at) for cid, name in DEFAULT_CATEGORIES]


def parse_iso_date(value: str, field: str = "date") -> date:
    """Parse a strict YYYY-MM-DD date or raise ValidationError."""
    raw = (value or "").strip()
    if not raw:
        raise ValidationError(f"{field} is required")
    try:
        if len(raw) != 10:
            raise ValueError(raw)
        return datetime.strptime(raw, "%Y-%m-%d").date()
    except ValueError:
        raise ValidationError(f"{field} must be in {DATE_FORMAT_HINT} format")


def clean_optional(value: str | None) -> str | None:
    """Trim a free-text value, collapsing blanks to None."""
    if value is None:
        return None
    trimmed = value.strip()
    return trimmed or None
