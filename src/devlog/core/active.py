"""Active sprint selection - pure, recomputed on every call."""

from datetime import date

from .models import Sprint


def active_sprint(sprints: list[Sprint], today: date | str) -> Sprint | None:
    """
    The sprint considered current for today.

    Prefers the most recently created sprint whose window contains today
    (an open-ended sprint has no upper bound). Falls back to the most
    recently created sprint overall.
    """
    if not sprints:
        return None

    day = today.isoformat() if isinstance(today, date) else today
    # Stable sort: for equal created_at, later list position wins
    newest_first = sorted(sprints, key=lambda s: s.created_at)[::-1]

    for sprint in newest_first:
        if sprint.contains(day):
            return sprint
    return newest_first[0]


def pick_active_sprint(sprints: list[Sprint], today: date | str) -> str | None:
    """Id of the active sprint, or None when there are no sprints."""
    sprint = active_sprint(sprints, today)
    return sprint.id if sprint else None
