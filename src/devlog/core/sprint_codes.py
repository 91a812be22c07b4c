"""Sprint code allocation and repair - no I/O dependencies."""

from dataclasses import replace
from typing import Iterable

from .models import Sprint

CODE_PREFIX = "sprint-"


def _parse_positive(text: str) -> int | None:
    if text.isascii() and text.isdigit() and int(text) > 0:
        return int(text)
    return None


def sprint_number(raw: str | None) -> int | None:
    """
    Extract the sprint number from a free-form code or name.

    Accepts "7", "sprint-7", "Sprint 7", "sprint_7" and "SPRINT7".
    Returns None when no positive number can be extracted.
    """
    value = (raw or "").strip().lower()
    if not value:
        return None

    number = _parse_positive(value)
    if number is not None:
        return number

    for prefix in ("sprint-", "sprint ", "sprint"):
        if value.startswith(prefix):
            rest = value[len(prefix):].strip().lstrip("-").lstrip("_").strip()
            return _parse_positive(rest)
    return None


def format_sprint_code(number: int) -> str:
    return f"{CODE_PREFIX}{number}"


def _number_of(sprint: Sprint) -> int | None:
    """Number from the code, falling back to the name."""
    number = sprint_number(sprint.code)
    if number is None:
        number = sprint_number(sprint.name)
    return number


def next_sprint_code(sprints: Iterable[Sprint]) -> str:
    """Code for a new sprint: one past the highest number in use."""
    numbers = [n for n in (_number_of(s) for s in sprints) if n is not None]
    return format_sprint_code(max(numbers, default=0) + 1)


def normalized_codes(sprints: list[Sprint]) -> list[str]:
    """
    The unique, canonical code for each sprint, in the order given.

    Sprints are walked in creation order. The first sprint to carry a number
    keeps it; a sprint whose number is missing or already claimed gets the
    smallest unused number above the running highest. The running highest
    starts at the largest number found anywhere, so a renumbered sprint never
    takes a number a later sprint already carries.

    Codes are matched to sprints by position, so repeated ids each get
    their own code.
    """
    order = sorted(range(len(sprints)), key=lambda i: sprints[i].created_at)
    numbers = [_number_of(s) for s in sprints]
    used: set[int] = set()
    highest = max((n for n in numbers if n is not None), default=0)
    codes = [""] * len(sprints)

    for i in order:
        chosen = numbers[i]
        if chosen is None or chosen in used:
            chosen = highest + 1
            while chosen in used:
                chosen += 1

        used.add(chosen)
        highest = max(highest, chosen)
        codes[i] = format_sprint_code(chosen)

    return codes


def normalize_sprint_codes(sprints: Iterable[Sprint]) -> dict[str, str]:
    """
    Compute the code rewrites that make every sprint code unique and canonical.

    Meant for sprints with distinct ids, such as stored rows.

    Returns:
        Mapping of sprint id to its new code, only for sprints that change.
        Empty when the codes are already normalized.
    """
    sprints = list(sprints)
    return {
        s.id: code
        for s, code in zip(sprints, normalized_codes(sprints))
        if s.code != code
    }


def assign_codes(sprints: list[Sprint]) -> list[Sprint]:
    """Copies of the sprints with normalized codes applied, order preserved."""
    return [
        s if s.code == code else replace(s, code=code)
        for s, code in zip(sprints, normalized_codes(sprints))
    ]
