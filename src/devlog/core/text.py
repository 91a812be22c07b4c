"""Pure string helpers shared by the store, importer and report engine."""

import time
from datetime import datetime, timezone


def now_rfc3339() -> str:
    """Current UTC time as an RFC 3339 string."""
    return datetime.now(timezone.utc).isoformat()


_last_ns = 0


def next_id(prefix: str) -> str:
    """Row id built from a prefix and a strictly increasing nanosecond timestamp."""
    global _last_ns
    _last_ns = max(time.time_ns(), _last_ns + 1)
    return f"{prefix}-{_last_ns}"


def slugify(raw: str) -> str:
    """
    Lowercase ASCII slug.

    Alphanumerics are kept, whitespace/hyphen/underscore runs collapse to a
    single hyphen, everything else is dropped. Empty results become "value".
    """
    out = []
    for ch in raw:
        if ch.isascii() and ch.isalnum():
            out.append(ch.lower())
        elif (ch.isspace() or ch in "-_") and (not out or out[-1] != "-"):
            out.append("-")

    slug = "".join(out).strip("-")
    return slug or "value"


def humanize_category_id(raw: str) -> str:
    """Turn an id like "code_review" into a display name like "Code Review"."""
    clean = raw.strip().replace("-", " ").replace("_", " ")
    words = clean.split()
    if not words:
        return "Category"
    return " ".join(word[0].upper() + word[1:].lower() for word in words)
