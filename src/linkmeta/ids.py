"""Sortable unique identifiers for link records."""

from ulid import ULID


def new_id() -> str:
    """Return a new ULID string: 26 chars, sorts by creation time."""
    return str(ULID())
