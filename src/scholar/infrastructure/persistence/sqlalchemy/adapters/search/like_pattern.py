"""Substring patterns for ``LIKE ... ESCAPE '!'``."""

LIKE_ESCAPE = "!"


def contains_pattern(term: str) -> str:
    """Lower-cased ``%term%`` with LIKE wildcards in ``term`` escaped."""
    escaped = (
        term.lower()
        .replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", f"{LIKE_ESCAPE}%")
        .replace("_", f"{LIKE_ESCAPE}_")
    )
    return f"%{escaped}%"
