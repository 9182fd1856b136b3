"""Sanitization helpers for spreadsheet-safe output."""

from typing import Optional

# Leading characters that make spreadsheet applications evaluate a cell
_FORMULA_CHARS = ("=", "+", "-", "@", "\t", "\r", "\n", "|")


def sanitize_cell(value: Optional[object]) -> str:
    """Render a value as a spreadsheet-safe string.

    Statement descriptions come from third-party files, so a description
    such as ``=HYPERLINK(...)`` is prefixed with a single quote before it is
    written to CSV or Excel output. Numbers are never passed through here.

    Args:
        value: Value to render; None becomes an empty string.

    Returns:
        The sanitized string.
    """
    if value is None:
        return ""

    text = str(value)
    if text.startswith(_FORMULA_CHARS):
        return "'" + text
    return text
