"""Cell cleaning shared by export and import.

Spreadsheet cells pasted from chat apps or exported by office suites carry
non-breaking and zero-width characters; text written to CSV can be
interpreted as a formula when it starts with ``= + @ -``.

Examples:
    >>> strip_invisibles("  Paneer Tikka  ")
    'Paneer Tikka'
    >>> neutralize("=HYPERLINK(...)")
    "'=HYPERLINK(...)"
"""

from __future__ import annotations

import re
from typing import Any, Optional

import pandas as pd

NBSP = "\u00a0"  # Non-breaking space
NNBSP = "\u202f"  # Narrow non-breaking space
ZW = "".join(chr(c) for c in (0x200B, 0x200C, 0x200D, 0xFEFF))  # Zero-width characters

# Prefixes that could trigger formula injection in spreadsheets
DANGEROUS_PREFIXES = ("=", "+", "@", "-")

_ZW_RE = re.compile("[%s]" % re.escape(ZW))
_SPACE_RE = re.compile(r"\s+")


def is_blank(x: Any) -> bool:
    """True for None, NaN and whitespace-only strings."""
    if x is None:
        return True
    if isinstance(x, float) and pd.isna(x):
        return True
    return isinstance(x, str) and not strip_invisibles(x)


def strip_invisibles(x: Any) -> Optional[str]:
    """Remove invisible and problematic whitespace characters from text.

    Strips carriage returns, non-breaking spaces and zero-width characters,
    turns tabs into spaces and collapses runs of whitespace.

    Args:
        x: Value to clean (string, number, or None).

    Returns:
        Cleaned string or None if input is None/NaN.
    """
    if x is None or (isinstance(x, float) and pd.isna(x)):
        return None
    s = str(x)
    s = s.replace("\r", "").replace("\t", " ").replace(NBSP, " ").replace(NNBSP, " ")
    s = _ZW_RE.sub("", s)
    return _SPACE_RE.sub(" ", s).strip()


def neutralize(text: Any) -> Any:
    """Prefix an apostrophe to text a spreadsheet would read as a formula.

    Non-string values pass through unchanged, so negative amounts stay
    numbers.
    """
    if not isinstance(text, str):
        return text
    return "'" + text if text.startswith(DANGEROUS_PREFIXES) else text


def normalize_header(header: Any) -> str:
    """Case- and whitespace-insensitive form of a column header."""
    return (strip_invisibles(header) or "").lower()
