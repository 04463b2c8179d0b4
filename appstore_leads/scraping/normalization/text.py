"""
Text cleanup for fragments extracted from App Store markup.
"""

from __future__ import annotations

import re

from bs4 import Tag

INVISIBLE_CHARS = re.compile(r"[\u200B-\u200F\u202A-\u202E\uFEFF\u2028-\u202F]")
# Printable ASCII, whitespace and common currency symbols survive.
UNSUPPORTED_CHARS = re.compile(r"[^\x20-\x7E\s\u00A2-\u00A5\u20A0-\u20CF\u0080]")
WHITESPACE_RUNS = re.compile(r"\s+")


def clean_text(value: Tag | str | None) -> str | None:
    """
    Normalize an element's text (or a raw string) for output.

    Returns None when there is nothing to normalize. Applying it to its own
    output is a no-op.
    """

    if value is None:
        return None
    text = value.get_text() if isinstance(value, Tag) else value
    text = INVISIBLE_CHARS.sub("", text)
    text = UNSUPPORTED_CHARS.sub("", text)
    return WHITESPACE_RUNS.sub(" ", text).strip()
