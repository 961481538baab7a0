"""Text cleanup for extracted PDF text.

PDF text layers are noisy: hard line wraps, runs of blank lines, ligatures,
soft hyphens and other non-ASCII glyphs.  Everything downstream (chunking,
embedding, prompt building) works on the normalized form produced here.
"""

from __future__ import annotations

import re

_WHITESPACE_RUN = re.compile(r"\s+")
_NON_PRINTABLE = re.compile(r"[^\x20-\x7E]")
_SPACE_RUN = re.compile(r" {2,}")


def normalize_extracted_text(text: str) -> str:
    """Collapse whitespace and strip non-printable / non-ASCII characters.

    Every whitespace run, including newlines and blank-line runs, becomes a
    single space.  Characters outside printable ASCII are dropped, and any
    double spaces that leaves behind are collapsed again.

    >>> normalize_extracted_text("Hello\\n\\n\\n  world\\u00a0!\\x0c")
    'Hello world !'
    """
    if not text:
        return ""
    collapsed = _WHITESPACE_RUN.sub(" ", text)
    printable = _NON_PRINTABLE.sub("", collapsed)
    return _SPACE_RUN.sub(" ", printable).strip()
