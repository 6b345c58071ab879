"""Inline emphasis formatting for the Markdown dialect."""

from __future__ import annotations

import re


_BOLD_RE = re.compile(r"\*\*([^*]+)\*\*")
_ITALIC_RE = re.compile(r"\*([^*]+)\*")


def format_inline(text: str) -> str:
    """Convert ``**bold**`` and ``*italic*`` spans to ``strong``/``em`` tags.

    Bold spans are resolved first so that the single-asterisk rule never
    matches across the delimiters of a double-asterisk span.
    """

    text = _BOLD_RE.sub(r"<strong>\1</strong>", text)
    return _ITALIC_RE.sub(r"<em>\1</em>", text)
