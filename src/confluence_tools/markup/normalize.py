"""Character clean-up applied to Markdown before it is converted to storage markup."""

from __future__ import annotations


# Applied in order. No replacement introduces a character that another rule matches.
SUBSTITUTIONS: tuple[tuple[str, str], ...] = (
    ("\u2013", "-"),  # en dash
    ("\u2014", "-"),  # em dash
    ("\u201c", '"'),
    ("\u201d", '"'),
    ("\u2018", "'"),
    ("\u2019", "'"),
    ("&", "and"),
)


def normalize_text(text: str) -> str:
    """Replace typographic punctuation and ``&`` with storage-safe equivalents."""

    for source, replacement in SUBSTITUTIONS:
        text = text.replace(source, replacement)
    return text
