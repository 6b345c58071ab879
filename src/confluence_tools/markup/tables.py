"""Pipe table parsing for the Markdown dialect."""

from __future__ import annotations

import re
from typing import Sequence

from .inline import format_inline
from .normalize import normalize_text


SEPARATOR_ROW_RE = re.compile(r"^\s*\|?\s*[-:]+\s*(\|\s*[-:]+\s*)*\|?\s*$")


def is_separator_row(line: str) -> bool:
    """Return ``True`` for rows such as ``---|:---:`` that sit below a table header."""

    return SEPARATOR_ROW_RE.match(line) is not None


def split_cells(line: str) -> list[str]:
    """Split a pipe-delimited row into trimmed cells.

    The empty cells produced by a leading or trailing ``|`` are dropped; empty
    cells between two pipes are kept.
    """

    cells = [cell.strip() for cell in line.strip().split("|")]
    start = 1 if cells[0] == "" else 0
    end = len(cells) - 1 if cells[-1] == "" else len(cells)
    return cells[start:end]


def _render_cell(tag: str, text: str) -> str:
    # Cells are normalized again even when the whole document already was.
    return f"<{tag}>{format_inline(normalize_text(text))}</{tag}>"


def parse_table(lines: Sequence[str], start_index: int) -> tuple[str, int]:
    """Convert the table whose header row is ``lines[start_index]``.

    The row after the header is taken as the separator without inspection.
    Data rows continue until the first blank line, the first line without a
    pipe, or the end of input.

    Returns the table markup and the index of the last line consumed.
    """

    headers = split_cells(lines[start_index])
    index = start_index + 2

    rows: list[list[str]] = []
    while index < len(lines):
        line = lines[index].strip()
        if not line or "|" not in line:
            break
        cells = split_cells(line)
        if cells:
            rows.append(cells)
        index += 1

    parts = ["<table><tbody>"]
    if headers:
        parts.append("<tr>" + "".join(_render_cell("th", cell) for cell in headers) + "</tr>")
    for row in rows:
        parts.append("<tr>" + "".join(_render_cell("td", cell) for cell in row) + "</tr>")
    parts.append("</tbody></table>")

    return "".join(parts), index - 1
