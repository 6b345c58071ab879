"""Line-oriented conversion of the Markdown dialect into Confluence storage markup."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Callable

from .inline import format_inline
from .normalize import normalize_text
from .tables import is_separator_row, parse_table


logger = logging.getLogger(__name__)

_HEADER_RE = re.compile(r"^(#{1,3})\s")
_HEADER_PREFIX_RE = re.compile(r"^#{1,3}\s*")
LIST_ITEM_PREFIX = "- "


@dataclass(slots=True)
class _Scan:
    """Mutable state of a single conversion."""

    lines: list[str]
    index: int = 0
    in_list: bool = False
    fragments: list[str] = field(default_factory=list)

    def emit(self, fragment: str) -> None:
        self.fragments.append(fragment)

    def close_list(self) -> None:
        if self.in_list:
            self.fragments.append("</ul>")
            self.in_list = False


# ----------------------------------------------------------------------
# Predicates
# ----------------------------------------------------------------------
def is_blank(line: str) -> bool:
    return not line


def is_header(line: str) -> bool:
    return _HEADER_RE.match(line) is not None


def is_list_item(line: str) -> bool:
    return line.startswith(LIST_ITEM_PREFIX)


def is_table_candidate(line: str) -> bool:
    return "|" in line and not is_separator_row(line)


def is_paragraph(line: str) -> bool:
    return True


# ----------------------------------------------------------------------
# Handlers: each returns the index of the next line to scan
# ----------------------------------------------------------------------
def _handle_blank(scan: _Scan, line: str) -> int:
    scan.close_list()
    scan.emit("")
    return scan.index + 1


def _handle_header(scan: _Scan, line: str) -> int:
    scan.close_list()
    level = len(_HEADER_RE.match(line).group(1))
    text = format_inline(_HEADER_PREFIX_RE.sub("", line, count=1))
    scan.emit(f"<h{level}>{text}</h{level}>")
    return scan.index + 1


def _handle_list_item(scan: _Scan, line: str) -> int:
    if not scan.in_list:
        scan.emit("<ul>")
        scan.in_list = True
    text = format_inline(line[len(LIST_ITEM_PREFIX):])
    scan.emit(f"<li>{text}</li>")
    return scan.index + 1


def _handle_table_candidate(scan: _Scan, line: str) -> int:
    scan.close_list()
    next_index = scan.index + 1
    if next_index < len(scan.lines) and is_separator_row(scan.lines[next_index]):
        markup, last_index = parse_table(scan.lines, scan.index)
        scan.emit(markup)
        return last_index + 1

    # Not followed by a separator row: plain text, without inline formatting.
    text = line.replace("|", " | ").strip()
    scan.emit(f"<p>{text}</p>")
    return scan.index + 1


def _handle_paragraph(scan: _Scan, line: str) -> int:
    scan.close_list()
    scan.emit(f"<p>{format_inline(line)}</p>")
    return scan.index + 1


LineRule = tuple[Callable[[str], bool], Callable[[_Scan, str], int]]

# First match wins.
LINE_RULES: tuple[LineRule, ...] = (
    (is_blank, _handle_blank),
    (is_header, _handle_header),
    (is_list_item, _handle_list_item),
    (is_table_candidate, _handle_table_candidate),
    (is_paragraph, _handle_paragraph),
)


def classify_line(line: str) -> str:
    """Return the name of the rule that handles ``line`` (after trimming)."""

    line = line.strip()
    for predicate, _handler in LINE_RULES:
        if predicate(line):
            return predicate.__name__.removeprefix("is_")
    return "paragraph"


def convert_markdown(markdown: str) -> str:
    """Convert Markdown text to Confluence storage markup.

    Supported blocks are ``#``-``###`` headers, ``- `` unordered lists, pipe
    tables and paragraphs; ``**bold**`` and ``*italic*`` are formatted
    inline. Anything else is rendered as a plain paragraph.
    """

    text = normalize_text(markdown)
    scan = _Scan(lines=[line.strip() for line in text.split("\n")])

    while scan.index < len(scan.lines):
        line = scan.lines[scan.index]
        for predicate, handler in LINE_RULES:
            if predicate(line):
                scan.index = handler(scan, line)
                break

    scan.close_list()

    # Fragments are joined without separators, so paragraph boundaries are already adjacent.
    result = "".join(scan.fragments)
    result = result.removeprefix("</p>").removesuffix("<p>")

    logger.debug("Converted %d lines into %d markup fragments", len(scan.lines), len(scan.fragments))
    return result
