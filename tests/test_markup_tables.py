import pytest

from confluence_tools.markup.tables import is_separator_row, parse_table, split_cells


@pytest.mark.parametrize(
    "line",
    ["---|---", "| --- | --- |", ":---|:---:|---:", "-", "  |-|  "],
)
def test_separator_rows(line):
    assert is_separator_row(line)


@pytest.mark.parametrize(
    "line",
    ["A | B", "---|x", "", "| |", "--- text"],
)
def test_non_separator_rows(line):
    assert not is_separator_row(line)


@pytest.mark.parametrize(
    ("line", "expected"),
    [
        ("A | B", ["A", "B"]),
        ("| A | B |", ["A", "B"]),
        ("| A | | C |", ["A", "", "C"]),
        ("A | B |", ["A", "B"]),
        ("|", []),
        ("| |", [""]),
    ],
)
def test_split_cells(line, expected):
    assert split_cells(line) == expected


def test_parse_table_with_header_and_rows():
    lines = ["| A | B |", "|---|---|", "| 1 | 2 |", "| 3 | 4 |"]
    markup, last_index = parse_table(lines, 0)
    assert markup == (
        "<table><tbody>"
        "<tr><th>A</th><th>B</th></tr>"
        "<tr><td>1</td><td>2</td></tr>"
        "<tr><td>3</td><td>4</td></tr>"
        "</tbody></table>"
    )
    assert last_index == 3


def test_parse_table_stops_at_blank_or_pipeless_line():
    lines = ["intro", "A|B", "-|-", "1|2", "", "3|4"]
    markup, last_index = parse_table(lines, 1)
    assert last_index == 3
    assert "<td>3</td>" not in markup

    lines = ["A|B", "-|-", "1|2", "plain text", "3|4"]
    _markup, last_index = parse_table(lines, 0)
    assert last_index == 2


def test_parse_table_without_data_rows():
    markup, last_index = parse_table(["A|B", "-|-"], 0)
    assert markup == "<table><tbody><tr><th>A</th><th>B</th></tr></tbody></table>"
    assert last_index == 1


def test_parse_table_keeps_ragged_rows():
    markup, _ = parse_table(["A|B|C", "-|-|-", "1", "1|2|3|4|"], 0)
    # "1" has no pipe, so only the header is consumed.
    assert markup.count("<tr>") == 1

    markup, _ = parse_table(["A|B|C", "-|-|-", "1|2", "1|2|3|4"], 0)
    assert "<tr><td>1</td><td>2</td></tr>" in markup
    assert "<tr><td>1</td><td>2</td><td>3</td><td>4</td></tr>" in markup


def test_parse_table_with_empty_header_emits_no_header_row():
    markup, last_index = parse_table(["|", "---", "a|b"], 0)
    assert markup == "<table><tbody><tr><td>a</td><td>b</td></tr></tbody></table>"
    assert last_index == 2


def test_rows_without_cells_are_skipped():
    markup, last_index = parse_table(["A|B", "-|-", "|", "1|2"], 0)
    assert markup.count("<tr>") == 2
    assert last_index == 3


def test_cells_are_formatted_inline():
    markup, _ = parse_table(["**Name**|*Note*", "-|-", "**x**|*y*"], 0)
    assert "<th><strong>Name</strong></th><th><em>Note</em></th>" in markup
    assert "<td><strong>x</strong></td><td><em>y</em></td>" in markup


def test_cells_are_normalized_individually():
    # convert_markdown already normalizes the whole document; cells are
    # normalized a second time, which only shows when parse_table is called
    # directly. Candidate for simplification.
    markup, _ = parse_table(["R & D|Range", "-|-", "“x”|1–2"], 0)
    assert "<th>R and D</th>" in markup
    assert "<td>\"x\"</td><td>1-2</td>" in markup
