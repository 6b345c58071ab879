from pathlib import Path

import pytest

from confluence_tools.local.document import PAGE_FILENAME, load_page, new_page, save_page


def test_new_page_round_trips_through_frontmatter(tmp_path: Path):
    new_page(tmp_path / PAGE_FILENAME, title="Guide", space_key="DOCS")

    page = load_page(tmp_path)

    assert page.path == tmp_path / PAGE_FILENAME
    assert page.title == "Guide"
    assert page.metadata.space_key == "DOCS"
    assert page.metadata.page_id is None
    assert not page.is_published
    assert page.body.startswith("# Guide")


def test_save_page_persists_metadata_changes(tmp_path: Path):
    page = new_page(tmp_path / "guide.md", title="Guide")
    page.metadata.page_id = "123"
    page.metadata.version = 7
    page.body = "Updated body"
    save_page(page)

    reloaded = load_page(tmp_path / "guide.md")
    assert reloaded.metadata.page_id == "123"
    assert reloaded.metadata.version == 7
    assert reloaded.is_published
    assert reloaded.body == "Updated body"


def test_numeric_identifiers_are_read_as_strings(tmp_path: Path):
    (tmp_path / PAGE_FILENAME).write_text(
        "---\ntitle: Guide\npage_id: 12345\nspace_id: 9001\nversion: not-a-number\n---\n\nBody\n",
        encoding="utf-8",
    )
    page = load_page(tmp_path)
    assert page.metadata.page_id == "12345"
    assert page.metadata.space_id == "9001"
    assert page.metadata.version is None


def test_title_defaults_to_file_stem(tmp_path: Path):
    (tmp_path / "notes.md").write_text("Just text\n", encoding="utf-8")
    assert load_page(tmp_path / "notes.md").title == "notes"


def test_missing_page_file(tmp_path: Path):
    with pytest.raises(FileNotFoundError):
        load_page(tmp_path)
