"""Read and write Markdown page files with YAML frontmatter."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import frontmatter

from .models import LocalPage, LocalPageMetadata


PAGE_FILENAME = "page.md"


def load_page(path: Path) -> LocalPage:
    """Load a page file. ``path`` may also be a directory holding ``page.md``."""

    page_file = path / PAGE_FILENAME if path.is_dir() else path
    if not page_file.exists():
        raise FileNotFoundError(f"Page file {page_file} does not exist")

    post = frontmatter.load(page_file)
    metadata = LocalPageMetadata(
        title=post.metadata.get("title") or page_file.stem,
        space_id=_as_optional_str(post.metadata.get("space_id")),
        space_key=_as_optional_str(post.metadata.get("space_key")),
        page_id=_as_optional_str(post.metadata.get("page_id")),
        parent_id=_as_optional_str(post.metadata.get("parent_id")),
        version=_as_optional_int(post.metadata.get("version")),
    )
    return LocalPage(path=page_file, metadata=metadata, body=post.content)


def save_page(page: LocalPage) -> None:
    """Persist modifications made to a local page."""

    post = frontmatter.Post(page.body)
    post.metadata.update(page.metadata.as_dict())
    page.path.write_text(frontmatter.dumps(post) + "\n", encoding="utf-8")


def new_page(path: Path, *, title: str, space_key: Optional[str] = None) -> LocalPage:
    """Write a starter page with a level-one header matching ``title``."""

    page = LocalPage(
        path=path,
        metadata=LocalPageMetadata(title=title, space_key=space_key),
        body="# " + title + "\n\nStart editing your content here.",
    )
    save_page(page)
    return page


def _as_optional_str(value: object) -> Optional[str]:
    if value is None:
        return None
    return str(value)


def _as_optional_int(value: object) -> Optional[int]:
    if value is None:
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None
