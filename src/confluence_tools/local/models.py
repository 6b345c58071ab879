"""Dataclasses representing Markdown page files on disk."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional


@dataclass(slots=True)
class LocalPageMetadata:
    """Metadata persisted in the frontmatter of a local page file."""

    title: str
    space_id: Optional[str] = None
    space_key: Optional[str] = None
    page_id: Optional[str] = None
    parent_id: Optional[str] = None
    version: Optional[int] = None

    def as_dict(self) -> dict[str, object]:
        return {
            "title": self.title,
            "space_id": self.space_id,
            "space_key": self.space_key,
            "page_id": self.page_id,
            "parent_id": self.parent_id,
            "version": self.version,
        }


@dataclass(slots=True)
class LocalPage:
    """Representation of a page stored on disk."""

    path: Path
    metadata: LocalPageMetadata
    body: str

    @property
    def title(self) -> str:
        return self.metadata.title

    @property
    def is_published(self) -> bool:
        return self.metadata.page_id is not None
