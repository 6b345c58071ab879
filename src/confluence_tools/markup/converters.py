"""Content conversion helpers between Confluence storage format and local Markdown."""

from __future__ import annotations

from markdownify import ATX, markdownify as to_markdown

from .scanner import convert_markdown


class ContentConverter:
    """Translate between Confluence storage representation and Markdown."""

    def storage_to_markdown(self, storage: str) -> str:
        # Dash bullets and ATX headers keep pages readable by markdown_to_storage.
        return to_markdown(storage, heading_style=ATX, bullets="-", strong_em_symbol="*").strip()

    def markdown_to_storage(self, markdown: str) -> str:
        return convert_markdown(markdown)
