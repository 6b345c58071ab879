"""Page workflows that feed converted Markdown into Confluence."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from confluence_tools.confluence.client import ConfluenceAuth, ConfluenceClient
from confluence_tools.confluence.errors import (
    ConfluenceClientError,
    InvalidRequestError,
    PageOperationError,
    VersionConflictError,
)
from confluence_tools.local.document import save_page
from confluence_tools.local.models import LocalPage
from confluence_tools.markup.converters import ContentConverter


logger = logging.getLogger(__name__)


@dataclass(slots=True)
class PageResult:
    """Page content as returned by :meth:`PageService.read_page`."""

    id: str
    title: str
    content: str
    space_id: str
    version: int
    url: str
    last_modified: Optional[str] = None


@dataclass(slots=True)
class CreateResult:
    id: str
    title: str
    url: str
    space_id: str
    version: int


@dataclass(slots=True)
class UpdateResult:
    success: bool
    message: str
    version: int


@dataclass(slots=True)
class PublishResult:
    page: LocalPage
    created: bool
    version: int


class PageService:
    """Read, create and update Confluence pages from Markdown content."""

    def __init__(self, client: ConfluenceClient, converter: Optional[ContentConverter] = None) -> None:
        self.client = client
        self.converter = converter or ContentConverter()

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------
    def read_page(
        self,
        *,
        page_id: Optional[str] = None,
        space_id: Optional[str] = None,
        space_key: Optional[str] = None,
        title: Optional[str] = None,
    ) -> PageResult:
        """Fetch a page by ID, or by title within a space given by ID or key."""

        if not page_id and not ((space_id or space_key) and title):
            raise InvalidRequestError(
                "Either page_id, or both space_id and title, or both space_key and title are required "
                "to read a Confluence page"
            )

        if page_id:
            identifier = f'ID "{page_id}"'
        else:
            identifier = f'title "{title}" in space "{space_id or space_key}"'

        try:
            if page_id:
                page = self.client.get_page(page_id)
            else:
                resolved_space = space_id or self._resolve_space(space_key)
                page = self.client.get_page_by_title(space_id=resolved_space, title=title)
        except PageOperationError:
            raise
        except ConfluenceClientError as exc:
            raise PageOperationError.wrap(f"Failed to read Confluence page with {identifier}", exc) from exc

        return PageResult(
            id=page.id,
            title=page.title,
            content=page.body.storage,
            space_id=page.space_id,
            version=page.version.number,
            url=self.client.page_url(page),
            last_modified=page.version.created_at,
        )

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------
    def update_page(
        self,
        *,
        page_id: str,
        content: str,
        title: Optional[str] = None,
        expected_version: Optional[int] = None,
    ) -> UpdateResult:
        """Replace a page body with converted Markdown.

        When ``expected_version`` is given the update is refused if the stored
        page has a different version.
        """

        if not page_id:
            raise InvalidRequestError("Page ID is required and must be a string")
        if not content:
            raise InvalidRequestError("Content is required and must be a string")

        try:
            existing = self.client.get_page(page_id)
            if expected_version is not None and existing.version.number != expected_version:
                raise VersionConflictError(
                    f"Page is at version {existing.version.number}, expected {expected_version}",
                    details={"current": existing.version.number, "expected": expected_version},
                )
            updated = self.client.update_page(
                page_id=page_id,
                title=title or existing.title,
                space_id=existing.space_id,
                status=existing.status or "current",
                storage=self.converter.markdown_to_storage(content),
                current_version=existing.version.number,
            )
        except ConfluenceClientError as exc:
            raise PageOperationError.wrap(f'Failed to update Confluence page "{page_id}"', exc) from exc

        logger.info("Updated page %s to version %d", updated.id, updated.version.number)
        return UpdateResult(
            success=True,
            message=f'Page "{updated.title}" updated successfully',
            version=updated.version.number,
        )

    def create_page(
        self,
        *,
        title: str,
        content: str,
        space_id: Optional[str] = None,
        space_key: Optional[str] = None,
        parent_page_id: Optional[str] = None,
    ) -> CreateResult:
        """Create a page from Markdown content in the space given by ID or key."""

        if not space_id and not space_key:
            raise InvalidRequestError("Either space_id or space_key is required")
        if not title:
            raise InvalidRequestError("Title is required and must be a string")
        if not content:
            raise InvalidRequestError("Content is required and must be a string")

        space_label = space_id or space_key
        try:
            resolved_space = space_id or self._resolve_space(space_key)
            page = self.client.create_page(
                space_id=resolved_space,
                title=title,
                storage=self.converter.markdown_to_storage(content),
                parent_id=parent_page_id,
            )
        except PageOperationError:
            raise
        except ConfluenceClientError as exc:
            raise PageOperationError.wrap(
                f'Failed to create Confluence page "{title}" in space "{space_label}"', exc
            ) from exc

        logger.info("Created page %s (%s)", page.id, page.title)
        return CreateResult(
            id=page.id,
            title=page.title,
            url=self.client.page_url(page),
            space_id=page.space_id,
            version=page.version.number,
        )

    def publish(self, page: LocalPage) -> PublishResult:
        """Create or update the remote copy of a local page and record the result on disk."""

        metadata = page.metadata
        if metadata.page_id:
            result = self.update_page(
                page_id=metadata.page_id,
                content=page.body,
                title=metadata.title,
                expected_version=metadata.version,
            )
            created = False
            version = result.version
        else:
            result = self.create_page(
                title=metadata.title,
                content=page.body,
                space_id=metadata.space_id,
                space_key=metadata.space_key,
                parent_page_id=metadata.parent_id,
            )
            created = True
            version = result.version
            metadata.page_id = result.id
            metadata.space_id = result.space_id

        metadata.version = version
        save_page(page)
        return PublishResult(page=page, created=created, version=version)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _resolve_space(self, space_key: Optional[str]) -> str:
        try:
            return self.client.get_space_id_by_key(space_key or "")
        except ConfluenceClientError as exc:
            raise PageOperationError.wrap(
                f'Failed to resolve space key "{space_key}" to space ID. '
                "You may need to provide the space ID directly",
                exc,
            ) from exc


def create_client(
    *,
    base_url: str,
    pat: Optional[str] = None,
    email: Optional[str] = None,
    api_token: Optional[str] = None,
) -> ConfluenceClient:
    auth = ConfluenceAuth(pat=pat, email=email, api_token=api_token)
    return ConfluenceClient(base_url=base_url, auth=auth)
