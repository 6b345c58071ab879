"""HTTP client wrapper for interacting with the Confluence REST API."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

import httpx

from .errors import (
    ConfluenceClientError,
    InvalidRequestError,
    MissingCredentialsError,
    NetworkError,
    NotFoundError,
    SpaceLookupError,
    error_from_response,
)
from .models import Page, PageBody, PageVersion


logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0


@dataclass(slots=True)
class ConfluenceAuth:
    """Authentication payload used by the Confluence client.

    A personal access token takes precedence over email + API token.
    """

    pat: Optional[str] = None
    email: Optional[str] = None
    api_token: Optional[str] = None

    def apply(self) -> tuple[dict[str, str], Optional[httpx.BasicAuth]]:
        """Return the extra headers and the httpx auth object for this payload."""

        if self.pat:
            return {"Authorization": f"Bearer {self.pat}"}, None
        if self.email and self.api_token:
            return {}, httpx.BasicAuth(self.email, self.api_token)
        raise MissingCredentialsError(
            "Confluence authentication is required. Please set either CONFLUENCE_PAT (Personal Access Token) "
            "or both CONFLUENCE_EMAIL and CONFLUENCE_API_TOKEN (API token)."
        )


class ConfluenceClient:
    """Thin wrapper above the Confluence REST API (v2)."""

    def __init__(
        self,
        *,
        base_url: str,
        auth: ConfluenceAuth,
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        headers, basic_auth = auth.apply()
        headers.update({"Content-Type": "application/json", "Accept": "application/json"})
        self._client = httpx.Client(
            base_url=f"{self.base_url}/wiki/api/v2/",
            headers=headers,
            auth=basic_auth,
            timeout=timeout,
            transport=transport,
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "ConfluenceClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:  # noqa: D401 - standard context manager signature
        self.close()

    # ------------------------------------------------------------------
    # Low-level helpers
    # ------------------------------------------------------------------
    def _request(self, method: str, url: str, **kwargs) -> dict:
        logger.debug("%s %s", method, url)
        try:
            response = self._client.request(method, url, **kwargs)
        except httpx.TransportError as exc:
            raise NetworkError(
                "Network error: Unable to reach Confluence API. Please check your connection and that the "
                "Confluence instance is accessible.",
                details=str(exc),
            ) from exc
        except httpx.RequestError as exc:
            raise ConfluenceClientError(f"Request error: {exc}", details=str(exc)) from exc

        if response.is_error:
            error = error_from_response(response)
            logger.debug("%s %s failed with %s (%s)", method, url, response.status_code, error.code)
            raise error
        return response.json()

    def _legacy_url(self, path: str) -> str:
        return f"{self.base_url}/wiki/rest/api/{path}"

    # ------------------------------------------------------------------
    # Parsers
    # ------------------------------------------------------------------
    @staticmethod
    def _to_page(data: dict) -> Page:
        body = data.get("body") or {}
        # v2 nests the value under the requested body format; some responses inline it.
        storage = body.get("storage") or {}
        value = body.get("value") or storage.get("value") or ""
        representation = body.get("representation") or storage.get("representation") or "storage"
        version = data.get("version") or {}
        parent_id = data.get("parentId")
        return Page(
            id=str(data["id"]),
            title=data["title"],
            space_id=str(data.get("spaceId", "")),
            status=data.get("status", "current"),
            parent_id=str(parent_id) if parent_id else None,
            body=PageBody(storage=value, representation=representation),
            version=PageVersion(
                number=version.get("number", 0),
                message=version.get("message"),
                created_at=version.get("createdAt"),
            ),
            webui=data.get("_links", {}).get("webui", ""),
        )

    def page_url(self, page: Page) -> str:
        """Return the absolute web UI address of ``page``."""

        if page.webui.startswith("http"):
            return page.webui
        return f"{self.base_url}{page.webui}"

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def get_page(self, page_id: str) -> Page:
        if not page_id:
            raise InvalidRequestError(
                "Page ID is required and must be a valid string",
                remediation="Provide a valid Confluence page ID",
            )
        data = self._request("GET", f"pages/{page_id}", params={"body-format": "storage"})
        return self._to_page(data)

    def get_page_by_title(self, *, space_id: str, title: str) -> Page:
        if not space_id:
            raise InvalidRequestError(
                "Space ID is required and must be a valid string",
                remediation="Provide a valid Confluence space ID",
            )
        if not title:
            raise InvalidRequestError(
                "Page title is required and must be a valid string",
                remediation="Provide a valid page title to search for",
            )
        params: dict[str, object] = {
            "spaceId": space_id,
            "title": title,
            "limit": 1,
            "body-format": "storage",
        }
        data = self._request("GET", "pages", params=params)
        results = data.get("results") or []
        if not results:
            raise NotFoundError(
                f'Page with title "{title}" not found in space "{space_id}". '
                "Please check the title and space ID are correct.",
                status=404,
                details=f'Search performed in space: {space_id}, title: "{title}"',
            )
        return self._to_page(results[0])

    def create_page(
        self,
        *,
        space_id: str,
        title: str,
        storage: str,
        parent_id: Optional[str] = None,
        status: str = "current",
        representation: str = "storage",
    ) -> Page:
        if not space_id:
            raise InvalidRequestError(
                "Space ID is required",
                remediation="Specify the space ID where the page should be created",
            )
        if not title:
            raise InvalidRequestError(
                "Page title is required",
                remediation="Provide a descriptive title for the page",
            )
        if not storage:
            raise InvalidRequestError(
                "Page content is required in storage format",
                remediation="Provide non-empty page content",
            )
        payload: dict[str, object] = {
            "spaceId": str(space_id),
            "status": status,
            "title": title,
            "body": {"representation": representation, "value": storage},
        }
        if parent_id:
            payload["parentId"] = str(parent_id)
        data = self._request("POST", "pages", json=payload)
        return self._to_page(data)

    def update_page(
        self,
        *,
        page_id: str,
        title: str,
        space_id: str,
        storage: str,
        current_version: int,
        status: str = "current",
        parent_id: Optional[str] = None,
        representation: str = "storage",
    ) -> Page:
        """Replace the body of a page.

        ``current_version`` is the version the change is based on; the server
        rejects the update with a conflict when the page moved past it.
        """

        if not page_id:
            raise InvalidRequestError(
                "Page ID is required and must be a valid string",
                remediation="Provide a valid Confluence page ID",
            )
        if current_version < 1:
            raise InvalidRequestError(
                "Version number is required for page updates to prevent conflicts",
                remediation="Pass the version number of the page the update is based on",
            )
        payload: dict[str, object] = {
            "id": str(page_id),
            "status": status,
            "title": title,
            "spaceId": str(space_id),
            "body": {"representation": representation, "value": storage},
            "version": {"number": current_version + 1},
        }
        if parent_id:
            payload["parentId"] = str(parent_id)
        data = self._request("PUT", f"pages/{page_id}", json=payload)
        return self._to_page(data)

    def get_space_id_by_key(self, space_key: str) -> str:
        """Resolve a space key such as ``DOCS`` to the numeric space ID used by v2."""

        if not space_key:
            raise InvalidRequestError(
                "Space key is required and must be a valid string",
                remediation="Provide a valid Confluence space key",
            )
        try:
            data = self._request("GET", "spaces", params={"keys": space_key, "limit": 1})
        except ConfluenceClientError as exc:
            logger.debug("Space lookup through v2 failed (%s), trying the v1 API", exc.code)
            try:
                legacy = self._request("GET", self._legacy_url(f"space/{space_key.upper()}"))
            except ConfluenceClientError:
                raise exc from None
            if legacy.get("id"):
                return str(legacy["id"])
        else:
            results = data.get("results") or []
            if results and results[0].get("id"):
                return str(results[0]["id"])

        raise SpaceLookupError(
            f'Failed to find space with key "{space_key}". You may need to provide the space ID directly '
            "instead of the space key.",
            details="Space key could not be resolved to space ID",
        )
