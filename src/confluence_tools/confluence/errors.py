"""Error types raised while talking to the Confluence REST API."""

from __future__ import annotations

from typing import Any, ClassVar, Optional

import httpx


class ConfluenceError(Exception):
    """Base class for all errors raised by this package."""


class ConfluenceClientError(ConfluenceError):
    """A failed Confluence operation with a machine-readable ``code``."""

    default_code: ClassVar[str] = "REQUEST_ERROR"
    default_remediation: ClassVar[Optional[str]] = None

    def __init__(
        self,
        message: str,
        *,
        status: Optional[int] = None,
        code: Optional[str] = None,
        details: Any = None,
        remediation: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status = status
        self.code = code or self.default_code
        self.details = details
        self.remediation = remediation or self.default_remediation


class MissingCredentialsError(ConfluenceClientError):
    default_code = "MISSING_CREDENTIALS"
    default_remediation = (
        "Set CONFLUENCE_PAT for Bearer token auth, or CONFLUENCE_EMAIL + CONFLUENCE_API_TOKEN for Basic auth"
    )


class AuthenticationError(ConfluenceClientError):
    default_code = "AUTHENTICATION_ERROR"
    default_remediation = (
        "Check that your Confluence credentials (CONFLUENCE_PAT or CONFLUENCE_EMAIL/CONFLUENCE_API_TOKEN) "
        "are valid and not expired"
    )


class AuthorizationError(ConfluenceClientError):
    default_code = "AUTHORIZATION_ERROR"
    default_remediation = (
        "Ask your Confluence administrator for access to the space or page"
    )


class NotFoundError(ConfluenceClientError):
    default_code = "NOT_FOUND_ERROR"
    default_remediation = "Verify that the page ID, space ID or page title exists and is visible to you"


class InvalidRequestError(ConfluenceClientError):
    default_code = "VALIDATION_ERROR"
    default_remediation = "Check the input parameters and the content format"


class VersionConflictError(ConfluenceClientError):
    default_code = "CONFLICT_ERROR"
    default_remediation = "Fetch the latest version of the page and submit your changes again"


class NetworkError(ConfluenceClientError):
    default_code = "NETWORK_ERROR"
    default_remediation = "Check your connection and that the Confluence instance is reachable"


class SpaceLookupError(ConfluenceClientError):
    default_code = "SPACE_LOOKUP_ERROR"
    default_remediation = (
        "Provide the space ID directly. It is shown in the space URL or in the spaceId of any page in the space"
    )


class PageOperationError(ConfluenceClientError):
    """A client error re-raised with the context of the page operation that failed."""

    @classmethod
    def wrap(cls, message: str, cause: ConfluenceClientError) -> "PageOperationError":
        return cls(
            f"{message}: {cause.message}",
            status=cause.status,
            code=cause.code,
            details=cause.details,
            remediation=cause.remediation,
        )


_STATUS_ERRORS: dict[int, tuple[type[ConfluenceClientError], str]] = {
    401: (AuthenticationError, "Authentication failed. Please check your Confluence credentials."),
    403: (
        AuthorizationError,
        "Access forbidden. Your Confluence account may not have the required permissions for this space or page.",
    ),
    404: (NotFoundError, "Resource not found. The page ID, space ID, or page title may not exist."),
    409: (
        VersionConflictError,
        "Version conflict. The page was modified by another user. Please refresh the page and try again.",
    ),
}


def error_from_response(response: httpx.Response) -> ConfluenceClientError:
    """Translate an unsuccessful HTTP response into the matching error type."""

    status = response.status_code
    try:
        data = response.json()
    except ValueError:
        data = None
    server_message = None
    if isinstance(data, dict):
        server_message = data.get("message") or data.get("title")

    if status in _STATUS_ERRORS:
        error_cls, message = _STATUS_ERRORS[status]
        return error_cls(message, status=status, details=data)
    if status == 400:
        detail = server_message or "Please check your input parameters."
        return InvalidRequestError(f"Invalid request data. {detail}", status=status, details=data)
    return ConfluenceClientError(
        f"Confluence API Error: {server_message or f'HTTP {status} error'}",
        status=status,
        code=f"HTTP_{status}",
        details=data,
    )
