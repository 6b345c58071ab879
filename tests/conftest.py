from __future__ import annotations

from typing import Callable, Optional

import httpx
import pytest

from confluence_tools.confluence.client import ConfluenceAuth, ConfluenceClient


BASE_URL = "https://example.atlassian.net"


def page_payload(
    page_id: str = "123",
    *,
    title: str = "Release Notes",
    space_id: str = "9001",
    version: int = 3,
    value: str = "<p>Hello</p>",
    parent_id: Optional[str] = None,
) -> dict:
    return {
        "id": page_id,
        "status": "current",
        "title": title,
        "spaceId": space_id,
        "parentId": parent_id,
        "body": {"storage": {"value": value, "representation": "storage"}},
        "version": {"number": version, "createdAt": "2024-05-01T10:00:00.000Z"},
        "_links": {"webui": f"/spaces/DOCS/pages/{page_id}", "self": f"{BASE_URL}/wiki/api/v2/pages/{page_id}"},
    }


class RecordingHandler:
    """Route requests to canned responses and remember what was sent."""

    def __init__(self, routes: dict[tuple[str, str], Callable[[httpx.Request], httpx.Response]]) -> None:
        self.routes = routes
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        handler = self.routes.get((request.method, request.url.path))
        if handler is None:
            return httpx.Response(404, json={"message": "no route"})
        return handler(request)


@pytest.fixture()
def make_client():
    clients: list[ConfluenceClient] = []

    def _make(routes, *, auth: Optional[ConfluenceAuth] = None) -> tuple[ConfluenceClient, RecordingHandler]:
        handler = RecordingHandler(routes)
        client = ConfluenceClient(
            base_url=BASE_URL,
            auth=auth or ConfluenceAuth(email="me@example.com", api_token="secret"),
            transport=httpx.MockTransport(handler),
        )
        clients.append(client)
        return client, handler

    yield _make
    for client in clients:
        client.close()
