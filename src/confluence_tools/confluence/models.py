"""Typed models for Confluence content interactions."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(slots=True)
class PageBody:
    """Representation of page content in different formats."""

    storage: str
    representation: str = "storage"


@dataclass(slots=True)
class PageVersion:
    """Version stamp of a stored page. Numbers only ever increase."""

    number: int
    message: Optional[str] = None
    created_at: Optional[str] = None


@dataclass(slots=True)
class Page:
    """Confluence page payload returned by the v2 pages endpoints."""

    id: str
    title: str
    space_id: str
    body: PageBody
    version: PageVersion
    status: str = "current"
    parent_id: Optional[str] = None
    webui: str = ""
