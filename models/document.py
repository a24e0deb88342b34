"""Readwise Reader document models.

These mirror the Reader v3 REST API payloads. Documents are owned by the
remote service and treated as read-only here; the only writes this tool
makes are new documents created from recommendations.

Model Hierarchy:
    Document: A saved item as returned by the list endpoint
    DocumentListQuery: Filters for the list endpoint (one page per call)
    DocumentListResponse: One page of results plus the continuation cursor
    DocumentCreateParams: Payload for the save endpoint
    DocumentUpdateParams: Payload for the update endpoint
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class DocumentCategory(str, Enum):
    """Content categories used by Reader."""

    ARTICLE = "article"
    EMAIL = "email"
    RSS = "rss"
    HIGHLIGHT = "highlight"
    NOTE = "note"
    PDF = "pdf"
    EPUB = "epub"
    TWEET = "tweet"
    VIDEO = "video"


class DocumentLocation(str, Enum):
    """Where a document lives in the Reader UI."""

    NEW = "new"          # Inbox
    LATER = "later"      # Saved for later
    ARCHIVE = "archive"  # Finished / archived
    FEED = "feed"        # Subscriptions (RSS, newsletters)


class Document(BaseModel):
    """A document stored in Reader.

    Only title, url and reading_progress are relied upon; everything else
    is optional because the service omits fields depending on category.
    Unknown fields are kept so nothing the service sends is lost.

    Attributes:
        reading_progress: Fraction read, 0.0 to 1.0
        last_moved_at: When the document last changed location (ISO 8601)
        html_content: Raw markup, only present when requested
    """

    model_config = ConfigDict(extra="allow")

    id: str = ""
    url: str = ""
    source_url: str | None = None
    title: str | None = None
    author: str | None = None
    source: str | None = None
    category: str | None = None
    location: str | None = None
    tags: Any = None
    site_name: str | None = None
    word_count: int | None = None
    created_at: str | None = None
    updated_at: str | None = None
    notes: str | None = None
    published_date: Any = None
    summary: str | None = None
    image_url: str | None = None
    parent_id: str | None = None
    reading_progress: float | None = 0.0
    first_opened_at: str | None = None
    last_opened_at: str | None = None
    saved_at: str | None = None
    last_moved_at: str | None = None
    html_content: str | None = None

    def __str__(self) -> str:
        """Human-readable representation for logging."""
        return f"Document({self.id[:8]}, '{(self.title or '')[:50]}')"


class DocumentListQuery(BaseModel):
    """Filters accepted by the list endpoint."""

    id: str | None = None
    updated_after: str | None = Field(default=None, description="ISO 8601 timestamp")
    location: DocumentLocation | None = None
    category: DocumentCategory | None = None
    page_cursor: str | None = None
    with_html_content: bool | None = None

    def to_params(self) -> dict[str, str]:
        """Render as query-string parameters using the API's camelCase names."""
        params: dict[str, str] = {}
        if self.id:
            params["id"] = self.id
        if self.updated_after:
            params["updatedAfter"] = self.updated_after
        if self.location:
            params["location"] = self.location.value
        if self.category:
            params["category"] = self.category.value
        if self.page_cursor:
            params["pageCursor"] = self.page_cursor
        if self.with_html_content is not None:
            params["withHtmlContent"] = "true" if self.with_html_content else "false"
        return params


class DocumentListResponse(BaseModel):
    """One page of the list endpoint."""

    count: int = 0
    next_page_cursor: str | None = Field(default=None, alias="nextPageCursor")
    results: list[Document] = Field(default_factory=list)

    model_config = ConfigDict(populate_by_name=True)


class DocumentCreateParams(BaseModel):
    """Payload for creating a document. Only url is required by the API."""

    url: str
    html: str | None = None
    should_clean_html: bool | None = None
    title: str | None = None
    author: str | None = None
    summary: str | None = None
    published_date: str | None = None
    image_url: str | None = None
    location: DocumentLocation | None = None
    category: DocumentCategory | None = None
    saved_using: str | None = None
    tags: list[str] | None = None
    notes: str | None = None

    def to_payload(self) -> dict[str, Any]:
        """JSON body with unset fields omitted."""
        return self.model_dump(mode="json", exclude_none=True)


class DocumentUpdateParams(BaseModel):
    """Fields that may be changed on an existing document."""

    title: str | None = None
    author: str | None = None
    summary: str | None = None
    published_date: str | None = None
    image_url: str | None = None
    location: DocumentLocation | None = None
    category: DocumentCategory | None = None

    def to_payload(self) -> dict[str, Any]:
        """JSON body with unset fields omitted."""
        return self.model_dump(mode="json", exclude_none=True)
