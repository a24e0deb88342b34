"""Async client for the Readwise Reader REST API (v3).

Supported operations:
    - create_document: POST /save/
    - list_documents: GET /list/ (one page per call)
    - update_document: PATCH /update/<id>/
    - delete_document: DELETE /delete/<id>/

Authentication:
    Every request carries "Authorization: Token <READWISE_READER_KEY>".

Error Handling:
    - Non-2xx response: raises TransportError (never retried here)
    - Network failures and timeouts: aiohttp / asyncio errors propagate as-is
    - Missing document id: ValueError before any request is sent

Usage:
    >>> async with ReaderClient(config.reader_settings()) as client:
    ...     page = await client.list_documents(DocumentListQuery(location="archive"))
"""

import json
import logging
import ssl
from typing import Any

import aiohttp
import certifi

from config import ReaderSettings
from models.document import (
    Document,
    DocumentCreateParams,
    DocumentListQuery,
    DocumentListResponse,
    DocumentUpdateParams,
)

logger = logging.getLogger(__name__)

USER_AGENT = "reader-triage/0.1 (+aiohttp)"


class TransportError(Exception):
    """Raised when the Reader API answers with a non-2xx status.

    Attributes:
        status: HTTP status code
        operation: Which client operation failed (e.g. "creating document")
        retry_after: Seconds from a Retry-After header, when the API sent one
    """

    def __init__(
        self,
        status: int,
        message: str,
        operation: str,
        retry_after: float | None = None,
    ):
        self.status = status
        self.message = message
        self.operation = operation
        self.retry_after = retry_after
        super().__init__(f"Error {operation}: {status} {message}".rstrip())


def create_ssl_context() -> ssl.SSLContext:
    """SSL context backed by the certifi CA bundle."""
    return ssl.create_default_context(cafile=certifi.where())


def _retry_after(resp: aiohttp.ClientResponse) -> float | None:
    value = resp.headers.get("Retry-After")
    if not value:
        return None
    try:
        return float(value)
    except ValueError:
        return None


class ReaderClient:
    """Readwise Reader API client.

    Owns one aiohttp session for its lifetime; use as an async context
    manager. All calls are awaited one at a time by the callers, so the
    session never has more than one request in flight.
    """

    def __init__(self, settings: ReaderSettings):
        self.settings = settings
        self._session: aiohttp.ClientSession | None = None

    async def __aenter__(self) -> "ReaderClient":
        connector = aiohttp.TCPConnector(ssl=create_ssl_context())
        self._session = aiohttp.ClientSession(
            connector=connector,
            headers={
                "Authorization": f"Token {self.settings.token}",
                "Content-Type": "application/json",
                "User-Agent": USER_AGENT,
            },
            timeout=aiohttp.ClientTimeout(total=self.settings.timeout_seconds),
        )
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        if self._session is not None:
            await self._session.close()
            self._session = None

    def _url(self, path: str) -> str:
        return f"{self.settings.base_url.rstrip('/')}/{path.lstrip('/')}"

    async def _request(
        self,
        method: str,
        path: str,
        operation: str,
        params: dict[str, str] | None = None,
        payload: dict[str, Any] | None = None,
    ) -> Any:
        """Send one request and return the decoded JSON body (None if empty).

        Raises:
            TransportError: On any non-2xx status
            RuntimeError: If used outside the async context manager
        """
        if self._session is None:
            raise RuntimeError("ReaderClient must be used as 'async with ReaderClient(...)'")

        url = self._url(path)
        logger.debug("Reader request | method=%s path=%s params=%s", method, path, params or {})
        async with self._session.request(method, url, params=params, json=payload) as resp:
            if resp.status >= 300:
                reason = resp.reason or ""
                logger.warning("Reader API error | op=%s status=%d", operation, resp.status)
                raise TransportError(resp.status, reason, operation, _retry_after(resp))
            if resp.status == 204:
                return None
            body = await resp.text()
            if not body.strip():
                return None
            return json.loads(body)

    async def create_document(self, params: DocumentCreateParams) -> Document:
        """Create a new document in Reader.

        Args:
            params: The document details (url is required)

        Returns:
            The created document as echoed by the API
        """
        data = await self._request(
            "POST", "/save/", "creating document", payload=params.to_payload()
        )
        return Document.model_validate(data or {"url": params.url})

    async def list_documents(self, query: DocumentListQuery | None = None) -> DocumentListResponse:
        """List one page of documents.

        Args:
            query: Optional filters; page_cursor selects the page

        Returns:
            Page of results with nextPageCursor when more pages exist
        """
        params = query.to_params() if query else {}
        data = await self._request("GET", "/list/", "listing documents", params=params)
        return DocumentListResponse.model_validate(data or {})

    async def update_document(self, document_id: str, params: DocumentUpdateParams) -> Document:
        """Update fields of an existing document.

        Raises:
            ValueError: If document_id is empty
        """
        if not document_id:
            raise ValueError("Document ID is required for update")
        data = await self._request(
            "PATCH", f"/update/{document_id}/", "updating document", payload=params.to_payload()
        )
        return Document.model_validate(data or {"id": document_id})

    async def delete_document(self, document_id: str) -> None:
        """Delete a document. The API answers 204 No Content on success.

        Raises:
            ValueError: If document_id is empty
        """
        if not document_id:
            raise ValueError("Document ID is required for deletion")
        await self._request("DELETE", f"/delete/{document_id}/", "deleting document")
