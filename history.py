"""Reading history retrieval.

Pages through the Reader list endpoint and keeps the documents the reader
actually finished ("well read"), which drive the capacity estimate and
the reading-pattern analysis prompt.

Pagination:
    Pages are requested one at a time, following nextPageCursor until the
    service stops returning one. A page cap and a repeated-cursor check
    stop a service that never ends the listing.

Error Handling:
    A failed page aborts the whole listing; the client's error propagates
    unchanged and no partial result is returned.
"""

import logging
from datetime import datetime, timezone
from typing import Protocol

from models.capacity import HistoryWindow
from models.document import Document, DocumentListQuery, DocumentListResponse, DocumentLocation

logger = logging.getLogger(__name__)

DEFAULT_PROGRESS_THRESHOLD = 0.75
DEFAULT_MAX_PAGES = 200


class PaginationError(RuntimeError):
    """Raised when a listing does not terminate within the page cap."""
    pass


class DocumentLister(Protocol):
    """Anything that can list one page of documents (ReaderClient or a fake)."""

    async def list_documents(self, query: DocumentListQuery | None = None) -> DocumentListResponse:
        ...


async def collect_documents(
    client: DocumentLister,
    query: DocumentListQuery,
    max_pages: int = DEFAULT_MAX_PAGES,
) -> list[Document]:
    """Fetch every page for a query and concatenate the results.

    Args:
        client: Reader client
        query: Filters; page_cursor is managed here
        max_pages: Maximum pages to follow before giving up

    Returns:
        All documents in the order the service returned them

    Raises:
        PaginationError: If max_pages is exceeded or a cursor repeats
    """
    documents: list[Document] = []
    cursor: str | None = None
    pages = 0

    while True:
        if pages >= max_pages:
            raise PaginationError(
                f"Listing did not finish after {max_pages} pages "
                f"({len(documents)} documents so far)"
            )
        page = await client.list_documents(query.model_copy(update={"page_cursor": cursor}))
        pages += 1
        documents.extend(page.results)

        next_cursor = page.next_page_cursor
        if not next_cursor:
            break
        if next_cursor == cursor:
            raise PaginationError(f"Service repeated page cursor '{next_cursor}'")
        cursor = next_cursor
        logger.debug("Fetched page | page=%d documents=%d", pages, len(documents))

    logger.debug("Listing complete | pages=%d documents=%d", pages, len(documents))
    return documents


def is_well_read(document: Document, progress_threshold: float = DEFAULT_PROGRESS_THRESHOLD) -> bool:
    """True when reading progress is strictly above the threshold."""
    return (document.reading_progress or 0.0) > progress_threshold


async def fetch_well_read(
    client: DocumentLister,
    progress_threshold: float = DEFAULT_PROGRESS_THRESHOLD,
    window: HistoryWindow | None = None,
    max_pages: int = DEFAULT_MAX_PAGES,
    now: datetime | None = None,
) -> list[Document]:
    """Fetch archived documents from the window that were read past the threshold.

    Args:
        client: Reader client
        progress_threshold: Reading progress that must be exceeded
        window: Lookback window (default: 6 months)
        max_pages: Page cap passed to collect_documents
        now: Reference time (default: current UTC time)

    Returns:
        Well-read documents in service order (not sorted by recency)

    Example:
        >>> docs = await fetch_well_read(client, window=HistoryWindow.parse("6 weeks"))
    """
    window = window or HistoryWindow(amount=6, unit="months")
    cutoff = window.cutoff(now or datetime.now(timezone.utc))
    query = DocumentListQuery(
        location=DocumentLocation.ARCHIVE,
        updated_after=cutoff.isoformat(),
    )

    logger.info("Fetching reading history | window=%s since=%s", window.label, cutoff.date())
    documents = await collect_documents(client, query, max_pages=max_pages)
    well_read = [d for d in documents if is_well_read(d, progress_threshold)]

    logger.info(
        "Reading history fetched | documents=%d well_read=%d threshold=%.2f",
        len(documents), len(well_read), progress_threshold,
    )
    return well_read
