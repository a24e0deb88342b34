"""In-memory stand-ins for the Reader client used across the tests."""

from models.document import (
    Document,
    DocumentCreateParams,
    DocumentListQuery,
    DocumentListResponse,
)
from reader import TransportError


def make_pages(*pages: list[Document]) -> list[DocumentListResponse]:
    """Chain pages with cursors "1", "2", ... and no cursor on the last one."""
    responses = []
    for i, results in enumerate(pages):
        next_cursor = str(i + 1) if i < len(pages) - 1 else None
        responses.append(DocumentListResponse(
            count=sum(len(p) for p in pages),
            next_page_cursor=next_cursor,
            results=results,
        ))
    return responses


class FakeReader:
    """Serves canned pages per location and records every call.

    Pages are looked up by query.location ("archive", "feed", ...) and
    indexed by the integer page cursor.
    """

    def __init__(
        self,
        pages: dict[str, list[DocumentListResponse]] | None = None,
        fail_urls: set[str] | None = None,
    ):
        self.pages = pages or {}
        self.fail_urls = fail_urls or set()
        self.list_calls: list[DocumentListQuery] = []
        self.create_calls: list[DocumentCreateParams] = []

    async def list_documents(self, query: DocumentListQuery | None = None) -> DocumentListResponse:
        query = query or DocumentListQuery()
        self.list_calls.append(query)
        location = query.location.value if query.location else ""
        index = int(query.page_cursor or 0)
        pages = self.pages.get(location, [])
        if not pages:
            return DocumentListResponse()
        return pages[index]

    async def create_document(self, params: DocumentCreateParams) -> Document:
        self.create_calls.append(params)
        if params.url in self.fail_urls:
            raise TransportError(500, "Internal Server Error", "creating document")
        return Document(id=f"doc{len(self.create_calls)}", url=params.url, location="new")
