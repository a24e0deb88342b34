import asyncio
from datetime import datetime, timezone

import pytest

from fakes import FakeReader, make_pages
from history import PaginationError, collect_documents, fetch_well_read, is_well_read
from models.capacity import HistoryWindow
from models.document import Document, DocumentListQuery, DocumentListResponse, DocumentLocation
from reader import TransportError


def _docs(*ids: str, progress: float = 1.0) -> list[Document]:
    return [Document(id=i, url=f"https://example.com/{i}", title=f"Doc {i}", reading_progress=progress)
            for i in ids]


def test_collects_all_pages_in_order():
    pages = make_pages(_docs("a", "b"), _docs("c", "d"), _docs("e"))
    reader = FakeReader({"archive": pages})
    query = DocumentListQuery(location=DocumentLocation.ARCHIVE)

    documents = asyncio.run(collect_documents(reader, query))

    assert [d.id for d in documents] == ["a", "b", "c", "d", "e"]
    assert len(reader.list_calls) == 3
    assert [q.page_cursor for q in reader.list_calls] == [None, "1", "2"]
    assert all(q.location == DocumentLocation.ARCHIVE for q in reader.list_calls)


def test_repeated_cursor_aborts():
    class StuckReader:
        async def list_documents(self, query=None):
            return DocumentListResponse(next_page_cursor="same", results=_docs("x"))

    with pytest.raises(PaginationError):
        asyncio.run(collect_documents(StuckReader(), DocumentListQuery()))


def test_page_cap_aborts():
    pages = make_pages(_docs("a"), _docs("b"), _docs("c"))
    reader = FakeReader({"archive": pages})

    with pytest.raises(PaginationError):
        asyncio.run(collect_documents(reader, DocumentListQuery(location=DocumentLocation.ARCHIVE), max_pages=2))
    assert len(reader.list_calls) == 2


def test_page_failure_propagates():
    class FailingReader:
        def __init__(self):
            self.calls = 0

        async def list_documents(self, query=None):
            self.calls += 1
            if self.calls == 2:
                raise TransportError(503, "Service Unavailable", "listing documents")
            return DocumentListResponse(next_page_cursor="next", results=_docs("a"))

    with pytest.raises(TransportError) as exc_info:
        asyncio.run(collect_documents(FailingReader(), DocumentListQuery()))
    assert exc_info.value.status == 503


def test_threshold_is_strict():
    assert not is_well_read(Document(reading_progress=0.75))
    assert is_well_read(Document(reading_progress=0.76))
    assert not is_well_read(Document(reading_progress=0.9), progress_threshold=0.9)


def test_fetch_well_read_filters_and_queries_archive_since_cutoff():
    documents = _docs("done", progress=1.0) + _docs("half", progress=0.5) + _docs("most", progress=0.8)
    reader = FakeReader({"archive": make_pages(documents)})
    now = datetime(2024, 11, 1, tzinfo=timezone.utc)

    well_read = asyncio.run(fetch_well_read(reader, window=HistoryWindow.parse("6 months"), now=now))

    assert [d.id for d in well_read] == ["done", "most"]
    query = reader.list_calls[0]
    assert query.location == DocumentLocation.ARCHIVE
    assert query.updated_after == "2024-05-01T00:00:00+00:00"


def test_fetch_well_read_custom_threshold():
    documents = _docs("a", progress=0.6) + _docs("b", progress=0.4)
    reader = FakeReader({"archive": make_pages(documents)})

    well_read = asyncio.run(fetch_well_read(reader, progress_threshold=0.5))

    assert [d.id for d in well_read] == ["a"]


def test_null_progress_counts_as_unread():
    document = Document.model_validate({"id": "x", "title": "Untouched", "reading_progress": None})
    assert document.reading_progress is None
    assert not is_well_read(document)
