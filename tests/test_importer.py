import asyncio
import logging

import pytest

import importer
from fakes import FakeReader
from importer import import_all
from models.document import DocumentLocation
from reader import TransportError

URLS = [
    "https://example.com/one",
    "https://example.com/two",
    "https://example.com/three",
]


@pytest.fixture
def pauses(monkeypatch):
    calls = []

    async def fake_pause(delay_ms):
        calls.append(delay_ms)

    monkeypatch.setattr(importer, "_pause", fake_pause)
    return calls


def test_failure_does_not_stop_batch(pauses):
    reader = FakeReader(fail_urls={URLS[1]})

    result = asyncio.run(import_all(reader, URLS, inter_request_delay_ms=0))

    assert result.success_count == 2
    assert result.fail_count == 1
    assert result.total == len(URLS)
    assert [doc.id for doc in result.created_records] == ["doc1", "doc3"]
    assert result.failures[0][0] == URLS[1]
    assert "500" in result.failures[0][1]
    assert [p.url for p in reader.create_calls] == URLS


def test_delay_only_between_requests(pauses):
    asyncio.run(import_all(FakeReader(), URLS, inter_request_delay_ms=1500))
    assert pauses == [1500, 1500]


def test_zero_delay_never_pauses(pauses):
    asyncio.run(import_all(FakeReader(), URLS, inter_request_delay_ms=0))
    assert pauses == []


def test_negative_delay_rejected(pauses):
    with pytest.raises(ValueError):
        asyncio.run(import_all(FakeReader(), URLS, inter_request_delay_ms=-1))


def test_documents_carry_provenance_and_location(pauses):
    reader = FakeReader()

    asyncio.run(import_all(reader, URLS[:1], saved_using="Weekly Triage", location="later", tags=["ai-pick"]))

    params = reader.create_calls[0]
    assert params.saved_using == "Weekly Triage"
    assert params.location == DocumentLocation.LATER
    assert params.tags == ["ai-pick"]
    assert params.to_payload() == {
        "url": URLS[0],
        "location": "later",
        "saved_using": "Weekly Triage",
        "tags": ["ai-pick"],
    }


def test_default_marker_and_location(pauses):
    reader = FakeReader()
    asyncio.run(import_all(reader, URLS[:1]))
    assert reader.create_calls[0].saved_using == "AI Recommender"
    assert reader.create_calls[0].location == DocumentLocation.NEW
    assert reader.create_calls[0].tags is None


def test_empty_list(pauses):
    result = asyncio.run(import_all(FakeReader(), []))
    assert (result.success_count, result.fail_count) == (0, 0)
    assert pauses == []


class RateLimitedReader(FakeReader):
    async def create_document(self, params):
        raise TransportError(429, "Too Many Requests", "creating document", retry_after=30.0)


def test_failure_log_includes_retry_after(pauses, caplog):
    with caplog.at_level(logging.ERROR, logger="importer"):
        result = asyncio.run(import_all(RateLimitedReader(), URLS[:1]))

    assert result.fail_count == 1
    assert any("retry_after=30.0" in r.getMessage() for r in caplog.records)
