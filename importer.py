"""Batch creation of Reader documents from recommended URLs.

Documents are created one at a time, in input order, with a pause between
consecutive requests to stay under the Reader API rate limit. A failed
creation is counted and logged, and the batch moves on to the next URL.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Protocol

from models.document import Document, DocumentCreateParams, DocumentLocation

logger = logging.getLogger(__name__)

DEFAULT_DELAY_MS = 1500
PROVENANCE_MARKER = "AI Recommender"


class DocumentCreator(Protocol):
    """Anything that can create a document (ReaderClient or a fake)."""

    async def create_document(self, params: DocumentCreateParams) -> Document:
        ...


@dataclass
class ImportResult:
    """Tally of a batch import.

    Attributes:
        success_count: Documents created
        fail_count: URLs whose creation failed
        created_records: Created documents, in input order
        failures: (url, error message) for each failed URL
    """

    success_count: int = 0
    fail_count: int = 0
    created_records: list[Document] = field(default_factory=list)
    failures: list[tuple[str, str]] = field(default_factory=list)

    @property
    def total(self) -> int:
        return self.success_count + self.fail_count


async def _pause(delay_ms: int) -> None:
    await asyncio.sleep(delay_ms / 1000)


async def import_all(
    client: DocumentCreator,
    urls: list[str],
    inter_request_delay_ms: int = DEFAULT_DELAY_MS,
    saved_using: str = PROVENANCE_MARKER,
    location: str = "new",
    tags: list[str] | None = None,
) -> ImportResult:
    """Create one Reader document per URL.

    Args:
        client: Reader client
        urls: Final, human-confirmed recommendation list
        inter_request_delay_ms: Pause between consecutive requests (0 disables)
        saved_using: Provenance marker written onto each document
        location: Reader location for the new documents
        tags: Optional tags for the new documents

    Returns:
        ImportResult where success_count + fail_count == len(urls)

    Raises:
        ValueError: If inter_request_delay_ms is negative
    """
    if inter_request_delay_ms < 0:
        raise ValueError(f"inter_request_delay_ms must be non-negative, got {inter_request_delay_ms}")

    result = ImportResult()
    total = len(urls)
    target = DocumentLocation(location)

    for index, url in enumerate(urls):
        params = DocumentCreateParams(
            url=url,
            saved_using=saved_using,
            location=target,
            tags=list(tags) if tags else None,
        )
        try:
            document = await client.create_document(params)
        except Exception as e:
            result.fail_count += 1
            result.failures.append((url, str(e)))
            logger.error(
                "[%d/%d] Failed to create document | url=%s error=%s type=%s retry_after=%s",
                result.total, total, url, e, type(e).__name__, getattr(e, "retry_after", None),
            )
        else:
            result.success_count += 1
            result.created_records.append(document)
            logger.info("[%d/%d] Created document | url=%s", result.total, total, url)

        if inter_request_delay_ms > 0 and index < total - 1:
            logger.debug("Rate limiting | waiting %dms before next request", inter_request_delay_ms)
            await _pause(inter_request_delay_ms)

    logger.info(
        "Import complete | created=%d failed=%d total=%d",
        result.success_count, result.fail_count, total,
    )
    return result
