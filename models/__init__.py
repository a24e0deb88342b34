"""Pydantic models for the reader triage tool.

Document:
    A Reader document (reading history, newsletters, created items).

DocumentListQuery / DocumentListResponse:
    One page request and response of the list endpoint.

DocumentCreateParams / DocumentUpdateParams:
    Write payloads for the save and update endpoints.

CandidateArticle:
    Article link extracted from a newsletter (title, url, summary).

HistoryWindow / CapacityEstimate:
    Lookback window and the derived weekly article quota.

Example:
    >>> from models import CandidateArticle, HistoryWindow
    >>> HistoryWindow.parse("6 weeks").days()
    42
"""

from models.article import CandidateArticle
from models.capacity import CapacityEstimate, HistoryWindow
from models.document import (
    Document,
    DocumentCategory,
    DocumentCreateParams,
    DocumentListQuery,
    DocumentListResponse,
    DocumentLocation,
    DocumentUpdateParams,
)

__all__ = [
    "CandidateArticle",
    "CapacityEstimate",
    "HistoryWindow",
    "Document",
    "DocumentCategory",
    "DocumentCreateParams",
    "DocumentListQuery",
    "DocumentListResponse",
    "DocumentLocation",
    "DocumentUpdateParams",
]
