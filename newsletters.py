"""Newsletter digest parsing.

Digest newsletters (TLDR and similar) list each article as a paragraph
whose link wraps a bold title, followed by a plain paragraph with the
blurb:

    <p><a href="https://..."><strong>Title (4 minute read)</strong></a></p>
    <p>One or two sentences of summary.</p>

Extraction Rules:
    - Only the first link of a paragraph is considered
    - That link must contain a <strong> (or <b>) element; its text is the title
    - The very next paragraph must contain no link; its text is the summary
      and it is consumed
    - Items without such a summary paragraph, or with an empty href or
      title, are dropped
    - Order follows the document; tracking parameters are removed from URLs
"""

import logging
from dataclasses import dataclass, field
from html.parser import HTMLParser

from history import DEFAULT_MAX_PAGES, DocumentLister, collect_documents
from models.article import CandidateArticle
from models.document import Document, DocumentCategory, DocumentListQuery, DocumentLocation
from urls import clean_url

logger = logging.getLogger(__name__)


@dataclass
class _Paragraph:
    """Text and first-link details collected for one <p> element."""

    parts: list[str] = field(default_factory=list)
    has_link: bool = False
    href: str = ""
    title: str | None = None  # None when the first link had no bold text

    @property
    def text(self) -> str:
        return " ".join("".join(self.parts).split())


class _ParagraphCollector(HTMLParser):
    """Collect <p> elements with their text and first link.

    Text outside paragraphs is ignored, as is anything inside script,
    style and head. A <p> opened before the previous one closed starts a
    new paragraph, as browsers do.
    """

    SKIP_TAGS = frozenset({"script", "style", "head", "title"})
    BOLD_TAGS = frozenset({"strong", "b"})

    def __init__(self):
        super().__init__(convert_charrefs=True)
        self.paragraphs: list[_Paragraph] = []
        self._current: _Paragraph | None = None
        self._skip_depth = 0
        self._in_first_link = False
        self._bold_depth = 0
        self._title_parts: list[str] = []

    def _close_paragraph(self) -> None:
        if self._current is not None:
            self._finish_title()
            self.paragraphs.append(self._current)
        self._current = None
        self._in_first_link = False

    def _finish_title(self) -> None:
        if self._bold_depth and self._current is not None:
            self._current.title = " ".join("".join(self._title_parts).split())
        self._bold_depth = 0

    def handle_starttag(self, tag, attrs):
        if tag in self.SKIP_TAGS:
            self._skip_depth += 1
            return
        if tag == "p":
            self._close_paragraph()
            self._current = _Paragraph()
            return
        if self._current is None:
            return
        if tag == "a":
            if not self._current.has_link:
                self._current.has_link = True
                self._current.href = (dict(attrs).get("href") or "").strip()
                self._in_first_link = True
        elif tag in self.BOLD_TAGS:
            if self._in_first_link and self._current.title is None:
                if self._bold_depth == 0:
                    self._title_parts = []
                self._bold_depth += 1

    def handle_endtag(self, tag):
        if tag in self.SKIP_TAGS:
            if self._skip_depth > 0:
                self._skip_depth -= 1
            return
        if tag == "p":
            self._close_paragraph()
        elif tag == "a":
            self._in_first_link = False
        elif tag in self.BOLD_TAGS and self._bold_depth > 0:
            self._bold_depth -= 1
            if self._bold_depth == 0 and self._current is not None:
                self._current.title = " ".join("".join(self._title_parts).split())

    def handle_data(self, data):
        if self._skip_depth or self._current is None:
            return
        self._current.parts.append(data)
        if self._bold_depth:
            self._title_parts.append(data)

    def close(self):
        super().close()
        self._close_paragraph()


def parse_newsletter_links(html_content: str) -> list[CandidateArticle]:
    """Extract candidate articles from one newsletter's HTML.

    Args:
        html_content: Raw markup of the newsletter body

    Returns:
        Candidate articles in document order (may be empty)
    """
    if not html_content:
        return []

    parser = _ParagraphCollector()
    parser.feed(html_content)
    parser.close()
    paragraphs = parser.paragraphs

    articles = []
    i = 0
    while i < len(paragraphs):
        para = paragraphs[i]
        if para.has_link and para.title is not None and i + 1 < len(paragraphs):
            summary_para = paragraphs[i + 1]
            if not summary_para.has_link:
                if para.href and para.title:
                    articles.append(CandidateArticle(
                        title=para.title,
                        url=clean_url(para.href),
                        summary=summary_para.text,
                    ))
                i += 2
                continue
        i += 1

    return articles


def _matches_source(document: Document, source_filter: str) -> bool:
    """Case-insensitive substring match against title, author and site name."""
    if not source_filter:
        return True
    needle = source_filter.lower()
    haystack = (document.title, document.author, document.site_name, document.source_url)
    return any(needle in (value or "").lower() for value in haystack)


async def fetch_candidates(
    client: DocumentLister,
    source_filter: str = "",
    max_pages: int = DEFAULT_MAX_PAGES,
) -> list[CandidateArticle]:
    """Fetch newsletter emails from the feed and extract their articles.

    Args:
        client: Reader client
        source_filter: Keep only newsletters whose title/author/site contains this
        max_pages: Page cap for the listing

    Returns:
        Candidate articles across all newsletters, unique by URL, in order
    """
    query = DocumentListQuery(
        location=DocumentLocation.FEED,
        category=DocumentCategory.EMAIL,
        with_html_content=True,
    )
    documents = await collect_documents(client, query, max_pages=max_pages)
    newsletters = [d for d in documents if _matches_source(d, source_filter)]

    candidates: dict[str, CandidateArticle] = {}
    for document in newsletters:
        articles = parse_newsletter_links(document.html_content or "")
        logger.debug("Newsletter parsed | doc=%s articles=%d", document, len(articles))
        for article in articles:
            candidates.setdefault(article.url, article)

    logger.info(
        "Newsletters fetched | emails=%d matched=%d articles=%d",
        len(documents), len(newsletters), len(candidates),
    )
    return list(candidates.values())
