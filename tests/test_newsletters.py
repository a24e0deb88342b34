import asyncio

from fakes import FakeReader, make_pages
from models.document import Document, DocumentCategory, DocumentLocation
from newsletters import fetch_candidates, parse_newsletter_links

TLDR_HTML = """
<html><head><title>TLDR Web Dev</title><style>p { color: red }</style></head>
<body>
<p><a href="https://css-tricks.com/grid/?utm_source=tldrwebdev"><strong>Getting Started with CSS Grid (5 minute read)</strong></a></p>
<p>An introduction to   grid
containers &amp; tracks.</p>
<p><a href="https://sponsor.example.com">Sponsor</a> a message from our partner</p>
<p>Plain paragraph with no link.</p>
<p><a href="https://example.com/orphan"><strong>Orphan Article</strong></a></p>
<p><a href="https://example.com/other">Another link</a></p>
<p><a href="https://example.com/next"><b>Next Article (3 minute read)</b></a></p>
<p>Second summary.</p>
<script>var html = "<p>not a paragraph</p>";</script>
</body></html>
"""


def _newsletter(doc_id: str, title: str, html: str) -> Document:
    return Document(
        id=doc_id,
        url=f"https://reader.example.com/{doc_id}",
        title=title,
        author="Dan Ni",
        category="email",
        location="feed",
        html_content=html,
    )


def _article_html(title: str, url: str, summary: str) -> str:
    return f'<p><a href="{url}"><strong>{title}</strong></a></p><p>{summary}</p>'


def test_parse_extracts_title_url_and_summary():
    articles = parse_newsletter_links(TLDR_HTML)

    assert [a.title for a in articles] == [
        "Getting Started with CSS Grid (5 minute read)",
        "Next Article (3 minute read)",
    ]
    assert articles[0].url == "https://css-tricks.com/grid/"
    assert articles[0].summary == "An introduction to grid containers & tracks."
    assert articles[1].url == "https://example.com/next"
    assert articles[1].summary == "Second summary."


def test_parse_drops_article_without_summary_paragraph():
    articles = parse_newsletter_links(TLDR_HTML)
    assert "https://example.com/orphan" not in [a.url for a in articles]


def test_parse_drops_empty_href():
    html = '<p><a href=""><strong>No Link</strong></a></p><p>Summary.</p>'
    assert parse_newsletter_links(html) == []


def test_parse_handles_unclosed_paragraphs():
    html = '<p><a href="https://example.com/a"><strong>A</strong></a><p>Summary of A'
    articles = parse_newsletter_links(html)
    assert [(a.title, a.summary) for a in articles] == [("A", "Summary of A")]


def test_parse_empty_input():
    assert parse_newsletter_links("") == []
    assert parse_newsletter_links("<html><body>No paragraphs</body></html>") == []


def test_fetch_candidates_queries_feed_emails_and_dedupes():
    first = _newsletter("n1", "TLDR Web Dev 2024-11-01", _article_html("A", "https://example.com/a", "About A"))
    second = _newsletter(
        "n2", "TLDR Web Dev 2024-11-02",
        _article_html("A again", "https://example.com/a", "Dup")
        + _article_html("B", "https://example.com/b?utm_campaign=x", "About B"),
    )
    reader = FakeReader({"feed": make_pages([first], [second])})

    candidates = asyncio.run(fetch_candidates(reader))

    assert [(c.title, c.url) for c in candidates] == [
        ("A", "https://example.com/a"),
        ("B", "https://example.com/b"),
    ]
    query = reader.list_calls[0]
    assert query.location == DocumentLocation.FEED
    assert query.category == DocumentCategory.EMAIL
    assert query.with_html_content is True


def test_fetch_candidates_source_filter():
    tldr = _newsletter("n1", "TLDR AI", _article_html("A", "https://example.com/a", "About A"))
    other = _newsletter("n2", "Weekly Digest", _article_html("B", "https://example.com/b", "About B"))
    other.author = "Someone Else"
    reader = FakeReader({"feed": make_pages([tldr, other])})

    candidates = asyncio.run(fetch_candidates(reader, source_filter="tldr"))

    assert [c.url for c in candidates] == ["https://example.com/a"]
