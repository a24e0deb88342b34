import asyncio
import threading

import pytest

import importer
from config import Config
from fakes import FakeReader, make_pages
from matching import MatchIncompleteError
from models.document import Document
from pipeline import analyze_reading, load_reading_profile, recommend

NEWSLETTER_HTML = (
    '<p><a href="https://example.com/grid?utm_source=tldr"><strong>Getting Started with CSS Grid</strong></a></p>'
    "<p>Grid containers and tracks.</p>"
    '<p><a href="https://example.com/rust"><strong>Rust in Production</strong></a></p>'
    "<p>Lessons learned.</p>"
)


@pytest.fixture(autouse=True)
def no_sleep(monkeypatch):
    async def instant(delay_ms):
        return None

    monkeypatch.setattr(importer, "_pause", instant)


@pytest.fixture
def config(tmp_path):
    return Config(
        reader_token="test-token",
        output_dir=tmp_path,
        open_files=False,
        rate_limit_ms=0,
    )


def _reader(newsletters=True, fail_urls=None) -> FakeReader:
    feed = [Document(id="n1", title="TLDR", category="email", html_content=NEWSLETTER_HTML)] if newsletters else []
    archive = [
        Document(id="h1", title="Finished Piece", reading_progress=1.0),
        Document(id="h2", title="Skimmed Piece", reading_progress=0.2),
    ]
    return FakeReader({"feed": make_pages(feed), "archive": make_pages(archive)}, fail_urls=fail_urls)


def _files(directory, prefix):
    return sorted(directory.glob(f"{prefix}-*.txt"))


def test_recommend_imports_matched_articles(config, tmp_path):
    reader = _reader()

    stats = asyncio.run(recommend(
        config,
        read_response=lambda: 'My pick:\n"Rust in Production"\n"Getting Started with CSS Grid"',
        auto_confirm=True,
        client=reader,
    ))

    assert stats.outcome == "imported"
    assert stats.candidates == 2
    assert stats.well_read == 1
    assert stats.target_count == 3
    assert (stats.identifiers, stats.matched, stats.imported, stats.failed) == (2, 2, 2, 0)
    assert [p.url for p in reader.create_calls] == ["https://example.com/rust", "https://example.com/grid"]
    assert all(p.saved_using == "AI Recommender" for p in reader.create_calls)

    prompts = _files(tmp_path, "article-recommendation-prompt")
    assert len(prompts) == 1
    assert '"Rust in Production"' in prompts[0].read_text(encoding="utf-8")
    assert _files(tmp_path, "debug-ai-response") == []


def test_recommend_uses_reviewed_list(config):
    reader = _reader()
    seen = {}

    def reviewer(urls, candidates):
        seen["urls"] = list(urls)
        return urls[:1]

    stats = asyncio.run(recommend(
        config,
        read_response=lambda: "https://example.com/grid\nhttps://example.com/rust",
        reviewer=reviewer,
        mode="url",
        client=reader,
    ))

    assert seen["urls"] == ["https://example.com/grid", "https://example.com/rust"]
    assert [p.url for p in reader.create_calls] == ["https://example.com/grid"]
    assert stats.imported == 1


def test_recommend_declined_imports_nothing(config):
    reader = _reader()

    stats = asyncio.run(recommend(
        config,
        read_response=lambda: '"Rust in Production"',
        reviewer=lambda urls, candidates: None,
        client=reader,
    ))

    assert stats.outcome == "declined"
    assert reader.create_calls == []


def test_recommend_without_identifiers_saves_debug_file(config, tmp_path):
    reader = _reader()

    stats = asyncio.run(recommend(
        config, read_response=lambda: "Sorry, nothing stood out this week.", client=reader,
    ))

    assert stats.outcome == "no-matches"
    assert reader.create_calls == []
    debug = _files(tmp_path, "debug-ai-response")
    assert len(debug) == 1
    assert stats.debug_path == str(debug[0])
    assert debug[0].read_text(encoding="utf-8") == "Sorry, nothing stood out this week."


def test_recommend_incomplete_match_raises_after_saving_debug_file(config, tmp_path):
    reader = _reader()

    with pytest.raises(MatchIncompleteError) as exc_info:
        asyncio.run(recommend(
            config,
            read_response=lambda: '"Rust in Production"\n"A Title Nobody Offered"',
            auto_confirm=True,
            client=reader,
        ))

    assert exc_info.value.unresolved == ["A Title Nobody Offered"]
    assert reader.create_calls == []
    assert len(_files(tmp_path, "debug-ai-response")) == 1


def test_recommend_stops_when_no_newsletters(config):
    reader = _reader(newsletters=False)
    responses = []

    stats = asyncio.run(recommend(config, read_response=lambda: responses.append(1) or "", client=reader))

    assert stats.outcome == "no-candidates"
    assert responses == []


def test_recommend_reports_import_failures(config):
    reader = _reader(fail_urls={"https://example.com/grid"})

    stats = asyncio.run(recommend(
        config,
        read_response=lambda: '"Getting Started with CSS Grid"\n"Rust in Production"',
        auto_confirm=True,
        client=reader,
    ))

    assert (stats.imported, stats.failed) == (1, 1)


def test_recommend_includes_reading_profile(config, tmp_path):
    profile = tmp_path / "profile.md"
    profile.write_text("I mostly read about compilers.\n", encoding="utf-8")
    config.reading_profile_path = str(profile)

    asyncio.run(recommend(config, read_response=lambda: "", client=_reader()))

    prompt = _files(tmp_path, "article-recommendation-prompt")[0].read_text(encoding="utf-8")
    assert "I mostly read about compilers." in prompt


def test_analyze_reading_writes_prompt(config, tmp_path):
    reader = _reader()

    stats = asyncio.run(analyze_reading(config, client=reader))

    assert stats.outcome == "prompt-saved"
    assert stats.well_read == 1
    text = _files(tmp_path, "reading-pattern-analysis-prompt")[0].read_text(encoding="utf-8")
    assert "Finished Piece" in text
    assert "Skimmed Piece" not in text
    assert reader.list_calls[0].location.value == "archive"


def test_load_reading_profile(tmp_path):
    assert load_reading_profile("") == ""
    assert load_reading_profile(str(tmp_path / "missing.md")) == ""
    path = tmp_path / "profile.md"
    path.write_text("  Systems and databases.  ", encoding="utf-8")
    assert load_reading_profile(str(path)) == "Systems and databases."


def test_recommend_runs_blocking_prompts_off_the_event_loop(config):
    main_thread = threading.get_ident()
    threads = []

    def read_response():
        threads.append(threading.get_ident())
        return '"Rust in Production"'

    def reviewer(urls, candidates):
        threads.append(threading.get_ident())
        return urls

    stats = asyncio.run(recommend(config, read_response=read_response, reviewer=reviewer, client=_reader()))

    assert stats.outcome == "imported"
    assert len(threads) == 2
    assert main_thread not in threads
