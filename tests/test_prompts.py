import pytest

from capacity import estimate
from models.article import CandidateArticle
from models.document import Document
from prompts import DEFAULT_PROFILE, build_reading_pattern_prompt, build_recommendation_prompt

CANDIDATES = [
    CandidateArticle(title="Getting Started with CSS Grid", url="https://css-tricks.com/grid/",
                     summary="Grid containers and tracks."),
    CandidateArticle(title="Rust in Production", url="https://example.com/rust", summary="Lessons learned."),
]


def test_recommendation_prompt_lists_candidates_and_count():
    prompt = build_recommendation_prompt(CANDIDATES, estimate(20, 42), reading_profile="I like systems work.")

    assert '1. "Getting Started with CSS Grid"' in prompt
    assert "URL: https://example.com/rust" in prompt
    assert "Summary: Lessons learned." in prompt
    assert "approximately 7 articles" in prompt
    assert "I like systems work." in prompt
    assert DEFAULT_PROFILE not in prompt


def test_recommendation_prompt_uses_default_profile():
    prompt = build_recommendation_prompt(CANDIDATES, estimate(0, 42))
    assert DEFAULT_PROFILE in prompt


@pytest.mark.parametrize("mode,marker", [
    ("title-quoted", "enclosed in double quotes"),
    ("title-line", "Every line of your reply will be treated as a title"),
    ("url", "ONLY the URLs"),
])
def test_closing_instructions_follow_mode(mode, marker):
    prompt = build_recommendation_prompt(CANDIDATES, estimate(0, 42), mode=mode)
    assert marker in prompt


def test_unknown_mode_rejected():
    with pytest.raises(ValueError):
        build_recommendation_prompt(CANDIDATES, estimate(0, 42), mode="fuzzy")


def test_reading_pattern_prompt():
    documents = [
        Document(id="1", url="https://example.com/a", title="Async Python", word_count=1800,
                 last_moved_at="2024-10-02T10:00:00Z", summary="Event loops."),
        Document(id="2", url="https://example.com/b", title=None),
    ]

    prompt = build_reading_pattern_prompt(documents, "6 months")

    assert "MY READING HISTORY (PAST 6 MONTHS)" in prompt
    assert "These are the 2 articles" in prompt
    assert '- "Async Python"' in prompt
    assert "Word Count: 1800" in prompt
    assert "Date read: 2024-10-02T10:00:00Z" in prompt
    assert '- "Untitled"' in prompt
    assert "first person" in prompt
