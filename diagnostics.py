"""Built-in fixtures for checking the response matcher by hand.

`python main.py debug-match` runs every case and prints PASS/FAIL, which
is a quick way to confirm matching behaves after editing the prompts or
the matcher without touching the Reader API.
"""

from dataclasses import dataclass

from matching import MatchIncompleteError, match
from models.article import CandidateArticle

NEXTJS = CandidateArticle(
    title="How to Build a Scalable Architecture for Your NextJS Project",
    url="https://dev.to/alexeagleson/how-to-build-scalable-architecture-for-your-nextjs-project-2pb7",
    summary="Folder layout, module boundaries and tooling for larger NextJS apps.",
)
CSS_GRID = CandidateArticle(
    title="Getting Started with CSS Grid",
    url="https://css-tricks.com/getting-started-with-css-grid/",
    summary="An introduction to grid containers, tracks and areas.",
)
QUOTED_NEXTJS = CandidateArticle(
    title='How to "Properly" Build a Scalable Architecture for Your NextJS Project',
    url=NEXTJS.url,
    summary=NEXTJS.summary,
)
SMART_QUOTE = CandidateArticle(
    title="Why AI’s Next Decade Belongs to Boring Infrastructure (6 minute read)",
    url="https://example.com/boring-infrastructure",
    summary="The unglamorous systems work behind model deployment.",
)


@dataclass(frozen=True)
class MatchCase:
    """One fixture: input text, candidates and the expected outcome.

    expected_unresolved is set for cases that must fail; expected_urls
    for cases that must succeed.
    """

    name: str
    mode: str
    text: str
    candidates: tuple[CandidateArticle, ...]
    expected_urls: tuple[str, ...] = ()
    expected_unresolved: tuple[str, ...] = ()

    @property
    def should_fail(self) -> bool:
        return bool(self.expected_unresolved)


@dataclass(frozen=True)
class CaseOutcome:
    case: MatchCase
    passed: bool
    detail: str


FIXTURES: tuple[MatchCase, ...] = (
    MatchCase(
        name="Simple title lines",
        mode="title-line",
        text=f"{NEXTJS.title}\n{CSS_GRID.title}\n",
        candidates=(NEXTJS, CSS_GRID),
        expected_urls=(NEXTJS.url, CSS_GRID.url),
    ),
    MatchCase(
        name="Title lines with case drift",
        mode="title-line",
        text="How to build a scalable architecture for your NextJS project\n"
             "Getting started with CSS Grid",
        candidates=(NEXTJS, CSS_GRID),
        expected_urls=(NEXTJS.url, CSS_GRID.url),
    ),
    MatchCase(
        name="Title lines containing quotes",
        mode="title-line",
        text=f"{QUOTED_NEXTJS.title}\n{CSS_GRID.title}",
        candidates=(QUOTED_NEXTJS, CSS_GRID),
        expected_urls=(QUOTED_NEXTJS.url, CSS_GRID.url),
    ),
    MatchCase(
        name="Title line not in the newsletter",
        mode="title-line",
        text=f"{NEXTJS.title}\n{CSS_GRID.title}\nThe Future of AI in Software Development",
        candidates=(NEXTJS, CSS_GRID),
        expected_unresolved=("The Future of AI in Software Development",),
    ),
    MatchCase(
        name="Quoted titles after an explanation",
        mode="title-quoted",
        text="Both pieces are practical front-end reads.\n\n"
             f'"{CSS_GRID.title}"\n"{NEXTJS.title}"\n',
        candidates=(NEXTJS, CSS_GRID),
        expected_urls=(CSS_GRID.url, NEXTJS.url),
    ),
    MatchCase(
        name="Quoted title with straight apostrophe",
        mode="title-quoted",
        text='"Why AI\'s Next Decade Belongs to Boring Infrastructure (6 minute read)"',
        candidates=(SMART_QUOTE, CSS_GRID),
        expected_urls=(SMART_QUOTE.url,),
    ),
    MatchCase(
        name="Markdown and tracking-laden URLs",
        mode="url",
        text=f"- [CSS Grid]({CSS_GRID.url}?utm_source=tldr)\n- {NEXTJS.url}.",
        candidates=(NEXTJS, CSS_GRID),
        expected_urls=(CSS_GRID.url, NEXTJS.url),
    ),
    MatchCase(
        name="URL not in the newsletter",
        mode="url",
        text=f"{CSS_GRID.url}\nhttps://example.org/not-offered",
        candidates=(NEXTJS, CSS_GRID),
        expected_unresolved=("https://example.org/not-offered",),
    ),
)


def run_case(case: MatchCase) -> CaseOutcome:
    """Run one fixture and compare against its expectation."""
    try:
        urls = match(case.text, list(case.candidates), case.mode)
    except MatchIncompleteError as e:
        if not case.should_fail:
            return CaseOutcome(case, False, f"unexpected failure: {e}")
        if tuple(e.unresolved) != case.expected_unresolved:
            return CaseOutcome(case, False, f"unresolved {e.unresolved!r}, expected {list(case.expected_unresolved)!r}")
        return CaseOutcome(case, True, f"rejected {len(e.unresolved)} unmatched identifier(s)")

    if case.should_fail:
        return CaseOutcome(case, False, f"expected failure, got {urls!r}")
    if tuple(urls) != case.expected_urls:
        return CaseOutcome(case, False, f"got {urls!r}, expected {list(case.expected_urls)!r}")
    return CaseOutcome(case, True, f"matched {len(urls)} URL(s)")


def run_fixtures(cases: tuple[MatchCase, ...] = FIXTURES) -> list[CaseOutcome]:
    """Run every fixture in order."""
    return [run_case(case) for case in cases]
