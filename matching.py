"""Match an AI assistant's free-text reply back to candidate articles.

The assistant is asked to end its answer with the chosen articles, either
as quoted titles, bare title lines, or URLs. This module pulls those
identifiers out of the reply and resolves each one to a candidate.

Extraction modes:
    url:          every http(s) link (markdown links unwrapped, tracking
                  parameters removed, duplicates dropped)
    title-quoted: every double-quoted substring
    title-line:   every non-blank line

Resolution tiers (tried in order, first hit wins; URL mode uses only the
exact tier on cleaned URLs, since loosened URLs can point at another page):
    1. exact             identical key
    2. case-insensitive  keys equal after lower-casing
    3. normalized        keys equal after NFKC, lower-casing and dropping
                         every non-alphanumeric character (not used in
                         title-line mode, where every line is a candidate
                         and loose matching would pick up prose)

Completeness:
    Either every extracted identifier resolves or nothing is returned.
    match() raises MatchIncompleteError listing each unresolved identifier;
    resolve() returns the same information as a MatchResult.
"""

import logging
import re
import unicodedata
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Callable, Iterable, Mapping

from models.article import CandidateArticle
from urls import extract_urls, is_shortened, url_key

logger = logging.getLogger(__name__)

MODES: tuple[str, ...] = ("url", "title-quoted", "title-line")

_QUOTED = re.compile(r'"([^"]+)"')


class MatchIncompleteError(Exception):
    """Raised when some identifiers in the AI reply match no candidate.

    Attributes:
        unresolved: Every identifier that could not be resolved, in order
        extracted_count: Identifiers found in the reply
        matched_count: Identifiers that did resolve
        mode: Extraction mode used
    """

    def __init__(
        self,
        unresolved: list[str],
        extracted_count: int,
        matched_count: int,
        mode: str,
    ):
        self.unresolved = list(unresolved)
        self.extracted_count = extracted_count
        self.matched_count = matched_count
        self.mode = mode
        listing = ", ".join(f'"{item}"' for item in self.unresolved)
        super().__init__(
            f"Failed to match all identifiers to candidate articles ({mode} mode). "
            f"Found {extracted_count} identifiers but only matched {matched_count}. "
            f"Unmatched: {listing}"
        )


@dataclass(frozen=True)
class CandidateIndex:
    """Read-only lookup table from key (title or URL) to candidate.

    When two candidates share a key, the first one seen wins.
    """

    entries: Mapping[str, CandidateArticle]

    @classmethod
    def by_title(cls, candidates: Iterable[CandidateArticle]) -> "CandidateIndex":
        table: dict[str, CandidateArticle] = {}
        for candidate in candidates:
            table.setdefault(candidate.title, candidate)
        return cls(MappingProxyType(table))

    @classmethod
    def by_url(cls, candidates: Iterable[CandidateArticle]) -> "CandidateIndex":
        table: dict[str, CandidateArticle] = {}
        for candidate in candidates:
            table.setdefault(url_key(candidate.url), candidate)
        return cls(MappingProxyType(table))

    def __len__(self) -> int:
        return len(self.entries)


def normalize(text: str) -> str:
    """Lower-case and keep only alphanumeric characters.

    Absorbs punctuation, whitespace and quote-style drift (a curly
    apostrophe and a straight one both disappear).
    """
    text = unicodedata.normalize("NFKC", text).lower()
    return "".join(ch for ch in text if ch.isalnum())


# === Resolution tiers ===

def match_exact(identifier: str, index: CandidateIndex) -> CandidateArticle | None:
    return index.entries.get(identifier)


def match_case_insensitive(identifier: str, index: CandidateIndex) -> CandidateArticle | None:
    wanted = identifier.lower()
    for key, candidate in index.entries.items():
        if key.lower() == wanted:
            return candidate
    return None


def match_normalized(identifier: str, index: CandidateIndex) -> CandidateArticle | None:
    wanted = normalize(identifier)
    if not wanted:
        return None
    for key, candidate in index.entries.items():
        if normalize(key) == wanted:
            return candidate
    return None


Matcher = Callable[[str, CandidateIndex], CandidateArticle | None]

ALL_TIERS: tuple[tuple[str, Matcher], ...] = (
    ("exact", match_exact),
    ("case-insensitive", match_case_insensitive),
    ("normalized", match_normalized),
)


def tiers_for(mode: str) -> tuple[tuple[str, Matcher], ...]:
    """Matcher tiers used for a mode.

    URL mode only accepts an exact hit on the cleaned URL; title-line skips
    normalized matching.
    """
    if mode == "url":
        return ALL_TIERS[:1]
    if mode == "title-line":
        return ALL_TIERS[:2]
    return ALL_TIERS


# === Extraction ===

def extract_quoted_titles(text: str) -> list[str]:
    return [m.strip() for m in _QUOTED.findall(text) if m.strip()]


def extract_title_lines(text: str) -> list[str]:
    return [line.strip() for line in text.splitlines() if line.strip()]


def extract_recommended_urls(text: str) -> list[str]:
    """URLs from the reply, with tracking parameters removed.

    Shortened links are kept but logged, since their target cannot be
    checked against the newsletter.
    """
    urls: list[str] = []
    for url in extract_urls(text):
        cleaned = url_key(url)
        if is_shortened(cleaned):
            logger.warning("Shortened URL in AI response, cannot verify target | url=%s", cleaned)
        if cleaned not in urls:
            urls.append(cleaned)
    return urls


def extract_identifiers(text: str, mode: str) -> list[str]:
    """Pull raw identifiers out of the reply according to mode.

    Raises:
        ValueError: If mode is unknown
    """
    if mode == "url":
        return extract_recommended_urls(text)
    if mode == "title-quoted":
        return extract_quoted_titles(text)
    if mode == "title-line":
        return extract_title_lines(text)
    raise ValueError(f"Unknown match mode '{mode}' - must be one of {', '.join(MODES)}")


# === Results ===

@dataclass(frozen=True)
class ResolvedMatch:
    """One identifier and the candidate URL it resolved to."""

    identifier: str
    url: str
    tier: str


@dataclass
class MatchResult:
    """Outcome of resolving every identifier in an AI reply.

    Attributes:
        mode: Extraction mode used
        identifiers: Everything extracted, in reply order
        matches: Resolved identifiers, in reply order
        unresolved: Identifiers no tier could resolve, in reply order
    """

    mode: str
    identifiers: list[str] = field(default_factory=list)
    matches: list[ResolvedMatch] = field(default_factory=list)
    unresolved: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        """True when every extracted identifier resolved."""
        return not self.unresolved

    @property
    def urls(self) -> list[str]:
        """Resolved candidate URLs in first-seen order, without duplicates."""
        return list(dict.fromkeys(m.url for m in self.matches))

    def raise_for_incomplete(self) -> None:
        """Raise MatchIncompleteError unless every identifier resolved."""
        if self.unresolved:
            raise MatchIncompleteError(
                unresolved=self.unresolved,
                extracted_count=len(self.identifiers),
                matched_count=len(self.matches),
                mode=self.mode,
            )


def resolve_identifier(
    identifier: str,
    index: CandidateIndex,
    tiers: Iterable[tuple[str, Matcher]],
) -> ResolvedMatch | None:
    """Try each tier in order and return the first hit."""
    for tier_name, matcher in tiers:
        candidate = matcher(identifier, index)
        if candidate is not None:
            return ResolvedMatch(identifier=identifier, url=candidate.url, tier=tier_name)
    return None


def resolve(text: str, candidates: list[CandidateArticle], mode: str) -> MatchResult:
    """Resolve every identifier in the reply without raising on misses.

    Args:
        text: The AI assistant's full reply
        candidates: Articles offered to the assistant in the prompt
        mode: "url", "title-quoted" or "title-line"

    Returns:
        MatchResult with resolved and unresolved identifiers
    """
    identifiers = extract_identifiers(text, mode)
    index = CandidateIndex.by_url(candidates) if mode == "url" else CandidateIndex.by_title(candidates)
    tiers = tiers_for(mode)

    logger.info(
        "Matching AI response | mode=%s chars=%d identifiers=%d candidates=%d",
        mode, len(text), len(identifiers), len(index),
    )

    result = MatchResult(mode=mode, identifiers=identifiers)
    for identifier in identifiers:
        resolved = resolve_identifier(identifier, index, tiers)
        if resolved is None:
            logger.warning("No match | identifier=%s", identifier)
            result.unresolved.append(identifier)
            continue
        if resolved.tier != "exact":
            logger.info("Matched via %s | identifier=%s url=%s", resolved.tier, identifier, resolved.url)
        else:
            logger.debug("Matched via exact | identifier=%s", identifier)
        result.matches.append(resolved)

    logger.info(
        "Matching done | matched=%d unresolved=%d urls=%d",
        len(result.matches), len(result.unresolved), len(result.urls),
    )
    return result


def match(text: str, candidates: list[CandidateArticle], mode: str = "title-quoted") -> list[str]:
    """Resolve the reply to candidate URLs, all or nothing.

    Returns:
        Candidate URLs in the order the reply mentions them (empty when the
        reply contains no identifiers at all)

    Raises:
        MatchIncompleteError: If any extracted identifier matched no candidate
        ValueError: If mode is unknown

    Example:
        >>> match('"Getting Started with CSS Grid"', candidates, "title-quoted")
        ['https://css-tricks.com/getting-started-with-css-grid/']
    """
    result = resolve(text, candidates, mode)
    result.raise_for_incomplete()
    return result.urls
