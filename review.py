"""Interactive review of the recommendation list before import.

The reviewer can drop entries by number, replace an entry's URL, and
must confirm before anything is written to Reader. Edited URLs are not
checked against the newsletter candidates; a URL whose host never
appeared among the candidates is accepted with a warning.

The pure helpers (parse_removals, remove_indices, parse_edit, apply_edit,
unknown_hosts) carry the editing rules; review_recommendations wires
them to a prompt function so the flow can be driven from tests.
"""

import logging
import re
from typing import Callable

from models.article import CandidateArticle
from urls import host_of

logger = logging.getLogger(__name__)

Ask = Callable[[str], str]

_EDIT = re.compile(r"^\s*(\d+)\s*:\s*(.+?)\s*$")
_YES = ("y", "yes")


def parse_removals(text: str, count: int) -> set[int]:
    """Parse comma-separated 1-based positions into 0-based indices.

    Entries that are not numbers or fall outside 1..count are ignored.

    Example:
        >>> sorted(parse_removals("1, 3,x,9", 4))
        [0, 2]
    """
    indices = set()
    for part in text.split(","):
        part = part.strip()
        if not part.isdecimal():
            continue
        index = int(part) - 1
        if 0 <= index < count:
            indices.add(index)
    return indices


def remove_indices(urls: list[str], indices: set[int]) -> list[str]:
    """Return urls without the given 0-based positions."""
    return [url for i, url in enumerate(urls) if i not in indices]


def parse_edit(line: str) -> tuple[int, str] | None:
    """Parse "N:URL" into (0-based index, url); None if malformed."""
    match = _EDIT.match(line)
    if not match:
        return None
    return int(match.group(1)) - 1, match.group(2)


def apply_edit(urls: list[str], index: int, new_url: str) -> bool:
    """Replace urls[index] in place when the index and URL are valid."""
    if not 0 <= index < len(urls) or not new_url.startswith("http"):
        return False
    urls[index] = new_url
    return True


def unknown_hosts(urls: list[str], candidates: list[CandidateArticle]) -> list[str]:
    """URLs whose host does not appear among the candidate articles."""
    known = {host_of(c.url) for c in candidates}
    return [url for url in urls if host_of(url) not in known]


def format_list(urls: list[str], candidates: list[CandidateArticle] | None = None) -> str:
    """Numbered list of URLs, with candidate titles when known."""
    titles = {c.url: c.title for c in candidates or []}
    lines = []
    for i, url in enumerate(urls, 1):
        if candidates is not None:
            lines.append(f"{i}. {titles.get(url, 'Unknown title')}\n   {url}")
        else:
            lines.append(f"{i}. {url}")
    return "\n".join(lines)


def _edit_loop(urls: list[str], ask: Ask) -> None:
    print("\nFor each URL you'd like to modify, enter the number followed by the new URL")
    print("Format: [number]:[new URL], e.g. '2:https://correct-url.com'")
    print("Enter one modification per line. Press Enter when done:")
    while True:
        line = ask("> ")
        if not line.strip():
            return
        edit = parse_edit(line)
        if edit is None:
            print("Invalid format. Use [number]:[new URL]")
            continue
        index, new_url = edit
        if apply_edit(urls, index, new_url):
            print(f"Updated URL at position {index + 1}")
        else:
            print("Invalid index or URL format. Please try again.")


def review_recommendations(
    urls: list[str],
    candidates: list[CandidateArticle],
    ask: Ask = input,
) -> list[str] | None:
    """Let the user trim and correct the list, then confirm the import.

    Args:
        urls: Matched recommendation URLs
        candidates: Newsletter candidates (for titles and host checks)
        ask: Prompt function returning the user's answer

    Returns:
        Final URL list, or None if the user declined to save
    """
    print("\nURLs to be saved:")
    print(format_list(urls, candidates))

    final = list(urls)
    answer = ask("\nDo you want to edit the URL list before saving? (y/n): ")
    if answer.strip().lower() in _YES:
        removals = ask(
            "\nEnter the numbers of URLs to remove (comma-separated, e.g. '1,3,5'), "
            "or press Enter to keep all:\n> "
        )
        if removals.strip():
            final = remove_indices(final, parse_removals(removals, len(final)))
            print("\nUpdated URL list:")
            print(format_list(final))

        _edit_loop(final, ask)

        for url in unknown_hosts(final, candidates):
            logger.warning("Edited URL points outside the newsletter candidates | url=%s", url)
            print(f"Warning: {url} does not come from any newsletter article")

        print("\nFinal URL list:")
        print(format_list(final))

    if not final:
        print("\nNothing left to save.")
        return None

    answer = ask("\nDo you want to save these URLs to Readwise Reader? (y/n): ")
    if answer.strip().lower() not in _YES:
        return None
    return final
