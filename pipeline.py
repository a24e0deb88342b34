"""Orchestration of the analyze and recommend flows.

Analyze flow:
    1. HISTORY: Fetch archived documents read past the progress threshold
       over ANALYZE_WINDOW (default 6 months)
    2. PROMPT: Build the reading-pattern analysis prompt
    3. SAVE: Write the prompt to OUTPUT_DIR and open it

Recommend flow:
    1. NEWSLETTERS: Fetch feed emails and extract candidate articles
    2. HISTORY: Fetch well-read documents over RECOMMEND_WINDOW (6 weeks)
    3. CAPACITY: Estimate how many articles to recommend
    4. PROMPT: Build the recommendation prompt, save it and open it
    5. RESPONSE: Read the assistant's reply (stdin or a file)
    6. MATCH: Resolve the reply to candidate URLs, all or nothing
    7. REVIEW: Let the user trim or correct the list and confirm
    8. IMPORT: Create one Reader document per URL, rate limited

The human steps (pasting the prompt into an assistant, reviewing the
list) are injected as callables so the whole flow runs under test with a
fake Reader client.
"""

import asyncio
import logging
import time
import uuid
from contextlib import asynccontextmanager
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, AsyncIterator, Callable

from capacity import estimate
from config import Config
from files import open_file, save_text_to_file
from history import fetch_well_read
from importer import import_all
from matching import resolve
from models.article import CandidateArticle
from newsletters import fetch_candidates
from observability.logging import clear_context, set_run_context
from observability.tracing import trace_operation
from prompts import build_reading_pattern_prompt, build_recommendation_prompt
from reader import ReaderClient
from review import review_recommendations

logger = logging.getLogger(__name__)

ANALYSIS_PROMPT_PREFIX = "reading-pattern-analysis-prompt"
RECOMMENDATION_PROMPT_PREFIX = "article-recommendation-prompt"
DEBUG_RESPONSE_PREFIX = "debug-ai-response"

ResponseReader = Callable[[], str]
Reviewer = Callable[[list[str], list[CandidateArticle]], list[str] | None]


@dataclass
class RunStats:
    """Statistics from a single analyze or recommend run.

    Attributes:
        command: "analyze" or "recommend"
        outcome: How the run ended (prompt-saved, no-candidates, no-matches,
            declined, imported)
        well_read: Documents read past the progress threshold
        candidates: Articles extracted from newsletters
        target_count: Recommended article count from the capacity estimate
        identifiers: Titles or URLs extracted from the AI reply
        matched: URLs resolved from the reply
        imported: Documents created in Reader
        failed: URLs whose creation failed
        prompt_path: Where the generated prompt was written
        debug_path: Where an unmatched AI reply was written
        duration: Total run time in seconds
    """

    command: str = ""
    outcome: str = ""
    well_read: int = 0
    candidates: int = 0
    target_count: int = 0
    identifiers: int = 0
    matched: int = 0
    imported: int = 0
    failed: int = 0
    prompt_path: str = ""
    debug_path: str = ""
    duration: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        d = asdict(self)
        d["duration"] = round(d["duration"], 2)
        return d


@asynccontextmanager
async def _reader(config: Config, client: Any = None) -> AsyncIterator[Any]:
    """Use the injected client, or open a ReaderClient for the block."""
    if client is not None:
        yield client
        return
    async with ReaderClient(config.reader_settings()) as reader:
        yield reader


def _start_run(command: str) -> str:
    run_id = uuid.uuid4().hex[:8]
    set_run_context(run_id, command=command)
    logger.info("Run started | command=%s run_id=%s", command, run_id)
    return run_id


def _write_and_open(config: Config, content: str, prefix: str) -> Path:
    path = save_text_to_file(content, prefix=prefix, directory=config.output_dir)
    if config.open_files:
        open_file(path)
    return path


def load_reading_profile(path: str) -> str:
    """Read the saved reading profile, or "" when unset or missing."""
    if not path:
        return ""
    profile = Path(path).expanduser()
    try:
        return profile.read_text(encoding="utf-8").strip()
    except FileNotFoundError:
        logger.warning("Reading profile not found, using generic preferences | path=%s", profile)
        return ""


async def analyze_reading(config: Config, client: Any = None) -> RunStats:
    """Generate the reading-pattern analysis prompt.

    Args:
        config: Application configuration
        client: Reader client to use instead of opening one (tests)

    Returns:
        RunStats with the prompt path

    Raises:
        ConfigurationError: If the Reader token is missing
        TransportError: If the Reader API rejects a request
        PaginationError: If the listing never terminates
    """
    _start_run("analyze")
    start = time.time()
    stats = RunStats(command="analyze")
    try:
        async with _reader(config, client) as reader:
            with trace_operation("fetch_history", {"window": config.analyze_window.label}) as span:
                documents = await fetch_well_read(
                    reader,
                    progress_threshold=config.progress_threshold,
                    window=config.analyze_window,
                    max_pages=config.reader_max_pages,
                )
                span["well_read"] = len(documents)
        stats.well_read = len(documents)

        if not documents:
            logger.warning("No well-read documents in window | window=%s", config.analyze_window.label)

        prompt = build_reading_pattern_prompt(documents, config.analyze_window.label)
        stats.prompt_path = str(_write_and_open(config, prompt, ANALYSIS_PROMPT_PREFIX))
        stats.outcome = "prompt-saved"
        return stats
    finally:
        stats.duration = time.time() - start
        logger.info("Run finished | %s", stats.to_dict())
        clear_context()


async def recommend(
    config: Config,
    read_response: ResponseReader,
    reviewer: Reviewer = review_recommendations,
    mode: str | None = None,
    delay_ms: int | None = None,
    auto_confirm: bool = False,
    source_filter: str | None = None,
    client: Any = None,
) -> RunStats:
    """Run the full recommend flow.

    Args:
        config: Application configuration
        read_response: Returns the AI assistant's reply once the prompt is out
            (blocking; run in a worker thread)
        reviewer: Interactive review; returns the final list or None to cancel
            (blocking; run in a worker thread)
        mode: Match mode override (default: config.match_mode)
        delay_ms: Import delay override (default: config.rate_limit_ms)
        auto_confirm: Skip the review and import the matched list as is
        source_filter: Newsletter filter override (default: config.newsletter_source)
        client: Reader client to use instead of opening one (tests)

    Returns:
        RunStats describing how far the run got

    Raises:
        MatchIncompleteError: If part of the reply matched no candidate
            (the reply is saved to a debug file first)
        TransportError: If the Reader API rejects a listing request
        PaginationError: If a listing never terminates
    """
    mode = mode or config.match_mode
    delay_ms = config.rate_limit_ms if delay_ms is None else delay_ms
    source_filter = config.newsletter_source if source_filter is None else source_filter

    _start_run("recommend")
    start = time.time()
    stats = RunStats(command="recommend")
    try:
        async with _reader(config, client) as reader:
            with trace_operation("fetch_newsletters", {"source_filter": source_filter}) as span:
                candidates = await fetch_candidates(
                    reader, source_filter=source_filter, max_pages=config.reader_max_pages,
                )
                span["candidates"] = len(candidates)
            stats.candidates = len(candidates)
            if not candidates:
                logger.warning("No newsletter articles found | source_filter=%s", source_filter or "-")
                stats.outcome = "no-candidates"
                return stats

            with trace_operation("fetch_history", {"window": config.recommend_window.label}) as span:
                well_read = await fetch_well_read(
                    reader,
                    progress_threshold=config.progress_threshold,
                    window=config.recommend_window,
                    max_pages=config.reader_max_pages,
                )
                span["well_read"] = len(well_read)
            stats.well_read = len(well_read)

        capacity = estimate(len(well_read), config.recommend_window.days())
        stats.target_count = capacity.recommended_article_count
        logger.info(
            "Capacity estimated | read_per_day=%.2f save_per_day=%.2f target=%d",
            capacity.reading_capacity_per_day,
            capacity.saving_capacity_per_day,
            capacity.recommended_article_count,
        )

        profile = load_reading_profile(config.reading_profile_path)
        prompt = build_recommendation_prompt(candidates, capacity, mode=mode, reading_profile=profile)
        stats.prompt_path = str(_write_and_open(config, prompt, RECOMMENDATION_PROMPT_PREFIX))

        response = await asyncio.to_thread(read_response)
        with trace_operation("match_response", {"mode": mode}) as span:
            result = resolve(response, candidates, mode)
            span["matched"] = len(result.matches)
            span["unresolved"] = len(result.unresolved)
        stats.identifiers = len(result.identifiers)
        stats.matched = len(result.urls)

        if not result.identifiers or not result.ok:
            debug_path = save_text_to_file(response, prefix=DEBUG_RESPONSE_PREFIX, directory=config.output_dir)
            stats.debug_path = str(debug_path)
            logger.warning("AI response saved for debugging | path=%s", debug_path)
            if not result.identifiers:
                stats.outcome = "no-matches"
                return stats
            result.raise_for_incomplete()

        urls = result.urls if auto_confirm else await asyncio.to_thread(reviewer, result.urls, candidates)
        if urls is None:
            logger.info("Import cancelled by user | matched=%d", stats.matched)
            stats.outcome = "declined"
            return stats

        async with _reader(config, client) as reader:
            with trace_operation("import_documents", {"count": len(urls)}) as span:
                imported = await import_all(
                    reader,
                    urls,
                    inter_request_delay_ms=delay_ms,
                    saved_using=config.saved_using,
                    location=config.import_location,
                    tags=config.import_tags,
                )
                span["created"] = imported.success_count
                span["failed"] = imported.fail_count
        stats.imported = imported.success_count
        stats.failed = imported.fail_count
        stats.outcome = "imported"
        return stats
    finally:
        stats.duration = time.time() - start
        logger.info("Run finished | %s", stats.to_dict())
        clear_context()
