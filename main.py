#!/usr/bin/env python3
"""reader-triage: weekly newsletter triage for Readwise Reader.

Turns the newsletters sitting in your Reader feed into a short, AI-picked
reading list sized to how much you actually read, with you reviewing the
list before anything is saved.

Commands:
    recommend     Build the recommendation prompt, match the AI reply and
                  import the chosen articles (default)
    analyze       Build a prompt asking an AI to describe your reading patterns
    debug-match   Run the response matcher against built-in fixtures
    status        Show the effective configuration

Examples:
    python main.py                              # Same as "recommend"
    python main.py recommend --mode url         # Ask for URLs instead of titles
    python main.py recommend --response-file reply.txt --yes
    python main.py analyze                      # Reading-pattern prompt
    python main.py debug-match -v

Environment:
    READWISE_READER_KEY: Required for analyze and recommend
    See config.py for all configuration options
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Callable

from config import Config, MATCH_MODES
from observability.logging import setup_logging

logger = logging.getLogger(__name__)

RESPONSE_TERMINATOR = "END"


def _stdin_response_reader(prompt_hint: str) -> Callable[[], str]:
    """Reader for the AI reply pasted into the terminal.

    Reading stops at a line containing only END, or at end of input.
    """

    def read() -> str:
        print(f"\n{prompt_hint}")
        print(f"Paste the AI's response below, then enter a line with just '{RESPONSE_TERMINATOR}' "
              "(or press Ctrl-D):")
        lines = []
        for line in sys.stdin:
            if line.strip() == RESPONSE_TERMINATOR:
                break
            lines.append(line.rstrip("\n"))
        return "\n".join(lines)

    return read


def _file_response_reader(path: Path) -> Callable[[], str]:
    def read() -> str:
        logger.info("Reading AI response from file | path=%s", path)
        return path.read_text(encoding="utf-8")

    return read


def cmd_analyze(args: argparse.Namespace, config: Config) -> int:
    """Generate the reading-pattern analysis prompt.

    Args:
        args: Parsed command line arguments
        config: Application configuration

    Returns:
        Exit code (0 for success)
    """
    from pipeline import analyze_reading

    stats = asyncio.run(analyze_reading(config))
    print(f"\nAnalysis prompt saved to {stats.prompt_path}")
    print(f"Based on {stats.well_read} well-read documents from the last {config.analyze_window.label}.")
    print("Paste it into your AI assistant. Saving the answer to READING_PROFILE_PATH "
          "improves future recommendations.")
    return 0


def cmd_recommend(args: argparse.Namespace, config: Config) -> int:
    """Run the recommend flow end to end.

    Args:
        args: Parsed command line arguments
        config: Application configuration

    Returns:
        Exit code (0 for success, 1 if any import failed)
    """
    from pipeline import recommend

    if args.response_file:
        read_response = _file_response_reader(Path(args.response_file).expanduser())
    else:
        read_response = _stdin_response_reader(
            "Recommendation prompt is ready: paste it into your AI assistant."
        )

    stats = asyncio.run(recommend(
        config,
        read_response=read_response,
        mode=args.mode,
        delay_ms=args.delay_ms,
        auto_confirm=args.yes,
        source_filter=args.source_filter,
    ))

    if stats.outcome == "no-candidates":
        print("\nNo newsletter articles found in your feed.")
        return 0
    if stats.outcome == "no-matches":
        print("\nNo titles or URLs found in the AI response.")
        print(f"The response was saved to {stats.debug_path} for debugging.")
        return 0
    if stats.outcome == "declined":
        print("\nNothing was saved.")
        return 0

    print(f"\nSaved {stats.imported} of {stats.imported + stats.failed} articles to Readwise Reader.")
    if stats.failed:
        print(f"{stats.failed} article(s) failed; see the log for details.", file=sys.stderr)
        return 1
    return 0


def cmd_debug_match(args: argparse.Namespace, config: Config) -> int:
    """Run the matcher over the built-in fixtures.

    Returns:
        Exit code (0 if every case passes)
    """
    from diagnostics import run_fixtures

    outcomes = run_fixtures()
    for outcome in outcomes:
        label = "PASS" if outcome.passed else "FAIL"
        print(f"[{label}] {outcome.case.name} ({outcome.case.mode}): {outcome.detail}")

    failed = sum(1 for o in outcomes if not o.passed)
    print(f"\n{len(outcomes) - failed}/{len(outcomes)} cases passed")
    return 1 if failed else 0


def cmd_status(args: argparse.Namespace, config: Config) -> int:
    """Display the effective configuration (token redacted).

    Returns:
        Exit code (0 for success)
    """
    status = {
        "config": {
            "reader_token": "***" if config.reader_token else "",
            "reader_base_url": config.reader_base_url,
            "reader_timeout_seconds": config.reader_timeout_seconds,
            "reader_max_pages": config.reader_max_pages,
            "progress_threshold": config.progress_threshold,
            "analyze_window": config.analyze_window.label,
            "recommend_window": config.recommend_window.label,
            "match_mode": config.match_mode,
            "newsletter_source": config.newsletter_source,
            "reading_profile_path": config.reading_profile_path,
            "rate_limit_ms": config.rate_limit_ms,
            "saved_using": config.saved_using,
            "import_location": config.import_location,
            "import_tags": config.import_tags,
            "output_dir": str(config.output_dir),
            "open_files": config.open_files,
            "enable_logfire": config.enable_logfire,
        },
        "logging": {
            "log_dir": str(config.log_dir),
            "log_level": config.log_level,
            "log_format": config.log_format,
        },
        "valid": config.validate() is None,
    }

    print(json.dumps(status, indent=2))
    return 0


def _add_recommend_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--mode",
        choices=MATCH_MODES,
        help="How the AI reply names its picks (default: config MATCH_MODE)",
    )
    parser.add_argument(
        "--response-file",
        help="Read the AI reply from this file instead of the terminal",
    )
    parser.add_argument(
        "--delay-ms",
        type=int,
        help="Pause between document creations (default: config RATE_LIMIT_MS)",
    )
    parser.add_argument(
        "--yes",
        action="store_true",
        help="Skip the review step and import the matched list directly",
    )
    parser.add_argument(
        "--source-filter",
        help="Only use newsletters whose title/author/site contains this text",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="reader-triage: AI-assisted newsletter triage for Readwise Reader",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    parser.set_defaults(mode=None, response_file=None,
                        delay_ms=None, yes=False, source_filter=None)

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    recommend_parser = subparsers.add_parser("recommend", help="Recommend and import articles (default)")
    _add_recommend_options(recommend_parser)

    subparsers.add_parser(
        "analyze",
        aliases=["analyze-reading"],
        help="Generate the reading-pattern analysis prompt",
    )
    subparsers.add_parser("debug-match", help="Check the response matcher against fixtures")
    subparsers.add_parser("status", help="Show configuration")

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point.

    Returns:
        Exit code
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.command is None:
        args.command = "recommend"
    if args.command == "analyze-reading":
        args.command = "analyze"

    try:
        config = Config.load()
    except ValueError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    setup_logging(config, verbose=args.verbose)

    if args.command in ("analyze", "recommend"):
        error = config.validate()
        if error:
            print(f"Configuration error: {error}", file=sys.stderr)
            return 1
        if args.delay_ms is not None and args.delay_ms < 0:
            print("Error: --delay-ms must be non-negative", file=sys.stderr)
            return 1
        if config.enable_logfire:
            from observability.tracing import setup_tracing
            setup_tracing(enabled=True, service_name="reader-triage", token=config.logfire_token)

    commands = {
        "recommend": cmd_recommend,
        "analyze": cmd_analyze,
        "debug-match": cmd_debug_match,
        "status": cmd_status,
    }

    try:
        return commands[args.command](args, config)
    except KeyboardInterrupt:
        logger.info("Stopped by user (Ctrl+C)")
        return 130  # Standard exit code for SIGINT
    except Exception as e:
        logger.error("Command failed | command=%s error=%s type=%s", args.command, e, type(e).__name__,
                     exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return 1


def entrypoint() -> None:
    sys.exit(main())


if __name__ == "__main__":
    entrypoint()
