"""Configuration management for the reader triage tool.

All settings are loaded from environment variables with sensible defaults.

Environment Variables:
    Required:
        READWISE_READER_KEY: Readwise access token (sent as "Token <key>")

    Reader API:
        READER_BASE_URL: API root (default: https://readwise.io/api/v3)
        READER_TIMEOUT_SECONDS: Per-request timeout
        READER_MAX_PAGES: Safety cap on pages followed per listing

    History:
        PROGRESS_THRESHOLD: Reading progress above which a document counts as well read
        ANALYZE_WINDOW: Lookback for the analyze command (e.g. "6 months")
        RECOMMEND_WINDOW: Lookback for capacity estimation (e.g. "6 weeks")

    Recommendations:
        MATCH_MODE: How the AI reply is parsed ('title-quoted', 'title-line', 'url')
        NEWSLETTER_SOURCE: Only use feed emails whose title/author/site contains this
        READING_PROFILE_PATH: Text file with the reader profile pasted into prompts

    Import:
        RATE_LIMIT_MS: Delay between document creations (0 disables)
        SAVED_USING: Provenance marker written onto created documents
        IMPORT_LOCATION: Reader location for created documents
        IMPORT_TAGS: Comma-separated tags for created documents

    Output:
        OUTPUT_DIR: Directory for prompt and debug files (default: ~/Downloads)
        OPEN_FILES: Open generated prompt files with the OS default app

    Logging:
        LOG_DIR, LOG_LEVEL, LOG_FORMAT, LOG_BACKUP_COUNT, LOG_MAX_BYTES

    Optional Features:
        ENABLE_LOGFIRE: Enable Logfire/OpenTelemetry tracing
        LOGFIRE_TOKEN: Logfire authentication token
"""

import os
from dataclasses import dataclass, field
from pathlib import Path

from models.capacity import HistoryWindow

DEFAULT_BASE_URL = "https://readwise.io/api/v3"
MATCH_MODES = ("title-quoted", "title-line", "url")


class ConfigurationError(Exception):
    """Raised when required settings are missing or invalid.

    Always raised before any network call is made.
    """
    pass


def _env(key: str, default: str = "") -> str:
    """Get string environment variable with optional default.

    Args:
        key: Environment variable name
        default: Value to return if not set

    Returns:
        Environment variable value or default
    """
    return os.environ.get(key, default)


def _env_int(key: str, default: int) -> int:
    """Get integer environment variable with default.

    Raises:
        ValueError: If value is set but cannot be parsed as integer
    """
    val = os.environ.get(key)
    if not val:
        return default
    try:
        return int(val)
    except ValueError:
        raise ValueError(f"Invalid integer value for {key}: '{val}'")


def _env_float(key: str, default: float) -> float:
    """Get float environment variable with default.

    Raises:
        ValueError: If value is set but cannot be parsed as float
    """
    val = os.environ.get(key)
    if not val:
        return default
    try:
        return float(val)
    except ValueError:
        raise ValueError(f"Invalid float value for {key}: '{val}'")


def _env_bool(key: str, default: bool = False) -> bool:
    """Get boolean environment variable with default.

    Recognizes truthy values: '1', 'true', 'yes', 'on'
    Recognizes falsy values: '0', 'false', 'no', 'off'
    """
    val = os.environ.get(key, "").lower()
    if val in ("1", "true", "yes", "on"):
        return True
    if val in ("0", "false", "no", "off"):
        return False
    return default


def _env_window(key: str, default: str) -> HistoryWindow:
    """Get a lookback window such as "6 weeks" from the environment.

    Raises:
        ValueError: If the value is not "<amount> <unit>"
    """
    val = os.environ.get(key) or default
    try:
        return HistoryWindow.parse(val)
    except ValueError as e:
        raise ValueError(f"Invalid window value for {key}: '{val}' ({e})")


def _env_list(key: str) -> list[str]:
    """Get comma-separated list environment variable (empty items dropped)."""
    return [item.strip() for item in os.environ.get(key, "").split(",") if item.strip()]


@dataclass(frozen=True)
class ReaderSettings:
    """Immutable connection settings for the Reader API client.

    Built once from Config and injected into every component that talks
    to the remote service.
    """

    token: str
    base_url: str = DEFAULT_BASE_URL
    timeout_seconds: float = 30.0

    def __post_init__(self) -> None:
        if not self.token:
            raise ConfigurationError("READWISE_READER_KEY environment variable is required")
        if self.timeout_seconds <= 0:
            raise ConfigurationError("READER_TIMEOUT_SECONDS must be positive")

    def __repr__(self) -> str:
        return (
            f"ReaderSettings(token='***', base_url='{self.base_url}', "
            f"timeout_seconds={self.timeout_seconds})"
        )


@dataclass
class Config:
    """Application configuration loaded from environment variables.

    Example:
        >>> config = Config.load()
        >>> if error := config.validate():
        ...     print(f"Config error: {error}")
    """

    # === Required ===
    reader_token: str = ""  # READWISE_READER_KEY

    # === Reader API ===
    reader_base_url: str = DEFAULT_BASE_URL  # READER_BASE_URL
    reader_timeout_seconds: float = 30.0  # READER_TIMEOUT_SECONDS
    reader_max_pages: int = 200  # READER_MAX_PAGES - Guard against cursors that never end

    # === History ===
    progress_threshold: float = 0.75  # PROGRESS_THRESHOLD - Strictly above counts as well read
    analyze_window: HistoryWindow = field(default_factory=lambda: HistoryWindow(amount=6, unit="months"))
    recommend_window: HistoryWindow = field(default_factory=lambda: HistoryWindow(amount=6, unit="weeks"))

    # === Recommendations ===
    match_mode: str = "title-quoted"  # MATCH_MODE
    newsletter_source: str = ""  # NEWSLETTER_SOURCE - Empty = every feed email
    reading_profile_path: str = ""  # READING_PROFILE_PATH

    # === Import ===
    rate_limit_ms: int = 1500  # RATE_LIMIT_MS - 0 disables throttling
    saved_using: str = "AI Recommender"  # SAVED_USING - Provenance marker
    import_location: str = "new"  # IMPORT_LOCATION
    import_tags: list[str] = field(default_factory=list)  # IMPORT_TAGS

    # === Output ===
    output_dir: Path = field(default_factory=lambda: Path.home() / "Downloads")  # OUTPUT_DIR
    open_files: bool = True  # OPEN_FILES

    # === Logging Configuration ===
    log_dir: Path = field(default_factory=lambda: Path("log"))  # LOG_DIR
    log_level: str = "INFO"  # LOG_LEVEL - DEBUG, INFO, WARNING, ERROR
    log_backup_count: int = 30  # LOG_BACKUP_COUNT
    log_max_bytes: int = 0  # LOG_MAX_BYTES - Max file size (0 = time-based rotation)
    log_format: str = "text"  # LOG_FORMAT - 'text' or 'json'

    # === Optional: Observability ===
    # Requires: pip install logfire
    enable_logfire: bool = False  # ENABLE_LOGFIRE
    logfire_token: str = ""  # LOGFIRE_TOKEN

    @classmethod
    def load(cls) -> "Config":
        """Load configuration from environment variables."""
        output_dir = _env("OUTPUT_DIR")
        return cls(
            reader_token=_env("READWISE_READER_KEY").strip(),
            reader_base_url=_env("READER_BASE_URL", DEFAULT_BASE_URL).rstrip("/"),
            reader_timeout_seconds=_env_float("READER_TIMEOUT_SECONDS", 30.0),
            reader_max_pages=_env_int("READER_MAX_PAGES", 200),
            progress_threshold=_env_float("PROGRESS_THRESHOLD", 0.75),
            analyze_window=_env_window("ANALYZE_WINDOW", "6 months"),
            recommend_window=_env_window("RECOMMEND_WINDOW", "6 weeks"),
            match_mode=_env("MATCH_MODE", "title-quoted").lower(),
            newsletter_source=_env("NEWSLETTER_SOURCE"),
            reading_profile_path=_env("READING_PROFILE_PATH"),
            rate_limit_ms=_env_int("RATE_LIMIT_MS", 1500),
            saved_using=_env("SAVED_USING", "AI Recommender"),
            import_location=_env("IMPORT_LOCATION", "new"),
            import_tags=_env_list("IMPORT_TAGS"),
            output_dir=Path(output_dir).expanduser() if output_dir else Path.home() / "Downloads",
            open_files=_env_bool("OPEN_FILES", True),
            log_dir=Path(_env("LOG_DIR", "log")),
            log_level=_env("LOG_LEVEL", "INFO").upper(),
            log_backup_count=_env_int("LOG_BACKUP_COUNT", 30),
            log_max_bytes=_env_int("LOG_MAX_BYTES", 0),
            log_format=_env("LOG_FORMAT", "text").lower(),
            enable_logfire=_env_bool("ENABLE_LOGFIRE", False),
            logfire_token=_env("LOGFIRE_TOKEN"),
        )

    def validate(self) -> str | None:
        """Validate configuration for required fields and valid values.

        Returns:
            Error message string if invalid, None if valid.
        """
        if not self.reader_token:
            return "READWISE_READER_KEY environment variable is required"
        if not self.reader_base_url.startswith(("http://", "https://")):
            return f"Invalid READER_BASE_URL '{self.reader_base_url}' - must be an http(s) URL"
        if self.reader_timeout_seconds <= 0:
            return "READER_TIMEOUT_SECONDS must be positive"
        if self.reader_max_pages <= 0:
            return "READER_MAX_PAGES must be positive"
        if not 0.0 <= self.progress_threshold < 1.0:
            return "PROGRESS_THRESHOLD must be in [0.0, 1.0)"
        if self.match_mode not in MATCH_MODES:
            return f"Invalid MATCH_MODE '{self.match_mode}' - must be one of {', '.join(MATCH_MODES)}"
        if self.rate_limit_ms < 0:
            return "RATE_LIMIT_MS must be non-negative"
        if not self.saved_using:
            return "SAVED_USING must not be empty"
        if self.import_location not in ("new", "later", "archive", "feed"):
            return f"Invalid IMPORT_LOCATION '{self.import_location}' - must be new, later, archive or feed"
        if self.log_level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            return f"Invalid LOG_LEVEL '{self.log_level}' - must be DEBUG, INFO, WARNING, ERROR, or CRITICAL"
        if self.log_format not in ("text", "json"):
            return f"Invalid LOG_FORMAT '{self.log_format}' - must be 'text' or 'json'"
        if self.log_backup_count < 0:
            return "LOG_BACKUP_COUNT must be non-negative"
        if self.log_max_bytes < 0:
            return "LOG_MAX_BYTES must be non-negative"
        return None

    def reader_settings(self) -> ReaderSettings:
        """Build the immutable client settings.

        Raises:
            ConfigurationError: If the token is missing or settings are invalid
        """
        if error := self.validate():
            raise ConfigurationError(error)
        return ReaderSettings(
            token=self.reader_token,
            base_url=self.reader_base_url,
            timeout_seconds=self.reader_timeout_seconds,
        )
