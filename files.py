"""Hand-off files for the human in the loop.

Generated prompts are written to disk so they can be pasted into an AI
assistant, and AI replies that could not be matched are kept for
debugging. Nothing here is read back by the tool.

Filenames: <prefix>-<epoch milliseconds>.<extension>
"""

import logging
import subprocess
import sys
import time
from pathlib import Path

logger = logging.getLogger(__name__)


def _build_filename(prefix: str, extension: str) -> str:
    return f"{prefix}-{int(time.time() * 1000)}.{extension.lstrip('.')}"


def save_text_to_file(
    content: str,
    prefix: str = "file",
    directory: Path | None = None,
    extension: str = "txt",
) -> Path:
    """Save text to a timestamped file.

    Falls back to the current directory when the target directory cannot
    be written.

    Args:
        content: Text to write
        prefix: Filename prefix (e.g. "article-recommendation-prompt")
        directory: Target directory (default: ~/Downloads)
        extension: File extension without the dot

    Returns:
        Path of the written file

    Raises:
        OSError: If the current directory is not writable either
    """
    directory = directory or Path.home() / "Downloads"
    filename = _build_filename(prefix, extension)
    filepath = directory / filename

    try:
        directory.mkdir(parents=True, exist_ok=True)
        filepath.write_text(content, encoding="utf-8")
    except OSError as e:
        logger.warning("Cannot write to %s (%s), saving to current directory instead", directory, e)
        filepath = Path.cwd() / filename
        filepath.write_text(content, encoding="utf-8")

    logger.info("File saved | path=%s chars=%d", filepath, len(content))
    return filepath


def _open_command(path: Path) -> list[str] | None:
    if sys.platform == "darwin":
        return ["open", str(path)]
    if sys.platform == "win32":
        return ["cmd", "/c", "start", "", str(path)]
    if sys.platform.startswith("linux"):
        return ["xdg-open", str(path)]
    return None


def open_file(path: Path) -> bool:
    """Open a file with the operating system's default application.

    Failures are logged, never raised.

    Returns:
        True if the opener command was launched successfully
    """
    command = _open_command(path)
    if command is None:
        logger.info("No opener for platform %s, file is at %s", sys.platform, path)
        return False

    try:
        subprocess.run(
            command,
            check=True,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            timeout=10,
        )
        return True
    except (OSError, subprocess.SubprocessError) as e:
        logger.info("Could not open file automatically (%s), file is at %s", type(e).__name__, path)
        return False
