"""
Debug trace of transcripts and highlight position changes.

Writes logs/alignment.log so a misbehaving session can be compared against
the transcript that produced it. Logging is disabled by default. Call
enable() to turn it on.
"""

from datetime import datetime
from pathlib import Path

# Log files location (in project root)
LOG_DIR: Path = Path(__file__).parent.parent.parent / "logs"
ALIGNMENT_LOG: Path = LOG_DIR / "alignment.log"

# Global flag to control whether debug logging is enabled
_ENABLED: bool = False  # pylint: disable=invalid-name


def enable() -> None:
    """Enable debug logging."""
    global _ENABLED  # pylint: disable=global-statement
    _ENABLED = True


def disable() -> None:
    """Disable debug logging."""
    global _ENABLED  # pylint: disable=global-statement
    _ENABLED = False


def is_enabled() -> bool:
    """Check if debug logging is enabled."""
    return _ENABLED


def _ensure_log_dir() -> None:
    """Create log directory if it doesn't exist."""
    LOG_DIR.mkdir(exist_ok=True)


def _timestamp() -> str:
    """Get current timestamp."""
    return datetime.now().strftime("%H:%M:%S.%f")[:-3]


def clear_logs() -> None:
    """Truncate the log file for a fresh session."""
    if not _ENABLED:
        return
    _ensure_log_dir()
    with open(ALIGNMENT_LOG, 'w', encoding='utf-8') as f:
        f.write(
            f"=== New session started at {datetime.now().isoformat()} ===\n\n")


def log_transcript(generation: int, transcript: str, stale: bool = False) -> None:
    """
    Log a transcript update as it arrives.

    Args:
        generation: Session generation the update was tagged with
        transcript: The full transcript text
        stale: True if the update was discarded as belonging to an old pass
    """
    if not _ENABLED:
        return
    _ensure_log_dir()
    marker: str = " (stale)" if stale else ""
    with open(ALIGNMENT_LOG, 'a', encoding='utf-8') as f:
        f.write(
            f"[{_timestamp()}] gen={generation:3d}{marker} transcript: \"{transcript[-60:]}\"\n")


def log_position_update(
    old_pos: int,
    new_pos: int,
    char_result: int,
    word_result: int,
    reason: str
) -> None:
    """
    Log a change of the recognized position.

    Args:
        old_pos: Previous recognized offset
        new_pos: New recognized offset
        char_result: Characters matched by the character aligner
        word_result: Characters matched by the word aligner
        reason: Why the position changed (match, jump, resume)
    """
    if not _ENABLED:
        return
    _ensure_log_dir()
    with open(ALIGNMENT_LOG, 'a', encoding='utf-8') as f:
        f.write(
            f"[{_timestamp()}] POSITION CHANGE: {old_pos} -> {new_pos} ({reason})\n")
        f.write(f"                 char={char_result} word={word_result}\n")
