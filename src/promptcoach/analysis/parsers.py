"""Transcript reading and discovery for Claude Code session logs.

Claude Code stores logs at ~/.claude/projects/{encoded-project-path}/{uuid}.jsonl.
Each line is a JSON object representing a message or event. Lines are read
one at a time so arbitrarily large transcripts never sit in memory.
"""

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime, timedelta
from pathlib import Path
from typing import TYPE_CHECKING, Any

from ..exceptions import DiscoveryError
from .models import LogRecord, RecordKind, TokenUsage, TranscriptFile

if TYPE_CHECKING:
    from collections.abc import Iterator

logger = logging.getLogger(__name__)

# Threshold for detecting millisecond timestamps (timestamps after year ~2001 in ms)
MILLISECOND_TIMESTAMP_THRESHOLD = 1e12

TRANSCRIPT_SUFFIX = ".jsonl"


def default_projects_dir() -> Path:
    """Location of Claude Code project transcripts for the current user."""
    return Path.home() / ".claude" / "projects"


def find_transcript_files(
    projects_dir: Path,
    days: int = 7,
    project: str | None = None,
    now: datetime | None = None,
) -> list[TranscriptFile]:
    """Discover transcript files modified within the analysis window.

    Args:
        projects_dir: Root directory holding one subdirectory per project
        days: Only keep files modified within the last N days
        project: Optional case-insensitive substring of the project directory name
        now: Reference time for the window, defaults to the current time

    Returns:
        Transcript files sorted by modification time, newest first

    Raises:
        DiscoveryError: If the directory structure exists but cannot be read
    """
    if not projects_dir.exists():
        logger.debug("Projects directory %s does not exist", projects_dir)
        return []

    cutoff = (now or datetime.now(tz=UTC)) - timedelta(days=days)
    needle = project.lower() if project else None
    files: list[TranscriptFile] = []

    try:
        project_dirs = sorted(p for p in projects_dir.iterdir() if p.is_dir())
        for project_dir in project_dirs:
            if needle and needle not in project_dir.name.lower():
                continue

            for entry in project_dir.iterdir():
                if not entry.is_file() or entry.suffix != TRANSCRIPT_SUFFIX:
                    continue

                mtime = datetime.fromtimestamp(entry.stat().st_mtime, tz=UTC)
                if mtime >= cutoff:
                    files.append(TranscriptFile(
                        path=entry,
                        project=project_dir.name,
                        session_id=entry.stem,
                        mtime=mtime,
                    ))
    except OSError as e:
        msg = f"Failed to read projects directory {projects_dir}: {e}"
        raise DiscoveryError(msg, details={"path": str(projects_dir)}) from e

    files.sort(key=lambda f: f.mtime, reverse=True)
    logger.debug("Discovered %d transcript files under %s", len(files), projects_dir)
    return files


def read_transcript(path: Path) -> Iterator[LogRecord]:
    """Stream log records from a JSONL transcript.

    Blank and malformed lines are skipped without interrupting the stream.

    Args:
        path: Path to .jsonl file

    Yields:
        LogRecord objects in file order
    """
    with path.open(encoding="utf-8", errors="replace") as f:
        for raw_line in f:
            line = raw_line.strip()
            if not line:
                continue

            record = parse_line(line)
            if record is not None:
                yield record


def parse_line(line: str) -> LogRecord | None:
    """Parse a single JSONL line into a LogRecord.

    Returns:
        LogRecord, or None if the line is not a JSON object
    """
    try:
        entry = json.loads(line)
    except (ValueError, RecursionError):
        return None

    if not isinstance(entry, dict):
        return None

    return _parse_entry(entry)


def _parse_entry(entry: dict[str, Any]) -> LogRecord:
    """Build a LogRecord from a decoded log entry."""
    entry_type = entry.get("type")
    if entry_type == RecordKind.USER.value:
        kind = RecordKind.USER
    elif entry_type == RecordKind.ASSISTANT.value:
        kind = RecordKind.ASSISTANT
    else:
        kind = RecordKind.OTHER

    message = entry.get("message")
    if not isinstance(message, dict):
        message = {}

    role = message.get("role")
    usage = message.get("usage")
    content = message.get("content")

    return LogRecord(
        kind=kind,
        role=role if isinstance(role, str) else None,
        content=content if isinstance(content, str | list) else None,
        usage=_parse_usage(usage) if isinstance(usage, dict) else None,
        timestamp=_parse_timestamp(entry.get("timestamp")),
        uuid=_optional_str(entry.get("uuid")),
        parent_uuid=_optional_str(entry.get("parentUuid")),
        session_id=_optional_str(entry.get("sessionId")),
        is_meta=bool(entry.get("isMeta", False)),
    )


def _parse_usage(usage: dict[str, Any]) -> TokenUsage:
    """Read token counters, treating absent or non-numeric values as zero."""
    return TokenUsage(
        input=_as_int(usage.get("input_tokens")),
        output=_as_int(usage.get("output_tokens")),
        cache_read=_as_int(usage.get("cache_read_input_tokens")),
        cache_creation=_as_int(usage.get("cache_creation_input_tokens")),
    )


def _as_int(value: object) -> int:
    if isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return 0


def _optional_str(value: object) -> str | None:
    return value if isinstance(value, str) else None


def _parse_timestamp(ts: object) -> datetime | None:
    """Parse timestamp from ISO strings or epoch numbers."""
    if isinstance(ts, bool) or ts is None:
        return None
    if isinstance(ts, float | int):
        if ts > MILLISECOND_TIMESTAMP_THRESHOLD:
            ts = ts / 1000
        try:
            return datetime.fromtimestamp(ts, tz=UTC)
        except (OverflowError, OSError, ValueError):
            return None
    if not isinstance(ts, str):
        return None
    try:
        parsed = datetime.fromisoformat(ts.replace("Z", "+00:00"))
    except ValueError:
        return None
    # Naive timestamps are taken as UTC so they compare with aware ones
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def extract_text(content: object) -> str:
    """Extract plain text from a message content field.

    Args:
        content: Either a string or a list of typed content blocks

    Returns:
        The string itself, the "text" blocks joined by newlines, or ""
    """
    if isinstance(content, str):
        return content

    if isinstance(content, list):
        texts: list[str] = []
        for block in content:
            if isinstance(block, dict) and block.get("type") == "text":
                text = block.get("text", "")
                texts.append(text if isinstance(text, str) else "")
        return "\n".join(texts)

    return ""
