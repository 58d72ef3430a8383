"""Conversation analysis for a single transcript.

Rebuilds the sequence of user prompts in a session, links each one to the
token usage of the response it triggered, and flags prompts whose next prompt
was a correction.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from .classifier import classify
from .models import Prompt, RecordKind, SessionAnalysis, TokenUsage
from .parsers import extract_text

if TYPE_CHECKING:
    from collections.abc import Iterable

    from .models import LogRecord


def is_user_prompt(record: LogRecord) -> bool:
    """Check if a record is a user-authored message (not meta, not a tool result)."""
    return (
        record.kind == RecordKind.USER
        and record.role == "user"
        and not record.is_meta
    )


def analyze_conversation(
    records: Iterable[LogRecord],
    project: str | None = None,
) -> SessionAnalysis:
    """Analyze the ordered records of one session.

    Args:
        records: Log records in transcript order
        project: Project label attached to every prompt

    Returns:
        SessionAnalysis with prompts in session order and total token usage
    """
    prompts: list[Prompt] = []
    total = TokenUsage()

    for record in records:
        if is_user_prompt(record):
            text = extract_text(record.content)
            if not text:
                continue

            flags = classify(text)
            # A correction marks the prompt right before it in this session
            if flags.is_correction and prompts:
                prompts[-1].followed_by_correction = True

            prompts.append(Prompt(
                text=text,
                timestamp=record.timestamp,
                is_correction=flags.is_correction,
                is_acknowledgment=flags.is_acknowledgment,
                uuid=record.uuid,
                parent_uuid=record.parent_uuid,
                session_id=record.session_id,
                project=project,
            ))

        elif record.kind == RecordKind.ASSISTANT and record.usage is not None:
            total = total + record.usage
            if prompts:
                # Only the latest response is kept per prompt
                prompts[-1].response_usage = TokenUsage(
                    input=record.usage.input,
                    output=record.usage.output,
                    cache_read=record.usage.cache_read,
                    cache_creation=record.usage.cache_creation,
                )

    return SessionAnalysis(prompts=prompts, token_usage=total, turn_count=len(prompts))
