"""Corpus aggregation over analyzed sessions.

Merges per-session prompts into one time-ordered corpus, then computes
metrics and structural patterns over the most recent prompts.
"""

from __future__ import annotations

import math
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from .models import CorpusResult, CorrectionChain, Metrics, PatternSet

if TYPE_CHECKING:
    from collections.abc import Iterable

    from .models import Prompt, SessionAnalysis

DEFAULT_PROMPT_LIMIT = 100

SHORT_PROMPT_CHARS = 20  # Below this, prompts likely lack context
LONG_PROMPT_CHARS = 2000  # Above this, prompts may over-explain
MAX_SHORT_EXAMPLES = 5
MAX_LONG_EXAMPLES = 5
MAX_TRIGGERED_EXAMPLES = 10
MIN_CHAIN_LENGTH = 2
CHAIN_TEXT_CHARS = 100

# Prompts without a timestamp sort after every dated prompt
_UNDATED = datetime.min.replace(tzinfo=UTC)


def round_half_up(value: float, digits: int = 0) -> float:
    """Round half away from zero for positive values, as reports expect."""
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def merge(
    sessions: Iterable[SessionAnalysis],
    limit: int = DEFAULT_PROMPT_LIMIT,
) -> CorpusResult:
    """Merge session prompts and compute corpus metrics.

    Args:
        sessions: Analyzed sessions, in any order
        limit: Maximum number of most recent prompts to keep

    Returns:
        CorpusResult with prompts newest first
    """
    all_prompts: list[Prompt] = []
    for session in sessions:
        all_prompts.extend(session.prompts)

    all_prompts.sort(key=lambda p: p.timestamp or _UNDATED, reverse=True)
    limited = all_prompts[:limit]

    return CorpusResult(
        prompts=limited,
        total_prompts=len(all_prompts),
        metrics=calculate_metrics(limited),
        patterns=identify_patterns(limited),
    )


def calculate_metrics(prompts: list[Prompt]) -> Metrics:
    """Compute corpus-wide metrics.

    The first-time success rate is the share of substantive prompts (neither
    correction nor acknowledgment) that were not followed by a correction.
    """
    if not prompts:
        return Metrics()

    substantive = [p for p in prompts if p.is_substantive]
    successful_first_tries = sum(1 for p in substantive if not p.followed_by_correction)
    success_rate = (
        successful_first_tries / len(substantive) * 100 if substantive else 0.0
    )

    avg_length = sum(p.char_count for p in prompts) / len(prompts)

    with_usage = [p.response_usage for p in prompts if p.response_usage is not None]
    avg_tokens = (
        sum(u.billed for u in with_usage) / len(with_usage) if with_usage else 0.0
    )

    return Metrics(
        total_prompts=len(prompts),
        correction_prompts=sum(1 for p in prompts if p.is_correction),
        acknowledgments=sum(1 for p in prompts if p.is_acknowledgment),
        prompts_followed_by_correction=sum(1 for p in prompts if p.followed_by_correction),
        first_time_success_rate=round_half_up(success_rate, 1),
        avg_prompt_length=int(round_half_up(avg_length)),
        avg_tokens_per_prompt=int(round_half_up(avg_tokens)),
    )


def find_correction_chains(prompts: list[Prompt]) -> list[CorrectionChain]:
    """Find maximal runs of consecutive correction prompts.

    Args:
        prompts: Prompts in the order to scan

    Returns:
        One chain per run of at least two corrections
    """
    chains: list[CorrectionChain] = []
    start = 0
    length = 0

    for index, prompt in enumerate(prompts):
        if prompt.is_correction:
            if length == 0:
                start = index
            length += 1
            continue
        if length >= MIN_CHAIN_LENGTH:
            chains.append(_make_chain(prompts, start, length))
        length = 0

    if length >= MIN_CHAIN_LENGTH:
        chains.append(_make_chain(prompts, start, length))

    return chains


def _make_chain(prompts: list[Prompt], start: int, length: int) -> CorrectionChain:
    members = prompts[start:start + length]
    return CorrectionChain(
        start_index=start,
        length=length,
        prompts=[p.text[:CHAIN_TEXT_CHARS] for p in members],
    )


def identify_patterns(prompts: list[Prompt]) -> PatternSet:
    """Detect structural patterns in the given prompt order."""
    very_short = [
        p for p in prompts
        if p.char_count < SHORT_PROMPT_CHARS and p.is_substantive
    ]
    very_long = [p for p in prompts if p.char_count > LONG_PROMPT_CHARS]
    triggered = [
        p for p in prompts
        if p.followed_by_correction and not p.is_correction
    ]

    return PatternSet(
        very_short_prompts=very_short[:MAX_SHORT_EXAMPLES],
        very_long_prompts=very_long[:MAX_LONG_EXAMPLES],
        correction_chains=find_correction_chains(prompts),
        triggered_correction_prompts=triggered[:MAX_TRIGGERED_EXAMPLES],
    )
