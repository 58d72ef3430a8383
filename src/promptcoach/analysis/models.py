"""Data models for transcript analysis.

Pure Python dataclasses for representing parsed log records, derived prompts,
and the corpus-wide metrics computed from them. No external dependencies.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any


class RecordKind(str, Enum):
    """Kind of a transcript log record."""

    USER = "user"
    ASSISTANT = "assistant"
    OTHER = "other"


class InsightSeverity(str, Enum):
    """Severity tag attached to an insight."""

    WARNING = "warning"
    INFO = "info"
    SUCCESS = "success"


@dataclass
class TokenUsage:
    """Token counters reported with an assistant response."""

    input: int = 0
    output: int = 0
    cache_read: int = 0
    cache_creation: int = 0

    def __add__(self, other: TokenUsage) -> TokenUsage:
        return TokenUsage(
            input=self.input + other.input,
            output=self.output + other.output,
            cache_read=self.cache_read + other.cache_read,
            cache_creation=self.cache_creation + other.cache_creation,
        )

    @property
    def billed(self) -> int:
        """Input plus output tokens, ignoring cache traffic."""
        return self.input + self.output


@dataclass
class LogRecord:
    """One parsed line of a transcript file."""

    kind: RecordKind
    role: str | None = None
    content: str | list[Any] | None = None
    usage: TokenUsage | None = None
    timestamp: datetime | None = None
    uuid: str | None = None
    parent_uuid: str | None = None
    session_id: str | None = None
    is_meta: bool = False


@dataclass
class Prompt:
    """A user-authored message reconstructed from a transcript."""

    text: str
    timestamp: datetime | None = None
    is_correction: bool = False
    is_acknowledgment: bool = False
    uuid: str | None = None
    parent_uuid: str | None = None
    session_id: str | None = None
    project: str | None = None
    followed_by_correction: bool = False
    response_usage: TokenUsage | None = None

    @property
    def char_count(self) -> int:
        return len(self.text)

    @property
    def estimated_tokens(self) -> int:
        """Rough token estimate at four characters per token."""
        return math.ceil(len(self.text) / 4)

    @property
    def is_substantive(self) -> bool:
        """Prompts that are neither corrections nor acknowledgments."""
        return not self.is_correction and not self.is_acknowledgment


@dataclass
class SessionAnalysis:
    """Result of analyzing the records of a single session."""

    prompts: list[Prompt] = field(default_factory=list)
    token_usage: TokenUsage = field(default_factory=TokenUsage)
    turn_count: int = 0

    @property
    def correction_count(self) -> int:
        return sum(1 for p in self.prompts if p.is_correction)


@dataclass
class SessionSummary:
    """Aggregate view of one transcript file."""

    session_id: str
    project: str
    date: str
    prompt_count: int
    correction_count: int
    token_usage: TokenUsage


@dataclass
class Metrics:
    """Corpus-wide prompt quality metrics."""

    total_prompts: int = 0
    correction_prompts: int = 0
    acknowledgments: int = 0
    prompts_followed_by_correction: int = 0
    first_time_success_rate: float = 0.0
    avg_prompt_length: int = 0
    avg_tokens_per_prompt: int = 0


@dataclass
class CorrectionChain:
    """A run of consecutive correction prompts."""

    start_index: int
    length: int
    prompts: list[str] = field(default_factory=list)  # Truncated member texts


@dataclass
class PatternSet:
    """Structural findings over the analyzed prompts."""

    very_short_prompts: list[Prompt] = field(default_factory=list)
    very_long_prompts: list[Prompt] = field(default_factory=list)
    correction_chains: list[CorrectionChain] = field(default_factory=list)
    triggered_correction_prompts: list[Prompt] = field(default_factory=list)


@dataclass
class Insight:
    """A human-readable advisory derived from metrics and patterns."""

    type: InsightSeverity
    category: str  # e.g., "effectiveness", "specificity", "cost"
    message: str

    def __post_init__(self) -> None:
        """Ensure type is InsightSeverity enum."""
        if isinstance(self.type, str):
            self.type = InsightSeverity(self.type)


@dataclass
class CorpusResult:
    """Merged, time-ordered prompts together with their metrics and patterns."""

    prompts: list[Prompt]
    total_prompts: int
    metrics: Metrics
    patterns: PatternSet


@dataclass
class TranscriptFile:
    """A transcript file selected for analysis."""

    path: Path
    project: str
    session_id: str
    mtime: datetime
