"""Analysis: prompt quality metrics from AI coding session transcripts.

This package turns Claude Code session logs into prompt-level records and
summarizes how often prompts land on the first try.

Design Principles:
1. Streaming over loading - transcripts are read one line at a time
2. Tolerant parsing - a bad line never aborts a file
3. Heuristics, not understanding - regex classification only
4. Rebuilt every run - nothing is persisted between invocations
"""

from .aggregator import (
    calculate_metrics,
    find_correction_chains,
    identify_patterns,
    merge,
)
from .classifier import Classification, classify, is_acknowledgment, is_correction
from .conversation import analyze_conversation
from .insights import generate_insights
from .models import (
    CorpusResult,
    CorrectionChain,
    Insight,
    InsightSeverity,
    LogRecord,
    Metrics,
    PatternSet,
    Prompt,
    RecordKind,
    SessionAnalysis,
    SessionSummary,
    TokenUsage,
    TranscriptFile,
)
from .parsers import (
    default_projects_dir,
    extract_text,
    find_transcript_files,
    parse_line,
    read_transcript,
)

__all__ = [
    "Classification",
    "CorpusResult",
    "CorrectionChain",
    "Insight",
    "InsightSeverity",
    "LogRecord",
    "Metrics",
    "PatternSet",
    "Prompt",
    "RecordKind",
    "SessionAnalysis",
    "SessionSummary",
    "TokenUsage",
    "TranscriptFile",
    "analyze_conversation",
    "calculate_metrics",
    "classify",
    "default_projects_dir",
    "extract_text",
    "find_correction_chains",
    "find_transcript_files",
    "generate_insights",
    "identify_patterns",
    "is_acknowledgment",
    "is_correction",
    "merge",
    "parse_line",
    "read_transcript",
]
