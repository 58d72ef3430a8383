"""Analysis pipeline and report assembly."""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path

from .analysis import (
    SessionAnalysis,
    SessionSummary,
    analyze_conversation,
    default_projects_dir,
    find_transcript_files,
    generate_insights,
    merge,
    read_transcript,
)
from .analysis.models import CorpusResult, Prompt, TokenUsage, TranscriptFile
from .models import (
    AnalyzerOptions,
    CorrectedPromptExample,
    PatternCounts,
    PromptReport,
    ReportExamples,
    ReportInsight,
    ReportMetrics,
    ReportSummary,
    SessionReport,
    ShortPromptExample,
    TokenTotals,
)

logger = logging.getLogger(__name__)

NO_DATA_MESSAGE = "No transcript files found"
EXAMPLE_TEXT_CHARS = 200
MAX_CORRECTED_EXAMPLES = 5
MAX_SESSION_SUMMARIES = 10


def analyze(
    options: AnalyzerOptions | None = None,
    projects_dir: Path | None = None,
    now: datetime | None = None,
) -> PromptReport:
    """Run the full pipeline over a transcript directory.

    Args:
        options: Analysis options, uses defaults if not provided
        projects_dir: Root holding one directory per project (defaults to ~/.claude/projects)
        now: Reference time for the day window

    Returns:
        The prompt report; flagged with no_data when no transcripts matched

    Raises:
        DiscoveryError: If the projects directory cannot be read
    """
    options = options or AnalyzerOptions()
    root = projects_dir or default_projects_dir()

    files = find_transcript_files(root, days=options.days, project=options.project, now=now)
    if not files:
        return empty_report(options, root)

    sessions: list[SessionAnalysis] = []
    summaries: list[SessionSummary] = []
    for transcript in files:
        session = _analyze_file(transcript)
        if session is None or not session.prompts:
            continue
        sessions.append(session)
        summaries.append(SessionSummary(
            session_id=transcript.session_id,
            project=transcript.project,
            date=transcript.mtime.date().isoformat(),
            prompt_count=len(session.prompts),
            correction_count=session.correction_count,
            token_usage=session.token_usage,
        ))

    corpus = merge(sessions, limit=options.limit)
    return build_report(options, root, corpus, summaries)


def _analyze_file(transcript: TranscriptFile) -> SessionAnalysis | None:
    """Analyze one transcript, skipping it if it cannot be read."""
    try:
        session = analyze_conversation(
            read_transcript(transcript.path),
            project=transcript.project,
        )
    except OSError as e:
        logger.warning("Skipping unreadable transcript %s: %s", transcript.path, e)
        return None

    logger.debug(
        "Parsed %s: %d prompts, %d corrections",
        transcript.path.name,
        len(session.prompts),
        session.correction_count,
    )
    return session


def empty_report(options: AnalyzerOptions, projects_dir: Path) -> PromptReport:
    """Report for a run that found no transcripts."""
    return PromptReport(
        summary=ReportSummary(
            analyzed_period=_period(options),
            projects_dir=str(projects_dir),
        ),
        no_data=True,
        error=NO_DATA_MESSAGE,
    )


def build_report(
    options: AnalyzerOptions,
    projects_dir: Path,
    corpus: CorpusResult,
    summaries: list[SessionSummary],
) -> PromptReport:
    """Assemble the serializable report from analysis results."""
    total_usage = TokenUsage()
    for summary in summaries:
        total_usage = total_usage + summary.token_usage

    metrics = corpus.metrics
    patterns = corpus.patterns

    return PromptReport(
        summary=ReportSummary(
            analyzed_period=_period(options),
            projects_dir=str(projects_dir),
            total_sessions=len(summaries),
            total_prompts=corpus.total_prompts,
            analyzed_prompts=len(corpus.prompts),
            token_usage=_totals(total_usage),
        ),
        metrics=ReportMetrics(
            total_prompts=metrics.total_prompts,
            correction_prompts=metrics.correction_prompts,
            acknowledgments=metrics.acknowledgments,
            prompts_followed_by_correction=metrics.prompts_followed_by_correction,
            first_time_success_rate=metrics.first_time_success_rate,
            avg_prompt_length=metrics.avg_prompt_length,
            avg_tokens_per_prompt=metrics.avg_tokens_per_prompt,
        ),
        patterns=PatternCounts(
            very_short_prompts_count=len(patterns.very_short_prompts),
            very_long_prompts_count=len(patterns.very_long_prompts),
            correction_chain_count=len(patterns.correction_chains),
            prompts_needing_correction_count=len(patterns.triggered_correction_prompts),
        ),
        insights=[
            ReportInsight(type=i.type.value, category=i.category, message=i.message)
            for i in generate_insights(metrics, patterns)
        ],
        examples=ReportExamples(
            recent_corrected_prompts=[
                CorrectedPromptExample(
                    timestamp=_isoformat(p),
                    text=_example_text(p.text, options.verbose),
                    char_count=p.char_count,
                    project=p.project,
                )
                for p in patterns.triggered_correction_prompts[:MAX_CORRECTED_EXAMPLES]
            ],
            very_short_prompts=[
                ShortPromptExample(text=p.text, timestamp=_isoformat(p))
                for p in patterns.very_short_prompts
            ],
        ),
        session_summaries=[
            SessionReport(
                session_id=s.session_id,
                project=s.project,
                date=s.date,
                prompt_count=s.prompt_count,
                correction_count=s.correction_count,
                token_usage=_totals(s.token_usage),
            )
            for s in summaries[:MAX_SESSION_SUMMARIES]
        ],
        no_data=False,
    )


def _period(options: AnalyzerOptions) -> str:
    return f"Last {options.days} days"


def _totals(usage: TokenUsage) -> TokenTotals:
    return TokenTotals(
        total_input=usage.input,
        total_output=usage.output,
        total_cache_read=usage.cache_read,
        total_cache_creation=usage.cache_creation,
    )


def _isoformat(prompt: Prompt) -> str | None:
    return prompt.timestamp.isoformat() if prompt.timestamp else None


def _example_text(text: str, verbose: bool) -> str:
    """Truncate example text unless full text was requested."""
    if verbose or len(text) <= EXAMPLE_TEXT_CHARS:
        return text
    return text[:EXAMPLE_TEXT_CHARS] + "..."
