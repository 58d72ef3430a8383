"""Configuration and report models for promptcoach.

The report is consumed by a separate presentation layer, so its shape is
fixed: camelCase keys, JSON-serializable values.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class AnalyzerOptions(BaseModel):
    """Options controlling a single analysis run."""

    model_config = ConfigDict(extra="forbid")

    days: int = Field(default=7, ge=1, description="Analyze transcripts from the last N days")
    limit: int = Field(default=100, ge=1, description="Keep only the N most recent prompts")
    verbose: bool = Field(default=False, description="Include full prompt text in examples")
    project: str | None = Field(
        default=None,
        description="Case-insensitive substring of the project directory name",
    )
    output: Path | None = Field(
        default=None,
        description="Write the report to this file instead of stdout",
    )

    @field_validator("project")
    @classmethod
    def blank_project_is_none(cls, v: str | None) -> str | None:
        """Treat an empty project filter as no filter."""
        if v is not None and not v.strip():
            return None
        return v


class ReportModel(BaseModel):
    """Base for report sections serialized with camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TokenTotals(ReportModel):
    """Summed token usage."""

    total_input: int = 0
    total_output: int = 0
    total_cache_read: int = 0
    total_cache_creation: int = 0


class ReportSummary(ReportModel):
    """Scope of the analysis."""

    analyzed_period: str
    projects_dir: str
    total_sessions: int = 0
    total_prompts: int = 0
    analyzed_prompts: int = 0
    token_usage: TokenTotals = Field(default_factory=TokenTotals)


class ReportMetrics(ReportModel):
    """Corpus-wide prompt metrics."""

    total_prompts: int = 0
    correction_prompts: int = 0
    acknowledgments: int = 0
    prompts_followed_by_correction: int = 0
    first_time_success_rate: float = 0.0
    avg_prompt_length: int = 0
    avg_tokens_per_prompt: int = 0


class PatternCounts(ReportModel):
    """Counts of detected structural patterns."""

    very_short_prompts_count: int = 0
    very_long_prompts_count: int = 0
    correction_chain_count: int = 0
    prompts_needing_correction_count: int = 0


class ReportInsight(ReportModel):
    """An advisory message."""

    type: str
    category: str
    message: str


class CorrectedPromptExample(ReportModel):
    """A prompt that was followed by a correction."""

    timestamp: str | None = None
    text: str
    char_count: int
    project: str | None = None


class ShortPromptExample(ReportModel):
    """A very short prompt."""

    text: str
    timestamp: str | None = None


class ReportExamples(ReportModel):
    """Illustrative prompts."""

    recent_corrected_prompts: list[CorrectedPromptExample] = Field(default_factory=list)
    very_short_prompts: list[ShortPromptExample] = Field(default_factory=list)


class SessionReport(ReportModel):
    """Per-session summary."""

    session_id: str
    project: str
    date: str
    prompt_count: int
    correction_count: int
    token_usage: TokenTotals = Field(default_factory=TokenTotals)


class PromptReport(ReportModel):
    """Complete prompt analysis report."""

    summary: ReportSummary
    metrics: ReportMetrics = Field(default_factory=ReportMetrics)
    patterns: PatternCounts = Field(default_factory=PatternCounts)
    insights: list[ReportInsight] = Field(default_factory=list)
    examples: ReportExamples = Field(default_factory=ReportExamples)
    session_summaries: list[SessionReport] = Field(default_factory=list)
    no_data: bool = False
    error: str | None = None

    def to_json(self, indent: int | None = 2) -> str:
        """Serialize with the camelCase keys consumers expect."""
        return self.model_dump_json(by_alias=True, indent=indent)

    @classmethod
    def from_json(cls, data: str) -> PromptReport:
        return cls.model_validate_json(data)
