"""Tests for promptcoach options and report models."""

import json
from pathlib import Path

import pytest
from pydantic import ValidationError

from promptcoach.models import (
    AnalyzerOptions,
    CorrectedPromptExample,
    PromptReport,
    ReportInsight,
    ReportMetrics,
    ReportSummary,
    SessionReport,
    TokenTotals,
)


class TestAnalyzerOptions:
    """Test AnalyzerOptions validation."""

    def test_defaults(self) -> None:
        """Test documented defaults."""
        options = AnalyzerOptions()
        assert options.days == 7
        assert options.limit == 100
        assert options.verbose is False
        assert options.project is None
        assert options.output is None

    def test_output_coerced_to_path(self) -> None:
        """Test that output strings become paths."""
        options = AnalyzerOptions(output="report.json")
        assert options.output == Path("report.json")

    @pytest.mark.parametrize("field", ["days", "limit"])
    def test_non_positive_rejected(self, field: str) -> None:
        """Test that windows and limits must be positive."""
        with pytest.raises(ValidationError):
            AnalyzerOptions(**{field: 0})

    def test_unknown_option_rejected(self) -> None:
        """Test that typos in option names are caught."""
        with pytest.raises(ValidationError):
            AnalyzerOptions(dayz=3)

    def test_blank_project_is_no_filter(self) -> None:
        """Test that an empty project filter is dropped."""
        assert AnalyzerOptions(project="  ").project is None


class TestPromptReport:
    """Test PromptReport serialization."""

    @pytest.fixture
    def report(self) -> PromptReport:
        """Create a populated report."""
        return PromptReport(
            summary=ReportSummary(
                analyzed_period="Last 7 days",
                projects_dir="/tmp/projects",
                total_sessions=1,
                total_prompts=3,
                analyzed_prompts=3,
                token_usage=TokenTotals(total_input=10, total_output=20),
            ),
            metrics=ReportMetrics(
                total_prompts=3,
                correction_prompts=1,
                first_time_success_rate=66.7,
                avg_prompt_length=42,
            ),
            insights=[ReportInsight(type="info", category="effectiveness", message="Room")],
            session_summaries=[SessionReport(
                session_id="abc",
                project="-home-dev-app",
                date="2025-06-01",
                prompt_count=3,
                correction_count=1,
            )],
        )

    def test_camel_case_keys(self, report: PromptReport) -> None:
        """Test that serialized keys use camelCase."""
        data = json.loads(report.to_json())
        assert data["summary"]["analyzedPeriod"] == "Last 7 days"
        assert data["summary"]["tokenUsage"]["totalInput"] == 10
        assert data["metrics"]["firstTimeSuccessRate"] == 66.7
        assert data["patterns"]["correctionChainCount"] == 0
        assert data["examples"]["recentCorrectedPrompts"] == []
        assert data["sessionSummaries"][0]["sessionId"] == "abc"
        assert data["noData"] is False

    def test_round_trip(self, report: PromptReport) -> None:
        """Test that serializing then parsing yields an equal report."""
        assert PromptReport.from_json(report.to_json()) == report

    def test_populate_by_field_name(self) -> None:
        """Test that models accept snake_case names as well as aliases."""
        example = CorrectedPromptExample(text="x", char_count=1)
        aliased = CorrectedPromptExample.model_validate({"text": "x", "charCount": 1})
        assert example == aliased
