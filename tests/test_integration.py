"""End-to-end tests for transcript discovery and the analysis pipeline."""

from __future__ import annotations

import json
import logging
import os
from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest

from promptcoach import AnalyzerOptions, PromptReport, analyze
from promptcoach import report as report_module
from promptcoach.analysis import find_transcript_files
from promptcoach.exceptions import DiscoveryError

NOW = datetime(2025, 6, 10, 12, 0, tzinfo=UTC)


def _user_line(text: str, timestamp: datetime, session_id: str = "s") -> str:
    return json.dumps({
        "type": "user",
        "message": {"role": "user", "content": text},
        "timestamp": timestamp.isoformat().replace("+00:00", "Z"),
        "uuid": f"{session_id}-{timestamp.timestamp():.0f}",
        "sessionId": session_id,
    })


def _assistant_line(input_tokens: int, output_tokens: int) -> str:
    return json.dumps({
        "type": "assistant",
        "message": {
            "role": "assistant",
            "content": [{"type": "text", "text": "Done."}],
            "usage": {
                "input_tokens": input_tokens,
                "output_tokens": output_tokens,
                "cache_read_input_tokens": 7,
            },
        },
    })


def _write_transcript(
    root: Path,
    project: str,
    session_id: str,
    lines: list[str],
    age: timedelta = timedelta(hours=1),
) -> Path:
    project_dir = root / project
    project_dir.mkdir(parents=True, exist_ok=True)
    path = project_dir / f"{session_id}.jsonl"
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    mtime = (NOW - age).timestamp()
    os.utime(path, (mtime, mtime))
    return path


class TestDiscovery:
    """Test transcript file discovery."""

    def test_missing_root(self, tmp_path: Path) -> None:
        """Test that a missing root yields no files."""
        assert find_transcript_files(tmp_path / "missing", now=NOW) == []

    def test_window_and_suffix(self, tmp_path: Path) -> None:
        """Test that only recent .jsonl files are selected, newest first."""
        _write_transcript(tmp_path, "-home-dev-api", "old", ["{}"], age=timedelta(days=8))
        _write_transcript(tmp_path, "-home-dev-api", "recent", ["{}"], age=timedelta(days=2))
        _write_transcript(tmp_path, "-home-dev-web", "newest", ["{}"], age=timedelta(hours=1))
        (tmp_path / "-home-dev-api" / "notes.txt").write_text("not a log")
        (tmp_path / "stray.jsonl").write_text("{}")

        files = find_transcript_files(tmp_path, days=7, now=NOW)
        assert [f.session_id for f in files] == ["newest", "recent"]
        assert files[0].project == "-home-dev-web"

    def test_project_filter_case_insensitive(self, tmp_path: Path) -> None:
        """Test filtering by project directory substring."""
        _write_transcript(tmp_path, "-home-dev-API", "a", ["{}"])
        _write_transcript(tmp_path, "-home-dev-web", "b", ["{}"])

        files = find_transcript_files(tmp_path, project="api", now=NOW)
        assert [f.session_id for f in files] == ["a"]

    def test_unreadable_root_raises(self, tmp_path: Path) -> None:
        """Test that a root that is not a directory is a reported failure."""
        root = tmp_path / "projects"
        root.write_text("not a directory")
        with pytest.raises(DiscoveryError):
            find_transcript_files(root, now=NOW)


class TestPipeline:
    """Test the full analysis pipeline."""

    def test_empty_directory(self, tmp_path: Path) -> None:
        """Test that no transcripts produce an explicit no-data report."""
        report = analyze(AnalyzerOptions(), projects_dir=tmp_path, now=NOW)
        assert report.no_data is True
        assert report.error == "No transcript files found"
        assert report.summary.total_sessions == 0
        assert report.summary.total_prompts == 0
        assert report.metrics.total_prompts == 0
        assert report.metrics.first_time_success_rate == 0.0
        assert report.insights == []

    def test_full_report(self, tmp_path: Path) -> None:
        """Test metrics, examples and summaries across two sessions."""
        t0 = NOW - timedelta(hours=5)
        _write_transcript(tmp_path, "-home-dev-api", "session-a", [
            _user_line("Add input validation to the signup form handler", t0, "session-a"),
            _assistant_line(1000, 200),
            "this line is not json",
            _user_line("no, try again with pydantic", t0 + timedelta(minutes=1), "session-a"),
            _assistant_line(2000, 300),
            _user_line("thanks", t0 + timedelta(minutes=2), "session-a"),
        ], age=timedelta(hours=2))
        _write_transcript(tmp_path, "-home-dev-web", "session-b", [
            _user_line("rename it", t0 + timedelta(minutes=30), "session-b"),
            _assistant_line(500, 50),
        ], age=timedelta(hours=1))

        report = analyze(AnalyzerOptions(), projects_dir=tmp_path, now=NOW)

        assert report.no_data is False
        assert report.summary.total_sessions == 2
        assert report.summary.total_prompts == 4
        assert report.summary.token_usage.total_input == 3500
        assert report.summary.token_usage.total_output == 550
        assert report.summary.token_usage.total_cache_read == 21

        metrics = report.metrics
        assert metrics.correction_prompts == 1
        assert metrics.acknowledgments == 1
        assert metrics.prompts_followed_by_correction == 1
        assert metrics.first_time_success_rate == 50.0
        assert metrics.avg_tokens_per_prompt == 1350  # (1200 + 2300 + 550) / 3

        assert report.patterns.very_short_prompts_count == 1
        assert report.patterns.prompts_needing_correction_count == 1
        assert [(i.type, i.category) for i in report.insights] == [("info", "effectiveness")]

        corrected = report.examples.recent_corrected_prompts
        assert corrected[0].text == "Add input validation to the signup form handler"
        assert corrected[0].project == "-home-dev-api"
        assert report.examples.very_short_prompts[0].text == "rename it"

        # Session summaries follow file modification time, newest first
        assert [s.session_id for s in report.session_summaries] == ["session-b", "session-a"]
        assert report.session_summaries[1].correction_count == 1
        assert report.session_summaries[1].date == "2025-06-10"

    def test_example_text_truncation(self, tmp_path: Path) -> None:
        """Test that example text is truncated unless verbose."""
        long_text = "Please restructure the module " + "z" * 300
        t0 = NOW - timedelta(hours=3)
        _write_transcript(tmp_path, "-home-dev-api", "s", [
            _user_line(long_text, t0),
            _user_line("that broke everything", t0 + timedelta(minutes=1)),
        ])

        brief = analyze(AnalyzerOptions(), projects_dir=tmp_path, now=NOW)
        text = brief.examples.recent_corrected_prompts[0].text
        assert text == long_text[:200] + "..."
        assert brief.examples.recent_corrected_prompts[0].char_count == len(long_text)

        full = analyze(AnalyzerOptions(verbose=True), projects_dir=tmp_path, now=NOW)
        assert full.examples.recent_corrected_prompts[0].text == long_text

    def test_limit_applies_to_metrics(self, tmp_path: Path) -> None:
        """Test that metrics cover only the most recent prompts."""
        t0 = NOW - timedelta(hours=3)
        _write_transcript(tmp_path, "-home-dev-api", "s", [
            _user_line(f"Implement step {i} of the plan", t0 + timedelta(minutes=i))
            for i in range(6)
        ])

        report = analyze(AnalyzerOptions(limit=4), projects_dir=tmp_path, now=NOW)
        assert report.summary.total_prompts == 6
        assert report.summary.analyzed_prompts == 4
        assert report.metrics.total_prompts == 4

    def test_report_round_trip(self, tmp_path: Path) -> None:
        """Test that a generated report survives JSON serialization."""
        t0 = NOW - timedelta(hours=3)
        _write_transcript(tmp_path, "-home-dev-api", "s", [
            _user_line("Set up CI for the repository", t0),
            _assistant_line(10, 10),
            _user_line("wrong workflow file", t0 + timedelta(minutes=1)),
        ])

        report = analyze(AnalyzerOptions(), projects_dir=tmp_path, now=NOW)
        assert PromptReport.from_json(report.to_json()) == report

    def test_unreadable_transcript_skipped(
        self,
        tmp_path: Path,
        monkeypatch: pytest.MonkeyPatch,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        """Test that a transcript that cannot be opened is logged and skipped."""
        t0 = NOW - timedelta(hours=3)
        _write_transcript(tmp_path, "-home-dev-api", "good", [
            _user_line("Add a changelog entry for the release", t0, "good"),
        ])
        _write_transcript(tmp_path, "-home-dev-api", "locked", [
            _user_line("This session cannot be read", t0, "locked"),
        ])

        real_read = report_module.read_transcript

        def guarded_read(path: Path):
            if path.stem == "locked":
                raise PermissionError(f"Permission denied: '{path}'")
            return real_read(path)

        monkeypatch.setattr(report_module, "read_transcript", guarded_read)

        with caplog.at_level(logging.WARNING, logger="promptcoach.report"):
            report = analyze(AnalyzerOptions(), projects_dir=tmp_path, now=NOW)

        assert report.no_data is False
        assert report.summary.total_sessions == 1
        assert report.summary.total_prompts == 1
        assert [s.session_id for s in report.session_summaries] == ["good"]
        assert any(
            r.levelno == logging.WARNING and "locked.jsonl" in r.getMessage()
            for r in caplog.records
        )
