"""Prompt Coach: prompt quality metrics from AI coding session transcripts."""

__version__ = "0.1.0"
__author__ = "Prompt Coach Contributors"
__description__ = "Prompt quality metrics from Claude Code transcripts"

from .models import AnalyzerOptions, PromptReport
from .report import analyze

__all__ = [
    "AnalyzerOptions",
    "PromptReport",
    "analyze",
]
