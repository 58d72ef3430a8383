"""Insight generation from corpus metrics.

Maps metrics and patterns to advisory messages via fixed thresholds.
Rules are evaluated independently; only the success rate bands exclude
one another.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from .aggregator import LONG_PROMPT_CHARS, SHORT_PROMPT_CHARS
from .models import Insight, InsightSeverity

if TYPE_CHECKING:
    from .models import Metrics, PatternSet

LOW_SUCCESS_RATE = 50.0
FAIR_SUCCESS_RATE = 70.0
TARGET_SUCCESS_RATE = 80.0
MAX_SHORT_PROMPTS = 3
MAX_LONG_PROMPTS = 3
HIGH_TOKENS_PER_PROMPT = 50_000


def generate_insights(metrics: Metrics, patterns: PatternSet) -> list[Insight]:
    """Generate advisory insights.

    Args:
        metrics: Corpus-wide metrics
        patterns: Structural patterns over the same prompts

    Returns:
        Insights in rule order
    """
    insights: list[Insight] = []
    rate = metrics.first_time_success_rate

    # Rates in [70, 80) get no effectiveness insight
    if rate < LOW_SUCCESS_RATE:
        insights.append(Insight(
            type=InsightSeverity.WARNING,
            category="effectiveness",
            message=(
                f"Your first-time success rate is {rate:g}%. More than half your prompts "
                "need follow-up corrections. Focus on being more specific upfront."
            ),
        ))
    elif rate < FAIR_SUCCESS_RATE:
        insights.append(Insight(
            type=InsightSeverity.INFO,
            category="effectiveness",
            message=(
                f"Your first-time success rate is {rate:g}%. Room for improvement, "
                f"aim for {TARGET_SUCCESS_RATE:.0f}%+."
            ),
        ))
    elif rate >= TARGET_SUCCESS_RATE:
        insights.append(Insight(
            type=InsightSeverity.SUCCESS,
            category="effectiveness",
            message=(
                f"Excellent! Your first-time success rate is {rate:g}%. "
                "You're prompting effectively."
            ),
        ))

    short_count = len(patterns.very_short_prompts)
    if short_count > MAX_SHORT_PROMPTS:
        insights.append(Insight(
            type=InsightSeverity.WARNING,
            category="specificity",
            message=(
                f"You have {short_count} very short prompts (<{SHORT_PROMPT_CHARS} chars). "
                "Short prompts often lack context and lead to misunderstandings."
            ),
        ))

    long_count = len(patterns.very_long_prompts)
    if long_count > MAX_LONG_PROMPTS:
        insights.append(Insight(
            type=InsightSeverity.INFO,
            category="efficiency",
            message=(
                f"You have {long_count} very long prompts (>{LONG_PROMPT_CHARS} chars). "
                "Consider if all that context is necessary, or if you could link to files instead."
            ),
        ))

    chain_count = len(patterns.correction_chains)
    if chain_count > 0:
        insights.append(Insight(
            type=InsightSeverity.WARNING,
            category="effectiveness",
            message=(
                f"Found {chain_count} correction chains (multiple corrections in a row). "
                "When this happens, consider stepping back and re-explaining the full goal."
            ),
        ))

    if metrics.avg_tokens_per_prompt > HIGH_TOKENS_PER_PROMPT:
        insights.append(Insight(
            type=InsightSeverity.INFO,
            category="cost",
            message=(
                f"Average tokens per prompt: {metrics.avg_tokens_per_prompt:,}. This is high, "
                "you might benefit from more focused, incremental requests."
            ),
        ))

    return insights
