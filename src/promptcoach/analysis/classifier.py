"""Prompt classification by regular expression.

Corrections signal that the previous response needed revision, acknowledgments
signal satisfaction. Both checks run independently, so a message could in
principle be tagged as both.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

# Phrases that suggest the previous prompt did not get the intended result
CORRECTION_INDICATORS = [
    r"^no[,.]?\s",  # "No, I meant..."
    r"^wrong",
    r"^that'?s not",
    r"^actually[,.]?\s",  # "Actually, use..."
    r"^try again",
    r"^fix (this|that|it)",
    r"^undo",
    r"^revert",
    r"^that broke",
    r"^it'?s (still|not) (working|right)",
    r"^please (fix|correct|redo)",
    r"didn'?t work",
    r"not what i (wanted|meant|asked)",
    r"^wait[,.]?\s",
    r"^stop[,.]?\s",
    r"^cancel",
    r"^ignore (that|this|previous)",
]

# Phrases that close a turn successfully
ACKNOWLEDGMENT_INDICATORS = [
    r"^(thanks|thank you|thx|ty)",
    r"^(perfect|great|awesome|nice|good job|well done)",
    r"^(that'?s? (it|right|correct|perfect))",
    r"^(yes|yep|yeah|yup)[,!.]?\s*$",  # Bare affirmative only
    r"^(looks good|lgtm)",
]

_CORRECTION_PATTERNS = [re.compile(p, re.IGNORECASE) for p in CORRECTION_INDICATORS]
_ACKNOWLEDGMENT_PATTERNS = [re.compile(p, re.IGNORECASE) for p in ACKNOWLEDGMENT_INDICATORS]


@dataclass(frozen=True)
class Classification:
    """Classification flags for a single message."""

    is_correction: bool
    is_acknowledgment: bool


def is_correction(text: str) -> bool:
    """Check if a message asks for the previous response to be revised."""
    clean = text.strip()
    return any(pattern.search(clean) for pattern in _CORRECTION_PATTERNS)


def is_acknowledgment(text: str) -> bool:
    """Check if a message acknowledges a successful response."""
    clean = text.strip()
    return any(pattern.search(clean) for pattern in _ACKNOWLEDGMENT_PATTERNS)


def classify(text: str) -> Classification:
    """Classify a message as correction and/or acknowledgment.

    Args:
        text: Raw message text

    Returns:
        Classification with both flags evaluated independently
    """
    return Classification(
        is_correction=is_correction(text),
        is_acknowledgment=is_acknowledgment(text),
    )
