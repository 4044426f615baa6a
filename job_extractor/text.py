"""Text cleaning and job description plausibility checks."""

from __future__ import annotations

import re
from dataclasses import dataclass

_WHITESPACE_RE = re.compile(r"\s+")
_ZERO_WIDTH_RE = re.compile("[\u200b-\u200d\ufeff]")
_SENTENCE_END_RE = re.compile(r"[.!?]")


@dataclass(frozen=True, slots=True)
class ExtractionThresholds:
    """Length and token limits applied while picking a job description."""

    min_length: int = 80
    max_length: int = 50000
    min_tokens: int = 15
    block_min_length: int = 100
    block_max_length: int = 20000
    last_resort_min_length: int = 80
    degraded_min_length: int = 50


DEFAULT_THRESHOLDS = ExtractionThresholds()


def clean_text(text: str | None) -> str:
    """Collapse whitespace and drop zero-width characters and ``&nbsp;`` entities."""

    if not text:
        return ""
    cleaned = _WHITESPACE_RE.sub(" ", text.strip())
    cleaned = _ZERO_WIDTH_RE.sub("", cleaned)
    return cleaned.replace("&nbsp;", " ")


def is_valid_job_description(
    text: str | None,
    thresholds: ExtractionThresholds = DEFAULT_THRESHOLDS,
) -> bool:
    """Return True if *text* reads like a job description.

    The cleaned text must fall inside the length window, have more than
    ``min_tokens`` space-separated tokens and contain sentence punctuation.
    """

    if not text:
        return False

    cleaned = clean_text(text)
    if not thresholds.min_length <= len(cleaned) < thresholds.max_length:
        return False
    if len(cleaned.split(" ")) <= thresholds.min_tokens:
        return False
    return bool(_SENTENCE_END_RE.search(cleaned))
