"""Keyword extraction, extractive summary and readability scoring.

All functions are pure over their input text.
"""

from __future__ import annotations

import math
import re
from collections import Counter
from typing import List

from textsmith.engine.models import AnalysisResult
from textsmith.engine.text import split_sentences

DEFAULT_MAX_KEYWORDS = 10
DEFAULT_SUMMARY_LENGTH = 2
MIN_KEYWORD_LENGTH = 4

STOPWORDS = frozenset(
    {
        "the", "be", "to", "of", "and", "a", "in", "that", "have", "i",
        "it", "for", "not", "on", "with", "he", "as", "you", "do", "at",
        "this", "but", "his", "by", "from", "they", "we", "say", "her", "she",
        "or", "an", "will", "my", "one", "all", "would", "there", "their", "what",
    }
)

_NON_WORD = re.compile(r"[^\w\s]")
_NON_LETTER = re.compile(r"[^a-z]")
_VOWEL_GROUP = re.compile(r"[aeiouy]+")


def _tokenize(text: str) -> List[str]:
    return _NON_WORD.sub("", text.lower()).split()


def extract_keywords(text: str, max_keywords: int = DEFAULT_MAX_KEYWORDS) -> List[str]:
    """Most frequent content tokens; ties keep first-occurrence order."""
    counts = Counter(
        token
        for token in _tokenize(text)
        if len(token) >= MIN_KEYWORD_LENGTH and token not in STOPWORDS
    )
    # most_common sorts stably, so equal counts stay in insertion order.
    return [token for token, _ in counts.most_common(max(max_keywords, 0))]


def summarize(text: str, summary_length: int = DEFAULT_SUMMARY_LENGTH) -> str:
    sentences = split_sentences(text)
    return " ".join(sentences[: max(summary_length, 0)]).strip()


def count_syllables(word: str) -> int:
    letters = _NON_LETTER.sub("", word.lower())
    count = len(_VOWEL_GROUP.findall(letters)) or 1
    if letters.endswith("e"):
        count -= 1
    if letters.endswith("le") and len(letters) > 2:
        count += 1
    return max(1, count)


def readability_score(text: str) -> int:
    """Flesch Reading Ease approximation clamped to [0, 100]."""
    words = text.split()
    sentences = [sentence for sentence in split_sentences(text) if sentence]
    if not words or not sentences:
        return 0

    syllables = sum(count_syllables(word) for word in words)
    score = (
        206.835
        - 1.015 * (len(words) / len(sentences))
        - 84.6 * (syllables / len(words))
    )
    clamped = min(100.0, max(0.0, score))
    return int(math.floor(clamped + 0.5))


def analyze(
    text: str,
    max_keywords: int = DEFAULT_MAX_KEYWORDS,
    summary_length: int = DEFAULT_SUMMARY_LENGTH,
) -> AnalysisResult:
    return AnalysisResult(
        keywords=extract_keywords(text, max_keywords),
        summary=summarize(text, summary_length),
        score=readability_score(text),
    )
