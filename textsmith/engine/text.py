"""Sentence, word and phrase primitives shared by the pipeline and analysis."""

from __future__ import annotations

import re
from functools import lru_cache
from typing import List, Tuple

# A sentence is a run of non-terminal characters closed by terminal
# punctuation, or the trailing fragment at the end of the text.
SENTENCE_PATTERN = re.compile(r"[^.!?]+(?:[.!?]+|$)")


def split_sentences(text: str) -> List[str]:
    """Split ``text`` into stripped sentence units.

    Text without any sentence unit is returned as a single sentence, so the
    result is never empty.
    """
    sentences = [
        match.strip() for match in SENTENCE_PATTERN.findall(text) if match.strip()
    ]
    return sentences or [text.strip()]


def count_words(text: str) -> int:
    return len(text.split())


def match_case(source: str, replacement: str) -> str:
    """Shape ``replacement`` after the casing of the matched ``source``."""
    if len(source) > 1 and source.isupper():
        return replacement.upper()
    if source[:1].isupper():
        return replacement[:1].upper() + replacement[1:]
    return replacement


@lru_cache(maxsize=256)
def _phrase_pattern(phrase: str) -> re.Pattern[str]:
    return re.compile(rf"\b{re.escape(phrase)}\b", re.IGNORECASE)


def replace_whole_phrase(
    text: str, phrase: str, replacement: str
) -> Tuple[str, int]:
    """
    Replace every whole-word, case-insensitive occurrence of ``phrase``.

    Returns a tuple of (new_text, substitutions_made).
    """
    pattern = _phrase_pattern(phrase)
    return pattern.subn(lambda match: match_case(match.group(0), replacement), text)


@lru_cache(maxsize=64)
def _word_pattern(word: str) -> re.Pattern[str]:
    return re.compile(rf"\b{re.escape(word)}\b")


def replace_whole_word(text: str, word: str, replacement: str) -> str:
    """Case-sensitive whole-word replacement; other casings are left alone."""
    return _word_pattern(word).sub(replacement, text)
