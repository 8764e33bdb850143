"""Static registry of named rewrite rules.

Two rule families are held here: tone lexicons (phrase swap tables) and style
patterns (pure text -> text functions). Both are keyed by a closed set of
names; lookups of any other name return ``None`` so callers can take their
"unchanged" branch explicitly.
"""

from __future__ import annotations

import re
from enum import Enum
from types import MappingProxyType
from typing import Callable, Mapping, Optional, Tuple

from textsmith.engine.text import replace_whole_phrase, replace_whole_word

StyleFunction = Callable[[str], str]


class ToneName(str, Enum):
    FORMAL = "formal"
    CASUAL = "casual"
    PROFESSIONAL = "professional"


class StyleName(str, Enum):
    CONCISE = "concise"
    DETAILED = "detailed"
    TECHNICAL = "technical"


# Entries apply in order; each one sees the output of the previous entry.
TONE_LEXICONS: Mapping[ToneName, Tuple[Tuple[str, str], ...]] = MappingProxyType(
    {
        ToneName.FORMAL: (
            ("hi", "greetings"),
            ("hey", "hello"),
            ("yeah", "yes"),
            ("nope", "no"),
            ("gonna", "going to"),
            ("wanna", "want to"),
            ("kinda", "kind of"),
            ("a lot", "many"),
            ("really", "very"),
            ("pretty", "quite"),
        ),
        ToneName.CASUAL: (
            ("greetings", "hi"),
            ("hello", "hey"),
            ("yes", "yeah"),
            ("no", "nope"),
            ("going to", "gonna"),
            ("want to", "wanna"),
            ("kind of", "kinda"),
            ("very", "really"),
            ("quite", "pretty"),
        ),
        ToneName.PROFESSIONAL: (
            ("think", "believe"),
            ("get", "obtain"),
            ("make", "create"),
            ("help", "assist"),
            ("show", "demonstrate"),
            ("tell", "inform"),
        ),
    }
)

FILLER_WORDS = (
    "actually",
    "basically",
    "literally",
    "essentially",
    "obviously",
    "clearly",
)

# A filler directly before punctuation takes its leading whitespace with it,
# so "it is basically." becomes "it is." and other spacing is left as written.
_FILLER_PATTERNS = tuple(
    re.compile(rf"\s*\b{filler}\b(?=[,.!?;:])|\b{filler}\b", re.IGNORECASE)
    for filler in FILLER_WORDS
)
_MULTI_SPACE = re.compile(r"\s{2,}")

DETAILED_SWAPS = (
    ("is", "is currently"),
    ("was", "was previously"),
    ("can", "is able to"),
)
TECHNICAL_SWAPS = (
    ("use", "utilize"),
    ("part", "component"),
    ("thing", "element"),
)


def _swap_words(text: str, swaps: Tuple[Tuple[str, str], ...]) -> str:
    for word, replacement in swaps:
        text = replace_whole_word(text, word, replacement)
    return text


def concise(text: str) -> str:
    """Remove filler words and collapse the whitespace they leave behind."""
    result = text
    for pattern in _FILLER_PATTERNS:
        result = pattern.sub("", result)
    return _MULTI_SPACE.sub(" ", result).strip()


def detailed(text: str) -> str:
    # Only the lowercase forms expand; "Is it ready?" stays as written.
    return _swap_words(text, DETAILED_SWAPS)


def technical(text: str) -> str:
    return _swap_words(text, TECHNICAL_SWAPS)


STYLE_PATTERNS: Mapping[StyleName, StyleFunction] = MappingProxyType(
    {
        StyleName.CONCISE: concise,
        StyleName.DETAILED: detailed,
        StyleName.TECHNICAL: technical,
    }
)


def resolve_tone(name: str) -> Optional[ToneName]:
    """Return the tone for ``name`` (case-insensitive), or ``None``."""
    try:
        return ToneName(name.strip().lower())
    except ValueError:
        return None


def resolve_style(name: str) -> Optional[StyleName]:
    try:
        return StyleName(name.strip().lower())
    except ValueError:
        return None


def apply_tone(text: str, tone: ToneName) -> Tuple[str, int]:
    """Apply every swap in the tone's lexicon, returning (text, total_swaps)."""
    swaps = 0
    for phrase, replacement in TONE_LEXICONS[tone]:
        text, count = replace_whole_phrase(text, phrase, replacement)
        swaps += count
    return text, swaps


def apply_style(text: str, style: StyleName) -> str:
    return STYLE_PATTERNS[style](text)
