"""Ordered rewrite pipeline: length -> tone -> style."""

from __future__ import annotations

import logging
import math
from fractions import Fraction
from typing import Callable, List, Optional, Tuple

from textsmith.engine.errors import InternalComputationError
from textsmith.engine.models import TransformResult, TransformSettings
from textsmith.engine.rules import apply_style, apply_tone, resolve_style, resolve_tone
from textsmith.engine.text import count_words, split_sentences

logger = logging.getLogger(__name__)

LENGTH_RATIOS = {"short": Fraction(3, 10), "medium": Fraction(3, 5)}

StageOutcome = Tuple[str, str]


def target_sentence_count(
    length: str, total: int, custom_length: Optional[int] = None
) -> int:
    """Number of sentences to keep for the given length mode."""
    if length in LENGTH_RATIOS:
        return max(1, math.ceil(LENGTH_RATIOS[length] * total))
    if length == "custom" and custom_length is not None:
        return max(1, custom_length)
    return total


def apply_length(
    text: str, length: str, custom_length: Optional[int] = None
) -> StageOutcome:
    sentences = split_sentences(text)
    target = target_sentence_count(length, len(sentences), custom_length)
    kept = sentences[:target]
    return " ".join(kept), f"length_{length}_{len(kept)}_sentences"


def apply_tone_stage(text: str, tone: str) -> StageOutcome:
    resolved = resolve_tone(tone)
    if resolved is None:
        return text, "tone_unchanged"
    result, swaps = apply_tone(text, resolved)
    return result, f"tone_{resolved.value}_{swaps}_swaps"


def apply_style_stage(text: str, style: str) -> StageOutcome:
    resolved = resolve_style(style)
    if resolved is None:
        return text, "style_unchanged"
    return apply_style(text, resolved), f"style_{resolved.value}_applied"


def change_ratio(original: str, transformed: str) -> float:
    """
    Word-count delta between two texts, relative to the longer one.

    Not an edit distance. Rounded half-up to two decimals.
    """
    original_words = count_words(original)
    transformed_words = count_words(transformed)
    longest = max(original_words, transformed_words)
    if longest == 0:
        return 0.0
    ratio = abs(original_words - transformed_words) / longest
    return math.floor(ratio * 100 + 0.5) / 100


class TransformPipeline:
    """Applies the configured stages in fixed order and records a rule trace."""

    def transform(self, text: str, settings: TransformSettings) -> TransformResult:
        stages: List[Tuple[str, Callable[[str], StageOutcome]]] = []
        if settings.length:
            stages.append(
                (
                    "length",
                    lambda current: apply_length(
                        current, settings.length, settings.custom_length
                    ),
                )
            )
        if settings.tone:
            stages.append(("tone", lambda current: apply_tone_stage(current, settings.tone)))
        if settings.style:
            stages.append(
                ("style", lambda current: apply_style_stage(current, settings.style))
            )

        current = text
        rules_applied: List[str] = []
        for stage_name, stage in stages:
            try:
                current, rule = stage(current)
            except Exception as exc:
                logger.error(f"Stage '{stage_name}' failed: {exc}", exc_info=True)
                raise InternalComputationError(
                    f"{stage_name} stage failed: {exc}"
                ) from exc
            rules_applied.append(rule)

        return TransformResult(
            text=current,
            rules_applied=rules_applied,
            change_ratio=change_ratio(text, current),
        )
