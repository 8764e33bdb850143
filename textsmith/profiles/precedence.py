"""Profile precedence and merging logic."""

from typing import Optional

from textsmith.config import Settings
from textsmith.engine.models import TransformSettings
from textsmith.profiles.models import Profile


def apply_profile_defaults(
    profile: Optional[Profile], settings: TransformSettings
) -> TransformSettings:
    """
    Fill unset rewrite settings from the profile.

    Precedence: request > profile defaults > engine defaults (stage skipped)
    """
    if not profile:
        return settings

    defaults = profile.defaults
    length = settings.length or defaults.length
    custom_length = settings.custom_length
    if custom_length is None and length == defaults.length:
        custom_length = defaults.custom_length

    return TransformSettings(
        length=length,
        custom_length=custom_length,
        tone=settings.tone or defaults.tone,
        style=settings.style or defaults.style,
    )


def get_profile_limits(
    profile: Optional[Profile],
    settings: Settings,
    max_keywords: Optional[int] = None,
    summary_length: Optional[int] = None,
) -> tuple[int, int]:
    """
    Resolve analysis limits with request > profile > global precedence.

    Returns:
        Tuple of (max_keywords, summary_length)
    """
    limits = profile.limits if profile else None
    resolved_keywords = (
        max_keywords
        or (limits.max_keywords if limits else None)
        or settings.default_max_keywords
    )
    resolved_summary = (
        summary_length
        or (limits.summary_length if limits else None)
        or settings.default_summary_length
    )
    return resolved_keywords, resolved_summary
