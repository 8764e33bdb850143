"""Rewrite profiles: named bundles of default settings."""

from textsmith.profiles.loader import (
    DuplicateProfileError,
    ProfileRegistry,
    get_profile_registry,
)
from textsmith.profiles.models import Profile, ProfileSummary

__all__ = [
    "DuplicateProfileError",
    "Profile",
    "ProfileRegistry",
    "ProfileSummary",
    "get_profile_registry",
]
