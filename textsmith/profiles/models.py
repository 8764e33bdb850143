"""Rewrite profile data models."""

from typing import Literal, Optional
from pydantic import BaseModel, Field, field_validator
import re

from textsmith.engine.rules import StyleName, ToneName


class ProfileDefaults(BaseModel):
    """Default rewrite settings for a profile."""

    length: Optional[Literal["short", "medium", "long", "custom"]] = Field(
        default=None
    )
    custom_length: Optional[int] = Field(default=None, ge=1)
    tone: Optional[str] = Field(default=None, description="Tone lexicon name")
    style: Optional[str] = Field(default=None, description="Style pattern name")

    @field_validator("tone")
    @classmethod
    def validate_tone(cls, v: Optional[str]) -> Optional[str]:
        """Profiles may only name tones that exist in the rule table."""
        if v is None:
            return v
        valid = {tone.value for tone in ToneName}
        if v.lower() not in valid:
            raise ValueError(f"Unknown tone: {v}. Valid tones: {sorted(valid)}")
        return v.lower()

    @field_validator("style")
    @classmethod
    def validate_style(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        valid = {style.value for style in StyleName}
        if v.lower() not in valid:
            raise ValueError(f"Unknown style: {v}. Valid styles: {sorted(valid)}")
        return v.lower()


class ProfileLimits(BaseModel):
    """Analysis limits for a profile."""

    max_keywords: Optional[int] = Field(default=None, ge=1, le=100)
    summary_length: Optional[int] = Field(default=None, ge=1, le=100)


class Profile(BaseModel):
    """Complete profile specification."""

    id: str = Field(..., description="Unique profile identifier")
    version: str = Field(default="1.0.0", description="Semantic version")
    title: str = Field(..., description="Human-readable title")
    description: str = Field(..., description="Profile description")
    defaults: ProfileDefaults = Field(
        default_factory=ProfileDefaults, description="Default rewrite settings"
    )
    limits: Optional[ProfileLimits] = Field(
        default=None, description="Analysis limits"
    )

    @field_validator("version")
    @classmethod
    def validate_semver(cls, v: str) -> str:
        """Validate semantic versioning format."""
        semver_pattern = r"^\d+\.\d+\.\d+(?:-[a-zA-Z0-9.-]+)?(?:\+[a-zA-Z0-9.-]+)?$"
        if not re.match(semver_pattern, v):
            raise ValueError(f"Invalid semantic version: {v}")
        return v


class ProfileSummary(BaseModel):
    """Summary information about a profile for discovery."""

    id: str
    title: str
    version: str
    description: str
