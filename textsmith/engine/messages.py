"""Wire models for request messages entering the coordinator."""

from __future__ import annotations

from typing import Any, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from textsmith.engine.errors import InvalidRequestError
from textsmith.engine.models import LENGTH_OPTIONS, TransformSettings

CANCEL_TYPE = "cancel"


class SettingsModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    length: Optional[str] = None
    custom_length: Optional[int] = Field(default=None, alias="customLength")
    tone: Optional[str] = None
    style: Optional[str] = None

    @field_validator("length")
    @classmethod
    def validate_length(cls, value: Optional[str]) -> Optional[str]:
        if value is None or value == "":
            return None
        if value not in LENGTH_OPTIONS:
            raise ValueError(
                f"Unknown length '{value}'. Valid options: {', '.join(LENGTH_OPTIONS)}"
            )
        return value

    @field_validator("tone", "style")
    @classmethod
    def blank_as_absent(cls, value: Optional[str]) -> Optional[str]:
        if value is None or not value.strip():
            return None
        return value

    def to_domain(self) -> TransformSettings:
        return TransformSettings(
            length=self.length,
            custom_length=self.custom_length,
            tone=self.tone,
            style=self.style,
        )


class PayloadModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    text: Optional[str] = None
    settings: SettingsModel = Field(default_factory=SettingsModel)
    max_keywords: Optional[int] = Field(default=None, alias="maxKeywords", ge=1)
    summary_length: Optional[int] = Field(default=None, alias="summaryLength", ge=1)

    @field_validator("settings", mode="before")
    @classmethod
    def none_as_empty(cls, value: Any) -> Any:
        return {} if value is None else value


class RequestMessage(BaseModel):
    """A request envelope; ``type`` is kept open so unknown kinds reach rejection."""

    model_config = ConfigDict(extra="ignore")

    id: str = Field(..., min_length=1)
    type: str
    payload: PayloadModel = Field(default_factory=PayloadModel)

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, value: Any) -> Any:
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("payload", mode="before")
    @classmethod
    def none_as_empty(cls, value: Any) -> Any:
        return {} if value is None else value

    @property
    def is_cancel(self) -> bool:
        return self.type == CANCEL_TYPE


def describe_validation_error(exc: ValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()))
        parts.append(f"{location}: {error.get('msg')}" if location else error.get("msg"))
    return "; ".join(parts) or "Malformed request"


def parse_message(message: Mapping[str, Any] | RequestMessage) -> RequestMessage:
    """Validate a raw message, raising ``InvalidRequestError`` when malformed."""
    if isinstance(message, RequestMessage):
        return message
    if not isinstance(message, Mapping):
        raise InvalidRequestError("Request message must be an object")
    try:
        return RequestMessage.model_validate(dict(message))
    except ValidationError as exc:
        raise InvalidRequestError(describe_validation_error(exc)) from exc
