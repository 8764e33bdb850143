# textsmith/api/schemas.py
from typing import Any, Dict, List, Literal, Optional
from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)

from textsmith.engine.models import TransformSettings
from textsmith.provenance import create_preview

LengthLiteral = Literal["short", "medium", "long", "custom"]


class TransformRequestModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    text: str = Field(..., description="Text to rewrite.")
    length: Optional[LengthLiteral] = Field(default=None)
    custom_length: Optional[int] = Field(
        default=None,
        ge=1,
        validation_alias=AliasChoices("custom_length", "customLength"),
    )
    tone: Optional[str] = Field(default=None)
    style: Optional[str] = Field(default=None)
    profile: Optional[str] = Field(default=None, description="Rewrite profile id.")
    scope: Optional[str] = Field(
        default=None, description="Scope key (e.g. site origin) for undo history."
    )
    use_cache: bool = Field(default=True)

    @field_validator("tone", "style", mode="before")
    @classmethod
    def blank_as_absent(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    def to_settings(self) -> TransformSettings:
        return TransformSettings(
            length=self.length,
            custom_length=self.custom_length,
            tone=self.tone,
            style=self.style,
        )


class AnalyzeRequestModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    text: str
    max_keywords: Optional[int] = Field(
        default=None, ge=1, validation_alias=AliasChoices("max_keywords", "maxKeywords")
    )
    summary_length: Optional[int] = Field(
        default=None,
        ge=1,
        validation_alias=AliasChoices("summary_length", "summaryLength"),
    )
    profile: Optional[str] = None
    scope: Optional[str] = None
    use_cache: bool = Field(default=True)


class ProvenanceModel(BaseModel):
    rewrite_id: str
    source_preview: str
    settings: Dict[str, Any]
    rules_applied: List[str]
    change_ratio: float
    scope: Optional[str] = None
    created_at: float

    @classmethod
    def from_domain(cls, record) -> "ProvenanceModel":
        return cls(
            rewrite_id=record.rewrite_id,
            source_preview=create_preview(record.source_text),
            settings=record.settings,
            rules_applied=record.rules_applied,
            change_ratio=record.change_ratio,
            scope=record.scope,
            created_at=record.created_at,
        )


class TransformResponseModel(BaseModel):
    id: str
    text: str
    rules_applied: List[str]
    change_ratio: float
    elapsed_ms: float
    cached: bool
    provenance: Optional[ProvenanceModel] = None


class AnalyzeResponseModel(BaseModel):
    id: str
    keywords: List[str]
    summary: str
    score: int
    elapsed_ms: float
    cached: bool


class BatchRequestModel(BaseModel):
    messages: List[Dict[str, Any]]

    @model_validator(mode="after")
    def ensure_messages(self) -> "BatchRequestModel":
        if not self.messages:
            raise ValueError("At least one message is required.")
        return self


class UndoActionModel(BaseModel):
    action_type: str
    timestamp: float
    data: Any = None

    @classmethod
    def from_domain(cls, action) -> "UndoActionModel":
        return cls(**action.to_dict())


class HistoryResponseModel(BaseModel):
    scope: str
    actions: List[UndoActionModel]


class UndoResponseModel(BaseModel):
    scope: str
    action: Optional[UndoActionModel] = None
    remaining: int
