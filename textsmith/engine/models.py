from __future__ import annotations

"""Domain models shared by the pipeline, analysis engine and coordinator."""

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Literal, Optional, Union


LengthOption = Literal["short", "medium", "long", "custom"]
Status = Literal["ok", "error"]

LENGTH_OPTIONS = ("short", "medium", "long", "custom")


@dataclass(slots=True, frozen=True)
class TransformSettings:
    length: Optional[LengthOption] = None
    custom_length: Optional[int] = None
    tone: Optional[str] = None
    style: Optional[str] = None

    def to_wire(self) -> Dict[str, Any]:
        wire = {
            "length": self.length,
            "customLength": self.custom_length,
            "tone": self.tone,
            "style": self.style,
        }
        return {key: value for key, value in wire.items() if value is not None}


@dataclass(slots=True)
class TransformResult:
    text: str
    rules_applied: List[str] = field(default_factory=list)
    change_ratio: float = 0.0

    def to_wire(self) -> Dict[str, Any]:
        return {
            "text": self.text,
            "rulesApplied": list(self.rules_applied),
            "changeRatio": self.change_ratio,
        }


@dataclass(slots=True)
class AnalysisResult:
    keywords: List[str]
    summary: str
    score: int

    def to_wire(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(slots=True)
class KeywordsResult:
    keywords: List[str]

    def to_wire(self) -> Dict[str, Any]:
        return {"keywords": list(self.keywords)}


@dataclass(slots=True)
class SummaryResult:
    summary: str

    def to_wire(self) -> Dict[str, Any]:
        return {"summary": self.summary}


@dataclass(slots=True)
class ScoreResult:
    score: int

    def to_wire(self) -> Dict[str, Any]:
        return {"score": self.score}


ResultPayload = Union[
    TransformResult, AnalysisResult, KeywordsResult, SummaryResult, ScoreResult
]


@dataclass(slots=True)
class ResponseEnvelope:
    id: str
    status: Status
    elapsed_ms: float
    result: Optional[ResultPayload] = None
    error: Optional[str] = None
    error_code: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status == "ok"

    @classmethod
    def success(
        cls, request_id: str, result: ResultPayload, elapsed_ms: float
    ) -> "ResponseEnvelope":
        return cls(id=request_id, status="ok", result=result, elapsed_ms=elapsed_ms)

    @classmethod
    def failure(
        cls, request_id: str, error: str, code: str, elapsed_ms: float
    ) -> "ResponseEnvelope":
        return cls(
            id=request_id,
            status="error",
            error=error,
            error_code=code,
            elapsed_ms=elapsed_ms,
        )

    def to_wire(self) -> Dict[str, Any]:
        """Flat record in the message contract's camelCase layout."""
        wire: Dict[str, Any] = {"id": self.id, "status": self.status}
        if self.ok and self.result is not None:
            wire["result"] = self.result.to_wire()
        else:
            wire["error"] = self.error or "Unknown error"
            wire["errorCode"] = self.error_code
        wire["elapsedMs"] = self.elapsed_ms
        return wire
