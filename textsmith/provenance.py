"""Provenance records tying each rewrite to the rules that produced it."""

from __future__ import annotations

import time
import uuid
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional

from textsmith.engine.models import TransformResult, TransformSettings
from textsmith.storage.history import UndoAction

PREVIEW_LENGTH = 150
REWRITE_ACTION = "rewrite"


def generate_id(prefix: str) -> str:
    return f"{prefix}_{int(time.time() * 1000)}_{uuid.uuid4().hex[:9]}"


def create_preview(text: str, max_length: int = PREVIEW_LENGTH) -> str:
    if len(text) <= max_length:
        return text
    return text[:max_length].strip() + "..."


@dataclass(slots=True)
class ProvenanceRecord:
    rewrite_id: str
    source_text: str
    result_text: str
    settings: Dict[str, Any]
    rules_applied: List[str]
    change_ratio: float
    scope: Optional[str] = None
    created_at: float = field(default_factory=time.time)

    @classmethod
    def from_result(
        cls,
        source_text: str,
        settings: TransformSettings,
        result: TransformResult,
        scope: Optional[str] = None,
    ) -> "ProvenanceRecord":
        return cls(
            rewrite_id=generate_id("rewrite"),
            source_text=source_text,
            result_text=result.text,
            settings=settings.to_wire(),
            rules_applied=list(result.rules_applied),
            change_ratio=result.change_ratio,
            scope=scope,
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def to_undo_action(self) -> UndoAction:
        return UndoAction(
            action_type=REWRITE_ACTION, timestamp=self.created_at, data=self.to_dict()
        )
