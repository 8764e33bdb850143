"""Caller-side policy around the coordinator.

The engine itself never touches the cache, the undo history or the
capability authority; this service decides when to consult each of them.
"""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Iterable, List, Mapping, Optional

from textsmith.config import Settings, get_settings
from textsmith.engine.context import ExecutionContext
from textsmith.engine.coordinator import ExecutionCoordinator
from textsmith.engine.errors import CapabilityDeniedError, InvalidRequestError
from textsmith.engine.models import ResponseEnvelope, TransformResult, TransformSettings
from textsmith.permissions import (
    ANALYZE,
    REWRITE,
    CapabilityAuthority,
    SettingsCapabilityAuthority,
)
from textsmith.profiles.loader import get_profile_registry
from textsmith.profiles.models import Profile
from textsmith.profiles.precedence import apply_profile_defaults, get_profile_limits
from textsmith.provenance import ProvenanceRecord, generate_id
from textsmith.storage.cache import BoundedCache, cache_key
from textsmith.storage.history import BoundedHistory, HistoryStack, UndoAction

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ServiceOutcome:
    envelope: ResponseEnvelope
    cached: bool = False
    provenance: Optional[ProvenanceRecord] = None


class TextService:
    def __init__(
        self,
        settings: Optional[Settings] = None,
        coordinator: Optional[ExecutionCoordinator] = None,
        cache: Optional[BoundedCache] = None,
        history: Optional[BoundedHistory] = None,
        authority: Optional[CapabilityAuthority] = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.coordinator = coordinator or ExecutionCoordinator(self.settings)
        self.cache = cache or BoundedCache(capacity=self.settings.cache_capacity)
        self.history = history or BoundedHistory(depth=self.settings.history_depth)
        self.authority = authority or SettingsCapabilityAuthority(self.settings)

    def resolve_profile(self, profile_id: Optional[str]) -> Optional[Profile]:
        if not profile_id:
            return None
        registry = get_profile_registry()
        profile = registry.get(profile_id)
        if profile is None:
            available = ", ".join(registry.get_available_ids()) or "none"
            raise InvalidRequestError(
                f"Unknown profile '{profile_id}'. Available profiles: {available}"
            )
        return profile

    def ensure_capability(self, scope: Optional[str], capability: str) -> None:
        if scope is None:
            return
        if not self.authority.is_capability_enabled(scope, capability):
            raise CapabilityDeniedError(
                f"Capability '{capability}' is not enabled for {scope}"
            )

    def _cached_or_run(
        self, kind: str, message: Mapping[str, Any], options: Mapping[str, Any], use_cache: bool
    ) -> ServiceOutcome:
        text = message["payload"]["text"]
        key = cache_key(kind, text, options)
        caching = use_cache and self.settings.cache_enabled
        if caching:
            hit = self.cache.get(key)
            if hit is not None:
                logger.debug(f"Cache hit for {kind} request {message['id']}")
                return ServiceOutcome(
                    envelope=ResponseEnvelope.success(message["id"], copy.deepcopy(hit), 0.0),
                    cached=True,
                )

        envelope = self.coordinator.handle(message)
        if caching and envelope.ok:
            self.cache.put(key, copy.deepcopy(envelope.result))
        return ServiceOutcome(envelope=envelope)

    def transform(
        self,
        text: str,
        settings: TransformSettings,
        scope: Optional[str] = None,
        profile_id: Optional[str] = None,
        use_cache: bool = True,
    ) -> ServiceOutcome:
        """Rewrite ``text``; a successful scoped rewrite is pushed onto the undo history."""
        self.ensure_capability(scope, REWRITE)
        effective = apply_profile_defaults(self.resolve_profile(profile_id), settings)
        options = effective.to_wire()
        message = {
            "id": generate_id("transform"),
            "type": "transform",
            "payload": {"text": text, "settings": options},
        }
        outcome = self._cached_or_run("transform", message, options, use_cache)

        result = outcome.envelope.result
        if outcome.envelope.ok and isinstance(result, TransformResult):
            outcome.provenance = ProvenanceRecord.from_result(text, effective, result, scope)
            if scope is not None:
                self.history.push(scope, outcome.provenance.to_undo_action())
        return outcome

    def analyze(
        self,
        text: str,
        max_keywords: Optional[int] = None,
        summary_length: Optional[int] = None,
        scope: Optional[str] = None,
        profile_id: Optional[str] = None,
        use_cache: bool = True,
    ) -> ServiceOutcome:
        self.ensure_capability(scope, ANALYZE)
        keywords, summary = get_profile_limits(
            self.resolve_profile(profile_id), self.settings, max_keywords, summary_length
        )
        options = {"maxKeywords": keywords, "summaryLength": summary}
        message = {
            "id": generate_id("analyze"),
            "type": "analyze",
            "payload": {"text": text, **options},
        }
        return self._cached_or_run("analyze", message, options, use_cache)

    def dispatch(self, message: Mapping[str, Any]) -> Optional[ResponseEnvelope]:
        """Raw message contract; cancel messages return ``None``."""
        return self.coordinator.handle(message)

    async def dispatch_batch(
        self, messages: Iterable[Mapping[str, Any]]
    ) -> List[ResponseEnvelope]:
        context = ExecutionContext(self.coordinator)
        return await context.process(messages)

    def history_for(self, scope: str) -> HistoryStack:
        return self.history.stack(scope)

    def undo(self, scope: str) -> Optional[UndoAction]:
        return self.history.pop(scope)

    def clear_history(self, scope: str) -> HistoryStack:
        return self.history.clear(scope)


@lru_cache
def get_service() -> TextService:
    return TextService(get_settings())
