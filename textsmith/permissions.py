"""Capability lookups consulted before the engine is invoked."""

from __future__ import annotations

from typing import Dict, List, Protocol

from textsmith.config import Settings

WILDCARD_SCOPE = "*"
REWRITE = "rewrite"
ANALYZE = "analyze"


class CapabilityAuthority(Protocol):
    def is_capability_enabled(self, scope_key: str, capability: str) -> bool: ...


class SettingsCapabilityAuthority:
    """Grants read from ``Settings.capability_grants``; '*' covers unlisted scopes."""

    def __init__(self, settings: Settings) -> None:
        self._grants: Dict[str, List[str]] = dict(settings.capability_grants)

    def is_capability_enabled(self, scope_key: str, capability: str) -> bool:
        grants = self._grants.get(scope_key)
        if grants is None:
            grants = self._grants.get(WILDCARD_SCOPE, [])
        return capability in grants
