"""Error taxonomy for the rewrite engine.

Every error is scoped to a single request/response pair. ``code`` is the
stable machine-readable identifier carried in response envelopes and HTTP
error bodies.
"""

from __future__ import annotations


class TextEngineError(Exception):
    code = "engine_error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InvalidRequestError(TextEngineError):
    """Malformed request: unknown type, missing field, bad setting."""

    code = "invalid_request"


class RequestCancelledError(TextEngineError):
    code = "cancelled"


class RequestTimeoutError(TextEngineError):
    code = "timeout"


class InternalComputationError(TextEngineError):
    """A rule function raised unexpectedly while computing a result."""

    code = "internal_error"


class CapabilityDeniedError(TextEngineError):
    code = "capability_denied"
