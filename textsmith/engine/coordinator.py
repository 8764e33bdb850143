"""Per-request lifecycle: admission, deadline, cancellation and dispatch.

A request moves ``pending -> running -> completed | cancelled | timed_out``.
Malformed requests and unknown types end in ``rejected``; unexpected errors
from a rule function end in ``failed``. The coordinator owns the table of
outstanding registrations; each one is released exactly once, whichever way
the request ends.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Mapping, Optional

from textsmith.config import Settings, get_settings
from textsmith.engine import analysis
from textsmith.engine.errors import (
    InternalComputationError,
    InvalidRequestError,
    RequestCancelledError,
    RequestTimeoutError,
    TextEngineError,
)
from textsmith.engine.messages import RequestMessage, parse_message
from textsmith.engine.models import (
    KeywordsResult,
    ResponseEnvelope,
    ResultPayload,
    ScoreResult,
    SummaryResult,
)
from textsmith.engine.pipeline import TransformPipeline

logger = logging.getLogger(__name__)

Clock = Callable[[], float]


class RequestState(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    TIMED_OUT = "timed_out"
    REJECTED = "rejected"
    FAILED = "failed"


TERMINAL_STATE_FOR_ERROR = {
    RequestCancelledError: RequestState.CANCELLED,
    RequestTimeoutError: RequestState.TIMED_OUT,
    InvalidRequestError: RequestState.REJECTED,
}


@dataclass(slots=True)
class CancellationToken:
    deadline: float
    cancelled: bool = False

    def cancel(self) -> None:
        self.cancelled = True

    def expired(self, now: float) -> bool:
        return now >= self.deadline


@dataclass(slots=True)
class RequestTicket:
    request: RequestMessage
    token: CancellationToken
    admitted_at: float
    state: RequestState = RequestState.PENDING
    released: bool = False

    @property
    def id(self) -> str:
        return self.request.id


def _raw_id(message: Any) -> str:
    if isinstance(message, Mapping):
        value = message.get("id")
        if value is not None:
            return str(value)
    return ""


class ExecutionCoordinator:
    """Runs transform and analysis requests against a deadline."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        pipeline: Optional[TransformPipeline] = None,
        clock: Clock = time.perf_counter,
    ) -> None:
        settings = settings or get_settings()
        self.timeout_ms = settings.request_timeout_ms
        self.max_text_chars = settings.max_text_chars
        self.default_max_keywords = settings.default_max_keywords
        self.default_summary_length = settings.default_summary_length
        self._pipeline = pipeline or TransformPipeline()
        self._clock = clock
        self._active: Dict[str, RequestTicket] = {}
        self._handlers: Dict[str, Callable[[RequestMessage], ResultPayload]] = {
            "transform": self._run_transform,
            "analyze": self._run_analyze,
            "keywords": self._run_keywords,
            "summarize": self._run_summarize,
            "score": self._run_score,
        }

    @property
    def outstanding(self) -> int:
        return len(self._active)

    def is_outstanding(self, request_id: str) -> bool:
        return request_id in self._active

    def admit(self, message: Mapping[str, Any] | RequestMessage) -> RequestTicket:
        """Register a request and start its deadline."""
        request = parse_message(message)
        if request.is_cancel:
            raise InvalidRequestError("Cancel messages carry no work to admit")
        if request.id in self._active:
            raise InvalidRequestError(f"Request id '{request.id}' is already outstanding")

        now = self._clock()
        ticket = RequestTicket(
            request=request,
            token=CancellationToken(deadline=now + self.timeout_ms / 1000),
            admitted_at=now,
        )
        self._active[request.id] = ticket
        logger.debug(f"Admitted request {request.id} ({request.type})")
        return ticket

    def cancel(self, request_id: str) -> bool:
        """Flag an outstanding request; returns False once it has been released."""
        ticket = self._active.get(request_id)
        if ticket is None:
            return False
        ticket.token.cancel()
        logger.info(f"Cancellation requested for {request_id}")
        return True

    def run(self, ticket: RequestTicket) -> ResponseEnvelope:
        """Execute an admitted request. Never raises; failures become envelopes."""
        request = ticket.request
        try:
            handler = self._handlers.get(request.type)
            if handler is None:
                raise InvalidRequestError("Unknown request type")
            self._check_entry(ticket)
            ticket.state = RequestState.RUNNING
            result = handler(request)
            ticket.state = RequestState.COMPLETED
            return ResponseEnvelope.success(request.id, result, self._elapsed_ms(ticket))
        except TextEngineError as exc:
            ticket.state = TERMINAL_STATE_FOR_ERROR.get(type(exc), RequestState.FAILED)
            return ResponseEnvelope.failure(
                request.id, exc.message, exc.code, self._elapsed_ms(ticket)
            )
        except Exception as exc:
            logger.error(f"Request {request.id} failed: {exc}", exc_info=True)
            ticket.state = RequestState.FAILED
            error = InternalComputationError(f"Internal error: {exc}")
            return ResponseEnvelope.failure(
                request.id, error.message, error.code, self._elapsed_ms(ticket)
            )
        finally:
            self._release(ticket)

    def discard(self, ticket: RequestTicket) -> None:
        """Release a ticket that will never be run."""
        if not ticket.released:
            ticket.state = RequestState.CANCELLED
            logger.debug(f"Discarded request {ticket.id} before dispatch")
        self._release(ticket)

    def handle(
        self, message: Mapping[str, Any] | RequestMessage
    ) -> Optional[ResponseEnvelope]:
        """Admit and run one message. Cancel messages produce no envelope."""
        started = self._clock()
        try:
            request = parse_message(message)
            if request.is_cancel:
                self.cancel(request.id)
                return None
            ticket = self.admit(request)
        except InvalidRequestError as exc:
            request_id = (
                message.id if isinstance(message, RequestMessage) else _raw_id(message)
            )
            elapsed = max(0.0, (self._clock() - started) * 1000)
            return ResponseEnvelope.failure(request_id, exc.message, exc.code, elapsed)
        return self.run(ticket)

    def _check_entry(self, ticket: RequestTicket) -> None:
        if ticket.token.cancelled:
            logger.warning(f"Request {ticket.id} cancelled before dispatch")
            raise RequestCancelledError("Request cancelled")
        if ticket.token.expired(self._clock()):
            logger.warning(f"Request {ticket.id} exceeded its {self.timeout_ms} ms deadline")
            raise RequestTimeoutError(f"Request timed out after {self.timeout_ms} ms")

    def _release(self, ticket: RequestTicket) -> None:
        if ticket.released:
            return
        ticket.released = True
        if self._active.get(ticket.id) is ticket:
            del self._active[ticket.id]

    def _elapsed_ms(self, ticket: RequestTicket) -> float:
        return round(max(0.0, (self._clock() - ticket.admitted_at) * 1000), 3)

    def _require_text(self, request: RequestMessage) -> str:
        text = request.payload.text
        if text is None:
            raise InvalidRequestError("payload.text is required")
        if len(text) > self.max_text_chars:
            raise InvalidRequestError(
                f"Text is {len(text)} characters; the limit is {self.max_text_chars}"
            )
        return text

    def _run_transform(self, request: RequestMessage) -> ResultPayload:
        text = self._require_text(request)
        return self._pipeline.transform(text, request.payload.settings.to_domain())

    def _run_analyze(self, request: RequestMessage) -> ResultPayload:
        text = self._require_text(request)
        return analysis.analyze(
            text,
            max_keywords=request.payload.max_keywords or self.default_max_keywords,
            summary_length=request.payload.summary_length
            or self.default_summary_length,
        )

    def _run_keywords(self, request: RequestMessage) -> ResultPayload:
        text = self._require_text(request)
        return KeywordsResult(
            keywords=analysis.extract_keywords(
                text, request.payload.max_keywords or self.default_max_keywords
            )
        )

    def _run_summarize(self, request: RequestMessage) -> ResultPayload:
        text = self._require_text(request)
        return SummaryResult(
            summary=analysis.summarize(
                text, request.payload.summary_length or self.default_summary_length
            )
        )

    def _run_score(self, request: RequestMessage) -> ResultPayload:
        return ScoreResult(score=analysis.readability_score(self._require_text(request)))
