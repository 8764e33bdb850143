"""Single-reader message loop around an ``ExecutionCoordinator``.

Requests travel in on one memory channel and envelopes travel out on
another. Work is executed one request at a time; cancel messages are applied
as soon as they are sent, so a request still waiting in the channel observes
its cancellation when it is dispatched.

``close`` ends the current channels. ``process`` opens fresh ones when the
previous pair has been closed, so a context can run any number of batches.
"""

from __future__ import annotations

import logging
import math
from typing import Any, Iterable, List, Mapping

import anyio
from anyio.lowlevel import checkpoint

from textsmith.engine.coordinator import ExecutionCoordinator, RequestTicket
from textsmith.engine.errors import InvalidRequestError
from textsmith.engine.messages import parse_message
from textsmith.engine.models import ResponseEnvelope

logger = logging.getLogger(__name__)


class ExecutionContext:
    """One context per concern; contexts do not share state with callers."""

    def __init__(
        self, coordinator: ExecutionCoordinator, buffer_size: float = math.inf
    ) -> None:
        self.coordinator = coordinator
        self.buffer_size = buffer_size
        self._open_channels()

    @property
    def closed(self) -> bool:
        return self._closed

    def _open_channels(self) -> None:
        self._requests_in, self._requests_out = anyio.create_memory_object_stream(
            self.buffer_size
        )
        self._responses_in, self.responses = anyio.create_memory_object_stream(
            self.buffer_size
        )
        self._closed = False

    def _retire_channels(self) -> None:
        # Tickets left in a channel nobody will serve still hold registrations.
        while True:
            try:
                ticket = self._requests_out.receive_nowait()
            except (anyio.WouldBlock, anyio.EndOfStream, anyio.ClosedResourceError):
                break
            self.coordinator.discard(ticket)
        for stream in (
            self._requests_in,
            self._requests_out,
            self._responses_in,
            self.responses,
        ):
            stream.close()

    async def send(self, message: Mapping[str, Any]) -> None:
        """Deliver one message into the context."""
        try:
            request = parse_message(message)
            if request.is_cancel:
                self.coordinator.cancel(request.id)
                return
            ticket = self.coordinator.admit(request)
        except InvalidRequestError as exc:
            request_id = str(message.get("id", "")) if isinstance(message, Mapping) else ""
            await self._responses_in.send(
                ResponseEnvelope.failure(request_id, exc.message, exc.code, 0.0)
            )
            return
        try:
            await self._requests_in.send(ticket)
        except BaseException:
            self.coordinator.discard(ticket)
            raise

    async def close(self) -> None:
        """Stop accepting requests; ``serve`` drains what is queued and returns."""
        self._closed = True
        await self._requests_in.aclose()

    async def serve(self) -> None:
        async with self._requests_out, self._responses_in:
            async for ticket in self._requests_out:
                await self._responses_in.send(self._dispatch(ticket))
                # Yield between requests so cancel messages sent meanwhile land.
                await checkpoint()

    def _dispatch(self, ticket: RequestTicket) -> ResponseEnvelope:
        envelope = self.coordinator.run(ticket)
        logger.debug(f"Request {ticket.id} finished as {ticket.state.value}")
        return envelope

    async def process(
        self, messages: Iterable[Mapping[str, Any]]
    ) -> List[ResponseEnvelope]:
        """
        Deliver a whole batch, then serve it and collect every envelope.

        Every message is delivered before the first dispatch, so a cancel
        anywhere in the batch reaches its target while it is still queued.
        The channels are closed afterwards.
        """
        if self._closed:
            self._retire_channels()
            self._open_channels()

        try:
            for message in messages:
                await self.send(message)
        except BaseException:
            self._closed = True
            self._retire_channels()
            raise
        await self.close()

        envelopes: List[ResponseEnvelope] = []
        async with anyio.create_task_group() as tg:
            tg.start_soon(self.serve)
            async with self.responses:
                async for envelope in self.responses:
                    envelopes.append(envelope)
        return envelopes
