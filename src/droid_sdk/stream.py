"""Event stream adapter — live events plus a deferred aggregate result.

A producer task owns the process's decoded event iterator and hands each
event over a one-slot queue.  The consumer side records exactly the events
it hands out, so the final ``TurnResult`` is built from what the caller saw.
When the producer reports end-of-stream together with the exit code, the
consumer settles ``result``:

* non-zero exit with no events at all -> ``ExecutionError``;
* anything else -> the folded ``TurnResult`` (best effort after a
  non-zero exit, since a ``turn.failed`` event already explains it).

A decode or parse failure ends the iteration with that exception and
fails ``result`` with the same exception.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Callable
from dataclasses import dataclass
from types import TracebackType

from droid_sdk.errors import ExecutionError
from droid_sdk.events.models import StreamEvent
from droid_sdk.runner.process import ProcessHandle
from droid_sdk.turn.aggregator import build_turn_result_from_events
from droid_sdk.turn.models import TurnResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _EndOfStream:
    exit_code: int


@dataclass(frozen=True)
class _StreamFailed:
    error: BaseException


class EventStream:
    """Single-pass async iterator over one turn's stream events."""

    def __init__(self, turn: StreamedTurn) -> None:
        self._turn = turn

    def __aiter__(self) -> EventStream:
        return self

    async def __anext__(self) -> StreamEvent:
        return await self._turn._next_event()

    async def aclose(self) -> None:
        await self._turn.aclose()


class StreamedTurn:
    """A running streamed turn: ``events`` to iterate, ``result`` to await.

    ``events`` must be consumed to the end (or the turn closed) for
    ``result`` to settle.  Use as an async context manager, or call
    ``aclose()``, to release the process when stopping early.
    """

    def __init__(
        self,
        handle: ProcessHandle,
        session_id: str | None = None,
        on_session_id: Callable[[str], None] | None = None,
    ) -> None:
        self._handle = handle
        self._session_id = session_id
        self._on_session_id = on_session_id
        self._queue: asyncio.Queue[StreamEvent | _EndOfStream | _StreamFailed] = (
            asyncio.Queue(maxsize=1)
        )
        self._collected: list[StreamEvent] = []
        self._producer: asyncio.Task[None] | None = None
        self._finished = False
        self._closed = False

        self.events = EventStream(self)
        self.result: asyncio.Future[TurnResult] = (
            asyncio.get_running_loop().create_future()
        )

    @property
    def session_id(self) -> str | None:
        """Session identifier latched from the events seen so far."""
        return self._session_id

    @property
    def collected_events(self) -> list[StreamEvent]:
        """Events handed to the consumer so far, in order."""
        return list(self._collected)

    # ------------------------------------------------------------------ #
    # Producer
    # ------------------------------------------------------------------ #

    async def _produce(self) -> None:
        try:
            async for event in self._handle.events:
                await self._queue.put(event)
            exit_code = await self._handle.wait()
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            await self._queue.put(_StreamFailed(exc))
            return
        await self._queue.put(_EndOfStream(exit_code))

    # ------------------------------------------------------------------ #
    # Consumer
    # ------------------------------------------------------------------ #

    async def _next_event(self) -> StreamEvent:
        if self._finished:
            raise StopAsyncIteration
        if self._producer is None:
            self._producer = asyncio.create_task(self._produce())

        item = await self._queue.get()

        if isinstance(item, _EndOfStream):
            self._finished = True
            self._settle(item.exit_code)
            await self._release()
            raise StopAsyncIteration

        if isinstance(item, _StreamFailed):
            self._finished = True
            logger.warning("droid event stream failed: %s", item.error)
            if not self.result.done():
                self.result.set_exception(item.error)
                # Already raised to the iterator; mark it retrieved.
                self.result.exception()
            await self._release()
            raise item.error

        self._collected.append(item)
        self._latch_session(item)
        return item

    def _latch_session(self, event: StreamEvent) -> None:
        session_id = getattr(event, "session_id", None)
        if session_id and not self._session_id:
            self._session_id = session_id
            if self._on_session_id is not None:
                self._on_session_id(session_id)

    def _settle(self, exit_code: int) -> None:
        if self.result.done():
            return
        if exit_code != 0 and not self._collected:
            msg = f"Droid process exited with code {exit_code}"
            self.result.set_exception(
                ExecutionError(msg, exit_code, "", self._session_id)
            )
            return
        if exit_code != 0:
            logger.warning(
                "droid exited with code %d after %d events; using partial output",
                exit_code,
                len(self._collected),
            )
        self.result.set_result(build_turn_result_from_events(self._collected))

    # ------------------------------------------------------------------ #
    # Lifecycle
    # ------------------------------------------------------------------ #

    async def _release(self) -> None:
        if self._closed:
            return
        self._closed = True
        if self._producer is not None and not self._producer.done():
            self._producer.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._producer
        await self._handle.aclose()

    async def aclose(self) -> None:
        """Stop the turn early and release the process.

        The process is killed and reaped; ``result`` is then settled from
        the events delivered so far, as if the stream had ended with the
        process's exit code.
        """
        if self._finished:
            await self._release()
            return
        self._finished = True
        await self._release()
        exit_code = self._handle.returncode
        self._settle(exit_code if exit_code is not None else 0)
        self._wake_consumer()

    def _wake_consumer(self) -> None:
        # A consumer blocked in _next_event would otherwise wait forever
        # on the cancelled producer.
        while not self._queue.empty():
            self._queue.get_nowait()
        self._queue.put_nowait(_EndOfStream(self._handle.returncode or 0))

    def kill(self) -> None:
        """Forcibly terminate the process; iteration then ends normally."""
        self._handle.kill()

    async def __aenter__(self) -> StreamedTurn:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()
