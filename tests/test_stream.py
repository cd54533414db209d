"""Tests for StreamedTurn: live events plus the deferred aggregate result."""

from __future__ import annotations

import asyncio
import gc
from collections.abc import AsyncIterator
from typing import Any

import pytest

from droid_sdk.errors import ExecutionError, ParseError
from droid_sdk.events import (
    MessageEvent,
    StreamEvent,
    SystemInitEvent,
    TurnCompletedEvent,
    TurnFailedEvent,
)
from droid_sdk.stream import StreamedTurn

# ------------------------------------------------------------------ #
# Helpers
# ------------------------------------------------------------------ #


class FakeHandle:
    """Stands in for ProcessHandle with a scripted event sequence."""

    def __init__(
        self,
        events: list[Any],
        exit_code: int = 0,
        error: BaseException | None = None,
        stall: bool = False,
    ) -> None:
        self._scripted = list(events)
        self._stall = stall
        self._exit_code = exit_code
        self._error = error
        self.returncode: int | None = None
        self.closed = False
        self.killed = False
        self.pulled = 0
        self.events = self._iterate()

    async def _iterate(self) -> AsyncIterator[Any]:
        for event in self._scripted:
            self.pulled += 1
            yield event
        if self._stall:
            await asyncio.Event().wait()
        if self._error is not None:
            raise self._error

    async def wait(self) -> int:
        self.returncode = self._exit_code
        return self._exit_code

    def kill(self) -> None:
        self.killed = True

    async def aclose(self) -> None:
        self.closed = True
        if self.returncode is None:
            self.returncode = -9


def _init(session_id: str = "s1") -> SystemInitEvent:
    return SystemInitEvent(session_id=session_id, cwd="/w", model="m")


def _message(text: str) -> MessageEvent:
    return MessageEvent(id=f"id-{text}", text=text, timestamp=1)


def _completed(text: str = "Done") -> TurnCompletedEvent:
    return TurnCompletedEvent.model_validate(
        {"finalText": text, "numTurns": 1, "durationMs": 50, "session_id": "s1"}
    )


async def _drain(turn: StreamedTurn) -> list[StreamEvent]:
    return [event async for event in turn.events]


# ------------------------------------------------------------------ #
# Normal completion
# ------------------------------------------------------------------ #


class TestCompletion:
    async def test_events_and_result_agree(self) -> None:
        scripted = [_init(), _message("Hi"), _completed()]
        handle = FakeHandle(scripted)
        turn = StreamedTurn(handle)

        seen = await _drain(turn)
        result = await turn.result

        assert seen == scripted
        assert turn.collected_events == scripted
        assert result.final_response == "Done"
        assert result.session_id == "s1"
        assert result.duration_ms == 50
        assert [item.text for item in result.messages] == ["Hi"]
        assert handle.closed

    async def test_no_events_clean_exit(self) -> None:
        turn = StreamedTurn(FakeHandle([]))
        assert await _drain(turn) == []
        result = await turn.result
        assert result.final_response == ""
        assert result.items == ()
        assert result.session_id is None
        assert result.is_error is False

    async def test_iteration_after_end_yields_nothing(self) -> None:
        turn = StreamedTurn(FakeHandle([_message("a")]))
        assert len(await _drain(turn)) == 1
        assert await _drain(turn) == []

    async def test_failed_turn_event(self) -> None:
        failed = TurnFailedEvent.model_validate({"error": {"message": "quota"}})
        turn = StreamedTurn(FakeHandle([_init(), failed], exit_code=1))
        await _drain(turn)
        result = await turn.result
        assert result.is_error is True
        assert result.final_response == "quota"


# ------------------------------------------------------------------ #
# Exit-code reconciliation
# ------------------------------------------------------------------ #


class TestExitReconciliation:
    async def test_non_zero_exit_without_events_fails_result(self) -> None:
        turn = StreamedTurn(FakeHandle([], exit_code=2))
        assert await _drain(turn) == []
        with pytest.raises(ExecutionError) as exc_info:
            await turn.result
        assert exc_info.value.exit_code == 2
        assert exc_info.value.stderr == ""
        assert str(exc_info.value) == "Droid process exited with code 2"

    async def test_non_zero_exit_with_events_is_best_effort(self) -> None:
        turn = StreamedTurn(FakeHandle([_init(), _message("partial")], exit_code=1))
        await _drain(turn)
        result = await turn.result
        assert result.session_id == "s1"
        assert len(result.items) == 1
        assert result.is_error is False


# ------------------------------------------------------------------ #
# Failures
# ------------------------------------------------------------------ #


class TestStreamFailure:
    async def test_parse_error_reaches_both_observers(self) -> None:
        error = ParseError("Failed to parse JSON line: {bad...", "{bad")
        handle = FakeHandle([_message("ok")], error=error)
        turn = StreamedTurn(handle)

        seen: list[StreamEvent] = []
        with pytest.raises(ParseError) as iter_exc:
            async for event in turn.events:
                seen.append(event)

        with pytest.raises(ParseError) as result_exc:
            await turn.result

        assert len(seen) == 1
        assert iter_exc.value is error
        assert result_exc.value is error
        assert handle.closed

    async def test_unawaited_result_is_not_reported(self) -> None:
        reported: list[dict[str, Any]] = []
        loop = asyncio.get_running_loop()
        loop.set_exception_handler(lambda _loop, context: reported.append(context))
        try:
            turn = StreamedTurn(FakeHandle([], error=ParseError("bad", "{")))
            with pytest.raises(ParseError):
                await _drain(turn)
            assert turn.result.done()
            del turn
            gc.collect()
        finally:
            loop.set_exception_handler(None)
        assert reported == []


# ------------------------------------------------------------------ #
# Early stop and lifecycle
# ------------------------------------------------------------------ #


class TestEarlyStop:
    async def test_aclose_settles_from_delivered_events(self) -> None:
        handle = FakeHandle([_init(), _message("a"), _message("b"), _completed()])
        turn = StreamedTurn(handle)

        first = await anext(turn.events)
        second = await anext(turn.events)
        await turn.aclose()
        result = await turn.result

        assert [first, second] == turn.collected_events
        assert [item.text for item in result.messages] == ["a"]
        assert result.final_response == ""
        assert handle.closed

    async def test_aclose_before_any_event(self) -> None:
        handle = FakeHandle([_message("never seen")])
        turn = StreamedTurn(handle)
        await turn.aclose()
        with pytest.raises(ExecutionError) as exc_info:
            await turn.result
        assert exc_info.value.exit_code == -9
        assert handle.closed

    async def test_aclose_from_another_task_ends_iteration(self) -> None:
        handle = FakeHandle([_init()], stall=True)
        turn = StreamedTurn(handle)
        seen: list[StreamEvent] = []
        first_seen = asyncio.Event()

        async def consume() -> None:
            async for event in turn.events:
                seen.append(event)
                first_seen.set()

        consumer = asyncio.create_task(consume())
        await asyncio.wait_for(first_seen.wait(), timeout=5)
        await turn.aclose()
        await asyncio.wait_for(consumer, timeout=5)

        assert len(seen) == 1
        assert handle.closed
        assert (await turn.result).session_id == "s1"
        assert await _drain(turn) == []

    async def test_async_with_releases_on_break(self) -> None:
        handle = FakeHandle([_message("a"), _message("b")])
        async with StreamedTurn(handle) as turn:
            async for _event in turn.events:
                break
        assert handle.closed
        assert turn.result.done()
        assert len((await turn.result).items) == 1

    async def test_aclose_after_completion_is_harmless(self) -> None:
        handle = FakeHandle([_completed()])
        turn = StreamedTurn(handle)
        await _drain(turn)
        await turn.aclose()
        assert (await turn.result).final_response == "Done"

    async def test_events_aclose_closes_turn(self) -> None:
        handle = FakeHandle([_message("a")])
        turn = StreamedTurn(handle)
        await turn.events.aclose()
        assert handle.closed
        assert turn.result.done()
        with pytest.raises(ExecutionError):
            await turn.result

    async def test_kill_delegates(self) -> None:
        handle = FakeHandle([])
        turn = StreamedTurn(handle)
        turn.kill()
        assert handle.killed
        await turn.aclose()
        with pytest.raises(ExecutionError):
            await turn.result


# ------------------------------------------------------------------ #
# Session tracking
# ------------------------------------------------------------------ #


class TestSessionTracking:
    async def test_callback_fires_once_with_first_session(self) -> None:
        seen: list[str] = []
        handle = FakeHandle([_message("x"), _init("s1"), _init("s2")])
        turn = StreamedTurn(handle, on_session_id=seen.append)
        await _drain(turn)
        assert seen == ["s1"]
        assert turn.session_id == "s1"

    async def test_known_session_not_reported(self) -> None:
        seen: list[str] = []
        turn = StreamedTurn(
            FakeHandle([_init("s1")]), session_id="s1", on_session_id=seen.append
        )
        await _drain(turn)
        assert seen == []
        assert turn.session_id == "s1"
