"""Line decoder — newline-delimited JSON over an arbitrary chunked byte stream."""

from __future__ import annotations

import asyncio
import codecs
from collections.abc import AsyncIterable, AsyncIterator

from droid_sdk.errors import StreamError
from droid_sdk.events.models import StreamEvent
from droid_sdk.events.parser import parse_record

#: Bytes requested per read from a subprocess pipe.
_CHUNK_SIZE = 65_536


async def iter_chunks(
    reader: asyncio.StreamReader, size: int = _CHUNK_SIZE
) -> AsyncIterator[bytes]:
    """Yield raw chunks from *reader* until EOF."""
    while True:
        chunk = await reader.read(size)
        if not chunk:
            return
        yield chunk


async def iter_lines(source: AsyncIterable[bytes]) -> AsyncIterator[str]:
    """Yield non-blank, stripped lines from a chunked byte *source*.

    Chunk boundaries may fall anywhere, including inside a multi-byte
    UTF-8 character.  A final line without a trailing newline is still
    yielded.  The source is closed on every exit path, including when the
    consumer stops early.

    Raises:
        StreamError: reading from *source* failed.
    """
    decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
    chunks = aiter(source)
    buffer = ""
    try:
        while True:
            try:
                chunk = await anext(chunks)
            except StopAsyncIteration:
                break
            except Exception as exc:
                raise StreamError("Failed to read stream", exc) from exc

            buffer += decoder.decode(chunk)
            *lines, buffer = buffer.split("\n")
            for line in lines:
                stripped = line.strip()
                if stripped:
                    yield stripped

        buffer += decoder.decode(b"", final=True)
        tail = buffer.strip()
        if tail:
            yield tail
    finally:
        aclose = getattr(chunks, "aclose", None)
        if aclose is not None:
            await aclose()


async def parse_json_lines(source: AsyncIterable[bytes]) -> AsyncIterator[StreamEvent]:
    """Yield one parsed stream event per line of *source*.

    Raises:
        StreamError: reading from *source* failed.
        ParseError: a line is not a valid event record.
    """
    lines = iter_lines(source)
    try:
        async for line in lines:
            yield parse_record(line)
    finally:
        await lines.aclose()
