"""Server-sent event decoding for streamed chat and text completions.

The API streams completions as SSE frames whose ``data:`` payload is one
JSON chunk, and ends the stream with a ``data: [DONE]`` frame.
:class:`SSEDecoder` turns raw bytes, split at arbitrary read boundaries,
into :class:`ServerSentEvent` values. :class:`EventStream` pulls bytes on
demand, decodes each event into a typed chunk and owns the connection
until the stream is done, fails or is closed.

Typical use::

    with client.chat_completions_stream(req) as stream:
        for chunk in stream:
            print(chunk.text, end="", flush=True)
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import Any, Callable, Deque, Generic, Iterable, List, Mapping, Optional, TypeVar

import json
import logging
import weakref

from .errors import APIConnectionError, DecodeError, StreamTruncatedError

logger = logging.getLogger(__name__)

DONE_SENTINEL = "[DONE]"

_BOM = b"\xef\xbb\xbf"
_CR = 0x0D
_LF = 0x0A

# EventStream states
IDLE = "idle"
BUFFERING = "buffering"
FRAME_COMPLETE = "frame_complete"
DONE = "done"
ERROR = "error"
CLOSED = "closed"

T = TypeVar("T")


@dataclass(frozen=True)
class ServerSentEvent:
    data: str
    event: str = "message"
    id: Optional[str] = None
    retry: Optional[int] = None


class SSEDecoder:
    """Incremental SSE frame parser.

    Bytes are buffered until a full line is available, so multibyte UTF-8
    sequences and ``\\r\\n`` pairs split across reads decode the same as
    when they arrive in one piece.
    """

    def __init__(self) -> None:
        self._buf = bytearray()
        self._started = False
        self._data: List[str] = []
        self._event = ""
        self._last_id: Optional[str] = None
        self._retry: Optional[int] = None
        self._in_frame = False

    @property
    def pending(self) -> bool:
        """True while a partial frame is buffered."""
        return bool(self._buf) or self._in_frame

    def feed(self, chunk: bytes) -> List[ServerSentEvent]:
        self._buf.extend(chunk)
        if not self._started:
            if len(self._buf) < len(_BOM) and _BOM.startswith(bytes(self._buf)):
                return []
            if self._buf.startswith(_BOM):
                del self._buf[: len(_BOM)]
            self._started = True

        events = []
        for line in self._take_lines(final=False):
            event = self._process_line(line)
            if event is not None:
                events.append(event)
        return events

    def finish(self) -> List[ServerSentEvent]:
        """Flush a trailing ``\\r`` held back by :meth:`feed` at end of input."""
        events = []
        for line in self._take_lines(final=True):
            event = self._process_line(line)
            if event is not None:
                events.append(event)
        return events

    def _take_lines(self, *, final: bool) -> List[bytes]:
        buf = self._buf
        lines = []
        start = 0
        n = len(buf)
        while start < n:
            cr = buf.find(b"\r", start)
            lf = buf.find(b"\n", start)
            if cr < 0 and lf < 0:
                break
            if cr < 0 or (0 <= lf < cr):
                lines.append(bytes(buf[start:lf]))
                start = lf + 1
                continue
            if cr + 1 == n and not final:
                # wait for the next read to tell "\r" from "\r\n"
                break
            lines.append(bytes(buf[start:cr]))
            start = cr + 2 if cr + 1 < n and buf[cr + 1] == _LF else cr + 1
        del buf[:start]
        return lines

    def _process_line(self, raw: bytes) -> Optional[ServerSentEvent]:
        if not raw:
            return self._dispatch()

        line = raw.decode("utf-8", errors="replace")
        if line.startswith(":"):
            return None
        self._in_frame = True

        name, sep, value = line.partition(":")
        if sep and value.startswith(" "):
            value = value[1:]

        if name == "data":
            self._data.append(value)
        elif name == "event":
            self._event = value
        elif name == "id":
            if "\0" not in value:
                self._last_id = value
        elif name == "retry":
            if value.isdigit():
                self._retry = int(value)
        return None

    def _dispatch(self) -> Optional[ServerSentEvent]:
        self._in_frame = False
        if not self._data:
            self._event = ""
            self._retry = None
            return None
        event = ServerSentEvent(
            data="\n".join(self._data),
            event=self._event or "message",
            id=self._last_id,
            retry=self._retry,
        )
        self._data = []
        self._event = ""
        self._retry = None
        return event


class EventStream(Generic[T]):
    """Lazy, forward-only sequence of typed chunks read from an SSE body.

    ``chunks`` yields raw bytes as they arrive from the network, ``parse``
    maps one decoded JSON object to a chunk, and ``release`` frees the
    underlying connection. The connection is released exactly once: when
    the ``[DONE]`` sentinel is read, when a fatal error is raised, when
    :meth:`close` is called, or when an abandoned stream is garbage
    collected.

    A read failure before any body byte arrives raises
    :class:`APIConnectionError`; ``url`` names the endpoint in that error.
    A frame whose payload is not a JSON object raises :class:`DecodeError`
    for that frame only; the next pull carries on with the following frame.
    Running out of bytes before the sentinel raises
    :class:`StreamTruncatedError` and ends the stream.
    """

    def __init__(
        self,
        chunks: Iterable[bytes],
        parse: Callable[[Mapping[str, Any]], T],
        *,
        release: Optional[Callable[[], None]] = None,
        url: str = "",
    ):
        self._chunks = iter(chunks)
        self._parse = parse
        self._url = url
        # must not reference self, or the stream is never collected
        self._finalizer = weakref.finalize(self, _release_resources, self._chunks, release)
        self._decoder = SSEDecoder()
        self._pending: Deque[ServerSentEvent] = deque()
        self._received = False
        self._exhausted = False
        self._position = 0
        self._state = IDLE

    @property
    def state(self) -> str:
        return self._state

    @property
    def closed(self) -> bool:
        return self._state in (DONE, ERROR, CLOSED)

    def __iter__(self) -> "EventStream[T]":
        return self

    def __next__(self) -> T:
        if self.closed:
            raise StopIteration

        event = self._next_event()
        position = self._position
        self._position += 1
        self._state = FRAME_COMPLETE

        if event.data == DONE_SENTINEL:
            logger.debug("stream finished after %d frames", position)
            self._state = DONE
            self._release_connection()
            raise StopIteration

        try:
            payload = json.loads(event.data)
        except ValueError as exc:
            logger.warning("stream frame %d is not valid JSON: %s", position, exc)
            raise DecodeError(
                f"error parsing stream frame {position}: {exc}",
                data=event.data,
                position=position,
            ) from exc

        if not isinstance(payload, dict):
            logger.warning("stream frame %d is not a JSON object", position)
            raise DecodeError(
                f"error parsing stream frame {position}: expected a JSON object",
                data=event.data,
                position=position,
            )

        try:
            return self._parse(payload)
        except (KeyError, TypeError, ValueError, AttributeError) as exc:
            logger.warning("stream frame %d has an unexpected shape: %s", position, exc)
            raise DecodeError(
                f"error parsing stream frame {position}: {exc}",
                data=event.data,
                position=position,
            ) from exc

    def _next_event(self) -> ServerSentEvent:
        while not self._pending:
            if self._exhausted:
                mid_frame = self._decoder.pending
                where = "mid-frame" if mid_frame else "before [DONE]"
                self._fail(
                    StreamTruncatedError(f"stream ended unexpectedly {where}", mid_frame=mid_frame)
                )

            self._state = BUFFERING
            try:
                chunk = next(self._chunks)
            except StopIteration:
                self._exhausted = True
                self._pending.extend(self._decoder.finish())
                continue
            except OSError as exc:
                # requests' exceptions derive from OSError as well
                if not self._received:
                    self._fail(APIConnectionError(self._url, str(exc)), cause=exc)
                self._fail(
                    StreamTruncatedError(
                        f"stream connection lost: {exc}", mid_frame=self._decoder.pending
                    ),
                    cause=exc,
                )

            if chunk:
                self._received = True
                self._pending.extend(self._decoder.feed(chunk))

        return self._pending.popleft()

    def _fail(self, exc: Exception, cause: Optional[BaseException] = None) -> None:
        self._state = ERROR
        self._release_connection()
        raise exc from cause

    def _release_connection(self) -> None:
        # a finalizer runs at most once
        self._finalizer()

    def close(self) -> None:
        """Stop the stream and release the connection. Safe to call twice."""
        if not self.closed:
            self._state = CLOSED
        self._release_connection()

    def __enter__(self) -> "EventStream[T]":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def collect_text(self) -> str:
        """Drain the stream and return the concatenated chunk text."""
        return "".join(getattr(chunk, "text", "") for chunk in self)


def _release_resources(chunks: Any, release: Optional[Callable[[], None]]) -> None:
    close_chunks = getattr(chunks, "close", None)
    if close_chunks is not None:
        close_chunks()
    if release is not None:
        logger.debug("releasing stream connection")
        release()
