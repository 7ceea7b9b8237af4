"""Incremental assembly of ``data: <json>`` streaming frames.

Chunks arrive with arbitrary boundaries; a frame may be split over several
deliveries. ``feed`` appends the chunk, consumes every complete line and keeps
the trailing partial line for the next call, so the decoded events do not
depend on where the transport happened to cut the byte stream.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Union

from .errors import ErrorKind, ServiceError, classify_response, missing_api_keys

_logger = logging.getLogger(__name__)

FRAME_PREFIX = "data:"
DONE_SENTINEL = "[DONE]"
AUTH_FAILURE_MARKER = "Invalid token"


@dataclass(frozen=True)
class StreamDelta:
    delta: str
    text: str  # accumulated text including this delta


@dataclass(frozen=True)
class StreamDone:
    text: str


@dataclass(frozen=True)
class StreamError:
    error: ServiceError


StreamEvent = Union[StreamDelta, StreamDone, StreamError]


@dataclass
class StreamBuffer:
    """Per-call assembly state. ``pending`` only ever holds an incomplete line."""

    pending: str = ""
    accumulated: str = ""
    done: bool = False


def _extract_delta(obj: Any) -> str | None:
    if not isinstance(obj, dict):
        return None
    choices = obj.get("choices")
    if not isinstance(choices, list) or not choices:
        return None
    first = choices[0]
    if not isinstance(first, dict):
        return None
    delta = first.get("delta")
    if not isinstance(delta, dict):
        return None
    content = delta.get("content")
    if isinstance(content, str) and content:
        return content
    return None


def _decode_frame(buffer: StreamBuffer, payload: str) -> StreamEvent | None:
    if payload == DONE_SENTINEL:
        buffer.done = True
        return StreamDone(text=buffer.accumulated)
    try:
        obj = json.loads(payload)
    except json.JSONDecodeError:
        _logger.warning("Malformed stream frame skipped: %.200s", payload)
        return StreamError(
            ServiceError(kind=ErrorKind.PARAM, message="Failed to parse JSON", addition=payload[:500] or None)
        )
    if isinstance(obj, dict) and obj.get("error") is not None:
        return StreamError(classify_response(None, obj, raw_text=payload))
    delta = _extract_delta(obj)
    if delta is None:
        return None
    buffer.accumulated += delta
    return StreamDelta(delta=delta, text=buffer.accumulated)


def feed(buffer: StreamBuffer, chunk: str) -> tuple[StreamBuffer, list[StreamEvent]]:
    """Consume one transport chunk and return the events it completed."""
    if AUTH_FAILURE_MARKER in chunk:
        return buffer, [StreamError(missing_api_keys())]

    events: list[StreamEvent] = []
    buffer.pending += chunk
    while True:
        newline = buffer.pending.find("\n")
        if newline < 0:
            break
        line = buffer.pending[:newline].rstrip("\r")
        buffer.pending = buffer.pending[newline + 1 :]
        if buffer.done or not line.startswith(FRAME_PREFIX):
            # Blank SSE separators, ``:`` comments and anything after [DONE].
            continue
        event = _decode_frame(buffer, line[len(FRAME_PREFIX) :].strip())
        if event is not None:
            events.append(event)
    return buffer, events


class StreamAssembler:
    """Owns the buffer of one streaming call."""

    def __init__(self) -> None:
        self.buffer = StreamBuffer()

    @property
    def text(self) -> str:
        return self.buffer.accumulated

    @property
    def done(self) -> bool:
        return self.buffer.done

    def feed(self, chunk: str) -> list[StreamEvent]:
        self.buffer, events = feed(self.buffer, chunk)
        return events

    def flush(self) -> list[StreamEvent]:
        """Decode a final frame the server left without a trailing newline."""
        if not self.buffer.pending.strip():
            return []
        return self.feed("\n")
