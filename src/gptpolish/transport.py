from __future__ import annotations

import codecs
import json
import logging
import urllib.error
import urllib.request
from dataclasses import dataclass
from typing import Any, Callable, Protocol

from .errors import TransportError

_logger = logging.getLogger(__name__)

ChunkHandler = Callable[[str], None]


class CancelSignal(Protocol):
    """Anything with ``is_set()``; ``threading.Event`` qualifies."""

    def is_set(self) -> bool: ...


@dataclass(frozen=True)
class HttpResponse:
    status: int
    text: str = ""
    cancelled: bool = False

    @property
    def data(self) -> Any:
        """Parsed JSON body, or None when the body is not JSON."""
        if not self.text:
            return None
        try:
            return json.loads(self.text)
        except json.JSONDecodeError:
            return None


class HttpTransport(Protocol):
    def request(
        self,
        method: str,
        url: str,
        headers: dict[str, str],
        body: bytes | None = None,
        *,
        timeout_s: float = 60.0,
    ) -> HttpResponse: ...

    def stream_request(
        self,
        method: str,
        url: str,
        headers: dict[str, str],
        body: bytes | None,
        *,
        on_chunk: ChunkHandler,
        cancel_signal: CancelSignal | None = None,
        timeout_s: float = 60.0,
    ) -> HttpResponse: ...


def _read_error_body(e: urllib.error.HTTPError) -> str:
    try:
        return e.read().decode("utf-8", errors="replace") if hasattr(e, "read") else ""
    except OSError:
        return ""


class UrllibTransport:
    """HTTP transport on top of ``urllib.request``.

    Error statuses come back as ``HttpResponse`` so the caller can classify
    them; only connection level failures raise ``TransportError``.
    """

    def __init__(self, chunk_size: int = 1024) -> None:
        self.chunk_size = chunk_size

    def _build(self, method: str, url: str, headers: dict[str, str], body: bytes | None) -> urllib.request.Request:
        return urllib.request.Request(url=url, data=body, headers=dict(headers), method=method)

    def request(
        self,
        method: str,
        url: str,
        headers: dict[str, str],
        body: bytes | None = None,
        *,
        timeout_s: float = 60.0,
    ) -> HttpResponse:
        req = self._build(method, url, headers, body)
        try:
            with urllib.request.urlopen(req, timeout=timeout_s) as resp:
                return HttpResponse(status=int(resp.status), text=resp.read().decode("utf-8", errors="replace"))
        except urllib.error.HTTPError as e:
            return HttpResponse(status=int(e.code), text=_read_error_body(e))
        except (urllib.error.URLError, OSError) as e:
            raise TransportError(str(getattr(e, "reason", e))) from e

    def stream_request(
        self,
        method: str,
        url: str,
        headers: dict[str, str],
        body: bytes | None,
        *,
        on_chunk: ChunkHandler,
        cancel_signal: CancelSignal | None = None,
        timeout_s: float = 60.0,
    ) -> HttpResponse:
        req = self._build(method, url, headers, body)
        # Multibyte characters may straddle two reads.
        decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        try:
            resp = urllib.request.urlopen(req, timeout=timeout_s)
        except urllib.error.HTTPError as e:
            return HttpResponse(status=int(e.code), text=_read_error_body(e))
        except (urllib.error.URLError, OSError) as e:
            raise TransportError(str(getattr(e, "reason", e))) from e

        # Only socket failures become TransportError; on_chunk errors propagate as raised.
        with resp:
            status = int(resp.status)
            read = getattr(resp, "read1", resp.read)
            while True:
                if cancel_signal is not None and cancel_signal.is_set():
                    _logger.info("Stream cancelled: %s", url)
                    return HttpResponse(status=status, cancelled=True)
                try:
                    raw = read(self.chunk_size)
                except OSError as e:
                    raise TransportError(str(e)) from e
                if not raw:
                    break
                text = decoder.decode(raw)
                if text:
                    on_chunk(text)
            tail = decoder.decode(b"", final=True)
            if tail:
                on_chunk(tail)
            return HttpResponse(status=status)
