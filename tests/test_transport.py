from __future__ import annotations

import io
import json
import threading
import urllib.error
from unittest.mock import patch

import pytest

from gptpolish.errors import TransportError
from gptpolish.transport import HttpResponse, UrllibTransport


class _FakeResponse:
    def __init__(self, body: bytes, status: int = 200) -> None:
        self._stream = io.BytesIO(body)
        self.status = status

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        return False

    def read(self, n: int = -1) -> bytes:
        return self._stream.read(n)


def test_request_returns_status_and_text():
    seen: list[dict] = []

    def fake_urlopen(req, timeout=0):
        seen.append({"url": req.full_url, "method": req.get_method(), "body": req.data, "timeout": timeout})
        return _FakeResponse(b'{"data":[1]}')

    with patch("gptpolish.transport.urllib.request.urlopen", side_effect=fake_urlopen):
        resp = UrllibTransport().request("GET", "https://x.test/v1/models", {"Authorization": "Bearer k"}, timeout_s=5)

    assert resp == HttpResponse(status=200, text='{"data":[1]}')
    assert resp.data == {"data": [1]}
    assert seen[0]["method"] == "GET"
    assert seen[0]["timeout"] == 5


def test_request_http_error_becomes_response():
    def fake_urlopen(req, timeout=0):
        body = json.dumps({"error": {"message": "bad"}}).encode("utf-8")
        raise urllib.error.HTTPError(req.full_url, 400, "Bad Request", hdrs=None, fp=io.BytesIO(body))

    with patch("gptpolish.transport.urllib.request.urlopen", side_effect=fake_urlopen):
        resp = UrllibTransport().request("POST", "https://x.test", {}, b"{}")

    assert resp.status == 400
    assert resp.data == {"error": {"message": "bad"}}


def test_request_connection_failure_raises_transport_error():
    def fake_urlopen(req, timeout=0):
        raise urllib.error.URLError("connection refused")

    with patch("gptpolish.transport.urllib.request.urlopen", side_effect=fake_urlopen):
        with pytest.raises(TransportError, match="connection refused"):
            UrllibTransport().request("GET", "https://x.test", {})


def test_non_json_body_has_no_data():
    assert HttpResponse(status=502, text="<html>").data is None
    assert HttpResponse(status=200).data is None


def test_stream_request_decodes_multibyte_across_reads():
    body = "data: 世界\n".encode("utf-8")
    chunks: list[str] = []

    with patch(
        "gptpolish.transport.urllib.request.urlopen",
        side_effect=lambda req, timeout=0: _FakeResponse(body),
    ):
        resp = UrllibTransport(chunk_size=1).stream_request(
            "POST", "https://x.test", {}, b"{}", on_chunk=chunks.append
        )

    assert resp.status == 200
    assert not resp.cancelled
    assert "".join(chunks) == "data: 世界\n"
    assert all("�" not in c for c in chunks)


def test_stream_request_stops_when_cancelled():
    cancel = threading.Event()
    chunks: list[str] = []

    def on_chunk(text: str) -> None:
        chunks.append(text)
        cancel.set()

    with patch(
        "gptpolish.transport.urllib.request.urlopen",
        side_effect=lambda req, timeout=0: _FakeResponse(b"abcdef"),
    ):
        resp = UrllibTransport(chunk_size=2).stream_request(
            "POST", "https://x.test", {}, b"{}", on_chunk=on_chunk, cancel_signal=cancel
        )

    assert resp.cancelled
    assert chunks == ["ab"]


def test_stream_request_callback_errors_are_not_transport_errors():
    def on_chunk(text: str) -> None:
        raise BrokenPipeError("stdout closed")

    with patch(
        "gptpolish.transport.urllib.request.urlopen",
        side_effect=lambda req, timeout=0: _FakeResponse(b"data: {}\n"),
    ):
        with pytest.raises(BrokenPipeError):
            UrllibTransport().stream_request("POST", "https://x.test", {}, b"{}", on_chunk=on_chunk)


def test_stream_request_read_failure_raises_transport_error():
    class _BrokenResponse(_FakeResponse):
        def read(self, n: int = -1) -> bytes:
            raise TimeoutError("read timed out")

    with patch(
        "gptpolish.transport.urllib.request.urlopen",
        side_effect=lambda req, timeout=0: _BrokenResponse(b""),
    ):
        with pytest.raises(TransportError, match="read timed out"):
            UrllibTransport().stream_request("POST", "https://x.test", {}, b"{}", on_chunk=lambda text: None)
