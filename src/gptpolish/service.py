from __future__ import annotations

import json
import logging
import random
import threading
from typing import Callable, Optional, Sequence

from .config import ProviderConfig, pick_api_key
from .endpoint import Endpoint, Purpose, build_headers, resolve_endpoint
from .errors import (
    AZURE_TROUBLESHOOTING_LINK,
    OPENAI_TROUBLESHOOTING_LINK,
    ErrorKind,
    PolishError,
    ServiceError,
    classify_exception,
    classify_response,
    error_message_from_body,
    missing_api_keys,
    missing_custom_model,
    unsupported_language,
)
from .languages import is_supported_language, supported_language_codes
from .models import TranslationOutcome, TranslationQuery, TranslationResult, ValidationOutcome
from .normalize import normalize_response, stream_result
from .prompts import RequestPayload, build_request_payload
from .stream import StreamAssembler, StreamDelta, StreamError, StreamEvent
from .transport import HttpResponse, HttpTransport, UrllibTransport

_logger = logging.getLogger(__name__)

# Maximum duration of one call, declared to the host; not enforced here.
PLUGIN_TIMEOUT_S = 60

VALIDATION_MESSAGES = [
    {"role": "system", "content": "You are a helpful assistant."},
    {"role": "user", "content": "Test connection."},
]
VALIDATION_MAX_TOKENS = 5


def _troubleshooting_link(endpoint: Endpoint) -> str:
    return AZURE_TROUBLESHOOTING_LINK if endpoint.is_azure else OPENAI_TROUBLESHOOTING_LINK


def _raise_for_response(response: HttpResponse, endpoint: Endpoint) -> None:
    data = response.data
    if response.status >= 400 or error_message_from_body(data):
        raise PolishError(
            classify_response(response.status, data, raw_text=response.text, link=_troubleshooting_link(endpoint))
        )


class _StreamSession:
    """State of one streaming translate call; never shared between calls."""

    def __init__(self, query: TranslationQuery) -> None:
        self.query = query
        self.assembler = StreamAssembler()
        self.stop = threading.Event()
        self.error: Optional[ServiceError] = None

    def is_set(self) -> bool:
        """Cancel signal seen by the transport: caller cancellation or a terminal error."""
        return self.stop.is_set() or self.query.cancelled

    def handle_chunk(self, chunk: str) -> None:
        if self.is_set():
            return
        self.handle_events(self.assembler.feed(chunk))

    def handle_events(self, events: list[StreamEvent]) -> None:
        for event in events:
            if isinstance(event, StreamError):
                # First error is terminal for the call.
                self.error = event.error
                self.stop.set()
                return
            if isinstance(event, StreamDelta) and self.query.on_stream is not None:
                self.query.on_stream(stream_result(event.text, self.query))


class PolishService:
    def __init__(
        self,
        config: ProviderConfig,
        *,
        transport: HttpTransport | None = None,
        key_chooser: Callable[[Sequence[str]], str] = random.choice,
    ) -> None:
        self.config = config
        self.transport: HttpTransport = transport or UrllibTransport()
        self.key_chooser = key_chooser

    def supported_languages(self) -> list[str]:
        return supported_language_codes()

    # --- validation -------------------------------------------------------

    def validate(self, completion: Callable[[ValidationOutcome], None] | None = None) -> ValidationOutcome:
        try:
            outcome = ValidationOutcome(result=self._validate())
        except Exception as exc:
            outcome = ValidationOutcome(result=False, error=classify_exception(exc))
        if outcome.error is not None:
            _logger.warning("Validation failed: %s: %s", outcome.error.kind.value, outcome.error.message)
        if completion is not None:
            completion(outcome)
        return outcome

    def _validate(self) -> bool:
        cfg = self.config
        api_key = pick_api_key(cfg.api_keys, self.key_chooser)
        if not api_key:
            raise PolishError(missing_api_keys())
        endpoint = resolve_endpoint(cfg.api_url, cfg.deployment_name, cfg.api_version, Purpose.MODELS)
        headers = build_headers(endpoint.family, api_key)

        if endpoint.is_azure:
            body = json.dumps({"messages": VALIDATION_MESSAGES, "max_tokens": VALIDATION_MAX_TOKENS}).encode("utf-8")
            response = self.transport.request("POST", endpoint.url, headers, body, timeout_s=cfg.timeout_s)
            items_key = "choices"
        else:
            response = self.transport.request("GET", endpoint.url, headers, None, timeout_s=cfg.timeout_s)
            items_key = "data"
        _raise_for_response(response, endpoint)

        data = response.data
        items = data.get(items_key) if isinstance(data, dict) else None
        if not isinstance(items, list) or not items:
            raise PolishError(
                ServiceError(
                    kind=ErrorKind.API,
                    message="Validation request returned no results",
                    addition=response.text[:500] or None,
                    troubleshooting_link=_troubleshooting_link(endpoint),
                )
            )
        return True

    # --- translation ------------------------------------------------------

    def translate(self, query: TranslationQuery) -> TranslationOutcome:
        try:
            outcome = TranslationOutcome.success(self._translate(query))
        except Exception as exc:
            outcome = TranslationOutcome.failure(classify_exception(exc))

        if query.cancelled:
            _logger.info("Translation cancelled; completion suppressed.")
            return outcome
        if outcome.error is not None:
            _logger.warning("Translation failed: %s: %s", outcome.error.kind.value, outcome.error.message)
        if query.on_completion is not None:
            query.on_completion(outcome)
        return outcome

    def _translate(self, query: TranslationQuery) -> TranslationResult:
        cfg = self.config
        if not is_supported_language(query.detect_to):
            raise PolishError(unsupported_language(query.detect_to))
        if cfg.uses_custom_model and not cfg.custom_model:
            raise PolishError(missing_custom_model())
        api_key = pick_api_key(cfg.api_keys, self.key_chooser)
        if not api_key:
            raise PolishError(missing_api_keys())
        endpoint = resolve_endpoint(cfg.api_url, cfg.deployment_name, cfg.api_version, Purpose.CHAT)

        headers = build_headers(endpoint.family, api_key)
        payload = build_request_payload(
            cfg.model_name,
            query,
            polishing_mode=cfg.polishing_mode,
            custom_system_prompt=cfg.custom_system_prompt,
            custom_user_prompt=cfg.custom_user_prompt,
        )
        _logger.info(
            "Polishing %d chars with %s via %s (stream=%s)",
            len(query.text),
            payload.model,
            endpoint.family.value,
            cfg.stream,
        )
        if cfg.stream:
            return self._translate_stream(query, endpoint, headers, payload)

        response = self.transport.request("POST", endpoint.url, headers, payload.encode(), timeout_s=cfg.timeout_s)
        _raise_for_response(response, endpoint)
        return normalize_response(response.data, query, raw_text=response.text)

    def _translate_stream(
        self,
        query: TranslationQuery,
        endpoint: Endpoint,
        headers: dict[str, str],
        payload: RequestPayload,
    ) -> TranslationResult:
        session = _StreamSession(query)
        response = self.transport.stream_request(
            "POST",
            endpoint.url,
            headers,
            payload.with_stream().encode(),
            on_chunk=session.handle_chunk,
            cancel_signal=session,
            timeout_s=self.config.timeout_s,
        )
        if session.error is not None:
            raise PolishError(session.error)
        _raise_for_response(response, endpoint)
        if not session.is_set():
            session.handle_events(session.assembler.flush())
            if session.error is not None:
                raise PolishError(session.error)
        return stream_result(session.assembler.text, query)
