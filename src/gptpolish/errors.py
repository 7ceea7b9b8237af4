from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any

_logger = logging.getLogger(__name__)

OPENAI_TROUBLESHOOTING_LINK = "https://bobtranslate.com/service/translate/openai.html"
AZURE_TROUBLESHOOTING_LINK = "https://bobtranslate.com/service/translate/azureopenai.html"


class ErrorKind(str, Enum):
    SECRET_KEY = "secretKey"
    PARAM = "param"
    API = "api"
    UNSUPPORTED_LANGUAGE = "unsupportedLanguage"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class ServiceError:
    """Terminal error record for one validate/translate call."""

    kind: ErrorKind
    message: str
    addition: str | None = None
    troubleshooting_link: str | None = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"type": self.kind.value, "message": self.message}
        if self.addition is not None:
            out["addition"] = self.addition
        if self.troubleshooting_link is not None:
            out["troubleshootingLink"] = self.troubleshooting_link
        return out


class PolishError(Exception):
    """Raised at a failure site; carries the already classified record."""

    def __init__(self, error: ServiceError):
        super().__init__(error.message)
        self.error = error


class TransportError(Exception):
    """Network-level failure: no HTTP status was received."""


def missing_api_keys() -> ServiceError:
    return ServiceError(
        kind=ErrorKind.SECRET_KEY,
        message="Configuration error - make sure valid API keys are set in the service configuration",
        addition="Fill in valid API keys in the service configuration",
        troubleshooting_link=OPENAI_TROUBLESHOOTING_LINK,
    )


def missing_deployment() -> ServiceError:
    return ServiceError(
        kind=ErrorKind.SECRET_KEY,
        message="Configuration error - Deployment Name is not set",
        addition="Fill in the Deployment Name in the service configuration",
        troubleshooting_link=AZURE_TROUBLESHOOTING_LINK,
    )


def missing_custom_model() -> ServiceError:
    return ServiceError(
        kind=ErrorKind.PARAM,
        message="Configuration error - make sure a custom model name is set in the service configuration",
        addition="Fill in the custom model name in the service configuration",
    )


def unsupported_language(code: str | None = None) -> ServiceError:
    return ServiceError(
        kind=ErrorKind.UNSUPPORTED_LANGUAGE,
        message="Unsupported language",
        addition=f"Unsupported language: {code}" if code else "Unsupported language",
    )


def classify_status(status: int | None) -> ErrorKind:
    if status is not None and 400 <= status < 500:
        return ErrorKind.PARAM
    return ErrorKind.API


def error_message_from_body(body: Any) -> str | None:
    """Extract a message from an OpenAI-style ``{"error": ...}`` body."""
    if not isinstance(body, dict):
        return None
    err = body.get("error")
    if err is None:
        return None
    if isinstance(err, dict):
        msg = err.get("message")
        if msg:
            return str(msg)
        return json.dumps(err, ensure_ascii=False)
    return str(err)


def classify_response(
    status: int | None,
    body: Any,
    *,
    raw_text: str = "",
    link: str | None = None,
) -> ServiceError:
    kind = classify_status(status)
    message = error_message_from_body(body)
    if not message:
        message = raw_text.strip() or (f"HTTP {status}" if status is not None else "Request failed")
    addition = None
    if isinstance(body, dict) and isinstance(body.get("error"), dict):
        err_type = body["error"].get("type") or body["error"].get("code")
        if err_type:
            addition = str(err_type)
    error = ServiceError(kind=kind, message=message, addition=addition, troubleshooting_link=link)
    _logger.warning("API error (status=%s): %s", status, message)
    return error


def classify_exception(exc: BaseException) -> ServiceError:
    if isinstance(exc, PolishError):
        return exc.error
    if isinstance(exc, TransportError):
        return ServiceError(kind=ErrorKind.API, message=f"Request failed: {exc}")
    _logger.warning("Unclassified error: %r", exc)
    return ServiceError(kind=ErrorKind.UNKNOWN, message="An unknown error occurred", addition=str(exc) or None)
