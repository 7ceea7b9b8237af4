from __future__ import annotations

import json
import re
from typing import Any

from .errors import ErrorKind, PolishError, ServiceError
from .models import TranslationQuery, TranslationResult

# One opening quote at the very start or one closing quote at the very end.
_QUOTE_RE = re.compile(r'^(?:『|「|"|“)|(?:』|」|"|”)$')
_TRAILING_ARROW = '" =>'


def clean_translation_text(text: str) -> str:
    out = text.strip()
    out = _QUOTE_RE.sub("", out)
    if out.endswith(_TRAILING_ARROW):
        out = out[: -len(_TRAILING_ARROW)]
    return out


def _first_message_content(body: Any) -> str | None:
    choices = body.get("choices") if isinstance(body, dict) else None
    if not isinstance(choices, list) or not choices:
        return None
    first = choices[0]
    message = first.get("message") if isinstance(first, dict) else None
    if not isinstance(message, dict):
        return ""
    content = message.get("content")
    return content if isinstance(content, str) else ""


def normalize_response(body: Any, query: TranslationQuery, *, raw_text: str = "") -> TranslationResult:
    """Turn a non-streaming chat completion into paragraphs.

    Raises ``PolishError`` (api kind) when the response carries no choices.
    The error keeps the raw body; ``raw_text`` is used when ``body`` did not
    parse as a JSON object.
    """
    content = _first_message_content(body)
    if content is None:
        if isinstance(body, dict):
            addition = json.dumps(body, ensure_ascii=False, default=str)
        else:
            addition = raw_text.strip()[:500] or None
        raise PolishError(
            ServiceError(
                kind=ErrorKind.API,
                message="No result returned by the API",
                addition=addition,
            )
        )
    cleaned = clean_translation_text(content)
    return TranslationResult(
        from_lang=query.detect_from,
        to_lang=query.detect_to,
        to_paragraphs=tuple(cleaned.split("\n")),
    )


def stream_result(text: str, query: TranslationQuery) -> TranslationResult:
    return TranslationResult(from_lang=query.detect_from, to_lang=query.detect_to, to_paragraphs=(text,))
