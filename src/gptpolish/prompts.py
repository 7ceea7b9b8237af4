from __future__ import annotations

import json
from dataclasses import dataclass, replace
from typing import Any

from .languages import language_display_name, polish_prompt_for
from .models import TranslationQuery

POLISHING_MODES = ("simplicity", "detailed")

TEMPERATURE = 0.2
MAX_TOKENS = 1000
TOP_P = 1
FREQUENCY_PENALTY = 1
PRESENCE_PENALTY = 1


@dataclass(frozen=True)
class RequestPayload:
    model: str
    system_prompt: str
    user_prompt: str
    temperature: float = TEMPERATURE
    max_tokens: int = MAX_TOKENS
    top_p: float = TOP_P
    frequency_penalty: float = FREQUENCY_PENALTY
    presence_penalty: float = PRESENCE_PENALTY
    stream: bool | None = None

    @property
    def messages(self) -> list[dict[str, str]]:
        return [
            {"role": "system", "content": self.system_prompt},
            {"role": "user", "content": self.user_prompt},
        ]

    def with_stream(self) -> "RequestPayload":
        return replace(self, stream=True)

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "model": self.model,
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
            "top_p": self.top_p,
            "frequency_penalty": self.frequency_penalty,
            "presence_penalty": self.presence_penalty,
            "messages": self.messages,
        }
        if self.stream is not None:
            out["stream"] = self.stream
        return out

    def encode(self) -> bytes:
        return json.dumps(self.to_dict(), ensure_ascii=False).encode("utf-8")


def replace_prompt_keywords(template: str | None, query: TranslationQuery) -> str | None:
    """Fill ``$text``, ``$sourceLang`` and ``$targetLang`` in a user supplied template."""
    if not template or not template.strip():
        return None
    # Text last so keywords inside the user's text stay untouched.
    return (
        template.replace("$sourceLang", language_display_name(query.detect_from))
        .replace("$targetLang", language_display_name(query.detect_to))
        .replace("$text", query.text)
    )


def build_system_prompt(base_prompt: str | None, polishing_mode: str, query: TranslationQuery) -> str:
    info = polish_prompt_for(query.detect_from)
    prompt = base_prompt or info.prompt
    if polishing_mode == "detailed":
        prompt += info.detailed
    return prompt


def build_user_prompt(template: str | None, query: TranslationQuery) -> str:
    if template:
        return f'{template}:\n\n"{query.text}"'
    return query.text


def build_request_payload(
    model: str,
    query: TranslationQuery,
    *,
    polishing_mode: str = "simplicity",
    custom_system_prompt: str | None = None,
    custom_user_prompt: str | None = None,
) -> RequestPayload:
    system_prompt = build_system_prompt(
        replace_prompt_keywords(custom_system_prompt, query),
        polishing_mode,
        query,
    )
    user_prompt = build_user_prompt(replace_prompt_keywords(custom_user_prompt, query), query)
    return RequestPayload(model=model, system_prompt=system_prompt, user_prompt=user_prompt)
