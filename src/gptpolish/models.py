from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Callable, Optional

from .errors import ServiceError


@dataclass(frozen=True)
class TranslationResult:
    from_lang: str
    to_lang: str
    to_paragraphs: tuple[str, ...]


@dataclass(frozen=True)
class TranslationOutcome:
    """Either a result or an error, never both."""

    result: Optional[TranslationResult] = None
    error: Optional[ServiceError] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.result is not None

    @classmethod
    def success(cls, result: TranslationResult) -> "TranslationOutcome":
        return cls(result=result)

    @classmethod
    def failure(cls, error: ServiceError) -> "TranslationOutcome":
        return cls(error=error)


@dataclass(frozen=True)
class ValidationOutcome:
    result: bool = False
    error: Optional[ServiceError] = None

    @property
    def ok(self) -> bool:
        return self.result and self.error is None


StreamCallback = Callable[[TranslationResult], None]
CompletionCallback = Callable[[TranslationOutcome], None]


@dataclass(frozen=True)
class TranslationQuery:
    """One translate call as handed over by the host."""

    text: str
    detect_from: str
    detect_to: str
    cancel_signal: Optional[threading.Event] = None
    on_stream: Optional[StreamCallback] = None
    on_completion: Optional[CompletionCallback] = None

    @property
    def cancelled(self) -> bool:
        return self.cancel_signal is not None and self.cancel_signal.is_set()
