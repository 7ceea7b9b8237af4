"""gptpolish - text polishing through OpenAI-compatible chat completion APIs."""

from .config import ProviderConfig
from .errors import ErrorKind, ServiceError
from .models import TranslationOutcome, TranslationQuery, TranslationResult, ValidationOutcome
from .service import PolishService

__all__ = [
    "ErrorKind",
    "PolishService",
    "ProviderConfig",
    "ServiceError",
    "TranslationOutcome",
    "TranslationQuery",
    "TranslationResult",
    "ValidationOutcome",
]
