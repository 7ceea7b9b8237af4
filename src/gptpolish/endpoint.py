from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from enum import Enum

from .errors import PolishError, missing_deployment

_logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.openai.com"
AZURE_HOST_MARKER = "openai.azure.com"
GATEWAY_HOST_MARKER = "gateway.ai.cloudflare.com"
# Azure rejects requests without an explicit api-version query parameter.
DEFAULT_AZURE_CHAT_API_VERSION = "2023-03-15-preview"
DEFAULT_AZURE_VALIDATE_API_VERSION = "2023-05-15"

_SCHEME_RE = re.compile(r"^[a-z]+://", flags=re.IGNORECASE)


class ProviderFamily(str, Enum):
    OPENAI = "openai"
    AZURE = "azure"
    GATEWAY = "gateway"


class Purpose(str, Enum):
    MODELS = "models"
    CHAT = "chat"


@dataclass(frozen=True)
class Endpoint:
    url: str
    family: ProviderFamily

    @property
    def is_azure(self) -> bool:
        return self.family is ProviderFamily.AZURE


def ensure_https_and_no_trailing_slash(url: str | None) -> str:
    raw = (url or "").strip() or DEFAULT_API_URL
    if not _SCHEME_RE.match(raw):
        raw = "https://" + raw
    return raw[:-1] if raw.endswith("/") else raw


def detect_family(base_url: str) -> ProviderFamily:
    if AZURE_HOST_MARKER in base_url:
        return ProviderFamily.AZURE
    if GATEWAY_HOST_MARKER in base_url:
        return ProviderFamily.GATEWAY
    return ProviderFamily.OPENAI


def resolve_endpoint(
    api_url: str | None,
    deployment_name: str | None,
    api_version: str | None,
    purpose: Purpose,
) -> Endpoint:
    base = ensure_https_and_no_trailing_slash(api_url)
    family = detect_family(base)

    if family is ProviderFamily.AZURE:
        deployment = (deployment_name or "").strip()
        if not deployment:
            raise PolishError(missing_deployment())
        default_version = (
            DEFAULT_AZURE_VALIDATE_API_VERSION if purpose is Purpose.MODELS else DEFAULT_AZURE_CHAT_API_VERSION
        )
        version = (api_version or "").strip() or default_version
        path = f"/openai/deployments/{deployment}/chat/completions?api-version={version}"
    elif family is ProviderFamily.GATEWAY:
        path = "/models" if purpose is Purpose.MODELS else "/chat/completions"
    else:
        path = "/v1/models" if purpose is Purpose.MODELS else "/v1/chat/completions"

    endpoint = Endpoint(url=base + path, family=family)
    _logger.debug("Resolved %s endpoint (%s): %s", purpose.value, family.value, endpoint.url)
    return endpoint


def build_headers(family: ProviderFamily, api_key: str) -> dict[str, str]:
    if family is ProviderFamily.AZURE:
        return {"Content-Type": "application/json", "api-key": api_key}
    return {"Content-Type": "application/json", "Authorization": f"Bearer {api_key}"}
