from __future__ import annotations

import pytest

from gptpolish.endpoint import (
    ProviderFamily,
    Purpose,
    build_headers,
    ensure_https_and_no_trailing_slash,
    resolve_endpoint,
)
from gptpolish.errors import ErrorKind, PolishError


def test_ensure_https_adds_scheme_and_strips_one_slash():
    assert ensure_https_and_no_trailing_slash("api.example.com/") == "https://api.example.com"
    assert ensure_https_and_no_trailing_slash("http://localhost:8080") == "http://localhost:8080"
    assert ensure_https_and_no_trailing_slash("https://x.test//") == "https://x.test/"
    assert ensure_https_and_no_trailing_slash(None) == "https://api.openai.com"
    assert ensure_https_and_no_trailing_slash("") == "https://api.openai.com"


def test_openai_paths():
    chat = resolve_endpoint(None, None, None, Purpose.CHAT)
    models = resolve_endpoint("https://api.openai.com/", None, None, Purpose.MODELS)
    assert chat.url == "https://api.openai.com/v1/chat/completions"
    assert models.url == "https://api.openai.com/v1/models"
    assert chat.family is ProviderFamily.OPENAI
    assert not chat.is_azure


def test_gateway_paths_have_no_v1_prefix():
    base = "gateway.ai.cloudflare.com/v1/acct/gw/openai"
    chat = resolve_endpoint(base, None, None, Purpose.CHAT)
    models = resolve_endpoint(base, None, None, Purpose.MODELS)
    assert chat.family is ProviderFamily.GATEWAY
    assert chat.url == "https://gateway.ai.cloudflare.com/v1/acct/gw/openai/chat/completions"
    assert models.url == "https://gateway.ai.cloudflare.com/v1/acct/gw/openai/models"


def test_azure_embeds_deployment_and_default_api_version():
    chat = resolve_endpoint("https://res.openai.azure.com", "gpt35", None, Purpose.CHAT)
    assert chat.is_azure
    assert chat.url == (
        "https://res.openai.azure.com/openai/deployments/gpt35/chat/completions?api-version=2023-03-15-preview"
    )
    probe = resolve_endpoint("https://res.openai.azure.com", "gpt35", None, Purpose.MODELS)
    assert probe.url.endswith("/openai/deployments/gpt35/chat/completions?api-version=2023-05-15")


def test_azure_uses_caller_api_version():
    chat = resolve_endpoint("res.openai.azure.com", "dep", "2024-02-01", Purpose.CHAT)
    assert chat.url.endswith("?api-version=2024-02-01")


def test_azure_without_deployment_is_secret_key_error():
    with pytest.raises(PolishError) as info:
        resolve_endpoint("https://res.openai.azure.com", "  ", None, Purpose.CHAT)
    assert info.value.error.kind is ErrorKind.SECRET_KEY
    assert info.value.error.troubleshooting_link


def test_non_azure_ignores_deployment_name():
    with_dep = resolve_endpoint("https://api.openai.com", "whatever", "2024-01-01", Purpose.CHAT)
    without = resolve_endpoint("https://api.openai.com", None, None, Purpose.CHAT)
    assert with_dep == without


def test_build_headers_per_family():
    assert build_headers(ProviderFamily.AZURE, "k") == {"Content-Type": "application/json", "api-key": "k"}
    assert build_headers(ProviderFamily.OPENAI, "k") == {
        "Content-Type": "application/json",
        "Authorization": "Bearer k",
    }
    assert build_headers(ProviderFamily.GATEWAY, "k")["Authorization"] == "Bearer k"
