from __future__ import annotations

import logging
import os
import random
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Sequence

import yaml

from .endpoint import DEFAULT_API_URL
from .prompts import POLISHING_MODES


@dataclass(frozen=True)
class ProviderConfig:
    # Comma or newline separated; one key is picked per call.
    api_keys: str = ""
    api_url: str = DEFAULT_API_URL
    # Azure only.
    deployment_name: str | None = None
    api_version: str | None = None
    model: str = "gpt-3.5-turbo"  # 'custom' selects custom_model
    custom_model: str | None = None
    stream: bool = False
    polishing_mode: str = "simplicity"  # 'simplicity' | 'detailed'
    custom_system_prompt: str | None = None
    custom_user_prompt: str | None = None
    timeout_s: float = 60.0

    @property
    def uses_custom_model(self) -> bool:
        return self.model == "custom"

    @property
    def model_name(self) -> str:
        return (self.custom_model or "") if self.uses_custom_model else self.model


@dataclass(frozen=True)
class AppConfig:
    provider: ProviderConfig = field(default_factory=ProviderConfig)
    log_path: str | None = None
    log_level: str = "info"


_LOG_LEVELS = {"debug", "info", "warning", "error"}
_KEY_SPLIT_RE = re.compile(r"[,\n]")


def split_api_keys(api_keys: str | None) -> list[str]:
    return [key.strip() for key in _KEY_SPLIT_RE.split(api_keys or "") if key.strip()]


def pick_api_key(api_keys: str | None, chooser: Callable[[Sequence[str]], str] = random.choice) -> str | None:
    keys = split_api_keys(api_keys)
    if not keys:
        return None
    return chooser(keys)


def _optional_str(value: Any) -> str | None:
    if value is None:
        return None
    raw = str(value).strip()
    return raw or None


def _normalize_choice(value: Any, *, field_name: str, allowed: set[str], default: str) -> str:
    raw = str(default if value is None else value).strip().lower()
    if raw not in allowed:
        allowed_list = ", ".join(sorted(allowed))
        raise ValueError(f"Invalid value for {field_name}: {raw!r}. Allowed: {allowed_list}")
    return raw


def _parse_timeout(value: Any, *, field_name: str, default: float) -> float:
    if value is None or (isinstance(value, str) and not value.strip()):
        return default
    try:
        timeout = float(value)
    except (TypeError, ValueError):
        raise ValueError(f"Invalid value for {field_name}: {value!r}. Expected seconds as a number") from None
    if timeout <= 0:
        raise ValueError(f"Invalid value for {field_name}: {value!r}. Must be positive")
    return timeout


def _parse_bool(value: Any) -> bool:
    # Hosts historically store the stream flag as "0"/"1".
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "on"}
    return bool(value)


def provider_config_from_dict(data: dict[str, Any]) -> ProviderConfig:
    api_keys = _optional_str(data.get("api_keys")) or os.environ.get("OPENAI_API_KEYS") or os.environ.get(
        "OPENAI_API_KEY", ""
    )
    api_url = _optional_str(data.get("api_url")) or os.environ.get("OPENAI_BASE_URL") or DEFAULT_API_URL
    return ProviderConfig(
        api_keys=api_keys,
        api_url=api_url,
        deployment_name=_optional_str(data.get("deployment_name")),
        api_version=_optional_str(data.get("api_version")),
        model=_optional_str(data.get("model")) or "gpt-3.5-turbo",
        custom_model=_optional_str(data.get("custom_model")),
        stream=_parse_bool(data.get("stream", False)),
        polishing_mode=_normalize_choice(
            data.get("polishing_mode", "simplicity"),
            field_name="provider.polishing_mode",
            allowed=set(POLISHING_MODES),
            default="simplicity",
        ),
        custom_system_prompt=_optional_str(data.get("custom_system_prompt")),
        custom_user_prompt=_optional_str(data.get("custom_user_prompt")),
        timeout_s=_parse_timeout(data.get("timeout_s"), field_name="provider.timeout_s", default=60.0),
    )


def load_config(path: str | Path) -> AppConfig:
    cfg_path = Path(path)
    data = yaml.safe_load(cfg_path.read_text(encoding="utf-8")) or {}
    provider_data = data.get("provider", {}) or {}

    log_path = _optional_str(data.get("log_path"))
    if log_path is not None and not Path(log_path).is_absolute():
        log_path = str((cfg_path.parent / log_path).resolve())

    return AppConfig(
        provider=provider_config_from_dict(provider_data),
        log_path=log_path,
        log_level=_normalize_choice(
            data.get("log_level", "info"),
            field_name="log_level",
            allowed=_LOG_LEVELS,
            default="info",
        ),
    )


def log_level_value(name: str) -> int:
    return int(getattr(logging, name.upper(), logging.INFO))
