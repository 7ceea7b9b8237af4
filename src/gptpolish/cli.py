from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from .config import AppConfig, ProviderConfig, load_config, log_level_value, provider_config_from_dict
from .logging_utils import setup_logging
from .models import TranslationQuery, TranslationResult
from .service import PolishService

_logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="gptpolish", description="Polish text with an OpenAI-compatible chat API.")
    sub = p.add_subparsers(dest="cmd", required=True)

    t = sub.add_parser("translate", help="Polish text read from --text or stdin.")
    t.add_argument("--config", "-c", default=None, help="Path to YAML config (env vars are used otherwise).")
    t.add_argument("--text", "-t", default=None, help="Text to polish; read from stdin when omitted.")
    t.add_argument("--from", dest="source_lang", default="auto", help="Detected source language code.")
    t.add_argument("--to", dest="target_lang", default="en", help="Target language code.")
    t.add_argument("--stream", dest="stream", action="store_true", default=None, help="Force streaming.")
    t.add_argument("--no-stream", dest="stream", action="store_false", help="Force a single response.")
    t.add_argument(
        "--mode",
        choices=["simplicity", "detailed"],
        default=None,
        help="Override polishing mode from config.",
    )
    t.add_argument("--log", default=None, help="Override log path.")

    v = sub.add_parser("validate", help="Check API connectivity and credentials.")
    v.add_argument("--config", "-c", default=None, help="Path to YAML config (env vars are used otherwise).")
    v.add_argument("--log", default=None, help="Override log path.")

    sub.add_parser("languages", help="List supported language codes.")
    return p


def _load(args: argparse.Namespace) -> AppConfig:
    cfg = load_config(args.config) if args.config else AppConfig(provider=provider_config_from_dict({}))
    if getattr(args, "log", None) is not None:
        cfg = cfg.__class__(**{**cfg.__dict__, "log_path": str(args.log)})
    return cfg


def _setup(cfg: AppConfig, provider: ProviderConfig) -> None:
    setup_logging(Path(cfg.log_path) if cfg.log_path else None, level=log_level_value(cfg.log_level))
    _logger.debug(
        "Provider: url=%s model=%s stream=%s mode=%s",
        provider.api_url,
        provider.model_name,
        provider.stream,
        provider.polishing_mode,
    )


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    if args.cmd == "languages":
        codes = PolishService(provider_config_from_dict({})).supported_languages()
        print("\n".join(codes))
        return 0

    if args.cmd == "validate":
        cfg = _load(args)
        _setup(cfg, cfg.provider)
        outcome = PolishService(cfg.provider).validate()
        if outcome.error is not None:
            print(f"{outcome.error.kind.value}: {outcome.error.message}", file=sys.stderr)
            return 1
        print("OK")
        return 0

    if args.cmd == "translate":
        cfg = _load(args)
        provider = cfg.provider
        if args.stream is not None:
            provider = provider.__class__(**{**provider.__dict__, "stream": bool(args.stream)})
        if args.mode is not None:
            provider = provider.__class__(**{**provider.__dict__, "polishing_mode": str(args.mode)})
        _setup(cfg, provider)

        text = args.text if args.text is not None else sys.stdin.read()
        printed = {"n": 0}

        def _on_stream(partial: TranslationResult) -> None:
            current = partial.to_paragraphs[0]
            sys.stdout.write(current[printed["n"] :])
            sys.stdout.flush()
            printed["n"] = len(current)

        query = TranslationQuery(
            text=text,
            detect_from=str(args.source_lang),
            detect_to=str(args.target_lang),
            on_stream=_on_stream,
        )
        outcome = PolishService(provider).translate(query)
        if outcome.error is not None:
            print(f"{outcome.error.kind.value}: {outcome.error.message}", file=sys.stderr)
            if outcome.error.addition:
                print(outcome.error.addition, file=sys.stderr)
            return 1
        if printed["n"]:
            sys.stdout.write("\n")
        else:
            print("\n".join(outcome.result.to_paragraphs))
        return 0

    print(f"Unknown command: {args.cmd}", file=sys.stderr)
    return 2


if __name__ == "__main__":
    raise SystemExit(main())
