from __future__ import annotations

from pathlib import Path

from gptpolish import cli
from gptpolish.errors import ErrorKind, ServiceError
from gptpolish.models import TranslationOutcome, TranslationResult, ValidationOutcome


def _write_min_config(path: Path) -> None:
    path.write_text(
        "provider:\n"
        "  api_keys: sk-test\n"
        "  model: gpt-4\n",
        encoding="utf-8",
    )


class _FakeService:
    instances: list["_FakeService"] = []
    outcome = TranslationOutcome.success(TranslationResult(from_lang="en", to_lang="en", to_paragraphs=("a", "b")))

    def __init__(self, config, **kwargs):  # noqa: ANN001, ANN003
        self.config = config
        self.queries = []
        _FakeService.instances.append(self)

    def supported_languages(self):
        return ["en", "ja"]

    def validate(self):
        return ValidationOutcome(result=True)

    def translate(self, query):
        self.queries.append(query)
        return self.outcome


def test_cli_translate_prints_paragraphs(tmp_path, monkeypatch, capsys):
    cfg_path = tmp_path / "config.yaml"
    _write_min_config(cfg_path)
    _FakeService.instances = []
    monkeypatch.setattr(cli, "PolishService", _FakeService)
    monkeypatch.setattr(cli, "setup_logging", lambda *a, **k: None)

    rc = cli.main(
        ["translate", "--config", str(cfg_path), "--text", "hello", "--to", "en", "--stream", "--mode", "detailed"]
    )

    assert rc == 0
    assert capsys.readouterr().out == "a\nb\n"
    service = _FakeService.instances[-1]
    assert service.config.stream is True
    assert service.config.polishing_mode == "detailed"
    assert service.config.api_keys == "sk-test"
    assert service.queries[0].text == "hello"


def test_cli_translate_reports_service_error(tmp_path, monkeypatch, capsys):
    cfg_path = tmp_path / "config.yaml"
    _write_min_config(cfg_path)
    failing = TranslationOutcome.failure(ServiceError(kind=ErrorKind.UNSUPPORTED_LANGUAGE, message="Unsupported language"))
    monkeypatch.setattr(_FakeService, "outcome", failing)
    monkeypatch.setattr(cli, "PolishService", _FakeService)
    monkeypatch.setattr(cli, "setup_logging", lambda *a, **k: None)

    rc = cli.main(["translate", "--config", str(cfg_path), "--text", "x", "--to", "xx"])

    assert rc == 1
    assert "unsupportedLanguage: Unsupported language" in capsys.readouterr().err


def test_cli_validate_and_languages(tmp_path, monkeypatch, capsys):
    cfg_path = tmp_path / "config.yaml"
    _write_min_config(cfg_path)
    monkeypatch.setattr(cli, "PolishService", _FakeService)
    monkeypatch.setattr(cli, "setup_logging", lambda *a, **k: None)

    assert cli.main(["validate", "--config", str(cfg_path)]) == 0
    assert capsys.readouterr().out.strip() == "OK"

    assert cli.main(["languages"]) == 0
    assert capsys.readouterr().out.split() == ["en", "ja"]
