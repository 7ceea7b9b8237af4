from __future__ import annotations

from dataclasses import dataclass

# (standard code, code sent to the provider, display name)
SUPPORTED_LANGUAGES: tuple[tuple[str, str, str], ...] = (
    ("auto", "auto", "auto"),
    ("zh-Hans", "zh-CN", "Simplified Chinese"),
    ("zh-Hant", "zh-TW", "Traditional Chinese"),
    ("yue", "yue", "Cantonese"),
    ("wyw", "wyw", "Classical Chinese"),
    ("en", "en", "English"),
    ("ja", "ja", "Japanese"),
    ("ko", "ko", "Korean"),
    ("fr", "fr", "French"),
    ("de", "de", "German"),
    ("es", "es", "Spanish"),
    ("it", "it", "Italian"),
    ("ru", "ru", "Russian"),
    ("pt", "pt", "Portuguese"),
    ("nl", "nl", "Dutch"),
    ("pl", "pl", "Polish"),
    ("ar", "ar", "Arabic"),
    ("tr", "tr", "Turkish"),
    ("uk", "uk", "Ukrainian"),
    ("vi", "vi", "Vietnamese"),
    ("th", "th", "Thai"),
    ("id", "id", "Indonesian"),
    ("ms", "ms", "Malay"),
    ("hi", "hi", "Hindi"),
    ("sv", "sv", "Swedish"),
    ("da", "da", "Danish"),
    ("fi", "fi", "Finnish"),
    ("no", "no", "Norwegian"),
    ("cs", "cs", "Czech"),
    ("el", "el", "Greek"),
    ("he", "he", "Hebrew"),
    ("hu", "hu", "Hungarian"),
    ("ro", "ro", "Romanian"),
)

LANG_MAP: dict[str, str] = {standard: provider for standard, provider, _ in SUPPORTED_LANGUAGES}
LANG_NAMES: dict[str, str] = {standard: name for standard, _, name in SUPPORTED_LANGUAGES}


@dataclass(frozen=True)
class PolishPrompt:
    prompt: str
    detailed: str


DEFAULT_PROMPT = PolishPrompt(
    prompt="Revise the following sentences to make them more clear, concise, and coherent.",
    detailed=" Please note that you need to list the changes and briefly explain why.",
)

# Keyed by the detected source language of the query.
LANGUAGE_PROMPTS: dict[str, PolishPrompt] = {
    "zh-Hant": PolishPrompt(prompt="潤色此句", detailed="。請列出修改項目，並簡述修改原因"),
    "zh-Hans": PolishPrompt(prompt="润色此句", detailed="。请注意要列出更改以及简要解释一下为什么这么修改"),
    "ja": PolishPrompt(
        prompt="この文章を装飾する",
        detailed="。変更点をリストアップし、なぜそのように変更したかを簡単に説明することに注意してください",
    ),
    "ru": PolishPrompt(
        prompt="Переформулируйте следующие предложения, чтобы они стали более ясными, краткими и связными",
        detailed=(
            ". Пожалуйста, обратите внимание на необходимость перечисления изменений "
            "и краткого объяснения причин таких изменений"
        ),
    ),
    "wyw": PolishPrompt(prompt="润色此句古文", detailed="。请注意要列出更改以及简要解释一下为什么这么修改"),
    "yue": PolishPrompt(prompt="潤色呢句粵語", detailed="。記住要列出修改嘅內容同簡單解釋下點解要做呢啲更改"),
}


def supported_language_codes() -> list[str]:
    return [standard for standard, _, _ in SUPPORTED_LANGUAGES]


def is_supported_language(code: str | None) -> bool:
    return bool(code) and code in LANG_MAP


def language_display_name(code: str | None) -> str:
    """Human readable name for prompt interpolation; unknown codes pass through."""
    if not code:
        return ""
    return LANG_NAMES.get(code, code)


def polish_prompt_for(code: str | None) -> PolishPrompt:
    if code and code in LANGUAGE_PROMPTS:
        return LANGUAGE_PROMPTS[code]
    return DEFAULT_PROMPT
