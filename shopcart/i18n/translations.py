"""Message catalogue for cart notifications."""

import json
from pathlib import Path
from typing import Any

SUPPORTED_LANGUAGES = {
    "en": "English",
    "pt": "Português",
}

DEFAULT_LANGUAGE = "en"

_LOCALES_PATH = Path(__file__).parent / "locales"

# Cache for loaded translations
_translations: dict[str, dict[str, Any]] = {}


def _load_translations(lang: str) -> dict[str, Any]:
    """Load translations for a language"""
    if lang in _translations:
        return _translations[lang]

    file_path = _LOCALES_PATH / f"{lang}.json"
    if not file_path.exists():
        if lang != DEFAULT_LANGUAGE:
            return _load_translations(DEFAULT_LANGUAGE)
        return {}

    with open(file_path, encoding="utf-8") as f:
        data = json.load(f)
    _translations[lang] = data if isinstance(data, dict) else {}
    return _translations[lang]


def get_text(key: str, lang: str = DEFAULT_LANGUAGE, default: str | None = None) -> str:
    """
    Get translated text by key.

    Args:
        key: Message key (e.g., "out_of_stock")
        lang: Language code (e.g., "pt", "pt-BR")
        default: Returned instead of the key when no translation exists

    Returns:
        Translated string, the English text as fallback, or key/default
    """
    lang = lang.split("-")[0].lower() if lang else DEFAULT_LANGUAGE
    if lang not in SUPPORTED_LANGUAGES:
        lang = DEFAULT_LANGUAGE

    text = _load_translations(lang).get(key)
    if text is None and lang != DEFAULT_LANGUAGE:
        text = _load_translations(DEFAULT_LANGUAGE).get(key)

    if not isinstance(text, str):
        return default if default is not None else key
    return text
