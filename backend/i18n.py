"""
Language negotiation and string lookup for the UI.

Each request gets its own immutable ``Translator``; nothing about the active
language is stored at module level.
"""

import json
import math
import re
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Iterable, Mapping, Optional

BASE_LANGUAGE = "en"

# Top 20 languages for church/religious websites
SUPPORTED_LANGUAGES = (
    "en", "es", "pt", "fr", "de", "it", "nl", "ru", "ko", "zh",
    "ja", "vi", "tl", "hi", "ar", "pl", "uk", "ro", "hu", "sr",
)

LOCALES_DIR = Path(__file__).parent / "locales"

_PLACEHOLDER = re.compile(r"\{\{\s*(\w+)\s*\}\}")


@lru_cache(maxsize=None)
def load_translations(language: str) -> Mapping[str, str]:
    """Read the string table for a language; languages without one get {}."""
    path = LOCALES_DIR / f"{language}.json"
    if not path.is_file():
        return MappingProxyType({})
    with open(path, "r", encoding="utf-8") as f:
        return MappingProxyType(json.load(f))


def parse_accept_language(header: Optional[str]) -> list:
    """Parse an Accept-Language header into (primary subtag, quality) pairs.

    Qualities are clamped to [0, 1]; missing or non-numeric ones count as 1.
    Pairs are sorted by descending quality; equal qualities keep header order.
    """
    if not header:
        return []

    languages = []
    for part in header.split(","):
        code, *params = [piece.strip() for piece in part.split(";")]
        if not code:
            continue
        quality = 1.0
        for param in params:
            name, _, value = param.partition("=")
            if name.strip().lower() == "q":
                try:
                    quality = float(value)
                except ValueError:
                    quality = 1.0
                if not math.isfinite(quality):
                    quality = 1.0
                quality = min(max(quality, 0.0), 1.0)
        languages.append((code.split("-")[0].lower(), quality))

    return sorted(languages, key=lambda item: item[1], reverse=True)


def detect_language_from_header(
    accept_language: Optional[str],
    supported: Iterable[str] = SUPPORTED_LANGUAGES,
) -> str:
    supported = set(supported)
    for code, _quality in parse_accept_language(accept_language):
        if code in supported:
            return code
    return BASE_LANGUAGE


def normalize_language(value: Optional[str], supported: Iterable[str] = SUPPORTED_LANGUAGES) -> Optional[str]:
    """Primary subtag of ``value`` if it is supported, else None."""
    if not value:
        return None
    code = value.strip().split("-")[0].lower()
    return code if code in set(supported) else None


def resolve_language(
    accept_language: Optional[str] = None,
    override: Optional[str] = None,
    supported: Iterable[str] = SUPPORTED_LANGUAGES,
) -> str:
    """Pick the request language: a valid explicit override beats the header."""
    supported = tuple(supported)
    return normalize_language(override, supported) or detect_language_from_header(accept_language, supported)


def interpolate(template: str, params: Mapping[str, object]) -> str:
    # No HTML escaping here, callers rendering HTML must escape
    def replace(match):
        name = match.group(1)
        return str(params[name]) if name in params else match.group(0)

    return _PLACEHOLDER.sub(replace, template)


@dataclass(frozen=True)
class Translator:
    language: str
    strings: Mapping[str, str]
    fallback: Mapping[str, str]

    def t(self, key: str, /, **params) -> str:
        template = self.strings.get(key)
        if template is None:
            template = self.fallback.get(key, key)
        return interpolate(template, params) if params else template

    __call__ = t

    def has(self, key: str) -> bool:
        return key in self.strings or key in self.fallback


def get_translator(language: str = BASE_LANGUAGE) -> Translator:
    language = normalize_language(language) or BASE_LANGUAGE
    return Translator(
        language=language,
        strings=load_translations(language),
        fallback=load_translations(BASE_LANGUAGE),
    )
