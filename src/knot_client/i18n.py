"""UI localization: locale resolution and on-demand translation catalogs.

There is no process-wide current locale. Resolve a locale once with
``resolve_locale`` and pass a ``Translator`` to whatever renders text.
"""

import json
import os
from functools import lru_cache
from pathlib import Path

from knot_client.config import DEFAULT_LOCALE

LOCALES_DIR = Path(__file__).parent / "locales"

# language code -> catalog file
CATALOGS = {
    "en": "en.json",
    "zh-CN": "zh-CN.json",
    "zh": "zh-CN.json",
}


def resolve_locale(
    cookie_locale: str | None,
    negotiated_locale: str | None,
    fallback: str = DEFAULT_LOCALE,
) -> str:
    """Pick the UI language: cookie value, else negotiated locale, else fallback."""
    if cookie_locale:
        return cookie_locale
    if negotiated_locale:
        return negotiated_locale
    return fallback


def negotiate_locale(accept_language: str | None) -> str | None:
    """Return the best supported language from an Accept-Language header.

    Used for browser negotiation and for the GNU ``LANGUAGE`` priority list
    in ``locale_from_env``.
    """
    if not accept_language:
        return None

    candidates = []
    for index, part in enumerate(accept_language.split(",")):
        tag, *params = [piece.strip() for piece in part.split(";")]
        if not tag or tag == "*":
            continue
        quality = _quality(params)
        if quality is None:
            continue
        candidates.append((-quality, index, tag))

    for _, _, tag in sorted(candidates):
        code = match_catalog(tag)
        if code:
            return code
    return None


def _quality(params: list[str]) -> float | None:
    """q-value from a tag's parameters; 1.0 if absent, None if malformed."""
    for param in params:
        if param.startswith("q="):
            try:
                return float(param[2:])
            except ValueError:
                return None
    return 1.0


def locale_from_env() -> str | None:
    """Derive a language tag for terminal use.

    ``LANGUAGE`` (e.g. ``zh_CN:en``) is a priority list and is negotiated
    like Accept-Language; otherwise LC_ALL / LC_MESSAGES / LANG
    (e.g. zh_CN.UTF-8) is used.
    """
    language = os.getenv("LANGUAGE")
    if language:
        code = negotiate_locale(",".join(item.replace("_", "-") for item in language.split(":")))
        if code:
            return code

    for var in ("LC_ALL", "LC_MESSAGES", "LANG"):
        value = os.getenv(var)
        if not value or value in ("C", "POSIX"):
            continue
        tag = value.split(".")[0].split("@")[0].replace("_", "-")
        return match_catalog(tag)
    return None


def match_catalog(tag: str) -> str | None:
    """Map a language tag to a registered catalog code (exact, then base language)."""
    for code in CATALOGS:
        if code.lower() == tag.lower():
            return code
    base = tag.split("-")[0].lower()
    return base if base in CATALOGS else None


@lru_cache(maxsize=None)
def load_catalog(code: str) -> dict[str, str]:
    """Load the catalog for a registered language code on first use."""
    path = LOCALES_DIR / CATALOGS[code]
    return json.loads(path.read_text(encoding="utf-8"))


class Translator:
    """Translation lookups bound to one locale."""

    def __init__(self, locale: str, fallback: str = DEFAULT_LOCALE):
        self.locale = locale
        self.fallback = fallback
        self.code = match_catalog(locale) or fallback

    def translate(self, key: str, **params) -> str:
        text = load_catalog(self.code).get(key)
        if text is None and self.code != self.fallback:
            text = load_catalog(self.fallback).get(key)
        if text is None:
            return key
        return text.format(**params) if params else text

    __call__ = translate
