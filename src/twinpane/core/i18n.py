import json
import locale
from pathlib import Path

from twinpane.core.logging import get_logger

_LANG: dict = {}
_CURRENT = ""
_SUPPORTED = ("en", "tr")


def _i18n_dir() -> Path:
    return Path(__file__).resolve().parent.parent / "i18n"


def load_language(lang: str = "en") -> None:
    global _LANG, _CURRENT
    path = _i18n_dir() / f"{lang}.json"
    with open(path, "r", encoding="utf-8") as f:
        _LANG = json.load(f)
    _CURRENT = lang


def current_language() -> str:
    return _CURRENT


def set_language(lang: str) -> None:
    if lang not in _SUPPORTED:
        raise ValueError(f"unsupported language: {lang}")
    load_language(lang)


def system_default_language() -> str:
    """Return 'tr' if OS/UI locale looks Turkish, otherwise 'en'."""
    try:
        loc = (locale.getlocale() or (None, None))[0] or ""
        if loc.lower().startswith("tr"):
            return "tr"
    except Exception:
        pass
    return "en"


def t(key: str, **fmt) -> str:
    if not _LANG:
        load_language("en")
    cur = _LANG
    try:
        for part in key.split("."):
            cur = cur[part]
    except (KeyError, TypeError):
        return f"[{key}]"
    if not isinstance(cur, str):
        return f"[{key}]"
    if fmt:
        try:
            return cur.format(**fmt)
        except (KeyError, IndexError, ValueError):
            return cur
    return cur


def _flatten_keys(d: dict, prefix: str = "") -> set[str]:
    keys: set[str] = set()
    for k, v in (d or {}).items():
        if not isinstance(k, str):
            continue
        p = f"{prefix}.{k}" if prefix else k
        if isinstance(v, dict):
            keys |= _flatten_keys(v, p)
        else:
            keys.add(p)
    return keys


def validate_language_files() -> dict[str, list[str]]:
    """Log-only regression guard: detect missing i18n keys.

    Returns ``{"en": [...missing in en...], "tr": [...missing in tr...]}``.
    """
    log = get_logger("twinpane.i18n")
    base = _i18n_dir()
    with open(base / "tr.json", "r", encoding="utf-8") as f:
        tr = json.load(f)
    with open(base / "en.json", "r", encoding="utf-8") as f:
        en = json.load(f)
    k_tr = _flatten_keys(tr)
    k_en = _flatten_keys(en)
    missing = {"en": sorted(k_tr - k_en), "tr": sorted(k_en - k_tr)}
    for lang, keys in missing.items():
        if keys:
            log.warning("i18n key drift: missing in %s.json: %d", lang, len(keys))
            for k in keys[:50]:
                log.warning("  missing_%s: %s", lang, k)
    return missing
