"""Expected i18next plural suffixes per language."""

import re
from typing import Dict, Iterable, List

PLURAL_KEY_PATTERN = re.compile(r"^(.+)_(zero|one|two|few|many|other)$")

DEFAULT_FORMS = ["one", "other"]

# Languages whose CLDR categories differ from the one/other default
PLURAL_FORMS: Dict[str, List[str]] = {
    "ar": ["zero", "one", "two", "few", "many", "other"],
    "cs": ["one", "few", "many", "other"],
    "ga": ["one", "two", "few", "many", "other"],
    "he": ["one", "two", "other"],
    "hr": ["one", "few", "other"],
    "ja": ["other"],
    "ko": ["other"],
    "lt": ["one", "few", "many", "other"],
    "pl": ["one", "few", "many", "other"],
    "ru": ["one", "few", "many", "other"],
    "sk": ["one", "few", "many", "other"],
    "sl": ["one", "two", "few", "other"],
    "sr": ["one", "few", "other"],
    "th": ["other"],
    "uk": ["one", "few", "many", "other"],
    "vi": ["other"],
    "zh": ["other"],
}


def expected_plural_forms(language: str) -> List[str]:
    """Return the plural suffixes a language needs (``pt-BR`` falls back to ``pt``)."""
    if language in PLURAL_FORMS:
        return PLURAL_FORMS[language]
    base = re.split(r"[-_]", language)[0]
    return PLURAL_FORMS.get(base, DEFAULT_FORMS)


def group_plural_keys(keys: Iterable[str]) -> Dict[str, List[str]]:
    """Group ``<base>_<form>`` keys as ``{base: [forms found]}``."""
    groups: Dict[str, List[str]] = {}
    for key in keys:
        match = PLURAL_KEY_PATTERN.match(key)
        if match:
            groups.setdefault(match.group(1), []).append(match.group(2))
    return groups
