"""Heuristic content checks for translation values."""

import re
from typing import Iterable, List, Optional, Tuple

# Common English function words; a high share suggests untranslated text
DEFAULT_STOPLIST = (
    "the", "and", "or", "but", "in", "on", "at", "to", "for", "of", "with", "by",
)

SUSPICIOUS_PATTERNS = [
    re.compile(r"^(test|todo|fixme|placeholder)", re.IGNORECASE),
    re.compile(r"lorem ipsum", re.IGNORECASE),
    re.compile(r"\[.*\]"),
    re.compile(r"xxx+", re.IGNORECASE),
]

HTML_PATTERN = re.compile(r"<[^>]+>")

EXTREMELY_LONG = 2000
EXTREMELY_SHORT = 2
# Key fragments marking a value as intentionally brief
BRIEF_KEY_HINTS = ("_short", "_abbr")


class ContentHeuristics:
    """
    Cheap, per-value heuristics.

    The untranslated check is a word-frequency ratio against a stoplist of
    source-language function words; both are configurable.
    """

    def __init__(
        self,
        stoplist: Optional[Iterable[str]] = None,
        untranslated_ratio: float = 0.3,
    ):
        self.stoplist = frozenset(word.lower() for word in (stoplist or DEFAULT_STOPLIST))
        self.untranslated_ratio = untranslated_ratio

    def is_untranslated(self, value: str) -> bool:
        """Check whether stoplist words exceed the ratio of all words."""
        words = value.lower().split()
        if not words:
            return False
        hits = sum(1 for word in words if word in self.stoplist)
        return hits > len(words) * self.untranslated_ratio

    def has_suspicious_pattern(self, value: str) -> bool:
        return any(pattern.search(value) for pattern in SUSPICIOUS_PATTERNS)

    def contains_html(self, value: str) -> bool:
        return bool(HTML_PATTERN.search(value))

    def length_problem(self, value: str, key: str) -> Optional[Tuple[str, str]]:
        """
        Check for extreme lengths.

        Returns:
            ``("long", severity)`` / ``("short", severity)`` or None
        """
        if len(value) > EXTREMELY_LONG:
            return "long", "warning"
        if len(value) < EXTREMELY_SHORT and not any(hint in key for hint in BRIEF_KEY_HINTS):
            return "short", "info"
        return None


CAMEL_CASE = re.compile(r"^[a-z][a-z0-9]*[A-Z][a-zA-Z0-9]*$")
SNAKE_CASE = re.compile(r"^[a-z][a-z0-9]*_[a-z0-9_]*$")


def naming_styles(segments: Iterable[str]) -> Tuple[List[str], List[str]]:
    """Split key segments into (camelCase, snake_case) lists."""
    camel = []
    snake = []
    for segment in segments:
        if CAMEL_CASE.match(segment):
            camel.append(segment)
        elif SNAKE_CASE.match(segment):
            snake.append(segment)
    return camel, snake
