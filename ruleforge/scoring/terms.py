"""Whole-word technology term matching with alias expansion."""

from __future__ import annotations

import re
from functools import lru_cache
from typing import Iterable, Mapping, Sequence, Tuple

_TOKEN_SPLIT = re.compile(r"[^a-z0-9+#]+")
_KNOWN_EXTENSIONS = (".mdc", ".md", ".json", ".yaml", ".yml", ".txt")

ALIASES: Mapping[str, Tuple[str, ...]] = {
    "tailwind css": ("tailwind", "tailwindcss"),
    "tailwind": ("tailwindcss",),
    "next.js": ("nextjs",),
    "shadcn/ui": ("shadcn", "shadcnui"),
    "typescript": ("ts",),
    "javascript": ("js",),
    "vue.js": ("vue", "vuejs"),
    "node.js": ("node", "nodejs"),
    "react native": ("reactnative",),
    "radix ui": ("radix",),
    "c#": ("csharp",),
    "c++": ("cpp",),
    "golang": ("go",),
    "go": ("golang",),
}


@lru_cache(maxsize=2048)
def tokenize(text: str) -> Tuple[str, ...]:
    """Lowercase ``text`` and split it into alphanumeric words (``+`` and ``#`` kept)."""
    return tuple(token for token in _TOKEN_SPLIT.split(text.lower()) if token)


def strip_extension(name: str) -> str:
    lowered = name.lower()
    for extension in _KNOWN_EXTENSIONS:
        if lowered.endswith(extension):
            return name[: -len(extension)]
    return name


@lru_cache(maxsize=1024)
def variants(term: str) -> Tuple[Tuple[str, ...], ...]:
    """Token sequences that count as a mention of ``term``."""
    lowered = term.strip().lower()
    spellings = (lowered,) + ALIASES.get(lowered, ())
    result = []
    for spelling in spellings:
        parts = tokenize(spelling)
        if parts and parts not in result:
            result.append(parts)
    return tuple(result)


def _word_hit(token: str, word: str) -> bool:
    # Version suffixes count as the same word: vue3, svelte5, nextjs15.
    if token == word:
        return True
    return token.startswith(word) and token[len(word):].isdigit()


def mentions(tokens: Sequence[str], term: str) -> bool:
    """True when ``tokens`` contain ``term`` (or one of its aliases) as whole words."""
    if not tokens:
        return False
    for parts in variants(term):
        compact = "".join(parts)
        if any(_word_hit(token, compact) for token in tokens):
            return True
        width = len(parts)
        if width == 1:
            continue
        for start in range(len(tokens) - width + 1):
            window = tokens[start : start + width]
            if all(_word_hit(token, part) for token, part in zip(window, parts)):
                return True
    return False


def mentions_any(tokens: Sequence[str], terms: Iterable[str]) -> bool:
    return any(mentions(tokens, term) for term in terms)


def has_keyword(tokens: Sequence[str], keyword: str) -> bool:
    """Looser word test for workflow keywords: ``debug`` also matches ``debugging``."""
    for token in tokens:
        if token == keyword:
            return True
        if len(keyword) >= 4 and token.startswith(keyword):
            return True
    return False


__all__ = ["ALIASES", "has_keyword", "mentions", "mentions_any", "strip_extension", "tokenize", "variants"]
