"""Utility helpers for string normalization and timestamps."""

from __future__ import annotations

import re
import time
import unicodedata
from typing import List

TOKEN_PATTERN = re.compile(r"[^\W_]+")
APOSTROPHES = re.compile(r"['’]")

# Latin letters that have no decomposition.
LATIN_LIGATURES = {
    "ß": "ss",
    "Æ": "Ae",
    "æ": "ae",
    "Ø": "O",
    "ø": "o",
    "Œ": "Oe",
    "œ": "oe",
    "Đ": "D",
    "đ": "d",
    "Ł": "L",
    "ł": "l",
    "Þ": "Th",
    "þ": "th",
    "Ð": "D",
    "ð": "d",
}


def epoch_millis() -> int:
    return int(time.time() * 1000)


def deburr(value: str) -> str:
    """Fold accented Latin letters to ASCII, leaving other scripts intact."""
    folded: List[str] = []
    for char in unicodedata.normalize("NFC", value):
        if char in LATIN_LIGATURES:
            folded.append(LATIN_LIGATURES[char])
            continue
        decomposed = unicodedata.normalize("NFKD", char)
        if not char.isascii() and decomposed[0].isascii():
            folded.append(decomposed.encode("ascii", "ignore").decode("ascii"))
        elif unicodedata.category(char) != "Mn":
            folded.append(char)
    return "".join(folded)


def _split_token(token: str) -> List[str]:
    words: List[str] = []
    current = ""
    for index, char in enumerate(token):
        if current:
            prev = current[-1]
            following = token[index + 1] if index + 1 < len(token) else ""
            if (
                char.isdigit() != prev.isdigit()
                or (prev.islower() and char.isupper())
                or (prev.isupper() and char.isupper() and following.islower())
            ):
                words.append(current)
                current = ""
        current += char
    if current:
        words.append(current)
    return words


def kebab_case(value: str, fallback: str = "untitled") -> str:
    """Split a title into words and join them with hyphens.

    Latin accents are folded to ASCII while other scripts are kept,
    apostrophes vanish, camelCase and letter/digit boundaries start new
    words, and anything that is not a letter or digit is dropped:

    >>> kebab_case("The Witch’s Café, Part2")
    'the-witchs-cafe-part-2'
    >>> kebab_case("Пещера Ужаса")
    'пещера-ужаса'
    """
    normalized = APOSTROPHES.sub("", deburr(value))
    words = [word for token in TOKEN_PATTERN.findall(normalized) for word in _split_token(token)]
    return "-".join(word.lower() for word in words) or fallback
