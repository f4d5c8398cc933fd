"""
Text normalisation and word / character-bigram tokenization.
"""
from __future__ import annotations

import re
import unicodedata
from typing import List, Optional

_WHITESPACE = re.compile(r"\s+")
# Combining Diacritical Marks block, where NFD puts Latin accents.
_MARKS_START, _MARKS_END = "\u0300", "\u036f"


def _fold(text: str) -> str:
    decomposed = unicodedata.normalize("NFD", text.lower())
    chars = []
    for char in decomposed:
        if _MARKS_START <= char <= _MARKS_END:
            continue
        if char.isalpha() or char.isspace():
            chars.append(char)
        else:
            chars.append(" ")
    return _WHITESPACE.sub(" ", "".join(chars).strip())


def tokenize(text: Optional[str]) -> List[str]:
    """
    Split text into words, each followed by its overlapping character bigrams.

    Accents fold to their base letter and anything that is not a letter
    separates words, so ``tokenize("Café")`` gives
    ``["cafe", "ca", "af", "fe"]``.
    """
    if text is None:
        return []
    tokens: List[str] = []
    for word in _fold(text).split(" "):
        if not word:
            continue
        tokens.append(word)
        tokens.extend(word[i : i + 2] for i in range(len(word) - 1))
    return tokens


__all__ = ["tokenize"]
