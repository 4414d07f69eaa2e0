"""
Tokenizer shared by the similarity engine and the grader.
"""

from __future__ import annotations

import re
from typing import List


MIN_TOKEN_LENGTH = 3

_NON_WORD = re.compile(r"[^\w\s]")


def tokenize(text: str) -> List[str]:
    """
    Split text into normalized word tokens.

    Lower-cases the text, replaces every character that is not a letter,
    digit, underscore or whitespace with a space, splits on whitespace and
    drops tokens shorter than three characters. No stemming, no stop words.
    Letters are Unicode letters, so "résumé" is a single token.

    Args:
        text: Raw text, may be empty

    Returns:
        Tokens in document order
    """
    if not text:
        return []
    cleaned = _NON_WORD.sub(" ", text.lower())
    return [token for token in cleaned.split() if len(token) >= MIN_TOKEN_LENGTH]
