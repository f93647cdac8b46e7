"""Word tokenization for indexed documents."""

from __future__ import annotations

from typing import List

from nltk.tokenize import RegexpTokenizer

PUNCTUATION = frozenset({".", ",", ":", ""})

_WORD_TOKENIZER = RegexpTokenizer(r"\w+")


def tokenize(text: str, *, lowercase: bool = False) -> List[str]:
    """Split text into word tokens.

    Word boundaries are any run of characters that are not letters, digits or
    underscores. Punctuation-only tokens are dropped. Case is preserved unless
    ``lowercase`` is set.
    """
    if not text:
        return []

    tokens = [token for token in _WORD_TOKENIZER.tokenize(text) if token not in PUNCTUATION]
    if lowercase:
        tokens = [token.lower() for token in tokens]
    return tokens
