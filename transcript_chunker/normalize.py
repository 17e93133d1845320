"""Script-agnostic text normalization for word comparison.

Normalized forms are only used to decide whether a sentence token and an
ASR word are "the same word". They are never displayed.
"""

import unicodedata

# Letters, marks and numbers survive; punctuation, symbols, separators
# and control characters are dropped. Marks must stay for scripts that
# compose syllables from combining characters (Hangul jamo, Devanagari).
_KEPT_CATEGORIES = frozenset({"L", "M", "N"})


def is_word_char(char: str) -> bool:
    """Return True if ``char`` is a letter, mark or digit in any script."""
    return unicodedata.category(char)[0] in _KEPT_CATEGORIES


def normalize(token: str) -> str:
    """Case-fold ``token`` and strip everything that is not a word character.

    >>> normalize("Brilliant.")
    'brilliant'
    >>> normalize("안녕하세요!")
    '안녕하세요'
    """
    composed = unicodedata.normalize("NFC", token.casefold())
    return "".join(c for c in composed if is_word_char(c))


def tokenize(text: str) -> list[str]:
    """Split display text into whitespace-separated tokens."""
    return text.split()


def same_word(a: str, b: str) -> bool:
    """Compare two raw tokens by their normalized forms.

    Tokens that normalize to nothing (a lone dash, an ellipsis) never
    compare equal to anything.
    """
    na = normalize(a)
    return bool(na) and na == normalize(b)
