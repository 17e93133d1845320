"""Remove words that the ASR emitted twice for the same audio."""

from .normalize import normalize
from .types import Word


def remove_duplicates(words: list[Word]) -> list[Word]:
    """
    Drop overlapping repeats of the previous kept word.

    Words are scanned in emission order and never sorted. ASR timestamps
    are locally non-monotonic (e.g. words[177] @ 62.44s followed by
    words[178] @ 62.26s); sorting would swap adjacent words and break
    alignment against the sentence text.

    A word is dropped only if it normalizes to the same text as the last
    kept word AND starts before that word ends. The same word spoken again
    later is kept.
    """
    if not words:
        return []

    result = [words[0]]
    prev_norm = normalize(words[0].text)

    for word in words[1:]:
        prev = result[-1]
        norm = normalize(word.text)
        if norm == prev_norm and word.start < prev.end:
            continue
        result.append(word)
        prev_norm = norm

    return result
