"""Two-pointer aligner with filler skipping and fuzzy fallback."""

from dataclasses import dataclass, field

from ..normalize import normalize
from ..types import Word
from .base import AlignOp, AlignResult, unmatched

FILLER_WORDS = frozenset({
    "um", "uh", "like", "yeah", "so", "well", "okay", "ok",
    "right", "actually", "basically",
})


def levenshtein(a: str, b: str) -> int:
    """Edit distance between two strings (two-row DP)."""
    if a == b:
        return 0
    if not a:
        return len(b)
    if not b:
        return len(a)

    prev = list(range(len(b) + 1))
    for i, ca in enumerate(a, start=1):
        curr = [i]
        for j, cb in enumerate(b, start=1):
            curr.append(min(
                prev[j] + 1,
                curr[j - 1] + 1,
                prev[j - 1] + (0 if ca == cb else 1),
            ))
        prev = curr
    return prev[-1]


@dataclass
class TwoPointerAligner:
    """
    Forward-only matcher over a bounded window.

    The token pointer and the word pointer only move forward. A mismatch
    triggers a lookahead of at most ``max_lookahead`` words (exact match
    first, then fuzzy); if nothing is found the token is left unmatched
    and the word pointer stays put, so one misheard token cannot drag the
    rest of the sentence forward.
    """

    max_lookahead: int = 10
    max_fuzzy_distance: int = 1
    min_fuzzy_length: int = 2
    fillers: frozenset[str] = field(default=FILLER_WORDS)
    name: str = "two-pointer"

    def align(self, tokens: list[str], words: list[Word]) -> list[AlignResult]:
        if not tokens:
            return []
        if not words:
            return unmatched(tokens)

        token_norms = [normalize(t) for t in tokens]
        word_norms = [normalize(w.text) for w in words]

        results: list[AlignResult] = []
        t = 0
        w = 0

        while t < len(tokens):
            if w >= len(words):
                results.append(AlignResult(t, None, AlignOp.TOKEN_ONLY))
                t += 1
                continue

            target = token_norms[t]
            if target and target == word_norms[w]:
                results.append(AlignResult(t, w, AlignOp.MATCH))
                t += 1
                w += 1
                continue

            if word_norms[w] in self.fillers:
                results.append(AlignResult(None, w, AlignOp.WORD_ONLY))
                w += 1
                continue

            found = self._look_ahead(target, word_norms, w)
            if found is None:
                results.append(AlignResult(t, None, AlignOp.TOKEN_ONLY))
                t += 1
                continue

            results.extend(AlignResult(None, skip, AlignOp.WORD_ONLY) for skip in range(w, found))
            results.append(AlignResult(t, found, AlignOp.MATCH))
            t += 1
            w = found + 1

        results.extend(AlignResult(None, rest, AlignOp.WORD_ONLY) for rest in range(w, len(words)))
        return results

    def is_fuzzy_match(self, a: str, b: str) -> bool:
        """Near-identical words, excluding very short ones to avoid false hits."""
        if len(a) < self.min_fuzzy_length or len(b) < self.min_fuzzy_length:
            return False
        return levenshtein(a, b) <= self.max_fuzzy_distance

    def _look_ahead(self, target: str, word_norms: list[str], start: int) -> int | None:
        if not target:
            return None
        end = min(start + self.max_lookahead, len(word_norms))

        for i in range(start, end):
            if word_norms[i] == target:
                return i
        for i in range(start, end):
            if self.is_fuzzy_match(target, word_norms[i]):
                return i
        return None
