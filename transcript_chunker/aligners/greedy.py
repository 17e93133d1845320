"""Greedy sequential aligner: nearest exact match within a short lookahead."""

from dataclasses import dataclass

from ..normalize import normalize
from ..types import Word
from .base import AlignOp, AlignResult, unmatched


@dataclass
class GreedyAligner:
    """Exact matches only; cheaper than two-pointer but misses misheard words."""

    max_lookahead: int = 5
    name: str = "greedy"

    def align(self, tokens: list[str], words: list[Word]) -> list[AlignResult]:
        if not tokens:
            return []
        if not words:
            return unmatched(tokens)

        word_norms = [normalize(w.text) for w in words]
        results: list[AlignResult] = []
        cursor = 0

        for t, token in enumerate(tokens):
            target = normalize(token)
            end = min(cursor + self.max_lookahead, len(words))
            hit = next(
                (i for i in range(cursor, end) if target and word_norms[i] == target),
                None,
            )
            if hit is None:
                results.append(AlignResult(t, None, AlignOp.TOKEN_ONLY))
                continue

            results.extend(AlignResult(None, skip, AlignOp.WORD_ONLY) for skip in range(cursor, hit))
            results.append(AlignResult(t, hit, AlignOp.MATCH))
            cursor = hit + 1

        results.extend(AlignResult(None, rest, AlignOp.WORD_ONLY) for rest in range(cursor, len(words)))
        return results
