"""Edit-distance aligner: optimal DP alignment over the window.

O(tokens x words) time and memory, which is acceptable only because the
orchestrator hands every aligner a bounded window, never the whole
transcript.
"""

from dataclasses import dataclass

from ..normalize import normalize
from ..types import Word
from .base import AlignOp, AlignResult, unmatched


@dataclass
class EditDistanceAligner:
    """Minimum-cost alignment where substitution costs more than skipping."""

    gap_cost: int = 1
    substitution_cost: int = 2
    name: str = "edit-distance"

    def align(self, tokens: list[str], words: list[Word]) -> list[AlignResult]:
        if not tokens:
            return []
        if not words:
            return unmatched(tokens)

        token_norms = [normalize(t) for t in tokens]
        word_norms = [normalize(w.text) for w in words]
        n, m = len(tokens), len(words)

        cost = [[0] * (m + 1) for _ in range(n + 1)]
        for i in range(1, n + 1):
            cost[i][0] = i * self.gap_cost
        for j in range(1, m + 1):
            cost[0][j] = j * self.gap_cost

        for i in range(1, n + 1):
            for j in range(1, m + 1):
                same = bool(token_norms[i - 1]) and token_norms[i - 1] == word_norms[j - 1]
                cost[i][j] = min(
                    cost[i - 1][j - 1] + (0 if same else self.substitution_cost),
                    cost[i - 1][j] + self.gap_cost,
                    cost[i][j - 1] + self.gap_cost,
                )

        return self._backtrack(cost, token_norms, word_norms)

    def _backtrack(
        self,
        cost: list[list[int]],
        token_norms: list[str],
        word_norms: list[str],
    ) -> list[AlignResult]:
        """Walk the DP table back from the corner.

        Ties are broken towards skipping the later word, so among equally
        cheap alignments the one matching the earliest words wins. Windows
        often end with the next sentence, which may repeat this one.
        """
        results: list[AlignResult] = []
        i, j = len(token_norms), len(word_norms)

        while i > 0 or j > 0:
            if j > 0 and cost[i][j] == cost[i][j - 1] + self.gap_cost:
                results.append(AlignResult(None, j - 1, AlignOp.WORD_ONLY))
                j -= 1
                continue
            if i > 0 and j > 0:
                same = bool(token_norms[i - 1]) and token_norms[i - 1] == word_norms[j - 1]
                diagonal = cost[i - 1][j - 1] + (0 if same else self.substitution_cost)
                if same and cost[i][j] == diagonal:
                    results.append(AlignResult(i - 1, j - 1, AlignOp.MATCH))
                    i -= 1
                    j -= 1
                    continue
            if i > 0 and cost[i][j] == cost[i - 1][j] + self.gap_cost:
                results.append(AlignResult(i - 1, None, AlignOp.TOKEN_ONLY))
                i -= 1
            else:
                # Substitution: the token and the word are both unaccounted for
                results.append(AlignResult(None, j - 1, AlignOp.WORD_ONLY))
                results.append(AlignResult(i - 1, None, AlignOp.TOKEN_ONLY))
                i -= 1
                j -= 1

        results.reverse()
        return results
