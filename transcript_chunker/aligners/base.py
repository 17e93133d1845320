"""Alignment contracts shared by all aligner strategies."""

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from ..types import Word


class AlignOp(str, Enum):
    """Outcome of one alignment step."""

    MATCH = "match"
    TOKEN_ONLY = "token-only"
    """Sentence token with no ASR word."""

    WORD_ONLY = "word-only"
    """ASR word with no sentence token (filler, mishearing)."""

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class AlignResult:
    """Maps a sentence-token index to a window-word index."""

    token_index: int | None
    word_index: int | None
    op: AlignOp

    @property
    def is_match(self) -> bool:
        return self.op == AlignOp.MATCH


@dataclass
class AlignerInfo:
    """Metadata for a registered aligner strategy."""

    name: str
    """Canonical strategy name (e.g., 'two-pointer')."""

    factory: "type[WordAligner]"
    """Class constructed with default settings."""

    description: str = ""
    """Human-readable description for CLI display."""

    aliases: list[str] = field(default_factory=list)
    """Short names for CLI convenience."""


@runtime_checkable
class WordAligner(Protocol):
    """Protocol for aligning sentence tokens against a window of ASR words.

    Every token index must appear exactly once in the results, either as
    MATCH or TOKEN_ONLY. Matched word indexes must be strictly increasing.
    """

    name: str

    def align(self, tokens: list[str], words: "list[Word]") -> list[AlignResult]:
        """Align display tokens to window words.

        Args:
            tokens: Whitespace tokens of one sentence, punctuation kept.
            words: Time-localized slice of the ASR word list.

        Returns:
            Alignment steps in scan order.
        """
        ...


def unmatched(tokens: list[str]) -> list[AlignResult]:
    """Results for a sentence with no words to align against."""
    return [AlignResult(i, None, AlignOp.TOKEN_ONLY) for i in range(len(tokens))]


def matched_pairs(results: list[AlignResult]) -> list[tuple[int, int]]:
    """(token_index, word_index) pairs of every MATCH, in scan order."""
    return [
        (r.token_index, r.word_index)
        for r in results
        if r.is_match and r.token_index is not None and r.word_index is not None
    ]
