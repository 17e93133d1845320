"""Derive chunk timestamps from alignment results."""

from dataclasses import dataclass

from .aligners.base import AlignResult, matched_pairs
from .types import Word

MIN_DURATION_MS = 500


@dataclass(frozen=True)
class TimeRange:
    start_ms: int
    end_ms: int

    @property
    def duration_ms(self) -> int:
        return self.end_ms - self.start_ms


def from_matches(window: list[Word], results: list[AlignResult]) -> TimeRange | None:
    """
    Interval spanned by the matched words, or None if nothing matched.

    Start comes from the word matched to the first token. If the first
    token was misheard, the window already begins where the sentence does,
    so its first word gives the start. End comes from the matched word
    furthest into the window.
    """
    pairs = matched_pairs(results)
    if not pairs:
        return None

    first_token, first_word = min(pairs)
    if first_token != 0:
        first_word = 0
    last_word = max(word_index for _, word_index in pairs)
    return TimeRange(window[first_word].start_ms, window[last_word].end_ms)


def fallback(tokens: list[str], window: list[Word]) -> TimeRange:
    """Best-effort interval: assume one word per token from the window start."""
    last = min(len(tokens), len(window)) - 1
    return TimeRange(window[0].start_ms, window[max(last, 0)].end_ms)


def apply_floor(span: TimeRange, min_duration_ms: int = MIN_DURATION_MS) -> TimeRange:
    """Force a positive duration on degenerate intervals."""
    if span.end_ms <= span.start_ms:
        return TimeRange(span.start_ms, span.start_ms + min_duration_ms)
    return span


def assign(
    tokens: list[str],
    window: list[Word],
    results: list[AlignResult],
    prev_end_ms: int = 0,
) -> TimeRange:
    """
    Timestamps for one sentence.

    Args:
        tokens: Sentence display tokens
        window: Words the sentence was aligned against (non-empty)
        results: Output of a WordAligner for these tokens and words
        prev_end_ms: End of the previously emitted chunk

    Returns:
        Matched interval, or the fallback interval when nothing matched or
        the match starts before ``prev_end_ms``; floored to a positive length
    """
    span = from_matches(window, results)
    if span is None or span.start_ms < prev_end_ms:
        span = fallback(tokens, window)
    return apply_floor(span)
