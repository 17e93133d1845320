"""Chunking pipeline: ASR output to ordered, non-overlapping chunks.

Each sentence goes through SelectWindow -> Align -> AssignTimestamps ->
Validate and is then emitted or skipped. The end of the last emitted
chunk is a watermark: the next sentence's window starts at the first word
at or after it, so chunks can never overlap or go backwards in time.
"""

import logging
from bisect import bisect_left
from dataclasses import dataclass, field

from .aligners import DEFAULT_ALIGNER, WordAligner, create_aligner, matched_pairs
from .duplicates import remove_duplicates
from .merger import merge
from .normalize import normalize, same_word, tokenize
from .splitter import ends_with_delimiter, split
from .timestamps import TimeRange, apply_floor, assign, from_matches
from .types import (
    DEFAULT_SETTINGS,
    Chunk,
    ChunkSettings,
    Segment,
    TranscriptionResult,
    Word,
    to_ms,
)

logger = logging.getLogger(__name__)

# Words this far outside a segment's span still count as belonging to it
SEGMENT_MARGIN_S = 0.5

# Window size: tokens * WINDOW_FACTOR + WINDOW_MARGIN words
WINDOW_FACTOR = 2
WINDOW_MARGIN = 10

# How far after the first token the second one may appear when locating a sentence start
PAIR_REACH = 3


@dataclass(frozen=True)
class Fragment:
    """A sentence with its final timestamps, before stitching and merging."""

    text: str
    start_ms: int
    end_ms: int


@dataclass
class ChunkingReport:
    """Counters describing one chunking run."""

    sentences: int = 0
    emitted: int = 0
    fallbacks: int = 0
    segment_fallbacks: int = 0
    skipped_no_window: int = 0
    skipped_out_of_order: int = 0
    skipped_empty: int = 0
    skipped_text: list[str] = field(default_factory=list)

    @property
    def skipped(self) -> int:
        return self.skipped_no_window + self.skipped_out_of_order + self.skipped_empty


def locate_start(tokens: list[str], window: list[Word]) -> int | None:
    """
    Find where a sentence begins inside its window.

    Prefers a word matching the first token that is followed, within
    PAIR_REACH words, by a word matching the second token; common words
    like "the" are otherwise easy to match in the wrong place.
    Single-token sentences take the first matching word.
    """
    content = [t for t in tokens if normalize(t)]
    if not content:
        return None

    first = content[0]
    second = content[1] if len(content) > 1 else None

    for i, word in enumerate(window):
        if not same_word(first, word.text):
            continue
        if second is None:
            return i
        reach = window[i + 1 : i + 1 + PAIR_REACH]
        if any(same_word(second, w.text) for w in reach):
            return i
    return None


def stitch(fragments: list[Fragment], sentence_only: bool = True) -> list[Chunk]:
    """Join fragments cut mid-sentence by a segment boundary into chunks."""
    chunks: list[Chunk] = []
    pending: list[Fragment] = []

    for fragment in fragments:
        pending.append(fragment)
        if ends_with_delimiter(fragment.text, sentence_only):
            chunks.append(_join(pending, len(chunks)))
            pending = []

    if pending:
        chunks.append(_join(pending, len(chunks)))
    return chunks


def _join(fragments: list[Fragment], order_index: int) -> Chunk:
    return Chunk(
        order_index=order_index,
        start_ms=fragments[0].start_ms,
        end_ms=fragments[-1].end_ms,
        display_text=" ".join(f.text for f in fragments),
    )


class Chunker:
    """
    Turns a TranscriptionResult into learning chunks.

    Stateless between calls: the same input always yields the same chunks.
    """

    def __init__(
        self,
        settings: ChunkSettings = DEFAULT_SETTINGS,
        aligner: WordAligner | None = None,
    ):
        """
        Initialize the chunker.

        Args:
            settings: Sentence/clause granularity and merge threshold
            aligner: Alignment strategy (default: two-pointer)
        """
        self.settings = settings
        self.aligner = aligner if aligner is not None else create_aligner(DEFAULT_ALIGNER)

    def process(self, result: TranscriptionResult) -> list[Chunk]:
        """Chunk a transcription result."""
        chunks, _ = self.process_with_report(result)
        return chunks

    def process_with_report(
        self, result: TranscriptionResult
    ) -> tuple[list[Chunk], ChunkingReport]:
        """Chunk a transcription result and describe what was dropped or approximated."""
        report = ChunkingReport()
        fragments = self.align_fragments(result, report)
        chunks = stitch(fragments, self.settings.sentence_only)
        merged = merge(chunks, self.settings.min_chunk_ms)

        logger.info(
            "Chunked %d sentences into %d chunks (%d skipped, %d fallbacks, aligner=%s)",
            report.sentences,
            len(merged),
            report.skipped,
            report.fallbacks + report.segment_fallbacks,
            self.aligner.name,
        )
        return merged, report

    def align_fragments(
        self,
        result: TranscriptionResult,
        report: ChunkingReport | None = None,
    ) -> list[Fragment]:
        """Timestamp every sentence of the transcript, dropping the ones that cannot be placed."""
        report = report if report is not None else ChunkingReport()
        if not result.segments:
            return []
        words = remove_duplicates(result.words)

        if len(words) != len(result.words):
            logger.debug("Removed %d duplicate words", len(result.words) - len(words))

        starts = sorted(w.start for w in words)
        run = _Run(words=words, report=report)

        for segment in result.segments:
            sentences = split(segment.text, self.settings.sentence_only)
            if not sentences:
                continue
            if _has_words_near(starts, segment):
                for sentence in sentences:
                    self._align_sentence(sentence, segment, run)
            else:
                self._place_by_segment(sentences, segment, run)

        return run.fragments

    def _align_sentence(self, sentence: str, segment: Segment, run: "_Run") -> None:
        report = run.report
        report.sentences += 1
        tokens = tokenize(sentence)

        if not any(normalize(t) for t in tokens):
            report.skipped_empty += 1
            report.skipped_text.append(sentence)
            logger.debug("Skipping %r: no alignable tokens", sentence)
            return

        anchor = run.find_anchor(not_before=segment.start - SEGMENT_MARGIN_S)
        if anchor is None or run.words[anchor].start > segment.end + SEGMENT_MARGIN_S:
            report.skipped_no_window += 1
            report.skipped_text.append(sentence)
            logger.debug("Skipping %r: no window at or after %dms", sentence, run.prev_end_ms)
            return

        window = _window(run.words, anchor, len(tokens), segment)
        offset = locate_start(tokens, window) or 0
        if window[offset].start_ms < run.prev_end_ms:
            # Out-of-order timestamp; keep the anchor as the window start
            offset = 0
        window = window[offset:]

        results = self.aligner.align(tokens, window)
        pairs = matched_pairs(results)
        matched = from_matches(window, results)
        span = assign(tokens, window, results, run.prev_end_ms)

        if matched is None or matched.start_ms < run.prev_end_ms:
            report.fallbacks += 1
            logger.debug("Fallback timestamps for %r: %d/%d tokens matched", sentence, len(pairs), len(tokens))

        if span.start_ms < run.prev_end_ms:
            report.skipped_out_of_order += 1
            report.skipped_text.append(sentence)
            logger.debug("Skipping %r: starts at %dms before %dms", sentence, span.start_ms, run.prev_end_ms)
            return

        if pairs:
            consumed = max(word_index for _, word_index in pairs) + 1
        else:
            consumed = min(len(tokens), len(window))
        run.emit(sentence, span, cursor=anchor + offset + consumed)

    def _place_by_segment(self, sentences: list[str], segment: Segment, run: "_Run") -> None:
        """Without word timestamps, spread the segment's span over its sentences."""
        report = run.report
        logger.debug("No words near segment %.2f-%.2fs, using segment timestamps", segment.start, segment.end)

        for sentence, span in zip(sentences, segment_spans(sentences, segment, run.prev_end_ms)):
            report.sentences += 1
            if span.start_ms < run.prev_end_ms:
                report.skipped_out_of_order += 1
                report.skipped_text.append(sentence)
                logger.debug("Skipping %r: starts at %dms before %dms", sentence, span.start_ms, run.prev_end_ms)
                continue
            report.segment_fallbacks += 1
            run.emit(sentence, span)


def segment_spans(sentences: list[str], segment: Segment, not_before_ms: int = 0) -> list[TimeRange]:
    """Divide a segment's span among its sentences in proportion to token count."""
    start_ms = max(to_ms(segment.start), not_before_ms)
    end_ms = to_ms(segment.end)
    total = max(end_ms - start_ms, 0)

    weights = [max(len(tokenize(s)), 1) for s in sentences]
    total_weight = sum(weights)

    spans = []
    cursor = start_ms
    done = 0
    for weight in weights:
        done += weight
        boundary = start_ms + total * done // total_weight
        spans.append(apply_floor(TimeRange(cursor, boundary)))
        cursor = spans[-1].end_ms
    return spans


def chunk_transcript(
    result: TranscriptionResult,
    settings: ChunkSettings | None = None,
    aligner: str = DEFAULT_ALIGNER,
) -> list[Chunk]:
    """Chunk ``result`` with the given settings and aligner name or alias."""
    return Chunker(settings or DEFAULT_SETTINGS, create_aligner(aligner)).process(result)


@dataclass
class _Run:
    """Mutable state of a single forward pass."""

    words: list[Word]
    report: ChunkingReport
    prev_end_ms: int = 0
    cursor: int = 0
    fragments: list[Fragment] = field(default_factory=list)

    def find_anchor(self, not_before: float = 0.0) -> int | None:
        """First unconsumed word after the watermark and no earlier than ``not_before`` seconds."""
        for i in range(self.cursor, len(self.words)):
            word = self.words[i]
            if word.start_ms >= self.prev_end_ms and word.start >= not_before:
                return i
        return None

    def emit(self, text: str, span: TimeRange, cursor: int | None = None) -> None:
        self.fragments.append(Fragment(text, span.start_ms, span.end_ms))
        self.prev_end_ms = span.end_ms
        self.report.emitted += 1
        if cursor is not None:
            self.cursor = cursor


def _has_words_near(starts: list[float], segment: Segment) -> bool:
    i = bisect_left(starts, segment.start - SEGMENT_MARGIN_S)
    return i < len(starts) and starts[i] <= segment.end + SEGMENT_MARGIN_S


def _window(words: list[Word], anchor: int, token_count: int, segment: Segment) -> list[Word]:
    limit = segment.end + SEGMENT_MARGIN_S
    end = min(anchor + token_count * WINDOW_FACTOR + WINDOW_MARGIN, len(words))
    window = [words[anchor]]
    for word in words[anchor + 1 : end]:
        if word.start > limit:
            break
        window.append(word)
    return window
