"""Tests for chunker.py."""

import pytest

from transcript_chunker.chunker import (
    Chunker,
    Fragment,
    chunk_transcript,
    locate_start,
    segment_spans,
    stitch,
)
from transcript_chunker.normalize import normalize
from transcript_chunker.timestamps import TimeRange
from transcript_chunker.types import (
    Chunk,
    ChunkSettings,
    Segment,
    TranscriptionResult,
    Word,
)

NO_MERGE = ChunkSettings(min_chunk_ms=0)


def make_word(text: str, start: float, end: float) -> Word:
    return Word(text=text, start=start, end=end)


def make_result(text: str, words: list[Word], segments: list[Segment] | None = None) -> TranscriptionResult:
    """One segment spanning all words unless segments are given."""
    if segments is None:
        end = max((w.end for w in words), default=0.0)
        segments = [Segment(start=0.0, end=end, text=text)]
    return TranscriptionResult(text=text, segments=segments, words=words)


def spoken(text: str, start: float = 0.0, step: float = 0.3, pause: float = 0.4) -> list[Word]:
    """Word timings for ``text``, with a pause after each sentence."""
    words = []
    t = start
    for token in text.split():
        words.append(make_word(token, t, t + step))
        t += step
        if token[-1] in ".!?":
            t += pause
    return words


def spans(chunks: list[Chunk]) -> list[tuple[int, int, str]]:
    return [(c.start_ms, c.end_ms, c.display_text) for c in chunks]


def assert_well_formed(chunks: list[Chunk]) -> None:
    assert [c.order_index for c in chunks] == list(range(len(chunks)))
    for chunk in chunks:
        assert chunk.end_ms > chunk.start_ms
    for prev, nxt in zip(chunks, chunks[1:]):
        assert prev.end_ms <= nxt.start_ms


class TestExamples:
    """Known inputs with known chunks."""

    def test_distinct_timestamps(self):
        text = "It was brilliant. It was such a proud moment."
        words = [
            make_word("It", 90.52, 90.68),
            make_word("was", 90.68, 90.82),
            make_word("brilliant.", 90.82, 91.30),
            make_word("It", 91.30, 91.32),
            make_word("was", 91.32, 91.42),
            make_word("such", 91.42, 91.54),
            make_word("a", 91.54, 91.64),
            make_word("proud", 91.64, 91.86),
            make_word("moment.", 91.86, 92.42),
        ]
        result = make_result(text, words, [Segment(90.5, 92.5, text)])

        chunks = Chunker(NO_MERGE).process(result)

        assert chunks == [
            Chunk(0, 90520, 91300, "It was brilliant."),
            Chunk(1, 91300, 92420, "It was such a proud moment."),
        ]

    def test_repeated_words(self):
        text = "The end. The end is near. The end."
        words = [
            make_word("The", 0.0, 0.2),
            make_word("end.", 0.2, 0.5),
            make_word("The", 1.0, 1.2),
            make_word("end", 1.2, 1.5),
            make_word("is", 1.5, 1.7),
            make_word("near.", 1.7, 2.0),
            make_word("The", 3.0, 3.2),
            make_word("end.", 3.2, 3.5),
        ]
        chunks = Chunker(NO_MERGE).process(make_result(text, words))

        assert spans(chunks) == [
            (0, 500, "The end."),
            (1000, 2000, "The end is near."),
            (3000, 3500, "The end."),
        ]
        assert chunks[0].start_ms != chunks[2].start_ms

    def test_non_latin_sentence_aligns(self):
        text = "안녕하세요!"
        result = make_result(text, [make_word("안녕하세요!", 0.1, 1.0)], [Segment(0.0, 1.2, text)])

        chunks, report = Chunker(NO_MERGE).process_with_report(result)

        assert spans(chunks) == [(100, 1000, "안녕하세요!")]
        assert report.fallbacks == 0

    def test_non_latin_sentences(self):
        text = "안녕하세요! 반갑습니다."
        words = [make_word("안녕하세요!", 0.0, 0.8), make_word("반갑습니다.", 1.0, 1.9)]
        chunks = Chunker(NO_MERGE).process(make_result(text, words))
        assert spans(chunks) == [(0, 800, "안녕하세요!"), (1000, 1900, "반갑습니다.")]

    def test_short_chunks_merged_by_default(self):
        text = "Hello world. Goodbye world."
        words = [
            make_word("Hello", 0.0, 0.5),
            make_word("world.", 0.5, 1.0),
            make_word("Goodbye", 1.5, 2.0),
            make_word("world.", 2.0, 2.5),
        ]
        result = make_result(text, words, [Segment(0.0, 5.0, text)])

        assert spans(Chunker(NO_MERGE).process(result)) == [
            (0, 1000, "Hello world."),
            (1500, 2500, "Goodbye world."),
        ]
        assert spans(Chunker().process(result)) == [(0, 2500, "Hello world. Goodbye world.")]


class TestEmptyInput:
    def test_no_segments_no_words(self):
        assert Chunker().process(TranscriptionResult(text="Hello.")) == []

    def test_blank_text(self):
        result = TranscriptionResult(text="", segments=[Segment(0.0, 1.0, "  ")])
        assert Chunker().process(result) == []

    def test_words_without_segments_or_text(self):
        result = TranscriptionResult(text=" ", words=[make_word("hi", 0.0, 0.5)])
        assert Chunker().process(result) == []

    def test_words_without_segments(self):
        result = TranscriptionResult(text="Hi.", segments=[], words=[make_word("Hi.", 0.0, 0.5)])
        assert Chunker().process(result) == []


class TestSegmentFallback:
    """Segments without word timestamps."""

    def test_uses_segment_timestamps(self):
        result = TranscriptionResult(text="Hello world.", segments=[Segment(0.0, 5.0, "Hello world.")])
        chunks, report = Chunker().process_with_report(result)

        assert spans(chunks) == [(0, 5000, "Hello world.")]
        assert report.segment_fallbacks == 1

    def test_divides_segment_by_token_count(self):
        text = "One two three. Four."
        result = TranscriptionResult(text=text, segments=[Segment(0.0, 4.0, text)])
        chunks = Chunker(NO_MERGE).process(result)
        assert spans(chunks) == [(0, 3000, "One two three."), (3000, 4000, "Four.")]

    def test_only_segments_without_nearby_words(self):
        segments = [Segment(0.0, 2.0, "Hello world."), Segment(10.0, 12.0, "No words here.")]
        words = [make_word("Hello", 0.0, 0.5), make_word("world.", 0.5, 1.0)]
        result = TranscriptionResult(text="Hello world. No words here.", segments=segments, words=words)

        chunks, report = Chunker(NO_MERGE).process_with_report(result)

        assert spans(chunks) == [(0, 1000, "Hello world."), (10000, 12000, "No words here.")]
        assert report.segment_fallbacks == 1

    def test_segment_spans(self):
        segment = Segment(0.0, 4.0, "One two three. Four.")
        sentences = ["One two three.", "Four."]
        assert segment_spans(sentences, segment) == [TimeRange(0, 3000), TimeRange(3000, 4000)]
        assert segment_spans(sentences, segment, not_before_ms=1000) == [
            TimeRange(1000, 3250),
            TimeRange(3250, 4000),
        ]


class TestAlignment:
    """Tests for window selection, fallback and validation."""

    def test_window_stays_within_segment(self):
        segments = [Segment(0.0, 1.3, "Hello."), Segment(5.0, 5.5, "Goodbye.")]
        words = [
            make_word("Hello", 0.0, 0.5),
            make_word("there", 0.5, 0.9),
            make_word("friend", 0.9, 1.3),
            make_word("Ciao", 5.0, 5.5),
        ]
        result = TranscriptionResult(text="Hello. Goodbye.", segments=segments, words=words)

        assert spans(Chunker(NO_MERGE).process(result)) == [
            (0, 500, "Hello."),
            (5000, 5500, "Goodbye."),
        ]

    def test_misheard_first_word_keeps_sentence_start(self):
        text = "Hello world is big."
        words = [
            make_word("Yellow", 0.0, 0.5),
            make_word("world", 0.5, 0.8),
            make_word("is", 0.8, 1.0),
            make_word("big.", 1.0, 1.5),
        ]
        chunks, report = Chunker(NO_MERGE).process_with_report(make_result(text, words))

        assert spans(chunks) == [(0, 1500, text)]
        assert report.fallbacks == 0

    def test_sentence_without_words_is_skipped(self):
        text = "Hello world. Extra sentence here."
        words = [make_word("Hello", 0.0, 0.5), make_word("world.", 0.5, 1.0)]
        result = make_result(text, words, [Segment(0.0, 5.0, text)])

        chunks, report = Chunker(NO_MERGE).process_with_report(result)

        assert spans(chunks) == [(0, 1000, "Hello world.")]
        assert report.skipped_no_window == 1
        assert report.skipped_text == ["Extra sentence here."]
        assert report.sentences == 2
        assert report.emitted == 1

    def test_unmatched_sentence_uses_fallback(self):
        text = "Completely different words."
        words = [make_word("foo", 0.0, 0.5), make_word("bar", 0.5, 1.0), make_word("baz", 1.0, 1.5)]
        result = make_result(text, words, [Segment(0.0, 3.0, text)])

        chunks, report = Chunker(NO_MERGE).process_with_report(result)

        assert spans(chunks) == [(0, 1500, text)]
        assert report.fallbacks == 1

    def test_out_of_order_words_not_sorted(self):
        text = "We went home. Then we slept."
        words = [
            make_word("We", 0.0, 0.2),
            make_word("went", 0.2, 0.4),
            make_word("home.", 0.45, 0.8),
            make_word("Then", 1.2, 1.4),
            make_word("we", 1.1, 1.3),
            make_word("slept.", 1.4, 1.9),
        ]
        chunks = Chunker(NO_MERGE).process(make_result(text, words, [Segment(0.0, 2.0, text)]))
        assert spans(chunks) == [(0, 800, "We went home."), (1200, 1900, "Then we slept.")]

    def test_duplicate_words_removed(self):
        text = "The cat sat. It slept."
        words = [
            make_word("The", 0.0, 0.3),
            make_word("cat", 0.3, 0.6),
            make_word("cat", 0.4, 0.6),
            make_word("sat.", 0.6, 1.0),
            make_word("It", 1.5, 1.7),
            make_word("slept.", 1.7, 2.2),
        ]
        chunks = Chunker(NO_MERGE).process(make_result(text, words))
        assert spans(chunks) == [(0, 1000, "The cat sat."), (1500, 2200, "It slept.")]

    def test_fragments_stitched_across_segments(self):
        segments = [
            Segment(0.0, 2.0, "In 1999 we still"),
            Segment(2.0, 4.0, "don't know who did it."),
        ]
        words = [
            make_word("In", 0.0, 0.3),
            make_word("1999", 0.3, 0.8),
            make_word("we", 0.8, 1.0),
            make_word("still", 1.0, 1.5),
            make_word("don't", 2.0, 2.3),
            make_word("know", 2.3, 2.5),
            make_word("who", 2.5, 2.7),
            make_word("did", 2.7, 2.9),
            make_word("it.", 2.9, 3.2),
        ]
        result = TranscriptionResult(text="In 1999 we still don't know who did it.", segments=segments, words=words)

        assert spans(Chunker(NO_MERGE).process(result)) == [
            (0, 3200, "In 1999 we still don't know who did it."),
        ]

    def test_clause_mode(self):
        text = "First, second."
        words = [make_word("First,", 0.0, 0.5), make_word("second.", 0.6, 1.2)]
        settings = ChunkSettings(sentence_only=False, min_chunk_ms=0)

        chunks = Chunker(settings).process(make_result(text, words, [Segment(0.0, 1.5, text)]))

        assert spans(chunks) == [(0, 500, "First,"), (600, 1200, "second.")]


class TestProperties:
    """Invariants that hold for any input."""

    TEXT = " ".join(
        f"Sentence {n} talks about the weather today." for n in range(1, 21)
    )

    def make_noisy_result(self) -> TranscriptionResult:
        words = spoken(self.TEXT)
        # ASR artifacts: a doubled word, and a word starting before its predecessor
        doubled = words[10]
        words.insert(11, make_word(doubled.text, doubled.start + 0.05, doubled.end))
        a, b = words[30], words[31]
        words[31] = make_word(b.text, a.start - 0.05, b.end)
        assert words[31].start < words[30].start
        return make_result(self.TEXT, words)

    @pytest.mark.parametrize("aligner", ["two-pointer", "greedy", "edit-distance"])
    def test_well_formed(self, aligner):
        chunks = chunk_transcript(self.make_noisy_result(), NO_MERGE, aligner)
        assert len(chunks) == 20
        assert_well_formed(chunks)

    def test_well_formed_after_merge(self):
        chunks = Chunker(ChunkSettings(min_chunk_ms=5000)).process(self.make_noisy_result())
        assert_well_formed(chunks)
        assert all(c.duration_ms >= 5000 for c in chunks)

    def test_idempotent(self):
        result = self.make_noisy_result()
        chunker = Chunker()
        assert chunker.process(result) == chunker.process(result)

    def test_chunks_start_near_their_first_word(self):
        result = make_result(self.TEXT, spoken(self.TEXT))
        chunks = Chunker(NO_MERGE).process(result)

        for chunk in chunks:
            first = normalize(chunk.display_text.split()[0])
            assert any(
                normalize(w.text) == first and abs(w.start_ms - chunk.start_ms) <= 500
                for w in result.words
            )


class TestLocateStart:
    """Tests for locate_start function."""

    def test_requires_second_token_nearby(self):
        window = [make_word(t, 0, 0) for t in ["the", "big", "old", "grey", "cat", "the", "dog"]]
        assert locate_start(["The", "dog."], window) == 5

    def test_single_token(self):
        window = [make_word("no", 0, 0), make_word("yes", 0, 0)]
        assert locate_start(["Yes."], window) == 1

    def test_not_found(self):
        assert locate_start(["Hello"], [make_word("bye", 0, 0)]) is None

    def test_skips_punctuation_tokens(self):
        window = [make_word("hi", 0, 0), make_word("there", 0, 0)]
        assert locate_start(["—", "Hi", "there"], window) == 0
        assert locate_start(["..."], window) is None


class TestStitch:
    def test_joins_until_delimiter(self):
        fragments = [
            Fragment("In 1999 we still", 0, 1500),
            Fragment("don't know.", 2000, 3200),
            Fragment("Next", 3300, 4000),
        ]
        assert stitch(fragments) == [
            Chunk(0, 0, 3200, "In 1999 we still don't know."),
            Chunk(1, 3300, 4000, "Next"),
        ]

    def test_comma_ends_clause(self):
        fragments = [Fragment("First,", 0, 500), Fragment("second.", 600, 1200)]
        assert len(stitch(fragments, sentence_only=True)) == 1
        assert len(stitch(fragments, sentence_only=False)) == 2


class TestChunkTranscript:
    def test_aligner_by_alias(self):
        text = "Hello world."
        words = [make_word("Hello", 0.0, 0.5), make_word("world.", 0.5, 1.0)]
        result = make_result(text, words)
        assert chunk_transcript(result, NO_MERGE, "dp") == chunk_transcript(result, NO_MERGE)

    def test_unknown_aligner(self):
        with pytest.raises(ValueError, match="Unknown aligner"):
            chunk_transcript(TranscriptionResult(text=""), aligner="magic")
