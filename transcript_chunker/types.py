"""Transcript and chunk types.

Contains the dataclasses shared by every pipeline stage: the ASR input
(words, segments, full result) and the chunk records handed to playback
and persistence.
"""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any


class TranscriptFormatError(ValueError):
    """Raised when ASR JSON does not match the expected shape."""


@dataclass(frozen=True)
class Word:
    """A single ASR-recognized word with its audio interval."""

    text: str
    start: float  # seconds
    end: float  # seconds

    @property
    def start_ms(self) -> int:
        return to_ms(self.start)

    @property
    def end_ms(self) -> int:
        return to_ms(self.end)


@dataclass(frozen=True)
class Segment:
    """A coarse ASR grouping, may hold several sentences."""

    start: float  # seconds
    end: float  # seconds
    text: str

    @property
    def duration(self) -> float:
        return self.end - self.start


@dataclass(frozen=True)
class TranscriptionResult:
    """Complete ASR output consumed by the chunker."""

    text: str
    segments: list[Segment] = field(default_factory=list)
    words: list[Word] = field(default_factory=list)

    @property
    def duration(self) -> float:
        """Total duration based on last segment end time."""
        if not self.segments:
            return 0.0
        return self.segments[-1].end

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TranscriptionResult":
        """Build a result from a Whisper-compatible response.

        Accepts ``{"text", "segments": [{"start", "end", "text"}],
        "words": [{"word", "start", "end"}]}``. When the top-level
        ``words`` list is missing, words embedded in segments are used.

        Raises:
            TranscriptFormatError: If a field has the wrong type or is missing.
        """
        if not isinstance(data, dict):
            raise TranscriptFormatError("transcription must be a JSON object")

        raw_segments = _objects(data.get("segments") or [], "segments")
        raw_words = data.get("words")
        if raw_words is None:
            raw_words = [w for seg in raw_segments for w in (seg.get("words") or [])]
        raw_words = _objects(raw_words, "words")

        segments = [
            Segment(
                start=_number(seg, "start", f"segments[{i}]"),
                end=_number(seg, "end", f"segments[{i}]"),
                text=str(seg.get("text", "")),
            )
            for i, seg in enumerate(raw_segments)
        ]
        words = [
            Word(
                text=_word_text(w, f"words[{i}]"),
                start=_number(w, "start", f"words[{i}]"),
                end=_number(w, "end", f"words[{i}]"),
            )
            for i, w in enumerate(raw_words)
        ]

        text = data.get("text")
        if text is None:
            text = " ".join(seg.text.strip() for seg in segments)

        return cls(text=str(text), segments=segments, words=words)


@dataclass(frozen=True)
class Chunk:
    """A time-bounded, text-labeled unit of playback."""

    order_index: int
    start_ms: int
    end_ms: int
    display_text: str

    @property
    def duration_ms(self) -> int:
        return self.end_ms - self.start_ms

    def to_dict(self) -> dict[str, Any]:
        return {
            "order_index": self.order_index,
            "start_ms": self.start_ms,
            "end_ms": self.end_ms,
            "display_text": self.display_text,
        }


@dataclass(frozen=True)
class ChunkSettings:
    """User-facing chunking configuration.

    Changing either value requires a rechunk of stored ASR output.
    """

    sentence_only: bool = True
    """Split on sentence punctuation only; False also splits on commas."""

    min_chunk_ms: int = 1200
    """Chunks shorter than this are merged with their neighbours."""

    def __post_init__(self) -> None:
        if self.min_chunk_ms < 0:
            raise ValueError(f"min_chunk_ms must be >= 0, got {self.min_chunk_ms}")


DEFAULT_SETTINGS = ChunkSettings()


def to_ms(seconds: float) -> int:
    """Convert seconds to whole milliseconds, rounding to nearest."""
    return int(round(seconds * 1000))


def load_transcription(path: Path | str) -> TranscriptionResult:
    """Read a Whisper-compatible JSON file."""
    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise TranscriptFormatError(f"{path}: invalid JSON ({e})") from e
    return TranscriptionResult.from_dict(data)


def _objects(items: Any, where: str) -> list[dict[str, Any]]:
    if not isinstance(items, list):
        raise TranscriptFormatError(f"{where}: expected a list")
    for i, item in enumerate(items):
        if not isinstance(item, dict):
            raise TranscriptFormatError(f"{where}[{i}]: expected an object")
    return items


def _number(item: Any, key: str, where: str) -> float:
    if key not in item:
        raise TranscriptFormatError(f"{where}: missing '{key}'")
    value = item[key]
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TranscriptFormatError(f"{where}.{key}: expected a number, got {value!r}")
    return float(value)


def _word_text(item: dict[str, Any], where: str) -> str:
    # Whisper uses "word"; some providers use "text"
    value = item.get("word", item.get("text"))
    if value is None:
        raise TranscriptFormatError(f"{where}: missing 'word'")
    return str(value)
