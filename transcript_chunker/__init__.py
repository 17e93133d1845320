"""Split ASR transcripts into audio-synchronized learning chunks."""

__version__ = "0.3.0"

from .chunker import Chunker, ChunkingReport, chunk_transcript
from .merger import merge
from .types import (
    DEFAULT_SETTINGS,
    Chunk,
    ChunkSettings,
    Segment,
    TranscriptFormatError,
    TranscriptionResult,
    Word,
    load_transcription,
)

__all__ = [
    "DEFAULT_SETTINGS",
    "Chunk",
    "ChunkSettings",
    "Chunker",
    "ChunkingReport",
    "Segment",
    "TranscriptFormatError",
    "TranscriptionResult",
    "Word",
    "chunk_transcript",
    "load_transcription",
    "merge",
]
