"""Recompute chunks from stored ASR output when chunk settings change.

Stored transcriptions are reused as-is; only the chunking is redone.
Recordings are keyed by chunk index, so they become invalid once the
chunk list changes and must be deleted (after the user confirms).
"""

import logging
from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable

from .aligners import DEFAULT_ALIGNER, create_aligner
from .chunker import Chunker
from .types import Chunk, ChunkSettings, TranscriptionResult

logger = logging.getLogger(__name__)


@runtime_checkable
class ChunkStore(Protocol):
    """Persistence for transcriptions, chunks and chunk settings."""

    def get_transcription(self, source_id: str) -> TranscriptionResult | None: ...

    def get_chunks(self, source_id: str) -> list[Chunk]: ...

    def save_chunks(self, source_id: str, chunks: list[Chunk]) -> None: ...

    def get_chunk_settings(self, source_id: str) -> ChunkSettings | None: ...

    def save_chunk_settings(self, source_id: str, settings: ChunkSettings) -> None: ...


@runtime_checkable
class RecordingStore(Protocol):
    """User recordings keyed by (source_id, order_index)."""

    def has_recording(self, source_id: str, order_index: int) -> bool: ...

    def delete_all_recordings(self, source_id: str) -> None: ...


@dataclass(frozen=True)
class RechunkSuccess:
    chunks: list[Chunk]


@dataclass(frozen=True)
class RecordingsExist:
    """Rechunking would delete recordings; ask the user first."""

    recording_count: int


@dataclass(frozen=True)
class RechunkError:
    message: str


RechunkResult = RechunkSuccess | RecordingsExist | RechunkError


def count_recordings(source_id: str, store: ChunkStore, recordings: RecordingStore) -> int:
    """Number of chunks of ``source_id`` that have a recording."""
    return sum(
        1
        for chunk in store.get_chunks(source_id)
        if recordings.has_recording(source_id, chunk.order_index)
    )


def rechunk(
    source_id: str,
    new_settings: ChunkSettings,
    store: ChunkStore,
    recordings: RecordingStore,
    *,
    delete_recordings: bool = False,
    aligner: str = DEFAULT_ALIGNER,
) -> RechunkResult:
    """
    Re-run chunking for one source with new settings.

    Args:
        source_id: Content identifier
        new_settings: Settings to chunk with
        store: Transcription/chunk persistence
        recordings: Recording persistence
        delete_recordings: True once the user confirmed losing recordings
        aligner: Aligner name or alias

    Returns:
        RechunkSuccess with the current chunks, RecordingsExist when
        confirmation is needed, or RechunkError if no transcription is stored
    """
    if store.get_chunk_settings(source_id) == new_settings:
        return RechunkSuccess(store.get_chunks(source_id))

    recording_count = count_recordings(source_id, store, recordings)
    if recording_count and not delete_recordings:
        return RecordingsExist(recording_count=recording_count)

    transcription = store.get_transcription(source_id)
    if transcription is None:
        return RechunkError(f"No stored transcription for '{source_id}'")

    if recording_count:
        logger.info("Deleting %d recordings of %s before rechunk", recording_count, source_id)
        recordings.delete_all_recordings(source_id)

    chunks = Chunker(new_settings, create_aligner(aligner)).process(transcription)
    store.save_chunks(source_id, chunks)
    store.save_chunk_settings(source_id, new_settings)
    logger.info("Rechunked %s into %d chunks", source_id, len(chunks))
    return RechunkSuccess(chunks)


@dataclass
class InMemoryChunkStore:
    """Dict-backed ChunkStore and RecordingStore, for tests and scripting."""

    transcriptions: dict[str, TranscriptionResult] = field(default_factory=dict)
    chunks: dict[str, list[Chunk]] = field(default_factory=dict)
    settings: dict[str, ChunkSettings] = field(default_factory=dict)
    recordings: dict[str, set[int]] = field(default_factory=dict)

    def get_transcription(self, source_id: str) -> TranscriptionResult | None:
        return self.transcriptions.get(source_id)

    def get_chunks(self, source_id: str) -> list[Chunk]:
        return list(self.chunks.get(source_id, []))

    def save_chunks(self, source_id: str, chunks: list[Chunk]) -> None:
        self.chunks[source_id] = list(chunks)

    def get_chunk_settings(self, source_id: str) -> ChunkSettings | None:
        return self.settings.get(source_id)

    def save_chunk_settings(self, source_id: str, settings: ChunkSettings) -> None:
        self.settings[source_id] = settings

    def has_recording(self, source_id: str, order_index: int) -> bool:
        return order_index in self.recordings.get(source_id, set())

    def delete_all_recordings(self, source_id: str) -> None:
        self.recordings.pop(source_id, None)
