"""Merge chunks that are too short to practice on their own."""

from dataclasses import replace

from .types import Chunk

DEFAULT_MIN_CHUNK_MS = 1200


def merge(chunks: list[Chunk], min_chunk_ms: int = DEFAULT_MIN_CHUNK_MS) -> list[Chunk]:
    """
    Merge short chunks forward until each group reaches ``min_chunk_ms``.

    A trailing group that never reaches the threshold is folded into the
    previous emitted chunk. The result is re-indexed from 0.

    Args:
        chunks: Chronologically ordered, non-overlapping chunks
        min_chunk_ms: Minimum duration of an emitted chunk

    Returns:
        Merged chunks with dense ``order_index``
    """
    if not chunks:
        return []

    result: list[Chunk] = []
    group: Chunk | None = None

    for chunk in chunks:
        group = chunk if group is None else merge_two(group, chunk)
        if group.duration_ms >= min_chunk_ms:
            result.append(group)
            group = None

    if group is not None:
        if result:
            result[-1] = merge_two(result[-1], group)
        else:
            result.append(group)

    return reindex(result)


def merge_two(a: Chunk, b: Chunk) -> Chunk:
    """Concatenate two adjacent chunks into one spanning both."""
    return Chunk(
        order_index=a.order_index,
        start_ms=a.start_ms,
        end_ms=b.end_ms,
        display_text=f"{a.display_text} {b.display_text}".strip(),
    )


def reindex(chunks: list[Chunk]) -> list[Chunk]:
    """Renumber ``order_index`` densely from 0."""
    return [replace(chunk, order_index=i) for i, chunk in enumerate(chunks)]
