"""Output formatters for chunk lists."""

import json
from datetime import datetime, timezone

from .types import Chunk, ChunkSettings

# Schema version for JSON output (for future compatibility)
JSON_SCHEMA_VERSION = "1.0"


def _format_timestamp_srt(ms: int) -> str:
    """Format milliseconds as SRT timestamp: HH:MM:SS,mmm (comma for milliseconds)."""
    hours, rest = divmod(ms, 3_600_000)
    minutes, rest = divmod(rest, 60_000)
    secs, millis = divmod(rest, 1000)
    return f"{hours:02d}:{minutes:02d}:{secs:02d},{millis:03d}"


def _format_timestamp_vtt(ms: int) -> str:
    """Format milliseconds as VTT timestamp: HH:MM:SS.mmm (dot for milliseconds)."""
    return _format_timestamp_srt(ms).replace(",", ".")


def _format_timestamp_simple(ms: int) -> str:
    """Format milliseconds as simple timestamp: MM:SS or HH:MM:SS for longer audio."""
    hours, rest = divmod(ms // 1000, 3600)
    minutes, secs = divmod(rest, 60)
    if hours > 0:
        return f"{hours:02d}:{minutes:02d}:{secs:02d}"
    return f"{minutes:02d}:{secs:02d}"


def format_txt(chunks: list[Chunk], timestamps: bool = False) -> str:
    """
    Format chunks as plain text, one chunk per line.

    Args:
        chunks: Chunk list
        timestamps: If True, prefix each line with the chunk start time

    Returns:
        Plain text transcript
    """
    lines = []
    for chunk in chunks:
        if timestamps:
            lines.append(f"[{_format_timestamp_simple(chunk.start_ms)}] {chunk.display_text}")
        else:
            lines.append(chunk.display_text)
    return "\n".join(lines)


def format_srt(chunks: list[Chunk]) -> str:
    """
    Format chunks as SRT (SubRip) subtitle format.

    Returns:
        SRT formatted string
    """
    lines = []
    for chunk in chunks:
        lines.append(str(chunk.order_index + 1))
        lines.append(
            f"{_format_timestamp_srt(chunk.start_ms)} --> {_format_timestamp_srt(chunk.end_ms)}"
        )
        lines.append(chunk.display_text)
        lines.append("")  # Blank line between cues
    return "\n".join(lines)


def format_vtt(chunks: list[Chunk]) -> str:
    """
    Format chunks as WebVTT subtitle format.

    Returns:
        VTT formatted string
    """
    lines = ["WEBVTT", ""]  # Header and blank line
    for chunk in chunks:
        lines.append(
            f"{_format_timestamp_vtt(chunk.start_ms)} --> {_format_timestamp_vtt(chunk.end_ms)}"
        )
        lines.append(chunk.display_text)
        lines.append("")  # Blank line between cues
    return "\n".join(lines)


def format_json(
    chunks: list[Chunk],
    settings: ChunkSettings | None = None,
    source: str | None = None,
) -> str:
    """
    Format chunks as structured JSON.

    Returns:
        JSON formatted string with chunk records and run metadata
    """
    data = {
        "schema_version": JSON_SCHEMA_VERSION,
        "generated_at": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
        "source": source,
        "settings": (
            {
                "sentence_only": settings.sentence_only,
                "min_chunk_ms": settings.min_chunk_ms,
            }
            if settings is not None
            else None
        ),
        "chunks": [chunk.to_dict() for chunk in chunks],
    }
    return json.dumps(data, indent=2, ensure_ascii=False)


def chunks_from_json(content: str) -> list[Chunk]:
    """Read chunks back from ``format_json`` output."""
    data = json.loads(content)
    return [
        Chunk(
            order_index=int(item["order_index"]),
            start_ms=int(item["start_ms"]),
            end_ms=int(item["end_ms"]),
            display_text=str(item["display_text"]),
        )
        for item in data["chunks"]
    ]


# Mapping of format names to formatter functions
FORMATTERS = {
    "txt": format_txt,
    "srt": format_srt,
    "vtt": format_vtt,
    "json": format_json,
}

# File extensions for each format
EXTENSIONS = {
    "txt": ".chunks.txt",
    "srt": ".chunks.srt",
    "vtt": ".chunks.vtt",
    "json": ".chunks.json",
}
