"""Transcript file discovery."""

from pathlib import Path

SUPPORTED_EXTENSIONS = frozenset({".json"})

# Our own output; never picked up as input
_OUTPUT_MARKER = ".chunks"


def is_transcript_file(path: Path) -> bool:
    """Check if a file looks like an ASR JSON result."""
    return path.suffix.lower() in SUPPORTED_EXTENSIONS and not path.stem.endswith(_OUTPUT_MARKER)


def discover_transcript_files(paths: list[Path], recursive: bool = False) -> list[Path]:
    """ASR result files named directly or found in directories, sorted and deduplicated."""
    candidates = (
        found
        for path in paths
        for found in (
            [path] if path.is_file() else (path.rglob("*") if recursive else path.glob("*"))
        )
    )
    return sorted({p for p in candidates if p.is_file() and is_transcript_file(p)})
