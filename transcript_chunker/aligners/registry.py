"""Registry of aligner strategies.

Provides the known aligners with their metadata. Used by the CLI for
listing and by the chunker for strategy selection.
"""

from .base import AlignerInfo, WordAligner
from .edit_distance import EditDistanceAligner
from .greedy import GreedyAligner
from .two_pointer import TwoPointerAligner

DEFAULT_ALIGNER = "two-pointer"

ALIGNER_REGISTRY: dict[str, AlignerInfo] = {
    # Default - bounded lookahead, fillers skipped, fuzzy fallback
    "two-pointer": AlignerInfo(
        name="two-pointer",
        factory=TwoPointerAligner,
        description="Two-pointer scan with filler skipping and fuzzy matching",
        aliases=["two-pointers", "tp"],
    ),
    # Exact matches within a short lookahead
    "greedy": AlignerInfo(
        name="greedy",
        factory=GreedyAligner,
        description="Greedy sequential exact matching, lookahead 5",
        aliases=["sequential"],
    ),
    # Optimal alignment, quadratic in window size
    "edit-distance": AlignerInfo(
        name="edit-distance",
        factory=EditDistanceAligner,
        description="Dynamic-programming alignment over the window",
        aliases=["dp", "levenshtein"],
    ),
}


def list_aligners() -> list[AlignerInfo]:
    """List all registered aligners."""
    return list(ALIGNER_REGISTRY.values())


def resolve_aligner(name: str) -> AlignerInfo:
    """Resolve an aligner name or alias to AlignerInfo.

    Raises:
        ValueError: If the name is not registered.
    """
    if name in ALIGNER_REGISTRY:
        return ALIGNER_REGISTRY[name]

    for info in ALIGNER_REGISTRY.values():
        if name in info.aliases:
            return info

    supported = sorted(ALIGNER_REGISTRY.keys())
    aliases = sorted(
        alias for info in ALIGNER_REGISTRY.values() for alias in info.aliases
    )

    raise ValueError(
        f"Unknown aligner: '{name}'. "
        f"Supported aligners: {supported}. "
        f"Aliases: {aliases}."
    )


def create_aligner(name: str = DEFAULT_ALIGNER) -> WordAligner:
    """Construct an aligner by name or alias with default settings."""
    return resolve_aligner(name).factory()
