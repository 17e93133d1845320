"""Aligner contracts and registry.

This module provides:
- AlignOp / AlignResult types for token-to-word alignment
- WordAligner protocol for strategy implementations
- TwoPointerAligner (default), GreedyAligner, EditDistanceAligner
- A registry to resolve strategies by name or alias
"""

from .base import (
    AlignerInfo,
    AlignOp,
    AlignResult,
    WordAligner,
    matched_pairs,
)
from .edit_distance import EditDistanceAligner
from .greedy import GreedyAligner
from .registry import (
    ALIGNER_REGISTRY,
    DEFAULT_ALIGNER,
    create_aligner,
    list_aligners,
    resolve_aligner,
)
from .two_pointer import TwoPointerAligner, levenshtein

__all__ = [
    "ALIGNER_REGISTRY",
    "DEFAULT_ALIGNER",
    "AlignerInfo",
    "AlignOp",
    "AlignResult",
    "EditDistanceAligner",
    "GreedyAligner",
    "TwoPointerAligner",
    "WordAligner",
    "create_aligner",
    "levenshtein",
    "list_aligners",
    "matched_pairs",
    "resolve_aligner",
]
