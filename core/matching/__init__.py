"""
Matching Module for Face Verification

This package contains the embedding comparison used to re-verify an
authenticated user against their enrolled face embedding.

Components:
    - interfaces: Abstract matcher base class and result type
    - embedding_matcher: Euclidean distance matcher with a fixed threshold

Usage:
    from core.matching import EuclideanEmbeddingMatcher
    matcher = EuclideanEmbeddingMatcher({"threshold": 0.6})
    result = matcher.verify(stored_embedding, probe_embedding)
"""

from core.matching.interfaces import (
    EmbeddingMatcher,
    FaceVerification,
)
from core.matching.embedding_matcher import (
    DEFAULT_THRESHOLD,
    EuclideanEmbeddingMatcher,
)

__all__ = [
    # Data classes
    "FaceVerification",
    # Abstract interfaces
    "EmbeddingMatcher",
    # Implementations
    "EuclideanEmbeddingMatcher",
    "DEFAULT_THRESHOLD",
]
