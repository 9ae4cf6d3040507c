"""
Matching Interfaces Module

This module defines the abstract interface for face embedding matching and
the result type every matcher returns.

A matcher answers two questions about a pair of embeddings:
1. distance - how far apart the two vectors are
2. verify   - whether that distance is close enough to accept the probe

Usage:
    from core.matching.interfaces import EmbeddingMatcher, FaceVerification

    class MyMatcher(EmbeddingMatcher):
        ...
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, asdict
from typing import Any, Dict, Sequence


@dataclass(frozen=True)
class FaceVerification:
    """
    Result of verifying a probe embedding against an enrolled one.

    Attributes:
        verified: True when distance <= threshold.
        distance: Distance between the stored and probe embeddings.
                  0.0 = identical vectors.
        threshold: Acceptance threshold the distance was compared against.
    """

    verified: bool
    distance: float
    threshold: float

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class EmbeddingMatcher(ABC):
    """
    Abstract base class for face embedding matching.

    Compares a stored (enrolled) embedding with a probe embedding captured at
    verification time and decides whether they belong to the same person.

    Implemented in: core/matching/embedding_matcher.py
    """

    threshold: float

    @abstractmethod
    def distance(self, a: Sequence[float], b: Sequence[float]) -> float:
        """
        Compute the distance between two embeddings.

        Args:
            a: First embedding, shape (D,).
            b: Second embedding, shape (D,).

        Returns:
            Non-negative distance.

        Raises:
            ShapeMismatchError: If the embeddings differ in length.
        """
        pass

    @abstractmethod
    def verify(
        self, stored: Sequence[float], probe: Sequence[float]
    ) -> FaceVerification:
        """
        Decide whether a probe embedding matches a stored embedding.

        Args:
            stored: Enrolled embedding, shape (D,).
            probe: Embedding from the verification capture, shape (D,).

        Returns:
            FaceVerification with the decision, distance and threshold.

        Raises:
            EmptyEmbeddingError: If either embedding is empty.
            ShapeMismatchError: If the embeddings differ in length.
        """
        pass
