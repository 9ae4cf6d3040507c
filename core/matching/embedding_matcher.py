"""
Embedding Matcher: Compare face embeddings via Euclidean distance.

Implementation of the EmbeddingMatcher interface defined in interfaces.py.

The stored and probe embeddings are compared with the plain L2 distance
sqrt(sum((a[i] - b[i])^2)). A probe is accepted when the distance is at most
the configured threshold (0.6 by default, the usual cut-off for 128-dim
dlib-style face descriptors).
"""

import logging
import math
from typing import Sequence

import numpy as np

from core.errors import EmptyEmbeddingError, ShapeMismatchError
from core.matching.interfaces import EmbeddingMatcher, FaceVerification

logger = logging.getLogger(__name__)

DEFAULT_THRESHOLD = 0.6


class EuclideanEmbeddingMatcher(EmbeddingMatcher):
    """
    Compare face embeddings by Euclidean distance against a fixed threshold.

    Args:
        config: Dictionary with optional keys:
            - threshold: Maximum accepted distance (default 0.6)
    """

    def __init__(self, config: dict = None):
        if config is None:
            config = {}
        self.threshold = float(config.get("threshold", DEFAULT_THRESHOLD))

    def distance(self, a: Sequence[float], b: Sequence[float]) -> float:
        """
        Compute the Euclidean distance between two embeddings.

        Raises:
            ShapeMismatchError: If len(a) != len(b).
        """
        vec_a = np.asarray(a, dtype=np.float64).ravel()
        vec_b = np.asarray(b, dtype=np.float64).ravel()

        if vec_a.shape[0] != vec_b.shape[0]:
            logger.warning(
                f"Embedding dimension mismatch: a={vec_a.shape[0]}, b={vec_b.shape[0]}"
            )
            raise ShapeMismatchError("Embedding length mismatch")

        # math.dist scales internally, so large finite inputs do not overflow
        return math.dist(vec_a.tolist(), vec_b.tolist())

    def verify(
        self, stored: Sequence[float], probe: Sequence[float]
    ) -> FaceVerification:
        """
        Verify a probe embedding against a stored one.

        Returns:
            FaceVerification(verified=distance <= threshold, distance, threshold)

        Raises:
            EmptyEmbeddingError: If either embedding is empty.
            ShapeMismatchError: If the embeddings differ in length.
        """
        if len(stored) == 0 or len(probe) == 0:
            raise EmptyEmbeddingError("Embedding must not be empty")

        distance = self.distance(stored, probe)

        return FaceVerification(
            verified=distance <= self.threshold,
            distance=distance,
            threshold=self.threshold,
        )
