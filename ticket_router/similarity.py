"""
Vector math used to compare ticket embeddings.

All functions accept plain sequences of floats and return plain Python
floats. Vectors must have equal length; a zero-magnitude vector has no
direction and cannot be compared by cosine similarity, and NaN or
infinite components are rejected rather than scored.
"""

import math
from typing import Sequence

import numpy as np


class VectorMathError(ValueError):
    """Base exception for invalid vector comparisons."""
    pass


class DimensionMismatchError(VectorMathError):
    """Raised when two vectors of unequal length are compared."""

    def __init__(self, left: int, right: int):
        self.left = left
        self.right = right
        super().__init__(f"Vectors must be of the same length (got {left} and {right})")


class DegenerateVectorError(VectorMathError):
    """Raised when a zero-magnitude vector is used in cosine similarity."""
    pass


class NonFiniteVectorError(VectorMathError):
    """Raised when a vector holds NaN or infinite components."""
    pass


def _as_array(vector: Sequence[float]) -> np.ndarray:
    return np.asarray(vector, dtype=np.float64)


def _check_dimensions(a: Sequence[float], b: Sequence[float]) -> None:
    if len(a) != len(b):
        raise DimensionMismatchError(len(a), len(b))


def dot(a: Sequence[float], b: Sequence[float]) -> float:
    """
    Sum of element-wise products.

    Raises:
        DimensionMismatchError: If the vectors differ in length.
    """
    _check_dimensions(a, b)
    return float(np.dot(_as_array(a), _as_array(b)))


def magnitude(a: Sequence[float]) -> float:
    """Euclidean norm of a vector."""
    return math.sqrt(dot(a, a))


def _normalized_direction(vector: Sequence[float]) -> np.ndarray:
    """Unit vector pointing the same way as ``vector``."""
    arr = _as_array(vector)
    if not np.isfinite(arr).all():
        raise NonFiniteVectorError("Cannot compute cosine similarity for a vector with NaN or infinite values")
    scale = float(np.max(np.abs(arr))) if arr.size else 0.0
    if scale == 0.0:
        raise DegenerateVectorError("Cannot compute cosine similarity for a zero-magnitude vector")
    scaled = arr / scale
    return scaled / np.linalg.norm(scaled)


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """
    Cosine of the angle between two vectors.

    Each vector is scaled by its largest absolute component before the norm
    is taken, so very large or very small components neither overflow nor
    underflow. Cosine similarity is unchanged by that scaling.

    Args:
        a: First vector.
        b: Second vector, same length as ``a``.

    Returns:
        Similarity in [-1, 1]; 1 means same direction.

    Raises:
        DimensionMismatchError: If the vectors differ in length.
        NonFiniteVectorError: If either vector contains NaN or infinity.
        DegenerateVectorError: If either vector has zero magnitude.
    """
    _check_dimensions(a, b)
    vec_a = _normalized_direction(a)
    vec_b = _normalized_direction(b)

    similarity = float(np.dot(vec_a, vec_b))
    if not math.isfinite(similarity):
        raise NonFiniteVectorError("Cosine similarity is not a finite number")
    # Rounding can push parallel vectors slightly past +/-1
    return max(-1.0, min(1.0, similarity))
