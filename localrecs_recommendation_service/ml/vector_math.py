"""Dense vector primitives used for embeddings and profile scoring."""
from typing import Sequence

import numpy as np

from localrecs_recommendation_service.exceptions import VectorLengthError, require


def _as_vector(vector, name: str) -> np.ndarray:
    require(vector, name)
    return np.asarray(vector, dtype=np.float64)


def _check_pair(vector_a, vector_b, allow_empty: bool = False):
    a = _as_vector(vector_a, "vector_a")
    b = _as_vector(vector_b, "vector_b")

    if not allow_empty and a.size == 0:
        raise VectorLengthError("Vector cannot be empty", argument="vector_a")
    if a.shape != b.shape:
        raise VectorLengthError(
            f"Vectors must have the same length. A: {a.size}, B: {b.size}",
            argument="vector_b",
        )
    return a, b


def dot_product(vector_a: Sequence[float], vector_b: Sequence[float]) -> float:
    """
    Sum of elementwise products.

    Args:
        vector_a: First vector
        vector_b: Second vector of the same, non-zero length

    Returns:
        Dot product
    """
    a, b = _check_pair(vector_a, vector_b)
    return float(np.dot(a, b))


def magnitude(vector: Sequence[float]) -> float:
    """Euclidean norm; 0.0 for an all-zero vector."""
    return float(np.linalg.norm(_as_vector(vector, "vector")))


def normalize(vector: Sequence[float]) -> np.ndarray:
    """
    Scale a vector to unit length.

    Args:
        vector: Input vector (never modified)

    Returns:
        New unit-length vector, or a new all-zero vector if the input has no magnitude
    """
    v = _as_vector(vector, "vector")
    norm = np.linalg.norm(v)
    if norm == 0:
        return np.zeros(v.shape, dtype=np.float64)
    return v / norm


def cosine_similarity(vector_a: Sequence[float], vector_b: Sequence[float]) -> float:
    """
    Cosine of the angle between two vectors.

    Degenerate (zero-magnitude) vectors have no direction and score 0.0.

    Args:
        vector_a: First vector
        vector_b: Second vector of the same, non-zero length

    Returns:
        Similarity in [-1, 1]
    """
    a, b = _check_pair(vector_a, vector_b)

    magnitude_a = np.linalg.norm(a)
    magnitude_b = np.linalg.norm(b)
    if magnitude_a == 0 or magnitude_b == 0:
        return 0.0

    similarity = float(np.dot(a, b) / (magnitude_a * magnitude_b))
    # Rounding can push parallel vectors slightly past +/-1
    return max(-1.0, min(1.0, similarity))


def add(vector_a: Sequence[float], vector_b: Sequence[float]) -> np.ndarray:
    """Elementwise sum of two equal-length vectors."""
    a, b = _check_pair(vector_a, vector_b, allow_empty=True)
    return a + b


def scale(vector: Sequence[float], scalar: float) -> np.ndarray:
    """Multiply every element by scalar."""
    v = _as_vector(vector, "vector")
    require(scalar, "scalar")
    return v * float(scalar)


def weighted_sum(vectors: Sequence[Sequence[float]], weights: Sequence[float]) -> np.ndarray:
    """
    Compute sum(weights[i] * vectors[i]).

    Args:
        vectors: Non-empty list of equal-length vectors
        weights: One weight per vector

    Returns:
        New vector of the common length
    """
    require(vectors, "vectors")
    require(weights, "weights")

    if len(vectors) == 0:
        raise VectorLengthError("Vectors list cannot be empty", argument="vectors")
    if len(vectors) != len(weights):
        raise VectorLengthError(
            f"Number of vectors and weights must match. Vectors: {len(vectors)}, Weights: {len(weights)}",
            argument="weights",
        )

    first = _as_vector(vectors[0], "vectors[0]")
    result = np.zeros(first.shape, dtype=np.float64)

    for i, (vector, weight) in enumerate(zip(vectors, weights)):
        v = _as_vector(vector, f"vectors[{i}]")
        if v.shape != first.shape:
            raise VectorLengthError(
                f"All vectors must have the same length. Expected: {first.size}, Got: {v.size} at index {i}",
                argument="vectors",
            )
        result += v * float(require(weight, f"weights[{i}]"))

    return result
