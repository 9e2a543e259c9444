"""TF-IDF weighting and scalar encoding for categorical catalog features."""
import math
from typing import Dict, Iterable, Mapping, Optional

import numpy as np

from localrecs_recommendation_service.exceptions import (
    InvalidArgumentError,
    VocabularyIndexError,
    require,
)


def compute_idf(total_documents: int, documents_with_feature: int) -> float:
    """
    Inverse document frequency: ln(total_documents / documents_with_feature).

    A feature present in every document scores 0; rare features score high.

    Args:
        total_documents: Catalog size (> 0)
        documents_with_feature: Items containing the feature (1..total_documents)

    Returns:
        IDF value
    """
    if total_documents < 1:
        raise InvalidArgumentError("Total documents must be at least 1", argument="total_documents")
    if documents_with_feature < 1:
        raise InvalidArgumentError(
            "Documents with feature must be at least 1", argument="documents_with_feature"
        )
    if documents_with_feature > total_documents:
        raise InvalidArgumentError(
            f"Documents with feature ({documents_with_feature}) cannot exceed "
            f"total documents ({total_documents})",
            argument="documents_with_feature",
        )

    return math.log(total_documents / documents_with_feature)


def compute_tf_idf(
    document_features: Iterable[str],
    idf_values: Mapping[str, float]
) -> Dict[str, float]:
    """
    Score a document's features with binary term frequency.

    Features missing from idf_values are out of vocabulary and ignored.

    Args:
        document_features: The item's feature values
        idf_values: Global IDF per feature

    Returns:
        Mapping of matched feature to its TF-IDF score
    """
    require(document_features, "document_features")
    require(idf_values, "idf_values")

    scores: Dict[str, float] = {}
    for feature in document_features:
        idf = idf_values.get(feature)
        if idf is not None:
            # Categorical values are unique per item, so TF is presence
            scores[feature] = 1.0 * idf
    return scores


def build_vector(
    tf_idf_scores: Mapping[str, float],
    vocabulary_index: Mapping[str, int],
    vector_size: int
) -> np.ndarray:
    """
    Scatter sparse scores into a dense zero-filled vector.

    Args:
        tf_idf_scores: Feature -> score
        vocabulary_index: Feature -> position in the vector
        vector_size: Length of the output vector

    Returns:
        Dense vector of length vector_size
    """
    require(tf_idf_scores, "tf_idf_scores")
    require(vocabulary_index, "vocabulary_index")
    if vector_size < 0:
        raise InvalidArgumentError("Vector size cannot be negative", argument="vector_size")

    vector = np.zeros(vector_size, dtype=np.float64)
    for feature, score in tf_idf_scores.items():
        index = vocabulary_index.get(feature)
        if index is None:
            continue
        if index < 0 or index >= vector_size:
            raise VocabularyIndexError(
                f"Vocabulary index for '{feature}' ({index}) is out of bounds "
                f"for vector size {vector_size}",
                argument="vocabulary_index",
            )
        vector[index] = score
    return vector


def normalize_scalar(value: float, min_value: float, max_value: float) -> float:
    """Linearly map value onto [0, 1], clamping outside [min_value, max_value]."""
    require(value, "value")
    if max_value <= min_value:
        raise InvalidArgumentError(
            f"Max ({max_value}) must be greater than min ({min_value})", argument="max_value"
        )

    if value <= min_value:
        return 0.0
    if value >= max_value:
        return 1.0
    return (value - min_value) / (max_value - min_value)


def one_hot_encode(
    value: Optional[str],
    vocabulary_index: Mapping[str, int],
    vocabulary_size: int
) -> np.ndarray:
    """
    One-hot vector for a categorical value.

    Unknown or missing values give an all-zero vector.
    """
    require(vocabulary_index, "vocabulary_index")
    if vocabulary_size < 1:
        raise InvalidArgumentError("Vocabulary size must be at least 1", argument="vocabulary_size")

    vector = np.zeros(vocabulary_size, dtype=np.float64)
    if value is not None:
        index = vocabulary_index.get(value)
        if index is not None and 0 <= index < vocabulary_size:
            vector[index] = 1.0
    return vector
