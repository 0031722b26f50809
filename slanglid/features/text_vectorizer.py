"""
Character n-gram TF-IDF vectorizer with a bounded, document-frequency ranked vocabulary.
"""
from __future__ import annotations

import logging
import math
from typing import Dict, Iterable, List, Mapping

import numpy as np
from scipy import sparse
from sklearn.base import BaseEstimator
from sklearn.utils.validation import check_is_fitted

from slanglid.features.ngrams import count_ngrams, extract_ngrams

logger = logging.getLogger(__name__)


class TfidfVectorizer(BaseEstimator):
    """
    Turn text into a fixed-length vector of n-gram TF-IDF weights.

    ``fit`` keeps the ``max_features`` n-grams with the highest document
    frequency (ties keep first-seen order) and assigns each its rank as
    slot index. ``transform`` weights relative term frequency by the
    smoothed IDF ``ln((N + 1) / (df + 1)) + 1``; n-grams outside the
    vocabulary are ignored.
    """

    def __init__(self, min_n: int = 2, max_n: int = 4, max_features: int = 5000):
        self.min_n = min_n
        self.max_n = max_n
        self.max_features = max_features

    @property
    def is_fitted(self) -> bool:
        return hasattr(self, "vocabulary_")

    @property
    def vocabulary_size(self) -> int:
        return len(getattr(self, "vocabulary_", {}))

    def fit(self, texts: Iterable[str], y=None) -> "TfidfVectorizer":
        texts = list(texts)
        document_frequency: Dict[str, int] = {}
        for text in texts:
            for ngram in dict.fromkeys(extract_ngrams(text, self.min_n, self.max_n)):
                document_frequency[ngram] = document_frequency.get(ngram, 0) + 1

        # sorted() is stable, so equal frequencies stay in first-seen order.
        ranked = sorted(document_frequency.items(), key=lambda item: -item[1])
        ranked = ranked[: self.max_features]

        n_docs = len(texts)
        self.vocabulary_: Dict[str, int] = {
            ngram: index for index, (ngram, _) in enumerate(ranked)
        }
        self.idf_ = np.array(
            [math.log((n_docs + 1) / (df + 1)) + 1 for _, df in ranked],
            dtype=float,
        )
        logger.info("TF-IDF vectorizer: vocabulary size = %d", self.vocabulary_size)
        return self

    def _weights(self, text: str) -> Dict[int, float]:
        ngrams = extract_ngrams(text, self.min_n, self.max_n)
        total = len(ngrams) or 1
        weights: Dict[int, float] = {}
        for ngram, count in count_ngrams(ngrams).items():
            index = self.vocabulary_.get(ngram)
            if index is not None:
                weights[index] = count / total * self.idf_[index]
        return weights

    def transform(self, text: str) -> np.ndarray:
        check_is_fitted(self, "vocabulary_")
        vector = np.zeros(self.vocabulary_size, dtype=float)
        for index, weight in self._weights(text).items():
            vector[index] = weight
        return vector

    def transform_many(self, texts: Iterable[str]) -> sparse.csr_matrix:
        check_is_fitted(self, "vocabulary_")
        rows: List[int] = []
        cols: List[int] = []
        data: List[float] = []
        n_rows = 0
        for row, text in enumerate(texts):
            n_rows = row + 1
            for index, weight in self._weights(text).items():
                rows.append(row)
                cols.append(index)
                data.append(weight)
        return sparse.csr_matrix(
            (data, (rows, cols)), shape=(n_rows, self.vocabulary_size), dtype=float
        )

    def fit_transform(self, texts: Iterable[str], y=None) -> sparse.csr_matrix:
        texts = list(texts)
        return self.fit(texts).transform_many(texts)

    def to_dict(self) -> dict:
        check_is_fitted(self, "vocabulary_")
        return {
            "minN": self.min_n,
            "maxN": self.max_n,
            "maxFeatures": self.max_features,
            "vocabulary": dict(self.vocabulary_),
            "idf": {
                ngram: float(self.idf_[index])
                for ngram, index in self.vocabulary_.items()
            },
        }

    @classmethod
    def from_dict(cls, data: Mapping) -> "TfidfVectorizer":
        vectorizer = cls(
            min_n=data["minN"], max_n=data["maxN"], max_features=data["maxFeatures"]
        )
        vocabulary = {ngram: int(index) for ngram, index in data["vocabulary"].items()}
        idf = np.zeros(len(vocabulary), dtype=float)
        for ngram, index in vocabulary.items():
            idf[index] = data["idf"][ngram]
        vectorizer.vocabulary_ = vocabulary
        vectorizer.idf_ = idf
        return vectorizer


__all__ = ["TfidfVectorizer"]
