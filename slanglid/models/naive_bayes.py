"""
Gaussian Naive Bayes over TF-IDF vectors.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Mapping, Sequence

import numpy as np
from scipy import sparse
from sklearn.base import BaseEstimator
from sklearn.utils.validation import check_is_fitted

logger = logging.getLogger(__name__)

# Floor for per-feature variance so zero-variance slots stay finite.
VARIANCE_FLOOR = 1e-9


@dataclass(frozen=True)
class Prediction:
    label: str
    confidence: float
    probabilities: Dict[str, float]


def _as_dense(X) -> np.ndarray:
    if sparse.issparse(X):
        return X.toarray()
    return np.asarray(X, dtype=float)


class GaussianNaiveBayes(BaseEstimator):
    """
    Per-class Gaussian likelihoods with a sparse scoring rule.

    Only slots with a positive value contribute to a class log-score; an
    absent n-gram is treated as carrying no evidence. This is not the
    textbook Gaussian NB sum and moves the decision boundary, so
    ``predict`` must keep it.
    """

    def __init__(self, var_floor: float = VARIANCE_FLOOR):
        self.var_floor = var_floor

    @property
    def is_fitted(self) -> bool:
        return hasattr(self, "classes_")

    @property
    def classes(self) -> List[str]:
        return [str(label) for label in getattr(self, "classes_", [])]

    def fit(self, X, y: Sequence[str]) -> "GaussianNaiveBayes":
        X = _as_dense(X)
        y = np.asarray(y)
        classes = np.unique(y)

        priors, means, variances = [], [], []
        for label in classes:
            rows = X[y == label]
            priors.append(rows.shape[0] / X.shape[0])
            means.append(rows.mean(axis=0))
            variances.append(np.maximum(rows.var(axis=0), self.var_floor))

        self.classes_ = classes
        self.class_prior_ = np.asarray(priors, dtype=float)
        self.theta_ = np.vstack(means)
        self.var_ = np.vstack(variances)
        logger.info(
            "Naive Bayes: trained on %d samples, %d classes", X.shape[0], len(classes)
        )
        return self

    @classmethod
    def from_moments(
        cls,
        classes: Sequence[str],
        counts: Sequence[int],
        sums: Sequence[np.ndarray],
        squared_sums: Sequence[np.ndarray],
        var_floor: float = VARIANCE_FLOOR,
    ) -> "GaussianNaiveBayes":
        """
        Build a fitted classifier from per-class running sums.

        ``variance = max(sum_sq / n - mean ** 2, var_floor)``; less stable
        than two-pass variance but needs one pass and bounded memory.
        """
        order = np.argsort(np.asarray(classes))
        counts_arr = np.asarray(counts, dtype=float)[order]
        sums_arr = np.vstack(sums)[order]
        squared_arr = np.vstack(squared_sums)[order]

        model = cls(var_floor=var_floor)
        model.classes_ = np.asarray(classes)[order]
        model.class_prior_ = counts_arr / counts_arr.sum()
        model.theta_ = sums_arr / counts_arr[:, None]
        model.var_ = np.maximum(
            squared_arr / counts_arr[:, None] - model.theta_**2, var_floor
        )
        logger.info(
            "Naive Bayes: built from moments of %d samples, %d classes",
            int(counts_arr.sum()),
            len(model.classes_),
        )
        return model

    def joint_log_likelihood(self, vector) -> np.ndarray:
        check_is_fitted(self, "classes_")
        vector = _as_dense(vector).ravel()
        present = vector > 0
        values = vector[present]
        means = self.theta_[:, present]
        variances = self.var_[:, present]
        log_likelihood = -0.5 * np.log(2 * np.pi * variances) - (values - means) ** 2 / (
            2 * variances
        )
        return np.log(self.class_prior_) + log_likelihood.sum(axis=1)

    def predict(self, vector) -> Prediction:
        scores = self.joint_log_likelihood(vector)
        # argmax keeps the first maximum, i.e. the lowest sorted label.
        best = int(np.argmax(scores))
        probs = np.exp(scores - scores.max())
        probs = probs / probs.sum()
        probabilities = {
            str(label): float(prob) for label, prob in zip(self.classes_, probs)
        }
        label = str(self.classes_[best])
        return Prediction(
            label=label,
            confidence=probabilities[label],
            probabilities=probabilities,
        )

    def predict_batch(self, vectors) -> List[Prediction]:
        if sparse.issparse(vectors):
            return [self.predict(vectors.getrow(i)) for i in range(vectors.shape[0])]
        return [self.predict(vector) for vector in vectors]

    def to_dict(self) -> dict:
        check_is_fitted(self, "classes_")
        labels = self.classes
        return {
            "classPriors": {
                label: float(prior) for label, prior in zip(labels, self.class_prior_)
            },
            "featureMeans": {
                label: self.theta_[i].tolist() for i, label in enumerate(labels)
            },
            "featureVariances": {
                label: self.var_[i].tolist() for i, label in enumerate(labels)
            },
        }

    @classmethod
    def from_dict(cls, data: Mapping) -> "GaussianNaiveBayes":
        labels = sorted(data["classPriors"])
        model = cls()
        model.classes_ = np.asarray(labels)
        model.class_prior_ = np.asarray(
            [data["classPriors"][label] for label in labels], dtype=float
        )
        model.theta_ = np.asarray(
            [data["featureMeans"][label] for label in labels], dtype=float
        )
        model.var_ = np.asarray(
            [data["featureVariances"][label] for label in labels], dtype=float
        )
        return model


__all__ = ["GaussianNaiveBayes", "Prediction", "VARIANCE_FLOOR"]
