"""
Training strategies producing a fitted vectorizer + classifier pair.

``InMemoryTrainer`` vectorizes the whole corpus and fits with two-pass
variance. ``StreamingTrainer`` keeps only running sums per language, which
bounds memory at the cost of a less stable variance estimate.
"""
from __future__ import annotations

import gc
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional, Sequence

import numpy as np
from tqdm import tqdm

from slanglid.features.text_vectorizer import TfidfVectorizer
from slanglid.models.naive_bayes import GaussianNaiveBayes

logger = logging.getLogger(__name__)


@dataclass
class TrainedModel:
    vectorizer: TfidfVectorizer
    classifier: GaussianNaiveBayes


def _chunks(items: Sequence[str], size: int) -> Iterator[Sequence[str]]:
    for start in range(0, len(items), size):
        yield items[start : start + size]


class Trainer(ABC):
    """Fit a vectorizer and a classifier on ``(texts, labels)``."""

    def __init__(
        self,
        min_n: int = 2,
        max_n: int = 4,
        max_features: int = 5000,
    ):
        self.min_n = min_n
        self.max_n = max_n
        self.max_features = max_features

    def _new_vectorizer(self) -> TfidfVectorizer:
        return TfidfVectorizer(
            min_n=self.min_n, max_n=self.max_n, max_features=self.max_features
        )

    @abstractmethod
    def train(self, texts: Sequence[str], labels: Sequence[str]) -> TrainedModel:
        ...


class InMemoryTrainer(Trainer):
    def train(self, texts: Sequence[str], labels: Sequence[str]) -> TrainedModel:
        if len(texts) != len(labels):
            raise ValueError("texts and labels must have the same length.")
        vectorizer = self._new_vectorizer()
        vectors = vectorizer.fit_transform(texts)
        classifier = GaussianNaiveBayes().fit(vectors, labels)
        return TrainedModel(vectorizer=vectorizer, classifier=classifier)


class StreamingTrainer(Trainer):
    """
    Accumulate per-class count, sum and sum of squares over bounded chunks.

    Languages are processed one after another; with ``reclaim_memory`` a
    garbage collection runs between them.
    """

    def __init__(
        self,
        min_n: int = 2,
        max_n: int = 4,
        max_features: int = 5000,
        batch_size: int = 1000,
        reclaim_memory: bool = True,
        show_progress: bool = False,
    ):
        super().__init__(min_n=min_n, max_n=max_n, max_features=max_features)
        if batch_size < 1:
            raise ValueError("batch_size must be positive.")
        self.batch_size = batch_size
        self.reclaim_memory = reclaim_memory
        self.show_progress = show_progress

    def train(self, texts: Sequence[str], labels: Sequence[str]) -> TrainedModel:
        if len(texts) != len(labels):
            raise ValueError("texts and labels must have the same length.")
        vectorizer = self._new_vectorizer().fit(texts)

        texts_by_label: Dict[str, List[str]] = {}
        for text, label in zip(texts, labels):
            texts_by_label.setdefault(label, []).append(text)

        classes: List[str] = sorted(texts_by_label)
        counts: List[int] = []
        sums: List[np.ndarray] = []
        squared_sums: List[np.ndarray] = []
        for label in classes:
            count, total, squared = self._accumulate(
                vectorizer, texts_by_label[label], label
            )
            counts.append(count)
            sums.append(total)
            squared_sums.append(squared)
            logger.info("Accumulated %d samples for %s", count, label)
            if self.reclaim_memory:
                gc.collect()

        classifier = GaussianNaiveBayes.from_moments(classes, counts, sums, squared_sums)
        return TrainedModel(vectorizer=vectorizer, classifier=classifier)

    def _accumulate(
        self,
        vectorizer: TfidfVectorizer,
        texts: Sequence[str],
        label: Optional[str] = None,
    ):
        total = np.zeros(vectorizer.vocabulary_size, dtype=float)
        squared = np.zeros(vectorizer.vocabulary_size, dtype=float)
        count = 0
        batches = _chunks(texts, self.batch_size)
        if self.show_progress:
            batches = tqdm(
                batches,
                total=-(-len(texts) // self.batch_size),
                desc=f"Vectorizing {label}",
                unit="batch",
            )
        for batch in batches:
            matrix = vectorizer.transform_many(batch)
            total += np.asarray(matrix.sum(axis=0)).ravel()
            squared += np.asarray(matrix.multiply(matrix).sum(axis=0)).ravel()
            count += matrix.shape[0]
        return count, total, squared


__all__ = ["Trainer", "InMemoryTrainer", "StreamingTrainer", "TrainedModel"]
