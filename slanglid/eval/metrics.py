"""
Evaluation helpers for the classifier and the full detector.
"""
from __future__ import annotations

from collections import Counter
from typing import Iterable, List, Sequence

import numpy as np
from sklearn.metrics import accuracy_score, classification_report, confusion_matrix

from slanglid.models.naive_bayes import Prediction


def classification_summary(y_true, y_pred) -> dict:
    payload = classification_report(
        y_true, y_pred, output_dict=True, zero_division=0
    )
    payload["accuracy"] = accuracy_score(y_true, y_pred)
    return payload


def top_k_accuracy(
    predictions: Sequence[Prediction],
    labels: Sequence[str],
    k: int = 2,
) -> float:
    hits = 0
    for prediction, true in zip(predictions, labels):
        ranked = sorted(
            prediction.probabilities, key=prediction.probabilities.get, reverse=True
        )
        hits += true in ranked[:k]
    total = len(labels)
    return hits / total if total else 0.0


def compute_confusion(y_true, y_pred, labels) -> np.ndarray:
    return confusion_matrix(y_true, y_pred, labels=labels)


def evaluate_classifier(vectorizer, classifier, texts: Iterable[str], labels, k: int = 2):
    """
    Score a fitted vectorizer/classifier pair on held-out texts.

    Returns the metrics payload and the raw predicted labels.
    """
    texts = list(texts)
    labels = list(labels)
    predictions = classifier.predict_batch(vectorizer.transform_many(texts))
    y_pred = [prediction.label for prediction in predictions]
    metrics = {
        "summary": classification_summary(labels, y_pred),
        "top_k": {"k": k, "accuracy": top_k_accuracy(predictions, labels, k=k)},
    }
    return metrics, y_pred


def evaluate_detector(detector, texts: Iterable[str], labels: Sequence[str]) -> dict:
    """
    Run the detector end to end and collect accuracy, branch usage and misses.
    """
    texts = list(texts)
    results = detector.detect_batch(texts)
    y_pred = [result.language for result in results]
    errors: List[dict] = [
        {
            "text": text,
            "expected": expected,
            "predicted": result.language,
            "confidence": result.confidence,
            "source": result.source.value if result.source else None,
        }
        for text, expected, result in zip(texts, labels, results)
        if result.language != expected
    ]
    sources = Counter(
        result.source.value if result.source else "default" for result in results
    )
    return {
        "accuracy": accuracy_score(labels, y_pred) if texts else 0.0,
        "total": len(texts),
        "correct": len(texts) - len(errors),
        "reliable": sum(result.is_reliable for result in results),
        "sources": dict(sources),
        "errors": errors,
    }


__all__ = [
    "classification_summary",
    "top_k_accuracy",
    "compute_confusion",
    "evaluate_classifier",
    "evaluate_detector",
]
