"""
Character n-gram extraction shared by training and inference.
"""
from __future__ import annotations

from collections import Counter
from typing import Dict, Iterable, List


def extract_ngrams(text: str, min_n: int = 2, max_n: int = 4) -> List[str]:
    """
    Return every contiguous character n-gram of size ``min_n..max_n``.

    Sizes are emitted in ascending order, each scanned left to right;
    duplicates are kept.
    """
    lowered = text.lower()
    ngrams: List[str] = []
    for n in range(min_n, max_n + 1):
        for i in range(len(lowered) - n + 1):
            ngrams.append(lowered[i : i + n])
    return ngrams


def count_ngrams(ngrams: Iterable[str]) -> Counter:
    return Counter(ngrams)


def term_frequencies(text: str, min_n: int = 2, max_n: int = 4) -> Dict[str, float]:
    ngrams = extract_ngrams(text, min_n, max_n)
    total = len(ngrams) or 1
    return {ngram: count / total for ngram, count in count_ngrams(ngrams).items()}


__all__ = ["extract_ngrams", "count_ngrams", "term_frequencies"]
