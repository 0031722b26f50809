"""
Per-language slang dictionaries and the lexical matcher built on them.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Dict, FrozenSet, Iterable, Mapping, Optional, Sequence

import yaml

from slanglid.config.settings import LANGUAGES, SLANG_DIR
from slanglid.features.normalizer import normalize_text

logger = logging.getLogger(__name__)

WORD_SCORE = 1
PHRASE_SCORE = 2


@dataclass(frozen=True)
class SlangMatch:
    """
    Lexical signal for one text.

    Attributes:
        language: code of the highest scoring language
        confidence: winning score divided by the total over all languages
        scores: raw score per language
    """

    language: str
    confidence: float
    scores: Dict[str, int]

    @property
    def score(self) -> int:
        return self.scores[self.language]


def load_slang_dictionaries(
    directory: Path = SLANG_DIR,
    languages: Optional[Sequence[str]] = None,
) -> Dict[str, FrozenSet[str]]:
    """
    Read ``<code>.yaml`` files holding a ``terms`` list for each language.

    Languages without a file are skipped.
    """
    dictionaries: Dict[str, FrozenSet[str]] = {}
    for code in languages or LANGUAGES:
        path = Path(directory) / f"{code}.yaml"
        if not path.exists():
            logger.warning("No slang dictionary for %s at %s", code, path)
            continue
        with path.open("r", encoding="utf-8") as f:
            payload = yaml.safe_load(f) or {}
        dictionaries[code] = frozenset(
            str(term).lower() for term in payload.get("terms", [])
        )
        logger.debug("Loaded %d slang terms for %s", len(dictionaries[code]), code)
    return dictionaries


class SlangMatcher:
    """Score text against closed per-language slang dictionaries."""

    def __init__(self, dictionaries: Mapping[str, Iterable[str]]):
        # Insertion order of ``dictionaries`` decides ties.
        self._dictionaries: Dict[str, FrozenSet[str]] = {
            code: frozenset(terms) for code, terms in dictionaries.items()
        }

    def scores(self, text: str) -> Dict[str, int]:
        lowered = text.lower()
        candidates = (lowered, normalize_text(text))
        words = lowered.split()
        result: Dict[str, int] = {}
        for code, terms in self._dictionaries.items():
            score = sum(WORD_SCORE for word in words if word in terms)
            score += sum(PHRASE_SCORE for candidate in candidates if candidate in terms)
            result[code] = score
        return result

    def match(self, text: str) -> Optional[SlangMatch]:
        """
        Return the winning language, or ``None`` when nothing matched.

        Each whitespace token found in a dictionary adds 1; the whole text,
        as typed and normalized, adds 2 per form when it is a dictionary entry.
        """
        scores = self.scores(text)
        total = sum(scores.values())
        if total == 0:
            return None
        winner = max(scores, key=scores.__getitem__)
        return SlangMatch(
            language=winner,
            confidence=scores[winner] / total,
            scores=scores,
        )


@lru_cache(maxsize=1)
def default_matcher() -> SlangMatcher:
    """Process-wide matcher over the bundled dictionaries."""
    return SlangMatcher(load_slang_dictionaries())


__all__ = [
    "SlangMatch",
    "SlangMatcher",
    "load_slang_dictionaries",
    "default_matcher",
]
