"""
Language detection for short informal text.

``LanguageDetector`` arbitrates between a lexical slang signal and the
statistical TF-IDF + Gaussian Naive Bayes prediction.
"""
from __future__ import annotations

import logging
import threading
from dataclasses import asdict, dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Iterable, List, NamedTuple, Optional

from slanglid.config.settings import (
    DEFAULT_MODEL_PATH,
    FALLBACK_LANGUAGE,
    DetectionConfig,
)
from slanglid.features.normalizer import normalize_text
from slanglid.features.slang import SlangMatch, SlangMatcher, default_matcher
from slanglid.features.text_vectorizer import TfidfVectorizer
from slanglid.models.errors import ModelNotLoadedError
from slanglid.models.model_io import ModelData, read_model_file
from slanglid.models.naive_bayes import GaussianNaiveBayes, Prediction

logger = logging.getLogger(__name__)


class DetectionSource(str, Enum):
    ML = "ml"
    SLANG = "slang"
    SLANG_OVERRIDE = "slang-override"
    COMBINED = "combined"


@dataclass(frozen=True)
class DetectionResult:
    """
    Outcome of one detection call.

    Attributes:
        language: detected language code
        confidence: score between 0.0 and 1.0
        is_reliable: confidence is above the reliability threshold
        probabilities: classifier distribution when the statistical path ran
        source: which branch produced the answer
    """

    language: str
    confidence: float
    is_reliable: bool
    probabilities: Optional[Dict[str, float]] = None
    source: Optional[DetectionSource] = None

    def to_dict(self) -> dict:
        payload = asdict(self)
        if self.source is not None:
            payload["source"] = self.source.value
        return {key: value for key, value in payload.items() if value is not None}


class _LoadedModel(NamedTuple):
    vectorizer: TfidfVectorizer
    classifier: GaussianNaiveBayes
    config: Dict[str, Any]


class LanguageDetector:
    """Detect the language of chat-style text with a loaded model."""

    def __init__(
        self,
        config: Optional[DetectionConfig] = None,
        slang_matcher: Optional[SlangMatcher] = None,
        fallback_language: Optional[str] = None,
    ) -> None:
        self.config = config or DetectionConfig()
        self.slang_matcher = slang_matcher or default_matcher()
        self.fallback_language = fallback_language or FALLBACK_LANGUAGE
        self._model: Optional[_LoadedModel] = None

    @property
    def is_loaded(self) -> bool:
        return self._model is not None

    @property
    def supported_languages(self) -> List[str]:
        if self._model is None:
            return []
        return self._model.classifier.classes

    def load_model(self, data: Any) -> "LanguageDetector":
        """
        Validate ``data`` and install it; raises ``InvalidModelError`` when a
        section is missing or inconsistent.
        """
        model = ModelData.from_payload(data)
        vectorizer = TfidfVectorizer.from_dict(model.vectorizer.model_dump(by_alias=True))
        classifier = GaussianNaiveBayes.from_dict(model.classifier.model_dump(by_alias=True))
        # Published in one assignment so readers never see a partial model.
        self._model = _LoadedModel(vectorizer, classifier, model.config or {})
        logger.info(
            "Language detector loaded: %s", ", ".join(self.supported_languages)
        )
        return self

    def load_from_file(self, path: Path) -> "LanguageDetector":
        return self.load_model(read_model_file(path))

    def _result(
        self,
        language: str,
        confidence: float,
        source: Optional[DetectionSource] = None,
        probabilities: Optional[Dict[str, float]] = None,
    ) -> DetectionResult:
        return DetectionResult(
            language=language,
            confidence=confidence,
            is_reliable=confidence > self.config.reliable_threshold,
            probabilities=probabilities,
            source=source,
        )

    def _empty_result(self) -> DetectionResult:
        return DetectionResult(
            language=self.fallback_language, confidence=0.0, is_reliable=False
        )

    def detect(self, text: Any) -> DetectionResult:
        model = self._model
        if model is None:
            raise ModelNotLoadedError("Model must be loaded before detection.")

        if not isinstance(text, str) or not text.strip():
            return self._empty_result()

        trimmed = text.strip()
        normalized = normalize_text(text)

        # Below ~15 characters n-gram statistics are unreliable; try slang first.
        if len(trimmed) <= self.config.short_text_threshold:
            match = self.slang_matcher.match(trimmed)
            if match is not None and match.confidence >= self.config.slang_min_confidence:
                logger.debug("Short text resolved by slang: %r -> %s", trimmed, match.language)
                return self._result(match.language, match.confidence, DetectionSource.SLANG)

        if len(normalized) < self.config.min_text_length:
            return self._detect_very_short(trimmed)

        return self._detect_with_model(model, trimmed, normalized)

    def detect_batch(self, texts: Iterable[Any]) -> List[DetectionResult]:
        return [self.detect(text) for text in texts]

    def _detect_very_short(self, trimmed: str) -> DetectionResult:
        match = self.slang_matcher.match(trimmed)
        if match is None:
            return self._empty_result()
        return DetectionResult(
            language=match.language,
            confidence=match.confidence * self.config.very_short_penalty,
            is_reliable=False,
            source=DetectionSource.SLANG,
        )

    def _should_override(self, match: SlangMatch, prediction: Prediction) -> bool:
        if match.language == prediction.label:
            return False
        opposing = match.scores.get(prediction.label, 0)
        return (
            match.score >= self.config.override_min_score
            and match.score > opposing + self.config.override_margin
        )

    def _detect_with_model(
        self, model: _LoadedModel, trimmed: str, normalized: str
    ) -> DetectionResult:
        vector = model.vectorizer.transform(normalized)
        prediction = model.classifier.predict(vector)
        match = self.slang_matcher.match(trimmed)

        if match is not None and self._should_override(match, prediction):
            logger.debug(
                "Slang override: %s -> %s for %r", prediction.label, match.language, trimmed
            )
            return self._result(
                match.language,
                match.confidence,
                DetectionSource.SLANG_OVERRIDE,
                prediction.probabilities,
            )

        if (
            prediction.confidence < self.config.ml_low_confidence
            and match is not None
            and match.confidence > self.config.slang_min_confidence
        ):
            return self._result(
                match.language,
                (prediction.confidence + match.confidence) / 2,
                DetectionSource.COMBINED,
                prediction.probabilities,
            )

        return self._result(
            prediction.label,
            prediction.confidence,
            DetectionSource.ML,
            prediction.probabilities,
        )


class DetectorRegistry:
    """
    Lazily loads one shared ``LanguageDetector`` from ``model_path``.

    ``get`` loads at most once until ``reset``. A loaded detector is never
    mutated, so callers still holding the previous instance after a reset
    keep working against a complete model.
    """

    def __init__(
        self,
        model_path: Optional[Path] = None,
        config: Optional[DetectionConfig] = None,
        slang_matcher: Optional[SlangMatcher] = None,
    ) -> None:
        self.model_path = Path(model_path or DEFAULT_MODEL_PATH)
        self._config = config
        self._slang = slang_matcher
        self._lock = threading.Lock()
        self._detector: Optional[LanguageDetector] = None

    def get(self) -> LanguageDetector:
        detector = self._detector
        if detector is not None:
            return detector
        with self._lock:
            if self._detector is None:
                self._detector = LanguageDetector(
                    config=self._config, slang_matcher=self._slang
                ).load_from_file(self.model_path)
            return self._detector

    def reset(self) -> None:
        with self._lock:
            self._detector = None

    shutdown = reset


__all__ = [
    "DetectionSource",
    "DetectionResult",
    "LanguageDetector",
    "DetectorRegistry",
]
