import threading

import pytest

from slanglid.config.settings import FALLBACK_LANGUAGE
from slanglid.features.slang import SlangMatcher
from slanglid.features.text_vectorizer import TfidfVectorizer
from slanglid.models.errors import InvalidModelError, ModelNotLoadedError
from slanglid.models.inference import (
    DetectionResult,
    DetectionSource,
    DetectorRegistry,
    LanguageDetector,
)
from slanglid.models.model_io import ModelData, save_model
from slanglid.models.naive_bayes import GaussianNaiveBayes, Prediction
from slanglid.models.trainers import InMemoryTrainer

TEXTS = ["hola como estas", "buenos dias", "hello how are you", "good morning"]
LABELS = ["es", "es", "en", "en"]


def _model_payload():
    trained = InMemoryTrainer(max_features=500).train(TEXTS, LABELS)
    return ModelData.from_trained(trained, config={"languages": ["es", "en"]}).to_payload()


def _detector(**kwargs):
    return LanguageDetector(**kwargs).load_model(_model_payload())


def _force_prediction(monkeypatch, label, confidence):
    other = "es" if label == "en" else "en"
    prediction = Prediction(
        label=label,
        confidence=confidence,
        probabilities={label: confidence, other: 1 - confidence},
    )
    monkeypatch.setattr(GaussianNaiveBayes, "predict", lambda self, vector: prediction)
    return prediction


def _slang_detector():
    matcher = SlangMatcher(
        {
            "es": {"wey", "neta", "chido", "ok"},
            "en": {"hello", "ok"},
            "fr": {"ok"},
        }
    )
    return _detector(slang_matcher=matcher)


def test_load_model_reports_languages():
    detector = LanguageDetector()
    assert not detector.is_loaded
    assert detector.supported_languages == []

    detector.load_model(_model_payload())
    assert detector.is_loaded
    assert detector.supported_languages == ["en", "es"]


@pytest.mark.parametrize("payload", [{}, None, {"vectorizer": {}}])
def test_invalid_model_data(payload):
    with pytest.raises(InvalidModelError, match="Invalid model data"):
        LanguageDetector().load_model(payload)


def test_failed_load_keeps_previous_model():
    detector = _detector()
    with pytest.raises(InvalidModelError):
        detector.load_model({})
    assert detector.supported_languages == ["en", "es"]


def test_detect_requires_model():
    with pytest.raises(ModelNotLoadedError):
        LanguageDetector().detect("hello")


@pytest.mark.parametrize("text", ["", None, "   ", "   \t\n  ", 42])
def test_empty_or_non_text_input(text):
    result = _detector().detect(text)
    assert result == DetectionResult(
        language=FALLBACK_LANGUAGE, confidence=0.0, is_reliable=False
    )


def test_short_slang_text_skips_vectorizer(monkeypatch):
    def fail(self, text):
        raise AssertionError("vectorizer should not run")

    monkeypatch.setattr(TfidfVectorizer, "transform", fail)
    result = _detector().detect("hi")
    assert result.language == "en"
    assert result.source == DetectionSource.SLANG
    assert result.confidence == 1.0
    assert result.is_reliable
    assert result.probabilities is None


def test_short_phrases_resolved_by_slang():
    detector = _detector()
    assert detector.detect("hola amigo").language == "es"
    assert detector.detect("hello friend").language == "en"
    assert detector.detect("mdr ptdr").language == "fr"
    assert detector.detect("cmq tvb").language == "it"
    assert detector.detect("blz vlw tmj").language == "pt"
    assert detector.detect("che boludo").language == "es"


@pytest.mark.parametrize(
    "text, language",
    [("ciao", "it"), ("ur", "en"), ("sheesh", "en"), ("mega", "it"), ("ne", "pt")],
)
def test_token_in_one_dictionary_is_reliable_slang(text, language):
    result = _detector().detect(text)
    assert result.language == language
    assert result.confidence == 1.0
    assert result.is_reliable
    assert result.source == DetectionSource.SLANG


def test_unknown_very_short_text_has_no_confidence():
    result = _detector().detect("xy")
    assert result.confidence == 0
    assert not result.is_reliable
    assert result.source is None


def test_emoji_only_text_falls_back():
    result = _detector().detect("\U0001F600\U0001F600\U0001F600")
    assert result.language == FALLBACK_LANGUAGE
    assert result.confidence == 0


def test_very_short_text_halves_slang_confidence():
    # "ok" is in three dictionaries, so the short-text branch rejects it
    # (1/3 < 0.5) and the lexical-only fallback halves it.
    result = _slang_detector().detect("ok")
    assert result.language == "es"
    assert result.source == DetectionSource.SLANG
    assert result.confidence == pytest.approx(1 / 6)
    assert not result.is_reliable


def test_statistical_path_detects_longer_text():
    detector = _detector()
    spanish = detector.detect("hola como estas amigo")
    english = detector.detect("hello how are you friend")
    assert spanish.language == "es"
    assert english.language == "en"
    for result in (spanish, english):
        assert result.source == DetectionSource.ML
        assert set(result.probabilities) == {"en", "es"}
        assert sum(result.probabilities.values()) == pytest.approx(1.0)


def test_slang_override(monkeypatch):
    prediction = _force_prediction(monkeypatch, "en", 0.9)
    result = _slang_detector().detect("wey neta chido de verdad")
    assert result.language == "es"
    assert result.source == DetectionSource.SLANG_OVERRIDE
    assert result.confidence == 1.0
    assert result.is_reliable
    assert result.probabilities == prediction.probabilities


def test_weak_slang_does_not_override(monkeypatch):
    _force_prediction(monkeypatch, "en", 0.9)
    result = _slang_detector().detect("wey something in english")
    assert result.language == "en"
    assert result.source == DetectionSource.ML
    assert result.confidence == 0.9


def test_override_needs_margin_over_predicted_language(monkeypatch):
    _force_prediction(monkeypatch, "en", 0.9)
    result = _slang_detector().detect("wey neta hello there friend")
    assert result.language == "en"
    assert result.source == DetectionSource.ML


def test_low_confidence_blends_with_slang(monkeypatch):
    _force_prediction(monkeypatch, "en", 0.55)
    result = _slang_detector().detect("wey something in english")
    assert result.language == "es"
    assert result.source == DetectionSource.COMBINED
    assert result.confidence == pytest.approx((0.55 + 1.0) / 2)
    assert result.is_reliable


def test_blend_requires_slang_above_threshold(monkeypatch):
    _force_prediction(monkeypatch, "en", 0.55)
    # es and en tie at one token each: 0.5 is not above the threshold.
    result = _slang_detector().detect("wey hello something else")
    assert result.language == "en"
    assert result.source == DetectionSource.ML
    assert not result.is_reliable


@pytest.mark.parametrize(
    "text",
    [
        "hi",
        "xy",
        "!!!",
        "hola como estas amigo",
        "check this out https://example.com please",
        "hola amigo \U0001F600\U0001F44D",
        "Call me at +1-555-123-4567",
    ],
)
def test_reliability_tracks_confidence(text):
    result = _detector().detect(text)
    assert 0.0 <= result.confidence <= 1.0
    assert result.is_reliable == (result.confidence > 0.7)


def test_detect_batch_is_element_wise():
    detector = _detector()
    texts = ["hola", "hello how are you friend", "", "buenos dias amigos mios"]
    assert detector.detect_batch(texts) == [detector.detect(text) for text in texts]


def test_result_to_dict():
    result = _detector().detect("hi")
    assert result.to_dict() == {
        "language": "en",
        "confidence": 1.0,
        "is_reliable": True,
        "source": "slang",
    }


def test_registry_loads_once_until_reset(tmp_path):
    path = save_model(ModelData.from_payload(_model_payload()), tmp_path / "model.json")
    registry = DetectorRegistry(path)

    results = []
    threads = [threading.Thread(target=lambda: results.append(registry.get())) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()
    first = results[0]
    assert all(detector is first for detector in results)

    registry.reset()
    second = registry.get()
    assert second is not first
    assert first.detect("hola amigo").language == "es"
    assert second.supported_languages == ["en", "es"]


def test_registry_missing_model_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        DetectorRegistry(tmp_path / "missing.json").get()
