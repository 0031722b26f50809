import numpy as np
import pytest

from slanglid.models.trainers import InMemoryTrainer, StreamingTrainer

TEXTS = [
    "hola como estas",
    "buenos dias amigo",
    "que tal te fue hoy",
    "nos vemos mañana",
    "hello how are you",
    "good morning friend",
    "how was your day",
    "see you tomorrow",
]
LABELS = ["es"] * 4 + ["en"] * 4


def test_in_memory_trainer_fits_both_components():
    trained = InMemoryTrainer(max_features=200).train(TEXTS, LABELS)
    assert trained.vectorizer.is_fitted
    assert trained.classifier.classes == ["en", "es"]
    assert trained.classifier.theta_.shape == (2, trained.vectorizer.vocabulary_size)


@pytest.mark.parametrize("batch_size", [1, 3, 1000])
def test_streaming_trainer_matches_in_memory(batch_size):
    in_memory = InMemoryTrainer(max_features=200).train(TEXTS, LABELS)
    streamed = StreamingTrainer(max_features=200, batch_size=batch_size).train(TEXTS, LABELS)

    assert streamed.vectorizer.vocabulary_ == in_memory.vectorizer.vocabulary_
    assert streamed.classifier.classes == in_memory.classifier.classes
    np.testing.assert_allclose(streamed.classifier.class_prior_, in_memory.classifier.class_prior_)
    np.testing.assert_allclose(streamed.classifier.theta_, in_memory.classifier.theta_)
    np.testing.assert_allclose(
        streamed.classifier.var_, in_memory.classifier.var_, rtol=1e-6, atol=1e-12
    )


def test_streaming_trainer_rejects_bad_batch_size():
    with pytest.raises(ValueError):
        StreamingTrainer(batch_size=0)


def test_trainers_reject_mismatched_inputs():
    with pytest.raises(ValueError):
        InMemoryTrainer().train(TEXTS, LABELS[:-1])
    with pytest.raises(ValueError):
        StreamingTrainer().train(TEXTS, LABELS[:-1])
