"""
Global configuration for the chat-message language detector.
"""
from pathlib import Path
from typing import Dict, List

import yaml

PROJECT_ROOT = Path(__file__).resolve().parents[2]
DATA_DIR = PROJECT_ROOT / "data"
SAMPLE_DATA = DATA_DIR / "sample" / "sample_messages.csv"
EVAL_CASES = DATA_DIR / "sample" / "eval_cases.csv"
ARTIFACTS_DIR = PROJECT_ROOT / "artifacts"

CONFIG_DIR = Path(__file__).resolve().parent
SLANG_DIR = CONFIG_DIR / "slang"
LANGUAGE_CONFIG_PATH = CONFIG_DIR / "languages.yaml"
with LANGUAGE_CONFIG_PATH.open("r", encoding="utf-8") as f:
    _lang_payload = yaml.safe_load(f) or {}
_language_entries = _lang_payload.get("languages", [])

# Every language the slang matcher knows about, in tie-break order.
LANGUAGES: List[str] = [entry["code"] for entry in _language_entries]
# Languages the statistical model is trained on by default.
TARGET_LANGUAGES: List[str] = [
    entry["code"] for entry in _language_entries if entry.get("train", False)
]
LANGUAGE_METADATA: Dict[str, dict] = {
    entry["code"]: entry for entry in _language_entries
}
FALLBACK_LANGUAGE: str = _lang_payload.get("fallback", "en")

# Serialized model consumed by the detector.
DEFAULT_MODEL_PATH = ARTIFACTS_DIR / "language-model.json"


class DetectionConfig:
    """Thresholds used by the detection arbiter."""

    short_text_threshold = 15
    min_text_length = 3
    slang_min_confidence = 0.5
    ml_low_confidence = 0.6
    reliable_threshold = 0.7
    very_short_penalty = 0.5
    override_min_score = 2
    override_margin = 1


class TrainingConfig:
    """Hyperparameters used for vectorizer and classifier training."""

    min_n = 2
    max_n = 4
    max_features = 3000
    test_size = 0.2
    max_samples_per_language = 50_000
    min_text_length = 3
    batch_size = 1000
    random_state = 42
    top_k = 2
    streaming = False


__all__ = [
    "PROJECT_ROOT",
    "DATA_DIR",
    "SAMPLE_DATA",
    "EVAL_CASES",
    "ARTIFACTS_DIR",
    "CONFIG_DIR",
    "SLANG_DIR",
    "LANGUAGE_CONFIG_PATH",
    "LANGUAGES",
    "TARGET_LANGUAGES",
    "LANGUAGE_METADATA",
    "FALLBACK_LANGUAGE",
    "DEFAULT_MODEL_PATH",
    "DetectionConfig",
    "TrainingConfig",
]
