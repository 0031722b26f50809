"""
Typed model file schema and its JSON / joblib persistence.
"""
from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

import joblib
from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from slanglid.models.errors import InvalidModelError
from slanglid.models.trainers import TrainedModel

JOBLIB_SUFFIXES = {".joblib", ".pkl"}


class VectorizerData(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    min_n: int = Field(..., alias="minN", ge=1)
    max_n: int = Field(..., alias="maxN", ge=1)
    max_features: int = Field(..., alias="maxFeatures", ge=1)
    vocabulary: Dict[str, int]
    idf: Dict[str, float]

    @model_validator(mode="after")
    def _check_consistency(self) -> "VectorizerData":
        if self.min_n > self.max_n:
            raise ValueError("minN must not exceed maxN")
        if sorted(self.vocabulary.values()) != list(range(len(self.vocabulary))):
            raise ValueError("vocabulary indices must form the range [0, size)")
        if self.idf.keys() != self.vocabulary.keys():
            raise ValueError("idf keys must match vocabulary keys")
        if any(weight <= 0 for weight in self.idf.values()):
            raise ValueError("idf weights must be positive")
        return self


class ClassifierData(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    class_priors: Dict[str, float] = Field(..., alias="classPriors", min_length=1)
    feature_means: Dict[str, List[float]] = Field(..., alias="featureMeans")
    feature_variances: Dict[str, List[float]] = Field(..., alias="featureVariances")

    @model_validator(mode="after")
    def _check_consistency(self) -> "ClassifierData":
        labels = set(self.class_priors)
        for name, section in (
            ("featureMeans", self.feature_means),
            ("featureVariances", self.feature_variances),
        ):
            if set(section) != labels:
                raise ValueError(f"{name} labels must match classPriors labels")
        if any(prior <= 0 for prior in self.class_priors.values()):
            raise ValueError("classPriors must be positive")
        if len({len(values) for values in self.feature_means.values()}) > 1:
            raise ValueError("featureMeans vectors must share one length")
        for label, variances in self.feature_variances.items():
            if len(variances) != len(self.feature_means[label]):
                raise ValueError(f"featureVariances[{label!r}] length differs from featureMeans")
            if any(value <= 0 for value in variances):
                raise ValueError(f"featureVariances[{label!r}] must be positive")
        return self

    @property
    def n_features(self) -> int:
        return len(next(iter(self.feature_means.values())))


class ModelData(BaseModel):
    """
    The persisted model: vectorizer and classifier sections plus optional
    training metadata.
    """

    model_config = ConfigDict(populate_by_name=True)

    vectorizer: VectorizerData
    classifier: ClassifierData
    config: Optional[Dict[str, Any]] = None
    metrics: Optional[Dict[str, Any]] = None
    trained_at: Optional[str] = Field(None, alias="trainedAt")
    training_samples: Optional[int] = Field(None, alias="trainingSamples")
    test_samples: Optional[int] = Field(None, alias="testSamples")

    @model_validator(mode="after")
    def _check_shapes(self) -> "ModelData":
        if self.classifier.n_features != len(self.vectorizer.vocabulary):
            raise ValueError(
                f"classifier has {self.classifier.n_features} features but the "
                f"vocabulary has {len(self.vectorizer.vocabulary)} entries"
            )
        return self

    @classmethod
    def from_payload(cls, payload: Any) -> "ModelData":
        if isinstance(payload, ModelData):
            return payload
        if not isinstance(payload, Mapping):
            raise InvalidModelError(
                f"Invalid model data: expected a mapping, got {type(payload).__name__}"
            )
        try:
            return cls.model_validate(dict(payload))
        except ValidationError as exc:
            raise InvalidModelError(f"Invalid model data: {_describe(exc)}") from exc

    @classmethod
    def from_trained(cls, trained: TrainedModel, **metadata: Any) -> "ModelData":
        metadata.setdefault("trained_at", datetime.now(timezone.utc).isoformat())
        return cls(
            vectorizer=VectorizerData.model_validate(trained.vectorizer.to_dict()),
            classifier=ClassifierData.model_validate(trained.classifier.to_dict()),
            **metadata,
        )

    def to_payload(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


def _describe(exc: ValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error["loc"]) or "model"
        if error["type"] == "missing":
            parts.append(f"missing field '{location}'")
        else:
            parts.append(f"{location}: {error['msg']}")
    return "; ".join(parts)


def save_model(model: ModelData, path: Path, indent: Optional[int] = 2) -> Path:
    """Write ``model`` as joblib for ``.joblib``/``.pkl`` paths, JSON otherwise."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    payload = model.to_payload()
    if path.suffix in JOBLIB_SUFFIXES:
        joblib.dump(payload, path)
    else:
        path.write_text(json.dumps(payload, indent=indent), encoding="utf-8")
    return path


def read_model_file(path: Path) -> Any:
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(
            f"Model not found at {path}. Train a model with "
            "`python -m slanglid.models.training_pipeline sample` first."
        )
    if path.suffix in JOBLIB_SUFFIXES:
        return joblib.load(path)
    with path.open("r", encoding="utf-8") as f:
        try:
            return json.load(f)
        except json.JSONDecodeError as exc:
            raise InvalidModelError(f"Invalid model data: {path} is not valid JSON ({exc})") from exc


__all__ = [
    "VectorizerData",
    "ClassifierData",
    "ModelData",
    "save_model",
    "read_model_file",
]
