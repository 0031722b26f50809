"""
Exceptions raised by the detector, its model loader and its estimators.
"""
from sklearn.exceptions import NotFittedError


class InvalidModelError(ValueError):
    """Serialized model data is missing a section or is internally inconsistent."""


class ModelNotLoadedError(RuntimeError):
    """Detection was requested before a model was loaded."""


__all__ = ["InvalidModelError", "ModelNotLoadedError", "NotFittedError"]
