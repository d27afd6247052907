"""ModelCatalog module."""

from .catalog import (
    IModelCatalog,
    MalformedCatalog,
    ModelCatalog,
    infer_provider,
    normalize_entry,
    normalize_models,
)
from .fallback_models import FALLBACK_MODELS

__all__ = [
    "IModelCatalog",
    "ModelCatalog",
    "MalformedCatalog",
    "FALLBACK_MODELS",
    "infer_provider",
    "normalize_entry",
    "normalize_models",
]
