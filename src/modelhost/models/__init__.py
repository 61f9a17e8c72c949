"""Model contract, registry and built-in model variants."""

from modelhost.models.base import Bound, Model
from modelhost.models.registry import get_model_cls, list_models, register_model

# Register built-in models on import
import modelhost.models.model2  # noqa: F401, E402

__all__ = [
    "Bound",
    "Model",
    "get_model_cls",
    "list_models",
    "register_model",
]
