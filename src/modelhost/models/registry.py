"""Central registry for model variants."""

from __future__ import annotations

import importlib
from typing import Callable

from modelhost.errors import ModelNotFoundError
from modelhost.models.base import Model


_MODELS: dict[str, type[Model]] = {}


def register_model(name: str) -> Callable:
    """Decorator that registers a model class by name.

    Args:
        name: The identifier users pass to select this model.

    Returns:
        The original class, with ``model_name`` set.
    """

    def decorator(cls: type[Model]) -> type[Model]:
        cls.model_name = name
        _MODELS[name] = cls
        return cls

    return decorator


def list_models() -> list[str]:
    """Return the registered model names, sorted."""
    return sorted(_MODELS)


def get_model_cls(name: str) -> type[Model]:
    """Look up a model class.

    Registered names are tried first.  A ``package.module:ClassName``
    identifier is imported on demand.

    Args:
        name: The model identifier.

    Returns:
        The model class.

    Raises:
        ModelNotFoundError: If *name* does not resolve to a Model subclass.
    """
    if name in _MODELS:
        return _MODELS[name]

    if ":" in name:
        module_name, _, attr = name.partition(":")
        try:
            module = importlib.import_module(module_name)
        except ImportError as exc:
            raise ModelNotFoundError(name, list_models()) from exc
        cls = getattr(module, attr, None)
        if isinstance(cls, type) and issubclass(cls, Model):
            if not cls.model_name:
                cls.model_name = name
            return cls

    raise ModelNotFoundError(name, list_models())
