"""Factory for the configured brain."""

from typing import Optional

from config import settings
from store import DataStore
from .base import Brain
from .edge_function import EdgeFunctionBrain
from .provider_brain import ProviderBrain


BRAINS = ("edge_function", "provider")


def get_brain(backend: Optional[str] = None, store: Optional[DataStore] = None) -> Brain:
    """Get a brain instance.

    Args:
        backend: ``edge_function`` or ``provider`` (defaults to settings)
        store: Data store, required by the provider brain

    Returns:
        Brain instance
    """
    backend = (backend or settings.brain_backend).lower()
    if backend == "edge_function":
        return EdgeFunctionBrain()
    if backend == "provider":
        if store is None:
            raise ValueError("The provider brain needs a data store")
        return ProviderBrain(store)
    raise ValueError(f"Unknown brain backend: {backend}. Available: {list(BRAINS)}")
