"""Factory for creating data stores."""

from typing import Dict, Optional, Type

from .base import DataStore
from .memory_store import InMemoryStore
from .supabase_store import SupabaseStore
from config import settings


# Registry of available backends
STORES: Dict[str, Type[DataStore]] = {
    "memory": InMemoryStore,
    "supabase": SupabaseStore,
}


def get_store(backend: Optional[str] = None) -> DataStore:
    """Get a data store instance.

    Args:
        backend: Store backend name (memory, supabase). Defaults to
            NOVA_STORE_BACKEND.

    Returns:
        DataStore instance
    """
    key = (backend or settings.store_backend).lower()
    if key not in STORES:
        raise ValueError(
            f"Unknown store backend: {backend}. "
            f"Available: {list(STORES.keys())}"
        )
    return STORES[key]()
