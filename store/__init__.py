"""Data-access layer for projects, issues, documents and assistant state."""

from .base import DataStore, StoreError
from .memory_store import InMemoryStore
from .supabase_store import SupabaseStore
from .factory import get_store

__all__ = [
    "DataStore",
    "StoreError",
    "InMemoryStore",
    "SupabaseStore",
    "get_store",
]
