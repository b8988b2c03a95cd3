"""AI brains used when a user's assistant runs in AI mode."""

from .base import Brain, BrainError, should_refresh
from .edge_function import EdgeFunctionBrain
from .provider_brain import ProviderBrain
from .factory import get_brain

__all__ = [
    "Brain",
    "BrainError",
    "should_refresh",
    "EdgeFunctionBrain",
    "ProviderBrain",
    "get_brain",
]
