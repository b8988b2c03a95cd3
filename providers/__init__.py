"""Chat-completion providers for the assistant's local brain."""

from .base import ChatTurn, LLMProvider, LLMResponse
from .factory import get_provider

__all__ = [
    "ChatTurn",
    "LLMProvider",
    "LLMResponse",
    "get_provider",
]
