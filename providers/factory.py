"""Builds the chat provider for a user's assistant settings."""

from typing import Optional

from .base import LLMProvider
from .litellm_provider import CHAT_MODELS, LiteLLMProvider, normalize_provider, to_litellm_model


def get_provider(
    provider_name: Optional[str] = None,
    model: Optional[str] = None,
    api_key: Optional[str] = None,
    metadata: Optional[dict] = None,
) -> LLMProvider:
    """Get a chat provider.

    Args:
        provider_name: anthropic, openai, gemini or deepseek (synonyms accepted)
        model: Short or full model name; resolved without a provider when omitted
        api_key: The user's credential
        metadata: Tracing metadata sent with every call

    Raises:
        ValueError: If the provider is not known
    """
    if provider_name and normalize_provider(provider_name) not in CHAT_MODELS:
        raise ValueError(
            f"Unknown provider: {provider_name}. Available: {list(CHAT_MODELS.keys())}"
        )
    return LiteLLMProvider(
        default_model=to_litellm_model(provider_name, model),
        api_key=api_key,
        metadata=metadata,
    )
