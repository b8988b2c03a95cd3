"""LiteLLM-backed chat provider.

Users pick a provider and a short model name in their assistant settings;
``to_litellm_model`` turns that pair into the model string LiteLLM routes on.
"""

from typing import Dict, List, Optional

from .base import ChatTurn, LLMProvider, LLMResponse


# Short model name -> LiteLLM model string, per provider. None is the default.
CHAT_MODELS: Dict[str, Dict[Optional[str], str]] = {
    "openai": {
        None: "gpt-4o-mini",
        "gpt-4o-mini": "gpt-4o-mini",
        "gpt-4o": "gpt-4o",
    },
    "anthropic": {
        None: "anthropic/claude-3-5-haiku-20241022",
        "claude-haiku": "anthropic/claude-3-5-haiku-20241022",
        "claude-sonnet": "anthropic/claude-sonnet-4-20250514",
    },
    "gemini": {
        None: "gemini/gemini-2.0-flash",
        "gemini-2.0-flash": "gemini/gemini-2.0-flash",
        "gemini-2.5-flash": "gemini/gemini-2.5-flash",
        "gemini-2.5-pro": "gemini/gemini-2.5-pro",
    },
    "deepseek": {
        None: "deepseek/deepseek-chat",
        "deepseek-chat": "deepseek/deepseek-chat",
    },
}

PROVIDER_SYNONYMS = {"claude": "anthropic", "gpt": "openai", "google": "gemini"}

FALLBACK_MODEL = CHAT_MODELS["openai"][None]


def normalize_provider(provider_name: str) -> str:
    key = provider_name.strip().lower()
    return PROVIDER_SYNONYMS.get(key, key)


def _lookup(models: Dict[Optional[str], str], model: str) -> Optional[str]:
    # Longest short name first so gpt-4o-mini is not read as gpt-4o
    wanted = model.lower()
    for short in sorted((m for m in models if m), key=len, reverse=True):
        if wanted == short or wanted.startswith((short + "-", short + ".")):
            return models[short]
    return None


def to_litellm_model(provider_name: Optional[str], model: Optional[str]) -> str:
    """LiteLLM model string for a provider/model pair; either may be missing."""
    if provider_name and normalize_provider(provider_name) in CHAT_MODELS:
        key = normalize_provider(provider_name)
        models = CHAT_MODELS[key]
        if not model:
            return models[None]
        found = _lookup(models, model)
        if found:
            return found
        # OpenAI model ids need no prefix; others are namespaced
        if key == "openai" or "/" in model:
            return model
        return f"{key}/{model}"

    if model:
        for models in CHAT_MODELS.values():
            found = _lookup(models, model)
            if found:
                return found
        return model
    return FALLBACK_MODEL


class LiteLLMProvider(LLMProvider):
    """Delegates every chat to ``litellm.completion``."""

    def __init__(self, default_model: str, api_key: Optional[str] = None, metadata: Optional[dict] = None):
        """Initialize the provider.

        Args:
            default_model: LiteLLM model string
            api_key: The user's credential; LiteLLM falls back to env vars when omitted
            metadata: Tracing metadata sent with every call (session id, user id)
        """
        self._default_model = default_model
        self._api_key = api_key
        self._metadata = dict(metadata or {})

    @property
    def name(self) -> str:
        return "litellm"

    @property
    def default_model(self) -> str:
        return self._default_model

    def chat(self, messages: List[ChatTurn], model: Optional[str] = None, max_tokens: int = 1024) -> LLMResponse:
        import litellm

        request = {
            "model": model or self._default_model,
            "messages": messages,
            "max_tokens": max_tokens,
            "metadata": dict(self._metadata),
        }
        if self._api_key:
            request["api_key"] = self._api_key
        response = litellm.completion(**request)

        usage = getattr(response, "usage", None)
        hidden = getattr(response, "_hidden_params", None) or {}
        return LLMResponse(
            content=response.choices[0].message.content or "",
            model=getattr(response, "model", None) or request["model"],
            provider=self.name,
            input_tokens=getattr(usage, "prompt_tokens", 0) or 0,
            output_tokens=getattr(usage, "completion_tokens", 0) or 0,
            cost=float(hidden.get("response_cost", 0) or 0),
        )
