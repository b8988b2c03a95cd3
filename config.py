"""Configuration settings for the Nova PM assistant."""

from dotenv import load_dotenv

# Load .env into os.environ so provider fallbacks (e.g. OPENAI_API_KEY) work
load_dotenv()

from pydantic_settings import BaseSettings
from pydantic import Field
from typing import List, Optional


class Settings(BaseSettings):
    """Global settings for the assistant.

    Settings can be overridden via environment variables with NOVA_ prefix.
    Example: NOVA_STORE_BACKEND=supabase
    """

    # Store
    store_backend: str = Field(
        default="memory",
        description="Data store backend: memory or supabase"
    )
    supabase_url: str = Field(
        default="",
        description="Supabase project URL (env: NOVA_SUPABASE_URL)",
    )
    supabase_key: str = Field(
        default="",
        description="Supabase service or anon key (env: NOVA_SUPABASE_KEY)",
    )

    # AI brain
    brain_backend: str = Field(
        default="edge_function",
        description="Brain used in AI mode: edge_function or provider"
    )
    brain_function_name: str = Field(
        default="ai-brain",
        description="Name of the hosted edge function invoked in AI mode"
    )
    llm_provider: Optional[str] = Field(
        default=None,
        description="LLM provider for the local brain (anthropic, openai, gemini, deepseek)"
    )
    llm_model: Optional[str] = Field(
        default=None,
        description="Model name for the local brain"
    )
    llm_max_tokens: int = Field(
        default=1024,
        description="Maximum tokens per brain reply"
    )
    brain_history_turns: int = Field(
        default=10,
        ge=0,
        description="Chat history entries sent to the local brain as context"
    )
    refresh_keywords: List[str] = Field(
        default=[
            "exito", "éxito", "creada", "actualizada",
            "confirmado", "completada", "eliminada", "borrada",
        ],
        description="Keywords in an AI reply that signal cached data changed"
    )

    # Interpreter
    task_list_limit: int = Field(
        default=5,
        ge=1,
        description="Maximum pending tasks shown by the task listing command"
    )
    session_prefix: str = Field(
        default="web",
        description="Prefix for generated session ids"
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Minimum level for the stderr log sink"
    )
    log_file: Optional[str] = Field(
        default=None,
        description="Optional path for a rotating log file"
    )

    model_config = {
        "env_prefix": "NOVA_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",  # ignore extra env vars (e.g. OPENAI_API_KEY) not in schema
    }

    def supabase_configured(self) -> bool:
        """True when both the Supabase URL and key are set."""
        return bool(self.supabase_url and self.supabase_key)


# Create singleton instance
settings = Settings()
