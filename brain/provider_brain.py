"""Local brain: answers through the LLM provider abstraction."""

from typing import Dict, List, Optional

from loguru import logger

from contracts import AiConfig, ChatRole
from config import settings
from providers import LLMProvider, get_provider
from store import DataStore, StoreError
from .base import Brain, BrainError


SYSTEM_PROMPT = """Eres Nova, el asistente de gestión de proyectos del servidor.
Respondes en español, en Markdown, de forma breve y operativa.
No inventes datos: si no sabes algo, dilo.

Proyectos registrados:
{projects}
"""


class ProviderBrain(Brain):
    """Prompts an LLM with the session's recent chat history."""

    name = "provider"

    def __init__(
        self,
        store: DataStore,
        provider: Optional[LLMProvider] = None,
        history_turns: Optional[int] = None,
        max_tokens: Optional[int] = None,
    ):
        """Initialize the brain.

        Args:
            store: Source of chat history and the project list
            provider: Fixed provider; built per call from the user's config when omitted
            history_turns: How many earlier messages are sent as context
            max_tokens: Response budget
        """
        self.store = store
        self.provider = provider
        self.history_turns = history_turns if history_turns is not None else settings.brain_history_turns
        self.max_tokens = max_tokens or settings.llm_max_tokens

    def _provider_for(self, config: Optional[AiConfig], session_id: str, user_id: Optional[str]) -> LLMProvider:
        if self.provider is not None:
            return self.provider
        model = (config.model_name if config else None) or settings.llm_model
        api_key = config.api_key if config else None
        return get_provider(
            settings.llm_provider,
            model,
            api_key=api_key,
            metadata={"session_id": session_id, "user_id": user_id},
        )

    def _history(self, session_id: str, message: str) -> List[Dict[str, str]]:
        entries = self.store.read_chat_history(session_id)
        # The current message is already logged by the time the brain runs
        if entries and entries[-1].role == ChatRole.USER and entries[-1].content == message:
            entries = entries[:-1]
        if self.history_turns <= 0:
            return []
        return [
            {"role": e.role.value, "content": e.content}
            for e in entries[-self.history_turns:]
        ]

    def invoke(
        self,
        message: str,
        session_id: str,
        user_id: Optional[str],
        config: Optional[AiConfig] = None,
    ) -> str:
        try:
            history = self._history(session_id, message)
            projects = self.store.list_projects()
        except StoreError as e:
            raise BrainError(e.message) from e

        names = "\n".join(f"- {p.name} [{p.status}]" for p in projects) or "- (ninguno)"
        provider = self._provider_for(config, session_id, user_id)
        try:
            response = provider.complete(
                system_prompt=SYSTEM_PROMPT.format(projects=names),
                user_message=message,
                max_tokens=self.max_tokens,
                history=history,
            )
        except Exception as e:
            logger.warning("LLM call for session {} failed: {}", session_id, e)
            raise BrainError(str(e)) from e

        logger.debug(
            "LLM answered session {} ({} in / {} out tokens, ${:.4f})",
            session_id, response.input_tokens, response.output_tokens, response.cost,
        )
        text = response.content.strip()
        if not text:
            raise BrainError("el modelo no devolvió respuesta")
        return text
