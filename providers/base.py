"""Chat-completion provider interface used by the local brain."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, List, Optional

# One chat message: {"role": "system" | "user" | "assistant", "content": str}
ChatTurn = Dict[str, str]


@dataclass
class LLMResponse:
    """Text and usage of one completion."""
    content: str
    model: str
    provider: str
    input_tokens: int = 0
    output_tokens: int = 0
    cost: float = 0.0


class LLMProvider(ABC):
    """A backend that answers a list of chat turns."""

    @property
    @abstractmethod
    def name(self) -> str:
        pass

    @property
    @abstractmethod
    def default_model(self) -> str:
        pass

    @abstractmethod
    def chat(self, messages: List[ChatTurn], model: Optional[str] = None, max_tokens: int = 1024) -> LLMResponse:
        """Answer ``messages`` (system turn first, newest user turn last)."""
        pass

    def complete(
        self,
        system_prompt: str,
        user_message: str,
        model: Optional[str] = None,
        max_tokens: int = 1024,
        history: Optional[List[ChatTurn]] = None,
    ) -> LLMResponse:
        """Answer one user message in the context of earlier turns.

        Args:
            system_prompt: Instructions for the assistant
            user_message: The message to answer
            model: Model override (defaults to the provider's default)
            max_tokens: Response budget
            history: Earlier turns of the conversation, oldest first

        Returns:
            LLMResponse with the reply text and token usage
        """
        messages: List[ChatTurn] = [{"role": "system", "content": system_prompt}]
        messages.extend(history or [])
        messages.append({"role": "user", "content": user_message})
        return self.chat(messages, model=model, max_tokens=max_tokens)
